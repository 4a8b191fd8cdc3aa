"""
Application-level exception handlers.

Routes map user-correctable domain errors to specific responses. Anything
that escapes them is an external dependency failure as far as the user is
concerned: a generic, retryable 503.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.domain.exceptions import ExternalDependencyFailure

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Service temporarily unavailable. Please try again."


async def external_dependency_handler(request: Request, exc: ExternalDependencyFailure) -> JSONResponse:
    logger.warning("External dependency failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": RETRY_MESSAGE},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": RETRY_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ExternalDependencyFailure, external_dependency_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
