"""
API v1 package.

Contains versioned API routes for the UniVote registration and voting API.
"""

from src.api.v1.routes import router

__all__ = ["router"]
