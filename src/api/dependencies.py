"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

Storage comes from app state: an InMemoryStore under app.state.store
(storage_backend="memory"), otherwise a psycopg ConnectionPool under
app.state.pool.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import (
    PostgresAccountRepository,
    PostgresElectionRepository,
    PostgresIdentityRepository,
    PostgresVoteRepository,
)
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.wallet.client import ClientWalletProvider
from src.config.settings import get_settings
from src.domain.elections import ElectionCatalog
from src.domain.exceptions import AuthenticationFailed
from src.domain.identity import IdentityGateway
from src.domain.models import Identity
from src.domain.notifications import NotificationDispatcher
from src.domain.otp import OTPVerifier
from src.domain.ports import (
    AccountRepository,
    ElectionRepository,
    IdentityRepository,
    NotificationSender,
    SessionStore,
    VoteRepository,
)
from src.domain.registration import RegistrationWorkflow
from src.domain.results import ResultsAggregator
from src.domain.voting import VoteCaster
from src.domain.wallet import WalletBinder

# Module-level singleton - ConsoleEmailSender is stateless
_console_sender = ConsoleEmailSender()


@dataclass(frozen=True)
class Repositories:
    identities: IdentityRepository
    accounts: AccountRepository
    elections: ElectionRepository
    votes: VoteRepository


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repositories(request: Request) -> Repositories:
    """Create repositories over the configured store."""
    store = getattr(request.app.state, "store", None)
    if store is not None:
        return Repositories(identities=store, accounts=store, elections=store, votes=store)

    pool = get_pool(request)
    return Repositories(
        identities=PostgresIdentityRepository(pool),
        accounts=PostgresAccountRepository(pool),
        elections=PostgresElectionRepository(pool),
        votes=PostgresVoteRepository(pool),
    )


def get_email_sender(request: Request) -> NotificationSender:
    """Get the configured sender, falling back to the console sender."""
    return getattr(request.app.state, "email_sender", None) or _console_sender


def get_notifier(request: Request) -> NotificationDispatcher:
    executor = getattr(request.app.state, "notification_executor", None)
    return NotificationDispatcher(sender=get_email_sender(request), executor=executor)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_wallet_provider(
    x_wallet_address: str | None = Header(default=None),
) -> ClientWalletProvider:
    """Wallet address approved in the browser, sent as X-Wallet-Address."""
    return ClientWalletProvider(x_wallet_address)


def get_identity_gateway(request: Request) -> IdentityGateway:
    repositories = get_repositories(request)
    return IdentityGateway(
        identities=repositories.identities,
        accounts=repositories.accounts,
        bcrypt_cost=get_settings().bcrypt_cost,
    )


def get_registration_workflow(
    request: Request,
    wallet_provider: ClientWalletProvider = Depends(get_wallet_provider),
) -> RegistrationWorkflow:
    """
    Create registration workflow with injected dependencies.

    Wires together the code verifier, identity gateway, wallet binder and
    notification dispatcher for the domain service.
    """
    settings = get_settings()
    repositories = get_repositories(request)
    notifier = get_notifier(request)
    return RegistrationWorkflow(
        otp=OTPVerifier(notifier=notifier, code_length=settings.otp_length),
        gateway=get_identity_gateway(request),
        wallet_binder=WalletBinder(provider=wallet_provider, identities=repositories.identities),
        notifier=notifier,
        password_min_length=settings.password_min_length,
    )


def get_vote_caster(
    request: Request,
    wallet_provider: ClientWalletProvider = Depends(get_wallet_provider),
) -> VoteCaster:
    repositories = get_repositories(request)
    return VoteCaster(
        identities=repositories.identities,
        elections=repositories.elections,
        votes=repositories.votes,
        wallet_binder=WalletBinder(provider=wallet_provider, identities=repositories.identities),
        notifier=get_notifier(request),
    )


def get_election_catalog(request: Request) -> ElectionCatalog:
    return ElectionCatalog(elections=get_repositories(request).elections)


def get_results_aggregator(request: Request) -> ResultsAggregator:
    repositories = get_repositories(request)
    return ResultsAggregator(elections=repositories.elections, votes=repositories.votes)


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_basic_auth_credentials(
    credentials: HTTPBasicCredentials = Depends(http_basic),
) -> tuple[str, str]:
    """
    Extract and normalize credentials from HTTP BASIC AUTH header.

    FastAPI's HTTPBasic automatically:
    - Returns 401 for missing Authorization header
    - Returns 401 for malformed base64 encoding
    - Parses base64(email:password) format

    Returns:
        Tuple of (normalized_email, password)
    """
    email = credentials.username.strip().lower()
    password = credentials.password
    return email, password


def get_current_voter(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> Identity:
    """Resolve the authenticated voter; identical 401 for every failure."""
    email, password = credentials
    try:
        return gateway.authenticate(email, password)
    except AuthenticationFailed:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        ) from None
