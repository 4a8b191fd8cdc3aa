"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for UniVote: the identity
verification workflow and the vote-casting transaction. It defines its own
port interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .elections import ElectionCatalog, resolve_status
from .exceptions import (
    AuthenticationFailed,
    ConstraintViolation,
    ElectionNotFound,
    ExternalDependencyFailure,
    IdentityConflict,
    InvalidTransition,
    NotificationFailed,
    RegistrationFailed,
    StoreUnavailable,
    UniVoteError,
    ValidationFailed,
    VerificationFailed,
    VoteRejected,
    WalletDeclined,
    WalletUnavailable,
)
from .identity import IdentityGateway
from .notifications import NotificationDispatcher
from .otp import OTPVerifier
from .ports import (
    AccountRepository,
    CheckResult,
    ElectionRepository,
    ElectionStatus,
    IdentityRepository,
    NotificationSender,
    RegistrationStage,
    RejectionReason,
    SessionStore,
    VoteRepository,
    WalletProvider,
)
from .registration import RegistrationWorkflow
from .results import ResultsAggregator
from .voting import VoteCaster, derive_vote_hash
from .wallet import WalletBinder

__all__ = [
    "AccountRepository",
    "AuthenticationFailed",
    "CheckResult",
    "ConstraintViolation",
    "ElectionCatalog",
    "ElectionNotFound",
    "ElectionRepository",
    "ElectionStatus",
    "ExternalDependencyFailure",
    "IdentityConflict",
    "IdentityGateway",
    "IdentityRepository",
    "InvalidTransition",
    "NotificationDispatcher",
    "NotificationFailed",
    "NotificationSender",
    "OTPVerifier",
    "RegistrationFailed",
    "RegistrationStage",
    "RegistrationWorkflow",
    "RejectionReason",
    "ResultsAggregator",
    "SessionStore",
    "StoreUnavailable",
    "UniVoteError",
    "ValidationFailed",
    "VerificationFailed",
    "VoteCaster",
    "VoteRejected",
    "VoteRepository",
    "WalletBinder",
    "WalletDeclined",
    "WalletProvider",
    "WalletUnavailable",
    "derive_vote_hash",
    "resolve_status",
]
