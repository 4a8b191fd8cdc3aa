"""
Domain exceptions - Semantic error types for registration and voting.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Error kinds:
- Validation: malformed input, reported per field
- Conflict: uniqueness violation on email, external ID, or vote
- Ineligibility: voter not verified or election not active
- ExternalDependencyFailure: store, wallet provider, or notification failure
- WalletDeclined: the user refused the wallet connection
"""

from .ports import RejectionReason


class UniVoteError(Exception):
    """Base class for all domain errors."""

    pass


class ValidationFailed(UniVoteError):
    """One or more registration fields are malformed."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(", ".join(sorted(errors)))
        self.errors = dict(errors)


class IdentityConflict(UniVoteError):
    """Email and/or external ID already belongs to another identity."""

    def __init__(self, fields: frozenset[str] | set[str]) -> None:
        self.fields = frozenset(fields)
        super().__init__(", ".join(sorted(self.fields)))


class ConstraintViolation(UniVoteError):
    """A store-level unique constraint rejected a write."""

    def __init__(self, fields: frozenset[str] | set[str]) -> None:
        self.fields = frozenset(fields)
        super().__init__(", ".join(sorted(self.fields)))


class VerificationFailed(UniVoteError):
    """Submitted verification code does not match the issued one."""

    pass


class RegistrationFailed(UniVoteError):
    """Account creation failed; the cause is deliberately not exposed."""

    pass


class InvalidTransition(UniVoteError):
    """Operation is not allowed in the session's current stage."""

    pass


class AuthenticationFailed(UniVoteError):
    """Email/password pair does not match a verified identity."""

    pass


class ElectionNotFound(UniVoteError):
    """Election ID does not exist."""

    pass


class WalletDeclined(UniVoteError):
    """User declined or cancelled the wallet connection."""

    pass


class VoteRejected(UniVoteError):
    """Vote was not recorded; reason says why."""

    def __init__(self, reason: RejectionReason) -> None:
        super().__init__(reason.value)
        self.reason = reason


class ExternalDependencyFailure(UniVoteError):
    """An external collaborator failed; the caller may retry."""

    pass


class StoreUnavailable(ExternalDependencyFailure):
    """Persistent store unreachable or the operation failed in transit."""

    pass


class WalletUnavailable(ExternalDependencyFailure):
    """Wallet provider could not be reached."""

    pass


class NotificationFailed(ExternalDependencyFailure):
    """Notification sender could not deliver a message."""

    pass
