"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import (
        Candidate,
        Election,
        Identity,
        RegistrationSession,
        UniquenessCheck,
        Vote,
    )


class RegistrationStage(str, Enum):
    """
    Registration workflow stages.

    Forward transitions:
    - COLLECTING_INFO -> AWAITING_CODE (valid, unique form and code issued)
    - AWAITING_CODE -> AWAITING_WALLET (code matches)
    - AWAITING_WALLET -> COMPLETE (wallet bound and identity persisted)

    Any non-terminal stage except COLLECTING_INFO may step back one stage.
    COMPLETE is terminal.
    """

    COLLECTING_INFO = "COLLECTING_INFO"
    AWAITING_CODE = "AWAITING_CODE"
    AWAITING_WALLET = "AWAITING_WALLET"
    COMPLETE = "COMPLETE"


class CheckResult(Enum):
    """Result of comparing a submitted verification code."""

    VALID = "valid"
    MISMATCH = "mismatch"


class ElectionStatus(str, Enum):
    """Temporal status of an election."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    CLOSED = "closed"


class RejectionReason(str, Enum):
    """Why a vote was not recorded."""

    NOT_VERIFIED = "not_verified"
    ELECTION_NOT_ACTIVE = "election_not_active"
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    ALREADY_VOTED = "already_voted"
    WALLET_DECLINED = "wallet_declined"


class IdentityRepository(Protocol):
    """Port interface for verified identity persistence."""

    def find_conflicts(self, email: str, external_id: str) -> UniquenessCheck:
        """
        Report whether the email and/or external ID are already taken.

        Advisory only: insert_identity enforces uniqueness authoritatively.
        """
        ...

    def insert_identity(self, identity: Identity) -> Identity:
        """
        Persist a verified identity.

        Raises:
            ConstraintViolation: email and/or external_id already taken
            StoreUnavailable: store unreachable
        """
        ...

    def get_identity(self, identity_id: str) -> Identity | None:
        """Fetch an identity by ID."""
        ...

    def get_identity_by_email(self, email: str) -> Identity | None:
        """Fetch an identity by normalized email."""
        ...

    def update_wallet_address(self, identity_id: str, address: str) -> None:
        """Overwrite the identity's wallet address."""
        ...


class AccountRepository(Protocol):
    """Port interface for durable account credentials."""

    def create_account(self, email: str, password_hash: str) -> str:
        """
        Create an account credential and return its ID.

        The ID becomes the identity's ID once the identity is persisted.
        """
        ...

    def get_credentials(self, email: str) -> tuple[str, str] | None:
        """Return (account_id, password_hash) for an email, if any."""
        ...


class ElectionRepository(Protocol):
    """Port interface for read-only election and candidate data."""

    def get_election(self, election_id: str) -> Election | None:
        """Fetch an election by ID."""
        ...

    def list_elections(self) -> list[Election]:
        """List all elections, most recent start first."""
        ...

    def list_candidates(self, election_id: str) -> list[Candidate]:
        """List an election's candidates ordered by full name."""
        ...


class VoteRepository(Protocol):
    """Port interface for vote persistence and aggregation."""

    def has_voted(self, voter_id: str, election_id: str) -> bool:
        """Advisory check for an existing vote."""
        ...

    def insert_vote(self, vote: Vote) -> Vote:
        """
        Persist a vote and return it with its assigned ID.

        Raises:
            ConstraintViolation: a vote for (voter_id, election_id) exists
            StoreUnavailable: store unreachable
        """
        ...

    def count_votes(self, election_id: str) -> dict[str, int]:
        """Return vote counts keyed by candidate ID (server-side aggregate)."""
        ...


class NotificationSender(Protocol):
    """Port interface for email delivery."""

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Deliver a message.

        Returns:
            True if sent, False if the message was not accepted

        Raises:
            NotificationFailed: transport unreachable
        """
        ...


class WalletProvider(Protocol):
    """Port interface for the external wallet signer."""

    def connect_wallet(self) -> str | None:
        """
        Ask the user to approve a wallet connection.

        Returns:
            Wallet address, or None if the user declined

        Raises:
            WalletUnavailable: provider could not be reached
        """
        ...


class SessionStore(Protocol):
    """Port interface for in-progress registration sessions."""

    def create(self, session: RegistrationSession) -> str:
        """Store a new session and return its unguessable ID."""
        ...

    def get(self, session_id: str) -> RegistrationSession | None:
        """Fetch a live session; None if unknown, completed or abandoned."""
        ...

    def save(self, session_id: str, session: RegistrationSession) -> None:
        """Replace a session's value; a COMPLETE session is destroyed."""
        ...

    def discard(self, session_id: str) -> None:
        """Destroy an abandoned session."""
        ...
