"""
Domain models - plain dataclasses shared by the domain services.
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any

from .ports import RegistrationStage


@dataclass(frozen=True)
class Identity:
    """A registrant. verified is True only once persisted after code verification."""

    id: str
    full_name: str
    email: str
    external_id: str
    phone: str
    wallet_address: str | None = None
    verified: bool = False


@dataclass(frozen=True)
class UniquenessCheck:
    """Advisory uniqueness result for a registration form."""

    email_taken: bool = False
    external_id_taken: bool = False

    @property
    def taken_fields(self) -> frozenset[str]:
        fields = set()
        if self.email_taken:
            fields.add("email")
        if self.external_id_taken:
            fields.add("external_id")
        return frozenset(fields)


@dataclass(frozen=True)
class RegistrationForm:
    """Candidate identity fields collected in the first registration step."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    external_id: str = ""
    password: str = ""
    confirm_password: str = ""


@dataclass(frozen=True)
class RegistrationSession:
    """
    Explicit registration state, owned by RegistrationWorkflow.

    Never persisted beyond process memory. to_dict()/from_dict() allow a
    session store to keep it in any serializable form.
    """

    stage: RegistrationStage = RegistrationStage.COLLECTING_INFO
    form: RegistrationForm = field(default_factory=RegistrationForm)
    issued_code: str | None = None
    code_delivered: bool | None = None
    identity_id: str | None = None
    wallet_address: str | None = None

    def evolve(self, **changes: Any) -> "RegistrationSession":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["stage"] = self.stage.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegistrationSession":
        return cls(
            stage=RegistrationStage(data["stage"]),
            form=RegistrationForm(**data.get("form", {})),
            issued_code=data.get("issued_code"),
            code_delivered=data.get("code_delivered"),
            identity_id=data.get("identity_id"),
            wallet_address=data.get("wallet_address"),
        )


@dataclass(frozen=True)
class IssuedCode:
    """A freshly issued verification code and whether it reached the user."""

    code: str
    delivered: bool


@dataclass(frozen=True)
class BoundWallet:
    """Wallet address bound to an identity; changed is False when it was already bound."""

    identity_id: str
    address: str
    changed: bool


@dataclass(frozen=True)
class Election:
    """Election with a half-open voting window [start_time, end_time)."""

    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class Candidate:
    """A candidate standing in exactly one election."""

    id: str
    election_id: str
    full_name: str
    department: str = ""
    course: str = ""
    year_of_study: int | None = None
    manifesto: str = ""
    image_url: str | None = None
    video_url: str | None = None


@dataclass(frozen=True)
class Vote:
    """An immutable ballot record; id is assigned by the store."""

    voter_id: str
    candidate_id: str
    election_id: str
    wallet_address: str
    vote_hash: str
    id: str | None = None


@dataclass(frozen=True)
class VoteReceipt:
    """Proof of a recorded vote returned to the voter."""

    vote_id: str
    vote_hash: str


@dataclass(frozen=True)
class CandidateTally:
    """One candidate's vote count and share (0-100) of the election total."""

    candidate_id: str
    full_name: str
    vote_count: int
    percentage: float


@dataclass(frozen=True)
class ElectionResults:
    """Live tallies for every candidate in an election."""

    election_id: str
    total_votes: int
    tallies: list[CandidateTally]
