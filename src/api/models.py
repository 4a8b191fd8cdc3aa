"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Registration fields are plain strings: the domain validates them together so
every failing field is reported in one response.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.ports import ElectionStatus, RegistrationStage


class RegistrationInfoRequest(BaseModel):
    """Request model for the personal information step."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    external_id: str = Field("", description="Organization-issued member ID (6-12 alphanumeric)")
    password: str = ""
    confirm_password: str = ""


class VerifyCodeRequest(BaseModel):
    """Request model for email code verification."""

    code: str = Field("", max_length=12, description="Verification code from email")


class SessionResponse(BaseModel):
    """Current registration session state."""

    session_id: str
    stage: RegistrationStage
    code_delivered: bool | None = None
    identity_id: str | None = None
    wallet_address: str | None = None


class FieldErrors(BaseModel):
    message: str
    fields: dict[str, str]


class FieldErrorResponse(BaseModel):
    """Error response attributing failures to individual fields."""

    detail: FieldErrors


class CandidateResponse(BaseModel):
    id: str
    full_name: str
    department: str
    course: str
    year_of_study: int | None = None
    manifesto: str
    image_url: str | None = None
    video_url: str | None = None


class ElectionResponse(BaseModel):
    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    status: ElectionStatus


class ElectionDetailResponse(ElectionResponse):
    candidates: list[CandidateResponse]


class CastVoteRequest(BaseModel):
    """Request model for casting a vote."""

    candidate_id: str = Field(..., min_length=1)


class VoteReceiptResponse(BaseModel):
    """Response model for a recorded vote."""

    message: str
    vote_id: str
    vote_hash: str


class VotingStatusResponse(BaseModel):
    election_id: str
    has_voted: bool


class CandidateResultResponse(BaseModel):
    candidate_id: str
    full_name: str
    vote_count: int
    percentage: float


class ResultsResponse(BaseModel):
    election_id: str
    total_votes: int
    results: list[CandidateResultResponse]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
