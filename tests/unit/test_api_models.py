"""
Unit tests for API request/response models.

Tests Pydantic model validation for registration and voting endpoints.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.api.models import (
    CastVoteRequest,
    ElectionResponse,
    ErrorResponse,
    RegistrationInfoRequest,
    ResultsResponse,
    SessionResponse,
    VerifyCodeRequest,
    VoteReceiptResponse,
)
from src.domain.ports import ElectionStatus, RegistrationStage


class TestRegistrationInfoRequest:
    """Tests for RegistrationInfoRequest model."""

    def test_valid_request(self) -> None:
        """All fields are carried through unchanged."""
        request = RegistrationInfoRequest(
            full_name="Ada Lovelace",
            email="ADA@Example.edu",
            phone="+1 555 123 4567",
            external_id="STU123456",
            password="secret123",
            confirm_password="secret123",
        )
        assert request.email == "ADA@Example.edu"
        assert request.external_id == "STU123456"

    def test_missing_fields_default_empty(self) -> None:
        """Field validation is left to the domain, which reports every field."""
        request = RegistrationInfoRequest()
        assert request.full_name == ""
        assert request.password == ""

    def test_non_string_rejected(self) -> None:
        """Structurally wrong payloads are rejected by the model."""
        with pytest.raises(ValidationError):
            RegistrationInfoRequest(email=["a@example.edu"])  # type: ignore[arg-type]


class TestVerifyCodeRequest:
    """Tests for VerifyCodeRequest model."""

    def test_valid_code(self) -> None:
        """Six-digit code is accepted."""
        assert VerifyCodeRequest(code="012345").code == "012345"

    def test_overlong_code_rejected(self) -> None:
        """Codes longer than 12 characters are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            VerifyCodeRequest(code="1" * 13)
        assert "code" in str(exc_info.value)


class TestSessionResponse:
    """Tests for SessionResponse model."""

    def test_stage_serialized_as_string(self) -> None:
        """Stage appears in JSON as its name."""
        response = SessionResponse(session_id="abc", stage=RegistrationStage.AWAITING_CODE)
        data = json.loads(response.model_dump_json())
        assert data["stage"] == "AWAITING_CODE"
        assert data["identity_id"] is None


class TestCastVoteRequest:
    """Tests for CastVoteRequest model."""

    def test_valid_request(self) -> None:
        """Candidate ID is required and non-empty."""
        assert CastVoteRequest(candidate_id="candidate-a").candidate_id == "candidate-a"

    def test_empty_candidate_rejected(self) -> None:
        """Empty candidate ID raises ValidationError."""
        with pytest.raises(ValidationError):
            CastVoteRequest(candidate_id="")

    def test_missing_candidate_rejected(self) -> None:
        """Missing candidate ID raises ValidationError."""
        with pytest.raises(ValidationError):
            CastVoteRequest()  # type: ignore[call-arg]


class TestResponses:
    """Tests for response models."""

    def test_election_response(self) -> None:
        """Status is serialized as its lowercase value."""
        response = ElectionResponse(
            id="e1",
            title="Student Council",
            description="",
            start_time=datetime(2026, 3, 1, tzinfo=timezone.utc),
            end_time=datetime(2026, 3, 3, tzinfo=timezone.utc),
            status=ElectionStatus.ACTIVE,
        )
        assert response.model_dump(mode="json")["status"] == "active"

    def test_vote_receipt_response(self) -> None:
        """Receipt carries message, ID and hash."""
        response = VoteReceiptResponse(message="Vote recorded", vote_id="v1", vote_hash="0xabc")
        assert response.model_dump() == {
            "message": "Vote recorded",
            "vote_id": "v1",
            "vote_hash": "0xabc",
        }

    def test_results_response(self) -> None:
        """Results nest per-candidate tallies."""
        response = ResultsResponse(
            election_id="e1",
            total_votes=1,
            results=[
                {"candidate_id": "a", "full_name": "A", "vote_count": 1, "percentage": 100.0}
            ],
        )
        assert response.results[0].percentage == 100.0

    def test_error_response(self) -> None:
        """ErrorResponse has a single detail string."""
        assert ErrorResponse(detail="Invalid credentials").detail == "Invalid credentials"
