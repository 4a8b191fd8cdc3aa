"""
Shared test helpers: constants, fakes and registration shortcuts.
"""

from base64 import b64encode
from datetime import datetime, timezone

from src.domain.models import Identity, RegistrationForm
from src.domain.registration import RegistrationWorkflow

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
WALLET = "0x" + "ab" * 20
OTHER_WALLET = "0x" + "cd" * 20
ELECTION_ID = "election-1"
CANDIDATE_A = "candidate-a"
CANDIDATE_B = "candidate-b"


class RecordingSender:
    """NotificationSender that records every message."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append((to, subject, body))
        return self.succeed

    def subjects(self) -> list[str]:
        return [subject for _, subject, _ in self.sent]


def make_form(**overrides: str) -> RegistrationForm:
    fields = {
        "full_name": "Ada Lovelace",
        "email": "ada@example.edu",
        "phone": "+1 (555) 123-4567",
        "external_id": "STU123456",
        "password": "secret123",
        "confirm_password": "secret123",
    }
    fields.update(overrides)
    return RegistrationForm(**fields)


def register(workflow: RegistrationWorkflow, form: RegistrationForm) -> Identity:
    """Drive a registration to COMPLETE and return the stored identity."""
    session = workflow.submit_info(workflow.start(), form)
    session = workflow.verify_code(session, session.issued_code)
    session = workflow.complete(session)
    return workflow.gateway.get_identity(session.identity_id)


def basic_auth_header(email: str, password: str) -> dict:
    """Create HTTP BASIC AUTH header for testing."""
    credentials = f"{email}:{password}"
    encoded = b64encode(credentials.encode()).decode()
    return {"Authorization": f"Basic {encoded}"}
