"""
Shared fixtures for HTTP flow tests.

The application runs against InMemoryStore (the storage_backend="memory"
configuration), so these flows need no database. Notifications are sent
inline and recorded so tests can read the emailed verification code.
"""

import re
from collections.abc import Iterator
from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryStore
from src.adapters.sessions.memory import InMemorySessionStore
from src.api.main import app
from src.domain.models import Candidate, Election
from src.domain.voting import utc_now
from tests.helpers import CANDIDATE_A, CANDIDATE_B, ELECTION_ID, WALLET, RecordingSender

CLOSED_ELECTION_ID = "election-closed"

INFO = {
    "full_name": "Ada Lovelace",
    "email": "ada@example.edu",
    "phone": "+1 (555) 123-4567",
    "external_id": "STU123456",
    "password": "secret123",
    "confirm_password": "secret123",
}


@pytest.fixture
def flow_store() -> InMemoryStore:
    """Store with one active and one closed election."""
    now = utc_now()
    store = InMemoryStore()
    store.add_election(
        Election(
            id=ELECTION_ID,
            title="Student Council 2026",
            description="Annual student council election",
            start_time=now - timedelta(hours=1),
            end_time=now + timedelta(hours=1),
        )
    )
    store.add_election(
        Election(
            id=CLOSED_ELECTION_ID,
            title="Student Council 2025",
            description="",
            start_time=now - timedelta(days=366),
            end_time=now - timedelta(days=365),
        )
    )
    store.add_candidate(Candidate(id=CANDIDATE_A, election_id=ELECTION_ID, full_name="Alice Anders"))
    store.add_candidate(Candidate(id=CANDIDATE_B, election_id=ELECTION_ID, full_name="Bob Brown"))
    store.add_candidate(
        Candidate(id="candidate-old", election_id=CLOSED_ELECTION_ID, full_name="Carol Chen")
    )
    return store


@pytest.fixture
def outbox() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def memory_app(flow_store: InMemoryStore, outbox: RecordingSender) -> Iterator[FastAPI]:
    """The real application wired to in-memory adapters."""
    app.state.store = flow_store
    app.state.pool = None
    app.state.sessions = InMemorySessionStore()
    app.state.email_sender = outbox
    app.state.notification_executor = None
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(memory_app: FastAPI) -> TestClient:
    # No context manager: lifespan would replace the in-memory state.
    return TestClient(memory_app)


def last_code(outbox: RecordingSender) -> str:
    """Extract the verification code from the most recent email."""
    _, _, body = outbox.sent[-1]
    match = re.search(r"\b(\d{6})\b", body)
    assert match is not None, body
    return match.group(1)


def register_via_api(
    client: TestClient, outbox: RecordingSender, wallet: str = WALLET, **overrides: str
) -> dict:
    """Run the whole registration over HTTP; return the final session body."""
    session_id = client.post("/v1/registrations").json()["session_id"]
    response = client.post(f"/v1/registrations/{session_id}/info", json={**INFO, **overrides})
    assert response.status_code == 200, response.text
    response = client.post(
        f"/v1/registrations/{session_id}/verify", json={"code": last_code(outbox)}
    )
    assert response.status_code == 200, response.text
    response = client.post(
        f"/v1/registrations/{session_id}/wallet", headers={"X-Wallet-Address": wallet}
    )
    assert response.status_code == 200, response.text
    return response.json()
