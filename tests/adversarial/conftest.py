"""
Shared fixtures for adversarial tests.

Attacks run against InMemoryStore through the real domain services. The
store enforces the same unique constraints as the database schema, so the
interesting races happen between the advisory checks and the writes.
"""

from collections.abc import Callable

import pytest

from src.domain.models import RegistrationSession
from src.domain.registration import RegistrationWorkflow
from tests.helpers import make_form


@pytest.fixture
def sessions_at_wallet_step(
    workflow: RegistrationWorkflow,
) -> Callable[[list[dict[str, str]]], list[RegistrationSession]]:
    """
    Drive several registrations to AWAITING_WALLET before any completes.

    Every session passes the advisory uniqueness check, as concurrent
    registrants would.
    """

    def prepare(overrides: list[dict[str, str]]) -> list[RegistrationSession]:
        sessions = []
        for fields in overrides:
            session = workflow.submit_info(workflow.start(), make_form(**fields))
            sessions.append(workflow.verify_code(session, session.issued_code))
        return sessions

    return prepare
