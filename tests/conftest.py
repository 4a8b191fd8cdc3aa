"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory store seeded with an active election and two candidates
- A recording notification sender and a mock wallet provider
- Domain services wired over those fakes with a fixed clock
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryStore
from src.domain.identity import IdentityGateway
from src.domain.models import Candidate, Election, Identity
from src.domain.notifications import NotificationDispatcher
from src.domain.otp import OTPVerifier
from src.domain.registration import RegistrationWorkflow
from src.domain.results import ResultsAggregator
from src.domain.voting import VoteCaster
from src.domain.wallet import WalletBinder
from tests.helpers import (
    CANDIDATE_A,
    CANDIDATE_B,
    ELECTION_ID,
    NOW,
    WALLET,
    RecordingSender,
    make_form,
    register,
)


@pytest.fixture
def store() -> InMemoryStore:
    """In-memory store with one active election and candidates A and B."""
    store = InMemoryStore()
    store.add_election(
        Election(
            id=ELECTION_ID,
            title="Student Council 2026",
            description="Annual student council election",
            start_time=NOW - timedelta(hours=1),
            end_time=NOW + timedelta(hours=1),
        )
    )
    store.add_candidate(Candidate(id=CANDIDATE_A, election_id=ELECTION_ID, full_name="Alice Anders"))
    store.add_candidate(Candidate(id=CANDIDATE_B, election_id=ELECTION_ID, full_name="Bob Brown"))
    return store


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def notifier(sender: RecordingSender) -> NotificationDispatcher:
    return NotificationDispatcher(sender=sender)


@pytest.fixture
def wallet_provider() -> Mock:
    provider = Mock()
    provider.connect_wallet.return_value = WALLET
    return provider


@pytest.fixture
def gateway(store: InMemoryStore) -> IdentityGateway:
    # Minimum bcrypt cost keeps the suite fast.
    return IdentityGateway(identities=store, accounts=store, bcrypt_cost=4)


@pytest.fixture
def workflow(
    store: InMemoryStore,
    gateway: IdentityGateway,
    notifier: NotificationDispatcher,
    wallet_provider: Mock,
) -> RegistrationWorkflow:
    return RegistrationWorkflow(
        otp=OTPVerifier(notifier=notifier),
        gateway=gateway,
        wallet_binder=WalletBinder(provider=wallet_provider, identities=store),
        notifier=notifier,
    )


@pytest.fixture
def caster(
    store: InMemoryStore, notifier: NotificationDispatcher, wallet_provider: Mock
) -> VoteCaster:
    return VoteCaster(
        identities=store,
        elections=store,
        votes=store,
        wallet_binder=WalletBinder(provider=wallet_provider, identities=store),
        notifier=notifier,
        clock=lambda: NOW,
    )


@pytest.fixture
def aggregator(store: InMemoryStore) -> ResultsAggregator:
    return ResultsAggregator(elections=store, votes=store)


@pytest.fixture
def voter(workflow: RegistrationWorkflow) -> Identity:
    """A verified identity with a bound wallet."""
    return register(workflow, make_form())
