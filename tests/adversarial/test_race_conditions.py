"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent operations are decided by the store's unique
constraints, so an attacker racing requests cannot:
- Register the same email or member ID twice
- Record more than one vote per voter per election

Every racer passes the advisory check first; the late conflict must be
reported exactly like an early one.
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.adapters.repository.memory import InMemoryStore
from src.domain.exceptions import IdentityConflict, UniVoteError, VoteRejected
from src.domain.models import Identity
from src.domain.ports import RegistrationStage, RejectionReason
from src.domain.registration import RegistrationWorkflow
from src.domain.results import ResultsAggregator
from src.domain.voting import VoteCaster
from tests.helpers import CANDIDATE_A, CANDIDATE_B, ELECTION_ID

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial

NUM_ATTACKERS = 8


def race(attempts: list[Callable[[], object]]) -> list[object]:
    """Release all attempts at once; return each result or raised exception."""
    barrier = threading.Barrier(len(attempts))

    def run(attempt: Callable[[], object]) -> object:
        barrier.wait()
        try:
            return attempt()
        except UniVoteError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=len(attempts)) as executor:
        return list(executor.map(run, attempts))


class TestRegistrationRaces:
    """Concurrent registrations competing for the same identity fields."""

    def test_same_member_id_exactly_one_succeeds(
        self,
        workflow: RegistrationWorkflow,
        store: InMemoryStore,
        sessions_at_wallet_step,
    ) -> None:
        """
        Attackers with distinct emails race for one member ID.

        Expected defense: the unique constraint on external_id admits one
        insert; every other racer sees IdentityConflict on external_id.
        """
        sessions = sessions_at_wallet_step(
            [
                {"email": f"racer{i}@example.edu", "external_id": "RACE12345"}
                for i in range(NUM_ATTACKERS)
            ]
        )

        results = race([lambda s=s: workflow.complete(s) for s in sessions])

        completed = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, IdentityConflict)]
        assert len(completed) == 1
        assert completed[0].stage is RegistrationStage.COMPLETE
        assert len(conflicts) == NUM_ATTACKERS - 1
        assert all(c.fields == {"external_id"} for c in conflicts)
        assert store.find_conflicts("nobody@example.edu", "RACE12345").external_id_taken

    def test_same_email_exactly_one_identity(
        self,
        workflow: RegistrationWorkflow,
        store: InMemoryStore,
        sessions_at_wallet_step,
    ) -> None:
        """
        Attackers race the same email with distinct member IDs.

        Only one identity may exist for the email afterwards. Whichever
        step (account or identity) a loser fails at, it sees an email
        conflict.
        """
        sessions = sessions_at_wallet_step(
            [{"external_id": f"RACE{i:05d}"} for i in range(NUM_ATTACKERS)]
        )

        results = race([lambda s=s: workflow.complete(s) for s in sessions])

        completed = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(completed) == 1
        assert all(isinstance(r, IdentityConflict) for r in losers), losers
        assert all(r.fields == {"email"} for r in losers)
        winner = store.get_identity_by_email("ada@example.edu")
        assert winner.id == completed[0].identity_id
        for i in range(NUM_ATTACKERS):
            check = store.find_conflicts("other@example.edu", f"RACE{i:05d}")
            assert check.external_id_taken is (f"RACE{i:05d}" == winner.external_id)

    def test_same_email_distinct_passwords_conflict_on_email(
        self,
        workflow: RegistrationWorkflow,
        sessions_at_wallet_step,
    ) -> None:
        """
        Attackers race one email, each with its own password.

        Losers collide on the account credential rather than the identity;
        that is still an email conflict, never a retryable failure.
        """
        sessions = sessions_at_wallet_step(
            [
                {
                    "external_id": f"PASS{i:05d}",
                    "password": f"secret-{i}",
                    "confirm_password": f"secret-{i}",
                }
                for i in range(NUM_ATTACKERS)
            ]
        )

        results = race([lambda s=s: workflow.complete(s) for s in sessions])

        completed = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(completed) == 1
        assert len(losers) == NUM_ATTACKERS - 1
        assert all(isinstance(r, IdentityConflict) and r.fields == {"email"} for r in losers)


class TestVotingRaces:
    """Concurrent votes by one voter in one election."""

    def test_concurrent_double_vote_exactly_one_counted(
        self, caster: VoteCaster, aggregator: ResultsAggregator, voter: Identity
    ) -> None:
        """
        Simulate a voter submitting from several tabs at once.

        Expected defense: the (voter_id, election_id) constraint admits one
        vote; every other attempt is ALREADY_VOTED whether it was caught by
        the advisory check or at write time.
        """
        candidates = [CANDIDATE_A, CANDIDATE_B] * (NUM_ATTACKERS // 2)

        results = race(
            [lambda c=c: caster.cast(voter.id, c, ELECTION_ID) for c in candidates]
        )

        receipts = [r for r in results if not isinstance(r, Exception)]
        rejections = [r for r in results if isinstance(r, VoteRejected)]
        assert len(receipts) == 1
        assert len(rejections) == NUM_ATTACKERS - 1
        assert all(r.reason is RejectionReason.ALREADY_VOTED for r in rejections)
        assert aggregator.tally(ELECTION_ID).total_votes == 1

    def test_distinct_voters_all_counted(
        self,
        caster: VoteCaster,
        aggregator: ResultsAggregator,
        workflow: RegistrationWorkflow,
        sessions_at_wallet_step,
    ) -> None:
        """Concurrency never loses votes from different voters."""
        sessions = sessions_at_wallet_step(
            [
                {"email": f"voter{i}@example.edu", "external_id": f"VOTER{i:04d}"}
                for i in range(NUM_ATTACKERS)
            ]
        )
        voter_ids = [workflow.complete(s).identity_id for s in sessions]

        results = race([lambda v=v: caster.cast(v, CANDIDATE_A, ELECTION_ID) for v in voter_ids])

        assert not any(isinstance(r, Exception) for r in results)
        tally = aggregator.tally(ELECTION_ID)
        assert tally.total_votes == NUM_ATTACKERS
        assert tally.tallies[0].vote_count == NUM_ATTACKERS
