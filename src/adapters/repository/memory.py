"""
In-memory repository adapter - Implements the domain's repository protocols.

Backs development runs (storage_backend="memory") and tests. Every
check-and-insert happens under a single lock, so the unique constraints on
identities(email), identities(external_id), accounts(email) and
votes(voter_id, election_id) hold under concurrent callers exactly as the
PostgreSQL constraints do.
"""

import threading
import uuid
from dataclasses import replace

from src.domain.exceptions import ConstraintViolation
from src.domain.models import Candidate, Election, Identity, UniquenessCheck, Vote


class InMemoryStore:
    """
    Implements IdentityRepository, AccountRepository, ElectionRepository
    and VoteRepository protocols in process memory.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._identities: dict[str, Identity] = {}
        self._accounts: dict[str, tuple[str, str]] = {}  # email -> (id, password_hash)
        self._elections: dict[str, Election] = {}
        self._candidates: dict[str, Candidate] = {}
        self._votes: dict[tuple[str, str], Vote] = {}  # (voter_id, election_id) -> vote

    # Seeding

    def add_election(self, election: Election) -> Election:
        with self._lock:
            self._elections[election.id] = election
        return election

    def add_candidate(self, candidate: Candidate) -> Candidate:
        with self._lock:
            self._candidates[candidate.id] = candidate
        return candidate

    # IdentityRepository

    def find_conflicts(self, email: str, external_id: str) -> UniquenessCheck:
        with self._lock:
            return UniquenessCheck(
                email_taken=any(i.email == email for i in self._identities.values()),
                external_id_taken=any(
                    i.external_id == external_id for i in self._identities.values()
                ),
            )

    def insert_identity(self, identity: Identity) -> Identity:
        with self._lock:
            taken = set()
            for existing in self._identities.values():
                if existing.email == identity.email:
                    taken.add("email")
                if existing.external_id == identity.external_id:
                    taken.add("external_id")
            if identity.id in self._identities:
                taken.add("id")
            if taken:
                raise ConstraintViolation(taken)
            self._identities[identity.id] = identity
            return identity

    def get_identity(self, identity_id: str) -> Identity | None:
        with self._lock:
            return self._identities.get(identity_id)

    def get_identity_by_email(self, email: str) -> Identity | None:
        with self._lock:
            return next((i for i in self._identities.values() if i.email == email), None)

    def update_wallet_address(self, identity_id: str, address: str) -> None:
        with self._lock:
            identity = self._identities.get(identity_id)
            if identity is not None:
                self._identities[identity_id] = replace(identity, wallet_address=address)

    # AccountRepository

    def create_account(self, email: str, password_hash: str) -> str:
        with self._lock:
            if email in self._accounts:
                raise ConstraintViolation({"email"})
            account_id = str(uuid.uuid4())
            self._accounts[email] = (account_id, password_hash)
            return account_id

    def get_credentials(self, email: str) -> tuple[str, str] | None:
        with self._lock:
            return self._accounts.get(email)

    # ElectionRepository

    def get_election(self, election_id: str) -> Election | None:
        with self._lock:
            return self._elections.get(election_id)

    def list_elections(self) -> list[Election]:
        with self._lock:
            return sorted(self._elections.values(), key=lambda e: e.start_time, reverse=True)

    def list_candidates(self, election_id: str) -> list[Candidate]:
        with self._lock:
            candidates = [c for c in self._candidates.values() if c.election_id == election_id]
        return sorted(candidates, key=lambda c: c.full_name)

    # VoteRepository

    def has_voted(self, voter_id: str, election_id: str) -> bool:
        with self._lock:
            return (voter_id, election_id) in self._votes

    def insert_vote(self, vote: Vote) -> Vote:
        key = (vote.voter_id, vote.election_id)
        with self._lock:
            if key in self._votes:
                raise ConstraintViolation({"voter_id", "election_id"})
            recorded = replace(vote, id=str(uuid.uuid4()))
            self._votes[key] = recorded
            return recorded

    def count_votes(self, election_id: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        with self._lock:
            for vote in self._votes.values():
                if vote.election_id == election_id:
                    counts[vote.candidate_id] = counts.get(vote.candidate_id, 0) + 1
        return counts
