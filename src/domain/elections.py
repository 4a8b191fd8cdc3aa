"""
Election status and read-only election catalog.
"""

from dataclasses import dataclass
from datetime import datetime

from .exceptions import ElectionNotFound
from .models import Candidate, Election
from .ports import ElectionRepository, ElectionStatus


def resolve_status(now: datetime, start_time: datetime, end_time: datetime) -> ElectionStatus:
    """
    Derive an election's status from the half-open window [start_time, end_time).

    All three datetimes must be comparable (all timezone-aware in practice).
    """
    if now < start_time:
        return ElectionStatus.UPCOMING
    if now < end_time:
        return ElectionStatus.ACTIVE
    return ElectionStatus.CLOSED


def election_status(election: Election, now: datetime) -> ElectionStatus:
    return resolve_status(now, election.start_time, election.end_time)


@dataclass
class ElectionCatalog:
    """Read access to elections and their candidates."""

    elections: ElectionRepository

    def get_election(self, election_id: str) -> Election:
        election = self.elections.get_election(election_id)
        if election is None:
            raise ElectionNotFound(election_id)
        return election

    def list_elections(self) -> list[Election]:
        return self.elections.list_elections()

    def list_candidates(self, election_id: str) -> list[Candidate]:
        self.get_election(election_id)
        return self.elections.list_candidates(election_id)
