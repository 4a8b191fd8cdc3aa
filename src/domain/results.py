"""
Result aggregation - live per-candidate tallies for an election.

Counts come from the store's aggregate query, so individual vote rows are
never transferred. Nothing is cached: every call reflects all votes durably
written before it began.
"""

from dataclasses import dataclass

from .exceptions import ElectionNotFound
from .models import CandidateTally, ElectionResults
from .ports import ElectionRepository, VoteRepository


@dataclass
class ResultsAggregator:
    elections: ElectionRepository
    votes: VoteRepository

    def tally(self, election_id: str) -> ElectionResults:
        """
        Tally an election's votes.

        Every candidate appears, in candidate-name order, including those
        with no votes. percentage is 0-100 and 0 for everyone when no votes
        have been cast.
        """
        if self.elections.get_election(election_id) is None:
            raise ElectionNotFound(election_id)

        candidates = self.elections.list_candidates(election_id)
        counts = self.votes.count_votes(election_id)
        total = sum(counts.get(candidate.id, 0) for candidate in candidates)

        tallies = []
        for candidate in candidates:
            count = counts.get(candidate.id, 0)
            percentage = (count / total) * 100 if total > 0 else 0.0
            tallies.append(
                CandidateTally(
                    candidate_id=candidate.id,
                    full_name=candidate.full_name,
                    vote_count=count,
                    percentage=percentage,
                )
            )
        return ElectionResults(election_id=election_id, total_votes=total, tallies=tallies)
