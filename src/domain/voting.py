"""
Vote casting - eligibility-gated, one-vote-per-election submission.

Preconditions, checked in order, each with its own rejection reason:
1. Voter identity exists and is verified         (NOT_VERIFIED)
2. Election is active at the current time        (ELECTION_NOT_ACTIVE)
3. Candidate stands in this election             (CANDIDATE_NOT_FOUND)
4. No prior vote for (voter, election)           (ALREADY_VOTED, advisory)

The advisory double-vote check only gives early feedback. The store's unique
constraint on (voter_id, election_id) is the real guard, and a violation at
write time is reported as ALREADY_VOTED so callers cannot tell the two apart.
Once the insert is issued it runs to a definite outcome; nothing is retried.
"""

import hashlib
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .elections import election_status
from .exceptions import ConstraintViolation, ElectionNotFound, VoteRejected, WalletDeclined
from .models import Vote, VoteReceipt
from .notifications import NotificationDispatcher, vote_confirmation_message
from .ports import ElectionRepository, ElectionStatus, IdentityRepository, RejectionReason, VoteRepository
from .wallet import WalletBinder

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def derive_vote_hash(voter_id: str, candidate_id: str, election_id: str, wallet_address: str) -> str:
    """
    Deterministic SHA-256 digest over a vote's identifying fields.

    The inputs are not secret, so the hash is an audit reference only and
    must not be treated as proof of a ballot choice outside this system.
    """
    payload = json.dumps(
        {
            "candidate_id": candidate_id,
            "election_id": election_id,
            "voter_id": voter_id,
            "wallet_address": wallet_address,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return "0x" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class VoteCaster:
    """Domain service recording exactly one vote per voter per election."""

    identities: IdentityRepository
    elections: ElectionRepository
    votes: VoteRepository
    wallet_binder: WalletBinder
    notifier: NotificationDispatcher
    clock: Callable[[], datetime] = field(default=utc_now)

    def cast(self, voter_id: str, candidate_id: str, election_id: str) -> VoteReceipt:
        """
        Record a vote and return its receipt.

        Raises:
            VoteRejected: a precondition failed (see reason)
            ElectionNotFound: election does not exist
            WalletUnavailable: wallet provider unreachable
            StoreUnavailable: store unreachable
        """
        voter = self.identities.get_identity(voter_id)
        if voter is None or not voter.verified:
            raise VoteRejected(RejectionReason.NOT_VERIFIED)

        election = self.elections.get_election(election_id)
        if election is None:
            raise ElectionNotFound(election_id)
        if election_status(election, self.clock()) is not ElectionStatus.ACTIVE:
            raise VoteRejected(RejectionReason.ELECTION_NOT_ACTIVE)

        candidate = next(
            (c for c in self.elections.list_candidates(election_id) if c.id == candidate_id),
            None,
        )
        if candidate is None:
            raise VoteRejected(RejectionReason.CANDIDATE_NOT_FOUND)

        if self.votes.has_voted(voter.id, election_id):
            raise VoteRejected(RejectionReason.ALREADY_VOTED)

        wallet_address = voter.wallet_address
        if not wallet_address:
            try:
                address = self.wallet_binder.connect()
            except WalletDeclined:
                raise VoteRejected(RejectionReason.WALLET_DECLINED) from None
            wallet_address = self.wallet_binder.bind(voter.id, address).address

        vote_hash = derive_vote_hash(voter.id, candidate.id, election.id, wallet_address)

        try:
            recorded = self.votes.insert_vote(
                Vote(
                    voter_id=voter.id,
                    candidate_id=candidate.id,
                    election_id=election.id,
                    wallet_address=wallet_address,
                    vote_hash=vote_hash,
                )
            )
        except ConstraintViolation:
            logger.info(
                "Double vote by %s in election %s rejected by store constraint",
                voter.id,
                election.id,
            )
            raise VoteRejected(RejectionReason.ALREADY_VOTED) from None

        logger.info("Vote %s recorded in election %s", recorded.id, election.id)
        self.notifier.dispatch(
            vote_confirmation_message(
                voter.email, voter.full_name, candidate.full_name, election.title, vote_hash
            )
        )
        return VoteReceipt(vote_id=recorded.id, vote_hash=vote_hash)

    def has_voted(self, voter_id: str, election_id: str) -> bool:
        return self.votes.has_voted(voter_id, election_id)
