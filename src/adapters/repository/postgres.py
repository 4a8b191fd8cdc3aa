"""
PostgreSQL repository adapter - Implements the domain's repository protocols.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 with raw SQL.

Consistency Design - Store Constraints as the Authoritative Guard:
-----------------------------------------------------------------
The domain runs advisory checks (find_conflicts, has_voted) for fast user
feedback, but correctness under concurrent sessions rests on the schema:

1. **identities_email_key / identities_external_id_key**: two registrants
   racing for the same email or external ID cannot both insert.

2. **votes_voter_election_key**: two tabs casting for the same voter and
   election cannot both insert.

3. **Error translation**: UniqueViolation is re-raised as the domain's
   ConstraintViolation carrying the offending field names, so the domain can
   report a late conflict exactly like an early one. Connection and pool
   failures become StoreUnavailable; nothing is retried here.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import ConstraintViolation, StoreUnavailable
from src.domain.models import Candidate, Election, Identity, UniquenessCheck, Vote

logger = logging.getLogger(__name__)

# Constraint name -> domain field names reported in ConstraintViolation.
_CONSTRAINT_FIELDS: dict[str, frozenset[str]] = {
    "accounts_email_key": frozenset({"email"}),
    "identities_pkey": frozenset({"id"}),
    "identities_email_key": frozenset({"email"}),
    "identities_external_id_key": frozenset({"external_id"}),
    "votes_voter_election_key": frozenset({"voter_id", "election_id"}),
}

_IDENTITY_COLUMNS = "id, full_name, email, external_id, phone, wallet_address, verified"
_ELECTION_COLUMNS = "id, title, description, start_time, end_time"
_CANDIDATE_COLUMNS = (
    "id, election_id, full_name, department, course, year_of_study, manifesto, image_url, video_url"
)


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate psycopg errors into domain errors."""
    try:
        yield
    except errors.UniqueViolation as e:
        constraint = e.diag.constraint_name or ""
        fields = _CONSTRAINT_FIELDS.get(constraint)
        if fields is None:
            logger.error(f"Unmapped unique constraint violated: {constraint}")
            raise StoreUnavailable("Unexpected constraint violation") from e
        raise ConstraintViolation(fields) from e
    except psycopg.OperationalError as e:
        logger.error(f"Database unavailable: {e}")
        raise StoreUnavailable("Database unavailable") from e


def _identity_from_row(row: tuple) -> Identity:
    return Identity(
        id=row[0],
        full_name=row[1],
        email=row[2],
        external_id=row[3],
        phone=row[4],
        wallet_address=row[5],
        verified=row[6],
    )


class PostgresIdentityRepository:
    """
    Implements IdentityRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_conflicts(self, email: str, external_id: str) -> UniquenessCheck:
        sql = """
            SELECT COALESCE(bool_or(email = %s), FALSE),
                   COALESCE(bool_or(external_id = %s), FALSE)
            FROM identities
            WHERE email = %s OR external_id = %s
        """
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, external_id, email, external_id))
            row = cursor.fetchone()
        return UniquenessCheck(email_taken=bool(row[0]), external_id_taken=bool(row[1]))

    def insert_identity(self, identity: Identity) -> Identity:
        """
        Insert a verified identity.

        The UNIQUE constraints on email and external_id decide concurrent
        registrations; exactly one insert per value can succeed.
        """
        sql = f"""
            INSERT INTO identities ({_IDENTITY_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {_IDENTITY_COLUMNS}
        """
        params = (
            identity.id,
            identity.full_name,
            identity.email,
            identity.external_id,
            identity.phone,
            identity.wallet_address,
            identity.verified,
        )
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()
        return _identity_from_row(row)

    def get_identity(self, identity_id: str) -> Identity | None:
        sql = f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE id = %s"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity_id,))
            row = cursor.fetchone()
        return _identity_from_row(row) if row is not None else None

    def get_identity_by_email(self, email: str) -> Identity | None:
        sql = f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE email = %s"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _identity_from_row(row) if row is not None else None

    def update_wallet_address(self, identity_id: str, address: str) -> None:
        sql = "UPDATE identities SET wallet_address = %s WHERE id = %s"
        with _store_errors(), self._pool.connection() as conn:
            conn.execute(sql, (address, identity_id))
            conn.commit()


class PostgresAccountRepository:
    """Implements AccountRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create_account(self, email: str, password_hash: str) -> str:
        sql = "INSERT INTO accounts (email, password_hash) VALUES (%s, %s) RETURNING id"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, password_hash))
            account_id = cursor.fetchone()[0]
            conn.commit()
        return account_id

    def get_credentials(self, email: str) -> tuple[str, str] | None:
        sql = "SELECT id, password_hash FROM accounts WHERE email = %s"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return (row[0], row[1]) if row is not None else None


class PostgresElectionRepository:
    """Implements ElectionRepository protocol via psycopg3 (read-only)."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get_election(self, election_id: str) -> Election | None:
        sql = f"SELECT {_ELECTION_COLUMNS} FROM elections WHERE id = %s"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (election_id,))
            row = cursor.fetchone()
        return Election(*row) if row is not None else None

    def list_elections(self) -> list[Election]:
        sql = f"SELECT {_ELECTION_COLUMNS} FROM elections ORDER BY start_time DESC"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql)
            rows = cursor.fetchall()
        return [Election(*row) for row in rows]

    def list_candidates(self, election_id: str) -> list[Candidate]:
        sql = f"""
            SELECT {_CANDIDATE_COLUMNS}
            FROM candidates
            WHERE election_id = %s
            ORDER BY full_name
        """
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (election_id,))
            rows = cursor.fetchall()
        return [Candidate(*row) for row in rows]


class PostgresVoteRepository:
    """Implements VoteRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def has_voted(self, voter_id: str, election_id: str) -> bool:
        sql = "SELECT 1 FROM votes WHERE voter_id = %s AND election_id = %s"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (voter_id, election_id))
            return cursor.fetchone() is not None

    def insert_vote(self, vote: Vote) -> Vote:
        """
        Insert a vote; votes_voter_election_key rejects a second one.

        Votes are never updated or deleted once written.
        """
        sql = """
            INSERT INTO votes (voter_id, candidate_id, election_id, wallet_address, vote_hash)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id
        """
        params = (
            vote.voter_id,
            vote.candidate_id,
            vote.election_id,
            vote.wallet_address,
            vote.vote_hash,
        )
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            vote_id = cursor.fetchone()[0]
            conn.commit()
        return Vote(
            id=vote_id,
            voter_id=vote.voter_id,
            candidate_id=vote.candidate_id,
            election_id=vote.election_id,
            wallet_address=vote.wallet_address,
            vote_hash=vote.vote_hash,
        )

    def count_votes(self, election_id: str) -> dict[str, int]:
        sql = "SELECT candidate_id, vote_count FROM get_election_results(%s)"
        with _store_errors(), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (election_id,))
            rows = cursor.fetchall()
        return {row[0]: int(row[1]) for row in rows}


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
