"""Repository adapters - Database implementations."""

from .memory import InMemoryStore
from .postgres import (
    PostgresAccountRepository,
    PostgresElectionRepository,
    PostgresIdentityRepository,
    PostgresVoteRepository,
    run_migrations,
)

__all__ = [
    "InMemoryStore",
    "PostgresAccountRepository",
    "PostgresElectionRepository",
    "PostgresIdentityRepository",
    "PostgresVoteRepository",
    "run_migrations",
]
