"""
Identity store gateway - uniqueness checks and verified identity persistence.

The advisory uniqueness check exists for fast, field-attributed feedback.
The store's unique constraints on email and external ID are the real guard:
a constraint violation on insert is re-raised as the same IdentityConflict
the advisory check would have produced.
"""

import logging
from dataclasses import dataclass

import bcrypt

from .exceptions import AuthenticationFailed, ConstraintViolation, IdentityConflict
from .models import Identity, RegistrationForm, UniquenessCheck
from .ports import AccountRepository, IdentityRepository

logger = logging.getLogger(__name__)

# Compared against when an email has no account, so authenticate() always
# pays the bcrypt cost and response time does not reveal account existence.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class IdentityGateway:
    """Thin contract over the identity and account repositories."""

    identities: IdentityRepository
    accounts: AccountRepository
    bcrypt_cost: int = 10

    def check_uniqueness(self, email: str, external_id: str) -> UniquenessCheck:
        """Advisory check; never the sole correctness mechanism."""
        return self.identities.find_conflicts(normalize_email(email), external_id.strip())

    def ensure_account(self, email: str, password: str) -> str:
        """
        Create the durable account credential and return its ID.

        If a credential for this email already exists with the same password
        (a retry after a declined wallet), it is reused instead.
        The password is only ever stored as a bcrypt hash.

        Raises:
            ConstraintViolation: email holds a credential with another password
        """
        normalized_email = normalize_email(email)
        existing = self.accounts.get_credentials(normalized_email)
        if existing is not None:
            account_id, stored_hash = existing
            if bcrypt.checkpw(password.encode(), stored_hash.encode()):
                logger.info("Resuming account %s for %s", account_id, normalized_email)
                return account_id
            raise ConstraintViolation({"email"})

        password_hash = bcrypt.hashpw(
            password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)
        ).decode()
        return self.accounts.create_account(normalized_email, password_hash)

    def create_verified_identity(
        self, account_id: str, form: RegistrationForm, wallet_address: str
    ) -> Identity:
        """
        Persist a verified identity bound to a wallet.

        verified is set atomically with record creation.

        Raises:
            IdentityConflict: email and/or external ID taken at write time
        """
        identity = Identity(
            id=account_id,
            full_name=form.full_name.strip(),
            email=normalize_email(form.email),
            external_id=form.external_id.strip(),
            phone=form.phone.strip(),
            wallet_address=wallet_address,
            verified=True,
        )
        try:
            return self.identities.insert_identity(identity)
        except ConstraintViolation as exc:
            logger.info("Identity insert rejected by unique constraint: %s", exc)
            # An ID clash means this account already holds an identity for the email.
            raise IdentityConflict(exc.fields - {"id"} or {"email"}) from None

    def get_identity(self, identity_id: str) -> Identity | None:
        return self.identities.get_identity(identity_id)

    def authenticate(self, email: str, password: str) -> Identity:
        """
        Resolve the identity behind an email/password pair.

        Raises:
            AuthenticationFailed: unknown email, wrong password, or no identity
        """
        normalized_email = normalize_email(email)
        credentials = self.accounts.get_credentials(normalized_email)
        stored_hash = credentials[1].encode() if credentials else _DUMMY_BCRYPT_HASH

        # Always run bcrypt before any existence-based return.
        password_valid = bcrypt.checkpw(password.encode(), stored_hash)
        if credentials is None or not password_valid:
            raise AuthenticationFailed(normalized_email)

        identity = self.identities.get_identity(credentials[0])
        if identity is None:
            raise AuthenticationFailed(normalized_email)
        return identity
