"""
Registration domain service - identity verification workflow.

This module contains the core business logic for member registration,
implemented as an explicit state machine over RegistrationSession values.

Registration Workflow
=====================

Stages:
- COLLECTING_INFO: Initial stage, personal information being entered
- AWAITING_CODE: Verification code issued to the registrant's email
- AWAITING_WALLET: Email ownership proven, wallet connection pending
- COMPLETE: Terminal stage, verified identity persisted with a wallet

Forward transitions:
    COLLECTING_INFO -> AWAITING_CODE    (valid form, unique email/ID, code issued)
    AWAITING_CODE   -> AWAITING_WALLET  (submitted code == issued code)
    AWAITING_WALLET -> COMPLETE         (wallet connected, identity persisted)

Back navigation (form data retained):
    AWAITING_CODE   -> COLLECTING_INFO
    AWAITING_WALLET -> AWAITING_CODE

transition() is a pure function of (session, event). RegistrationWorkflow
performs the side effects for each step and only then applies the event,
so a failed step leaves the caller's session untouched.
"""

import logging
import re
from dataclasses import dataclass, replace

from email_validator import EmailNotValidError, validate_email

from .exceptions import (
    ConstraintViolation,
    IdentityConflict,
    InvalidTransition,
    RegistrationFailed,
    ValidationFailed,
    VerificationFailed,
)
from .identity import IdentityGateway, normalize_email
from .models import RegistrationForm, RegistrationSession
from .notifications import NotificationDispatcher, welcome_message
from .otp import OTPVerifier
from .ports import CheckResult, RegistrationStage
from .wallet import WalletBinder

logger = logging.getLogger(__name__)

EXTERNAL_ID_PATTERN = re.compile(r"^[A-Za-z0-9]{6,12}$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-().]+$")


@dataclass(frozen=True)
class InfoAccepted:
    form: RegistrationForm
    code: str
    delivered: bool


@dataclass(frozen=True)
class CodeReissued:
    code: str
    delivered: bool


@dataclass(frozen=True)
class CodeVerified:
    pass


@dataclass(frozen=True)
class RegistrationCompleted:
    identity_id: str
    wallet_address: str


@dataclass(frozen=True)
class SteppedBack:
    pass


RegistrationEvent = InfoAccepted | CodeReissued | CodeVerified | RegistrationCompleted | SteppedBack

_REQUIRED_STAGE: dict[type, RegistrationStage] = {
    InfoAccepted: RegistrationStage.COLLECTING_INFO,
    CodeReissued: RegistrationStage.AWAITING_CODE,
    CodeVerified: RegistrationStage.AWAITING_CODE,
    RegistrationCompleted: RegistrationStage.AWAITING_WALLET,
}

_PREVIOUS_STAGE = {
    RegistrationStage.AWAITING_CODE: RegistrationStage.COLLECTING_INFO,
    RegistrationStage.AWAITING_WALLET: RegistrationStage.AWAITING_CODE,
}


def transition(session: RegistrationSession, event: RegistrationEvent) -> RegistrationSession:
    """
    Apply an event to a session and return the next session.

    Raises:
        InvalidTransition: event not allowed in the session's stage
    """
    if isinstance(event, SteppedBack):
        previous = _PREVIOUS_STAGE.get(session.stage)
        if previous is None:
            raise InvalidTransition(f"Cannot go back from {session.stage.value}")
        return session.evolve(stage=previous)

    required = _REQUIRED_STAGE[type(event)]
    if session.stage != required:
        raise InvalidTransition(
            f"{type(event).__name__} requires {required.value}, session is {session.stage.value}"
        )

    if isinstance(event, InfoAccepted):
        return session.evolve(
            stage=RegistrationStage.AWAITING_CODE,
            form=event.form,
            issued_code=event.code,
            code_delivered=event.delivered,
        )
    if isinstance(event, CodeReissued):
        return session.evolve(issued_code=event.code, code_delivered=event.delivered)
    if isinstance(event, CodeVerified):
        return session.evolve(stage=RegistrationStage.AWAITING_WALLET)
    return session.evolve(
        stage=RegistrationStage.COMPLETE,
        form=replace(session.form, password="", confirm_password=""),
        issued_code=None,
        identity_id=event.identity_id,
        wallet_address=event.wallet_address,
    )


def validate_form(form: RegistrationForm, password_min_length: int = 6) -> dict[str, str]:
    """
    Validate every registration field.

    Returns:
        Mapping of field name to error message; empty when the form is valid
    """
    errors: dict[str, str] = {}

    if not form.full_name.strip():
        errors["full_name"] = "Full name is required"

    if not form.email.strip():
        errors["email"] = "Email is required"
    else:
        try:
            validate_email(form.email.strip(), check_deliverability=False)
        except EmailNotValidError:
            errors["email"] = "Please enter a valid email address"

    phone = form.phone.strip()
    if not phone:
        errors["phone"] = "Phone number is required"
    elif not PHONE_PATTERN.match(phone) or not 10 <= sum(c.isdigit() for c in phone) <= 15:
        errors["phone"] = "Please enter a valid phone number"

    if not form.external_id.strip():
        errors["external_id"] = "Member ID is required"
    elif not EXTERNAL_ID_PATTERN.match(form.external_id.strip()):
        errors["external_id"] = "Member ID must be 6-12 alphanumeric characters"

    if not form.password:
        errors["password"] = "Password is required"
    elif len(form.password) < password_min_length:
        errors["password"] = f"Password must be at least {password_min_length} characters"

    if not form.confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif form.password != form.confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    return errors


@dataclass
class RegistrationWorkflow:
    """
    Domain service driving the registration state machine.

    Orchestrates form validation, the advisory uniqueness check, code
    issuance and verification, account creation, wallet connection and
    verified identity persistence.
    """

    otp: OTPVerifier
    gateway: IdentityGateway
    wallet_binder: WalletBinder
    notifier: NotificationDispatcher
    password_min_length: int = 6

    def start(self) -> RegistrationSession:
        return RegistrationSession()

    def submit_info(
        self, session: RegistrationSession, form: RegistrationForm
    ) -> RegistrationSession:
        """
        Validate personal information and issue a verification code.

        Raises:
            InvalidTransition: session is not collecting information
            ValidationFailed: one or more fields are malformed (all reported)
            IdentityConflict: email and/or external ID already registered
        """
        self._require_stage(session, RegistrationStage.COLLECTING_INFO)

        errors = validate_form(form, self.password_min_length)
        if errors:
            raise ValidationFailed(errors)

        uniqueness = self.gateway.check_uniqueness(form.email, form.external_id)
        if uniqueness.taken_fields:
            raise IdentityConflict(uniqueness.taken_fields)

        issued = self.otp.issue(normalize_email(form.email), form.full_name.strip())
        return transition(
            session, InfoAccepted(form=form, code=issued.code, delivered=issued.delivered)
        )

    def resend_code(self, session: RegistrationSession) -> RegistrationSession:
        """Issue a new code; the previous one stops matching."""
        self._require_stage(session, RegistrationStage.AWAITING_CODE)
        issued = self.otp.issue(normalize_email(session.form.email), session.form.full_name.strip())
        return transition(session, CodeReissued(code=issued.code, delivered=issued.delivered))

    def verify_code(self, session: RegistrationSession, code: str) -> RegistrationSession:
        """
        Check the submitted code against the issued one.

        Raises:
            VerificationFailed: code does not match (empty input included)
        """
        self._require_stage(session, RegistrationStage.AWAITING_CODE)
        if self.otp.check(code, session.issued_code) is not CheckResult.VALID:
            raise VerificationFailed("Invalid verification code")
        return transition(session, CodeVerified())

    def complete(self, session: RegistrationSession) -> RegistrationSession:
        """
        Create the account, connect the wallet and persist the verified identity.

        Steps, in order: (a) account credential, (b) wallet connection,
        (c) verified identity with wallet, (d) welcome notification.

        Raises:
            RegistrationFailed: account credential could not be created
            WalletDeclined: user declined the wallet connection
            WalletUnavailable: wallet provider unreachable
            IdentityConflict: email/external ID already claimed, at the account
                or identity step
        """
        self._require_stage(session, RegistrationStage.AWAITING_WALLET)
        form = session.form
        email = normalize_email(form.email)

        try:
            account_id = self.gateway.ensure_account(email, form.password)
        except ConstraintViolation as exc:
            logger.info("Account for %s already exists: %s", email, exc)
            raise IdentityConflict(exc.fields) from None
        except Exception as exc:
            logger.error("Account creation failed for %s: %s", email, exc)
            raise RegistrationFailed("Failed to create account") from exc

        address = self.wallet_binder.connect()

        try:
            identity = self.gateway.create_verified_identity(account_id, form, address)
        except Exception:
            # No compensating rollback exists for the credential from step (a).
            logger.warning("Account %s orphaned: verified identity not persisted", account_id)
            raise

        self.notifier.dispatch(welcome_message(identity.email, identity.full_name))
        logger.info("Registration complete for identity %s", identity.id)
        return transition(
            session, RegistrationCompleted(identity_id=identity.id, wallet_address=address)
        )

    def go_back(self, session: RegistrationSession) -> RegistrationSession:
        return transition(session, SteppedBack())

    def _require_stage(self, session: RegistrationSession, stage: RegistrationStage) -> None:
        if session.stage != stage:
            raise InvalidTransition(
                f"Operation requires {stage.value}, session is {session.stage.value}"
            )
