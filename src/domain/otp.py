"""
One-time verification codes for email ownership.

Codes are numeric strings drawn from the secrets module. There is no expiry
or attempt limit here; a new issuance simply replaces the session's code.
"""

import logging
import secrets
from dataclasses import dataclass

from .models import IssuedCode
from .notifications import NotificationDispatcher, verification_code_message
from .ports import CheckResult

logger = logging.getLogger(__name__)


@dataclass
class OTPVerifier:
    """Issues verification codes and checks submitted ones."""

    notifier: NotificationDispatcher
    code_length: int = 6

    def issue(self, recipient: str, full_name: str) -> IssuedCode:
        """
        Generate a code and send it to the recipient.

        Delivery failure does not fail issuance: the code is still returned,
        with delivered=False so the caller can offer another channel.
        """
        code = self._generate_code()
        delivered = self.notifier.send_now(verification_code_message(recipient, full_name, code))
        if delivered:
            logger.info("Verification code issued to %s", recipient)
        else:
            logger.warning("Verification code issued to %s but delivery failed", recipient)
        return IssuedCode(code=code, delivered=delivered)

    def check(self, submitted: str | None, issued: str | None) -> CheckResult:
        """
        Compare a submitted code with the issued one in constant time.

        Empty input never matches.
        """
        if not submitted or not issued:
            return CheckResult.MISMATCH
        if secrets.compare_digest(submitted.encode(), issued.encode()):
            return CheckResult.VALID
        return CheckResult.MISMATCH

    def _generate_code(self) -> str:
        """Return a string to preserve leading zeros."""
        return "".join(secrets.choice("0123456789") for _ in range(self.code_length))
