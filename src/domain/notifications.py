"""
Notification content and non-blocking dispatch.

The domain supplies subject and body for three triggers (verification code,
welcome, vote confirmation). Delivery is delegated to a NotificationSender;
a failed delivery is logged and never fails the operation that triggered it.
"""

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass

from .ports import NotificationSender

logger = logging.getLogger(__name__)

APP_NAME = "UniVote"


@dataclass(frozen=True)
class Notification:
    to: str
    subject: str
    body: str


def verification_code_message(to: str, full_name: str, code: str) -> Notification:
    body = (
        f"Hello {full_name},\n\n"
        f"Your {APP_NAME} verification code is:\n\n"
        f"    {code}\n\n"
        "Enter this code to continue your registration.\n"
        "If you did not request this, please ignore this email.\n\n"
        f"- The {APP_NAME} Team\n"
    )
    return Notification(to=to, subject=f"{APP_NAME} - Email Verification Code", body=body)


def welcome_message(to: str, full_name: str) -> Notification:
    body = (
        f"Hello {full_name},\n\n"
        f"Your {APP_NAME} account is verified and your wallet is connected.\n"
        "You can now vote in any active election.\n\n"
        f"- The {APP_NAME} Team\n"
    )
    return Notification(
        to=to, subject=f"Welcome to {APP_NAME} - Your Account is Ready!", body=body
    )


def vote_confirmation_message(
    to: str, full_name: str, candidate_name: str, election_title: str, vote_hash: str
) -> Notification:
    body = (
        f"Hello {full_name},\n\n"
        f"Your vote for {candidate_name} in \"{election_title}\" has been recorded.\n\n"
        f"Vote hash: {vote_hash}\n\n"
        "Keep this hash for your records; it identifies your vote in audits.\n\n"
        f"- The {APP_NAME} Team\n"
    )
    return Notification(to=to, subject=f"Vote Confirmation - {election_title}", body=body)


@dataclass
class NotificationDispatcher:
    """
    Sends notifications through the sender port.

    send_now() blocks and reports the outcome; dispatch() hands the send to
    the executor and returns immediately. Without an executor, dispatch()
    runs inline and returns an already-completed future.
    """

    sender: NotificationSender
    executor: Executor | None = None

    def send_now(self, message: Notification) -> bool:
        """Send a message, returning False on any delivery failure."""
        try:
            sent = bool(self.sender.send(message.to, message.subject, message.body))
        except Exception:
            logger.exception("Notification to %s failed: %s", message.to, message.subject)
            return False
        if not sent:
            logger.warning("Notification to %s not delivered: %s", message.to, message.subject)
        return sent

    def dispatch(self, message: Notification) -> "Future[bool]":
        """Send a message without gating the caller on the outcome."""
        if self.executor is None:
            future: Future[bool] = Future()
            future.set_result(self.send_now(message))
            return future
        return self.executor.submit(self.send_now, message)
