"""
Unit tests for SmtpEmailSender adapter.

smtplib.SMTP is patched; no network connection is made.
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.smtp.smtp import SmtpEmailSender
from src.domain.exceptions import NotificationFailed


@pytest.fixture
def smtp_server():
    with patch("src.adapters.smtp.smtp.smtplib.SMTP") as smtp_class:
        server = MagicMock()
        smtp_class.return_value.__enter__.return_value = server
        smtp_class.return_value.__exit__.return_value = False
        yield smtp_class, server


def make_sender(**overrides) -> SmtpEmailSender:
    options = {
        "host": "smtp.example.edu",
        "port": 587,
        "sender": "noreply@example.edu",
        "username": "mailer",
        "password": "hunter22",
    }
    options.update(overrides)
    return SmtpEmailSender(**options)


class TestSend:
    """Tests for SmtpEmailSender.send()."""

    def test_sends_message(self, smtp_server) -> None:
        """Connects, upgrades to TLS, logs in and sends."""
        smtp_class, server = smtp_server

        assert make_sender().send("ada@example.edu", "Hello", "Body text") is True

        smtp_class.assert_called_once_with("smtp.example.edu", 587, timeout=10.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "hunter22")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "ada@example.edu"
        assert message["From"] == "noreply@example.edu"
        assert message["Subject"] == "Hello"
        assert "Body text" in message.get_content()

    def test_plain_connection_without_login(self, smtp_server) -> None:
        """No TLS and no credentials when not configured."""
        _, server = smtp_server

        make_sender(username="", password="", use_tls=False).send("a@example.edu", "s", "b")

        server.starttls.assert_not_called()
        server.login.assert_not_called()

    @pytest.mark.parametrize(
        "error", [smtplib.SMTPRecipientsRefused({}), ConnectionRefusedError("refused")]
    )
    def test_transport_failure_raises(self, smtp_server, error: Exception) -> None:
        """SMTP and socket errors surface as NotificationFailed."""
        _, server = smtp_server
        server.send_message.side_effect = error

        with pytest.raises(NotificationFailed) as exc_info:
            make_sender().send("ada@example.edu", "s", "b")

        assert exc_info.value.__cause__ is error
