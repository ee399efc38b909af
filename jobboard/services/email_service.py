"""
Email Service - SMTP delivery for every outgoing message.

Used for:
- Candidate notifications rendered from templates (HTML)
- Organization verification links (HTML)
- One-time codes for registration and password reset (plain text)

When SMTP_HOST is not configured the message is logged instead of sent,
so the API can run locally without a mail server.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional

from jobboard.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class EmailDeliveryError(Exception):
    """Raised when the SMTP server (or the network) rejects a message."""


class EmailService:
    """
    Thin wrapper around smtplib.

    SMTP factories are injectable so tests never open sockets.
    """

    def __init__(
        self,
        settings: Settings = None,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.settings = settings or get_settings()
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def build_message(self, to: str, subject: str, html_body: str = None, text_body: str = None) -> EmailMessage:
        """Build a message with a plain-text part and an optional HTML alternative."""
        message = EmailMessage()
        message["From"] = self.settings.sender_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text_body or "This message requires an HTML-capable email client.")
        if html_body is not None:
            message.add_alternative(html_body, subtype="html")
        return message

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Send an HTML email.

        Raises:
            EmailDeliveryError: If delivery fails
        """
        self._deliver(self._compose(to, subject, html_body=html_body))

    def send_text(self, to: str, subject: str, text: str) -> None:
        """Send a plain-text email (one-time codes)."""
        self._deliver(self._compose(to, subject, text_body=text))

    def _compose(self, to: str, subject: str, **bodies) -> EmailMessage:
        # Header values with CR/LF are refused by the email package
        try:
            return self.build_message(to, subject, **bodies)
        except ValueError as e:
            logger.error(f"Could not compose email to {to!r}: {e}")
            raise EmailDeliveryError(f"Invalid message: {e}") from e

    def _deliver(self, message: EmailMessage) -> None:
        cfg = self.settings
        if not cfg.smtp_host:
            logger.warning("SMTP_HOST not set - logging email instead of sending")
            logger.info(f"EMAIL TO: {message['To']} | SUBJECT: {message['Subject']}")
            return

        smtp = None
        try:
            if cfg.smtp_port == IMPLICIT_TLS_PORT:
                logger.debug(f"Connecting to {cfg.smtp_host}:{cfg.smtp_port} with implicit TLS")
                smtp = self.smtp_ssl_factory(
                    cfg.smtp_host, cfg.smtp_port,
                    context=ssl.create_default_context(), timeout=cfg.smtp_timeout
                )
            else:
                logger.debug(f"Connecting to {cfg.smtp_host}:{cfg.smtp_port}")
                smtp = self.smtp_factory(cfg.smtp_host, cfg.smtp_port, timeout=cfg.smtp_timeout)
                if cfg.smtp_use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if cfg.smtp_user and cfg.smtp_password:
                smtp.login(cfg.smtp_user, cfg.smtp_password)

            smtp.send_message(message)
            logger.info(f"Email sent to {message['To']}")

        except smtplib.SMTPException as e:
            logger.error(f"SMTP error sending to {message['To']}: {e}")
            raise EmailDeliveryError(f"SMTP error: {e}") from e
        except OSError as e:
            logger.error(f"Network error sending to {message['To']}: {e}")
            raise EmailDeliveryError(f"Network error: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def get_email_service() -> EmailService:
    """FastAPI dependency."""
    return EmailService()
