"""Tests for EmailService with mocked SMTP factories."""

import logging
import smtplib
from unittest.mock import MagicMock

import pytest

from jobboard.core.config import Settings
from jobboard.services.email_service import EmailDeliveryError, EmailService


def make_settings(**overrides):
    values = dict(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer@example.com",
        smtp_password="secret",
        smtp_use_tls=True,
        mail_sender_name="HR Team",
        mail_from=None,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def smtp():
    return MagicMock()


@pytest.fixture
def smtp_factory(smtp):
    return MagicMock(return_value=smtp)


class TestBuildMessage:

    def test_html_message_has_alternative(self):
        service = EmailService(settings=make_settings())
        message = service.build_message("ana@example.com", "Hello", html_body="<p>Hi</p>")

        assert message["To"] == "ana@example.com"
        assert message["Subject"] == "Hello"
        assert message["From"] == '"HR Team" <mailer@example.com>'
        assert message.is_multipart()
        html_part = message.get_body(preferencelist=("html",))
        assert "<p>Hi</p>" in html_part.get_content()

    def test_text_message_is_single_part(self):
        service = EmailService(settings=make_settings(mail_from="jobs@acme.example"))
        message = service.build_message("ana@example.com", "Code", text_body="Your code is 1234")

        assert not message.is_multipart()
        assert "Your code is 1234" in message.get_content()
        assert message["From"] == '"HR Team" <jobs@acme.example>'


class TestDelivery:

    def test_starttls_login_send_and_quit(self, smtp, smtp_factory):
        service = EmailService(settings=make_settings(), smtp_factory=smtp_factory)

        service.send("ana@example.com", "Hello", "<p>Hi</p>")

        smtp_factory.assert_called_once_with("smtp.example.com", 587, timeout=30.0)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("mailer@example.com", "secret")
        smtp.send_message.assert_called_once()
        sent = smtp.send_message.call_args[0][0]
        assert sent["To"] == "ana@example.com"
        smtp.quit.assert_called_once()

    def test_no_tls_and_no_login_without_credentials(self, smtp, smtp_factory):
        settings = make_settings(smtp_use_tls=False, smtp_user=None, smtp_password=None)
        service = EmailService(settings=settings, smtp_factory=smtp_factory)

        service.send_text("ana@example.com", "Code", "1234")

        smtp.starttls.assert_not_called()
        smtp.login.assert_not_called()
        smtp.send_message.assert_called_once()

    def test_port_465_uses_implicit_tls(self, smtp, smtp_factory):
        ssl_factory = MagicMock(return_value=smtp)
        service = EmailService(settings=make_settings(smtp_port=465),
                               smtp_factory=smtp_factory, smtp_ssl_factory=ssl_factory)

        service.send("ana@example.com", "Hello", "<p>Hi</p>")

        smtp_factory.assert_not_called()
        args, kwargs = ssl_factory.call_args
        assert args == ("smtp.example.com", 465)
        assert "context" in kwargs
        smtp.starttls.assert_not_called()
        smtp.send_message.assert_called_once()

    def test_smtp_error_is_wrapped_and_connection_closed(self, smtp, smtp_factory):
        smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({"ana@example.com": (550, b"no")})
        service = EmailService(settings=make_settings(), smtp_factory=smtp_factory)

        with pytest.raises(EmailDeliveryError) as exc:
            service.send("ana@example.com", "Hello", "<p>Hi</p>")

        assert str(exc.value).startswith("SMTP error")
        smtp.quit.assert_called_once()

    def test_network_error_is_wrapped(self, smtp_factory):
        smtp_factory.side_effect = ConnectionRefusedError("refused")
        service = EmailService(settings=make_settings(), smtp_factory=smtp_factory)

        with pytest.raises(EmailDeliveryError) as exc:
            service.send("ana@example.com", "Hello", "<p>Hi</p>")

        assert str(exc.value).startswith("Network error")

    def test_quit_failure_does_not_mask_success(self, smtp, smtp_factory):
        smtp.quit.side_effect = smtplib.SMTPServerDisconnected("gone")
        service = EmailService(settings=make_settings(), smtp_factory=smtp_factory)

        service.send("ana@example.com", "Hello", "<p>Hi</p>")

        smtp.send_message.assert_called_once()

    @pytest.mark.parametrize("to, subject", [
        ("ana@example.com", "Invite\nBcc: x@evil.example"),
        ("ana@example.com\r\nBcc: x@evil.example", "Invite"),
    ])
    def test_line_breaks_in_headers_are_a_delivery_error(self, smtp_factory, to, subject):
        service = EmailService(settings=make_settings(), smtp_factory=smtp_factory)

        with pytest.raises(EmailDeliveryError) as exc:
            service.send(to, subject, "<p>Hi</p>")

        assert str(exc.value).startswith("Invalid message")
        smtp_factory.assert_not_called()

    def test_line_breaks_in_text_email_are_a_delivery_error(self, smtp_factory):
        service = EmailService(settings=make_settings(), smtp_factory=smtp_factory)

        with pytest.raises(EmailDeliveryError):
            service.send_text("ana@example.com", "Code\r\nX-Injected: 1", "1234")

        smtp_factory.assert_not_called()

    def test_without_host_only_logs(self, smtp_factory, caplog):
        service = EmailService(settings=make_settings(smtp_host=""), smtp_factory=smtp_factory)

        with caplog.at_level(logging.INFO, logger="jobboard.services.email_service"):
            service.send("ana@example.com", "Hello", "<p>Hi</p>")

        smtp_factory.assert_not_called()
        assert "ana@example.com" in caplog.text
