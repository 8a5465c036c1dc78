"""Unit tests for the SMTP email provider."""

import unittest.mock as mock

import pytest

from authgate.infrastructure.services.email.smtp_provider import (
    SMTPProvider,
    SMTPSettings,
)


@pytest.fixture
def smtp_settings() -> SMTPSettings:
    """Fixture for SMTP settings."""
    return SMTPSettings(
        host="smtp.example.com",
        port=587,
        username="test_user",
        password="test_password",
    )


@pytest.fixture
def smtp_provider(smtp_settings: SMTPSettings) -> SMTPProvider:
    """Fixture for SMTP provider."""
    return SMTPProvider(smtp_settings)


@pytest.mark.asyncio
async def test_smtp_send_email_success(smtp_provider: SMTPProvider) -> None:
    """Test successful email sending."""
    with mock.patch("aiosmtplib.SMTP", autospec=True) as mock_smtp_class:
        mock_smtp = mock_smtp_class.return_value.__aenter__.return_value

        success = await smtp_provider.send_email(
            to="student@wisc.edu",
            subject="CollegeMate - OTP Code",
            html_body="<p>123456</p>",
            text_body="123456",
            from_email="no-reply@collegemate.app",
            from_name="CollegeMate",
            reply_to="support@collegemate.app",
        )

        assert success is True
        mock_smtp_class.assert_called_once_with(
            hostname="smtp.example.com",
            port=587,
            use_tls=False,
            timeout=10,
        )
        mock_smtp.starttls.assert_called_once()
        mock_smtp.login.assert_called_once_with("test_user", "test_password")

        sent_message = mock_smtp.send_message.call_args[0][0]
        assert sent_message["Subject"] == "CollegeMate - OTP Code"
        assert sent_message["To"] == "student@wisc.edu"
        assert sent_message["Reply-To"] == "support@collegemate.app"
        assert "CollegeMate <no-reply@collegemate.app>" in sent_message["From"]


@pytest.mark.asyncio
async def test_smtp_ssl_skips_starttls(smtp_settings: SMTPSettings) -> None:
    provider = SMTPProvider(
        smtp_settings.model_copy(update={"port": 465, "use_ssl": True, "use_tls": False})
    )

    with mock.patch("aiosmtplib.SMTP", autospec=True) as mock_smtp_class:
        mock_smtp = mock_smtp_class.return_value.__aenter__.return_value

        await provider.send_email(
            to="student@wisc.edu",
            subject="Subject",
            html_body="<p>Body</p>",
            text_body="Body",
            from_email="no-reply@collegemate.app",
            from_name="CollegeMate",
        )

        mock_smtp_class.assert_called_once_with(
            hostname="smtp.example.com",
            port=465,
            use_tls=True,
            timeout=10,
        )
        mock_smtp.starttls.assert_not_called()


@pytest.mark.asyncio
async def test_smtp_without_credentials_skips_login(smtp_settings: SMTPSettings) -> None:
    provider = SMTPProvider(smtp_settings.model_copy(update={"username": "", "password": ""}))

    with mock.patch("aiosmtplib.SMTP", autospec=True) as mock_smtp_class:
        mock_smtp = mock_smtp_class.return_value.__aenter__.return_value
        result = await provider.send_email(
            to="student@wisc.edu",
            subject="Subject",
            html_body="<p>Body</p>",
            text_body="Body",
            from_email="no-reply@collegemate.app",
            from_name="CollegeMate",
        )

        assert result is True
        mock_smtp.login.assert_not_called()
        mock_smtp.send_message.assert_called_once()


@pytest.mark.asyncio
async def test_smtp_send_failure_propagates(smtp_provider: SMTPProvider) -> None:
    with mock.patch("aiosmtplib.SMTP", autospec=True) as mock_smtp_class:
        mock_smtp = mock_smtp_class.return_value.__aenter__.return_value
        mock_smtp.send_message.side_effect = OSError("connection reset")

        with pytest.raises(OSError):
            await smtp_provider.send_email(
                to="student@wisc.edu",
                subject="Subject",
                html_body="<p>Body</p>",
                text_body="Body",
                from_email="no-reply@collegemate.app",
                from_name="CollegeMate",
            )
