"""Mails one-time passcodes."""

from authgate.core.config import Settings
from authgate.core.errors import ExternalServiceError
from authgate.core.logging import get_logger
from authgate.infrastructure.services.email import (
    EmailProvider,
    ResendProvider,
    ResendSettings,
    SMTPProvider,
    SMTPSettings,
    TemplateRenderer,
)

logger = get_logger(__name__)

OTP_MAIL_SUBJECT = "CollegeMate - OTP Code"

OTP_MAIL_HTML = """\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #222;">
    <h2>CollegeMate</h2>
    <p>Hello {{ email }},</p>
    <p>Use the following security code to continue:</p>
    <p style="font-size: 28px; letter-spacing: 6px; font-weight: bold;">{{ security_code }}</p>
    <p>The code expires in 3 minutes. If you did not request it, you can ignore this email.</p>
  </body>
</html>
"""

OTP_MAIL_TEXT = """\
Hello {{ email }},

Use the following security code to continue: {{ security_code }}

The code expires in 3 minutes. If you did not request it, you can ignore this email.
"""


def build_email_provider(settings: Settings) -> EmailProvider:
    """Create the provider selected by ``email_provider``."""
    if settings.email_provider == "resend":
        return ResendProvider(ResendSettings(api_key=settings.resend_api_key))
    return SMTPProvider(
        SMTPSettings(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
            timeout=settings.external_api_timeout,
        )
    )


class OTPMailer:
    """Renders the OTP mail and hands it to an email provider."""

    def __init__(
        self,
        provider: EmailProvider,
        from_email: str,
        from_name: str,
        reply_to: str | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self._provider = provider
        self._from_email = from_email
        self._from_name = from_name
        self._reply_to = reply_to
        self._renderer = renderer or TemplateRenderer()

    @classmethod
    def from_settings(cls, settings: Settings) -> "OTPMailer":
        return cls(
            build_email_provider(settings),
            from_email=settings.mail_from_email,
            from_name=settings.mail_from_name,
            reply_to=settings.mail_reply_to,
        )

    async def send_code(self, email: str, code: str) -> None:
        """Mail ``code`` to ``email``.

        Raises:
            ExternalServiceError: If the provider fails.
        """
        variables = {"email": email, "security_code": code}
        html_body = self._renderer.render(OTP_MAIL_HTML, variables)
        text_body = self._renderer.render(OTP_MAIL_TEXT, variables)

        try:
            await self._provider.send_email(
                to=email,
                subject=OTP_MAIL_SUBJECT,
                html_body=html_body,
                text_body=text_body,
                from_email=self._from_email,
                from_name=self._from_name,
                reply_to=self._reply_to,
            )
        except Exception as e:
            raise ExternalServiceError("mail", str(e)) from e
