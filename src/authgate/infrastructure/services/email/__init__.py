"""Email providers and template rendering."""

from authgate.infrastructure.services.email.email_provider import EmailProvider
from authgate.infrastructure.services.email.resend_provider import (
    ResendProvider,
    ResendSettings,
)
from authgate.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from authgate.infrastructure.services.email.template_renderer import TemplateRenderer

__all__ = [
    "EmailProvider",
    "ResendProvider",
    "ResendSettings",
    "SMTPProvider",
    "SMTPSettings",
    "TemplateRenderer",
]
