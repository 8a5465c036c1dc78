"""Domain entities for AuthGate.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from authgate.domain.entities.otp_request import OTPPurpose, OTPRequest, OTPState
from authgate.domain.entities.refresh_token import RefreshTokenRecord, hash_refresh_token
from authgate.domain.entities.server_admin_key import (
    AccountType,
    ServerAdminKey,
    ServerAdminKeyMetadata,
)
from authgate.domain.entities.user_profile import TermsAndConditions, UserProfile

__all__ = [
    "AccountType",
    "OTPPurpose",
    "OTPRequest",
    "OTPState",
    "RefreshTokenRecord",
    "ServerAdminKey",
    "ServerAdminKeyMetadata",
    "TermsAndConditions",
    "UserProfile",
    "hash_refresh_token",
]
