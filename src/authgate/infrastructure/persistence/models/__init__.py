"""SQLAlchemy models for AuthGate tables.

All models inherit from the Base class defined in database.py and are
created on application startup outside production.
"""

from authgate.infrastructure.persistence.models.otp_request import OTPRequestModel
from authgate.infrastructure.persistence.models.refresh_token import RefreshTokenModel
from authgate.infrastructure.persistence.models.server_admin_key import ServerAdminKeyModel

__all__ = [
    "OTPRequestModel",
    "RefreshTokenModel",
    "ServerAdminKeyModel",
]
