"""Repository implementations for data access.

Repositories provide an abstraction over database operations,
converting between SQLAlchemy models and domain entities.
"""

from authgate.infrastructure.persistence.repositories.otp_repository import OTPRepository
from authgate.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from authgate.infrastructure.persistence.repositories.server_admin_key_repository import (
    ServerAdminKeyRepository,
)

__all__ = [
    "OTPRepository",
    "RefreshTokenRepository",
    "ServerAdminKeyRepository",
]
