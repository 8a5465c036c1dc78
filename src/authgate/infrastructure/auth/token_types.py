"""Token claim values and decoded token views."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from authgate.domain.entities.server_admin_key import AccountType


class TokenClass(str, Enum):
    """Value of the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenType(str, Enum):
    """Value of the ``tokenType`` claim."""

    USER = "user"
    SERVER_ADMIN = "serverAdmin"


@dataclass(frozen=True)
class IssuedRefreshToken:
    """A signed refresh token and the instant it stops being valid."""

    token: str
    expire_at: datetime


@dataclass(frozen=True)
class IssuedServerAdminToken:
    token: str
    expire_at: datetime


@dataclass(frozen=True)
class RefreshTokenPayload:
    """Logical payload of a refresh token, without iat/exp/jti."""

    id: str
    type: TokenClass
    token_type: TokenType


@dataclass(frozen=True)
class ServerAdminIdentity:
    """Who presented a server-admin token."""

    nickname: str
    account_type: AccountType
