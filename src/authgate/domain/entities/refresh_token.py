"""Refresh token entity.

Only a SHA-256 digest of the signed token is stored; the record itself is
keyed by a server-generated UUID.
"""

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime


def hash_refresh_token(token: str) -> str:
    """Digest used to look a signed refresh token up in the store."""
    return hashlib.sha256(token.encode()).hexdigest()


@dataclass
class RefreshTokenRecord:
    """Persisted refresh token.

    Attributes:
        email: Subject of the token.
        token_hash: SHA-256 hex digest of the signed token.
        expire_at: When the record stops being accepted.
        id: Server-generated primary key.
    """

    email: str
    token_hash: str
    expire_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def is_expired(self, now: datetime) -> bool:
        return self.expire_at < now
