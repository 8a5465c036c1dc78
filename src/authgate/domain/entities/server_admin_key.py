"""Server/admin key entity.

Internal callers (other services and administrators) log in with the key id,
which is derived from the nickname, generation time and account type.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AccountType(str, Enum):
    """Closed set of roles a server/admin key can carry."""

    ADMIN = "admin"
    SERVER_AUTHENTICATION = "server - authentication"
    SERVER_USER = "server - user"
    SERVER_FRIEND = "server - friend"
    SERVER_SCHEDULE = "server - schedule"
    SERVER_NOTIFICATION = "server - notification"
    SERVER_MISCELLANEOUS = "server - miscellaneous"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class ServerAdminKeyMetadata:
    """Listing view of a key; never contains the key id."""

    nickname: str
    generated_at: datetime
    account_type: AccountType


@dataclass(frozen=True)
class ServerAdminKey:
    """Server/admin key record.

    Attributes:
        id: Derived key id, hash of (nickname, generated_at, account_type).
        nickname: Unique human-readable name.
        generated_at: Generation time, whole seconds.
        account_type: Role granted by the key.
    """

    id: str
    nickname: str
    generated_at: datetime
    account_type: AccountType

    def metadata(self) -> ServerAdminKeyMetadata:
        return ServerAdminKeyMetadata(
            nickname=self.nickname,
            generated_at=self.generated_at,
            account_type=self.account_type,
        )
