"""User profile and Terms-and-Conditions views.

Both documents are owned by other services; these are read-only views of
the parts the gateway needs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def parse_version(version: str) -> tuple[int, ...]:
    """Turn ``v1.0.2`` (or ``1.0.2``) into ``(1, 0, 2)``.

    Non-numeric components count as 0.
    """
    parts = version.strip().lstrip("vV").split(".")
    numbers = []
    for part in parts:
        digits = "".join(ch for ch in part if ch.isdigit())
        numbers.append(int(digits) if digits else 0)
    return tuple(numbers)


@dataclass(frozen=True)
class TermsAndConditions:
    """Latest published Terms and Conditions."""

    version: str
    created_at: datetime | None = None
    content: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UserProfile:
    """User profile as returned by the User API.

    Attributes:
        email: Email address (the profile's key).
        nickname: Display name.
        deleted: Soft-deleted profiles still exist but cannot sign in.
        locked: Locked profiles cannot sign in.
        tnc_version: Version of the Terms and Conditions the user accepted.
    """

    email: str
    nickname: str = ""
    last_login: datetime | None = None
    sign_up_date: datetime | None = None
    nickname_changed: datetime | None = None
    deleted: bool = False
    deleted_at: datetime | None = None
    locked: bool = False
    locked_at: datetime | None = None
    locked_description: str | None = None
    major: str | None = None
    graduation_year: int | None = None
    tnc_version: str | None = None

    def needs_tnc_update(self, latest: TermsAndConditions) -> bool:
        """Whether the accepted TNC version is older than the latest one."""
        if not self.tnc_version:
            return True
        return parse_version(self.tnc_version) < parse_version(latest.version)
