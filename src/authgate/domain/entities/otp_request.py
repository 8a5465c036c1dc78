"""OTP request entity.

An OTP request is created when a user asks for a one-time passcode and is
verified at most once when the user enters that code.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class OTPPurpose(str, Enum):
    """What the passcode is going to prove."""

    SIGNUP = "signup"
    SIGNIN = "signin"
    SUDO = "sudo"


class OTPState(str, Enum):
    """Stored state of an OTP request.

    Expiry is not a stored state; it is evaluated against ``expire_at``
    whenever the request is read.
    """

    CREATED = "created"
    VERIFIED = "verified"


@dataclass(frozen=True)
class OTPRequest:
    """OTP request entity.

    Attributes:
        id: Derived request id, hash of (email, purpose, expiry timestamp).
        email: Email address the passcode was sent to.
        purpose: Purpose of the request.
        expire_at: Code-entry deadline; moved to the end of the verification
            window once the request is verified.
        passcode: Hash of (email, purpose, plaintext code).
        verified: Whether the code has already been entered successfully.
    """

    id: str
    email: str
    purpose: OTPPurpose
    expire_at: datetime
    passcode: str
    verified: bool = False

    @property
    def state(self) -> OTPState:
        return OTPState.VERIFIED if self.verified else OTPState.CREATED

    def is_expired(self, now: datetime) -> bool:
        return self.expire_at < now

    def as_verified(self, expire_at: datetime) -> "OTPRequest":
        """Return a verified copy with the advanced expiry."""
        return replace(self, verified=True, expire_at=expire_at)
