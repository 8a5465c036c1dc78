"""SQLAlchemy model for OTP requests."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from authgate.infrastructure.persistence.database import Base


class OTPRequestModel(Base):
    """OTP request keyed by its derived request id.

    The passcode column only ever holds the hash of the mailed code.
    """

    __tablename__ = "otp_requests"

    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="hash(email, purpose, expireAt ISO-8601)",
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    purpose: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="signup, signin or sudo",
    )
    expire_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    passcode: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="hash(email, purpose, code)",
    )
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"OTPRequestModel(id={self.id[:12]!r}..., purpose={self.purpose!r}, verified={self.verified!r})"
