"""SQLAlchemy model for server/admin keys."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from authgate.infrastructure.persistence.database import Base


class ServerAdminKeyModel(Base):
    """Credential for internal callers, keyed by its derived key id."""

    __tablename__ = "server_admin_keys"

    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="hash(nickname, generatedAt ISO-8601, accountType)",
    )
    nickname: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    account_type: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"ServerAdminKeyModel(nickname={self.nickname!r}, account_type={self.account_type!r})"
