"""Federation attempt model (OAuth redirect round trip)."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class FederationStatus(str, enum.Enum):
    """
    Состояния одной попытки входа через провайдера.

    REDIRECTED -> PROVIDER_CALLBACK -> RESOLVED | FAILED
    """

    REDIRECTED = "REDIRECTED"
    PROVIDER_CALLBACK = "PROVIDER_CALLBACK"
    RESOLVED = "RESOLVED"
    FAILED = "FAILED"


class FederationAttempt(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Минимальная запись, переживающая редирект к провайдеру.

    Хранит только state (correlation token) и статус автомата.
    """

    __tablename__ = "federation_attempts"

    state: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[FederationStatus] = mapped_column(
        SQLEnum(FederationStatus, native_enum=False),
        default=FederationStatus.REDIRECTED,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<FederationAttempt(id={self.id}, provider='{self.provider}', status={self.status.value})>"
