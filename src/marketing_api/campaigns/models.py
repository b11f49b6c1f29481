"""
SQLAlchemy models for campaigns.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketing_api.shared.database import Base

if TYPE_CHECKING:
    from marketing_api.auth.models import User


class CampaignStatus(str, Enum):
    """Campaign lifecycle status. New campaigns start as ``DRAFT``."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so stored and submitted values compare."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Campaign(Base):
    """Marketing campaign owned by a user."""

    __tablename__ = "campaigns"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[CampaignStatus] = mapped_column(
        SQLEnum(
            CampaignStatus,
            name="campaign_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=CampaignStatus.DRAFT,
        index=True,
    )
    start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    budget: Mapped[float] = mapped_column(
        Numeric(14, 2, asdecimal=False),
        nullable=False,
        default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="campaigns",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint("budget >= 0", name="check_budget_non_negative"),
        CheckConstraint(
            "start_date IS NULL OR end_date IS NULL OR end_date >= start_date",
            name="check_schedule_order",
        ),
    )

    def __repr__(self) -> str:
        return f"<Campaign(id={self.id}, title='{self.title}', status={self.status.value})>"
