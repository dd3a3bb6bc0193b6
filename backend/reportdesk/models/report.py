"""
ReportDesk Backend — Report SQLAlchemy Model
==============================================

What:  ORM model for the `reports` table: problem reports filed by users
       against a game/server, triaged by admins through the status field.

Lifecycle:
    pending → in_progress → resolved | closed  (any transition, admin only)
    Owner or admin may edit title/description/server_name or delete.

Query Patterns:
    - List: ORDER BY created_at DESC, optional WHERE status = :status
      → idx_reports_created_at / idx_reports_status
"""

import enum
from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reportdesk.database import Base

if TYPE_CHECKING:
    from reportdesk.models.user import User


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Author of the report",
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    server_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        default=None,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReportStatus.PENDING.value,
        server_default=text("'pending'"),
        comment="pending, in_progress, resolved, closed",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    author: Mapped["User"] = relationship(back_populates="reports")

    __table_args__ = (
        Index("idx_reports_created_at", created_at.desc()),
        Index("idx_reports_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
