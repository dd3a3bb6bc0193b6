"""
ReportDesk Backend — User SQLAlchemy Model
============================================

What:  ORM model for the `users` table (the credential store).
Who:   Read by the auth dependency on every protected request, written by
       registration and the admin panel.

Table Design:
    - username / email: each unique (enforced by constraint, pre-checked by
      the auth service for a friendlier 409)
    - password_hash: bcrypt hash, the plaintext is never stored
    - role: 'user' | 'admin'; only an admin acting on another account changes it
    - created_at: UTC; admin list is ordered newest first
"""

import enum
from datetime import datetime, timezone
from typing import List, TYPE_CHECKING

from sqlalchemy import DateTime, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reportdesk.database import Base

if TYPE_CHECKING:
    from reportdesk.models.report import Report


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        comment="Login name, at least 3 characters",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the password",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.USER.value,
        server_default=text("'user'"),
        comment="Access role: user, admin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Reports go away with their author (ON DELETE CASCADE on reports.user_id)
    reports: Mapped[List["Report"]] = relationship(
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_users_created_at", created_at.desc()),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
