"""
ReportDesk Backend — Page Content SQLAlchemy Models
=====================================================

What:  `page_content` holds the admin-editable pages served to the
       front-end; `page_content_history` keeps a snapshot of every version a
       page has been overwritten from.

Versioning:
    Active(version=v) → admin update → Active(version=v+1)
    and exactly one history row (page_id, content_text=<content at v>, version=v).

    (page_id, version) is unique in history, so two transactions that both
    read version v can never both record the v → v+1 transition.

Retention:
    history.page_id is deliberately NOT a foreign key. Deleting a page leaves
    its history rows in place (audit trail of removed pages). page ids
    are never reused (AUTOINCREMENT on SQLite, sequences elsewhere), so
    those rows never surface under a later page.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from reportdesk.database import Base


class PageContent(Base):
    __tablename__ = "page_content"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    page_name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="Stable key the front-end fetches by, e.g. 'rules'",
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default=text("1"),
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
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

    # SQLite: never hand a deleted page's id to a new page
    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self) -> str:
        return f"<PageContent(page_name='{self.page_name}', version={self.version})>"


class PageContentHistory(Base):
    __tablename__ = "page_content_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    page_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="page_content.id at snapshot time; survives page deletion",
    )

    content_text: Mapped[str] = mapped_column(Text, nullable=False)

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="The version this snapshot was replaced from",
    )

    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("page_id", "version", name="uq_page_content_history_version"),
        Index("idx_page_content_history_page", "page_id"),
    )

    def __repr__(self) -> str:
        return f"<PageContentHistory(page_id={self.page_id}, version={self.version})>"
