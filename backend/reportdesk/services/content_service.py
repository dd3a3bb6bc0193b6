"""
ReportDesk Backend — Content Service (versioned page store)
=============================================================

What:  Public page fetch plus admin create/update/delete/list/history for
       the `page_content` table.
Who:   Called by routes/content.py.

Update Flow (one transaction):
    ┌──────────────┐   ┌──────────────────┐   ┌────────────────────┐   ┌────────┐
    │ SELECT page  │──▶│ INSERT history   │──▶│ UPDATE page        │──▶│ COMMIT │
    │ FOR UPDATE   │   │ (content, v)     │   │ SET version = v+1  │   └────────┘
    └──────────────┘   └──────────────────┘   │ WHERE version = v  │
                                              └────────────────────┘
    Any exception between the SELECT and the COMMIT rolls back every write:
    no version bump without its snapshot, no snapshot without its bump.

Concurrency:
    - FOR UPDATE serializes concurrent admins on PostgreSQL.
    - The version-guarded UPDATE and the unique (page_id, version) history
      constraint stop a second writer on backends without row locks.
    The losing writer gets ConflictError (409) and leaves nothing behind.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.database import transactional
from reportdesk.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ReportDeskError,
    ValidationError,
)
from reportdesk.models.page_content import PageContent, PageContentHistory
from reportdesk.models.user import User
from reportdesk.schemas.content import PageHistoryEntry, PageOut, PageSummary

logger = logging.getLogger(__name__)


class ContentService:
    """
    Business logic for the versioned page store.

    Responsibilities:
        - get_page() / list_pages() / get_history(): reads
        - create_page() / delete_page(): admin lifecycle
        - update_page(): snapshot + version bump inside one transaction

    Error Handling Strategy:
        SQLAlchemy failures become DatabaseError; a lost version race or a
        duplicate history row becomes ConflictError. Either way nothing of the
        update is left behind.
    """

    async def _get_page_or_404(
        self,
        db: AsyncSession,
        page_name: str,
        for_update: bool = False,
    ) -> PageContent:
        query = select(PageContent).where(PageContent.page_name == page_name)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        page = result.scalar_one_or_none()
        if page is None:
            raise NotFoundError(resource="page", resource_id=page_name)
        return page

    # ── Public ────────────────────────────────────────────────────────────

    async def get_page(self, db: AsyncSession, page_name: str) -> PageOut:
        """Active page by name; inactive and missing pages are both 404."""
        result = await db.execute(
            select(PageContent).where(
                PageContent.page_name == page_name,
                PageContent.is_active.is_(True),
            )
        )
        page = result.scalar_one_or_none()
        if page is None:
            raise NotFoundError(resource="page", resource_id=page_name)
        return PageOut.model_validate(page)

    # ── Admin ─────────────────────────────────────────────────────────────

    async def list_pages(self, db: AsyncSession) -> List[PageSummary]:
        result = await db.execute(select(PageContent).order_by(PageContent.page_name))
        return [PageSummary.model_validate(page) for page in result.scalars().all()]

    async def get_history(self, db: AsyncSession, page_name: str) -> List[PageHistoryEntry]:
        """
        Snapshots of a page, newest version first, with the editor's username.

        Editors who have since been deleted show up as created_by=None.
        """
        page = await self._get_page_or_404(db, page_name)

        result = await db.execute(
            select(PageContentHistory, User.username)
            .outerjoin(User, PageContentHistory.created_by == User.id)
            .where(PageContentHistory.page_id == page.id)
            .order_by(PageContentHistory.version.desc())
        )
        return [
            PageHistoryEntry(
                id=entry.id,
                version=entry.version,
                content_text=entry.content_text,
                created_at=entry.created_at,
                created_by=username,
            )
            for entry, username in result.all()
        ]

    async def update_page(
        self,
        db: AsyncSession,
        page_name: str,
        content: Optional[str],
        actor: User,
        title: Optional[str] = None,
    ) -> PageOut:
        """
        Overwrite a page's content, recording the previous version in history.

        Args:
            title: new title; None keeps the current one

        Raises:
            ValidationError: content missing or blank
            NotFoundError: no page with that name
            ConflictError: a concurrent update committed first
            DatabaseError: any other database failure (everything rolled back)
        """
        if content is None or not content.strip():
            raise ValidationError(message="Content is required", field="content")

        current_version = None
        try:
            async with transactional(db):
                # (a) current state, row-locked where supported
                page = await self._get_page_or_404(db, page_name, for_update=True)
                page_id = page.id
                current_version = page.version

                # (b) snapshot of the pre-update content and version
                db.add(
                    PageContentHistory(
                        page_id=page_id,
                        content_text=page.content,
                        version=current_version,
                        created_by=actor.id,
                    )
                )
                await db.flush()

                # (c) bump, guarded on the version read in (a)
                values = {
                    "content": content,
                    "version": current_version + 1,
                    "updated_by": actor.id,
                }
                if title is not None:
                    values["title"] = title
                result = await db.execute(
                    update(PageContent)
                    .where(
                        PageContent.id == page_id,
                        PageContent.version == current_version,
                    )
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise ConflictError(
                        message="The page was modified by another update. Reload and try again.",
                        context={"page_name": page_name, "expected_version": current_version},
                    )
            # (d) committed by transactional()
        except IntegrityError:
            # Another transaction already recorded the snapshot for this version
            logger.warning("Concurrent update of page %s at version %s", page_name, current_version)
            raise ConflictError(
                message="The page was modified by another update. Reload and try again.",
                context={"page_name": page_name},
            )
        except ReportDeskError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating page %s: %s", page_name, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the page. Please try again.",
                context={"page_name": page_name, "error_type": type(e).__name__},
            )

        await db.refresh(page)
        logger.info(
            "Page %s updated to version %d by user %s",
            page_name,
            page.version,
            actor.id,
        )
        return PageOut.model_validate(page)

    async def create_page(
        self,
        db: AsyncSession,
        page_name: Optional[str],
        content: Optional[str],
        actor: User,
        title: Optional[str] = None,
    ) -> PageOut:
        """
        Insert a new active page at version 1.

        Raises:
            ValidationError: page name or content missing
            ConflictError: page name already in use
        """
        page_name = (page_name or "").strip()
        if not page_name or content is None or not content.strip():
            raise ValidationError(message="Page name and content are required")

        existing = await db.execute(
            select(PageContent.id).where(PageContent.page_name == page_name)
        )
        if existing.first() is not None:
            raise ConflictError(
                message=f"A page named '{page_name}' already exists",
                context={"page_name": page_name},
            )

        page = PageContent(
            page_name=page_name,
            title=title,
            content=content,
            version=1,
            is_active=True,
            updated_by=actor.id,
        )
        db.add(page)
        try:
            await db.flush()
            await db.refresh(page)
        except IntegrityError:
            raise ConflictError(
                message=f"A page named '{page_name}' already exists",
                context={"page_name": page_name},
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating page %s: %s", page_name, str(e))
            raise DatabaseError(
                message="Could not create the page. Please try again.",
                context={"page_name": page_name},
            )

        logger.info("Page %s created by user %s", page_name, actor.id)
        return PageOut.model_validate(page)

    async def delete_page(self, db: AsyncSession, page_name: str, actor: User) -> None:
        """Remove a page; its history rows stay behind for audit."""
        page = await self._get_page_or_404(db, page_name)
        await db.delete(page)
        await db.flush()
        logger.info("Page %s (id=%s) deleted by user %s", page_name, page.id, actor.id)


content_service = ContentService()
