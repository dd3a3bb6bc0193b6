"""
ReportDesk Backend — Report Service
=====================================

What:  CRUD for server reports with ownership and role rules.
Who:   Called by routes/reports.py with the authenticated user.

Access rules:
    - Any authenticated user may list and read reports.
    - Owner or admin may edit or delete a report.
    - Only an admin may set `status`; a non-admin who sends it is refused
      even when every other field is valid.

Check order for update (first failure wins):
    NotFound → Forbidden (ownership) → Forbidden (status) → Validation
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ReportDeskError,
    ValidationError,
)
from reportdesk.models.report import Report, ReportStatus
from reportdesk.models.user import User
from reportdesk.schemas.report import ReportOut

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 10

UPDATABLE_FIELDS = ("title", "description", "server_name", "status")


def _to_out(report: Report, author_username: Optional[str]) -> ReportOut:
    out = ReportOut.model_validate(report)
    out.author_username = author_username
    return out


class ReportService:
    """
    Business logic for issue reports.

    Responsibilities:
        - list_reports() / get_report(): any authenticated user
        - create_report(): status always starts at pending
        - update_report() / delete_report(): owner or admin; status is admin-only
    """

    # ── Validation ────────────────────────────────────────────────────────

    def _validate_title(self, title: Optional[str]) -> str:
        if title is None or len(title.strip()) < MIN_TITLE_LENGTH:
            raise ValidationError(
                message=f"Title must be at least {MIN_TITLE_LENGTH} characters",
                field="title",
            )
        return title.strip()

    def _validate_description(self, description: Optional[str]) -> str:
        if description is None or len(description.strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(
                message=f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters",
                field="description",
            )
        return description.strip()

    def _validate_status(self, status: str) -> str:
        if status not in ReportStatus.values():
            raise ValidationError(
                message=f"Invalid status '{status}'",
                field="status",
                context={"allowed": ReportStatus.values()},
            )
        return status

    @staticmethod
    def _can_modify(report: Report, user: User) -> bool:
        return user.is_admin or report.user_id == user.id

    async def _get_or_404(self, db: AsyncSession, report_id: int) -> Report:
        result = await db.execute(select(Report).where(Report.id == report_id))
        report = result.scalar_one_or_none()
        if report is None:
            raise NotFoundError(resource="report", resource_id=str(report_id))
        return report

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_reports(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ReportOut]:
        """
        Newest-first page of reports joined with the author's username.

        Query plan:
            SELECT reports.*, users.username FROM reports JOIN users
            [WHERE status = :status] ORDER BY created_at DESC, id DESC
            LIMIT :limit OFFSET :offset
        """
        if status:
            self._validate_status(status)

        query = select(Report, User.username).join(User, Report.user_id == User.id)
        if status:
            query = query.where(Report.status == status)
        query = (
            query.order_by(desc(Report.created_at), desc(Report.id))
            .limit(limit)
            .offset(offset)
        )

        try:
            result = await db.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing reports: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve reports. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [_to_out(report, username) for report, username in rows]

    async def get_report(self, db: AsyncSession, report_id: int) -> ReportOut:
        result = await db.execute(
            select(Report, User.username)
            .join(User, Report.user_id == User.id)
            .where(Report.id == report_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError(resource="report", resource_id=str(report_id))
        report, username = row
        return _to_out(report, username)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_report(
        self,
        db: AsyncSession,
        author: User,
        title: str,
        description: str,
        server_name: Optional[str] = None,
    ) -> ReportOut:
        title = self._validate_title(title)
        description = self._validate_description(description)

        report = Report(
            user_id=author.id,
            title=title,
            description=description,
            server_name=(server_name or None),
            status=ReportStatus.PENDING.value,
        )
        db.add(report)
        try:
            await db.flush()
            await db.refresh(report)
        except SQLAlchemyError as e:
            logger.error("Database error creating report: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the report. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Report %s created by user %s", report.id, author.id)
        return _to_out(report, author.username)

    async def update_report(
        self,
        db: AsyncSession,
        report_id: int,
        requester: User,
        changes: Dict[str, Any],
    ) -> ReportOut:
        """
        Apply a partial update.

        Args:
            changes: only the keys the client actually sent (exclude_unset)

        Raises:
            NotFoundError, ForbiddenError, ValidationError, DatabaseError
        """
        report = await self._get_or_404(db, report_id)

        if not self._can_modify(report, requester):
            raise ForbiddenError(message="You do not have permission to edit this report")

        changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if changes.get("status") is None:
            changes.pop("status", None)

        if "status" in changes and not requester.is_admin:
            raise ForbiddenError(message="Only administrators can change report status")

        if not changes:
            raise ValidationError(message="No fields to update")

        if "status" in changes:
            self._validate_status(changes["status"])
        if "title" in changes:
            changes["title"] = self._validate_title(changes["title"])
        if "description" in changes:
            changes["description"] = self._validate_description(changes["description"])
        if "server_name" in changes:
            changes["server_name"] = changes["server_name"] or None

        for field, value in changes.items():
            setattr(report, field, value)

        try:
            await db.flush()
            await db.refresh(report)
            author_name = await db.scalar(select(User.username).where(User.id == report.user_id))
        except SQLAlchemyError as e:
            logger.error("Database error updating report %s: %s", report_id, str(e))
            raise DatabaseError(
                message="Could not update the report. Please try again.",
                context={"report_id": report_id},
            )

        logger.info(
            "Report %s updated by user %s: %s",
            report_id,
            requester.id,
            ", ".join(sorted(changes)),
        )
        return _to_out(report, author_name)

    async def delete_report(self, db: AsyncSession, report_id: int, requester: User) -> None:
        try:
            report = await self._get_or_404(db, report_id)

            if not self._can_modify(report, requester):
                raise ForbiddenError(message="You do not have permission to delete this report")

            await db.delete(report)
            await db.flush()
        except ReportDeskError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting report %s: %s", report_id, str(e))
            raise DatabaseError(
                message="Could not delete the report. Please try again.",
                context={"report_id": report_id},
            )

        logger.info("Report %s deleted by user %s", report_id, requester.id)


report_service = ReportService()
