"""
ReportDesk Backend — Admin User Management Service
====================================================

What:  User listing, role changes, deletion and dashboard statistics for
       the admin panel.
Rule:  An admin can never change the role of, or delete, their own account
       through these operations (so the last admin can't lock themselves out).
"""

import logging
from typing import List

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.exceptions import NotFoundError, ValidationError
from reportdesk.models.page_content import PageContent
from reportdesk.models.report import Report, ReportStatus
from reportdesk.models.user import Role, User
from reportdesk.schemas.user import StatsResponse, UserOut

logger = logging.getLogger(__name__)


class UserService:
    """Admin-side account management and dashboard statistics."""

    async def _get_or_404(self, db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def list_users(self, db: AsyncSession) -> List[UserOut]:
        result = await db.execute(select(User).order_by(desc(User.created_at), desc(User.id)))
        return [UserOut.model_validate(user) for user in result.scalars().all()]

    async def change_role(
        self,
        db: AsyncSession,
        user_id: int,
        role: str,
        actor: User,
    ) -> UserOut:
        """
        Raises:
            ValidationError: unknown role, or the actor targeting themselves
            NotFoundError: no such user
        """
        allowed = [r.value for r in Role]
        if role not in allowed:
            raise ValidationError(
                message=f"Invalid role '{role}'",
                field="role",
                context={"allowed": allowed},
            )
        if user_id == actor.id:
            raise ValidationError(message="You cannot change the role of your own account")

        user = await self._get_or_404(db, user_id)
        previous = user.role
        user.role = role
        await db.flush()

        logger.info(
            "User %s role changed %s → %s by admin %s",
            user.username,
            previous,
            role,
            actor.id,
        )
        return UserOut.model_validate(user)

    async def delete_user(self, db: AsyncSession, user_id: int, actor: User) -> str:
        """
        Delete an account (and, through the FK cascade, its reports).

        Returns:
            The deleted user's email, for the confirmation message.
        """
        if user_id == actor.id:
            raise ValidationError(
                message="You cannot delete your own account from the admin panel"
            )

        user = await self._get_or_404(db, user_id)
        email = user.email
        await db.delete(user)
        await db.flush()

        logger.info("User %s (id=%s) deleted by admin %s", email, user_id, actor.id)
        return email

    async def get_stats(self, db: AsyncSession) -> StatsResponse:
        total_users = await db.scalar(select(func.count(User.id))) or 0
        total_admins = await db.scalar(
            select(func.count(User.id)).where(User.role == Role.ADMIN.value)
        ) or 0
        total_pages = await db.scalar(select(func.count(PageContent.id))) or 0

        result = await db.execute(
            select(Report.status, func.count(Report.id)).group_by(Report.status)
        )
        by_status = {status: 0 for status in ReportStatus.values()}
        for status, count in result.all():
            by_status[status] = count

        return StatsResponse(
            total_users=total_users,
            total_admins=total_admins,
            total_reports=sum(by_status.values()),
            reports_by_status=by_status,
            total_pages=total_pages,
        )


user_service = UserService()
