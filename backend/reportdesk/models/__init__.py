"""SQLAlchemy models. Importing this package registers every table on Base.metadata."""

from reportdesk.models.user import Role, User
from reportdesk.models.report import Report, ReportStatus
from reportdesk.models.page_content import PageContent, PageContentHistory

__all__ = [
    "Role",
    "User",
    "Report",
    "ReportStatus",
    "PageContent",
    "PageContentHistory",
]
