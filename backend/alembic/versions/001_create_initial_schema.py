"""Create users, reports, page_content and page_content_history

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(50), nullable=False, comment="Login name, at least 3 characters"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False, comment="bcrypt hash of the password"),
        sa.Column(
            "role",
            sa.String(20),
            server_default=sa.text("'user'"),
            nullable=False,
            comment="Access role: user, admin",
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_created_at", "users", [sa.text("created_at DESC")])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False, comment="Author of the report"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("server_name", sa.String(100), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            server_default=sa.text("'pending'"),
            nullable=False,
            comment="pending, in_progress, resolved, closed",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_reports"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_reports_user_id", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_reports_user_id", "reports", ["user_id"])
    op.create_index("idx_reports_created_at", "reports", [sa.text("created_at DESC")])
    op.create_index("idx_reports_status", "reports", ["status"])

    op.create_table(
        "page_content",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("page_name", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_page_content"),
        sa.UniqueConstraint("page_name", name="uq_page_content_page_name"),
        sa.ForeignKeyConstraint(
            ["updated_by"], ["users.id"], name="fk_page_content_updated_by", ondelete="SET NULL"
        ),
        sqlite_autoincrement=True,
    )

    # page_id has no FK: snapshots outlive a deleted page
    op.create_table(
        "page_content_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("page_id", sa.Integer(), nullable=False),
        sa.Column("content_text", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_page_content_history"),
        sa.UniqueConstraint("page_id", "version", name="uq_page_content_history_version"),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.id"], name="fk_page_content_history_created_by", ondelete="SET NULL"
        ),
    )
    op.create_index("idx_page_content_history_page", "page_content_history", ["page_id"])


def downgrade() -> None:
    op.drop_index("idx_page_content_history_page", table_name="page_content_history")
    op.drop_table("page_content_history")
    op.drop_table("page_content")
    op.drop_index("idx_reports_status", table_name="reports")
    op.drop_index("idx_reports_created_at", table_name="reports")
    op.drop_index("ix_reports_user_id", table_name="reports")
    op.drop_table("reports")
    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
