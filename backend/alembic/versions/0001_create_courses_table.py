"""Create courses table

Revision ID: 0001_create_courses
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_create_courses"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("creator_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("creator_user_id", sa.String(length=255), nullable=False),
        sa.Column("tags", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column("selected_file_ref", sa.Text(), nullable=True),
        sa.Column("likes", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column("comments", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_courses_creator_name", "courses", ["creator_name"], unique=False)
    op.create_index("ix_courses_tags", "courses", ["tags"], unique=False, postgresql_using="gin")


def downgrade() -> None:
    op.drop_index("ix_courses_tags", table_name="courses")
    op.drop_index("ix_courses_creator_name", table_name="courses")
    op.drop_table("courses")
