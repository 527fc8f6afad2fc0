"""initial schema

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 10:12:44.310275

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )
    op.create_table(
        "statuses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("superuser", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("statuses.id"), nullable=False),
        _timestamp(),
    )
    op.create_index("ix_courses_id", "courses", ["id"])

    op.create_table(
        "course_creation_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_title", sa.String(255), nullable=False),
        sa.Column("course_description", sa.Text(), nullable=True),
        sa.Column(
            "requested_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp(),
    )
    op.create_index("ix_course_creation_requests_id", "course_creation_requests", ["id"])
    op.create_index(
        "ix_course_creation_requests_requested_by", "course_creation_requests", ["requested_by"]
    )

    op.create_table(
        "user_course_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("user_roles.id"), nullable=False),
        _timestamp(),
        sa.UniqueConstraint("user_id", "course_id", name="uq_user_course_roles_user_course"),
    )
    op.create_index("ix_user_course_roles_id", "user_course_roles", ["id"])
    op.create_index("ix_user_course_roles_user_id", "user_course_roles", ["user_id"])
    op.create_index("ix_user_course_roles_course_id", "user_course_roles", ["course_id"])

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("topic", sa.String(255), nullable=False),
        sa.Column("starting_date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ending_date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_index("ix_class_sessions_id", "class_sessions", ["id"])
    op.create_index("ix_class_sessions_course_id", "class_sessions", ["course_id"])

    for table in ("assessments", "presence"):
        extra = (
            [sa.Column("grade", sa.Float(), nullable=True), sa.Column("feedback", sa.Text(), nullable=True)]
            if table == "assessments"
            else [sa.Column("present", sa.Boolean(), nullable=False, server_default=sa.false())]
        )
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column(
                "class_session_id",
                sa.Integer(),
                sa.ForeignKey("class_sessions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            *extra,
            sa.UniqueConstraint("user_id", "class_session_id", name=f"uq_{table}_user_session"),
        )
        op.create_index(f"ix_{table}_id", table, ["id"])
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_class_session_id", table, ["class_session_id"])

    op.create_table(
        "sections",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("statuses.id"), nullable=False),
        _timestamp(),
    )
    op.create_index("ix_sections_id", "sections", ["id"])

    op.create_table(
        "user_sections",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "section_id", sa.Integer(), sa.ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
        ),
        sa.UniqueConstraint("user_id", "section_id", name="uq_user_sections_user_section"),
    )
    op.create_index("ix_user_sections_id", "user_sections", ["id"])
    op.create_index("ix_user_sections_user_id", "user_sections", ["user_id"])
    op.create_index("ix_user_sections_section_id", "user_sections", ["section_id"])

    op.create_table(
        "files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("url", sa.String(512), nullable=False),
        sa.Column("type", sa.String(255), nullable=False),
        _timestamp(),
    )
    op.create_index("ix_files_id", "files", ["id"])

    op.create_table(
        "raports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "class_session_id",
            sa.Integer(),
            sa.ForeignKey("class_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("sections.id"), nullable=False),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_raports_id", "raports", ["id"])
    op.create_index("ix_raports_user_id", "raports", ["user_id"])
    op.create_index("ix_raports_class_session_id", "raports", ["class_session_id"])
    op.create_index("ix_raports_section_id", "raports", ["section_id"])

    op.create_table(
        "raport_files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "raport_id", sa.Integer(), sa.ForeignKey("raports.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("file_id", sa.Integer(), sa.ForeignKey("files.id"), nullable=False),
        sa.UniqueConstraint("raport_id", "file_id", name="uq_raport_files_raport_file"),
    )
    op.create_index("ix_raport_files_id", "raport_files", ["id"])
    op.create_index("ix_raport_files_raport_id", "raport_files", ["raport_id"])
    op.create_index("ix_raport_files_file_id", "raport_files", ["file_id"])

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_index("ix_materials_id", "materials", ["id"])
    op.create_index("ix_materials_course_id", "materials", ["course_id"])

    op.create_table(
        "material_files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "material_id",
            sa.Integer(),
            sa.ForeignKey("materials.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("file_id", sa.Integer(), sa.ForeignKey("files.id"), nullable=False),
        sa.UniqueConstraint("material_id", "file_id", name="uq_material_files_material_file"),
    )
    op.create_index("ix_material_files_id", "material_files", ["id"])
    op.create_index("ix_material_files_material_id", "material_files", ["material_id"])
    op.create_index("ix_material_files_file_id", "material_files", ["file_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "section_id", sa.Integer(), sa.ForeignKey("sections.id", ondelete="CASCADE"), nullable=True
        ),
        sa.Column("type", sa.String(100), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp(),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_section_id", "notifications", ["section_id"])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "notifications",
        "material_files",
        "materials",
        "raport_files",
        "raports",
        "files",
        "user_sections",
        "sections",
        "presence",
        "assessments",
        "class_sessions",
        "user_course_roles",
        "course_creation_requests",
        "courses",
        "users",
        "statuses",
        "user_roles",
    ):
        op.drop_table(table)
