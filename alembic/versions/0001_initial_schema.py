"""Initial schema: users, organizations, memberships, levels, exercises.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

member_role = postgresql.ENUM("ADMIN", "MEMBER", name="member_role", create_type=False)
exercise_status = postgresql.ENUM(
    "PLANNED", "ONGOING", "COMPLETED", name="exercise_status", create_type=False
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    member_role.create(op.get_bind(), checkfirst=True)
    exercise_status.create(op.get_bind(), checkfirst=True)

    # Users (owned by the identity provider)
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Organizations
    op.create_table(
        "organizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_organizations_id", "organizations", ["id"])
    op.create_index("ix_organizations_name", "organizations", ["name"])
    op.create_index("ix_organizations_owner_id", "organizations", ["owner_id"])
    op.create_index("ix_organizations_created_at", "organizations", ["created_at"])

    # Memberships: one role per (org, user)
    op.create_table(
        "organization_members",
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", member_role, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("organization_id", "user_id"),
    )
    op.create_index("ix_organization_members_user_id", "organization_members", ["user_id"])

    # Levels: parent-pointer forest per org
    op.create_table(
        "levels",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("parent_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("levels.id"), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("parent_id IS NULL OR parent_id != id", name="no_self_parent"),
        sa.UniqueConstraint("organization_id", "parent_id", "name", name="uq_levels_sibling_name"),
    )
    op.create_index("ix_levels_id", "levels", ["id"])
    op.create_index("ix_levels_organization_id", "levels", ["organization_id"])
    op.create_index("ix_levels_parent_id", "levels", ["parent_id"])
    op.create_index("ix_levels_created_at", "levels", ["created_at"])
    op.create_index(
        "uq_levels_root_name",
        "levels",
        ["organization_id", "name"],
        unique=True,
        postgresql_where=sa.text("parent_id IS NULL"),
    )

    # Exercises
    op.create_table(
        "exercises",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", exercise_status, server_default="PLANNED", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exercises_id", "exercises", ["id"])
    op.create_index("ix_exercises_organization_id", "exercises", ["organization_id"])
    op.create_index("ix_exercises_created_at", "exercises", ["created_at"])


def downgrade() -> None:
    op.drop_table("exercises")
    op.drop_table("levels")
    op.drop_table("organization_members")
    op.drop_table("organizations")
    op.drop_table("users")
    exercise_status.drop(op.get_bind(), checkfirst=True)
    member_role.drop(op.get_bind(), checkfirst=True)
