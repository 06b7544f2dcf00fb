"""Level model: one node of an org-scoped forest, linked by parent pointer."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Level(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "levels"
    __table_args__ = (
        sa.CheckConstraint("parent_id IS NULL OR parent_id != id", name="no_self_parent"),
        sa.UniqueConstraint("organization_id", "parent_id", "name", name="uq_levels_sibling_name"),
        # NULL parents never collide in a plain unique constraint
        sa.Index(
            "uq_levels_root_name",
            "organization_id",
            "name",
            unique=True,
            postgresql_where=sa.text("parent_id IS NULL"),
            sqlite_where=sa.text("parent_id IS NULL"),
        ),
    )

    name: str = Field(nullable=False)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    parent_id: Optional[uuid.UUID] = Field(default=None, foreign_key="levels.id", index=True)
