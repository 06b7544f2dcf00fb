# SQLModel definitions, imported here so SQLModel.metadata is complete for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .membership import Membership  # noqa: F401
from .level import Level  # noqa: F401
from .exercise import Exercise  # noqa: F401
