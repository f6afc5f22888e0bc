from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .admin import Admin, AdminActivityLog  # noqa: F401
from .contest import Contest, Participant, Prize  # noqa: F401
from .draw import Draw, Winner  # noqa: F401
from .enums import (  # noqa: F401
    ActivityStatus,
    AdminRole,
    ContestStatus,
    DrawMode,
    EntryRule,
    PrizeStatus,
)

__all__ = [
    "Base",
    "Admin",
    "AdminActivityLog",
    "Contest",
    "Prize",
    "Participant",
    "Draw",
    "Winner",
    "ActivityStatus",
    "AdminRole",
    "ContestStatus",
    "DrawMode",
    "EntryRule",
    "PrizeStatus",
]
