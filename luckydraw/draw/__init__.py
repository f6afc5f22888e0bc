"""Winner selection and draw persistence."""

from .engine import DrawEngine
from .selection import select_winners

__all__ = ["DrawEngine", "select_winners"]
