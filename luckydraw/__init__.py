"""Service layer for running lucky-draw contests."""

__version__ = "0.1.0"
