"""Layout persistence."""

from .store import LayoutStore

__all__ = ["LayoutStore"]
