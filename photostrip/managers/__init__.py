"""Process-level helpers that sit beside the compositor."""

from .memory import MemoryGuard

__all__ = ["MemoryGuard"]
