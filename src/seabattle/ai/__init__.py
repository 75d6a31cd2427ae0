"""AI package exports."""

from .gunner import Gunner

__all__ = ["Gunner"]
