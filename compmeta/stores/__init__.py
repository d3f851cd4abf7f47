"""Run-scoped stores."""

from .cache import ExtractionCache

__all__ = ["ExtractionCache"]
