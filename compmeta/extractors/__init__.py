"""Extractor plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable

from .base import Extractor, ExtractorContext, ExtractorOutput, PropFilter
from .typescript import TypeScriptExtractor

_ENTRY_POINT_GROUP = "compmeta.extractors"

_BUILTIN_FACTORIES: dict[str, Callable[[], Extractor]] = {
    "typescript": TypeScriptExtractor,
}


def discover_extractors() -> Dict[str, Callable[[], Extractor]]:
    """Return extractor factories keyed by name; plugins cannot shadow built-ins."""
    factories: Dict[str, Callable[[], Extractor]] = dict(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        name = entry.name.lower()
        if name in factories:
            continue

        def _factory(entry: metadata.EntryPoint = entry) -> Extractor:
            try:
                loaded = entry.load()
            except Exception as exc:  # pragma: no cover - plugin import failure
                raise RuntimeError(f"Failed to load extractor entry point '{entry.name}': {exc}") from exc
            return _coerce_extractor(loaded)

        factories[name] = _factory
    return factories


def get_extractor(name: str) -> Extractor:
    factories = discover_extractors()
    factory = factories.get(name.lower())
    if factory is None:
        known = ", ".join(sorted(factories))
        raise ValueError(f"Unknown extractor '{name}' (available: {known})")
    instance = factory()
    if not isinstance(instance, Extractor):
        raise TypeError(f"Extractor factory for '{name}' did not return an Extractor instance")
    return instance


def _coerce_extractor(obj: object) -> Extractor:
    if isinstance(obj, Extractor):
        return obj
    if isinstance(obj, type) and issubclass(obj, Extractor):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Extractor):
            return instance
    raise TypeError("Extractor entry point must be an Extractor subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Extractor",
    "ExtractorContext",
    "ExtractorOutput",
    "PropFilter",
    "TypeScriptExtractor",
    "discover_extractors",
    "get_extractor",
]
