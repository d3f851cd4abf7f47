"""Tests for extractor plugin discovery."""

from __future__ import annotations

from importlib import metadata

import pytest

import compmeta.extractors as extractors
from compmeta.extractors import Extractor, ExtractorContext, ExtractorOutput, TypeScriptExtractor


class _PluginExtractor(Extractor):
    name = "plugin"

    def extract(self, context: ExtractorContext) -> ExtractorOutput:
        return ExtractorOutput()


def test_builtin_typescript_extractor_is_available() -> None:
    assert isinstance(extractors.get_extractor("typescript"), TypeScriptExtractor)
    assert isinstance(extractors.get_extractor("TypeScript"), TypeScriptExtractor)


def test_unknown_extractor_raises() -> None:
    with pytest.raises(ValueError):
        extractors.get_extractor("does-not-exist")


def test_entry_point_plugins_are_loaded(monkeypatch) -> None:
    entry = metadata.EntryPoint(
        name="plugin",
        value=f"{__name__}:_PluginExtractor",
        group="compmeta.extractors",
    )
    monkeypatch.setattr(extractors, "_iter_entry_points", lambda: [entry])

    factories = extractors.discover_extractors()

    assert set(factories) == {"typescript", "plugin"}
    assert isinstance(extractors.get_extractor("plugin"), _PluginExtractor)


def test_entry_point_must_produce_an_extractor(monkeypatch) -> None:
    entry = metadata.EntryPoint(name="bad", value="builtins:object", group="compmeta.extractors")
    monkeypatch.setattr(extractors, "_iter_entry_points", lambda: [entry])

    with pytest.raises(TypeError):
        extractors.get_extractor("bad")
