"""Helper utilities for constructing temporary TSX projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping

from compmeta.config import ResolvedConfig, UserConfig, resolve_config


class ProjectBuilder:
    """Utility for writing files into a throwaway front-end project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_json(self, relative: str, payload: Mapping[str, Any]) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def component(self, name: str, content: str) -> str:
        """Write a component file under the default UI directory and return its path."""
        relative = f"src/components/ui/{name}"
        self.write({relative: content})
        return relative

    def config(self, **overrides: Any) -> ResolvedConfig:
        """Resolved defaults with ``UserConfig`` overrides applied."""
        return resolve_config(UserConfig(**overrides))

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["ProjectBuilder"]
