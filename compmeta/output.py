"""Writes meta.json and the lazy-loading registry module."""

from __future__ import annotations

import contextlib
import json
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, List, Mapping

from jinja2 import Environment, FileSystemLoader

from .config import CompmetaError, ResolvedConfig
from .logging import get_logger
from .models import ExtractionMeta

logger = get_logger("output")

META_FILENAME = "meta.json"
REGISTRY_FILENAME = "registry.ts"
_SOURCE_SUFFIXES = (".tsx", ".ts", ".jsx", ".js")


class OutputError(CompmetaError):
    """Raised when the output artifacts cannot be written."""


@dataclass
class RegistryEntry:
    name: str
    import_path: str
    member: str


def _strip_suffix(path: str) -> str:
    for suffix in _SOURCE_SUFFIXES:
        if path.endswith(suffix):
            return path[: -len(suffix)]
    return path


def _normalise_prefix(prefix: str) -> str:
    return prefix[2:] if prefix.startswith("./") else prefix


def resolve_import_path(file_path: str, path_alias: Mapping[str, str], output_dir: str) -> str:
    """Module specifier for ``file_path`` as seen from the registry module.

    The alias whose real prefix is the longest match wins; without one the
    path is made relative to ``output_dir``.
    """
    module = _strip_suffix(PurePosixPath(file_path).as_posix())
    best_alias = None
    best_real = ""
    for alias, real in path_alias.items():
        real = _normalise_prefix(real)
        if not real or not module.startswith(real):
            continue
        if best_alias is None or len(real) > len(best_real):
            best_alias, best_real = alias, real
    if best_alias is not None:
        return best_alias + module[len(best_real) :]

    relative = posixpath.relpath(module, _normalise_prefix(PurePosixPath(output_dir).as_posix()) or ".")
    return relative if relative.startswith(".") else f"./{relative}"


class RegistryRenderer:
    """Renders the registry module from the packaged Jinja2 template."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def entries(self, meta: ExtractionMeta, output_dir: str) -> List[RegistryEntry]:
        seen = set()
        entries: List[RegistryEntry] = []
        for component in meta.components:
            if component.display_name in seen:
                continue
            seen.add(component.display_name)
            entries.append(
                RegistryEntry(
                    name=component.display_name,
                    import_path=resolve_import_path(component.file_path, meta.path_alias, output_dir),
                    member="default" if component.export_type == "default" else component.display_name,
                )
            )
        return entries

    def render(self, meta: ExtractionMeta, output_dir: str) -> str:
        template = self._env.get_template("registry.ts.j2")
        return template.render(entries=self.entries(meta, output_dir))


def generate_registry(meta: ExtractionMeta, output_dir: str) -> str:
    return RegistryRenderer().render(meta, output_dir)


def write_output(project_root: Path, config: ResolvedConfig, meta: ExtractionMeta) -> Dict[str, Path]:
    """Write both artifacts under ``config.output_dir`` and return their paths.

    Both files are staged next to their targets and swapped in only after
    every staged write succeeded.
    """
    output_dir = project_root / config.output_dir
    meta_path = output_dir / META_FILENAME
    registry_path = output_dir / REGISTRY_FILENAME
    payload = json.dumps(meta.to_dict(), indent=2, ensure_ascii=False) + "\n"
    registry = generate_registry(meta, config.output_dir)

    staged: List[Path] = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for target, text in ((meta_path, payload), (registry_path, registry)):
            tmp_path = target.with_name(f".{target.name}.tmp")
            staged.append(tmp_path)
            tmp_path.write_text(text, encoding="utf-8")
        for tmp_path, target in zip(staged, (meta_path, registry_path)):
            os.replace(tmp_path, target)
    except OSError as exc:
        for tmp_path in staged:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
        raise OutputError(f"Cannot write output to {output_dir}: {exc}") from exc
    logger.info("Wrote %s (%d components) and %s", meta_path, len(meta.components), registry_path)
    return {"meta": meta_path, "registry": registry_path}


__all__ = [
    "META_FILENAME",
    "OutputError",
    "REGISTRY_FILENAME",
    "RegistryRenderer",
    "generate_registry",
    "resolve_import_path",
    "write_output",
]
