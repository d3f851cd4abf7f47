"""Project environment probing: framework, icon library and tsconfig path aliases."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .logging import get_logger

logger = get_logger("environment")

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")

_ICON_LIBRARIES = (
    ("lucide-react", "lucide"),
    ("@heroicons/react", "heroicons"),
    ("@phosphor-icons/react", "phosphor"),
    ("@tabler/icons-react", "tabler"),
    ("react-icons", "react-icons"),
)

_FRAMEWORK_NAMES = {"next": "Next.js", "react": "React"}
_ICON_NAMES = {
    "lucide": "Lucide",
    "heroicons": "Heroicons",
    "phosphor": "Phosphor",
    "tabler": "Tabler",
}


@dataclass
class DetectedEnvironment:
    """Facts about the project that influence discovery and output."""

    framework: str = "react"
    icon_library: Optional[str] = None
    path_alias: Dict[str, str] = field(default_factory=dict)
    src_dir: str = ""

    def summary(self) -> str:
        """Compact one-line description, e.g. ``Next.js + Lucide (src/, @/)``."""
        parts = [_FRAMEWORK_NAMES.get(self.framework, self.framework)]
        if self.icon_library:
            parts.append(_ICON_NAMES.get(self.icon_library, self.icon_library))
        text = " + ".join(parts)
        details = ([f"{self.src_dir}/"] if self.src_dir else []) + sorted(self.path_alias)
        if details:
            text += f" ({', '.join(details)})"
        return text


class EnvironmentProbeError(RuntimeError):
    """Raised internally when a project file exists but cannot be interpreted."""


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    result: list[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            result.append(char)
            if char == "\\" and index + 1 < length:
                result.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            result.append(char)
            index += 1
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = length if end == -1 else end + 2
            continue
        result.append(char)
        index += 1
    return "".join(result)


def _read_json(path: Path, *, allow_comments: bool = False) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError) as exc:
        raise EnvironmentProbeError(f"Cannot read {path.name}: {exc}") from exc
    if allow_comments:
        raw = _TRAILING_COMMA.sub(r"\1", strip_json_comments(raw))
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EnvironmentProbeError(f"Cannot parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise EnvironmentProbeError(f"{path.name} must contain an object at the root")
    return data


def _has_dependency(package: Dict[str, Any], name: str) -> bool:
    for key in ("dependencies", "devDependencies", "peerDependencies"):
        deps = package.get(key)
        if isinstance(deps, dict) and name in deps:
            return True
    return False


def parse_tsconfig_paths(paths: Dict[str, Any]) -> Dict[str, str]:
    """Flatten ``{"@/*": ["./src/*"]}`` into ``{"@/": "src/"}``."""
    alias: Dict[str, str] = {}
    for key, targets in paths.items():
        if not isinstance(targets, list) or not targets or not isinstance(targets[0], str):
            continue
        alias_key = key[:-1] if key.endswith("*") else key
        target = targets[0]
        if target.startswith("./"):
            target = target[2:]
        if target.endswith("*"):
            target = target[:-1]
        if alias_key:
            alias[alias_key] = target
    return alias


def _tsconfig_paths(project_root: Path) -> Dict[str, Any]:
    tsconfig = _read_json(project_root / "tsconfig.json", allow_comments=True)
    options = tsconfig.get("compilerOptions")
    paths = options.get("paths") if isinstance(options, dict) else None
    if isinstance(paths, dict) and paths:
        return paths

    parent = tsconfig.get("extends")
    if isinstance(parent, str) and parent.startswith("."):
        parent_path = (project_root / parent).resolve()
        if parent_path.suffix != ".json":
            parent_path = parent_path.with_name(parent_path.name + ".json")
        parent_config = _read_json(parent_path, allow_comments=True)
        parent_options = parent_config.get("compilerOptions")
        parent_paths = parent_options.get("paths") if isinstance(parent_options, dict) else None
        if isinstance(parent_paths, dict):
            return parent_paths
    return {}


def detect_path_alias(project_root: Path) -> Optional[Dict[str, str]]:
    """Return the tsconfig path aliases, or ``None`` when nothing usable was found.

    Probe failures are logged and reported as "no alias detected".
    """
    try:
        paths = _tsconfig_paths(project_root)
    except EnvironmentProbeError as exc:
        logger.warning("Path alias detection failed: %s", exc)
        return None
    alias = parse_tsconfig_paths(paths)
    return alias or None


def _detect_icon_library(package: Dict[str, Any]) -> Optional[str]:
    for dependency, name in _ICON_LIBRARIES:
        if _has_dependency(package, dependency):
            return name
    return None


def detect_environment(
    project_root: Path, path_alias: Optional[Dict[str, str]] = None
) -> DetectedEnvironment:
    """Collect every probe into one summary.

    ``path_alias`` skips the tsconfig probe when the caller already resolved it.
    """
    try:
        package = _read_json(project_root / "package.json")
    except EnvironmentProbeError as exc:
        logger.warning("package.json probe failed: %s", exc)
        package = {}

    if path_alias is None:
        path_alias = detect_path_alias(project_root) or {}
    return DetectedEnvironment(
        framework="next" if _has_dependency(package, "next") else "react",
        icon_library=_detect_icon_library(package),
        path_alias=dict(path_alias),
        src_dir="src" if (project_root / "src").is_dir() else "",
    )


__all__ = [
    "DetectedEnvironment",
    "detect_environment",
    "detect_path_alias",
    "parse_tsconfig_paths",
    "strip_json_comments",
]
