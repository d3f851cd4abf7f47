"""Component file discovery: glob expansion and non-component filtering."""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, List, Pattern, Sequence

from .config import DEFAULT_COMPONENT_GLOB, CompmetaError
from .logging import get_logger

logger = get_logger("discovery")

SKIP_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".next",
        ".turbo",
        ".cache",
        "node_modules",
        "dist",
    }
)

# Ordered by specificity so that a project with both `src/components/ui/` and
# `src/components/` gets both patterns.
DISCOVERY_PATTERNS = (
    "src/components/ui/**/*.tsx",
    "components/ui/**/*.tsx",
    "src/components/**/*.tsx",
    "components/**/*.tsx",
    "src/ui/**/*.tsx",
    "ui/**/*.tsx",
    "app/components/**/*.tsx",
    "src/app/components/**/*.tsx",
)

NON_COMPONENT_PATTERNS: tuple[Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r"\.test\.tsx?$",
        r"\.spec\.tsx?$",
        r"\.stories\.tsx?$",
        r"\.d\.ts$",
        r"/hooks?/",
        r"/utils?/",
        r"/lib/",
        r"/providers?/",
        r"/contexts?/",
        r"/types?/",
    )
)

NON_COMPONENT_FILENAMES = frozenset(
    {
        "index.ts",
        "index.tsx",
        "types.ts",
        "types.tsx",
        "utils.ts",
        "utils.tsx",
        "helpers.ts",
        "helpers.tsx",
        "constants.ts",
        "constants.tsx",
    }
)

NEXTJS_CONVENTION_FILES = frozenset(
    {
        "layout.tsx",
        "page.tsx",
        "loading.tsx",
        "error.tsx",
        "not-found.tsx",
        "template.tsx",
        "default.tsx",
        "route.ts",
        "middleware.ts",
        "global-error.tsx",
        "opengraph-image.tsx",
    }
)


class GlobError(CompmetaError):
    """Raised when a component glob cannot be interpreted."""


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives; nested braces are not supported."""
    start = pattern.find("{")
    if start == -1:
        if "}" in pattern:
            raise GlobError(f"Unbalanced '}}' in glob: {pattern}")
        return [pattern]
    end = pattern.find("}", start)
    if end == -1:
        raise GlobError(f"Unbalanced '{{' in glob: {pattern}")
    head, body, tail = pattern[:start], pattern[start + 1 : end], pattern[end + 1 :]
    if "{" in body:
        raise GlobError(f"Nested braces are not supported: {pattern}")
    expanded: List[str] = []
    for option in body.split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a brace-free glob into an anchored regex over posix paths.

    ``**/`` matches zero or more whole directories, ``*`` and ``?`` never cross
    a ``/``.
    """
    parts: List[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                if pattern.startswith("**/", index):
                    parts.append("(?:[^/]+/)*")
                    index += 3
                else:
                    parts.append(".*")
                    index += 2
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 1)
            if end == -1:
                raise GlobError(f"Unterminated character class in glob: {pattern}")
            content = pattern[index + 1 : end]
            negate = content.startswith("!")
            if negate:
                content = content[1:]
            if not content:
                raise GlobError(f"Empty character class in glob: {pattern}")
            content = content.replace("\\", "\\\\")
            parts.append(f"[{'^' if negate else ''}{content}]")
            index = end + 1
            continue
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("^" + "".join(parts) + "$")


def _validate_glob(pattern: str) -> None:
    if not pattern or not pattern.strip():
        raise GlobError("Component glob must not be empty")
    if pattern.startswith("/") or re.match(r"^[A-Za-z]:[\\/]", pattern):
        raise GlobError(f"Component glob must be relative to the project root: {pattern}")
    if ".." in PurePosixPath(pattern).parts:
        raise GlobError(f"Component glob must not leave the project root: {pattern}")


def _walk_root(pattern: str) -> str:
    """Return the literal directory prefix before the first wildcard segment."""
    literal: List[str] = []
    segments = pattern.split("/")
    for segment in segments[:-1]:
        if any(char in segment for char in "*?["):
            break
        literal.append(segment)
    return "/".join(literal)


def iter_project_files(root: Path, start: str = "") -> Iterator[str]:
    """Yield project-relative posix paths under ``start``, skipping build and VCS dirs."""
    walk_root = root / start if start else root
    if not walk_root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(walk_root):
        dirnames[:] = sorted(name for name in dirnames if name not in SKIP_DIRS)
        current = Path(dirpath)
        for filename in filenames:
            yield (current / filename).relative_to(root).as_posix()


def find_files(pattern: str, project_root: Path) -> List[str]:
    """Return project-relative posix paths matching ``pattern``."""
    _validate_glob(pattern)
    matches: set[str] = set()
    for expanded in expand_braces(pattern):
        regex = glob_to_regex(expanded)
        for rel_path in iter_project_files(project_root, _walk_root(expanded)):
            if regex.match(rel_path):
                matches.add(rel_path)
    return sorted(matches)


def is_non_component_file(rel_path: str, file_name: str, framework: str | None = None) -> bool:
    """Return True if the path looks like a test, helper or framework file."""
    if file_name in NON_COMPONENT_FILENAMES:
        return True
    if framework == "next" and file_name in NEXTJS_CONVENTION_FILES:
        return True
    probe = f"/{rel_path}"
    return any(pattern.search(probe) for pattern in NON_COMPONENT_PATTERNS)


def discover_component_globs(project_root: Path) -> List[str]:
    """Probe conventional directories and return the globs whose root exists."""
    matched = [
        pattern
        for pattern in DISCOVERY_PATTERNS
        if (project_root / _walk_root(pattern)).is_dir()
    ]
    return matched or [DEFAULT_COMPONENT_GLOB]


def discover_files(
    project_root: Path,
    globs: Sequence[str] | str,
    exclude_files: Iterable[str] = (),
    *,
    framework: str | None = None,
) -> List[str]:
    """Expand globs into a sorted, de-duplicated list of component files.

    Files whose basename appears in ``exclude_files`` are dropped, as are
    non-``.tsx`` files and anything :func:`is_non_component_file` rejects.
    """
    if isinstance(globs, str):
        globs = [globs]
    for pattern in globs:
        _validate_glob(pattern)

    excluded = set(exclude_files)
    found: set[str] = set()
    for pattern in globs:
        for rel_path in find_files(pattern, project_root):
            file_name = PurePosixPath(rel_path).name
            if file_name in excluded:
                logger.debug("Skipping excluded file %s", rel_path)
                continue
            if not file_name.endswith(".tsx"):
                continue
            if is_non_component_file(rel_path, file_name, framework):
                logger.debug("Skipping non-component file %s", rel_path)
                continue
            found.add(rel_path)
    return sorted(found)


__all__ = [
    "DISCOVERY_PATTERNS",
    "GlobError",
    "SKIP_DIRS",
    "discover_component_globs",
    "discover_files",
    "expand_braces",
    "find_files",
    "glob_to_regex",
    "is_non_component_file",
    "iter_project_files",
]
