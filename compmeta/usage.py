"""Counts how often extracted components are rendered across a project."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .logging import get_logger
from .models import ComponentMeta, UsageCount
from .stores import ExtractionCache

logger = get_logger("usage")


def scan_source(source: str, names: Iterable[str]) -> Set[str]:
    """Names referenced as ``<Name`` followed by whitespace, ``/`` or ``>``."""
    names = sorted(set(names), key=len, reverse=True)
    if not names:
        return set()
    pattern = re.compile(r"<(" + "|".join(re.escape(name) for name in names) + r")[\s/>]")
    return {match.group(1) for match in pattern.finditer(source)}


def build_usage_graph(
    project_root: Path,
    definitions: Mapping[str, str],
    files: Iterable[str],
    cache: ExtractionCache,
) -> Tuple[Dict[str, int], Dict[str, Set[str]]]:
    """Direct counts per component plus the "defining component renders" graph.

    A file never counts towards the components it defines itself.
    """
    direct: Dict[str, int] = {name: 0 for name in definitions}
    renders: Dict[str, Set[str]] = {name: set() for name in definitions}
    defined_in: Dict[str, List[str]] = {}
    for name, rel_path in definitions.items():
        defined_in.setdefault(rel_path, []).append(name)

    for rel_path in files:
        source = cache.read_source(project_root / rel_path)
        if source is None:
            logger.debug("Usage scan could not read %s", rel_path)
            continue
        found = scan_source(source, definitions)
        if not found:
            continue
        local = defined_in.get(rel_path, [])
        for used in found:
            if used not in local:
                direct[used] += 1
        for owner in local:
            renders[owner].update(used for used in found if used != owner)
    return direct, renders


def compute_usage(direct: Mapping[str, int], renders: Mapping[str, Set[str]]) -> Dict[str, UsageCount]:
    """Propagate totals: a component's indirect count sums its renderers' totals."""
    parents: Dict[str, Set[str]] = {name: set() for name in direct}
    for parent, children in renders.items():
        for child in children:
            parents.setdefault(child, set()).add(parent)

    totals: Dict[str, int] = {}

    def total(name: str, visiting: Set[str]) -> int:
        if name in totals:
            return totals[name]
        if name in visiting:
            return direct.get(name, 0)
        visiting.add(name)
        value = direct.get(name, 0) + sum(total(parent, visiting) for parent in parents.get(name, ()))
        visiting.discard(name)
        totals[name] = value
        return value

    usage: Dict[str, UsageCount] = {}
    for name in direct:
        count = direct[name]
        usage[name] = UsageCount(direct=count, indirect=total(name, set()) - count)
    return usage


def analyze_usage(
    project_root: Path,
    components: List[ComponentMeta],
    cache: Optional[ExtractionCache] = None,
) -> Dict[str, UsageCount]:
    """Attach usage counts to ``components`` in place and return them by name."""
    cache = cache or ExtractionCache()
    definitions = {component.display_name: component.file_path for component in components}
    files = cache.project_files(project_root)
    direct, renders = build_usage_graph(project_root, definitions, files, cache)
    usage = compute_usage(direct, renders)
    for component in components:
        component.usage = usage.get(component.display_name)
    logger.debug("Usage analysis scanned %d files", len(files))
    return usage


__all__ = ["analyze_usage", "build_usage_graph", "compute_usage", "scan_source"]
