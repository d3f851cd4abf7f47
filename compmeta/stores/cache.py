"""In-memory cache owned by a single extraction run."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..discovery import iter_project_files


class ExtractionCache:
    """Memoizes expensive lookups keyed by name and a validity fingerprint.

    Entries whose fingerprint no longer matches are treated as misses.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[str, Any]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str, *, fingerprint: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None or entry[0] != fingerprint:
            self.misses += 1
            return None
        self.hits += 1
        return entry[1]

    def store(self, key: str, value: Any, *, fingerprint: str) -> None:
        self._entries[key] = (fingerprint, value)

    def get_or_compute(self, key: str, compute: Callable[[], Any], *, fingerprint: str = "") -> Any:
        value = self.get(key, fingerprint=fingerprint)
        if value is None:
            value = compute()
            self.store(key, value, fingerprint=fingerprint)
        return value

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def project_files(self, project_root: Path, suffix: str = ".tsx") -> List[str]:
        """Project-relative posix paths of every ``suffix`` file, sorted."""
        root = project_root.resolve()
        return self.get_or_compute(
            f"files:{suffix}",
            lambda: sorted(path for path in iter_project_files(root) if path.endswith(suffix)),
            fingerprint=str(root),
        )

    def read_source(self, path: Path) -> Optional[str]:
        """File contents keyed by path and modification time; ``None`` if unreadable."""
        try:
            stat = path.stat()
        except OSError:
            return None
        fingerprint = f"{stat.st_mtime_ns}:{stat.st_size}"
        key = f"source:{path.resolve()}"
        cached = self.get(key, fingerprint=fingerprint)
        if cached is not None:
            return cached
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        self.store(key, text, fingerprint=fingerprint)
        return text


__all__ = ["ExtractionCache"]
