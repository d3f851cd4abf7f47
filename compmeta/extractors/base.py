"""Base classes for component extractor plugins."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Pattern

from ..config import ResolvedConfig
from ..models import ComponentMeta, ExtractionWarning


@dataclass
class ExtractorContext:
    """Inputs handed to an extractor for one run."""

    project_root: Path
    config: ResolvedConfig
    files: List[str] = field(default_factory=list)


@dataclass
class ExtractorOutput:
    components: List[ComponentMeta] = field(default_factory=list)
    warnings: List[ExtractionWarning] = field(default_factory=list)
    files_skipped: int = 0


class PropFilter:
    """Decides which prop names survive into the metadata.

    A name is dropped when it is listed verbatim or when any pattern matches
    anywhere in it.
    """

    def __init__(self, names: Iterable[str] = (), patterns: Iterable[str] = ()) -> None:
        self.names = set(names)
        self.patterns: List[Pattern[str]] = [re.compile(pattern) for pattern in patterns]

    @classmethod
    def from_config(cls, config: ResolvedConfig) -> "PropFilter":
        return cls(config.filtered_props, config.filtered_prop_patterns)

    def __call__(self, name: str) -> bool:
        if name in self.names:
            return False
        return not any(pattern.search(name) for pattern in self.patterns)


class Extractor(ABC):
    """Contract for extractors that turn source files into component metadata."""

    name: str = ""

    @abstractmethod
    def extract(self, context: ExtractorContext) -> ExtractorOutput:
        """Extract every exported component from ``context.files``.

        Per-file failures are reported as warnings on the output, never raised.
        """
