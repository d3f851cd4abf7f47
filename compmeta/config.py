"""Configuration loading and resolution for compmeta (.compmeta.yml)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from .logging import get_logger
from .models import COMPONENT_ELEMENT, COMPONENT_ICON, COMPONENT_NODE

CONFIG_FILENAME = ".compmeta.yml"

DEFAULT_COMPONENT_GLOB = "src/components/ui/**/*.tsx"
DEFAULT_OUTPUT_DIR = "src/compmeta/generated"
DEFAULT_PATH_ALIAS: Dict[str, str] = {"@/": "src/"}
DEFAULT_EXTRACTOR = "typescript"

DEFAULT_EXCLUDE_FILES = (
    "index.ts",
    "toaster.tsx",
    "form.tsx",
    "form-fields.tsx",
)
DEFAULT_EXCLUDE_COMPONENTS = (
    "DialogPortal",
    "DialogOverlay",
    "DialogClose",
)
DEFAULT_FILTERED_PROPS = (
    "ref",
    "key",
    "dangerouslySetInnerHTML",
    "suppressContentEditableWarning",
    "suppressHydrationWarning",
)
DEFAULT_FILTERED_PROP_PATTERNS = (
    # event handlers, except the Radix state callbacks
    r"^on(?!OpenChange|CheckedChange|ValueChange|Select)[A-Z]",
    r"^aria-",
    r"^data-",
)

_COMPONENT_KINDS = {COMPONENT_ICON, COMPONENT_ELEMENT, COMPONENT_NODE}

logger = get_logger("config")


class CompmetaError(RuntimeError):
    """Base class for errors that abort an extraction run."""


class ConfigError(CompmetaError):
    """Raised when the configuration file cannot be loaded or resolved."""


@dataclass
class UserConfig:
    """Options exactly as supplied by the user; ``None`` means "not set"."""

    component_glob: Optional[str] = None
    component_globs: List[str] = field(default_factory=list)
    exclude_files: Optional[List[str]] = None
    exclude_components: Optional[List[str]] = None
    filtered_props: Optional[List[str]] = None
    filtered_prop_patterns: Optional[List[str]] = None
    output_dir: Optional[str] = None
    path_alias: Optional[Dict[str, str]] = None
    component_type_map: Dict[str, str] = field(default_factory=dict)
    usage_analysis: Optional[bool] = None
    extractor: Optional[str] = None
    source: Optional[Path] = None


@dataclass
class ResolvedConfig:
    """Effective options for one run after merging user values over defaults."""

    component_glob: str = DEFAULT_COMPONENT_GLOB
    component_globs: List[str] = field(default_factory=list)
    exclude_files: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_FILES))
    exclude_components: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_COMPONENTS))
    filtered_props: List[str] = field(default_factory=lambda: list(DEFAULT_FILTERED_PROPS))
    filtered_prop_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULT_FILTERED_PROP_PATTERNS)
    )
    output_dir: str = DEFAULT_OUTPUT_DIR
    path_alias: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PATH_ALIAS))
    component_type_map: Dict[str, str] = field(default_factory=dict)
    usage_analysis: bool = True
    extractor: str = DEFAULT_EXTRACTOR
    globs_explicit: bool = False

    @property
    def globs(self) -> List[str]:
        if self.component_globs:
            return list(self.component_globs)
        return [self.component_glob]

    @property
    def component_dir(self) -> str:
        return ", ".join(self.globs)


def union_merge(defaults: Iterable[str], additions: Iterable[str] | None) -> List[str]:
    """Concatenate and de-duplicate, keeping first-seen order."""
    merged: List[str] = []
    seen: set[str] = set()
    for value in list(defaults) + list(additions or []):
        if value in seen:
            continue
        seen.add(value)
        merged.append(value)
    return merged


def resolve_config(
    user: UserConfig | None = None,
    detected_path_alias: Mapping[str, str] | None = None,
) -> ResolvedConfig:
    """Merge user options over the defaults.

    List options only ever grow: the result is the defaults followed by any new
    user entries, so a user cannot drop a built-in exclusion. The path alias
    comes from the user, then from project detection, then from the default.
    """
    user = user or UserConfig()
    defaults = ResolvedConfig()

    if user.path_alias:
        path_alias = dict(user.path_alias)
    elif detected_path_alias:
        path_alias = dict(detected_path_alias)
    else:
        path_alias = dict(DEFAULT_PATH_ALIAS)

    patterns = union_merge(defaults.filtered_prop_patterns, user.filtered_prop_patterns)
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigError(f"Invalid filteredPropPatterns entry {pattern!r}: {exc}") from exc

    return ResolvedConfig(
        component_glob=user.component_glob or defaults.component_glob,
        component_globs=list(user.component_globs),
        exclude_files=union_merge(defaults.exclude_files, user.exclude_files),
        exclude_components=union_merge(defaults.exclude_components, user.exclude_components),
        filtered_props=union_merge(defaults.filtered_props, user.filtered_props),
        filtered_prop_patterns=patterns,
        output_dir=user.output_dir or defaults.output_dir,
        path_alias=path_alias,
        component_type_map=dict(user.component_type_map),
        usage_analysis=defaults.usage_analysis if user.usage_analysis is None else user.usage_analysis,
        extractor=user.extractor or defaults.extractor,
        globs_explicit=bool(user.component_glob or user.component_globs),
    )


def load_config(config_path: Path, *, explicit: bool = False) -> UserConfig:
    """Load user options from disk.

    ``config_path`` may be a project directory (the default file name is looked
    up inside it) or a file. A missing default file yields empty options; a
    missing file that was asked for explicitly is an error.
    """
    config_file = _resolve_config_path(config_path)

    if not config_file.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_file}")
        return UserConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    component_type_map: Dict[str, str] = {}
    for type_name, kind in _as_dict(data.get("componentTypeMap")).items():
        kind_str = _as_str(kind)
        if kind_str not in _COMPONENT_KINDS:
            logger.warning("Ignoring componentTypeMap entry %s: unknown kind %r", type_name, kind)
            continue
        component_type_map[str(type_name)] = kind_str

    path_alias_data = _as_dict(data.get("pathAlias"))
    path_alias = {str(key): str(value) for key, value in path_alias_data.items()} or None

    return UserConfig(
        component_glob=_as_str(data.get("componentGlob")),
        component_globs=_as_str_list(data.get("componentGlobs")),
        exclude_files=_as_optional_str_list(data.get("excludeFiles")),
        exclude_components=_as_optional_str_list(data.get("excludeComponents")),
        filtered_props=_as_optional_str_list(data.get("filteredProps")),
        filtered_prop_patterns=_as_optional_str_list(data.get("filteredPropPatterns")),
        output_dir=_as_str(data.get("outputDir")),
        path_alias=path_alias,
        component_type_map=component_type_map,
        usage_analysis=_as_bool(data.get("usageAnalysis")),
        extractor=_as_str(data.get("extractor")),
        source=config_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


def _as_optional_str_list(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    return _as_str_list(value)


__all__ = [
    "CONFIG_FILENAME",
    "CompmetaError",
    "ConfigError",
    "ResolvedConfig",
    "UserConfig",
    "load_config",
    "resolve_config",
    "union_merge",
]
