"""Component metadata extraction for React/TSX projects."""

from .config import CompmetaError, ConfigError, ResolvedConfig, UserConfig, load_config, resolve_config
from .discovery import GlobError, discover_files
from .models import ComponentMeta, ExtractionMeta, ExtractionResult, ExtractionWarning, PropMeta
from .output import OutputError, write_output
from .pipeline import ExtractionPipeline, resolve_project_config, run_extraction

__version__ = "0.1.0"

__all__ = [
    "CompmetaError",
    "ComponentMeta",
    "ConfigError",
    "ExtractionMeta",
    "ExtractionPipeline",
    "ExtractionResult",
    "ExtractionWarning",
    "GlobError",
    "OutputError",
    "PropMeta",
    "ResolvedConfig",
    "UserConfig",
    "discover_files",
    "load_config",
    "resolve_config",
    "resolve_project_config",
    "run_extraction",
    "write_output",
]
