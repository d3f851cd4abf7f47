"""Extraction pipeline: config, discovery, extraction, examples, dedupe, usage."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Optional

from .config import ConfigError, ResolvedConfig, load_config, resolve_config
from .discovery import discover_component_globs, discover_files
from .environment import detect_environment, detect_path_alias
from .examples import attach_examples
from .extractors import Extractor, ExtractorContext, get_extractor
from .logging import get_logger
from .merge import deduplicate
from .models import ExtractionMeta, ExtractionResult, ExtractionWarning, RunStats
from .stores import ExtractionCache
from .usage import analyze_usage


def _utc_now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def resolve_project_config(project_root: Path, config_path: Path | None = None) -> ResolvedConfig:
    """Load ``.compmeta.yml`` (or ``config_path``) and resolve it for ``project_root``.

    Component globs are auto-discovered when the user did not set any.
    """
    logger = get_logger("pipeline")
    explicit = config_path is not None
    user = load_config(config_path if explicit else project_root, explicit=explicit)
    if user.source is not None:
        logger.debug("Loaded config from %s", user.source)
    config = resolve_config(user, detect_path_alias(project_root))
    if not config.globs_explicit:
        config.component_globs = discover_component_globs(project_root)
        logger.info("Auto-detected component globs: %s", ", ".join(config.component_globs))
    return config


class ExtractionPipeline:
    """Runs one full extraction over a project.

    Every run is a full rebuild; the cache only lives as long as the pipeline.
    """

    def __init__(
        self,
        extractor: Extractor | None = None,
        cache: ExtractionCache | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self.extractor = extractor
        self.cache = cache or ExtractionCache()
        self.clock = clock or _utc_now
        self.logger = get_logger("pipeline")

    def run(self, project_root: Path, config: ResolvedConfig | None = None) -> ExtractionResult:
        project_root = Path(project_root).expanduser().resolve()
        config = config or resolve_project_config(project_root)
        extractor = self._resolve_extractor(config)

        environment = detect_environment(project_root, config.path_alias)
        self.logger.info("Environment: %s", environment.summary())
        files = discover_files(
            project_root, config.globs, config.exclude_files, framework=environment.framework
        )
        self.logger.info("Found %d component files (%s)", len(files), config.component_dir)

        output = extractor.extract(ExtractorContext(project_root=project_root, config=config, files=files))
        components = [attach_examples(component) for component in output.components]
        final, duplicate_warnings = deduplicate(components)
        self.logger.info("Extracted %d components (%d before dedup)", len(final), len(components))

        if config.usage_analysis and final:
            analyze_usage(project_root, final, self.cache)

        warnings: List[ExtractionWarning] = list(output.warnings)
        for component in final:
            warnings.extend(component.warnings)
        warnings.extend(duplicate_warnings)
        self._log_warnings(warnings)

        meta = ExtractionMeta(
            generated_at=self.clock(),
            component_dir=config.component_dir,
            components=final,
            path_alias=dict(config.path_alias),
        )
        stats = RunStats(
            files_scanned=len(files),
            files_skipped=output.files_skipped,
            components_before=len(components),
            components_after=len(final),
        )
        self.logger.info(
            "Run stats: %s", ", ".join(f"{key}={value}" for key, value in stats.to_dict().items())
        )
        return ExtractionResult(meta=meta, warnings=warnings, stats=stats)

    def _resolve_extractor(self, config: ResolvedConfig) -> Extractor:
        if self.extractor is not None:
            return self.extractor
        try:
            return get_extractor(config.extractor)
        except (ValueError, TypeError) as exc:
            raise ConfigError(str(exc)) from exc

    def _log_warnings(self, warnings: List[ExtractionWarning]) -> None:
        if not warnings:
            return
        counts = Counter(warning.type for warning in warnings)
        summary = ", ".join(f"{kind}={count}" for kind, count in sorted(counts.items()))
        self.logger.warning("%d extraction warnings (%s)", len(warnings), summary)
        for warning in warnings:
            self.logger.debug("[%s] %s: %s", warning.severity, warning.file or "-", warning.message)


def run_extraction(
    project_root: Path,
    config: ResolvedConfig | None = None,
    extractor: Optional[Extractor] = None,
) -> ExtractionResult:
    """Extract component metadata; per-file problems come back as warnings."""
    return ExtractionPipeline(extractor=extractor).run(project_root, config)


__all__ = ["ExtractionPipeline", "resolve_project_config", "run_extraction"]
