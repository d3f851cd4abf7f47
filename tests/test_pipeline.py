"""End-to-end tests for the extraction pipeline."""

from __future__ import annotations

import pytest

from compmeta.config import ConfigError
from compmeta.discovery import GlobError
from compmeta.extractors import Extractor, ExtractorContext, ExtractorOutput
from compmeta.models import ComponentMeta, ExtractionWarning
from compmeta.pipeline import ExtractionPipeline, resolve_project_config, run_extraction

BUTTON = """
/**
 * Clickable button.
 * @example <caption>Primary</caption>
 * <Button variant="primary">Save</Button>
 */
export function Button({variant, size, disabled}: {variant: 'primary'|'secondary'; size?: 'sm'|'md'; disabled?: boolean}) {
  return <button disabled={disabled}>{variant}{size}</button>
}
"""

SMALL_BUTTON = """
export const Button = ({ variant }: { variant: string }) => <button>{variant}</button>
"""


class _StaticExtractor(Extractor):
    name = "static"

    def __init__(self) -> None:
        self.seen_files: list[str] = []

    def extract(self, context: ExtractorContext) -> ExtractorOutput:
        self.seen_files = list(context.files)
        return ExtractorOutput(
            components=[ComponentMeta(display_name="Static", file_path=context.files[0])],
            warnings=[ExtractionWarning(type="CUSTOM", message="note")],
            files_skipped=1,
        )


def test_run_extraction_end_to_end(project_builder) -> None:
    project_builder.component("button.tsx", BUTTON)
    project_builder.component("legacy/button.tsx", SMALL_BUTTON)
    project_builder.component("broken.tsx", "export const Broken = () => <div>\n")
    project_builder.write({"src/app/page.tsx": "export default function Page() { return <Button /> }\n"})

    config = resolve_project_config(project_builder.path())
    pipeline = ExtractionPipeline(clock=lambda: "2024-01-01T00:00:00Z")
    result = pipeline.run(project_builder.path(), config)

    assert result.meta.generated_at == "2024-01-01T00:00:00Z"
    assert result.meta.component_dir == "src/components/ui/**/*.tsx, src/components/**/*.tsx"
    assert result.meta.path_alias == {"@/": "src/"}
    [button] = result.meta.components
    assert button.file_path == "src/components/ui/button.tsx"
    assert button.description == "Clickable button."
    assert button.examples[0].label == "Primary"
    assert button.examples[0].props == {"variant": "primary"}
    assert button.usage is not None
    assert button.usage.direct == 1

    assert result.stats.to_dict() == {
        "filesScanned": 3,
        "filesSkipped": 1,
        "componentsBefore": 2,
        "componentsAfter": 1,
    }
    assert sorted(warning.type for warning in result.warnings) == ["DUPLICATE_COMPONENT", "FILE_PARSE_ERROR"]

    data = result.meta.to_dict()["components"][0]
    assert data["props"]["variant"] == {
        "name": "variant",
        "type": "enum",
        "rawType": "'primary'|'secondary'",
        "required": True,
        "description": "",
        "values": ["primary", "secondary"],
    }
    assert data["acceptsChildren"] is False


def test_config_file_and_tsconfig_alias_are_applied(project_builder) -> None:
    project_builder.write(
        {
            ".compmeta.yml": "componentGlob: 'ui/**/*.tsx'\nusageAnalysis: false\n",
            "tsconfig.json": '{"compilerOptions": {"paths": {"~/*": ["./ui/*"]}}}',
            "ui/card.tsx": "export const Card = ({ title }: { title: string }) => <div>{title}</div>\n",
        }
    )

    result = run_extraction(project_builder.path(), resolve_project_config(project_builder.path()))

    assert result.meta.path_alias == {"~/": "ui/"}
    assert [component.display_name for component in result.meta.components] == ["Card"]
    assert result.meta.components[0].usage is None


def test_globs_are_auto_discovered(project_builder) -> None:
    project_builder.write({"components/badge.tsx": "export const Badge = () => <span />\n"})

    config = resolve_project_config(project_builder.path())
    result = run_extraction(project_builder.path(), config)

    assert config.globs == ["components/**/*.tsx"]
    assert [component.display_name for component in result.meta.components] == ["Badge"]


def test_custom_extractor_receives_discovered_files(project_builder) -> None:
    project_builder.component("thing.tsx", "export const Thing = () => null\n")
    extractor = _StaticExtractor()

    result = run_extraction(project_builder.path(), project_builder.config(usage_analysis=False), extractor)

    assert extractor.seen_files == ["src/components/ui/thing.tsx"]
    assert [component.display_name for component in result.meta.components] == ["Static"]
    assert result.stats.files_skipped == 1
    assert [warning.type for warning in result.warnings] == ["CUSTOM"]


def test_unknown_extractor_is_a_config_error(project_builder) -> None:
    with pytest.raises(ConfigError):
        run_extraction(project_builder.path(), project_builder.config(extractor="nope"))


def test_bad_glob_aborts_the_run(project_builder) -> None:
    with pytest.raises(GlobError):
        run_extraction(project_builder.path(), project_builder.config(component_glob="src/[oops/*.tsx"))


def test_next_projects_skip_convention_files(project_builder) -> None:
    project_builder.write_json("package.json", {"dependencies": {"next": "14.0.0"}})
    project_builder.component("loading.tsx", "export default function Loading() { return null }\n")
    project_builder.component("spinner.tsx", "export const Spinner = () => null\n")
    extractor = _StaticExtractor()

    run_extraction(project_builder.path(), project_builder.config(usage_analysis=False), extractor)

    assert extractor.seen_files == ["src/components/ui/spinner.tsx"]


def test_react_projects_keep_convention_named_files(project_builder) -> None:
    project_builder.component("loading.tsx", "export default function Loading() { return null }\n")
    extractor = _StaticExtractor()

    run_extraction(project_builder.path(), project_builder.config(usage_analysis=False), extractor)

    assert extractor.seen_files == ["src/components/ui/loading.tsx"]
