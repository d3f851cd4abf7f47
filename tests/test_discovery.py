"""Tests for component file discovery."""

from __future__ import annotations

import pytest

from compmeta.discovery import (
    GlobError,
    discover_component_globs,
    discover_files,
    expand_braces,
    find_files,
    glob_to_regex,
    is_non_component_file,
)


def test_glob_double_star_matches_zero_or_more_directories() -> None:
    regex = glob_to_regex("src/components/ui/**/*.tsx")

    assert regex.match("src/components/ui/button.tsx")
    assert regex.match("src/components/ui/forms/deep/input.tsx")
    assert not regex.match("src/components/uix/button.tsx")
    assert not regex.match("src/components/ui/button.ts")


def test_expand_braces() -> None:
    assert expand_braces("src/{ui,forms}/*.tsx") == ["src/ui/*.tsx", "src/forms/*.tsx"]
    with pytest.raises(GlobError):
        expand_braces("src/{ui/*.tsx")


@pytest.mark.parametrize("pattern", ["", "/abs/**/*.tsx", "../outside/*.tsx", "src/[abc/*.tsx"])
def test_invalid_globs_raise(project_builder, pattern: str) -> None:
    with pytest.raises(GlobError):
        find_files(pattern, project_builder.path())


def test_discover_files_is_sorted_and_filtered(project_builder) -> None:
    project_builder.write(
        {
            "src/components/ui/zeta.tsx": "export const Zeta = () => null\n",
            "src/components/ui/alpha.tsx": "export const Alpha = () => null\n",
            "src/components/ui/forms/input.tsx": "export const Input = () => null\n",
            "src/components/ui/toaster.tsx": "export const Toaster = () => null\n",
            "src/components/ui/button.test.tsx": "test('x', () => {})\n",
            "src/components/ui/hooks/use-thing.tsx": "export function useThing() {}\n",
            "src/components/ui/index.ts": "export * from './alpha'\n",
            "src/components/ui/helpers.ts": "export const x = 1\n",
        }
    )

    files = discover_files(project_builder.path(), "src/components/ui/**/*.tsx", ["toaster.tsx"])

    assert files == [
        "src/components/ui/alpha.tsx",
        "src/components/ui/forms/input.tsx",
        "src/components/ui/zeta.tsx",
    ]


def test_discover_files_unions_multiple_globs(project_builder) -> None:
    project_builder.write(
        {
            "src/components/ui/button.tsx": "export const Button = () => null\n",
            "src/components/card.tsx": "export const Card = () => null\n",
            "node_modules/lib/src/components/ui/x.tsx": "export const X = () => null\n",
        }
    )

    files = discover_files(
        project_builder.path(),
        ["src/components/ui/**/*.tsx", "src/components/**/*.tsx", "**/*.tsx"],
    )

    assert files == ["src/components/card.tsx", "src/components/ui/button.tsx"]


def test_next_convention_files_are_skipped_only_for_next() -> None:
    assert is_non_component_file("app/page.tsx", "page.tsx", "next")
    assert not is_non_component_file("src/components/page.tsx", "page.tsx", "react")
    assert is_non_component_file("src/lib/format.tsx", "format.tsx")


def test_discover_component_globs_probes_conventional_directories(project_builder) -> None:
    assert discover_component_globs(project_builder.path()) == ["src/components/ui/**/*.tsx"]

    project_builder.write({"components/ui/button.tsx": "", "src/ui/card.tsx": ""})

    assert discover_component_globs(project_builder.path()) == [
        "components/ui/**/*.tsx",
        "components/**/*.tsx",
        "src/ui/**/*.tsx",
    ]
