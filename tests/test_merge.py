"""Tests for component deduplication."""

from __future__ import annotations

from compmeta.merge import DUPLICATE_COMPONENT, deduplicate
from compmeta.models import ComponentMeta, ExtractionWarning, PropMeta, PropType


def _component(name: str, path: str, prop_count: int, warnings=None) -> ComponentMeta:
    props = {
        f"p{index}": PropMeta(name=f"p{index}", type=PropType(kind="string", raw="string"), required=False)
        for index in range(prop_count)
    }
    return ComponentMeta(display_name=name, file_path=path, props=props, warnings=list(warnings or []))


def test_richer_definition_wins() -> None:
    components = [
        _component("Button", "a/button.tsx", 3),
        _component("Card", "a/card.tsx", 1),
        _component("Button", "b/button.tsx", 5),
    ]

    final, warnings = deduplicate(components)

    assert [component.display_name for component in final] == ["Button", "Card"]
    assert final[0].file_path == "b/button.tsx"
    assert len(final[0].props) == 5
    [warning] = warnings
    assert warning.type == DUPLICATE_COMPONENT
    assert warning.file == "a/button.tsx"
    assert warning.severity == "info"


def test_tie_keeps_first_seen() -> None:
    final, _ = deduplicate([_component("Badge", "first.tsx", 2), _component("Badge", "second.tsx", 2)])

    assert [component.file_path for component in final] == ["first.tsx"]


def test_discarded_warnings_are_kept() -> None:
    note = ExtractionWarning(type="PROPS_UNRESOLVED", message="x", file="old.tsx")
    final, warnings = deduplicate(
        [_component("Tabs", "old.tsx", 0, [note]), _component("Tabs", "new.tsx", 4)]
    )

    assert final[0].file_path == "new.tsx"
    assert warnings[0] is note
    assert warnings[1].type == DUPLICATE_COMPONENT


def test_unique_names_pass_through() -> None:
    components = [_component("A", "a.tsx", 1), _component("B", "b.tsx", 1)]

    final, warnings = deduplicate(components)

    assert final == components
    assert warnings == []
