"""Serialization tests for the metadata models."""

from __future__ import annotations

from compmeta.models import Example, FieldMeta, PropMeta, PropType, WrapperComponent


def _items_prop() -> PropMeta:
    item = PropType(
        kind="object",
        raw="Item",
        fields=[
            FieldMeta("label", PropType(kind="string", raw="string"), True),
            FieldMeta("icon", PropType(kind="component", raw="ReactNode", component_kind="node"), False),
        ],
    )
    return PropMeta(name="items", type=PropType(kind="array", raw="Item[]", item=item), required=True)


def test_array_of_objects_exposes_structured_fields() -> None:
    data = _items_prop().to_dict()

    assert data["type"] == "array"
    assert data["item"]["kind"] == "object"
    assert [entry["name"] for entry in data["structuredFields"]] == ["label", "icon"]
    assert data["structuredFields"][1]["type"] == {
        "kind": "component",
        "rawType": "ReactNode",
        "componentKind": "node",
    }
    assert "editable" not in data


def test_default_values_keep_their_type() -> None:
    prop = PropMeta(name="count", type=PropType(kind="number", raw="number"), required=False, default_value=0)

    assert prop.to_dict()["defaultValue"] == 0


def test_example_and_wrapper_serialise_camel_case() -> None:
    example = Example(index=0, label="Ex 1", props={"size": "sm"}, wrapper_name="Tabs", wrapper_props={"value": "a"})

    assert example.to_dict() == {
        "index": 0,
        "label": "Ex 1",
        "propValues": {"size": "sm"},
        "childrenText": "",
        "wrapperProps": {"Tabs": {"value": "a"}},
    }
    assert WrapperComponent("Tabs", {"value": "a"}).to_dict() == {
        "displayName": "Tabs",
        "defaultProps": {"value": "a"},
    }
