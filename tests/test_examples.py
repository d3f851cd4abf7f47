"""Tests for example preset and wrapper detection."""

from __future__ import annotations

from compmeta.examples import detect_examples, promote_wrapper
from compmeta.jsdoc import parse_jsdoc
from compmeta.models import Example


def _doc(source_parser, *examples: str):
    lines = ["/**", " * Accordion item."]
    for example in examples:
        lines.append(" * @example")
        lines.extend(f" * {line}" for line in example.strip().splitlines())
    lines.append(" */")
    return parse_jsdoc("\n".join(lines), source_parser)


ACCORDION_A = """
<Accordion type="single" collapsible>
  <AccordionItem value="a" disabled={false}>First</AccordionItem>
</Accordion>
"""
ACCORDION_B = """
<Accordion type="single" defaultValue="b">
  <AccordionItem value="b">Second</AccordionItem>
</Accordion>
"""
TABS = """
<Tabs defaultValue="x">
  <AccordionItem value="c" />
</Tabs>
"""


def test_examples_without_tags_are_empty(source_parser) -> None:
    examples, wrappers = detect_examples("Button", parse_jsdoc("/** Just text */", source_parser))

    assert examples == []
    assert wrappers == []


def test_direct_example_captures_props_and_label(source_parser) -> None:
    doc = parse_jsdoc(
        '/**\n * @example Large\n * <Button size="lg" count={2} onClick={handle}>Go</Button>\n'
        " * @example\n * <Button />\n */",
        source_parser,
    )

    examples, wrappers = detect_examples("Button", doc)

    assert [example.label for example in examples] == ["Large", "Ex 2"]
    assert examples[0].props == {"size": "lg", "count": 2}
    assert examples[0].children_text == "Go"
    assert examples[0].wrapper_name is None
    assert wrappers == []


def test_consistent_wrapper_is_promoted(source_parser) -> None:
    examples, wrappers = detect_examples("AccordionItem", _doc(source_parser, ACCORDION_A, ACCORDION_B))

    assert [example.props for example in examples] == [
        {"value": "a", "disabled": False},
        {"value": "b"},
    ]
    assert examples[0].to_dict()["wrapperProps"] == {"Accordion": {"type": "single", "collapsible": True}}
    [wrapper] = wrappers
    assert wrapper.display_name == "Accordion"
    assert wrapper.default_props == {"type": "single", "collapsible": True, "defaultValue": "b"}


def test_conflicting_wrapper_is_not_promoted(source_parser) -> None:
    examples, wrappers = detect_examples(
        "AccordionItem", _doc(source_parser, ACCORDION_A, ACCORDION_B, TABS)
    )

    assert [example.wrapper_name for example in examples] == ["Accordion", "Accordion", "Tabs"]
    assert wrappers == []


def test_partial_wrapper_is_not_promoted(source_parser) -> None:
    _, wrappers = detect_examples(
        "AccordionItem", _doc(source_parser, ACCORDION_A, '<AccordionItem value="z" />')
    )

    assert wrappers == []


def test_fragment_around_wrapper_is_transparent(source_parser) -> None:
    examples, wrappers = detect_examples(
        "AccordionItem",
        _doc(source_parser, "<>\n" + ACCORDION_A.strip() + "\n</>", ACCORDION_B),
    )

    assert examples[0].wrapper_name == "Accordion"
    assert wrappers[0].display_name == "Accordion"


def test_deeply_nested_subject_has_no_wrapper(source_parser) -> None:
    examples, wrappers = detect_examples(
        "AccordionTrigger",
        _doc(
            source_parser,
            "<Accordion><AccordionItem><AccordionTrigger>Open</AccordionTrigger></AccordionItem></Accordion>",
        ),
    )

    assert examples[0].wrapper_name is None
    assert examples[0].children_text == "Open"
    assert wrappers == []


def test_promote_wrapper_first_write_wins() -> None:
    examples = [
        Example(index=0, label="a", wrapper_name="Tabs", wrapper_props={"value": "one"}),
        Example(index=1, label="b", wrapper_name="Tabs", wrapper_props={"value": "two", "size": "sm"}),
    ]

    wrapper = promote_wrapper(examples)

    assert wrapper is not None
    assert wrapper.default_props == {"value": "one", "size": "sm"}
