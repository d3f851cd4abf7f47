"""Example presets and wrapper-component detection from JSDoc @example tags."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .jsdoc import JSDoc, JSDocTag, JsxSnippet
from .logging import get_logger
from .models import ComponentMeta, Example, WrapperComponent

logger = get_logger("examples")


@dataclass
class _Observation:
    example: Example
    found: bool


def _element_children(node: JsxSnippet) -> Iterator[JsxSnippet]:
    for child in node.children:
        if child.is_fragment:
            yield from _element_children(child)
        else:
            yield child


def _outermost(snippet: JsxSnippet) -> JsxSnippet:
    # <>...</> around a single element does not count as a wrapper
    while snippet.is_fragment and len(snippet.children) == 1:
        snippet = snippet.children[0]
    return snippet


def observe_example(name: str, tag: JSDocTag, index: int) -> _Observation:
    example = Example(index=index, label=tag.label or f"Ex {index + 1}")
    if tag.snippet is None:
        return _Observation(example, found=False)

    outer = _outermost(tag.snippet)
    subject = outer.find(name)
    if subject is None:
        return _Observation(example, found=False)

    example.props = dict(subject.attributes)
    example.children_text = subject.text
    if outer is not subject and not outer.is_fragment:
        if any(child.name == name for child in _element_children(outer)):
            example.wrapper_name = outer.name
            example.wrapper_props = dict(outer.attributes)
    return _Observation(example, found=True)


def promote_wrapper(examples: Sequence[Example]) -> Optional[WrapperComponent]:
    """Return the wrapper every example agrees on, or ``None``.

    One example without wrapper data, or two examples naming different
    wrappers, is enough to emit nothing. Defaults take the first value seen
    for each attribute.
    """
    if not examples:
        return None
    names = {example.wrapper_name for example in examples}
    if len(names) != 1 or None in names:
        return None
    defaults = {}
    for example in examples:
        for key, value in example.wrapper_props.items():
            defaults.setdefault(key, value)
    return WrapperComponent(display_name=examples[0].wrapper_name or "", default_props=defaults)


def detect_examples(name: str, jsdoc: Optional[JSDoc]) -> Tuple[List[Example], List[WrapperComponent]]:
    """Examples in tag order plus the promoted wrapper, if any.

    Snippets that do not parse or never mention ``name`` still yield a
    labelled example but take no part in wrapper promotion.
    """
    if jsdoc is None:
        return [], []
    observations = [observe_example(name, tag, index) for index, tag in enumerate(jsdoc.examples)]
    examples = [observation.example for observation in observations]
    considered = [observation.example for observation in observations if observation.found]
    wrapper = promote_wrapper(considered)
    if wrapper is None and any(example.wrapper_name for example in considered):
        logger.debug("Examples of %s disagree on a wrapper; none promoted", name)
    return examples, [wrapper] if wrapper is not None else []


def attach_examples(component: ComponentMeta) -> ComponentMeta:
    component.examples, component.wrapper_components = detect_examples(
        component.display_name, component.jsdoc
    )
    return component


__all__ = ["attach_examples", "detect_examples", "observe_example", "promote_wrapper"]
