"""JSDoc comment parsing with best-effort JSX snippets for @example tags."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tree_sitter import Node

from .syntax import MISSING, SourceParser, literal_value, named_children, node_text, unquote

_TAG_LINE = re.compile(r"^@(?P<name>[A-Za-z][\w-]*)\s?(?P<rest>.*)$")
_CAPTION = re.compile(r"^\s*<caption>(?P<label>.*?)</caption>\s*", re.DOTALL)
_FENCE = re.compile(r"^\s*```")
_JSX_ROOTS = {"jsx_element", "jsx_self_closing_element"}


@dataclass
class JsxSnippet:
    """Outer tag name, literal attributes and element children of a JSX tree.

    Fragments have an empty ``name``.
    """

    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List["JsxSnippet"] = field(default_factory=list)
    text: str = ""

    @property
    def is_fragment(self) -> bool:
        return not self.name

    def find(self, name: str) -> Optional["JsxSnippet"]:
        """Depth-first search for the first element called ``name``."""
        if self.name == name:
            return self
        for child in self.children:
            found = child.find(name)
            if found is not None:
                return found
        return None


@dataclass
class JSDocTag:
    name: str
    body: str
    label: Optional[str] = None
    snippet: Optional[JsxSnippet] = None


@dataclass
class JSDoc:
    description: str = ""
    tags: List[JSDocTag] = field(default_factory=list)

    @property
    def examples(self) -> List[JSDocTag]:
        return [tag for tag in self.tags if tag.name == "example"]


def clean_comment(text: str) -> List[str]:
    """Strip the comment delimiters and leading ``*`` gutters, one entry per line."""
    body = text.strip()
    if body.startswith("/**"):
        body = body[3:]
    elif body.startswith("/*"):
        body = body[2:]
    if body.endswith("*/"):
        body = body[:-2]
    lines: List[str] = []
    for line in body.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
            lines.append(stripped.rstrip())
        else:
            lines.append(line.rstrip())
    return lines


def parse_jsdoc(text: str | None, parser: SourceParser | None = None) -> JSDoc:
    """Split a JSDoc block into free text and an ordered list of tags."""
    if not text:
        return JSDoc()
    lines = clean_comment(text)
    description: List[str] = []
    raw_tags: List[tuple[str, List[str]]] = []
    in_fence = False

    for line in lines:
        if _FENCE.match(line):
            in_fence = not in_fence
        match = None if in_fence else _TAG_LINE.match(line.strip())
        if match:
            raw_tags.append((match.group("name"), [match.group("rest")]))
            continue
        if raw_tags:
            raw_tags[-1][1].append(line)
        else:
            description.append(line)

    parser = parser or SourceParser()
    tags: List[JSDocTag] = []
    for name, body_lines in raw_tags:
        body = "\n".join(body_lines).strip("\n")
        if name == "example":
            tags.append(_parse_example_tag(body, parser))
        else:
            tags.append(JSDocTag(name=name, body=body.strip()))

    return JSDoc(description="\n".join(description).strip(), tags=tags)


def _parse_example_tag(body: str, parser: SourceParser) -> JSDocTag:
    label: Optional[str] = None
    remaining = body
    caption = _CAPTION.match(remaining)
    if caption:
        label = caption.group("label").strip() or None
        remaining = remaining[caption.end() :]
    else:
        first, _, rest = remaining.partition("\n")
        first_stripped = first.strip()
        if first_stripped and not first_stripped.startswith("<") and not _FENCE.match(first):
            label = first_stripped
            remaining = rest

    code_lines = [line for line in remaining.splitlines() if not _FENCE.match(line)]
    code = textwrap.dedent("\n".join(code_lines)).strip()
    snippet = parse_jsx_snippet(code, parser) if code else None
    return JSDocTag(name="example", body=code, label=label, snippet=snippet)


def parse_jsx_snippet(code: str, parser: SourceParser | None = None) -> Optional[JsxSnippet]:
    """Parse the outermost JSX element of ``code``; ``None`` if there is none."""
    parser = parser or SourceParser()
    tree = parser.parse(f"const __example = (\n{code}\n);\n")
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type in _JSX_ROOTS:
            return _to_snippet(node)
        stack.extend(reversed(node.children))
    return None


def _to_snippet(node: Node) -> JsxSnippet:
    if node.type == "jsx_self_closing_element":
        return JsxSnippet(
            name=node_text(node.child_by_field_name("name")),
            attributes=_attributes(node),
        )

    opening = next((child for child in node.children if child.type == "jsx_opening_element"), None)
    snippet = JsxSnippet(
        name=node_text(opening.child_by_field_name("name")) if opening is not None else "",
        attributes=_attributes(opening) if opening is not None else {},
    )
    texts: List[str] = []
    for child in node.children:
        if child.type in _JSX_ROOTS:
            snippet.children.append(_to_snippet(child))
        elif child.type == "jsx_text":
            text = " ".join(node_text(child).split())
            if text:
                texts.append(text)
        elif child.type == "jsx_expression":
            inner = named_children(child)
            value = literal_value(inner[0]) if inner else MISSING
            if isinstance(value, str) and value:
                texts.append(value)
    snippet.text = " ".join(texts)
    return snippet


def _attributes(node: Node) -> Dict[str, Any]:
    """Literal attribute values; expressions that are not literals are skipped."""
    attributes: Dict[str, Any] = {}
    for attribute in node.children:
        if attribute.type != "jsx_attribute":
            continue
        parts = named_children(attribute)
        if not parts:
            continue
        name = node_text(parts[0])
        if len(parts) == 1:
            attributes[name] = True
            continue
        value_node = parts[-1]
        if value_node.type == "string":
            attributes[name] = unquote(node_text(value_node))
        elif value_node.type == "jsx_expression":
            inner = named_children(value_node)
            value = literal_value(inner[0]) if inner else MISSING
            if value is not MISSING:
                attributes[name] = value
    return attributes


__all__ = [
    "JSDoc",
    "JSDocTag",
    "JsxSnippet",
    "clean_comment",
    "parse_jsdoc",
    "parse_jsx_snippet",
]
