"""Tree-sitter parsing helpers for TypeScript and TSX sources."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Tree

LANGUAGE_TSX = "tsx"
LANGUAGE_TYPESCRIPT = "typescript"

_LANGUAGE_FACTORIES: Dict[str, Callable[[], Any]] = {
    LANGUAGE_TSX: ts_typescript.language_tsx,
    LANGUAGE_TYPESCRIPT: ts_typescript.language_typescript,
}

MISSING = object()


class SourceParser:
    """Creates tree-sitter parsers lazily and reuses them per language."""

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def parse(self, source: str, language_key: str = LANGUAGE_TSX) -> Tree:
        return self._get_parser(language_key).parse(source.encode("utf-8"))

    def _get_parser(self, language_key: str) -> Parser:
        parser = self._parsers.get(language_key)
        if parser is not None:
            return parser
        factory = _LANGUAGE_FACTORIES.get(language_key)
        if factory is None:
            raise ValueError(f"Unsupported language: {language_key}")
        parser = Parser(Language(factory()))
        self._parsers[language_key] = parser
        return parser


def language_for_file(path: str) -> str:
    lower = path.lower()
    if lower.endswith(".ts") and not lower.endswith(".d.ts"):
        return LANGUAGE_TYPESCRIPT
    return LANGUAGE_TSX


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def named_children(node: Node) -> List[Node]:
    return [child for child in node.children if child.is_named and child.type != "comment"]


def preceding_doc_comment(node: Node) -> Optional[str]:
    """Return the ``/** */`` comment directly above ``node``, if any."""
    previous = node.prev_sibling
    if previous is None or previous.type != "comment":
        return None
    text = node_text(previous)
    if not text.startswith("/**"):
        return None
    # a blank line between the comment and the node detaches it
    if node.start_point[0] - previous.end_point[0] > 1:
        return None
    return text


def unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'", "`"}:
        return text[1:-1]
    return text


def literal_value(node: Optional[Node]) -> Any:
    """Return the Python value of a statically literal expression, else ``MISSING``.

    ``null`` and ``undefined`` count as "no value" and also yield ``MISSING``.
    """
    if node is None:
        return MISSING
    kind = node.type
    if kind == "parenthesized_expression":
        inner = named_children(node)
        return literal_value(inner[0]) if inner else MISSING
    if kind == "string":
        return unquote(node_text(node))
    if kind == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            return MISSING
        return unquote(node_text(node))
    if kind in {"true", "false"}:
        return kind == "true"
    if kind == "number":
        return _parse_number(node_text(node))
    if kind == "unary_expression":
        text = node_text(node).replace(" ", "")
        if text.startswith(("-", "+")):
            value = _parse_number(text[1:])
            if value is MISSING:
                return MISSING
            return -value if text[0] == "-" else value
    return MISSING


def _parse_number(text: str) -> Any:
    cleaned = text.replace("_", "")
    try:
        return int(cleaned, 0)
    except ValueError:
        pass
    try:
        return float(cleaned)
    except ValueError:
        return MISSING


__all__ = [
    "LANGUAGE_TSX",
    "LANGUAGE_TYPESCRIPT",
    "MISSING",
    "SourceParser",
    "language_for_file",
    "literal_value",
    "named_children",
    "node_text",
    "preceding_doc_comment",
    "unquote",
]
