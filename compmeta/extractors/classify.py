"""Kind classification and structured expansion of TypeScript prop types."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from tree_sitter import Node

from ..jsdoc import parse_jsdoc
from ..models import (
    COMPONENT_ELEMENT,
    COMPONENT_ICON,
    COMPONENT_NODE,
    KIND_ARRAY,
    KIND_BOOLEAN,
    KIND_COMPONENT,
    KIND_ENUM,
    KIND_MAP,
    KIND_NUMBER,
    KIND_OBJECT,
    KIND_OPAQUE,
    KIND_STRING,
    PRIMITIVE_KINDS,
    FieldMeta,
    PropType,
)
from ..syntax import named_children, node_text, unquote

_NULLISH = {"undefined", "null"}
_WRAPPER_NODES = {"type_annotation", "opting_type_annotation", "omitting_type_annotation", "parenthesized_type"}

_NODE_TYPES = {"ReactNode", "ReactChild", "ReactFragment"}
_ELEMENT_TYPES = {"ReactElement", "ReactPortal"}
_ICON_TYPES = {
    "ComponentType",
    "ComponentClass",
    "FC",
    "FunctionComponent",
    "ElementType",
    "ExoticComponent",
    "ForwardRefExoticComponent",
    "MemoExoticComponent",
    "LazyExoticComponent",
    "LucideIcon",
    "IconType",
}
_JSX_RETURN = re.compile(r"\b(?:ReactNode|ReactElement|JSX\.Element)\b")
_NOT_COMPONENT_SHAPES = {"object_type", "array_type", "literal_type", "predefined_type", "tuple_type"}

_PRIMITIVES = {"string": KIND_STRING, "number": KIND_NUMBER, "boolean": KIND_BOOLEAN}
_ARRAY_GENERICS = {"Array", "ReadonlyArray"}
_MAP_GENERICS = {"Record"}
_MEMBER_GENERICS = {"Partial", "Required", "Readonly", "Omit", "Pick", "PropsWithChildren"}


@dataclass
class Member:
    """One declared property of an object, interface or props type."""

    name: str
    type_node: Optional[Node]
    optional: bool = False
    description: str = ""


def compact(text: str) -> str:
    return " ".join(text.split())


def unwrap_type(node: Optional[Node]) -> Optional[Node]:
    """Strip annotation colons and parentheses around a type node."""
    while node is not None and node.type in _WRAPPER_NODES:
        inner = named_children(node)
        if not inner:
            return None
        node = inner[0]
    return node


def union_members(node: Node) -> List[Node]:
    """Flatten a (left-nested) union into its member types."""
    node = unwrap_type(node) or node
    if node.type != "union_type":
        return [node]
    members: List[Node] = []
    for child in named_children(node):
        members.extend(union_members(child))
    return members


def accepts_undefined(node: Optional[Node]) -> bool:
    if node is None:
        return False
    return any(node_text(member).strip() == "undefined" for member in union_members(node))


def type_arguments(node: Node) -> List[Node]:
    arguments = node.child_by_field_name("type_arguments")
    if arguments is None:
        arguments = next((child for child in node.children if child.type == "type_arguments"), None)
    return named_children(arguments) if arguments is not None else []


def type_name(node: Node) -> str:
    """Name of a type reference: ``Foo``, ``React.ReactNode`` or a generic's base."""
    if node.type == "generic_type":
        return node_text(node.child_by_field_name("name"))
    if node.type in {"type_identifier", "nested_type_identifier", "identifier"}:
        return node_text(node)
    return ""


def short_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


class TypeIndex:
    """Interfaces and type aliases declared at the top level of one file."""

    def __init__(self, root: Node) -> None:
        self.interfaces: Dict[str, List[Node]] = {}
        self.aliases: Dict[str, Node] = {}
        self.statements: Dict[str, Node] = {}
        for statement in root.children:
            declaration = statement
            if statement.type == "export_statement":
                declaration = statement.child_by_field_name("declaration")
                if declaration is None:
                    continue
            name = node_text(declaration.child_by_field_name("name"))
            if not name:
                continue
            if declaration.type == "interface_declaration":
                self.interfaces.setdefault(name, []).append(declaration)
                self.statements.setdefault(name, statement)
            elif declaration.type == "type_alias_declaration":
                value = declaration.child_by_field_name("value")
                if value is not None:
                    self.aliases[name] = value
                    self.statements.setdefault(name, statement)

    def __contains__(self, name: str) -> bool:
        return name in self.interfaces or name in self.aliases


class TypeClassifier:
    """Classifies declared types into prop kinds against one file's type index.

    Every expansion carries the set of type names already being expanded so a
    self-referencing type degrades to an opaque reference instead of looping.
    """

    def __init__(self, index: TypeIndex, component_type_map: Mapping[str, str] | None = None) -> None:
        self.index = index
        self.component_type_map = dict(component_type_map or {})

    # ------------------------------------------------------------------
    # Member resolution

    def members_of(self, node: Optional[Node], visited: FrozenSet[str] = frozenset()) -> Optional[List[Member]]:
        """Declared members of an object-like type, or ``None`` if unresolvable."""
        node = unwrap_type(node)
        if node is None:
            return None
        kind = node.type
        if kind in {"object_type", "interface_body"}:
            return self._object_members(node)
        if kind == "type_identifier":
            return self._named_members(node_text(node), visited)
        if kind == "intersection_type":
            resolved = [
                members
                for members in (self.members_of(child, visited) for child in named_children(node))
                if members is not None
            ]
            return _merge_members(resolved) if resolved else None
        if kind == "generic_type":
            return self._generic_members(node, visited)
        return None

    def _named_members(self, name: str, visited: FrozenSet[str]) -> Optional[List[Member]]:
        if name in visited:
            return None
        visited = visited | {name}
        if name in self.index.interfaces:
            groups: List[List[Member]] = []
            for declaration in self.index.interfaces[name]:
                for clause in declaration.children:
                    if clause.type != "extends_type_clause":
                        continue
                    for base in named_children(clause):
                        inherited = self.members_of(base, visited)
                        if inherited is not None:
                            groups.append(inherited)
                body = declaration.child_by_field_name("body")
                if body is not None:
                    groups.append(self._object_members(body))
            return _merge_members(groups)
        if name in self.index.aliases:
            return self.members_of(self.index.aliases[name], visited)
        return None

    def _generic_members(self, node: Node, visited: FrozenSet[str]) -> Optional[List[Member]]:
        base = short_name(type_name(node))
        arguments = type_arguments(node)
        if base in _MEMBER_GENERICS and arguments:
            members = self.members_of(arguments[0], visited)
            if base == "PropsWithChildren":
                members = list(members or [])
                if not any(member.name == "children" for member in members):
                    members.append(Member(name="children", type_node=None, optional=True))
                return members
            if members is None:
                return None
            if base == "Partial":
                return [Member(m.name, m.type_node, True, m.description) for m in members]
            if base == "Required":
                return [Member(m.name, m.type_node, False, m.description) for m in members]
            if base in {"Omit", "Pick"}:
                keys = set(self._literal_keys(arguments[1])) if len(arguments) > 1 else set()
                if base == "Omit":
                    return [member for member in members if member.name not in keys]
                return [member for member in members if member.name in keys]
            return members
        if base in self.index:
            return self._named_members(base, visited)
        return None

    def _literal_keys(self, node: Node) -> List[str]:
        keys: List[str] = []
        for member in union_members(node):
            if member.type == "literal_type":
                keys.append(unquote(node_text(member)))
        return keys

    def _object_members(self, body: Node) -> List[Member]:
        members: List[Member] = []
        pending_doc: Optional[str] = None
        for child in body.children:
            if child.type == "comment":
                text = node_text(child)
                pending_doc = text if text.startswith("/**") else None
                continue
            if child.type not in {"property_signature", "method_signature"}:
                continue
            name = unquote(node_text(child.child_by_field_name("name")))
            if not name:
                continue
            optional = any(part.type == "?" for part in child.children)
            if child.type == "property_signature":
                type_node = unwrap_type(child.child_by_field_name("type"))
            else:
                type_node = child
            description = parse_jsdoc(pending_doc).description if pending_doc else ""
            members.append(Member(name=name, type_node=type_node, optional=optional, description=description))
            pending_doc = None
        return members

    # ------------------------------------------------------------------
    # Classification

    def classify(self, node: Optional[Node], visited: FrozenSet[str] = frozenset()) -> PropType:
        node = unwrap_type(node)
        if node is None:
            return PropType(kind=KIND_OPAQUE, raw="any")
        raw = compact(node_text(node))
        options = [member for member in union_members(node) if node_text(member).strip() not in _NULLISH]
        if not options:
            return PropType(kind=KIND_OPAQUE, raw=raw)

        component_kind = self._component_kind(options, visited)
        if component_kind is not None:
            return PropType(kind=KIND_COMPONENT, raw=raw, component_kind=component_kind)

        literals = self._literal_options(options, visited)
        if literals is not None:
            literal_type = _classify_literals(literals, raw)
            if literal_type is not None:
                return literal_type

        if len(options) == 1:
            result = self._classify_single(options[0], visited)
            result.raw = raw
            return result

        return _widen([self._classify_single(option, visited) for option in options], raw)

    def expand_fields(self, members: Iterable[Member], visited: FrozenSet[str] = frozenset()) -> List[FieldMeta]:
        """Classify members into field descriptors; shared by ``T`` and ``T[]``."""
        fields: List[FieldMeta] = []
        for member in members:
            field_type = self.classify(member.type_node, visited)
            required = not member.optional and not accepts_undefined(member.type_node)
            fields.append(FieldMeta(member.name, field_type, required, member.description))
        return fields

    def _classify_single(self, node: Node, visited: FrozenSet[str]) -> PropType:
        raw = compact(node_text(node))
        kind = node.type

        if kind == "predefined_type":
            primitive = _PRIMITIVES.get(raw)
            return PropType(kind=primitive or KIND_OPAQUE, raw=raw)
        if kind == "template_literal_type":
            return PropType(kind=KIND_STRING, raw=raw)
        if kind == "literal_type":
            literal_type = _classify_literals([node], raw)
            return literal_type or PropType(kind=KIND_OPAQUE, raw=raw)
        if kind == "readonly_type":
            inner = named_children(node)
            return self.classify(inner[0], visited) if inner else PropType(kind=KIND_OPAQUE, raw=raw)
        if kind == "array_type":
            inner = named_children(node)
            item = self.classify(inner[0], visited) if inner else PropType(kind=KIND_OPAQUE, raw=raw)
            return PropType(kind=KIND_ARRAY, raw=raw, item=item)
        if kind == "object_type":
            return self._classify_object(node, raw, visited)
        if kind == "intersection_type":
            members = self.members_of(node, visited)
            if members:
                return PropType(kind=KIND_OBJECT, raw=raw, fields=self.expand_fields(members, visited))
            return PropType(kind=KIND_OPAQUE, raw=raw)
        if kind == "generic_type":
            return self._classify_generic(node, raw, visited)
        if kind == "type_identifier":
            return self._classify_named(raw, visited)
        return PropType(kind=KIND_OPAQUE, raw=raw)

    def _classify_object(self, node: Node, raw: str, visited: FrozenSet[str]) -> PropType:
        members = self._object_members(node)
        if not members:
            signatures = [child for child in node.children if child.type == "index_signature"]
            if signatures:
                annotations = [
                    child for child in signatures[0].children if child.type == "type_annotation"
                ]
                value = self.classify(annotations[-1], visited) if annotations else None
                if value is not None and (value.kind in PRIMITIVE_KINDS or value.kind == KIND_ENUM):
                    return PropType(kind=KIND_MAP, raw=raw, item=value)
                return PropType(kind=KIND_OPAQUE, raw=raw)
        return PropType(kind=KIND_OBJECT, raw=raw, fields=self.expand_fields(members, visited))

    def _classify_generic(self, node: Node, raw: str, visited: FrozenSet[str]) -> PropType:
        base = short_name(type_name(node))
        arguments = type_arguments(node)
        if base in _ARRAY_GENERICS and arguments:
            return PropType(kind=KIND_ARRAY, raw=raw, item=self.classify(arguments[0], visited))
        if base in _MAP_GENERICS and len(arguments) == 2:
            value = self.classify(arguments[1], visited)
            if value.kind in PRIMITIVE_KINDS or value.kind == KIND_ENUM:
                return PropType(kind=KIND_MAP, raw=raw, item=value)
            return PropType(kind=KIND_OPAQUE, raw=raw)
        if base in _MEMBER_GENERICS or base in self.index:
            members = self.members_of(node, visited)
            if members is not None:
                return PropType(kind=KIND_OBJECT, raw=raw, fields=self.expand_fields(members, visited))
        return PropType(kind=KIND_OPAQUE, raw=raw)

    def _classify_named(self, name: str, visited: FrozenSet[str]) -> PropType:
        if name in visited:
            return PropType(kind=KIND_OPAQUE, raw=name)
        if name in self.index.interfaces:
            members = self._named_members(name, visited) or []
            return PropType(kind=KIND_OBJECT, raw=name, fields=self.expand_fields(members, visited | {name}))
        if name in self.index.aliases:
            return self.classify(self.index.aliases[name], visited | {name})
        return PropType(kind=KIND_OPAQUE, raw=name)

    # ------------------------------------------------------------------
    # Component slots and literal unions

    def _component_kind(self, options: List[Node], visited: FrozenSet[str]) -> Optional[str]:
        kinds = {self._component_kind_of(option, visited) for option in options}
        for kind in (COMPONENT_ICON, COMPONENT_ELEMENT, COMPONENT_NODE):
            if kind in kinds:
                return kind
        return None

    def _component_kind_of(self, node: Node, visited: FrozenSet[str]) -> Optional[str]:
        if node.type in _NOT_COMPONENT_SHAPES:
            return None
        text = compact(node_text(node))
        for mapped_name, kind in self.component_type_map.items():
            if re.search(r"(?<![\w$])" + re.escape(mapped_name) + r"(?![\w$])", text):
                return kind
        if node.type == "function_type":
            returns = node.child_by_field_name("return_type")
            if returns is None:
                parts = named_children(node)
                returns = parts[-1] if parts else None
            return COMPONENT_ICON if _JSX_RETURN.search(node_text(returns)) else None

        name = type_name(node)
        if not name:
            return None
        if name == "JSX.Element" or short_name(name) in _ELEMENT_TYPES:
            return COMPONENT_ELEMENT
        if short_name(name) in _NODE_TYPES:
            return COMPONENT_NODE
        if short_name(name) in _ICON_TYPES:
            return COMPONENT_ICON
        if node.type == "type_identifier" and name in self.index.aliases and name not in visited:
            alias_options = union_members(self.index.aliases[name])
            return self._component_kind(alias_options, visited | {name})
        return None

    def _literal_options(self, options: List[Node], visited: FrozenSet[str]) -> Optional[List[Node]]:
        """Literal members of a union, following local aliases; ``None`` if any is not literal."""
        literals: List[Node] = []
        for option in options:
            if option.type == "literal_type":
                literals.append(option)
                continue
            name = node_text(option)
            if option.type == "type_identifier" and name in self.index.aliases and name not in visited:
                nested = [
                    member
                    for member in union_members(self.index.aliases[name])
                    if node_text(member).strip() not in _NULLISH
                ]
                resolved = self._literal_options(nested, visited | {name})
                if resolved is None:
                    return None
                literals.extend(resolved)
                continue
            return None
        return literals


def _literal_kind(node: Node) -> Optional[str]:
    inner = named_children(node)
    value = inner[0] if inner else None
    if value is None:
        return None
    if value.type in {"string", "template_string"}:
        return KIND_STRING
    if value.type in {"true", "false"}:
        return KIND_BOOLEAN
    if value.type in {"number", "unary_expression"}:
        return KIND_NUMBER
    return None


def _classify_literals(literals: List[Node], raw: str) -> Optional[PropType]:
    kinds = {_literal_kind(literal) for literal in literals}
    if kinds == {KIND_BOOLEAN}:
        return PropType(kind=KIND_BOOLEAN, raw=raw)
    if kinds == {KIND_NUMBER}:
        return PropType(kind=KIND_NUMBER, raw=raw)
    if kinds == {KIND_STRING}:
        values: List[str] = []
        for literal in literals:
            value = unquote(node_text(literal).strip())
            if value not in values:
                values.append(value)
        return PropType(kind=KIND_ENUM, raw=raw, values=values)
    return None


def _widen(options: List[PropType], raw: str) -> PropType:
    """Collapse a mixed union whose members share one primitive base."""
    bases = {KIND_STRING if option.kind == KIND_ENUM else option.kind for option in options}
    if len(bases) == 1:
        base = bases.pop()
        if base in PRIMITIVE_KINDS:
            return PropType(kind=base, raw=raw)
    return PropType(kind=KIND_OPAQUE, raw=raw)


def _merge_members(groups: Iterable[List[Member]]) -> List[Member]:
    merged: Dict[str, Member] = {}
    for members in groups:
        for member in members:
            merged[member.name] = member
    return list(merged.values())


__all__ = [
    "Member",
    "TypeClassifier",
    "TypeIndex",
    "accepts_undefined",
    "compact",
    "type_arguments",
    "type_name",
    "union_members",
    "unwrap_type",
]
