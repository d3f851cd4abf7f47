"""Tree-sitter based extractor for React components written in TSX."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

from tree_sitter import Node

from ..jsdoc import parse_jsdoc
from ..logging import get_logger
from ..models import (
    KIND_COMPONENT,
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SEVERITY_WARNING,
    ComponentMeta,
    ExtractionWarning,
    PropMeta,
)
from ..syntax import (
    MISSING,
    SourceParser,
    language_for_file,
    literal_value,
    named_children,
    node_text,
    preceding_doc_comment,
    unquote,
)
from .base import Extractor, ExtractorContext, ExtractorOutput, PropFilter
from .classify import TypeClassifier, TypeIndex, accepts_undefined, short_name, type_arguments, type_name, unwrap_type

logger = get_logger("extractors.typescript")

FILE_PARSE_ERROR = "FILE_PARSE_ERROR"
PROPS_UNRESOLVED = "PROPS_UNRESOLVED"
COMPONENT_SKIPPED = "COMPONENT_SKIPPED"

EXPORT_NAMED = "named"
EXPORT_DEFAULT = "default"

_PASCAL_CASE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_FUNCTION_NODES = {"function_declaration", "function_expression", "function", "arrow_function"}
_PARAMETER_NODES = {"required_parameter", "optional_parameter"}
_WRAPPER_CALLS = {"forwardRef", "memo"}
_FC_TYPES = {"FC", "FunctionComponent", "VFC", "VoidFunctionComponent"}
_CLASS_BASES = {"Component", "PureComponent"}

_Exported = Tuple[str, Node, Node, str, Optional[Node]]


@dataclass
class ComponentDeclaration:
    """An exported declaration that looks like a React component."""

    name: str
    statement: Node
    function: Optional[Node] = None
    props_type: Optional[Node] = None
    props_pattern: Optional[Node] = None
    wrapper: Optional[str] = None
    export_type: str = EXPORT_NAMED


@dataclass
class NotAComponent:
    name: str
    reason: str


def classify_declaration(
    name: str,
    value: Node,
    statement: Node,
    *,
    export_type: str = EXPORT_NAMED,
    declared_type: Optional[Node] = None,
) -> Union[ComponentDeclaration, NotAComponent]:
    """Decide whether an exported binding is a component and locate its props.

    Components are PascalCase functions (plain, arrow, ``forwardRef`` or
    ``memo`` wrapped) taking at most one props parameter, or class components
    extending ``Component``/``PureComponent``.
    """
    if not _PASCAL_CASE.match(name):
        return NotAComponent(name, "name is not PascalCase")

    if value.type == "class_declaration" or value.type == "class":
        props_type = _class_props_type(value)
        if props_type is None and not _extends_component(value):
            return NotAComponent(name, "class does not extend a React component")
        return ComponentDeclaration(
            name=name,
            statement=statement,
            props_type=props_type,
            export_type=export_type,
        )

    function, wrapper, wrapper_types = _unwrap_value(value)
    if function is None:
        return NotAComponent(name, f"value is a {value.type}, not a function")

    params = _parameters(function)
    limit = 2 if wrapper == "forwardRef" else 1
    if len(params) > limit:
        return NotAComponent(name, f"takes {len(params)} parameters")

    declaration = ComponentDeclaration(
        name=name,
        statement=statement,
        function=function,
        wrapper=wrapper,
        export_type=export_type,
    )
    if not params:
        return declaration

    first = params[0]
    if first.type in _PARAMETER_NODES:
        declaration.props_pattern = first.child_by_field_name("pattern")
        declaration.props_type = unwrap_type(first.child_by_field_name("type"))
    else:
        declaration.props_pattern = first

    if declaration.props_type is None:
        if wrapper == "forwardRef" and len(wrapper_types) >= 2:
            declaration.props_type = wrapper_types[1]
        elif wrapper == "memo" and wrapper_types:
            declaration.props_type = wrapper_types[0]
        else:
            declaration.props_type = _fc_props_type(declared_type)
    return declaration


def _unwrap_value(value: Node) -> Tuple[Optional[Node], Optional[str], List[Node]]:
    """Peel ``forwardRef``/``memo`` calls and casts down to the inner function."""
    wrapper: Optional[str] = None
    wrapper_types: List[Node] = []
    node: Optional[Node] = value
    while node is not None:
        if node.type in _FUNCTION_NODES:
            return node, wrapper, wrapper_types
        if node.type in {"parenthesized_expression", "as_expression", "satisfies_expression"}:
            inner = named_children(node)
            node = inner[0] if inner else None
            continue
        if node.type == "call_expression":
            callee = short_name(node_text(node.child_by_field_name("function")))
            if callee not in _WRAPPER_CALLS:
                return None, wrapper, wrapper_types
            # forwardRef takes precedence over an enclosing memo
            if wrapper != "forwardRef":
                wrapper = callee
                wrapper_types = type_arguments(node) or wrapper_types
            arguments = node.child_by_field_name("arguments")
            inner = named_children(arguments) if arguments is not None else []
            node = inner[0] if inner else None
            continue
        return None, wrapper, wrapper_types
    return None, wrapper, wrapper_types


def _parameters(function: Node) -> List[Node]:
    single = function.child_by_field_name("parameter")
    if single is not None:
        return [single]
    params = function.child_by_field_name("parameters")
    if params is None:
        return []
    return [child for child in named_children(params) if child.type in _PARAMETER_NODES]


def _fc_props_type(declared_type: Optional[Node]) -> Optional[Node]:
    declared = unwrap_type(declared_type)
    if declared is None or declared.type != "generic_type":
        return None
    if short_name(type_name(declared)) not in _FC_TYPES:
        return None
    arguments = type_arguments(declared)
    return arguments[0] if arguments else None


def _extends_clause(class_node: Node) -> Optional[Node]:
    for child in class_node.children:
        if child.type != "class_heritage":
            continue
        for clause in child.children:
            if clause.type == "extends_clause":
                return clause
    return None


def _extends_component(class_node: Node) -> bool:
    clause = _extends_clause(class_node)
    if clause is None:
        return False
    base = clause.child_by_field_name("value")
    return short_name(node_text(base)) in _CLASS_BASES


def _class_props_type(class_node: Node) -> Optional[Node]:
    if not _extends_component(class_node):
        return None
    arguments = type_arguments(_extends_clause(class_node))
    return arguments[0] if arguments else None


def _declared_values(declaration: Node) -> Iterator[Tuple[str, Node, Optional[Node]]]:
    if declaration.type in {"function_declaration", "class_declaration"}:
        name = node_text(declaration.child_by_field_name("name"))
        if name:
            yield name, declaration, None
        return
    if declaration.type not in {"lexical_declaration", "variable_declaration"}:
        return
    for declarator in declaration.children:
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name")
        value = declarator.child_by_field_name("value")
        if name_node is None or name_node.type != "identifier" or value is None:
            continue
        yield node_text(name_node), value, declarator.child_by_field_name("type")


def iter_exported_declarations(root: Node) -> Iterator[_Exported]:
    """Yield ``(name, value, statement, export_type, declared_type)`` per export.

    Covers inline exports, ``export default`` of a local binding and
    ``export { Local as Public }`` clauses. Re-exports from other modules are
    ignored; their source file is scanned on its own.
    """
    local: Dict[str, Tuple[Node, Node, Optional[Node]]] = {}
    deferred: List[Tuple[str, str, str]] = []
    emitted: Set[str] = set()

    for statement in root.children:
        if statement.type != "export_statement":
            for name, value, declared_type in _declared_values(statement):
                local[name] = (value, statement, declared_type)
            continue

        is_default = any(child.type == "default" for child in statement.children)
        export_type = EXPORT_DEFAULT if is_default else EXPORT_NAMED
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            for name, value, declared_type in _declared_values(declaration):
                local[name] = (value, statement, declared_type)
                emitted.add(name)
                yield name, value, statement, export_type, declared_type
            continue

        if statement.child_by_field_name("source") is not None:
            continue
        value = statement.child_by_field_name("value")
        if is_default and value is not None and value.type == "identifier":
            name = node_text(value)
            deferred.append((name, name, EXPORT_DEFAULT))
            continue
        for clause in statement.children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.children:
                if specifier.type != "export_specifier":
                    continue
                local_name = node_text(specifier.child_by_field_name("name"))
                alias = node_text(specifier.child_by_field_name("alias")) or local_name
                deferred.append((alias, local_name, EXPORT_DEFAULT if alias == "default" else EXPORT_NAMED))

    for public_name, local_name, export_type in deferred:
        if local_name not in local:
            continue
        name = local_name if public_name == "default" else public_name
        if name in emitted:
            continue
        emitted.add(name)
        value, statement, declared_type = local[local_name]
        yield name, value, statement, export_type, declared_type


def pattern_bindings(pattern: Optional[Node]) -> Tuple[Dict[str, Any], Set[str], Set[str]]:
    """Literal defaults, bound names and defaulted names of a destructured props parameter.

    Every name with a default lands in the third set, literal or not; only
    literal defaults make it into the mapping.
    """
    defaults: Dict[str, Any] = {}
    names: Set[str] = set()
    defaulted: Set[str] = set()
    if pattern is None or pattern.type != "object_pattern":
        return defaults, names, defaulted
    for child in named_children(pattern):
        if child.type == "shorthand_property_identifier_pattern":
            names.add(node_text(child))
            continue
        if child.type == "object_assignment_pattern":
            name = node_text(child.child_by_field_name("left"))
            default_node = child.child_by_field_name("right")
        elif child.type == "pair_pattern":
            name = unquote(node_text(child.child_by_field_name("key")))
            target = child.child_by_field_name("value")
            default_node = None
            if target is not None and target.type in {"assignment_pattern", "object_assignment_pattern"}:
                default_node = target.child_by_field_name("right")
        else:
            continue
        names.add(name)
        if default_node is None:
            continue
        defaulted.add(name)
        value = literal_value(default_node)
        if value is not MISSING:
            defaults[name] = value
    return defaults, names, defaulted


def _reads_children(declaration: ComponentDeclaration) -> bool:
    pattern = declaration.props_pattern
    if declaration.function is None or pattern is None or pattern.type != "identifier":
        return False
    body = declaration.function.child_by_field_name("body")
    name = re.escape(node_text(pattern))
    return re.search(rf"\b{name}\s*\.\s*children\b", node_text(body)) is not None


class TypeScriptExtractor(Extractor):
    """Extracts component metadata from ``.tsx`` files with tree-sitter."""

    name = "typescript"

    def __init__(self, parser: SourceParser | None = None) -> None:
        self.parser = parser or SourceParser()

    def extract(self, context: ExtractorContext) -> ExtractorOutput:
        output = ExtractorOutput()
        prop_filter = PropFilter.from_config(context.config)
        excluded = set(context.config.exclude_components)
        for rel_path in context.files:
            try:
                components, warnings = self.extract_file(
                    context.project_root,
                    rel_path,
                    prop_filter=prop_filter,
                    excluded=excluded,
                    component_type_map=context.config.component_type_map,
                )
            except _FileSkipped as skipped:
                output.files_skipped += 1
                output.warnings.append(skipped.warning)
                logger.warning("Skipping %s: %s", rel_path, skipped.warning.message)
                continue
            output.components.extend(components)
            output.warnings.extend(warnings)
        return output

    def extract_file(
        self,
        project_root: Path,
        rel_path: str,
        *,
        prop_filter: PropFilter | None = None,
        excluded: Set[str] | None = None,
        component_type_map: Dict[str, str] | None = None,
    ) -> Tuple[List[ComponentMeta], List[ExtractionWarning]]:
        path = project_root / rel_path
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise _FileSkipped(_parse_warning(rel_path, f"Cannot read file: {exc}")) from exc

        tree = self.parser.parse(source, language_for_file(rel_path))
        root = tree.root_node
        if root.has_error:
            raise _FileSkipped(_parse_warning(rel_path, f"Syntax error near line {_first_error_line(root)}"))

        prop_filter = prop_filter or PropFilter()
        excluded = excluded or set()
        index = TypeIndex(root)
        classifier = TypeClassifier(index, component_type_map)

        components: List[ComponentMeta] = []
        warnings: List[ExtractionWarning] = []
        for name, value, statement, export_type, declared_type in iter_exported_declarations(root):
            result = classify_declaration(
                name, value, statement, export_type=export_type, declared_type=declared_type
            )
            if isinstance(result, NotAComponent):
                logger.debug("%s:%s is not a component (%s)", rel_path, name, result.reason)
                continue
            if name in excluded:
                warnings.append(
                    ExtractionWarning(
                        type=COMPONENT_SKIPPED,
                        message=f"{name} is listed in excludeComponents",
                        file=rel_path,
                        severity=SEVERITY_INFO,
                        component=name,
                    )
                )
                continue
            component, warning = self._build_component(result, rel_path, index, classifier, prop_filter)
            if warning is not None:
                warnings.append(warning)
            if component is not None:
                components.append(component)
        return components, warnings

    def _build_component(
        self,
        declaration: ComponentDeclaration,
        rel_path: str,
        index: TypeIndex,
        classifier: TypeClassifier,
        prop_filter: PropFilter,
    ) -> Tuple[Optional[ComponentMeta], Optional[ExtractionWarning]]:
        members = []
        if declaration.props_type is not None:
            members = classifier.members_of(declaration.props_type)
            if members is None:
                return None, ExtractionWarning(
                    type=PROPS_UNRESOLVED,
                    message=f"Cannot resolve props type {node_text(declaration.props_type)!r}",
                    file=rel_path,
                    severity=SEVERITY_WARNING,
                    component=declaration.name,
                )
        elif declaration.props_pattern is not None:
            return None, ExtractionWarning(
                type=PROPS_UNRESOLVED,
                message="Props parameter has no type annotation",
                file=rel_path,
                severity=SEVERITY_WARNING,
                component=declaration.name,
            )

        doc = preceding_doc_comment(declaration.statement)
        if doc is None and declaration.props_type is not None:
            props_name = type_name(declaration.props_type)
            if props_name in index.statements:
                doc = preceding_doc_comment(index.statements[props_name])
        jsdoc = parse_jsdoc(doc, self.parser)

        defaults, bound, defaulted = pattern_bindings(declaration.props_pattern)
        accepts_children = "children" in bound or _reads_children(declaration)
        props: Dict[str, PropMeta] = {}
        for member in members:
            if member.name == "children":
                accepts_children = True
                continue
            prop_type = classifier.classify(member.type_node)
            if not prop_filter(member.name):
                continue
            default = defaults.get(member.name, MISSING)
            if prop_type.kind == KIND_COMPONENT:
                default = MISSING
            required = (
                not member.optional
                and not accepts_undefined(member.type_node)
                and member.name not in defaulted
            )
            props[member.name] = PropMeta(
                name=member.name,
                type=prop_type,
                required=required,
                default_value=None if default is MISSING else default,
                description=member.description,
            )

        component = ComponentMeta(
            display_name=declaration.name,
            file_path=rel_path,
            description=jsdoc.description,
            props=props,
            accepts_children=accepts_children,
            export_type=declaration.export_type,
            jsdoc=jsdoc,
        )
        return component, None


class _FileSkipped(Exception):
    def __init__(self, warning: ExtractionWarning) -> None:
        super().__init__(warning.message)
        self.warning = warning


def _parse_warning(rel_path: str, message: str) -> ExtractionWarning:
    return ExtractionWarning(type=FILE_PARSE_ERROR, message=message, file=rel_path, severity=SEVERITY_ERROR)


def _first_error_line(root: Node) -> int:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
    return root.start_point[0] + 1


__all__ = [
    "COMPONENT_SKIPPED",
    "FILE_PARSE_ERROR",
    "PROPS_UNRESOLVED",
    "ComponentDeclaration",
    "NotAComponent",
    "TypeScriptExtractor",
    "classify_declaration",
    "iter_exported_declarations",
    "pattern_bindings",
]
