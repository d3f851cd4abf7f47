"""Core data models shared across compmeta components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .jsdoc import JSDoc

KIND_STRING = "string"
KIND_NUMBER = "number"
KIND_BOOLEAN = "boolean"
KIND_ENUM = "enum"
KIND_ARRAY = "array"
KIND_OBJECT = "object"
KIND_MAP = "map"
KIND_COMPONENT = "component"
KIND_OPAQUE = "opaque"

PRIMITIVE_KINDS = (KIND_STRING, KIND_NUMBER, KIND_BOOLEAN)

COMPONENT_ICON = "icon"
COMPONENT_ELEMENT = "element"
COMPONENT_NODE = "node"

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"


@dataclass
class PropType:
    """Classification of a declared TypeScript type."""

    kind: str
    raw: str = ""
    values: List[str] = field(default_factory=list)
    item: Optional["PropType"] = None
    fields: List["FieldMeta"] = field(default_factory=list)
    component_kind: Optional[str] = None

    @property
    def editable(self) -> bool:
        return self.kind != KIND_OPAQUE

    @property
    def structured_fields(self) -> List["FieldMeta"]:
        """Fields of an object type, or of the item type of an array of objects."""
        if self.kind == KIND_OBJECT:
            return self.fields
        if self.kind == KIND_ARRAY and self.item is not None and self.item.kind == KIND_OBJECT:
            return self.item.fields
        return []

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind, "rawType": self.raw}
        if self.kind == KIND_ENUM:
            data["values"] = list(self.values)
        if self.kind == KIND_COMPONENT:
            data["componentKind"] = self.component_kind
        if self.item is not None:
            data["item"] = self.item.to_dict()
        if self.kind == KIND_OBJECT:
            data["fields"] = [entry.to_dict() for entry in self.fields]
        if not self.editable:
            data["editable"] = False
        return data


@dataclass
class FieldMeta:
    """One named member of an expanded object or array-item type."""

    name: str
    type: PropType
    required: bool
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.to_dict(),
            "required": self.required,
            "description": self.description,
        }


@dataclass
class PropMeta:
    """Metadata for a single component prop."""

    name: str
    type: PropType
    required: bool
    default_value: Any = None
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.kind,
            "rawType": self.type.raw,
            "required": self.required,
            "description": self.description,
        }
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.type.kind == KIND_ENUM:
            data["values"] = list(self.type.values)
        if self.type.kind == KIND_COMPONENT:
            data["componentKind"] = self.type.component_kind
        if self.type.item is not None:
            data["item"] = self.type.item.to_dict()
        structured = self.type.structured_fields
        if structured:
            data["structuredFields"] = [entry.to_dict() for entry in structured]
        if not self.type.editable:
            data["editable"] = False
        return data


@dataclass
class Example:
    """A labelled preset parsed from one JSDoc @example block."""

    index: int
    label: str
    props: Dict[str, Any] = field(default_factory=dict)
    children_text: str = ""
    wrapper_name: Optional[str] = None
    wrapper_props: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "index": self.index,
            "label": self.label,
            "propValues": dict(self.props),
            "childrenText": self.children_text,
        }
        if self.wrapper_name:
            data["wrapperProps"] = {self.wrapper_name: dict(self.wrapper_props)}
        return data


@dataclass
class WrapperComponent:
    """An outer element every example renders the component inside of."""

    display_name: str
    default_props: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"displayName": self.display_name, "defaultProps": dict(self.default_props)}


@dataclass
class UsageCount:
    """How often a component is rendered across the project."""

    direct: int = 0
    indirect: int = 0

    @property
    def total(self) -> int:
        return self.direct + self.indirect

    def to_dict(self) -> Dict[str, int]:
        return {"direct": self.direct, "indirect": self.indirect, "total": self.total}


@dataclass
class ExtractionWarning:
    """Non-fatal problem recorded during a run."""

    type: str
    message: str
    file: Optional[str] = None
    severity: str = SEVERITY_WARNING
    component: Optional[str] = None
    prop: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "message": self.message,
            "severity": self.severity,
        }
        for key in ("file", "component", "prop"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class ComponentMeta:
    """Metadata for a single exported component."""

    display_name: str
    file_path: str
    description: str = ""
    props: Dict[str, PropMeta] = field(default_factory=dict)
    accepts_children: bool = False
    examples: List[Example] = field(default_factory=list)
    wrapper_components: List[WrapperComponent] = field(default_factory=list)
    usage: Optional[UsageCount] = None
    export_type: str = "named"
    jsdoc: Optional["JSDoc"] = None
    warnings: List[ExtractionWarning] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "displayName": self.display_name,
            "filePath": self.file_path,
            "description": self.description,
            "props": {name: prop.to_dict() for name, prop in self.props.items()},
            "acceptsChildren": self.accepts_children,
            "exportType": self.export_type,
            "examples": [example.to_dict() for example in self.examples],
        }
        if self.wrapper_components:
            data["wrapperComponents"] = [wrapper.to_dict() for wrapper in self.wrapper_components]
        if self.usage is not None:
            data["usageCount"] = self.usage.to_dict()
        return data


@dataclass
class ExtractionMeta:
    """The metadata document consumed by the renderer."""

    generated_at: str
    component_dir: str
    components: List[ComponentMeta]
    path_alias: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "componentDir": self.component_dir,
            "components": [component.to_dict() for component in self.components],
            "pathAlias": dict(self.path_alias),
        }


@dataclass
class RunStats:
    """Counters describing one extraction run."""

    files_scanned: int = 0
    files_skipped: int = 0
    components_before: int = 0
    components_after: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "filesScanned": self.files_scanned,
            "filesSkipped": self.files_skipped,
            "componentsBefore": self.components_before,
            "componentsAfter": self.components_after,
        }


@dataclass
class ExtractionResult:
    """Outcome of a run: the document plus everything worth warning about."""

    meta: ExtractionMeta
    warnings: List[ExtractionWarning] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)
