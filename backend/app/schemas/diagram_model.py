"""
Diagram model schemas - validated, tagged-variant view of the editor graph.

The collaborative canvas stores loosely shaped nodes/edges (React Flow style:
labels, attributes and relationship kind nested under `data`). These schemas
accept both that shape and the flat one and normalize it into a typed graph:

    ClassNode        -> id, label, attributes, is_association_class
    RelationshipEdge -> tagged union on `kind`
                        (association | aggregation | composition |
                         inheritance | realization | dependency)

Referential integrity (edges pointing at missing nodes) is deliberately not
checked here; the generator drops such edges.
"""

import enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator, field_validator


class AttributeType(str, enum.Enum):
    """Semantic attribute type tags"""
    INT = "int"
    LONG = "long"
    STRING = "string"
    BOOLEAN = "boolean"
    DOUBLE = "double"
    FLOAT = "float"
    DATE = "date"
    OTHER = "other"


class RelationshipKind(str, enum.Enum):
    """UML relationship kinds an edge can carry"""
    ASSOCIATION = "association"
    AGGREGATION = "aggregation"
    COMPOSITION = "composition"
    INHERITANCE = "inheritance"
    REALIZATION = "realization"
    DEPENDENCY = "dependency"


TYPE_ALIASES: Dict[str, AttributeType] = {
    "integer": AttributeType.INT,
    "bool": AttributeType.BOOLEAN,
    "str": AttributeType.STRING,
    "text": AttributeType.STRING,
    "datetime": AttributeType.DATE,
    "localdate": AttributeType.DATE,
}

KIND_ALIASES: Dict[str, RelationshipKind] = {
    "generalization": RelationshipKind.INHERITANCE,
}

# Keys that may live under an editor node's `data` object
_NODE_DATA_KEYS = ("label", "attributes", "isAssociationClass")
# Keys that may live under an editor edge's `data` object
_EDGE_DATA_KEYS = ("label", "sourceCardinality", "targetCardinality")


def normalize_attribute_type(raw: Any) -> AttributeType:
    """Map a free-text type to its semantic tag; unknown types become OTHER"""
    value = str(raw or "").strip().lower()
    if not value:
        return AttributeType.OTHER
    if value in TYPE_ALIASES:
        return TYPE_ALIASES[value]
    try:
        return AttributeType(value)
    except ValueError:
        return AttributeType.OTHER


def resolve_edge_kind(edge: Dict[str, Any]) -> str:
    """
    Pick the relationship kind of a raw edge.

    Precedence: explicit `kind`, then `data.type`, then top-level `type`.
    The top-level `type` is often a renderer edge type ("smoothstep"),
    so it only counts when it names a relationship kind. Missing means association.
    """
    data = edge.get("data") if isinstance(edge.get("data"), dict) else {}
    known = {k.value for k in RelationshipKind} | set(KIND_ALIASES)

    for candidate in (edge.get("kind"), data.get("type")):
        if candidate:
            value = str(candidate).strip().lower()
            alias = KIND_ALIASES.get(value)
            return alias.value if alias else value

    top_level = str(edge.get("type") or "").strip().lower()
    if top_level in known:
        alias = KIND_ALIASES.get(top_level)
        return alias.value if alias else top_level
    return RelationshipKind.ASSOCIATION.value


def _coerce_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ClassAttribute(BaseModel):
    """A class attribute with its semantic type"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: str = Field(..., min_length=1)
    type: AttributeType = AttributeType.OTHER
    raw_type: str = Field("", alias="rawType")
    visibility: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw = data.get("type")
        data.setdefault("rawType", str(raw) if raw is not None else "")
        data["type"] = normalize_attribute_type(raw)
        data["id"] = _coerce_str(data["id"]) if data.get("id") is not None else ""
        return data


class ClassNode(BaseModel):
    """A class box on the diagram"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    label: str = ""
    attributes: List[ClassAttribute] = Field(default_factory=list)
    is_association_class: bool = Field(False, alias="isAssociationClass")

    @model_validator(mode="before")
    @classmethod
    def flatten_editor_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        flat = {}
        inner = data.get("data")
        if isinstance(inner, dict):
            flat.update({k: inner[k] for k in _NODE_DATA_KEYS if k in inner})
        flat.update({k: v for k, v in data.items() if k != "data"})
        flat["id"] = _coerce_str(flat.get("id"))
        if flat.get("label") is None:
            flat["label"] = ""
        if flat.get("attributes") is None:
            flat["attributes"] = []
        return flat


class _EdgeBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    label: Optional[str] = None
    source_cardinality: Optional[str] = Field(None, alias="sourceCardinality")
    target_cardinality: Optional[str] = Field(None, alias="targetCardinality")

    @field_validator("id", "source", "target", "source_cardinality", "target_cardinality", mode="before")
    @classmethod
    def coerce_scalars(cls, v: Any) -> Any:
        return _coerce_str(v)


class AssociationEdge(_EdgeBase):
    kind: Literal["association"] = "association"
    association_class_id: Optional[str] = Field(None, alias="associationClassId")

    @field_validator("association_class_id", mode="before")
    @classmethod
    def coerce_association_class(cls, v: Any) -> Any:
        return _coerce_str(v) or None


class AggregationEdge(_EdgeBase):
    kind: Literal["aggregation"] = "aggregation"


class CompositionEdge(_EdgeBase):
    """source = whole, target = part"""
    kind: Literal["composition"] = "composition"


class InheritanceEdge(_EdgeBase):
    """source = parent, target = child"""
    kind: Literal["inheritance"] = "inheritance"


class RealizationEdge(_EdgeBase):
    kind: Literal["realization"] = "realization"


class DependencyEdge(_EdgeBase):
    kind: Literal["dependency"] = "dependency"


RelationshipEdge = Annotated[
    Union[
        AssociationEdge,
        AggregationEdge,
        CompositionEdge,
        InheritanceEdge,
        RealizationEdge,
        DependencyEdge,
    ],
    Field(discriminator="kind"),
]


def normalize_edge_payload(edge: Any) -> Any:
    """Flatten an editor edge (`data.type`, `data.associationClass`, ...) into the tagged shape"""
    if not isinstance(edge, dict):
        return edge
    data = edge.get("data") if isinstance(edge.get("data"), dict) else {}
    flat = {k: data[k] for k in _EDGE_DATA_KEYS if k in data}
    flat.update({k: v for k, v in edge.items() if k not in ("data", "type")})
    flat["kind"] = resolve_edge_kind(edge)
    if flat.get("id") is None:
        flat["id"] = ""
    if "associationClassId" not in flat and data.get("associationClass"):
        flat["associationClassId"] = data["associationClass"]
    return flat


class DiagramModel(BaseModel):
    """Validated class diagram: nodes, typed edges and opaque metadata"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    nodes: List[ClassNode] = Field(default_factory=list)
    edges: List[RelationshipEdge] = Field(default_factory=list)
    metadata: Any = None

    @model_validator(mode="before")
    @classmethod
    def normalize_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("nodes") is None:
            data["nodes"] = []
        edges = data.get("edges")
        if edges is None:
            data["edges"] = []
        elif isinstance(edges, list):
            data["edges"] = [normalize_edge_payload(e) for e in edges]
        return data

    @model_validator(mode="after")
    def check_unique_node_ids(self) -> "DiagramModel":
        seen = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id '{node.id}'")
            seen.add(node.id)
        return self

