# Pydantic schemas
from app.schemas.diagram_model import (
    AttributeType,
    RelationshipKind,
    ClassAttribute,
    ClassNode,
    AssociationEdge,
    AggregationEdge,
    CompositionEdge,
    InheritanceEdge,
    RealizationEdge,
    DependencyEdge,
    RelationshipEdge,
    DiagramModel,
)

__all__ = [
    "AttributeType",
    "RelationshipKind",
    "ClassAttribute",
    "ClassNode",
    "AssociationEdge",
    "AggregationEdge",
    "CompositionEdge",
    "InheritanceEdge",
    "RealizationEdge",
    "DependencyEdge",
    "RelationshipEdge",
    "DiagramModel",
]
