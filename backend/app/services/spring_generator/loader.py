"""
Model Loader & Name Resolver

Validates a raw diagram payload into a DiagramModel and builds the lookup
tables the resolvers work from: node id -> class identifier, identifier ->
attributes, and the set of association-class identifiers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import DiagramValidationError
from app.core.logging_config import logger
from app.schemas.diagram_model import ClassAttribute, DiagramModel
from app.services.spring_generator.naming import sanitize_class_name


def unwrap_model_payload(payload: Any) -> Any:
    """Accept {"model": {...}} or the bare model"""
    if isinstance(payload, dict) and isinstance(payload.get("model"), dict):
        return payload["model"]
    return payload


def load_diagram(raw: Union[DiagramModel, Dict[str, Any], None]) -> DiagramModel:
    """
    Validate a raw diagram payload.

    Raises:
        DiagramValidationError: with one entry per problem, each carrying
            the dotted location inside the payload.
    """
    if isinstance(raw, DiagramModel):
        return raw
    if raw is None:
        raw = {}
    try:
        return DiagramModel.model_validate(raw)
    except PydanticValidationError as e:
        errors = [
            {
                "loc": ".".join(str(part) for part in err["loc"]) or "model",
                "message": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        raise DiagramValidationError(errors) from e


@dataclass
class ResolvedModel:
    """Loader output shared by the resolvers and the collection emitter"""
    diagram: DiagramModel
    class_names: Dict[str, str] = field(default_factory=dict)
    attributes: Dict[str, List[ClassAttribute]] = field(default_factory=dict)
    association_classes: Set[str] = field(default_factory=set)
    # Distinct identifiers in first-appearance order
    ordered_names: List[str] = field(default_factory=list)

    def resolve(self, node_id: Optional[str]) -> Optional[str]:
        if node_id is None:
            return None
        return self.class_names.get(node_id)


def resolve_names(diagram: DiagramModel) -> ResolvedModel:
    """Build the id/identifier/attribute tables for a validated diagram"""
    resolved = ResolvedModel(diagram=diagram)

    for node in diagram.nodes:
        class_name = sanitize_class_name(node.label)
        if not class_name:
            logger.warning(
                f"[Loader] Node {node.id} label {node.label!r} sanitizes to an empty identifier"
            )
            class_name = node.label

        if class_name in resolved.attributes:
            logger.warning(
                f"[Loader] Node {node.id} reuses identifier {class_name}; its files replace the earlier class"
            )
        else:
            resolved.ordered_names.append(class_name)

        resolved.class_names[node.id] = class_name
        resolved.attributes[class_name] = _dedupe_attributes(class_name, node.attributes)
        if node.is_association_class:
            resolved.association_classes.add(class_name)

    return resolved


def _dedupe_attributes(class_name: str, attributes: List[ClassAttribute]) -> List[ClassAttribute]:
    """Later attributes replace earlier ones of the same name, in first-appearance position"""
    by_name: Dict[str, ClassAttribute] = {}
    for attr in attributes:
        if attr.name in by_name:
            logger.warning(
                f"[Loader] {class_name} declares attribute {attr.name!r} more than once; the last one wins"
            )
        by_name[attr.name] = attr
    return list(by_name.values())
