"""
Relationship Classifier

Turns every non-inheritance, non-composition edge into a pair of field
descriptors, one on each participating class.

Decision order:
    1. association with a resolvable association class -> join entity
    2. many/many   -> many-to-many, source owns the join table
    3. one/many    -> one-to-many on the "one" side, many-to-one FK on the other
    4. one/one     -> one-to-one, source owns the FK
"""

from typing import Dict, Optional

from app.core.logging_config import logger
from app.schemas.diagram_model import AssociationEdge, RelationshipKind
from app.services.spring_generator.descriptors import (
    ClassDescriptor,
    FieldSpec,
    JoinTableSpec,
    RelationKind,
    RelationshipSequence,
)
from app.services.spring_generator.loader import ResolvedModel
from app.services.spring_generator.naming import lower_first, plural

MANY_MARKER = "*"


def is_many(cardinality: Optional[str]) -> bool:
    return bool(cardinality) and MANY_MARKER in cardinality


class RelationshipClassifier:
    """Classifies plain relationship edges into per-class field descriptors"""

    def __init__(
        self,
        resolved: ResolvedModel,
        descriptors: Dict[str, ClassDescriptor],
        sequence: RelationshipSequence,
    ):
        self.resolved = resolved
        self.descriptors = descriptors
        self.sequence = sequence

    def classify(self, edge) -> bool:
        """
        Add the fields implied by `edge`.

        Returns False when the edge is not handled here: inheritance and
        composition edges, or edges with an unresolved endpoint.
        """
        if edge.kind in (RelationshipKind.INHERITANCE.value, RelationshipKind.COMPOSITION.value):
            return False

        source = self.resolved.resolve(edge.source)
        target = self.resolved.resolve(edge.target)
        if not source or not target:
            logger.debug(f"[Classifier] Dropping edge {edge.id or '?'}: unresolved endpoint")
            return False

        if isinstance(edge, AssociationEdge) and edge.association_class_id:
            assoc = self.resolved.resolve(edge.association_class_id)
            if assoc:
                self._association_class(source, target, assoc)
                return True
            logger.debug(
                f"[Classifier] Edge {edge.id or '?'} names unknown association class "
                f"{edge.association_class_id}; classifying by cardinality"
            )

        source_many = is_many(edge.source_cardinality)
        target_many = is_many(edge.target_cardinality)

        if source_many and target_many:
            self._many_to_many(source, target)
        elif target_many:
            self._one_to_many(one=source, many=target)
        elif source_many:
            self._one_to_many(one=target, many=source)
        else:
            self._one_to_one(source, target)
        return True

    def _association_class(self, source: str, target: str, assoc: str) -> None:
        assoc_lower = lower_first(assoc)
        for endpoint in (source, target):
            suffix = self.sequence.next_suffix(endpoint, assoc)
            back_ref = f"{lower_first(endpoint)}{suffix}"
            reference = f"{lower_first(endpoint)}_{assoc_lower}{suffix}"

            self.descriptors[endpoint].add_field(FieldSpec(
                name=f"{plural(assoc_lower)}{suffix}",
                kind=RelationKind.ONE_TO_MANY,
                related=assoc,
                owning=True,
                collection=True,
                mapped_by=back_ref,
                json_reference=reference,
            ))
            self.descriptors[assoc].add_field(FieldSpec(
                name=back_ref,
                kind=RelationKind.MANY_TO_ONE,
                related=endpoint,
                owning=False,
                join_column=f"{back_ref}_id",
                json_reference=reference,
            ))

    def _many_to_many(self, source: str, target: str) -> None:
        suffix = self.sequence.next_suffix(source, target)
        s, t = lower_first(source), lower_first(target)
        owning_name = f"{plural(t)}{suffix}"
        reference = f"{s}_{t}{suffix}"
        inverse_name = self._inverse_name(f"{plural(s)}{suffix}", source == target)

        self.descriptors[source].add_field(FieldSpec(
            name=owning_name,
            kind=RelationKind.MANY_TO_MANY,
            related=target,
            owning=True,
            collection=True,
            join_table=JoinTableSpec(
                name=f"{s}_{t}{suffix}",
                join_column=f"{s}_id",
                inverse_join_column=self._inverse_name(f"{t}_id", source == target, separator="_"),
            ),
            json_reference=reference,
        ))
        self.descriptors[target].add_field(FieldSpec(
            name=inverse_name,
            kind=RelationKind.MANY_TO_MANY,
            related=source,
            owning=False,
            collection=True,
            mapped_by=owning_name,
            json_reference=reference,
        ))

    def _one_to_many(self, one: str, many: str) -> None:
        suffix = self.sequence.next_suffix(one, many)
        back_ref = f"{lower_first(one)}{suffix}"

        self.descriptors[one].add_field(FieldSpec(
            name=f"{plural(lower_first(many))}{suffix}",
            kind=RelationKind.ONE_TO_MANY,
            related=many,
            owning=True,
            collection=True,
            mapped_by=back_ref,
            json_reference=back_ref,
        ))
        self.descriptors[many].add_field(FieldSpec(
            name=back_ref,
            kind=RelationKind.MANY_TO_ONE,
            related=one,
            owning=False,
            join_column=f"{back_ref}_id",
            json_reference=back_ref,
        ))

    def _one_to_one(self, source: str, target: str) -> None:
        suffix = self.sequence.next_suffix(source, target)
        s, t = lower_first(source), lower_first(target)
        owning_name = f"{t}{suffix}"
        reference = f"{s}_{t}{suffix}"
        inverse_name = self._inverse_name(f"{s}{suffix}", source == target)

        self.descriptors[source].add_field(FieldSpec(
            name=owning_name,
            kind=RelationKind.ONE_TO_ONE,
            related=target,
            owning=True,
            join_column=f"{owning_name}_id",
            json_reference=reference,
        ))
        self.descriptors[target].add_field(FieldSpec(
            name=inverse_name,
            kind=RelationKind.ONE_TO_ONE,
            related=source,
            owning=False,
            mapped_by=owning_name,
            json_reference=reference,
        ))

    @staticmethod
    def _inverse_name(name: str, self_reference: bool, separator: str = "") -> str:
        """Mirror-side name; a class related to itself needs a distinct one"""
        if not self_reference:
            return name
        if separator:
            return f"inverse{separator}{name}"
        return f"inverse{name[:1].upper()}{name[1:]}"
