"""
Composition Resolver

For each composition edge (source = whole, target = part):

- the whole gets a cascading, orphan-removing collection of parts
- the part gets a composite identity <Part>Id made of the whole's id and
  its own id, plus a required back-reference whose key is mapped into
  that identity

A part belongs to at most one whole.
"""

from typing import Dict

from app.core.exceptions import ModelConflictError
from app.core.logging_config import logger
from app.services.spring_generator.descriptors import (
    ClassDescriptor,
    CompositeIdentity,
    FieldSpec,
    RelationKind,
    RelationshipSequence,
)
from app.services.spring_generator.loader import ResolvedModel
from app.services.spring_generator.naming import java_type, lower_first, plural

POLICY_FAIL = "fail"
DEFAULT_ID_TYPE = "Long"


class CompositionResolver:
    def __init__(
        self,
        resolved: ResolvedModel,
        descriptors: Dict[str, ClassDescriptor],
        sequence: RelationshipSequence,
        conflict_policy: str = "last_wins",
    ):
        self.resolved = resolved
        self.descriptors = descriptors
        self.sequence = sequence
        self.conflict_policy = conflict_policy

    def resolve(self, edge) -> bool:
        whole = self.resolved.resolve(edge.source)
        part = self.resolved.resolve(edge.target)
        if not whole or not part:
            logger.debug(f"[Composition] Dropping edge {edge.id or '?'}: unresolved endpoint")
            return False

        part_desc = self.descriptors[part]
        if part_desc.composite_identity is not None:
            self._release_identity(part_desc, whole)

        suffix = self.sequence.next_suffix(whole, part)
        whole_field = f"{lower_first(whole)}{suffix}"
        reference = f"{whole_field}_composition"

        self.descriptors[whole].add_field(FieldSpec(
            name=f"{plural(lower_first(part))}{suffix}",
            kind=RelationKind.ONE_TO_MANY,
            related=part,
            owning=True,
            collection=True,
            mapped_by=whole_field,
            cascade_all=True,
            orphan_removal=True,
            json_reference=reference,
        ))

        identity = CompositeIdentity(
            id_class_name=f"{part}Id",
            whole_class=whole,
            whole_field=whole_field,
            own_id_type=self._own_id_type(part),
        )
        part_desc.composite_identity = identity
        part_desc.add_field(FieldSpec(
            name=whole_field,
            kind=RelationKind.MANY_TO_ONE,
            related=whole,
            owning=False,
            join_column=f"{whole_field}_id",
            optional=False,
            maps_id=identity.whole_id_field,
            json_reference=reference,
        ))
        return True

    def _own_id_type(self, part: str) -> str:
        for attr in self.resolved.attributes.get(part, []):
            if attr.name == "id" and attr.raw_type:
                return java_type(attr.type)
        return DEFAULT_ID_TYPE

    def _release_identity(self, part_desc: ClassDescriptor, whole: str) -> None:
        previous = part_desc.composite_identity.whole_class
        if self.conflict_policy == POLICY_FAIL:
            raise ModelConflictError("composition", part_desc.name, previous, whole)

        logger.warning(
            f"[Composition] {part_desc.name} is already part of {previous}; "
            f"its identity now derives from {whole}"
        )
        # Earlier back-references stay as plain required foreign keys
        for spec in part_desc.fields:
            if spec.maps_id:
                spec.maps_id = None
        part_desc.composite_identity = None
