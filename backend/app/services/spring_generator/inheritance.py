"""
Inheritance Resolver

Collects parent/child pairs from inheritance edges (source = parent,
target = child) and assigns each involved class its InheritanceInfo:

- root parent (parent, not a child): declares the JOINED strategy, the
  single-character "dtype" discriminator column and its own value
- child: extends its parent, shares the parent's key column, declares its
  discriminator value

A class is a child of at most one parent. A second parent is a model
conflict, handled according to the configured conflict policy.
"""

from collections import defaultdict
from typing import Dict, List

from app.core.exceptions import ModelConflictError
from app.core.logging_config import logger
from app.services.spring_generator.descriptors import ClassDescriptor, InheritanceInfo
from app.services.spring_generator.loader import ResolvedModel

POLICY_FAIL = "fail"


def discriminator_for(class_name: str) -> str:
    """First character of the identifier, upper-cased"""
    return class_name[:1].upper()


class InheritanceResolver:
    def __init__(
        self,
        resolved: ResolvedModel,
        descriptors: Dict[str, ClassDescriptor],
        conflict_policy: str = "last_wins",
    ):
        self.resolved = resolved
        self.descriptors = descriptors
        self.conflict_policy = conflict_policy
        self.children: Dict[str, List[str]] = defaultdict(list)
        self.parent_of: Dict[str, str] = {}

    def add_edge(self, edge) -> bool:
        parent = self.resolved.resolve(edge.source)
        child = self.resolved.resolve(edge.target)
        if not parent or not child:
            logger.debug(f"[Inheritance] Dropping edge {edge.id or '?'}: unresolved endpoint")
            return False
        if parent == child:
            logger.warning(f"[Inheritance] Ignoring self-inheritance on {parent}")
            return False

        previous = self.parent_of.get(child)
        if previous == parent:
            return True
        if previous is not None:
            if self.conflict_policy == POLICY_FAIL:
                raise ModelConflictError("inheritance", child, previous, parent)
            logger.warning(
                f"[Inheritance] {child} already extends {previous}; {parent} replaces it"
            )
            self.children[previous].remove(child)

        self.parent_of[child] = parent
        self.children[parent].append(child)
        return True

    def apply(self) -> None:
        """Write InheritanceInfo onto every class taking part in a hierarchy"""
        for name in self.resolved.ordered_names:
            is_parent = bool(self.children.get(name))
            is_child = name in self.parent_of
            if not is_parent and not is_child:
                continue
            self.descriptors[name].inheritance = InheritanceInfo(
                is_parent=is_parent,
                is_child=is_child,
                parent_name=self.parent_of.get(name),
                discriminator_value=discriminator_for(name),
            )

        self._warn_discriminator_collisions()

    def _warn_discriminator_collisions(self) -> None:
        for parent, children in self.children.items():
            seen: Dict[str, str] = {}
            for child in children:
                value = discriminator_for(child)
                if value in seen:
                    logger.warning(
                        f"[Inheritance] {child} and {seen[value]} under {parent} "
                        f"share discriminator value '{value}'"
                    )
                else:
                    seen[value] = child
