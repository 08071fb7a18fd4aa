"""
Typed artifact descriptors.

Resolvers fill these in; the emitter only formats them. Nothing here knows
about edges or cardinalities.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from app.schemas.diagram_model import ClassAttribute
from app.services.spring_generator.naming import lower_first

JPA = "jakarta.persistence"
JACKSON = "com.fasterxml.jackson.annotation"


class RelationKind(str, enum.Enum):
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    ONE_TO_ONE = "one_to_one"
    MANY_TO_MANY = "many_to_many"


class ImportSet:
    """Deduplicated set of fully-qualified import symbols, rendered sorted"""

    def __init__(self, symbols: Iterable[str] = ()):
        self._symbols = set(symbols)

    def add(self, *symbols: str) -> None:
        self._symbols.update(symbols)

    def update(self, other: Iterable[str]) -> None:
        self._symbols.update(other)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._symbols))

    def __len__(self) -> int:
        return len(self._symbols)


@dataclass(frozen=True)
class JoinTableSpec:
    name: str
    join_column: str
    inverse_join_column: str


@dataclass
class FieldSpec:
    """
    One relationship field on an entity.

    `owning` marks the side the relationship is declared from (the
    JSON-managed side); its partner on the other class has owning=False.
    """
    name: str
    kind: RelationKind
    related: str
    owning: bool
    collection: bool = False
    mapped_by: Optional[str] = None
    join_column: Optional[str] = None
    join_table: Optional[JoinTableSpec] = None
    cascade_all: bool = False
    orphan_removal: bool = False
    optional: bool = True
    maps_id: Optional[str] = None
    json_reference: Optional[str] = None

    @property
    def java_type(self) -> str:
        return f"List<{self.related}>" if self.collection else self.related

    def required_imports(self) -> List[str]:
        symbols: List[str] = []
        if self.collection:
            symbols.append("java.util.List")

        if self.kind == RelationKind.ONE_TO_MANY:
            symbols.append(f"{JPA}.OneToMany")
        elif self.kind == RelationKind.MANY_TO_ONE:
            symbols.append(f"{JPA}.ManyToOne")
        elif self.kind == RelationKind.ONE_TO_ONE:
            symbols.append(f"{JPA}.OneToOne")
        elif self.kind == RelationKind.MANY_TO_MANY:
            symbols.append(f"{JPA}.ManyToMany")

        if self.cascade_all:
            symbols.append(f"{JPA}.CascadeType")
        if self.join_column:
            symbols.append(f"{JPA}.JoinColumn")
        if self.join_table:
            symbols.extend([f"{JPA}.JoinTable", f"{JPA}.JoinColumn"])
        if self.maps_id:
            symbols.append(f"{JPA}.MapsId")
        if self.json_reference:
            symbols.append(
                f"{JACKSON}.JsonManagedReference" if self.owning else f"{JACKSON}.JsonBackReference"
            )
        return symbols


@dataclass
class InheritanceInfo:
    is_parent: bool = False
    is_child: bool = False
    parent_name: Optional[str] = None
    discriminator_value: Optional[str] = None

    @property
    def is_root(self) -> bool:
        """Top of a hierarchy: declares the strategy and discriminator column"""
        return self.is_parent and not self.is_child


@dataclass
class CompositeIdentity:
    """Embeddable key of a part entity: whole's id plus the part's own id"""
    id_class_name: str
    whole_class: str
    whole_field: str
    own_id_type: str
    whole_id_type: str = "Long"

    @property
    def whole_id_field(self) -> str:
        return f"{self.whole_field}Id"


@dataclass
class ClassDescriptor:
    """Emission-ready representation of one class"""
    name: str
    attributes: List[ClassAttribute] = field(default_factory=list)
    fields: List[FieldSpec] = field(default_factory=list)
    inheritance: Optional[InheritanceInfo] = None
    composite_identity: Optional[CompositeIdentity] = None
    is_association_class: bool = False

    @property
    def lower_name(self) -> str:
        return lower_first(self.name)

    @property
    def is_child(self) -> bool:
        return bool(self.inheritance and self.inheritance.is_child)

    def add_field(self, spec: FieldSpec) -> FieldSpec:
        self.fields.append(spec)
        return spec

    def required_imports(self) -> ImportSet:
        imports = ImportSet()
        for spec in self.fields:
            imports.update(spec.required_imports())
        return imports

    def find_fields(self, related: Optional[str] = None,
                    kind: Optional[RelationKind] = None) -> List[FieldSpec]:
        return [
            f for f in self.fields
            if (related is None or f.related == related) and (kind is None or f.kind == kind)
        ]


class RelationshipSequence:
    """
    Counts relationships per unordered class pair.

    The first relationship between two classes keeps the plain derived
    names; the n-th gets suffix "n" on every name it derives.
    """

    def __init__(self):
        self._counts: Dict[Tuple[str, str], int] = {}

    @staticmethod
    def _key(a: str, b: str) -> Tuple[str, str]:
        return (a, b) if a <= b else (b, a)

    def next_suffix(self, a: str, b: str) -> str:
        key = self._key(a, b)
        count = self._counts.get(key, 0) + 1
        self._counts[key] = count
        return "" if count == 1 else str(count)

    def count(self, a: str, b: str) -> int:
        return self._counts.get(self._key(a, b), 0)
