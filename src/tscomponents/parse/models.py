"""Data model shared by the resolver, loaders and the generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Union

from . import nodes as ast

__all__ = [
    "ArrayRange",
    "ClassRange",
    "ConstructorData",
    "EntityKind",
    "ExtensionData",
    "GenericTypeParameterData",
    "GenericTypeReferenceRange",
    "GenericallyTyped",
    "HashRange",
    "IndexedRange",
    "InterfaceRange",
    "IntersectionRange",
    "KeyofRange",
    "LiteralRange",
    "LoadedEntity",
    "MemberData",
    "NestedRange",
    "OverrideRange",
    "ParameterData",
    "ParameterKind",
    "Range",
    "RawRange",
    "RestRange",
    "SymbolicReference",
    "TupleRange",
    "TypeofRange",
    "UndefinedRange",
    "UnionRange",
    "WildcardRange",
]


class EntityKind(StrEnum):
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"


@dataclass(frozen=True, slots=True, kw_only=True)
class SymbolicReference:
    """Pointer to a named declaration that may not exist yet.

    ``qualified_path`` holds the namespace segments leading to
    ``local_name``: ``A.B.C`` is ``qualified_path=("A", "B")`` with
    ``local_name="C"``.
    """

    package_name: str
    file_name: str
    local_name: str
    qualified_path: tuple[str, ...] = ()
    file_name_referenced: str = ""

    @property
    def qualified_name(self) -> str:
        return ".".join((*self.qualified_path, self.local_name))


@dataclass(eq=False, slots=True, kw_only=True)
class LoadedEntity:
    """A located declaration plus its lazily attached inheritance edges.

    Entities are created once per landing declaration and compared by
    identity. The chain indexer fills ``super_class``,
    ``implements_interfaces`` and ``super_interfaces`` exactly once.
    """

    package_name: str
    file_name: str
    local_name: str
    qualified_path: tuple[str, ...]
    file_name_referenced: str
    kind: EntityKind
    declaration: (
        ast.ClassDeclaration
        | ast.InterfaceDeclaration
        | ast.TypeAliasDeclaration
        | ast.EnumDeclaration
    )
    module: ast.Module
    comment: str | None = None
    super_class: "GenericallyTyped | None" = None
    implements_interfaces: "list[GenericallyTyped] | None" = None
    super_interfaces: "list[GenericallyTyped] | None" = None

    @property
    def qualified_name(self) -> str:
        return ".".join((*self.qualified_path, self.local_name))

    @property
    def generics(self) -> tuple[ast.TypeParameter, ...]:
        if isinstance(self.declaration, ast.EnumDeclaration):
            return ()
        return self.declaration.type_parameters

    @property
    def generic_names(self) -> frozenset[str]:
        return frozenset(parameter.name for parameter in self.generics)

    @property
    def reference(self) -> SymbolicReference:
        return SymbolicReference(
            package_name=self.package_name,
            file_name=self.file_name,
            local_name=self.local_name,
            qualified_path=self.qualified_path,
            file_name_referenced=self.file_name_referenced,
        )

    def ancestors(self) -> list["LoadedEntity"]:
        """Return the superclass chain, closest first."""

        chain: list[LoadedEntity] = []
        seen = {id(self)}
        current = self.super_class
        while current is not None and id(current.value) not in seen:
            chain.append(current.value)
            seen.add(id(current.value))
            current = current.value.super_class
        return chain

    def __repr__(self) -> str:
        return (
            f"LoadedEntity({self.kind.value} {self.qualified_name} "
            f"@ {self.package_name}:{self.file_name})"
        )


@dataclass(frozen=True, slots=True)
class GenericallyTyped:
    """An inheritance edge with the type arguments written at the edge."""

    value: LoadedEntity
    type_arguments: tuple[ast.TypeNode, ...] = ()


# ----------------------------------------------------------------------
# Ranges
# ----------------------------------------------------------------------
_RANGE = dataclass(frozen=True, slots=True, kw_only=True)


@_RANGE
class RawRange:
    value: str


@_RANGE
class LiteralRange:
    value: str | int | float | bool


@_RANGE
class OverrideRange:
    value: str


@_RANGE
class WildcardRange:
    pass


@_RANGE
class UndefinedRange:
    pass


@_RANGE
class InterfaceRange:
    """Unresolved reference to a named type, resolved against ``origin``."""

    name: str
    qualified_path: tuple[str, ...] = ()
    instantiations: tuple["Range", ...] = ()
    origin: LoadedEntity


@_RANGE
class HashRange:
    """Unresolved inline object type, expanded field by field."""

    node: ast.TypeLiteral
    origin: LoadedEntity


@_RANGE
class TypeofRange:
    name: str
    qualified_path: tuple[str, ...] = ()
    origin: LoadedEntity


@_RANGE
class GenericTypeReferenceRange:
    """Reference to a generic parameter declared by ``origin``."""

    name: str
    origin: LoadedEntity | None = None


@_RANGE
class ClassRange:
    entity: LoadedEntity
    generic_type_parameter_instances: tuple["Range", ...] | None = None


@_RANGE
class NestedRange:
    fields: tuple["ParameterData", ...]


@_RANGE
class UnionRange:
    elements: tuple["Range", ...]


@_RANGE
class IntersectionRange:
    elements: tuple["Range", ...]


@_RANGE
class TupleRange:
    elements: tuple["Range", ...]


@_RANGE
class ArrayRange:
    element: "Range"


@_RANGE
class RestRange:
    element: "Range"


@_RANGE
class IndexedRange:
    object: "Range"
    index: "Range"


@_RANGE
class KeyofRange:
    value: "Range"


Range = Union[
    RawRange,
    LiteralRange,
    OverrideRange,
    WildcardRange,
    UndefinedRange,
    InterfaceRange,
    HashRange,
    TypeofRange,
    GenericTypeReferenceRange,
    ClassRange,
    NestedRange,
    UnionRange,
    IntersectionRange,
    TupleRange,
    ArrayRange,
    RestRange,
    IndexedRange,
    KeyofRange,
]


# ----------------------------------------------------------------------
# Loaded data
# ----------------------------------------------------------------------
class ParameterKind(StrEnum):
    FIELD = "field"
    INDEX = "index"


@dataclass(frozen=True, slots=True, kw_only=True)
class ParameterData:
    """A constructor argument, field or index signature.

    For ``ParameterKind.INDEX`` entries ``name`` holds the key domain
    (``string``, ``number`` or ``boolean``).
    """

    kind: ParameterKind = ParameterKind.FIELD
    name: str
    range: Range
    unique: bool = True
    required: bool = True
    default: str | None = None
    comment: str | None = None

    @property
    def domain(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True, kw_only=True)
class GenericTypeParameterData:
    name: str
    range: Range | None = None
    default: Range | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberData:
    name: str
    range: Range | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ConstructorData:
    """Constructor parameters of a class and the class that declares them."""

    holder: LoadedEntity
    parameters: tuple[ParameterData, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ExtensionData:
    """A superclass or implemented interface with resolved instantiations."""

    entity: LoadedEntity
    generic_type_instantiations: tuple[Range, ...] = field(default=())
