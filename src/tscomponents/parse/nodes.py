"""Closed syntax model for TypeScript declaration files.

Tree-sitter trees are converted once into these frozen dataclasses by
:mod:`tscomponents.parse.syntax`. Every later stage dispatches over the
classes below only; grammar node names never leak past the converter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

__all__ = [
    "ArrayType",
    "CallSignature",
    "ClassDeclaration",
    "ClassMethod",
    "ClassProperty",
    "Comment",
    "ConstructSignature",
    "Constructor",
    "Declaration",
    "EnumDeclaration",
    "EnumMember",
    "ExportAll",
    "ExportAssignment",
    "ExportDeclaration",
    "ExportNamed",
    "ExportSpecifier",
    "FunctionType",
    "HeritageReference",
    "ImportDeclaration",
    "ImportSpecifier",
    "IndexSignature",
    "IndexedAccessType",
    "InterfaceDeclaration",
    "IntersectionType",
    "KeywordType",
    "LiteralType",
    "Member",
    "MethodSignature",
    "Module",
    "NamespaceDeclaration",
    "OptionalType",
    "Parameter",
    "PropertySignature",
    "RestType",
    "Statement",
    "TupleType",
    "TypeAliasDeclaration",
    "TypeLiteral",
    "TypeNode",
    "TypeOperator",
    "TypeParameter",
    "TypeQuery",
    "TypeReference",
    "UnionType",
    "UnsupportedType",
]

_NODE = dataclass(frozen=True, slots=True, kw_only=True)


@_NODE
class Comment:
    """A comment block and the lines it spans (1-based, inclusive)."""

    text: str
    start_line: int
    end_line: int


# ----------------------------------------------------------------------
# Type nodes
# ----------------------------------------------------------------------
@_NODE
class KeywordType:
    """Predefined keyword types such as ``string``, ``any`` or ``void``."""

    name: str
    line: int = 0
    column: int = 0


@_NODE
class TypeReference:
    """A named type, optionally qualified (``ns.Name``) and instantiated."""

    name: str
    qualifier: tuple[str, ...] = ()
    type_arguments: tuple["TypeNode", ...] = ()
    line: int = 0
    column: int = 0

    @property
    def qualified_name(self) -> str:
        return ".".join((*self.qualifier, self.name))


@_NODE
class ArrayType:
    element: "TypeNode"
    line: int = 0
    column: int = 0


@_NODE
class TupleType:
    elements: tuple["TypeNode", ...]
    line: int = 0
    column: int = 0


@_NODE
class RestType:
    element: "TypeNode"
    line: int = 0
    column: int = 0


@_NODE
class OptionalType:
    element: "TypeNode"
    line: int = 0
    column: int = 0


@_NODE
class UnionType:
    types: tuple["TypeNode", ...]
    line: int = 0
    column: int = 0


@_NODE
class IntersectionType:
    types: tuple["TypeNode", ...]
    line: int = 0
    column: int = 0


@_NODE
class LiteralType:
    """A literal type; ``value`` is a str, int, float or bool."""

    value: str | int | float | bool
    line: int = 0
    column: int = 0


@_NODE
class TypeLiteral:
    """An inline object type ``{ a: string; [k: string]: number }``."""

    members: tuple["Member", ...]
    line: int = 0
    column: int = 0


@_NODE
class FunctionType:
    parameters: tuple["Parameter", ...]
    return_type: "TypeNode | None" = None
    constructor: bool = False
    line: int = 0
    column: int = 0


@_NODE
class TypeOperator:
    """``keyof T``; ``readonly`` is unwrapped during conversion."""

    operator: str
    type: "TypeNode"
    line: int = 0
    column: int = 0


@_NODE
class TypeQuery:
    """``typeof Name`` or ``typeof ns.Name``."""

    name: str
    qualifier: tuple[str, ...] = ()
    line: int = 0
    column: int = 0


@_NODE
class IndexedAccessType:
    object_type: "TypeNode"
    index_type: "TypeNode"
    line: int = 0
    column: int = 0


@_NODE
class UnsupportedType:
    """A type-level construct the generator does not model."""

    kind: str
    text: str
    line: int = 0
    column: int = 0


TypeNode = Union[
    KeywordType,
    TypeReference,
    ArrayType,
    TupleType,
    RestType,
    OptionalType,
    UnionType,
    IntersectionType,
    LiteralType,
    TypeLiteral,
    FunctionType,
    TypeOperator,
    TypeQuery,
    IndexedAccessType,
    UnsupportedType,
]


# ----------------------------------------------------------------------
# Members
# ----------------------------------------------------------------------
@_NODE
class Parameter:
    """A function or constructor parameter.

    ``name`` is ``None`` for destructured parameters.
    """

    name: str | None
    type: TypeNode | None = None
    optional: bool = False
    rest: bool = False
    accessibility: str | None = None
    pattern: str = "identifier"
    line: int = 0
    column: int = 0


@_NODE
class PropertySignature:
    """``name?: Type`` inside an interface or object type.

    ``name`` is ``None`` for computed keys.
    """

    name: str | None
    type: TypeNode | None = None
    optional: bool = False
    readonly: bool = False
    line: int = 0
    column: int = 0


@_NODE
class MethodSignature:
    name: str | None
    parameters: tuple[Parameter, ...] = ()
    return_type: TypeNode | None = None
    optional: bool = False
    line: int = 0
    column: int = 0


@_NODE
class CallSignature:
    parameters: tuple[Parameter, ...] = ()
    return_type: TypeNode | None = None
    line: int = 0
    column: int = 0


@_NODE
class ConstructSignature:
    parameters: tuple[Parameter, ...] = ()
    return_type: TypeNode | None = None
    line: int = 0
    column: int = 0


@_NODE
class IndexSignature:
    """``[key: KeyType]: ValueType``."""

    key_name: str | None
    key_type: TypeNode | None = None
    type: TypeNode | None = None
    line: int = 0
    column: int = 0


@_NODE
class Constructor:
    parameters: tuple[Parameter, ...] = ()
    line: int = 0
    column: int = 0


@_NODE
class ClassProperty:
    name: str | None
    type: TypeNode | None = None
    optional: bool = False
    static: bool = False
    abstract: bool = False
    line: int = 0
    column: int = 0


@_NODE
class ClassMethod:
    name: str | None
    parameters: tuple[Parameter, ...] = ()
    return_type: TypeNode | None = None
    static: bool = False
    abstract: bool = False
    line: int = 0
    column: int = 0


Member = Union[
    PropertySignature,
    MethodSignature,
    CallSignature,
    ConstructSignature,
    IndexSignature,
    Constructor,
    ClassProperty,
    ClassMethod,
]


# ----------------------------------------------------------------------
# Declarations
# ----------------------------------------------------------------------
@_NODE
class TypeParameter:
    name: str
    constraint: TypeNode | None = None
    default: TypeNode | None = None


@_NODE
class HeritageReference:
    """An entry of an ``extends`` or ``implements`` clause.

    ``kind`` is ``identifier`` for plain names, ``member`` for qualified
    names (``ns.Base``) and ``other`` for anything else, such as class
    expressions or calls.
    """

    name: str
    qualifier: tuple[str, ...] = ()
    type_arguments: tuple[TypeNode, ...] = ()
    kind: str = "identifier"
    line: int = 0
    column: int = 0


@_NODE
class ClassDeclaration:
    """A class; ``name`` is ``None`` for anonymous class expressions."""

    name: str | None
    type_parameters: tuple[TypeParameter, ...] = ()
    extends: HeritageReference | None = None
    implements: tuple[HeritageReference, ...] = ()
    members: tuple[Member, ...] = ()
    abstract: bool = False
    line: int = 0
    column: int = 0


@_NODE
class InterfaceDeclaration:
    name: str
    type_parameters: tuple[TypeParameter, ...] = ()
    extends: tuple[HeritageReference, ...] = ()
    members: tuple[Member, ...] = ()
    line: int = 0
    column: int = 0


@_NODE
class TypeAliasDeclaration:
    name: str
    type: TypeNode
    type_parameters: tuple[TypeParameter, ...] = ()
    line: int = 0
    column: int = 0


@_NODE
class EnumMember:
    """An enum member; ``initializer`` is ``None`` unless it is a literal."""

    name: str
    initializer: LiteralType | None = None
    line: int = 0
    column: int = 0


@_NODE
class EnumDeclaration:
    name: str
    members: tuple[EnumMember, ...] = ()
    line: int = 0
    column: int = 0


@_NODE
class NamespaceDeclaration:
    name: str
    body: "Module"
    line: int = 0
    column: int = 0


Declaration = Union[
    ClassDeclaration,
    InterfaceDeclaration,
    TypeAliasDeclaration,
    EnumDeclaration,
    NamespaceDeclaration,
]


# ----------------------------------------------------------------------
# Statements
# ----------------------------------------------------------------------
@_NODE
class ExportDeclaration:
    """``export class A {}`` and the other exported declaration forms."""

    declaration: Declaration
    line: int = 0
    column: int = 0


@_NODE
class ExportSpecifier:
    local: str
    exported: str


@_NODE
class ExportNamed:
    """``export { A as B }`` with an optional ``from`` source."""

    specifiers: tuple[ExportSpecifier, ...]
    source: str | None = None
    line: int = 0
    column: int = 0


@_NODE
class ExportAll:
    """``export * from 'm'`` or ``export * as N from 'm'``."""

    source: str
    alias: str | None = None
    line: int = 0
    column: int = 0


@_NODE
class ExportAssignment:
    """``export = X`` or ``export = class { ... }``."""

    name: str | None = None
    declaration: ClassDeclaration | None = None
    line: int = 0
    column: int = 0


@_NODE
class ImportSpecifier:
    imported: str
    local: str


@_NODE
class ImportDeclaration:
    source: str
    specifiers: tuple[ImportSpecifier, ...] = ()
    namespace: str | None = None
    line: int = 0
    column: int = 0


Statement = Union[
    ClassDeclaration,
    InterfaceDeclaration,
    TypeAliasDeclaration,
    EnumDeclaration,
    NamespaceDeclaration,
    ExportDeclaration,
    ExportNamed,
    ExportAll,
    ExportAssignment,
    ImportDeclaration,
]


@_NODE
class Module:
    """A parsed file or namespace body."""

    statements: tuple[Statement, ...] = ()
    comments: tuple[Comment, ...] = ()
