"""Declaration analysis: syntax, symbol resolution, ranges and generics."""

from __future__ import annotations

from .comments import CommentData, CommentLoader, parse_comment
from .constructors import ConstructorLoader
from .elements import ClassElements, ClassElementsLoader, ImportTarget
from .errors import (
    ClassExtendsNonClassError,
    ClassificationError,
    DeclarationNotFoundError,
    GenerationError,
    IllegalNestedArrayError,
    InterfaceExtendsNonInterfaceError,
    InvalidAnnotationError,
    MissingTypeAnnotationError,
    NamespacedSuperclassError,
    PackageMetadataError,
    PackageResolutionError,
    RecursiveTypeAliasError,
    TypeScriptSyntaxError,
    UnsupportedEnumMemberError,
    UnsupportedHeritageError,
    UnsupportedShapeError,
    UnsupportedTypeError,
    UnsupportedTypeofTargetError,
)
from .extensions import ExtensionLoader
from .finder import ClassFinder
from .generics import GenericsLoader
from .indexer import ClassIndexer
from .loader import ClassLoader
from .members import MemberLoader
from .memo import InFlightCache
from .models import EntityKind, LoadedEntity, ParameterData, SymbolicReference
from .parameters import ParameterLoader
from .resolver import ParameterResolver, is_interface_implicit_class
from .syntax import SyntaxCache, parse_typescript

__all__ = [
    "ClassElements",
    "ClassElementsLoader",
    "ClassExtendsNonClassError",
    "ClassFinder",
    "ClassIndexer",
    "ClassLoader",
    "ClassificationError",
    "CommentData",
    "CommentLoader",
    "ConstructorLoader",
    "DeclarationNotFoundError",
    "EntityKind",
    "ExtensionLoader",
    "GenerationError",
    "GenericsLoader",
    "IllegalNestedArrayError",
    "ImportTarget",
    "InFlightCache",
    "InterfaceExtendsNonInterfaceError",
    "InvalidAnnotationError",
    "LoadedEntity",
    "MemberLoader",
    "MissingTypeAnnotationError",
    "NamespacedSuperclassError",
    "PackageMetadataError",
    "PackageResolutionError",
    "ParameterData",
    "ParameterLoader",
    "ParameterResolver",
    "RecursiveTypeAliasError",
    "SymbolicReference",
    "SyntaxCache",
    "TypeScriptSyntaxError",
    "UnsupportedEnumMemberError",
    "UnsupportedHeritageError",
    "UnsupportedShapeError",
    "UnsupportedTypeError",
    "UnsupportedTypeofTargetError",
    "is_interface_implicit_class",
    "parse_comment",
    "parse_typescript",
]
