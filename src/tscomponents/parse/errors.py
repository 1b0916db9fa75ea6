"""Domain-specific exceptions raised while analyzing declaration files.

The hierarchy mirrors how failures are handled by callers:

* not-found and classification errors always abort generation;
* shape errors (:class:`UnsupportedShapeError` and subclasses) abort by
  default but may be downgraded to a warning plus a wildcard range;
* package resolution and metadata errors are degraded at their call sites.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .models import SymbolicReference


class GenerationError(RuntimeError):
    """Base error for component generation failures."""


class DeclarationNotFoundError(GenerationError):
    """Raised when a symbolic reference does not lead to any declaration."""

    def __init__(
        self,
        reference: "SymbolicReference",
        target: str,
        detail: str | None = None,
    ) -> None:
        self.reference = reference
        self.target = target
        message = (
            f"Could not load {target} {reference.qualified_name} "
            f"from {reference.file_name}"
        )
        if detail:
            message = f"{message}:\n{detail}"
        super().__init__(message)


class TypeScriptSyntaxError(GenerationError):
    """Raised when a declaration file cannot be parsed."""

    def __init__(
        self,
        file_path: str,
        line: int,
        column: int,
        message: str,
    ) -> None:
        self.file_path = file_path
        self.line = line
        self.column = column
        self.detail = message
        super().__init__(
            f"Could not parse file {file_path}, invalid syntax at line "
            f"{line}, column {column}. Message: {message}"
        )


class UnsupportedShapeError(GenerationError):
    """Raised for TypeScript constructs the generator cannot model."""


class IllegalNestedArrayError(UnsupportedShapeError):
    """Raised when an array type nests another array dimension."""


class NamespacedSuperclassError(UnsupportedShapeError):
    """Raised for superclasses written as ``ns.Base``."""


class UnsupportedHeritageError(UnsupportedShapeError):
    """Raised for heritage clauses that are not plain identifiers."""


class UnsupportedTypeofTargetError(UnsupportedShapeError):
    """Raised for ``typeof`` outside ``keyof typeof Enum``."""


class UnsupportedTypeError(UnsupportedShapeError):
    """Raised for type-level constructs outside the supported set."""


class UnsupportedEnumMemberError(UnsupportedShapeError):
    """Raised for enum members lacking a literal initializer."""


class RecursiveTypeAliasError(UnsupportedShapeError):
    """Raised when a type alias refers back to itself."""


class MissingTypeAnnotationError(UnsupportedShapeError):
    """Raised when a field or parameter carries no type annotation."""


class ClassificationError(GenerationError):
    """Raised when a resolved entity violates an inheritance invariant."""


class ClassExtendsNonClassError(ClassificationError):
    """Raised when a class extends something other than a class."""


class InterfaceExtendsNonInterfaceError(ClassificationError):
    """Raised when an interface extends something other than an interface."""


class InvalidAnnotationError(GenerationError):
    """Raised for malformed ``@range`` or ``@default`` comment tags."""


class PackageResolutionError(GenerationError):
    """Raised when a bare import specifier has no reachable type entry."""


class PackageMetadataError(GenerationError):
    """Raised when a package's ``package.json`` cannot be interpreted."""


__all__ = [
    "ClassExtendsNonClassError",
    "ClassificationError",
    "DeclarationNotFoundError",
    "GenerationError",
    "IllegalNestedArrayError",
    "InterfaceExtendsNonInterfaceError",
    "InvalidAnnotationError",
    "MissingTypeAnnotationError",
    "NamespacedSuperclassError",
    "PackageMetadataError",
    "PackageResolutionError",
    "RecursiveTypeAliasError",
    "TypeScriptSyntaxError",
    "UnsupportedEnumMemberError",
    "UnsupportedHeritageError",
    "UnsupportedShapeError",
    "UnsupportedTypeError",
    "UnsupportedTypeofTargetError",
]
