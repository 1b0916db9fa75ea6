"""Turn constructor parameters, fields and type nodes into unresolved ranges."""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence

from tscomponents.core.logging import Logger, get_logger

from . import nodes as ast
from .comments import CommentData, CommentLoader
from .errors import (
    IllegalNestedArrayError,
    MissingTypeAnnotationError,
    UnsupportedShapeError,
    UnsupportedTypeError,
)
from .models import (
    ArrayRange,
    GenericTypeParameterData,
    GenericTypeReferenceRange,
    HashRange,
    IndexedRange,
    InterfaceRange,
    IntersectionRange,
    KeyofRange,
    LiteralRange,
    LoadedEntity,
    ParameterData,
    ParameterKind,
    Range,
    RawRange,
    RestRange,
    TupleRange,
    TypeofRange,
    UndefinedRange,
    UnionRange,
    WildcardRange,
)

__all__ = [
    "ParameterLoader",
    "RAW_TYPE_NAMES",
    "TypeReferenceOverride",
    "TypeReferenceOverrideAliasRecord",
]

RAW_TYPE_NAMES = frozenset({"boolean", "number", "string"})
_RAW_ALIASES = {"Boolean": "boolean", "Number": "number", "String": "string"}
_ARRAY_NAMES = frozenset({"Array", "ReadonlyArray"})
_UNDEFINED_KEYWORDS = frozenset({"undefined", "void", "null", "never"})

_Field = ast.Parameter | ast.PropertySignature | ast.ClassProperty


class TypeReferenceOverride(Protocol):
    """Rewrite selected type references before regular classification."""

    def handle(
        self,
        type_node: ast.TypeReference,
        owner: LoadedEntity,
    ) -> Range | None: ...


class TypeReferenceOverrideAliasRecord:
    """Read ``Record<K, V>`` as ``{ [key: K]: V }``."""

    def handle(
        self,
        type_node: ast.TypeReference,
        owner: LoadedEntity,
    ) -> Range | None:
        if (
            type_node.name != "Record"
            or type_node.qualifier
            or len(type_node.type_arguments) != 2
        ):
            return None
        key_type, value_type = type_node.type_arguments
        literal = ast.TypeLiteral(
            members=(
                ast.IndexSignature(
                    key_name="key",
                    key_type=key_type,
                    type=value_type,
                    line=type_node.line,
                    column=type_node.column,
                ),
            ),
            line=type_node.line,
            column=type_node.column,
        )
        return HashRange(node=literal, origin=owner)


def _array_element(type_node: ast.TypeNode | None) -> ast.TypeNode | None:
    """Return the element of ``T[]``, ``Array<T>`` or ``ReadonlyArray<T>``."""

    if isinstance(type_node, ast.ArrayType):
        return type_node.element
    if (
        isinstance(type_node, ast.TypeReference)
        and not type_node.qualifier
        and type_node.name in _ARRAY_NAMES
        and len(type_node.type_arguments) == 1
    ):
        return type_node.type_arguments[0]
    return None


def _is_record(type_node: ast.TypeNode | None) -> bool:
    return (
        isinstance(type_node, ast.TypeReference)
        and not type_node.qualifier
        and type_node.name == "Record"
        and len(type_node.type_arguments) == 2
    )


class ParameterLoader:
    """Load :class:`ParameterData` with unresolved ranges.

    Ranges produced here keep a pointer to the entity whose declaration they
    were read from (``origin``), so the resolver can look names up in the
    right file and bind generic parameters of the right owner.
    """

    def __init__(
        self,
        *,
        comment_loader: CommentLoader | None = None,
        hard_error_unsupported: bool = True,
        overrides: Iterable[TypeReferenceOverride] | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.comments = comment_loader or CommentLoader()
        self._hard_error = hard_error_unsupported
        self._overrides: tuple[TypeReferenceOverride, ...] = (
            tuple(overrides)
            if overrides is not None
            else (TypeReferenceOverrideAliasRecord(),)
        )
        self._logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------
    def load_constructor_fields(
        self,
        chain: Sequence[tuple[LoadedEntity, ast.Constructor]],
    ) -> tuple[ParameterData, ...]:
        """Load every non-ignored parameter of the first constructor in ``chain``.

        ``chain`` lists constructors from the closest holder outwards. The
        ``@param`` annotations of later constructors fill in parameters the
        closer ones leave undocumented.
        """

        holder, constructor = chain[0]
        comment_data: dict[str, CommentData] = {}
        for chain_holder, chain_constructor in reversed(chain):
            comment_data.update(
                self.comments.get_comment_data_from_constructor(
                    chain_holder, chain_constructor
                )
            )
        fields = []
        for parameter in constructor.parameters:
            loaded = self.load_constructor_field(holder, parameter, comment_data)
            if loaded is not None:
                fields.append(loaded)
        return tuple(fields)

    def load_constructor_field(
        self,
        holder: LoadedEntity,
        parameter: ast.Parameter,
        comment_data: Mapping[str, CommentData],
    ) -> ParameterData | None:
        if parameter.name is None:
            error = UnsupportedTypeError(
                f"Could not understand constructor parameter type "
                f"{parameter.pattern} in {holder.local_name} at "
                f"{holder.file_name} on line {parameter.line}"
            )
            self._downgrade(error, holder)
            return None
        data = comment_data.get(parameter.name, CommentData())
        if data.ignored:
            return None
        return self.load_field(holder, parameter, data)

    def load_interface_fields(self, entity: LoadedEntity) -> list[ParameterData]:
        """Load the fields declared directly in an interface body."""

        declaration = entity.declaration
        assert isinstance(declaration, ast.InterfaceDeclaration)
        return self._load_type_elements(entity, declaration.members)

    def load_hash_fields(
        self,
        owner: LoadedEntity,
        hash_node: ast.TypeLiteral,
    ) -> list[ParameterData]:
        return self._load_type_elements(owner, hash_node.members)

    def _load_type_elements(
        self,
        owner: LoadedEntity,
        members: Iterable[ast.Member],
    ) -> list[ParameterData]:
        fields = []
        for member in members:
            loaded = self.load_type_element_field(owner, member)
            if loaded is not None:
                fields.append(loaded)
        return fields

    def load_type_element_field(
        self,
        owner: LoadedEntity,
        member: ast.Member,
    ) -> ParameterData | None:
        """Load a single member of an interface or object type literal.

        Computed property keys are skipped. Method, call and construct
        signatures are not fields and raise an unsupported-shape error.
        """

        if isinstance(member, ast.PropertySignature):
            if member.name is None:
                return None
            data = self.comments.get_comment_data_from_field(owner, member)
            if data.ignored:
                return None
            return self.load_field(owner, member, data)
        if isinstance(member, ast.IndexSignature):
            data = self.comments.get_comment_data_from_field(owner, member)
            return self.load_index(owner, member, data)
        error = UnsupportedTypeError(
            f"Unsupported field type {type(member).__name__} in "
            f"{owner.local_name} at {owner.file_name} on line {member.line}"
        )
        self._downgrade(error, owner)
        return None

    def load_field(
        self,
        owner: LoadedEntity,
        field: _Field,
        comment: CommentData,
    ) -> ParameterData:
        assert field.name is not None
        return ParameterData(
            kind=ParameterKind.FIELD,
            name=field.name,
            range=self.get_field_range(owner, field, comment),
            unique=self.is_field_unique(field, comment),
            required=self.is_field_required(field),
            default=comment.default,
            comment=comment.description,
        )

    def load_index(
        self,
        owner: LoadedEntity,
        signature: ast.IndexSignature,
        comment: CommentData,
    ) -> ParameterData:
        """Load ``[key: K]: V`` as an index entry over the domain of ``K``."""

        if comment.range is not None:
            range_: Range = comment.range
        elif signature.type is None:
            range_ = self._missing_type(owner, "an index signature", signature.line)
        else:
            range_ = self.load_range(owner, signature.type, "an index signature")
        return ParameterData(
            kind=ParameterKind.INDEX,
            name=self.get_index_domain(owner, signature),
            range=range_,
            default=comment.default,
            comment=comment.description,
        )

    def get_index_domain(
        self,
        owner: LoadedEntity,
        signature: ast.IndexSignature,
    ) -> str:
        if signature.key_type is None:
            raise MissingTypeAnnotationError(
                f"Missing index signature key type in {owner.local_name} at "
                f"{owner.file_name} on line {signature.line}"
            )
        domain = self._load_range(owner, signature.key_type, "an index key", 0)
        if not isinstance(domain, RawRange):
            raise UnsupportedTypeError(
                f"Only raw types are allowed in index signature keys, found "
                f"{type(signature.key_type).__name__} in {owner.local_name} at "
                f"{owner.file_name} on line {signature.line}"
            )
        return domain.value

    # ------------------------------------------------------------------
    # Field shape
    # ------------------------------------------------------------------
    @staticmethod
    def is_field_indexed_hash(field: _Field) -> bool:
        type_node = field.type
        if _is_record(type_node):
            return True
        return isinstance(type_node, ast.TypeLiteral) and any(
            isinstance(member, ast.IndexSignature) for member in type_node.members
        )

    def is_field_unique(self, field: _Field, comment: CommentData) -> bool:
        if comment.range is not None:
            return True
        if isinstance(field, ast.Parameter) and field.rest:
            return False
        return _array_element(field.type) is None and not self.is_field_indexed_hash(
            field
        )

    def is_field_required(self, field: _Field) -> bool:
        return not field.optional and not self.is_field_indexed_hash(field)

    def get_field_range(
        self,
        owner: LoadedEntity,
        field: _Field,
        comment: CommentData,
    ) -> Range:
        """Return the ``@range`` override or the range of the field's type.

        A top-level array dimension is consumed here: the field becomes
        non-unique and its range is the element range.
        """

        if comment.range is not None:
            return comment.range
        identifier = f"field {field.name}"
        if field.type is None:
            return self._missing_type(owner, identifier, field.line)
        element = _array_element(field.type)
        if element is not None:
            return self.load_range(owner, element, identifier, nested_arrays=1)
        return self.load_range(owner, field.type, identifier)

    # ------------------------------------------------------------------
    # Ranges
    # ------------------------------------------------------------------
    def load_range(
        self,
        owner: LoadedEntity,
        type_node: ast.TypeNode,
        error_identifier: str,
        nested_arrays: int = 0,
    ) -> Range:
        """Classify ``type_node`` into an unresolved range.

        In lenient mode an unsupported construct is replaced by a wildcard
        range at the innermost position it occurs.
        """

        try:
            return self._load_range(owner, type_node, error_identifier, nested_arrays)
        except UnsupportedShapeError as exc:
            return self._downgrade(exc, owner)

    def _load_range(
        self,
        owner: LoadedEntity,
        type_node: ast.TypeNode,
        error_identifier: str,
        nested_arrays: int,
    ) -> Range:
        def load(node: ast.TypeNode, depth: int = nested_arrays) -> Range:
            return self.load_range(owner, node, error_identifier, depth)

        if isinstance(type_node, ast.KeywordType):
            if type_node.name in RAW_TYPE_NAMES:
                return RawRange(value=type_node.name)
            if type_node.name in _UNDEFINED_KEYWORDS:
                return UndefinedRange()
            return WildcardRange()
        if isinstance(type_node, ast.TypeReference):
            return self._load_reference(
                owner, type_node, error_identifier, nested_arrays
            )
        if isinstance(type_node, ast.ArrayType):
            self._check_nesting(owner, error_identifier, nested_arrays)
            return ArrayRange(element=load(type_node.element, nested_arrays + 1))
        if isinstance(type_node, ast.TupleType):
            return TupleRange(
                elements=tuple(
                    self._load_tuple_element(
                        owner, element, error_identifier, nested_arrays
                    )
                    for element in type_node.elements
                )
            )
        if isinstance(type_node, (ast.RestType, ast.OptionalType)):
            return load(type_node.element)
        if isinstance(type_node, ast.UnionType):
            return UnionRange(elements=tuple(load(item) for item in type_node.types))
        if isinstance(type_node, ast.IntersectionType):
            return IntersectionRange(
                elements=tuple(load(item) for item in type_node.types)
            )
        if isinstance(type_node, ast.LiteralType):
            return LiteralRange(value=type_node.value)
        if isinstance(type_node, ast.TypeLiteral):
            return HashRange(node=type_node, origin=owner)
        if isinstance(type_node, ast.FunctionType):
            return WildcardRange()
        if isinstance(type_node, ast.TypeOperator):
            if type_node.operator == "keyof":
                return KeyofRange(value=load(type_node.type))
            raise UnsupportedTypeError(
                f"Could not understand type operator '{type_node.operator}' of "
                f"{error_identifier} in {owner.local_name} at {owner.file_name} "
                f"on line {type_node.line}"
            )
        if isinstance(type_node, ast.TypeQuery):
            return TypeofRange(
                name=type_node.name,
                qualified_path=type_node.qualifier,
                origin=owner,
            )
        if isinstance(type_node, ast.IndexedAccessType):
            return IndexedRange(
                object=load(type_node.object_type),
                index=load(type_node.index_type),
            )
        if isinstance(type_node, ast.UnsupportedType):
            raise UnsupportedTypeError(
                f"Could not understand parameter type {type_node.kind} "
                f"({type_node.text}) of {error_identifier} in "
                f"{owner.local_name} at {owner.file_name} on line {type_node.line}"
            )
        raise TypeError(f"Unknown type node {type_node!r}")

    def _load_reference(
        self,
        owner: LoadedEntity,
        type_node: ast.TypeReference,
        error_identifier: str,
        nested_arrays: int,
    ) -> Range:
        if not type_node.qualifier:
            name = type_node.name
            if name in _RAW_ALIASES:
                return RawRange(value=_RAW_ALIASES[name])
            if name in _ARRAY_NAMES:
                if len(type_node.type_arguments) != 1:
                    raise UnsupportedTypeError(
                        f"Found invalid {name} field type of {error_identifier} "
                        f"in {owner.local_name} at {owner.file_name}"
                    )
                self._check_nesting(owner, error_identifier, nested_arrays)
                return ArrayRange(
                    element=self.load_range(
                        owner,
                        type_node.type_arguments[0],
                        error_identifier,
                        nested_arrays + 1,
                    )
                )
            if name in owner.generic_names:
                return GenericTypeReferenceRange(name=name, origin=owner)
            for override in self._overrides:
                overridden = override.handle(type_node, owner)
                if overridden is not None:
                    return overridden
        return InterfaceRange(
            name=type_node.name,
            qualified_path=type_node.qualifier,
            instantiations=tuple(
                self.load_range(owner, argument, error_identifier)
                for argument in type_node.type_arguments
            ),
            origin=owner,
        )

    def _load_tuple_element(
        self,
        owner: LoadedEntity,
        element: ast.TypeNode,
        error_identifier: str,
        nested_arrays: int,
    ) -> Range:
        if isinstance(element, ast.RestType):
            inner = _array_element(element.element)
            if inner is not None:
                return RestRange(
                    element=self.load_range(
                        owner, inner, error_identifier, nested_arrays + 1
                    )
                )
            return RestRange(
                element=self.load_range(
                    owner, element.element, error_identifier, nested_arrays
                )
            )
        if isinstance(element, ast.OptionalType):
            return UnionRange(
                elements=(
                    self.load_range(
                        owner, element.element, error_identifier, nested_arrays
                    ),
                    UndefinedRange(),
                )
            )
        return self.load_range(owner, element, error_identifier, nested_arrays)

    @staticmethod
    def _check_nesting(
        owner: LoadedEntity,
        error_identifier: str,
        nested_arrays: int,
    ) -> None:
        if nested_arrays > 0:
            raise IllegalNestedArrayError(
                f"Detected illegal nested array type for {error_identifier} in "
                f"{owner.local_name} at {owner.file_name}"
            )

    # ------------------------------------------------------------------
    # Generics
    # ------------------------------------------------------------------
    def load_class_generics(
        self,
        entity: LoadedEntity,
    ) -> list[GenericTypeParameterData]:
        """Load the declared type parameters of a class or interface."""

        generics = []
        for parameter in entity.generics:
            identifier = f"generic type {parameter.name}"
            generics.append(
                GenericTypeParameterData(
                    name=parameter.name,
                    range=(
                        self.load_range(entity, parameter.constraint, identifier)
                        if parameter.constraint is not None
                        else None
                    ),
                    default=(
                        self.load_range(entity, parameter.default, identifier)
                        if parameter.default is not None
                        else None
                    ),
                )
            )
        return generics

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------
    def _missing_type(
        self,
        owner: LoadedEntity,
        error_identifier: str,
        line: int,
    ) -> Range:
        error = MissingTypeAnnotationError(
            f"Missing type on {error_identifier} in {owner.local_name} at "
            f"{owner.file_name} on line {line}"
        )
        return self._downgrade(error, owner)

    def _downgrade(self, error: UnsupportedShapeError, owner: LoadedEntity) -> Range:
        if self._hard_error:
            raise error
        self._logger.warning(
            "unsupported-shape",
            file=owner.file_name,
            reference=owner.qualified_name,
            error=str(error),
        )
        return WildcardRange()
