"""Resolve unresolved ranges into class references and nested field lists.

The resolver is the last stage of parsing. It follows ``interface`` ranges
through :class:`~tscomponents.parse.loader.ClassLoader`, decides whether the
target is used by identity (classes and behavior-bearing interfaces) or by
value (plain interfaces and object literals, expanded into nested fields),
and substitutes generic type parameters along the way.

Generic bindings map a type parameter name to the argument written at the
use site together with the bindings in force at that site. Arguments are
always resolved in the scope they were written in, which keeps substitution
finite even for parameters bound to themselves or to each other.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Hashable, Iterable, Mapping, Sequence

from tscomponents.core.logging import Logger, get_logger

from . import nodes as ast
from .errors import (
    RecursiveTypeAliasError,
    UnsupportedEnumMemberError,
    UnsupportedShapeError,
    UnsupportedTypeofTargetError,
)
from .indexer import ClassIndexer
from .loader import ClassLoader
from .memo import InFlightCache
from .models import (
    ArrayRange,
    ClassRange,
    ConstructorData,
    EntityKind,
    ExtensionData,
    GenericTypeParameterData,
    GenericTypeReferenceRange,
    HashRange,
    IndexedRange,
    InterfaceRange,
    IntersectionRange,
    KeyofRange,
    LiteralRange,
    LoadedEntity,
    MemberData,
    NestedRange,
    OverrideRange,
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
from .parameters import ParameterLoader

__all__ = [
    "Binding",
    "Bindings",
    "DEFAULT_INTERFACE_CACHE_SIZE",
    "ParameterResolver",
    "is_interface_implicit_class",
]

DEFAULT_INTERFACE_CACHE_SIZE = 2048

_PASSTHROUGH = (
    RawRange,
    LiteralRange,
    OverrideRange,
    WildcardRange,
    UndefinedRange,
    ClassRange,
    NestedRange,
)


@dataclass(frozen=True, slots=True)
class Binding:
    """A generic argument and the bindings of the scope it was written in."""

    range: Range
    scope: "Bindings"


Bindings = Mapping[str, Binding]

_EMPTY: Bindings = {}


def _freeze(bindings: Bindings) -> frozenset:
    return frozenset(
        (name, binding.range, _freeze(binding.scope))
        for name, binding in bindings.items()
    )


def is_interface_implicit_class(declaration: ast.InterfaceDeclaration) -> bool:
    """Whether an interface carries behavior and is used by identity."""

    for member in declaration.members:
        if isinstance(member, (ast.MethodSignature, ast.ConstructSignature)):
            return True
        if isinstance(member, ast.PropertySignature) and isinstance(
            member.type, ast.FunctionType
        ):
            return True
    return False


class ParameterResolver:
    """Turn unresolved ranges into resolved ranges for one generation run."""

    def __init__(
        self,
        *,
        class_loader: ClassLoader,
        parameter_loader: ParameterLoader,
        class_indexer: ClassIndexer | None = None,
        ignore_classes: frozenset[str] = frozenset(),
        hard_error_unsupported: bool = True,
        interface_cache_size: int = DEFAULT_INTERFACE_CACHE_SIZE,
        logger: Logger | None = None,
    ) -> None:
        self._loader = class_loader
        self._parameters = parameter_loader
        self._ignore = ignore_classes
        self._hard_error = hard_error_unsupported
        self._logger = logger or get_logger(__name__)
        self._indexer = class_indexer or ClassIndexer(
            class_loader=class_loader,
            ignore_classes=ignore_classes,
            hard_error_unsupported=hard_error_unsupported,
            logger=self._logger,
        )
        self._interfaces: InFlightCache[Hashable, Range] = InFlightCache(
            interface_cache_size,
            on_cycle=self._recursive_type,
        )

    # ------------------------------------------------------------------
    # Whole-index resolution
    # ------------------------------------------------------------------
    async def resolve_all_constructor_parameters(
        self,
        constructors: Mapping[str, ConstructorData],
    ) -> dict[str, ConstructorData]:
        """Resolve the constructor parameters of every class concurrently.

        The first failure propagates and cancels the remaining resolutions.
        """

        names = [
            name
            for name, data in constructors.items()
            if data.holder.kind is EntityKind.CLASS
        ]
        resolved = await _gather(
            self.resolve_constructor_parameters(constructors[name]) for name in names
        )
        return dict(zip(names, resolved))

    async def resolve_constructor_parameters(
        self,
        constructor: ConstructorData,
    ) -> ConstructorData:
        parameters = await self.resolve_parameter_data(
            constructor.parameters,
            constructor.holder,
            _EMPTY,
            frozenset(),
        )
        return replace(
            constructor,
            parameters=tuple(
                parameter
                for parameter in parameters
                if parameter.kind is ParameterKind.FIELD
            ),
        )

    async def resolve_all_generic_type_parameter_data(
        self,
        generics: Mapping[str, Sequence[GenericTypeParameterData]],
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, list[GenericTypeParameterData]]:
        names = list(generics)
        resolved = await _gather(
            self.resolve_generic_type_parameter_data(generics[name], index[name], _EMPTY)
            for name in names
        )
        return dict(zip(names, resolved))

    async def resolve_generic_type_parameter_data(
        self,
        generics: Sequence[GenericTypeParameterData],
        owner: LoadedEntity,
        bindings: Bindings,
    ) -> list[GenericTypeParameterData]:
        resolved = []
        for generic in generics:
            resolved.append(
                GenericTypeParameterData(
                    name=generic.name,
                    range=await self._resolve_optional(generic.range, owner, bindings),
                    default=await self._resolve_optional(
                        generic.default, owner, bindings
                    ),
                )
            )
        return resolved

    async def resolve_all_member_parameter_data(
        self,
        members: Mapping[str, Sequence[MemberData]],
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, list[MemberData]]:
        names = list(members)
        resolved = await _gather(
            self.resolve_member_parameter_data(members[name], index[name], _EMPTY)
            for name in names
        )
        return dict(zip(names, resolved))

    async def resolve_member_parameter_data(
        self,
        members: Sequence[MemberData],
        owner: LoadedEntity,
        bindings: Bindings,
    ) -> list[MemberData]:
        return [
            MemberData(
                name=member.name,
                range=await self._resolve_optional(member.range, owner, bindings),
            )
            for member in members
        ]

    async def resolve_all_extension_data(
        self,
        extensions: Mapping[str, Sequence[ExtensionData]],
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, list[ExtensionData]]:
        names = list(extensions)
        resolved = await _gather(
            self.resolve_extension_data(extensions[name], index[name], _EMPTY)
            for name in names
        )
        return dict(zip(names, resolved))

    async def resolve_extension_data(
        self,
        extensions: Sequence[ExtensionData],
        owner: LoadedEntity,
        bindings: Bindings,
    ) -> list[ExtensionData]:
        resolved = []
        for extension in extensions:
            instantiations = [
                await self.resolve_range(argument, owner, bindings, False, frozenset())
                for argument in extension.generic_type_instantiations
            ]
            resolved.append(
                ExtensionData(
                    entity=extension.entity,
                    generic_type_instantiations=tuple(instantiations),
                )
            )
        return resolved

    async def resolve_parameter_data(
        self,
        parameters: Iterable[ParameterData],
        owner: LoadedEntity,
        bindings: Bindings,
        handling: frozenset[str],
    ) -> list[ParameterData]:
        parameters = list(parameters)
        ranges = await _gather(
            self.resolve_range(parameter.range, owner, bindings, True, handling)
            for parameter in parameters
        )
        return [
            replace(parameter, range=range_)
            for parameter, range_ in zip(parameters, ranges)
        ]

    async def _resolve_optional(
        self,
        range_: Range | None,
        owner: LoadedEntity,
        bindings: Bindings,
    ) -> Range | None:
        if range_ is None:
            return None
        return await self.resolve_range(range_, owner, bindings, False, frozenset())

    # ------------------------------------------------------------------
    # Ranges
    # ------------------------------------------------------------------
    def is_ignored(self, qualified_path: Sequence[str], name: str) -> bool:
        return ".".join((*qualified_path, name)) in self._ignore

    async def resolve_range(
        self,
        range_: Range,
        owner: LoadedEntity,
        bindings: Bindings = _EMPTY,
        nested: bool = True,
        handling: frozenset[str] = frozenset(),
    ) -> Range:
        """Resolve ``range_`` as used by ``owner``.

        Args:
            range_: The unresolved range.
            owner: The entity the range is used in; unbound generic
                references are attributed to it.
            bindings: Generic bindings in force.
            nested: Whether plain interfaces and object literals expand
                into nested fields. When false they become class ranges.
            handling: Interfaces currently being expanded on this path.
                Re-entering one of them stops further expansion.
        """

        try:
            return await self._resolve_range(range_, owner, bindings, nested, handling)
        except UnsupportedShapeError as exc:
            if self._hard_error:
                raise
            self._logger.warning(
                "unsupported-shape",
                file=owner.file_name,
                reference=owner.qualified_name,
                error=str(exc),
            )
            return WildcardRange()

    async def _resolve_range(
        self,
        range_: Range,
        owner: LoadedEntity,
        bindings: Bindings,
        nested: bool,
        handling: frozenset[str],
    ) -> Range:
        async def resolve(child: Range) -> Range:
            return await self.resolve_range(child, owner, bindings, nested, handling)

        if isinstance(range_, _PASSTHROUGH):
            return range_
        if isinstance(range_, InterfaceRange):
            if self.is_ignored(range_.qualified_path, range_.name):
                return WildcardRange()
            if nested:
                key = "interface:" + ".".join((*range_.qualified_path, range_.name))
                if key in handling:
                    nested = False
                else:
                    handling = handling | {key}
            return await self.resolve_range_interface(
                range_, owner, bindings, nested, handling
            )
        if isinstance(range_, HashRange):
            fields = self._parameters.load_hash_fields(range_.origin, range_.node)
            return NestedRange(
                fields=tuple(
                    await self.resolve_parameter_data(fields, owner, bindings, handling)
                )
            )
        if isinstance(range_, UnionRange):
            return UnionRange(elements=await _gather_ranges(resolve, range_.elements))
        if isinstance(range_, IntersectionRange):
            return IntersectionRange(
                elements=await _gather_ranges(resolve, range_.elements)
            )
        if isinstance(range_, TupleRange):
            return TupleRange(elements=await _gather_ranges(resolve, range_.elements))
        if isinstance(range_, ArrayRange):
            return ArrayRange(element=await resolve(range_.element))
        if isinstance(range_, RestRange):
            return RestRange(element=await resolve(range_.element))
        if isinstance(range_, KeyofRange):
            if isinstance(range_.value, TypeofRange):
                enum_keys = await self._enum_keys(range_.value)
                if enum_keys is not None:
                    return enum_keys
            return KeyofRange(value=await resolve(range_.value))
        if isinstance(range_, TypeofRange):
            raise UnsupportedTypeofTargetError(
                f"Detected typeof of unsupported value "
                f"{'.'.join((*range_.qualified_path, range_.name))} in "
                f"{range_.origin.file_name}"
            )
        if isinstance(range_, GenericTypeReferenceRange):
            binding = bindings.get(range_.name)
            if binding is not None:
                return await self.resolve_range(
                    binding.range, owner, binding.scope, nested, handling
                )
            return GenericTypeReferenceRange(name=range_.name, origin=owner)
        if isinstance(range_, IndexedRange):
            object_range, index_range = await _gather_ranges(
                resolve, (range_.object, range_.index)
            )
            return IndexedRange(object=object_range, index=index_range)
        raise TypeError(f"Unknown range {range_!r}")

    async def _enum_keys(self, query: TypeofRange) -> UnionRange | None:
        entity = await self._loader.load_in_scope(
            query.origin, query.name, query.qualified_path, True, True
        )
        if entity.kind is not EntityKind.ENUM:
            raise UnsupportedTypeofTargetError(
                f"Detected keyof typeof of non-enum {entity.qualified_name} in "
                f"{query.origin.file_name}"
            )
        declaration = entity.declaration
        assert isinstance(declaration, ast.EnumDeclaration)
        return UnionRange(
            elements=tuple(
                LiteralRange(value=member.name) for member in declaration.members
            )
        )

    # ------------------------------------------------------------------
    # Interfaces
    # ------------------------------------------------------------------
    async def resolve_range_interface(
        self,
        range_: InterfaceRange,
        owner: LoadedEntity,
        bindings: Bindings,
        nested: bool,
        handling: frozenset[str],
    ) -> Range:
        """Resolve a named type reference, sharing results per use site.

        Identical references resolved again, or concurrently, yield the
        identical result object.
        """

        key = (
            range_.name,
            range_.qualified_path,
            range_.instantiations,
            range_.origin.file_name,
            range_.origin.qualified_path,
            nested,
            handling,
            owner,
            _freeze(bindings),
        )
        return await self._interfaces.get_or_compute(
            key,
            lambda: self._resolve_range_interface(
                range_, owner, bindings, nested, handling
            ),
        )

    async def _resolve_range_interface(
        self,
        range_: InterfaceRange,
        owner: LoadedEntity,
        bindings: Bindings,
        nested: bool,
        handling: frozenset[str],
    ) -> Range:
        entity = await self.load_class_or_interfaces_chain(range_)
        declaration = entity.declaration

        if entity.kind is EntityKind.CLASS or (
            isinstance(declaration, ast.InterfaceDeclaration)
            and (not nested or is_interface_implicit_class(declaration))
        ):
            instances = None
            if range_.instantiations:
                instances = await _gather_ranges(
                    lambda argument: self.resolve_range(
                        argument, owner, bindings, nested, handling
                    ),
                    range_.instantiations,
                )
            return ClassRange(entity=entity, generic_type_parameter_instances=instances)

        if isinstance(declaration, ast.TypeAliasDeclaration):
            if not nested and f"interface:{entity.local_name}" in handling:
                raise RecursiveTypeAliasError(
                    f"Detected unsupported recursive type definition on "
                    f"{entity.local_name} in {entity.file_name}"
                )
            aliased = self._parameters.load_range(
                entity,
                declaration.type,
                f"type alias {entity.local_name} in {entity.file_name}",
            )
            return await self.resolve_range(
                aliased,
                owner,
                self.bind(entity, range_.instantiations, bindings),
                nested,
                handling,
            )

        if isinstance(declaration, ast.EnumDeclaration):
            return UnionRange(elements=self._enum_values(entity, declaration))

        assert isinstance(declaration, ast.InterfaceDeclaration)
        fields = await self.get_nested_fields_from_interface(
            entity,
            owner,
            self.bind(entity, range_.instantiations, bindings),
            handling,
        )
        return NestedRange(fields=tuple(fields))

    @staticmethod
    def _enum_values(
        entity: LoadedEntity,
        declaration: ast.EnumDeclaration,
    ) -> tuple[Range, ...]:
        values: list[Range] = []
        for position, member in enumerate(declaration.members):
            if member.initializer is None:
                raise UnsupportedEnumMemberError(
                    f"Detected enum {entity.local_name} having an unsupported "
                    f"member (member {position}) in {entity.file_name}"
                )
            values.append(LiteralRange(value=member.initializer.value))
        return tuple(values)

    def bind(
        self,
        entity: LoadedEntity,
        instantiations: Sequence[Range],
        bindings: Bindings,
    ) -> dict[str, Binding]:
        """Bind the type parameters of ``entity`` to ``instantiations``.

        Omitted arguments fall back to the parameter default, which is
        written in the scope of ``entity`` itself. Bindings of the caller are
        only reachable through the scope of each supplied argument.
        """

        bound: dict[str, Binding] = {}
        for position, parameter in enumerate(entity.generics):
            if position < len(instantiations):
                bound[parameter.name] = Binding(instantiations[position], bindings)
            elif parameter.default is not None:
                default = self._parameters.load_range(
                    entity, parameter.default, f"generic type {parameter.name}"
                )
                bound[parameter.name] = Binding(default, bound.copy())
        return bound

    async def load_class_or_interfaces_chain(
        self,
        range_: InterfaceRange,
    ) -> LoadedEntity:
        """Load the target of ``range_`` with its super-interface edges."""

        entity = await self._loader.load_in_scope(
            range_.origin, range_.name, range_.qualified_path, True, True
        )
        if entity.kind is EntityKind.INTERFACE:
            await self._indexer.index_entity(entity)
        return entity

    async def get_nested_fields_from_interface(
        self,
        entity: LoadedEntity,
        owner: LoadedEntity,
        bindings: Bindings,
        handling: frozenset[str],
        seen: frozenset[LoadedEntity] = frozenset(),
    ) -> list[ParameterData]:
        """Resolve the fields of ``entity`` followed by inherited fields.

        A field redeclared in a sub-interface hides the inherited one.
        """

        seen = seen | {entity}
        fields = await self.resolve_parameter_data(
            self._parameters.load_interface_fields(entity),
            owner,
            bindings,
            handling,
        )
        names = {(field.kind, field.name) for field in fields}
        for edge in entity.super_interfaces or ():
            if edge.value in seen:
                continue
            arguments = tuple(
                self._parameters.load_range(
                    entity, argument, f"type argument of {edge.value.local_name}"
                )
                for argument in edge.type_arguments
            )
            inherited = await self.get_nested_fields_from_interface(
                edge.value,
                owner,
                self.bind(edge.value, arguments, bindings),
                handling,
                seen,
            )
            for field in inherited:
                if (field.kind, field.name) not in names:
                    names.add((field.kind, field.name))
                    fields.append(field)
        return fields

    def _recursive_type(self, key: Hashable) -> RecursiveTypeAliasError:
        name = key[0] if isinstance(key, tuple) else key
        return RecursiveTypeAliasError(
            f"Detected unsupported recursive type definition on {name}"
        )


async def _gather(coroutines: Iterable) -> list:
    """Run ``coroutines`` concurrently; the first failure cancels the rest."""

    tasks = [asyncio.ensure_future(coroutine) for coroutine in coroutines]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _gather_ranges(resolve, ranges: Sequence[Range]) -> tuple[Range, ...]:
    return tuple(await _gather(resolve(item) for item in ranges))
