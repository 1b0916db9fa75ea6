"""Attach superclass, implemented-interface and super-interface chains."""

from __future__ import annotations

from typing import Mapping

from tscomponents.core.logging import Logger, get_logger

from . import nodes as ast
from .errors import (
    ClassExtendsNonClassError,
    DeclarationNotFoundError,
    InterfaceExtendsNonInterfaceError,
    UnsupportedShapeError,
)
from .loader import ClassLoader
from .models import EntityKind, GenericallyTyped, LoadedEntity, SymbolicReference

__all__ = ["ClassIndexer"]


class ClassIndexer:
    """Build a linked index of exported classes and their ancestors."""

    # Globally known superclasses that never need an import.
    SUPERCLASS_BLACKLIST = frozenset({"Error"})

    def __init__(
        self,
        *,
        class_loader: ClassLoader,
        ignore_classes: frozenset[str] = frozenset(),
        hard_error_unsupported: bool = True,
        logger: Logger | None = None,
    ) -> None:
        self._loader = class_loader
        self._ignore = ignore_classes
        self._hard_error = hard_error_unsupported
        self._logger = logger or get_logger(__name__)
        self._indexed: set[LoadedEntity] = set()

    async def build_index(
        self,
        exports: Mapping[str, SymbolicReference],
        *,
        skip_not_found: bool = False,
    ) -> dict[str, LoadedEntity]:
        """Load every export not present in the ignore-set.

        With ``skip_not_found`` an export that does not lead to a class or
        interface is logged and left out instead of aborting.
        """

        index: dict[str, LoadedEntity] = {}
        for name, reference in exports.items():
            if name in self._ignore:
                continue
            try:
                entity = await self._loader.load_class_declaration(
                    reference, True, False
                )
            except DeclarationNotFoundError as exc:
                if not skip_not_found:
                    raise
                self._logger.warning(
                    "export-skipped",
                    file=reference.file_name,
                    reference=name,
                    error=str(exc),
                )
                continue
            index[name] = await self.index_entity(entity)
        return index

    async def load_class_chain(self, reference: SymbolicReference) -> LoadedEntity:
        entity = await self._loader.load_class_declaration(reference, True, False)
        return await self.index_entity(entity)

    async def index_entity(self, entity: LoadedEntity) -> LoadedEntity:
        """Attach the inheritance edges of ``entity`` once.

        Entities already indexed, or currently being indexed higher up the
        call stack, are returned as-is.
        """

        if entity in self._indexed:
            return entity
        self._indexed.add(entity)
        declaration = entity.declaration
        if isinstance(declaration, ast.ClassDeclaration):
            await self._attach_super_class(entity, declaration)
            await self._attach_implemented_interfaces(entity, declaration)
        elif isinstance(declaration, ast.InterfaceDeclaration):
            await self._attach_super_interfaces(entity, declaration)
        return entity

    async def _attach_super_class(
        self,
        entity: LoadedEntity,
        declaration: ast.ClassDeclaration,
    ) -> None:
        try:
            name = self._loader.get_super_class_name(declaration, entity.file_name)
        except UnsupportedShapeError as exc:
            if self._hard_error:
                raise
            self._logger.warning(
                "superclass-ignored",
                file=entity.file_name,
                reference=entity.local_name,
                error=str(exc),
            )
            return
        if (
            name is None
            or name in self.SUPERCLASS_BLACKLIST
            or name in self._ignore
        ):
            return

        super_entity = await self._resolve_from(entity, name)
        if super_entity.kind is not EntityKind.CLASS:
            raise ClassExtendsNonClassError(
                f"Detected non-class {super_entity.local_name} extending from a "
                f"class {entity.local_name} in {entity.file_name}"
            )
        assert declaration.extends is not None
        entity.super_class = GenericallyTyped(
            await self.index_entity(super_entity),
            declaration.extends.type_arguments,
        )

    async def _attach_implemented_interfaces(
        self,
        entity: LoadedEntity,
        declaration: ast.ClassDeclaration,
    ) -> None:
        if not declaration.implements:
            return
        try:
            heritages = self._loader.get_class_interface_names(
                declaration, entity.file_name
            )
        except UnsupportedShapeError as exc:
            if self._hard_error:
                raise
            self._logger.warning(
                "implements-ignored",
                file=entity.file_name,
                reference=entity.local_name,
                error=str(exc),
            )
            heritages = []

        implemented: list[GenericallyTyped] = []
        for heritage in heritages:
            if heritage.name in self._ignore:
                continue
            try:
                target = await self._resolve_from(entity, heritage.name)
            except DeclarationNotFoundError as exc:
                self._logger.warning(
                    "interface-dropped",
                    file=entity.file_name,
                    reference=f"{entity.local_name} implements {heritage.name}",
                    error=str(exc),
                )
                continue
            implemented.append(
                GenericallyTyped(
                    await self.index_entity(target),
                    heritage.type_arguments,
                )
            )
        entity.implements_interfaces = implemented

    async def _attach_super_interfaces(
        self,
        entity: LoadedEntity,
        declaration: ast.InterfaceDeclaration,
    ) -> None:
        if not declaration.extends:
            return
        supers: list[GenericallyTyped] = []
        for heritage in self._loader.get_super_interface_names(
            declaration, entity.file_name
        ):
            if heritage.name in self._ignore:
                continue
            try:
                target = await self._resolve_from(entity, heritage.name)
            except DeclarationNotFoundError as exc:
                self._logger.warning(
                    "interface-dropped",
                    file=entity.file_name,
                    reference=f"{entity.local_name} extends {heritage.name}",
                    error=str(exc),
                )
                continue
            if target.kind is not EntityKind.INTERFACE:
                raise InterfaceExtendsNonInterfaceError(
                    f"Detected non-interface {target.local_name} extending from "
                    f"an interface {entity.local_name} in {entity.file_name}"
                )
            supers.append(
                GenericallyTyped(
                    await self.index_entity(target),
                    heritage.type_arguments,
                )
            )
        entity.super_interfaces = supers

    async def _resolve_from(self, entity: LoadedEntity, name: str) -> LoadedEntity:
        return await self._loader.load_in_scope(entity, name, (), True, False)
