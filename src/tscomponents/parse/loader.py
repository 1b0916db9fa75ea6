"""Symbol resolution: follow imports and exports to a concrete declaration."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from tscomponents.core.logging import Logger, get_logger

from . import nodes as ast
from .comments import CommentLoader
from .elements import ClassElements, ClassElementsLoader
from .errors import (
    DeclarationNotFoundError,
    NamespacedSuperclassError,
    TypeScriptSyntaxError,
    UnsupportedEnumMemberError,
    UnsupportedHeritageError,
)
from .models import EntityKind, LoadedEntity, SymbolicReference

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from tscomponents.resolution.context import ResolutionContext

__all__ = ["ClassLoader", "target_string"]

_ArenaKey = tuple[str, str, tuple[str, ...], str, EntityKind]
_TrailKey = tuple[str, str, tuple[str, ...], str]


def target_string(consider_interfaces: bool, consider_others: bool) -> str:
    """Describe the declaration kinds a lookup accepts.

    Example:
        >>> target_string(True, True)
        'class, interface or other'
        >>> target_string(True, False)
        'class or interface'
    """

    if consider_interfaces and consider_others:
        return "class, interface or other"
    if consider_interfaces:
        return "class or interface"
    if consider_others:
        return "class or other"
    return "class"


class ClassLoader:
    """Resolve symbolic references to loaded entities.

    Entities are memoized for the lifetime of the loader in an arena keyed by
    the declaration they land on, so every route to a declaration yields the
    same :class:`LoadedEntity` instance.
    """

    def __init__(
        self,
        *,
        resolution_context: ResolutionContext,
        comment_loader: CommentLoader | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._context = resolution_context
        self._comments = comment_loader or CommentLoader()
        self._logger = logger or get_logger(__name__)
        self.elements = ClassElementsLoader(
            resolution_context=resolution_context,
            logger=self._logger,
        )
        self._arena: dict[_ArenaKey, LoadedEntity] = {}

    @property
    def entities(self) -> list[LoadedEntity]:
        return list(self._arena.values())

    # ------------------------------------------------------------------
    # Heritage clauses
    # ------------------------------------------------------------------
    def get_super_class_name(
        self,
        declaration: ast.ClassDeclaration,
        file_name: str,
    ) -> str | None:
        """Return the plain superclass name of ``declaration``.

        Raises:
            NamespacedSuperclassError: For ``class A extends ns.B``.
            UnsupportedHeritageError: For any other non-identifier form.
        """

        heritage = declaration.extends
        if heritage is None:
            return None
        if heritage.kind == "identifier":
            return heritage.name
        if heritage.kind == "member":
            raise NamespacedSuperclassError(
                "Namespaced superclasses are currently not supported: "
                f"{file_name} on line {heritage.line} column {heritage.column}"
            )
        raise UnsupportedHeritageError(
            f"Could not interpret type of superclass in {file_name} on line "
            f"{heritage.line} column {heritage.column}"
        )

    def get_super_interface_names(
        self,
        declaration: ast.InterfaceDeclaration,
        file_name: str,
    ) -> list[ast.HeritageReference]:
        names = []
        for heritage in declaration.extends:
            if heritage.kind == "identifier":
                names.append(heritage)
            else:
                self._logger.debug(
                    "super-interface-ignored",
                    interface=declaration.name,
                    expression=heritage.name,
                    file=file_name,
                )
        return names

    def get_class_interface_names(
        self,
        declaration: ast.ClassDeclaration,
        file_name: str,
    ) -> list[ast.HeritageReference]:
        """Return the ``implements`` entries of ``declaration``.

        Raises:
            UnsupportedHeritageError: For entries that are not identifiers.
        """

        names = []
        for heritage in declaration.implements:
            if heritage.kind != "identifier":
                raise UnsupportedHeritageError(
                    "Could not interpret the implements type on a class in "
                    f"{file_name} on line {heritage.line} column {heritage.column}"
                )
            names.append(heritage)
        return names

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    async def load_class_declaration(
        self,
        reference: SymbolicReference,
        consider_interfaces: bool = False,
        consider_others: bool = False,
    ) -> LoadedEntity:
        """Follow ``reference`` to the declaration it designates.

        Raises:
            DeclarationNotFoundError: If no acceptable declaration is
                reachable, including when the referenced file is missing or
                cannot be parsed.
        """

        return await self._load(
            reference, consider_interfaces, consider_others, frozenset()
        )

    async def load_in_scope(
        self,
        origin: LoadedEntity,
        name: str,
        qualified_path: tuple[str, ...] = (),
        consider_interfaces: bool = False,
        consider_others: bool = False,
    ) -> LoadedEntity:
        """Resolve a name as written inside the declaration of ``origin``.

        Names are looked up in the namespace enclosing ``origin`` first, then
        at the top level of its file.
        """

        reference = SymbolicReference(
            package_name=origin.package_name,
            file_name=origin.file_name,
            local_name=name,
            qualified_path=qualified_path,
            file_name_referenced=origin.file_name_referenced,
        )
        if origin.qualified_path:
            try:
                return await self.load_class_declaration(
                    replace(
                        reference,
                        qualified_path=(*origin.qualified_path, *qualified_path),
                    ),
                    consider_interfaces,
                    consider_others,
                )
            except DeclarationNotFoundError:
                pass
        return await self.load_class_declaration(
            reference, consider_interfaces, consider_others
        )

    async def _load(
        self,
        reference: SymbolicReference,
        consider_interfaces: bool,
        consider_others: bool,
        trail: frozenset[_TrailKey],
    ) -> LoadedEntity:
        target = target_string(consider_interfaces, consider_others)
        try:
            module = await self._context.parse_typescript_file(reference.file_name)
        except (OSError, TypeScriptSyntaxError) as exc:
            raise DeclarationNotFoundError(reference, target, str(exc)) from exc
        return await self._load_from_module(
            module,
            module,
            (),
            reference,
            consider_interfaces,
            consider_others,
            trail,
        )

    async def _load_from_module(
        self,
        body: ast.Module,
        root: ast.Module,
        scope: tuple[str, ...],
        reference: SymbolicReference,
        consider_interfaces: bool,
        consider_others: bool,
        trail: frozenset[_TrailKey],
    ) -> LoadedEntity:
        target = target_string(consider_interfaces, consider_others)
        trail_key = (
            reference.package_name,
            reference.file_name,
            scope,
            reference.qualified_name,
        )
        if trail_key in trail:
            raise DeclarationNotFoundError(reference, target)
        trail = trail | {trail_key}

        elements = await self.elements.get_class_elements(
            reference.package_name,
            reference.file_name,
            body,
        )

        async def follow(next_reference: SymbolicReference) -> LoadedEntity:
            return await self._load(
                next_reference, consider_interfaces, consider_others, trail
            )

        if reference.qualified_path:
            head = reference.qualified_path[0]
            inner = reference.qualified_path[1:]
            namespace = elements.namespace(head)
            if namespace is not None:
                return await self._load_from_module(
                    namespace.body,
                    root,
                    (*scope, head),
                    replace(reference, qualified_path=inner),
                    consider_interfaces,
                    consider_others,
                    trail,
                )
        else:
            head = reference.local_name
            inner = ()
            found = self._find_declared(
                elements,
                head,
                reference,
                root,
                scope,
                consider_interfaces,
                consider_others,
            )
            if found is not None:
                return found

        for links in (elements.imported_elements, elements.exported_imported_elements):
            entry = links.get(head)
            if entry is None:
                continue
            if reference.qualified_path:
                local_name = reference.local_name
                qualified_path = (entry.local_name, *inner)
            else:
                local_name = entry.local_name
                qualified_path = ()
            return await follow(
                replace(
                    entry,
                    local_name=local_name,
                    qualified_path=qualified_path,
                    file_name_referenced=reference.file_name_referenced,
                )
            )

        for named in (
            elements.exported_imported_all_named,
            elements.imported_elements_all_named,
        ):
            import_target = named.get(head)
            if import_target is not None and reference.qualified_path:
                return await follow(
                    import_target.reference(
                        reference.local_name,
                        inner,
                        reference.file_name_referenced,
                    )
                )

        if len(reference.qualified_path) == 1:
            enum = elements.enum(head)
            if enum is not None:
                member = self._enum_member(enum, reference, root, scope)
                if member is not None:
                    return member

        for import_target in elements.exported_imported_all:
            try:
                return await follow(
                    import_target.reference(
                        reference.local_name,
                        reference.qualified_path,
                        reference.file_name_referenced,
                    )
                )
            except DeclarationNotFoundError:
                continue

        if isinstance(elements.export_assignment, str):
            namespace = elements.declared_namespaces.get(elements.export_assignment)
            if namespace is not None:
                return await self._load_from_module(
                    namespace.body,
                    root,
                    (*scope, namespace.name),
                    reference,
                    consider_interfaces,
                    consider_others,
                    trail,
                )

        raise DeclarationNotFoundError(reference, target)

    def _find_declared(
        self,
        elements: ClassElements,
        name: str,
        reference: SymbolicReference,
        root: ast.Module,
        scope: tuple[str, ...],
        consider_interfaces: bool,
        consider_others: bool,
    ) -> LoadedEntity | None:
        candidates: list[tuple[dict, EntityKind]] = [
            (elements.exported_classes, EntityKind.CLASS),
            (elements.declared_classes, EntityKind.CLASS),
        ]
        if consider_interfaces:
            candidates += [
                (elements.exported_interfaces, EntityKind.INTERFACE),
                (elements.declared_interfaces, EntityKind.INTERFACE),
            ]
        if consider_others:
            candidates += [
                (elements.exported_types, EntityKind.TYPE),
                (elements.declared_types, EntityKind.TYPE),
                (elements.exported_enums, EntityKind.ENUM),
                (elements.declared_enums, EntityKind.ENUM),
            ]
        for table, kind in candidates:
            declaration = table.get(name)
            if declaration is not None:
                return self._entity(reference, kind, declaration, root, scope)
        return None

    def _enum_member(
        self,
        enum: ast.EnumDeclaration,
        reference: SymbolicReference,
        root: ast.Module,
        scope: tuple[str, ...],
    ) -> LoadedEntity | None:
        member = next(
            (item for item in enum.members if item.name == reference.local_name),
            None,
        )
        if member is None:
            return None
        if member.initializer is None:
            raise UnsupportedEnumMemberError(
                f"Could not load enum member {enum.name}.{member.name} from "
                f"{reference.file_name}: only literal initializers are supported"
            )
        alias = ast.TypeAliasDeclaration(
            name=member.name,
            type=member.initializer,
            line=member.line,
            column=member.column,
        )
        return self._entity(
            reference,
            EntityKind.TYPE,
            alias,
            root,
            (*scope, enum.name),
        )

    def _entity(
        self,
        reference: SymbolicReference,
        kind: EntityKind,
        declaration: (
            ast.ClassDeclaration
            | ast.InterfaceDeclaration
            | ast.TypeAliasDeclaration
            | ast.EnumDeclaration
        ),
        root: ast.Module,
        scope: tuple[str, ...],
    ) -> LoadedEntity:
        local_name = declaration.name or reference.local_name
        key = (reference.package_name, reference.file_name, scope, local_name, kind)
        existing = self._arena.get(key)
        if existing is not None:
            return existing
        entity = LoadedEntity(
            package_name=reference.package_name,
            file_name=reference.file_name,
            local_name=local_name,
            qualified_path=scope,
            file_name_referenced=reference.file_name_referenced,
            kind=kind,
            declaration=declaration,
            module=root,
        )
        entity.comment = self._comments.get_comment_data_from_class_or_interface(
            entity
        ).description
        self._arena[key] = entity
        self._logger.debug(
            "entity-loaded",
            kind=kind.value,
            name=entity.qualified_name,
            file=entity.file_name,
        )
        return entity
