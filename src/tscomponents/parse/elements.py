"""Per-file symbol tables built from top-level statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tscomponents.core.logging import Logger, get_logger
from tscomponents.core.paths import (
    file_path_dirname,
    join_file_path,
    strip_module_extension,
)

from . import nodes as ast
from .errors import PackageResolutionError
from .models import SymbolicReference

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from tscomponents.resolution.context import ResolutionContext

__all__ = ["ClassElements", "ClassElementsLoader", "ImportTarget"]


@dataclass(frozen=True, slots=True)
class ImportTarget:
    """A file reached through an import or re-export statement."""

    package_name: str
    file_name: str
    file_name_referenced: str

    def reference(
        self,
        local_name: str,
        qualified_path: tuple[str, ...] = (),
        file_name_referenced: str | None = None,
    ) -> SymbolicReference:
        return SymbolicReference(
            package_name=self.package_name,
            file_name=self.file_name,
            local_name=local_name,
            qualified_path=qualified_path,
            file_name_referenced=file_name_referenced or self.file_name_referenced,
        )


@dataclass(slots=True)
class ClassElements:
    """Categorized declarations, imports and exports of one module body."""

    exported_classes: dict[str, ast.ClassDeclaration] = field(default_factory=dict)
    exported_interfaces: dict[str, ast.InterfaceDeclaration] = field(
        default_factory=dict
    )
    exported_types: dict[str, ast.TypeAliasDeclaration] = field(default_factory=dict)
    exported_enums: dict[str, ast.EnumDeclaration] = field(default_factory=dict)
    exported_namespaces: dict[str, ast.NamespaceDeclaration] = field(
        default_factory=dict
    )
    # export { A as B } from './b'
    exported_imported_elements: dict[str, SymbolicReference] = field(
        default_factory=dict
    )
    # export * from './b'
    exported_imported_all: list[ImportTarget] = field(default_factory=list)
    # export * as N from './b'
    exported_imported_all_named: dict[str, ImportTarget] = field(default_factory=dict)
    # export { A as B }
    exported_unknowns: dict[str, str] = field(default_factory=dict)
    declared_classes: dict[str, ast.ClassDeclaration] = field(default_factory=dict)
    declared_interfaces: dict[str, ast.InterfaceDeclaration] = field(
        default_factory=dict
    )
    declared_types: dict[str, ast.TypeAliasDeclaration] = field(default_factory=dict)
    declared_enums: dict[str, ast.EnumDeclaration] = field(default_factory=dict)
    declared_namespaces: dict[str, ast.NamespaceDeclaration] = field(
        default_factory=dict
    )
    # import { A as B } from './b'
    imported_elements: dict[str, SymbolicReference] = field(default_factory=dict)
    # import * as N from './b'
    imported_elements_all_named: dict[str, ImportTarget] = field(
        default_factory=dict
    )
    # export = A
    export_assignment: str | ast.ClassDeclaration | None = None

    def namespace(self, name: str) -> ast.NamespaceDeclaration | None:
        return self.exported_namespaces.get(name) or self.declared_namespaces.get(
            name
        )

    def enum(self, name: str) -> ast.EnumDeclaration | None:
        return self.exported_enums.get(name) or self.declared_enums.get(name)


class ClassElementsLoader:
    """Build :class:`ClassElements` for files and namespace bodies.

    Symbol tables and package entry points are memoized for the lifetime of
    the loader, which is one generation run.
    """

    def __init__(
        self,
        *,
        resolution_context: ResolutionContext,
        logger: Logger | None = None,
    ) -> None:
        self._context = resolution_context
        self._logger = logger or get_logger(__name__)
        self._elements: dict[
            tuple[str, str, int], tuple[ast.Module, ClassElements]
        ] = {}
        self._packages: dict[tuple[str, str], tuple[str, str]] = {}

    async def load_class_elements(
        self,
        package_name: str,
        file_name: str,
    ) -> ClassElements:
        module = await self._context.parse_typescript_file(file_name)
        return await self.get_class_elements(package_name, file_name, module)

    async def import_target_to_absolute_path(
        self,
        current_package_name: str,
        current_file_path: str,
        import_path: str,
    ) -> ImportTarget:
        """Map an import specifier to the package and file it designates.

        Raises:
            PackageResolutionError: If a bare specifier has no reachable
                declaration entry, or a scoped specifier lacks its name.
        """

        if import_path.startswith("."):
            return ImportTarget(
                package_name=current_package_name,
                file_name=strip_module_extension(
                    join_file_path(file_path_dirname(current_file_path), import_path)
                ),
                file_name_referenced=current_file_path,
            )

        package_path: str | None = None
        if import_path.startswith("@"):
            segments = import_path.split("/", 2)
            if len(segments) < 2 or not segments[1]:
                raise PackageResolutionError(
                    f"Invalid scoped package name for import path '{import_path}' "
                    f"in '{current_file_path}'"
                )
            package_name = "/".join(segments[:2])
            if len(segments) == 3:
                package_path = segments[2]
        else:
            package_name, _, remainder = import_path.partition("/")
            package_path = remainder or None

        package_key = (package_name, file_path_dirname(current_file_path))
        if package_key not in self._packages:
            self._packages[package_key] = await self._context.resolve_package(
                package_name,
                current_file_path,
            )
        package_root, package_index = self._packages[package_key]
        if package_path:
            file_name = strip_module_extension(
                join_file_path(package_root, package_path)
            )
        else:
            file_name = package_index
        return ImportTarget(
            package_name=package_name,
            file_name=file_name,
            file_name_referenced=current_file_path,
        )

    async def get_class_elements(
        self,
        package_name: str,
        file_name: str,
        module: ast.Module,
    ) -> ClassElements:
        """Categorize the statements of ``module``.

        Statements outside the recognized export and declaration forms are
        ignored. Imports whose target package cannot be located are dropped
        with a warning.
        """

        key = (package_name, file_name, id(module))
        cached = self._elements.get(key)
        if cached is not None:
            return cached[1]
        elements = await self._build_class_elements(package_name, file_name, module)
        self._elements[key] = (module, elements)
        return elements

    async def _build_class_elements(
        self,
        package_name: str,
        file_name: str,
        module: ast.Module,
    ) -> ClassElements:
        elements = ClassElements()
        for statement in module.statements:
            if isinstance(statement, ast.ExportDeclaration):
                self._register(
                    statement.declaration,
                    elements.exported_classes,
                    elements.exported_interfaces,
                    elements.exported_types,
                    elements.exported_enums,
                    elements.exported_namespaces,
                )
            elif isinstance(statement, ast.ExportNamed):
                if statement.source is None:
                    for specifier in statement.specifiers:
                        elements.exported_unknowns[specifier.exported] = (
                            specifier.local
                        )
                    continue
                target = await self._import_target(
                    package_name, file_name, statement.source
                )
                if target is None:
                    continue
                for specifier in statement.specifiers:
                    elements.exported_imported_elements[specifier.exported] = (
                        target.reference(specifier.local)
                    )
            elif isinstance(statement, ast.ExportAll):
                target = await self._import_target(
                    package_name, file_name, statement.source
                )
                if target is None:
                    continue
                if statement.alias is not None:
                    elements.exported_imported_all_named[statement.alias] = target
                else:
                    elements.exported_imported_all.append(target)
            elif isinstance(statement, ast.ExportAssignment):
                if statement.name is not None:
                    elements.export_assignment = statement.name
                elif statement.declaration is not None:
                    elements.export_assignment = statement.declaration
            elif isinstance(statement, ast.ImportDeclaration):
                target = await self._import_target(
                    package_name, file_name, statement.source
                )
                if target is None:
                    continue
                for specifier in statement.specifiers:
                    elements.imported_elements[specifier.local] = target.reference(
                        specifier.imported
                    )
                if statement.namespace is not None:
                    elements.imported_elements_all_named[statement.namespace] = target
            else:
                self._register(
                    statement,
                    elements.declared_classes,
                    elements.declared_interfaces,
                    elements.declared_types,
                    elements.declared_enums,
                    elements.declared_namespaces,
                )
        return elements

    async def _import_target(
        self,
        package_name: str,
        file_name: str,
        source: str,
    ) -> ImportTarget | None:
        try:
            return await self.import_target_to_absolute_path(
                package_name, file_name, source
            )
        except PackageResolutionError as exc:
            self._logger.warning(
                "import-unresolved",
                file=file_name,
                source=source,
                error=str(exc),
            )
            return None

    @staticmethod
    def _register(
        declaration: ast.Declaration,
        classes: dict[str, ast.ClassDeclaration],
        interfaces: dict[str, ast.InterfaceDeclaration],
        types: dict[str, ast.TypeAliasDeclaration],
        enums: dict[str, ast.EnumDeclaration],
        namespaces: dict[str, ast.NamespaceDeclaration],
    ) -> None:
        if isinstance(declaration, ast.ClassDeclaration):
            if declaration.name is not None:
                classes[declaration.name] = declaration
        elif isinstance(declaration, ast.InterfaceDeclaration):
            interfaces[declaration.name] = declaration
        elif isinstance(declaration, ast.TypeAliasDeclaration):
            types[declaration.name] = declaration
        elif isinstance(declaration, ast.EnumDeclaration):
            enums[declaration.name] = declaration
        elif isinstance(declaration, ast.NamespaceDeclaration):
            namespaces[declaration.name] = declaration
