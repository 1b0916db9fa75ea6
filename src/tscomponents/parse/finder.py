"""Compute the export surface of a package from its types entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tscomponents.core.logging import Logger, get_logger

from .elements import ClassElements, ClassElementsLoader
from .models import SymbolicReference

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from tscomponents.resolution.context import ResolutionContext

__all__ = ["ClassFinder"]


class ClassFinder:
    """Collect exported classes and interfaces reachable from an entry file."""

    def __init__(
        self,
        *,
        resolution_context: ResolutionContext,
        elements_loader: ClassElementsLoader | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._context = resolution_context
        self._logger = logger or get_logger(__name__)
        self._elements = elements_loader or ClassElementsLoader(
            resolution_context=resolution_context,
            logger=self._logger,
        )

    async def get_package_exports(
        self,
        package_name: str,
        types_path: str,
    ) -> dict[str, SymbolicReference]:
        """Walk ``export`` and ``export *`` statements starting at ``types_path``.

        Files are visited breadth-first. A name exported by a file visited
        earlier hides the same name re-exported from a later file. Wildcard
        re-exports of other packages are not followed.
        """

        exports: dict[str, SymbolicReference] = {}
        queue = [types_path]
        visited: set[str] = set()
        while queue:
            file_name = queue.pop(0)
            if file_name in visited:
                continue
            visited.add(file_name)
            named, unnamed = await self.get_file_exports(package_name, file_name)
            for name, reference in named.items():
                exports.setdefault(name, reference)
            queue.extend(unnamed)
        self._logger.debug(
            "package-exports",
            package=package_name,
            files=len(visited),
            exports=len(exports),
        )
        return exports

    async def get_file_exports(
        self,
        package_name: str,
        file_name: str,
    ) -> tuple[dict[str, SymbolicReference], list[str]]:
        """Return the named exports of one file and its wildcard targets."""

        elements = await self._elements.load_class_elements(package_name, file_name)
        named: dict[str, SymbolicReference] = {}

        def local(name: str) -> SymbolicReference:
            return SymbolicReference(
                package_name=package_name,
                file_name=file_name,
                local_name=name,
                file_name_referenced=file_name,
            )

        for name in (*elements.exported_classes, *elements.exported_interfaces):
            named[name] = local(name)
        for name, reference in elements.exported_imported_elements.items():
            named[name] = reference
        for exported, local_name in elements.exported_unknowns.items():
            reference = self._link_unknown(elements, local_name, local)
            if reference is not None:
                named[exported] = reference

        unnamed = [
            target.file_name
            for target in elements.exported_imported_all
            if target.package_name == package_name
        ]
        return named, unnamed

    @staticmethod
    def _link_unknown(
        elements: ClassElements,
        local_name: str,
        local,
    ) -> SymbolicReference | None:
        if local_name in elements.declared_classes or local_name in (
            elements.declared_interfaces
        ):
            return local(local_name)
        return elements.imported_elements.get(local_name)
