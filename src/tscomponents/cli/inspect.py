"""Resolve a single declaration for the ``tscomponents inspect`` command."""

from __future__ import annotations

from pathlib import Path

from tscomponents.core.logging import Logger, get_logger
from tscomponents.core.paths import strip_module_extension, to_posix_path
from tscomponents.parse.indexer import ClassIndexer
from tscomponents.parse.loader import ClassLoader
from tscomponents.parse.models import GenericallyTyped, LoadedEntity, SymbolicReference
from tscomponents.resolution.context import ResolutionContext

__all__ = ["describe_entity", "inspect_declaration"]


async def inspect_declaration(
    file_path: Path,
    qualified_name: str,
    *,
    package_name: str,
    resolution_context: ResolutionContext | None = None,
    logger: Logger | None = None,
) -> LoadedEntity:
    """Load ``qualified_name`` from ``file_path`` and index its chain.

    Raises:
        DeclarationNotFoundError: If the name cannot be resolved.
    """

    logger = logger or get_logger(__name__)
    context = resolution_context or ResolutionContext(logger=logger)
    loader = ClassLoader(resolution_context=context, logger=logger)
    indexer = ClassIndexer(class_loader=loader, logger=logger)
    *path, local_name = qualified_name.split(".")
    file_name = strip_module_extension(
        to_posix_path(str(file_path.expanduser().resolve(strict=False)))
    )
    reference = SymbolicReference(
        package_name=package_name,
        file_name=file_name,
        local_name=local_name,
        qualified_path=tuple(path),
        file_name_referenced=file_name,
    )
    entity = await loader.load_class_declaration(reference, True, True)
    return await indexer.index_entity(entity)


def _edge_lines(label: str, edges: list[GenericallyTyped] | None) -> list[str]:
    return [
        f"  {label}: {edge.value.qualified_name} ({edge.value.file_name})"
        for edge in edges or ()
    ]


def describe_entity(entity: LoadedEntity) -> list[str]:
    """Return human-readable lines describing ``entity`` and its chain."""

    lines = [
        f"{entity.kind.value} {entity.qualified_name}",
        f"  package: {entity.package_name}",
        f"  file: {entity.file_name}",
    ]
    if entity.comment:
        lines.append(f"  comment: {entity.comment}")
    for ancestor in entity.ancestors():
        lines.append(f"  extends: {ancestor.qualified_name} ({ancestor.file_name})")
    lines.extend(_edge_lines("implements", entity.implements_interfaces))
    lines.extend(_edge_lines("extends interface", entity.super_interfaces))
    if entity.generics:
        names = ", ".join(parameter.name for parameter in entity.generics)
        lines.append(f"  generics: {names}")
    return lines
