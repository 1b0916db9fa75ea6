"""Per-package orchestration of the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from tscomponents.core.config import GeneratorConfig
from tscomponents.core.logging import Logger, get_logger
from tscomponents.core.paths import to_posix_path
from tscomponents.parse.comments import CommentLoader
from tscomponents.parse.constructors import ConstructorLoader
from tscomponents.parse.errors import PackageMetadataError
from tscomponents.parse.extensions import ExtensionLoader
from tscomponents.parse.finder import ClassFinder
from tscomponents.parse.generics import GenericsLoader
from tscomponents.parse.indexer import ClassIndexer
from tscomponents.parse.loader import ClassLoader
from tscomponents.parse.members import MemberLoader
from tscomponents.parse.models import (
    ConstructorData,
    ExtensionData,
    GenericTypeParameterData,
    LoadedEntity,
    MemberData,
)
from tscomponents.parse.parameters import ParameterLoader
from tscomponents.parse.resolver import ParameterResolver
from tscomponents.parse.syntax import SyntaxCache
from tscomponents.resolution.context import ResolutionContext
from tscomponents.resolution.external import find_external_packages
from tscomponents.resolution.packages import PackageMetadata, load_package_metadata

__all__ = ["Generator", "PackageGenerationResult"]


@dataclass(frozen=True, slots=True)
class PackageGenerationResult:
    """Everything resolved for one package."""

    package: PackageMetadata
    index: dict[str, LoadedEntity]
    constructors: dict[str, ConstructorData]
    generics: dict[str, list[GenericTypeParameterData]] = field(default_factory=dict)
    members: dict[str, list[MemberData]] = field(default_factory=dict)
    extensions: dict[str, list[ExtensionData]] = field(default_factory=dict)
    external_packages: list[str] = field(default_factory=list)

    @property
    def classes(self) -> list[str]:
        return sorted(self.constructors)


@dataclass(slots=True)
class _Run:
    """Collaborators whose state lives for a single package."""

    finder: ClassFinder
    indexer: ClassIndexer
    constructors: ConstructorLoader
    generics: GenericsLoader
    members: MemberLoader
    extensions: ExtensionLoader
    resolver: ParameterResolver


class Generator:
    """Resolve the exported classes of one or more packages.

    The parsed-file cache is shared by every package; entity arenas and the
    interface resolution cache are rebuilt per package.
    """

    def __init__(
        self,
        *,
        config: GeneratorConfig | None = None,
        resolution_context: ResolutionContext | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self._logger = logger or get_logger(__name__)
        if resolution_context is None:
            cache = SyntaxCache.shared()
            cache.resize(self.config.syntax_cache_size)
            resolution_context = ResolutionContext(
                syntax_cache=cache,
                logger=self._logger,
            )
        self.resolution_context = resolution_context

    def _new_run(self) -> _Run:
        config = self.config
        comments = CommentLoader()
        class_loader = ClassLoader(
            resolution_context=self.resolution_context,
            comment_loader=comments,
            logger=self._logger,
        )
        indexer = ClassIndexer(
            class_loader=class_loader,
            ignore_classes=config.ignore_set,
            hard_error_unsupported=config.hard_error_unsupported,
            logger=self._logger,
        )
        parameters = ParameterLoader(
            comment_loader=comments,
            hard_error_unsupported=config.hard_error_unsupported,
            logger=self._logger,
        )
        return _Run(
            finder=ClassFinder(
                resolution_context=self.resolution_context,
                elements_loader=class_loader.elements,
                logger=self._logger,
            ),
            indexer=indexer,
            constructors=ConstructorLoader(parameter_loader=parameters),
            generics=GenericsLoader(parameter_loader=parameters),
            members=MemberLoader(parameter_loader=parameters),
            extensions=ExtensionLoader(parameter_loader=parameters),
            resolver=ParameterResolver(
                class_loader=class_loader,
                parameter_loader=parameters,
                class_indexer=indexer,
                ignore_classes=config.ignore_set,
                hard_error_unsupported=config.hard_error_unsupported,
                interface_cache_size=config.interface_cache_size,
                logger=self._logger,
            ),
        )

    async def generate_package(
        self,
        package: PackageMetadata,
        batch_packages: Iterable[str] = (),
    ) -> PackageGenerationResult:
        """Run export discovery, indexing and resolution for ``package``.

        Raises:
            GenerationError: The first fatal analysis error encountered.
        """

        run = self._new_run()
        logger = self._logger.bind(package=package.name)
        logger.info("package-started", types=package.types_path)

        exports = await run.finder.get_package_exports(package.name, package.types_path)
        index = await run.indexer.build_index(exports, skip_not_found=True)

        constructors = run.constructors.get_constructors(index)
        generics = run.generics.get_generics(index)
        members = run.members.get_members(index)
        extensions = run.extensions.get_extensions(index)

        resolver = run.resolver
        resolved_constructors = await resolver.resolve_all_constructor_parameters(
            constructors
        )
        resolved_generics = await resolver.resolve_all_generic_type_parameter_data(
            generics, index
        )
        resolved_members = await resolver.resolve_all_member_parameter_data(
            members, index
        )
        resolved_extensions = await resolver.resolve_all_extension_data(
            extensions, index
        )

        external = find_external_packages(
            index,
            resolved_constructors,
            current_package=package.name,
            batch_packages=batch_packages,
            extra_ranges=[
                *(
                    value
                    for entries in resolved_generics.values()
                    for generic in entries
                    for value in (generic.range, generic.default)
                ),
                *(
                    instance
                    for entries in resolved_extensions.values()
                    for extension in entries
                    for instance in extension.generic_type_instantiations
                ),
            ],
        )
        logger.info(
            "package-finished",
            classes=len(resolved_constructors),
            exports=len(index),
            external=external,
        )
        return PackageGenerationResult(
            package=package,
            index=index,
            constructors=resolved_constructors,
            generics=resolved_generics,
            members=resolved_members,
            extensions=resolved_extensions,
            external_packages=external,
        )

    async def load_packages(
        self,
        package_roots: Sequence[str | Path],
    ) -> list[PackageMetadata]:
        """Load the metadata of ``package_roots``, skipping invalid packages."""

        ignored = {
            to_posix_path(str(Path(path).expanduser().resolve(strict=False)))
            for path in self.config.ignore_package_paths
        }
        packages = []
        for root in package_roots:
            try:
                package = await load_package_metadata(root, self.config.source)
            except PackageMetadataError as exc:
                self._logger.warning(
                    "package-skipped",
                    file=str(root),
                    error=str(exc),
                )
                continue
            if package.root in ignored:
                self._logger.info("package-ignored", package=package.name)
                continue
            packages.append(package)
        return packages

    async def generate(
        self,
        package_roots: Sequence[str | Path],
    ) -> list[PackageGenerationResult]:
        """Generate every package under ``package_roots`` in order."""

        packages = await self.load_packages(package_roots)
        batch = [package.name for package in packages]
        results = []
        for package in packages:
            results.append(await self.generate_package(package, batch))
        return results
