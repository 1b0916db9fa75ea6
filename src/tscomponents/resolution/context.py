"""File access, parsing and package lookup for a generation run."""

from __future__ import annotations

import json
from pathlib import Path

import aiofiles

from tscomponents.core.logging import Logger, get_logger
from tscomponents.core.paths import (
    DECLARATION_SUFFIX,
    file_path_dirname,
    join_file_path,
    strip_module_extension,
)
from tscomponents.parse.errors import PackageResolutionError
from tscomponents.parse.nodes import Module
from tscomponents.parse.syntax import SyntaxCache, parse_typescript

__all__ = ["ResolutionContext", "types_package_name"]


def types_package_name(package_name: str) -> str:
    """Return the ambient ``@types`` package directory for ``package_name``.

    Example:
        >>> types_package_name("@scope/pkg")
        'scope__pkg'
        >>> types_package_name("node")
        'node'
    """

    if package_name.startswith("@") and "/" in package_name:
        scope, name = package_name[1:].split("/", 1)
        return f"{scope}__{name}"
    return package_name


class ResolutionContext:
    """Read and parse declaration files on behalf of the resolver.

    Paths handed to the resolver are extensionless; the ``.d.ts`` suffix is
    appended here. Parsed modules are kept in the process-wide
    :class:`SyntaxCache` unless a dedicated cache is supplied.
    """

    def __init__(
        self,
        *,
        syntax_cache: SyntaxCache | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.syntax_cache = (
            syntax_cache if syntax_cache is not None else SyntaxCache.shared()
        )
        self._logger = logger or get_logger(__name__)

    async def get_file_content(self, file_path: str) -> str:
        """Return the text of ``file_path``.

        Raises:
            FileNotFoundError: If the file does not exist.
        """

        async with aiofiles.open(file_path, encoding="utf-8") as handle:
            return await handle.read()

    async def file_exists(self, file_path: str) -> bool:
        return Path(file_path).is_file()

    async def get_typescript_file_content(self, file_path: str) -> str:
        return await self.get_file_content(f"{file_path}{DECLARATION_SUFFIX}")

    def parse_typescript_contents(self, contents: str, file_path: str) -> Module:
        return parse_typescript(contents, file_path)

    async def parse_typescript_file(self, file_path: str) -> Module:
        """Parse the declaration file at extensionless ``file_path``.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeScriptSyntaxError: If the file cannot be parsed.
        """

        cached = self.syntax_cache.get(file_path)
        if cached is not None:
            return cached
        contents = await self.get_typescript_file_content(file_path)
        module = self.parse_typescript_contents(
            contents,
            f"{file_path}{DECLARATION_SUFFIX}",
        )
        self.syntax_cache.put(file_path, module)
        self._logger.debug("parsed-file", file=file_path)
        return module

    async def resolve_package_index(
        self,
        package_name: str,
        current_file_path: str,
    ) -> str:
        """Return the extensionless types entry of ``package_name``.

        ``node_modules`` directories are searched from the directory of
        ``current_file_path`` upwards; ambient ``@types`` packages are tried
        once the package itself was not found.

        Raises:
            PackageResolutionError: If no declaration entry can be located.
        """

        _, index = await self.resolve_package(package_name, current_file_path)
        return index

    async def resolve_package(
        self,
        package_name: str,
        current_file_path: str,
    ) -> tuple[str, str]:
        """Return the root directory and types entry of ``package_name``.

        Raises:
            PackageResolutionError: If no declaration entry can be located.
        """

        start = file_path_dirname(current_file_path)
        for candidate in (
            package_name,
            f"@types/{types_package_name(package_name)}",
        ):
            for directory in self._walk_up(start):
                root = join_file_path(directory, "node_modules", candidate)
                index = await self._package_root_index(root)
                if index is not None:
                    return root, index
        raise PackageResolutionError(
            f"Could not resolve '{package_name}' from path '{current_file_path}'"
        )

    async def _package_root_index(self, root: str) -> str | None:
        manifest = join_file_path(root, "package.json")
        if await self.file_exists(manifest):
            try:
                data = json.loads(await self.get_file_content(manifest))
            except json.JSONDecodeError as exc:
                raise PackageResolutionError(
                    f"Malformed package manifest {manifest}: {exc}"
                ) from exc
            if not isinstance(data, dict):
                raise PackageResolutionError(
                    f"Package manifest {manifest} must contain a JSON object"
                )
            types = data.get("types") or data.get("typings")
            if isinstance(types, str) and types:
                return strip_module_extension(join_file_path(root, types))
        index = join_file_path(root, "index")
        if await self.file_exists(f"{index}{DECLARATION_SUFFIX}"):
            return index
        return None

    @staticmethod
    def _walk_up(directory: str) -> list[str]:
        directories = [directory]
        while True:
            parent = file_path_dirname(directory)
            if parent == directory or directory in {"", "."}:
                return directories
            directories.append(parent)
            directory = parent
