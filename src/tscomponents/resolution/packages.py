"""Package metadata loading from ``package.json``."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from tscomponents.core.paths import join_file_path, strip_module_extension, to_posix_path
from tscomponents.parse.errors import PackageMetadataError

__all__ = ["PackageMetadata", "load_package_metadata"]


@dataclass(frozen=True, slots=True)
class PackageMetadata:
    """Identity and types entry of a package under generation.

    ``types_path`` is the absolute, extensionless path of the package's
    declaration entry point.
    """

    name: str
    version: str
    root: str
    types_path: str

    @property
    def major_version(self) -> str:
        return self.version.split(".", 1)[0]


async def load_package_metadata(
    package_root: str | Path,
    source: str = "lib",
) -> PackageMetadata:
    """Read ``package.json`` below ``package_root``.

    Without a ``types``/``typings`` entry the package falls back to
    ``<source>/index.d.ts`` when that file exists.

    Raises:
        PackageMetadataError: If the manifest is missing or malformed, lacks
            a name or version, or no declaration entry can be found.
    """

    root = to_posix_path(str(Path(package_root).expanduser().resolve(strict=False)))
    manifest = join_file_path(root, "package.json")
    try:
        async with aiofiles.open(manifest, encoding="utf-8") as handle:
            data = json.loads(await handle.read())
    except FileNotFoundError as exc:
        raise PackageMetadataError(
            f"Could not find a package.json file in '{root}'"
        ) from exc
    except json.JSONDecodeError as exc:
        raise PackageMetadataError(
            f"Invalid package: syntax error in {manifest}: {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise PackageMetadataError(f"Invalid package: {manifest} is not an object")
    for required in ("name", "version"):
        if not isinstance(data.get(required), str):
            raise PackageMetadataError(
                f"Invalid package: Missing '{required}' in {manifest}"
            )
    types = data.get("types") or data.get("typings")
    if not isinstance(types, str) or not types:
        types = join_file_path(source, "index.d.ts")
        if not Path(join_file_path(root, types)).is_file():
            raise PackageMetadataError(
                f"Invalid package: Missing 'types' or 'typings' in {manifest} "
                f"and no {types} fallback"
            )

    return PackageMetadata(
        name=data["name"],
        version=data["version"],
        root=root,
        types_path=strip_module_extension(join_file_path(root, types)),
    )
