"""POSIX-style path helpers for module and package resolution.

Declaration files are addressed by extensionless POSIX paths throughout the
resolver, regardless of the host platform, so Windows separators are folded
into forward slashes before any joining happens.
"""

from __future__ import annotations

import posixpath
import re

__all__ = [
    "DECLARATION_SUFFIX",
    "file_path_dirname",
    "join_file_path",
    "normalize_file_path",
    "strip_module_extension",
    "to_posix_path",
]

DECLARATION_SUFFIX = ".d.ts"

_BACKSLASHES = re.compile(r"\\+")
_LIGHT_EXTENSIONS = (".d.ts", ".ts", ".js", ".cjs", ".mjs", ".cts", ".mts")


def to_posix_path(path: str) -> str:
    """Fold Windows separators into forward slashes.

    Example:
        >>> to_posix_path("a\\\\b\\\\c")
        'a/b/c'
    """

    return _BACKSLASHES.sub("/", path)


def normalize_file_path(path: str) -> str:
    """Resolve ``.`` and ``..`` segments.

    Example:
        >>> normalize_file_path("lib/./a/../b")
        'lib/b'
    """

    return posixpath.normpath(to_posix_path(path))


def join_file_path(base_path: str, *paths: str) -> str:
    """Join ``paths`` onto ``base_path`` and normalize the result.

    Example:
        >>> join_file_path("lib/sub", "../A")
        'lib/A'
    """

    return posixpath.normpath(posixpath.join(to_posix_path(base_path), *paths))


def file_path_dirname(path: str) -> str:
    """Return the directory portion of ``path``.

    Example:
        >>> file_path_dirname("lib/sub/A")
        'lib/sub'
        >>> file_path_dirname("A")
        '.'
    """

    return posixpath.dirname(to_posix_path(path)) or "."


def strip_module_extension(path: str) -> str:
    """Strip a declaration or script extension from ``path``.

    Example:
        >>> strip_module_extension("lib/index.d.ts")
        'lib/index'
        >>> strip_module_extension("./Foo.js")
        './Foo'
        >>> strip_module_extension("./Foo.Bar")
        './Foo.Bar'
    """

    for suffix in _LIGHT_EXTENSIONS:
        if path.endswith(suffix):
            return path[: -len(suffix)]
    return path
