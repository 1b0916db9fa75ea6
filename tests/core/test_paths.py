"""Tests for :mod:`tscomponents.core.paths`."""

from __future__ import annotations

import pytest

from tscomponents.core.paths import (
    file_path_dirname,
    join_file_path,
    normalize_file_path,
    strip_module_extension,
    to_posix_path,
)


def test_to_posix_path_folds_backslashes() -> None:
    assert to_posix_path("C:\\pkg\\lib\\index") == "C:/pkg/lib/index"
    assert to_posix_path("a\\\\b") == "a/b"
    assert to_posix_path("already/posix") == "already/posix"


def test_normalize_file_path_collapses_dot_segments() -> None:
    assert normalize_file_path("lib/./a/../b") == "lib/b"
    assert normalize_file_path("lib\\a\\..\\c") == "lib/c"


def test_join_file_path_resolves_relative_imports() -> None:
    assert join_file_path("/pkg/lib/sub", "../A") == "/pkg/lib/A"
    assert join_file_path("/pkg/lib", "./B") == "/pkg/lib/B"
    assert join_file_path("/pkg", "node_modules", "dep", "index") == (
        "/pkg/node_modules/dep/index"
    )


def test_file_path_dirname() -> None:
    assert file_path_dirname("/pkg/lib/A") == "/pkg/lib"
    assert file_path_dirname("A") == "."


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("lib/index.d.ts", "lib/index"),
        ("./Foo.js", "./Foo"),
        ("./Foo.ts", "./Foo"),
        ("./Foo.Bar", "./Foo.Bar"),
        ("./Foo", "./Foo"),
    ],
)
def test_strip_module_extension(path: str, expected: str) -> None:
    assert strip_module_extension(path) == expected
