"""Shared pytest fixtures for declaration analysis tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Mapping

import pytest
import structlog
from structlog.testing import LogCapture

from tscomponents.core.logging import Logger
from tscomponents.parse.comments import CommentLoader
from tscomponents.parse.indexer import ClassIndexer
from tscomponents.parse.loader import ClassLoader
from tscomponents.parse.models import SymbolicReference
from tscomponents.parse.parameters import ParameterLoader
from tscomponents.parse.resolver import ParameterResolver
from tscomponents.parse.syntax import SyntaxCache
from tscomponents.resolution.context import ResolutionContext


class MockedResolutionContext(ResolutionContext):
    """Resolution context serving files from an in-memory mapping.

    Keys are full file paths, e.g. ``/pkg/lib/index.d.ts`` or
    ``/pkg/node_modules/dep/package.json``.
    """

    def __init__(self, files: Mapping[str, str] | None = None) -> None:
        super().__init__(syntax_cache=SyntaxCache())
        self.files: dict[str, str] = dict(files or {})
        self.reads: list[str] = []

    async def get_file_content(self, file_path: str) -> str:
        self.reads.append(file_path)
        try:
            return self.files[file_path]
        except KeyError:
            raise FileNotFoundError(file_path) from None

    async def file_exists(self, file_path: str) -> bool:
        return file_path in self.files


@pytest.fixture
def log_capture() -> LogCapture:
    """Capture structured events emitted through loggers built by fixtures."""

    return LogCapture()


@pytest.fixture
def logger(log_capture: LogCapture) -> Logger:
    """Return a logger whose events land in ``log_capture``."""

    return structlog.wrap_logger(
        logging.getLogger("tscomponents.tests"),
        processors=[log_capture],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


@pytest.fixture
def context() -> MockedResolutionContext:
    return MockedResolutionContext()


@pytest.fixture
def write_files(
    context: MockedResolutionContext,
) -> Callable[[Mapping[str, str]], None]:
    """Register declaration files; extensionless keys receive ``.d.ts``."""

    def _write(files: Mapping[str, str]) -> None:
        for path, text in files.items():
            if not path.endswith((".d.ts", ".json")):
                path = f"{path}.d.ts"
            context.files[path] = text

    return _write


@pytest.fixture
def comment_loader() -> CommentLoader:
    return CommentLoader()


@pytest.fixture
def class_loader(
    context: MockedResolutionContext,
    comment_loader: CommentLoader,
    logger: Logger,
) -> ClassLoader:
    return ClassLoader(
        resolution_context=context,
        comment_loader=comment_loader,
        logger=logger,
    )


@pytest.fixture
def class_indexer(class_loader: ClassLoader, logger: Logger) -> ClassIndexer:
    return ClassIndexer(class_loader=class_loader, logger=logger)


@pytest.fixture
def parameter_loader(comment_loader: CommentLoader, logger: Logger) -> ParameterLoader:
    return ParameterLoader(comment_loader=comment_loader, logger=logger)


@pytest.fixture
def resolver(
    class_loader: ClassLoader,
    parameter_loader: ParameterLoader,
    class_indexer: ClassIndexer,
    logger: Logger,
) -> ParameterResolver:
    return ParameterResolver(
        class_loader=class_loader,
        parameter_loader=parameter_loader,
        class_indexer=class_indexer,
        logger=logger,
    )


@pytest.fixture
def reference() -> Callable[..., SymbolicReference]:
    """Build references into package ``pkg`` with extensionless file names."""

    def _reference(
        local_name: str,
        file_name: str = "/pkg/lib/index",
        qualified_path: tuple[str, ...] = (),
        package_name: str = "pkg",
    ) -> SymbolicReference:
        return SymbolicReference(
            package_name=package_name,
            file_name=file_name,
            local_name=local_name,
            qualified_path=qualified_path,
            file_name_referenced=file_name,
        )

    return _reference


def _write_tree(root: Path, files: Mapping[str, str]) -> None:
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


@pytest.fixture
def package_tree(tmp_path: Path) -> dict[str, Path]:
    """Create two packages on disk: ``pkg`` depending on ``dep``.

    ``dep`` is installed below ``pkg/node_modules`` and also present as a
    sibling package directory so it can join a generation batch.
    """

    dep_files = {
        "package.json": json.dumps(
            {"name": "dep", "version": "2.0.0", "types": "index.d.ts"}
        ),
        "index.d.ts": "export declare class Dep {}\n",
    }
    pkg_root = tmp_path / "pkg"
    dep_root = tmp_path / "dep"
    _write_tree(
        pkg_root,
        {
            "package.json": json.dumps(
                {"name": "pkg", "version": "1.2.3", "types": "lib/index.d.ts"}
            ),
            "lib/index.d.ts": (
                "import { Dep } from 'dep';\n"
                "import { A } from './a';\n"
                "export * from './a';\n"
                "/** The main class. */\n"
                "export declare class Main {\n"
                "    /**\n"
                "     * @param a - The A\n"
                "     */\n"
                "    constructor(a: A, dep: Dep, options?: Options);\n"
                "}\n"
                "export interface Options {\n"
                "    size: number;\n"
                "}\n"
            ),
            "lib/a.d.ts": "export declare class A<T = string> {}\n",
            **{f"node_modules/dep/{name}": text for name, text in dep_files.items()},
        },
    )
    _write_tree(dep_root, dep_files)
    return {"pkg": pkg_root, "dep": dep_root}
