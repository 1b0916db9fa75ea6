"""Helpers backing the ``tscomponents generate`` command."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Mapping, Sequence

from tscomponents.core.config import (
    GeneratorConfig,
    env_overrides,
    find_config_file,
    load_config,
    load_packaged_defaults,
    load_user_config,
)
from tscomponents.generate import (
    Generator,
    PackageGenerationResult,
    write_debug_state,
)

__all__ = ["load_effective_config", "read_ignore_components", "run_generate"]


def read_ignore_components(path: Path) -> list[str]:
    """Read a JSON array of component names to ignore.

    Raises:
        ValueError: If the file does not hold a list of strings.
    """

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise ValueError(f"{path} must contain a JSON array of class names")
    return data


def load_effective_config(
    *,
    cwd: Path,
    cli_overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> GeneratorConfig:
    """Merge defaults, ``tscomponents.toml``, environment and CLI flags."""

    return load_config(
        defaults=load_packaged_defaults(),
        user_config=load_user_config(find_config_file(cwd)),
        env_config=env_overrides(os.environ if environ is None else environ),
        cli_overrides=cli_overrides,
    )


def run_generate(
    config: GeneratorConfig,
    package_roots: Sequence[Path],
    *,
    debug_directory: Path | None = None,
) -> tuple[list[PackageGenerationResult], Path | None]:
    """Generate ``package_roots`` and optionally persist the debug state."""

    generator = Generator(config=config)
    results = asyncio.run(generator.generate(package_roots))
    debug_path = None
    if config.debug_state:
        debug_path = write_debug_state(results, debug_directory or Path.cwd())
    return results, debug_path
