"""Configuration models and loaders for :mod:`tscomponents`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Iterable, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, model_validator

from tscomponents.resources import get_resource

DEFAULTS_RESOURCE_NAME = "tscomponents.defaults.toml"
USER_CONFIG_NAME = "tscomponents.toml"
ENV_LOG_LEVEL = "TSCOMPONENTS_LOG_LEVEL"


class GeneratorConfig(BaseModel):
    """Settings steering a component generation run."""

    source: str = Field(
        default="lib",
        description=(
            "Directory holding the declaration entry point, used when a "
            "package.json declares neither types nor typings."
        ),
    )
    ignore_package_paths: list[str] = Field(
        default_factory=list,
        description="Package directories excluded from generation.",
    )
    ignore_components: list[str] = Field(
        default_factory=list,
        description=(
            "Class or interface names that resolve to a wildcard range "
            "instead of being followed."
        ),
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level applied to the root logger.",
    )
    debug_state: bool = Field(
        default=False,
        description="Write a JSON dump of the resolved state after a run.",
    )
    hard_error_unsupported: bool = Field(
        default=True,
        description=(
            "Abort on unsupported TypeScript constructs; when false they are "
            "logged and replaced by wildcard ranges."
        ),
    )
    syntax_cache_size: int = Field(
        default=2048,
        ge=1,
        description="Maximum number of parsed files kept in memory.",
    )
    interface_cache_size: int = Field(
        default=2048,
        ge=1,
        description="Maximum number of memoized interface resolutions per run.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
        "extra": "forbid",
    }

    @model_validator(mode="after")
    def _post_process(self) -> "GeneratorConfig":
        """Normalize fields after validation."""

        object.__setattr__(self, "log_level", self.log_level.upper())
        object.__setattr__(
            self,
            "ignore_components",
            list(dict.fromkeys(self.ignore_components)),
        )
        return self

    @property
    def ignore_set(self) -> frozenset[str]:
        """Return the ignored component names as a set."""

        return frozenset(self.ignore_components)


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content.

    Example:
        >>> read_packaged_defaults_text().startswith("#")
        True
    """

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["log_level"]
        'INFO'
    """

    data: dict[str, Any] = tomllib.loads(read_packaged_defaults_text())
    return data


def iter_config_directories(cwd: Path) -> Iterable[Path]:
    """Yield ``cwd`` followed by each of its parents, closest first."""

    current = Path(cwd).expanduser().resolve(strict=False)
    yield current
    yield from current.parents


def find_config_file(cwd: Path) -> Path | None:
    """Return the closest ``tscomponents.toml`` above ``cwd``, if any."""

    for directory in iter_config_directories(cwd):
        candidate = directory / USER_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def load_user_config(path: Path | None) -> dict[str, Any]:
    """Parse the user configuration file at ``path``.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """

    if path is None:
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Extract configuration overrides from environment variables."""

    overrides: dict[str, Any] = {}
    level = environ.get(ENV_LOG_LEVEL)
    if level:
        overrides["log_level"] = level
    return overrides


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    defaults: Mapping[str, Any],
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> GeneratorConfig:
    """Load configuration according to the precedence stack.

    Args:
        defaults: Packaged defaults shipped with the application.
        user_config: Parsed ``tscomponents.toml`` content.
        env_config: Settings derived from environment variables.
        cli_overrides: Settings supplied via CLI flags. ``None`` values are
            treated as "not supplied".

    Returns:
        A validated :class:`GeneratorConfig` instance.
    """

    stack = dict(defaults)
    cli_layer = {
        key: value
        for key, value in (cli_overrides or {}).items()
        if value is not None
    }
    for layer in (user_config, env_config, cli_layer):
        if layer:
            stack = _deep_merge(stack, layer)
    return GeneratorConfig(**stack)


def render_user_config(
    config: GeneratorConfig,
    *,
    include_defaults: bool = True,
) -> str:
    """Render a ``tscomponents.toml`` document for ``config``.

    Args:
        config: Configuration instance to serialize.
        include_defaults: Whether to prepend the explanatory header.

    Returns:
        A TOML-formatted string ready to persist for the user.
    """

    document = tomlkit.document()

    if include_defaults:
        document.add(tomlkit.comment("Generated by tscomponents config"))
        document.add(
            tomlkit.comment(
                "Precedence: CLI flags > env vars > tscomponents.toml > defaults"
            )
        )
        document.add(tomlkit.comment("Environment overrides:"))
        document.add(tomlkit.comment(f"  {ENV_LOG_LEVEL}=debug"))
        document.add(tomlkit.nl())

    document["source"] = config.source
    document["ignore_package_paths"] = list(config.ignore_package_paths)
    document["ignore_components"] = list(config.ignore_components)
    document["log_level"] = config.log_level
    document["debug_state"] = config.debug_state
    document["hard_error_unsupported"] = config.hard_error_unsupported
    document["syntax_cache_size"] = config.syntax_cache_size
    document["interface_cache_size"] = config.interface_cache_size

    return tomlkit.dumps(document)


__all__ = [
    "DEFAULTS_RESOURCE_NAME",
    "ENV_LOG_LEVEL",
    "GeneratorConfig",
    "USER_CONFIG_NAME",
    "env_overrides",
    "find_config_file",
    "iter_config_directories",
    "load_config",
    "load_packaged_defaults",
    "load_user_config",
    "read_packaged_defaults_text",
    "render_user_config",
]
