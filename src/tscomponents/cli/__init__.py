"""Command-line interface primitives for :mod:`tscomponents`.

This module exposes the Typer application behind the ``tscomponents``
console script and wires the ``generate``, ``inspect`` and ``config``
commands into the generator and configuration helpers.

Example:
    >>> import typer
    >>> from tscomponents.cli import create_app
    >>> app = create_app()
    >>> isinstance(app, typer.Typer)
    True
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence

import typer
from pydantic import ValidationError

from tscomponents.cli.generate import (
    load_effective_config,
    read_ignore_components,
    run_generate,
)
from tscomponents.cli.inspect import describe_entity, inspect_declaration
from tscomponents.core.config import DEFAULTS_RESOURCE_NAME, render_user_config
from tscomponents.core.logging import configure_logging, get_logger
from tscomponents.generate import PackageGenerationResult
from tscomponents.parse.errors import GenerationError

_app_help = (
    "Generate dependency-injection component metadata from TypeScript "
    "declaration files."
    "\n\n"
    "Use `tscomponents generate` inside a package to analyze its exports."
)


def _emit_summary(
    results: Sequence[PackageGenerationResult],
    *,
    debug_path: Path | None,
) -> None:
    """Print a human-friendly summary of generation results."""

    if not results:
        typer.secho("No packages generated", fg=typer.colors.YELLOW, bold=True)
    for result in results:
        typer.secho(
            f"{result.package.name}@{result.package.version}",
            fg=typer.colors.GREEN,
            bold=True,
        )
        typer.echo(f"  types: {result.package.types_path}")
        typer.echo(f"  classes: {len(result.classes)}")
        for name in result.classes:
            typer.echo(f"    - {name}")
        external = ", ".join(result.external_packages) or "none"
        typer.echo(f"  external packages: {external}")
    if debug_path is not None:
        typer.echo(f"  debug state: {debug_path}")


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``tscomponents`` CLI.

    Returns:
        A configured Typer application ready to be invoked by
        ``tscomponents``.
    """

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
        invoke_without_command=False,
        cls=typer.core.TyperGroup,
    )

    @app.callback()
    def main_callback() -> None:
        """Top-level CLI callback ensuring subcommands are dispatched."""

        return None

    @app.command(
        "generate",
        help="Analyze packages and resolve their exported components.",
    )
    def generate_command(
        package_dirs: list[Path] = typer.Argument(
            None,
            help="Package directories to analyze (defaults to the current one).",
        ),
        source: str | None = typer.Option(
            None,
            "--source",
            "-s",
            help="Directory holding index.d.ts for packages without a types entry.",
        ),
        ignore_components: Path | None = typer.Option(
            None,
            "--ignore-components",
            "-i",
            exists=True,
            dir_okay=False,
            help="JSON file listing class names to ignore.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
        debug_state: bool = typer.Option(
            False,
            "--debug-state",
            help="Write tscomponents-debug-state.json after generation.",
        ),
        lenient: bool = typer.Option(
            False,
            "--lenient",
            help="Downgrade unsupported TypeScript constructs to warnings.",
        ),
    ) -> None:
        """Resolve the exported components of one or more packages."""

        cwd = Path.cwd()
        overrides: dict[str, object] = {
            "source": source,
            "log_level": log_level,
            "debug_state": True if debug_state else None,
            "hard_error_unsupported": False if lenient else None,
        }
        try:
            if ignore_components is not None:
                overrides["ignore_components"] = read_ignore_components(
                    ignore_components
                )
            config = load_effective_config(cwd=cwd, cli_overrides=overrides)
        except (ValueError, ValidationError) as exc:
            typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc

        configure_logging(level=config.log_level)
        logger = get_logger(__name__, command="generate")

        roots = list(package_dirs or [cwd])
        try:
            results, debug_path = run_generate(config, roots, debug_directory=cwd)
        except GenerationError as exc:
            logger.error("generate-failed", error=str(exc))
            typer.secho(f"Generation failed: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc

        logger.info(
            "generate-complete",
            packages=[result.package.name for result in results],
            debug_state=str(debug_path) if debug_path else None,
        )
        _emit_summary(results, debug_path=debug_path)

    @app.command(
        "inspect",
        help="Resolve one declaration and print its inheritance chain.",
    )
    def inspect_command(
        file: Path = typer.Argument(
            ...,
            exists=True,
            dir_okay=False,
            help="Declaration file (.d.ts) containing or re-exporting NAME.",
        ),
        name: str = typer.Argument(
            ...,
            help="Dotted name of the class, interface or type to resolve.",
        ),
        package: str = typer.Option(
            "local",
            "--package",
            "-p",
            help="Package name the file belongs to.",
        ),
        log_level: str = typer.Option(
            "WARNING",
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
    ) -> None:
        """Print the entity kind, file and chain of ``NAME``."""

        configure_logging(level=log_level)
        try:
            entity = asyncio.run(
                inspect_declaration(file, name, package_name=package)
            )
        except GenerationError as exc:
            typer.secho(f"Inspection failed: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc
        for line in describe_entity(entity):
            typer.echo(line)

    @app.command(
        "config",
        help="Print the effective configuration as a tscomponents.toml file.",
    )
    def config_command(
        bare: bool = typer.Option(
            False,
            "--bare",
            help="Omit the explanatory header comments.",
        ),
    ) -> None:
        """Render the merged configuration."""

        try:
            config = load_effective_config(cwd=Path.cwd())
        except ValidationError as exc:
            typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc
        typer.echo(
            render_user_config(config, include_defaults=not bare),
            nl=False,
        )
        if not bare:
            typer.echo(f"# defaults: packaged resource ({DEFAULTS_RESOURCE_NAME})")

    return app


__all__ = ["create_app"]
