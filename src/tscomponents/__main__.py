"""Console-script entry point for :mod:`tscomponents`."""

from __future__ import annotations

from tscomponents.cli import create_app


def main() -> None:
    """Execute the CLI application.

    Example:
        >>> from tscomponents.__main__ import main
        >>> main()  # doctest: +SKIP
    """

    app = create_app()
    app(prog_name="tscomponents")


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()


__all__ = ["main"]
