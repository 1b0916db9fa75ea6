"""Integration tests for the Typer application exposed by :mod:`tscomponents.cli`."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tscomponents.cli import create_app
from tscomponents.cli.generate import load_effective_config, read_ignore_components
from tscomponents.generate import DEBUG_STATE_FILENAME


@pytest.fixture()
def runner() -> CliRunner:
    """Return a Typer CLI runner for invoking the application."""

    return CliRunner()


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "work"
    directory.mkdir()
    monkeypatch.chdir(directory)
    monkeypatch.delenv("TSCOMPONENTS_LOG_LEVEL", raising=False)
    return directory


def _invoke(runner: CliRunner, *args: str, **kwargs):
    return runner.invoke(create_app(), list(args), catch_exceptions=False, **kwargs)


def test_generate_prints_summary(runner, workdir, package_tree) -> None:
    result = _invoke(
        runner, "generate", str(package_tree["pkg"]), "--log-level", "WARNING"
    )

    assert result.exit_code == 0, result.output
    assert "pkg@1.2.3" in result.output
    assert "classes: 2" in result.output
    assert "- Main" in result.output
    assert "external packages: dep" in result.output
    assert not (workdir / DEBUG_STATE_FILENAME).exists()


def test_generate_writes_debug_state(runner, workdir, package_tree) -> None:
    result = _invoke(
        runner,
        "generate",
        str(package_tree["pkg"]),
        str(package_tree["dep"]),
        "--debug-state",
        "-l",
        "WARNING",
    )

    assert result.exit_code == 0, result.output
    state_path = workdir / DEBUG_STATE_FILENAME
    assert f"debug state: {state_path}" in result.output
    state = json.loads(state_path.read_text(encoding="utf-8"))
    assert set(state["packages"]) == {"pkg", "dep"}
    assert state["packages"]["pkg"]["externalPackages"] == []


def test_generate_honours_ignore_components(
    runner, workdir, package_tree, tmp_path: Path
) -> None:
    ignore = tmp_path / "ignore.json"
    ignore.write_text(json.dumps(["Dep"]), encoding="utf-8")

    result = _invoke(
        runner,
        "generate",
        str(package_tree["pkg"]),
        "-i",
        str(ignore),
        "-l",
        "WARNING",
    )

    assert result.exit_code == 0, result.output
    assert "external packages: none" in result.output


def test_generate_rejects_invalid_ignore_file(
    runner, workdir, package_tree, tmp_path: Path
) -> None:
    ignore = tmp_path / "ignore.json"
    ignore.write_text(json.dumps({"Dep": True}), encoding="utf-8")

    result = _invoke(runner, "generate", str(package_tree["pkg"]), "-i", str(ignore))

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_generate_failure_and_lenient_mode(runner, workdir, tmp_path: Path) -> None:
    root = tmp_path / "arrays"
    (root / "lib").mkdir(parents=True)
    (root / "package.json").write_text(
        json.dumps({"name": "arrays", "version": "0.1.0", "types": "lib/index.d.ts"}),
        encoding="utf-8",
    )
    (root / "lib" / "index.d.ts").write_text(
        "export declare class Grid {\n    constructor(cells: string[][]);\n}\n",
        encoding="utf-8",
    )

    failed = _invoke(runner, "generate", str(root), "-l", "ERROR")
    assert failed.exit_code == 1
    assert "Generation failed" in failed.output
    assert "nested array" in failed.output

    lenient = _invoke(runner, "generate", str(root), "--lenient", "-l", "ERROR")
    assert lenient.exit_code == 0, lenient.output
    assert "- Grid" in lenient.output


def test_generate_without_packages(runner, workdir) -> None:
    result = _invoke(runner, "generate", "-l", "ERROR")

    assert result.exit_code == 0, result.output
    assert "No packages generated" in result.output


def test_generate_source_option_locates_untyped_packages(
    runner, workdir, tmp_path: Path
) -> None:
    root = tmp_path / "untyped"
    (root / "src").mkdir(parents=True)
    (root / "package.json").write_text(
        json.dumps({"name": "untyped", "version": "0.0.1"}), encoding="utf-8"
    )
    (root / "src" / "index.d.ts").write_text(
        "export declare class Found {}\n", encoding="utf-8"
    )

    default = _invoke(runner, "generate", str(root), "-l", "ERROR")
    located = _invoke(runner, "generate", str(root), "-s", "src", "-l", "ERROR")

    assert "No packages generated" in default.output
    assert located.exit_code == 0, located.output
    assert "untyped@0.0.1" in located.output
    assert "- Found" in located.output


def test_inspect_prints_chain(runner, workdir, package_tree) -> None:
    declaration = package_tree["pkg"] / "lib" / "index.d.ts"

    result = _invoke(runner, "inspect", str(declaration), "Main", "-p", "pkg")

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "class Main"
    assert "  package: pkg" in lines
    assert "  comment: The main class." in lines

    generic = _invoke(runner, "inspect", str(package_tree["pkg"] / "lib" / "a.d.ts"), "A")
    assert "  generics: T" in generic.output.splitlines()


def test_inspect_reports_missing_names(runner, workdir, package_tree) -> None:
    declaration = package_tree["pkg"] / "lib" / "index.d.ts"

    result = _invoke(runner, "inspect", str(declaration), "Nope")

    assert result.exit_code == 1
    assert "Inspection failed" in result.output


def test_config_renders_effective_settings(runner, workdir) -> None:
    (workdir / "tscomponents.toml").write_text(
        'source = "types"\n', encoding="utf-8"
    )

    full = _invoke(runner, "config", env={"TSCOMPONENTS_LOG_LEVEL": "debug"})
    bare = _invoke(runner, "config", "--bare")

    assert full.exit_code == 0, full.output
    assert full.output.startswith("# Generated by tscomponents config")
    assert "# defaults: packaged resource" in full.output
    rendered = tomllib.loads(full.output)
    assert rendered["source"] == "types"
    assert rendered["log_level"] == "DEBUG"
    assert not bare.output.startswith("#")
    assert tomllib.loads(bare.output)["log_level"] == "INFO"


def test_read_ignore_components(tmp_path: Path) -> None:
    path = tmp_path / "ignore.json"
    path.write_text(json.dumps(["A", "B"]), encoding="utf-8")
    assert read_ignore_components(path) == ["A", "B"]

    path.write_text(json.dumps(["A", 1]), encoding="utf-8")
    with pytest.raises(ValueError):
        read_ignore_components(path)


def test_load_effective_config_layers(tmp_path: Path) -> None:
    (tmp_path / "tscomponents.toml").write_text(
        'source = "dist"\nlog_level = "warning"\n', encoding="utf-8"
    )

    config = load_effective_config(
        cwd=tmp_path,
        cli_overrides={"source": None, "log_level": "error"},
        environ={"TSCOMPONENTS_LOG_LEVEL": "debug"},
    )

    assert config.source == "dist"
    assert config.log_level == "ERROR"
