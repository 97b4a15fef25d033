"""End-to-end CLI coverage for the public commands exposed by lib_config_vault."""

from __future__ import annotations

import json
from pathlib import Path

import lib_cli_exit_tools
from click.testing import CliRunner

from lib_config_vault import cli

COMMENTED = """# Demo

[server]
  # listen port
  port = 80  # http
"""


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def _write(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def test_cli_show_outputs_json(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.toml", COMMENTED)
    result = _runner().invoke(cli.cli, ["show", str(path), "--indent", "2"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"server": {"port": 80}}


def test_cli_get_prints_typed_value(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.yaml", "server:\n  port: '8080'\n")
    result = _runner().invoke(cli.cli, ["get", str(path), "server.port", "--type", "int"])
    assert result.exit_code == 0
    assert result.output.strip() == "8080"


def test_cli_get_missing_value_fails(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", "{}")
    result = _runner().invoke(cli.cli, ["get", str(path), "server.port"])
    assert result.exit_code == 1
    assert "No value at 'server.port'" in result.output


def test_cli_set_coerces_and_keeps_comments(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.toml", COMMENTED)
    result = _runner().invoke(cli.cli, ["set", str(path), "server.port", "8080"])
    assert result.exit_code == 0
    assert path.read_text(encoding="utf-8") == COMMENTED.replace("port = 80", "port = 8080")


def test_cli_set_string_keeps_text(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", "{}")
    result = _runner().invoke(cli.cli, ["set", str(path), "build.tag", "0012", "--string"])
    assert result.exit_code == 0
    assert json.loads(path.read_text(encoding="utf-8")) == {"build": {"tag": "0012"}}


def test_cli_set_creates_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "fresh.yaml"
    result = _runner().invoke(cli.cli, ["set", str(path), "feature.enabled", "true"])
    assert result.exit_code == 0
    assert path.read_text(encoding="utf-8") == "feature:\n  enabled: true\n"


def test_cli_read_commands_leave_missing_files_alone(tmp_path: Path) -> None:
    path = tmp_path / "absent.toml"
    for args in (["show", str(path)], ["get", str(path), "a"], ["contains", str(path), "a"]):
        result = _runner().invoke(cli.cli, args)
        assert result.exit_code == 2
        assert "does not exist" in result.output
    assert not path.exists()


def test_cli_unset_and_contains(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.toml", COMMENTED)
    assert _runner().invoke(cli.cli, ["contains", str(path), "server.port"]).output.strip() == "true"
    result = _runner().invoke(cli.cli, ["unset", str(path), "server.port"])
    assert result.exit_code == 0
    assert "listen port" not in path.read_text(encoding="utf-8")
    assert _runner().invoke(cli.cli, ["contains", str(path), "server.port"]).output.strip() == "false"


def test_cli_invalid_file_reports_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", "{broken")
    result = _runner().invoke(cli.cli, ["show", str(path)])
    assert result.exit_code != 0
    assert result.exception is not None


def test_cli_info_handles_missing_metadata(monkeypatch) -> None:
    """`cli info` must degrade gracefully when package metadata is unavailable."""

    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_main_restores_traceback_flag(tmp_path: Path) -> None:
    """`cli main` should restore lib_cli_exit_tools tracebacks after execution."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    path = _write(tmp_path, "app.toml", "value = 1\n")
    exit_code = cli.main(["--traceback", "contains", str(path), "value"], restore_traceback=True)
    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_main_returns_failure_code(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", "{broken")
    assert cli.main(["show", str(path)]) != 0
