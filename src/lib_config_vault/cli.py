"""CLI adapter for ``lib_config_vault`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect and edit configuration files from a shell with the same
semantics as the Python API: dotted paths, typed reads, and saves that keep
the comments of TOML and YAML files.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_show` / :func:`cli_get` / :func:`cli_contains` – read commands.
* :func:`cli_set` / :func:`cli_unset` – write commands that save immediately.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It builds a
:class:`~lib_config_vault.core.ConfigFactory` rooted at the file's directory
and never reaches into adapter implementation details directly.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import ConfigFactory
from .domain.config import Config

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

_TYPE_CHOICES: Final[dict[str, type]] = {"int": int, "float": float, "bool": bool, "str": str}


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` without metadata."""

    try:
        return metadata.version("lib_config_vault")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _open(file: Path) -> Config:
    """Load *file* through a factory rooted at its directory."""

    resolved = file.expanduser().resolve()
    return ConfigFactory(resolved.parent).create(resolved.name)


def _coerce(value: str) -> object:
    """Coerce command-line text to a boolean or number where possible.

    Examples
    --------
    >>> _coerce('true'), _coerce('10'), _coerce('-2'), _coerce('3.5'), _coerce('hello')
    (True, 10, -2, 3.5, 'hello')
    """

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        return float(value)
    except ValueError:
        return value


@click.group(
    help="Comment-preserving configuration files (TOML, YAML, JSON)",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_config_vault",
    message="lib_config_vault version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_config_vault")
    except metadata.PackageNotFoundError:
        click.echo("lib_config_vault (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_config_vault')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("show", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False, exists=True))
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_show(file: Path, indent: Optional[int]) -> None:
    """Print the whole tree of FILE as JSON."""

    click.echo(_open(file).to_json(indent=indent))


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False, exists=True))
@click.argument("path")
@click.option(
    "--type",
    "type_name",
    type=click.Choice(tuple(_TYPE_CHOICES), case_sensitive=False),
    default=None,
    help="Convert the value before printing it",
)
def cli_get(file: Path, path: str, type_name: Optional[str]) -> None:
    """Print the value at PATH as JSON; exit with status 1 when it is missing."""

    type_ = _TYPE_CHOICES[type_name.lower()] if type_name else object
    value = _open(file).get_optional(path, type_)
    if value is None:
        raise click.ClickException(f"No value at {path!r}")
    click.echo(json.dumps(value, ensure_ascii=False, default=str))


@cli.command("set", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("path")
@click.argument("value")
@click.option(
    "--string/--coerce",
    "as_string",
    default=False,
    help="Store VALUE verbatim instead of coercing booleans and numbers",
)
def cli_set(file: Path, path: str, value: str, as_string: bool) -> None:
    """Set PATH to VALUE in FILE and save it, keeping comments."""

    config = _open(file)
    config.set(path, value if as_string else _coerce(value))
    config.save()


@cli.command("unset", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("path")
def cli_unset(file: Path, path: str) -> None:
    """Remove PATH from FILE and save it."""

    config = _open(file)
    config.remove(path)
    config.save()


@cli.command("contains", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False, exists=True))
@click.argument("path")
def cli_contains(file: Path, path: str) -> None:
    """Print ``true`` when PATH holds a value in FILE, ``false`` otherwise."""

    click.echo("true" if _open(file).contains(path) else "false")


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_config_vault",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
