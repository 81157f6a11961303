"""CLI adapter for ``smconfig`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check what a process would see without writing Python: which
environment wins, what the merged configuration looks like, and how an
override string is decoded.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_read_config` – resolves sources and prints JSON.
* :func:`cli_environment` – prints only the resolved environment name.
* :func:`cli_parse` – decodes override mini-language text.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer. It calls :func:`smconfig.core.read_config` and the parser and
never reaches into adapter internals.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.env.default import DEFAULT_ENV_VAR_NAME
from .adapters.env.parser import parse_env_var
from .adapters.environment.default import DEFAULT_ENVIRONMENT_VARIABLE
from .adapters.file_loaders.structured import FILE_LOADERS
from .core import read_config
from .domain.config import Config, json_default

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("smconfig")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Resolve environment-aware layered configuration",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="smconfig",
    message="smconfig version %(version)s",
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
    """Print the installed version and the process variables smconfig consults."""

    try:
        meta = metadata.metadata("smconfig")
        headline = meta.get("Summary") or "smconfig"
    except metadata.PackageNotFoundError:
        headline = "smconfig (metadata unavailable)"
    rows = [
        ("version", _resolve_version()),
        ("environment variable", DEFAULT_ENVIRONMENT_VARIABLE),
        ("override variables", f"{DEFAULT_ENV_VAR_NAME}, {DEFAULT_ENV_VAR_NAME}_<N>, {DEFAULT_ENV_VAR_NAME}_FILE"),
        ("file formats", ", ".join(sorted(FILE_LOADERS))),
    ]
    click.echo(headline)
    for label, value in rows:
        click.echo(f"  {label:<21}: {value}")


def _source_options(func):
    """Attach the arguments shared by commands that resolve sources."""

    func = click.option(
        "--env-var-name",
        default=None,
        help="Variable carrying runtime overrides (defaults to SMCONFIG)",
    )(func)
    func = click.option("--env", "env", default=None, help="Force a specific environment")(func)
    func = click.argument("sources", nargs=-1, required=True)(func)
    return func


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
@click.option("--key", default=None, help="Print only this (dotted) key")
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include the layer that supplied each key",
)
def cli_read_config(
    sources: Sequence[str],
    env: Optional[str],
    env_var_name: Optional[str],
    key: Optional[str],
    indent: Optional[int],
    provenance: bool,
) -> None:
    """Resolve SOURCES (merged left to right) and print the result as JSON."""

    config = _read(sources, env, env_var_name)
    if key is not None:
        click.echo(_dumps(config.get(key), indent))
        return
    if provenance:
        payload = {"environment": config.environment, "config": config.all(), "provenance": config.provenance()}
        click.echo(_dumps(payload, indent))
        return
    click.echo(config.to_json(indent=indent))


@cli.command("environment", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
def cli_environment(sources: Sequence[str], env: Optional[str], env_var_name: Optional[str]) -> None:
    """Print the environment name SOURCES resolve to on this machine."""

    click.echo(_read(sources, env, env_var_name).environment)


@cli.command("parse", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("text")
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output")
def cli_parse(text: str, indent: Optional[int]) -> None:
    """Decode override TEXT (``key=value`` pairs) and print it as JSON.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["parse", "db.port=5432"])
    >>> result.output.strip()
    '{"db":{"port":5432}}'
    """

    click.echo(_dumps(parse_env_var(text), indent))


def _read(sources: Sequence[str], env: Optional[str], env_var_name: Optional[str]) -> Config:
    options = {"env_var_name": env_var_name} if env_var_name is not None else None
    return read_config(list(sources), env, options)


def _dumps(payload: object, indent: Optional[int]) -> str:
    return json.dumps(payload, indent=indent, separators=(",", ":"), ensure_ascii=False, default=json_default)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="smconfig",
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
