"""Command-line adapter for inspecting configuration and sending test records.

Purpose
-------
Offer operators a quick way to check what the transport would send and to
push a single record at an endpoint, using the same ``LOG_HTTP_*``
configuration as host applications.

Contents
--------
* :func:`cli` – rich-click group with ``info``, ``config`` and ``send``.
* :func:`main` – entry point wrapped by :func:`lib_cli_exit_tools.run_cli`.
* :func:`summary_info` – metadata banner shared with ``python -m``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

import lib_cli_exit_tools
import rich_click as click
from click.core import ParameterSource
from rich.console import Console
from rich.table import Table

from . import __init__conf__
from . import config as log_config
from .domain import AuthType, HttpMethod, TransportConfig
from .domain.request import resolve_url
from .runtime import create_dispatcher

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_AUTH_TYPES = [member.value for member in AuthType]
_METHODS = [member.value for member in HttpMethod]


def summary_info() -> str:
    """Return the metadata banner printed by ``info``.

    Examples
    --------
    >>> "version" in summary_info()
    True
    """

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


def _parse_pairs(values: Sequence[str], option: str) -> dict[str, str]:
    """Split ``key=value`` strings; raise :class:`click.BadParameter` otherwise."""

    pairs: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint=option)
        pairs[key.strip()] = value
    return pairs


def _parse_field_value(raw: str) -> Any:
    """Interpret ``raw`` as JSON when possible so numbers and booleans keep their type."""

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _transport_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared destination/auth options to ``command``."""

    decorators = [
        click.option("--url", default=None, help="Destination base URL (overrides LOG_HTTP_URL)."),
        click.option("--host", default=None, hidden=True, help="Deprecated alias of --url."),
        click.option("--path", default=None, help="Path appended to the base URL."),
        click.option("--method", type=click.Choice(_METHODS, case_sensitive=False), default=None),
        click.option("--auth", default=None, help="Secret placed into the authorization header."),
        click.option("--auth-type", type=click.Choice(_AUTH_TYPES, case_sensitive=False), default=None),
        click.option("--header", "headers", multiple=True, metavar="KEY=VALUE", help="Static request header (repeatable)."),
    ]
    for decorator in reversed(decorators):
        command = decorator(command)
    return command


def _resolve_config(
    *,
    url: str | None,
    host: str | None,
    path: str | None,
    method: str | None,
    auth: str | None,
    auth_type: str | None,
    headers: Sequence[str],
) -> TransportConfig:
    header_overrides = _parse_pairs(headers, "--header") or None
    try:
        return log_config.config_from_env(
            url=url,
            host=host,
            path=path,
            method=method,
            auth=auth,
            auth_type=auth_type.lower() if auth_type else None,
            headers=header_overrides,
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(help=__init__conf__.title, context_settings=CLICK_CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option("--traceback/--no-traceback", default=False, help="Show full Python traceback on errors.")
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load the nearest .env before reading configuration (default from {log_config.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool) -> None:
    """Root command storing global flags."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit = use_dotenv if ctx.get_parameter_source("use_dotenv") is ParameterSource.COMMANDLINE else None
    if log_config.dotenv_requested(explicit):
        log_config.enable_dotenv()

    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("config", context_settings=CLICK_CONTEXT_SETTINGS)
@_transport_options
def cli_config(**options: Any) -> None:
    """Show the resolved transport configuration with secrets masked."""

    resolved = _resolve_config(**options)
    table = Table(title="lib_log_http configuration", show_header=True)
    table.add_column("option")
    table.add_column("value")
    for key, value in resolved.redacted().items():
        table.add_row(key, "-" if value is None else json.dumps(value) if isinstance(value, dict) else str(value))
    table.add_row("destination", resolve_url(resolved.base_url, resolved.path))
    Console(soft_wrap=True).print(table)


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("message")
@click.option("--level", default="info", show_default=True, help="Value of the record's level field.")
@click.option("--field", "fields", multiple=True, metavar="KEY=VALUE", help="Extra record field; JSON values keep their type.")
@click.option("--timeout", type=float, default=5.0, show_default=True, help="Seconds to wait for delivery.")
@_transport_options
def cli_send(message: str, level: str, fields: Sequence[str], timeout: float, **options: Any) -> None:
    """Dispatch one record and report whether the endpoint accepted it."""

    resolved = _resolve_config(**options)
    record: dict[str, Any] = {"level": level, "message": message}
    record.update({key: _parse_field_value(value) for key, value in _parse_pairs(fields, "--field").items()})

    outcome: dict[str, dict[str, Any]] = {}

    def _observe(name: str, payload: dict[str, Any]) -> None:
        if name in {"http_delivered", "http_delivery_failed"}:
            outcome[name] = payload

    dispatcher = create_dispatcher(resolved, diagnostic=_observe, timeout=timeout, close_timeout=timeout)
    with dispatcher:
        dispatcher.dispatch(record)

    if "http_delivered" in outcome:
        delivered = outcome["http_delivered"]
        click.echo(f"delivered {delivered['method']} {delivered['url']} -> {delivered['status']}")
        return
    if "http_delivery_failed" in outcome:
        failed = outcome["http_delivery_failed"]
        raise click.ClickException(f"delivery to {failed['url']} failed: {failed['exception']}")
    raise click.ClickException(f"delivery did not complete within {timeout} seconds")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and restore traceback preferences afterwards."""

    previous_traceback = lib_cli_exit_tools.config.traceback
    previous_force_color = lib_cli_exit_tools.config.traceback_force_color
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        lib_cli_exit_tools.config.traceback = previous_traceback
        lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main", "summary_info"]
