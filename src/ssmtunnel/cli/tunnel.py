"""
ssmtunnel CLI - Tunnel commands.

Implements `start` (open a tunnel), `args` (print the plugin arguments
without spawning anything) and `check` (locate the plugin).

The session record comes from an upstream StartSession call, e.g. the JSON
printed by `aws ssm start-session --generate-cli-skeleton output` or saved
from boto3's `ssm.start_session(...)`.
"""

from __future__ import annotations

import json
import sys
import time
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ssmtunnel.core.config import TunnelConfig, load_config
from ssmtunnel.core.launch import (
    LaunchConfig,
    LauncherError,
    build_session_args,
    console_sink,
    resolve_plugin_binary,
    start_session,
    tee_sink,
)
from ssmtunnel.core.session import SessionParameters, SessionRecord
from ssmtunnel.utils import TunnelLogger

console = Console()

SESSION_FILE_OPTION = typer.Option(
    ...,
    "--session-file",
    "-s",
    help="StartSession response as JSON ('-' reads stdin)",
)
PARAMS_FILE_OPTION = typer.Option(
    None,
    "--params-file",
    help="StartSession request parameters as JSON",
)
TARGET_OPTION = typer.Option(None, "--target", "-t", help="Target instance id")
DOCUMENT_OPTION = typer.Option(None, "--document-name", "-d", help="SSM document name")
PARAMETER_OPTION = typer.Option(
    None,
    "--parameter",
    "-p",
    help="Document parameter as KEY=VALUE (repeatable)",
)
REASON_OPTION = typer.Option(None, "--reason", help="Reason recorded for the session")
REGION_OPTION = typer.Option(None, "--region", help="AWS region (overrides config)")
PROFILE_OPTION = typer.Option(None, "--profile", help="AWS profile (overrides config)")
ENDPOINT_OPTION = typer.Option(None, "--endpoint", help="SSM endpoint override")
PLUGIN_OPTION = typer.Option(None, "--plugin", help="Plugin executable (overrides config)")


def _read_json(source: str) -> object:
    """Read JSON from a file path, or from stdin when source is '-'."""
    if source == "-":
        return json.loads(sys.stdin.read())
    return json.loads(Path(source).read_text(encoding="utf-8"))


def load_session(source: str) -> SessionRecord:
    """
    Load a session record from a file or stdin.

    Raises:
        OSError: If the file can't be read
        ValueError: If the content is not JSON
        ValidationError: If the JSON has no usable SessionId
    """
    return SessionRecord.model_validate(_read_json(source))


def load_params(
    params_file: Optional[str],
    target: Optional[str],
    document_name: Optional[str],
    parameters: Optional[list[str]],
    reason: Optional[str],
) -> SessionParameters:
    """
    Build session parameters from a JSON file or from individual options.

    Raises:
        typer.BadParameter: If both a file and individual options are given
        ValueError: If a KEY=VALUE parameter is malformed
    """
    if params_file is not None:
        if target or document_name or parameters or reason:
            raise typer.BadParameter(
                "--params-file cannot be combined with --target, --document-name, "
                "--parameter or --reason"
            )
        return SessionParameters.model_validate(_read_json(params_file))

    return SessionParameters.from_pairs(
        parameters or [],
        target=target,
        document_name=document_name,
        reason=reason,
    )


def build_launch_config(
    config: TunnelConfig,
    session: SessionRecord,
    params: SessionParameters,
    *,
    region: Optional[str] = None,
    profile: Optional[str] = None,
    endpoint: Optional[str] = None,
    plugin: Optional[str] = None,
) -> LaunchConfig:
    """Combine loaded configuration with command-line overrides."""
    return LaunchConfig(
        region=region if region is not None else config.region,
        profile=profile if profile is not None else config.profile,
        session=session,
        session_params=params,
        session_endpoint=endpoint if endpoint is not None else config.session_endpoint,
        plugin_name=plugin if plugin is not None else config.plugin_name,
    )


def _load_inputs(
    session_file: str,
    params_file: Optional[str],
    target: Optional[str],
    document_name: Optional[str],
    parameter: Optional[list[str]],
    reason: Optional[str],
) -> tuple[SessionRecord, SessionParameters]:
    try:
        session = load_session(session_file)
        params = load_params(params_file, target, document_name, parameter, reason)
    except (ValidationError, ValueError, OSError) as e:
        console.print(f"[red]Invalid session input:[/red] {escape(str(e))}")
        raise typer.Exit(2)
    return session, params


def start(
    session_file: str = SESSION_FILE_OPTION,
    params_file: Optional[str] = PARAMS_FILE_OPTION,
    target: Optional[str] = TARGET_OPTION,
    document_name: Optional[str] = DOCUMENT_OPTION,
    parameter: Optional[list[str]] = PARAMETER_OPTION,
    reason: Optional[str] = REASON_OPTION,
    region: Optional[str] = REGION_OPTION,
    profile: Optional[str] = PROFILE_OPTION,
    endpoint: Optional[str] = ENDPOINT_OPTION,
    plugin: Optional[str] = PLUGIN_OPTION,
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.1,
        help="Give up if the tunnel hasn't opened after this many seconds",
    ),
    log: Optional[bool] = typer.Option(
        None,
        "--log/--no-log",
        help="Write launch events to the JSONL event log",
    ),
) -> None:
    """
    Open a session tunnel through session-manager-plugin.

    Stays attached once the tunnel opens: the plugin's output pipes belong to
    this process, so the command exits with the plugin's own exit code when
    the tunnel closes, or 1 if the launch fails.

    Examples:
        ssmtunnel start -s session.json -t i-0123456789abcdef0
        ssmtunnel start -s - --params-file params.json < session.json
    """
    config = load_config()
    session, params = _load_inputs(
        session_file, params_file, target, document_name, parameter, reason
    )
    launch_config = build_launch_config(
        config,
        session,
        params,
        region=region,
        profile=profile,
        endpoint=endpoint,
        plugin=plugin,
    )

    sink = console_sink(console)
    event_log: TunnelLogger | None = None
    if (log if log is not None else config.log_events):
        try:
            event_log = TunnelLogger.init(session.session_id)
        except ValueError as e:
            console.print(f"[yellow]Warning:[/yellow] event log disabled: {escape(str(e))}")
    if event_log is not None:
        sink = tee_sink(sink, event_log.sink())
        event_log.log_launch_start(
            launch_config.resolved_plugin_name, launch_config.region, launch_config.profile
        )

    started = time.time()
    try:
        result = start_session(
            launch_config,
            sink=sink,
            timeout=timeout if timeout is not None else config.timeout_seconds,
        )
    except LauncherError as e:
        if event_log is not None:
            event_log.log_error(str(e), {"error_type": type(e).__name__})
            outcome = e.outcome.value if e.outcome is not None else "error"
            event_log.log_launch_end(outcome, time.time() - started)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if event_log is not None:
        event_log.log_launch_end(result.outcome.value, result.duration_seconds, result.pid)

    console.print(
        f"[green]Tunnel opened[/green] for session [bold]{escape(result.session_id)}[/bold] "
        f"(pid {result.pid})"
    )

    if result.process is None:
        return

    console.print("[dim]Waiting for the plugin to exit (Ctrl-C to stop)...[/dim]")
    try:
        exit_code = result.process.wait()
    except KeyboardInterrupt:
        raise typer.Exit(130)
    raise typer.Exit(exit_code)


def args(
    session_file: str = SESSION_FILE_OPTION,
    params_file: Optional[str] = PARAMS_FILE_OPTION,
    target: Optional[str] = TARGET_OPTION,
    document_name: Optional[str] = DOCUMENT_OPTION,
    parameter: Optional[list[str]] = PARAMETER_OPTION,
    reason: Optional[str] = REASON_OPTION,
    region: Optional[str] = REGION_OPTION,
    profile: Optional[str] = PROFILE_OPTION,
    endpoint: Optional[str] = ENDPOINT_OPTION,
) -> None:
    """
    Print the plugin's positional arguments as a JSON array.

    Nothing is spawned; useful for checking what would be passed to
    session-manager-plugin.
    """
    config = load_config()
    session, params = _load_inputs(
        session_file, params_file, target, document_name, parameter, reason
    )
    launch_config = build_launch_config(
        config, session, params, region=region, profile=profile, endpoint=endpoint
    )

    try:
        plugin_args = build_session_args(launch_config)
    except LauncherError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    typer.echo(json.dumps(list(plugin_args), indent=2))


def check(plugin: Optional[str] = PLUGIN_OPTION) -> None:
    """Check that the plugin executable can be found."""
    plugin_name = plugin if plugin is not None else load_config().plugin_name
    path = resolve_plugin_binary(plugin_name)
    if path is None:
        console.print(f"[red]✗[/red] {escape(plugin_name)} not found in PATH")
        console.print(
            "[dim]Install it from https://docs.aws.amazon.com/systems-manager/latest/"
            "userguide/session-manager-working-with-install-plugin.html[/dim]"
        )
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {escape(plugin_name)}: {escape(path)}")


__all__ = [
    "args",
    "build_launch_config",
    "check",
    "load_params",
    "load_session",
    "start",
]
