"""
Plugin launcher for the launch service.

Spawns session-manager-plugin with the serialized session, forwards its
output to a diagnostic sink, and decides from that output whether the
tunnel opened.
"""

from __future__ import annotations

import logging
import queue
import shutil
import subprocess
import threading
import time

from ssmtunnel.core.launch.args import build_session_args
from ssmtunnel.core.launch.classifier import LineClassifier, LineKind
from ssmtunnel.core.launch.errors import (
    LaunchCancelledError,
    LauncherError,
    PluginCrashedError,
    PluginLaunchError,
    TunnelIndeterminateError,
)
from ssmtunnel.core.launch.models import LaunchConfig, LaunchOutcome, LaunchResult
from ssmtunnel.core.launch.sinks import DiagnosticSink, logging_sink
from ssmtunnel.core.launch.streams import StreamMerger, StreamReadError

logger = logging.getLogger(__name__)

# How often the scan wakes up to check for cancellation
POLL_INTERVAL = 0.1


def resolve_plugin_binary(plugin_name: str) -> str | None:
    """
    Resolve the plugin executable on PATH.

    Returns:
        Full path to the plugin, or None if it can't be found
    """
    return shutil.which(plugin_name)


def spawn_plugin(plugin_name: str, args: tuple[str, ...]) -> subprocess.Popen[str]:
    """
    Start the plugin with piped, line-buffered text output.

    Raises:
        PluginLaunchError: If the executable is missing or not runnable
    """
    try:
        return subprocess.Popen(
            [plugin_name, *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,  # Line buffered
        )
    except OSError as e:
        raise PluginLaunchError(plugin_name, e) from e


def _stop_plugin(process: subprocess.Popen[str]) -> None:
    """Kill the plugin if it is still running and reap it."""
    if process.poll() is None:
        logger.debug("Killing plugin process %d", process.pid)
        process.kill()
    process.wait()


def _scan_output(
    merger: StreamMerger,
    classifier: LineClassifier,
    sink: DiagnosticSink,
    plugin_name: str,
    cancel: threading.Event | None,
    deadline: float | None,
) -> int:
    """
    Consume merged output until the launch resolves.

    The first crash or success line wins. Returns the number of non-empty
    lines seen on success and raises on every other outcome.
    """
    lines_seen = 0

    while True:
        if cancel is not None and cancel.is_set():
            raise LaunchCancelledError(plugin_name, "cancelled")
        if deadline is not None and time.monotonic() >= deadline:
            raise LaunchCancelledError(plugin_name, "timed out")

        try:
            line = merger.next_line(timeout=POLL_INTERVAL)
        except queue.Empty:
            continue
        except StreamReadError as e:
            logger.warning("Stopped reading %s output: %s", plugin_name, e)
            raise TunnelIndeterminateError(plugin_name) from e

        if line is None:
            raise TunnelIndeterminateError(plugin_name)

        text = line.text
        if not text:
            continue
        lines_seen += 1

        kind = classifier.classify(text)
        if kind is LineKind.CRASH:
            sink(f"[{plugin_name} stderr] {text}")
            raise PluginCrashedError(plugin_name, text)

        sink(f"[{plugin_name}] {text}")

        if kind is LineKind.SUCCESS:
            return lines_seen


def start_session(
    config: LaunchConfig,
    *,
    sink: DiagnosticSink | None = None,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
    classifier: LineClassifier | None = None,
) -> LaunchResult:
    """
    Open an interactive session tunnel through session-manager-plugin.

    Args:
        config: Launch configuration with a populated session record
        sink: Receives every non-empty output line, prefixed with the plugin
            name (defaults to the ``ssmtunnel.plugin`` logger)
        cancel: Event that kills the plugin and aborts the launch when set
        timeout: Seconds to wait for the tunnel before giving up
        classifier: Overrides the success/crash matching rules

    Returns:
        LaunchResult for the opened tunnel; the plugin keeps running

    Raises:
        MissingSessionError: If config.session is None
        SessionSerializationError: If the session or parameters can't be encoded
        PluginLaunchError: If the plugin could not be started
        PluginCrashedError: If the plugin printed a panic
        LaunchCancelledError: If cancelled or timed out first
        TunnelIndeterminateError: If output ended without a success line

    Examples:
        >>> from ssmtunnel.core.session import SessionRecord
        >>> config = LaunchConfig(
        ...     region="us-east-1",
        ...     session=SessionRecord(SessionId="user-0abc", TokenValue="t"),
        ... )
        >>> result = start_session(config, timeout=30)
        >>> result.outcome
        <LaunchOutcome.SUCCESS: 'success'>
    """
    plugin_name = config.resolved_plugin_name
    args = build_session_args(config)
    assert config.session is not None  # for mypy
    session_id = config.session.session_id

    if sink is None:
        sink = logging_sink()
    if classifier is None:
        classifier = LineClassifier(session_id)
    deadline = time.monotonic() + timeout if timeout is not None else None

    logger.info("Starting %s for session %s", plugin_name, session_id)
    started = time.time()
    process = spawn_plugin(plugin_name, args)
    assert process.stdout is not None
    assert process.stderr is not None

    merger = StreamMerger({"stdout": process.stdout, "stderr": process.stderr})
    merger.start()

    try:
        lines_seen = _scan_output(merger, classifier, sink, plugin_name, cancel, deadline)
    except LauncherError as e:
        _stop_plugin(process)
        logger.info(
            "%s launch for session %s resolved %s (exit code %s): %s",
            plugin_name,
            session_id,
            e.outcome.value if e.outcome else "error",
            process.returncode,
            e,
        )
        raise
    except BaseException:
        _stop_plugin(process)
        raise

    # Tunnel is up; keep the pipes drained so the plugin never blocks on them
    merger.detach()
    duration = time.time() - started
    logger.info("Tunnel opened for session %s in %.2fs", session_id, duration)

    return LaunchResult(
        outcome=LaunchOutcome.SUCCESS,
        plugin_name=plugin_name,
        session_id=session_id,
        pid=process.pid,
        duration_seconds=duration,
        lines_seen=lines_seen,
        process=process,
    )


__all__ = [
    "POLL_INTERVAL",
    "resolve_plugin_binary",
    "spawn_plugin",
    "start_session",
]
