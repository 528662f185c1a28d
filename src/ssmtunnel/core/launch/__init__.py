"""
Launch service for opening session tunnels through session-manager-plugin.

This package provides the core logic of ssmtunnel: serializing a session
into the plugin's positional arguments, spawning the plugin, and inferring
from its log output whether the tunnel opened.

Modules:
    args: Positional argument assembly (session JSON, region, command, ...)
    classifier: Success/crash matching rules for plugin output lines
    streams: Fan-in of the plugin's stdout and stderr
    sinks: Diagnostic sinks that receive plugin output
    launcher: Spawning and monitoring the plugin
    models: Data models (LaunchConfig, LaunchOutcome, LaunchResult)
    errors: Exception hierarchy rooted at LauncherError

Example Usage:
    >>> from ssmtunnel.core.launch import LaunchConfig, start_session
    >>> from ssmtunnel.core.session import SessionRecord
    >>>
    >>> config = LaunchConfig(
    ...     region="eu-west-1",
    ...     profile="default",
    ...     session=SessionRecord.model_validate(response),
    ...     session_params={"Target": "i-0123456789abcdef0"},
    ... )
    >>> result = start_session(config, timeout=60)
"""

from ssmtunnel.core.launch.args import build_session_args, serialize_session_params
from ssmtunnel.core.launch.classifier import LineClassifier, LineKind, classify_line
from ssmtunnel.core.launch.errors import (
    LaunchCancelledError,
    LauncherError,
    MissingSessionError,
    PluginCrashedError,
    PluginLaunchError,
    SessionSerializationError,
    TunnelIndeterminateError,
)
from ssmtunnel.core.launch.launcher import resolve_plugin_binary, spawn_plugin, start_session
from ssmtunnel.core.launch.models import (
    SESSION_COMMAND,
    SESSION_MANAGER_PLUGIN,
    LaunchConfig,
    LaunchOutcome,
    LaunchResult,
)
from ssmtunnel.core.launch.sinks import DiagnosticSink, console_sink, logging_sink, tee_sink
from ssmtunnel.core.launch.streams import StreamLine, StreamMerger, StreamReadError

__all__ = [
    # Args
    "build_session_args",
    "serialize_session_params",
    # Classifier
    "LineClassifier",
    "LineKind",
    "classify_line",
    # Launcher
    "resolve_plugin_binary",
    "spawn_plugin",
    "start_session",
    # Streams
    "StreamLine",
    "StreamMerger",
    "StreamReadError",
    # Sinks
    "DiagnosticSink",
    "console_sink",
    "logging_sink",
    "tee_sink",
    # Errors
    "LaunchCancelledError",
    "LauncherError",
    "MissingSessionError",
    "PluginCrashedError",
    "PluginLaunchError",
    "SessionSerializationError",
    "TunnelIndeterminateError",
    # Models
    "SESSION_COMMAND",
    "SESSION_MANAGER_PLUGIN",
    "LaunchConfig",
    "LaunchOutcome",
    "LaunchResult",
]
