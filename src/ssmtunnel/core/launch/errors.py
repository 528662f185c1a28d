"""
Exceptions raised while building arguments for, spawning, and monitoring
session-manager-plugin.
"""

from __future__ import annotations

from ssmtunnel.core.launch.models import LaunchOutcome

CRASHED_MESSAGE = "exited with a non-zero status"
INDETERMINATE_MESSAGE = (
    "unable to determine if a successful tunnel has been established; giving up"
)


class LauncherError(Exception):
    """Base exception for launcher errors."""

    outcome: LaunchOutcome | None = None


class MissingSessionError(LauncherError):
    """No session record was supplied."""

    def __init__(self) -> None:
        super().__init__(
            "an active Amazon SSM Session is required before trying to open a session tunnel"
        )


class SessionSerializationError(LauncherError):
    """Session record or parameters could not be encoded as JSON."""

    def __init__(self, what: str, cause: Exception) -> None:
        self.what = what
        self.cause = cause
        super().__init__(f"error encountered in reading {what} details: {cause}")


class PluginLaunchError(LauncherError):
    """The plugin executable could not be started."""

    def __init__(self, plugin_name: str, cause: Exception) -> None:
        self.plugin_name = plugin_name
        self.cause = cause
        super().__init__(f"error encountered when calling {plugin_name}: {cause}")


class PluginCrashedError(LauncherError):
    """The plugin reported an internal failure (panic)."""

    outcome = LaunchOutcome.CRASHED

    def __init__(self, plugin_name: str, line: str) -> None:
        self.plugin_name = plugin_name
        self.line = line
        super().__init__(CRASHED_MESSAGE)


class TunnelIndeterminateError(LauncherError):
    """Output ended without a success or crash signal."""

    outcome = LaunchOutcome.INDETERMINATE

    def __init__(self, plugin_name: str, message: str = INDETERMINATE_MESSAGE) -> None:
        self.plugin_name = plugin_name
        super().__init__(message)


class LaunchCancelledError(TunnelIndeterminateError):
    """The launch was cancelled or timed out before resolving."""

    def __init__(self, plugin_name: str, reason: str = "cancelled") -> None:
        self.reason = reason
        super().__init__(plugin_name, f"session launch {reason} before the tunnel opened")


__all__ = [
    "CRASHED_MESSAGE",
    "INDETERMINATE_MESSAGE",
    "LaunchCancelledError",
    "LauncherError",
    "MissingSessionError",
    "PluginCrashedError",
    "PluginLaunchError",
    "SessionSerializationError",
    "TunnelIndeterminateError",
]
