"""
Data models for the launch service.

Defines typed inputs and outputs for building plugin arguments and
monitoring a session-manager-plugin launch.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from ssmtunnel.core.session.models import SessionParameters, SessionRecord

# Plugin executable used when none is configured
SESSION_MANAGER_PLUGIN = "session-manager-plugin"

# Operation name passed to the plugin; the `aws ssm start-session` equivalent
SESSION_COMMAND = "StartSession"

ParametersLike = Union[SessionParameters, Mapping[str, Any]]


class LaunchOutcome(str, Enum):
    """Terminal resolution of a launch attempt."""

    SUCCESS = "success"  # Plugin reported the tunnel as opened
    CRASHED = "crashed"  # Plugin printed a panic marker
    INDETERMINATE = "indeterminate"  # Output ended without either signal


@dataclass(frozen=True)
class LaunchConfig:
    """
    Configuration for a single plugin launch.

    Holds everything needed to serialize the session and invoke the plugin.
    A config is used for one launch attempt only; a new attempt needs a
    fresh session record.

    Attributes:
        region: AWS region of the session
        profile: AWS profile name passed through to the plugin
        session: Session record from the upstream StartSession call
        session_params: Parameters used to request the session
        session_endpoint: SSM endpoint override passed to the plugin
        plugin_name: Plugin executable; empty means session-manager-plugin
    """

    region: str = ""
    profile: str = ""
    session: SessionRecord | None = None
    session_params: ParametersLike = field(default_factory=SessionParameters)
    session_endpoint: str = ""
    plugin_name: str = ""

    @property
    def resolved_plugin_name(self) -> str:
        """Plugin executable with the default applied."""
        return self.plugin_name or SESSION_MANAGER_PLUGIN


@dataclass
class LaunchResult:
    """
    Result of a successful launch.

    The plugin process keeps running after the tunnel opens; ``process`` is
    the live handle for callers that want to wait on or stop it.
    """

    outcome: LaunchOutcome
    plugin_name: str
    session_id: str
    pid: int
    duration_seconds: float
    lines_seen: int = 0
    process: subprocess.Popen[str] | None = field(default=None, repr=False, compare=False)

    @property
    def success(self) -> bool:
        """Whether the tunnel was reported as opened."""
        return self.outcome == LaunchOutcome.SUCCESS


__all__ = [
    "LaunchConfig",
    "LaunchOutcome",
    "LaunchResult",
    "ParametersLike",
    "SESSION_COMMAND",
    "SESSION_MANAGER_PLUGIN",
]
