"""
Structured JSONL event log for ssmtunnel.

Provides a TunnelLogger class that writes timestamped JSON Lines events for
each launch attempt. Events are written to
~/.local/share/ssmtunnel/logs/{session_id}.jsonl

Each log line is valid JSON with the format:
{
  "timestamp": "2026-01-15T12:34:56.789Z",
  "event_type": "plugin_output",
  "data": { ... event-specific data ... }
}
"""

import logging
import os
import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# Characters allowed in a log file name; anything else becomes "_"
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class EventType(str, Enum):
    """Types of events that can be logged."""

    LAUNCH_START = "launch_start"
    PLUGIN_OUTPUT = "plugin_output"
    LAUNCH_END = "launch_end"
    ERROR = "error"


class LogEntry(BaseModel):
    """A single structured log entry in JSONL format."""

    model_config = ConfigDict(use_enum_values=True)

    timestamp: datetime = Field(..., description="When the event occurred (ISO 8601 format)")
    event_type: EventType = Field(..., description="Type of event")
    data: dict[str, Any] = Field(default_factory=dict, description="Event-specific data")


class TunnelLogger:
    """
    Structured JSONL logger for launch events.

    Example:
        event_log = TunnelLogger.init("user-0abc123")
        event_log.log_launch_start("session-manager-plugin", "us-east-1", "dev")
        start_session(config, sink=event_log.sink())
    """

    def __init__(self, log_file: Path):
        """
        Initialize logger with a log file path.

        Args:
            log_file: Path to the JSONL log file (will be created if needed)
        """
        self.log_file = Path(log_file)
        self.enabled = self._ensure_log_dir()

    def _ensure_log_dir(self) -> bool:
        """Create log directory if it doesn't exist; False if that failed."""
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Event log disabled, cannot create %s: %s", self.log_file.parent, e)
            return False
        return True

    @staticmethod
    def init(session_id: str) -> "TunnelLogger":
        """
        Initialize a logger for one session.

        Logs are written to ~/.local/share/ssmtunnel/logs/{session_id}.jsonl,
        with characters outside [A-Za-z0-9._-] in the id replaced by "_".

        Raises:
            ValueError: If session_id is empty or names a directory (. or ..)
        """
        if not session_id:
            raise ValueError("session_id cannot be empty")
        file_stem = _UNSAFE_NAME_CHARS.sub("_", session_id)
        if file_stem in (".", ".."):
            raise ValueError(f"session_id cannot be used as a log file name: {session_id!r}")

        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if not xdg_data_home:
            xdg_data_home = os.path.expanduser("~/.local/share")

        log_file = Path(xdg_data_home) / "ssmtunnel" / "logs" / f"{file_stem}.jsonl"
        return TunnelLogger(log_file)

    def log_event(self, event_type: EventType, data: dict[str, Any] | None = None) -> None:
        """
        Write a log event to the JSONL file.

        Write failures are logged as a warning once, after which the event
        log is disabled so that logging never blocks a launch.
        """
        if not self.enabled:
            return
        if data is None:
            data = {}

        try:
            entry = LogEntry(timestamp=datetime.now(timezone.utc), event_type=event_type, data=data)
            log_line = entry.model_dump_json(exclude_none=True) + "\n"

            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(log_line)

        except OSError as e:
            logger.warning("Failed to write to event log %s: %s", self.log_file, e)
            self.enabled = False

    def log_launch_start(self, plugin_name: str, region: str, profile: str) -> None:
        """Log that the plugin is about to be spawned."""
        self.log_event(
            EventType.LAUNCH_START,
            {"plugin": plugin_name, "region": region, "profile": profile},
        )

    def log_output(self, line: str) -> None:
        """Log one (prefixed) plugin output line."""
        self.log_event(EventType.PLUGIN_OUTPUT, {"line": line})

    def log_launch_end(self, outcome: str, duration_sec: float, pid: int | None = None) -> None:
        """
        Log how the launch resolved.

        Args:
            outcome: LaunchOutcome value (success, crashed, indeterminate)
            duration_sec: Seconds from spawn to resolution
            pid: Plugin process id, if it was spawned
        """
        data: dict[str, Any] = {"outcome": outcome, "duration_sec": duration_sec}
        if pid is not None:
            data["pid"] = pid
        self.log_event(EventType.LAUNCH_END, data)

    def log_error(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log an error event."""
        data: dict[str, Any] = {"message": message}
        if context:
            data["context"] = context

        self.log_event(EventType.ERROR, data)

    def sink(self) -> Callable[[str], None]:
        """Return a diagnostic sink that records each line as plugin_output."""
        return self.log_output

    def get_log_file(self) -> Path:
        """Get the path to the log file."""
        return self.log_file
