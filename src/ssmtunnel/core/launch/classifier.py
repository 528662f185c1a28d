"""
Classification of session-manager-plugin output lines.

The plugin has no structured status channel. Whether a tunnel opened is
inferred from substrings in its log output, and the rules for that live here
so they can be changed and tested without spawning anything.
"""

from __future__ import annotations

from enum import Enum

DEFAULT_SUCCESS_TEMPLATE = "opened for sessionId {session_id}"
DEFAULT_CRASH_MARKER = "panic"


class LineKind(str, Enum):
    """What a single output line means for the launch."""

    SUCCESS = "success"
    CRASH = "crash"
    INFO = "info"


class LineClassifier:
    """
    Matches plugin output lines against the success and crash markers.

    A crash marker takes precedence over the success marker on the same line.

    Example:
        >>> classifier = LineClassifier("abc-123")
        >>> classifier.classify("Session abc-123 opened for sessionId abc-123.")
        <LineKind.SUCCESS: 'success'>
        >>> classifier.classify("panic: runtime error")
        <LineKind.CRASH: 'crash'>
    """

    def __init__(
        self,
        session_id: str,
        success_template: str = DEFAULT_SUCCESS_TEMPLATE,
        crash_marker: str = DEFAULT_CRASH_MARKER,
    ) -> None:
        self.session_id = session_id
        self.success_marker = success_template.format(session_id=session_id)
        self.crash_marker = crash_marker

    def classify(self, text: str) -> LineKind:
        if self.crash_marker in text:
            return LineKind.CRASH
        if self.success_marker in text:
            return LineKind.SUCCESS
        return LineKind.INFO


def classify_line(text: str, session_id: str) -> LineKind:
    """Classify one line using the default markers."""
    return LineClassifier(session_id).classify(text)


__all__ = [
    "DEFAULT_CRASH_MARKER",
    "DEFAULT_SUCCESS_TEMPLATE",
    "LineClassifier",
    "LineKind",
    "classify_line",
]
