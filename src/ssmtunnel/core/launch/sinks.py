"""
Diagnostic sinks for plugin output.

A sink is any callable that accepts one already-prefixed output line. The
launcher forwards every line it sees to the sink as it arrives.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from rich.console import Console

DiagnosticSink = Callable[[str], None]


def logging_sink(logger: logging.Logger | None = None, level: int = logging.INFO) -> DiagnosticSink:
    """
    Sink that writes lines to a stdlib logger.

    Args:
        logger: Logger to write to (defaults to the ``ssmtunnel.plugin`` logger)
        level: Log level for each line
    """
    target = logger or logging.getLogger("ssmtunnel.plugin")

    def _sink(line: str) -> None:
        target.log(level, "%s", line)

    return _sink


def console_sink(console: Console, style: str | None = "dim") -> DiagnosticSink:
    """Sink that prints lines to a rich console, without markup parsing."""

    def _sink(line: str) -> None:
        console.print(line, style=style, markup=False, highlight=False, soft_wrap=True)

    return _sink


def tee_sink(*sinks: DiagnosticSink) -> DiagnosticSink:
    """Sink that forwards each line to every given sink in order."""

    def _sink(line: str) -> None:
        for sink in sinks:
            sink(line)

    return _sink


__all__ = [
    "DiagnosticSink",
    "console_sink",
    "logging_sink",
    "tee_sink",
]
