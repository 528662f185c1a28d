"""Utility modules for ssmtunnel."""

from .logging import EventType, LogEntry, TunnelLogger

__all__ = [
    "EventType",
    "LogEntry",
    "TunnelLogger",
]
