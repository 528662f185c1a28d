"""
Fan-in of a child process's output streams.

Each stream gets its own daemon reader thread that pushes lines into one
shared queue, so a single consumer sees stdout and stderr as one sequence.
Lines from different streams interleave in the order the reader threads
enqueue them, which is close to but not strictly the order the child wrote
them.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import IO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamLine:
    """One line of output, without its trailing newline."""

    source: str
    text: str


@dataclass(frozen=True)
class _StreamClosed:
    source: str
    error: Exception | None = None


class StreamReadError(Exception):
    """Reading from one of the merged streams failed."""

    def __init__(self, source: str, cause: Exception) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f"error reading {source}: {cause}")


class StreamMerger:
    """
    Merge several text streams into one ordered queue of lines.

    Example:
        >>> merger = StreamMerger({"stdout": proc.stdout, "stderr": proc.stderr})
        >>> merger.start()
        >>> while (line := merger.next_line()) is not None:
        ...     print(line.source, line.text)
    """

    def __init__(self, streams: Mapping[str, IO[str]]) -> None:
        self._streams = dict(streams)
        self._queue: queue.Queue[StreamLine | _StreamClosed] = queue.Queue()
        self._open = len(self._streams)
        self._detached = threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        """Start one reader thread per stream."""
        for source, stream in self._streams.items():
            thread = threading.Thread(
                target=self._pump,
                args=(source, stream),
                name=f"ssmtunnel-{source}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

    def _pump(self, source: str, stream: IO[str]) -> None:
        try:
            for raw in stream:
                if self._detached.is_set():
                    continue
                self._queue.put(StreamLine(source, raw.rstrip("\r\n")))
        except (OSError, ValueError) as e:
            logger.debug("Reader for %s stopped: %s", source, e)
            self._queue.put(_StreamClosed(source, e))
        else:
            self._queue.put(_StreamClosed(source))

    def next_line(self, timeout: float | None = None) -> StreamLine | None:
        """
        Return the next merged line.

        Args:
            timeout: Seconds to wait for a line; None blocks

        Returns:
            The next StreamLine, or None once every stream has closed

        Raises:
            queue.Empty: If no line arrived within timeout
            StreamReadError: If a stream failed with a read error
        """
        while self._open > 0:
            item = self._queue.get(timeout=timeout)
            if isinstance(item, _StreamClosed):
                self._open -= 1
                if item.error is not None:
                    raise StreamReadError(item.source, item.error)
                continue
            return item
        return None

    @property
    def exhausted(self) -> bool:
        """Whether every stream has reported end of output."""
        return self._open == 0

    def detach(self) -> None:
        """Keep draining the streams but stop queueing their lines."""
        self._detached.set()


__all__ = [
    "StreamLine",
    "StreamMerger",
    "StreamReadError",
]
