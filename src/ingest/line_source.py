"""Buffered line access over trace byte streams."""

from __future__ import annotations

import io
from typing import BinaryIO, Iterator

from core.constants import DEFAULT_TRACE_ENCODING


class TraceLineSource:
    """Line reader honoring an optional maximum line count.

    Undecodable bytes are replaced so a bad line reaches the tokenizer
    instead of aborting the stream.
    """

    def __init__(
        self,
        stream: BinaryIO,
        max_lines: int | None = None,
        encoding: str = DEFAULT_TRACE_ENCODING,
    ) -> None:
        self._reader = io.TextIOWrapper(stream, encoding=encoding, errors="replace")
        self._max_lines = max_lines
        self._lines_read = 0

    @property
    def lines_read(self) -> int:
        """Return the number of lines handed out so far."""
        return self._lines_read

    def next_line(self) -> str | None:
        """Return the next line without its line terminator.

        Returns:
            Line text, or ``None`` at end of input or once the cap is reached.

        Raises:
            OSError: If the underlying stream fails.
        """
        if self._max_lines is not None and self._lines_read >= self._max_lines:
            return None
        line = self._reader.readline()
        if not line:
            return None
        self._lines_read += 1
        return line.rstrip("\r\n")

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line
