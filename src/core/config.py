"""Runtime configuration model for swftrace.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
import os

from core.constants import DEFAULT_TRACE_ENCODING, UNLIMITED_LINES
from core.errors import TraceConfigError


@dataclass(frozen=True)
class TraceConfig:
    """Validated reader configuration.

    Attributes:
        max_lines_to_read: Line cap for one read pass, ``None`` for unlimited.
        encoding: Text encoding used to decode trace bytes.
    """

    max_lines_to_read: int | None = None
    encoding: str = DEFAULT_TRACE_ENCODING

    def __post_init__(self) -> None:
        if self.max_lines_to_read is not None and self.max_lines_to_read < 0:
            raise TraceConfigError(
                f"Invalid max lines to read: {self.max_lines_to_read}. "
                "Use a non-negative count, or None for unlimited."
            )
        _validate_encoding(self.encoding)

    @classmethod
    def from_env(cls) -> "TraceConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            TraceConfigError: If environment values are invalid.
        """
        max_lines_value = os.getenv("TRACE_MAX_LINES", str(UNLIMITED_LINES))
        encoding = os.getenv("TRACE_ENCODING", DEFAULT_TRACE_ENCODING)
        return cls(
            max_lines_to_read=_parse_max_lines(max_lines_value),
            encoding=encoding,
        )


def normalize_max_lines(max_lines: int | None) -> int | None:
    """Map the ``-1`` unlimited marker to ``None``.

    Args:
        max_lines: Line cap, ``-1`` or ``None`` for unlimited.

    Returns:
        Non-negative line cap, or ``None`` for unlimited.

    Raises:
        TraceConfigError: If value is below ``-1``.
    """
    if max_lines is None or max_lines == UNLIMITED_LINES:
        return None
    if max_lines < 0:
        raise TraceConfigError(
            f"Invalid max lines to read: {max_lines}. "
            "Use a non-negative count or -1 for unlimited."
        )
    return max_lines


def _parse_max_lines(raw_value: str) -> int | None:
    try:
        max_lines = int(raw_value)
    except ValueError as error:
        raise TraceConfigError(
            "Invalid TRACE_MAX_LINES value: "
            f"expected integer, got '{raw_value}'. "
            "Set TRACE_MAX_LINES to a line count or -1 for unlimited."
        ) from error
    return normalize_max_lines(max_lines)


def _validate_encoding(encoding: str) -> None:
    try:
        codecs.lookup(encoding)
    except LookupError as error:
        raise TraceConfigError(
            f"Invalid trace encoding: unknown codec '{encoding}'. "
            "Set TRACE_ENCODING to a Python codec name such as utf-8."
        ) from error
