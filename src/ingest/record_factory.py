"""Trace record validation and task construction.

This module converts tokenized trace lines into validated job records
and builds task descriptors from them. Malformed lines yield ``None``.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Sequence

from core.constants import (
    MIN_PROCESSOR_COUNT,
    MIN_RUN_TIME_SECONDS,
    SWF_NOT_AVAILABLE,
    TRACE_INT_MAX,
    TRACE_INT_MIN,
    TRACE_LONG_MAX,
    TRACE_LONG_MIN,
)
from core.errors import TraceConfigError
from core.types import ParsedJobRecord, TaskDescriptor
from ingest.field_schema import TraceFieldSchema

TaskFactory = Callable[[ParsedJobRecord], Any]

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?[0-9]+(?:\.[0-9]*)?")


class TaskDescriptorFactory:
    """Default task factory scaling run time by a per-processor rate."""

    def __init__(self, instruction_rate: int) -> None:
        if instruction_rate <= 0:
            raise TraceConfigError(
                f"Invalid instruction rate: {instruction_rate}. "
                "The per-processor rate must be greater than 0."
            )
        self._instruction_rate = instruction_rate

    @property
    def instruction_rate(self) -> int:
        return self._instruction_rate

    def __call__(self, record: ParsedJobRecord) -> TaskDescriptor:
        return TaskDescriptor(
            task_id=record.job_id,
            submit_time=record.submit_time,
            run_length_in_instructions=record.run_time * self._instruction_rate,
            processor_count=record.processor_count,
            user_id=record.user_id,
            group_id=record.group_id,
        )


def parse_job_record(
    tokens: Sequence[str],
    schema: TraceFieldSchema,
    next_job_id: int,
) -> ParsedJobRecord | None:
    """Validate one tokenized line against the schema.

    Run times below one second are clamped to one, since the trace format
    rounds sub-second jobs down to zero. A requested processor count of
    zero or "not available" falls back to the allocated count, and the
    result is clamped to at least one processor.

    Args:
        tokens: Tokens of one data line.
        schema: Column layout to read fields from.
        next_job_id: Id used when the schema synthesizes job ids.

    Returns:
        Parsed record, or ``None`` if any field is missing or non-numeric.
    """
    try:
        return _parse_fields(tokens, schema, next_job_id)
    except (ValueError, IndexError):
        return None


def _parse_fields(
    tokens: Sequence[str],
    schema: TraceFieldSchema,
    next_job_id: int,
) -> ParsedJobRecord:
    if schema.job_number_index is None:
        job_id = next_job_id
    else:
        job_id = _parse_int(tokens[schema.job_number_index])
    submit_time = _parse_truncated_int(tokens[schema.submit_time_index])
    requested_run_time = _parse_int(tokens[schema.requested_run_time_index])
    run_time = _parse_int(tokens[schema.run_time_index])
    user_id = _parse_int(tokens[schema.user_id_index])
    group_id = _parse_int(tokens[schema.group_id_index])
    if run_time <= 0:
        run_time = MIN_RUN_TIME_SECONDS
    processor_count = _parse_int(tokens[schema.requested_processor_count_index])
    if processor_count in (SWF_NOT_AVAILABLE, 0):
        processor_count = _parse_int(tokens[schema.processor_count_index])
    if processor_count <= 0:
        processor_count = MIN_PROCESSOR_COUNT
    return ParsedJobRecord(
        job_id=job_id,
        submit_time=submit_time,
        run_time=run_time,
        requested_run_time=requested_run_time,
        processor_count=processor_count,
        user_id=user_id,
        group_id=group_id,
    )


def _parse_int(token: str) -> int:
    """Parse a plain ASCII integer within the signed 32-bit range."""
    if not _INTEGER_PATTERN.fullmatch(token):
        raise ValueError(f"not an integer: {token!r}")
    return _check_range(int(token), TRACE_INT_MIN, TRACE_INT_MAX)


def _parse_truncated_int(token: str) -> int:
    """Parse an integer, dropping any fractional part (``"10.7"`` -> 10)."""
    if not _DECIMAL_PATTERN.fullmatch(token):
        raise ValueError(f"not a number: {token!r}")
    whole_part = token.split(".", 1)[0]
    return _check_range(int(whole_part), TRACE_LONG_MIN, TRACE_LONG_MAX)


def _check_range(value: int, lower: int, upper: int) -> int:
    if not lower <= value <= upper:
        raise ValueError(f"value {value} outside {lower}..{upper}")
    return value
