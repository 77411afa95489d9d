"""Shared typed models.

This module defines immutable data models used by the container,
parsing, and reader layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.constants import DEFAULT_TRANSFER_SIZE_BYTES, DEFAULT_UTILIZATION_MODEL
from core.errors import TraceIngestError


@dataclass(frozen=True)
class ParsedJobRecord:
    """Validated field values from one trace line.

    Attributes:
        job_id: Job number read from the trace or synthesized.
        submit_time: Submission time in seconds.
        run_time: Actual run time in seconds, at least one.
        requested_run_time: User estimated run time, parsed but unused.
        processor_count: Processors required by the job, at least one.
        user_id: Submitting user identifier.
        group_id: Submitting group identifier.
    """

    job_id: int
    submit_time: int
    run_time: int
    requested_run_time: int
    processor_count: int
    user_id: int
    group_id: int


@dataclass(frozen=True)
class TaskDescriptor:
    """Simulation task built from one trace record.

    Attributes:
        task_id: Task identifier, equal to the job id.
        submit_time: Submission time in seconds.
        run_length_in_instructions: Run time multiplied by the processor rate.
        processor_count: Processors required by the task.
        user_id: Submitting user identifier.
        group_id: Submitting group identifier.
        file_size: Input transfer size in bytes.
        output_size: Output transfer size in bytes.
        utilization_model: Resource utilization profile name.
    """

    task_id: int
    submit_time: int
    run_length_in_instructions: int
    processor_count: int
    user_id: int
    group_id: int
    file_size: int = DEFAULT_TRANSFER_SIZE_BYTES
    output_size: int = DEFAULT_TRANSFER_SIZE_BYTES
    utilization_model: str = DEFAULT_UTILIZATION_MODEL


@dataclass(frozen=True)
class WorkloadReadResult:
    """Outcome of one trace read pass.

    Attributes:
        tasks: Tasks built in line order.
        lines_read: Lines handed out by all line sources.
        comment_line_count: Lines discarded as comments.
        skipped_line_count: Non-comment lines that produced no task.
        error: Stream-level diagnostic when the pass ended early.
    """

    tasks: tuple[Any, ...]
    lines_read: int
    comment_line_count: int
    skipped_line_count: int
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the pass reached the end of input."""
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the stream-level failure of the pass, if any.

        Raises:
            TraceIngestError: If the pass ended before the end of input.
        """
        if self.error is not None:
            raise TraceIngestError(self.error)
