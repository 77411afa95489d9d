"""Workload trace ingestion engine.

This module drives container opening, line reading, tokenization, and
record validation for one trace file. Each reader performs a single read
pass; later calls return the tasks built by that pass.
"""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
import zipfile
import zlib

from core.config import TraceConfig, normalize_max_lines
from core.constants import UNLIMITED_LINES
from core.errors import (
    TraceConfigError,
    TraceIngestError,
    TraceNotFoundError,
    TraceStateError,
)
from core.logging_config import get_logger
from core.types import WorkloadReadResult
from ingest.container_opener import TraceStream, iter_trace_streams
from ingest.field_schema import TraceFieldSchema
from ingest.line_source import TraceLineSource
from ingest.record_factory import TaskDescriptorFactory, TaskFactory, parse_job_record
from ingest.tokenizer import is_comment_line, split_record

_LOGGER = get_logger(__name__)

_STREAM_ERRORS = (OSError, EOFError, zipfile.BadZipFile, zlib.error, TraceIngestError)


class ReaderState(Enum):
    """Lifecycle of a workload reader."""

    UNSTARTED = "unstarted"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class _ReadCounters:
    lines_read: int = 0
    comment_lines: int = 0
    skipped_lines: int = 0


class WorkloadFileReader:
    """Stateful reader building tasks from a workload trace file."""

    def __init__(
        self,
        trace_path: str | Path,
        instruction_rate: int,
        schema: TraceFieldSchema | None = None,
        config: TraceConfig | None = None,
        task_factory: TaskFactory | None = None,
    ) -> None:
        """Validate arguments and bind the reader to one trace file.

        Args:
            trace_path: Raw, ``.gz``, or ``.zip`` trace file.
            instruction_rate: Instructions per second of one processor.
            schema: Column layout, Standard Workload Format by default.
            config: Line cap and encoding settings.
            task_factory: Callable building one task per parsed record.

        Raises:
            TraceConfigError: If the path is empty or the rate is not positive.
            TraceNotFoundError: If the trace file does not exist.
        """
        if trace_path is None or not str(trace_path).strip():
            raise TraceConfigError(
                "Invalid trace file name: path is empty. Provide a trace file path."
            )
        if instruction_rate <= 0:
            raise TraceConfigError(
                f"Invalid instruction rate: {instruction_rate}. "
                "The per-processor rate must be greater than 0."
            )
        resolved_path = Path(trace_path).expanduser()
        if not resolved_path.is_file():
            raise TraceNotFoundError(
                f"Workload trace {resolved_path} does not exist or is not a file. "
                "Provide an existing raw, .gz, or .zip trace file."
            )
        resolved_config = config or TraceConfig()
        self._trace_path = resolved_path
        self._instruction_rate = instruction_rate
        self._schema = schema or TraceFieldSchema()
        self._max_lines = resolved_config.max_lines_to_read
        self._encoding = resolved_config.encoding
        self._task_factory = task_factory or TaskDescriptorFactory(instruction_rate)
        self._jobs: list[Any] = []
        self._state = ReaderState.UNSTARTED
        self._result: WorkloadReadResult | None = None

    @property
    def trace_path(self) -> Path:
        return self._trace_path

    @property
    def instruction_rate(self) -> int:
        return self._instruction_rate

    @property
    def schema(self) -> TraceFieldSchema:
        return self._schema

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def last_error(self) -> str | None:
        """Return the stream-level diagnostic of the read pass, if any."""
        if self._result is None:
            return None
        return self._result.error

    @property
    def max_lines_to_read(self) -> int:
        """Return the line cap, ``-1`` when every line is read."""
        return UNLIMITED_LINES if self._max_lines is None else self._max_lines

    @max_lines_to_read.setter
    def max_lines_to_read(self, max_lines: int | None) -> None:
        self._ensure_unstarted("max lines to read")
        self._max_lines = normalize_max_lines(max_lines)

    def set_field_columns(
        self,
        expected_column_count: int,
        job_number_column: int,
        submit_time_column: int,
        run_time_column: int,
        processor_count_column: int,
    ) -> TraceFieldSchema:
        """Replace the column layout using one-based column numbers.

        Args:
            expected_column_count: Token count of a data line.
            job_number_column: Job id column; negative to synthesize ids.
            submit_time_column: Submit time column.
            run_time_column: Actual run time column.
            processor_count_column: Allocated processor count column.

        Returns:
            The schema now used by this reader.

        Raises:
            TraceConfigError: If any column is out of range.
            TraceStateError: If ingestion has already started.
        """
        self._ensure_unstarted("field columns")
        self._schema = TraceFieldSchema.from_columns(
            expected_column_count,
            job_number_column,
            submit_time_column,
            run_time_column,
            processor_count_column,
            comment_prefix=self._schema.comment_prefix,
        )
        return self._schema

    def set_comment_prefix(self, comment_prefix: str) -> None:
        """Replace the prefix marking comment lines, e.g. ``";"`` or ``"#"``.

        Raises:
            TraceConfigError: If the prefix is empty.
            TraceStateError: If ingestion has already started.
        """
        self._ensure_unstarted("comment prefix")
        self._schema = self._schema.with_comment_prefix(comment_prefix)

    def generate(self) -> list[Any]:
        """Read the trace once and return the tasks in line order.

        Stream failures end the pass early without raising; the tasks built
        before the failure are returned and ``last_error`` describes it.
        A record the task factory rejects is skipped like a malformed line.
        """
        self.read()
        return self._jobs

    def read(self) -> WorkloadReadResult:
        """Run the read pass if needed and return its outcome.

        Raises:
            TraceStateError: If an earlier pass was interrupted before completing.
        """
        if self._result is None:
            if self._state is not ReaderState.UNSTARTED:
                raise TraceStateError(
                    f"Cannot read {self._trace_path}: the previous read pass was interrupted. "
                    "Create a new reader to read the trace again."
                )
            self._result = self._run_read_pass()
        return self._result

    def _run_read_pass(self) -> WorkloadReadResult:
        self._state = ReaderState.RUNNING
        counters = _ReadCounters()
        error_message: str | None = None
        _LOGGER.info(
            "trace_read_started",
            trace_path=str(self._trace_path),
            max_lines_to_read=self.max_lines_to_read,
        )
        try:
            with closing(iter_trace_streams(self._trace_path)) as trace_streams:
                for trace_stream in trace_streams:
                    if self._line_budget_exhausted(counters):
                        break
                    self._read_stream(trace_stream, counters)
        except _STREAM_ERRORS as error:
            error_message = f"Failed to read workload trace {self._trace_path}: {error}"
            _LOGGER.warning(
                "trace_read_failed",
                trace_path=str(self._trace_path),
                error=str(error),
                task_count=len(self._jobs),
            )
        finally:
            self._state = ReaderState.COMPLETED
        _LOGGER.info(
            "trace_read_completed",
            trace_path=str(self._trace_path),
            task_count=len(self._jobs),
            lines_read=counters.lines_read,
            skipped_lines=counters.skipped_lines,
        )
        return WorkloadReadResult(
            tasks=tuple(self._jobs),
            lines_read=counters.lines_read,
            comment_line_count=counters.comment_lines,
            skipped_line_count=counters.skipped_lines,
            error=error_message,
        )

    def _read_stream(self, trace_stream: TraceStream, counters: _ReadCounters) -> None:
        _LOGGER.debug("trace_stream_opened", source_uri=trace_stream.source_uri)
        remaining_lines = None
        if self._max_lines is not None:
            remaining_lines = self._max_lines - counters.lines_read
        line_source = TraceLineSource(trace_stream.stream, remaining_lines, self._encoding)
        for line in line_source:
            self._consume_line(line, counters)

    def _consume_line(self, line: str, counters: _ReadCounters) -> None:
        counters.lines_read += 1
        schema = self._schema
        if is_comment_line(line, schema.comment_prefix):
            counters.comment_lines += 1
            return
        tokens = split_record(line, schema.expected_column_count)
        record = None
        if tokens is not None:
            record = parse_job_record(tokens, schema, next_job_id=len(self._jobs) + 1)
        if record is None:
            counters.skipped_lines += 1
            return
        try:
            task = self._task_factory(record)
        except Exception as error:
            counters.skipped_lines += 1
            _LOGGER.warning(
                "task_factory_failed",
                trace_path=str(self._trace_path),
                line_number=counters.lines_read,
                job_id=record.job_id,
                error=str(error),
            )
            return
        self._jobs.append(task)

    def _line_budget_exhausted(self, counters: _ReadCounters) -> bool:
        return self._max_lines is not None and counters.lines_read >= self._max_lines

    def _ensure_unstarted(self, setting: str) -> None:
        if self._state is not ReaderState.UNSTARTED:
            raise TraceStateError(
                f"Cannot change {setting}: ingestion of {self._trace_path} already started. "
                "Configure the reader before calling generate()."
            )


def read_workload(
    trace_path: str | Path,
    instruction_rate: int,
    schema: TraceFieldSchema | None = None,
    config: TraceConfig | None = None,
) -> WorkloadReadResult:
    """Read a workload trace into task descriptors.

    Args:
        trace_path: Raw, ``.gz``, or ``.zip`` trace file.
        instruction_rate: Instructions per second of one processor.
        schema: Optional column layout.
        config: Optional line cap and encoding settings.

    Returns:
        Read outcome with tasks, skip counts, and any stream diagnostic.

    Raises:
        TraceConfigError: If arguments are invalid.
        TraceNotFoundError: If the trace file does not exist.
    """
    reader = WorkloadFileReader(trace_path, instruction_rate, schema=schema, config=config)
    return reader.read()
