"""Column layout of workload trace records.

This module defines the immutable schema that maps trace columns onto
job fields. Defaults follow the Standard Workload Format column order.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

from core.constants import (
    DEFAULT_COMMENT_PREFIX,
    SWF_COLUMN_COUNT,
    SWF_GROUP_ID_COLUMN,
    SWF_JOB_NUMBER_COLUMN,
    SWF_PROCESSOR_COUNT_COLUMN,
    SWF_REQUESTED_PROCESSOR_COUNT_COLUMN,
    SWF_REQUESTED_RUN_TIME_COLUMN,
    SWF_RUN_TIME_COLUMN,
    SWF_SUBMIT_TIME_COLUMN,
    SWF_USER_ID_COLUMN,
)
from core.errors import TraceConfigError


@dataclass(frozen=True)
class TraceFieldSchema:
    """Zero-based column positions of one trace record.

    Attributes:
        expected_column_count: Token count of a data line.
        job_number_index: Job id column, ``None`` to synthesize ids.
        submit_time_index: Submit time column.
        run_time_index: Actual run time column.
        requested_run_time_index: User estimated run time column.
        processor_count_index: Allocated processor count column.
        requested_processor_count_index: Requested processor count column.
        user_id_index: User id column.
        group_id_index: Group id column.
        comment_prefix: Prefix marking comment lines.
    """

    expected_column_count: int = SWF_COLUMN_COUNT
    job_number_index: int | None = SWF_JOB_NUMBER_COLUMN - 1
    submit_time_index: int = SWF_SUBMIT_TIME_COLUMN - 1
    run_time_index: int = SWF_RUN_TIME_COLUMN - 1
    requested_run_time_index: int = SWF_REQUESTED_RUN_TIME_COLUMN - 1
    processor_count_index: int = SWF_PROCESSOR_COUNT_COLUMN - 1
    requested_processor_count_index: int = SWF_REQUESTED_PROCESSOR_COUNT_COLUMN - 1
    user_id_index: int = SWF_USER_ID_COLUMN - 1
    group_id_index: int = SWF_GROUP_ID_COLUMN - 1
    comment_prefix: str = DEFAULT_COMMENT_PREFIX

    def __post_init__(self) -> None:
        if self.expected_column_count <= 0:
            raise TraceConfigError(
                f"Invalid expected column count: {self.expected_column_count}. "
                "A trace record needs at least one column."
            )
        if not self.comment_prefix:
            raise TraceConfigError(
                "Invalid comment prefix: prefix is empty. "
                "Use a marker such as ';' or '#'."
            )
        for name, index in self.column_indices().items():
            if index is None and name == "job_number_index":
                continue
            if index is None or not 0 <= index < self.expected_column_count:
                raise TraceConfigError(
                    f"Invalid {name}: {index} is outside 0..{self.expected_column_count - 1}. "
                    "Every column must lie within the expected column count."
                )

    @classmethod
    def from_columns(
        cls,
        expected_column_count: int,
        job_number_column: int,
        submit_time_column: int,
        run_time_column: int,
        processor_count_column: int,
        comment_prefix: str = DEFAULT_COMMENT_PREFIX,
    ) -> "TraceFieldSchema":
        """Build a schema from one-based column numbers.

        Columns not named here keep their Standard Workload Format position.
        ``run_time_column`` and ``processor_count_column`` locate the actual
        run time and allocated processor count. The requested run time
        (column 9) and requested processor count (column 8) stay fixed. Code
        written against CloudSim's ``setField`` moved the requested columns
        instead, so build a full schema when those need to move.

        Args:
            expected_column_count: Token count of a data line.
            job_number_column: Job id column; negative to synthesize ids.
            submit_time_column: Submit time column.
            run_time_column: Actual run time column.
            processor_count_column: Allocated processor count column.
            comment_prefix: Prefix marking comment lines.

        Returns:
            Validated schema with zero-based indices.

        Raises:
            TraceConfigError: If any column is out of range.
        """
        if job_number_column == 0:
            raise TraceConfigError(
                "Invalid job number column: 0. "
                "Columns are numbered from 1; use a negative value to synthesize ids."
            )
        _require_positive_column("expected column count", expected_column_count)
        _require_positive_column("submit time column", submit_time_column)
        _require_positive_column("run time column", run_time_column)
        _require_positive_column("processor count column", processor_count_column)
        return cls(
            expected_column_count=expected_column_count,
            job_number_index=job_number_column - 1 if job_number_column > 0 else None,
            submit_time_index=submit_time_column - 1,
            run_time_index=run_time_column - 1,
            processor_count_index=processor_count_column - 1,
            comment_prefix=comment_prefix,
        )

    @property
    def synthesizes_job_ids(self) -> bool:
        """Return whether job ids are generated instead of read."""
        return self.job_number_index is None

    def with_comment_prefix(self, comment_prefix: str) -> "TraceFieldSchema":
        """Return a copy using a different comment prefix."""
        return replace(self, comment_prefix=comment_prefix)

    def column_indices(self) -> dict[str, int | None]:
        """Return every column index keyed by field name."""
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if field.name.endswith("_index")
        }


def _require_positive_column(label: str, value: int) -> None:
    if value <= 0:
        raise TraceConfigError(
            f"Invalid {label}: {value}. Columns are numbered from 1."
        )
