"""Unit tests for the workload trace reader."""

from __future__ import annotations

import gzip
from pathlib import Path
import zipfile

import pytest

from core.config import TraceConfig
from core.errors import TraceConfigError, TraceIngestError, TraceNotFoundError, TraceStateError
from core.types import ParsedJobRecord
from ingest.field_schema import TraceFieldSchema
from ingest.workload_reader import ReaderState, WorkloadFileReader, read_workload


def _swf_line(job_id: int, submit: int = 0, run: int = 40, procs: int = 2) -> str:
    columns = ["-1"] * 18
    columns[0] = str(job_id)
    columns[1] = str(submit)
    columns[3] = str(run)
    columns[4] = str(procs)
    columns[7] = str(procs)
    columns[8] = str(run)
    columns[11] = "7"
    columns[12] = "3"
    return " ".join(columns)


def _write_trace(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_reader_rejects_empty_path() -> None:
    """An empty trace file name should fail at construction."""
    with pytest.raises(TraceConfigError):
        WorkloadFileReader("", 1000)


def test_reader_rejects_non_positive_rate(tmp_path: Path) -> None:
    """A non-positive instruction rate should fail at construction."""
    trace_path = _write_trace(tmp_path / "trace.swf", [_swf_line(1)])

    with pytest.raises(TraceConfigError):
        WorkloadFileReader(trace_path, 0)


def test_reader_raises_not_found_for_missing_file(tmp_path: Path) -> None:
    """A missing trace should fail before any read."""
    with pytest.raises(TraceNotFoundError):
        WorkloadFileReader(tmp_path / "missing.swf", 1000)


def test_generate_builds_task_from_swf_line(tmp_path: Path) -> None:
    """A valid SWF line should become one task with scaled length."""
    line = "101  1000  -  40  2  -  -  2  35  -  -  7  3  -  -  -  -  -"
    trace_path = _write_trace(tmp_path / "trace.swf", [line])

    tasks = WorkloadFileReader(trace_path, 1000).generate()

    assert len(tasks) == 1
    assert tasks[0].task_id == 101
    assert tasks[0].submit_time == 1000
    assert tasks[0].processor_count == 2
    assert tasks[0].run_length_in_instructions == 40_000
    assert (tasks[0].user_id, tasks[0].group_id) == (7, 3)


def test_generate_keeps_line_order_and_skips_noise(tmp_path: Path) -> None:
    """Comments and malformed lines should be dropped without errors."""
    lines = [
        "; header comment",
        _swf_line(3),
        "not a record",
        _swf_line(1).replace(" 7 ", " user ", 1),
        _swf_line(2),
    ]
    trace_path = _write_trace(tmp_path / "trace.swf", lines)
    reader = WorkloadFileReader(trace_path, 10)

    result = reader.read()

    assert [task.task_id for task in result.tasks] == [3, 2]
    assert result.comment_line_count == 1
    assert result.skipped_line_count == 2
    assert result.succeeded


def test_generate_is_idempotent(tmp_path: Path) -> None:
    """A second call should return the first list without re-reading."""
    trace_path = _write_trace(tmp_path / "trace.swf", [_swf_line(1), _swf_line(2)])
    reader = WorkloadFileReader(trace_path, 10)
    first = reader.generate()
    trace_path.unlink()

    second = reader.generate()

    assert second is first
    assert len(second) == 2
    assert reader.state is ReaderState.COMPLETED


def test_generate_synthesizes_sequential_ids(tmp_path: Path) -> None:
    """Readers configured without a job column should number jobs from one."""
    trace_path = _write_trace(tmp_path / "trace.swf", [_swf_line(50), _swf_line(60)])
    reader = WorkloadFileReader(trace_path, 10)
    reader.set_field_columns(18, -1, 2, 4, 5)

    tasks = reader.generate()

    assert [task.task_id for task in tasks] == [1, 2]


def test_max_lines_to_read_caps_considered_lines(tmp_path: Path) -> None:
    """Only the first N lines should be considered for conversion."""
    lines = [_swf_line(job_id) for job_id in range(1, 11)]
    trace_path = _write_trace(tmp_path / "trace.swf", lines)
    reader = WorkloadFileReader(trace_path, 10)
    reader.max_lines_to_read = 4

    result = reader.read()

    assert len(result.tasks) == 4
    assert result.lines_read == 4


def test_max_lines_to_read_unlimited_marker_reads_everything(tmp_path: Path) -> None:
    """The -1 marker should read the entire trace."""
    lines = [_swf_line(job_id) for job_id in range(1, 11)]
    trace_path = _write_trace(tmp_path / "trace.swf", lines)
    reader = WorkloadFileReader(trace_path, 10, config=TraceConfig(max_lines_to_read=3))
    reader.max_lines_to_read = -1

    tasks = reader.generate()

    assert reader.max_lines_to_read == -1
    assert len(tasks) == 10


def test_max_lines_cap_spans_zip_entries(tmp_path: Path) -> None:
    """The line cap should apply to the whole pass across archive entries."""
    trace_path = tmp_path / "traces.zip"
    with zipfile.ZipFile(trace_path, "w") as archive:
        archive.writestr("a.swf", "\n".join(_swf_line(i) for i in range(1, 4)))
        archive.writestr("b.swf", "\n".join(_swf_line(i) for i in range(4, 7)))
        archive.writestr("c.swf", "\n".join(_swf_line(i) for i in range(7, 10)))
    reader = WorkloadFileReader(trace_path, 10, config=TraceConfig(max_lines_to_read=5))

    tasks = reader.generate()

    assert [task.task_id for task in tasks] == [1, 2, 3, 4, 5]


def test_zip_entries_are_concatenated_in_entry_order(tmp_path: Path) -> None:
    """Two entries of five jobs and one comment should give ten tasks."""
    trace_path = tmp_path / "traces.zip"
    with zipfile.ZipFile(trace_path, "w") as archive:
        for entry_index, entry_name in enumerate(("first.swf", "second.swf")):
            job_ids = range(entry_index * 5 + 1, entry_index * 5 + 6)
            body = ["; entry comment"] + [_swf_line(job_id) for job_id in job_ids]
            archive.writestr(entry_name, "\n".join(body) + "\n")

    result = WorkloadFileReader(trace_path, 10).read()

    assert [task.task_id for task in result.tasks] == list(range(1, 11))
    assert result.comment_line_count == 2


def test_gzip_trace_is_decompressed(tmp_path: Path) -> None:
    """Gzip traces should be read through the same pipeline."""
    trace_path = tmp_path / "trace.swf.gz"
    with gzip.open(trace_path, "wt", encoding="utf-8") as handle:
        handle.write(_swf_line(1) + "\n" + _swf_line(2) + "\n")

    tasks = WorkloadFileReader(trace_path, 10).generate()

    assert [task.task_id for task in tasks] == [1, 2]


def test_truncated_gzip_keeps_accumulated_tasks(tmp_path: Path) -> None:
    """A stream failure should end the pass without raising."""
    body = "".join(_swf_line(job_id) + "\n" for job_id in range(1, 2001))
    compressed = gzip.compress(body.encode("utf-8"))
    trace_path = tmp_path / "trace.swf.gz"
    trace_path.write_bytes(compressed[: len(compressed) // 2])
    reader = WorkloadFileReader(trace_path, 10)

    tasks = reader.generate()

    assert 0 < len(tasks) < 2000
    assert reader.last_error is not None
    with pytest.raises(TraceIngestError):
        reader.read().raise_for_error()


def test_corrupt_zip_returns_empty_result_with_diagnostic(tmp_path: Path) -> None:
    """An unreadable archive should yield no tasks and a diagnostic."""
    trace_path = tmp_path / "broken.zip"
    trace_path.write_bytes(b"definitely not a zip archive")

    result = read_workload(trace_path, 10)

    assert result.tasks == ()
    assert not result.succeeded


def test_configuration_after_generate_is_rejected(tmp_path: Path) -> None:
    """The schema is frozen once ingestion has started."""
    trace_path = _write_trace(tmp_path / "trace.swf", [_swf_line(1)])
    reader = WorkloadFileReader(trace_path, 10)
    reader.generate()

    with pytest.raises(TraceStateError):
        reader.set_field_columns(18, 1, 2, 4, 5)
    with pytest.raises(TraceStateError):
        reader.set_comment_prefix("#")
    with pytest.raises(TraceStateError):
        reader.max_lines_to_read = 1


def test_custom_comment_prefix(tmp_path: Path) -> None:
    """A configured prefix should replace the default one."""
    lines = ["# 1 2 3", "; " + _swf_line(9), _swf_line(1)]
    trace_path = _write_trace(tmp_path / "trace.swf", lines)
    schema = TraceFieldSchema().with_comment_prefix("#")

    result = WorkloadFileReader(trace_path, 10, schema=schema).read()

    assert [task.task_id for task in result.tasks] == [1]
    assert result.comment_line_count == 1


def test_custom_task_factory_is_called_once_per_valid_line(tmp_path: Path) -> None:
    """Each valid line should reach the factory exactly once, in order."""
    trace_path = _write_trace(
        tmp_path / "trace.swf", [_swf_line(4), "; note", _swf_line(8)]
    )
    seen: list[ParsedJobRecord] = []

    def record_factory(record: ParsedJobRecord) -> int:
        seen.append(record)
        return record.job_id

    tasks = WorkloadFileReader(trace_path, 10, task_factory=record_factory).generate()

    assert tasks == [4, 8]
    assert [record.job_id for record in seen] == [4, 8]


def test_failing_task_factory_skips_only_that_line(tmp_path: Path) -> None:
    """A record the factory rejects should be dropped like a malformed line."""
    trace_path = _write_trace(tmp_path / "trace.swf", [_swf_line(1), _swf_line(2)])

    def picky_factory(record: ParsedJobRecord) -> int:
        if record.job_id == 2:
            raise ValueError(f"cannot build job {record.job_id}")
        return record.job_id

    reader = WorkloadFileReader(trace_path, 10, task_factory=picky_factory)

    first = reader.generate()
    second = reader.generate()

    assert first == [1]
    assert second is first
    assert reader.read().skipped_line_count == 1
    assert reader.last_error is None


def _patch_central_directory(
    archive_path: Path, entry_index: int, offset: int, value: bytes
) -> None:
    """Overwrite bytes of one central directory header of a zip archive."""
    payload = bytearray(archive_path.read_bytes())
    header_start = -1
    for _ in range(entry_index + 1):
        header_start = payload.index(b"PK\x01\x02", header_start + 1)
    position = header_start + offset
    payload[position : position + len(value)] = value
    archive_path.write_bytes(bytes(payload))


@pytest.mark.parametrize(
    ("offset", "value"),
    [
        (8, (1).to_bytes(2, "little")),
        (10, (9).to_bytes(2, "little")),
    ],
    ids=["encrypted", "unsupported-compression"],
)
def test_unreadable_zip_entry_keeps_earlier_entries(
    tmp_path: Path, offset: int, value: bytes
) -> None:
    """An entry that cannot be opened should end the pass with a diagnostic."""
    trace_path = tmp_path / "traces.zip"
    with zipfile.ZipFile(trace_path, "w") as archive:
        archive.writestr("a.swf", _swf_line(1) + "\n")
        archive.writestr("b.swf", _swf_line(2) + "\n")
    _patch_central_directory(trace_path, entry_index=1, offset=offset, value=value)
    reader = WorkloadFileReader(trace_path, 10)

    tasks = reader.generate()

    assert [task.task_id for task in tasks] == [1]
    assert reader.read().error is not None
    assert reader.generate() is tasks
