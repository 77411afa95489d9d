"""Public SDK surface for swftrace.

This module provides a stable import path for trace readers.
It re-exports the reader, schema, and typed result models.
"""

from __future__ import annotations

from core.config import TraceConfig
from core.errors import (
    TraceConfigError,
    TraceError,
    TraceIngestError,
    TraceNotFoundError,
    TraceStateError,
)
from core.types import ParsedJobRecord, TaskDescriptor, WorkloadReadResult
from ingest.field_schema import TraceFieldSchema
from ingest.record_factory import TaskDescriptorFactory
from ingest.workload_reader import ReaderState, WorkloadFileReader, read_workload

__all__ = [
    "ParsedJobRecord",
    "ReaderState",
    "TaskDescriptor",
    "TaskDescriptorFactory",
    "TraceConfig",
    "TraceConfigError",
    "TraceError",
    "TraceFieldSchema",
    "TraceIngestError",
    "TraceNotFoundError",
    "TraceStateError",
    "WorkloadFileReader",
    "WorkloadReadResult",
    "read_workload",
]
