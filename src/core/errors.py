"""swftrace exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each ingestion stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class TraceError(Exception):
    """Base exception for all swftrace failures."""


class TraceConfigError(TraceError):
    """Raised for invalid reader arguments, schemas, or runtime configuration."""


class TraceNotFoundError(TraceError):
    """Raised when a workload trace file does not exist."""


class TraceIngestError(TraceError):
    """Raised for stream-level failures while reading a trace."""


class TraceStateError(TraceError):
    """Raised when a reader is reconfigured after ingestion has started."""
