"""Trace container readers.

This module opens raw, gzip, and zip trace files as binary streams.
Zip archives yield one stream per entry, each closed before the next opens.
"""

from __future__ import annotations

from dataclasses import dataclass
import gzip
from pathlib import Path
from typing import BinaryIO, Iterator
import zipfile

from core.constants import GZIP_SUFFIX, ZIP_SUFFIX
from core.errors import TraceIngestError


@dataclass(frozen=True)
class TraceStream:
    """Open binary stream over decompressed trace content.

    Attributes:
        source_uri: Trace path, or ``path!entry`` for archive entries.
        stream: Binary stream positioned at the start of content.
    """

    source_uri: str
    stream: BinaryIO


def iter_trace_streams(trace_path: Path) -> Iterator[TraceStream]:
    """Yield decompressed streams for a trace file.

    The container format is selected from the file name suffix. Each
    yielded stream stays open only until the iterator is advanced or closed.

    Args:
        trace_path: Raw, ``.gz``, or ``.zip`` trace file.

    Yields:
        One stream for raw and gzip files, one per entry for zip archives.

    Raises:
        OSError: If the file or an archive entry cannot be opened.
        TraceIngestError: If an archive entry is encrypted or unsupported.
    """
    if trace_path.name.endswith(GZIP_SUFFIX):
        yield from _iter_gzip_stream(trace_path)
    elif trace_path.name.endswith(ZIP_SUFFIX):
        yield from _iter_zip_entry_streams(trace_path)
    else:
        yield from _iter_plain_stream(trace_path)


def _iter_plain_stream(trace_path: Path) -> Iterator[TraceStream]:
    with trace_path.open("rb") as stream:
        yield TraceStream(source_uri=str(trace_path), stream=stream)


def _iter_gzip_stream(trace_path: Path) -> Iterator[TraceStream]:
    with gzip.open(trace_path, "rb") as stream:
        yield TraceStream(source_uri=str(trace_path), stream=stream)


def _iter_zip_entry_streams(trace_path: Path) -> Iterator[TraceStream]:
    with zipfile.ZipFile(trace_path) as archive:
        for entry in archive.infolist():
            if entry.is_dir():
                continue
            with _open_zip_entry(archive, entry) as stream:
                yield TraceStream(
                    source_uri=f"{trace_path}!{entry.filename}",
                    stream=stream,
                )


def _open_zip_entry(archive: zipfile.ZipFile, entry: zipfile.ZipInfo) -> BinaryIO:
    """Open one archive entry for reading.

    Raises:
        TraceIngestError: If the entry is encrypted or uses an unsupported
            compression method.
    """
    try:
        return archive.open(entry)
    except (RuntimeError, NotImplementedError) as error:
        raise TraceIngestError(
            f"Failed to open archive entry {entry.filename}: {error}. "
            "Store trace entries unencrypted with stored or deflate compression."
        ) from error
