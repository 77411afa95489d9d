"""Core constants used across swftrace modules.

This module centralizes trace-format and default values.
Keeping values here avoids magic literals in parsing logic.
"""

from __future__ import annotations

DEFAULT_COMMENT_PREFIX = ";"
DEFAULT_TRACE_ENCODING = "utf-8"
UNLIMITED_LINES = -1

# One-based column positions from the Standard Workload Format.
SWF_COLUMN_COUNT = 18
SWF_JOB_NUMBER_COLUMN = 1
SWF_SUBMIT_TIME_COLUMN = 2
SWF_RUN_TIME_COLUMN = 4
SWF_PROCESSOR_COUNT_COLUMN = 5
SWF_REQUESTED_PROCESSOR_COUNT_COLUMN = 8
SWF_REQUESTED_RUN_TIME_COLUMN = 9
SWF_USER_ID_COLUMN = 12
SWF_GROUP_ID_COLUMN = 13

# SWF writes -1 for fields that were not recorded.
SWF_NOT_AVAILABLE = -1

MIN_RUN_TIME_SECONDS = 1
MIN_PROCESSOR_COUNT = 1

GZIP_SUFFIX = ".gz"
ZIP_SUFFIX = ".zip"

DEFAULT_TRANSFER_SIZE_BYTES = 1500
DEFAULT_UTILIZATION_MODEL = "full"

# Numeric trace fields are signed 32-bit integers; submit times are 64-bit.
TRACE_INT_MIN = -(2**31)
TRACE_INT_MAX = 2**31 - 1
TRACE_LONG_MIN = -(2**63)
TRACE_LONG_MAX = 2**63 - 1
