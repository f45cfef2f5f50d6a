"""Utilities package for the social report normalizer.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from social_report.utils.exceptions import (
    ErrorCode,
    FileError,
    FileTooLargeError,
    HTTPStatusMixin,
    PublishError,
    SRError,
    UnsupportedFormatError,
    ValidationError,
    WorkbookParseError,
)
from social_report.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ErrorCode",
    "FileError",
    "FileTooLargeError",
    "HTTPStatusMixin",
    "PublishError",
    "SRError",
    "UnsupportedFormatError",
    "ValidationError",
    "WorkbookParseError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
