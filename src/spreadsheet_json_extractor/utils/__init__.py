"""Utilities package for the spreadsheet JSON extractor.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_json_extractor.utils.exceptions import (
    ConverterError,
    EncodingError,
    ErrorCode,
    FileTooLargeError,
    InputError,
    MissingInputError,
    NormalizationError,
    UnsupportedFormatError,
    WorkbookParseError,
)
from spreadsheet_json_extractor.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ConverterError",
    "EncodingError",
    "ErrorCode",
    "FileTooLargeError",
    "InputError",
    "MissingInputError",
    "NormalizationError",
    "UnsupportedFormatError",
    "WorkbookParseError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
