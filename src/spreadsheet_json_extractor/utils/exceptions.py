"""Centralized exception classes for the spreadsheet JSON extractor.

This module provides a hierarchy of custom exceptions with error codes
and structured error details for consistent error handling throughout
the application.

Exception Hierarchy:
    ConverterError (base)
    ├── InputError
    │   ├── MissingInputError
    │   ├── FileTooLargeError
    │   ├── UnsupportedFormatError
    │   └── EncodingError
    ├── WorkbookParseError
    └── NormalizationError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that travels with
    failed conversion results and can be used for programmatic handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Input/upload errors
    - E2xxx: Workbook parsing errors
    - E3xxx: Normalization errors
    - E9xxx: Internal/unexpected errors
    """

    # Input errors (E1xxx)
    MISSING_INPUT = "E1001"
    FILE_TOO_LARGE = "E1002"
    UNSUPPORTED_FORMAT = "E1003"
    ENCODING_ERROR = "E1004"

    # Parse errors (E2xxx)
    PARSE_FAILED = "E2001"

    # Normalization errors (E3xxx)
    NORMALIZATION_FAILED = "E3001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    UNEXPECTED_ERROR = "E9999"


class ConverterError(Exception):
    """Base exception for all spreadsheet conversion errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Input Errors (E1xxx)
# =============================================================================


class InputError(ConverterError):
    """Base class for problems with the uploaded file itself."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.MISSING_INPUT,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file name information.

        Args:
            message: Error message.
            error_code: Error code.
            file_name: Name of the uploaded file, when known.
            details: Additional details.
        """
        details = details or {}
        if file_name:
            details["file_name"] = file_name
        super().__init__(message, error_code, details)
        self.file_name = file_name


class MissingInputError(InputError):
    """Raised when a submission carries no file."""

    def __init__(self, message: str = "No file provided") -> None:
        super().__init__(message=message, error_code=ErrorCode.MISSING_INPUT)


class FileTooLargeError(InputError):
    """Raised when a file exceeds the maximum allowed size."""

    def __init__(
        self,
        file_size: int,
        max_size: int,
        file_name: str | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            file_name: Optional file name.
        """
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            file_name=file_name,
            details={"file_size_bytes": file_size, "max_size_bytes": max_size},
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(InputError):
    """Raised when neither the declared type nor the extension is accepted."""

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        file_name: str | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            content_type: MIME type declared by the client.
            file_name: Optional file name.
        """
        details: dict[str, Any] = {}
        if content_type:
            details["content_type"] = content_type
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            file_name=file_name,
            details=details,
        )
        self.content_type = content_type


class EncodingError(InputError):
    """Raised when CSV bytes cannot be decoded to text."""

    def __init__(
        self,
        message: str,
        encoding: str | None = None,
        file_name: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if encoding:
            details["encoding"] = encoding
        super().__init__(
            message=message,
            error_code=ErrorCode.ENCODING_ERROR,
            file_name=file_name,
            details=details,
        )
        self.encoding = encoding


# =============================================================================
# Parse Errors (E2xxx)
# =============================================================================


class WorkbookParseError(ConverterError):
    """Raised when the underlying parser cannot read the workbook bytes."""

    def __init__(
        self,
        message: str,
        workbook_kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the kind of workbook being read.

        Args:
            message: Error message, usually the parser's own.
            workbook_kind: Which reader failed (xlsx, xls or csv).
            details: Additional details.
        """
        details = details or {}
        if workbook_kind:
            details["workbook_kind"] = workbook_kind
        super().__init__(message, ErrorCode.PARSE_FAILED, details)
        self.workbook_kind = workbook_kind


# =============================================================================
# Normalization Errors (E3xxx)
# =============================================================================


class NormalizationError(ConverterError):
    """Raised when parsed cells cannot be turned into serializable records."""

    def __init__(
        self,
        message: str,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if sheet_name:
            details["sheet_name"] = sheet_name
        super().__init__(message, ErrorCode.NORMALIZATION_FAILED, details)
        self.sheet_name = sheet_name
