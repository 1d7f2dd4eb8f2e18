"""Pydantic models for conversion results and API responses."""

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    computed_field,
    model_serializer,
    model_validator,
)

from spreadsheet_json_extractor.utils.exceptions import ErrorCode

CellValue = str | int | float | bool | None
"""A normalized cell value. Nested structures may also appear after deep copy."""

RowRecord = dict[str, Any]
"""One data row keyed by column header."""


class CellKind(str, Enum):
    """Closed classification of normalized cell values."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRUCTURE = "structure"
    ABSENT = "absent"


class SheetTable(BaseModel):
    """One parsed worksheet in normalized, serializable form.

    ``rowCount`` and ``columnCount`` are computed from ``rows`` and
    ``headers`` and cannot be set independently.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sheet_name: str = Field(
        ..., alias="sheetName", description="Worksheet name, in workbook order"
    )
    rows: list[RowRecord] = Field(
        default_factory=list, description="Row records in source order"
    )
    headers: list[str] = Field(
        default_factory=list, description="Column headers, keys of the first row"
    )

    @computed_field(alias="rowCount")  # type: ignore[prop-decorator]
    @property
    def row_count(self) -> int:
        """Number of row records."""
        return len(self.rows)

    @computed_field(alias="columnCount")  # type: ignore[prop-decorator]
    @property
    def column_count(self) -> int:
        """Number of headers."""
        return len(self.headers)


class ConversionResult(BaseModel):
    """Top-level outcome of converting one uploaded file.

    Exactly one of two shapes is valid:
    - ``success=True`` with the parsed sheets and no error
    - ``success=False`` with a non-empty error and no sheets

    ``error_code`` classifies failures for programmatic callers and is never
    part of the serialized JSON.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    success: bool = Field(..., description="Whether the conversion succeeded")
    sheets: list[SheetTable] = Field(
        default_factory=list, description="Parsed sheets (empty on failure)"
    )
    file_name: str = Field(
        default="", alias="fileName", description="Original uploaded file name"
    )
    error: str | None = Field(
        default=None, description="Error message, only present on failure"
    )
    error_code: ErrorCode | None = Field(default=None, exclude=True)

    @computed_field(alias="totalSheets")  # type: ignore[prop-decorator]
    @property
    def total_sheets(self) -> int:
        """Number of sheets in the result."""
        return len(self.sheets)

    @property
    def total_rows(self) -> int:
        """Row records across every sheet."""
        return sum(sheet.row_count for sheet in self.sheets)

    @model_validator(mode="after")
    def validate_outcome(self) -> "ConversionResult":
        """Enforce that success and failure shapes never mix."""
        if self.success:
            if self.error:
                raise ValueError("A successful result cannot carry an error")
        else:
            if not self.error:
                raise ValueError("A failed result must carry a non-empty error")
            if self.sheets:
                raise ValueError("A failed result cannot carry sheet data")
        return self

    @model_serializer(mode="wrap")
    def _omit_missing_error(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if data.get("error") is None:
            data.pop("error", None)
        return data

    @classmethod
    def succeeded(
        cls, sheets: list[SheetTable], file_name: str = ""
    ) -> "ConversionResult":
        """Build a successful result."""
        return cls(success=True, sheets=sheets, file_name=file_name)

    @classmethod
    def failed(
        cls,
        error: str,
        file_name: str = "",
        error_code: ErrorCode | None = None,
    ) -> "ConversionResult":
        """Build a failed result with no sheet data."""
        return cls(
            success=False,
            sheets=[],
            file_name=file_name,
            error=error,
            error_code=error_code,
        )

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase, JSON-compatible representation."""
        return self.model_dump(mode="json", by_alias=True)


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class ErrorDetail(BaseModel):
    """Error detail model for API error responses.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E1001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )
