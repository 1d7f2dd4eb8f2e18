"""JSON export of conversion results.

This module formats a ConversionResult as the downloadable JSON document,
derives the download file name and checks the document against the
result's JSON schema.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from jsonschema import Draft7Validator

from spreadsheet_json_extractor.models import ConversionResult
from spreadsheet_json_extractor.utils.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD_SUFFIX = "_extracted.json"
DEFAULT_BASE_NAME = "data"
JSON_MEDIA_TYPE = "application/json"

_LAST_EXTENSION_RE = re.compile(r"\.[^/.]+$")

_CELL_SCHEMA: dict[str, Any] = {
    "type": ["string", "number", "boolean", "null", "object", "array"],
}

SHEET_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["sheetName", "rows", "headers", "rowCount", "columnCount"],
    "properties": {
        "sheetName": {"type": "string"},
        "rows": {
            "type": "array",
            "items": {"type": "object", "additionalProperties": _CELL_SCHEMA},
        },
        "headers": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
        "rowCount": {"type": "integer", "minimum": 0},
        "columnCount": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

RESULT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ConversionResult",
    "type": "object",
    "required": ["success", "sheets", "totalSheets", "fileName"],
    "properties": {
        "success": {"type": "boolean"},
        "sheets": {"type": "array", "items": SHEET_SCHEMA},
        "totalSheets": {"type": "integer", "minimum": 0},
        "fileName": {"type": "string"},
        "error": {"type": "string", "minLength": 1},
    },
    "additionalProperties": False,
}


def to_json_text(document: dict[str, Any]) -> str:
    """Format a serialized result as JSON text with 2-space indentation."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def download_file_name(file_name: str) -> str:
    """Derive the download name from the uploaded file name.

    Only the last extension is replaced: ``archive.tar.xlsx`` becomes
    ``archive.tar_extracted.json``.
    """
    base = _LAST_EXTENSION_RE.sub("", file_name) or DEFAULT_BASE_NAME
    return f"{base}{DOWNLOAD_SUFFIX}"


def content_disposition(file_name: str) -> str:
    """Build an attachment Content-Disposition header value.

    Non-ASCII names get an ASCII fallback plus an RFC 5987 ``filename*``.
    """
    ascii_name = file_name.encode("ascii", "replace").decode("ascii").replace('"', "_")
    if ascii_name == file_name:
        return f'attachment; filename="{file_name}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


@dataclass
class JsonExport:
    """A formatted result ready to be offered for download."""

    text: str
    """The JSON document."""

    file_name: str
    """Suggested download file name."""

    errors: list[str] = field(default_factory=list)
    """Schema violations found in the document."""

    @property
    def content(self) -> bytes:
        """The document encoded as UTF-8."""
        return self.text.encode("utf-8")

    @property
    def data_uri(self) -> str:
        """The document as a ``data:`` URI for download links."""
        return f"data:{JSON_MEDIA_TYPE};charset=utf-8,{quote(self.text)}"


class JsonExporter:
    """Produces downloadable JSON documents from conversion results."""

    def __init__(self) -> None:
        self._validator = Draft7Validator(RESULT_SCHEMA)

    def validate(self, document: dict[str, Any]) -> list[str]:
        """Check a serialized result against the result schema.

        Args:
            document: The camelCase result dictionary.

        Returns:
            Error messages prefixed with the offending path, empty if valid.
        """
        errors: list[str] = []
        for error in self._validator.iter_errors(document):
            path = (
                ".".join(str(p) for p in error.absolute_path)
                if error.absolute_path
                else "root"
            )
            errors.append(f"{path}: {error.message}")
        return errors

    def export(self, result: ConversionResult) -> JsonExport:
        """Format a result for download.

        Args:
            result: The conversion result.

        Returns:
            JsonExport with the document text, file name and any schema errors.
        """
        document = result.to_json_dict()
        errors = self.validate(document)
        if errors:
            logger.warning(
                f"Export validation failed: {len(errors)} errors",
                file_name=result.file_name,
            )

        return JsonExport(
            text=to_json_text(document),
            file_name=download_file_name(result.file_name),
            errors=errors,
        )
