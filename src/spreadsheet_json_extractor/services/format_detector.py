"""Spreadsheet format acceptance and workbook kind detection.

This module decides whether an upload is an accepted spreadsheet, using the
client-declared MIME type with the file extension as a fallback, and picks
the reader for accepted uploads from the content signature.
"""

from pathlib import Path

from spreadsheet_json_extractor.raw_workbook import WorkbookKind
from spreadsheet_json_extractor.utils.exceptions import UnsupportedFormatError
from spreadsheet_json_extractor.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "ACCEPTED_MIME_TYPES",
    "INVALID_FILE_TYPE_MESSAGE",
    "FormatDetector",
    "UnsupportedFormatError",
]

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MIME = "application/vnd.ms-excel"
CSV_MIME = "text/csv"

# Declared MIME types accepted without looking at the file name
ACCEPTED_MIME_TYPES: dict[str, WorkbookKind] = {
    XLSX_MIME: WorkbookKind.XLSX,
    XLS_MIME: WorkbookKind.XLS,
    CSV_MIME: WorkbookKind.CSV,
}

# File extensions accepted when the declared type is missing or unrecognized
ACCEPTED_EXTENSIONS: dict[str, WorkbookKind] = {
    ".xlsx": WorkbookKind.XLSX,
    ".xls": WorkbookKind.XLS,
    ".csv": WorkbookKind.CSV,
}

# Content signatures of the binary containers
ZIP_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

INVALID_FILE_TYPE_MESSAGE = (
    "Invalid file type. Please upload an Excel file (.xlsx, .xls) or CSV file."
)


class FormatDetector:
    """Validates uploads and classifies them into a workbook kind.

    Acceptance follows the declared MIME type first and the file-name
    extension second, so a recognized extension is accepted even when the
    browser declares an unexpected type.
    """

    def is_accepted(self, file_name: str | None, content_type: str | None) -> bool:
        """Check whether an upload passes the accepted-format rule.

        Args:
            file_name: Original file name, if any.
            content_type: MIME type declared by the client, if any.

        Returns:
            True if either the declared type or the extension is accepted.
        """
        if self._kind_from_mime(content_type) is not None:
            return True
        return self._kind_from_extension(file_name) is not None

    def validate(self, file_name: str | None, content_type: str | None) -> None:
        """Raise if the upload is not an accepted spreadsheet.

        Raises:
            UnsupportedFormatError: If both the declared type and the
                extension fail the check.
        """
        if not self.is_accepted(file_name, content_type):
            raise UnsupportedFormatError(
                INVALID_FILE_TYPE_MESSAGE,
                content_type=content_type,
                file_name=file_name,
            )

    def detect_kind(
        self,
        content: bytes,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> WorkbookKind:
        """Pick the reader for an accepted upload.

        Priority:
        1. Content signature (ZIP container or OLE2 compound document)
        2. File extension
        3. Declared MIME type
        4. CSV text

        Args:
            content: File content as bytes.
            file_name: Original file name.
            content_type: Declared MIME type.

        Returns:
            The workbook kind to read the content as.
        """
        from_signature = self._kind_from_signature(content)
        from_extension = self._kind_from_extension(file_name)

        if from_signature is not None:
            if from_extension is not None and from_extension != from_signature:
                logger.warning(
                    "File extension does not match content signature",
                    file_name=file_name,
                    detected_kind=from_signature.value,
                )
            return from_signature

        if from_extension is not None:
            return from_extension

        from_mime = self._kind_from_mime(content_type)
        if from_mime is not None:
            return from_mime

        return WorkbookKind.CSV

    @staticmethod
    def _kind_from_signature(content: bytes) -> WorkbookKind | None:
        if content.startswith(ZIP_SIGNATURE):
            return WorkbookKind.XLSX
        if content.startswith(OLE2_SIGNATURE):
            return WorkbookKind.XLS
        return None

    @staticmethod
    def _kind_from_extension(file_name: str | None) -> WorkbookKind | None:
        if not file_name:
            return None
        return ACCEPTED_EXTENSIONS.get(Path(file_name).suffix.lower())

    @staticmethod
    def _kind_from_mime(content_type: str | None) -> WorkbookKind | None:
        if not content_type:
            return None
        return ACCEPTED_MIME_TYPES.get(FormatDetector._normalize_mime_type(content_type))

    @staticmethod
    def _normalize_mime_type(mime_type: str) -> str:
        """Normalize a declared MIME type to canonical form.

        Strips parameters such as ``; charset=utf-8`` and lower-cases.
        """
        return mime_type.split(";", 1)[0].strip().lower()

    @staticmethod
    def get_accepted_extensions() -> list[str]:
        """Get list of accepted file extensions (with dots)."""
        return sorted(ACCEPTED_EXTENSIONS.keys())
