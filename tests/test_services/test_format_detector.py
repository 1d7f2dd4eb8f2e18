"""Tests for the spreadsheet format detection service."""

import pytest

from spreadsheet_json_extractor.raw_workbook import WorkbookKind
from spreadsheet_json_extractor.services.format_detector import (
    ACCEPTED_EXTENSIONS,
    ACCEPTED_MIME_TYPES,
    CSV_MIME,
    INVALID_FILE_TYPE_MESSAGE,
    OLE2_SIGNATURE,
    XLS_MIME,
    XLSX_MIME,
    ZIP_SIGNATURE,
    FormatDetector,
    UnsupportedFormatError,
)
from spreadsheet_json_extractor.utils.exceptions import ErrorCode


@pytest.fixture
def detector() -> FormatDetector:
    return FormatDetector()


class TestAcceptance:
    """Tests for the accepted-format rule."""

    @pytest.mark.parametrize("mime", [XLSX_MIME, XLS_MIME, CSV_MIME])
    def test_accepted_mime_without_extension(
        self, detector: FormatDetector, mime: str
    ) -> None:
        """A recognized declared type is enough on its own."""
        assert detector.is_accepted("upload", mime) is True

    @pytest.mark.parametrize("name", ["book.xlsx", "OLD.XLS", "data.Csv"])
    def test_accepted_extension_case_insensitive(
        self, detector: FormatDetector, name: str
    ) -> None:
        """Extensions are matched case-insensitively."""
        assert detector.is_accepted(name, None) is True

    def test_extension_with_mismatched_mime_accepted(
        self, detector: FormatDetector
    ) -> None:
        """A recognized extension wins over an unexpected declared type."""
        assert detector.is_accepted("book.xlsx", "application/octet-stream") is True

    def test_mime_with_parameters(self, detector: FormatDetector) -> None:
        """Declared type parameters are ignored."""
        assert detector.is_accepted("upload", "text/csv; charset=utf-8") is True
        assert detector.is_accepted("upload", "TEXT/CSV") is True

    def test_rejects_text_file(self, detector: FormatDetector) -> None:
        """report.txt with text/plain is rejected."""
        assert detector.is_accepted("report.txt", "text/plain") is False

    def test_validate_raises_unsupported_format(self, detector: FormatDetector) -> None:
        """validate raises with the user-facing message."""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            detector.validate("report.txt", "text/plain")

        assert exc_info.value.message == INVALID_FILE_TYPE_MESSAGE
        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_FORMAT
        assert exc_info.value.content_type == "text/plain"

    def test_validate_passes_accepted_upload(self, detector: FormatDetector) -> None:
        """validate returns quietly for accepted uploads."""
        detector.validate("book.xlsx", XLSX_MIME)

    def test_no_name_and_no_type_rejected(self, detector: FormatDetector) -> None:
        """Nothing to go on means rejection."""
        assert detector.is_accepted(None, None) is False


class TestDetectKind:
    """Tests for reader selection."""

    def test_zip_signature_is_xlsx(self, detector: FormatDetector) -> None:
        """ZIP containers are read as xlsx regardless of the name."""
        content = ZIP_SIGNATURE + b"rest"
        assert detector.detect_kind(content, "data.csv", CSV_MIME) == WorkbookKind.XLSX

    def test_ole2_signature_is_xls(self, detector: FormatDetector) -> None:
        """OLE2 compound documents are read as xls."""
        content = OLE2_SIGNATURE + b"rest"
        assert detector.detect_kind(content, "book.xlsx") == WorkbookKind.XLS

    def test_extension_used_without_signature(self, detector: FormatDetector) -> None:
        """Plain bytes fall back to the extension."""
        assert detector.detect_kind(b"a,b\n1,2\n", "data.csv") == WorkbookKind.CSV

    def test_mime_used_without_extension(self, detector: FormatDetector) -> None:
        """The declared type is used when the name has no known extension."""
        assert detector.detect_kind(b"junk", "upload", XLS_MIME) == WorkbookKind.XLS

    def test_real_xls_detected_by_signature(
        self, detector: FormatDetector, legacy_xls: bytes
    ) -> None:
        """A binary workbook is read as .xls whatever its name says."""
        assert detector.detect_kind(legacy_xls, "legacy.csv") == WorkbookKind.XLS

    def test_defaults_to_csv(self, detector: FormatDetector) -> None:
        """Unknown text falls back to CSV."""
        assert detector.detect_kind(b"a;b\n1;2\n") == WorkbookKind.CSV


class TestAcceptedLists:
    """Tests for accepted extension and type listings."""

    def test_every_kind_has_an_extension_and_a_type(self) -> None:
        assert set(ACCEPTED_EXTENSIONS.values()) == set(WorkbookKind)
        assert set(ACCEPTED_MIME_TYPES.values()) == set(WorkbookKind)

    def test_get_accepted_extensions(self) -> None:
        assert FormatDetector.get_accepted_extensions() == [".csv", ".xls", ".xlsx"]
