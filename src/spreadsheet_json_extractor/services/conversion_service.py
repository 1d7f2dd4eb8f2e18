"""Conversion of uploaded spreadsheet bytes into a ConversionResult.

``ConversionService.convert`` is the single entry point. It validates the
upload, reads the workbook, normalizes every sheet and never raises: every
failure becomes a ``ConversionResult`` with ``success=False``.
"""

from spreadsheet_json_extractor.config import Settings, settings
from spreadsheet_json_extractor.models import ConversionResult, SheetTable
from spreadsheet_json_extractor.services.format_detector import FormatDetector
from spreadsheet_json_extractor.services.sheet_normalizer import SheetNormalizer
from spreadsheet_json_extractor.services.workbook_reader import WorkbookReader
from spreadsheet_json_extractor.utils.exceptions import (
    ConverterError,
    ErrorCode,
    FileTooLargeError,
    MissingInputError,
)
from spreadsheet_json_extractor.utils.logging import (
    LogContext,
    get_logger,
    timed_operation,
)

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to process Excel file"


class ConversionService:
    """Converts spreadsheet uploads into normalized sheet tables.

    Collaborators are injectable so callers can substitute readers; by
    default they are configured from application settings.
    """

    def __init__(
        self,
        max_file_size_bytes: int | None = None,
        reader: WorkbookReader | None = None,
        detector: FormatDetector | None = None,
        normalizer: SheetNormalizer | None = None,
    ) -> None:
        """Initialize the conversion service.

        Args:
            max_file_size_bytes: Upload size limit, None for no limit.
            reader: Workbook reader to use.
            detector: Format detector to use.
            normalizer: Sheet normalizer to use.
        """
        self.max_file_size_bytes = max_file_size_bytes
        self.reader = reader or WorkbookReader()
        self.detector = detector or FormatDetector()
        self.normalizer = normalizer or SheetNormalizer()

    @classmethod
    def from_settings(cls, app_settings: Settings | None = None) -> "ConversionService":
        """Build a service configured from application settings."""
        app_settings = app_settings or settings
        return cls(
            max_file_size_bytes=app_settings.max_file_size_bytes,
            reader=WorkbookReader(
                csv_default_encoding=app_settings.csv_default_encoding,
                min_encoding_confidence=app_settings.min_encoding_confidence,
            ),
        )

    def convert(
        self,
        content: bytes | None,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> ConversionResult:
        """Convert one uploaded file.

        Args:
            content: Raw file bytes, None when nothing was uploaded.
            file_name: Original file name.
            content_type: MIME type declared by the client.

        Returns:
            ConversionResult describing either the sheets or the failure.
        """
        name = file_name or ""

        with LogContext(file_name=name or "(none)"):
            try:
                with timed_operation(logger, "convert") as metrics:
                    metrics.bytes_read = len(content or b"")
                    sheets = self._convert(content, name, content_type)
                    metrics.sheets_processed = len(sheets)
                    metrics.rows_processed = sum(sheet.row_count for sheet in sheets)
                result = ConversionResult.succeeded(sheets, file_name=name)
            except MissingInputError as e:
                result = ConversionResult.failed(e.message, error_code=e.error_code)
            except ConverterError as e:
                logger.warning(
                    "Conversion failed",
                    error_code=e.error_code.value,
                    error=e.message,
                    details=e.details,
                )
                result = ConversionResult.failed(
                    e.message or GENERIC_FAILURE_MESSAGE,
                    file_name=name,
                    error_code=e.error_code,
                )
            except Exception as e:
                logger.exception("Unexpected error during conversion")
                result = ConversionResult.failed(
                    str(e) or GENERIC_FAILURE_MESSAGE,
                    file_name=name,
                    error_code=ErrorCode.UNEXPECTED_ERROR,
                )

            logger.log_conversion_result(
                file_name=result.file_name,
                success=result.success,
                total_sheets=result.total_sheets,
                total_rows=result.total_rows,
                error_code=result.error_code.value if result.error_code else None,
            )
        return result

    def _convert(
        self,
        content: bytes | None,
        file_name: str,
        content_type: str | None,
    ) -> list[SheetTable]:
        if content is None or (not content and not file_name):
            raise MissingInputError()

        if self.max_file_size_bytes is not None and len(content) > self.max_file_size_bytes:
            raise FileTooLargeError(
                file_size=len(content),
                max_size=self.max_file_size_bytes,
                file_name=file_name,
            )

        self.detector.validate(file_name, content_type)
        kind = self.detector.detect_kind(content, file_name, content_type)

        logger.info("Reading workbook", kind=kind.value, size_bytes=len(content))
        workbook = self.reader.read(content, kind)

        return [self.normalizer.normalize(raw_sheet) for raw_sheet in workbook.sheets]
