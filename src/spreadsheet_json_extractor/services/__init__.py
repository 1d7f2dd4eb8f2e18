"""Services for spreadsheet to JSON conversion."""

from spreadsheet_json_extractor.services.conversion_service import (
    GENERIC_FAILURE_MESSAGE,
    ConversionService,
)
from spreadsheet_json_extractor.services.format_detector import (
    FormatDetector,
    UnsupportedFormatError,
)
from spreadsheet_json_extractor.services.sheet_normalizer import SheetNormalizer
from spreadsheet_json_extractor.services.workbook_reader import WorkbookReader

__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "ConversionService",
    "FormatDetector",
    "SheetNormalizer",
    "UnsupportedFormatError",
    "WorkbookReader",
]
