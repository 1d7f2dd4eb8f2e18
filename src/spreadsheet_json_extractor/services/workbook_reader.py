"""Workbook readers turning spreadsheet bytes into raw cell grids.

Each supported container is read by its own library:
- .xlsx with openpyxl (computed values, not formulas)
- .xls with xlrd
- .csv with pandas, after chardet encoding detection and delimiter sniffing

The readers do no normalization beyond mapping library-specific cell
representations onto plain Python values.
"""

import codecs
import csv
import io
import re
from typing import Any

import chardet
import pandas as pd
import xlrd
from openpyxl import load_workbook
from openpyxl.utils import get_column_letter

from spreadsheet_json_extractor.raw_workbook import RawSheet, RawWorkbook, WorkbookKind
from spreadsheet_json_extractor.utils.exceptions import (
    EncodingError,
    WorkbookParseError,
)
from spreadsheet_json_extractor.utils.logging import get_logger

logger = get_logger(__name__)

CSV_SHEET_NAME = "Sheet1"
CSV_DELIMITERS = ",;\t|"

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


class WorkbookReader:
    """Read spreadsheet bytes into a RawWorkbook.

    Parser failures are raised as WorkbookParseError carrying the parser's
    own message.
    """

    FALLBACK_ENCODINGS = ("utf-8", "latin-1")

    def __init__(
        self,
        csv_default_encoding: str = "utf-8",
        min_encoding_confidence: float = 0.7,
    ) -> None:
        """Initialize the reader.

        Args:
            csv_default_encoding: Encoding tried first when detection is
                inconclusive.
            min_encoding_confidence: Minimum chardet confidence to trust.
        """
        self._csv_default_encoding = csv_default_encoding
        self._min_encoding_confidence = min_encoding_confidence

    def read(self, content: bytes, kind: WorkbookKind) -> RawWorkbook:
        """Read content as the given workbook kind.

        Args:
            content: File content as bytes.
            kind: Which container format to read.

        Returns:
            RawWorkbook with sheets in workbook order.

        Raises:
            WorkbookParseError: If the parser cannot read the content.
            EncodingError: If CSV text cannot be decoded.
        """
        if kind == WorkbookKind.XLSX:
            sheets = self._read_xlsx(content)
        elif kind == WorkbookKind.XLS:
            sheets = self._read_xls(content)
        else:
            sheets = self._read_csv(content)

        workbook = RawWorkbook(kind=kind, sheets=sheets)
        logger.debug(
            "Workbook read",
            kind=kind.value,
            sheets=workbook.sheet_names,
            size_bytes=len(content),
        )
        return workbook

    # ------------------------------------------------------------------ #
    # Excel readers
    # ------------------------------------------------------------------ #

    def _read_xlsx(self, content: bytes) -> list[RawSheet]:
        try:
            workbook = load_workbook(
                filename=io.BytesIO(content), data_only=True, read_only=False
            )
        except Exception as e:
            raise WorkbookParseError(
                f"Unable to read Excel workbook: {e}", workbook_kind="xlsx"
            ) from e

        try:
            sheets: list[RawSheet] = []
            for worksheet in workbook.worksheets:
                grid = [
                    list(row)
                    for row in worksheet.iter_rows(
                        min_row=worksheet.min_row,
                        min_col=worksheet.min_column,
                        values_only=True,
                    )
                ]
                sheets.append(
                    RawSheet(
                        name=worksheet.title,
                        grid=grid,
                        declared_range=worksheet.dimensions,
                    )
                )
            return sheets
        finally:
            workbook.close()

    def _read_xls(self, content: bytes) -> list[RawSheet]:
        try:
            book = xlrd.open_workbook(file_contents=content)
        except Exception as e:
            raise WorkbookParseError(
                f"Unable to read Excel workbook: {e}", workbook_kind="xls"
            ) from e

        try:
            sheets: list[RawSheet] = []
            for sheet in book.sheets():
                grid = [
                    [
                        self._xls_cell_value(sheet.cell(row_idx, col_idx), book.datemode)
                        for col_idx in range(sheet.ncols)
                    ]
                    for row_idx in range(sheet.nrows)
                ]
                declared_range = (
                    f"A1:{get_column_letter(sheet.ncols)}{sheet.nrows}"
                    if sheet.nrows and sheet.ncols
                    else None
                )
                sheets.append(
                    RawSheet(name=sheet.name, grid=grid, declared_range=declared_range)
                )
            return sheets
        finally:
            book.release_resources()

    @staticmethod
    def _xls_cell_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
        """Map an xlrd cell onto a plain Python value."""
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(cell.value, "#ERROR")
        if cell.ctype == xlrd.XL_CELL_DATE:
            try:
                return xlrd.xldate_as_datetime(cell.value, datemode)
            except (xlrd.xldate.XLDateError, ValueError, OverflowError):
                return cell.value
        return cell.value

    # ------------------------------------------------------------------ #
    # CSV reader
    # ------------------------------------------------------------------ #

    def _read_csv(self, content: bytes) -> list[RawSheet]:
        encoding = self._detect_encoding(content)
        try:
            text = content.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise EncodingError(
                f"Unable to decode CSV content as {encoding}: {e}",
                encoding=encoding,
            ) from e

        if not text.strip():
            return [RawSheet(name=CSV_SHEET_NAME)]

        delimiter = self._detect_csv_delimiter(text)
        width = max(
            (len(fields) for fields in csv.reader(io.StringIO(text), delimiter=delimiter)),
            default=0,
        )

        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                header=None,
                names=list(range(width)),
                dtype=str,
                keep_default_na=False,
            )
        except pd.errors.EmptyDataError:
            return [RawSheet(name=CSV_SHEET_NAME)]
        except pd.errors.ParserError as e:
            raise WorkbookParseError(
                f"Failed to parse CSV: {e}", workbook_kind="csv"
            ) from e

        grid = [
            [self._coerce_csv_field(value) for value in row]
            for row in df.itertuples(index=False, name=None)
        ]
        declared_range = f"A1:{get_column_letter(width)}{len(grid)}" if grid else None

        logger.debug(
            "Parsed CSV",
            encoding=encoding,
            delimiter=repr(delimiter),
            rows=len(grid),
            columns=width,
        )
        return [RawSheet(name=CSV_SHEET_NAME, grid=grid, declared_range=declared_range)]

    def _detect_encoding(self, content: bytes) -> str:
        """Detect the text encoding of CSV bytes.

        Args:
            content: File content as bytes.

        Returns:
            Encoding name usable with ``bytes.decode``.
        """
        if content.startswith(codecs.BOM_UTF8):
            return "utf-8-sig"

        result = chardet.detect(content)
        encoding = result.get("encoding")
        confidence = result.get("confidence", 0.0) or 0.0

        if encoding and confidence >= self._min_encoding_confidence:
            logger.debug(f"Detected encoding: {encoding} (confidence: {confidence:.2f})")
            return encoding.lower()

        for fallback in (self._csv_default_encoding, *self.FALLBACK_ENCODINGS):
            try:
                content.decode(fallback)
            except UnicodeDecodeError:
                continue
            logger.debug(f"Using fallback encoding: {fallback}")
            return fallback

        return self._csv_default_encoding

    @staticmethod
    def _detect_csv_delimiter(content: str) -> str:
        """Detect the delimiter used in CSV text, defaulting to comma."""
        try:
            dialect = csv.Sniffer().sniff(content[:8192], delimiters=CSV_DELIMITERS)
            return dialect.delimiter
        except csv.Error:
            logger.debug("CSV delimiter detection failed, defaulting to comma")
            return ","

    @staticmethod
    def _coerce_csv_field(value: Any) -> Any:
        """Turn a CSV text field into a number, boolean, or text.

        Missing trailing fields and empty fields become None.
        """
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        if value == "":
            return None

        stripped = value.strip()
        upper = stripped.upper()
        if upper == "TRUE":
            return True
        if upper == "FALSE":
            return False
        if _INTEGER_RE.match(stripped):
            return int(stripped)
        if _FLOAT_RE.match(stripped):
            return float(stripped)
        return value
