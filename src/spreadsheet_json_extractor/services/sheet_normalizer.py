"""Normalization of raw worksheet grids into serializable sheet tables.

The first non-blank row of a sheet supplies the headers. Every later
non-blank row becomes one record holding a value for every header, with
absent cells filled by an empty string. Cell values are coerced to
``str | int | float | bool | None`` (plus deep-copied JSON structures).
"""

from __future__ import annotations

import json
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from collections import Counter
from typing import Any

from spreadsheet_json_extractor.models import CellKind, RowRecord, SheetTable
from spreadsheet_json_extractor.raw_workbook import RawSheet, SheetRange
from spreadsheet_json_extractor.utils.exceptions import NormalizationError
from spreadsheet_json_extractor.utils.logging import get_logger

logger = get_logger(__name__)

EMPTY_HEADER = "__EMPTY"
MISSING_CELL = ""


def is_blank(value: Any) -> bool:
    """Return True for cells that hold nothing."""
    return value is None or (isinstance(value, str) and value == "")


def normalize_cell(value: Any) -> Any:
    """Coerce a raw cell value into a JSON-serializable value.

    Args:
        value: Cell value as produced by a workbook reader.

    Returns:
        A string, number, boolean, None, or a deep-copied plain structure.
    """
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value) if value.is_integer() else value
    if isinstance(value, Decimal):
        return normalize_cell(float(value))
    # datetime is a subclass of date, both expose isoformat()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return json.loads(json.dumps(value, default=str, allow_nan=False))
    return str(value)


def classify_cell(value: Any) -> CellKind:
    """Classify a normalized cell value.

    Raises:
        NormalizationError: If the value is outside the normalized variant.
    """
    if value is None or value == MISSING_CELL:
        return CellKind.ABSENT
    if isinstance(value, bool):
        return CellKind.BOOLEAN
    if isinstance(value, (int, float)):
        return CellKind.NUMBER
    if isinstance(value, str):
        return CellKind.TEXT
    if isinstance(value, (dict, list)):
        return CellKind.STRUCTURE
    raise NormalizationError(f"Unclassifiable cell value of type {type(value).__name__}")


def header_text(value: Any) -> str:
    """Render a header cell as the text used for its column key."""
    normalized = normalize_cell(value)
    if isinstance(normalized, bool):
        return "TRUE" if normalized else "FALSE"
    if isinstance(normalized, (dict, list)):
        return json.dumps(normalized)
    return str(normalized)


def build_headers(cells: list[Any]) -> list[str]:
    """Build distinct column headers from a header row.

    Blank cells are named ``__EMPTY``, ``__EMPTY_1``, ...; repeated texts
    get ``_1``, ``_2`` suffixes in column order.

    Args:
        cells: Raw values of the header row.

    Returns:
        One unique header per cell.
    """
    headers: list[str] = []
    taken: set[str] = set()
    counters: dict[str, int] = {}

    for cell in cells:
        base = EMPTY_HEADER if is_blank(cell) else header_text(cell)
        name = base
        while name in taken:
            counters[base] = counters.get(base, 0) + 1
            name = f"{base}_{counters[base]}"
        taken.add(name)
        headers.append(name)

    return headers


class SheetNormalizer:
    """Turn RawSheet grids into SheetTable records."""

    def normalize(self, raw_sheet: RawSheet) -> SheetTable:
        """Normalize one worksheet.

        Args:
            raw_sheet: Sheet grid from a workbook reader.

        Returns:
            SheetTable with records, headers, and derived counts.

        Raises:
            NormalizationError: If a cell cannot be coerced.
        """
        try:
            records, kinds = self._build_records(raw_sheet.grid)
        except NormalizationError as e:
            raise NormalizationError(
                f"Failed to normalize sheet '{raw_sheet.name}': {e.message}",
                sheet_name=raw_sheet.name,
            ) from e
        except (TypeError, ValueError, OverflowError) as e:
            raise NormalizationError(
                f"Failed to normalize sheet '{raw_sheet.name}': {e}",
                sheet_name=raw_sheet.name,
            ) from e

        header_keys = list(records[0].keys()) if records else []
        self._cross_check_extent(raw_sheet, len(records), len(header_keys))
        logger.debug(
            "Sheet normalized",
            sheet=raw_sheet.name,
            row_count=len(records),
            cell_kinds={kind.value: count for kind, count in sorted(kinds.items())},
        )

        return SheetTable(sheet_name=raw_sheet.name, rows=records, headers=header_keys)

    def _build_records(
        self, grid: list[list[Any]]
    ) -> tuple[list[RowRecord], Counter[CellKind]]:
        width = max((len(row) for row in grid), default=0)
        rows = iter(grid)

        header_cells: list[Any] | None = None
        for row in rows:
            if not self._row_is_blank(row):
                header_cells = row
                break

        kinds: Counter[CellKind] = Counter()
        if header_cells is None:
            return [], kinds

        headers = build_headers(self._pad(header_cells, width))
        records: list[RowRecord] = []
        for row in rows:
            if self._row_is_blank(row):
                continue
            cells = self._pad(row, width)
            record: RowRecord = {}
            for header, cell in zip(headers, cells, strict=True):
                value = MISSING_CELL if is_blank(cell) else normalize_cell(cell)
                kinds[classify_cell(value)] += 1
                record[header] = value
            records.append(record)

        return records, kinds

    @staticmethod
    def _row_is_blank(row: list[Any]) -> bool:
        return all(is_blank(cell) for cell in row)

    @staticmethod
    def _pad(row: list[Any], width: int) -> list[Any]:
        return list(row) + [None] * (width - len(row))

    @staticmethod
    def _cross_check_extent(raw_sheet: RawSheet, row_count: int, column_count: int) -> None:
        """Compare the normalized extent with the sheet's declared range.

        The declared range includes the header row and blank rows, so it is
        only logged; reported counts always come from the records.
        """
        if raw_sheet.declared_range is None:
            return
        try:
            declared = SheetRange.decode(raw_sheet.declared_range)
        except (TypeError, ValueError):
            logger.debug(
                "Undecodable declared range",
                sheet=raw_sheet.name,
                declared_range=raw_sheet.declared_range,
            )
            return

        data_rows = max(declared.row_span - 1, 0)
        if data_rows != row_count or declared.column_span != column_count:
            logger.debug(
                "Declared range differs from normalized extent",
                sheet=raw_sheet.name,
                declared_range=raw_sheet.declared_range,
                declared_data_rows=data_rows,
                declared_columns=declared.column_span,
                row_count=row_count,
                column_count=column_count,
            )
