"""Dataclasses representing a workbook as the parsers hand it over."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from openpyxl.utils.cell import range_boundaries


class WorkbookKind(str, Enum):
    """Container format of an uploaded spreadsheet."""

    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


@dataclass(frozen=True)
class SheetRange:
    """Decoded rectangular address range, 1-based and inclusive."""

    min_row: int
    min_col: int
    max_row: int
    max_col: int

    @property
    def row_span(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def column_span(self) -> int:
        return self.max_col - self.min_col + 1

    @classmethod
    def decode(cls, reference: str | None) -> SheetRange:
        """Decode an A1-style reference such as ``B2:D10``.

        A missing reference decodes as ``A1``.
        """
        min_col, min_row, max_col, max_row = range_boundaries(reference or "A1")
        return cls(
            min_row=min_row or 1,
            min_col=min_col or 1,
            max_row=max_row or min_row or 1,
            max_col=max_col or min_col or 1,
        )


@dataclass
class RawSheet:
    """One worksheet as a grid of raw cell values, top row first."""

    name: str
    grid: list[list[Any]] = field(default_factory=list)
    declared_range: str | None = None


@dataclass
class RawWorkbook:
    """Parsed workbook with its sheets in workbook order."""

    kind: WorkbookKind
    sheets: list[RawSheet] = field(default_factory=list)

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]
