from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest
from openpyxl import Workbook

from spreadsheet_json_extractor.services.format_detector import XLSX_MIME

WorkbookFactory = Callable[[dict[str, list[list[Any]]]], bytes]


def build_xlsx(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Build an .xlsx workbook in memory, one sheet per entry, in order."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_xlsx() -> WorkbookFactory:
    """Factory building .xlsx bytes from ``{sheet name: rows}``."""
    return build_xlsx


@pytest.fixture
def xlsx_mime() -> str:
    return XLSX_MIME


@pytest.fixture
def people_rows() -> list[list[Any]]:
    """Header row plus two people, the second missing an age."""
    return [
        ["Name", "Age", "Active"],
        ["Alice", 30, True],
        ["Bob", None, False],
    ]


@pytest.fixture
def two_sheet_xlsx(people_rows: list[list[Any]]) -> bytes:
    """Workbook with a people sheet and an orders sheet."""
    return build_xlsx(
        {
            "People": people_rows,
            "Orders": [
                ["Order", "Placed", "Total"],
                [1001, datetime(2024, 1, 15, 9, 30), 12.5],
                [1002, datetime(2024, 2, 1), 7.0],
                [1003, datetime(2024, 2, 3), 99.99],
            ],
        }
    )


@pytest.fixture
def legacy_xls() -> bytes:
    """Binary .xls workbook with a date cell and a short second row."""
    import xlwt

    wb = xlwt.Workbook()
    sheet = wb.add_sheet("Legacy")
    date_style = xlwt.easyxf(num_format_str="YYYY-MM-DD")

    sheet.write(0, 0, "Name")
    sheet.write(0, 1, "When")
    sheet.write(0, 2, "N")
    sheet.write(1, 0, "Bolt")
    sheet.write(1, 1, datetime(2024, 1, 15), date_style)
    sheet.write(1, 2, 4)
    sheet.write(2, 0, "Nut")

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
