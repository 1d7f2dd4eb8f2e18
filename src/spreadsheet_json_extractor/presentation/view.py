"""View model of the upload page.

``build_page_view`` flattens a ``UiState`` into plain values the template
renders without further logic: banner text, sheet tabs, one table per
sheet and the export payload.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any

from spreadsheet_json_extractor.models import SheetTable
from spreadsheet_json_extractor.output.json_export import JsonExporter
from spreadsheet_json_extractor.presentation.state import UiPhase, UiState

ROW_INDEX_LABEL = "#"
FALLBACK_ERROR_MESSAGE = "An error occurred while processing the file"

_exporter = JsonExporter()


@dataclass(frozen=True)
class Banner:
    """Outcome message shown above the results."""

    kind: str
    message: str

    @property
    def is_success(self) -> bool:
        return self.kind == "success"


@dataclass(frozen=True)
class SheetTab:
    """One tab of the sheet selector."""

    sheet_name: str
    row_count: int
    active: bool = False


@dataclass(frozen=True)
class TableView:
    """Rendered cell text of one sheet."""

    sheet_name: str
    headers: list[str]
    rows: list[list[str]]
    row_count: int
    column_count: int
    active: bool = False

    @property
    def column_labels(self) -> list[str]:
        """Table head: the 1-based row index followed by every header."""
        return [ROW_INDEX_LABEL, *self.headers]

    @property
    def dimensions(self) -> str:
        return f"{self.row_count} rows × {self.column_count} columns"


@dataclass(frozen=True)
class PageView:
    """Everything the upload page template needs."""

    phase: UiPhase
    file_name: str | None = None
    can_submit: bool = False
    banner: Banner | None = None
    tabs: list[SheetTab] = field(default_factory=list)
    tables: list[TableView] = field(default_factory=list)
    active_sheet: str | None = None
    show_raw_json: bool = False
    json_text: str | None = None
    download_name: str | None = None
    download_href: str | None = None


def render_cell(value: Any) -> str:
    """Render a cell value as table text; missing values render empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def success_message(file_name: str, total_sheets: int, total_rows: int) -> str:
    return (
        f"Successfully extracted data from {file_name} - "
        f"Found {total_sheets} sheet(s) with {total_rows} total rows"
    )


def build_table(sheet: SheetTable, active: bool = False) -> TableView:
    """Render one sheet into rows of cell text in header order."""
    rows = [
        [str(index), *(render_cell(record.get(header)) for header in sheet.headers)]
        for index, record in enumerate(sheet.rows, start=1)
    ]
    return TableView(
        sheet_name=sheet.sheet_name,
        headers=list(sheet.headers),
        rows=rows,
        row_count=sheet.row_count,
        column_count=sheet.column_count,
        active=active,
    )


def build_page_view(state: UiState) -> PageView:
    """Build the page view for a state snapshot.

    Args:
        state: Current page state.

    Returns:
        PageView with banner, tabs, tables and export payload filled in
        according to the phase.
    """
    view = PageView(
        phase=state.phase,
        file_name=state.file_name,
        can_submit=state.can_submit,
    )
    result = state.result

    if state.phase == UiPhase.FAILED and result is not None:
        return replace(
            view,
            banner=Banner(kind="error", message=result.error or FALLBACK_ERROR_MESSAGE),
        )

    if state.phase != UiPhase.SUCCEEDED or result is None:
        return view

    export = _exporter.export(result)
    return replace(
        view,
        banner=Banner(
            kind="success",
            message=success_message(
                result.file_name, result.total_sheets, result.total_rows
            ),
        ),
        tabs=[
            SheetTab(
                sheet_name=sheet.sheet_name,
                row_count=sheet.row_count,
                active=sheet.sheet_name == state.active_sheet,
            )
            for sheet in result.sheets
        ],
        tables=[
            build_table(sheet, active=sheet.sheet_name == state.active_sheet)
            for sheet in result.sheets
        ],
        active_sheet=state.active_sheet,
        show_raw_json=state.show_raw_json,
        json_text=export.text,
        download_name=export.file_name,
        download_href=export.data_uri,
    )
