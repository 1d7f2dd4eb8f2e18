"""Upload page state and view model."""

from spreadsheet_json_extractor.presentation.state import (
    InvalidTransitionError,
    UiPhase,
    UiState,
    begin_processing,
    select_file,
    select_sheet,
    settle,
    toggle_raw_json,
)
from spreadsheet_json_extractor.presentation.view import (
    Banner,
    PageView,
    SheetTab,
    TableView,
    build_page_view,
    render_cell,
)

__all__ = [
    "Banner",
    "InvalidTransitionError",
    "PageView",
    "SheetTab",
    "TableView",
    "UiPhase",
    "UiState",
    "begin_processing",
    "build_page_view",
    "render_cell",
    "select_file",
    "select_sheet",
    "settle",
    "toggle_raw_json",
]
