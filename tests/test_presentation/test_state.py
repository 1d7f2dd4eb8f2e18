"""Tests for the upload page state transitions."""

import dataclasses

import pytest

from spreadsheet_json_extractor.models import ConversionResult, SheetTable
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


def submit(file_name: str, result: ConversionResult) -> UiState:
    """Walk a fresh page through one submission."""
    return settle(begin_processing(select_file(UiState(), file_name)), result)


@pytest.fixture
def success() -> ConversionResult:
    return ConversionResult.succeeded(
        [
            SheetTable(sheet_name="First", rows=[{"a": 1}], headers=["a"]),
            SheetTable(sheet_name="Second"),
        ],
        "book.xlsx",
    )


@pytest.fixture
def failure() -> ConversionResult:
    return ConversionResult.failed("Failed to process Excel file", "book.xlsx")


class TestTransitions:
    """Tests for the submission lifecycle."""

    def test_initial_state_is_idle(self) -> None:
        state = UiState()
        assert state.phase == UiPhase.IDLE
        assert state.can_submit is False

    def test_select_file(self) -> None:
        state = select_file(UiState(), "book.xlsx")
        assert state.phase == UiPhase.FILE_SELECTED
        assert state.file_name == "book.xlsx"
        assert state.can_submit is True

    def test_processing_disables_submit(self) -> None:
        state = begin_processing(select_file(UiState(), "book.xlsx"))
        assert state.phase == UiPhase.PROCESSING
        assert state.can_submit is False

    def test_settle_success_activates_first_sheet(
        self, success: ConversionResult
    ) -> None:
        state = submit("book.xlsx", success)
        assert state.phase == UiPhase.SUCCEEDED
        assert state.result is success
        assert state.active_sheet == "First"
        assert state.show_raw_json is False

    def test_settle_failure(self, failure: ConversionResult) -> None:
        state = submit("book.xlsx", failure)
        assert state.phase == UiPhase.FAILED
        assert state.result is failure
        assert state.active_sheet is None

    def test_selecting_new_file_discards_result(
        self, success: ConversionResult
    ) -> None:
        state = select_file(submit("book.xlsx", success), "other.csv")
        assert state.phase == UiPhase.FILE_SELECTED
        assert state.result is None
        assert state.active_sheet is None
        assert state.file_name == "other.csv"

    def test_states_are_immutable(self) -> None:
        state = UiState()
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.phase = UiPhase.PROCESSING  # type: ignore[misc]


class TestInvalidTransitions:
    """Tests for events not allowed in the current phase."""

    def test_submit_without_file(self) -> None:
        with pytest.raises(InvalidTransitionError, match="Cannot submit while idle"):
            begin_processing(UiState())

    def test_double_submit(self) -> None:
        state = begin_processing(select_file(UiState(), "book.xlsx"))
        with pytest.raises(InvalidTransitionError):
            begin_processing(state)

    def test_select_file_while_processing(self) -> None:
        state = begin_processing(select_file(UiState(), "book.xlsx"))
        with pytest.raises(InvalidTransitionError):
            select_file(state, "other.xlsx")

    def test_settle_without_submission(self, success: ConversionResult) -> None:
        with pytest.raises(InvalidTransitionError):
            settle(select_file(UiState(), "book.xlsx"), success)

    def test_toggle_json_outside_success(self, failure: ConversionResult) -> None:
        with pytest.raises(InvalidTransitionError):
            toggle_raw_json(submit("book.xlsx", failure))


class TestViewFlags:
    """Tests for view-only adjustments after success."""

    def test_toggle_raw_json(self, success: ConversionResult) -> None:
        state = submit("book.xlsx", success)
        shown = toggle_raw_json(state)
        assert shown.show_raw_json is True
        assert toggle_raw_json(shown).show_raw_json is False
        assert state.show_raw_json is False

    def test_select_sheet(self, success: ConversionResult) -> None:
        state = select_sheet(submit("book.xlsx", success), "Second")
        assert state.active_sheet == "Second"

    def test_select_unknown_sheet(self, success: ConversionResult) -> None:
        with pytest.raises(KeyError):
            select_sheet(submit("book.xlsx", success), "Missing")
