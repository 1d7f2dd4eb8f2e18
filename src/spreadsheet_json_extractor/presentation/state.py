"""Immutable state of the upload page.

Every user event produces a new ``UiState``; a snapshot is never mutated.
Illegal events raise ``InvalidTransitionError`` instead of silently
leaving the page in an inconsistent state.
"""

from dataclasses import dataclass, replace
from enum import Enum

from spreadsheet_json_extractor.models import ConversionResult


class UiPhase(str, Enum):
    """Phases of the upload page, in the order a submission walks them."""

    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class InvalidTransitionError(Exception):
    """Raised when an event is not allowed in the current phase."""

    def __init__(self, event: str, phase: UiPhase) -> None:
        super().__init__(f"Cannot {event} while {phase.value}")
        self.event = event
        self.phase = phase


@dataclass(frozen=True)
class UiState:
    """One snapshot of the upload page."""

    phase: UiPhase = UiPhase.IDLE
    file_name: str | None = None
    result: ConversionResult | None = None
    show_raw_json: bool = False
    active_sheet: str | None = None

    @property
    def can_submit(self) -> bool:
        """Whether the submit control is enabled."""
        return self.phase == UiPhase.FILE_SELECTED


def select_file(state: UiState, file_name: str) -> UiState:
    """Choose a file, discarding any previous result.

    Allowed in every phase except while a submission is in flight.
    """
    if state.phase == UiPhase.PROCESSING:
        raise InvalidTransitionError("select a file", state.phase)
    return UiState(phase=UiPhase.FILE_SELECTED, file_name=file_name)


def begin_processing(state: UiState) -> UiState:
    """Submit the selected file."""
    if state.phase != UiPhase.FILE_SELECTED:
        raise InvalidTransitionError("submit", state.phase)
    return replace(state, phase=UiPhase.PROCESSING)


def settle(state: UiState, result: ConversionResult) -> UiState:
    """Record the outcome of the in-flight submission.

    The first sheet becomes the active tab of a successful result.
    """
    if state.phase != UiPhase.PROCESSING:
        raise InvalidTransitionError("settle a result", state.phase)
    if result.success:
        first_sheet = result.sheets[0].sheet_name if result.sheets else None
        return replace(
            state,
            phase=UiPhase.SUCCEEDED,
            result=result,
            show_raw_json=False,
            active_sheet=first_sheet,
        )
    return replace(state, phase=UiPhase.FAILED, result=result, active_sheet=None)


def toggle_raw_json(state: UiState) -> UiState:
    """Show or hide the raw JSON block."""
    if state.phase != UiPhase.SUCCEEDED:
        raise InvalidTransitionError("toggle the JSON view", state.phase)
    return replace(state, show_raw_json=not state.show_raw_json)


def select_sheet(state: UiState, sheet_name: str) -> UiState:
    """Make another sheet the active tab.

    Raises:
        InvalidTransitionError: Outside the succeeded phase.
        KeyError: If the result has no sheet with that name.
    """
    if state.phase != UiPhase.SUCCEEDED or state.result is None:
        raise InvalidTransitionError("select a sheet", state.phase)
    if sheet_name not in {sheet.sheet_name for sheet in state.result.sheets}:
        raise KeyError(sheet_name)
    return replace(state, active_sheet=sheet_name)

