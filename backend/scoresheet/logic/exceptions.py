"""Typed domain exceptions for scoresheet rule violations.

All domain-level violations use subclasses of ScoresheetError rather than
raw ValueError/IndexError. This enables consistent catch-and-convert at the
service boundary (ScoresheetService), where each error maps to an ErrorCode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scoresheet.logic.enums import ErrorCode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoresheet.logic.types import RejectionReason


class ScoresheetError(Exception):
    """Base exception for scoresheet rule violations.

    Raised by domain logic (round_store.py, session.py) when an operation
    violates game rules. Caught at the service boundary and converted to
    ErrorResult responses.
    """

    code: ErrorCode = ErrorCode.GAME_ERROR


# --- Setup errors ---


class InvalidRosterError(ScoresheetError):
    """Roster cannot start a session."""


class InvalidRosterSizeError(InvalidRosterError):
    """Roster does not have a supported number of players."""

    code = ErrorCode.INVALID_ROSTER_SIZE

    def __init__(self, *, size: int, allowed: Sequence[int]) -> None:
        self.size = size
        self.allowed = tuple(allowed)
        super().__init__(f"roster must have {' or '.join(str(n) for n in self.allowed)} players, got {size}")


class EmptyPlayerNameError(InvalidRosterError):
    """A roster name is empty after trimming."""

    code = ErrorCode.EMPTY_PLAYER_NAME

    def __init__(self, *, player_index: int) -> None:
        self.player_index = player_index
        super().__init__(f"player {player_index} has an empty name")


class DuplicatePlayerNameError(InvalidRosterError):
    """Two roster names are equal ignoring case."""

    code = ErrorCode.DUPLICATE_NAME

    def __init__(self, *, name: str) -> None:
        self.name = name
        super().__init__(f"duplicate player name: {name!r}")


# --- Entry and advance errors ---


class BidsIncompleteError(ScoresheetError):
    """Tricks taken were entered before every bid of the round."""

    code = ErrorCode.BIDS_INCOMPLETE


class InvalidEntryFieldError(ScoresheetError):
    """Entry field name is neither bid nor tricks_taken."""

    code = ErrorCode.INVALID_FIELD

    def __init__(self, field: object) -> None:
        self.field = field
        super().__init__(f"unknown entry field {field!r}")


class RoundRejectedError(ScoresheetError):
    """Round failed validation and cannot be closed.

    Attributes:
        round_index: 0-based index of the rejected round.
        reasons: Every rejection reason reported by the validator.

    """

    code = ErrorCode.ROUND_REJECTED

    def __init__(self, *, round_index: int, reasons: Sequence[RejectionReason]) -> None:
        self.round_index = round_index
        self.reasons = tuple(reasons)
        kinds = ", ".join(reason.kind.value for reason in self.reasons)
        super().__init__(f"round {round_index} rejected: {kinds}")


# --- Structural errors (caller misuse) ---


class IndexOutOfRangeError(ScoresheetError):
    """Round or player index does not exist."""

    code = ErrorCode.INDEX_OUT_OF_RANGE


class RoundIndexError(IndexOutOfRangeError):
    def __init__(self, *, round_index: int, round_count: int) -> None:
        self.round_index = round_index
        super().__init__(f"invalid round index {round_index}, {round_count} rounds exist")


class PlayerIndexError(IndexOutOfRangeError):
    def __init__(self, *, player_index: int, player_count: int) -> None:
        self.player_index = player_index
        super().__init__(f"invalid player index {player_index}, expected 0-{player_count - 1}")


class RoundClosedError(ScoresheetError):
    """Round is closed and can no longer be edited."""

    code = ErrorCode.ROUND_CLOSED

    def __init__(self, *, round_index: int) -> None:
        self.round_index = round_index
        super().__init__(f"round {round_index} is closed")


class RoundStillOpenError(ScoresheetError):
    """A new round was requested while the latest round is still open."""

    code = ErrorCode.INVALID_PHASE


class MaxRoundsExceededError(ScoresheetError):
    """All rounds of the game have already been opened."""

    code = ErrorCode.MAX_ROUNDS_EXCEEDED


class InvalidPhaseError(ScoresheetError):
    """Operation is not valid in the current session phase."""

    code = ErrorCode.INVALID_PHASE


class UnsupportedPlayerCountError(ScoresheetError):
    """No scoring rules exist for this player count."""


class UnsupportedSettingsError(ScoresheetError):
    """Game rules contain values the engine cannot honor."""


class UnknownSessionError(ScoresheetError):
    """No session exists for the given id."""

    code = ErrorCode.UNKNOWN_SESSION

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"unknown session {session_id!r}")


class SessionExistsError(ScoresheetError):
    """A session with this id is already active."""

    code = ErrorCode.SESSION_EXISTS

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session {session_id!r} already exists")


class SessionLimitError(ScoresheetError):
    """Service already holds its maximum number of sessions."""

    code = ErrorCode.SESSION_LIMIT_REACHED
