"""
String enum definitions for scoresheet concepts.
"""

from enum import Enum


class EntryField(str, Enum):
    """Editable fields of a round entry."""

    BID = "bid"
    TRICKS_TAKEN = "tricks_taken"


class GamePhase(str, Enum):
    """Lifecycle phase of a game session."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class RejectionKind(str, Enum):
    """Reasons a round cannot be closed."""

    INCOMPLETE_ENTRIES = "incomplete_entries"
    BID_OUT_OF_RANGE = "bid_out_of_range"
    TRICKS_OUT_OF_RANGE = "tricks_out_of_range"
    TRICK_SUM_MISMATCH = "trick_sum_mismatch"


class ErrorCode(str, Enum):
    """Error codes returned to callers at the service boundary."""

    DUPLICATE_NAME = "duplicate_name"
    INVALID_ROSTER_SIZE = "invalid_roster_size"
    EMPTY_PLAYER_NAME = "empty_player_name"
    ROUND_REJECTED = "round_rejected"
    BIDS_INCOMPLETE = "bids_incomplete"
    ROUND_CLOSED = "round_closed"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    INVALID_FIELD = "invalid_field"
    MAX_ROUNDS_EXCEEDED = "max_rounds_exceeded"
    INVALID_PHASE = "invalid_phase"
    UNKNOWN_SESSION = "unknown_session"
    SESSION_LIMIT_REACHED = "session_limit_reached"
    SESSION_EXISTS = "session_exists"
    STORAGE_ERROR = "storage_error"
    GAME_ERROR = "game_error"
