"""
Pydantic models for scoresheet data structures.

Contains round entries, rounds, round rejection reasons and the result
models that cross the service boundary to the rendering layer.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from scoresheet.logic.enums import EntryField, ErrorCode, RejectionKind


class RoundEntry(BaseModel):
    """One player's line in a round. final_score is derived, never set directly."""

    model_config = ConfigDict(frozen=True)

    bid: int | None = None
    tricks_taken: int | None = None
    final_score: int = 0

    @property
    def is_complete(self) -> bool:
        return self.bid is not None and self.tricks_taken is not None


class Round(BaseModel):
    """Entries for every player in roster order, plus the lock flag."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[RoundEntry, ...]
    closed: bool = False

    @property
    def bids_complete(self) -> bool:
        return all(entry.bid is not None for entry in self.entries)

    @property
    def trick_total(self) -> int:
        return sum(entry.tricks_taken for entry in self.entries if entry.tricks_taken is not None)

    @property
    def scores(self) -> tuple[int, ...]:
        return tuple(entry.final_score for entry in self.entries)


# ---------------------------------------------------------------------------
# Round rejection reasons
# ---------------------------------------------------------------------------


class IncompleteEntries(BaseModel):
    """Some bid or tricks_taken values are still unset."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[RejectionKind.INCOMPLETE_ENTRIES] = RejectionKind.INCOMPLETE_ENTRIES
    player_indices: tuple[int, ...]


class BidOutOfRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[RejectionKind.BID_OUT_OF_RANGE] = RejectionKind.BID_OUT_OF_RANGE
    player_index: int
    value: int
    min_bid: int
    max_bid: int


class TricksOutOfRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[RejectionKind.TRICKS_OUT_OF_RANGE] = RejectionKind.TRICKS_OUT_OF_RANGE
    player_index: int
    value: int
    min_tricks: int
    max_tricks: int


class TrickSumMismatch(BaseModel):
    """Tricks taken across all players must add up to the whole deck."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[RejectionKind.TRICK_SUM_MISMATCH] = RejectionKind.TRICK_SUM_MISMATCH
    actual_sum: int
    expected: int


RejectionReason = Annotated[
    IncompleteEntries | BidOutOfRange | TricksOutOfRange | TrickSumMismatch,
    Field(discriminator="kind"),
]

EntryRangeError = BidOutOfRange | TricksOutOfRange


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class Leader(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_index: int
    score: int


class EntryResult(BaseModel):
    """Outcome of a single bid/tricks write, for immediate display."""

    model_config = ConfigDict(frozen=True)

    round_index: int
    player_index: int
    field: EntryField
    value: int
    final_score: int
    bids_complete: bool  # tricks entry is allowed once every bid is in
    trick_total: int
    range_error: EntryRangeError | None = None


class ClosedRound(BaseModel):
    """Snapshot of a round at the moment it was locked."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    round_index: int
    round_number: int  # 1-based, as shown on the sheet
    scores: dict[str, int]  # player name -> final score


class GameResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    winner: str
    winner_index: int
    winning_score: int
    totals: tuple[int, ...]
    rounds_played: int
    warnings: tuple[str, ...] = ()


class AdvanceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    closed_round_index: int
    next_round_index: int | None  # None once the game is finished
    totals: tuple[int, ...]
    result: GameResult | None = None
    warnings: tuple[str, ...] = ()

    @property
    def finished(self) -> bool:
        return self.next_round_index is None


class SessionStarted(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    roster: tuple[str, ...]
    round_index: int | None  # None when a restored session is already finished


class ErrorResult(BaseModel):
    """Typed failure returned by the service boundary instead of raising."""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    reasons: tuple[RejectionReason, ...] = ()
