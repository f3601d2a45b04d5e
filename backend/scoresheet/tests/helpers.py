from __future__ import annotations

from typing import TYPE_CHECKING

from scoresheet.logic.enums import EntryField
from scoresheet.logic.types import Round, RoundEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoresheet.logic.round_store import RoundStore
    from scoresheet.logic.session import GameSession
    from scoresheet.logic.types import AdvanceResult, EntryResult

# 3-player round whose tricks add up to 13
VALID_BIDS_3P = (5, 4, 4)
VALID_TRICKS_3P = (5, 4, 4)

# 4-player round whose tricks add up to 13
VALID_BIDS_4P = (4, 3, 3, 3)
VALID_TRICKS_4P = (4, 3, 3, 3)


def make_round(
    bids: Sequence[int | None],
    tricks: Sequence[int | None],
    *,
    closed: bool = False,
) -> Round:
    """Build a round directly from raw values. Final scores are left at 0."""
    return Round(
        entries=tuple(RoundEntry(bid=bid, tricks_taken=taken) for bid, taken in zip(bids, tricks, strict=True)),
        closed=closed,
    )


def fill_store_round(
    store: RoundStore,
    round_index: int,
    bids: Sequence[int],
    tricks: Sequence[int],
) -> None:
    for player_index, bid in enumerate(bids):
        store.set_entry(round_index, player_index, EntryField.BID, bid)
    for player_index, taken in enumerate(tricks):
        store.set_entry(round_index, player_index, EntryField.TRICKS_TAKEN, taken)


def fill_round(
    session: GameSession,
    round_index: int,
    bids: Sequence[int],
    tricks: Sequence[int],
) -> list[EntryResult]:
    """Enter every bid, then every tricks value. Return the tricks results."""
    for player_index, bid in enumerate(bids):
        session.record_entry(round_index, player_index, EntryField.BID, bid)
    return [
        session.record_entry(round_index, player_index, EntryField.TRICKS_TAKEN, taken)
        for player_index, taken in enumerate(tricks)
    ]


def play_round(session: GameSession, bids: Sequence[int], tricks: Sequence[int]) -> AdvanceResult:
    """Fill the current round and advance past it."""
    round_index = session.current_round_index
    assert round_index is not None
    fill_round(session, round_index, bids, tricks)
    return session.advance()
