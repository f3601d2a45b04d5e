"""
Round validation: decide whether a round may be closed.

Checks run in a fixed order. Completeness comes first; an incomplete round
reports a single IncompleteEntries reason listing every incomplete player.
A complete round reports every out-of-range bid, then every out-of-range
tricks value, then the trick-sum mismatch, so the caller can highlight all
offending fields at once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scoresheet.logic.enums import EntryField
from scoresheet.logic.exceptions import InvalidEntryFieldError
from scoresheet.logic.settings import GameRules, get_min_bid
from scoresheet.logic.types import (
    BidOutOfRange,
    IncompleteEntries,
    TrickSumMismatch,
    TricksOutOfRange,
)

if TYPE_CHECKING:
    from scoresheet.logic.types import EntryRangeError, RejectionReason, Round


def parse_entry_field(field: EntryField | str) -> EntryField:
    """Coerce a field name to EntryField, raising InvalidEntryFieldError for unknown names."""
    try:
        return EntryField(field)
    except ValueError:
        raise InvalidEntryFieldError(field) from None


def check_entry_range(
    field: EntryField,
    value: int,
    *,
    player_index: int,
    player_count: int,
    rules: GameRules | None = None,
) -> EntryRangeError | None:
    """Return the range violation for a single bid/tricks value, or None if legal."""
    game_rules = rules or GameRules()
    if field == EntryField.BID:
        min_bid = get_min_bid(player_count, game_rules)
        if not (min_bid <= value <= game_rules.max_bid):
            return BidOutOfRange(player_index=player_index, value=value, min_bid=min_bid, max_bid=game_rules.max_bid)
        return None
    if not (game_rules.min_tricks <= value <= game_rules.max_tricks):
        return TricksOutOfRange(
            player_index=player_index,
            value=value,
            min_tricks=game_rules.min_tricks,
            max_tricks=game_rules.max_tricks,
        )
    return None


def validate_round(round_: Round, rules: GameRules | None = None) -> list[RejectionReason]:
    """
    Validate a round against range and trick-conservation rules.

    Returns an empty list when the round may be closed, otherwise every
    rejection reason in check order.
    """
    game_rules = rules or GameRules()
    player_count = len(round_.entries)

    incomplete = tuple(i for i, entry in enumerate(round_.entries) if not entry.is_complete)
    if incomplete:
        return [IncompleteEntries(player_indices=incomplete)]

    # every entry is complete from here on
    columns = (
        (EntryField.BID, [entry.bid for entry in round_.entries]),
        (EntryField.TRICKS_TAKEN, [entry.tricks_taken for entry in round_.entries]),
    )
    reasons: list[RejectionReason] = []
    for field, values in columns:
        for player_index, value in enumerate(values):
            violation = check_entry_range(
                field,
                value,  # type: ignore[arg-type]
                player_index=player_index,
                player_count=player_count,
                rules=game_rules,
            )
            if violation is not None:
                reasons.append(violation)

    if round_.trick_total != game_rules.total_tricks:
        reasons.append(TrickSumMismatch(actual_sum=round_.trick_total, expected=game_rules.total_tricks))

    return reasons
