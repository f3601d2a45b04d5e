"""Running totals and leader lookup across all rounds of a session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scoresheet.logic.types import Leader

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from scoresheet.logic.types import Round


def calculate_totals(rounds: Iterable[Round], num_players: int) -> list[int]:
    """
    Sum final scores per player over every round, open rounds included.

    Incomplete entries contribute their default score of 0.
    """
    totals = [0] * num_players
    for round_ in rounds:
        for player_index, entry in enumerate(round_.entries):
            totals[player_index] += entry.final_score
    return totals


def find_leader(totals: Sequence[int]) -> Leader | None:
    """
    Return the player with the strictly greatest total.

    Ties go to the first player in roster order. Returns None for an empty roster.
    """
    leader: Leader | None = None
    for player_index, score in enumerate(totals):
        if leader is None or score > leader.score:
            leader = Leader(player_index=player_index, score=score)
    return leader
