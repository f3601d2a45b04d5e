"""
Ordered, append-only store of rounds for a single game session.

Rounds and entries are frozen models; every write replaces the affected
round with a copy built through model_copy, so snapshots handed out by
the store are never mutated afterwards.
"""

from __future__ import annotations

import structlog

from scoresheet.logic.enums import EntryField
from scoresheet.logic.exceptions import (
    MaxRoundsExceededError,
    PlayerIndexError,
    RoundClosedError,
    RoundIndexError,
    RoundRejectedError,
    RoundStillOpenError,
)
from scoresheet.logic.scoring import calculate_round_score
from scoresheet.logic.settings import GameRules, get_scoring_bands
from scoresheet.logic.types import Round, RoundEntry
from scoresheet.logic.validator import check_entry_range, parse_entry_field, validate_round

logger = structlog.get_logger()


class RoundStore:
    """Own the round lifecycle and the current-round cursor."""

    def __init__(self, player_count: int, rules: GameRules | None = None) -> None:
        self._rules = rules or GameRules()
        get_scoring_bands(player_count, self._rules)
        self._player_count = player_count
        self._rounds: list[Round] = []

    @property
    def player_count(self) -> int:
        return self._player_count

    @property
    def rules(self) -> GameRules:
        return self._rules

    @property
    def rounds(self) -> tuple[Round, ...]:
        return tuple(self._rounds)

    @property
    def round_count(self) -> int:
        return len(self._rounds)

    @property
    def closed_round_count(self) -> int:
        return sum(1 for round_ in self._rounds if round_.closed)

    @property
    def is_finished(self) -> bool:
        """True once the maximum number of rounds exist and all are closed."""
        return self.round_count >= self._rules.max_rounds and self.closed_round_count == self.round_count

    def get_round(self, round_index: int) -> Round:
        if not (0 <= round_index < len(self._rounds)):
            raise RoundIndexError(round_index=round_index, round_count=len(self._rounds))
        return self._rounds[round_index]

    def current_round_index(self) -> int | None:
        """Index of the open round, or None when no round is open."""
        if self._rounds and not self._rounds[-1].closed:
            return len(self._rounds) - 1
        return None

    def open_round(self) -> int:
        """
        Append an empty round and return its 0-based index.

        Raises MaxRoundsExceededError when the round limit is reached and
        RoundStillOpenError while the latest round has not been closed.
        """
        if len(self._rounds) >= self._rules.max_rounds:
            raise MaxRoundsExceededError(f"all {self._rules.max_rounds} rounds have already been played")
        if self.current_round_index() is not None:
            raise RoundStillOpenError(f"round {len(self._rounds) - 1} must be closed before opening another")

        self._rounds.append(Round(entries=tuple(RoundEntry() for _ in range(self._player_count))))
        round_index = len(self._rounds) - 1
        logger.debug("round opened", round_index=round_index)
        return round_index

    def set_entry(
        self,
        round_index: int,
        player_index: int,
        field: EntryField,
        value: int,
    ) -> RoundEntry:
        """
        Write a bid or tricks value and return the updated entry.

        The entry's final score is recomputed when both values are set and in
        range; otherwise it stays at 0 until corrected.
        """
        round_ = self.get_round(round_index)
        if round_.closed:
            raise RoundClosedError(round_index=round_index)
        if not (0 <= player_index < self._player_count):
            raise PlayerIndexError(player_index=player_index, player_count=self._player_count)

        field = parse_entry_field(field)
        entry = round_.entries[player_index].model_copy(update={field.value: value})
        entry = entry.model_copy(update={"final_score": self._score_entry(entry, player_index)})

        entries = list(round_.entries)
        entries[player_index] = entry
        self._rounds[round_index] = round_.model_copy(update={"entries": tuple(entries)})

        logger.debug(
            "entry updated",
            round_index=round_index,
            player_index=player_index,
            field=field,
            value=value,
            final_score=entry.final_score,
        )
        return entry

    def close_round(self, round_index: int) -> Round:
        """
        Lock a round after it passes validation.

        Raises RoundRejectedError with every validator reason and leaves the
        round untouched when it is not valid.
        """
        round_ = self.get_round(round_index)
        if round_.closed:
            raise RoundClosedError(round_index=round_index)

        reasons = validate_round(round_, self._rules)
        if reasons:
            raise RoundRejectedError(round_index=round_index, reasons=reasons)

        closed = round_.model_copy(update={"closed": True})
        self._rounds[round_index] = closed
        return closed

    def _score_entry(self, entry: RoundEntry, player_index: int) -> int:
        if entry.bid is None or entry.tricks_taken is None:
            return 0
        for field, value in ((EntryField.BID, entry.bid), (EntryField.TRICKS_TAKEN, entry.tricks_taken)):
            violation = check_entry_range(
                field,
                value,
                player_index=player_index,
                player_count=self._player_count,
                rules=self._rules,
            )
            if violation is not None:
                return 0
        return calculate_round_score(entry.bid, entry.tricks_taken, self._player_count, self._rules)
