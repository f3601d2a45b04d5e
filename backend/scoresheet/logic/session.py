"""
Game session state machine for the scoresheet.

A session moves SETUP -> IN_PROGRESS -> FINISHED. It owns the roster and a
RoundStore, certifies rounds through the validator before advancing and
answers who is leading through the totals helpers. Listeners registered with
add_round_closed_listener run once the close and the following round (or the
finish) are committed; their failures are logged and reported as warnings,
never rolled back.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from scoresheet.logic.enums import EntryField, GamePhase
from scoresheet.logic.exceptions import (
    BidsIncompleteError,
    DuplicatePlayerNameError,
    EmptyPlayerNameError,
    InvalidPhaseError,
    InvalidRosterSizeError,
    PlayerIndexError,
    RoundClosedError,
    RoundRejectedError,
)
from scoresheet.logic.round_store import RoundStore
from scoresheet.logic.settings import GameRules, validate_rules
from scoresheet.logic.totals import calculate_totals, find_leader
from scoresheet.logic.types import AdvanceResult, ClosedRound, EntryResult, GameResult
from scoresheet.logic.validator import check_entry_range, parse_entry_field
from shared.dal.models import RoundSnapshot, SessionSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from scoresheet.logic.types import Leader, Round

    RoundClosedListener = Callable[[ClosedRound], None]

logger = structlog.get_logger()


def normalize_roster(roster: Sequence[str], rules: GameRules | None = None) -> tuple[str, ...]:
    """
    Trim roster names and check size, emptiness and case-insensitive uniqueness.

    Raises InvalidRosterSizeError, EmptyPlayerNameError or DuplicatePlayerNameError.
    """
    game_rules = rules or GameRules()
    names = tuple(name.strip() for name in roster)

    if len(names) not in game_rules.supported_player_counts:
        raise InvalidRosterSizeError(size=len(names), allowed=game_rules.supported_player_counts)

    for player_index, name in enumerate(names):
        if not name:
            raise EmptyPlayerNameError(player_index=player_index)

    seen: set[str] = set()
    for name in names:
        key = name.casefold()
        if key in seen:
            raise DuplicatePlayerNameError(name=name)
        seen.add(key)

    return names


class GameSession:
    """One game from roster setup through completion."""

    def __init__(
        self,
        session_id: str | None = None,
        *,
        actor_id: str = "",
        rules: GameRules | None = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self.actor_id = actor_id
        self._rules = rules or GameRules()
        validate_rules(self._rules)
        self._phase = GamePhase.SETUP
        self._roster: tuple[str, ...] = ()
        self._store: RoundStore | None = None
        self._result: GameResult | None = None
        self._listeners: list[RoundClosedListener] = []

    # --- read access ---

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def rules(self) -> GameRules:
        return self._rules

    @property
    def roster(self) -> tuple[str, ...]:
        return self._roster

    @property
    def player_count(self) -> int:
        return len(self._roster)

    @property
    def rounds(self) -> tuple[Round, ...]:
        if self._store is None:
            return ()
        return self._store.rounds

    @property
    def current_round_index(self) -> int | None:
        """Index of the open round; None before start and once finished."""
        if self._store is None or self._phase != GamePhase.IN_PROGRESS:
            return None
        return self._store.current_round_index()

    @property
    def totals(self) -> list[int]:
        return calculate_totals(self.rounds, self.player_count)

    @property
    def leader(self) -> Leader | None:
        return find_leader(self.totals)

    @property
    def result(self) -> GameResult | None:
        return self._result

    def add_round_closed_listener(self, listener: RoundClosedListener) -> None:
        self._listeners.append(listener)

    def remove_round_closed_listener(self, listener: RoundClosedListener) -> None:
        self._listeners.remove(listener)

    # --- transitions ---

    def start(self, roster: Sequence[str]) -> int:
        """Validate the roster, enter IN_PROGRESS and open the first round."""
        if self._phase != GamePhase.SETUP:
            raise InvalidPhaseError(f"session {self.session_id} already started")

        names = normalize_roster(roster, self._rules)
        self._store = RoundStore(len(names), self._rules)
        self._roster = names
        self._phase = GamePhase.IN_PROGRESS
        round_index = self._store.open_round()

        logger.info("session started", session_id=self.session_id, players=list(names))
        return round_index

    def record_entry(
        self,
        round_index: int,
        player_index: int,
        field: EntryField,
        value: int,
    ) -> EntryResult:
        """
        Write a bid or tricks value into an open round.

        Tricks can only be entered once every bid of the round is set.
        Out-of-range values are stored and reported in range_error; the
        entry's final score stays at 0 until they are corrected.
        """
        store = self._require_in_progress()
        field = parse_entry_field(field)

        round_ = store.get_round(round_index)
        if round_.closed:
            raise RoundClosedError(round_index=round_index)
        if not (0 <= player_index < store.player_count):
            raise PlayerIndexError(player_index=player_index, player_count=store.player_count)
        if field == EntryField.TRICKS_TAKEN and not round_.bids_complete:
            raise BidsIncompleteError(f"all bids of round {round_index} must be entered before tricks taken")

        entry = store.set_entry(round_index, player_index, field, value)
        round_ = store.get_round(round_index)

        return EntryResult(
            round_index=round_index,
            player_index=player_index,
            field=field,
            value=value,
            final_score=entry.final_score,
            bids_complete=round_.bids_complete,
            trick_total=round_.trick_total,
            range_error=check_entry_range(
                field,
                value,
                player_index=player_index,
                player_count=store.player_count,
                rules=self._rules,
            ),
        )

    def advance(self) -> AdvanceResult:
        """
        Close the current round and open the next one.

        Finishes the game once the last round closes. Raises RoundRejectedError
        and leaves the session untouched when the current round is invalid.
        """
        store = self._require_in_progress()
        round_index = self._current_open_round(store)
        event = self._close_round(store, round_index)

        # commit the next round (or the finish) before listeners run
        next_index: int | None = None
        if store.round_count >= self._rules.max_rounds:
            self._finish()
        else:
            next_index = store.open_round()

        warnings = self._notify_round_closed(event)
        if warnings and self._result is not None:
            self._result = self._result.model_copy(update={"warnings": warnings})

        return AdvanceResult(
            closed_round_index=round_index,
            next_round_index=next_index,
            totals=tuple(self.totals),
            result=self._result,
            warnings=warnings,
        )

    def complete(self) -> GameResult:
        """
        End the game early, declaring the current leader the winner.

        The current round must pass validation and is closed first. Calling
        complete on a finished session returns the stored result.
        """
        if self._phase == GamePhase.FINISHED and self._result is not None:
            return self._result

        store = self._require_in_progress()
        event = self._close_round(store, self._current_open_round(store))
        result = self._finish()
        warnings = self._notify_round_closed(event)
        if warnings:
            result = result.model_copy(update={"warnings": warnings})
            self._result = result
        return result

    # --- snapshots ---

    def snapshot(self) -> SessionSnapshot:
        """Copy the raw inputs of every round for later resumption."""
        if self._phase == GamePhase.SETUP:
            raise InvalidPhaseError(f"session {self.session_id} has not started")
        return SessionSnapshot(
            session_id=self.session_id,
            roster=list(self._roster),
            actor_id=self.actor_id,
            phase="finished" if self._phase == GamePhase.FINISHED else "in_progress",
            saved_at=datetime.now(UTC),
            rounds=[
                RoundSnapshot(
                    bids=[entry.bid for entry in round_.entries],
                    tricks_taken=[entry.tricks_taken for entry in round_.entries],
                    closed=round_.closed,
                )
                for round_ in self.rounds
            ],
        )

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot, rules: GameRules | None = None) -> GameSession:
        """
        Rebuild a session from a snapshot.

        Final scores are recomputed and closed rounds are re-validated, so a
        tampered snapshot raises RoundRejectedError. Structural mismatches
        raise ValueError.
        """
        session = cls(snapshot.session_id, actor_id=snapshot.actor_id, rules=rules)
        session.start(snapshot.roster)
        store = session._require_in_progress()

        for round_index, round_snapshot in enumerate(snapshot.rounds):
            if len(round_snapshot.bids) != store.player_count or len(round_snapshot.tricks_taken) != store.player_count:
                raise ValueError(f"round {round_index} does not have one entry per player")
            if round_index > 0:
                store.open_round()
            for field, values in (
                (EntryField.BID, round_snapshot.bids),
                (EntryField.TRICKS_TAKEN, round_snapshot.tricks_taken),
            ):
                for player_index, value in enumerate(values):
                    if value is not None:
                        store.set_entry(round_index, player_index, field, value)
            if round_snapshot.closed:
                store.close_round(round_index)

        if snapshot.phase == GamePhase.FINISHED.value:
            if store.current_round_index() is not None:
                raise ValueError("finished snapshot has an open round")
            session._finish()
        elif store.current_round_index() is None:
            if store.round_count >= session.rules.max_rounds:
                session._finish()
            else:
                store.open_round()

        logger.info("session restored", session_id=session.session_id, rounds=store.round_count)
        return session

    # --- internals ---

    def _require_in_progress(self) -> RoundStore:
        if self._phase != GamePhase.IN_PROGRESS or self._store is None:
            raise InvalidPhaseError(f"session {self.session_id} is {self._phase.value}")
        return self._store

    @staticmethod
    def _current_open_round(store: RoundStore) -> int:
        round_index = store.current_round_index()
        if round_index is None:
            raise InvalidPhaseError("no open round")
        return round_index

    def _close_round(self, store: RoundStore, round_index: int) -> ClosedRound:
        try:
            closed = store.close_round(round_index)
        except RoundRejectedError as e:
            logger.warning(
                "round rejected",
                session_id=self.session_id,
                round_index=round_index,
                reasons=list(e.reasons),
            )
            raise

        logger.info("round closed", session_id=self.session_id, round_index=round_index, scores=list(closed.scores))
        return ClosedRound(
            session_id=self.session_id,
            round_index=round_index,
            round_number=round_index + 1,
            scores=dict(zip(self._roster, closed.scores, strict=True)),
        )

    def _notify_round_closed(self, event: ClosedRound) -> tuple[str, ...]:
        warnings: list[str] = []
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.exception(
                    "round closed listener failed",
                    session_id=self.session_id,
                    round_index=event.round_index,
                )
                warnings.append(f"round {event.round_number} was not saved: {e}")
        return tuple(warnings)

    def _finish(self) -> GameResult:
        leader = self.leader
        if leader is None:
            raise InvalidPhaseError(f"session {self.session_id} has no players")
        self._phase = GamePhase.FINISHED
        self._result = GameResult(
            winner=self._roster[leader.player_index],
            winner_index=leader.player_index,
            winning_score=leader.score,
            totals=tuple(self.totals),
            rounds_played=sum(1 for round_ in self.rounds if round_.closed),
        )
        logger.info(
            "game finished",
            session_id=self.session_id,
            winner=self._result.winner,
            totals=list(self._result.totals),
        )
        return self._result
