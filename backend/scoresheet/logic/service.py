"""
Service boundary between the scoresheet engine and the surrounding application.

ScoresheetService keeps active sessions by id, wires the round score sink and
snapshot storage in as round-closed listeners, and converts ScoresheetError
into ErrorResult values so callers never see engine exceptions.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from scoresheet.logic.enums import ErrorCode
from scoresheet.logic.exceptions import (
    RoundRejectedError,
    ScoresheetError,
    SessionExistsError,
    SessionLimitError,
    UnknownSessionError,
)
from scoresheet.logic.session import GameSession
from scoresheet.logic.types import ErrorResult, SessionStarted
from shared.dal.models import RoundScoreRecord
from shared.logging import session_context

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoresheet.logic.enums import EntryField
    from scoresheet.logic.settings import GameRules
    from scoresheet.logic.types import AdvanceResult, ClosedRound, EntryResult, GameResult
    from shared.dal.models import SessionSnapshot
    from shared.storage import RoundScoreStorage, SnapshotStorage

logger = structlog.get_logger()

DEFAULT_MAX_SESSIONS = 100


def error_result(error: ScoresheetError) -> ErrorResult:
    """Convert a domain exception into a typed ErrorResult."""
    reasons = error.reasons if isinstance(error, RoundRejectedError) else ()
    return ErrorResult(code=error.code, message=str(error), reasons=reasons)


class ScoresheetService:
    """
    Scoresheet service managing concurrent game sessions.

    Every session is an independent GameSession; there is no shared state
    between them. Round scores are pushed to the score storage after each
    round closes and, with autosave enabled, a snapshot is written as well.
    Storage failures become warnings on the returned result.
    """

    def __init__(
        self,
        *,
        score_storage: RoundScoreStorage | None = None,
        snapshot_storage: SnapshotStorage | None = None,
        rules: GameRules | None = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        autosave: bool = False,
    ) -> None:
        self._sessions: dict[str, GameSession] = {}
        self._score_storage = score_storage
        self._snapshot_storage = snapshot_storage
        self._rules = rules
        self._max_sessions = max_sessions
        self._autosave = autosave

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def start_session(
        self,
        roster: Sequence[str],
        *,
        actor_id: str = "",
        session_id: str | None = None,
    ) -> SessionStarted | ErrorResult:
        """Create and start a session. Roster errors are returned, not raised."""
        try:
            self._check_capacity(session_id)
            session = GameSession(session_id, actor_id=actor_id, rules=self._rules)
            round_index = session.start(roster)
        except ScoresheetError as e:
            logger.info("session start rejected", code=e.code, reason=str(e))
            return error_result(e)

        self._register(session)
        return SessionStarted(session_id=session.session_id, roster=session.roster, round_index=round_index)

    def record_entry(
        self,
        session_id: str,
        round_index: int,
        player_index: int,
        field: EntryField,
        value: int,
    ) -> EntryResult | ErrorResult:
        with session_context(session_id, round_index):
            try:
                return self._require_session(session_id).record_entry(round_index, player_index, field, value)
            except ScoresheetError as e:
                return error_result(e)

    def advance_round(self, session_id: str) -> AdvanceResult | ErrorResult:
        """Close the current round and open the next; validator reasons come back in ErrorResult."""
        with session_context(session_id):
            try:
                return self._require_session(session_id).advance()
            except ScoresheetError as e:
                return error_result(e)

    def complete_game(self, session_id: str) -> GameResult | ErrorResult:
        """
        Declare the winner and discard the session.

        The saved snapshot, if any, is removed once the game is complete.
        """
        with session_context(session_id):
            try:
                result = self._require_session(session_id).complete()
            except ScoresheetError as e:
                return error_result(e)

            self._sessions.pop(session_id, None)
            warning = self._delete_snapshot(session_id)
            if warning is not None:
                result = result.model_copy(update={"warnings": (*result.warnings, warning)})
            logger.info("game completed", winner=result.winner)
            return result

    def reset_session(self, session_id: str) -> bool:
        """Discard a session and its saved progress. Return False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        self._delete_snapshot(session_id)
        logger.info("session reset", session_id=session_id)
        return True

    def save_progress(self, session_id: str) -> SessionSnapshot | ErrorResult:
        """Write a resumable snapshot of the session."""
        try:
            session = self._require_session(session_id)
            snapshot = session.snapshot()
        except ScoresheetError as e:
            return error_result(e)

        if self._snapshot_storage is None:
            return ErrorResult(code=ErrorCode.STORAGE_ERROR, message="no snapshot storage configured")
        with session_context(session_id):
            try:
                self._snapshot_storage.save_snapshot(snapshot)
            except (OSError, ValueError) as e:  # fmt: skip
                logger.exception("failed to save snapshot")
                return ErrorResult(code=ErrorCode.STORAGE_ERROR, message=f"failed to save progress: {e}")
        return snapshot

    def resume_session(self, session_id: str) -> SessionStarted | ErrorResult:
        """Restore a saved session and make it active again."""
        if self._snapshot_storage is None:
            return ErrorResult(code=ErrorCode.STORAGE_ERROR, message="no snapshot storage configured")
        with session_context(session_id):
            try:
                self._check_capacity(session_id)
                snapshot = self._snapshot_storage.load_snapshot(session_id)
                if snapshot is None:
                    raise UnknownSessionError(session_id)
                session = GameSession.from_snapshot(snapshot, self._rules)
            except ScoresheetError as e:
                return error_result(e)
            except (OSError, ValueError) as e:  # fmt: skip
                # pydantic ValidationError is a ValueError
                logger.exception("failed to load snapshot")
                message = "saved session is corrupt" if isinstance(e, ValidationError) else str(e)
                return ErrorResult(code=ErrorCode.STORAGE_ERROR, message=message)

        self._register(session)
        return SessionStarted(
            session_id=session.session_id,
            roster=session.roster,
            round_index=session.current_round_index,
        )

    # --- internals ---

    def _check_capacity(self, session_id: str | None) -> None:
        if session_id is not None and session_id in self._sessions:
            raise SessionExistsError(session_id)
        if len(self._sessions) >= self._max_sessions:
            raise SessionLimitError(f"maximum of {self._max_sessions} active sessions reached")

    def _require_session(self, session_id: str) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        return session

    def _register(self, session: GameSession) -> None:
        if self._score_storage is not None:
            session.add_round_closed_listener(partial(self._save_round_scores, session.actor_id))
        if self._autosave and self._snapshot_storage is not None:
            session.add_round_closed_listener(partial(self._autosave_snapshot, session))
        self._sessions[session.session_id] = session

    def _save_round_scores(self, actor_id: str, event: ClosedRound) -> None:
        if self._score_storage is None:
            return
        self._score_storage.save_round_scores(
            RoundScoreRecord(
                session_id=event.session_id,
                round_number=event.round_number,
                scores=event.scores,
                actor_id=actor_id,
            ),
        )

    def _autosave_snapshot(self, session: GameSession, _event: ClosedRound) -> None:
        if self._snapshot_storage is None:
            return
        self._snapshot_storage.save_snapshot(session.snapshot())

    def _delete_snapshot(self, session_id: str) -> str | None:
        if self._snapshot_storage is None:
            return None
        try:
            self._snapshot_storage.delete_snapshot(session_id)
        except (OSError, ValueError) as e:  # fmt: skip
            logger.exception("failed to delete snapshot", session_id=session_id)
            return f"saved progress was not removed: {e}"
        return None
