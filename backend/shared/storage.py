"""Storage abstractions for round scores and resumable session snapshots.

Round score documents hold one JSON object per session with rounds keyed by
round number, so re-sending a round overwrites it instead of duplicating it.
Snapshots hold the raw bids and tricks of a session in progress and are
removed once the game completes. Files are written atomically with
owner-only permissions (0o600) inside an owner-only directory (0o700).
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

from shared.dal.models import RoundScoreRecord, SessionSnapshot

logger = structlog.get_logger()

# Owner-only directory permissions for saved games.
_SAVE_DIR_MODE = 0o700

# Owner-only file permissions for saved game files.
_SAVE_FILE_MODE = 0o600


class RoundScoreStorage(Protocol):
    """Protocol for persisting the final scores of a closed round.

    Implementations must be idempotent: the same round may be sent again.
    """

    def save_round_scores(self, record: RoundScoreRecord) -> None: ...


class SnapshotStorage(Protocol):
    """Protocol for persisting resumable session snapshots."""

    def save_snapshot(self, snapshot: SessionSnapshot) -> None: ...

    def load_snapshot(self, session_id: str) -> SessionSnapshot | None: ...

    def delete_snapshot(self, session_id: str) -> None: ...


def _resolve_target(root: Path, filename: str, session_id: str) -> Path:
    """Resolve a file under root, rejecting ids that escape it."""
    target = (root / filename).resolve()
    if not target.is_relative_to(root):
        raise ValueError(f"Path traversal rejected: '{session_id}' resolves outside save directory")
    return target


def _write_atomic(root: Path, target: Path, content: str) -> None:
    """Write content via temp-file-then-rename with owner-only permissions."""
    root.mkdir(mode=_SAVE_DIR_MODE, parents=True, exist_ok=True)
    root.chmod(_SAVE_DIR_MODE)

    fd, tmp_path = tempfile.mkstemp(dir=str(root), suffix=".tmp", prefix=".save_")
    fd_owned = True
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd_owned = False  # os.fdopen took ownership; it will close fd
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, _SAVE_FILE_MODE)  # noqa: PTH101
        Path(tmp_path).replace(target)
    except BaseException:
        if fd_owned:
            with contextlib.suppress(OSError):
                os.close(fd)
        with contextlib.suppress(OSError):
            Path(tmp_path).unlink()
        raise


def _load_score_document(target: Path) -> dict:
    """Read a score document, raising ValueError when it is not the expected shape."""
    document = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(document, dict) or not isinstance(document.get("rounds"), dict):
        raise ValueError(f"malformed score document: {target.name}")
    return document


class LocalRoundScoreStorage:
    """Keeps one JSON score document per session on the local filesystem."""

    def __init__(self, save_dir: str) -> None:
        self._save_dir = Path(save_dir).resolve()

    def _target(self, session_id: str) -> Path:
        return _resolve_target(self._save_dir, f"scores_{session_id}.json", session_id)

    def save_round_scores(self, record: RoundScoreRecord) -> None:
        """Upsert the round's scores into the session document."""
        target = self._target(record.session_id)
        document: dict = {"session_id": record.session_id, "rounds": {}}
        if target.exists():
            document = _load_score_document(target)
        document["actor_id"] = record.actor_id
        document["rounds"][str(record.round_number)] = record.scores

        _write_atomic(self._save_dir, target, json.dumps(document, indent=2, sort_keys=True))
        logger.info("saved round scores", session_id=record.session_id, round_number=record.round_number)

    def load_round_scores(self, session_id: str) -> dict[int, dict[str, int]]:
        """Return saved scores keyed by round number, empty if none were saved."""
        target = self._target(session_id)
        if not target.exists():
            return {}
        document = _load_score_document(target)
        return {int(number): scores for number, scores in document["rounds"].items()}


class InMemoryRoundScoreStorage:
    """Round score storage kept in process memory."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, int], RoundScoreRecord] = {}

    def save_round_scores(self, record: RoundScoreRecord) -> None:
        self._records[(record.session_id, record.round_number)] = record

    def get_records(self, session_id: str) -> list[RoundScoreRecord]:
        """Return a session's records ordered by round number."""
        return [record for (sid, _), record in sorted(self._records.items()) if sid == session_id]


class LocalSnapshotStorage:
    """Writes session snapshots as game_<session_id>.json files."""

    def __init__(self, save_dir: str) -> None:
        self._save_dir = Path(save_dir).resolve()

    def _target(self, session_id: str) -> Path:
        return _resolve_target(self._save_dir, f"game_{session_id}.json", session_id)

    def save_snapshot(self, snapshot: SessionSnapshot) -> None:
        target = self._target(snapshot.session_id)
        _write_atomic(self._save_dir, target, snapshot.model_dump_json(indent=2))
        logger.info("saved session snapshot", session_id=snapshot.session_id, rounds=len(snapshot.rounds))

    def load_snapshot(self, session_id: str) -> SessionSnapshot | None:
        target = self._target(session_id)
        if not target.exists():
            return None
        return SessionSnapshot.model_validate_json(target.read_text(encoding="utf-8"))

    def delete_snapshot(self, session_id: str) -> None:
        target = self._target(session_id)
        target.unlink(missing_ok=True)
