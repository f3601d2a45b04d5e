"""Persistence models for the data access layer."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class RoundScoreRecord(BaseModel, frozen=True):
    """Final scores of one closed round, sent to the score sink after the round locks."""

    session_id: str
    round_number: int  # 1-based
    scores: dict[str, int]  # player name -> final score
    actor_id: str = ""  # authenticated user who runs the sheet; opaque to the engine


class RoundSnapshot(BaseModel, frozen=True):
    """Raw inputs of one round. Final scores are recomputed on restore, never stored."""

    bids: list[int | None]
    tricks_taken: list[int | None]
    closed: bool = False


class SessionSnapshot(BaseModel, frozen=True):
    """Resumable copy of a game session in progress."""

    session_id: str
    roster: list[str]
    actor_id: str = ""
    phase: Literal["in_progress", "finished"] = "in_progress"
    rounds: list[RoundSnapshot] = Field(default_factory=list)
    saved_at: datetime | None = None
