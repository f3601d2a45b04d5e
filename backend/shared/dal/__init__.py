"""Data access layer: shared persistence models."""

from shared.dal.models import RoundScoreRecord, RoundSnapshot, SessionSnapshot

__all__ = [
    "RoundScoreRecord",
    "RoundSnapshot",
    "SessionSnapshot",
]
