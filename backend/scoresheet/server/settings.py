"""Scoresheet service configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ScoresheetSettings(BaseSettings):
    model_config = {"env_prefix": "SCORESHEET_"}

    max_sessions: int = Field(default=100, ge=1)
    log_dir: str | None = Field(default=None, min_length=1)
    save_dir: str = Field(default="backend/data/gamesaves", min_length=1)
    persist_rounds: bool = True
    autosave: bool = False
