"""Centralized game rules for the scoresheet - all configurable scoring constants."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from scoresheet.logic.exceptions import UnsupportedPlayerCountError, UnsupportedSettingsError

NUM_TRICKS = 13
MAX_ROUNDS = 13


class ScoringBands(BaseModel):
    """
    Bid thresholds that drive the round score formula for one player count.

    The made band is ``min_bid <= bid < bonus_min_bid``.
    """

    model_config = ConfigDict(frozen=True)

    min_bid: int
    # inclusive (low, high) bids penalized when tricks reach twice the bid
    double_penalty_bids: tuple[int, int]
    # bids at or above this are penalized when tricks reach bid + overshoot_margin
    overshoot_min_bid: int
    overshoot_margin: int
    # bids at or above this score a flat 20 per bid
    bonus_min_bid: int


DEFAULT_SCORING_BANDS: dict[int, ScoringBands] = {
    3: ScoringBands(
        min_bid=3,
        double_penalty_bids=(1, 4),
        overshoot_min_bid=5,
        overshoot_margin=4,
        bonus_min_bid=7,
    ),
    4: ScoringBands(
        min_bid=2,
        double_penalty_bids=(2, 3),
        overshoot_min_bid=4,
        overshoot_margin=3,
        bonus_min_bid=6,
    ),
}


class GameRules(BaseModel):
    """
    Configuration for all scoresheet rules.

    All fields have default values matching the canonical rule set.
    """

    model_config = ConfigDict(frozen=True)

    # --- Game Structure ---
    max_rounds: int = MAX_ROUNDS
    total_tricks: int = NUM_TRICKS

    # --- Entry Ranges ---
    max_bid: int = NUM_TRICKS
    min_tricks: int = 0

    # --- Scoring ---
    miss_penalty_per_bid: int = 10
    made_points_per_bid: int = 10
    bonus_points_per_bid: int = 20
    scoring_bands: dict[int, ScoringBands] = Field(default_factory=lambda: dict(DEFAULT_SCORING_BANDS))

    @property
    def supported_player_counts(self) -> tuple[int, ...]:
        return tuple(sorted(self.scoring_bands))

    @property
    def max_tricks(self) -> int:
        return self.total_tricks


def validate_rules(rules: GameRules) -> None:
    """Validate that all rule values are supported by the engine.

    Raises UnsupportedSettingsError listing every unsupported value.
    """
    errors: list[str] = []

    if rules.max_rounds < 1:
        errors.append(f"max_rounds={rules.max_rounds} must be at least 1")

    if rules.total_tricks < 1:
        errors.append(f"total_tricks={rules.total_tricks} must be at least 1")

    if rules.min_tricks != 0:
        errors.append(f"min_tricks={rules.min_tricks} is not supported (only 0)")

    if not rules.scoring_bands:
        errors.append("scoring_bands must define at least one player count")

    for player_count, bands in sorted(rules.scoring_bands.items()):
        if player_count < 2:  # noqa: PLR2004
            errors.append(f"player count {player_count} is not supported")
        if not (1 <= bands.min_bid <= rules.max_bid):
            errors.append(f"min_bid={bands.min_bid} for {player_count} players must be within 1-{rules.max_bid}")
        if bands.bonus_min_bid <= bands.min_bid:
            errors.append(f"bonus_min_bid must exceed min_bid for {player_count} players")
        low, high = bands.double_penalty_bids
        if low > high:
            errors.append(f"double_penalty_bids={bands.double_penalty_bids} for {player_count} players is empty")

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))


def get_scoring_bands(player_count: int, rules: GameRules | None = None) -> ScoringBands:
    """Return the scoring bands for a player count.

    Raises UnsupportedPlayerCountError when the rules define no bands for it.
    """
    game_rules = rules or GameRules()
    bands = game_rules.scoring_bands.get(player_count)
    if bands is None:
        raise UnsupportedPlayerCountError(
            f"player_count={player_count} is not supported, expected one of {game_rules.supported_player_counts}"
        )
    return bands


def get_min_bid(player_count: int, rules: GameRules | None = None) -> int:
    """Lowest legal bid for a player count (3 players: 3, 4 players: 2)."""
    return get_scoring_bands(player_count, rules).min_bid
