"""
Round score calculation for the trick-bidding game.

A player's round score depends only on their bid, the tricks they took and
the number of players at the table. Branches are checked from the most
specific penalty band down to the generic made band:

1. missed bid (fewer tricks than bid)
2. double penalty (small bids taking twice the bid or more)
3. overshoot penalty (mid bids exceeding the bid by the margin or more)
4. high-bid flat bonus
5. made bid, with one point per overtrick
"""

from scoresheet.logic.settings import GameRules, get_scoring_bands


def calculate_round_score(
    bid: int,
    tricks_taken: int,
    player_count: int,
    rules: GameRules | None = None,
) -> int:
    """
    Calculate a player's signed score for one round.

    Returns 0 when no bid was placed. Raises UnsupportedPlayerCountError
    for player counts without scoring bands.
    """
    game_rules = rules or GameRules()
    bands = get_scoring_bands(player_count, game_rules)

    if bid <= 0 or tricks_taken < 0:
        return 0

    penalty = -game_rules.miss_penalty_per_bid * bid

    if tricks_taken < bid:
        return penalty

    low, high = bands.double_penalty_bids
    if low <= bid <= high and tricks_taken >= bid * 2:
        return penalty

    if bid >= bands.overshoot_min_bid and tricks_taken >= bid + bands.overshoot_margin:
        return penalty

    if bid >= bands.bonus_min_bid:
        return game_rules.bonus_points_per_bid * bid

    # made band: tricks_taken >= bid is guaranteed by the missed-bid check
    if bid >= bands.min_bid:
        return game_rules.made_points_per_bid * bid + (tricks_taken - bid)

    return 0
