"""Round score formula for 3 and 4 player tables."""

import pytest

from scoresheet.logic.exceptions import UnsupportedPlayerCountError
from scoresheet.logic.scoring import calculate_round_score
from scoresheet.logic.settings import GameRules, ScoringBands, get_min_bid


class TestThreePlayerScoring:
    @pytest.mark.parametrize(
        ("bid", "tricks", "expected"),
        [
            (3, 3, 30),
            (3, 4, 31),
            (3, 5, 32),
            (4, 4, 40),
            (4, 7, 43),
            (5, 5, 50),
            (5, 8, 53),
            (6, 9, 63),
        ],
    )
    def test_made_bid_scores_ten_per_bid_plus_overtricks(self, bid, tricks, expected):
        assert calculate_round_score(bid, tricks, 3) == expected

    @pytest.mark.parametrize(("bid", "tricks"), [(7, 7), (7, 10), (9, 9), (13, 13)])
    def test_high_bid_scores_flat_bonus(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 3) == 20 * bid

    @pytest.mark.parametrize(("bid", "tricks"), [(3, 2), (5, 0), (7, 6), (13, 12)])
    def test_missed_bid_is_penalized(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 3) == -10 * bid

    @pytest.mark.parametrize(("bid", "tricks"), [(3, 6), (4, 8), (4, 13)])
    def test_small_bid_taking_double_is_penalized(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 3) == -10 * bid

    @pytest.mark.parametrize(("bid", "tricks"), [(5, 9), (6, 10), (7, 11), (9, 13)])
    def test_overshoot_by_four_is_penalized(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 3) == -10 * bid

    def test_bid_below_minimum_scores_zero_when_made(self):
        assert calculate_round_score(2, 2, 3) == 0

    def test_bid_below_minimum_still_penalized_when_missed(self):
        assert calculate_round_score(2, 1, 3) == -20


class TestFourPlayerScoring:
    @pytest.mark.parametrize(
        ("bid", "tricks", "expected"),
        [
            (2, 2, 20),
            (2, 3, 21),
            (3, 5, 32),
            (4, 6, 42),
            (5, 7, 52),
        ],
    )
    def test_made_bid_scores_ten_per_bid_plus_overtricks(self, bid, tricks, expected):
        assert calculate_round_score(bid, tricks, 4) == expected

    @pytest.mark.parametrize(("bid", "tricks"), [(6, 6), (6, 8), (8, 8), (13, 13)])
    def test_high_bid_scores_flat_bonus(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 4) == 20 * bid

    @pytest.mark.parametrize(("bid", "tricks"), [(2, 4), (3, 6)])
    def test_small_bid_taking_double_is_penalized(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 4) == -10 * bid

    @pytest.mark.parametrize(("bid", "tricks"), [(4, 7), (5, 8), (6, 9)])
    def test_overshoot_by_three_is_penalized(self, bid, tricks):
        assert calculate_round_score(bid, tricks, 4) == -10 * bid

    def test_bid_of_one_scores_zero_when_made(self):
        assert calculate_round_score(1, 1, 4) == 0

    def test_missed_bid_is_penalized(self):
        assert calculate_round_score(4, 3, 4) == -40


class TestScoringEdgeCases:
    def test_no_bid_scores_zero(self):
        assert calculate_round_score(0, 5, 3) == 0

    def test_negative_tricks_scores_zero(self):
        assert calculate_round_score(3, -1, 3) == 0

    @pytest.mark.parametrize("player_count", [3, 4])
    def test_zero_tricks_with_positive_bid_is_negative(self, player_count):
        assert calculate_round_score(5, 0, player_count) < 0

    @pytest.mark.parametrize("player_count", [2, 5])
    def test_unsupported_player_count_raises(self, player_count):
        with pytest.raises(UnsupportedPlayerCountError, match="not supported"):
            calculate_round_score(3, 3, player_count)

    @pytest.mark.parametrize("player_count", [3, 4])
    def test_every_legal_score_is_penalty_or_at_least_ten_per_bid(self, player_count):
        for bid in range(get_min_bid(player_count), 14):
            for tricks in range(14):
                score = calculate_round_score(bid, tricks, player_count)
                assert score == -10 * bid or score >= 10 * bid, (bid, tricks, score)

    def test_score_is_deterministic(self):
        assert calculate_round_score(5, 6, 3) == calculate_round_score(5, 6, 3)


class TestCustomScoringRules:
    def test_point_values_come_from_rules(self):
        rules = GameRules(made_points_per_bid=5, bonus_points_per_bid=50, miss_penalty_per_bid=1)

        assert calculate_round_score(3, 3, 3, rules) == 15
        assert calculate_round_score(7, 7, 3, rules) == 350
        assert calculate_round_score(3, 2, 3, rules) == -3

    def test_bands_come_from_rules(self):
        bands = ScoringBands(
            min_bid=1,
            double_penalty_bids=(1, 1),
            overshoot_min_bid=13,
            overshoot_margin=13,
            bonus_min_bid=10,
        )
        rules = GameRules(scoring_bands={3: bands})

        assert calculate_round_score(1, 1, 3, rules) == 10
        assert calculate_round_score(1, 2, 3, rules) == -10
        assert calculate_round_score(4, 8, 3, rules) == 44
        assert calculate_round_score(10, 10, 3, rules) == 200
