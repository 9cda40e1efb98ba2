"""Tests for the range merge: deltas, clipping, dominant labels and ties."""

import itertools

import numpy as np
import pytest

from range_coach.strategy.range_merge import (
    build_grid,
    build_legend,
    dominant_label,
    merge_frequencies,
)
from range_coach.strategy.strategy_data import BaselineKey, StrategyData
from range_coach.utils.constants import (
    GameFormat,
    RangeCategory,
    Seat,
    Spot,
    StackBucket,
    Tendency,
)

RAISE = RangeCategory.RAISE
BLUFF = RangeCategory.BLUFF
CALL = RangeCategory.CALL
FOLD = RangeCategory.FOLD
ALL_IN = RangeCategory.ALL_IN

_KEY = BaselineKey(GameFormat.CASH, None, Seat.BTN, Spot.RFI, StackBucket.DEEP)


def _adj(tendency: str, bucket: str, hands: dict) -> dict:
    return {"tendency": tendency, "stage": "*", "stack_bucket": bucket, "hands": hands}


def _load(hands: dict, adjustments: list[dict] | None = None) -> StrategyData:
    return StrategyData.from_dict({
        "baseline": [{
            "format": "CASH", "stage": None, "seat": "BTN", "spot": "RFI",
            "stack_bucket": ">80bb", "hands": hands,
        }],
        "adjustments": adjustments or [],
    })


_BASE_HANDS = {
    "QQ+": {"Raise_Orange": 1.0},
    "A5s": {"Raise_Orange": 0.5, "Bluff_Purple": 0.3},
    "KJo": {"Raise_Orange": 0.5},
    "76s": {"Bluff_Purple": 0.4},
}


# ---------------------------------------------------------------------------
# Dominant label
# ---------------------------------------------------------------------------


class TestDominantLabel:
    def test_highest_frequency_wins(self):
        assert dominant_label({CALL: 0.4, FOLD: 0.6}) == (FOLD, False)

    def test_exact_tie_uses_priority(self):
        assert dominant_label({CALL: 0.5, RAISE: 0.5, FOLD: 0.0}) == (RAISE, True)

    def test_tie_within_tolerance(self):
        assert dominant_label({CALL: 0.3 + 1e-12, BLUFF: 0.3, FOLD: 0.3}) == (BLUFF, True)

    def test_all_in_beats_everything_on_tie(self):
        freqs = {c: 0.2 for c in RangeCategory}
        assert dominant_label(freqs) == (ALL_IN, True)

    def test_fold_loses_ties(self):
        assert dominant_label({RAISE: 0.5, FOLD: 0.5}) == (RAISE, True)


# ---------------------------------------------------------------------------
# Grid construction
# ---------------------------------------------------------------------------


class TestBuildGrid:
    def test_grid_shape_and_bounds(self):
        data = _load(_BASE_HANDS)
        result = build_grid(data.baseline_for(_KEY))
        assert len(result.grid) == 13
        assert all(len(row) == 13 for row in result.grid)
        cells = list(result.iter_cells())
        assert len({c.hand for c in cells}) == 169
        for cell in cells:
            assert 0.0 <= cell.frequency <= 1.0
            assert cell.dominant in RangeCategory
            assert all(0.0 <= f <= 1.0 for f in cell.mix.frequencies.values())

    def test_unlisted_hand_folds(self):
        result = build_grid(_load(_BASE_HANDS).baseline_for(_KEY))
        cell = result.cell("72o")
        assert cell.dominant == FOLD
        assert cell.frequency == 1.0

    def test_mixed_hand(self):
        result = build_grid(_load(_BASE_HANDS).baseline_for(_KEY))
        mix = result.cell("A5s").mix
        assert mix.dominant == RAISE
        assert mix.frequency(BLUFF) == pytest.approx(0.3)
        assert mix.frequency(FOLD) == pytest.approx(0.2)
        assert not mix.tie_broken

    def test_half_raise_half_fold_tie(self):
        result = build_grid(_load(_BASE_HANDS).baseline_for(_KEY))
        cell = result.cell("KJo")
        assert cell.dominant == RAISE
        assert cell.mix.tie_broken

    def test_regions(self):
        result = build_grid(_load(_BASE_HANDS).baseline_for(_KEY))
        assert set(result.region(RAISE)) == {"AA", "KK", "QQ", "A5s", "KJo"}
        assert result.region(BLUFF) == []
        assert result.region(CALL) == []
        assert len(result.region(FOLD)) == 169 - 5  # 76s bluffs only 40%

    def test_cell_position_matches_hand(self):
        result = build_grid(_load(_BASE_HANDS).baseline_for(_KEY))
        assert result.grid[0][0].hand == "AA"
        assert result.grid[0][1].hand == "AKs"
        assert result.grid[1][0].hand == "AKo"
        assert result.cell("AKo").row == 1

    def test_key_and_adjustments_recorded(self):
        data = _load(_BASE_HANDS, [_adj("TAG", "*", {"76s": {"Bluff_Purple": 0.3}})])
        result = build_grid(
            data.baseline_for(_KEY), data.adjustments_for(Tendency.TAG, None, StackBucket.DEEP)
        )
        assert result.key == "CASH/-/BTN/RFI/>80bb"
        assert result.adjustments == ("TAG/*/*",)
        assert result.cell("76s").dominant == BLUFF


class TestLegend:
    def test_only_offered_categories_and_fold(self):
        legend = build_legend(frozenset({RAISE, BLUFF}))
        assert list(legend) == [RAISE, BLUFF, FOLD]

    def test_grid_legend(self):
        result = build_grid(_load(_BASE_HANDS).baseline_for(_KEY))
        assert CALL not in result.legend
        assert result.legend[FOLD] == "Fold"


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


class TestMerge:
    def test_positive_delta_clipped_at_one(self):
        data = _load(_BASE_HANDS, [_adj("TAG", "*", {"AA": {"Raise_Orange": 0.5}})])
        merged = merge_frequencies(data.baseline_for(_KEY), data.adjustments)
        result = build_grid(data.baseline_for(_KEY), data.adjustments)
        assert merged.max() <= 1.0
        assert result.cell("AA").frequency == 1.0

    def test_negative_delta_clipped_at_zero(self):
        data = _load(_BASE_HANDS, [_adj("TAG", "*", {"76s": {"Bluff_Purple": -0.9}})])
        result = build_grid(data.baseline_for(_KEY), data.adjustments)
        mix = result.cell("76s").mix
        assert mix.frequency(BLUFF) == 0.0
        assert mix.frequency(FOLD) == 1.0

    def test_delta_ignored_for_category_spot_lacks(self):
        data = _load(_BASE_HANDS, [_adj("TAG", "*", {"KJo": {"Call_Green": 0.8}})])
        result = build_grid(data.baseline_for(_KEY), data.adjustments)
        mix = result.cell("KJo").mix
        assert mix.frequency(CALL) == 0.0
        assert CALL not in mix.frequencies
        assert result.region(CALL) == []

    def test_baseline_matrix_untouched(self):
        data = _load(_BASE_HANDS, [_adj("TAG", "*", {"AA": {"Raise_Orange": -0.5}})])
        table = data.baseline_for(_KEY)
        before = table.frequencies.copy()
        merge_frequencies(table, data.adjustments)
        assert np.array_equal(table.frequencies, before)

    def test_order_independent(self):
        adjustments = [
            _adj("TAG", "*", {"A5s,KJo": {"Raise_Orange": 0.1, "Bluff_Purple": 0.7}}),
            _adj("*", "*", {"A5s,76s": {"Raise_Orange": 0.2, "Bluff_Purple": -0.3}}),
            _adj("TAG", ">80bb", {"A5s,KJo,76s": {"Raise_Orange": -0.3, "Bluff_Purple": 0.1}}),
        ]
        data = _load(_BASE_HANDS, adjustments)
        table = data.baseline_for(_KEY)
        applied = data.adjustments_for(Tendency.TAG, None, StackBucket.DEEP)
        assert len(applied) == 3

        reference = merge_frequencies(table, applied)
        reference_grid = build_grid(table, applied).grid
        for perm in itertools.permutations(applied):
            assert np.array_equal(merge_frequencies(table, list(perm)), reference)
            assert build_grid(table, list(perm)).grid == reference_grid

    def test_authoring_order_irrelevant(self):
        first = _adj("TAG", "*", {"A5s": {"Bluff_Purple": 0.1}})
        second = _adj("*", "*", {"A5s": {"Bluff_Purple": 0.2}})
        a = _load(_BASE_HANDS, [first, second])
        b = _load(_BASE_HANDS, [second, first])
        grid_a = build_grid(a.baseline_for(_KEY), a.adjustments_for(Tendency.TAG, None, StackBucket.DEEP))
        grid_b = build_grid(b.baseline_for(_KEY), b.adjustments_for(Tendency.TAG, None, StackBucket.DEEP))
        assert grid_a.grid == grid_b.grid
