"""Tests for the generated built-in strategy data set."""

import pytest

from range_coach.strategy.builtin_data import (
    BUILTIN_VERSION,
    OPENING_RANGES,
    generate_strategy_data,
    load_builtin_data,
    seats_for_spot,
)
from range_coach.strategy.strategy_data import BaselineKey
from range_coach.utils.constants import (
    GameFormat,
    RangeCategory,
    Seat,
    Spot,
    StackBucket,
    Tendency,
    TournamentStage,
)

_STAGES = [(GameFormat.CASH, None)] + [
    (GameFormat.TOURNAMENT, stage) for stage in TournamentStage
]


@pytest.fixture(scope="module")
def data():
    return load_builtin_data()


class TestSeatsForSpot:
    def test_rfi_excludes_bb(self):
        seats = seats_for_spot(Spot.RFI)
        assert Seat.BB not in seats
        assert Seat.UTG in seats

    def test_facing_spots_exclude_utg(self):
        for spot in (Spot.VS_OPEN, Spot.VS_3BET, Spot.VS_4BET, Spot.VS_ALL_IN, Spot.VS_LIMP):
            seats = seats_for_spot(spot)
            assert Seat.UTG not in seats
            assert Seat.BB in seats

    def test_bvb_blinds_only(self):
        assert seats_for_spot(Spot.BVB) == [Seat.SB, Seat.BB]


class TestCoverage:
    def test_version(self, data):
        assert data.version == BUILTIN_VERSION

    def test_every_combination_has_a_table(self, data):
        expected = 0
        for fmt, stage in _STAGES:
            for spot in Spot:
                for seat in seats_for_spot(spot):
                    for bucket in StackBucket:
                        key = BaselineKey(fmt, stage, seat, spot, bucket)
                        assert data.baseline_for(key) is not None, str(key)
                        expected += 1
        assert len(data) == expected

    def test_opening_ranges_widen_toward_button(self):
        def combos(seat):
            return sum(h.combo_count for h in OPENING_RANGES[seat].hands)

        assert combos(Seat.UTG) < combos(Seat.CO) < combos(Seat.BTN)

    def test_generated_dict_is_json_shaped(self):
        raw = generate_strategy_data()
        assert raw["version"] == BUILTIN_VERSION
        assert {"baseline", "adjustments", "size_menu"} <= set(raw)
        entry = raw["baseline"][0]
        assert set(entry) == {"format", "stage", "seat", "spot", "stack_bucket", "hands"}

    def test_cached(self):
        assert load_builtin_data() is load_builtin_data()


class TestTableContents:
    def test_rfi_never_calls(self, data):
        for fmt, stage in _STAGES:
            for seat in seats_for_spot(Spot.RFI):
                for bucket in StackBucket:
                    table = data.baseline_for(BaselineKey(fmt, stage, seat, Spot.RFI, bucket))
                    assert RangeCategory.CALL not in table.offered

    def test_only_sb_limps_first_in(self, data):
        for seat in seats_for_spot(Spot.RFI):
            table = data.baseline_for(
                BaselineKey(GameFormat.CASH, None, seat, Spot.RFI, StackBucket.DEEP)
            )
            assert (RangeCategory.LIMP in table.offered) == (seat == Seat.SB)

    def test_shallow_opens_are_all_in(self, data):
        table = data.baseline_for(
            BaselineKey(GameFormat.CASH, None, Seat.BTN, Spot.RFI, StackBucket.SHALLOW)
        )
        assert RangeCategory.ALL_IN in table.offered

    def test_bubble_removes_rfi_bluffs(self, data):
        table = data.baseline_for(BaselineKey(
            GameFormat.TOURNAMENT, TournamentStage.NEAR_BUBBLE, Seat.BTN, Spot.RFI, StackBucket.DEEP,
        ))
        assert RangeCategory.BLUFF not in table.offered

    def test_cash_rfi_bluffs(self, data):
        table = data.baseline_for(
            BaselineKey(GameFormat.CASH, None, Seat.BTN, Spot.RFI, StackBucket.DEEP)
        )
        assert RangeCategory.BLUFF in table.offered

    def test_frequencies_bounded(self, data):
        for key in data.baseline_keys:
            matrix = data.baseline_for(key).frequencies
            assert matrix.min() >= 0.0
            assert matrix.sum(axis=1).max() <= 1.0 + 1e-6


class TestAdjustments:
    def test_gto_has_no_adjustments_in_cash(self, data):
        assert data.adjustments_for(Tendency.GTO, None, StackBucket.DEEP) == ()

    @pytest.mark.parametrize("tendency", [
        Tendency.TAG, Tendency.LAG, Tendency.NIT, Tendency.FISH, Tendency.MANIAC,
    ])
    def test_each_exploit_profile_has_one(self, data, tendency):
        assert len(data.adjustments_for(tendency, None, StackBucket.DEEP)) == 1

    def test_bubble_adjustment_stacks_with_tendency(self, data):
        applied = data.adjustments_for(Tendency.TAG, TournamentStage.NEAR_BUBBLE, StackBucket.MID)
        assert len(applied) == 2

    def test_no_bubble_adjustment_in_money(self, data):
        assert data.adjustments_for(Tendency.GTO, TournamentStage.IN_THE_MONEY, StackBucket.MID) == ()
