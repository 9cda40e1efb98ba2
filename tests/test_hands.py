"""Tests for hand notation, the 13×13 grid and range expansion."""

import pytest

from range_coach.strategy.hands import (
    ALL_HANDS,
    GRID_SIZE,
    HAND_COUNT,
    HandNotation,
    HandType,
    Range,
    build_range,
    expand_notation,
    hand_at,
    hand_strength,
    parse_hand_list,
)
from range_coach.utils.constants import Rank


class TestHandNotation:
    def test_parse_pair(self) -> None:
        h = HandNotation.from_str("AA")
        assert h.rank1 == Rank.ACE
        assert h.hand_type == HandType.PAIR

    def test_parse_normalizes_rank_order(self) -> None:
        h = HandNotation.from_str("KAs")
        assert h.rank1 == Rank.ACE
        assert h.rank2 == Rank.KING
        assert str(h) == "AKs"

    @pytest.mark.parametrize("text", ["AKx", "AK", "AAs", "A", "AKso", "1Ks"])
    def test_invalid_notation(self, text) -> None:
        with pytest.raises(ValueError):
            HandNotation.from_str(text)

    @pytest.mark.parametrize("text,combos", [("AA", 6), ("AKs", 4), ("AKo", 12)])
    def test_combo_count(self, text, combos) -> None:
        assert HandNotation.from_str(text).combo_count == combos


class TestGrid:
    def test_169_distinct_hands(self) -> None:
        assert HAND_COUNT == 169
        assert len(set(ALL_HANDS)) == 169

    def test_total_combos(self) -> None:
        assert sum(h.combo_count for h in ALL_HANDS) == 1326

    def test_diagonal_is_pairs(self) -> None:
        for i in range(GRID_SIZE):
            assert hand_at(i, i).hand_type == HandType.PAIR

    def test_suited_above_offsuit_below(self) -> None:
        assert str(hand_at(0, 1)) == "AKs"
        assert str(hand_at(1, 0)) == "AKo"
        assert str(hand_at(12, 11)) == "32o"

    def test_grid_position_roundtrip(self) -> None:
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                hand = hand_at(row, col)
                assert hand.grid_position == (row, col)
                assert ALL_HANDS[hand.index] == hand


class TestExpandNotation:
    def test_plus_pairs(self) -> None:
        assert {str(h) for h in expand_notation("JJ+")} == {"JJ", "QQ", "KK", "AA"}

    def test_plus_suited(self) -> None:
        assert {str(h) for h in expand_notation("ATs+")} == {"ATs", "AJs", "AQs", "AKs"}

    def test_plus_without_suffix(self) -> None:
        assert {str(h) for h in expand_notation("KQ+")} == {"KQs", "KQo"}

    def test_two_ranks_mean_both(self) -> None:
        assert {str(h) for h in expand_notation("AK")} == {"AKs", "AKo"}

    def test_dash_pairs(self) -> None:
        assert [str(h) for h in expand_notation("JJ-88")] == ["JJ", "TT", "99", "88"]

    def test_dash_suited(self) -> None:
        assert [str(h) for h in expand_notation("A5s-A2s")] == ["A5s", "A4s", "A3s", "A2s"]

    def test_dash_mixed_types_rejected(self) -> None:
        with pytest.raises(ValueError):
            expand_notation("A5s-A2o")

    def test_dash_different_high_card_rejected(self) -> None:
        with pytest.raises(ValueError):
            expand_notation("A5s-K2s")

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            expand_notation("  ")

    def test_hand_list_keeps_duplicates(self) -> None:
        assert len(parse_hand_list("AA,QQ+")) == 4


class TestRange:
    def test_build_and_contains(self) -> None:
        r = build_range("QQ+,AKs")
        assert HandNotation.from_str("KK") in r
        assert HandNotation.from_str("AKo") not in r
        assert len(r) == 4

    def test_minus(self) -> None:
        a = build_range("TT+")
        assert len(a.minus(build_range("QQ+"))) == 2

    def test_add_chains(self) -> None:
        r = Range().add("TT+").add("22")
        assert len(r) == 6

    def test_ranked_strongest_first(self) -> None:
        ranked = build_range("22,AA,KK").ranked()
        assert [str(h) for h in ranked] == ["AA", "KK", "22"]

    def test_str_in_grid_order(self) -> None:
        assert str(build_range("KK,AA")) == "AA, KK"


class TestHandStrength:
    def test_aces_strongest(self) -> None:
        aa = hand_strength(HandNotation.from_str("AA"))
        assert aa == pytest.approx(1.0)
        assert all(hand_strength(h) <= aa for h in ALL_HANDS)

    def test_suited_beats_offsuit(self) -> None:
        assert hand_strength(HandNotation.from_str("AKs")) > hand_strength(
            HandNotation.from_str("AKo")
        )
