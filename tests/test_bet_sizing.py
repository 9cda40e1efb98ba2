"""Tests for bet sizing module."""

import pytest

from range_coach.postflop.bet_sizing import bet_size_bb, min_unit_bb, raise_size_bb, round_bb
from range_coach.strategy.strategy_data import DEFAULT_SIZE_MENU
from range_coach.utils.constants import PostflopAction


class TestBetSize:
    def test_pot_fractions(self):
        assert bet_size_bb(PostflopAction.BET_33, 6.0, DEFAULT_SIZE_MENU, 1) == 2.0
        assert bet_size_bb(PostflopAction.BET_50, 6.0, DEFAULT_SIZE_MENU, 1) == 3.0
        assert bet_size_bb(PostflopAction.BET_75, 6.0, DEFAULT_SIZE_MENU, 1) == 4.5
        assert bet_size_bb(PostflopAction.BET_100, 6.0, DEFAULT_SIZE_MENU, 1) == 6.0

    def test_precision(self):
        assert bet_size_bb(PostflopAction.BET_33, 6.0, DEFAULT_SIZE_MENU, 2) == 1.98
        assert bet_size_bb(PostflopAction.BET_33, 6.0, DEFAULT_SIZE_MENU, 0) == 2.0

    def test_floored_at_one_unit(self):
        assert bet_size_bb(PostflopAction.BET_33, 1.4, DEFAULT_SIZE_MENU, 0) == 1.0
        assert bet_size_bb(PostflopAction.BET_33, 0.1, DEFAULT_SIZE_MENU, 1) == 0.1
        assert min_unit_bb(2) == pytest.approx(0.01)

    def test_capped_at_stack(self):
        assert bet_size_bb(PostflopAction.BET_100, 20.0, DEFAULT_SIZE_MENU, 1, stack_bb=7.5) == 7.5

    def test_custom_menu(self):
        menu = {PostflopAction.BET_50: 0.6}
        assert bet_size_bb(PostflopAction.BET_50, 10.0, menu, 1) == 6.0

    def test_action_not_in_menu(self):
        with pytest.raises(KeyError):
            bet_size_bb(PostflopAction.BET_75, 10.0, {PostflopAction.BET_50: 0.5}, 1)


class TestRaiseSize:
    def test_multiplier(self):
        assert raise_size_bb(3.0, 3.0, 1) == 9.0
        assert raise_size_bb(4.0, 2.5, 1) == 10.0

    def test_capped_at_stack(self):
        assert raise_size_bb(10.0, 3.0, 1, stack_bb=25.0) == 25.0

    def test_round_bb(self):
        assert round_bb(3.14159, 2) == 3.14
        assert round_bb(3.14159, 0) == 3.0
