"""Tests for the heuristic postflop decision engine."""

import pytest

from range_coach.core.context import HistoryEntry, PostflopContext, PreflopContext
from range_coach.core.errors import ErrorCode, LegalityError
from range_coach.core.results import RankedAction
from range_coach.postflop.board_texture import TextureClass, analyze_board, classify_texture
from range_coach.postflop.decision_engine import (
    TIE_BREAK_ORDER,
    PostflopDecisionEngine,
    tie_break_key,
)
from range_coach.postflop.legality import replay
from range_coach.utils.card import parse_board
from range_coach.utils.constants import (
    Actor,
    GameFormat,
    PostflopAction,
    PotCategory,
    Seat,
    Spot,
    Tendency,
    TournamentStage,
)

A = PostflopAction
HERO = Actor.HERO
VILLAIN = Actor.VILLAIN


def _pre(tendency=Tendency.GTO, stage=None) -> PreflopContext:
    fmt = GameFormat.TOURNAMENT if stage else GameFormat.CASH
    return PreflopContext(fmt, Seat.BTN, Spot.RFI, 100.0, tendency=tendency, stage=stage)


def _post(board="Ks 7d 2c", history=(), to_act=HERO, pot=6.0, spr=10.0,
          pot_category=PotCategory.SRP) -> PostflopContext:
    return PostflopContext(
        pot_category=pot_category,
        board=parse_board(board),
        to_act=to_act,
        pot_bb=pot,
        spr=spr,
        history=tuple(HistoryEntry(actor, action) for actor, action in history),
    )


def _decide(pre=None, post=None, **kwargs):
    pre = pre or _pre()
    post = post or _post()
    return PostflopDecisionEngine().decide(
        pre, post.board, post.pot_category, post.spr, replay(post), **kwargs,
    )


def _ev(decision, action) -> float:
    if decision.best == action:
        return decision.ev
    return next(r.ev for r in decision.alternatives if r.action == action)


# ---------------------------------------------------------------------------
# Board texture
# ---------------------------------------------------------------------------


class TestBoardTexture:
    @pytest.mark.parametrize("board,expected", [
        ("Ks 7d 2c", TextureClass.DRY),
        ("Jh Th 4c", TextureClass.WET),
        ("9s 8d 7c", TextureClass.WET),
        ("Qs 8s 3s", TextureClass.WET),
        ("8s 8d 3c", TextureClass.PAIRED),
        ("As Ad Ks", TextureClass.PAIRED),
    ])
    def test_classes(self, board, expected):
        assert classify_texture(analyze_board(parse_board(board))) == expected

    def test_wheel_cards_connected(self):
        assert analyze_board(parse_board("As 4d 3c")).is_connected

    def test_flags(self):
        texture = analyze_board(parse_board("Ah Kh Qh"))
        assert texture.is_monotone
        assert texture.num_broadway == 3
        assert texture.high_card_rank == 14

    def test_empty_board(self):
        assert analyze_board([]).high_card_rank == 0


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


class TestRanking:
    def test_best_is_legal(self):
        decision = _decide()
        assert decision.best in decision.legal_actions
        assert {r.action for r in decision.alternatives} | {decision.best} == set(
            decision.legal_actions
        )

    def test_alternatives_descending(self):
        decision = _decide()
        evs = [decision.ev] + [r.ev for r in decision.alternatives]
        assert evs == sorted(evs, reverse=True)

    def test_dry_board_in_position_small_bet(self):
        post = _post(history=[(VILLAIN, A.CHECK)], to_act=HERO)
        decision = _decide(post=post)
        assert decision.best == A.BET_33
        assert decision.size_bb == 2.0  # 0.33 × 6 rounded to 0.1
        assert decision.signals["texture"] == "dry"
        assert decision.signals["position"] == "IP"

    def test_wet_board_out_of_position_big_bet(self):
        decision = _decide(post=_post(board="Jh Th 4c"))
        assert decision.best == A.BET_75
        assert decision.size_bb == 4.5
        assert decision.signals["position"] == "OOP"

    def test_high_spr_prefers_check_over_half_pot(self):
        decision = _decide(post=_post(board="8s 8d 3c", spr=15.0))
        assert _ev(decision, A.CHECK) > _ev(decision, A.BET_50)
        assert decision.signals["spr"] == "high"

    def test_low_spr_favors_raise_facing_lead(self):
        post = _post(board="Jh Th 4c", history=[(VILLAIN, A.BET_50)], to_act=HERO, spr=2.0)
        decision = _decide(post=post)
        assert decision.best == A.RAISE
        assert decision.size_bb == 9.0  # 3 × the 3bb bet, under the 12bb stack

    def test_facing_check_raise_spot(self):
        post = _post(history=[(HERO, A.CHECK), (VILLAIN, A.BET_50)], to_act=HERO)
        decision = _decide(post=post)
        assert set(decision.legal_actions) == {A.FOLD, A.CALL, A.CHECK_RAISE}
        assert decision.best in decision.legal_actions

    def test_call_size_is_bet_faced(self):
        post = _post(history=[(VILLAIN, A.BET_50)], to_act=HERO)
        decision = _decide(post=post)
        call = next(r for r in (decision.alternatives + (
            RankedAction(decision.best, decision.size_bb, decision.ev),
        )) if r.action == A.CALL)
        assert call.size_bb == 3.0

    def test_fold_and_check_have_no_size(self):
        decision = _decide(post=_post(history=[(VILLAIN, A.BET_50)], to_act=HERO))
        fold = [r for r in decision.alternatives if r.action == A.FOLD]
        assert fold and fold[0].size_bb is None


class TestSignals:
    def test_tight_opponent_raises_bluff_class(self):
        post = _post(history=[(VILLAIN, A.CHECK)], to_act=HERO)
        gto = _decide(pre=_pre(Tendency.GTO), post=post)
        nit = _decide(pre=_pre(Tendency.NIT), post=post)
        assert _ev(nit, A.BET_75) > _ev(gto, A.BET_75)
        assert _ev(nit, A.CHECK) == pytest.approx(_ev(gto, A.CHECK))

    def test_passive_opponent_raises_value_sizes(self):
        post = _post(history=[(VILLAIN, A.CHECK)], to_act=HERO)
        gto = _decide(pre=_pre(Tendency.GTO), post=post)
        fish = _decide(pre=_pre(Tendency.FISH), post=post)
        assert _ev(fish, A.BET_75) > _ev(gto, A.BET_75)

    def test_aggressive_opponent_favors_check_call(self):
        post = _post(history=[(VILLAIN, A.BET_50)], to_act=HERO)
        gto = _decide(pre=_pre(Tendency.GTO), post=post)
        maniac = _decide(pre=_pre(Tendency.MANIAC), post=post)
        assert _ev(maniac, A.CALL) > _ev(gto, A.CALL)

    def test_bubble_penalizes_variance(self):
        post = _post(history=[(VILLAIN, A.BET_50)], to_act=HERO)
        cash = _decide(pre=_pre(), post=post)
        bubble = _decide(pre=_pre(stage=TournamentStage.NEAR_BUBBLE), post=post)
        assert _ev(bubble, A.RAISE) < _ev(cash, A.RAISE)
        assert _ev(bubble, A.FOLD) == pytest.approx(_ev(cash, A.FOLD))
        assert bubble.signals["risk_tier"] == "LOW"

    def test_deterministic(self):
        assert _decide() == _decide()


class TestTieBreak:
    def test_order_covers_every_action(self):
        assert set(TIE_BREAK_ORDER) == set(PostflopAction)

    def test_standard_size_before_extreme(self):
        ranked = sorted(
            [RankedAction(A.BET_100, 6.0, 0.1), RankedAction(A.BET_75, 4.5, 0.1)],
            key=tie_break_key,
        )
        assert ranked[0].action == A.BET_75

    def test_value_before_passive(self):
        ranked = sorted(
            [RankedAction(A.CHECK, None, 0.05), RankedAction(A.CALL, 3.0, 0.05)],
            key=tie_break_key,
        )
        assert ranked[0].action == A.CALL

    def test_ev_beats_priority(self):
        ranked = sorted(
            [RankedAction(A.BET_75, 4.5, 0.01), RankedAction(A.FOLD, None, 0.02)],
            key=tie_break_key,
        )
        assert ranked[0].action == A.FOLD


# ---------------------------------------------------------------------------
# Output and errors
# ---------------------------------------------------------------------------


class TestDecisionOutput:
    def test_reasoning_names_action(self):
        decision = _decide(post=_post(history=[(VILLAIN, A.CHECK)], to_act=HERO))
        assert decision.reasoning.startswith("Bet_33 2bb")
        assert "dry texture" in decision.reasoning

    def test_alternatives_optional(self):
        assert _decide(include_alternatives=False).alternatives == ()

    def test_history_carried(self):
        post = _post(history=[(VILLAIN, A.CHECK)], to_act=HERO)
        assert [str(e) for e in _decide(post=post).history] == ["Villain:Check"]

    def test_street_complete(self):
        post = _post(history=[(HERO, A.CHECK), (VILLAIN, A.CHECK)], to_act=HERO)
        with pytest.raises(LegalityError) as exc:
            _decide(post=post)
        assert exc.value.code == ErrorCode.STREET_COMPLETE

    def test_villain_to_act(self):
        with pytest.raises(LegalityError) as exc:
            _decide(post=_post(to_act=VILLAIN))
        assert exc.value.code == ErrorCode.WRONG_ACTOR
