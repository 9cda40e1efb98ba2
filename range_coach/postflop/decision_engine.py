"""Heuristic postflop decision engine.

Ranks the legal actions for Hero by a synthetic EV score, a weighted sum
of independent signals:

  texture    dry boards favor small bets, wet boards big bets and
             check-raises, paired boards small bets and checks
  position   in position favors betting, out of position checking
  pot        3-bet and 4-bet pots favor small bets and commitment
  spr        low SPR favors commitment, high SPR small bets and checks
  tendency   tight opponents raise bluff-class weights, passive ones
             value sizes, aggressive ones check/call lines
  risk       tournament risk tiers penalize high-variance actions

This is not a solved equilibrium. Scores are comparable only within one
decision.
"""

from __future__ import annotations

import logging
from typing import Mapping

from range_coach.core.context import PreflopContext
from range_coach.core.errors import ErrorCode, LegalityError
from range_coach.core.results import Decision, RankedAction
from range_coach.postflop.board_texture import TextureClass, analyze_board, classify_texture
from range_coach.postflop.legality import StreetState
from range_coach.strategy.bucketing import bucket_spr, risk_tier
from range_coach.utils.card import Card
from range_coach.utils.constants import (
    AGGRESSIVE_TENDENCIES,
    PASSIVE_TENDENCIES,
    TIGHT_TENDENCIES,
    Actor,
    PostflopAction,
    PotCategory,
    RiskTier,
    Tendency,
)

logger = logging.getLogger("range_coach.postflop")

A = PostflopAction

# Value over bluff, standard sizes over extremes, aggression over passivity
TIE_BREAK_ORDER: tuple[PostflopAction, ...] = (
    A.BET_75, A.BET_50, A.BET_33, A.BET_100,
    A.RAISE, A.CHECK_RAISE, A.CALL, A.CHECK, A.FOLD,
)
_TIE_RANK = {action: i for i, action in enumerate(TIE_BREAK_ORDER)}

_BASE_EV: dict[PostflopAction, float] = {
    A.CHECK: 0.0, A.BET_33: 0.04, A.BET_50: 0.04, A.BET_75: 0.03,
    A.BET_100: 0.0, A.CALL: 0.02, A.RAISE: 0.0, A.CHECK_RAISE: 0.0,
    A.FOLD: -0.03,
}

_TEXTURE_WEIGHTS: dict[TextureClass, dict[PostflopAction, float]] = {
    TextureClass.DRY: {
        A.BET_33: 0.10, A.BET_50: 0.03, A.BET_75: -0.03, A.BET_100: -0.06,
        A.RAISE: -0.02, A.CHECK_RAISE: -0.04, A.CALL: 0.02, A.FOLD: -0.02,
    },
    TextureClass.WET: {
        A.BET_33: -0.04, A.BET_50: 0.03, A.BET_75: 0.08, A.BET_100: 0.03,
        A.RAISE: 0.04, A.CHECK_RAISE: 0.06, A.CHECK: -0.02,
    },
    TextureClass.PAIRED: {
        A.BET_33: 0.08, A.BET_75: -0.04, A.BET_100: -0.06,
        A.RAISE: -0.04, A.CHECK_RAISE: -0.02, A.CHECK: 0.03, A.CALL: 0.03,
        A.FOLD: -0.02,
    },
}

_POSITION_WEIGHTS: dict[bool, dict[PostflopAction, float]] = {
    True: {A.BET_33: 0.03, A.BET_50: 0.03, A.BET_75: 0.03, A.BET_100: 0.02, A.CALL: 0.02},
    False: {A.CHECK: 0.03, A.CHECK_RAISE: 0.02, A.BET_100: -0.01},
}

_POT_WEIGHTS: dict[PotCategory, dict[PostflopAction, float]] = {
    PotCategory.SRP: {},
    PotCategory.THREE_BET: {A.BET_33: 0.03, A.BET_100: -0.02, A.RAISE: 0.02},
    PotCategory.FOUR_BET: {
        A.BET_33: 0.04, A.BET_100: 0.03, A.RAISE: 0.03, A.CHECK_RAISE: 0.03,
        A.FOLD: -0.04,
    },
    PotCategory.LIMPED: {A.BET_50: 0.02, A.BET_75: 0.02, A.CHECK: -0.01},
}

_SPR_WEIGHTS: dict[str, dict[PostflopAction, float]] = {
    "low": {
        A.BET_75: 0.06, A.BET_100: 0.06, A.RAISE: 0.06, A.CHECK_RAISE: 0.06,
        A.CALL: 0.02, A.CHECK: -0.03, A.FOLD: -0.04,
    },
    "medium": {},
    "high": {
        A.BET_33: 0.03, A.CHECK: 0.03, A.BET_100: -0.05, A.RAISE: -0.03,
        A.CHECK_RAISE: -0.03,
    },
}

_BLUFF_CLASS = (A.BET_75, A.BET_100, A.RAISE, A.CHECK_RAISE)
_VALUE_SIZES = (A.BET_50, A.BET_75, A.BET_100)

# Relative variance of each action, scaled by the risk tier penalty
_VARIANCE: dict[PostflopAction, float] = {
    A.FOLD: 0.0, A.CHECK: 0.0, A.CALL: 0.3, A.BET_33: 0.2, A.BET_50: 0.3,
    A.BET_75: 0.45, A.BET_100: 0.6, A.RAISE: 0.8, A.CHECK_RAISE: 0.8,
}
_RISK_PENALTY: dict[RiskTier, float] = {
    RiskTier.LOW: 0.12,
    RiskTier.CAUTIOUS: 0.06,
    RiskTier.NORMAL: 0.0,
}


def _tendency_weights(tendency: Tendency) -> dict[PostflopAction, float]:
    weights: dict[PostflopAction, float] = {}
    if tendency in TIGHT_TENDENCIES:
        boost = 0.06 if tendency == Tendency.NIT else 0.04
        for action in _BLUFF_CLASS:
            weights[action] = boost
        weights[A.CALL] = -0.02
    elif tendency in PASSIVE_TENDENCIES:
        for action in _VALUE_SIZES:
            weights[action] = 0.05
        weights[A.RAISE] = -0.02
        weights[A.CHECK_RAISE] = -0.02
    elif tendency in AGGRESSIVE_TENDENCIES:
        boost = 0.06 if tendency == Tendency.MANIAC else 0.04
        weights[A.CHECK] = boost
        weights[A.CALL] = boost
        weights[A.CHECK_RAISE] = 0.02
        weights[A.FOLD] = -0.03
    return weights


def tie_break_key(ranked: RankedAction) -> tuple[float, int]:
    """Sort key: EV descending, then fixed priority."""
    return (-round(ranked.ev, 6), _TIE_RANK[ranked.action])


class PostflopDecisionEngine:
    """Scores Hero's legal actions and picks the best one."""

    @staticmethod
    def signal_weights(
        pre: PreflopContext,
        board: tuple[Card, ...],
        pot_category: PotCategory,
        spr: float,
        hero_in_position: bool,
    ) -> tuple[dict[str, str], dict[str, Mapping[PostflopAction, float]]]:
        """Resolve the signal labels and their per-action weight tables."""
        texture = classify_texture(analyze_board(board))
        spr_bucket = bucket_spr(spr)
        tier = risk_tier(pre.stage)
        labels = {
            "texture": texture.value,
            "position": "IP" if hero_in_position else "OOP",
            "pot_category": pot_category.value,
            "spr": spr_bucket,
            "tendency": pre.tendency.value,
            "risk_tier": tier.name,
        }
        penalty = _RISK_PENALTY[tier]
        tables: dict[str, Mapping[PostflopAction, float]] = {
            "base": _BASE_EV,
            "texture": _TEXTURE_WEIGHTS[texture],
            "position": _POSITION_WEIGHTS[hero_in_position],
            "pot_category": _POT_WEIGHTS[pot_category],
            "spr": _SPR_WEIGHTS[spr_bucket],
            "tendency": _tendency_weights(pre.tendency),
            "risk_tier": {a: -v * penalty for a, v in _VARIANCE.items()},
        }
        return labels, tables

    @staticmethod
    def rank(
        actions: list[PostflopAction],
        tables: Mapping[str, Mapping[PostflopAction, float]],
        state: StreetState,
    ) -> list[RankedAction]:
        """Score and order ``actions``; sizes are for Hero in ``state``."""
        ranked = [
            RankedAction(
                action=action,
                size_bb=state.size_for(Actor.HERO, action),
                ev=sum(table.get(action, 0.0) for table in tables.values()),
            )
            for action in actions
        ]
        ranked.sort(key=tie_break_key)
        return ranked

    def decide(
        self,
        pre: PreflopContext,
        board: tuple[Card, ...],
        pot_category: PotCategory,
        spr: float,
        state: StreetState,
        include_alternatives: bool = True,
    ) -> Decision:
        """Pick Hero's action for a street state where Hero is to act.

        Raises:
            LegalityError: ``street_complete`` if the street is over, or
                ``wrong_actor`` if Villain is to act.
        """
        if state.is_complete:
            raise LegalityError(
                ErrorCode.STREET_COMPLETE,
                "The street is over; there is no decision to make",
                {"history": ", ".join(str(e) for e in state.history)},
            )
        if state.to_act != Actor.HERO:
            raise LegalityError(
                ErrorCode.WRONG_ACTOR,
                "Villain is to act; supply Villain's action first",
                {"expected": state.to_act.value},
            )

        legal = state.legal_actions()
        hero_in_position = state.first_to_act == Actor.VILLAIN
        labels, tables = self.signal_weights(pre, board, pot_category, spr, hero_in_position)
        ranked = self.rank(legal, tables, state)
        best = ranked[0]

        logger.debug(
            "Scores [%s]: %s",
            ", ".join(f"{k}={v}" for k, v in labels.items()),
            ", ".join(f"{r.action.value}={r.ev:+.3f}" for r in ranked),
        )

        return Decision(
            best=best.action,
            size_bb=best.size_bb,
            alternatives=tuple(ranked[1:]) if include_alternatives else (),
            legal_actions=tuple(legal),
            history=state.history,
            reasoning=_explain(best, tables, labels),
            ev=best.ev,
            signals=labels,
        )


def _explain(
    best: RankedAction,
    tables: Mapping[str, Mapping[PostflopAction, float]],
    labels: Mapping[str, str],
) -> str:
    """One line naming the signals that pushed ``best`` up the most."""
    contributions = [
        (name, table.get(best.action, 0.0))
        for name, table in tables.items()
        if name != "base"
    ]
    drivers = [c for c in sorted(contributions, key=lambda c: -c[1]) if c[1] > 0][:2]
    action = best.action.value
    if best.size_bb is not None:
        action += f" {best.size_bb:g}bb"
    if not drivers:
        return f"{action}: least costly option (EV {best.ev:+.3f})"
    reasons = " and ".join(f"{labels[name]} {name.replace('_', ' ')}" for name, _ in drivers)
    return f"{action}: favored by {reasons} (EV {best.ev:+.3f})"
