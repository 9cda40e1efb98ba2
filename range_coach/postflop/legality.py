"""Postflop legality state machine for one heads-up street.

The state is nothing more than the street's action history plus who acts
first; everything else (whose turn it is, outstanding bets, commitments,
the legal action set, street completion) is derived from it. Applying an
action returns a new state, the old one is never mutated.

Rules for the player to act:
  - Check: no bet outstanding.
  - Bet_*: no bet outstanding and chips behind.
  - Fold / Call: a bet or raise is outstanding.
  - Check_Raise: the last two entries are (self: Check, opponent: Bet_*).
  - Raise: facing a bet or raise otherwise, below the raise cap, neither
    player all-in.
The street ends on a fold, on a call, or on check-check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping

from range_coach.core.context import HistoryEntry, PostflopContext
from range_coach.core.errors import ErrorCode, LegalityError
from range_coach.postflop.bet_sizing import bet_size_bb, min_unit_bb, raise_size_bb, round_bb
from range_coach.strategy.strategy_data import (
    DEFAULT_BB_PRECISION,
    DEFAULT_MAX_RAISES,
    DEFAULT_RAISE_MULTIPLIER,
    DEFAULT_SIZE_MENU,
    StrategyData,
)
from range_coach.utils.constants import Actor, PostflopAction

logger = logging.getLogger("range_coach.postflop")

_EPSILON = 1e-9


@dataclass(frozen=True)
class StreetRules:
    """Sizing and raise-cap rules taken from the strategy data set."""

    size_menu: Mapping[PostflopAction, float] = field(
        default_factory=lambda: dict(DEFAULT_SIZE_MENU)
    )
    bb_precision: int = DEFAULT_BB_PRECISION
    raise_multiplier: float = DEFAULT_RAISE_MULTIPLIER
    max_raises_per_street: int = DEFAULT_MAX_RAISES

    @classmethod
    def from_data(cls, data: StrategyData, bb_precision: int | None = None) -> StreetRules:
        return cls(
            size_menu=data.size_menu,
            bb_precision=data.bb_precision if bb_precision is None else bb_precision,
            raise_multiplier=data.raise_multiplier,
            max_raises_per_street=data.max_raises_per_street,
        )

    @property
    def bet_actions(self) -> list[PostflopAction]:
        """Menu bets, smallest first."""
        return sorted(self.size_menu, key=lambda a: self.size_menu[a])


@dataclass(frozen=True)
class StreetState:
    """Derived view of a street: history, first actor, pot and stacks.

    ``stack_bb`` is the effective stack behind at the start of the street,
    which caps every player's total commitment.
    """

    first_to_act: Actor
    pot_bb: float
    stack_bb: float
    rules: StreetRules = field(default_factory=StreetRules)
    history: tuple[HistoryEntry, ...] = ()

    # -- derived state ------------------------------------------------------

    @property
    def to_act(self) -> Actor:
        if not self.history:
            return self.first_to_act
        return self.history[-1].actor.other

    def committed(self, actor: Actor) -> float:
        """Actor's total chips put in on this street."""
        total = 0.0
        for entry in self.history:
            if entry.actor == actor and entry.size_bb is not None:
                total = entry.size_bb
        return total

    def remaining(self, actor: Actor) -> float:
        return self.stack_bb - self.committed(actor)

    def facing_bet(self, actor: Actor) -> bool:
        """True while the opponent's last bet or raise is unanswered.

        Read from the actions, not the amounts, so a bet that rounds to
        zero at low precision still has to be called or folded to.
        """
        if not self.history or self.is_complete:
            return False
        last = self.history[-1]
        return last.actor == actor.other and last.action.is_aggressive

    @property
    def current_pot(self) -> float:
        return self.pot_bb + self.committed(Actor.HERO) + self.committed(Actor.VILLAIN)

    @property
    def raise_count(self) -> int:
        """Raises after the street's first bet."""
        aggressive = sum(1 for e in self.history if e.action.is_aggressive)
        return max(0, aggressive - 1)

    @property
    def is_complete(self) -> bool:
        if not self.history:
            return False
        last = self.history[-1].action
        if last in (PostflopAction.FOLD, PostflopAction.CALL):
            return True
        return (
            len(self.history) >= 2
            and last == PostflopAction.CHECK
            and self.history[-2].action == PostflopAction.CHECK
        )

    def _is_check_raise_spot(self, actor: Actor) -> bool:
        if len(self.history) < 2:
            return False
        mine, theirs = self.history[-2], self.history[-1]
        return (
            mine.actor == actor
            and mine.action == PostflopAction.CHECK
            and theirs.actor == actor.other
            and theirs.action.is_bet
        )

    def legal_actions(self) -> list[PostflopAction]:
        """Legal set for the player to act; empty once the street is over."""
        if self.is_complete:
            return []

        actor = self.to_act
        if not self.facing_bet(actor):
            actions = [PostflopAction.CHECK]
            if self.remaining(actor) > _EPSILON:
                actions.extend(self.rules.bet_actions)
            return actions

        actions = [PostflopAction.FOLD, PostflopAction.CALL]
        can_raise = (
            self.raise_count < self.rules.max_raises_per_street
            and self.remaining(actor.other) > _EPSILON
        )
        if can_raise:
            if self._is_check_raise_spot(actor):
                actions.append(PostflopAction.CHECK_RAISE)
            else:
                actions.append(PostflopAction.RAISE)
        return actions

    # -- sizing ---------------------------------------------------------------

    def size_for(self, actor: Actor, action: PostflopAction) -> float | None:
        """Default street total after ``actor`` takes ``action``."""
        precision = self.rules.bb_precision
        if action.is_bet:
            return bet_size_bb(
                action, self.current_pot, self.rules.size_menu, precision, self.stack_bb,
            )
        if action in (PostflopAction.RAISE, PostflopAction.CHECK_RAISE):
            return raise_size_bb(
                self.committed(actor.other), self.rules.raise_multiplier,
                precision, self.stack_bb,
            )
        if action == PostflopAction.CALL:
            return round_bb(min(self.committed(actor.other), self.stack_bb), precision)
        return None

    def _normalize(self, entry: HistoryEntry) -> HistoryEntry:
        action = entry.action
        default = self.size_for(entry.actor, action)
        if not action.is_aggressive or entry.size_bb is None:
            return replace(entry, size_bb=default)

        precision = self.rules.bb_precision
        size = round_bb(entry.size_bb, precision)
        if action.is_bet:
            # Menu bets are fixed pot fractions; only raises size freely
            if abs(size - default) > min_unit_bb(precision) + _EPSILON:
                raise LegalityError(
                    ErrorCode.ILLEGAL_ACTION,
                    f"{action} into a {self.current_pot:g} BB pot is {default:g} BB, "
                    f"not {size:g} BB",
                    {"action": action.value, "size_bb": f"{size:g}", "expected_bb": f"{default:g}"},
                )
            return replace(entry, size_bb=default)

        floor = self.committed(entry.actor.other)
        if size <= floor + _EPSILON or size > self.stack_bb + _EPSILON:
            raise LegalityError(
                ErrorCode.ILLEGAL_ACTION,
                f"{action} to {size:g} BB must exceed {floor:g} BB "
                f"and not exceed the {self.stack_bb:g} BB stack",
                {"action": action.value, "size_bb": f"{size:g}"},
            )
        return replace(entry, size_bb=size)

    # -- transitions ----------------------------------------------------------

    def apply(self, entry: HistoryEntry) -> StreetState:
        """Return the state after ``entry``.

        Raises:
            LegalityError: ``wrong_actor`` if it is not the entry's actor's
                turn, ``illegal_action`` if the action is not legal now.
        """
        if self.is_complete:
            raise LegalityError(
                ErrorCode.ILLEGAL_ACTION,
                f"The street is over; {entry.action} cannot follow",
                {"action": entry.action.value, "reason": "street_complete"},
            )
        if entry.actor != self.to_act:
            raise LegalityError(
                ErrorCode.WRONG_ACTOR,
                f"{self.to_act} is to act, not {entry.actor}",
                {"expected": self.to_act.value, "actor": entry.actor.value},
            )
        legal = self.legal_actions()
        if entry.action not in legal:
            raise LegalityError(
                ErrorCode.ILLEGAL_ACTION,
                f"{entry.action} is not legal here; legal actions: "
                + ", ".join(a.value for a in legal),
                {"action": entry.action.value},
            )
        return replace(self, history=self.history + (self._normalize(entry),))


def replay(post: PostflopContext, rules: StreetRules | None = None) -> StreetState:
    """Rebuild the street state from a context, checking every entry.

    Also checks that ``post.to_act`` matches the player whose turn it is.

    Raises:
        LegalityError: wrong_actor / illegal_action, with the offending
            history index in ``detail``.
    """
    state = StreetState(
        first_to_act=post.first_to_act,
        pot_bb=post.pot_bb,
        stack_bb=post.effective_stack_bb,
        rules=rules or StreetRules(),
    )
    for i, entry in enumerate(post.history):
        try:
            state = state.apply(entry)
        except LegalityError as e:
            e.detail["history_index"] = str(i)
            raise

    if not state.is_complete and state.to_act != post.to_act:
        raise LegalityError(
            ErrorCode.WRONG_ACTOR,
            f"{post.to_act} cannot act: {state.to_act} is next after "
            + (str(post.history[-1]) if post.history else "an empty history"),
            {"expected": state.to_act.value, "actor": post.to_act.value},
        )
    return state


def legal_actions(post: PostflopContext, rules: StreetRules | None = None) -> list[PostflopAction]:
    """Legal action set for ``post.to_act`` given ``post.history``."""
    state = replay(post, rules)
    actions = state.legal_actions()
    logger.debug(
        "Legal for %s after [%s]: %s",
        state.to_act, ", ".join(str(e) for e in post.history),
        ", ".join(a.value for a in actions) or "street complete",
    )
    return actions
