"""Bet sizing: pot-fraction menu → big blinds.

Bets are ``fraction × current pot``; raises are ``multiplier × bet faced``
(raise-to). Everything is capped at the actor's remaining stack and
rounded to the data set's precision.
"""

from __future__ import annotations

from typing import Mapping

from range_coach.utils.constants import PostflopAction


def round_bb(amount: float, precision: int) -> float:
    return round(amount, precision)


def min_unit_bb(precision: int) -> float:
    """Smallest representable amount at ``precision`` (1 BB at precision 0)."""
    return 10.0 ** -precision


def bet_size_bb(
    action: PostflopAction,
    pot_bb: float,
    size_menu: Mapping[PostflopAction, float],
    precision: int,
    stack_bb: float | None = None,
) -> float:
    """Size of a Bet_* action in BB, never below one precision unit.

    Raises:
        KeyError: If the action is not in the size menu.
    """
    amount = max(size_menu[action] * pot_bb, min_unit_bb(precision))
    if stack_bb is not None:
        amount = min(amount, stack_bb)
    return round_bb(amount, precision)


def raise_size_bb(
    facing_bb: float,
    multiplier: float,
    precision: int,
    stack_bb: float | None = None,
) -> float:
    """Raise-to amount in BB against a bet (or raise) of ``facing_bb``."""
    amount = facing_bb * multiplier
    if stack_bb is not None:
        amount = min(amount, stack_bb)
    return round_bb(amount, precision)
