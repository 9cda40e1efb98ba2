"""Context validation: reject contexts that cannot occur in real play.

Checks run in a fixed order (stage, seats, stacks) and the first failure
is raised as a ContextError carrying its own error code. Accepted preflop
contexts come back normalized (e.g. the blind-vs-blind opponent filled in).
"""

from __future__ import annotations

import math
from dataclasses import replace

from range_coach.core.context import PostflopContext, PreflopContext
from range_coach.core.errors import ContextError, ErrorCode
from range_coach.core.seat_order import acts_first_postflop, is_earlier
from range_coach.utils.card import FLOP_CARD_COUNT
from range_coach.utils.constants import (
    BLIND_SEATS,
    FACING_SPOTS,
    Actor,
    GameFormat,
    Seat,
    Spot,
    Street,
)

MIN_STACK_BB = 1.0
MAX_STACK_BB = 400.0


def _check_stage(ctx: PreflopContext) -> None:
    if ctx.format == GameFormat.TOURNAMENT and ctx.stage is None:
        raise ContextError(
            ErrorCode.INVALID_STAGE,
            "Tournament stage is required for tournament play",
            {"field": "stage"},
        )
    if ctx.format == GameFormat.CASH and ctx.stage is not None:
        raise ContextError(
            ErrorCode.INVALID_STAGE,
            f"Tournament stage {ctx.stage} is not allowed in a cash game",
            {"field": "stage"},
        )


def _check_seats(ctx: PreflopContext) -> PreflopContext:
    hero, villain = ctx.hero_seat, ctx.villain_seat

    if ctx.spot == Spot.RFI:
        if villain is not None:
            raise ContextError(
                ErrorCode.INVALID_VS_POSITION,
                f"Raise-first-in has no opponent seat (got {villain})",
                {"field": "villain_seat"},
            )
        if hero == Seat.BB:
            raise ContextError(
                ErrorCode.INVALID_VS_POSITION,
                "BB cannot raise first in: nobody is left to open against",
                {"field": "hero_seat"},
            )
        return ctx

    if ctx.spot in FACING_SPOTS:
        if villain is None:
            raise ContextError(
                ErrorCode.INVALID_VS_POSITION,
                f"{ctx.spot} requires the opponent's seat",
                {"field": "villain_seat"},
            )
        if not is_earlier(villain, hero):
            raise ContextError(
                ErrorCode.INVALID_VS_POSITION,
                f"Opponent in {villain} cannot have acted before hero in {hero}",
                {"field": "villain_seat"},
            )
        return ctx

    # Blind vs blind: hero is a blind, opponent is forced to the other one
    if hero not in BLIND_SEATS:
        raise ContextError(
            ErrorCode.INVALID_BLIND_VS_BLIND,
            f"Blind vs blind requires hero in SB or BB, got {hero}",
            {"field": "hero_seat"},
        )
    forced = Seat.BB if hero == Seat.SB else Seat.SB
    if villain is not None and villain != forced:
        raise ContextError(
            ErrorCode.INVALID_BLIND_VS_BLIND,
            f"Blind vs blind opponent must be {forced}, got {villain}",
            {"field": "villain_seat"},
        )
    return replace(ctx, villain_seat=forced)


def _check_stack(value: float | None, field_name: str) -> None:
    if value is None:
        return
    if math.isnan(value) or not MIN_STACK_BB <= value <= MAX_STACK_BB:
        raise ContextError(
            ErrorCode.STACK_OUT_OF_RANGE,
            f"{field_name} must be between {MIN_STACK_BB:g} and {MAX_STACK_BB:g} BB, got {value:g}",
            {"field": field_name},
        )


def validate_preflop(ctx: PreflopContext) -> PreflopContext:
    """Validate a preflop context and return its normalized form.

    Raises:
        ContextError: invalid_stage, invalid_vs_position,
            invalid_blind_vs_blind or stack_out_of_range.
    """
    _check_stage(ctx)
    ctx = _check_seats(ctx)
    _check_stack(ctx.hero_stack_bb, "hero_stack_bb")
    _check_stack(ctx.villain_stack_bb, "villain_stack_bb")
    return ctx


def validate_postflop(post: PostflopContext, pre: PreflopContext | None = None) -> PostflopContext:
    """Structural checks on a postflop context.

    History legality is the legality state machine's job; this only checks
    the fields around it.

    Raises:
        ContextError: invalid_context.
    """
    def fail(message: str, field_name: str) -> ContextError:
        return ContextError(ErrorCode.INVALID_CONTEXT, message, {"field": field_name})

    if post.street != Street.FLOP:
        raise fail(f"Only flop play is supported, got {post.street}", "street")
    if len(post.board) != FLOP_CARD_COUNT or len(set(post.board)) != FLOP_CARD_COUNT:
        raise fail("Flop board must be three distinct cards", "board")
    if math.isnan(post.pot_bb) or post.pot_bb <= 0:
        raise fail(f"Pot must be positive, got {post.pot_bb:g}", "pot_bb")
    if math.isnan(post.spr) or post.spr < 0:
        raise fail(f"SPR must be non-negative, got {post.spr:g}", "spr")

    if pre is not None and pre.villain_seat is not None:
        hero_oop = acts_first_postflop(pre.hero_seat, pre.villain_seat)
        expected_first = Actor.HERO if hero_oop else Actor.VILLAIN
        if post.first_to_act != expected_first:
            raise fail(
                f"{expected_first} is out of position and must act first on the flop",
                "to_act",
            )
    return post
