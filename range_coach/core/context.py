"""Immutable game contexts handed to the engine on every call.

Contexts are rebuilt, never mutated: a new postflop action produces a new
PostflopContext via ``with_action``. ``from_dict`` marshals the loosely
typed payloads produced by the transport layer into typed contexts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, TypeVar

from range_coach.core.errors import ContextError, ErrorCode, LegalityError
from range_coach.core.seat_order import canonical_seat
from range_coach.utils.card import Card, parse_board
from range_coach.utils.constants import (
    Actor,
    GameFormat,
    PostflopAction,
    PotCategory,
    Seat,
    Spot,
    Street,
    Tendency,
    TournamentStage,
)

_E = TypeVar("_E", bound=Enum)

# Transport-layer spellings accepted by from_dict
_PREFLOP_ALIASES: dict[str, str] = {
    "gameFormat": "format",
    "game_format": "format",
    "heroPos": "hero_seat",
    "vsPos": "villain_seat",
    "villainPos": "villain_seat",
    "heroStack": "hero_stack_bb",
    "hero_stack": "hero_stack_bb",
    "villainStack": "villain_stack_bb",
    "villain_stack": "villain_stack_bb",
    "villainType": "tendency",
}

_POSTFLOP_ALIASES: dict[str, str] = {
    "postKind": "pot_category",
    "pot_kind": "pot_category",
    "toAct": "to_act",
    "potBB": "pot_bb",
    "pot": "pot_bb",
}


def _normalize_keys(data: dict[str, Any], aliases: dict[str, str]) -> dict[str, Any]:
    return {aliases.get(k, k): v for k, v in data.items()}


def parse_enum(enum_cls: type[_E], value: Any, field_name: str) -> _E:
    """Parse an enum member from its value or (case-insensitive) name.

    Raises:
        ContextError: With code ``invalid_context`` for unknown values.
    """
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text == member.value or text.upper() == member.name:
            return member
    for member in enum_cls:
        if text.lower() == str(member.value).lower():
            return member
    raise ContextError(
        ErrorCode.INVALID_CONTEXT,
        f"Unknown {field_name}: '{value}'",
        {"field": field_name},
    )


def _parse_seat(value: Any, field_name: str) -> Seat:
    try:
        return canonical_seat(value)
    except ValueError as e:
        raise ContextError(ErrorCode.INVALID_CONTEXT, str(e), {"field": field_name})


def _parse_float(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ContextError(
            ErrorCode.INVALID_CONTEXT,
            f"{field_name} must be a number, got '{value}'",
            {"field": field_name},
        )
    if math.isnan(number):
        raise ContextError(
            ErrorCode.INVALID_CONTEXT,
            f"{field_name} must be a number, got NaN",
            {"field": field_name},
        )
    return number


def _require(data: dict[str, Any], key: str) -> Any:
    if data.get(key) is None:
        raise ContextError(
            ErrorCode.INVALID_CONTEXT,
            f"Missing required field: {key}",
            {"field": key},
        )
    return data[key]


@dataclass(frozen=True)
class PreflopContext:
    """Everything needed to pick a preflop range.

    Stacks are in big blinds. ``stage`` is required for tournaments and
    forbidden for cash games; ``villain_seat`` depends on the spot. Both
    rules are enforced by the validator, not here.
    """

    format: GameFormat
    hero_seat: Seat
    spot: Spot
    hero_stack_bb: float
    tendency: Tendency = Tendency.GTO
    stage: TournamentStage | None = None
    villain_seat: Seat | None = None
    villain_stack_bb: float | None = None

    @property
    def is_tournament(self) -> bool:
        return self.format == GameFormat.TOURNAMENT

    @property
    def effective_stack_bb(self) -> float:
        """Smaller of the two stacks when both are known."""
        if self.villain_stack_bb is None:
            return self.hero_stack_bb
        return min(self.hero_stack_bb, self.villain_stack_bb)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreflopContext:
        """Build a context from a transport payload.

        Raises:
            ContextError: ``invalid_context`` for missing or unparsable fields.
        """
        d = _normalize_keys(data, _PREFLOP_ALIASES)
        stage = d.get("stage")
        villain_seat = d.get("villain_seat")
        villain_stack = d.get("villain_stack_bb")
        return cls(
            format=parse_enum(GameFormat, _require(d, "format"), "format"),
            hero_seat=_parse_seat(_require(d, "hero_seat"), "hero_seat"),
            spot=parse_enum(Spot, _require(d, "spot"), "spot"),
            hero_stack_bb=_parse_float(_require(d, "hero_stack_bb"), "hero_stack_bb"),
            tendency=parse_enum(Tendency, d.get("tendency") or Tendency.GTO, "tendency"),
            stage=parse_enum(TournamentStage, stage, "stage") if stage else None,
            villain_seat=_parse_seat(villain_seat, "villain_seat") if villain_seat else None,
            villain_stack_bb=(
                _parse_float(villain_stack, "villain_stack_bb")
                if villain_stack is not None else None
            ),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """One postflop action: who acted, what they did, and the amount (BB).

    ``size_bb`` is the actor's total commitment on the street after the
    action (bet-to, raise-to, or call-to). Checks and folds carry none.
    """

    actor: Actor
    action: PostflopAction
    size_bb: float | None = None

    def __str__(self) -> str:
        if self.size_bb is None:
            return f"{self.actor.value}:{self.action.value}"
        return f"{self.actor.value}:{self.action.value}({self.size_bb:g})"

    @classmethod
    def parse(cls, value: Any, default_actor: Actor | None = None) -> HistoryEntry:
        """Parse an entry from a HistoryEntry, dict, tuple or bare action name.

        Raises:
            LegalityError: ``unknown_action`` if the action name is not in
                the vocabulary.
            ContextError: ``invalid_context`` for a missing/unknown actor.
        """
        if isinstance(value, HistoryEntry):
            return value

        size: Any = None
        if isinstance(value, str):
            actor_raw, action_raw = default_actor, value
        elif isinstance(value, dict):
            actor_raw = value.get("actor", default_actor)
            action_raw = value.get("action")
            size = value.get("size_bb", value.get("size"))
        elif isinstance(value, (tuple, list)) and 2 <= len(value) <= 3:
            actor_raw, action_raw = value[0], value[1]
            size = value[2] if len(value) == 3 else None
        else:
            raise ContextError(
                ErrorCode.INVALID_CONTEXT,
                f"Cannot interpret history entry: {value!r}",
            )

        if actor_raw is None:
            raise ContextError(
                ErrorCode.INVALID_CONTEXT,
                f"History entry has no actor: {value!r}",
                {"field": "actor"},
            )
        actor = parse_enum(Actor, actor_raw, "actor")
        action = parse_action(action_raw)
        return cls(
            actor=actor,
            action=action,
            size_bb=_parse_float(size, "size_bb") if size is not None else None,
        )


def parse_action(value: Any) -> PostflopAction:
    """Parse a postflop action name (e.g. "Bet_50", "check_raise").

    Raises:
        LegalityError: ``unknown_action`` when the name is not recognised.
    """
    if isinstance(value, PostflopAction):
        return value
    text = str(value).strip()
    for member in PostflopAction:
        if text == member.value or text.upper() == member.name:
            return member
    raise LegalityError(
        ErrorCode.UNKNOWN_ACTION,
        f"Unknown postflop action: '{value}'",
        {"action": text},
    )


@dataclass(frozen=True)
class PostflopContext:
    """State of a heads-up postflop street.

    ``pot_bb`` is the pot at the start of the street; ``spr`` is the
    effective stack behind divided by that pot. ``history`` holds the
    street's actions so far and must always be a legal prefix.
    """

    pot_category: PotCategory
    board: tuple[Card, ...]
    to_act: Actor
    pot_bb: float
    spr: float
    history: tuple[HistoryEntry, ...] = ()
    street: Street = Street.FLOP

    @property
    def first_to_act(self) -> Actor:
        """The out-of-position player, who opened the street's action."""
        if self.history:
            return self.history[0].actor
        return self.to_act

    @property
    def effective_stack_bb(self) -> float:
        return self.spr * self.pot_bb

    def with_action(self, entry: HistoryEntry) -> PostflopContext:
        """Return a new context with ``entry`` appended and the turn passed."""
        return replace(
            self,
            history=self.history + (entry,),
            to_act=entry.actor.other,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PostflopContext:
        """Build a context from a transport payload.

        The board may be a list of card strings or free text ("Ah Kd 7c").

        Raises:
            ContextError: ``invalid_context`` for missing or unparsable fields.
            LegalityError: ``unknown_action`` for unknown action names.
        """
        d = _normalize_keys(data, _POSTFLOP_ALIASES)
        board_raw = _require(d, "board")
        if not isinstance(board_raw, str):
            board_raw = " ".join(str(c) for c in board_raw)
        try:
            board = parse_board(board_raw)
        except ValueError as e:
            raise ContextError(ErrorCode.INVALID_CONTEXT, str(e), {"field": "board"})

        history = tuple(HistoryEntry.parse(h) for h in d.get("history") or ())
        return cls(
            pot_category=parse_enum(PotCategory, _require(d, "pot_category"), "pot_category"),
            board=board,
            to_act=parse_enum(Actor, _require(d, "to_act"), "to_act"),
            pot_bb=_parse_float(_require(d, "pot_bb"), "pot_bb"),
            spr=_parse_float(_require(d, "spr"), "spr"),
            history=history,
            street=parse_enum(Street, d.get("street") or Street.FLOP, "street"),
        )
