"""Seat ordering: preflop acting order and post-flop position."""

from __future__ import annotations

from range_coach.utils.constants import Seat

# Canonical preflop acting order
SEAT_ORDER: tuple[Seat, ...] = (
    Seat.UTG, Seat.UTG1, Seat.LJ, Seat.HJ, Seat.CO, Seat.BTN, Seat.SB, Seat.BB,
)

# Post-flop the blinds act first and the button last
POSTFLOP_ORDER: tuple[Seat, ...] = (
    Seat.SB, Seat.BB, Seat.UTG, Seat.UTG1, Seat.LJ, Seat.HJ, Seat.CO, Seat.BTN,
)

_SEAT_INDEX: dict[Seat, int] = {s: i for i, s in enumerate(SEAT_ORDER)}
_POSTFLOP_INDEX: dict[Seat, int] = {s: i for i, s in enumerate(POSTFLOP_ORDER)}

# Secondary spellings accepted from callers
SEAT_ALIASES: dict[str, Seat] = {
    "BU": Seat.BTN,
    "BUTTON": Seat.BTN,
    "UTG+1": Seat.UTG1,
}


def canonical_seat(seat: Seat | str) -> Seat:
    """Resolve a seat name or alias to its canonical Seat.

    Raises:
        ValueError: If the name is not a known seat or alias.
    """
    if isinstance(seat, Seat):
        return seat
    name = seat.strip().upper()
    if name in SEAT_ALIASES:
        return SEAT_ALIASES[name]
    try:
        return Seat(name)
    except ValueError:
        raise ValueError(f"Unknown seat: '{seat}'")


def is_earlier(a: Seat | str, b: Seat | str) -> bool:
    """True iff ``a`` acts before ``b`` preflop. Equal seats are not earlier."""
    return _SEAT_INDEX[canonical_seat(a)] < _SEAT_INDEX[canonical_seat(b)]


def acts_first_postflop(a: Seat | str, b: Seat | str) -> bool:
    """True iff ``a`` is out of position against ``b`` after the flop."""
    return _POSTFLOP_INDEX[canonical_seat(a)] < _POSTFLOP_INDEX[canonical_seat(b)]


def seat_index(seat: Seat | str) -> int:
    """Zero-based preflop acting index (UTG=0 … BB=7)."""
    return _SEAT_INDEX[canonical_seat(seat)]
