"""Board texture analysis for the flop.

Produces the detailed BoardTexture flags and reduces them to the coarse
dry / wet / paired class used by the postflop heuristics.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum

from range_coach.utils.card import Card


class TextureClass(StrEnum):
    DRY = "dry"
    WET = "wet"
    PAIRED = "paired"


@dataclass(frozen=True)
class BoardTexture:
    """Analysis of the community card texture."""

    is_monotone: bool = False  # All one suit
    is_two_tone: bool = False  # Two suits
    is_rainbow: bool = False  # Three suits
    is_paired: bool = False  # Board has a pair
    is_connected: bool = False  # Three cards within a 5-rank window
    high_card_rank: int = 0
    num_broadway: int = 0  # Cards T or higher


def analyze_board(board: tuple[Card, ...] | list[Card]) -> BoardTexture:
    """Analyze the texture of the flop."""
    if not board:
        return BoardTexture()

    suit_counts = Counter(c.suit for c in board)
    rank_counts = Counter(c.rank for c in board)
    values = sorted({c.value for c in board}, reverse=True)
    # The ace also plays low for wheel-style boards
    if 14 in values:
        values.append(1)

    connected = any(
        values[i] - values[i + 2] <= 4 for i in range(len(values) - 2)
    )

    max_suit_count = max(suit_counts.values())
    unique_suits = len(suit_counts)

    return BoardTexture(
        is_monotone=unique_suits == 1,
        is_two_tone=max_suit_count == 2,
        is_rainbow=unique_suits >= 3,
        is_paired=any(n >= 2 for n in rank_counts.values()),
        is_connected=connected,
        high_card_rank=max(c.value for c in board),
        num_broadway=sum(1 for c in board if c.value >= 10),
    )


def classify_texture(texture: BoardTexture) -> TextureClass:
    """Coarse class: paired beats everything, then draw-heavy is wet."""
    if texture.is_paired:
        return TextureClass.PAIRED
    if texture.is_monotone or texture.is_two_tone or texture.is_connected:
        return TextureClass.WET
    return TextureClass.DRY
