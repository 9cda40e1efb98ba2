"""Card class and free-text board parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from range_coach.utils.constants import RANK_VALUES, Rank, Suit

# Separators accepted between cards in free-text board entry
_BOARD_SEPARATORS = re.compile(r"[\s,;/|-]+")

FLOP_CARD_COUNT = 3


@total_ordering
@dataclass(frozen=True)
class Card:
    """Represents a single playing card."""

    rank: Rank
    suit: Suit

    @classmethod
    def from_str(cls, s: str) -> Card:
        """Create a Card from a 2-character string like 'Ah' or 'Td'.

        Args:
            s: A 2-character string where the first char is the rank
               and the second is the suit.

        Returns:
            A new Card instance.

        Raises:
            ValueError: If the string is not exactly 2 characters or
                       contains invalid rank/suit characters.
        """
        if len(s) != 2:
            raise ValueError(f"Card string must be 2 characters, got '{s}'")
        try:
            rank = Rank(s[0])
        except ValueError:
            raise ValueError(f"Invalid rank character: '{s[0]}'")
        try:
            suit = Suit(s[1])
        except ValueError:
            raise ValueError(f"Invalid suit character: '{s[1]}'")
        return cls(rank=rank, suit=suit)

    @property
    def value(self) -> int:
        """Numeric value of the card's rank (2-14)."""
        return RANK_VALUES[self.rank]

    def __str__(self) -> str:
        return f"{self.rank.value}{self.suit.value}"

    def __repr__(self) -> str:
        return f"Card('{self}')"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.value < other.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank == other.rank and self.suit == other.suit

    def __hash__(self) -> int:
        return hash((self.rank, self.suit))


def _split_board_text(text: str) -> list[str]:
    """Split board text into 2-char tokens.

    Accepts separated ("Ah Kd 7c", "Ah,Kd,7c") and run-together ("AhKd7c")
    forms. "10" is accepted as an alias for "T".
    """
    text = text.strip().replace("10", "T")
    tokens: list[str] = []
    for chunk in _BOARD_SEPARATORS.split(text):
        if not chunk:
            continue
        if len(chunk) % 2 != 0:
            raise ValueError(f"Cannot split '{chunk}' into 2-character cards")
        tokens.extend(chunk[i:i + 2] for i in range(0, len(chunk), 2))
    return tokens


def parse_board(text: str, expected: int = FLOP_CARD_COUNT) -> tuple[Card, ...]:
    """Parse free-text board entry into a tuple of distinct cards.

    Ranks are case-insensitive, suits are case-insensitive.

    >>> parse_board("Ah kd 7C")
    (Card('Ah'), Card('Kd'), Card('7c'))

    Raises:
        ValueError: On malformed tokens, duplicate cards, or a card
            count different from ``expected``.
    """
    tokens = _split_board_text(text)
    if len(tokens) != expected:
        raise ValueError(
            f"Board must have exactly {expected} cards, got {len(tokens)} in '{text}'"
        )

    cards = tuple(Card.from_str(t[0].upper() + t[1].lower()) for t in tokens)
    if len(set(cards)) != len(cards):
        raise ValueError(f"Board contains duplicate cards: '{text}'")
    return cards
