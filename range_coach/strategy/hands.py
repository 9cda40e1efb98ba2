"""The 169 starting-hand categories and their 13×13 grid.

Hand notation:
  - "AA"   → pocket pair
  - "AKs"  → suited
  - "AKo"  → offsuit
  - "AK"   → both AKs and AKo
  - "JJ+"  → JJ, QQ, KK, AA
  - "ATs+" → ATs, AJs, AQs, AKs
  - "A5s-A2s" → A5s, A4s, A3s, A2s

Grid geometry (rows and columns ordered A..2): the diagonal holds pairs,
cells above it suited hands, cells below it offsuit hands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from range_coach.utils.constants import Rank

# Ranks ordered high to low for range expansion
RANKS_DESCENDING: list[Rank] = [
    Rank.ACE, Rank.KING, Rank.QUEEN, Rank.JACK, Rank.TEN,
    Rank.NINE, Rank.EIGHT, Rank.SEVEN, Rank.SIX, Rank.FIVE,
    Rank.FOUR, Rank.THREE, Rank.TWO,
]

RANK_INDEX: dict[Rank, int] = {r: i for i, r in enumerate(RANKS_DESCENDING)}

GRID_SIZE = len(RANKS_DESCENDING)


class HandType(StrEnum):
    PAIR = "pair"
    SUITED = "suited"
    OFFSUIT = "offsuit"


@dataclass(frozen=True)
class HandNotation:
    """A hand in standard poker notation (e.g. AKs, JJ, T9o)."""

    rank1: Rank
    rank2: Rank
    hand_type: HandType

    @classmethod
    def from_str(cls, s: str) -> HandNotation:
        """Parse notation like 'AKs', 'JJ', 'T9o'.

        Raises:
            ValueError: If notation is invalid.
        """
        if len(s) < 2 or len(s) > 3:
            raise ValueError(f"Invalid hand notation: '{s}'")

        try:
            r1 = Rank(s[0])
            r2 = Rank(s[1])
        except ValueError:
            raise ValueError(f"Invalid hand notation: '{s}'")

        if r1 == r2:
            if len(s) == 3:
                raise ValueError(f"Pairs take no suit indicator: '{s}'")
            return cls(rank1=r1, rank2=r2, hand_type=HandType.PAIR)

        # Ensure rank1 is the higher rank
        if RANK_INDEX[r1] > RANK_INDEX[r2]:
            r1, r2 = r2, r1

        if len(s) == 3:
            if s[2] == "s":
                return cls(rank1=r1, rank2=r2, hand_type=HandType.SUITED)
            if s[2] == "o":
                return cls(rank1=r1, rank2=r2, hand_type=HandType.OFFSUIT)
            raise ValueError(f"Invalid suit indicator: '{s[2]}'")

        raise ValueError(f"Non-pair hand needs 's' or 'o': '{s}'")

    @property
    def combo_count(self) -> int:
        if self.hand_type == HandType.PAIR:
            return 6
        if self.hand_type == HandType.SUITED:
            return 4
        return 12

    @property
    def grid_position(self) -> tuple[int, int]:
        """(row, col) of this hand in the 13×13 grid."""
        hi = RANK_INDEX[self.rank1]
        lo = RANK_INDEX[self.rank2]
        if self.hand_type == HandType.OFFSUIT:
            return lo, hi
        return hi, lo

    @property
    def index(self) -> int:
        """Flat row-major index in [0, 169)."""
        row, col = self.grid_position
        return row * GRID_SIZE + col

    def __str__(self) -> str:
        r = f"{self.rank1.value}{self.rank2.value}"
        if self.hand_type == HandType.PAIR:
            return r
        if self.hand_type == HandType.SUITED:
            return r + "s"
        return r + "o"


def hand_at(row: int, col: int) -> HandNotation:
    """The hand occupying grid cell (row, col)."""
    r_row = RANKS_DESCENDING[row]
    r_col = RANKS_DESCENDING[col]
    if row == col:
        return HandNotation(r_row, r_col, HandType.PAIR)
    if row < col:
        return HandNotation(r_row, r_col, HandType.SUITED)
    return HandNotation(r_col, r_row, HandType.OFFSUIT)


# All 169 categories in row-major grid order
ALL_HANDS: tuple[HandNotation, ...] = tuple(
    hand_at(row, col) for row in range(GRID_SIZE) for col in range(GRID_SIZE)
)

HAND_COUNT = len(ALL_HANDS)


def hand_strength(hand: HandNotation) -> float:
    """Rough preflop strength in [0, 1]; 1.0 = AA.

    Pairs score from 0.5 up, suited hands get a premium over offsuit,
    and connectedness adds a little playability.
    """
    r1_val = 13 - RANK_INDEX[hand.rank1]  # 13 = A, 1 = 2
    r2_val = 13 - RANK_INDEX[hand.rank2]

    if hand.hand_type == HandType.PAIR:
        return 0.5 + (r1_val / 13) * 0.5
    gap = r1_val - r2_val - 1
    connect = max(0, 3 - gap) * 0.02
    if hand.hand_type == HandType.SUITED:
        return (r1_val + r2_val) / 26 * 0.8 + connect
    return (r1_val + r2_val) / 26 * 0.6 + connect / 2


def expand_notation(notation: str) -> list[HandNotation]:
    """Expand range notation into a list of HandNotation objects.

    Supports:
      - Single hands: "AKs", "JJ", "T9o"
      - Plus notation: "JJ+" → JJ,QQ,KK,AA
      - Plus on non-pairs: "ATs+" → ATs,AJs,AQs,AKs
      - Dash ranges: "JJ-88" → JJ,TT,99,88
      - Dash on non-pairs: "A5s-A2s" → A5s,A4s,A3s,A2s

    Raises:
        ValueError: If the notation cannot be parsed.
    """
    notation = notation.strip()
    if not notation:
        raise ValueError("Empty hand notation")

    if "-" in notation:
        parts = notation.split("-")
        if len(parts) != 2:
            raise ValueError(f"Invalid range notation: '{notation}'")
        return _expand_dash_range(parts[0].strip(), parts[1].strip())

    if notation.endswith("+"):
        return _expand_plus(notation[:-1])

    if len(notation) == 2 and notation[0] != notation[1]:
        # "AK" means both AKs and AKo
        return [
            HandNotation.from_str(notation + "s"),
            HandNotation.from_str(notation + "o"),
        ]

    return [HandNotation.from_str(notation)]


def _expand_plus(base: str) -> list[HandNotation]:
    """Expand 'JJ+' or 'ATs+' style notation."""
    if len(base) == 2 and base[0] != base[1]:
        return _expand_plus(base + "s") + _expand_plus(base + "o")

    hand = HandNotation.from_str(base)

    if hand.hand_type == HandType.PAIR:
        idx = RANK_INDEX[hand.rank1]
        return [
            HandNotation(RANKS_DESCENDING[i], RANKS_DESCENDING[i], HandType.PAIR)
            for i in range(idx + 1)
        ]

    # ATs+ → ATs, AJs, AQs, AKs (kicker climbs toward rank1)
    high_idx = RANK_INDEX[hand.rank1]
    low_idx = RANK_INDEX[hand.rank2]
    return [
        HandNotation(hand.rank1, RANKS_DESCENDING[i], hand.hand_type)
        for i in range(high_idx + 1, low_idx + 1)
    ]


def _expand_dash_range(start: str, end: str) -> list[HandNotation]:
    """Expand 'JJ-88' or 'A5s-A2s' style notation."""
    h_start = HandNotation.from_str(start)
    h_end = HandNotation.from_str(end)

    if h_start.hand_type == HandType.PAIR and h_end.hand_type == HandType.PAIR:
        lo, hi = sorted([RANK_INDEX[h_start.rank1], RANK_INDEX[h_end.rank1]])
        return [
            HandNotation(RANKS_DESCENDING[i], RANKS_DESCENDING[i], HandType.PAIR)
            for i in range(lo, hi + 1)
        ]

    if h_start.rank1 != h_end.rank1:
        raise ValueError(
            f"Non-pair dash ranges must share the high card: '{start}-{end}'"
        )
    if h_start.hand_type != h_end.hand_type:
        raise ValueError(
            f"Dash range endpoints must have same type (s/o): '{start}-{end}'"
        )

    lo, hi = sorted([RANK_INDEX[h_start.rank2], RANK_INDEX[h_end.rank2]])
    return [
        HandNotation(h_start.rank1, RANKS_DESCENDING[i], h_start.hand_type)
        for i in range(lo, hi + 1)
    ]


def parse_hand_list(notation: str) -> list[HandNotation]:
    """Expand a comma-separated range string, keeping duplicates."""
    hands: list[HandNotation] = []
    for part in notation.split(","):
        if part.strip():
            hands.extend(expand_notation(part))
    return hands


@dataclass
class Range:
    """A set of hand categories. Use add() with standard notation strings."""

    hands: set[HandNotation] = field(default_factory=set)

    def add(self, notation: str) -> Range:
        """Add hands using range notation. Returns self for chaining."""
        self.hands.update(parse_hand_list(notation))
        return self

    def minus(self, other: Range) -> Range:
        return Range(hands=self.hands - other.hands)

    def ranked(self) -> list[HandNotation]:
        """Hands strongest first, ties broken by grid order."""
        return sorted(self.hands, key=lambda h: (-hand_strength(h), h.index))

    def __contains__(self, item: HandNotation) -> bool:
        return item in self.hands

    def __len__(self) -> int:
        return len(self.hands)

    def __str__(self) -> str:
        return ", ".join(str(h) for h in sorted(self.hands, key=lambda h: h.index))


def build_range(notation: str) -> Range:
    """Build a Range from a comma-separated notation string."""
    return Range().add(notation)
