"""Result types returned by the engine's public operations.

HandMix: per-hand mixed frequencies with the computed dominant label.
RangeCell: one cell of the 13×13 preflop grid.
SolveResult: complete preflop grid plus its legend.
RankedAction: a postflop candidate with its size and synthetic EV.
Decision: the recommended postflop action with ranked alternatives.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

from range_coach.core.context import HistoryEntry
from range_coach.strategy.hands import GRID_SIZE, HandNotation
from range_coach.utils.constants import PostflopAction, RangeCategory


@dataclass(frozen=True)
class HandMix:
    """A hand's mixed strategy after the merge.

    Attributes:
        frequencies: Frequency per category, fold included.
        dominant: Highest-frequency category.
        tie_broken: True when the dominant label was chosen by category
            priority among equal frequencies.
    """

    frequencies: Mapping[RangeCategory, float]
    dominant: RangeCategory
    tie_broken: bool = False

    def frequency(self, category: RangeCategory) -> float:
        return self.frequencies.get(category, 0.0)


@dataclass(frozen=True)
class RangeCell:
    """One grid cell: the hand label, its dominant category and frequency."""

    hand: str
    row: int
    col: int
    frequency: float
    dominant: RangeCategory
    mix: HandMix


@dataclass(frozen=True)
class SolveResult:
    """A complete 13×13 preflop range.

    Attributes:
        key: Identifier of the baseline table used.
        grid: 13 rows of 13 RangeCells, rows and columns ordered A..2.
        legend: Category → description for every category shown.
        adjustments: Keys of the exploit adjustments that were applied.
    """

    key: str
    grid: tuple[tuple[RangeCell, ...], ...]
    legend: Mapping[RangeCategory, str]
    adjustments: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return True

    def iter_cells(self) -> Iterator[RangeCell]:
        for row in self.grid:
            yield from row

    def cell(self, hand: str | HandNotation) -> RangeCell:
        """Look up the cell of a hand such as 'AKs' or 'TT'."""
        notation = hand if isinstance(hand, HandNotation) else HandNotation.from_str(hand)
        row, col = notation.grid_position
        return self.grid[row][col]

    def region(self, category: RangeCategory) -> list[str]:
        """Hands whose dominant label is ``category``, in grid order."""
        return [c.hand for c in self.iter_cells() if c.dominant == category]

    def combo_share(self, category: RangeCategory) -> float:
        """Combo-weighted share of all 1326 starting hands for a category."""
        total = 0.0
        for cell in self.iter_cells():
            total += cell.mix.frequency(category) * HandNotation.from_str(cell.hand).combo_count
        return total / 1326

    @property
    def size(self) -> int:
        return GRID_SIZE


@dataclass(frozen=True)
class RankedAction:
    """A postflop candidate: action, size in BB (None if sizeless), EV score."""

    action: PostflopAction
    size_bb: float | None
    ev: float


@dataclass(frozen=True)
class Decision:
    """The engine's recommended postflop action.

    Attributes:
        best: Top-ranked action; always a member of ``legal_actions``.
        size_bb: Size of ``best`` in big blinds (None for check/fold).
        alternatives: Remaining candidates, EV-descending.
        legal_actions: Legal set computed for ``history``.
        history: Street history the decision was made for, including any
            villain action accepted during this call.
        reasoning: Short explanation of the dominant signals.
    """

    best: PostflopAction
    size_bb: float | None
    alternatives: tuple[RankedAction, ...] = ()
    legal_actions: tuple[PostflopAction, ...] = ()
    history: tuple[HistoryEntry, ...] = ()
    reasoning: str = ""
    ev: float = 0.0
    signals: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True
