"""Range merge: baseline frequencies + exploit deltas → labelled 13×13 grid.

For every hand and authored category:

    merged = clip(baseline + Σ applicable deltas, 0, 1)
    fold   = clip(1 − Σ merged, 0, 1)

A delta is applicable only to categories the spot's baseline table offers.
Deltas are sorted per cell before summing, so the result does not depend
on the order the adjustments are supplied in. The dominant label is the
highest-frequency category; exact ties go to CATEGORY_PRIORITY.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Sequence

import numpy as np

from range_coach.core.results import HandMix, RangeCell, SolveResult
from range_coach.strategy.hands import ALL_HANDS, GRID_SIZE
from range_coach.strategy.strategy_data import (
    AUTHORED_CATEGORIES,
    Adjustment,
    BaselineTable,
)
from range_coach.utils.constants import (
    CATEGORY_DESCRIPTIONS,
    CATEGORY_PRIORITY,
    RangeCategory,
)

logger = logging.getLogger("range_coach.strategy.merge")

# Frequencies closer than this are treated as tied
TIE_TOLERANCE = 1e-9

_PRIORITY_RANK: dict[RangeCategory, int] = {c: i for i, c in enumerate(CATEGORY_PRIORITY)}


def dominant_label(frequencies: Mapping[RangeCategory, float]) -> tuple[RangeCategory, bool]:
    """Pick the dominant category of a mixed strategy.

    Returns:
        (category, tie_broken). ``tie_broken`` is True when more than one
        category shared the top frequency and priority decided.
    """
    if not frequencies:
        return RangeCategory.FOLD, False
    top = max(frequencies.values())
    tied = [c for c, f in frequencies.items() if top - f <= TIE_TOLERANCE]
    best = min(tied, key=lambda c: _PRIORITY_RANK[c])
    return best, len(tied) > 1


def applicable_mask(table: BaselineTable) -> np.ndarray:
    """1.0 for category columns the spot offers, 0.0 elsewhere."""
    return np.array(
        [1.0 if c in table.offered else 0.0 for c in AUTHORED_CATEGORIES],
        dtype=np.float64,
    )


def merge_frequencies(
    table: BaselineTable,
    adjustments: Sequence[Adjustment] = (),
) -> np.ndarray:
    """Merged (169, authored categories) frequency matrix for one spot."""
    merged = table.frequencies.copy()
    if adjustments:
        stacked = np.stack([a.deltas for a in adjustments])
        # Sorting per cell makes the floating-point sum order-independent
        delta = np.sort(stacked, axis=0).sum(axis=0)
        merged = merged + delta * applicable_mask(table)
    return np.clip(merged, 0.0, 1.0)


def _hand_mix(row: np.ndarray, offered: frozenset[RangeCategory]) -> HandMix:
    fold = float(np.clip(1.0 - row.sum(), 0.0, 1.0))
    freqs: dict[RangeCategory, float] = {
        c: float(row[i]) for i, c in enumerate(AUTHORED_CATEGORIES) if c in offered
    }
    freqs[RangeCategory.FOLD] = fold
    dominant, tie_broken = dominant_label(freqs)
    return HandMix(
        frequencies=MappingProxyType(freqs),
        dominant=dominant,
        tie_broken=tie_broken,
    )


def build_legend(offered: frozenset[RangeCategory]) -> Mapping[RangeCategory, str]:
    """Descriptions for the spot's categories plus fold, in priority order."""
    return MappingProxyType({
        c: CATEGORY_DESCRIPTIONS[c]
        for c in CATEGORY_PRIORITY
        if c in offered or c == RangeCategory.FOLD
    })


def build_grid(
    table: BaselineTable,
    adjustments: Sequence[Adjustment] = (),
) -> SolveResult:
    """Merge a baseline table with its adjustments into a SolveResult."""
    merged = merge_frequencies(table, adjustments)

    rows: list[tuple[RangeCell, ...]] = []
    for r in range(GRID_SIZE):
        cells = []
        for c in range(GRID_SIZE):
            index = r * GRID_SIZE + c
            mix = _hand_mix(merged[index], table.offered)
            cells.append(RangeCell(
                hand=str(ALL_HANDS[index]),
                row=r,
                col=c,
                frequency=mix.frequency(mix.dominant),
                dominant=mix.dominant,
                mix=mix,
            ))
        rows.append(tuple(cells))

    applied = tuple(str(a.key) for a in adjustments)
    logger.debug(
        "Merged %s with %d adjustment(s): %s",
        table.key, len(adjustments), ", ".join(applied) or "none",
    )
    return SolveResult(
        key=str(table.key),
        grid=tuple(rows),
        legend=build_legend(table.offered),
        adjustments=applied,
    )
