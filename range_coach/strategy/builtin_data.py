"""Built-in strategy data set, generated from 8-max range tables.

Converts binary range membership (in/out) into mixed strategies per
(format, stage, seat, spot, stack bucket): core hands get pure actions,
border hands get mixed frequencies, and selected suited hands just outside
the range get bluff frequencies. Risk tier and stack depth tighten or
widen the output.

The result has the same JSON-compatible shape as an authored data file,
so it passes through StrategyData.from_dict and the same validation.

Usage:
    data = load_builtin_data()                  # cached StrategyData
    raw = generate_strategy_data()              # plain dict, e.g. to dump
"""

from __future__ import annotations

from functools import lru_cache

from range_coach.core.seat_order import SEAT_ORDER
from range_coach.strategy.bucketing import risk_tier
from range_coach.strategy.hands import (
    HandNotation,
    Range,
    build_range,
    hand_strength,
)
from range_coach.strategy.strategy_data import (
    DEFAULT_BB_PRECISION,
    DEFAULT_MAX_RAISES,
    DEFAULT_RAISE_MULTIPLIER,
    DEFAULT_SIZE_MENU,
    StrategyData,
)
from range_coach.utils.constants import (
    FACING_SPOTS,
    GameFormat,
    RangeCategory,
    RiskTier,
    Seat,
    Spot,
    StackBucket,
    Tendency,
    TournamentStage,
)

BUILTIN_VERSION = "builtin-8max-1"

ALL_IN = RangeCategory.ALL_IN.value
RAISE = RangeCategory.RAISE.value
BLUFF = RangeCategory.BLUFF.value
CALL = RangeCategory.CALL.value
LIMP = RangeCategory.LIMP.value


# ---------------------------------------------------------------------------
# 8-max range tables
# ---------------------------------------------------------------------------

OPENING_RANGES: dict[Seat, Range] = {
    Seat.UTG: build_range("77+,ATs+,A5s,KTs+,QTs+,JTs,T9s,98s,AJo+,KQo"),
    Seat.UTG1: build_range("77+,ATs+,A5s-A4s,KTs+,QTs+,JTs,T9s,98s,87s,AJo+,KQo"),
    Seat.LJ: build_range("66+,A9s+,A5s-A3s,K9s+,Q9s+,J9s+,T9s,98s,87s,76s,ATo+,KQo"),
    Seat.HJ: build_range(
        "55+,A8s+,A5s-A2s,K9s+,Q9s+,J9s+,T8s+,97s+,87s,76s,65s,ATo+,KJo+,QJo"
    ),
    Seat.CO: build_range(
        "55+,A2s+,K8s+,Q8s+,J8s+,T8s+,97s+,86s+,75s+,65s,54s,"
        "A9o+,KTo+,QJo,JTo"
    ),
    Seat.BTN: build_range(
        "22+,A2s+,K4s+,Q6s+,J7s+,T7s+,96s+,86s+,75s+,64s+,53s+,43s,"
        "A2o+,K9o+,Q9o+,J9o+,T9o"
    ),
    Seat.SB: build_range(
        "22+,A2s+,K2s+,Q5s+,J6s+,T6s+,96s+,85s+,75s+,64s+,53s+,43s,"
        "A4o+,K8o+,Q9o+,J9o+,T9o,98o"
    ),
}

_RFI_BLUFFS: dict[Seat, str] = {
    Seat.UTG: "K9s,Q9s,J9s,76s,65s",
    Seat.UTG1: "K9s,Q9s,J9s,76s,65s",
    Seat.LJ: "K8s-K6s,Q8s,J8s,65s,54s",
    Seat.HJ: "K8s-K6s,Q8s,J8s,64s,54s",
    Seat.CO: "K7s-K2s,Q7s-Q5s,J7s,T7s,96s,85s,74s,64s,53s,43s",
    Seat.BTN: "K3s-K2s,Q5s-Q2s,J6s-J4s,T6s,95s,85s,74s,63s,52s,42s,32s",
    Seat.SB: "Q4s-Q2s,J5s-J2s,T5s,95s,84s,74s,63s",
}

# Folded-to-SB completes
_SB_LIMP = "K7o-K2o,Q8o-Q5o,J8o-J7o,T8o,97o,87o,76o,65o,94s-92s,83s-82s,73s-72s,62s"

_THREE_BET_VALUE: dict[Seat, str] = {
    Seat.UTG1: "QQ+,AKs,AKo",
    Seat.LJ: "JJ+,AQs+,AKo",
    Seat.HJ: "JJ+,AQs+,AKo",
    Seat.CO: "TT+,AJs+,KQs,AQo+",
    Seat.BTN: "TT+,AJs+,KQs,AQo+",
    Seat.SB: "99+,ATs+,KJs+,AJo+",
    Seat.BB: "TT+,AJs+,KQs,AQo+",
}

_THREE_BET_BLUFF: dict[Seat, str] = {
    Seat.UTG1: "A5s",
    Seat.LJ: "A5s-A4s",
    Seat.HJ: "A5s-A4s",
    Seat.CO: "A5s-A3s,K9s,76s,65s,54s",
    Seat.BTN: "A5s-A3s,K9s,76s,65s,54s",
    Seat.SB: "A5s-A2s,K9s-K8s,T9s,98s,87s,76s,65s,54s",
    Seat.BB: "A5s-A3s,76s,65s,54s",
}

_CALL_VS_OPEN: dict[Seat, str] = {
    Seat.UTG1: "JJ-TT,AQs-AJs,KQs",
    Seat.LJ: "TT-66,AQs-A9s,AQo,KQs-KJs,QJs-QTs,JTs,T9s,98s,87s",
    Seat.HJ: "TT-66,AQs-A9s,AQo,KQs-KJs,QJs-QTs,JTs,T9s,98s,87s",
    Seat.CO: "TT-55,AQs-A8s,AQo-AJo,KQs-KTs,KQo,QJs-Q9s,JTs-J9s,T9s-T8s,98s-97s,87s-86s,76s,65s",
    Seat.BTN: (
        "TT-44,AQs-A6s,AQo-ATo,KQs-K9s,KQo-KJo,QJs-Q9s,QJo,JTs-J8s,JTo,"
        "T9s-T8s,T9o,98s-97s,87s-86s,76s-75s,65s-64s,54s"
    ),
    Seat.SB: "TT-77,AQs-ATs,KQs,QJs,JTs",
    Seat.BB: (
        "99-22,AJs-A2s,AJo-A5o,KQs-K5s,KQo-K9o,QJs-Q7s,QJo-Q9o,JTs-J7s,JTo-J9o,"
        "T9s-T7s,T9o-T8o,98s-96s,98o,87s-85s,87o,76s-75s,65s-64s,54s-53s,43s"
    ),
}

_FOUR_BET_VALUE: dict[Seat, str] = {
    Seat.UTG1: "KK+,AKs",
    Seat.LJ: "KK+,AKs",
    Seat.HJ: "KK+,AKs",
    Seat.CO: "QQ+,AKs,AKo",
    Seat.BTN: "QQ+,AKs,AKo",
    Seat.SB: "QQ+,AKs,AKo",
    Seat.BB: "QQ+,AKs,AKo",
}

_FOUR_BET_BLUFF: dict[Seat, str] = {
    Seat.UTG1: "A5s",
    Seat.LJ: "A5s-A4s",
    Seat.HJ: "A5s-A4s",
    Seat.CO: "A5s-A3s",
    Seat.BTN: "A5s-A3s",
    Seat.SB: "A5s-A4s",
    Seat.BB: "A5s-A4s",
}

_CALL_VS_3BET: dict[Seat, str] = {
    Seat.UTG1: "QQ-TT,AQs-AJs,AKo,KQs",
    Seat.LJ: "QQ-99,AQs-AJs,KQs,AQo",
    Seat.HJ: "QQ-99,AQs-AJs,KQs,AQo",
    Seat.CO: "JJ-88,AQs-ATs,KQs-KJs,QJs,JTs,T9s,AQo",
    Seat.BTN: "JJ-88,AQs-ATs,KQs-KJs,QJs,JTs,T9s,AQo",
    Seat.SB: "JJ-99,AQs-AJs,KQs,AQo",
    Seat.BB: "JJ-99,AQs-AJs,KQs,AQo",
}

_VS_4BET_JAM: dict[StackBucket, str] = {
    StackBucket.SHALLOW: "99+,AJs+,AQo+",
    StackBucket.MID: "TT+,AQs+,AKo",
    StackBucket.STANDARD: "QQ+,AKs,AKo",
    StackBucket.DEEP: "KK+,AKs",
}

_VS_4BET_CALL: dict[StackBucket, str] = {
    StackBucket.SHALLOW: "",
    StackBucket.MID: "99,AJs",
    StackBucket.STANDARD: "JJ-TT,AQs",
    StackBucket.DEEP: "QQ-JJ,AKo,AQs",
}

_CALL_VS_ALL_IN: dict[StackBucket, str] = {
    StackBucket.SHALLOW: "55+,A8s+,A5s,KTs+,QJs,ATo+,KQo",
    StackBucket.MID: "88+,ATs+,KQs,AQo+",
    StackBucket.STANDARD: "TT+,AQs+,AKo",
    StackBucket.DEEP: "QQ+,AKs,AKo",
}

_OVERLIMP = "66-22,KJs,QJs,JTs,T9s,98s,87s,76s,65s,54s"
_BB_ISO = "88+,ATs+,KTs+,QJs,AJo+,KQo"

_BORDER_SCALE = {RiskTier.LOW: 0.0, RiskTier.CAUTIOUS: 0.75, RiskTier.NORMAL: 1.0}
_BLUFF_TIER_SCALE = {RiskTier.LOW: 0.0, RiskTier.CAUTIOUS: 0.5, RiskTier.NORMAL: 1.0}
_BLUFF_DEPTH_SCALE = {
    StackBucket.SHALLOW: 0.0,
    StackBucket.MID: 0.5,
    StackBucket.STANDARD: 1.0,
    StackBucket.DEEP: 1.0,
}
_CALL_SCALE = {RiskTier.LOW: 0.7, RiskTier.CAUTIOUS: 0.85, RiskTier.NORMAL: 1.0}


# ---------------------------------------------------------------------------
# Table construction
# ---------------------------------------------------------------------------


def _split(hand_range: Range) -> tuple[list[HandNotation], list[HandNotation]]:
    """Split range into core (top 60%) and border (bottom 40%) hands."""
    ranked = hand_range.ranked()
    if not ranked:
        return [], []
    split = max(1, int(len(ranked) * 0.6))
    return ranked[:split], ranked[split:]


def _mix(hand: HandNotation, low: float, high: float) -> float:
    return max(low, min(high, hand_strength(hand)))


class _TableBuilder:
    """Accumulates one baseline table; the first assignment of a hand wins."""

    def __init__(self) -> None:
        self._rows: dict[HandNotation, dict[str, float]] = {}

    def assign(self, hands: list[HandNotation] | Range, mix: dict[str, float]) -> None:
        items = hands.ranked() if isinstance(hands, Range) else hands
        row = {cat: round(freq, 3) for cat, freq in mix.items() if round(freq, 3) > 0}
        if not row:
            return
        excess = sum(row.values()) - 1.0
        if excess > 0:
            last = list(row)[-1]
            row[last] = round(row[last] - excess, 3)
        for hand in items:
            if hand not in self._rows:
                self._rows[hand] = dict(row)

    def assign_each(self, hands: list[HandNotation], fn) -> None:
        for hand in hands:
            self.assign([hand], fn(hand))

    def assigned(self) -> Range:
        return Range(hands=set(self._rows))

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            str(h): row
            for h, row in sorted(self._rows.items(), key=lambda item: item[0].index)
        }


def _rfi(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    table = _TableBuilder()
    core, border = _split(OPENING_RANGES[seat])
    value = ALL_IN if bucket == StackBucket.SHALLOW else RAISE
    table.assign(core, {value: 1.0})

    scale = _BORDER_SCALE[tier]
    table.assign_each(border, lambda h: {RAISE: _mix(h, 0.3, 0.7) * scale})

    bluff = 0.35 * _BLUFF_TIER_SCALE[tier] * _BLUFF_DEPTH_SCALE[bucket]
    table.assign(build_range(_RFI_BLUFFS[seat]).minus(OPENING_RANGES[seat]), {BLUFF: bluff})

    if seat == Seat.SB:
        table.assign(build_range(_SB_LIMP), {LIMP: 0.6 * scale})
    return table


def _vs_open(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    table = _TableBuilder()
    core, border = _split(build_range(_THREE_BET_VALUE[seat]))
    value = ALL_IN if bucket == StackBucket.SHALLOW else RAISE
    table.assign(core, {value: 1.0})
    table.assign_each(border, lambda h: {value: _mix(h, 0.3, 0.7), CALL: 1.0 - _mix(h, 0.3, 0.7)})

    bluff = 0.5 * _BLUFF_TIER_SCALE[tier] * _BLUFF_DEPTH_SCALE[bucket]
    table.assign(build_range(_THREE_BET_BLUFF[seat]), {BLUFF: bluff})

    call_core, call_border = _split(build_range(_CALL_VS_OPEN[seat]))
    table.assign(call_core, {CALL: 0.9 * _CALL_SCALE[tier]})
    table.assign(call_border, {CALL: 0.6 * _CALL_SCALE[tier] * _BORDER_SCALE[tier]})
    return table


def _vs_3bet(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    table = _TableBuilder()
    value = ALL_IN if bucket in (StackBucket.SHALLOW, StackBucket.MID) else RAISE
    core, border = _split(build_range(_FOUR_BET_VALUE[seat]))
    table.assign(core, {value: 1.0})
    table.assign_each(border, lambda h: {value: _mix(h, 0.4, 0.8), CALL: 1.0 - _mix(h, 0.4, 0.8)})

    bluff = 0.4 * _BLUFF_TIER_SCALE[tier] * _BLUFF_DEPTH_SCALE[bucket]
    table.assign(build_range(_FOUR_BET_BLUFF[seat]), {BLUFF: bluff})

    call_core, call_border = _split(build_range(_CALL_VS_3BET[seat]))
    table.assign(call_core, {CALL: 0.85 * _CALL_SCALE[tier]})
    table.assign(call_border, {CALL: 0.5 * _CALL_SCALE[tier] * _BORDER_SCALE[tier]})
    return table


def _vs_4bet(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    table = _TableBuilder()
    table.assign(build_range(_VS_4BET_JAM[bucket]), {ALL_IN: 1.0})
    if _VS_4BET_CALL[bucket]:
        table.assign(build_range(_VS_4BET_CALL[bucket]), {CALL: 0.7 * _CALL_SCALE[tier]})
    return table


def _vs_all_in(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    table = _TableBuilder()
    core, border = _split(build_range(_CALL_VS_ALL_IN[bucket]))
    table.assign(core, {CALL: _CALL_SCALE[tier]})
    table.assign(border, {CALL: 0.6 * _CALL_SCALE[tier] * _BORDER_SCALE[tier]})
    return table


def _vs_limp(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    table = _TableBuilder()
    value = ALL_IN if bucket == StackBucket.SHALLOW else RAISE

    if seat == Seat.BB:
        # Checking the option is free, so everything not raised continues
        table.assign(build_range(_BB_ISO), {value: 1.0})
        table.assign(build_range("22+,A2s+,K2s+,Q2s+,J2s+,T2s+,92s+,82s+,72s+,62s+,52s+,42s+,32s,"
                                 "A2o+,K2o+,Q2o+,J2o+,T2o+,92o+,82o+,72o+,62o+,52o+,42o+,32o"),
                     {CALL: 1.0})
        return table

    core, border = _split(OPENING_RANGES[seat])
    table.assign(core, {value: 1.0})
    passive = LIMP if seat == Seat.SB else CALL
    table.assign(build_range(_OVERLIMP).minus(Range(hands=set(core))), {passive: 0.5})
    table.assign_each(border, lambda h: {RAISE: _mix(h, 0.3, 0.7) * _BORDER_SCALE[tier]})
    return table


def _bvb(seat: Seat, tier: RiskTier, bucket: StackBucket) -> _TableBuilder:
    if seat == Seat.SB:
        table = _TableBuilder()
        core, border = _split(OPENING_RANGES[Seat.SB])
        value = ALL_IN if bucket == StackBucket.SHALLOW else RAISE
        table.assign(core, {value: 1.0})
        table.assign_each(border, lambda h: {
            RAISE: _mix(h, 0.3, 0.7) * _BORDER_SCALE[tier],
            LIMP: 1.0 - _mix(h, 0.3, 0.7),
        })
        table.assign(build_range(_SB_LIMP), {LIMP: 0.8})
        return table
    return _vs_open(Seat.BB, tier, bucket)


_SPOT_BUILDERS = {
    Spot.RFI: _rfi,
    Spot.VS_OPEN: _vs_open,
    Spot.VS_3BET: _vs_3bet,
    Spot.VS_4BET: _vs_4bet,
    Spot.VS_ALL_IN: _vs_all_in,
    Spot.VS_LIMP: _vs_limp,
    Spot.BVB: _bvb,
}


def seats_for_spot(spot: Spot) -> list[Seat]:
    """Hero seats for which a spot can occur at the table."""
    if spot == Spot.RFI:
        return [s for s in SEAT_ORDER if s != Seat.BB]
    if spot in FACING_SPOTS:
        return list(SEAT_ORDER[1:])
    return [Seat.SB, Seat.BB]


# ---------------------------------------------------------------------------
# Exploit adjustments
# ---------------------------------------------------------------------------

_BLUFF_CANDIDATES = "A5s-A2s,K9s-K6s,Q9s-Q8s,J9s,T8s,97s,86s,75s,65s,54s"
_MARGINAL_CALLS = "ATo-A9o,KJo-KTo,QJo-QTo,JTo,K9s,Q9s,J8s,T8s"
_WIDE_BLUFFS = (
    "A5s-A2s,K9s-K2s,Q9s-Q2s,J9s-J4s,T8s-T6s,97s-95s,86s-85s,75s-74s,"
    "65s-63s,54s-52s,43s-42s,32s"
)

_TENDENCY_ADJUSTMENTS: dict[Tendency, dict[str, dict[str, float]]] = {
    Tendency.TAG: {
        _BLUFF_CANDIDATES: {BLUFF: 0.10},
        _MARGINAL_CALLS: {CALL: -0.10},
    },
    Tendency.NIT: {
        _BLUFF_CANDIDATES: {BLUFF: 0.20},
        _MARGINAL_CALLS: {CALL: -0.20},
        "A9s-A6s,98s,87s,76s": {RAISE: 0.10},
    },
    Tendency.LAG: {
        "TT-88,AJs-ATs,KQs,AQo-AJo": {RAISE: 0.15},
        "KJs,QJs,JTs,ATo,KQo": {CALL: 0.10},
        "A5s-A2s,K9s-K6s": {BLUFF: -0.10},
        "JJ-TT,AQs": {ALL_IN: 0.10},
    },
    Tendency.FISH: {
        "66-22,A9o-A7o,KJo-KTo,QJo,K8s-K7s": {RAISE: 0.20},
        _WIDE_BLUFFS: {BLUFF: -0.30},
        "A9s-A6s,KTs,QTs": {CALL: 0.10},
    },
    Tendency.MANIAC: {
        "TT-77,AQo-AJo,KQs,AJs-ATs": {CALL: 0.20},
        "JJ-99,AQs,AKo": {ALL_IN: 0.20},
        _WIDE_BLUFFS: {BLUFF: -0.30},
    },
}

_BUBBLE_ADJUSTMENT: dict[str, dict[str, float]] = {
    "99-22,AJs-A2s,KQs-K9s,QJs-Q9s,JTs-J9s,T9s,98s,87s,76s,AQo-A9o,KQo-KJo": {CALL: -0.15},
    "TT-88,AQs,AJs-ATs,AQo": {ALL_IN: -0.10},
}

_BUBBLE_STAGES = (TournamentStage.NEAR_BUBBLE, TournamentStage.FINAL_TABLE_BUBBLE)


def _adjustments() -> list[dict]:
    entries = [
        {"tendency": tendency.value, "stage": "*", "stack_bucket": "*", "hands": hands}
        for tendency, hands in _TENDENCY_ADJUSTMENTS.items()
    ]
    entries.extend(
        {"tendency": "*", "stage": stage.value, "stack_bucket": "*", "hands": _BUBBLE_ADJUSTMENT}
        for stage in _BUBBLE_STAGES
    )
    return entries


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def generate_strategy_data() -> dict:
    """Generate the complete built-in data set as a JSON-compatible dict.

    Tables only depend on the risk tier, so stages sharing a tier share
    one generated table object.
    """
    stages: list[tuple[GameFormat, TournamentStage | None]] = [(GameFormat.CASH, None)]
    stages.extend((GameFormat.TOURNAMENT, stage) for stage in TournamentStage)

    cache: dict[tuple, dict[str, dict[str, float]]] = {}
    baseline: list[dict] = []
    for fmt, stage in stages:
        tier = risk_tier(stage)
        for spot, builder in _SPOT_BUILDERS.items():
            for seat in seats_for_spot(spot):
                for bucket in StackBucket:
                    cache_key = (tier, spot, seat, bucket)
                    if cache_key not in cache:
                        cache[cache_key] = builder(seat, tier, bucket).to_dict()
                    baseline.append({
                        "format": fmt.value,
                        "stage": stage.value if stage else None,
                        "seat": seat.value,
                        "spot": spot.value,
                        "stack_bucket": bucket.value,
                        "hands": cache[cache_key],
                    })

    return {
        "version": BUILTIN_VERSION,
        "bb_precision": DEFAULT_BB_PRECISION,
        "raise_multiplier": DEFAULT_RAISE_MULTIPLIER,
        "max_raises_per_street": DEFAULT_MAX_RAISES,
        "size_menu": {a.value: f for a, f in DEFAULT_SIZE_MENU.items()},
        "baseline": baseline,
        "adjustments": _adjustments(),
    }


@lru_cache(maxsize=1)
def load_builtin_data() -> StrategyData:
    """Build and validate the built-in data set once per process."""
    return StrategyData.from_dict(generate_strategy_data())
