"""Schema-validated, immutable strategy data set.

The data set holds two kinds of tables:

  baseline     one 169-hand frequency table per
               (format, stage, seat, spot, stack_bucket)
  adjustments  signed per-hand deltas keyed by
               (tendency, stage, stack_bucket), each part may be "*"

Hand keys use range notation and are expanded at load time into dense
numpy matrices of shape (169, len(AUTHORED_CATEGORIES)). Every schema
violation raises StrategyDataError with the path of the offending value,
so an authoring bug fails at startup instead of surfacing mid-session.

JSON layout:
    {
      "version": "2026.1",
      "bb_precision": 1,
      "raise_multiplier": 3.0,
      "max_raises_per_street": 2,
      "size_menu": {"Bet_33": 0.33, "Bet_50": 0.5, "Bet_75": 0.75},
      "baseline": [
        {"format": "CASH", "stage": null, "seat": "BTN", "spot": "RFI",
         "stack_bucket": ">80bb", "hands": {"22+": {"Raise_Orange": 1.0}}}
      ],
      "adjustments": [
        {"tendency": "TAG", "stage": "*", "stack_bucket": "*",
         "hands": {"A5s-A2s": {"Bluff_Purple": 0.1}}}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

import numpy as np

from range_coach.core.errors import StrategyDataError
from range_coach.core.seat_order import canonical_seat
from range_coach.strategy.hands import HAND_COUNT, HandNotation, parse_hand_list
from range_coach.utils.constants import (
    GameFormat,
    PostflopAction,
    RangeCategory,
    Seat,
    Spot,
    StackBucket,
    Tendency,
    TournamentStage,
)

logger = logging.getLogger("range_coach.strategy.data")

_E = TypeVar("_E", bound=Enum)

WILDCARD = "*"

# Fold is the implicit remainder and is never authored
AUTHORED_CATEGORIES: tuple[RangeCategory, ...] = tuple(
    c for c in RangeCategory if c != RangeCategory.FOLD
)
CATEGORY_COLUMN: dict[RangeCategory, int] = {
    c: i for i, c in enumerate(AUTHORED_CATEGORIES)
}

DEFAULT_SIZE_MENU: dict[PostflopAction, float] = {
    PostflopAction.BET_33: 0.33,
    PostflopAction.BET_50: 0.50,
    PostflopAction.BET_75: 0.75,
    PostflopAction.BET_100: 1.00,
}
DEFAULT_BB_PRECISION = 1
DEFAULT_RAISE_MULTIPLIER = 3.0
DEFAULT_MAX_RAISES = 2

# Per-hand baseline sums may exceed 1.0 by rounding noise only
_SUM_TOLERANCE = 1e-6


@dataclass(frozen=True)
class BaselineKey:
    """Lookup key of a baseline table. ``stage`` is None for cash games."""

    format: GameFormat
    stage: TournamentStage | None
    seat: Seat
    spot: Spot
    stack_bucket: StackBucket

    def __str__(self) -> str:
        stage = self.stage.value if self.stage else "-"
        return f"{self.format}/{stage}/{self.seat}/{self.spot}/{self.stack_bucket}"


@dataclass(frozen=True)
class AdjustmentKey:
    """Lookup key of an adjustment table.

    Each field holds an enum value or ``"*"``. ``stage`` None matches cash
    contexts only; a concrete stage never matches a cash context.
    """

    tendency: str
    stage: str | None
    stack_bucket: str

    def matches(
        self,
        tendency: Tendency,
        stage: TournamentStage | None,
        stack_bucket: StackBucket,
    ) -> bool:
        if self.tendency not in (WILDCARD, tendency.value):
            return False
        if self.stack_bucket not in (WILDCARD, stack_bucket.value):
            return False
        if self.stage == WILDCARD:
            return True
        if stage is None:
            return self.stage is None
        return self.stage == stage.value

    def sort_key(self) -> tuple[str, str, str]:
        return (self.tendency, self.stage or "", self.stack_bucket)

    def __str__(self) -> str:
        return f"{self.tendency}/{self.stage or '-'}/{self.stack_bucket}"


@dataclass(frozen=True)
class BaselineTable:
    """Baseline frequencies for one spot.

    Attributes:
        key: The spot this table answers.
        frequencies: Read-only (169, categories) matrix in [0, 1].
        offered: Categories that appear anywhere in the table. Deltas only
            apply to these; a spot never gains an action it does not have.
    """

    key: BaselineKey
    frequencies: np.ndarray
    offered: frozenset[RangeCategory]


@dataclass(frozen=True)
class Adjustment:
    """Signed per-hand deltas for one exploit profile."""

    key: AdjustmentKey
    deltas: np.ndarray


def _fail(path: str, problem: str) -> StrategyDataError:
    return StrategyDataError(path, problem)


def _enum(enum_cls: type[_E], value: Any, path: str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise _fail(path, f"unknown value {value!r} (expected one of: {allowed})")


def _number(value: Any, path: str, low: float, high: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _fail(path, f"expected a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number) or not low <= number <= high:
        raise _fail(path, f"{number} outside [{low:g}, {high:g}]")
    return number


def _require(entry: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in entry:
        raise _fail(path, f"missing required key '{key}'")
    return entry[key]


def _mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _fail(path, f"expected an object, got {type(value).__name__}")
    return value


def _expand(notation: Any, path: str) -> list[HandNotation]:
    if not isinstance(notation, str):
        raise _fail(path, f"hand key must be a string, got {notation!r}")
    try:
        hands = parse_hand_list(notation)
    except ValueError as e:
        raise _fail(path, str(e))
    if not hands:
        raise _fail(path, "empty hand notation")
    return hands


def _parse_hand_table(
    hands_obj: Any,
    path: str,
    *,
    signed: bool,
) -> tuple[np.ndarray, frozenset[RangeCategory]]:
    """Expand a {notation: {category: value}} object into a dense matrix.

    Notation keys are processed in sorted order so that overlapping keys
    accumulate identically whatever order they were authored in.
    """
    hands_map = _mapping(hands_obj, path)
    matrix = np.zeros((HAND_COUNT, len(AUTHORED_CATEGORIES)), dtype=np.float64)
    seen: set[HandNotation] = set()
    offered: set[RangeCategory] = set()
    low = -1.0 if signed else 0.0

    for notation in sorted(hands_map):
        key_path = f"{path}[{notation!r}]"
        hands = _expand(notation, key_path)
        row = np.zeros(len(AUTHORED_CATEGORIES), dtype=np.float64)
        for cat_name, raw in sorted(_mapping(hands_map[notation], key_path).items()):
            cat_path = f"{key_path}[{cat_name!r}]"
            category = _enum(RangeCategory, cat_name, cat_path)
            if category == RangeCategory.FOLD:
                raise _fail(cat_path, "fold is the implicit remainder and cannot be authored")
            value = _number(raw, cat_path, low, 1.0)
            row[CATEGORY_COLUMN[category]] += value
            if value != 0.0:
                offered.add(category)

        if not signed:
            if row.sum() > 1.0 + _SUM_TOLERANCE:
                raise _fail(key_path, f"frequencies sum to {row.sum():.4f} > 1")
            for hand in hands:
                if hand in seen:
                    raise _fail(key_path, f"hand {hand} assigned more than once")
                seen.add(hand)

        for hand in hands:
            matrix[hand.index] += row

    matrix.setflags(write=False)
    return matrix, frozenset(offered)


def _parse_baseline_key(entry: Mapping[str, Any], path: str) -> BaselineKey:
    fmt = _enum(GameFormat, _require(entry, "format", path), f"{path}.format")
    stage_raw = entry.get("stage")
    if fmt == GameFormat.TOURNAMENT:
        if stage_raw is None:
            raise _fail(f"{path}.stage", "tournament tables require a stage")
        stage = _enum(TournamentStage, stage_raw, f"{path}.stage")
    else:
        if stage_raw is not None:
            raise _fail(f"{path}.stage", "cash tables must not carry a stage")
        stage = None

    seat_raw = _require(entry, "seat", path)
    try:
        seat = canonical_seat(str(seat_raw))
    except ValueError as e:
        raise _fail(f"{path}.seat", str(e))

    return BaselineKey(
        format=fmt,
        stage=stage,
        seat=seat,
        spot=_enum(Spot, _require(entry, "spot", path), f"{path}.spot"),
        stack_bucket=_enum(
            StackBucket, _require(entry, "stack_bucket", path), f"{path}.stack_bucket",
        ),
    )


def _parse_adjustment_key(entry: Mapping[str, Any], path: str) -> AdjustmentKey:
    tendency = _require(entry, "tendency", path)
    if tendency != WILDCARD:
        tendency = _enum(Tendency, tendency, f"{path}.tendency").value

    stage = _require(entry, "stage", path)
    if stage not in (None, WILDCARD):
        stage = _enum(TournamentStage, stage, f"{path}.stage").value

    bucket = _require(entry, "stack_bucket", path)
    if bucket != WILDCARD:
        bucket = _enum(StackBucket, bucket, f"{path}.stack_bucket").value

    return AdjustmentKey(tendency=tendency, stage=stage, stack_bucket=bucket)


def _parse_size_menu(value: Any, path: str) -> dict[PostflopAction, float]:
    menu: dict[PostflopAction, float] = {}
    for name, fraction in _mapping(value, path).items():
        item_path = f"{path}[{name!r}]"
        action = _enum(PostflopAction, name, item_path)
        if not action.is_bet:
            raise _fail(item_path, "only Bet_* actions belong in the size menu")
        menu[action] = _number(fraction, item_path, 0.01, 1.0)
    if not menu:
        raise _fail(path, "size menu is empty")
    return menu


class StrategyData:
    """Immutable lookup structure over baseline and adjustment tables.

    Loaded once and shared read-only by every solve; safe to use from
    concurrent sessions.
    """

    def __init__(
        self,
        baseline: Mapping[BaselineKey, BaselineTable],
        adjustments: list[Adjustment] | tuple[Adjustment, ...] = (),
        size_menu: Mapping[PostflopAction, float] | None = None,
        bb_precision: int = DEFAULT_BB_PRECISION,
        raise_multiplier: float = DEFAULT_RAISE_MULTIPLIER,
        max_raises_per_street: int = DEFAULT_MAX_RAISES,
        version: str = "unversioned",
    ) -> None:
        self._baseline = MappingProxyType(dict(baseline))
        # Canonical order keeps the delta sum independent of authoring order
        self._adjustments = tuple(
            sorted(adjustments, key=lambda a: (a.key.sort_key(), a.deltas.tobytes()))
        )
        self._size_menu = MappingProxyType(dict(size_menu or DEFAULT_SIZE_MENU))
        self._bb_precision = bb_precision
        self._raise_multiplier = raise_multiplier
        self._max_raises = max_raises_per_street
        self._version = version

    @property
    def version(self) -> str:
        return self._version

    @property
    def size_menu(self) -> Mapping[PostflopAction, float]:
        return self._size_menu

    @property
    def bb_precision(self) -> int:
        return self._bb_precision

    @property
    def raise_multiplier(self) -> float:
        return self._raise_multiplier

    @property
    def max_raises_per_street(self) -> int:
        return self._max_raises

    @property
    def baseline_keys(self) -> list[BaselineKey]:
        return sorted(self._baseline, key=str)

    @property
    def adjustments(self) -> tuple[Adjustment, ...]:
        return self._adjustments

    def baseline_for(self, key: BaselineKey) -> BaselineTable | None:
        return self._baseline.get(key)

    def adjustments_for(
        self,
        tendency: Tendency,
        stage: TournamentStage | None,
        stack_bucket: StackBucket,
    ) -> tuple[Adjustment, ...]:
        """All adjustment tables whose key matches, in canonical order."""
        return tuple(
            a for a in self._adjustments if a.key.matches(tendency, stage, stack_bucket)
        )

    def __len__(self) -> int:
        return len(self._baseline)

    @classmethod
    def from_dict(cls, data: Any) -> StrategyData:
        """Validate and load a data set from its JSON-compatible form.

        Raises:
            StrategyDataError: On any schema violation.
        """
        root = _mapping(data, "$")

        baseline_raw = _require(root, "baseline", "$")
        if not isinstance(baseline_raw, list):
            raise _fail("$.baseline", "expected a list")
        baseline: dict[BaselineKey, BaselineTable] = {}
        for i, entry in enumerate(baseline_raw):
            path = f"baseline[{i}]"
            entry = _mapping(entry, path)
            key = _parse_baseline_key(entry, path)
            if key in baseline:
                raise _fail(path, f"duplicate baseline table {key}")
            matrix, offered = _parse_hand_table(
                _require(entry, "hands", path), f"{path}.hands", signed=False,
            )
            baseline[key] = BaselineTable(key=key, frequencies=matrix, offered=offered)
            logger.debug("Loaded baseline %s (%d categories)", key, len(offered))

        adjustments_raw = root.get("adjustments", [])
        if not isinstance(adjustments_raw, list):
            raise _fail("$.adjustments", "expected a list")
        adjustments: list[Adjustment] = []
        for i, entry in enumerate(adjustments_raw):
            path = f"adjustments[{i}]"
            entry = _mapping(entry, path)
            key = _parse_adjustment_key(entry, path)
            deltas, _ = _parse_hand_table(
                _require(entry, "hands", path), f"{path}.hands", signed=True,
            )
            adjustments.append(Adjustment(key=key, deltas=deltas))

        size_menu = (
            _parse_size_menu(root["size_menu"], "$.size_menu")
            if "size_menu" in root else DEFAULT_SIZE_MENU
        )
        precision = root.get("bb_precision", DEFAULT_BB_PRECISION)
        if isinstance(precision, bool) or not isinstance(precision, int) or not 0 <= precision <= 4:
            raise _fail("$.bb_precision", f"expected an integer in [0, 4], got {precision!r}")
        max_raises = root.get("max_raises_per_street", DEFAULT_MAX_RAISES)
        if isinstance(max_raises, bool) or not isinstance(max_raises, int) or max_raises < 0:
            raise _fail("$.max_raises_per_street", f"expected a non-negative integer, got {max_raises!r}")

        result = cls(
            baseline=baseline,
            adjustments=adjustments,
            size_menu=size_menu,
            bb_precision=precision,
            raise_multiplier=_number(
                root.get("raise_multiplier", DEFAULT_RAISE_MULTIPLIER),
                "$.raise_multiplier", 1.5, 10.0,
            ),
            max_raises_per_street=max_raises,
            version=str(root.get("version", "unversioned")),
        )
        logger.info(
            "Strategy data %s loaded: %d baseline tables, %d adjustments",
            result.version, len(baseline), len(adjustments),
        )
        return result

    @classmethod
    def from_json(cls, path: Path | str) -> StrategyData:
        """Load and validate a JSON data file.

        Raises:
            StrategyDataError: If the file is unreadable, not JSON, or
                violates the schema.
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StrategyDataError(str(path), f"invalid JSON: {e}")
        except OSError as e:
            raise StrategyDataError(str(path), f"cannot read data file: {e}")
        return cls.from_dict(data)
