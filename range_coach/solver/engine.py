"""SolveEngine: the facade behind both public operations.

solve_preflop:  validate → bucket stack → baseline lookup → merge.
solve_postflop: validate both contexts → replay history → accept the
                villain's action → rank Hero's legal actions.

Every EngineError becomes a Rejection here and nowhere else. Anything
else is a defect: it is logged and re-raised, never papered over with a
default action.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from range_coach.core.context import HistoryEntry, PostflopContext, PreflopContext
from range_coach.core.errors import (
    ContextError,
    EngineError,
    ErrorCode,
    LegalityError,
    MissingBaselineError,
    Rejection,
)
from range_coach.core.results import Decision, SolveResult
from range_coach.core.validation import validate_postflop, validate_preflop
from range_coach.postflop.decision_engine import PostflopDecisionEngine
from range_coach.postflop.legality import StreetRules, StreetState, replay
from range_coach.strategy.builtin_data import load_builtin_data
from range_coach.strategy.bucketing import bucket_stack
from range_coach.strategy.range_merge import build_grid
from range_coach.strategy.strategy_data import BaselineKey, StrategyData
from range_coach.utils.constants import Actor, PostflopAction, RangeCategory

logger = logging.getLogger("range_coach.solver")

DEFAULT_CONFIG_PATH = Path.home() / ".range_coach" / "engine_config.json"


@dataclass(frozen=True)
class EngineConfig:
    """Engine settings.

    Attributes:
        data_path: JSON strategy data set; None uses the built-in data.
        bb_precision: Decimal places for BB sizes; None keeps the data
            set's own setting.
        include_alternatives: Return ranked alternatives with decisions.
    """

    data_path: Path | None = None
    bb_precision: int | None = None
    include_alternatives: bool = True


def load_engine_config(config_path: Path | None = None) -> EngineConfig | None:
    """Load engine configuration from a JSON file.

    Default path: ~/.range_coach/engine_config.json

    Returns None if the file does not exist, or if it cannot be read or
    holds invalid values (with a warning), so the caller falls back to
    defaults.

    Expected JSON format:
        {
            "data_path": "/path/to/strategy.json",
            "bb_precision": 1,
            "include_alternatives": true
        }
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return None

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read engine config at %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Engine config at %s must be a JSON object", path)
        return None

    precision = data.get("bb_precision")
    if precision is not None and (
        isinstance(precision, bool) or not isinstance(precision, int) or not 0 <= precision <= 4
    ):
        logger.warning("Engine config bb_precision must be an integer in [0, 4]: %r", precision)
        return None

    include_alternatives = data.get("include_alternatives", True)
    if not isinstance(include_alternatives, bool):
        logger.warning(
            "Engine config include_alternatives must be true or false: %r", include_alternatives,
        )
        return None

    data_path = data.get("data_path")
    return EngineConfig(
        data_path=Path(data_path).expanduser() if data_path else None,
        bb_precision=precision,
        include_alternatives=include_alternatives,
    )


class SolveEngine:
    """Stateless solve facade over an immutable strategy data set.

    Implements SolveEngineProtocol. Safe to share between threads: no call
    mutates the engine.

    Usage:
        engine = SolveEngine()
        result = engine.solve_preflop(ctx)
        decision = engine.solve_postflop(pre, post, villain_action="Bet_50")
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        data: StrategyData | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        if data is not None:
            self._data = data
        elif self._config.data_path is not None:
            self._data = StrategyData.from_json(self._config.data_path)
        else:
            self._data = load_builtin_data()
        self._rules = StreetRules.from_data(self._data, self._config.bb_precision)
        self._decider = PostflopDecisionEngine()

    @property
    def data(self) -> StrategyData:
        return self._data

    @property
    def rules(self) -> StreetRules:
        return self._rules

    # -- preflop -------------------------------------------------------------

    def solve_preflop(self, ctx: PreflopContext) -> SolveResult | Rejection:
        """Return the merged 13×13 range for ``ctx``, or a Rejection."""
        t_start = time.perf_counter()
        try:
            result = self._solve_preflop_inner(ctx)
        except EngineError as e:
            return self._reject("preflop", e, t_start)
        except Exception:
            logger.exception("Preflop solve failed for %s", ctx)
            raise

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info(
            "Preflop %s → %d raise / %d call cells (%d adjustment(s), %.1fms)",
            result.key,
            len(result.region(RangeCategory.RAISE)),
            len(result.region(RangeCategory.CALL)),
            len(result.adjustments),
            elapsed_ms,
        )
        return result

    def _solve_preflop_inner(self, ctx: PreflopContext) -> SolveResult:
        ctx = validate_preflop(ctx)
        bucket = bucket_stack(ctx.effective_stack_bb)
        key = BaselineKey(ctx.format, ctx.stage, ctx.hero_seat, ctx.spot, bucket)
        logger.debug("Effective stack %.1fbb → %s", ctx.effective_stack_bb, bucket)

        table = self._data.baseline_for(key)
        if table is None:
            raise MissingBaselineError(
                f"No baseline table for {key} in data set {self._data.version}",
                {"key": str(key)},
            )
        adjustments = self._data.adjustments_for(ctx.tendency, ctx.stage, bucket)
        return build_grid(table, adjustments)

    # -- postflop ------------------------------------------------------------

    def legal_actions(self, post: PostflopContext) -> list[PostflopAction]:
        """Legal action set for ``post.to_act``.

        Raises:
            ContextError: For a structurally invalid context.
            LegalityError: If the history is not a legal prefix.
        """
        validate_postflop(post)
        return replay(post, self._rules).legal_actions()

    def solve_postflop(
        self,
        pre: PreflopContext,
        post: PostflopContext,
        villain_action: HistoryEntry | str | None = None,
    ) -> Decision | Rejection:
        """Return Hero's best action, or a Rejection.

        ``villain_action`` is Villain's pending action when Villain is to
        act; it is checked for legality and appended before Hero decides.
        """
        t_start = time.perf_counter()
        try:
            decision = self._solve_postflop_inner(pre, post, villain_action)
        except EngineError as e:
            return self._reject("postflop", e, t_start)
        except Exception:
            logger.exception("Postflop solve failed for board %s", post.board)
            raise

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        size = f" {decision.size_bb:g}bb" if decision.size_bb is not None else ""
        logger.info(
            "Postflop %s %s → %s%s (ev=%+.3f, %d legal, %.1fms)",
            post.pot_category,
            "".join(str(c) for c in post.board),
            decision.best,
            size,
            decision.ev,
            len(decision.legal_actions),
            elapsed_ms,
        )
        return decision

    def _solve_postflop_inner(
        self,
        pre: PreflopContext,
        post: PostflopContext,
        villain_action: HistoryEntry | str | None,
    ) -> Decision:
        try:
            pre = validate_preflop(pre)
        except ContextError as e:
            raise ContextError(
                ErrorCode.INVALID_CONTEXT,
                f"Preflop context is invalid: {e.message}",
                {**e.detail, "preflop_code": e.code.value},
            ) from e
        validate_postflop(post, pre)

        state = replay(post, self._rules)
        if state.is_complete:
            raise LegalityError(
                ErrorCode.STREET_COMPLETE,
                "The street is already over; start the next street",
                {"history": ", ".join(str(e) for e in state.history)},
            )

        if villain_action is not None:
            state = self._accept_villain_action(state, villain_action)
        elif state.to_act == Actor.VILLAIN:
            raise LegalityError(
                ErrorCode.WRONG_ACTOR,
                "Villain is to act; supply Villain's action first",
                {"expected": Actor.VILLAIN.value},
            )

        return self._decider.decide(
            pre, post.board, post.pot_category, post.spr, state,
            include_alternatives=self._config.include_alternatives,
        )

    @staticmethod
    def _accept_villain_action(
        state: StreetState, villain_action: HistoryEntry | str,
    ) -> StreetState:
        entry = HistoryEntry.parse(villain_action, default_actor=Actor.VILLAIN)
        if entry.actor != Actor.VILLAIN:
            raise LegalityError(
                ErrorCode.WRONG_ACTOR,
                f"The pending action must be Villain's, got {entry.actor}'s",
                {"expected": Actor.VILLAIN.value, "actor": entry.actor.value},
            )
        state = state.apply(entry)
        if state.is_complete:
            raise LegalityError(
                ErrorCode.STREET_COMPLETE,
                f"Villain's {entry.action} ends the street; there is no decision to make",
                {"action": entry.action.value},
            )
        return state

    # -- rejections ----------------------------------------------------------

    @staticmethod
    def _reject(operation: str, error: EngineError, t_start: float) -> Rejection:
        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.warning(
            "Rejected %s request: %s: %s (%.1fms)",
            operation, error.code, error.message, elapsed_ms,
        )
        return error.to_rejection()
