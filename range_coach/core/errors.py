"""Error taxonomy for the engine.

Internals raise EngineError subclasses; the SolveEngine facade turns them
into Rejection values so callers always get a specific, renderable reason.
Defects in the strategy data set raise StrategyDataError at load time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ErrorCode(StrEnum):
    # Preflop context
    INVALID_STAGE = "invalid_stage"
    INVALID_VS_POSITION = "invalid_vs_position"
    INVALID_BLIND_VS_BLIND = "invalid_blind_vs_blind"
    STACK_OUT_OF_RANGE = "stack_out_of_range"
    MISSING_BASELINE_DATA = "missing_baseline_data"
    # Structural / postflop context
    INVALID_CONTEXT = "invalid_context"
    # Postflop actions
    ILLEGAL_ACTION = "illegal_action"
    WRONG_ACTOR = "wrong_actor"
    UNKNOWN_ACTION = "unknown_action"
    STREET_COMPLETE = "street_complete"


class EngineError(Exception):
    """Base class for every error the engine reports as a rejection."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        detail: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail or {}

    def to_rejection(self) -> Rejection:
        return Rejection(code=self.code, message=self.message, detail=dict(self.detail))


class ContextError(EngineError):
    """A context that cannot occur in real play."""


class LegalityError(EngineError):
    """A postflop action that the legality state machine refuses."""


class MissingBaselineError(EngineError):
    """No baseline table exists for a validated preflop context."""

    def __init__(self, message: str, detail: dict[str, str] | None = None) -> None:
        super().__init__(ErrorCode.MISSING_BASELINE_DATA, message, detail)


class StrategyDataError(ValueError):
    """Schema violation in the strategy data set, raised at load time."""

    def __init__(self, path: str, problem: str) -> None:
        super().__init__(f"{path}: {problem}")
        self.path = path
        self.problem = problem


@dataclass(frozen=True)
class Rejection:
    """Structured refusal returned by the public engine operations.

    Attributes:
        code: Machine-readable reason.
        message: Human-readable explanation for the boundary layer.
        detail: Extra key/value context (e.g. the offending field).
    """

    code: ErrorCode
    message: str
    detail: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False
