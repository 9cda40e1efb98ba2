"""Preflop range and postflop decision engine for live coaching.

Merges baseline preflop strategy tables with opponent-tendency and
tournament-stage adjustments into a 13×13 range grid, and ranks legal
postflop actions for heads-up flop play with a heuristic scorer.

Key public API:
    SolveEngineProtocol -- Interface for swappable engines
    SolveEngine         -- Built-in data-driven engine
    SolveResult         -- Preflop output (13×13 grid, legend)
    Decision            -- Postflop output (best action, size, alternatives)
    Rejection           -- Structured refusal with an error code
"""

from range_coach.core.errors import Rejection
from range_coach.core.results import Decision, SolveResult
from range_coach.solver.engine import EngineConfig, SolveEngine, load_engine_config
from range_coach.solver.protocol import SolveEngineProtocol

__all__ = [
    "Decision",
    "EngineConfig",
    "Rejection",
    "SolveEngine",
    "SolveEngineProtocol",
    "SolveResult",
    "load_engine_config",
]
