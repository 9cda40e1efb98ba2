"""Interface any solve engine must implement.

The built-in SolveEngine (data-driven preflop merge + heuristic postflop
ranking) satisfies it; callers depend on the protocol so another backend
can be injected without changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from range_coach.core.context import HistoryEntry, PostflopContext, PreflopContext
    from range_coach.core.errors import Rejection
    from range_coach.core.results import Decision, SolveResult


@runtime_checkable
class SolveEngineProtocol(Protocol):
    """Interface for swappable solve engines.

    Usage:
        def show_range(engine: SolveEngineProtocol, ctx: PreflopContext):
            result = engine.solve_preflop(ctx)
            if not result.ok:
                ...
    """

    def solve_preflop(self, ctx: PreflopContext) -> SolveResult | Rejection:
        """Return the 13×13 range for a preflop context, or a rejection."""
        ...

    def solve_postflop(
        self,
        pre: PreflopContext,
        post: PostflopContext,
        villain_action: HistoryEntry | str | None = None,
    ) -> Decision | Rejection:
        """Return Hero's recommended postflop action, or a rejection."""
        ...
