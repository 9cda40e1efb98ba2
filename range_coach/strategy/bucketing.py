"""Stack, risk-tier and SPR bucketing.

Pure, total lookups that reduce continuous inputs to the discrete keys
used by the strategy data set and the postflop heuristics.
"""

from __future__ import annotations

from range_coach.utils.constants import RiskTier, StackBucket, TournamentStage

_STAGE_TIERS: dict[TournamentStage, RiskTier] = {
    TournamentStage.EARLY: RiskTier.NORMAL,
    TournamentStage.MIDDLE: RiskTier.NORMAL,
    TournamentStage.NEAR_BUBBLE: RiskTier.LOW,
    TournamentStage.IN_THE_MONEY: RiskTier.CAUTIOUS,
    TournamentStage.FINAL_TABLE_BUBBLE: RiskTier.LOW,
    TournamentStage.FINAL_TABLE: RiskTier.CAUTIOUS,
}


def bucket_stack(stack_bb: float) -> StackBucket:
    """Classify an effective stack into one of four ordered buckets.

      - <=20bb: push/fold and reshove territory
      - 21-40bb: limited postflop play
      - 41-80bb: standard
      - >80bb: deep

    Upper bounds are inclusive, so 20 is SHALLOW and 20.5 is MID.
    """
    if stack_bb <= 20:
        return StackBucket.SHALLOW
    if stack_bb <= 40:
        return StackBucket.MID
    if stack_bb <= 80:
        return StackBucket.STANDARD
    return StackBucket.DEEP


def risk_tier(stage: TournamentStage | None) -> RiskTier:
    """Map a tournament stage to a risk tier; cash (None) is NORMAL."""
    if stage is None:
        return RiskTier.NORMAL
    return _STAGE_TIERS[stage]


def bucket_spr(spr: float) -> str:
    """Classify stack-to-pot ratio into a bucket.

    Three tiers:
      - low: SPR <4 (committed or near-committed)
      - medium: SPR 4-10 (standard postflop play)
      - high: SPR >10 (deep relative to pot)
    """
    if spr < 4:
        return "low"
    if spr <= 10:
        return "medium"
    return "high"
