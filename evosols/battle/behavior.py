"""Per-move behavior scoring and trait classification.

Scores are cumulative and never decrease. The same classification rule
(dominant trait, then balanced / hybrid / pure) is used for in-battle display
and by the evolution evaluator on lifetime totals.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence

from evosols.core.types import TRAITS, DEFAULT_TRAIT
from evosols.data.moves import Move
from .models import BehaviorScores

POWER_HEAVY = 100
LOW_HP_RATIO = 0.3
HIGH_HP_RATIO = 0.7
VARIETY_WINDOW = 5
VARIETY_DISTINCT = 3
BALANCED_VARIANCE = 2
HYBRID_RATIO = 0.7

@dataclass(frozen=True)
class TrackingContext:
    hp_before: int
    max_hp: int
    recent_moves: Sequence[str] = ()

@dataclass(frozen=True)
class Classification:
    kind: str  # balanced | hybrid | pure
    primary: str
    secondary: Optional[str] = None

def score_move(move: Move, ctx: TrackingContext) -> Dict[str, int]:
    """Trait deltas for one resolved move."""
    delta = {t: 0 for t in TRAITS}
    cat = move.category
    if cat in ("attack", "special"):
        delta["aggressive"] += 3 if move.power >= POWER_HEAVY else 1
    elif cat == "defend":
        delta["defensive"] += 2
        if ctx.hp_before > HIGH_HP_RATIO * ctx.max_hp:
            delta["strategic"] += 1
    elif cat == "heal":
        delta["defensive"] += 1
        delta["strategic"] += 2
    elif cat == "counter":
        delta["strategic"] += 3
        delta["defensive"] += 1
    if ctx.hp_before < LOW_HP_RATIO * ctx.max_hp:
        delta["risky"] += 2
    if move.energy_cost == 0:
        delta["strategic"] += 2
    window = list(ctx.recent_moves)[-(VARIETY_WINDOW - 1):] + [move.id]
    if len(set(window)) >= VARIETY_DISTINCT:
        delta["adaptive"] += 1
    return delta

class BehaviorTracker:
    def track(self, scores: BehaviorScores, move: Move, ctx: TrackingContext) -> Dict[str, int]:
        delta = score_move(move, ctx)
        for trait, amount in delta.items():
            if amount:
                scores.bump(trait, amount)
        return delta

def _as_mapping(scores) -> Mapping[str, float]:
    if isinstance(scores, BehaviorScores):
        return scores.as_dict()
    return {t: scores.get(t, 0) for t in TRAITS}

def dominant_trait(scores) -> str:
    """Trait with the strictly highest score; any tie resolves to adaptive."""
    s = _as_mapping(scores)
    top = max(s.values())
    leaders = [t for t in TRAITS if s[t] == top]
    return leaders[0] if len(leaders) == 1 else DEFAULT_TRAIT

def score_variance(scores) -> float:
    values = list(_as_mapping(scores).values())
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)

def classify(scores) -> Classification:
    """Balanced when scores are flat, hybrid when the runner-up is close, else pure.

    On a tie for the top score the primary is adaptive, and the secondary is
    the first tied leader in trait order, so a hybrid blend still carries a
    trait the creature actually showed.
    """
    s = _as_mapping(scores)
    primary = dominant_trait(s)
    if score_variance(s) < BALANCED_VARIANCE:
        return Classification("balanced", primary)
    top = max(s.values())
    secondary = None
    second_score = None
    for t in TRAITS:
        if t == primary:
            continue
        if second_score is None or s[t] > second_score:
            secondary, second_score = t, s[t]
    if second_score is not None and second_score > 0 and second_score >= HYBRID_RATIO * top:
        return Classification("hybrid", primary, secondary)
    return Classification("pure", primary)

__all__ = ["TrackingContext","Classification","BehaviorTracker","score_move","dominant_trait","score_variance","classify"]
