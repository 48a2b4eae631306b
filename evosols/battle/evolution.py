"""Evolution eligibility and behavior-driven mutation.

A creature evolves Base -> Evolved after 10 battles and Evolved -> Ultimate
after 20. The mutation comes from the evolution table entry of its dominant
lifetime trait; hybrid players get a 60/40 blend of their top two traits.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from evosols.core.errors import MaxEvolutionReached, NotEligibleForEvolution
from evosols.core.logging import logger
from evosols.core.types import STAGE_BASE, STAGE_EVOLVED, STAGE_ULTIMATE, TRAITS
from evosols.data.evolution_paths import EvolutionPath, EvolutionTier, get_path
from .behavior import Classification, classify
from .models import Creature, round_half_up

EVOLVED_AT = 10
ULTIMATE_AT = 20
MAX_HYBRID_MOVES = 3
PRIMARY_WEIGHT = 0.6
SECONDARY_WEIGHT = 0.4

REASON_NOT_ENOUGH = "not enough battles"
REASON_MAX = "max evolution reached"

@dataclass(frozen=True)
class Mutation:
    name: str
    stat_boosts: Dict[str, int]
    new_moves: List[str]
    visual_traits: Dict[str, Any]
    classification: Classification

@dataclass(frozen=True)
class EvolutionResult:
    eligible: bool
    reason: Optional[str] = None
    next_stage: Optional[str] = None
    mutation: Optional[Mutation] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

def merge_stats(primary: Dict[str, int], secondary: Dict[str, int]) -> Dict[str, int]:
    keys = list(primary) + [k for k in secondary if k not in primary]
    return {k: round_half_up(primary.get(k, 0) * PRIMARY_WEIGHT + secondary.get(k, 0) * SECONDARY_WEIGHT)
            for k in keys}

_JOINERS = {"color": "-", "aura": "+"}

def merge_visual_traits(primary: Dict[str, Any], secondary: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for k in list(primary) + [k for k in secondary if k not in primary]:
        a, b = primary.get(k), secondary.get(k)
        if a is None or b is None:
            merged[k] = a if b is None else b
        elif isinstance(a, (int, float)) and isinstance(b, (int, float)):
            merged[k] = (a + b) / 2
        else:
            merged[k] = f"{a}{_JOINERS.get(k, '-')}{b}"
    return merged

def blend_tiers(primary: EvolutionTier, secondary: EvolutionTier) -> EvolutionTier:
    return EvolutionTier(
        name=f"{primary.name}-{secondary.name}",
        stat_boosts=merge_stats(primary.stat_boosts, secondary.stat_boosts),
        new_moves=(list(primary.new_moves) + list(secondary.new_moves))[:MAX_HYBRID_MOVES],
        visual_traits=merge_visual_traits(primary.visual_traits, secondary.visual_traits),
    )

def required_battles(stage: str) -> Optional[int]:
    return {STAGE_BASE: EVOLVED_AT, STAGE_EVOLVED: ULTIMATE_AT}.get(stage)

class EvolutionEvaluator:
    def __init__(self, path_lookup: Callable[[str], EvolutionPath] = get_path):
        self.path_lookup = path_lookup

    def evaluate(self, creature: Creature) -> EvolutionResult:
        battles = creature.battle_stats.total_battles
        if battles < EVOLVED_AT:
            return EvolutionResult(False, REASON_NOT_ENOUGH)
        if creature.evolution_stage == STAGE_ULTIMATE:
            return EvolutionResult(False, REASON_MAX)
        if creature.evolution_stage == STAGE_BASE:
            nxt = STAGE_EVOLVED
        elif battles >= ULTIMATE_AT:
            nxt = STAGE_ULTIMATE
        else:
            return EvolutionResult(False, REASON_NOT_ENOUGH)
        mutation = self.mutation_for(creature, nxt)
        return EvolutionResult(True, next_stage=nxt, mutation=mutation,
                               metadata=self.metadata(creature, mutation))

    def is_eligible(self, creature: Creature) -> bool:
        return self.evaluate(creature).eligible

    def mutation_for(self, creature: Creature, stage: str) -> Mutation:
        cls = classify(creature.behavior)
        tier = self.path_lookup(cls.primary).tier(stage)
        if cls.kind == "hybrid" and cls.secondary:
            tier = blend_tiers(tier, self.path_lookup(cls.secondary).tier(stage))
        return Mutation(name=tier.name, stat_boosts=dict(tier.stat_boosts), new_moves=list(tier.new_moves),
                        visual_traits=dict(tier.visual_traits), classification=cls)

    def apply(self, creature: Creature, result: Optional[EvolutionResult] = None) -> EvolutionResult:
        """Evolve ``creature`` in place; raises when it is not eligible."""
        result = result or self.evaluate(creature)
        if not result.eligible or result.mutation is None or result.next_stage is None:
            if creature.evolution_stage == STAGE_ULTIMATE:
                raise MaxEvolutionReached(f"{creature.token_id} is already {STAGE_ULTIMATE}")
            raise NotEligibleForEvolution(f"{creature.token_id}: {result.reason}")
        m = result.mutation
        for stat, boost in m.stat_boosts.items():
            setattr(creature.stats, stat, getattr(creature.stats, stat) + boost)
        creature.stats.restore()
        creature.is_evolvable = False
        creature.evolution_stage = result.next_stage
        creature.evolution_name = m.name
        creature.evolution_moves.extend(mv for mv in m.new_moves if mv not in creature.evolution_moves)
        creature.visual_traits = dict(m.visual_traits)
        logger.info("CreatureEvolved", creature=creature.token_id, stage=result.next_stage, form=m.name,
                    behavior=m.classification.kind)
        return result

    def metadata(self, creature: Creature, mutation: Mutation) -> Dict[str, Any]:
        scores = creature.behavior.as_dict()
        new_stats = {s: getattr(creature.stats, s) + mutation.stat_boosts.get(s, 0)
                     for s in ("attack", "defense", "speed", "intelligence")}
        bs = creature.battle_stats
        dominant = mutation.classification.primary
        attributes: List[Dict[str, Any]] = [
            {"trait_type": "Evolution Stage", "value": mutation.name},
            {"trait_type": "Element", "value": creature.element},
            {"trait_type": "Level", "value": creature.level},
            {"trait_type": "Attack", "value": new_stats["attack"]},
            {"trait_type": "Defense", "value": new_stats["defense"]},
            {"trait_type": "Speed", "value": new_stats["speed"]},
            {"trait_type": "Intelligence", "value": new_stats["intelligence"]},
            {"trait_type": "Battles", "value": bs.total_battles},
            {"trait_type": "Wins", "value": bs.wins},
            {"trait_type": "Dominant Behavior", "value": dominant},
        ]
        attributes += [{"trait_type": f"{t.capitalize()} Score", "value": f"{scores[t]:.1f}"} for t in TRAITS]
        attributes += [{"trait_type": f"Special Move {i + 1}", "value": mv} for i, mv in enumerate(mutation.new_moves)]
        return {
            "name": f"{mutation.name} {creature.name}",
            "description": (f"A {creature.element} creature that evolved through {bs.total_battles} battles. "
                            f"Its dominant behavior is {dominant}."),
            "attributes": attributes,
            "properties": {
                "evolution_path": dominant,
                "visual_traits": dict(mutation.visual_traits),
                "battle_history": f"{bs.wins}W-{bs.total_battles - bs.wins}L",
            },
        }

__all__ = ["EvolutionEvaluator","EvolutionResult","Mutation","merge_stats","merge_visual_traits","blend_tiers",
           "required_battles","EVOLVED_AT","ULTIMATE_AT"]
