"""Post-battle settlement: rewards, experience, leveling and record keeping.

Leveling is looped: one grant can raise several levels. Each level costs
``level * 100`` experience at the level being left.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional
import time

from .models import BehaviorScores, Creature

EXP_PER_LEVEL = 100

@dataclass(frozen=True)
class Reward:
    experience: int
    currency: float

WINNER_REWARD = Reward(experience=100, currency=0.01)
LOSER_REWARD = Reward(experience=50, currency=0.005)

LEVEL_UP_BOOSTS: Dict[str, int] = {
    "attack": 5,
    "defense": 5,
    "speed": 3,
    "intelligence": 3,
    "max_hp": 20,
    "max_energy": 10,
}

def exp_to_next(level: int) -> int:
    return level * EXP_PER_LEVEL

def apply_experience(creature: Creature, gained: int) -> dict:
    """Add experience and apply every level-up it pays for.

    Returns a summary dict ``{gained, leveled, from, to}``.
    """
    before = creature.level
    creature.experience += gained
    while creature.experience >= exp_to_next(creature.level):
        creature.experience -= exp_to_next(creature.level)
        creature.level += 1
        for stat, boost in LEVEL_UP_BOOSTS.items():
            setattr(creature.stats, stat, getattr(creature.stats, stat) + boost)
        creature.stats.restore()
    return {"gained": gained, "leveled": creature.level > before, "from": before, "to": creature.level}

@dataclass
class SettlementRecord:
    creature_ref: str
    won: bool
    reward: Reward
    behavior_delta: BehaviorScores
    level_summary: dict = field(default_factory=dict)
    evolvable: bool = False

def apply_settlement(creature: Creature, won: bool, behavior_delta: BehaviorScores,
                     *, evolvable_check=None, now: Optional[float] = None) -> SettlementRecord:
    """Persist-ready mutation of ``creature`` after one completed battle."""
    reward = WINNER_REWARD if won else LOSER_REWARD
    creature.battle_stats.record(won)
    summary = apply_experience(creature, reward.experience)
    creature.behavior.add(behavior_delta)
    if evolvable_check is not None:
        creature.is_evolvable = bool(evolvable_check(creature))
    creature.last_battle_time = time.time() if now is None else now
    return SettlementRecord(creature_ref=creature.token_id, won=won, reward=reward,
                            behavior_delta=behavior_delta.copy(), level_summary=summary,
                            evolvable=creature.is_evolvable)

__all__ = ["Reward","WINNER_REWARD","LOSER_REWARD","LEVEL_UP_BOOSTS","exp_to_next","apply_experience",
           "SettlementRecord","apply_settlement"]
