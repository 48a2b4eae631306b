"""Battle and creature records.

``Creature`` is the long-lived persisted record owned by the surrounding
application; ``CombatantState`` is the per-session mutable view of one
creature and is never shared outside its session.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple

from evosols.core.types import TRAITS, STAGE_BASE

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

@dataclass
class CreatureStats:
    attack: int = 10
    defense: int = 10
    speed: int = 10
    intelligence: int = 10
    max_hp: int = 100
    max_energy: int = 100
    hp: int = 100
    energy: int = 100

    def restore(self):
        self.hp = self.max_hp
        self.energy = self.max_energy

@dataclass
class BehaviorScores:
    aggressive: int = 0
    defensive: int = 0
    strategic: int = 0
    risky: int = 0
    adaptive: int = 0

    def bump(self, trait: str, amount: int):
        if amount < 0:
            raise ValueError("behavior scores never decrease")
        setattr(self, trait, getattr(self, trait) + amount)

    def add(self, other: "BehaviorScores"):
        for t in TRAITS:
            self.bump(t, getattr(other, t))

    def as_dict(self) -> Dict[str, int]:
        return {t: getattr(self, t) for t in TRAITS}

    def copy(self) -> "BehaviorScores":
        return BehaviorScores(**self.as_dict())

@dataclass
class BattleStats:
    total_battles: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: int = 0

    def record(self, won: bool):
        self.total_battles += 1
        if won:
            self.wins += 1
        else:
            self.losses += 1
        self.recompute()

    def recompute(self):
        if self.total_battles == 0:
            self.win_rate = 0
        else:
            self.win_rate = round_half_up(self.wins / self.total_battles * 100)

@dataclass
class Creature:
    token_id: str
    owner: str
    name: str
    element: str
    level: int = 1
    experience: int = 0
    evolution_stage: str = STAGE_BASE
    stats: CreatureStats = field(default_factory=CreatureStats)
    behavior: BehaviorScores = field(default_factory=BehaviorScores)
    battle_stats: BattleStats = field(default_factory=BattleStats)
    is_evolvable: bool = False
    moves: List[str] = field(default_factory=list)
    evolution_name: Optional[str] = None
    evolution_moves: List[str] = field(default_factory=list)
    visual_traits: Dict[str, Any] = field(default_factory=dict)
    last_battle_time: Optional[float] = None

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Creature":
        stats = CreatureStats(**data.get("stats", {}))
        behavior = BehaviorScores(**data.get("behavior", {}))
        battle_stats = BattleStats(**data.get("battle_stats", {}))
        battle_stats.recompute()
        return cls(
            token_id=str(data["token_id"]),
            owner=data.get("owner", ""),
            name=data.get("name", ""),
            element=data["element"],
            level=data.get("level", 1),
            experience=data.get("experience", 0),
            evolution_stage=data.get("evolution_stage", STAGE_BASE),
            stats=stats,
            behavior=behavior,
            battle_stats=battle_stats,
            is_evolvable=data.get("is_evolvable", False),
            moves=list(data.get("moves", [])),
            evolution_name=data.get("evolution_name"),
            evolution_moves=list(data.get("evolution_moves", [])),
            visual_traits=dict(data.get("visual_traits", {})),
            last_battle_time=data.get("last_battle_time"),
        )

@dataclass
class CombatantState:
    player_id: str
    creature: Creature
    current_hp: int = 0
    current_energy: int = 0
    defending: bool = False
    effects: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def enter(cls, player_id: str, creature: Creature) -> "CombatantState":
        return cls(player_id=player_id, creature=creature,
                   current_hp=creature.stats.max_hp, current_energy=creature.stats.max_energy)

    @property
    def max_hp(self) -> int:
        return self.creature.stats.max_hp

    @property
    def max_energy(self) -> int:
        return self.creature.stats.max_energy

    def has_effect(self, kind: str) -> bool:
        return any(e.get("type") == kind for e in self.effects)

@dataclass(frozen=True)
class LogEntry:
    turn: int
    player_id: str
    move_id: str
    damage: int = 0
    healing: int = 0
    effect: Optional[str] = None
    timestamp: float = 0.0

@dataclass(frozen=True)
class BattleResult:
    winner: Optional[str] = None
    loser: Optional[str] = None
    is_draw: bool = False
    abandoned_by: Optional[str] = None

@dataclass(frozen=True)
class MoveOutcome:
    battle_id: str
    turn: int
    player_id: str
    move_id: str
    damage: int = 0
    healing: int = 0
    effect: Optional[str] = None
    terminal: bool = False
    next_player: Optional[str] = None
    result: Optional[BattleResult] = None

@dataclass(frozen=True)
class CombatantView:
    player_id: str
    creature_name: str
    element: str
    level: int
    current_hp: int
    max_hp: int
    current_energy: int
    max_energy: int
    defending: bool

    @classmethod
    def of(cls, c: CombatantState) -> "CombatantView":
        return cls(player_id=c.player_id, creature_name=c.creature.name, element=c.creature.element,
                   level=c.creature.level, current_hp=c.current_hp, max_hp=c.max_hp,
                   current_energy=c.current_energy, max_energy=c.max_energy, defending=c.defending)

@dataclass(frozen=True)
class BattleSnapshot:
    battle_id: str
    status: str
    turn: int
    current_player: str
    combatants: Tuple[CombatantView, CombatantView]
    recent_log: Tuple[LogEntry, ...] = ()
    result: Optional[BattleResult] = None

    def combatant(self, player_id: str) -> CombatantView:
        for c in self.combatants:
            if c.player_id == player_id:
                return c
        raise KeyError(player_id)

__all__ = [
    "round_half_up","CreatureStats","BehaviorScores","BattleStats","Creature","CombatantState",
    "LogEntry","BattleResult","MoveOutcome","CombatantView","BattleSnapshot"
]
