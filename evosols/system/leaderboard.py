"""Creature rankings."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Tuple

from evosols.battle.models import Creature

_SORT_KEYS: Dict[str, Callable[[Creature], Tuple]] = {
    "wins": lambda c: (c.battle_stats.wins, c.level),
    "win_rate": lambda c: (c.battle_stats.win_rate,),
    "level": lambda c: (c.level, c.experience),
    "battles": lambda c: (c.battle_stats.total_battles,),
}

@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    token_id: str
    name: str
    owner: str
    element: str
    level: int
    evolution_stage: str
    total_battles: int
    wins: int
    losses: int
    win_rate: int

def leaderboard(creatures: Iterable[Creature], sort_by: str = "wins", limit: int = 100) -> List[LeaderboardRow]:
    key = _SORT_KEYS.get(sort_by, _SORT_KEYS["wins"])
    ranked = sorted(creatures, key=key, reverse=True)[:max(0, limit)]
    return [
        LeaderboardRow(rank=i + 1, token_id=c.token_id, name=c.name, owner=c.owner, element=c.element,
                       level=c.level, evolution_stage=c.evolution_stage,
                       total_battles=c.battle_stats.total_battles, wins=c.battle_stats.wins,
                       losses=c.battle_stats.losses, win_rate=c.battle_stats.win_rate)
        for i, c in enumerate(ranked)
    ]

__all__ = ["LeaderboardRow","leaderboard"]
