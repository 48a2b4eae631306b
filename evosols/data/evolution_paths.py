"""Runtime loader for the per-trait evolution table.

Each trait maps to a path name and two tiers (``evolved``, ``ultimate``) with
stat boosts, up to two new move names and visual traits.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Any, List

from evosols.core.paths import EVOLUTION
from evosols.core.types import STAGE_EVOLVED
from ._schema import load_validated

@dataclass(frozen=True)
class EvolutionTier:
    name: str
    stat_boosts: Dict[str, int] = field(default_factory=dict)
    new_moves: List[str] = field(default_factory=list)
    visual_traits: Dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class EvolutionPath:
    name: str
    evolved: EvolutionTier
    ultimate: EvolutionTier

    def tier(self, stage: str) -> EvolutionTier:
        return self.evolved if stage == STAGE_EVOLVED else self.ultimate

def _tier(raw: Dict[str, Any]) -> EvolutionTier:
    return EvolutionTier(
        name=raw["name"],
        stat_boosts={k: int(v) for k, v in raw["stat_boosts"].items()},
        new_moves=list(raw["new_moves"]),
        visual_traits=dict(raw["visual_traits"]),
    )

def load_paths(path: Path) -> Dict[str, EvolutionPath]:
    raw = load_validated(path, "evolution.schema.json")
    return {
        trait: EvolutionPath(name=p["name"], evolved=_tier(p["evolved"]), ultimate=_tier(p["ultimate"]))
        for trait, p in raw.items()
    }

@lru_cache(maxsize=None)
def evolution_paths() -> Dict[str, EvolutionPath]:
    return load_paths(EVOLUTION / "paths.json")

def get_path(trait: str) -> EvolutionPath:
    return evolution_paths()[trait]

__all__ = ["EvolutionTier","EvolutionPath","load_paths","evolution_paths","get_path"]
