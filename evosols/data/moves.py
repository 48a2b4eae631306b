"""Move Catalog: read-only registry of move definitions.

Moves are a closed set of variants (Attack, Defend, Heal, Counter, Special),
each carrying only the fields its effect needs. The catalog is parsed once
from ``assets/moves/moves.json`` and cached.
"""
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import ClassVar, Dict, Any, Union

from evosols.core.errors import UnknownMove
from evosols.core.paths import MOVES
from ._schema import load_validated

@dataclass(frozen=True)
class Attack:
    category: ClassVar[str] = "attack"
    id: str
    name: str
    power: int
    energy_cost: int

@dataclass(frozen=True)
class Special:
    category: ClassVar[str] = "special"
    id: str
    name: str
    power: int
    energy_cost: int

@dataclass(frozen=True)
class Heal:
    category: ClassVar[str] = "heal"
    id: str
    name: str
    power: int
    energy_cost: int

@dataclass(frozen=True)
class Defend:
    category: ClassVar[str] = "defend"
    power: ClassVar[int] = 0
    id: str
    name: str
    energy_cost: int

@dataclass(frozen=True)
class Counter:
    category: ClassVar[str] = "counter"
    power: ClassVar[int] = 0
    id: str
    name: str
    energy_cost: int

Move = Union[Attack, Special, Heal, Defend, Counter]

_VARIANTS: Dict[str, type] = {
    "attack": Attack,
    "special": Special,
    "heal": Heal,
    "defend": Defend,
    "counter": Counter,
}

def move_from_dict(raw: Dict[str, Any]) -> Move:
    cls = _VARIANTS[raw["category"]]
    if cls in (Defend, Counter):
        return cls(id=raw["id"], name=raw["name"], energy_cost=int(raw["energy_cost"]))
    return cls(id=raw["id"], name=raw["name"], power=int(raw["power"]), energy_cost=int(raw["energy_cost"]))

def load_catalog(path: Path) -> Dict[str, Move]:
    raw = load_validated(path, "moves.schema.json")
    catalog: Dict[str, Move] = {}
    for entry in raw:
        mv = move_from_dict(entry)
        catalog[mv.id] = mv
    return catalog

@lru_cache(maxsize=None)
def _catalog() -> Dict[str, Move]:
    return load_catalog(MOVES / "moves.json")

def find_move(move_id: str) -> Move:
    """Return the catalog move with ``move_id`` or raise :class:`UnknownMove`."""
    try:
        return _catalog()[move_id]
    except KeyError:
        raise UnknownMove(move_id) from None

def all_moves() -> Dict[str, Move]:
    return dict(_catalog())

__all__ = ["Attack","Special","Heal","Defend","Counter","Move","move_from_dict","load_catalog","find_move","all_moves"]
