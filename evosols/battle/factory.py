"""Factory helpers for minting creatures from element templates.

Shared across the battle service, CLI and tests.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from evosols.core.errors import InvalidCreatures
from .models import Creature, CreatureStats

ELEMENT_TEMPLATES: Dict[str, Tuple[Dict[str, int], List[str]]] = {
    "fire": (
        {"attack": 80, "defense": 40, "speed": 60, "intelligence": 50, "max_hp": 100, "max_energy": 100},
        ["savage_strike", "power_attack", "berserker_rage"],
    ),
    "water": (
        {"attack": 60, "defense": 60, "speed": 50, "intelligence": 60, "max_hp": 120, "max_energy": 100},
        ["quick_strike", "healing_light", "tactical_strike"],
    ),
    "earth": (
        {"attack": 40, "defense": 80, "speed": 30, "intelligence": 70, "max_hp": 150, "max_energy": 100},
        ["iron_wall", "counter_stance", "energy_burst"],
    ),
}

def mint_creature(token_id: str, owner: str, name: str, element: str) -> Creature:
    element = element.lower()
    if element not in ELEMENT_TEMPLATES:
        raise InvalidCreatures(f"Invalid element: {element}")
    base, moves = ELEMENT_TEMPLATES[element]
    stats = CreatureStats(**base, hp=base["max_hp"], energy=base["max_energy"])
    return Creature(token_id=str(token_id), owner=owner.lower(), name=name, element=element,
                    stats=stats, moves=list(moves))

__all__ = ["ELEMENT_TEMPLATES","mint_creature"]
