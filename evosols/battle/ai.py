from __future__ import annotations
import random

from evosols.data.moves import Move, all_moves, find_move
from .models import CombatantState

def choose_move(rng: random.Random, me: CombatantState) -> Move:
    """Pick a random affordable move from the creature's own moves.

    Heals only when hurt; falls back to the cheapest affordable catalog move.
    """
    own = [find_move(m) for m in me.creature.moves]
    usable = [m for m in own if m.energy_cost <= me.current_energy]
    if me.current_hp >= me.max_hp:
        usable = [m for m in usable if m.category != "heal"] or usable
    if usable:
        return rng.choice(usable)
    affordable = sorted((m for m in all_moves().values() if m.energy_cost <= me.current_energy),
                        key=lambda m: m.energy_cost)
    return affordable[0]
