"""Combat resolution for one requested move.

Validates a move request against a battle session, computes damage, healing
and effects, and mutates the two combatant states. Randomness (damage
variance) comes from an injectable ``random.Random`` so results can be pinned.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Callable, TYPE_CHECKING
import math
import random

from evosols.core.errors import BattleNotFound, NotYourTurn, InsufficientEnergy
from evosols.core.types import element_multiplier
from evosols.data.moves import Move, Attack, Special, Heal, Defend, Counter, find_move
from .models import CombatantState

if TYPE_CHECKING:
    from .session import BattleSession

MIN_DAMAGE = 5
ENERGY_REGEN = 10
VARIANCE_RANGE = (0.9, 1.1)
DEFEND_EFFECT = "Defending - damage reduced by 50%"
COUNTER_EFFECT = "Counter stance"

@dataclass(frozen=True)
class Resolution:
    move: Move
    attacker: CombatantState
    defender: CombatantState
    damage: int = 0
    healing: int = 0
    effect: Optional[str] = None
    attacker_hp_before: int = 0
    attacker_energy_before: int = 0

    @property
    def defender_down(self) -> bool:
        return self.defender.current_hp == 0

def compute_damage(move: Move, attacker: CombatantState, defender: CombatantState, variance: float) -> int:
    a, d = attacker.creature, defender.creature
    attack_mod = a.stats.attack / 100
    defense_mod = d.stats.defense / 200
    element_mul = element_multiplier(a.element, d.element)
    level_mod = 1 + (a.level - d.level) * 0.05
    defending_mod = 0.5 if defender.defending else 1.0
    raw = move.power * attack_mod * element_mul * level_mod * variance * defending_mod * (1 - defense_mod)
    return max(MIN_DAMAGE, math.floor(raw))

class CombatResolver:
    def __init__(self, rng: Optional[random.Random] = None,
                 move_lookup: Callable[[str], Move] = find_move):
        self.rng = rng or random.Random()
        self.move_lookup = move_lookup

    def roll_variance(self) -> float:
        lo, hi = VARIANCE_RANGE
        return self.rng.uniform(lo, hi)

    def validate(self, session: "BattleSession", player_id: str, move_id: str) -> Move:
        if session.status != "active":
            raise BattleNotFound(session.battle_id)
        if player_id != session.current_player:
            raise NotYourTurn(player_id)
        move = self.move_lookup(move_id)
        attacker = session.combatant(player_id)
        if attacker.current_energy < move.energy_cost:
            raise InsufficientEnergy(move.id, move.energy_cost, attacker.current_energy)
        return move

    def resolve(self, session: "BattleSession", player_id: str, move_id: str) -> Resolution:
        """Validate then apply ``move_id`` for ``player_id``.

        Nothing is mutated unless every precondition holds.
        """
        move = self.validate(session, player_id, move_id)
        attacker = session.combatant(player_id)
        defender = session.opponent(player_id)
        hp_before, energy_before = attacker.current_hp, attacker.current_energy

        # one-turn states expire when their owner acts again
        attacker.defending = False
        attacker.effects = [e for e in attacker.effects if e.get("type") != "counter"]

        damage = healing = 0
        effect: Optional[str] = None
        if isinstance(move, (Attack, Special)):
            damage = compute_damage(move, attacker, defender, self.roll_variance())
            defender.current_hp = max(0, defender.current_hp - damage)
        elif isinstance(move, Defend):
            attacker.defending = True
            effect = DEFEND_EFFECT
        elif isinstance(move, Heal):
            healing = move.power
            attacker.current_hp = min(attacker.max_hp, attacker.current_hp + healing)
        elif isinstance(move, Counter):
            # registered only; no reflect damage is applied anywhere
            attacker.effects.append({"type": "counter", "turns": 1})
            effect = COUNTER_EFFECT
        else:
            raise TypeError(f"unhandled move variant: {type(move).__name__}")

        attacker.current_energy = max(0, attacker.current_energy - move.energy_cost)
        return Resolution(move=move, attacker=attacker, defender=defender, damage=damage,
                          healing=healing, effect=effect, attacker_hp_before=hp_before,
                          attacker_energy_before=energy_before)

    def regenerate(self, *combatants: CombatantState):
        for c in combatants:
            c.current_energy = min(c.current_energy + ENERGY_REGEN, c.max_energy)

__all__ = ["CombatResolver","Resolution","compute_damage","MIN_DAMAGE","ENERGY_REGEN"]
