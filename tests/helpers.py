import random

from evosols.battle.models import Creature, CreatureStats
from evosols.battle.session import BattleSession
from evosols.battle.core import CombatResolver


class FixedRng(random.Random):
    """Random source whose damage variance is pinned."""
    def __init__(self, variance=1.05, seed=0):
        super().__init__(seed)
        self.variance = variance

    def uniform(self, a, b):
        return self.variance


def make_creature(ref="1", element="water", *, attack=60, defense=60, max_hp=120, max_energy=100,
                  level=1, name=None, moves=None):
    stats = CreatureStats(attack=attack, defense=defense, speed=50, intelligence=60,
                          max_hp=max_hp, max_energy=max_energy, hp=max_hp, energy=max_energy)
    return Creature(token_id=str(ref), owner=f"owner-{ref}", name=name or f"Mon{ref}", element=element,
                    level=level, stats=stats, moves=list(moves or ["quick_strike"]))


def make_session(c1=None, c2=None, variance=1.05, battle_id="b1"):
    c1 = c1 or make_creature("1")
    c2 = c2 or make_creature("2")
    return BattleSession(battle_id, "A", c1, "B", c2, CombatResolver(FixedRng(variance)))
