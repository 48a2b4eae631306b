import pytest

from evosols.battle.core import CombatResolver
from evosols.core.errors import BattleNotFound, NotYourTurn, UnknownMove, InsufficientEnergy
from tests.helpers import FixedRng, make_creature, make_session


def _state(session):
    return [(c.current_hp, c.current_energy, c.defending, list(c.effects)) for c in session.combatants.values()]


def test_wrong_player_checked_before_move_lookup():
    s = make_session()
    with pytest.raises(NotYourTurn):
        s.submit_move("B", "no_such_move")


def test_rejections_do_not_mutate_state():
    s = make_session()
    before = _state(s)
    with pytest.raises(UnknownMove):
        s.submit_move("A", "no_such_move")
    s.combatant("A").current_energy = 5
    before = _state(s)
    with pytest.raises(InsufficientEnergy) as exc:
        s.submit_move("A", "quick_strike")
    assert exc.value.required == 10 and exc.value.available == 5
    assert _state(s) == before
    assert s.log == [] and s.turn == 1 and s.current_player == "A"


def test_inactive_session_rejects_as_not_found():
    s = make_session()
    s.abandon("B")
    with pytest.raises(BattleNotFound):
        s.submit_move("A", "quick_strike")


def test_heal_restores_power_capped_at_max():
    s = make_session()
    a = s.combatant("A")
    a.current_hp = 50
    out = s.submit_move("A", "healing_light")
    assert out.healing == 30 and out.damage == 0
    assert a.current_hp == 80
    s.submit_move("B", "iron_wall")
    a.current_hp = a.max_hp - 10
    s.submit_move("A", "healing_light")
    assert a.current_hp == a.max_hp


def test_energy_cost_is_deducted_for_every_category():
    s = make_session()
    s.submit_move("A", "iron_wall")
    # 100 - 20 + 10 regen
    assert s.combatant("A").current_energy == 90
    s.submit_move("B", "counter_stance")
    assert s.combatant("B").current_energy == 95


def test_defend_halves_incoming_damage_for_one_turn():
    s = make_session(c1=make_creature("1", attack=100, defense=0), c2=make_creature("2", attack=100, defense=0))
    s.submit_move("A", "iron_wall")
    assert s.combatant("A").defending
    hit = s.submit_move("B", "power_attack")
    # 80 * 1.05 * 0.5
    assert hit.damage == 42
    s.submit_move("A", "quick_strike")
    assert not s.combatant("A").defending


def test_counter_registers_one_turn_effect_only():
    s = make_session()
    out = s.submit_move("A", "counter_stance")
    assert out.effect
    a = s.combatant("A")
    assert a.has_effect("counter")
    hit = s.submit_move("B", "quick_strike")
    # no reflect damage is applied
    assert s.combatant("B").current_hp == s.combatant("B").max_hp
    assert hit.damage == 22
    s.submit_move("A", "quick_strike")
    assert not a.has_effect("counter")


def test_resolver_uses_injected_move_lookup():
    calls = []
    def lookup(move_id):
        calls.append(move_id)
        raise UnknownMove(move_id)
    s = make_session()
    s.resolver = CombatResolver(FixedRng(), move_lookup=lookup)
    with pytest.raises(UnknownMove):
        s.submit_move("A", "anything")
    assert calls == ["anything"]
