import threading
import pytest

from evosols.battle.core import CombatResolver
from evosols.battle.registry import PlayerEntry, SessionRegistry
from evosols.battle.session import ABANDONED
from evosols.core.errors import BattleNotFound, InvalidCreatures, NotYourTurn, PlayerAlreadyInBattle
from tests.helpers import FixedRng, make_creature


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_registry(**kw):
    creatures = {c.token_id: c for c in (make_creature("1"), make_creature("2"), make_creature("3"),
                                          make_creature("4"))}
    return SessionRegistry(creatures.get, CombatResolver(FixedRng()), **kw), creatures


def test_create_copies_creatures_and_indexes_players():
    reg, creatures = make_registry()
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    assert reg.get(s.battle_id) is s
    assert reg.session_for_player("A") is s and reg.session_for_player("B") is s
    assert s.combatant("A").creature is not creatures["1"]
    reg.submit_move(s.battle_id, "A", "quick_strike")
    assert creatures["2"].stats.hp == 120


def test_unknown_creature_is_rejected():
    reg, _ = make_registry()
    with pytest.raises(InvalidCreatures):
        reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "missing"))
    assert reg.active_count() == 0


def test_player_can_only_be_in_one_battle():
    reg, _ = make_registry()
    reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    with pytest.raises(PlayerAlreadyInBattle):
        reg.create(PlayerEntry("C", "3"), PlayerEntry("A", "4"))
    assert reg.active_count() == 1


def test_disconnect_abandons_and_is_idempotent():
    reg, _ = make_registry()
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    assert reg.handle_disconnect("B") is s
    assert s.status == ABANDONED and s.result.abandoned_by == "B" and s.result.winner is None
    assert reg.handle_disconnect("B") is None
    assert reg.handle_disconnect("A") is None
    assert reg.handle_disconnect("nobody") is None
    with pytest.raises(BattleNotFound):
        reg.submit_move(s.battle_id, "A", "quick_strike")
    with pytest.raises(BattleNotFound):
        reg.pop_finished(s.battle_id)
    # players are free to battle again
    reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))


def test_completed_session_moves_to_finished():
    creatures = {"1": make_creature("1", attack=200), "2": make_creature("2", max_hp=20, defense=0)}
    reg = SessionRegistry(creatures.get, CombatResolver(FixedRng()))
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    out = reg.submit_move(s.battle_id, "A", "savage_strike")
    assert out.terminal
    with pytest.raises(BattleNotFound):
        reg.get_public_state(s.battle_id)
    assert reg.session_for_player("A") is None
    assert reg.handle_disconnect("B") is None
    assert reg.pop_finished(s.battle_id) is s
    with pytest.raises(BattleNotFound):
        reg.pop_finished(s.battle_id)


def test_idle_sessions_forfeit_after_timeout():
    clock = FakeClock()
    reg, _ = make_registry(turn_timeout=120, clock=clock)
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    clock.now = 100.0
    reg.submit_move(s.battle_id, "A", "quick_strike")
    clock.now = 200.0
    assert reg.expire_idle() == []
    clock.now = 221.0
    assert reg.expire_idle() == [(s, "B")]
    assert s.status == ABANDONED and s.result.abandoned_by == "B"
    assert reg.active_count() == 0


def test_move_landing_during_sweep_is_not_forfeited():
    clock = FakeClock()
    reg, _ = make_registry(turn_timeout=120, clock=clock)
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    clock.now = 100.0
    reg.submit_move(s.battle_id, "A", "quick_strike")
    clock.now = 221.0
    scan_idle_for = s.idle_for

    def idle_then_move(now=None):
        idle = scan_idle_for(now)
        s.submit_move("B", "quick_strike")
        return idle

    s.idle_for = idle_then_move
    assert reg.expire_idle() == []
    assert s.status == "active" and s.current_player == "A"
    assert reg.session_for_player("A") is s and reg.active_count() == 1


def test_forfeit_if_idle_rechecks_activity():
    clock = FakeClock()
    reg, _ = make_registry(clock=clock)
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    assert s.forfeit_if_idle(120.0, 120) is None
    assert s.forfeit_if_idle(120.5, 120) == "A"
    assert s.status == ABANDONED and s.result.abandoned_by == "A"
    assert s.forfeit_if_idle(500.0, 120) is None


def test_expire_idle_is_disabled_without_timeout():
    clock = FakeClock()
    reg, _ = make_registry(clock=clock)
    reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    clock.now = 10_000.0
    assert reg.expire_idle() == []


def test_concurrent_submissions_apply_exactly_once():
    reg, _ = make_registry()
    s = reg.create(PlayerEntry("A", "1"), PlayerEntry("B", "2"))
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        try:
            reg.submit_move(s.battle_id, "A", "quick_strike")
            results.append("ok")
        except NotYourTurn:
            results.append("rejected")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results.count("ok") == 1 and results.count("rejected") == 7
    assert len(s.log) == 1 and s.turn == 2
    assert s.combatant("B").current_hp == 120 - 22
