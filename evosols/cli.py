from __future__ import annotations
import argparse
import random
from pathlib import Path
from typing import List, Optional

from evosols.battle.ai import choose_move
from evosols.battle.factory import mint_creature
from evosols.battle.registry import PlayerEntry
from evosols.battle.service import BattleService
from evosols.core.logging import logger
from evosols.core.types import ELEMENTS
from evosols.system.leaderboard import leaderboard
from evosols.system.settings import Settings
from evosols.system.store import JsonCreatureStore, MemoryCreatureStore
from evosols.ui.render import console, render_evolution, render_leaderboard, render_snapshot

MAX_TURNS = 500

def play_battle(service: BattleService, p1: PlayerEntry, p2: PlayerEntry, rng: random.Random,
                *, show: bool = True) -> Optional[str]:
    """Run one AI-vs-AI battle. Returns the battle id when it completed."""
    battle_id = service.create_session(p1, p2)
    session = service.registry.get(battle_id)
    for _ in range(MAX_TURNS):
        if show:
            console.print(render_snapshot(session.get_public_state()))
        me = session.combatant(session.current_player)
        outcome = service.submit_move(battle_id, me.player_id, choose_move(rng, me).id)
        if outcome.terminal:
            if show:
                console.print(render_snapshot(session.get_public_state()))
                console.print(f"[bold green]{outcome.result.winner} wins![/bold green]")
            return battle_id
    logger.warn("BattleTurnLimit", battle_id=battle_id, turns=MAX_TURNS)
    service.handle_disconnect(session.current_player)
    return None

def cmd_demo(args, settings: Settings) -> int:
    rng = random.Random(args.seed if args.seed is not None else settings.data.rng_seed)
    store = MemoryCreatureStore([
        mint_creature("1", "player-one", args.name1, args.element1),
        mint_creature("2", "player-two", args.name2, args.element2),
    ])
    service = BattleService(store, rng=rng)
    battle_id = play_battle(service, PlayerEntry("player-one", "1"), PlayerEntry("player-two", "2"), rng)
    if battle_id is None:
        return 1
    settlement = service.settle(battle_id)
    for player, scores in settlement.behavior_scores.items():
        console.print(f"{player}: " + ", ".join(f"{k}={v}" for k, v in scores.as_dict().items()))
    return 0

def cmd_simulate(args, settings: Settings) -> int:
    rng = random.Random(args.seed if args.seed is not None else settings.data.rng_seed)
    store = JsonCreatureStore(Path(args.store) if args.store else settings.store_path())
    roster = [("1", "player-one", args.name1, args.element1), ("2", "player-two", args.name2, args.element2)]
    for ref, owner, name, element in roster:
        if store.find_creature_by_ref(ref) is None:
            store.save_creature(mint_creature(ref, owner, name, element))
    service = BattleService(store, rng=rng, turn_timeout=settings.turn_timeout())
    entries = [PlayerEntry(owner, ref) for ref, owner, _, _ in roster]
    for i in range(args.battles):
        first, second = entries if i % 2 == 0 else entries[::-1]
        battle_id = play_battle(service, first, second, rng, show=args.verbose)
        if battle_id is None:
            continue
        settlement = service.settle(battle_id)
        for record in settlement.records.values():
            if record.evolvable:
                creature = store.find_creature_by_ref(record.creature_ref)
                result = service.evolve(record.creature_ref)
                console.print(render_evolution(creature.name, result))
    console.print(render_leaderboard(leaderboard(store.all_creatures(), args.sort)))
    for fw in service.failed_writes:
        console.print(f"[red]unsaved {fw.kind} {fw.key}: {fw.error}[/red]")
    return 0

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="evosols", description="Behavior-driven creature battles")
    ap.add_argument("--log-level", choices=["DEBUG","INFO","WARN","ERROR"], default=None)
    sub = ap.add_subparsers(dest="command", required=True)
    def _common(p):
        p.add_argument("--seed", type=int, default=None)
        p.add_argument("--element1", choices=ELEMENTS, default="fire")
        p.add_argument("--element2", choices=ELEMENTS, default="water")
        p.add_argument("--name1", default="Ember")
        p.add_argument("--name2", default="Ripple")
    demo = sub.add_parser("demo", help="play one rendered AI-vs-AI battle")
    _common(demo)
    sim = sub.add_parser("simulate", help="run many battles against a creature store")
    _common(sim)
    sim.add_argument("--battles", type=int, default=12)
    sim.add_argument("--store", default=None, help="creature JSON directory")
    sim.add_argument("--sort", choices=["wins","win_rate","level","battles"], default="wins")
    sim.add_argument("--verbose", action="store_true")
    return ap

def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load()
    settings.apply_logging()
    if args.log_level:
        logger.set_level(args.log_level)
    if args.command == "demo":
        return cmd_demo(args, settings)
    return cmd_simulate(args, settings)
