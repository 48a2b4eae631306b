"""Transport-agnostic entry points for the combat core.

Wires the session registry, matchmaking, settlement and evolution to the
external collaborators (creature store, optional move-log sink, optional
notification callback). Persistence failures never block gameplay: they are
logged and queued on ``failed_writes`` for the caller to retry.
"""
from __future__ import annotations
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from evosols.core.errors import BattleNotFound, InvalidCreatures
from evosols.core.logging import logger
from evosols.system.store import BattleLogSink, CreatureStore
from .core import CombatResolver
from .evolution import EvolutionEvaluator, EvolutionResult
from .experience import LOSER_REWARD, WINNER_REWARD, Reward, SettlementRecord, apply_settlement
from .matchmaking import MatchmakingQueue
from .models import BattleSnapshot, BehaviorScores, MoveOutcome
from .registry import PlayerEntry, SessionRegistry
from .session import BattleSession

EventCallback = Callable[[str, str, Dict[str, Any]], None]

class IBattleService(Protocol):
    def create_session(self, player1: PlayerEntry, player2: PlayerEntry) -> str: ...
    def submit_move(self, session_id: str, player_id: str, move_id: str) -> MoveOutcome: ...
    def get_public_state(self, session_id: str) -> BattleSnapshot: ...
    def handle_disconnect(self, player_id: str) -> None: ...
    def evaluate_evolution(self, creature_ref: str) -> EvolutionResult: ...
    def settle(self, session_id: str) -> "Settlement": ...

@dataclass(frozen=True)
class FailedWrite:
    kind: str   # move_log | creature
    key: str
    error: str
    payload: Any = None

@dataclass
class Settlement:
    battle_id: str
    winner: str
    loser: str
    winner_reward: Reward = WINNER_REWARD
    loser_reward: Reward = LOSER_REWARD
    behavior_scores: Dict[str, BehaviorScores] = field(default_factory=dict)
    records: Dict[str, SettlementRecord] = field(default_factory=dict)

class BattleService:
    def __init__(self, store: CreatureStore, *, rng: Optional[random.Random] = None,
                 turn_timeout: Optional[float] = None, event_cb: Optional[EventCallback] = None,
                 log_sink: Optional[BattleLogSink] = None, evaluator: Optional[EvolutionEvaluator] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.registry = SessionRegistry(store.find_creature_by_ref, CombatResolver(rng),
                                        turn_timeout=turn_timeout, clock=clock)
        self.matchmaking = MatchmakingQueue()
        self.evaluator = evaluator or EvolutionEvaluator()
        self.event_cb = event_cb
        self.log_sink = log_sink
        self.failed_writes: List[FailedWrite] = []

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def create_session(self, player1: PlayerEntry, player2: PlayerEntry) -> str:
        session = self.registry.create(player1, player2)
        return session.battle_id

    def find_match(self, entry: PlayerEntry) -> Optional[str]:
        """Queue ``entry``; start a session once a second player is waiting."""
        pair = self.matchmaking.enqueue(entry)
        if pair is None:
            return None
        p1, p2 = pair
        battle_id = self.create_session(p1, p2)
        for p in pair:
            self._notify(p.player_id, "match_found", {"battle_id": battle_id, "first": p1.player_id})
        return battle_id

    def cancel_match(self, player_id: str) -> bool:
        return self.matchmaking.cancel(player_id)

    def submit_move(self, session_id: str, player_id: str, move_id: str) -> MoveOutcome:
        session = self.registry.get(session_id)
        outcome = self.registry.submit_move(session_id, player_id, move_id)
        if self.log_sink is not None:
            entry = next(e for e in reversed(session.log) if e.turn == outcome.turn)
            self._persist("move_log", session_id, lambda: self.log_sink.append(session_id, entry), entry)
        payload = {"battle_id": session_id, "turn": outcome.turn, "player": player_id, "move": move_id,
                   "damage": outcome.damage, "healing": outcome.healing, "effect": outcome.effect,
                   "next_player": outcome.next_player}
        for p in session.players:
            self._notify(p, "battle_update", payload)
            if outcome.terminal and outcome.result is not None:
                self._notify(p, "battle_end", {"battle_id": session_id, "winner": outcome.result.winner,
                                                "loser": outcome.result.loser})
        return outcome

    def get_public_state(self, session_id: str) -> BattleSnapshot:
        return self.registry.get_public_state(session_id)

    def handle_disconnect(self, player_id: str) -> None:
        self.matchmaking.cancel(player_id)
        session = self.registry.handle_disconnect(player_id)
        if session is not None:
            remaining = session.opponent_id(player_id)
            self._notify(remaining, "player_disconnected", {"battle_id": session.battle_id, "player": player_id})

    def expire_idle(self, now: Optional[float] = None) -> List[str]:
        expired = []
        for session, idle_player in self.registry.expire_idle(now):
            remaining = session.opponent_id(idle_player)
            self._notify(remaining, "turn_forfeited", {"battle_id": session.battle_id, "player": idle_player})
            expired.append(session.battle_id)
        return expired

    # ------------------------------------------------------------------
    # Settlement & evolution
    # ------------------------------------------------------------------
    def settle(self, session_id: str) -> Settlement:
        session: BattleSession = self.registry.pop_finished(session_id)
        result = session.result
        if result is None or result.winner is None or result.loser is None:
            raise BattleNotFound(session_id)
        scores = session.final_scores()
        settlement = Settlement(battle_id=session_id, winner=result.winner, loser=result.loser,
                                behavior_scores=scores)
        for player_id in (result.winner, result.loser):
            ref = session.combatant(player_id).creature.token_id
            creature = self.store.find_creature_by_ref(ref)
            if creature is None:
                logger.warn("SettlementCreatureMissing", battle_id=session_id, creature=ref)
                continue
            record = apply_settlement(creature, player_id == result.winner, scores[player_id],
                                      evolvable_check=self.evaluator.is_eligible)
            settlement.records[player_id] = record
            self._persist("creature", ref, lambda c=creature: self.store.save_creature(c), creature)
        logger.info("BattleSettled", battle_id=session_id, winner=result.winner, loser=result.loser)
        return settlement

    def evaluate_evolution(self, creature_ref: str) -> EvolutionResult:
        creature = self.store.find_creature_by_ref(creature_ref)
        if creature is None:
            raise InvalidCreatures(f"Creature not found: {creature_ref}")
        return self.evaluator.evaluate(creature)

    def evolve(self, creature_ref: str) -> EvolutionResult:
        creature = self.store.find_creature_by_ref(creature_ref)
        if creature is None:
            raise InvalidCreatures(f"Creature not found: {creature_ref}")
        result = self.evaluator.apply(creature)
        self._persist("creature", creature_ref, lambda: self.store.save_creature(creature), creature)
        return result

    # ------------------------------------------------------------------
    def _notify(self, player_id: str, event: str, payload: Dict[str, Any]):
        if self.event_cb is not None:
            self.event_cb(player_id, event, payload)

    def _persist(self, kind: str, key: str, write: Callable[[], None], payload: Any = None):
        try:
            write()
        except Exception as e:  # collaborator failures never reach gameplay
            logger.warn("PersistenceFailed", kind=kind, key=key, error=str(e))
            self.failed_writes.append(FailedWrite(kind, key, str(e), payload))

__all__ = ["BattleService","IBattleService","Settlement","FailedWrite","EventCallback"]
