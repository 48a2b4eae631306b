"""Battle session: the turn state machine for one 1v1 battle.

States: ``active -> completed`` when a creature's hp reaches 0, or
``active -> abandoned`` on disconnect / forfeit. ``submit_move`` is the only
gameplay mutator; every public mutator holds the session lock.
"""
from __future__ import annotations
import threading
import time
from typing import Callable, Dict, List, Optional

from evosols.core.errors import BattleNotFound
from evosols.core.logging import logger
from .behavior import BehaviorTracker, TrackingContext
from .core import CombatResolver
from .models import (BattleResult, BattleSnapshot, BehaviorScores, CombatantState,
                     CombatantView, Creature, LogEntry, MoveOutcome)

ACTIVE = "active"
COMPLETED = "completed"
ABANDONED = "abandoned"
SNAPSHOT_LOG_ENTRIES = 5

class BattleSession:
    def __init__(self, battle_id: str, player1: str, creature1: Creature, player2: str, creature2: Creature,
                 resolver: Optional[CombatResolver] = None, tracker: Optional[BehaviorTracker] = None,
                 *, clock: Callable[[], float] = time.monotonic, wall_clock: Callable[[], float] = time.time):
        if player1 == player2:
            raise ValueError("a battle needs two distinct players")
        self.battle_id = battle_id
        self.players = (player1, player2)
        self.combatants: Dict[str, CombatantState] = {
            player1: CombatantState.enter(player1, creature1),
            player2: CombatantState.enter(player2, creature2),
        }
        self.resolver = resolver or CombatResolver()
        self.tracker = tracker or BehaviorTracker()
        self.turn = 1
        self.current_player = player1
        self.status = ACTIVE
        self.log: List[LogEntry] = []
        self.behavior_scores: Dict[str, BehaviorScores] = {player1: BehaviorScores(), player2: BehaviorScores()}
        self.result: Optional[BattleResult] = None
        self._clock = clock
        self._wall_clock = wall_clock
        self.start_time = wall_clock()
        self.end_time: Optional[float] = None
        self.last_activity = clock()
        self._lock = threading.Lock()
        self._log = logger.bind(battle_id=battle_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def combatant(self, player_id: str) -> CombatantState:
        return self.combatants[player_id]

    def opponent_id(self, player_id: str) -> str:
        p1, p2 = self.players
        return p2 if player_id == p1 else p1

    def opponent(self, player_id: str) -> CombatantState:
        return self.combatants[self.opponent_id(player_id)]

    def moves_of(self, player_id: str) -> List[str]:
        return [e.move_id for e in self.log if e.player_id == player_id]

    def is_terminal(self) -> bool:
        return self.status != ACTIVE

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------
    def submit_move(self, player_id: str, move_id: str) -> MoveOutcome:
        with self._lock:
            res = self.resolver.resolve(self, player_id, move_id)
            ctx = TrackingContext(hp_before=res.attacker_hp_before, max_hp=res.attacker.max_hp,
                                  recent_moves=self.moves_of(player_id))
            self.tracker.track(self.behavior_scores[player_id], res.move, ctx)
            turn = self.turn
            self.log.append(LogEntry(turn=turn, player_id=player_id, move_id=res.move.id, damage=res.damage,
                                     healing=res.healing, effect=res.effect, timestamp=self._wall_clock()))
            self.last_activity = self._clock()
            if res.defender_down:
                self.status = COMPLETED
                self.result = BattleResult(winner=player_id, loser=res.defender.player_id)
                self.end_time = self._wall_clock()
                self._log.info("BattleCompleted", winner=player_id, turns=turn)
                return MoveOutcome(self.battle_id, turn, player_id, res.move.id, res.damage, res.healing,
                                   res.effect, terminal=True, result=self.result)
            self.turn += 1
            self.current_player = res.defender.player_id
            self.resolver.regenerate(res.attacker, res.defender)
            self._log.debug("MoveResolved", player=player_id, move=res.move.id,
                            damage=res.damage, healing=res.healing)
            return MoveOutcome(self.battle_id, turn, player_id, res.move.id, res.damage, res.healing,
                               res.effect, next_player=self.current_player)

    def abandon(self, player_id: str, reason: str = "disconnect") -> bool:
        """Mark the session abandoned by ``player_id``. Returns False if already terminal."""
        with self._lock:
            return self._abandon(player_id, reason)

    def forfeit_if_idle(self, now: float, timeout: float) -> Optional[str]:
        """Abandon on behalf of the current player if they are still idle at ``now``.

        Idleness is re-checked under the session lock, so a move that lands
        after a sweep picked this session hands the turn over cleanly instead
        of forfeiting the player who just received it. Returns the forfeiting
        player, or None.
        """
        with self._lock:
            if self.status != ACTIVE or now - self.last_activity <= timeout:
                return None
            idle_player = self.current_player
            self._abandon(idle_player, "turn_timeout")
            return idle_player

    def _abandon(self, player_id: str, reason: str) -> bool:
        if self.status != ACTIVE:
            return False
        self.status = ABANDONED
        self.result = BattleResult(abandoned_by=player_id)
        self.end_time = self._wall_clock()
        self._log.info("BattleAbandoned", player=player_id, reason=reason)
        return True

    def idle_for(self, now: Optional[float] = None) -> float:
        return (self._clock() if now is None else now) - self.last_activity

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    def get_public_state(self) -> BattleSnapshot:
        with self._lock:
            p1, p2 = self.players
            return BattleSnapshot(
                battle_id=self.battle_id,
                status=self.status,
                turn=self.turn,
                current_player=self.current_player,
                combatants=(CombatantView.of(self.combatants[p1]), CombatantView.of(self.combatants[p2])),
                recent_log=tuple(self.log[-SNAPSHOT_LOG_ENTRIES:]),
                result=self.result,
            )

    def final_scores(self) -> Dict[str, BehaviorScores]:
        with self._lock:
            return {p: s.copy() for p, s in self.behavior_scores.items()}

    @property
    def duration(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

__all__ = ["BattleSession","ACTIVE","COMPLETED","ABANDONED"]
