"""Session registry: active battle sessions plus a player -> battle index.

One registry lock serializes creation, lookup and teardown of index entries;
per-session mutation is serialized by each session's own lock. Lock order is
always registry -> session, never the reverse.
"""
from __future__ import annotations
import copy
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from evosols.core.errors import BattleNotFound, InvalidCreatures, PlayerAlreadyInBattle
from evosols.core.logging import logger
from .behavior import BehaviorTracker
from .core import CombatResolver
from .models import BattleSnapshot, Creature, MoveOutcome
from .session import BattleSession, COMPLETED

CreatureLookup = Callable[[str], Optional[Creature]]

@dataclass(frozen=True)
class PlayerEntry:
    player_id: str
    creature_ref: str

class SessionRegistry:
    def __init__(self, find_creature_by_ref: CreatureLookup, resolver: Optional[CombatResolver] = None,
                 *, turn_timeout: Optional[float] = None, clock: Callable[[], float] = time.monotonic,
                 id_factory: Callable[[], str] = lambda: str(uuid.uuid4())):
        self.find_creature_by_ref = find_creature_by_ref
        self.resolver = resolver or CombatResolver()
        self.tracker = BehaviorTracker()
        self.turn_timeout = turn_timeout or None
        self.clock = clock
        self.id_factory = id_factory
        self._sessions: Dict[str, BattleSession] = {}
        self._player_index: Dict[str, str] = {}
        # completed sessions waiting for settlement
        self._finished: Dict[str, BattleSession] = {}
        self._lock = threading.RLock()

    def create(self, player1: PlayerEntry, player2: PlayerEntry) -> BattleSession:
        c1 = self.find_creature_by_ref(player1.creature_ref)
        c2 = self.find_creature_by_ref(player2.creature_ref)
        if c1 is None or c2 is None:
            raise InvalidCreatures(f"Invalid creatures: {player1.creature_ref}, {player2.creature_ref}")
        if player1.player_id == player2.player_id:
            raise InvalidCreatures("a player cannot battle themselves")
        with self._lock:
            for p in (player1, player2):
                if p.player_id in self._player_index:
                    raise PlayerAlreadyInBattle(p.player_id)
            battle_id = self.id_factory()
            session = BattleSession(battle_id, player1.player_id, copy.deepcopy(c1),
                                    player2.player_id, copy.deepcopy(c2),
                                    self.resolver, self.tracker, clock=self.clock)
            self._sessions[battle_id] = session
            self._player_index[player1.player_id] = battle_id
            self._player_index[player2.player_id] = battle_id
        logger.info("BattleCreated", battle_id=battle_id, player1=player1.player_id, player2=player2.player_id)
        return session

    def get(self, battle_id: str) -> BattleSession:
        with self._lock:
            session = self._sessions.get(battle_id)
        if session is None:
            raise BattleNotFound(battle_id)
        return session

    def session_for_player(self, player_id: str) -> Optional[BattleSession]:
        with self._lock:
            battle_id = self._player_index.get(player_id)
            return self._sessions.get(battle_id) if battle_id else None

    def submit_move(self, battle_id: str, player_id: str, move_id: str) -> MoveOutcome:
        session = self.get(battle_id)
        outcome = session.submit_move(player_id, move_id)
        if outcome.terminal:
            with self._lock:
                if self._remove(session):
                    self._finished[battle_id] = session
        return outcome

    def get_public_state(self, battle_id: str) -> BattleSnapshot:
        return self.get(battle_id).get_public_state()

    def handle_disconnect(self, player_id: str, reason: str = "disconnect") -> Optional[BattleSession]:
        """Abandon the player's session and drop it from the registry.

        Returns the abandoned session, or None when the player has no active battle.
        """
        with self._lock:
            battle_id = self._player_index.get(player_id)
            session = self._sessions.get(battle_id) if battle_id else None
            if session is None:
                self._player_index.pop(player_id, None)
                return None
            abandoned = session.abandon(player_id, reason)
            if self._remove(session) and session.status == COMPLETED:
                # finished just before the disconnect landed
                self._finished[session.battle_id] = session
        return session if abandoned else None

    def expire_idle(self, now: Optional[float] = None) -> List[Tuple[BattleSession, str]]:
        """Forfeit the current player of every session idle past the turn timeout."""
        if not self.turn_timeout:
            return []
        now = self.clock() if now is None else now
        expired: List[Tuple[BattleSession, str]] = []
        with self._lock:
            stale = [s for s in self._sessions.values() if s.idle_for(now) > self.turn_timeout]
            for session in stale:
                # a move may have landed since the scan; the session re-checks under its own lock
                idle_player = session.forfeit_if_idle(now, self.turn_timeout)
                if idle_player is not None and self._remove(session):
                    expired.append((session, idle_player))
        return expired

    def pop_finished(self, battle_id: str) -> BattleSession:
        with self._lock:
            session = self._finished.pop(battle_id, None)
        if session is None:
            raise BattleNotFound(battle_id)
        return session

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _remove(self, session: BattleSession) -> bool:
        if self._sessions.get(session.battle_id) is not session:
            return False
        del self._sessions[session.battle_id]
        for p in session.players:
            if self._player_index.get(p) == session.battle_id:
                del self._player_index[p]
        return True

__all__ = ["SessionRegistry","PlayerEntry","CreatureLookup"]
