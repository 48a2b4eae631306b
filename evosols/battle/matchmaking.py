"""FIFO matchmaking: pair the two longest-waiting players."""
from __future__ import annotations
import threading
from collections import deque
from typing import Deque, Optional, Tuple

from .registry import PlayerEntry

class MatchmakingQueue:
    def __init__(self):
        self._waiting: Deque[PlayerEntry] = deque()
        self._lock = threading.Lock()

    def enqueue(self, entry: PlayerEntry) -> Optional[Tuple[PlayerEntry, PlayerEntry]]:
        """Add a waiting player; return a pair when two are waiting.

        Re-queueing a player who is already waiting is a no-op.
        """
        with self._lock:
            if any(w.player_id == entry.player_id for w in self._waiting):
                return None
            self._waiting.append(entry)
            if len(self._waiting) >= 2:
                return self._waiting.popleft(), self._waiting.popleft()
            return None

    def cancel(self, player_id: str) -> bool:
        with self._lock:
            for w in list(self._waiting):
                if w.player_id == player_id:
                    self._waiting.remove(w)
                    return True
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._waiting)

__all__ = ["MatchmakingQueue"]
