"""Creature store collaborators.

The combat core only needs ``find_creature_by_ref`` and ``save_creature``.
``MemoryCreatureStore`` backs tests and the demo; ``JsonCreatureStore`` keeps
one JSON document per creature in a directory.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from evosols.battle.models import Creature, LogEntry
from evosols.core.logging import logger

class CreatureStore(Protocol):
    def find_creature_by_ref(self, ref: str) -> Optional[Creature]: ...
    def save_creature(self, creature: Creature) -> None: ...
    def all_creatures(self) -> Iterable[Creature]: ...

class BattleLogSink(Protocol):
    def append(self, battle_id: str, entry: LogEntry) -> None: ...

class MemoryCreatureStore:
    def __init__(self, creatures: Iterable[Creature] = ()):
        self._docs: Dict[str, dict] = {}
        for c in creatures:
            self.save_creature(c)

    def find_creature_by_ref(self, ref: str) -> Optional[Creature]:
        doc = self._docs.get(str(ref))
        return Creature.from_json(doc) if doc is not None else None

    def save_creature(self, creature: Creature) -> None:
        self._docs[creature.token_id] = creature.to_json()

    def all_creatures(self) -> List[Creature]:
        return [Creature.from_json(d) for d in self._docs.values()]

class JsonCreatureStore:
    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, ref: str) -> Path:
        return self.root / f"creature_{ref}.json"

    def find_creature_by_ref(self, ref: str) -> Optional[Creature]:
        path = self._path(str(ref))
        if not path.exists():
            return None
        try:
            return Creature.from_json(json.loads(path.read_text(encoding="utf-8")))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("CreatureLoadFailed", path=str(path), error=str(e))
            return None

    def save_creature(self, creature: Creature) -> None:
        path = self._path(creature.token_id)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(creature.to_json(), indent=2), encoding="utf-8")
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    def all_creatures(self) -> List[Creature]:
        found = []
        for p in sorted(self.root.glob("creature_*.json")):
            c = self.find_creature_by_ref(p.stem[len("creature_"):])
            if c is not None:
                found.append(c)
        return found

class MemoryBattleLog:
    def __init__(self):
        self.entries: Dict[str, List[LogEntry]] = {}

    def append(self, battle_id: str, entry: LogEntry) -> None:
        self.entries.setdefault(battle_id, []).append(entry)

__all__ = ["CreatureStore","BattleLogSink","MemoryCreatureStore","JsonCreatureStore","MemoryBattleLog"]
