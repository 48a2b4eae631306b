"""
Error classes surfaced by the combat core.

Every error is a rejected request at the caller boundary: raising one never
leaves a battle session partially mutated.
"""
from __future__ import annotations

class EvosolsError(Exception):
    pass

class DataLoadError(EvosolsError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class NotYourTurn(EvosolsError):
    def __init__(self, player_id: str):
        super().__init__(f"Not your turn: {player_id}")
        self.player_id = player_id

class BattleNotFound(EvosolsError):
    def __init__(self, battle_id: str):
        super().__init__(f"Battle not found: {battle_id}")
        self.battle_id = battle_id

class UnknownMove(EvosolsError):
    def __init__(self, move_id: str):
        super().__init__(f"Unknown move: {move_id}")
        self.move_id = move_id

class InsufficientEnergy(EvosolsError):
    def __init__(self, move_id: str, required: int, available: int):
        super().__init__(f"Insufficient energy for {move_id}: need {required}, have {available}")
        self.move_id = move_id
        self.required = required
        self.available = available

class InvalidCreatures(EvosolsError):
    pass

class PlayerAlreadyInBattle(EvosolsError):
    def __init__(self, player_id: str):
        super().__init__(f"Player already in a battle: {player_id}")
        self.player_id = player_id

class MaxEvolutionReached(EvosolsError):
    pass

class NotEligibleForEvolution(EvosolsError):
    pass
