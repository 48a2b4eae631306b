import json
from pathlib import Path

import pytest

from evosols.battle.factory import mint_creature
from evosols.system.leaderboard import leaderboard
from evosols.system.settings import Settings, SettingsData
from evosols.system.store import JsonCreatureStore, MemoryCreatureStore


def test_json_store_round_trip(tmp_path):
    store = JsonCreatureStore(tmp_path / "creatures")
    c = mint_creature("9", "Owner", "Tide", "water")
    c.battle_stats.record(True)
    c.visual_traits = {"color": "silver"}
    store.save_creature(c)
    assert (tmp_path / "creatures" / "creature_9.json").exists()
    assert store.find_creature_by_ref("9") == c
    assert store.find_creature_by_ref("10") is None
    assert [x.token_id for x in store.all_creatures()] == ["9"]


def test_json_store_skips_corrupt_documents(tmp_path):
    store = JsonCreatureStore(tmp_path)
    (tmp_path / "creature_5.json").write_text("{not json", encoding="utf-8")
    assert store.find_creature_by_ref("5") is None
    assert store.all_creatures() == []


def test_memory_store_returns_detached_copies():
    store = MemoryCreatureStore([mint_creature("1", "a", "One", "fire")])
    c = store.find_creature_by_ref("1")
    c.level = 50
    assert store.find_creature_by_ref("1").level == 1


def test_leaderboard_orders_and_limits():
    a, b, c = (mint_creature(str(i), "o", f"C{i}", "fire") for i in range(3))
    for won in (True, True, False):
        a.battle_stats.record(won)
    for won in (True, True, True, False, False, False):
        b.battle_stats.record(won)
    c.level = 5
    rows = leaderboard([a, b, c])
    assert [r.token_id for r in rows] == ["1", "0", "2"]
    assert rows[0].rank == 1 and rows[0].wins == 3
    assert [r.token_id for r in leaderboard([a, b, c], sort_by="win_rate")] == ["0", "1", "2"]
    assert [r.token_id for r in leaderboard([a, b, c], sort_by="level", limit=1)] == ["2"]


def test_settings_defaults_on_malformed_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2", encoding="utf-8")
    s = Settings.load(path)
    assert s.data == SettingsData()


def test_settings_normalize_and_ignore_unknown_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"log_level": "LOUD", "turn_timeout_seconds": -5, "rng_seed": "x",
                                "store_dir": str(tmp_path / "db"), "unknown": 1}), encoding="utf-8")
    s = Settings.load(path)
    assert s.data.log_level == "INFO"
    assert s.data.turn_timeout_seconds == 0.0
    assert s.data.rng_seed is None
    assert s.store_path() == tmp_path / "db"


def test_settings_save_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    s = Settings(SettingsData(log_level="DEBUG", rng_seed=3), path)
    s.save()
    assert Settings.load(path).data == SettingsData(log_level="DEBUG", rng_seed=3)


def test_failed_save_leaves_no_temp_file(tmp_path, monkeypatch):
    store = JsonCreatureStore(tmp_path)
    def broken_replace(self, target):
        raise OSError("device busy")
    monkeypatch.setattr(Path, "replace", broken_replace)
    with pytest.raises(OSError):
        store.save_creature(mint_creature("3", "o", "Moss", "earth"))
    assert list(tmp_path.iterdir()) == []


def test_zero_timeout_disables_forfeits(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"turn_timeout_seconds": 0}), encoding="utf-8")
    assert Settings.load(path).turn_timeout() is None
    assert Settings(SettingsData(), path).turn_timeout() == 120.0
