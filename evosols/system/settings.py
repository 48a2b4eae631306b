"""Engine settings persisted as a small JSON document.

Unknown keys are ignored, missing keys take defaults and out-of-range values
are normalized, so an old or hand-edited file never stops the engine.
"""
from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional
from evosols.core.logging import LEVELS, logger

SETTINGS_FILENAME = ".evosols_settings.json"
STORE_DIRNAME = ".evosols_creatures"
DEFAULT_TURN_TIMEOUT = 120.0

def _home() -> Path:
    return Path(os.path.expanduser("~"))

@dataclass
class SettingsData:
    log_level: str = "INFO"
    turn_timeout_seconds: Optional[float] = DEFAULT_TURN_TIMEOUT  # 0/None disables forfeits
    rng_seed: Optional[int] = None
    store_dir: Optional[str] = None
    debug: bool = False

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SettingsData":
        known = {f.name for f in fields(cls)}
        data = cls(**{k: v for k, v in raw.items() if k in known})
        data.normalize()
        return data

    def normalize(self):
        if self.log_level not in LEVELS:
            self.log_level = "INFO"
        if self.turn_timeout_seconds is not None:
            try:
                self.turn_timeout_seconds = max(0.0, float(self.turn_timeout_seconds))
            except (TypeError, ValueError):
                self.turn_timeout_seconds = DEFAULT_TURN_TIMEOUT
        if not isinstance(self.rng_seed, int):
            self.rng_seed = None

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path

    @staticmethod
    def default_path() -> Path:
        home = _home()
        base = home if home.is_dir() and os.access(home, os.W_OK) else Path.cwd()
        return base / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls.default_path()
        data = SettingsData()
        if path.exists():
            try:
                data = SettingsData.from_dict(json.loads(path.read_text(encoding="utf-8")))
                logger.debug("SettingsLoaded", path=str(path))
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2))
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def store_path(self) -> Path:
        if self.data.store_dir:
            return Path(self.data.store_dir).expanduser()
        return _home() / STORE_DIRNAME

    def turn_timeout(self) -> Optional[float]:
        return self.data.turn_timeout_seconds or None

    def apply_logging(self):
        logger.set_level(self.data.log_level)  # type: ignore[arg-type]
