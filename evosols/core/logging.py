"""
Project logger: one line per event, ``<utc ts> [LEVEL] EventName k=v ...``.

Levels are colored with colorama. ``bind`` returns a view that stamps fixed
fields (a battle id, say) on every line while sharing the root's threshold
and stream.
"""
from __future__ import annotations
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Literal, TextIO

from colorama import Fore, Style, init as colorama_init

colorama_init()

Level = Literal["DEBUG","INFO","WARN","ERROR"]

LEVELS: Dict[str, int] = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}
COLORS = {"DEBUG": Fore.BLUE, "INFO": Fore.GREEN, "WARN": Fore.YELLOW, "ERROR": Fore.RED}

def format_line(lvl: str, event: str, fields: Dict[str, Any]) -> str:
    ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
    tail = "".join(f" {k}={v}" for k, v in fields.items())
    return f"{ts} [{lvl}] {event}{tail}"

class _Emitter:
    def _emit(self, lvl: Level, event: str, **fields: Any):
        raise NotImplementedError

    def bind(self, **context: Any) -> "BoundLogger":
        return BoundLogger(self, context)

    def debug(self, event: str, **kw): self._emit("DEBUG", event, **kw)
    def info(self, event: str, **kw): self._emit("INFO", event, **kw)
    def warn(self, event: str, **kw): self._emit("WARN", event, **kw)
    def error(self, event: str, **kw): self._emit("ERROR", event, **kw)

class Logger(_Emitter):
    def __init__(self, level: Level = "INFO", stream: TextIO | None = None, color: bool = True):
        self.threshold = LEVELS[level]
        self.stream = stream
        self.color = color

    def set_level(self, level: Level):
        self.threshold = LEVELS.get(level, LEVELS["INFO"])

    def set_stream(self, stream: TextIO | None, *, color: bool = True):
        self.stream = stream
        self.color = color

    def enabled(self, lvl: Level) -> bool:
        return LEVELS[lvl] >= self.threshold

    def _emit(self, lvl: Level, event: str, **fields: Any):
        if not self.enabled(lvl):
            return
        line = format_line(lvl, event, fields)
        if self.color:
            line = f"{COLORS[lvl]}{line}{Style.RESET_ALL}"
        (self.stream or sys.stdout).write(line + "\n")

class BoundLogger(_Emitter):
    def __init__(self, parent: _Emitter, context: Dict[str, Any]):
        self.parent = parent
        self.context = dict(context)

    def _emit(self, lvl: Level, event: str, **fields: Any):
        self.parent._emit(lvl, event, **{**self.context, **fields})

logger = Logger("INFO")
