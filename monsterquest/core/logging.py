"""
Lightweight logger used across the project.
One line per record: UTC timestamp, level, CamelCase event name, key=value extras.
Colored per level through colorama.
"""
from __future__ import annotations
import sys
from datetime import datetime, timezone
from typing import Any, Literal, Optional, TextIO

from colorama import Fore, Style, init as colorama_init

colorama_init()

Level = Literal["DEBUG","INFO","WARN","ERROR"]

COLORS = {
    "DEBUG": Fore.BLUE,
    "INFO": Fore.GREEN,
    "WARN": Fore.YELLOW,
    "ERROR": Fore.RED,
}
RESET = Style.RESET_ALL

class Logger:
    _order = {"DEBUG":10,"INFO":20,"WARN":30,"ERROR":40}

    def __init__(self, level: Level = "INFO", stream: Optional[TextIO] = None):
        self.threshold = self._order[level]
        # None means whatever sys.stdout is at write time
        self.stream = stream

    def set_level(self, level: str):
        self.threshold = self._order.get(str(level).upper(), 20)

    def enabled(self, level: Level) -> bool:
        return self._order[level] >= self.threshold

    @staticmethod
    def format(lvl: Level, msg: str, extra: dict) -> str:
        ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
        line = f"{ts} [{lvl}] {msg}"
        if extra:
            line += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        return line

    def _emit(self, lvl: Level, msg: str, **extra: Any):
        if not self.enabled(lvl):
            return
        out = self.stream or sys.stdout
        out.write(f"{COLORS[lvl]}{self.format(lvl, msg, extra)}{RESET}\n")

    def debug(self, msg: str, **kw): self._emit("DEBUG", msg, **kw)
    def info(self, msg: str, **kw): self._emit("INFO", msg, **kw)
    def warn(self, msg: str, **kw): self._emit("WARN", msg, **kw)
    def error(self, msg: str, **kw): self._emit("ERROR", msg, **kw)

logger = Logger("INFO")
