"""Event bus handed to the manager and engine by whoever owns the game loop.

Listeners are fire-and-forget: their return value is ignored and an error in
one listener is logged without stopping the others or the emitter.
"""
from __future__ import annotations
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from monsterquest.core.logging import logger

BATTLE_START = "battle-start"
BATTLE_END = "battle-end"
BATTLE_ACTION = "battle-action"
MONSTER_LEVEL_UP = "monster-level-up"
MONSTER_EVOLVED = "monster-evolved"
MONSTER_FAINTED = "monster-fainted"
MONSTER_CAUGHT = "monster-caught"
ITEM_USED = "item-used"

Listener = Callable[..., Any]


class EventBus:
    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._once: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, event: str, fn: Listener) -> "EventBus":
        self._listeners[event].append(fn)
        return self

    def once(self, event: str, fn: Listener) -> "EventBus":
        self._once[event].append(fn)
        return self

    def off(self, event: str, fn: Optional[Listener] = None) -> "EventBus":
        if fn is None:
            self._listeners.pop(event, None)
            self._once.pop(event, None)
            return self
        for table in (self._listeners, self._once):
            if fn in table.get(event, ()):
                table[event].remove(fn)
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ())) + len(self._once.get(event, ()))

    def emit(self, event: str, *args: Any) -> int:
        """Call every listener for ``event``; returns how many were called."""
        fns = list(self._listeners.get(event, ())) + self._once.pop(event, [])
        for fn in fns:
            try:
                fn(*args)
            except Exception as e:
                logger.error("EventListenerFailed", event=event, listener=getattr(fn, "__name__", repr(fn)), error=repr(e))
        return len(fns)


def emit(bus: Optional[EventBus], event: str, *args: Any):
    if bus is not None:
        bus.emit(event, *args)

__all__ = [
    "EventBus", "emit", "BATTLE_START", "BATTLE_END", "BATTLE_ACTION", "MONSTER_LEVEL_UP",
    "MONSTER_EVOLVED", "MONSTER_FAINTED", "MONSTER_CAUGHT", "ITEM_USED",
]
