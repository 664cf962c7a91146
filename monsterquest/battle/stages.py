"""In-battle stat stages for the active monsters.

Six counters clamped to -6..+6. Stat multiplier is (2+s)/2 or 2/(2-s);
accuracy uses thirds instead of halves.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Optional

MIN_STAGE = -6
MAX_STAGE = 6

_ALIASES = {
    "atk": "attack",
    "def": "defense",
    "sp_atk": "special_attack",
    "specialattack": "special_attack",
    "special-attack": "special_attack",
    "sp_def": "special_defense",
    "specialdefense": "special_defense",
    "special-defense": "special_defense",
    "spe": "speed",
    "acc": "accuracy",
}


def clamp_stage(stage: int) -> int:
    return max(MIN_STAGE, min(MAX_STAGE, int(stage)))


def stage_multiplier(stage: int) -> float:
    s = clamp_stage(stage)
    return (2 + s) / 2 if s >= 0 else 2 / (2 - s)


def accuracy_multiplier(stage: int) -> float:
    s = clamp_stage(stage)
    return (3 + s) / 3 if s >= 0 else 3 / (3 - s)


def normalize_stat(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    key = str(name).strip().lower()
    key = _ALIASES.get(key, key)
    return key if key in StatStages.names() else None


@dataclass
class StatStages:
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    special_defense: int = 0
    speed: int = 0
    accuracy: int = 0

    @classmethod
    def names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    def get(self, stat: str) -> int:
        return getattr(self, stat)

    def change(self, stat: str, delta: int) -> int:
        """Apply ``delta`` and return the change that actually took effect."""
        before = getattr(self, stat)
        after = clamp_stage(before + delta)
        setattr(self, stat, after)
        return after - before

    def multiplier(self, stat: str) -> float:
        if stat == "accuracy":
            return accuracy_multiplier(self.accuracy)
        return stage_multiplier(getattr(self, stat))

    def reset(self):
        for name in self.names():
            setattr(self, name, 0)

__all__ = [
    "StatStages", "clamp_stage", "stage_multiplier", "accuracy_multiplier", "normalize_stat",
    "MIN_STAGE", "MAX_STAGE",
]
