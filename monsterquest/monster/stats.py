"""Stat derivation and experience curves.

Pure functions; nothing here reads global state.

- derive_stats: HP = floor((2*base + iv + floor(ev/4)) * L/100) + L + 10,
  other stats = floor((2*base + iv + floor(ev/4)) * L/100 + 5)
- experience_for_level: fast 0.8*L^3, medium L^3, slow 1.25*L^3
- experience_yield: floor(exp_yield * L / 7)

Nature modifiers are not applied.
"""
from __future__ import annotations
import math
from typing import Dict, Mapping, Optional

from monsterquest.core.constants import (
    GROWTH_FAST, GROWTH_SLOW, MAX_MONSTER_LEVEL, MIN_MONSTER_LEVEL, STAT_NAMES,
)


def clamp_level(level: int) -> int:
    return max(MIN_MONSTER_LEVEL, min(int(level), MAX_MONSTER_LEVEL))


def zero_spread() -> Dict[str, int]:
    return {s: 0 for s in STAT_NAMES}


def _stat_core(base: int, iv: int, ev: int, level: int) -> float:
    return (2 * base + iv + ev // 4) * level / 100


def derive_stats(base_stats: Mapping[str, int], level: int,
                 ivs: Optional[Mapping[str, int]] = None,
                 evs: Optional[Mapping[str, int]] = None) -> Dict[str, int]:
    ivs = ivs or {}
    evs = evs or {}
    stats: Dict[str, int] = {}
    for s in STAT_NAMES:
        core = _stat_core(base_stats[s], ivs.get(s, 0), evs.get(s, 0), level)
        if s == "hp":
            stats[s] = math.floor(core) + level + 10
        else:
            stats[s] = math.floor(core + 5)
    return stats


def experience_for_level(level: int, growth_rate: Optional[str] = None) -> int:
    """Total experience needed to *be* at ``level``. Unknown growth rates use medium."""
    if level <= 0:
        return 0
    cube = level ** 3
    if growth_rate == GROWTH_FAST:
        return math.floor(0.8 * cube)
    if growth_rate == GROWTH_SLOW:
        return math.floor(1.25 * cube)
    return cube


def experience_yield(species_exp_yield: int, level: int) -> int:
    return math.floor(species_exp_yield * level / 7)

__all__ = [
    "clamp_level", "zero_spread", "derive_stats", "experience_for_level", "experience_yield",
]
