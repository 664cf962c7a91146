"""Attack-type vs defender-type damage multipliers.

Only non-neutral pairs are listed; any pair missing from the chart
(including types the chart has never heard of) is neutral.
"""
from __future__ import annotations
from typing import Dict, Optional

TYPE_CHART: Dict[str, Dict[str, float]] = {
    "normal":  {"rock": 0.5, "ghost": 0.0},
    "fire":    {"fire": 0.5, "water": 0.5, "grass": 2.0, "ice": 2.0, "bug": 2.0, "rock": 0.5, "dragon": 0.5},
    "water":   {"fire": 2.0, "water": 0.5, "grass": 0.5, "ground": 2.0, "rock": 2.0, "dragon": 0.5},
    "grass":   {"fire": 0.5, "water": 2.0, "grass": 0.5, "poison": 0.5, "ground": 2.0, "flying": 0.5, "bug": 0.5, "rock": 2.0, "dragon": 0.5},
    "electric":{"water": 2.0, "grass": 0.5, "electric": 0.5, "ground": 0.0, "flying": 2.0, "dragon": 0.5},
    "ice":     {"fire": 0.5, "water": 0.5, "grass": 2.0, "ice": 0.5, "ground": 2.0, "flying": 2.0, "dragon": 2.0},
    "fighting":{"normal": 2.0, "ice": 2.0, "poison": 0.5, "flying": 0.5, "psychic": 0.5, "bug": 0.5, "rock": 2.0, "ghost": 0.0},
    "poison":  {"grass": 2.0, "poison": 0.5, "ground": 0.5, "rock": 0.5, "ghost": 0.5},
    "ground":  {"fire": 2.0, "grass": 0.5, "electric": 2.0, "poison": 2.0, "flying": 0.0, "bug": 0.5, "rock": 2.0},
    "flying":  {"grass": 2.0, "electric": 0.5, "fighting": 2.0, "bug": 2.0, "rock": 0.5},
    "psychic": {"fighting": 2.0, "poison": 2.0, "psychic": 0.5},
    "bug":     {"fire": 0.5, "grass": 2.0, "fighting": 0.5, "poison": 0.5, "flying": 0.5, "psychic": 2.0, "ghost": 0.5},
    "rock":    {"fire": 2.0, "ice": 2.0, "fighting": 0.5, "ground": 0.5, "flying": 2.0, "bug": 2.0},
    "ghost":   {"normal": 0.0, "psychic": 2.0, "ghost": 2.0},
    "dragon":  {"dragon": 2.0},
}


def effectiveness(attack_type: Optional[str], defender_type: Optional[str]) -> float:
    if not attack_type or not defender_type:
        return 1.0
    return TYPE_CHART.get(attack_type.lower(), {}).get(defender_type.lower(), 1.0)


def effectiveness_message(multiplier: float) -> str:
    if multiplier == 0:
        return "It has no effect!"
    if multiplier > 1:
        return "It's super effective!"
    if multiplier < 1:
        return "It's not very effective..."
    return ""

__all__ = ["TYPE_CHART", "effectiveness", "effectiveness_message"]
