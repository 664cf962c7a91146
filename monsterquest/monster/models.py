"""Monster instance record and the result records of instance operations."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(eq=False)
class MonsterInstance:
    """Mutable monster record. Equality is identity so team membership checks never alias."""

    species_id: str
    name: str
    type: str
    level: int
    experience: int
    next_level_experience: int
    base_stats: Dict[str, int]
    ivs: Dict[str, int]
    evs: Dict[str, int]
    stats: Dict[str, int]
    current_hp: int
    abilities: List[str] = field(default_factory=list)
    # remaining uses per known ability; missing key means unlimited
    ability_uses: Dict[str, int] = field(default_factory=dict)
    status: Optional[str] = None
    catch_rate: int = 0
    shape: Dict[str, Any] = field(default_factory=dict)

    @property
    def max_hp(self) -> int:
        return self.stats["hp"]

    def is_fainted(self) -> bool:
        return self.current_hp <= 0

    def knows(self, ability_id: str) -> bool:
        return ability_id in self.abilities

    def uses_left(self, ability_id: str) -> Optional[int]:
        return self.ability_uses.get(ability_id)

    def can_use(self, ability_id: str) -> bool:
        left = self.uses_left(ability_id)
        return self.knows(ability_id) and (left is None or left > 0)

    def hp_ratio(self) -> float:
        return self.current_hp / self.max_hp if self.max_hp else 0.0


@dataclass
class DamageResult:
    damage: int
    previous_hp: int
    current_hp: int
    damage_percent: int
    fainted: bool


@dataclass
class HealResult:
    heal_amount: int
    previous_hp: int
    current_hp: int
    heal_percent: int


@dataclass
class ExperienceResult:
    gained: int
    leveled_up: bool = False
    levels_gained: int = 0
    new_abilities: List[str] = field(default_factory=list)
    can_evolve: bool = False
    evolution_target_id: Optional[str] = None

__all__ = ["MonsterInstance", "DamageResult", "HealResult", "ExperienceResult"]
