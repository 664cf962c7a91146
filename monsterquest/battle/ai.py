"""Enemy decision logic.

Strategies only pick an ability id; resolving it is the engine's job.
"""
from __future__ import annotations
from typing import List, Optional, Protocol

from monsterquest.data.repository import GameData
from monsterquest.monster.models import MonsterInstance
from .types import effectiveness


def usable_abilities(monster: MonsterInstance) -> List[str]:
    return [a for a in monster.abilities if monster.can_use(a)]


class EnemyStrategy(Protocol):
    def choose(self, monster: MonsterInstance, opponent: Optional[MonsterInstance],
               data: GameData, rng) -> Optional[str]: ...


class RandomAbilityStrategy:
    """Uniform pick among abilities with uses left."""

    def choose(self, monster, opponent, data, rng) -> Optional[str]:
        usable = usable_abilities(monster)
        if not usable:
            return None
        return usable[rng.randint(0, len(usable) - 1)]


class StrongestAbilityStrategy:
    """Highest power x type effectiveness; status abilities score zero."""

    def choose(self, monster, opponent, data, rng) -> Optional[str]:
        best = None
        best_score = -1.0
        for a in usable_abilities(monster):
            if not data.has_ability(a):
                continue
            ability = data.get_ability(a)
            power = ability.power if ability.is_damaging else 0
            eff = effectiveness(ability.type, opponent.type) if opponent is not None else 1.0
            stab = 1.5 if ability.type == monster.type else 1.0
            score = power * eff * stab
            if score > best_score:
                best_score = score
                best = a
        return best

__all__ = ["EnemyStrategy", "RandomAbilityStrategy", "StrongestAbilityStrategy", "usable_abilities"]
