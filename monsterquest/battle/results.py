"""Result records returned by the battle engine.

Every record carries ``success``; callers check it before reading anything
else. ``success=False`` means the action was rejected and nothing changed.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from monsterquest.monster.models import DamageResult, ExperienceResult, MonsterInstance

Outcome = Literal["PLAYER_WIN", "PLAYER_LOSS", "ESCAPE", "CAUGHT"]


@dataclass
class BattleResult:
    outcome: Outcome
    caught: Optional[MonsterInstance] = None
    can_evolve: bool = False
    evolution_target_id: Optional[str] = None
    evolving: Optional[MonsterInstance] = None

    @property
    def winner(self) -> Optional[str]:
        if self.outcome in ("PLAYER_WIN", "CAUGHT"):
            return "player"
        if self.outcome == "PLAYER_LOSS":
            return "enemy"
        return None

    @property
    def escaped(self) -> bool:
        return self.outcome == "ESCAPE"


@dataclass
class EffectResult:
    kind: str
    target: str
    applied: bool
    stat: Optional[str] = None
    stages: int = 0
    status: Optional[str] = None
    amount: int = 0


@dataclass
class StatusTick:
    monster: str
    status: str
    damage: int
    fainted: bool


@dataclass
class ActionResult:
    success: bool
    message: str = ""
    kind: str = ""
    battle_ended: bool = False
    battle_result: Optional[BattleResult] = None
    need_switch: bool = False
    enemy_action: Optional["ActionResult"] = None
    upkeep: List[StatusTick] = field(default_factory=list)
    experience: Optional[ExperienceResult] = None
    enemy_switched_to: Optional[str] = None


@dataclass
class AbilityResult(ActionResult):
    hit: bool = False
    user: str = ""
    target: str = ""
    ability: str = ""
    damage: int = 0
    type_effectiveness: float = 1.0
    stab: float = 1.0
    effects: List[EffectResult] = field(default_factory=list)
    damage_result: Optional[DamageResult] = None


@dataclass
class ItemResult(ActionResult):
    item: str = ""
    target: str = ""
    heal_amount: int = 0
    cured: Optional[str] = None
    stat: Optional[str] = None
    stages: int = 0
    caught: bool = False
    added_to_party: bool = False
    stored: bool = False


@dataclass
class SwitchResult(ActionResult):
    team: str = "player"
    previous: str = ""
    current: str = ""


@dataclass
class RunResult(ActionResult):
    escaped: bool = False
    escape_chance: int = 0
    roll: int = 0


@dataclass
class EvolveResult(ActionResult):
    previous: Optional[MonsterInstance] = None
    current: Optional[MonsterInstance] = None


def failure(message: str, kind: str = "") -> ActionResult:
    return ActionResult(success=False, message=message, kind=kind)

__all__ = [
    "Outcome", "BattleResult", "EffectResult", "StatusTick", "ActionResult", "AbilityResult",
    "ItemResult", "SwitchResult", "RunResult", "EvolveResult", "failure",
]
