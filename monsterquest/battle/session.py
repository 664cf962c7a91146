"""Battle session state for 1v1 party-based battles.

The session is owned by the :class:`~monsterquest.battle.engine.BattleEngine`
that created it; team lists hold each monster exactly once.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from monsterquest.monster.models import MonsterInstance
from .results import BattleResult
from .stages import StatStages

WILD = "wild"
TRAINER = "trainer"
BATTLE_TYPES = (WILD, TRAINER)


class BattlePhase(Enum):
    INACTIVE = "inactive"
    AWAITING_ACTION = "awaiting-action"
    TURN_IN_PROGRESS = "turn-in-progress"
    AWAITING_SWITCH = "awaiting-switch"
    ENDED = "ended"


def _contains(team: List[MonsterInstance], monster: Optional[MonsterInstance]) -> bool:
    return monster is not None and any(m is monster for m in team)


@dataclass
class BattleSession:
    player_team: List[MonsterInstance]
    enemy_team: List[MonsterInstance]
    battle_type: str = WILD
    trainer: Optional[Any] = None
    active_player: Optional[MonsterInstance] = None
    active_enemy: Optional[MonsterInstance] = None
    active: bool = True
    phase: BattlePhase = BattlePhase.AWAITING_ACTION
    turn: int = 0
    weather: Optional[str] = None
    field_condition: Optional[str] = None
    run_attempts: int = 0
    log: List[str] = field(default_factory=list)
    result: Optional[BattleResult] = None
    player_stages: StatStages = field(default_factory=StatStages)
    enemy_stages: StatStages = field(default_factory=StatStages)
    # overflow box for catches made with a full party
    storage: List[MonsterInstance] = field(default_factory=list)

    @property
    def is_wild(self) -> bool:
        return self.battle_type == WILD

    def team(self, side: str) -> List[MonsterInstance]:
        return self.player_team if side == "player" else self.enemy_team

    def active_for(self, side: str) -> Optional[MonsterInstance]:
        return self.active_player if side == "player" else self.active_enemy

    def side_of(self, monster: MonsterInstance) -> Optional[str]:
        if _contains(self.player_team, monster):
            return "player"
        if _contains(self.enemy_team, monster):
            return "enemy"
        return None

    def stages_for(self, monster: Optional[MonsterInstance]) -> Optional[StatStages]:
        """Stat stages of an *active* monster; benched monsters have none."""
        if monster is None:
            return None
        if monster is self.active_player:
            return self.player_stages
        if monster is self.active_enemy:
            return self.enemy_stages
        return None

    def next_available(self, side: str) -> Optional[MonsterInstance]:
        current = self.active_for(side)
        for m in self.team(side):
            if m is not current and not m.is_fainted():
                return m
        return None

    def has_available(self, side: str) -> bool:
        return any(not m.is_fainted() for m in self.team(side))

    def reset_stages(self):
        self.player_stages.reset()
        self.enemy_stages.reset()

__all__ = ["BattleSession", "BattlePhase", "WILD", "TRAINER", "BATTLE_TYPES"]
