from __future__ import annotations
import os
import random
from pathlib import Path
from typing import Callable, Optional

from monsterquest.battle.ai import EnemyStrategy
from monsterquest.battle.engine import BattleEngine
from monsterquest.core.logging import logger
from monsterquest.data.repository import GameData
from monsterquest.events.bus import EventBus
from monsterquest.inventory import Inventory
from monsterquest.monster.manager import MonsterManager
from monsterquest.system.settings import Settings

SEED_ENV = "MONSTERQUEST_RNG_SEED"


class GameContext:
    """Owns the long-lived collaborators and hands them to engines it creates."""

    def __init__(self, settings: Settings, data: Optional[GameData] = None, rng: Optional[random.Random] = None):
        self.settings = settings
        settings.apply_log_level()
        if settings.data.debug:
            logger.set_level("DEBUG")
        self.data = data or self._load_data()
        self.rng = rng or self._create_rng()
        self.events = EventBus()
        self.monsters = MonsterManager(self.data, self.rng, self.events)
        self.inventory = Inventory()
        self.party: list = []
        self.storage: list = []

    @classmethod
    def from_settings(cls, path: Optional[Path] = None) -> "GameContext":
        return cls(Settings.load(path))

    def _load_data(self) -> GameData:
        data_dir = self.settings.data.data_dir
        return GameData.load(Path(data_dir) if data_dir else None)

    def _create_rng(self) -> random.Random:
        """RNG seeded from the environment first, then settings; unseeded otherwise."""
        seed = os.environ.get(SEED_ENV)
        if seed:
            try:
                return random.Random(int(seed))
            except ValueError:
                logger.warn("BadSeedEnv", value=seed)
        return random.Random(self.settings.data.seed)

    def new_battle(self, strategy: Optional[EnemyStrategy] = None,
                   message_cb: Optional[Callable[[str], None]] = None) -> BattleEngine:
        return BattleEngine(self.data, self.monsters, rng=self.rng, events=self.events,
                            strategy=strategy, inventory=self.inventory, message_cb=message_cb)

__all__ = ["GameContext", "SEED_ENV"]
