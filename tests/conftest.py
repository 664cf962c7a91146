import random

import pytest

from monsterquest.battle.engine import BattleEngine
from monsterquest.core.logging import logger
from monsterquest.data.repository import GameData
from monsterquest.events.bus import EventBus
from monsterquest.inventory import Inventory
from monsterquest.monster.manager import MonsterManager


def flat_stats(value):
    return {s: value for s in ("hp", "attack", "defense", "special_attack", "special_defense", "speed")}


ZERO_IVS = flat_stats(0)

SPECIES = [
    {"id": "flamo", "name": "Flamo", "type": "fire", "base_stats": flat_stats(50),
     "abilities": {"scratch": 1, "growl": 1, "ember": 7, "harden": 12, "flare": 20},
     "evolution": {"evolves_to": "flamar", "level": 16}, "exp_yield": 60},
    {"id": "flamar", "name": "Flamar", "type": "fire", "base_stats": flat_stats(70),
     "abilities": {"scratch": 1, "growl": 1, "ember": 7, "harden": 12}, "exp_yield": 140},
    {"id": "sprout", "name": "Sprout", "type": "grass", "base_stats": flat_stats(50),
     "abilities": {"tackle": 1, "vine_whip": 5}, "exp_yield": 64},
    {"id": "droplet", "name": "Droplet", "type": "water", "base_stats": flat_stats(50),
     "abilities": {"tackle": 1, "water_gun": 7},
     "evolution": {"evolves_to": "torrent", "trigger": "item", "item": "water_stone"}},
    {"id": "torrent", "name": "Torrent", "type": "water", "base_stats": flat_stats(80),
     "abilities": {"tackle": 1, "water_gun": 7}},
]

ABILITIES = [
    {"id": "scratch", "name": "Scratch", "type": "normal", "category": "physical", "power": 40, "accuracy": 100, "uses": 35},
    {"id": "tackle", "name": "Tackle", "type": "normal", "category": "physical", "power": 40, "accuracy": 100, "uses": 35},
    {"id": "ember", "name": "Ember", "type": "fire", "category": "special", "power": 40, "accuracy": 100, "uses": 25,
     "effects": [{"type": "status", "status": "burn", "chance": 10}]},
    {"id": "flare", "name": "Flare", "type": "fire", "category": "special", "power": 90, "accuracy": 100, "uses": 1},
    {"id": "vine_whip", "name": "Vine Whip", "type": "grass", "category": "physical", "power": 45, "accuracy": 100},
    {"id": "water_gun", "name": "Water Gun", "type": "water", "category": "special", "power": 40, "accuracy": 100},
    {"id": "rock_throw", "name": "Rock Throw", "type": "rock", "category": "physical", "power": 50, "accuracy": 90},
    {"id": "growl", "name": "Growl", "type": "normal", "category": "status", "accuracy": 100,
     "effects": [{"type": "stat", "stat": "attack", "stages": -1, "chance": 100}]},
    {"id": "harden", "name": "Harden", "type": "normal", "category": "status", "accuracy": None,
     "effects": [{"type": "stat", "target": "user", "stat": "defense", "stages": 1}]},
    {"id": "toxic", "name": "Toxic", "type": "poison", "category": "status", "accuracy": 100,
     "effects": [{"type": "status", "status": "poison", "chance": 100}]},
    {"id": "recover", "name": "Recover", "type": "normal", "category": "status", "accuracy": None,
     "effects": [{"type": "healing", "target": "user", "percentage": 50}]},
]

ITEMS = [
    {"id": "potion", "name": "Potion", "type": "potion", "effect": {"amount": 20}},
    {"id": "max_potion", "name": "Max Potion", "type": "potion", "effect": {"full": True}},
    {"id": "antidote", "name": "Antidote", "type": "potion", "effect": {"amount": 0, "cure": "poison"}},
    {"id": "poke_ball", "name": "Capture Ball", "type": "ball", "effect": {"catch_rate": 1}},
    {"id": "master_ball", "name": "Master Ball", "type": "ball", "effect": {"catch_rate": 255}},
    {"id": "dud_ball", "name": "Dud Ball", "type": "ball", "effect": {"catch_rate": 0}},
    {"id": "x_attack", "name": "X Attack", "type": "battle", "effect": {"stat": "attack", "stages": 1}},
    {"id": "water_stone", "name": "Water Stone", "type": "evolution", "effect": {}},
    {"id": "town_map", "name": "Town Map", "type": "key", "effect": {}, "is_key_item": True},
]


class FixedRng:
    """Deterministic stand-in: every call returns the configured value."""

    def __init__(self, random_value=0.5, uniform_value=1.0, randint_value=0):
        self.random_value = random_value
        self.uniform_value = uniform_value
        self.randint_value = randint_value

    def random(self):
        return self.random_value

    def uniform(self, a, b):
        return self.uniform_value

    def randint(self, a, b):
        return max(a, min(b, self.randint_value))


class FixedStrategy:
    """Enemy always picks the same ability id (or nothing)."""

    def __init__(self, ability_id=None):
        self.ability_id = ability_id

    def choose(self, monster, opponent, data, rng):
        return self.ability_id


@pytest.fixture(autouse=True)
def _reset_log_level():
    yield
    logger.set_level("INFO")


@pytest.fixture
def data():
    return GameData.from_dicts(SPECIES, ABILITIES, ITEMS)


@pytest.fixture
def rng():
    return FixedRng()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def manager(data, rng, bus):
    return MonsterManager(data, rng, bus)


@pytest.fixture
def seeded_manager(data):
    return MonsterManager(data, random.Random(7))


@pytest.fixture
def inventory():
    return Inventory(items={"potion": 2, "max_potion": 1, "antidote": 1, "poke_ball": 3,
                            "master_ball": 1, "x_attack": 2, "water_stone": 1, "town_map": 1})


@pytest.fixture
def make_engine(data, manager, rng, bus, inventory):
    def _make(enemy_ability=None, strategy=None, **kw):
        return BattleEngine(data, manager, rng=rng, events=bus,
                            strategy=strategy or FixedStrategy(enemy_ability), inventory=inventory, **kw)
    return _make


@pytest.fixture
def spawn(manager):
    """Create a monster with zero IVs so stats are predictable."""
    def _spawn(species_id, level=10, **kw):
        kw.setdefault("ivs", ZERO_IVS)
        return manager.create(species_id, level, **kw)
    return _spawn
