"""Game-wide constants: level caps, stat keys, type/status/item vocabularies."""
from __future__ import annotations
from typing import Tuple

MIN_MONSTER_LEVEL = 1
MAX_MONSTER_LEVEL = 100
MAX_PARTY_SIZE = 6
MAX_KNOWN_ABILITIES = 4

MAX_IV = 31
MAX_EV = 255

STAT_NAMES: Tuple[str, ...] = (
    "hp",
    "attack",
    "defense",
    "special_attack",
    "special_defense",
    "speed",
)

MONSTER_TYPES: Tuple[str, ...] = (
    "normal", "fire", "water", "grass", "electric",
    "ice", "fighting", "poison", "ground", "flying",
    "psychic", "bug", "rock", "ghost", "dragon",
)

# Single-slot status conditions; None means healthy
STATUS_BURN = "burn"
STATUS_POISON = "poison"
STATUS_PARALYSIS = "paralysis"
STATUS_SLEEP = "sleep"
STATUS_FREEZE = "freeze"
STATUSES: Tuple[str, ...] = (STATUS_BURN, STATUS_POISON, STATUS_PARALYSIS, STATUS_SLEEP, STATUS_FREEZE)

GROWTH_FAST = "fast"
GROWTH_MEDIUM = "medium"
GROWTH_SLOW = "slow"
GROWTH_RATES: Tuple[str, ...] = (GROWTH_FAST, GROWTH_MEDIUM, GROWTH_SLOW)

CATEGORY_PHYSICAL = "physical"
CATEGORY_SPECIAL = "special"
CATEGORY_STATUS = "status"
ABILITY_CATEGORIES: Tuple[str, ...] = (CATEGORY_PHYSICAL, CATEGORY_SPECIAL, CATEGORY_STATUS)

ITEM_POTION = "potion"
ITEM_BALL = "ball"
ITEM_KEY = "key"
ITEM_EVOLUTION = "evolution"
ITEM_BATTLE = "battle"
ITEM_TYPES: Tuple[str, ...] = (ITEM_POTION, ITEM_BALL, ITEM_KEY, ITEM_EVOLUTION, ITEM_BATTLE)
BATTLE_ITEM_TYPES: Tuple[str, ...] = (ITEM_POTION, ITEM_BALL, ITEM_BATTLE)

DEFAULT_POTION_AMOUNT = 20
INVENTORY_CAPACITY = 20

__all__ = [name for name in dir() if name.isupper()]
