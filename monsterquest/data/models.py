"""Reference data records: species, abilities and items.

Records are immutable and built from plain dicts (the JSON layout shipped in
``monsterquest/data/defaults``). ``from_dict`` validates the fields battle
logic depends on and raises :class:`ValidationError` otherwise.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from monsterquest.core.constants import (
    ABILITY_CATEGORIES, BATTLE_ITEM_TYPES, CATEGORY_STATUS, GROWTH_MEDIUM,
    ITEM_TYPES, STAT_NAMES,
)
from monsterquest.core.errors import ValidationError

EVOLUTION_TRIGGERS = ("level", "item", "condition")
EFFECT_KINDS = ("stat", "status", "healing")
EFFECT_TARGETS = ("user", "target")


def _require(raw: Mapping[str, Any], kind: str, *keys: str):
    missing = [k for k in keys if raw.get(k) in (None, "")]
    if missing:
        raise ValidationError(f"Invalid {kind} data {raw.get('id', '?')}: missing {', '.join(missing)}")


@dataclass(frozen=True)
class EvolutionRule:
    target: str
    trigger: str = "level"
    level: Optional[int] = None
    item: Optional[str] = None
    condition: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EvolutionRule":
        target = raw.get("evolves_to") or raw.get("target")
        if not target:
            raise ValidationError("Evolution rule without target species")
        trigger = raw.get("trigger")
        if trigger is None:
            # infer from which condition is present
            trigger = "item" if raw.get("item") else "condition" if raw.get("condition") else "level"
        if trigger not in EVOLUTION_TRIGGERS:
            raise ValidationError(f"Unknown evolution trigger: {trigger}")
        level = raw.get("level")
        return cls(
            target=str(target),
            trigger=trigger,
            level=int(level) if level is not None else None,
            item=raw.get("item"),
            condition=raw.get("condition"),
        )


@dataclass(frozen=True)
class SpeciesDefinition:
    id: str
    name: str
    type: str
    base_stats: Dict[str, int]
    # (ability id, unlock level) in declaration order
    learnset: Tuple[Tuple[str, int], ...] = ()
    evolution: Optional[EvolutionRule] = None
    catch_rate: int = 45
    exp_yield: int = 64
    growth_rate: str = GROWTH_MEDIUM
    shape: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SpeciesDefinition":
        _require(raw, "species", "id", "type", "base_stats")
        base = raw["base_stats"]
        missing = [s for s in STAT_NAMES if s not in base]
        if missing:
            raise ValidationError(f"Invalid species data {raw['id']}: base_stats missing {', '.join(missing)}")
        abilities = raw.get("abilities") or {}
        if isinstance(abilities, Mapping):
            learnset = tuple((str(a), int(lvl)) for a, lvl in abilities.items())
        else:
            learnset = tuple((str(e["id"]), int(e.get("level", 1))) for e in abilities)
        evo = raw.get("evolution")
        catch_rate = int(raw.get("catch_rate", 45))
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or raw["id"]).strip(),
            type=str(raw["type"]).lower(),
            base_stats={s: int(base[s]) for s in STAT_NAMES},
            learnset=learnset,
            evolution=EvolutionRule.from_dict(evo) if evo else None,
            catch_rate=max(0, min(255, catch_rate)),
            exp_yield=int(raw.get("exp_yield", 64)),
            growth_rate=str(raw.get("growth_rate") or GROWTH_MEDIUM).lower(),
            shape=dict(raw.get("shape") or {}),
        )

    def unlock_level(self, ability_id: str) -> Optional[int]:
        for a, lvl in self.learnset:
            if a == ability_id:
                return lvl
        return None


@dataclass(frozen=True)
class AbilityEffect:
    kind: str                       # stat | status | healing
    target: str = "target"          # user | target
    chance: int = 100
    stat: Optional[str] = None
    stages: int = 0
    status: Optional[str] = None
    percentage: int = 0
    duration: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AbilityEffect":
        kind = raw.get("type") or raw.get("kind")
        if kind not in EFFECT_KINDS:
            raise ValidationError(f"Unknown ability effect kind: {kind}")
        target = raw.get("target") or "target"
        if target not in EFFECT_TARGETS:
            raise ValidationError(f"Unknown ability effect target: {target}")
        return cls(
            kind=kind,
            target=target,
            chance=int(raw.get("chance") or 100),
            stat=raw.get("stat"),
            stages=int(raw.get("stages", 0) or 0),
            status=raw.get("status"),
            percentage=int(raw.get("percentage", 0) or 0),
            duration=raw.get("duration"),
        )


@dataclass(frozen=True)
class AbilityDefinition:
    id: str
    name: str
    type: str
    category: str                    # physical | special | status
    power: Optional[int] = None
    accuracy: Optional[int] = 100    # None never misses
    uses: Optional[int] = None       # usage limit, None is unlimited
    target: str = "target"
    priority: int = 0
    effects: Tuple[AbilityEffect, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AbilityDefinition":
        _require(raw, "ability", "id", "type", "category")
        category = str(raw["category"]).lower()
        if category not in ABILITY_CATEGORIES:
            raise ValidationError(f"Invalid ability data {raw['id']}: category {category}")
        power = raw.get("power")
        if category != CATEGORY_STATUS and not power:
            raise ValidationError(f"Invalid ability data {raw['id']}: damaging ability without power")
        uses = raw.get("uses", raw.get("pp"))
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or raw["id"]),
            type=str(raw["type"]).lower(),
            category=category,
            power=int(power) if power is not None else None,
            accuracy=int(raw["accuracy"]) if raw.get("accuracy") is not None else None,
            uses=int(uses) if uses is not None else None,
            target=raw.get("target") or "target",
            priority=int(raw.get("priority", 0) or 0),
            effects=tuple(AbilityEffect.from_dict(e) for e in raw.get("effects") or ()),
        )

    @property
    def is_damaging(self) -> bool:
        return self.category != CATEGORY_STATUS and bool(self.power)


@dataclass(frozen=True)
class ItemDefinition:
    id: str
    name: str
    kind: str
    description: str = ""
    effect: Dict[str, Any] = field(default_factory=dict)
    key_item: bool = False
    price: int = 0

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ItemDefinition":
        _require(raw, "item", "id", "type")
        kind = str(raw["type"]).lower()
        if kind not in ITEM_TYPES:
            raise ValidationError(f"Invalid item data {raw['id']}: type {kind}")
        if raw.get("effect") is None:
            raise ValidationError(f"Invalid item data {raw['id']}: missing effect")
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or raw["id"]),
            kind=kind,
            description=raw.get("description", ""),
            effect=dict(raw["effect"]),
            key_item=bool(raw.get("is_key_item", False)),
            price=int(raw.get("price", 0) or 0),
        )

    def usable_in_battle(self) -> bool:
        return self.kind in BATTLE_ITEM_TYPES

    def usable_outside_battle(self) -> bool:
        return self.kind in ("potion", "key", "evolution")


__all__ = [
    "EvolutionRule", "SpeciesDefinition", "AbilityEffect", "AbilityDefinition",
    "ItemDefinition", "EVOLUTION_TRIGGERS",
]
