"""Monster instance lifecycle: creation, HP, status, experience, evolution, capture.

All randomness goes through the injected ``rng`` (``random.Random`` or any
object offering ``random()``, ``randint()`` and ``uniform()``).
"""
from __future__ import annotations
import math
import random
from typing import Iterable, List, Mapping, Optional, Tuple

from monsterquest.core.constants import (
    ITEM_EVOLUTION, MAX_EV, MAX_IV, MAX_KNOWN_ABILITIES, MAX_MONSTER_LEVEL, STAT_NAMES,
)
from monsterquest.core.logging import logger
from monsterquest.data.models import EvolutionRule, SpeciesDefinition
from monsterquest.data.repository import GameData
from monsterquest.events.bus import (
    EventBus, MONSTER_CAUGHT, MONSTER_EVOLVED, MONSTER_FAINTED, MONSTER_LEVEL_UP, emit,
)
from .models import DamageResult, ExperienceResult, HealResult, MonsterInstance
from .stats import clamp_level, derive_stats, experience_for_level, experience_yield

STATUS_CATCH_BONUS = 1.5


def _clamp_spread(values: Mapping[str, int], hi: int) -> dict:
    return {s: max(0, min(hi, int(values.get(s, 0)))) for s in STAT_NAMES}


def abilities_for_level(species: SpeciesDefinition, level: int) -> List[str]:
    unlocked = [(a, lvl) for a, lvl in species.learnset if lvl <= level]
    unlocked.sort(key=lambda e: e[1])
    return [a for a, _ in unlocked][-MAX_KNOWN_ABILITIES:]


class MonsterManager:
    def __init__(self, data: GameData, rng: Optional[random.Random] = None, events: Optional[EventBus] = None):
        self.data = data
        self.rng = rng or random.Random()
        self.events = events

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def generate_ivs(self) -> dict:
        return {s: self.rng.randint(0, MAX_IV) for s in STAT_NAMES}

    def create(self, species_id: str, level: int = 1, *,
               ivs: Optional[Mapping[str, int]] = None,
               evs: Optional[Mapping[str, int]] = None,
               abilities: Optional[Iterable[str]] = None) -> MonsterInstance:
        """Build a fresh instance; raises ``SpeciesNotFound``/``AbilityNotFound`` for bad ids."""
        species = self.data.get_species(species_id)
        level = clamp_level(level or 1)
        ivs = _clamp_spread(ivs, MAX_IV) if ivs is not None else self.generate_ivs()
        evs = _clamp_spread(evs or {}, MAX_EV)
        known = list(abilities)[-MAX_KNOWN_ABILITIES:] if abilities is not None else abilities_for_level(species, level)
        stats = derive_stats(species.base_stats, level, ivs, evs)
        monster = MonsterInstance(
            species_id=species.id,
            name=species.name,
            type=species.type,
            level=level,
            experience=experience_for_level(level, species.growth_rate),
            next_level_experience=experience_for_level(level + 1, species.growth_rate),
            base_stats=dict(species.base_stats),
            ivs=ivs,
            evs=evs,
            stats=stats,
            current_hp=stats["hp"],
            abilities=known,
            ability_uses=self._initial_uses(known),
            catch_rate=species.catch_rate,
            shape=dict(species.shape),
        )
        logger.debug("MonsterCreated", species=species.id, level=level, hp=stats["hp"], abilities=",".join(known))
        return monster

    def _initial_uses(self, ability_ids: Iterable[str]) -> dict:
        uses = {}
        for a in ability_ids:
            limit = self.data.get_ability(a).uses
            if limit is not None:
                uses[a] = limit
        return uses

    def restore_uses(self, monster: MonsterInstance):
        monster.ability_uses = self._initial_uses(monster.abilities)

    def spend_use(self, monster: MonsterInstance, ability_id: str):
        left = monster.ability_uses.get(ability_id)
        if left is not None:
            monster.ability_uses[ability_id] = max(0, left - 1)

    def learn_ability(self, monster: MonsterInstance, ability_id: str) -> Optional[str]:
        """Append an ability, forgetting the oldest when over the cap. Returns the forgotten id."""
        limit = self.data.get_ability(ability_id).uses
        if monster.knows(ability_id):
            return None
        monster.abilities.append(ability_id)
        if limit is not None:
            monster.ability_uses[ability_id] = limit
        forgotten = None
        if len(monster.abilities) > MAX_KNOWN_ABILITIES:
            forgotten = monster.abilities.pop(0)
            monster.ability_uses.pop(forgotten, None)
        return forgotten

    # ------------------------------------------------------------------
    # HP & status
    # ------------------------------------------------------------------
    def apply_damage(self, monster: MonsterInstance, amount: int) -> DamageResult:
        amount = max(0, int(amount))
        previous = monster.current_hp
        monster.current_hp = max(0, min(monster.max_hp, previous - amount))
        fainted = monster.current_hp == 0
        percent = math.floor(amount / monster.max_hp * 100) if monster.max_hp else 0
        logger.debug("MonsterDamaged", name=monster.name, amount=amount, hp=monster.current_hp)
        if fainted and previous > 0:
            emit(self.events, MONSTER_FAINTED, monster)
        return DamageResult(amount, previous, monster.current_hp, percent, fainted)

    def heal(self, monster: MonsterInstance, amount: Optional[int] = None) -> HealResult:
        """Heal by ``amount``, or fully when omitted. Never exceeds max HP."""
        previous = monster.current_hp
        if amount is None:
            monster.current_hp = monster.max_hp
        else:
            monster.current_hp = min(monster.max_hp, previous + max(0, int(amount)))
        healed = monster.current_hp - previous
        percent = math.floor(healed / monster.max_hp * 100) if monster.max_hp else 0
        logger.debug("MonsterHealed", name=monster.name, amount=healed, hp=monster.current_hp)
        return HealResult(healed, previous, monster.current_hp, percent)

    def apply_status(self, monster: MonsterInstance, status: Optional[str]) -> bool:
        # statuses never stack or override
        if not status or monster.status:
            return False
        monster.status = status
        logger.debug("StatusApplied", name=monster.name, status=status)
        return True

    def clear_status(self, monster: MonsterInstance) -> Optional[str]:
        previous = monster.status
        monster.status = None
        return previous

    def set_effort_values(self, monster: MonsterInstance, evs: Mapping[str, int]):
        merged = dict(monster.evs)
        merged.update(evs)
        monster.evs = _clamp_spread(merged, MAX_EV)
        self._recompute_stats(monster)

    def _recompute_stats(self, monster: MonsterInstance) -> int:
        new_stats = derive_stats(monster.base_stats, monster.level, monster.ivs, monster.evs)
        delta = new_stats["hp"] - monster.stats["hp"]
        monster.stats = new_stats
        monster.current_hp = max(0, min(new_stats["hp"], monster.current_hp + delta))
        return delta

    # ------------------------------------------------------------------
    # Experience & evolution
    # ------------------------------------------------------------------
    def experience_yield(self, monster: MonsterInstance) -> int:
        return experience_yield(self.data.get_species(monster.species_id).exp_yield, monster.level)

    def award_experience(self, monster: MonsterInstance, amount: int) -> ExperienceResult:
        species = self.data.get_species(monster.species_id)
        start_level = monster.level
        monster.experience += max(0, int(amount))
        result = ExperienceResult(gained=max(0, int(amount)))
        while monster.experience >= monster.next_level_experience and monster.level < MAX_MONSTER_LEVEL:
            monster.level += 1
            self._recompute_stats(monster)
            for ability_id, unlock in species.learnset:
                if unlock == monster.level:
                    result.new_abilities.append(ability_id)
                    self.learn_ability(monster, ability_id)
            monster.next_level_experience = experience_for_level(monster.level + 1, species.growth_rate)
            logger.debug("MonsterLeveledUp", name=monster.name, level=monster.level)
            emit(self.events, MONSTER_LEVEL_UP, monster)
        result.levels_gained = monster.level - start_level
        result.leveled_up = result.levels_gained > 0
        rule = species.evolution
        if rule and rule.trigger == "level" and rule.level is not None and monster.level >= rule.level:
            result.can_evolve = True
            result.evolution_target_id = rule.target
        return result

    def evolution_rule(self, monster: MonsterInstance) -> Optional[EvolutionRule]:
        return self.data.get_species(monster.species_id).evolution

    def evolve(self, monster: MonsterInstance) -> MonsterInstance:
        """Return a new instance of the evolved species, or ``monster`` itself if it has no evolution."""
        rule = self.evolution_rule(monster)
        if rule is None:
            return monster
        evolved = self.create(rule.target, monster.level, ivs=monster.ivs, evs=monster.evs)
        evolved.experience = monster.experience
        evolved.next_level_experience = monster.next_level_experience
        evolved.current_hp = math.floor(evolved.max_hp * monster.current_hp / monster.max_hp)
        logger.debug("MonsterEvolved", name=monster.name, into=evolved.name)
        emit(self.events, MONSTER_EVOLVED, monster, evolved)
        return evolved

    def use_evolution_item(self, monster: MonsterInstance, item_id: str) -> Tuple[MonsterInstance, bool]:
        item = self.data.get_item(item_id)
        rule = self.evolution_rule(monster)
        if item.kind != ITEM_EVOLUTION or rule is None or rule.trigger != "item" or rule.item != item.id:
            return monster, False
        return self.evolve(monster), True

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------
    def catch_probability(self, monster: MonsterInstance, *, ball_bonus: Optional[float] = 1, status_bonus: bool = False) -> float:
        max_hp = monster.max_hp
        if max_hp <= 0:
            return 0.0
        if ball_bonus is None:
            ball_bonus = 1
        bonus = STATUS_CATCH_BONUS if status_bonus else 1
        a = ((3 * max_hp - 2 * monster.current_hp) * (monster.catch_rate or 0) * ball_bonus * bonus) / (3 * max_hp)
        return max(0.0, min(255.0, a)) / 255

    def attempt_catch(self, monster: MonsterInstance, *, ball_bonus: Optional[float] = 1, status_bonus: bool = False) -> bool:
        chance = self.catch_probability(monster, ball_bonus=ball_bonus, status_bonus=status_bonus)
        caught = self.rng.random() < chance
        logger.debug("CatchAttempt", name=monster.name, chance=round(chance, 3), caught=caught)
        if caught:
            emit(self.events, MONSTER_CAUGHT, monster)
        return caught

__all__ = ["MonsterManager", "abilities_for_level", "STATUS_CATCH_BONUS"]
