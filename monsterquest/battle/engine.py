"""Turn-based battle engine for 1v1 player vs wild/trainer battles.

One call to :meth:`BattleEngine.execute_player_action` resolves a full turn:
the player's action, then (if the battle is still running) one enemy action
chosen by the injected strategy, then start-of-turn upkeep (burn/poison,
weather and field hooks). Gameplay problems come back as results with
``success=False``; only broken reference data raises.
"""
from __future__ import annotations
import math
import random
from typing import Any, Callable, Iterable, List, Optional, Union

from monsterquest.core.constants import (
    CATEGORY_PHYSICAL, ITEM_BALL, ITEM_BATTLE, ITEM_POTION, MAX_PARTY_SIZE,
    STATUS_BURN, STATUS_POISON, DEFAULT_POTION_AMOUNT,
)
from monsterquest.core.logging import logger
from monsterquest.data.models import AbilityEffect, ItemDefinition
from monsterquest.data.repository import GameData
from monsterquest.events.bus import BATTLE_ACTION, BATTLE_END, BATTLE_START, ITEM_USED, EventBus, emit
from monsterquest.inventory import Inventory
from monsterquest.monster.manager import MonsterManager
from monsterquest.monster.models import MonsterInstance
from .actions import AbilityAction, ItemAction, SwitchAction, coerce_action
from .ai import EnemyStrategy, RandomAbilityStrategy
from .results import (
    AbilityResult, ActionResult, BattleResult, EffectResult, EvolveResult, ItemResult,
    RunResult, StatusTick, SwitchResult, failure,
)
from .session import BATTLE_TYPES, BattlePhase, BattleSession
from .stages import normalize_stat
from .types import effectiveness, effectiveness_message

DAMAGE_RANDOM_MIN = 0.85
DAMAGE_RANDOM_MAX = 1.0
STAB_MULTIPLIER = 1.5
STATUS_TICK_FRACTION = 8
TICKING_STATUSES = (STATUS_BURN, STATUS_POISON)

_STAT_LABELS = {
    "attack": "Attack",
    "defense": "Defense",
    "special_attack": "Special Attack",
    "special_defense": "Special Defense",
    "speed": "Speed",
    "accuracy": "Accuracy",
}


class BattleEngine:
    def __init__(self, data: GameData, monsters: Optional[MonsterManager] = None, *,
                 rng: Optional[random.Random] = None,
                 events: Optional[EventBus] = None,
                 strategy: Optional[EnemyStrategy] = None,
                 inventory: Optional[Inventory] = None,
                 message_cb: Optional[Callable[[str], None]] = None):
        self.data = data
        self.rng = rng or (monsters.rng if monsters is not None else random.Random())
        self.events = events
        self.monsters = monsters or MonsterManager(data, self.rng, events)
        self.strategy: EnemyStrategy = strategy or RandomAbilityStrategy()
        self.inventory = inventory
        self.message_cb = message_cb
        self.session: Optional[BattleSession] = None

    def _msg(self, text: str):
        if not text:
            return
        if self.session is not None:
            self.session.log.append(text)
        if self.message_cb:
            self.message_cb(text)

    @property
    def phase(self) -> BattlePhase:
        return self.session.phase if self.session is not None else BattlePhase.INACTIVE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, player_team: Iterable[MonsterInstance],
              enemy_team: Union[MonsterInstance, Iterable[MonsterInstance]],
              battle_type: str = "wild", trainer: Optional[Any] = None,
              storage: Optional[List[MonsterInstance]] = None) -> BattleSession:
        if battle_type not in BATTLE_TYPES:
            raise ValueError(f"Unknown battle type: {battle_type}")
        if isinstance(enemy_team, MonsterInstance):
            enemy_team = [enemy_team]
        # caller's list objects are kept so catches land in the real party
        players = player_team if isinstance(player_team, list) else list(player_team)
        enemies = enemy_team if isinstance(enemy_team, list) else list(enemy_team)
        session = BattleSession(
            player_team=players,
            enemy_team=enemies,
            battle_type=battle_type,
            trainer=trainer,
            storage=storage if storage is not None else [],
            active_player=self._first_ready(players),
            active_enemy=self._first_ready(enemies),
        )
        self.session = session
        logger.info("BattleStart", type=battle_type, player=len(players), enemy=len(enemies))
        emit(self.events, BATTLE_START, session)
        return session

    @staticmethod
    def _first_ready(team: List[MonsterInstance]) -> Optional[MonsterInstance]:
        for m in team:
            if not m.is_fainted():
                return m
        return team[0] if team else None

    def end(self, result: BattleResult) -> BattleSession:
        s = self.session
        if s is None:
            raise RuntimeError("No battle to end")
        s.active = False
        s.phase = BattlePhase.ENDED
        s.result = result
        s.reset_stages()
        logger.info("BattleEnd", outcome=result.outcome, turns=s.turn)
        emit(self.events, BATTLE_END, result)
        return s

    def set_weather(self, weather: Optional[str]):
        if self.session is not None:
            self.session.weather = weather

    def set_field(self, condition: Optional[str]):
        if self.session is not None:
            self.session.field_condition = condition

    # ------------------------------------------------------------------
    # Turn entry point
    # ------------------------------------------------------------------
    def execute_player_action(self, action: Any) -> ActionResult:
        s = self.session
        if s is None or not s.active:
            return failure("Battle is not active")
        if s.active_player is None:
            return failure("No active player monster")
        parsed = coerce_action(action)
        if parsed is None:
            return failure("Invalid action type")
        if s.phase is BattlePhase.AWAITING_SWITCH and not isinstance(parsed, SwitchAction):
            return failure(f"{s.active_player.name} can't battle! Choose a replacement.", parsed.type)
        s.log.clear()

        if s.phase is BattlePhase.AWAITING_SWITCH:
            result = self._switch_monster("player", parsed.switch_index)
            if result.success:
                s.phase = BattlePhase.AWAITING_ACTION
            emit(self.events, BATTLE_ACTION, result)
            return result

        s.phase = BattlePhase.TURN_IN_PROGRESS
        if isinstance(parsed, AbilityAction):
            result = self._execute_ability(s.active_player, s.active_enemy, parsed.ability_id)
        elif isinstance(parsed, ItemAction):
            result = self._use_item(parsed.item_id, parsed.target_index)
        elif isinstance(parsed, SwitchAction):
            result = self._switch_monster("player", parsed.switch_index)
        else:
            result = self._attempt_run()
        logger.debug("PlayerAction", type=parsed.type, success=result.success, message=result.message)

        if result.success and s.active:
            enemy_result = self._execute_enemy_action()
            result.enemy_action = enemy_result
            result.need_switch = result.need_switch or enemy_result.need_switch
        if result.success and s.active:
            self._start_new_turn(result)

        if s.active:
            s.phase = BattlePhase.AWAITING_SWITCH if s.active_player.is_fainted() else BattlePhase.AWAITING_ACTION
            result.need_switch = s.phase is BattlePhase.AWAITING_SWITCH
        else:
            result.battle_ended = True
            result.battle_result = s.result
        emit(self.events, BATTLE_ACTION, result)
        return result

    # ------------------------------------------------------------------
    # Abilities
    # ------------------------------------------------------------------
    def _execute_ability(self, user: MonsterInstance, target: Optional[MonsterInstance], ability_id: str) -> ActionResult:
        s = self.session
        if target is None:
            return failure("There is no target", "ability")
        if not self.data.has_ability(ability_id):
            return failure("Ability not found", "ability")
        ability = self.data.get_ability(ability_id)
        if not user.knows(ability_id):
            return failure(f"{user.name} does not know {ability.name}", "ability")
        if not user.can_use(ability_id):
            return failure(f"{user.name} has no uses left for {ability.name}!", "ability")
        if user.is_fainted():
            return failure(f"{user.name} has fainted and can't move", "ability")
        self.monsters.spend_use(user, ability_id)

        user_stages = s.stages_for(user)
        target_stages = s.stages_for(target)
        if ability.accuracy is not None:
            threshold = ability.accuracy * (user_stages.multiplier("accuracy") if user_stages else 1.0)
            if self.rng.random() * 100 > threshold:
                message = f"{user.name}'s {ability.name} missed!"
                self._msg(message)
                return AbilityResult(success=True, kind="ability", message=message, hit=False,
                                     user=user.name, target=target.name, ability=ability.name)

        damage = 0
        type_eff = 1.0
        stab = 1.0
        if ability.is_damaging:
            physical = ability.category == CATEGORY_PHYSICAL
            atk_key = "attack" if physical else "special_attack"
            def_key = "defense" if physical else "special_defense"
            atk = user.stats[atk_key] * (user_stages.multiplier(atk_key) if user_stages else 1.0)
            dfn = target.stats[def_key] * (target_stages.multiplier(def_key) if target_stages else 1.0)
            base = ((2 * user.level / 5 + 2) * ability.power * atk / max(1, dfn) / 50) + 2
            stab = STAB_MULTIPLIER if ability.type == user.type else 1.0
            type_eff = effectiveness(ability.type, target.type)
            roll = self.rng.uniform(DAMAGE_RANDOM_MIN, DAMAGE_RANDOM_MAX)
            damage = math.floor(base * stab * type_eff * roll)

        message = f"{user.name} used {ability.name}!"
        if ability.is_damaging:
            extra = effectiveness_message(type_eff)
            if extra:
                message += " " + extra
        self._msg(message)
        result = AbilityResult(success=True, kind="ability", message=message, hit=True, user=user.name,
                               target=target.name, ability=ability.name, damage=damage,
                               type_effectiveness=type_eff, stab=stab)
        if damage > 0:
            result.damage_result = self.monsters.apply_damage(target, damage)

        for effect in ability.effects:
            if self.rng.random() * 100 <= effect.chance:
                result.effects.append(self._apply_effect(effect, user, target))

        if result.damage_result is not None and result.damage_result.fainted:
            if target is s.active_enemy:
                self._handle_enemy_fainted(result, target, user)
            elif target is s.active_player:
                self._handle_player_fainted(result, target)
        return result

    def _apply_effect(self, effect: AbilityEffect, user: MonsterInstance, target: MonsterInstance) -> EffectResult:
        s = self.session
        subject = user if effect.target == "user" else target
        if effect.kind == "stat":
            stat = normalize_stat(effect.stat)
            stages = s.stages_for(subject)
            changed = 0
            if stat and stages is not None and not subject.is_fainted():
                changed = stages.change(stat, effect.stages)
                self._msg(self._stage_message(subject, stat, effect.stages, changed))
            return EffectResult("stat", subject.name, changed != 0, stat=stat or effect.stat, stages=changed)
        if effect.kind == "status":
            applied = not subject.is_fainted() and self.monsters.apply_status(subject, effect.status)
            if applied:
                self._msg(f"{subject.name} was afflicted with {effect.status}!")
            return EffectResult("status", subject.name, applied, status=effect.status)
        amount = math.floor(subject.max_hp * effect.percentage / 100)
        healed = 0
        if not subject.is_fainted():
            healed = self.monsters.heal(subject, amount).heal_amount
            if healed:
                self._msg(f"{subject.name} regained health!")
        return EffectResult("healing", subject.name, healed > 0, amount=healed)

    @staticmethod
    def _stage_message(monster: MonsterInstance, stat: str, requested: int, changed: int) -> str:
        label = _STAT_LABELS.get(stat, stat.title())
        if changed == 0:
            return f"{monster.name}'s {label} won't go any {'higher' if requested > 0 else 'lower'}!"
        adverb = " sharply" if abs(changed) == 2 else " drastically" if abs(changed) >= 3 else ""
        return f"{monster.name}'s {label}{adverb} {'rose' if changed > 0 else 'fell'}!"

    # ------------------------------------------------------------------
    # Faint bookkeeping
    # ------------------------------------------------------------------
    def _handle_enemy_fainted(self, result: ActionResult, fainted: MonsterInstance, victor: Optional[MonsterInstance]):
        s = self.session
        self._msg(f"{fainted.name} fainted!")
        exp = None
        if victor is not None and victor is s.active_player and not victor.is_fainted():
            exp = self.monsters.award_experience(victor, self.monsters.experience_yield(fainted))
            result.experience = exp
            self._msg(f"{victor.name} gained {exp.gained} experience!")
            if exp.leveled_up:
                self._msg(f"{victor.name} grew to level {victor.level}!")
            for a in exp.new_abilities:
                self._msg(f"{victor.name} learned {self.data.get_ability(a).name}!")
        replacement = s.next_available("enemy")
        if replacement is not None:
            s.active_enemy = replacement
            s.enemy_stages.reset()
            result.enemy_switched_to = replacement.name
            self._msg(f"Enemy sent out {replacement.name}!")
            return
        outcome = BattleResult("PLAYER_WIN")
        if exp is not None and exp.can_evolve:
            outcome.can_evolve = True
            outcome.evolution_target_id = exp.evolution_target_id
            outcome.evolving = victor
        self.end(outcome)
        result.battle_ended = True
        result.battle_result = outcome

    def _handle_player_fainted(self, result: ActionResult, fainted: MonsterInstance):
        s = self.session
        self._msg(f"{fainted.name} fainted!")
        if s.next_available("player") is not None:
            result.need_switch = True
            s.player_stages.reset()
            return
        outcome = BattleResult("PLAYER_LOSS")
        self.end(outcome)
        result.battle_ended = True
        result.battle_result = outcome

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------
    def _use_item(self, item_id: str, target_index: Optional[int] = None) -> ActionResult:
        s = self.session
        if not self.data.has_item(item_id):
            return failure("Item not found", "item")
        item = self.data.get_item(item_id)
        if self.inventory is not None and not self.inventory.has(item.id):
            return failure(f"You don't have any {item.name}", "item")
        if not item.usable_in_battle():
            return failure("Item cannot be used in battle", "item")

        if item.kind == ITEM_POTION:
            result = self._use_potion(item, target_index)
        elif item.kind == ITEM_BALL:
            result = self._use_ball(item)
        elif item.kind == ITEM_BATTLE:
            result = self._use_battle_item(item)
        else:
            result = failure("Item cannot be used in battle", "item")

        if result.success:
            if self.inventory is not None:
                self.inventory.remove(item.id)
            emit(self.events, ITEM_USED, item, result)
            logger.debug("ItemUsed", item=item.id, message=result.message)
        return result

    def _party_member(self, index: Optional[int]) -> Optional[MonsterInstance]:
        s = self.session
        if index is None:
            return s.active_player
        if not isinstance(index, int) or index < 0 or index >= len(s.player_team):
            return None
        return s.player_team[index]

    def _use_potion(self, item: ItemDefinition, target_index: Optional[int]) -> ActionResult:
        target = self._party_member(target_index)
        if target is None:
            return failure("Invalid monster index", "item")
        if target.is_fainted():
            return failure(f"{target.name} has fainted. It won't have any effect.", "item")
        effect = item.effect
        cure = effect.get("cure")
        cured = None
        if cure and target.status and cure in (target.status, "all"):
            cured = self.monsters.clear_status(target)
        amount = None if effect.get("full") else int(effect.get("amount", DEFAULT_POTION_AMOUNT))
        healed = self.monsters.heal(target, amount).heal_amount
        if not healed and cured is None:
            return failure("It won't have any effect.", "item")
        parts = [f"Used {item.name} on {target.name}."]
        if healed:
            parts.append(f"Restored {healed} HP!")
        if cured:
            parts.append(f"{target.name} was cured of its {cured}!")
        message = " ".join(parts)
        self._msg(message)
        return ItemResult(success=True, kind="item", message=message, item=item.name, target=target.name,
                          heal_amount=healed, cured=cured)

    def _use_ball(self, item: ItemDefinition) -> ActionResult:
        s = self.session
        if not s.is_wild:
            return failure("Can't use this on a trainer's monster!", "item")
        enemy = s.active_enemy
        if enemy is None or enemy.is_fainted():
            return failure("There is nothing to catch!", "item")
        bonus = item.effect.get("catch_rate")
        caught = self.monsters.attempt_catch(
            enemy, ball_bonus=1 if bonus is None else bonus, status_bonus=enemy.status is not None)
        if not caught:
            message = f"{enemy.name} broke free!"
            self._msg(message)
            return ItemResult(success=True, kind="item", message=message, item=item.name, target=enemy.name)
        added = self._transfer_caught(enemy)
        message = f"Caught {enemy.name}!" if added else f"Caught {enemy.name}! It was sent to storage."
        self._msg(message)
        outcome = BattleResult("CAUGHT", caught=enemy)
        self.end(outcome)
        return ItemResult(success=True, kind="item", message=message, item=item.name, target=enemy.name,
                          caught=True, added_to_party=added, stored=not added, battle_ended=True, battle_result=outcome)

    def _transfer_caught(self, monster: MonsterInstance) -> bool:
        """Move a caught monster to the party, or to storage when the party is full. True if it joined the party."""
        s = self.session
        s.enemy_team[:] = [m for m in s.enemy_team if m is not monster]
        if s.active_enemy is monster:
            s.active_enemy = None
        self.monsters.clear_status(monster)
        if len(s.player_team) >= MAX_PARTY_SIZE:
            s.storage.append(monster)
            logger.debug("MonsterStored", name=monster.name, stored=len(s.storage))
            return False
        s.player_team.append(monster)
        return True

    def _use_battle_item(self, item: ItemDefinition) -> ActionResult:
        s = self.session
        target = s.active_player
        stat = normalize_stat(item.effect.get("stat"))
        if stat is None:
            return failure("Item cannot be used in battle", "item")
        requested = int(item.effect.get("stages", 1))
        changed = s.player_stages.change(stat, requested)
        if changed == 0:
            return failure("It won't have any effect.", "item")
        message = f"Used {item.name}! " + self._stage_message(target, stat, requested, changed)
        self._msg(message)
        return ItemResult(success=True, kind="item", message=message, item=item.name, target=target.name,
                          stat=stat, stages=changed)

    # ------------------------------------------------------------------
    # Switching & running
    # ------------------------------------------------------------------
    def _switch_monster(self, side: str, index: Any) -> ActionResult:
        s = self.session
        team = s.team(side)
        if not isinstance(index, int) or index < 0 or index >= len(team):
            return failure("Invalid monster index", "switch")
        incoming = team[index]
        previous = s.active_for(side)
        if incoming is previous:
            return failure("Monster is already active", "switch")
        if incoming.is_fainted():
            return failure("Cannot switch to fainted monster", "switch")
        if side == "player":
            s.active_player = incoming
            s.player_stages.reset()
            message = f"Go, {incoming.name}!"
        else:
            s.active_enemy = incoming
            s.enemy_stages.reset()
            message = f"Enemy sent out {incoming.name}!"
        self._msg(message)
        logger.debug("MonsterSwitched", side=side, previous=previous.name if previous else None, current=incoming.name)
        return SwitchResult(success=True, kind="switch", message=message, team=side,
                            previous=previous.name if previous else "", current=incoming.name)

    def _attempt_run(self) -> ActionResult:
        s = self.session
        if not s.is_wild:
            return failure("Can't run from a trainer battle!", "run")
        s.run_attempts += 1
        enemy = s.active_enemy
        if enemy is None:
            chance = 256
        else:
            player_speed = s.active_player.stats["speed"] * s.player_stages.multiplier("speed")
            enemy_speed = enemy.stats["speed"] * s.enemy_stages.multiplier("speed")
            if enemy_speed <= 0:
                chance = 256
            else:
                chance = math.floor(player_speed * 128 / enemy_speed + 30 * s.run_attempts)
        roll = self.rng.randint(0, 255)
        escaped = roll < chance
        if not escaped:
            message = "Couldn't escape!"
            self._msg(message)
            return RunResult(success=True, kind="run", message=message, escape_chance=chance, roll=roll)
        message = "Got away safely!"
        self._msg(message)
        outcome = BattleResult("ESCAPE")
        self.end(outcome)
        return RunResult(success=True, kind="run", message=message, escaped=True, escape_chance=chance,
                         roll=roll, battle_ended=True, battle_result=outcome)

    # ------------------------------------------------------------------
    # Enemy turn & upkeep
    # ------------------------------------------------------------------
    def _execute_enemy_action(self) -> ActionResult:
        s = self.session
        enemy = s.active_enemy
        if enemy is None or enemy.is_fainted():
            return failure("No active enemy monster", "ability")
        if s.active_player is None or s.active_player.is_fainted():
            return failure("No target for the enemy", "ability")
        ability_id = self.strategy.choose(enemy, s.active_player, self.data, self.rng)
        if ability_id is None:
            return failure(f"{enemy.name} has no abilities to use", "ability")
        return self._execute_ability(enemy, s.active_player, ability_id)

    def _start_new_turn(self, result: ActionResult):
        s = self.session
        s.turn += 1
        result.upkeep = self._apply_status_effects(result)
        if s.active:
            self._apply_weather_effects()
            self._apply_field_effects()
        logger.debug("TurnStarted", turn=s.turn)

    def _apply_status_effects(self, result: ActionResult) -> List[StatusTick]:
        s = self.session
        ticks: List[StatusTick] = []
        for monster in (s.active_player, s.active_enemy):
            if not s.active:
                break
            if monster is None or monster.is_fainted() or monster.status not in TICKING_STATUSES:
                continue
            amount = max(1, monster.max_hp // STATUS_TICK_FRACTION)
            dmg = self.monsters.apply_damage(monster, amount)
            self._msg(f"{monster.name} is hurt by its {monster.status}!")
            ticks.append(StatusTick(monster.name, monster.status, amount, dmg.fainted))
            if not dmg.fainted:
                continue
            if monster is s.active_enemy:
                self._handle_enemy_fainted(result, monster, s.active_player)
            else:
                self._handle_player_fainted(result, monster)
        return ticks

    def _apply_weather_effects(self):
        # rain / sun / hail carry no numeric effect yet
        s = self.session
        if s.weather:
            logger.debug("WeatherTick", weather=s.weather, turn=s.turn)

    def _apply_field_effects(self):
        s = self.session
        if s.field_condition:
            logger.debug("FieldTick", field=s.field_condition, turn=s.turn)

    # ------------------------------------------------------------------
    # After battle
    # ------------------------------------------------------------------
    def evolve_party_member(self, index: int) -> ActionResult:
        """Evolve a player team member whose level-based evolution is due; replaces it in the team."""
        s = self.session
        if s is None:
            return failure("No battle session", "evolve")
        if s.active:
            return failure("Can't evolve during battle", "evolve")
        if not isinstance(index, int) or index < 0 or index >= len(s.player_team):
            return failure("Invalid monster index", "evolve")
        monster = s.player_team[index]
        rule = self.monsters.evolution_rule(monster)
        if rule is None or rule.trigger != "level" or rule.level is None or monster.level < rule.level:
            return failure(f"{monster.name} can't evolve right now", "evolve")
        evolved = self.monsters.evolve(monster)
        s.player_team[index] = evolved
        if s.active_player is monster:
            s.active_player = evolved
        message = f"{monster.name} evolved into {evolved.name}!"
        self._msg(message)
        return EvolveResult(success=True, kind="evolve", message=message, previous=monster, current=evolved)

__all__ = ["BattleEngine", "STAB_MULTIPLIER", "DAMAGE_RANDOM_MIN", "DAMAGE_RANDOM_MAX"]
