import pytest

from monsterquest.battle.actions import AbilityAction, ItemAction, RunAction, SwitchAction
from monsterquest.battle.results import AbilityResult
from monsterquest.battle.session import BattlePhase
from monsterquest.events.bus import BATTLE_ACTION, BATTLE_END, BATTLE_START, ITEM_USED, MONSTER_CAUGHT


def use(engine, ability_id):
    return engine.execute_player_action({"type": "ability", "ability_id": ability_id})


# --- start / basic flow -------------------------------------------------------

def test_start_normalizes_single_enemy(make_engine, spawn, bus):
    started = []
    bus.on(BATTLE_START, started.append)
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    s = engine.start([player], enemy)
    assert s.enemy_team == [enemy]
    assert s.active_player is player and s.active_enemy is enemy
    assert s.turn == 0 and s.active
    assert s.phase is BattlePhase.AWAITING_ACTION
    assert started == [s]


def test_start_skips_fainted_leader(make_engine, spawn):
    engine = make_engine()
    down, up = spawn("flamo"), spawn("flamo")
    down.current_hp = 0
    s = engine.start([down, up], [spawn("sprout")])
    assert s.active_player is up


def test_start_rejects_unknown_battle_type(make_engine, spawn):
    with pytest.raises(ValueError):
        make_engine().start([spawn("flamo")], spawn("sprout"), "tournament")


def test_actions_before_start_fail_softly(make_engine):
    res = make_engine().execute_player_action(RunAction())
    assert not res.success
    assert res.message == "Battle is not active"


def test_invalid_action_type(make_engine, spawn):
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout"))
    res = engine.execute_player_action({"type": "dance"})
    assert not res.success
    assert res.message == "Invalid action type"
    assert engine.session.turn == 0


# --- abilities ----------------------------------------------------------------

def test_ember_damage_example(make_engine, spawn):
    engine = make_engine()
    player, enemy = spawn("flamo", 10), spawn("sprout", 10)
    player.stats["special_attack"] = 70
    enemy.stats["special_defense"] = 50
    engine.start([player], enemy)
    res = use(engine, "ember")
    assert isinstance(res, AbilityResult)
    assert res.success and res.hit
    assert res.stab == 1.5
    assert res.type_effectiveness == 2.0
    assert res.damage == 26
    assert enemy.current_hp == enemy.max_hp - 26
    assert "super effective" in res.message
    # 50 > 10 so the burn roll fails
    assert enemy.status is None
    assert player.uses_left("ember") == 24
    assert engine.session.turn == 1


def test_miss_reports_hit_false(make_engine, spawn, rng):
    engine = make_engine()
    player = spawn("flamo", abilities=["rock_throw"])
    enemy = spawn("sprout")
    engine.start([player], enemy)
    rng.random_value = 0.95
    res = use(engine, "rock_throw")
    assert res.success and not res.hit
    assert "missed" in res.message
    assert enemy.current_hp == enemy.max_hp


def test_accuracy_stage_raises_hit_threshold(make_engine, spawn, rng):
    engine = make_engine()
    player = spawn("flamo", abilities=["rock_throw"])
    enemy = spawn("sprout")
    s = engine.start([player], enemy)
    s.player_stages.accuracy = 1
    rng.random_value = 0.95
    res = use(engine, "rock_throw")
    assert res.hit
    assert enemy.current_hp < enemy.max_hp


def test_accuracy_stage_lowers_hit_threshold(make_engine, spawn, rng):
    engine = make_engine()
    player = spawn("flamo", abilities=["rock_throw"])
    enemy = spawn("sprout")
    s = engine.start([player], enemy)
    rng.random_value = 0.7
    assert use(engine, "rock_throw").hit
    s.player_stages.accuracy = -1
    res = use(engine, "rock_throw")
    assert not res.hit
    assert "missed" in res.message


def test_ability_without_accuracy_never_misses(make_engine, spawn, rng):
    engine = make_engine()
    player = spawn("flamo", 12)
    engine.start([player], spawn("sprout"))
    rng.random_value = 0.99
    res = use(engine, "harden")
    assert res.hit
    assert engine.session.player_stages.defense == 1


def test_unknown_and_unlearned_abilities_fail(make_engine, spawn):
    engine = make_engine()
    player = spawn("flamo")
    player.abilities.append("ghost_move")
    engine.start([player], spawn("sprout"))
    res = use(engine, "ghost_move")
    assert not res.success and res.message == "Ability not found"
    res = use(engine, "tackle")
    assert not res.success
    assert engine.session.turn == 0


def test_ability_out_of_uses(make_engine, spawn):
    engine = make_engine()
    engine.start([spawn("flamo", 20)], spawn("sprout", 50))
    assert use(engine, "flare").success
    res = use(engine, "flare")
    assert not res.success
    assert "no uses left" in res.message
    assert engine.session.turn == 1


def test_stat_effect_lowers_enemy_stage(make_engine, spawn):
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout"))
    res = use(engine, "growl")
    assert engine.session.enemy_stages.attack == -1
    assert res.effects[0].stages == -1
    assert any("Attack fell" in line for line in engine.session.log)


def test_stat_effect_at_floor_is_reported(make_engine, spawn):
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout"))
    engine.session.enemy_stages.attack = -6
    use(engine, "growl")
    assert engine.session.enemy_stages.attack == -6
    assert any("won't go any lower" in line for line in engine.session.log)


def test_status_effect_respects_existing_status(make_engine, spawn):
    engine = make_engine()
    enemy = spawn("sprout")
    engine.start([spawn("flamo", abilities=["toxic"])], enemy)
    use(engine, "toxic")
    assert enemy.status == "poison"

    other = spawn("sprout")
    other.status = "burn"
    engine.start([spawn("flamo", abilities=["toxic"])], other)
    res = use(engine, "toxic")
    assert res.success
    assert other.status == "burn"
    assert not res.effects[0].applied


def test_healing_effect(make_engine, spawn):
    engine = make_engine()
    player = spawn("flamo", abilities=["recover"])
    player.current_hp = 10
    engine.start([player], spawn("sprout"))
    use(engine, "recover")
    assert player.current_hp == 25


def test_attack_stage_scales_damage(make_engine, spawn):
    engine = make_engine()
    first = spawn("sprout", 50)
    engine.start([spawn("flamo", 50, abilities=["scratch"])], first)
    assert use(engine, "scratch").damage == 19

    engine.start([spawn("flamo", 50, abilities=["scratch"])], spawn("sprout", 50))
    engine.execute_player_action(ItemAction("x_attack"))
    assert engine.session.player_stages.attack == 1
    assert use(engine, "scratch").damage == 28


def test_enemy_action_is_appended(make_engine, spawn):
    engine = make_engine("tackle")
    player = spawn("flamo")
    engine.start([player], spawn("sprout"))
    res = use(engine, "growl")
    assert res.enemy_action is not None
    assert res.enemy_action.success
    assert res.enemy_action.user == "Sprout"
    assert player.current_hp < player.max_hp


def test_turn_counter_only_advances_on_success(make_engine, spawn):
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout", 30))
    use(engine, "growl")
    use(engine, "tackle")
    use(engine, "growl")
    assert engine.session.turn == 2


def test_message_callback_and_log(make_engine, spawn):
    seen = []
    engine = make_engine(message_cb=seen.append)
    engine.start([spawn("flamo")], spawn("sprout"))
    use(engine, "growl")
    assert seen[0] == "Flamo used Growl!"
    assert engine.session.log == seen


# --- fainting -----------------------------------------------------------------

def test_enemy_faint_promotes_next(make_engine, spawn):
    engine = make_engine()
    player = spawn("flamo")
    first, second = spawn("sprout"), spawn("sprout")
    first.current_hp = 1
    s = engine.start([player], [first, second])
    s.enemy_stages.defense = -2
    exp_before = player.experience
    res = use(engine, "scratch")
    assert first.is_fainted()
    assert s.active_enemy is second
    assert res.enemy_switched_to == "Sprout"
    assert s.enemy_stages.defense == 0
    assert res.experience.gained == 91
    assert player.experience == exp_before + 91
    assert s.active and not res.battle_ended


def test_enemy_faint_wins_battle(make_engine, spawn, bus):
    ended = []
    bus.on(BATTLE_END, ended.append)
    engine = make_engine("tackle")
    player, enemy = spawn("flamo"), spawn("sprout")
    enemy.current_hp = 1
    s = engine.start([player], enemy)
    res = use(engine, "scratch")
    assert res.battle_ended
    assert res.battle_result.outcome == "PLAYER_WIN"
    assert res.battle_result.winner == "player"
    assert res.enemy_action is None
    assert not s.active and s.phase is BattlePhase.ENDED
    assert s.turn == 0
    assert ended == [res.battle_result]


def test_win_reports_evolution_and_evolves_after_battle(make_engine, spawn):
    engine = make_engine()
    player, enemy = spawn("flamo", 16), spawn("sprout")
    enemy.current_hp = 1
    team = [player]
    engine.start(team, enemy)
    res = use(engine, "scratch")
    assert res.battle_result.can_evolve
    assert res.battle_result.evolution_target_id == "flamar"
    assert res.battle_result.evolving is player

    evo = engine.evolve_party_member(0)
    assert evo.success
    assert team[0] is evo.current
    assert team[0].species_id == "flamar"
    assert player not in team


def test_evolve_not_allowed_mid_battle(make_engine, spawn):
    engine = make_engine()
    engine.start([spawn("flamo", 16)], spawn("sprout"))
    res = engine.evolve_party_member(0)
    assert not res.success


def test_level_up_in_battle_reports_learned_ability(make_engine, spawn):
    engine = make_engine()
    player = spawn("flamo", 11)
    player.experience = 12 ** 3 - 1
    enemy = spawn("sprout")
    enemy.current_hp = 1
    s = engine.start([player], enemy)
    res = use(engine, "scratch")
    assert res.battle_ended
    assert player.level == 12
    assert "harden" in player.abilities
    assert "Flamo learned Harden!" in s.log


def test_player_faint_forces_switch(make_engine, spawn):
    engine = make_engine("tackle")
    lead, backup = spawn("flamo"), spawn("flamo")
    lead.current_hp = 1
    s = engine.start([lead, backup], spawn("sprout"))
    res = use(engine, "growl")
    assert lead.is_fainted()
    assert res.need_switch
    assert s.phase is BattlePhase.AWAITING_SWITCH
    assert s.turn == 1
    faint_log = list(s.log)
    assert any("fainted" in line for line in faint_log)

    blocked = use(engine, "scratch")
    assert not blocked.success
    assert s.phase is BattlePhase.AWAITING_SWITCH
    assert s.log == faint_log

    res = engine.execute_player_action(SwitchAction(1))
    assert res.success
    assert s.active_player is backup
    assert res.enemy_action is None
    assert s.turn == 1
    assert backup.current_hp == backup.max_hp
    assert s.phase is BattlePhase.AWAITING_ACTION


def test_player_faint_without_backup_loses(make_engine, spawn):
    engine = make_engine("tackle")
    lead = spawn("flamo")
    lead.current_hp = 1
    s = engine.start([lead], spawn("sprout"))
    res = use(engine, "growl")
    assert res.battle_ended
    assert res.battle_result.outcome == "PLAYER_LOSS"
    assert res.battle_result.winner == "enemy"
    assert not s.active


# --- upkeep -------------------------------------------------------------------

def test_burn_and_poison_tick_each_turn(make_engine, spawn):
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    player.status = "burn"
    enemy.status = "poison"
    engine.start([player], enemy)
    res = use(engine, "growl")
    assert player.current_hp == 30 - 3
    assert enemy.current_hp == 30 - 3
    assert [(t.status, t.damage) for t in res.upkeep] == [("burn", 3), ("poison", 3)]
    assert any("hurt by its poison" in line for line in engine.session.log)


def test_upkeep_tick_is_at_least_one(make_engine, spawn):
    engine = make_engine()
    enemy = spawn("sprout", 1)
    enemy.status = "poison"
    engine.start([spawn("flamo")], enemy)
    before = enemy.current_hp
    use(engine, "growl")
    assert enemy.current_hp == before - max(1, enemy.max_hp // 8)


def test_upkeep_faint_ends_battle(make_engine, spawn):
    engine = make_engine()
    enemy = spawn("sprout")
    enemy.status = "poison"
    enemy.current_hp = 2
    s = engine.start([spawn("flamo")], enemy)
    res = use(engine, "growl")
    assert enemy.is_fainted()
    assert res.battle_ended
    assert res.battle_result.outcome == "PLAYER_WIN"
    assert res.experience is not None
    assert s.turn == 1


def test_weather_and_field_are_inert(make_engine, spawn):
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    engine.start([player], enemy)
    engine.set_weather("rain")
    engine.set_field("grassy")
    use(engine, "growl")
    assert engine.session.weather == "rain"
    assert engine.session.field_condition == "grassy"
    assert player.current_hp == player.max_hp
    assert enemy.current_hp == enemy.max_hp


# --- switching ----------------------------------------------------------------

def test_switch_validation(make_engine, spawn):
    engine = make_engine()
    a, b, c = spawn("flamo"), spawn("sprout"), spawn("flamo")
    c.current_hp = 0
    engine.start([a, b, c], spawn("sprout"))
    assert engine.execute_player_action(SwitchAction(5)).message == "Invalid monster index"
    assert engine.execute_player_action(SwitchAction(0)).message == "Monster is already active"
    assert engine.execute_player_action(SwitchAction(2)).message == "Cannot switch to fainted monster"
    assert engine.session.turn == 0


def test_switch_replaces_active_and_resets_stages(make_engine, spawn):
    engine = make_engine("tackle")
    a, b = spawn("flamo"), spawn("sprout")
    s = engine.start([a, b], spawn("sprout"))
    engine.execute_player_action(ItemAction("x_attack"))
    assert s.player_stages.attack == 1
    res = engine.execute_player_action({"type": "switch", "switch_index": 1})
    assert res.success and res.message == "Go, Sprout!"
    assert s.active_player is b
    assert s.player_stages.attack == 0
    # the enemy's tackle lands on the monster that came in
    assert b.current_hp < b.max_hp
    assert s.turn == 2


# --- running ------------------------------------------------------------------

def _speed_50(*monsters):
    for m in monsters:
        m.stats["speed"] = 50


def test_run_boundary_success(make_engine, spawn, rng):
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    _speed_50(player, enemy)
    engine.start([player], enemy)
    rng.randint_value = 157
    res = engine.execute_player_action(RunAction())
    assert res.escaped
    assert res.escape_chance == 158
    assert res.battle_result.outcome == "ESCAPE"
    assert not engine.session.active


def test_run_boundary_failure_then_retry(make_engine, spawn, rng):
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    _speed_50(player, enemy)
    s = engine.start([player], enemy)
    rng.randint_value = 158
    res = engine.execute_player_action(RunAction())
    assert res.success and not res.escaped
    assert (res.escape_chance, res.roll) == (158, 158)
    assert s.run_attempts == 1 and s.active and s.turn == 1
    res = engine.execute_player_action(RunAction())
    assert res.escape_chance == 188
    assert res.escaped


def test_run_chance_uses_player_speed_stage(make_engine, spawn, rng):
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    _speed_50(player, enemy)
    s = engine.start([player], enemy)
    s.player_stages.speed = 2
    rng.randint_value = 255
    res = engine.execute_player_action(RunAction())
    assert res.escape_chance == 286
    assert res.escaped


def test_run_chance_uses_enemy_speed_stage(make_engine, spawn, rng):
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    _speed_50(player, enemy)
    s = engine.start([player], enemy)
    s.enemy_stages.speed = 2
    rng.randint_value = 94
    res = engine.execute_player_action(RunAction())
    assert (res.escape_chance, res.roll) == (94, 94)
    assert not res.escaped
    assert s.active


def test_cannot_run_from_trainer(make_engine, spawn):
    engine = make_engine()
    s = engine.start([spawn("flamo")], [spawn("sprout")], "trainer", trainer="Rival")
    res = engine.execute_player_action(RunAction())
    assert not res.success
    assert "trainer" in res.message
    assert s.active and s.turn == 0


# --- items --------------------------------------------------------------------

def test_potion_heals_named_member(make_engine, spawn, inventory, bus):
    used = []
    bus.on(ITEM_USED, lambda item, result: used.append(item.id))
    engine = make_engine()
    a, b = spawn("flamo"), spawn("flamo")
    b.current_hp = 15
    engine.start([a, b], spawn("sprout"))
    res = engine.execute_player_action(ItemAction("potion", 1))
    assert res.success
    assert res.heal_amount == 15
    assert b.current_hp == b.max_hp
    assert inventory.quantity("potion") == 1
    assert used == ["potion"]


def test_potion_without_effect_is_not_consumed(make_engine, spawn, inventory):
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout"))
    res = engine.execute_player_action(ItemAction("potion", 0))
    assert not res.success
    assert "won't have any effect" in res.message
    assert inventory.quantity("potion") == 2


def test_potion_on_fainted_member_fails(make_engine, spawn):
    engine = make_engine()
    a, b = spawn("flamo"), spawn("flamo")
    b.current_hp = 0
    engine.start([a, b], spawn("sprout"))
    res = engine.execute_player_action(ItemAction("max_potion", 1))
    assert not res.success
    assert b.current_hp == 0


def test_max_potion_and_antidote(make_engine, spawn, inventory):
    engine = make_engine()
    player = spawn("flamo")
    player.current_hp = 1
    player.status = "poison"
    engine.start([player], spawn("sprout"))
    engine.execute_player_action(ItemAction("max_potion"))
    # the poison tick lands after the heal
    assert player.current_hp == player.max_hp - 3
    res = engine.execute_player_action(ItemAction("antidote"))
    assert res.success and res.cured == "poison"
    assert player.status is None
    assert not inventory.has("antidote")


def test_item_failures(make_engine, spawn, inventory):
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout"))
    assert engine.execute_player_action(ItemAction("elixir")).message == "Item not found"
    assert not engine.execute_player_action(ItemAction("town_map")).success
    inventory.remove("x_attack", 2)
    res = engine.execute_player_action(ItemAction("x_attack"))
    assert not res.success
    assert "don't have" in res.message
    assert not engine.execute_player_action(ItemAction("potion", 9)).success


# --- catching -----------------------------------------------------------------

def test_catch_moves_monster_to_player_team(make_engine, spawn, inventory, bus):
    caught = []
    bus.on(MONSTER_CAUGHT, caught.append)
    engine = make_engine()
    player, enemy = spawn("flamo"), spawn("sprout")
    enemy.status = "burn"
    team, enemies = [player], [enemy]
    s = engine.start(team, enemies)
    res = engine.execute_player_action(ItemAction("master_ball"))
    assert res.success and res.caught and res.added_to_party
    assert res.battle_result.outcome == "CAUGHT"
    assert res.battle_result.caught is enemy
    assert team == [player, enemy]
    assert enemies == []
    assert s.active_enemy is None
    assert enemy.status is None
    assert not inventory.has("master_ball")
    assert caught == [enemy]


def test_catch_with_full_party_goes_to_storage(make_engine, spawn):
    engine = make_engine()
    team = [spawn("flamo") for _ in range(6)]
    enemy = spawn("sprout")
    box = []
    s = engine.start(team, enemy, storage=box)
    res = engine.execute_player_action(ItemAction("master_ball"))
    assert res.caught and not res.added_to_party
    assert res.stored
    assert "storage" in res.message
    assert enemy not in team and enemy not in s.enemy_team
    assert len(team) == 6
    assert box == [enemy]
    assert enemy.status is None


def test_zero_bonus_ball_never_catches(make_engine, spawn, inventory, rng):
    engine = make_engine()
    enemy = spawn("sprout")
    s = engine.start([spawn("flamo")], enemy)
    inventory.add("dud_ball")
    rng.random_value = 0.0
    res = engine.execute_player_action(ItemAction("dud_ball"))
    assert res.success and not res.caught
    assert s.active and s.active_enemy is enemy


def test_failed_catch_consumes_ball(make_engine, spawn, inventory):
    engine = make_engine()
    s = engine.start([spawn("flamo")], spawn("sprout"))
    res = engine.execute_player_action(ItemAction("poke_ball"))
    assert res.success and not res.caught
    assert "broke free" in res.message
    assert inventory.quantity("poke_ball") == 2
    assert s.active and s.turn == 1


def test_no_catch_on_fainted_enemy(make_engine, spawn, inventory):
    engine = make_engine()
    enemy = spawn("sprout")
    engine.start([spawn("flamo")], enemy)
    enemy.current_hp = 0
    res = engine.execute_player_action(ItemAction("master_ball"))
    assert not res.success
    assert inventory.quantity("master_ball") == 1


def test_no_catch_in_trainer_battle(make_engine, spawn, inventory):
    engine = make_engine()
    engine.start([spawn("flamo")], [spawn("sprout")], "trainer")
    res = engine.execute_player_action(ItemAction("master_ball"))
    assert not res.success
    assert inventory.quantity("master_ball") == 1


def test_every_turn_emits_battle_action(make_engine, spawn, bus):
    seen = []
    bus.on(BATTLE_ACTION, seen.append)
    engine = make_engine()
    engine.start([spawn("flamo")], spawn("sprout"))
    use(engine, "growl")
    engine.execute_player_action(AbilityAction("nothing"))
    assert len(seen) == 2
    assert seen[0].success and not seen[1].success
