"""Developer simulation: run one automatic wild battle and print the log.

    python -m monsterquest.cli ember_pup leaf_cub --level 12 --seed 7
"""
from __future__ import annotations
import argparse
from typing import List, Optional

from rich.console import Console

from monsterquest.battle.actions import AbilityAction, RunAction
from monsterquest.battle.ai import StrongestAbilityStrategy
from monsterquest.battle.render import log_table, status_table
from monsterquest.context import GameContext
from monsterquest.core.constants import MAX_MONSTER_LEVEL, MIN_MONSTER_LEVEL
from monsterquest.core.errors import NotFoundError
from monsterquest.system.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="monsterquest", description="Simulate a wild battle between two species")
    parser.add_argument("player", help="Species id of the player's monster")
    parser.add_argument("enemy", help="Species id of the wild monster")
    parser.add_argument("--level", type=int, default=10, help="Level of both monsters")
    parser.add_argument("--enemy-level", type=int, default=None, help="Level of the wild monster (defaults to --level)")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for a reproducible battle")
    parser.add_argument("--max-turns", type=int, default=50, help="Run away after this many turns")
    parser.add_argument("--data-dir", default=None, help="Directory with species/abilities/items JSON")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARN", "ERROR"], default=None)
    return parser


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()
    settings = Settings.load()
    changes = {}
    if args.seed is not None:
        changes["seed"] = args.seed
    if args.data_dir:
        changes["data_dir"] = args.data_dir
    if args.log_level:
        changes["log_level"] = args.log_level
    if changes:
        settings.update(**changes)
    ctx = GameContext(settings)

    level = max(MIN_MONSTER_LEVEL, min(MAX_MONSTER_LEVEL, args.level))
    enemy_level = args.enemy_level if args.enemy_level is not None else level
    try:
        player = ctx.monsters.create(args.player, level)
        enemy = ctx.monsters.create(args.enemy, enemy_level)
    except NotFoundError as e:
        console.print(str(e), style="red")
        return 2

    engine = ctx.new_battle()
    picker = StrongestAbilityStrategy()
    session = engine.start([player], enemy, "wild", storage=ctx.storage)
    console.print(status_table(session))
    turns = []
    while session.active and session.turn < args.max_turns:
        number = session.turn + 1
        ability_id = picker.choose(session.active_player, session.active_enemy, ctx.data, ctx.rng)
        action = AbilityAction(ability_id) if ability_id else RunAction()
        result = engine.execute_player_action(action)
        turns.append((number, list(session.log) or [result.message]))
        if not result.success:
            break
    if session.active:
        result = engine.execute_player_action(RunAction())
        turns.append((session.turn + 1, list(session.log) or [result.message]))
    console.print(log_table(turns))
    console.print(status_table(session))
    outcome = session.result.outcome if session.result else "UNFINISHED"
    console.print(f"Outcome: [bold]{outcome}[/bold] after {session.turn} turn(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
