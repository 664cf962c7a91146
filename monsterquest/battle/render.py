from __future__ import annotations
from typing import Iterable, Optional

from rich.box import ROUNDED
from rich.table import Table
from rich.text import Text

from monsterquest.monster.models import MonsterInstance
from .session import BattleSession


def hp_color(current: int, max_hp: int) -> str:
    ratio = current / max_hp if max_hp > 0 else 0
    if ratio > 0.5:
        return "green"
    if ratio > 0.2:
        return "yellow"
    return "red"


def draw_hp_bar(current: int, max_hp: int, width: int = 20) -> Text:
    if max_hp <= 0:
        return Text("░" * width, style="red")
    filled = int(max(0, current) / max_hp * width)
    bar = "█" * filled + "░" * (width - filled)
    return Text(bar, style=hp_color(current, max_hp))


def monster_line(monster: Optional[MonsterInstance], width: int = 20) -> Text:
    if monster is None:
        return Text("-")
    line = Text(f"{monster.name} Lv{monster.level} ")
    line.append_text(draw_hp_bar(monster.current_hp, monster.max_hp, width))
    line.append(f" {monster.current_hp}/{monster.max_hp}")
    if monster.status:
        line.append(f" [{monster.status.upper()}]", style="magenta")
    return line


def status_table(session: BattleSession) -> Table:
    """Both teams side by side; the active monster of each side is starred."""
    table = Table(title=f"Turn {session.turn}", box=ROUNDED)
    table.add_column("Player", style="cyan")
    table.add_column("Enemy", style="red")
    rows = max(len(session.player_team), len(session.enemy_team))
    for i in range(rows):
        cells = []
        for team, active in ((session.player_team, session.active_player), (session.enemy_team, session.active_enemy)):
            if i >= len(team):
                cells.append(Text(""))
                continue
            cell = Text("* " if team[i] is active else "  ")
            cell.append_text(monster_line(team[i]))
            cells.append(cell)
        table.add_row(*cells)
    return table


def log_table(turns: Iterable[tuple], title: str = "Battle Log") -> Table:
    """``turns`` is an iterable of ``(turn_number, messages)`` pairs."""
    table = Table(title=title, box=ROUNDED)
    table.add_column("Turn", justify="right", style="dim")
    table.add_column("Message")
    for turn, messages in turns:
        for j, message in enumerate(messages):
            table.add_row(str(turn) if j == 0 else "", message)
    return table

__all__ = ["draw_hp_bar", "hp_color", "monster_line", "status_table", "log_table"]
