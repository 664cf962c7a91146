"""Player intent records, one per engine call.

The engine also accepts the same shapes as plain dicts, e.g.
``{"type": "ability", "ability_id": "ember"}``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional, Union


@dataclass
class AbilityAction:
    ability_id: str
    type: Literal["ability"] = field(default="ability", init=False)


@dataclass
class ItemAction:
    item_id: str
    target_index: Optional[int] = None
    type: Literal["item"] = field(default="item", init=False)


@dataclass
class SwitchAction:
    switch_index: int
    type: Literal["switch"] = field(default="switch", init=False)


@dataclass
class RunAction:
    type: Literal["run"] = field(default="run", init=False)


Action = Union[AbilityAction, ItemAction, SwitchAction, RunAction]


def action_from_dict(raw: Mapping[str, Any]) -> Optional[Action]:
    """Build an action record from a dict; ``None`` for an unknown or incomplete action."""
    kind = raw.get("type")
    if kind == "ability" and raw.get("ability_id"):
        return AbilityAction(str(raw["ability_id"]))
    if kind == "item" and raw.get("item_id"):
        return ItemAction(str(raw["item_id"]), raw.get("target_index"))
    if kind == "switch" and raw.get("switch_index") is not None:
        return SwitchAction(raw["switch_index"])
    if kind == "run":
        return RunAction()
    return None


def coerce_action(action: Any) -> Optional[Action]:
    if isinstance(action, (AbilityAction, ItemAction, SwitchAction, RunAction)):
        return action
    if isinstance(action, Mapping):
        return action_from_dict(action)
    return None

__all__ = ["AbilityAction", "ItemAction", "SwitchAction", "RunAction", "Action", "action_from_dict", "coerce_action"]
