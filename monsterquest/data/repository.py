"""Read-only repository of species, ability and item definitions.

A :class:`GameData` instance is built once (from dicts or a JSON directory)
and handed to the monster manager and battle engine at construction time.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from monsterquest.core.errors import (
    AbilityNotFound, DataLoadError, ItemNotFound, SpeciesNotFound,
)
from monsterquest.core.logging import logger
from monsterquest.core.paths import ABILITIES_FILE, DEFAULT_DATA, ITEMS_FILE, SPECIES_FILE
from .models import AbilityDefinition, ItemDefinition, SpeciesDefinition


def _read_records(path: Path) -> list[Mapping[str, Any]]:
    if not path.exists():
        raise DataLoadError(str(path), "file does not exist")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(str(path), str(e)) from e
    # Accept either a list of records or an {"entries": [...]} index
    if isinstance(raw, Mapping):
        raw = raw.get("entries", [])
    if not isinstance(raw, list):
        raise DataLoadError(str(path), "expected a list of records")
    return raw


class GameData:
    def __init__(self,
                 species: Iterable[SpeciesDefinition] = (),
                 abilities: Iterable[AbilityDefinition] = (),
                 items: Iterable[ItemDefinition] = ()):
        self._species: Dict[str, SpeciesDefinition] = {s.id: s for s in species}
        self._abilities: Dict[str, AbilityDefinition] = {a.id: a for a in abilities}
        self._items: Dict[str, ItemDefinition] = {i.id: i for i in items}

    @classmethod
    def from_dicts(cls,
                   species: Iterable[Mapping[str, Any]] = (),
                   abilities: Iterable[Mapping[str, Any]] = (),
                   items: Iterable[Mapping[str, Any]] = ()) -> "GameData":
        return cls(
            (SpeciesDefinition.from_dict(s) for s in species),
            (AbilityDefinition.from_dict(a) for a in abilities),
            (ItemDefinition.from_dict(i) for i in items),
        )

    @classmethod
    def load(cls, directory: Optional[Path] = None) -> "GameData":
        """Load ``species.json``, ``abilities.json`` and ``items.json`` from a directory.

        Defaults to the sample data bundled with the package.
        """
        base = Path(directory) if directory is not None else DEFAULT_DATA
        data = cls.from_dicts(
            _read_records(base / SPECIES_FILE),
            _read_records(base / ABILITIES_FILE),
            _read_records(base / ITEMS_FILE),
        )
        logger.debug("GameDataLoaded", path=str(base), species=len(data._species),
                     abilities=len(data._abilities), items=len(data._items))
        return data

    # Lookups -------------------------------------------------------------
    def get_species(self, species_id: str) -> SpeciesDefinition:
        try:
            return self._species[species_id]
        except KeyError:
            raise SpeciesNotFound(species_id) from None

    def get_ability(self, ability_id: str) -> AbilityDefinition:
        try:
            return self._abilities[ability_id]
        except KeyError:
            raise AbilityNotFound(ability_id) from None

    def get_item(self, item_id: str) -> ItemDefinition:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFound(item_id) from None

    def has_species(self, species_id: str) -> bool:
        return species_id in self._species

    def has_ability(self, ability_id: str) -> bool:
        return ability_id in self._abilities

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def all_species_ids(self) -> Tuple[str, ...]:
        return tuple(self._species)

    def all_ability_ids(self) -> Tuple[str, ...]:
        return tuple(self._abilities)

    def all_item_ids(self) -> Tuple[str, ...]:
        return tuple(self._items)

__all__ = ["GameData"]
