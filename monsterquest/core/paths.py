"""
Centralized path helpers.
"""
from __future__ import annotations
from pathlib import Path

# This file lives at monsterquest/core/paths.py
PACKAGE = Path(__file__).resolve().parents[1]
DEFAULT_DATA = PACKAGE / "data" / "defaults"
SPECIES_FILE = "species.json"
ABILITIES_FILE = "abilities.json"
ITEMS_FILE = "items.json"
