"""
Error classes for clearer exception sources.

Only reference-data integrity problems are raised; gameplay edge cases are
reported through result records with ``success=False``.
"""
from __future__ import annotations

class MonsterQuestError(Exception):
    pass

class DataLoadError(MonsterQuestError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ValidationError(MonsterQuestError):
    pass

class NotFoundError(MonsterQuestError):
    kind = "record"

    def __init__(self, key: str):
        super().__init__(f"{self.kind.capitalize()} not found: {key}")
        self.key = key

class SpeciesNotFound(NotFoundError):
    kind = "species"

class AbilityNotFound(NotFoundError):
    kind = "ability"

class ItemNotFound(NotFoundError):
    kind = "item"
