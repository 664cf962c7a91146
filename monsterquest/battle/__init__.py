"""
Battle package.
- types.py (type chart)
- stages.py (in-battle stat stages)
- actions.py / results.py (records in and out of the engine)
- session.py (per-battle state)
- ai.py (enemy decision logic)
- engine.py (turn resolution)
- render.py (HP bars, tables)
"""
from .engine import BattleEngine
from .session import BattlePhase, BattleSession
__all__ = ["BattleEngine", "BattlePhase", "BattleSession"]
