"""
Engine Core - Curling match state and rule application.

The engine is the runtime that:
1. Models teams, stones, settings and the game state
2. Models the moves a team can submit
3. Applies moves via the reducer (normal ruleset)
"""

from .state import (
    Team,
    Vector2,
    Stone,
    StoneIndex,
    GameSetting,
    GameResult,
    ResultReason,
    GameState,
    STONES_PER_TEAM,
    SHOTS_PER_END,
)
from .move import Move, MoveType, Shot, Concede, Rotation
from .reducer import Reducer, MoveResult, apply_move
from . import coordinate

__all__ = [
    "Team",
    "Vector2",
    "Stone",
    "StoneIndex",
    "GameSetting",
    "GameResult",
    "ResultReason",
    "GameState",
    "STONES_PER_TEAM",
    "SHOTS_PER_END",
    "Move",
    "MoveType",
    "Shot",
    "Concede",
    "Rotation",
    "Reducer",
    "MoveResult",
    "apply_move",
    "coordinate",
]
