"""
Move System - The actions a team can submit on its turn.

A move is a tagged union:
1. Shot - launch a stone with a velocity and a curl direction
2. Concede - give up the game

Every state change of a match flows through a move.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .state import Vector2


class Rotation(Enum):
    """Spin direction of a thrown stone."""
    CCW = "ccw"
    CW = "cw"

    @property
    def sign(self) -> float:
        """+1 for counter-clockwise, -1 for clockwise."""
        return 1.0 if self is Rotation.CCW else -1.0


class MoveType(Enum):
    SHOT = "shot"
    CONCEDE = "concede"


@dataclass(frozen=True)
class Shot:
    """Launch a stone from the origin."""
    velocity: Vector2
    rotation: Rotation

    @property
    def move_type(self) -> MoveType:
        return MoveType.SHOT

    @property
    def speed(self) -> float:
        return self.velocity.length()


@dataclass(frozen=True)
class Concede:
    """Resign the game."""

    @property
    def move_type(self) -> MoveType:
        return MoveType.CONCEDE


Move = Union[Shot, Concede]
