"""
Player Models - Shot execution noise.

A player turns the shot a team asks for into the shot actually thrown.
Each team has four players; player i throws the team's stones 2i and 2i+1
of every end.

Models:
- NormalDistPlayer: gaussian noise on speed and direction
- IdenticalPlayer: throws exactly what was asked
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Literal, Optional
import math
import random

from pydantic import BaseModel, Field

from ..engine_core.move import Shot
from ..engine_core.state import Vector2
from .simulator import UnsupportedComponentError


class Player(ABC):
    """
    Abstract base class for player models.
    """

    player_id: str = ""

    @abstractmethod
    def play(self, shot: Shot) -> Shot:
        """Return the shot as executed."""
        pass


class IdenticalPlayer(Player):
    """Noise-free player, useful for deterministic trials."""

    player_id = "identical"

    def play(self, shot: Shot) -> Shot:
        return shot


class NormalDistPlayer(Player):
    """
    Player whose speed and direction errors follow normal distributions.

    The requested speed is clamped to max_speed before noise is added.
    """

    player_id = "normal_dist"

    def __init__(
        self,
        max_speed: float = 4.0,
        stddev_speed: float = 0.0076,
        stddev_angle: float = 0.0018,
        seed: int | None = None,
    ):
        self.max_speed = max_speed
        self.stddev_speed = stddev_speed
        self.stddev_angle = stddev_angle
        self.rng = random.Random(seed)

    def play(self, shot: Shot) -> Shot:
        speed = min(shot.speed, self.max_speed)
        angle = math.atan2(shot.velocity.y, shot.velocity.x)

        speed = max(0.0, speed + self.rng.gauss(0.0, self.stddev_speed))
        angle += self.rng.gauss(0.0, self.stddev_angle)

        return Shot(
            velocity=Vector2(speed * math.cos(angle), speed * math.sin(angle)),
            rotation=shot.rotation,
        )


# =============================================================================
# Factories (players section of is_ready)
# =============================================================================

class NormalDistPlayerFactory(BaseModel):
    """Configuration for NormalDistPlayer."""
    type: Literal["normal_dist"] = "normal_dist"
    max_speed: float = Field(4.0, gt=0.0)
    stddev_speed: float = Field(0.0076, ge=0.0)
    stddev_angle: float = Field(0.0018, ge=0.0)
    seed: Optional[int] = None

    def create_player(self) -> NormalDistPlayer:
        return NormalDistPlayer(
            max_speed=self.max_speed,
            stddev_speed=self.stddev_speed,
            stddev_angle=self.stddev_angle,
            seed=self.seed,
        )


class IdenticalPlayerFactory(BaseModel):
    """Configuration for IdenticalPlayer."""
    type: Literal["identical"] = "identical"

    def create_player(self) -> IdenticalPlayer:
        return IdenticalPlayer()


PLAYER_FACTORIES: dict[str, type[BaseModel]] = {
    "normal_dist": NormalDistPlayerFactory,
    "identical": IdenticalPlayerFactory,
}


def load_player_factory(config: dict[str, Any]) -> NormalDistPlayerFactory | IdenticalPlayerFactory:
    """
    Build a player factory from its wire configuration.

    Raises:
        UnsupportedComponentError: the type is not known
        pydantic.ValidationError: the parameters are malformed
    """
    kind = config.get("type") if isinstance(config, dict) else None
    factory_cls = PLAYER_FACTORIES.get(kind)
    if factory_cls is None:
        raise UnsupportedComponentError(f"Unsupported player: {kind!r}")
    return factory_cls.model_validate(config)
