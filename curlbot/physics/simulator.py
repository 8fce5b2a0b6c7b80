"""
Stone Simulator - Discrete-time dynamics for the 16 stones of an end.

A simulator:
1. Accepts a full 16-stone state (team0 stones 0-7, then team1 stones 0-7)
2. Advances exactly one tick per step()
3. Reports when every stone has come to rest
4. Saves and restores its physical state through a reusable storage

Simulators are not thread-safe. One planning call owns a simulator at a time.

The "fcv1" variant reproduces the friction and curl curves that the
velocity estimator regression was fitted against. Other steppers produce
biased estimates.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal
import math

from pydantic import BaseModel, Field

from ..engine_core.state import Stone, Vector2, STONES_PER_TEAM
from ..engine_core.coordinate import STONE_RADIUS

NUM_STONES = 2 * STONES_PER_TEAM

GRAVITY = 9.80665

# Stone to stone contact
_RESTITUTION = 1.0


class UnsupportedComponentError(ValueError):
    """Raised when a simulator or player configuration names an unknown type."""


@dataclass
class SimulatorStorage:
    """
    Opaque save slot for a simulator's physical state.

    Create once with Simulator.create_storage() and reuse across trials.
    """
    simulator_id: str
    bodies: list[tuple[float, ...] | None] = field(default_factory=list)
    frame: int = 0


class Simulator(ABC):
    """
    Abstract base class for stone steppers.
    """

    simulator_id: str = ""

    @property
    @abstractmethod
    def seconds_per_frame(self) -> float:
        pass

    @abstractmethod
    def set_stones(self, stones: list[Stone | None]) -> None:
        """Replace all 16 stones. None leaves the slot empty."""
        pass

    @abstractmethod
    def get_stones(self) -> list[Stone | None]:
        pass

    def get_stone(self, index: int) -> Stone | None:
        """Single stone accessor; subclasses may avoid building all 16."""
        return self.get_stones()[index]

    @abstractmethod
    def step(self) -> None:
        """Advance one tick."""
        pass

    @abstractmethod
    def are_all_stones_stopped(self) -> bool:
        pass

    @abstractmethod
    def create_storage(self) -> SimulatorStorage:
        pass

    @abstractmethod
    def save(self, storage: SimulatorStorage) -> None:
        pass

    @abstractmethod
    def load(self, storage: SimulatorStorage) -> None:
        pass


def longitudinal_acceleration(speed: float) -> float:
    """Deceleration along the direction of travel (m/s^2, negative)."""
    return -(0.00200985 / (speed + 0.06385782) + 0.00626286) * GRAVITY


def yaw_rate(speed: float, angular_velocity: float) -> float:
    """Angular rate at which the velocity vector turns (curl)."""
    if abs(angular_velocity) <= 1e-6 or speed <= 0.0:
        return 0.0
    return math.copysign(0.00820 * speed ** -0.8, angular_velocity)


def angular_acceleration(speed: float) -> float:
    """Decay of spin magnitude."""
    return -0.025 / max(speed, 0.001)


class _Body:
    __slots__ = ("x", "y", "angle", "vx", "vy", "w")

    def __init__(self, x, y, angle=0.0, vx=0.0, vy=0.0, w=0.0):
        self.x = x
        self.y = y
        self.angle = angle
        self.vx = vx
        self.vy = vy
        self.w = w

    @property
    def moving(self) -> bool:
        return self.vx != 0.0 or self.vy != 0.0

    def as_tuple(self) -> tuple[float, ...]:
        return (self.x, self.y, self.angle, self.vx, self.vy, self.w)


class SimulatorFCV1(Simulator):
    """
    Reference stepper.

    Per tick each moving stone loses speed along its path, its velocity
    turns by the curl yaw rate, and its spin decays. Contacts between
    stones are resolved with an equal-mass normal impulse.
    """

    simulator_id = "fcv1"

    def __init__(self, seconds_per_frame: float = 0.001):
        self._seconds_per_frame = seconds_per_frame
        self._bodies: list[_Body | None] = [None] * NUM_STONES
        self.frame = 0

    @property
    def seconds_per_frame(self) -> float:
        return self._seconds_per_frame

    def set_stones(self, stones: list[Stone | None]) -> None:
        if len(stones) != NUM_STONES:
            raise ValueError(f"Expected {NUM_STONES} stones, got {len(stones)}")
        self._bodies = [
            None if s is None else _Body(
                s.position.x, s.position.y, s.angle,
                s.linear_velocity.x, s.linear_velocity.y, s.angular_velocity,
            )
            for s in stones
        ]
        self.frame = 0

    def get_stones(self) -> list[Stone | None]:
        return [
            None if b is None else Stone(
                position=Vector2(b.x, b.y),
                angle=b.angle,
                linear_velocity=Vector2(b.vx, b.vy),
                angular_velocity=b.w,
            )
            for b in self._bodies
        ]

    def get_stone(self, index: int) -> Stone | None:
        b = self._bodies[index]
        if b is None:
            return None
        return Stone(
            position=Vector2(b.x, b.y),
            angle=b.angle,
            linear_velocity=Vector2(b.vx, b.vy),
            angular_velocity=b.w,
        )

    def are_all_stones_stopped(self) -> bool:
        return not any(b is not None and b.moving for b in self._bodies)

    def step(self) -> None:
        dt = self._seconds_per_frame
        for body in self._bodies:
            if body is None or not body.moving:
                continue
            self._advance(body, dt)
        self._resolve_contacts()
        self.frame += 1

    def _advance(self, body: _Body, dt: float) -> None:
        speed = math.hypot(body.vx, body.vy)
        new_speed = speed + longitudinal_acceleration(speed) * dt
        if new_speed <= 0.0:
            body.vx = body.vy = body.w = 0.0
            return

        yaw = yaw_rate(speed, body.w) * dt
        scale = new_speed / speed
        c, s = math.cos(yaw), math.sin(yaw)
        body.vx, body.vy = (
            (body.vx * c - body.vy * s) * scale,
            (body.vx * s + body.vy * c) * scale,
        )

        spin = abs(body.w) + angular_acceleration(speed) * dt
        body.w = 0.0 if spin <= 0.0 else math.copysign(spin, body.w)

        body.x += body.vx * dt
        body.y += body.vy * dt
        body.angle += body.w * dt

    def _resolve_contacts(self) -> None:
        bodies = [b for b in self._bodies if b is not None]
        min_dist = 2 * STONE_RADIUS
        for i, a in enumerate(bodies):
            for b in bodies[i + 1:]:
                dx = b.x - a.x
                dy = b.y - a.y
                if abs(dx) >= min_dist or abs(dy) >= min_dist:
                    continue
                if not (a.moving or b.moving):
                    continue
                d = math.hypot(dx, dy)
                if d >= min_dist or d == 0.0:
                    continue
                nx, ny = dx / d, dy / d

                # Separate the overlap evenly
                push = (min_dist - d) / 2
                a.x -= nx * push
                a.y -= ny * push
                b.x += nx * push
                b.y += ny * push

                vel_along = (a.vx - b.vx) * nx + (a.vy - b.vy) * ny
                if vel_along <= 0.0:
                    continue  # already separating
                j = (1 + _RESTITUTION) * vel_along / 2
                a.vx -= j * nx
                a.vy -= j * ny
                b.vx += j * nx
                b.vy += j * ny

    def create_storage(self) -> SimulatorStorage:
        return SimulatorStorage(simulator_id=self.simulator_id)

    def save(self, storage: SimulatorStorage) -> None:
        if storage.simulator_id != self.simulator_id:
            raise ValueError(f"Storage belongs to simulator {storage.simulator_id!r}")
        storage.bodies = [None if b is None else b.as_tuple() for b in self._bodies]
        storage.frame = self.frame

    def load(self, storage: SimulatorStorage) -> None:
        if storage.simulator_id != self.simulator_id:
            raise ValueError(f"Storage belongs to simulator {storage.simulator_id!r}")
        if not storage.bodies:
            raise ValueError("Storage is empty")
        self._bodies = [None if t is None else _Body(*t) for t in storage.bodies]
        self.frame = storage.frame


# =============================================================================
# Factories (simulator section of is_ready)
# =============================================================================

class FCV1SimulatorFactory(BaseModel):
    """Configuration for the reference stepper."""
    type: Literal["fcv1"] = "fcv1"
    seconds_per_frame: float = Field(0.001, gt=0.0)

    @property
    def simulator_id(self) -> str:
        return self.type

    def create_simulator(self) -> SimulatorFCV1:
        return SimulatorFCV1(seconds_per_frame=self.seconds_per_frame)


SIMULATOR_FACTORIES: dict[str, type[BaseModel]] = {
    "fcv1": FCV1SimulatorFactory,
}

DEFAULT_SIMULATOR_ID = "fcv1"


def load_simulator_factory(config: dict[str, Any]) -> FCV1SimulatorFactory:
    """
    Build a simulator factory from its wire configuration.

    Raises:
        UnsupportedComponentError: the type is not known
        pydantic.ValidationError: the parameters are malformed
    """
    kind = config.get("type") if isinstance(config, dict) else None
    factory_cls = SIMULATOR_FACTORIES.get(kind)
    if factory_cls is None:
        raise UnsupportedComponentError(f"Unsupported simulator: {kind!r}")
    return factory_cls.model_validate(config)
