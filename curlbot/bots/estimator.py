"""
Velocity Estimator - Inverts the fcv1 stepper to aim shots.

Given a target point, the speed the stone should have when it passes
that point, and a rotation, the estimator returns the launch velocity.

Two stages:
1. Magnitude: a piecewise regression of launch speed against target
   distance and arrival speed, fitted on fcv1 trajectories.
2. Direction: one trial throw along the +y axis measures the lateral
   curl at the moment the stone slows to the arrival speed, and the
   straight-line bearing to the target is rotated by that deviation.

The regression only holds for the fcv1 simulator, for arrival speeds in
[0, 4] m/s, and for targets in the far house region. Other steppers give
systematically biased shots.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import math

from ..engine_core.move import Rotation
from ..engine_core.state import Stone, Vector2
from ..physics.simulator import NUM_STONES, Simulator, FCV1SimulatorFactory

MIN_TARGET_SPEED = 0.0
MAX_TARGET_SPEED = 4.0

# Spin given to the trial stone (rad/s)
TRIAL_SPIN = 1.57


@dataclass(frozen=True)
class _Band:
    """Regression coefficients for one arrival-speed band."""
    upper: float
    c0: tuple[float, ...]  # polynomial in distance, highest power first
    c1: tuple[float, float, float]  # -a * log(r + b) + c
    c2: tuple[float, float]  # a * r + b


_BANDS = (
    _Band(
        upper=0.05,
        c0=(0.0005048122574925176, 0.2756242531609261),
        c1=(0.00046669575066030805, -29.898958358378636, -0.0014030973174948508),
        c2=(0.13968687866736632, 0.41120940058777616),
    ),
    _Band(
        upper=1.0,
        c0=(-0.0014309170115803444, 0.9858457898438147),
        c1=(-0.0008339331735471273, -29.86751291726946, -0.19811799977982522),
        c2=(0.13967323742978, 0.42816312110477517),
    ),
    _Band(
        upper=MAX_TARGET_SPEED,
        c0=(1.0833113118071224e-06, -0.00012132851917870833, 0.004578093297561233, 0.9767006869364527),
        c1=(0.07950648211492622, -8.228225657195706, -0.05601306077702578),
        c2=(0.14140440186382008, 0.3875782508767419),
    ),
)


def _polyval(coefficients: tuple[float, ...], x: float) -> float:
    result = 0.0
    for c in coefficients:
        result = result * x + c
    return result


def launch_speed(target_distance: float, target_speed: float) -> float:
    """
    Launch speed that reaches target_distance while moving at target_speed.

    v0 = sqrt(c0 * speed^2 + c1 * speed + c2), with c0, c1, c2 functions of
    the distance chosen by the arrival-speed band.
    """
    if not MIN_TARGET_SPEED <= target_speed <= MAX_TARGET_SPEED:
        raise ValueError(f"Target speed {target_speed} outside [0, {MAX_TARGET_SPEED}]")
    if target_distance <= 0.0:
        raise ValueError("Target must be away from the launch origin")

    band = next(b for b in _BANDS if target_speed <= b.upper)
    c0 = _polyval(band.c0, target_distance)
    c1 = -band.c1[0] * math.log(target_distance + band.c1[1]) + band.c1[2]
    c2 = _polyval(band.c2, target_distance)
    return math.sqrt(c0 * target_speed * target_speed + c1 * target_speed + c2)


class VelocityEstimator:
    """
    Computes launch velocities for the fcv1 stepper.

    Owns a private trial simulator, built on first use and reused for
    every later estimate. Only one caller may use an estimator at a time.
    """

    def __init__(self, simulator_factory: Callable[[], Simulator] | None = None):
        self._simulator_factory = simulator_factory or FCV1SimulatorFactory().create_simulator
        self._simulator: Simulator | None = None

    @property
    def simulator(self) -> Simulator:
        """Trial simulator, created lazily."""
        if self._simulator is None:
            self._simulator = self._simulator_factory()
        return self._simulator

    def estimate(self, target: Vector2, target_speed: float, rotation: Rotation) -> Vector2:
        """
        Launch velocity that passes target at target_speed with the given rotation.

        target_speed 0 gives a draw (the stone stops on the target), anything
        above gives a hit.
        """
        v0 = launch_speed(target.length(), target_speed)

        delta = self._trial_offset(v0, target_speed, rotation)

        # delta.x before delta.y: angle measured from the +y launch axis
        delta_angle = math.atan2(delta.x, delta.y)
        target_angle = math.atan2(target.y, target.x)
        v0_angle = target_angle + delta_angle

        return Vector2(v0 * math.cos(v0_angle), v0 * math.sin(v0_angle))

    def _trial_offset(self, v0: float, target_speed: float, rotation: Rotation) -> Vector2:
        """Position of a +y trial throw when it slows to target_speed (or stops)."""
        simulator = self.simulator
        stones: list[Stone | None] = [None] * NUM_STONES
        stones[0] = Stone(
            position=Vector2(),
            linear_velocity=Vector2(0.0, v0),
            angular_velocity=TRIAL_SPIN * rotation.sign,
        )
        simulator.set_stones(stones)

        while not simulator.are_all_stones_stopped():
            stone = simulator.get_stone(0)
            if stone.linear_velocity.length() <= target_speed:
                return stone.position
            simulator.step()

        return simulator.get_stone(0).position
