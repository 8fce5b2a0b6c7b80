"""
Tests for the velocity estimator.
"""

import math

import pytest

from ..engine_core.coordinate import TEE
from ..engine_core.move import Rotation
from ..engine_core.reducer import LAUNCH_SPIN
from ..engine_core.state import Stone, Vector2
from ..bots.estimator import VelocityEstimator, launch_speed
from ..physics.simulator import NUM_STONES, SimulatorFCV1


class TestLaunchSpeed:
    """Tests for the launch speed regression."""

    @pytest.mark.parametrize("distance", [30.5, 33.0, 35.5, 38.405, 40.0, 41.0])
    def test_launch_exceeds_arrival_speed(self, distance):
        """The stone always leaves faster than it arrives."""
        for i in range(81):
            speed = i / 20
            assert launch_speed(distance, speed) > speed

    def test_farther_needs_more_speed(self):
        assert launch_speed(39.0, 0.0) > launch_speed(37.0, 0.0)

    def test_faster_arrival_needs_more_speed(self):
        assert launch_speed(38.405, 2.0) > launch_speed(38.405, 0.5)

    def test_draw_speed_range(self):
        assert 2.2 < launch_speed(38.405, 0.0) < 2.6

    @pytest.mark.parametrize("speed", [-0.1, 4.01])
    def test_speed_out_of_range(self, speed):
        with pytest.raises(ValueError):
            launch_speed(38.405, speed)

    def test_target_at_origin(self):
        with pytest.raises(ValueError):
            launch_speed(0.0, 1.0)


class TestVelocityEstimator:
    """Tests for launch velocity estimation."""

    def test_simulator_built_lazily_and_reused(self):
        built = []

        def factory():
            built.append(SimulatorFCV1())
            return built[-1]

        estimator = VelocityEstimator(simulator_factory=factory)
        assert built == []
        estimator.estimate(TEE, 0.0, Rotation.CCW)
        estimator.estimate(TEE, 1.0, Rotation.CW)
        assert len(built) == 1
        assert estimator.simulator is built[0]

    def test_magnitude_from_regression(self):
        velocity = VelocityEstimator().estimate(TEE, 0.0, Rotation.CCW)
        assert velocity.length() == pytest.approx(launch_speed(TEE.length(), 0.0))

    def test_aims_against_the_curl(self):
        """Counter-clockwise curls left so the shot aims right, and vice versa."""
        estimator = VelocityEstimator()
        ccw = estimator.estimate(TEE, 0.0, Rotation.CCW)
        cw = estimator.estimate(TEE, 0.0, Rotation.CW)
        assert ccw.x > 0
        assert cw.x < 0
        assert ccw.x == pytest.approx(-cw.x)
        assert ccw.y > 0

    def test_fast_shot_curls_less(self):
        estimator = VelocityEstimator()
        draw = estimator.estimate(TEE, 0.0, Rotation.CCW)
        hit = estimator.estimate(TEE, 3.0, Rotation.CCW)
        draw_angle = math.atan2(draw.x, draw.y)
        hit_angle = math.atan2(hit.x, hit.y)
        assert 0 < hit_angle < draw_angle

    def test_off_centre_target(self):
        """A target right of the centre line is aimed to the right."""
        estimator = VelocityEstimator()
        centre = estimator.estimate(TEE, 0.0, Rotation.CW)
        right = estimator.estimate(Vector2(1.0, TEE.y), 0.0, Rotation.CW)
        assert right.x > centre.x

    def test_invalid_speed(self):
        with pytest.raises(ValueError):
            VelocityEstimator().estimate(TEE, 5.0, Rotation.CCW)


class TestDrawAccuracy:
    """Noise-free draws thrown at the estimated velocity stop on their target."""

    @pytest.mark.parametrize("rotation", [Rotation.CCW, Rotation.CW])
    @pytest.mark.parametrize("target", [TEE, Vector2(1.0, 37.0), Vector2(-0.8, 39.5)])
    def test_draw_rests_on_target(self, target, rotation):
        velocity = VelocityEstimator().estimate(target, 0.0, rotation)

        simulator = SimulatorFCV1()
        stones = [None] * NUM_STONES
        stones[0] = Stone(
            position=Vector2(),
            linear_velocity=velocity,
            angular_velocity=rotation.sign * LAUNCH_SPIN,
        )
        simulator.set_stones(stones)
        while not simulator.are_all_stones_stopped():
            simulator.step()

        rest = simulator.get_stone(0).position
        assert (rest - target).length() < 0.03
