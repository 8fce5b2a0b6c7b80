"""
Turn Planner - Rollout-based hit-or-draw decision engine.

On our turn the planner:
1. Orders all 16 stones by distance to the tee
2. Snapshots the session simulator
3. Picks the opponent stone nearest the tee as the target
4. Searches arrival speeds for a hit that removes the target and keeps
   our stone in play, then scores both rotations over repeated trials
5. Without an opponent stone in play, draws to the tee

Every trial restores the simulator from the snapshot first, so trials are
independent and the simulator is left as it was found.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import math
import time

from ..engine_core.coordinate import TEE
from ..engine_core.move import Rotation, Shot
from ..engine_core.state import GameState, Stone, StoneIndex, STONES_PER_TEAM
from .estimator import VelocityEstimator
from .policy import BotDecision, BotPolicy

if TYPE_CHECKING:
    from ..session.manager import GameSession

logger = logging.getLogger(__name__)


@dataclass
class PlannerConfig:
    """
    Tunable search bounds.

    The speed search tries speed_start, speed_start + speed_step, ...
    up to but excluding speed_stop. These bounds are a heuristic.
    """
    speed_start: float = 0.5
    speed_stop: float = 3.5
    speed_step: float = 0.5
    scoring_trials: int = 3
    search_rotation: Rotation = Rotation.CCW

    def speeds(self) -> list[float]:
        """Candidate arrival speeds, generated without float drift."""
        count = math.ceil((self.speed_stop - self.speed_start) / self.speed_step - 1e-9)
        return [self.speed_start + i * self.speed_step for i in range(max(count, 0))]


def _distance_to_tee(stone: Stone | None) -> float:
    if stone is None:
        return math.inf
    return (stone.position - TEE).length()


def sort_stones(stones: list[list[Stone | None]]) -> list[StoneIndex]:
    """
    Order the 16 stone slots by ascending distance to the tee.

    Stable: absent stones sort after every present stone and ties keep
    (team, stone) order.
    """
    indices = [StoneIndex(t, s) for t in range(2) for s in range(STONES_PER_TEAM)]
    return sorted(indices, key=lambda idx: _distance_to_tee(stones[idx.team][idx.stone]))


class TurnPlanner(BotPolicy):
    """
    Planner that takes out the opponent stone nearest the tee, or draws.

    Needs a GameSession (delivered through on_init) for the simulator,
    its snapshot storage and the player models.
    """

    def __init__(
        self,
        config: PlannerConfig | None = None,
        estimator: VelocityEstimator | None = None,
    ):
        self.config = config or PlannerConfig()
        self.estimator = estimator or VelocityEstimator()
        self.session: GameSession | None = None

    def on_init(self, session: GameSession) -> None:
        self.session = session
        # Build the trial simulator before any thinking time is charged
        _ = self.estimator.simulator

    def select_move(self, state: GameState) -> BotDecision:
        if self.session is None:
            raise RuntimeError("Planner used before on_init")

        started = time.perf_counter()
        session = self.session
        team = session.team.index
        order = sort_stones(state.stones)

        # Absent stones sort last, so the first opponent slot decides
        target_idx = next(idx for idx in order if idx.team != team)
        target = state.get_stone(target_idx)

        session.save_snapshot()
        try:
            if target is None:
                decision = self._plan_draw()
            else:
                decision = self._plan_hit(state, target_idx, target)
        finally:
            session.restore_snapshot()

        decision.elapsed = time.perf_counter() - started
        logger.debug("%s in %.2fs", decision.explanation, decision.elapsed)
        return decision

    def on_game_over(self, state: GameState) -> None:
        if self.session is None or state is None or state.game_result is None:
            return
        if state.game_result.winner == self.session.team:
            logger.info("won the game")
        else:
            logger.info("lost the game")

    def _plan_draw(self) -> BotDecision:
        rotation = self.config.search_rotation
        velocity = self.estimator.estimate(TEE, 0.0, rotation)
        return BotDecision(
            move=Shot(velocity=velocity, rotation=rotation),
            explanation="No opponent stone in play - draw to the tee",
            evaluation_details={"target_speed": 0.0},
        )

    def _plan_hit(self, state: GameState, target_idx: StoneIndex, target: Stone) -> BotDecision:
        speed = self._search_speed(state, target_idx, target)

        candidates = [
            Shot(self.estimator.estimate(target.position, speed, rotation), rotation)
            for rotation in (Rotation.CCW, Rotation.CW)
        ]
        points = [0] * len(candidates)
        for _ in range(self.config.scoring_trials):
            for j, shot in enumerate(candidates):
                points[j] += self._trial_points(state, shot, target_idx)

        best = 1 if points[1] > points[0] else 0  # tie keeps CCW
        return BotDecision(
            move=candidates[best],
            explanation=(
                f"Hit opponent stone {target_idx.stone} at {speed:.1f} m/s "
                f"({candidates[best].rotation.value})"
            ),
            evaluated_candidates=len(candidates),
            scores=points,
            evaluation_details={"target": target_idx, "target_speed": speed},
        )

    def _search_speed(self, state: GameState, target_idx: StoneIndex, target: Stone) -> float:
        """First arrival speed whose trial removes the target and keeps our stone."""
        rotation = self.config.search_rotation
        speed = self.config.speed_start
        for speed in self.config.speeds():
            shot = Shot(self.estimator.estimate(target.position, speed, rotation), rotation)
            if self._trial_points(state, shot, target_idx) == 2:
                return speed
        return speed

    def _trial_points(self, state: GameState, shot: Shot, target_idx: StoneIndex) -> int:
        """
        Roll one shot from the snapshot.

        +1 if our thrown stone is still in play, +1 if the target is gone.
        """
        session = self.session
        session.restore_snapshot()
        result = session.apply_move(state, shot)
        if not result.success:
            return 0

        after = result.settled_stones
        own = StoneIndex(session.team.index, state.shot // 2)
        points = 0
        if after[own.team][own.stone] is not None:
            points += 1
        if after[target_idx.team][target_idx.stone] is None:
            points += 1
        return points
