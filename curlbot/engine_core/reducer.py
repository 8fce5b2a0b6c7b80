"""
Reducer - Applies moves to game state under the normal ruleset.

The reducer is the single point of state transition.
All state changes must go through apply_move().

Design principles:
- Returns a new state; the input state is never mutated
- Runs the thrown stone through a simulator and player model
- Returns MoveResult with success/failure instead of raising
- Owns end scoring, hammer transfer, extra ends and the five-rock rule
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
import math

from .state import (
    GameState, GameSetting, GameResult, ResultReason, Stone, StoneIndex, Team, Vector2,
    STONES_PER_TEAM, SHOTS_PER_END,
)
from .move import Move, MoveType, Shot
from .coordinate import TEE, is_in_play, is_in_house, is_in_free_guard_zone

if TYPE_CHECKING:
    from ..physics.simulator import Simulator
    from ..physics.player import Player

# Free guard zone protection covers the first five stones of an end
FIVE_ROCK_SHOTS = 5

LAUNCH_SPIN = math.pi / 2

# Hard stop for a simulation that never settles
MAX_SIMULATED_SECONDS = 120.0


@dataclass
class MoveResult:
    """
    Result of applying a move.

    Contains:
    - Whether the move was applied
    - New state (if applied)
    - Stones knocked out of play by a shot
    - Human-readable changes for logging
    """
    success: bool
    new_state: GameState | None = None
    error: str | None = None
    error_code: str | None = None
    removed: list[StoneIndex] = field(default_factory=list)
    # Stone grid once the sheet settled, before any end reset
    settled_stones: list[list[Stone | None]] = field(default_factory=list)
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> MoveResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: GameState,
        changes: list[str] | None = None,
        removed: list[StoneIndex] | None = None,
        settled_stones: list[list[Stone | None]] | None = None,
    ) -> MoveResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            removed=removed or [],
            settled_stones=settled_stones if settled_stones is not None else state.stones,
        )


def _flatten(stones: list[list[Stone | None]]) -> list[Stone | None]:
    return [stone for row in stones for stone in row]


@dataclass
class Reducer:
    """
    Reducer applies moves to game state.

    Stateless - all match state is in GameState, physical state in the
    simulator it is handed. Setting provides the rule parameters.
    """
    setting: GameSetting

    def apply(
        self,
        simulator: Simulator,
        player: Player,
        state: GameState,
        move: Move,
        thinking_time_used: float = 0.0,
    ) -> MoveResult:
        """
        Apply a move for the team to throw next.

        Returns MoveResult with new state or error.
        """
        if state.is_over:
            return MoveResult.failure("Game is over - no moves allowed", error_code="GAME_OVER")

        team = state.next_team
        new_state = state.copy()

        remaining = new_state.thinking_time_remaining[team.index] - thinking_time_used
        new_state.thinking_time_remaining[team.index] = remaining
        if remaining < 0:
            new_state.game_result = GameResult(team.opponent(), ResultReason.TIME_LIMIT)
            return MoveResult.success_with_state(
                new_state, changes=[f"{team.value} ran out of thinking time"],
            )

        if move.move_type == MoveType.CONCEDE:
            new_state.game_result = GameResult(team.opponent(), ResultReason.CONCEDE)
            return MoveResult.success_with_state(new_state, changes=[f"{team.value} conceded"])

        if move.move_type == MoveType.SHOT:
            return self._handle_shot(simulator, player, new_state, team, move)

        return MoveResult.failure(f"No handler for move: {move!r}", error_code="NO_HANDLER")

    def _handle_shot(
        self,
        simulator: Simulator,
        player: Player,
        state: GameState,
        team: Team,
        shot: Shot,
    ) -> MoveResult:
        """Throw one stone and let the sheet settle."""
        thrown = player.play(shot)
        thrown_index = StoneIndex(team.index, state.shot // 2)

        before = [[s.at_rest() if s else None for s in row] for row in state.stones]
        initial = _flatten(before)
        initial[thrown_index.team * STONES_PER_TEAM + thrown_index.stone] = Stone(
            position=Vector2(),
            linear_velocity=thrown.velocity,
            angular_velocity=thrown.rotation.sign * LAUNCH_SPIN,
        )

        simulator.set_stones(initial)
        max_frames = int(MAX_SIMULATED_SECONDS / simulator.seconds_per_frame)
        frames = 0
        while not simulator.are_all_stones_stopped() and frames < max_frames:
            simulator.step()
            frames += 1

        after: list[list[Stone | None]] = [[None] * STONES_PER_TEAM for _ in range(2)]
        for i, stone in enumerate(simulator.get_stones()):
            if stone is not None and is_in_play(stone.position, self.setting.sheet_width):
                after[i // STONES_PER_TEAM][i % STONES_PER_TEAM] = stone.at_rest()

        removed = [
            StoneIndex(t, s)
            for t in range(2)
            for s in range(STONES_PER_TEAM)
            if before[t][s] is not None and after[t][s] is None
        ]
        changes = [f"{team.value} threw stone {thrown_index.stone}"]

        if self._violates_free_guard_zone(state, team, before, removed):
            after = before  # thrown stone stays out, everything else goes back
            removed = []
            changes.append("free guard zone violation - stones replaced")

        state.stones = after
        state.shot += 1
        if state.shot >= SHOTS_PER_END:
            changes.extend(self._finish_end(state))

        return MoveResult.success_with_state(
            state, changes=changes, removed=removed, settled_stones=after,
        )

    def _violates_free_guard_zone(
        self,
        state: GameState,
        team: Team,
        before: list[list[Stone | None]],
        removed: list[StoneIndex],
    ) -> bool:
        if not self.setting.five_rock_rule or state.shot >= FIVE_ROCK_SHOTS:
            return False
        opponent = team.opponent().index
        for index in removed:
            stone = before[index.team][index.stone]
            if index.team == opponent and is_in_free_guard_zone(stone.position):
                return True
        return False

    def _score_end(self, state: GameState) -> tuple[Team | None, int]:
        """Return (scoring team, points); (None, 0) for a blank end."""
        distances: list[list[float]] = [[], []]
        for t in range(2):
            for stone in state.stones[t]:
                if stone is not None and is_in_house(stone.position):
                    distances[t].append((stone.position - TEE).length())

        nearest = [min(d, default=math.inf) for d in distances]
        if nearest[0] == nearest[1]:
            return None, 0  # both empty
        scorer = 0 if nearest[0] < nearest[1] else 1
        points = sum(1 for d in distances[scorer] if d < nearest[1 - scorer])
        return Team.from_index(scorer), points

    def _finish_end(self, state: GameState) -> list[str]:
        """Score the end, move the hammer and start the next end or finish."""
        scorer, points = self._score_end(state)
        max_end = self.setting.max_end
        extra_end = state.end >= max_end

        for t in (Team.TEAM0, Team.TEAM1):
            gained = points if t is scorer else 0
            if extra_end:
                previous = state.extra_end_score[t.index] or 0
                state.extra_end_score[t.index] = previous + gained
            else:
                state.scores[t.index][state.end] = gained

        if scorer is not None:
            state.hammer = scorer.opponent()
            changes = [f"end {state.end}: {scorer.value} scored {points}"]
        else:
            changes = [f"end {state.end}: blank end"]

        state.end += 1
        state.shot = 0
        state.stones = [[None] * STONES_PER_TEAM for _ in range(2)]

        if state.end < max_end:
            return changes

        totals = (state.total_score(Team.TEAM0), state.total_score(Team.TEAM1))
        if totals[0] != totals[1]:
            winner = Team.TEAM0 if totals[0] > totals[1] else Team.TEAM1
            state.game_result = GameResult(winner, ResultReason.SCORE)
            changes.append(f"{winner.value} won {totals[0]}-{totals[1]}")
        else:
            state.thinking_time_remaining = list(self.setting.extra_end_thinking_time)
            changes.append("tied - extra end")
        return changes


def apply_move(
    setting: GameSetting,
    simulator: Simulator,
    player: Player,
    state: GameState,
    move: Move,
    thinking_time_used: float = 0.0,
) -> MoveResult:
    """
    Convenience function to apply a move.

    Creates a Reducer and applies the move.
    """
    reducer = Reducer(setting=setting)
    return reducer.apply(simulator, player, state, move, thinking_time_used)
