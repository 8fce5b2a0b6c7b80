"""
Tests for the reducer (state transitions).

Tests:
- Concede and time limit
- Shot application and out-of-play removal
- Free guard zone protection
- End scoring, hammer transfer and extra ends
"""

import pytest

from ..engine_core.coordinate import TEE
from ..engine_core.move import Concede, Rotation, Shot
from ..engine_core.reducer import Reducer, apply_move
from ..engine_core.state import (
    GameResult, GameSetting, ResultReason, StoneIndex, Team, Vector2,
)
from ..bots.estimator import VelocityEstimator
from .conftest import make_state

# Launch speed that stops well short of the hog line
SHORT_SHOT = Shot(Vector2(0.0, 1.0), Rotation.CCW)


class TestConcedeAndTime:
    """Tests for moves that end the game without a throw."""

    def test_concede(self, setting, simulator, identical_player, empty_state):
        """Conceding hands the game to the opponent."""
        result = apply_move(setting, simulator, identical_player, empty_state, Concede())

        assert result.success
        assert result.new_state.game_result == GameResult(Team.TEAM1, ResultReason.CONCEDE)
        assert empty_state.game_result is None

    def test_thinking_time_deducted(self, setting, simulator, identical_player, empty_state):
        result = apply_move(
            setting, simulator, identical_player, empty_state, SHORT_SHOT, thinking_time_used=9.0,
        )
        assert result.success
        assert result.new_state.thinking_time_remaining == [210.0, 219.0]

    def test_time_limit(self, setting, simulator, identical_player, empty_state):
        """Overrunning the thinking time loses the game."""
        result = apply_move(
            setting, simulator, identical_player, empty_state, SHORT_SHOT, thinking_time_used=300.0,
        )
        assert result.success
        assert result.new_state.game_result == GameResult(Team.TEAM1, ResultReason.TIME_LIMIT)

    def test_game_over_rejects_moves(self, setting, simulator, identical_player, empty_state):
        empty_state.game_result = GameResult(Team.TEAM0, ResultReason.SCORE)
        result = apply_move(setting, simulator, identical_player, empty_state, SHORT_SHOT)

        assert not result.success
        assert result.error_code == "GAME_OVER"


class TestShot:
    """Tests for throwing a stone."""

    def test_short_stone_removed(self, setting, simulator, identical_player, empty_state):
        """A stone that stops before the hog line leaves play."""
        result = apply_move(setting, simulator, identical_player, empty_state, SHORT_SHOT)

        assert result.success
        state = result.new_state
        assert state.shot == 1
        assert state.stones[0][0] is None
        assert result.removed == []
        assert empty_state.shot == 0

    def test_draw_stays_in_play(self, setting, simulator, identical_player, empty_state):
        """An estimated draw comes to rest close to the tee."""
        velocity = VelocityEstimator().estimate(TEE, 0.0, Rotation.CCW)
        result = apply_move(
            setting, simulator, identical_player, empty_state, Shot(velocity, Rotation.CCW),
        )

        stone = result.new_state.stones[0][0]
        assert stone is not None
        assert (stone.position - TEE).length() < 0.5
        assert stone.linear_velocity == Vector2()

    def test_thrown_stone_slot(self, setting, simulator, identical_player):
        """Shot n throws stone n // 2 of the team to move."""
        state = make_state({(0, 0): (0.0, 36.0)}, shot=3)
        result = apply_move(setting, simulator, identical_player, state, SHORT_SHOT)

        assert result.new_state.shot == 4
        assert result.new_state.stones[0][0] is not None
        assert result.new_state.stones[1][1] is None

    def test_hit_removes_target(self, simulator, identical_player):
        """A fast hit on a house stone knocks it out of play."""
        setting = GameSetting(five_rock_rule=False)
        state = make_state({(1, 0): (TEE.x, TEE.y)}, shot=2, setting=setting)
        velocity = VelocityEstimator().estimate(TEE, 3.0, Rotation.CCW)

        result = apply_move(setting, simulator, identical_player, state, Shot(velocity, Rotation.CCW))

        assert result.new_state.stones[1][0] is None
        assert StoneIndex(1, 0) in result.removed
        assert result.new_state.stones[0][1] is not None


class TestFreeGuardZone:
    """Tests for the five-rock rule."""

    GUARD = (0.0, 34.0)

    def _hit_guard(self, setting, simulator, player):
        state = make_state({(1, 0): self.GUARD}, shot=2, setting=setting)
        velocity = VelocityEstimator().estimate(Vector2(*self.GUARD), 3.0, Rotation.CCW)
        return apply_move(setting, simulator, player, state, Shot(velocity, Rotation.CCW))

    def test_guard_restored(self, simulator, identical_player):
        """Removing a guard early puts it back and takes the thrown stone out."""
        result = self._hit_guard(GameSetting(), simulator, identical_player)

        state = result.new_state
        assert state.stones[1][0].position == Vector2(*self.GUARD)
        assert state.stones[0][1] is None
        assert result.removed == []
        assert state.shot == 3

    def test_rule_disabled(self, simulator, identical_player):
        result = self._hit_guard(GameSetting(five_rock_rule=False), simulator, identical_player)

        assert result.new_state.stones[1][0] is None
        assert StoneIndex(1, 0) in result.removed


class TestEndScoring:
    """Tests for finishing an end."""

    def test_last_shot_scores_the_end(self, setting, simulator, identical_player):
        """The nearest team scores per stone closer than the opponent's best."""
        state = make_state({
            (1, 0): (0.0, TEE.y),
            (1, 1): (0.3, TEE.y + 0.3),
            (0, 0): (-0.8, TEE.y),
            (1, 2): (1.5, TEE.y + 1.0),
        }, shot=15)

        result = Reducer(setting).apply(simulator, identical_player, state, SHORT_SHOT)

        new_state = result.new_state
        assert new_state.scores[1][0] == 2
        assert new_state.scores[0][0] == 0
        assert new_state.hammer is Team.TEAM0
        assert new_state.end == 1
        assert new_state.shot == 0
        assert all(s is None for row in new_state.stones for s in row)
        assert result.settled_stones[1][0] is not None

    def test_blank_end_keeps_hammer(self, setting, simulator, identical_player):
        state = make_state(shot=15)
        result = Reducer(setting).apply(simulator, identical_player, state, SHORT_SHOT)

        assert result.new_state.scores[0][0] == 0
        assert result.new_state.scores[1][0] == 0
        assert result.new_state.hammer is Team.TEAM1

    def test_last_end_decides(self, simulator, identical_player):
        setting = GameSetting(max_end=1)
        state = make_state({(0, 0): (0.0, TEE.y)}, shot=15, setting=setting)
        result = Reducer(setting).apply(simulator, identical_player, state, SHORT_SHOT)

        assert result.new_state.game_result == GameResult(Team.TEAM0, ResultReason.SCORE)
        assert result.new_state.next_team is Team.INVALID

    def test_tie_goes_to_extra_end(self, simulator, identical_player):
        """A tied match continues with the extra end thinking time."""
        setting = GameSetting(max_end=1, extra_end_thinking_time=(30.0, 30.0))
        state = make_state(shot=15, setting=setting)
        result = Reducer(setting).apply(simulator, identical_player, state, SHORT_SHOT)

        new_state = result.new_state
        assert new_state.game_result is None
        assert new_state.is_extra_end
        assert new_state.thinking_time_remaining == [30.0, 30.0]

    def test_extra_end_score_wins(self, simulator, identical_player):
        setting = GameSetting(max_end=1)
        state = make_state({(1, 0): (0.0, TEE.y)}, shot=15, setting=setting)
        state.end = 1
        state.scores = [[0], [0]]
        result = Reducer(setting).apply(simulator, identical_player, state, SHORT_SHOT)

        assert result.new_state.extra_end_score == [0, 1]
        assert result.new_state.game_result == GameResult(Team.TEAM1, ResultReason.SCORE)
