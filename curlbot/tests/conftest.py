"""
Pytest fixtures for curlbot tests.
"""

import io
import json

import pytest

from ..engine_core.state import GameSetting, GameState, Stone, Team, Vector2
from ..engine_core.coordinate import TEE
from ..physics.simulator import SimulatorFCV1
from ..physics.player import IdenticalPlayer
from ..session.manager import GameSession
from ..api.schemas import GameStateModel


def make_state(
    stones: dict[tuple[int, int], tuple[float, float]] | None = None,
    shot: int = 0,
    hammer: Team = Team.TEAM1,
    setting: GameSetting | None = None,
) -> GameState:
    """Build a game state with stones at the given (team, stone) -> (x, y)."""
    state = GameState.initial(setting or GameSetting())
    for (team, index), (x, y) in (stones or {}).items():
        state.stones[team][index] = Stone(position=Vector2(x, y))
    state.shot = shot
    state.hammer = hammer
    return state


def transcript(*messages: dict) -> io.StringIO:
    """A line reader delivering each message as one JSON line."""
    return io.StringIO("".join(json.dumps(m) + "\n" for m in messages))


def sent(writer: io.StringIO) -> list[dict]:
    """Decode every line written by the client."""
    return [json.loads(line) for line in writer.getvalue().splitlines()]


@pytest.fixture
def setting() -> GameSetting:
    return GameSetting()


@pytest.fixture
def empty_state(setting: GameSetting) -> GameState:
    """State before the first shot of the match."""
    return GameState.initial(setting)


@pytest.fixture
def simulator() -> SimulatorFCV1:
    return SimulatorFCV1()


@pytest.fixture
def identical_player() -> IdenticalPlayer:
    return IdenticalPlayer()


@pytest.fixture
def session(setting: GameSetting) -> GameSession:
    """Session for team0 with noise-free players."""
    return GameSession.create(
        team=Team.TEAM0,
        setting=setting,
        simulator_config={"type": "fcv1", "seconds_per_frame": 0.001},
        player_configs=[{"type": "identical"}] * 4,
    )


@pytest.fixture
def tee_stone_state() -> GameState:
    """team0 to throw its second stone, team1 stone 0 sitting on the tee."""
    return make_state({(1, 0): (TEE.x, TEE.y)}, shot=2)


@pytest.fixture
def dc_message() -> dict:
    return {
        "cmd": "dc",
        "version": {"major": 1, "minor": 0},
        "game_id": "6d5e7f1c-0000-4000-8000-000000000000",
        "date_time": "2026-10-19T12:00:00",
    }


@pytest.fixture
def is_ready_message() -> dict:
    return {
        "cmd": "is_ready",
        "team": "team0",
        "game": {
            "rule": "normal",
            "setting": {
                "max_end": 10,
                "sheet_width": 4.75,
                "five_rock_rule": True,
                "thinking_time": {"team0": 219.0, "team1": 219.0},
                "extra_end_thinking_time": {"team0": 41.0, "team1": 41.0},
            },
            "simulator": {"type": "fcv1", "seconds_per_frame": 0.001},
            "players": {
                "team0": [{"type": "identical"}] * 4,
                "team1": [{"type": "identical"}] * 4,
            },
        },
    }


@pytest.fixture
def new_game_message() -> dict:
    return {"cmd": "new_game", "name": {"team0": "curlbot", "team1": "opponent"}}


def update_message(state: GameState) -> dict:
    """Wrap a game state into an update message."""
    return {"cmd": "update", "state": GameStateModel.from_state(state).model_dump(mode="json")}
