"""
Game State - Snapshot of a curling match as seen by the thinking engine.

Design principles:
- Immutable-friendly: rule application returns a new state
- Serializable: mirrors the "state" payload of update messages
- Fixed shape: the stone grid always has 2 x 8 slots

A slot holding None means the stone is not on the sheet. Within an end a
removed stone stays removed until the next end starts.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
import math

STONES_PER_TEAM = 8
SHOTS_PER_END = 2 * STONES_PER_TEAM


class Team(Enum):
    """Team identity. INVALID is used before assignment and for draws."""
    TEAM0 = "team0"
    TEAM1 = "team1"
    INVALID = "invalid"

    @property
    def index(self) -> int:
        if self is Team.INVALID:
            raise ValueError("Invalid team has no index")
        return 0 if self is Team.TEAM0 else 1

    @classmethod
    def from_index(cls, index: int) -> Team:
        return (cls.TEAM0, cls.TEAM1)[index]

    def opponent(self) -> Team:
        if self is Team.TEAM0:
            return Team.TEAM1
        if self is Team.TEAM1:
            return Team.TEAM0
        return Team.INVALID


@dataclass(frozen=True)
class Vector2:
    """A 2D vector in sheet coordinates."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def length(self) -> float:
        return math.hypot(self.x, self.y)


@dataclass(frozen=True)
class Stone:
    """
    Physical state of one stone on the sheet.

    Game states only carry position and angle; the velocities are
    meaningful while a simulator is running.
    """
    position: Vector2
    angle: float = 0.0
    linear_velocity: Vector2 = Vector2()
    angular_velocity: float = 0.0

    def at_rest(self) -> Stone:
        """Return the same stone with both velocities cleared."""
        return Stone(position=self.position, angle=self.angle)


@dataclass(frozen=True)
class StoneIndex:
    """A (team, stone-number) pair addressing one slot of the stone grid."""
    team: int
    stone: int


@dataclass(frozen=True)
class GameSetting:
    """
    Immutable match configuration received in is_ready.

    Times are in seconds and indexed by team.
    """
    max_end: int = 10
    sheet_width: float = 4.75
    five_rock_rule: bool = True
    thinking_time: tuple[float, float] = (219.0, 219.0)
    extra_end_thinking_time: tuple[float, float] = (41.0, 41.0)


class ResultReason(Enum):
    """Why a game ended."""
    SCORE = "score"
    CONCEDE = "concede"
    TIME_LIMIT = "time_limit"
    DRAW = "draw"


@dataclass(frozen=True)
class GameResult:
    """Outcome of a finished game. winner is Team.INVALID for a draw."""
    winner: Team
    reason: ResultReason


def _empty_stones() -> list[list[Stone | None]]:
    return [[None] * STONES_PER_TEAM for _ in range(2)]


@dataclass
class GameState:
    """
    Snapshot of the match.

    Indexing:
    - stones[team][stone] with team 0/1 and stone 0..7
    - scores[team][end] for regular ends, None until the end is played
    """
    end: int = 0
    shot: int = 0
    hammer: Team = Team.TEAM1
    stones: list[list[Stone | None]] = field(default_factory=_empty_stones)
    scores: list[list[int | None]] = field(default_factory=lambda: [[], []])
    extra_end_score: list[int | None] = field(default_factory=lambda: [None, None])
    thinking_time_remaining: list[float] = field(default_factory=lambda: [0.0, 0.0])
    game_result: GameResult | None = None

    @classmethod
    def initial(cls, setting: GameSetting) -> GameState:
        """Create the state before the first shot of the match."""
        return cls(
            scores=[[None] * setting.max_end for _ in range(2)],
            thinking_time_remaining=list(setting.thinking_time),
        )

    @property
    def next_team(self) -> Team:
        """Team to throw the current shot. The hammer team throws odd shots."""
        if self.game_result is not None:
            return Team.INVALID
        if self.shot % 2 == 0:
            return self.hammer.opponent()
        return self.hammer

    @property
    def is_over(self) -> bool:
        return self.game_result is not None

    @property
    def is_extra_end(self) -> bool:
        return self.end >= len(self.scores[0])

    def get_stone(self, index: StoneIndex) -> Stone | None:
        return self.stones[index.team][index.stone]

    def total_score(self, team: Team) -> int:
        """Sum of regular end scores plus the extra end score."""
        scores = self.scores[team.index]
        total = sum(s for s in scores if s is not None)
        extra = self.extra_end_score[team.index]
        return total + (extra or 0)

    def copy(self) -> GameState:
        """Deep copy, safe to hand to the rule engine."""
        return deepcopy(self)
