"""
Pydantic Schemas for the match protocol - one model per message.

Every message is one JSON object on its own line, tagged by "cmd":

    in   dc          version, game_id, date_time
    out  dc_ok       name
    in   is_ready    team, game (rule, setting, simulator, players)
    out  ready_ok    player_order
    in   new_game    name (team0, team1)
    in   update      state
    out  move        move (shot or concede)
    in   game_over

Models convert to and from the engine dataclasses so the rest of the
package never touches raw JSON.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ..engine_core.move import Concede, Move, Rotation, Shot
from ..engine_core.state import (
    GameResult,
    GameSetting,
    GameState,
    ResultReason,
    Stone,
    Team,
    Vector2,
    STONES_PER_TEAM,
)


class Command(str, Enum):
    """Protocol command tags."""
    DC = "dc"
    DC_OK = "dc_ok"
    IS_READY = "is_ready"
    READY_OK = "ready_ok"
    NEW_GAME = "new_game"
    UPDATE = "update"
    MOVE = "move"
    GAME_OVER = "game_over"


# =============================================================================
# Shared Models
# =============================================================================

class Vector2Model(BaseModel):
    """2D vector. Accepts {"x": .., "y": ..} or [x, y]; emits the object form."""
    x: float
    y: float

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"x": data[0], "y": data[1]}
        return data

    def to_vector(self) -> Vector2:
        return Vector2(self.x, self.y)

    @classmethod
    def from_vector(cls, vector: Vector2) -> "Vector2Model":
        return cls(x=vector.x, y=vector.y)


class TransformModel(BaseModel):
    """A stone at rest: position and angle."""
    position: Vector2Model
    angle: float = 0.0

    def to_stone(self) -> Stone:
        return Stone(position=self.position.to_vector(), angle=self.angle)

    @classmethod
    def from_stone(cls, stone: Stone) -> "TransformModel":
        return cls(position=Vector2Model.from_vector(stone.position), angle=stone.angle)


class TimePairModel(BaseModel):
    """Seconds per team."""
    team0: float = 0.0
    team1: float = 0.0

    def to_list(self) -> list[float]:
        return [self.team0, self.team1]


class StonesModel(BaseModel):
    """Stone grid; null marks a stone that is not on the sheet."""
    team0: list[Optional[TransformModel]] = Field(default_factory=lambda: [None] * STONES_PER_TEAM)
    team1: list[Optional[TransformModel]] = Field(default_factory=lambda: [None] * STONES_PER_TEAM)

    @field_validator("team0", "team1")
    @classmethod
    def _eight_slots(cls, v: list) -> list:
        if len(v) != STONES_PER_TEAM:
            raise ValueError(f"expected {STONES_PER_TEAM} stone slots, got {len(v)}")
        return v


class ScoresModel(BaseModel):
    """Points per end; null for ends not yet played."""
    team0: list[Optional[int]] = Field(default_factory=list)
    team1: list[Optional[int]] = Field(default_factory=list)


class ExtraEndScoreModel(BaseModel):
    team0: Optional[int] = None
    team1: Optional[int] = None


class GameResultModel(BaseModel):
    """Final outcome; winner is null on a draw."""
    winner: Optional[Team] = None
    reason: ResultReason

    def to_result(self) -> GameResult:
        return GameResult(winner=self.winner or Team.INVALID, reason=self.reason)


class GameSettingModel(BaseModel):
    """game.setting of is_ready."""
    max_end: int = Field(10, ge=1)
    sheet_width: float = Field(4.75, gt=0.0)
    five_rock_rule: bool = True
    thinking_time: TimePairModel = Field(default_factory=lambda: TimePairModel(team0=219.0, team1=219.0))
    extra_end_thinking_time: TimePairModel = Field(
        default_factory=lambda: TimePairModel(team0=41.0, team1=41.0)
    )

    def to_setting(self) -> GameSetting:
        return GameSetting(
            max_end=self.max_end,
            sheet_width=self.sheet_width,
            five_rock_rule=self.five_rock_rule,
            thinking_time=tuple(self.thinking_time.to_list()),
            extra_end_thinking_time=tuple(self.extra_end_thinking_time.to_list()),
        )


class GameStateModel(BaseModel):
    """state of an update message."""
    end: int = Field(0, ge=0)
    shot: int = Field(0, ge=0, lt=2 * STONES_PER_TEAM)
    hammer: Team = Team.TEAM1
    stones: StonesModel = Field(default_factory=StonesModel)
    scores: ScoresModel = Field(default_factory=ScoresModel)
    extra_end_score: ExtraEndScoreModel = Field(default_factory=ExtraEndScoreModel)
    thinking_time_remaining: TimePairModel = Field(default_factory=TimePairModel)
    game_result: Optional[GameResultModel] = None

    def to_state(self) -> GameState:
        return GameState(
            end=self.end,
            shot=self.shot,
            hammer=self.hammer,
            stones=[
                [t.to_stone() if t is not None else None for t in self.stones.team0],
                [t.to_stone() if t is not None else None for t in self.stones.team1],
            ],
            scores=[list(self.scores.team0), list(self.scores.team1)],
            extra_end_score=[self.extra_end_score.team0, self.extra_end_score.team1],
            thinking_time_remaining=self.thinking_time_remaining.to_list(),
            game_result=self.game_result.to_result() if self.game_result else None,
        )

    @classmethod
    def from_state(cls, state: GameState) -> "GameStateModel":
        def row(team: int) -> list[Optional[TransformModel]]:
            return [TransformModel.from_stone(s) if s is not None else None for s in state.stones[team]]

        result = None
        if state.game_result is not None:
            winner = state.game_result.winner
            result = GameResultModel(
                winner=None if winner is Team.INVALID else winner,
                reason=state.game_result.reason,
            )

        return cls(
            end=state.end,
            shot=state.shot,
            hammer=state.hammer,
            stones=StonesModel(team0=row(0), team1=row(1)),
            scores=ScoresModel(team0=state.scores[0], team1=state.scores[1]),
            extra_end_score=ExtraEndScoreModel(
                team0=state.extra_end_score[0], team1=state.extra_end_score[1]
            ),
            thinking_time_remaining=TimePairModel(
                team0=state.thinking_time_remaining[0],
                team1=state.thinking_time_remaining[1],
            ),
            game_result=result,
        )


# =============================================================================
# Moves
# =============================================================================

class ShotModel(BaseModel):
    type: Literal["shot"] = "shot"
    velocity: Vector2Model
    rotation: Rotation


class ConcedeModel(BaseModel):
    type: Literal["concede"] = "concede"


MoveModel = Annotated[Union[ShotModel, ConcedeModel], Field(discriminator="type")]


def move_to_model(move: Move) -> Union[ShotModel, ConcedeModel]:
    """Encode a move for the wire."""
    if isinstance(move, Shot):
        return ShotModel(velocity=Vector2Model.from_vector(move.velocity), rotation=move.rotation)
    if isinstance(move, Concede):
        return ConcedeModel()
    raise TypeError(f"Unknown move type: {type(move).__name__}")


def model_to_move(model: Union[ShotModel, ConcedeModel]) -> Move:
    """Decode a wire move."""
    if isinstance(model, ShotModel):
        return Shot(velocity=model.velocity.to_vector(), rotation=model.rotation)
    if isinstance(model, ConcedeModel):
        return Concede()
    raise TypeError(f"Unknown move model: {type(model).__name__}")


# =============================================================================
# Messages
# =============================================================================

class VersionModel(BaseModel):
    major: int
    minor: int = 0


class DcMessage(BaseModel):
    """Server greeting."""
    cmd: Literal["dc"] = "dc"
    version: VersionModel
    game_id: str
    date_time: str


class DcOkMessage(BaseModel):
    cmd: Literal["dc_ok"] = "dc_ok"
    name: str


class GameConfigModel(BaseModel):
    """game of is_ready. Component configs stay raw until the session resolves them."""
    rule: str
    setting: GameSettingModel = Field(default_factory=GameSettingModel)
    simulator: Optional[dict[str, Any]] = None
    players: dict[str, list[Optional[dict[str, Any]]]] = Field(default_factory=dict)


class IsReadyMessage(BaseModel):
    cmd: Literal["is_ready"] = "is_ready"
    team: Team
    game: GameConfigModel

    def player_configs(self) -> list[Optional[dict[str, Any]]]:
        """Our team's four player configs."""
        return list(self.game.players.get(self.team.value, []))


class ReadyOkMessage(BaseModel):
    cmd: Literal["ready_ok"] = "ready_ok"
    player_order: list[int]


class TeamNamesModel(BaseModel):
    team0: str
    team1: str


class NewGameMessage(BaseModel):
    cmd: Literal["new_game"] = "new_game"
    name: TeamNamesModel


class UpdateMessage(BaseModel):
    cmd: Literal["update"] = "update"
    state: GameStateModel


class MoveMessage(BaseModel):
    cmd: Literal["move"] = "move"
    move: MoveModel


class GameOverMessage(BaseModel):
    cmd: Literal["game_over"] = "game_over"


INBOUND_MESSAGES: dict[Command, type[BaseModel]] = {
    Command.DC: DcMessage,
    Command.IS_READY: IsReadyMessage,
    Command.NEW_GAME: NewGameMessage,
    Command.UPDATE: UpdateMessage,
    Command.GAME_OVER: GameOverMessage,
}
