"""
Game Loop - Protocol client for one match over one connection.

The loop:
1. dc        -> dc_ok       (protocol version check)
2. is_ready  -> ready_ok    (rule check, session and policy setup)
3. new_game
4. update    -> move        on our turn, observer hook otherwise
   ... repeated until an update carries a game result
5. game_over

Every inbound line must carry the command the current state expects.
Anything else is a ProtocolError and ends the run. There is no retry,
no reconnect and no read timeout.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import IO, TYPE_CHECKING
import json
import logging

from pydantic import BaseModel

from ..api.schemas import (
    Command,
    DcOkMessage,
    INBOUND_MESSAGES,
    MoveMessage,
    ReadyOkMessage,
    move_to_model,
)
from ..engine_core.move import Shot
from .manager import DEFAULT_PLAYER_ORDER, GameSession

if TYPE_CHECKING:
    from ..bots.policy import BotPolicy
    from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


class ProtocolError(Exception):
    """The server sent something this client does not accept."""


class LoopState(Enum):
    """State of the protocol loop."""
    AWAIT_HANDSHAKE = "await_handshake"
    AWAIT_READY = "await_ready"
    AWAIT_NEW_GAME = "await_new_game"
    AWAIT_UPDATE = "await_update"
    AWAIT_GAME_OVER = "await_game_over"
    DONE = "done"


@dataclass
class ClientConfig:
    """Identity and the protocol variant this client speaks."""
    name: str = "curlbot"
    supported_major: int = 1
    supported_rule: str = "normal"


class GameLoop:
    """
    The protocol driver.

    Usage:
        with socket.create_connection((host, port)) as sock:
            reader = sock.makefile("r", encoding="utf-8", newline="\\n")
            writer = sock.makefile("w", encoding="utf-8", newline="\\n")
            final_state = GameLoop(reader, writer, TurnPlanner()).run()

    reader.readline() must return exactly one line per call. A buffered
    reader may read ahead; lines are still consumed in arrival order.
    """

    def __init__(
        self,
        reader: IO[str],
        writer: IO[str],
        policy: BotPolicy,
        config: ClientConfig | None = None,
    ):
        self.reader = reader
        self.writer = writer
        self.policy = policy
        self.config = config or ClientConfig()
        self.state = LoopState.AWAIT_HANDSHAKE
        self.session: GameSession | None = None
        self.game_state: GameState | None = None

    def run(self) -> GameState | None:
        """Play one match to the end and return the final game state."""
        self._handshake()
        self._ready()
        self._new_game()
        self._play()
        self._game_over()
        return self.game_state

    # ── Transport ────────────────────────────────────────────────────────────

    def _read(self, expected: Command) -> BaseModel:
        """Read one line and validate it as the expected message."""
        line = self.reader.readline()
        if not line:
            raise ConnectionError("Connection closed by server")

        data = json.loads(line)
        actual = data.get("cmd") if isinstance(data, dict) else None
        if actual != expected.value:
            raise ProtocolError(
                f'Unexpected cmd (expected: "{expected.value}", actual: "{actual}")'
            )
        return INBOUND_MESSAGES[expected].model_validate(data)

    def _send(self, message: BaseModel) -> None:
        self.writer.write(message.model_dump_json() + "\n")
        self.writer.flush()

    # ── Phases ───────────────────────────────────────────────────────────────

    def _handshake(self) -> None:
        msg = self._read(Command.DC)
        if msg.version.major != self.config.supported_major:
            raise ProtocolError(
                f"Unexpected protocol version {msg.version.major}.{msg.version.minor}"
            )
        logger.info("[in] dc")
        logger.info("  game_id  : %s", msg.game_id)
        logger.info("  date_time: %s", msg.date_time)

        self._send(DcOkMessage(name=self.config.name))
        logger.info("[out] dc_ok")
        logger.info("  name: %s", self.config.name)
        self.state = LoopState.AWAIT_READY

    def _ready(self) -> None:
        msg = self._read(Command.IS_READY)
        if msg.game.rule != self.config.supported_rule:
            raise ProtocolError(f"Unexpected rule {msg.game.rule!r}")
        logger.info("[in] is_ready")

        setting = msg.game.setting.to_setting()
        player_order = self.policy.select_player_order(
            msg.team, setting, list(DEFAULT_PLAYER_ORDER)
        )
        self.session = GameSession.create(
            team=msg.team,
            setting=setting,
            simulator_config=msg.game.simulator,
            player_configs=msg.player_configs(),
            player_order=player_order,
        )
        self.policy.on_init(self.session)

        self._send(ReadyOkMessage(player_order=self.session.player_order))
        logger.info("[out] ready_ok")
        logger.info("  player order: %s", self.session.player_order)
        self.state = LoopState.AWAIT_NEW_GAME

    def _new_game(self) -> None:
        msg = self._read(Command.NEW_GAME)
        self.session.metadata["team_names"] = msg.name.model_dump()
        logger.info("[in] new_game")
        logger.info("  team 0: %s", msg.name.team0)
        logger.info("  team 1: %s", msg.name.team1)
        self.state = LoopState.AWAIT_UPDATE

    def _play(self) -> None:
        while True:
            msg = self._read(Command.UPDATE)
            game_state = msg.state.to_state()
            self.game_state = game_state
            logger.info("[in] update (end: %d, shot: %d)", game_state.end, game_state.shot)

            if game_state.is_over:
                break

            if game_state.next_team == self.session.team:
                self._my_turn(game_state)
            else:
                self.policy.on_opponent_turn(game_state)

        self.state = LoopState.AWAIT_GAME_OVER

    def _my_turn(self, game_state: GameState) -> None:
        decision = self.policy.select_move(game_state)
        move = decision.move
        self._send(MoveMessage(move=move_to_model(move)))

        logger.info("[out] move")
        if isinstance(move, Shot):
            logger.info("  type    : shot")
            logger.info("  velocity: [%f, %f]", move.velocity.x, move.velocity.y)
            logger.info("  rotation: %s", move.rotation.value)
        else:
            logger.info("  type: concede")
        if decision.explanation:
            logger.info("  reason  : %s", decision.explanation)

    def _game_over(self) -> None:
        self._read(Command.GAME_OVER)
        logger.info("[in] game_over")
        self.state = LoopState.DONE
        self.policy.on_game_over(self.game_state)
