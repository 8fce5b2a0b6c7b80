"""
Game Session - Cross-turn context for one match.

A session is created once, when is_ready arrives, and lives until the
process exits. It holds:
- Our team and the immutable match setting
- The simulator the planner rolls shots through
- One reusable snapshot storage for that simulator
- Four player models, one per pair of shots in an end

SINGLE WRITER:
- The simulator, its storage and the players are not thread-safe
- Only the planner call currently in flight may touch them
- A planner must restore the simulator from storage before it returns
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from pydantic import ValidationError

from ..engine_core.state import GameSetting, GameState, Team
from ..engine_core.move import Move
from ..engine_core.reducer import MoveResult, apply_move
from ..physics.simulator import (
    DEFAULT_SIMULATOR_ID,
    FCV1SimulatorFactory,
    Simulator,
    SimulatorStorage,
    UnsupportedComponentError,
    load_simulator_factory,
)
from ..physics.player import NormalDistPlayerFactory, Player, load_player_factory

logger = logging.getLogger(__name__)

NUM_PLAYERS = 4
DEFAULT_PLAYER_ORDER = (0, 1, 2, 3)


@dataclass
class GameSession:
    """
    Match-lifetime context shared by the protocol client and the planner.

    players[i] throws the team's stones 2i and 2i+1 of every end, so the
    player for overall shot s is players[s // 4].
    """
    team: Team
    setting: GameSetting
    simulator: Simulator
    storage: SimulatorStorage
    players: list[Player]
    player_order: list[int] = field(default_factory=lambda: list(DEFAULT_PLAYER_ORDER))

    # Session metadata (game id, team names, ...)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        team: Team,
        setting: GameSetting,
        simulator_config: dict[str, Any] | None = None,
        player_configs: list[dict[str, Any] | None] | None = None,
        player_order: list[int] | None = None,
    ) -> GameSession:
        """
        Resolve the configured components and build the session.

        Args:
            team: Our team
            setting: Match setting from is_ready
            simulator_config: game.simulator from is_ready
            player_configs: our four entries of game.players
            player_order: permutation of 0..3, slot i uses player_configs[player_order[i]]

        Unsupported or missing components fall back to the defaults
        (fcv1 simulator, normal_dist players) with a warning.
        """
        order = list(player_order if player_order is not None else DEFAULT_PLAYER_ORDER)
        if sorted(order) != list(range(NUM_PLAYERS)):
            raise ValueError(f"Player order must be a permutation of 0..3, got {order}")

        simulator = _resolve_simulator(simulator_config)
        storage = simulator.create_storage()

        configs = list(player_configs or [])
        configs += [None] * (NUM_PLAYERS - len(configs))
        players = [_resolve_player(configs[order[i]], slot=i) for i in range(NUM_PLAYERS)]

        return cls(
            team=team,
            setting=setting,
            simulator=simulator,
            storage=storage,
            players=players,
            player_order=order,
        )

    def player_for_shot(self, shot: int) -> Player:
        """Player throwing overall shot index shot (0..15) of an end."""
        return self.players[shot // 4]

    def save_snapshot(self) -> None:
        """Capture the simulator's physical state into the session storage."""
        self.simulator.save(self.storage)

    def restore_snapshot(self) -> None:
        """Reset the simulator to the last captured snapshot."""
        self.simulator.load(self.storage)

    def apply_move(self, state: GameState, move: Move, thinking_time_used: float = 0.0) -> MoveResult:
        """Roll a move through the session simulator and the shot's player."""
        return apply_move(
            self.setting,
            self.simulator,
            self.player_for_shot(state.shot),
            state,
            move,
            thinking_time_used,
        )


def _resolve_simulator(config: dict[str, Any] | None) -> Simulator:
    factory = None
    if config is not None:
        try:
            factory = load_simulator_factory(config)
        except (UnsupportedComponentError, ValidationError) as e:
            logger.warning("Simulator configuration rejected: %s", e)

    if factory is None or factory.simulator_id != DEFAULT_SIMULATOR_ID:
        logger.warning(
            "Unsupported simulator! The velocity estimator is only fitted for %r.",
            DEFAULT_SIMULATOR_ID,
        )
    if factory is None:
        factory = FCV1SimulatorFactory()
    return factory.create_simulator()


def _resolve_player(config: dict[str, Any] | None, slot: int) -> Player:
    if config is not None:
        try:
            return load_player_factory(config).create_player()
        except (UnsupportedComponentError, ValidationError) as e:
            logger.warning("Player %d configuration rejected: %s", slot, e)
    logger.warning("Player %d falls back to the normal_dist model", slot)
    return NormalDistPlayerFactory().create_player()
