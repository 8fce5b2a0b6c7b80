"""
Bot Policy - Interface for thinking-engine decision-making.

A BotPolicy is driven by the protocol client through five hooks:
- select_player_order: optionally permute the four players before ready_ok
- on_init: receive the game session once the match is configured
- select_move: return a decision on our turn
- on_opponent_turn: observe the state while the other team throws
- on_game_over: observe the final state
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..engine_core.move import Move
    from ..engine_core.state import GameState, GameSetting, Team
    from ..session.manager import GameSession


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The move to send
    - Explanation (for logging/debugging)
    - Evaluation details of the candidates that were rolled out
    """
    move: Move
    explanation: str = ""

    # Evaluation details (for debugging)
    evaluated_candidates: int = 0
    scores: list[int] = field(default_factory=list)
    elapsed: float = 0.0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Implementations range from fixed shots to rollout-based planners.
    Only select_move is required.
    """

    def select_player_order(
        self,
        team: Team,
        setting: GameSetting,
        player_order: list[int],
    ) -> list[int]:
        """
        Return the player order to acknowledge in ready_ok.

        player_order[i] names the configured player that throws the
        team's stones 2i and 2i+1. Default keeps the order unchanged.
        """
        return player_order

    def on_init(self, session: GameSession) -> None:
        """Called once before ready_ok. Expensive setup belongs here."""
        pass

    @abstractmethod
    def select_move(self, state: GameState) -> BotDecision:
        """
        Select the move for the current shot.

        Args:
            state: Current game state, with state.next_team our team

        Returns:
            BotDecision with the move to send
        """
        pass

    def on_opponent_turn(self, state: GameState) -> None:
        """Called on updates where the other team throws next."""
        pass

    def on_game_over(self, state: GameState) -> None:
        """Called after game_over with the final state."""
        pass
