"""
Session Module - One match over one connection.

A session represents the match as this client sees it:
- Created when is_ready arrives
- Holds our team, the setting, the simulator and the player models
- Lent to the planner for the duration of one decision
- Lives until the process exits

The game loop drives the protocol and hands updates to the policy.
"""

from .manager import GameSession, DEFAULT_PLAYER_ORDER
from .game_loop import GameLoop, LoopState, ClientConfig, ProtocolError

__all__ = [
    "GameSession",
    "DEFAULT_PLAYER_ORDER",
    "GameLoop",
    "LoopState",
    "ClientConfig",
    "ProtocolError",
]
