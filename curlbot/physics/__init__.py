"""
Physics - Stone dynamics and shot execution noise.

These are the collaborators the planner rolls candidate shots through:
- Simulator: advances the stones tick by tick, with save/load storage
- Player: perturbs a requested shot before it is thrown

Both are configured from the is_ready message through factory models.
"""

from .simulator import (
    Simulator,
    SimulatorFCV1,
    SimulatorStorage,
    FCV1SimulatorFactory,
    UnsupportedComponentError,
    DEFAULT_SIMULATOR_ID,
    load_simulator_factory,
)
from .player import (
    Player,
    NormalDistPlayer,
    IdenticalPlayer,
    NormalDistPlayerFactory,
    IdenticalPlayerFactory,
    load_player_factory,
)

__all__ = [
    "Simulator",
    "SimulatorFCV1",
    "SimulatorStorage",
    "FCV1SimulatorFactory",
    "UnsupportedComponentError",
    "DEFAULT_SIMULATOR_ID",
    "load_simulator_factory",
    "Player",
    "NormalDistPlayer",
    "IdenticalPlayer",
    "NormalDistPlayerFactory",
    "IdenticalPlayerFactory",
    "load_player_factory",
]
