"""
Bots module - Thinking engine implementations.

Provides:
- BotPolicy: Interface for decision-making hooks
- VelocityEstimator: Launch velocity inversion for the fcv1 stepper
- TurnPlanner: Rollout-based hit-or-draw planner
- PlannerConfig: Search bounds for the planner
"""

from .policy import BotPolicy, BotDecision
from .estimator import VelocityEstimator, launch_speed
from .planner import TurnPlanner, PlannerConfig, sort_stones

__all__ = [
    "BotPolicy",
    "BotDecision",
    "VelocityEstimator",
    "launch_speed",
    "TurnPlanner",
    "PlannerConfig",
    "sort_stones",
]
