"""
Sheet Coordinates - Fixed geometry of the playing surface.

The origin is the launch point on the centre line. The y axis points down
the sheet towards the scoring end, x is lateral. All values are metres.
"""

from __future__ import annotations

from .state import Vector2

STONE_RADIUS = 0.145
HOUSE_RADIUS = 1.829

TEE_LINE_Y = 38.405
HOG_LINE_Y = 32.004
BACK_LINE_Y = 40.234

# House centre on the far scoring end
TEE = Vector2(0.0, TEE_LINE_Y)


def is_in_play(position: Vector2, sheet_width: float) -> bool:
    """Check if a resting stone at position stays on the sheet."""
    if abs(position.x) + STONE_RADIUS > sheet_width / 2:
        return False
    if position.y - STONE_RADIUS < HOG_LINE_Y:
        return False  # did not fully cross the hog line
    if position.y - STONE_RADIUS > BACK_LINE_Y:
        return False  # fully past the back line
    return True


def is_in_house(position: Vector2) -> bool:
    """Check if a stone touches the house."""
    return (position - TEE).length() < HOUSE_RADIUS + STONE_RADIUS


def is_in_free_guard_zone(position: Vector2) -> bool:
    """Check if a stone sits between the hog line and the tee line, outside the house."""
    return position.y < TEE_LINE_Y and not is_in_house(position)
