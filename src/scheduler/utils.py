from __future__ import annotations

from .interface import CarSnapshot, Direction, Pickup


def floor_distance(car: CarSnapshot, floor: int) -> int:
    return abs(car.floor - floor)


def is_heading_toward(car: CarSnapshot, pickup: Pickup) -> bool:
    """True when the car already travels the pickup's way and has not passed it.

    A car moving up at or below the pickup floor can collect an up call
    without reversing; the same holds downward.
    """

    if car.direction != pickup.direction:
        return False
    if pickup.direction == Direction.UP:
        return car.floor <= pickup.floor
    return car.floor >= pickup.floor
