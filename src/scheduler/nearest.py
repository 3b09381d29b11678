from __future__ import annotations

from typing import Iterable, List

from .interface import Assignment, CarSnapshot, Pickup
from .utils import floor_distance


class NearestCarScheduler:
    """Assigns each hall call to the closest car, ignoring direction and load."""

    def assign(
        self,
        pending_pickups: Iterable[Pickup],
        car_snapshots: Iterable[CarSnapshot],
    ) -> List[Assignment]:
        cars = list(car_snapshots)
        if not cars:
            return []
        return [
            Assignment(
                car_id=min(cars, key=lambda car: floor_distance(car, pickup.floor)).car_id,
                pickup=pickup,
            )
            for pickup in pending_pickups
        ]
