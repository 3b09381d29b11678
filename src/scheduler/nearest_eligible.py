from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .interface import Assignment, CarSnapshot, Pickup
from .utils import floor_distance, is_heading_toward

log = logging.getLogger(__name__)


class NearestEligibleScheduler:
    """Direction-aware nearest car with a three-tier score.

    Cars already heading toward the pickup in its direction are preferred,
    idle cars come second, and cars moving away or the other way remain a
    last resort so that no hall call is ever left without a car.
    """

    SAME_DIRECTION_WEIGHTS = (10, 1)
    IDLE_WEIGHTS = (20, 2)
    FALLBACK_WEIGHTS = (40, 3)

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        if logger is not None and not isinstance(logger, logging.Logger):
            raise TypeError(f"logger must be a logging.Logger, not {type(logger).__name__}")
        self.logger = logger or log

    def assign(
        self,
        pending_pickups: Iterable[Pickup],
        car_snapshots: Iterable[CarSnapshot],
    ) -> List[Assignment]:
        assignments: List[Assignment] = []
        cars = list(car_snapshots)
        if not cars:
            return assignments
        for pickup in pending_pickups:
            chosen = min(cars, key=lambda car: self.score(car, pickup))
            assignments.append(Assignment(car_id=chosen.car_id, pickup=pickup))
        return assignments

    def score(self, car: CarSnapshot, pickup: Pickup) -> int:
        distance = floor_distance(car, pickup.floor)
        if is_heading_toward(car, pickup):
            distance_weight, load_weight = self.SAME_DIRECTION_WEIGHTS
        elif car.is_idle:
            distance_weight, load_weight = self.IDLE_WEIGHTS
        else:
            distance_weight, load_weight = self.FALLBACK_WEIGHTS
        score = distance * distance_weight + car.outstanding_stops * load_weight
        self.logger.debug(
            "car %s for %s: floor=%s dir=%s load=%s score=%s",
            car.car_id,
            pickup,
            car.floor,
            car.direction.name,
            car.outstanding_stops,
            score,
        )
        return score
