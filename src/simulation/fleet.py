from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from scheduler import Assignment, CarSnapshot

from .config import BankConfig
from .elevator import CarController
from .errors import MismatchedAssignment, OutOfRangeFloor, UnknownCar

log = logging.getLogger(__name__)


class FleetController:
    """Owns the cars and routes work to them; makes no scheduling decisions."""

    def __init__(
        self,
        cars: Iterable[CarController],
        min_floor: int,
        max_floor: int,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.min_floor = min_floor
        self.max_floor = max_floor
        self.logger = logger or log
        self._cars: Dict[int, CarController] = {}
        for car in cars:
            if car.car_id in self._cars:
                raise ValueError(f"Duplicate car id {car.car_id}")
            self._cars[car.car_id] = car

    @classmethod
    def from_config(cls, config: BankConfig, logger: Optional[logging.Logger] = None) -> "FleetController":
        cars = [
            CarController(
                car_id=index + 1,
                start_floor=config.start_floor_for(index),
                min_floor=config.min_floor,
                max_floor=config.max_floor,
                seconds_per_floor=config.seconds_per_floor,
                door_dwell_seconds=config.door_dwell_seconds,
                idle_poll_seconds=config.idle_poll_seconds,
                logger=logger,
            )
            for index in range(config.num_cars)
        ]
        return cls(cars, config.min_floor, config.max_floor, logger=logger)

    @property
    def cars(self) -> List[CarController]:
        return list(self._cars.values())

    def has_car(self, car_id: int) -> bool:
        return car_id in self._cars

    def get_car(self, car_id: int) -> CarController:
        car = self._cars.get(car_id)
        if car is None:
            raise UnknownCar(car_id)
        return car

    def snapshots(self) -> List[CarSnapshot]:
        return [car.snapshot() for car in self._cars.values()]

    def snapshot(self, car_id: int) -> CarSnapshot:
        return self.get_car(car_id).snapshot()

    def apply_assignments(self, assignments: Iterable[Assignment]) -> List[Assignment]:
        """Route each assignment to its car; return the ones that were dropped."""

        rejected: List[Assignment] = []
        for assignment in assignments:
            try:
                self.get_car(assignment.car_id).apply_assignment(assignment)
            except (UnknownCar, MismatchedAssignment) as exc:
                self.logger.warning("Dropping assignment %s: %s", assignment, exc)
                rejected.append(assignment)
        return rejected

    def select_destination(self, car_id: int, floor: int) -> None:
        car = self.get_car(car_id)
        if not self.min_floor <= floor <= self.max_floor:
            raise OutOfRangeFloor(floor, self.min_floor, self.max_floor)
        car.select_destination(floor)

    def tick_all(self) -> None:
        for car in self._cars.values():
            car.tick()
