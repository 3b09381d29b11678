from __future__ import annotations

from typing import Callable, Optional, Sequence

import pytest

from scheduler import CarSnapshot, Direction
from simulation import BankConfig, CarController, CarState, Simulation


def make_snapshot(
    car_id: int,
    floor: int,
    direction: Direction = Direction.NONE,
    outstanding_stops: int = 0,
) -> CarSnapshot:
    state = {
        Direction.UP: "MOVING_UP",
        Direction.DOWN: "MOVING_DOWN",
        Direction.NONE: "IDLE",
    }[direction]
    return CarSnapshot(
        car_id=car_id,
        floor=floor,
        state=state,
        direction=direction,
        doors_open=False,
        outstanding_stops=outstanding_stops,
    )


def tick_until(car: CarController, done: Callable[[CarController], bool], limit: int = 200) -> int:
    """Tick ``car`` until ``done`` holds; return the number of ticks taken."""

    for ticks in range(limit + 1):
        if done(car):
            return ticks
        car.tick()
    raise AssertionError(f"car {car.car_id} did not settle within {limit} ticks: {car.snapshot()}")


def settled(car: CarController) -> bool:
    return car.state == CarState.IDLE and car.snapshot().outstanding_stops == 0


@pytest.fixture
def make_car() -> Callable[..., CarController]:
    def factory(start_floor: int = 1, car_id: int = 1, min_floor: int = 1, max_floor: int = 10) -> CarController:
        return CarController(car_id=car_id, start_floor=start_floor, min_floor=min_floor, max_floor=max_floor)

    return factory


@pytest.fixture
def make_simulation() -> Callable[..., Simulation]:
    def factory(
        num_cars: int = 4,
        start_floors: Optional[Sequence[int]] = None,
        scheduler: str = "nearest_eligible",
        **overrides,
    ) -> Simulation:
        config = BankConfig(num_cars=num_cars, start_floors=start_floors, scheduler=scheduler, **overrides)
        return Simulation(config)

    return factory
