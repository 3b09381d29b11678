from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Dict, Optional

from scheduler import Assignment, CarSnapshot, Direction

from .errors import MismatchedAssignment
from .stop_planner import StopPlanner

log = logging.getLogger(__name__)


class CarState(Enum):
    IDLE = "idle"
    MOVING_UP = "moving_up"
    MOVING_DOWN = "moving_down"
    DOOR_OPEN = "door_open"


_MOVING_STATES = {Direction.UP: CarState.MOVING_UP, Direction.DOWN: CarState.MOVING_DOWN}


class CarController:
    """One car: a stop planner plus a four-state motion machine.

    Each call to :meth:`tick` performs exactly one transition. Travel and
    dwell durations are not modelled here; the driver waits
    :meth:`next_delay` seconds between ticks.

    Every public method holds the car's own lock for its whole body so the
    dispatch cycle, destination selection and the motion cycle never see
    the stop sets half-updated.
    """

    def __init__(
        self,
        car_id: int,
        start_floor: int,
        min_floor: int,
        max_floor: int,
        seconds_per_floor: float = 10.0,
        door_dwell_seconds: float = 10.0,
        idle_poll_seconds: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not min_floor <= start_floor <= max_floor:
            raise ValueError(f"Car {car_id} cannot start at floor {start_floor}")
        self.car_id = car_id
        self.min_floor = min_floor
        self.max_floor = max_floor
        self.seconds_per_floor = seconds_per_floor
        self.door_dwell_seconds = door_dwell_seconds
        self.idle_poll_seconds = idle_poll_seconds
        self.logger = logger or log
        self._floor = start_floor
        self._state = CarState.IDLE
        self._direction = Direction.NONE
        self._planner = StopPlanner(min_floor, max_floor)
        self._lock = threading.Lock()

    @property
    def floor(self) -> int:
        with self._lock:
            return self._floor

    @property
    def state(self) -> CarState:
        with self._lock:
            return self._state

    @property
    def direction(self) -> Direction:
        with self._lock:
            return self._direction

    def apply_assignment(self, assignment: Assignment) -> None:
        if assignment.car_id != self.car_id:
            raise MismatchedAssignment(assignment, self.car_id)
        pickup = assignment.pickup
        with self._lock:
            self._planner.add_pickup(pickup.floor, pickup.direction)
        self.logger.info("Car#%s assigned pickup %s", self.car_id, pickup)

    def select_destination(self, floor: int) -> None:
        with self._lock:
            self._planner.add_onboard(floor, self._floor)
            self.logger.info("Car#%s destination %s added", self.car_id, floor)
            if self._state == CarState.IDLE:
                self._tick_idle()

    def tick(self) -> CarState:
        with self._lock:
            _TRANSITIONS[self._state](self)
            return self._state

    def next_delay(self) -> float:
        with self._lock:
            if self._state == CarState.DOOR_OPEN:
                return self.door_dwell_seconds
            if self._state == CarState.IDLE:
                return self.idle_poll_seconds
            return self.seconds_per_floor

    def snapshot(self) -> CarSnapshot:
        with self._lock:
            return CarSnapshot(
                car_id=self.car_id,
                floor=self._floor,
                state=self._state.name,
                direction=self._direction,
                doors_open=self._state == CarState.DOOR_OPEN,
                outstanding_stops=self._planner.outstanding_stops,
                **self._planner.copy_sets(),
            )

    # Transitions run with the lock held.

    def _tick_idle(self) -> None:
        if self._planner.should_stop_here(self._floor, Direction.NONE):
            self._open_doors()
            return
        next_direction = self._planner.next_direction(Direction.NONE, self._floor)
        if next_direction != Direction.NONE:
            self._start_moving(next_direction)

    def _tick_moving_up(self) -> None:
        self._advance(Direction.UP)

    def _tick_moving_down(self) -> None:
        self._advance(Direction.DOWN)

    def _tick_door_open(self) -> None:
        direction = self._direction
        self._planner.clear_at(self._floor)
        self.logger.info("Car#%s doors closed at floor %s", self.car_id, self._floor)
        next_direction = self._planner.next_direction(direction, self._floor)
        if next_direction == Direction.NONE:
            self._go_idle()
        else:
            self._start_moving(next_direction)

    def _advance(self, direction: Direction) -> None:
        self._floor = min(self.max_floor, max(self.min_floor, self._floor + direction))
        self.logger.info(
            "Car#%s reached floor %s (moving %s)", self.car_id, self._floor, direction.name.lower()
        )
        if self._planner.should_stop_here(self._floor, direction):
            self._open_doors()
            return
        next_direction = self._planner.next_direction(direction, self._floor)
        if next_direction == direction:
            self._start_moving(direction)
            return
        # Nothing left ahead: reverse or settle here, serving a call at this
        # floor that matches the new heading first.
        self._direction = next_direction
        if self._planner.should_stop_here(self._floor, next_direction):
            self._open_doors()
        elif next_direction == Direction.NONE:
            self._go_idle()
        else:
            self._start_moving(next_direction)

    def _start_moving(self, direction: Direction) -> None:
        boundary = self.max_floor if direction == Direction.UP else self.min_floor
        if self._floor == boundary:
            self._go_idle()
            return
        if self._state != _MOVING_STATES[direction]:
            self.logger.info(
                "Car#%s departing %s from floor %s", self.car_id, direction.name.lower(), self._floor
            )
        self._direction = direction
        self._state = _MOVING_STATES[direction]

    def _open_doors(self) -> None:
        self._state = CarState.DOOR_OPEN
        self.logger.info("Car#%s doors open at floor %s", self.car_id, self._floor)

    def _go_idle(self) -> None:
        if self._state != CarState.IDLE:
            self.logger.info("Car#%s idle at floor %s", self.car_id, self._floor)
        self._state = CarState.IDLE
        self._direction = Direction.NONE


_TRANSITIONS: Dict[CarState, Callable[[CarController], None]] = {
    CarState.IDLE: CarController._tick_idle,
    CarState.MOVING_UP: CarController._tick_moving_up,
    CarState.MOVING_DOWN: CarController._tick_moving_down,
    CarState.DOOR_OPEN: CarController._tick_door_open,
}
