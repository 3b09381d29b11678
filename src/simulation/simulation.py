from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Set

from scheduler import Assignment, CarSnapshot, Direction, Pickup, Scheduler, get_scheduler

from .config import BankConfig
from .errors import OutOfRangeFloor, UnknownCar, valid_range
from .fleet import FleetController

log = logging.getLogger(__name__)


class Simulation:
    """Discrete-step elevator bank: pending hall calls, a scheduler and a fleet.

    ``dispatch`` and ``FleetController.tick_all`` are safe to drive from
    independent loops; ``step`` runs both once for offline use.
    """

    def __init__(
        self,
        config: Optional[BankConfig] = None,
        fleet: Optional[FleetController] = None,
        scheduler: Optional[Scheduler] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or BankConfig()
        self.logger = logger or log
        self.fleet = fleet or FleetController.from_config(self.config, logger=logger)
        self.scheduler_name = self.config.scheduler
        self.scheduler = scheduler or get_scheduler(self.scheduler_name)
        self.current_time: int = 0
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self._pending: Set[Pickup] = set()
        self._pending_lock = threading.Lock()

    def request_pickup(self, floor: int, direction: object) -> Pickup:
        direction = Direction.parse(direction)
        low, high = valid_range(direction, self.config.min_floor, self.config.max_floor)
        if direction == Direction.NONE or not low <= floor <= high:
            self.logger.warning("Rejected %s request on floor %s", direction.name, floor)
            raise OutOfRangeFloor(floor, self.config.min_floor, self.config.max_floor, direction)
        pickup = Pickup(floor=floor, direction=direction)
        with self._pending_lock:
            self._pending.add(pickup)
        self.logger.info("%s request on floor %s received", direction.name, floor)
        self._emit("pickup", pickup)
        return pickup

    def select_destination(self, car_id: int, floor: int) -> None:
        try:
            self.fleet.select_destination(car_id, floor)
        except (UnknownCar, OutOfRangeFloor) as exc:
            self.logger.warning("Rejected destination %s for car %s: %s", floor, car_id, exc)
            raise

    def pending_pickups(self) -> List[Pickup]:
        with self._pending_lock:
            return sorted(self._pending, key=lambda p: (p.floor, p.direction))

    def dispatch(self) -> List[Assignment]:
        """Run one scheduling pass over every pending pickup."""

        with self._pending_lock:
            pending = sorted(self._pending, key=lambda p: (p.floor, p.direction))
            self._pending.clear()
        if not pending:
            return []
        try:
            assignments = self.scheduler.assign(pending, self.fleet.snapshots())
            rejected = self.fleet.apply_assignments(assignments)
        except Exception:
            with self._pending_lock:
                self._pending.update(pending)
            self.logger.warning(
                "Dispatch with %s failed; %s pickups kept pending", self.scheduler_name, len(pending)
            )
            raise
        for assignment in assignments:
            if assignment in rejected:
                self._emit("rejected", assignment)
            else:
                self.logger.info(
                    "Assigned pickup %s -> car %s", assignment.pickup, assignment.car_id
                )
                self._emit("assignment", assignment)
        unserved = set(pending) - {a.pickup for a in assignments if a not in rejected}
        if unserved:
            with self._pending_lock:
                self._pending.update(unserved)
        return [a for a in assignments if a not in rejected]

    def step(self) -> None:
        self.dispatch()
        self.fleet.tick_all()
        self.current_time += 1

    def run(self, steps: int) -> None:
        for _ in range(steps):
            self.step()

    def set_scheduler(self, name: str, **options) -> None:
        self.scheduler = get_scheduler(name, **options)
        self.scheduler_name = name

    def snapshot(self, car_id: int) -> CarSnapshot:
        return self.fleet.snapshot(car_id)

    def snapshots(self) -> List[CarSnapshot]:
        return self.fleet.snapshots()

    def state(self) -> dict:
        return {
            "time": self.current_time,
            "scheduler": self.scheduler_name,
            "floors": {"min": self.config.min_floor, "max": self.config.max_floor},
            "pending": [
                {"floor": p.floor, "direction": p.direction.name} for p in self.pending_pickups()
            ],
            "cars": [snapshot.to_dict() for snapshot in self.snapshots()],
        }

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
