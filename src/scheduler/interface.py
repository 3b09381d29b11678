from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Protocol, Tuple


class Direction(IntEnum):
    """Travel direction; NONE means idle or undecided, never motion."""

    DOWN = -1
    NONE = 0
    UP = 1

    @classmethod
    def parse(cls, value: object) -> "Direction":
        if isinstance(value, Direction):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown direction '{value}'")
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction '{value}'") from None


@dataclass(frozen=True)
class Pickup:
    """A hall call: the floor and the direction the passenger wants to travel."""

    floor: int
    direction: Direction

    def __post_init__(self) -> None:
        if self.direction not in (Direction.UP, Direction.DOWN):
            raise ValueError("Pickup direction must be UP or DOWN")

    def __str__(self) -> str:
        return f"{self.direction.name} @ {self.floor}"


@dataclass(frozen=True)
class Assignment:
    """Binding of one pickup to one car for a single scheduling pass."""

    car_id: int
    pickup: Pickup


@dataclass(frozen=True)
class CarSnapshot:
    """Point-in-time view of a car for scheduling and display."""

    car_id: int
    floor: int
    state: str
    direction: Direction
    doors_open: bool
    outstanding_stops: int
    onboard_up: Tuple[int, ...] = ()
    onboard_down: Tuple[int, ...] = ()
    pickup_up: Tuple[int, ...] = ()
    pickup_down: Tuple[int, ...] = ()

    @property
    def is_idle(self) -> bool:
        return self.direction == Direction.NONE

    def to_dict(self) -> dict:
        return {
            "id": self.car_id,
            "floor": self.floor,
            "state": self.state,
            "direction": self.direction.name,
            "doors_open": self.doors_open,
            "outstanding_stops": self.outstanding_stops,
            "onboard_up": list(self.onboard_up),
            "onboard_down": list(self.onboard_down),
            "pickup_up": list(self.pickup_up),
            "pickup_down": list(self.pickup_down),
        }

    def __str__(self) -> str:
        def join(floors: Iterable[int]) -> str:
            return ",".join(str(floor) for floor in floors)

        return (
            f"Car#{self.car_id} F={self.floor} {self.state} Dir={self.direction.name}"
            f" | Onboard(up:{join(self.onboard_up)} down:{join(reversed(self.onboard_down))})"
            f" Pickups(up:{join(self.pickup_up)} down:{join(reversed(self.pickup_down))})"
        )


class Scheduler(Protocol):
    """Strategy interface for assigning hall calls to cars."""

    def assign(
        self,
        pending_pickups: Iterable[Pickup],
        car_snapshots: Iterable[CarSnapshot],
    ) -> List[Assignment]:
        """
        Return one assignment per pending pickup.

        Implementations are pure: they read the snapshots, never the cars,
        and keep no state between calls. A pickup is only left unassigned
        when there are no cars at all.
        """
        ...
