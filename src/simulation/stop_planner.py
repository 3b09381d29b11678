from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set, Tuple

from scheduler import Direction


@dataclass
class StopPlanner:
    """Committed stops of one car, split into onboard and hall-call sets.

    Onboard destinations are partitioned by their relation to the car's
    floor when they are added and never re-partitioned afterwards. Hall
    calls are partitioned by the direction the passenger wants to travel.

    The planner is not thread-safe; its owning car serialises access.
    """

    min_floor: int
    max_floor: int
    onboard_up: Set[int] = field(default_factory=set)
    onboard_down: Set[int] = field(default_factory=set)
    pickup_up: Set[int] = field(default_factory=set)
    pickup_down: Set[int] = field(default_factory=set)

    def in_range(self, floor: int) -> bool:
        return self.min_floor <= floor <= self.max_floor

    def add_pickup(self, floor: int, direction: Direction) -> None:
        if not self.in_range(floor):
            return
        if direction == Direction.UP:
            self.pickup_up.add(floor)
        elif direction == Direction.DOWN:
            self.pickup_down.add(floor)

    def add_onboard(self, floor: int, current_floor: int) -> None:
        if not self.in_range(floor):
            return
        if floor < current_floor:
            self.onboard_down.add(floor)
        else:
            # a destination at the current floor is an immediate stop
            self.onboard_up.add(floor)

    def clear_at(self, floor: int) -> None:
        self.onboard_up.discard(floor)
        self.onboard_down.discard(floor)
        self.pickup_up.discard(floor)
        self.pickup_down.discard(floor)

    @property
    def outstanding_stops(self) -> int:
        return (
            len(self.onboard_up)
            + len(self.onboard_down)
            + len(self.pickup_up)
            + len(self.pickup_down)
        )

    @property
    def has_stops(self) -> bool:
        return self.outstanding_stops > 0

    def should_stop_here(self, floor: int, moving: Direction) -> bool:
        if floor in self.onboard_up or floor in self.onboard_down:
            return True
        if moving == Direction.UP:
            return floor in self.pickup_up
        if moving == Direction.DOWN:
            return floor in self.pickup_down
        return floor in self.pickup_up or floor in self.pickup_down

    def next_direction(self, current: Direction, floor: int) -> Direction:
        """Direction to travel next from ``floor``.

        A car keeps its direction while committed work remains that way:
        any onboard stop in the matching set, or a same-direction hall call
        not yet behind it. Only then does it head for the nearest stop
        above or below, preferring up on a tie.

        Onboard membership alone holds the commitment, whatever the floor.
        A destination pressed at the current floor of a car moving up sits
        in ``onboard_up`` behind it, so the car runs on to ``max_floor``,
        idles there and only then comes back for it.
        """

        if current == Direction.UP:
            if self.onboard_up or any(stop >= floor for stop in self.pickup_up):
                return Direction.UP
        elif current == Direction.DOWN:
            if self.onboard_down or any(stop <= floor for stop in self.pickup_down):
                return Direction.DOWN

        above = self.nearest_above(floor + 1)
        below = self.nearest_below(floor - 1)
        if above is not None and below is not None:
            return Direction.UP if above - floor <= floor - below else Direction.DOWN
        if above is not None:
            return Direction.UP
        if below is not None:
            return Direction.DOWN
        return Direction.NONE

    def nearest_above(self, floor: int) -> Optional[int]:
        onboard = _lowest_at_or_above(self.onboard_up | self.onboard_down, floor)
        if onboard is not None:
            return onboard
        return _lowest_at_or_above(self.pickup_up | self.pickup_down, floor)

    def nearest_below(self, floor: int) -> Optional[int]:
        onboard = _highest_at_or_below(self.onboard_up | self.onboard_down, floor)
        if onboard is not None:
            return onboard
        return _highest_at_or_below(self.pickup_up | self.pickup_down, floor)

    def copy_sets(self) -> Dict[str, Tuple[int, ...]]:
        return {
            "onboard_up": tuple(sorted(self.onboard_up)),
            "onboard_down": tuple(sorted(self.onboard_down)),
            "pickup_up": tuple(sorted(self.pickup_up)),
            "pickup_down": tuple(sorted(self.pickup_down)),
        }


def _lowest_at_or_above(floors: Iterable[int], floor: int) -> Optional[int]:
    return min((f for f in floors if f >= floor), default=None)


def _highest_at_or_below(floors: Iterable[int], floor: int) -> Optional[int]:
    return max((f for f in floors if f <= floor), default=None)
