from __future__ import annotations

from typing import Optional

from scheduler import Assignment, Direction


class ElevatorBankError(Exception):
    """Base class for requests the bank refuses at its boundary."""


class OutOfRangeFloor(ElevatorBankError, ValueError):
    def __init__(
        self,
        floor: int,
        min_floor: int,
        max_floor: int,
        direction: Optional[Direction] = None,
    ) -> None:
        self.floor = floor
        self.min_floor = min_floor
        self.max_floor = max_floor
        self.direction = direction
        if direction is None:
            message = f"Floor {floor} is out of range ({min_floor}-{max_floor})"
        else:
            low, high = valid_range(direction, min_floor, max_floor)
            message = (
                f"Floor {floor} is out of range for {direction.name.lower()} "
                f"requests ({low}-{high})"
            )
        super().__init__(message)


class UnknownCar(ElevatorBankError, LookupError):
    def __init__(self, car_id: int) -> None:
        self.car_id = car_id
        super().__init__(f"Unknown car id {car_id}")


class MismatchedAssignment(ElevatorBankError, ValueError):
    def __init__(self, assignment: Assignment, car_id: int) -> None:
        self.assignment = assignment
        self.car_id = car_id
        super().__init__(
            f"Assignment for car {assignment.car_id} delivered to car {car_id}"
        )


def valid_range(direction: Direction, min_floor: int, max_floor: int) -> tuple:
    """Floors from which a hall call in ``direction`` makes sense."""

    if direction == Direction.UP:
        return min_floor, max_floor - 1
    if direction == Direction.DOWN:
        return min_floor + 1, max_floor
    return min_floor, max_floor
