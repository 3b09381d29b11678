from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Sequence, Union


@dataclass(frozen=True)
class BankConfig:
    """Static description of the elevator bank, read once at startup."""

    num_cars: int = 4
    min_floor: int = 1
    max_floor: int = 10
    seconds_per_floor: float = 10.0
    door_dwell_seconds: float = 10.0
    start_floors: Optional[Sequence[int]] = None
    dispatch_interval_seconds: float = 0.25
    idle_poll_seconds: float = 0.1
    scheduler: str = "nearest_eligible"

    def __post_init__(self) -> None:
        if self.num_cars < 1:
            raise ValueError("num_cars must be at least 1")
        if self.max_floor <= self.min_floor:
            raise ValueError("max_floor must be above min_floor")
        if self.seconds_per_floor < 0:
            raise ValueError("seconds_per_floor cannot be negative")
        if self.door_dwell_seconds < 0:
            raise ValueError("door_dwell_seconds cannot be negative")
        if self.dispatch_interval_seconds <= 0:
            raise ValueError("dispatch_interval_seconds must be positive")
        if self.idle_poll_seconds <= 0:
            raise ValueError("idle_poll_seconds must be positive")
        if self.start_floors is not None:
            if len(self.start_floors) != self.num_cars:
                raise ValueError(
                    f"start_floors length ({len(self.start_floors)}) must match num_cars ({self.num_cars})"
                )
            for floor in self.start_floors:
                if not self.min_floor <= floor <= self.max_floor:
                    raise ValueError(
                        f"start floor {floor} must be between {self.min_floor} and {self.max_floor}"
                    )
            object.__setattr__(self, "start_floors", tuple(self.start_floors))

    def start_floor_for(self, index: int) -> int:
        if self.start_floors is None:
            return self.min_floor
        return self.start_floors[index]

    @classmethod
    def from_dict(cls, data: dict) -> "BankConfig":
        bank_data = data.get("bank", data)
        known = {f.name for f in fields(cls)}
        unknown = set(bank_data) - known
        if unknown:
            raise ValueError(f"Unknown bank settings: {', '.join(sorted(unknown))}")
        return cls(**bank_data)

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.start_floors is not None:
            data["start_floors"] = list(self.start_floors)
        return {"bank": data}


def load_config(path: Union[str, Path]) -> BankConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    return BankConfig.from_dict(json.loads(path.read_text()))
