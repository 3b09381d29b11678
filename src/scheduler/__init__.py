from __future__ import annotations

from typing import Dict, Type

from .interface import Assignment, CarSnapshot, Direction, Pickup, Scheduler
from .nearest import NearestCarScheduler
from .nearest_eligible import NearestEligibleScheduler

__all__ = [
    "Assignment",
    "CarSnapshot",
    "Direction",
    "NearestCarScheduler",
    "NearestEligibleScheduler",
    "Pickup",
    "Scheduler",
    "get_scheduler",
]


SCHEDULER_REGISTRY: Dict[str, Type[Scheduler]] = {
    "nearest_eligible": NearestEligibleScheduler,
    "nearest": NearestCarScheduler,
}


def get_scheduler(name: str, **kwargs) -> Scheduler:
    cls = SCHEDULER_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown scheduler '{name}'. Available: {', '.join(SCHEDULER_REGISTRY)}")
    return cls(**kwargs)
