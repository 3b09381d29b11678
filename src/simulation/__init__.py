"""Simulation primitives for the elevator bank."""

from .config import BankConfig, load_config
from .elevator import CarController, CarState
from .errors import ElevatorBankError, MismatchedAssignment, OutOfRangeFloor, UnknownCar
from .fleet import FleetController
from .simulation import Simulation
from .stop_planner import StopPlanner

__all__ = [
    "BankConfig",
    "CarController",
    "CarState",
    "ElevatorBankError",
    "FleetController",
    "MismatchedAssignment",
    "OutOfRangeFloor",
    "Simulation",
    "StopPlanner",
    "UnknownCar",
    "load_config",
]
