"""TDOA twin package: 2-D emitter location from time differences of arrival."""

from tdoa_twin.config import SimConfig, SolverConfig
from tdoa_twin.errors import (
    InsufficientStationsError,
    MissingMeasurementError,
    SingularSystemError,
    TdoaError,
    UnknownStationError,
)
from tdoa_twin.models import (
    ErrorModel,
    MeasurementKind,
    Position,
    SimulatedMeasurements,
    SolveMethod,
    Station,
    TdoaSolution,
)
from tdoa_twin.meas.simulate import simulate_measurements
from tdoa_twin.solver import solve, solve_batch

__all__ = [
    "ErrorModel",
    "InsufficientStationsError",
    "MeasurementKind",
    "MissingMeasurementError",
    "Position",
    "SimConfig",
    "SimulatedMeasurements",
    "SingularSystemError",
    "SolveMethod",
    "SolverConfig",
    "Station",
    "TdoaError",
    "TdoaSolution",
    "UnknownStationError",
    "simulate_measurements",
    "solve",
    "solve_batch",
]
