"""Configuration objects for TDOA twin solves and simulations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from tdoa_twin.models import ErrorModel, Position, Station

MISSING_POLICIES = ("raise", "zero")

DEFAULT_STATIONS: tuple[tuple[str, float, float], ...] = (
    ("S0", 0.0, 0.0),
    ("S1", 100.0, 0.0),
    ("S2", 50.0, 86.6),
)


@dataclass(frozen=True)
class SolverConfig:
    """Iterative solver settings."""

    max_iter: int = 100
    tol_m: float = 1e-6
    singular_det_eps: float = 1e-12
    missing_policy: str = "raise"

    def __post_init__(self) -> None:
        if self.max_iter <= 0:
            raise ValueError("max_iter must be > 0")
        if self.tol_m <= 0.0:
            raise ValueError("tol_m must be > 0")
        if self.singular_det_eps < 0.0:
            raise ValueError("singular_det_eps must be >= 0")
        if self.missing_policy not in MISSING_POLICIES:
            raise ValueError(f"missing_policy must be one of {MISSING_POLICIES}, got {self.missing_policy!r}")


@dataclass(frozen=True)
class SimConfig:
    """Simulation configuration defaults."""

    rng_seed: int = 42
    stations: Sequence[Sequence[str | float]] = DEFAULT_STATIONS
    target_x_m: float = 50.0
    target_y_m: float = 30.0
    clock_error_s: float = 1e-9
    position_error_m: float = 0.1
    atmospheric_delay_s: float = 0.0
    multipath_s: float = 0.0
    n_trials: int = 1
    solver: SolverConfig = field(default_factory=SolverConfig)

    def build_stations(self) -> list[Station]:
        stations: list[Station] = []
        for entry in self.stations:
            if len(entry) != 3:
                raise ValueError(f"Station entry must be (id, x_m, y_m), got {entry!r}")
            station_id, x_m, y_m = entry
            stations.append(Station(station_id=str(station_id), x_m=float(x_m), y_m=float(y_m)))
        return stations

    def build_error_model(self) -> ErrorModel:
        return ErrorModel(
            clock_error_s=self.clock_error_s,
            position_error_m=self.position_error_m,
            atmospheric_delay_s=self.atmospheric_delay_s,
            multipath_s=self.multipath_s,
        )

    def target(self) -> Position:
        return Position(x_m=float(self.target_x_m), y_m=float(self.target_y_m))
