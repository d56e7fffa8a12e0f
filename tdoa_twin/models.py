"""Core data models for the TDOA twin."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence

import numpy as np


@dataclass(frozen=True)
class Station:
    """Fixed receiving station.

    The optional error magnitudes override the global ``ErrorModel`` values
    for this station when measurements are simulated.
    """

    station_id: str
    x_m: float
    y_m: float
    clock_error_s: float | None = None
    position_error_m: float | None = None

    @property
    def pos_m(self) -> np.ndarray:
        return np.array([self.x_m, self.y_m], dtype=float)


@dataclass
class Position:
    """Mutable 2-D position estimate."""

    x_m: float
    y_m: float

    @classmethod
    def centroid(cls, stations: Sequence[Station]) -> "Position":
        """Return the coordinate centroid of the stations."""

        coords = np.array([station.pos_m for station in stations], dtype=float)
        mean = coords.mean(axis=0)
        return cls(x_m=float(mean[0]), y_m=float(mean[1]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x_m, self.y_m], dtype=float)

    def distance_to(self, other: "Position") -> float:
        return float(np.hypot(self.x_m - other.x_m, self.y_m - other.y_m))

    def copy(self) -> "Position":
        return Position(x_m=self.x_m, y_m=self.y_m)


@dataclass(frozen=True)
class ErrorModel:
    """Global measurement error magnitudes used by the simulator.

    Clock and position errors are symmetric bounds; atmospheric delay and
    multipath are non-negative extra path delays.
    """

    clock_error_s: float = 0.0
    position_error_m: float = 0.0
    atmospheric_delay_s: float = 0.0
    multipath_s: float = 0.0

    def __post_init__(self) -> None:
        for name in ("clock_error_s", "position_error_m", "atmospheric_delay_s", "multipath_s"):
            value = float(getattr(self, name))
            if not np.isfinite(value) or value < 0.0:
                raise ValueError(f"{name} must be a finite non-negative number.")

    @property
    def is_ideal(self) -> bool:
        return not any(
            (self.clock_error_s, self.position_error_m, self.atmospheric_delay_s, self.multipath_s)
        )


class MeasurementKind(str, Enum):
    """Unit of the values in a measurement set."""

    TIME_S = "time"
    RANGE_M = "range"


class SolveMethod(str, Enum):
    """Path that produced a solution."""

    GAUSS_NEWTON = "gauss_newton"
    LINEAR_FALLBACK = "linear_fallback"
    DEGENERATE = "degenerate"


@dataclass(frozen=True)
class SimulatedMeasurements:
    """Simulator output: arrival times and pairwise time differences."""

    reference_id: str
    true_times_s: Mapping[str, float]
    noisy_times_s: Mapping[str, float]
    time_differences_s: Mapping[str, float]


@dataclass(frozen=True)
class TdoaSolution:
    """Position estimate with convergence diagnostics."""

    position: Position
    converged: bool
    iterations: int
    method: SolveMethod
    reference_id: str
    correction_norms_m: tuple[float, ...] = ()
    residuals_m: Mapping[str, float] = field(default_factory=dict)

    @property
    def residual_rms_m(self) -> float:
        if not self.residuals_m:
            return float("nan")
        values = np.array(list(self.residuals_m.values()), dtype=float)
        return float(np.sqrt(np.mean(values**2)))


@dataclass(frozen=True)
class TrialLog:
    """One simulated trial: truth, measurements and the resulting solution."""

    trial: int
    seed: int
    truth: Position
    measurements: SimulatedMeasurements
    solution: TdoaSolution

    @property
    def error_m(self) -> float:
        return self.solution.position.distance_to(self.truth)
