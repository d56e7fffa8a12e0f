"""Synthetic TDOA measurement generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from tdoa_twin.meas.noise import arrival_time_error_s
from tdoa_twin.meas.pairs import differences_from_arrival_times, resolve_reference, validate_stations
from tdoa_twin.meas.range_diff import LIGHT_SPEED_MPS, distance_m
from tdoa_twin.models import ErrorModel, Position, SimulatedMeasurements, Station


def simulate_measurements(
    target: Position,
    stations: Sequence[Station],
    error_model: ErrorModel | None = None,
    rng: np.random.Generator | None = None,
    *,
    reference_id: str | None = None,
) -> SimulatedMeasurements:
    """Simulate arrival times at every station and their differences.

    Without an ``error_model`` the noisy times equal the true times.
    """

    validate_stations(stations)
    reference = resolve_reference(stations, reference_id)
    error_model = error_model or ErrorModel()
    if rng is None:
        rng = np.random.default_rng()
    target_pos = target.as_array()
    true_times_s: dict[str, float] = {}
    noisy_times_s: dict[str, float] = {}
    for station in stations:
        t_true = distance_m(target_pos, station.pos_m) / LIGHT_SPEED_MPS
        true_times_s[station.station_id] = t_true
        noisy_times_s[station.station_id] = t_true + arrival_time_error_s(station, error_model, rng)
    return SimulatedMeasurements(
        reference_id=reference.station_id,
        true_times_s=true_times_s,
        noisy_times_s=noisy_times_s,
        time_differences_s=differences_from_arrival_times(noisy_times_s, reference.station_id),
    )


@dataclass
class SyntheticTdoaSource:
    """Generate TDOA measurement sets for a fixed station network."""

    stations: Sequence[Station]
    error_model: ErrorModel = field(default_factory=ErrorModel)
    reference_id: str | None = None
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def __post_init__(self) -> None:
        validate_stations(self.stations)
        self.stations = list(self.stations)

    def get_measurements(self, target: Position) -> SimulatedMeasurements:
        return simulate_measurements(
            target,
            self.stations,
            self.error_model,
            self.rng,
            reference_id=self.reference_id,
        )
