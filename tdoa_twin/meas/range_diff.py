"""Forward model: distances, range differences and time/range conversion."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from tdoa_twin.meas.pairs import pair_key, resolve_reference
from tdoa_twin.models import Position, Station

LIGHT_SPEED_MPS = 299_792_458.0


def distance_m(p: np.ndarray, q: np.ndarray) -> float:
    """Compute Euclidean distance between two 2-D points."""

    return float(np.linalg.norm(np.asarray(q, dtype=float) - np.asarray(p, dtype=float)))


def range_difference_m(candidate: np.ndarray, station: Station, reference: Station) -> float:
    """Return distance to ``station`` minus distance to ``reference``."""

    return distance_m(candidate, station.pos_m) - distance_m(candidate, reference.pos_m)


def time_difference_from_range_s(range_diff_m: float, speed_mps: float = LIGHT_SPEED_MPS) -> float:
    return float(range_diff_m) / speed_mps


def range_difference_from_time_m(time_diff_s: float, speed_mps: float = LIGHT_SPEED_MPS) -> float:
    return float(time_diff_s) * speed_mps


def ideal_range_differences(
    target: Position,
    stations: Sequence[Station],
    reference_id: str | None = None,
) -> dict[str, float]:
    """Noise-free range differences keyed ``"<ref>-<other>"``."""

    reference = resolve_reference(stations, reference_id)
    pos = target.as_array()
    return {
        pair_key(reference.station_id, station.station_id): range_difference_m(pos, station, reference)
        for station in stations
        if station.station_id != reference.station_id
    }


def ideal_time_differences(
    target: Position,
    stations: Sequence[Station],
    reference_id: str | None = None,
) -> dict[str, float]:
    """Noise-free time differences keyed ``"<ref>-<other>"``."""

    return {
        key: time_difference_from_range_s(value)
        for key, value in ideal_range_differences(target, stations, reference_id).items()
    }
