"""Arrival-time error models for simulated stations."""

from __future__ import annotations

import numpy as np

from tdoa_twin.meas.range_diff import LIGHT_SPEED_MPS
from tdoa_twin.models import ErrorModel, Station


def clock_error_s(bound_s: float, rng: np.random.Generator) -> float:
    """Return a uniform clock error in ``[-bound_s, bound_s]``."""

    bound_s = float(bound_s)
    if bound_s <= 0.0:
        return 0.0
    return float(rng.uniform(-bound_s, bound_s))


def position_error_m(bound_m: float, rng: np.random.Generator) -> float:
    """Return a uniform station survey error in ``[-bound_m, bound_m]``."""

    bound_m = float(bound_m)
    if bound_m <= 0.0:
        return 0.0
    return float(rng.uniform(-bound_m, bound_m))


def path_delay_s(max_delay_s: float, rng: np.random.Generator) -> float:
    """Return a non-negative excess path delay (atmosphere or multipath)."""

    max_delay_s = float(max_delay_s)
    if max_delay_s <= 0.0:
        return 0.0
    return float(rng.uniform(0.0, max_delay_s))


def arrival_time_error_s(
    station: Station,
    error_model: ErrorModel,
    rng: np.random.Generator,
) -> float:
    """Sum all error terms for one station's arrival time.

    Per-station clock and position bounds take precedence over the global
    ``error_model`` values.
    """

    clock_bound = error_model.clock_error_s if station.clock_error_s is None else station.clock_error_s
    position_bound = (
        error_model.position_error_m if station.position_error_m is None else station.position_error_m
    )
    return (
        clock_error_s(clock_bound, rng)
        + position_error_m(position_bound, rng) / LIGHT_SPEED_MPS
        + path_delay_s(error_model.atmospheric_delay_s, rng)
        + path_delay_s(error_model.multipath_s, rng)
    )
