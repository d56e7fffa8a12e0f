"""Measurement models."""

from tdoa_twin.meas.measurement_set import MeasurementSet, to_range_differences_m
from tdoa_twin.meas.noise import arrival_time_error_s
from tdoa_twin.meas.pairs import differences_from_arrival_times, pair_key
from tdoa_twin.meas.range_diff import (
    LIGHT_SPEED_MPS,
    distance_m,
    ideal_range_differences,
    ideal_time_differences,
    range_difference_from_time_m,
    range_difference_m,
    time_difference_from_range_s,
)
from tdoa_twin.meas.simulate import SyntheticTdoaSource, simulate_measurements

__all__ = [
    "LIGHT_SPEED_MPS",
    "MeasurementSet",
    "SyntheticTdoaSource",
    "arrival_time_error_s",
    "differences_from_arrival_times",
    "distance_m",
    "ideal_range_differences",
    "ideal_time_differences",
    "pair_key",
    "range_difference_from_time_m",
    "range_difference_m",
    "simulate_measurements",
    "time_difference_from_range_s",
    "to_range_differences_m",
]
