import numpy as np
import pytest

from tdoa_twin.errors import MissingMeasurementError, UnknownStationError
from tdoa_twin.meas.measurement_set import to_range_differences_m
from tdoa_twin.meas.pairs import (
    check_keys,
    differences_from_arrival_times,
    lookup_pair,
    pair_key,
    resolve_reference,
)
from tdoa_twin.meas.range_diff import LIGHT_SPEED_MPS
from tdoa_twin.models import MeasurementKind, Station


def test_pair_key_format() -> None:
    assert pair_key("S0", "S3") == "S0-S3"


def test_lookup_pair_orientations() -> None:
    measurements = {"A-B": 2.0, ("A", "C"): 3.0, "D-A": 4.0}

    assert lookup_pair(measurements, "A", "B") == 2.0
    assert lookup_pair(measurements, "A", "C") == 3.0
    assert lookup_pair(measurements, "A", "D") == -4.0
    assert lookup_pair(measurements, "A", "E") is None


def test_check_keys_allows_hyphenated_station_ids() -> None:
    stations = [Station("north-1", 0.0, 0.0), Station("south-2", 10.0, 0.0), Station("east", 0.0, 10.0)]
    check_keys({"north-1-south-2": 1.0, "north-1-east": 2.0}, stations)
    with pytest.raises(UnknownStationError):
        check_keys({"north-1-west": 1.0}, stations)


def test_resolve_reference(equilateral_stations) -> None:
    assert resolve_reference(equilateral_stations).station_id == "S0"
    assert resolve_reference(equilateral_stations, "S2").station_id == "S2"
    with pytest.raises(UnknownStationError):
        resolve_reference(equilateral_stations, "S7")


def test_differences_from_arrival_times() -> None:
    diffs = differences_from_arrival_times({"A": 1.0, "B": 1.5, "C": 0.25}, "A")

    assert diffs == {"A-B": 0.5, "A-C": -0.75}
    with pytest.raises(UnknownStationError):
        differences_from_arrival_times({"A": 1.0}, "Z")


def test_time_values_are_scaled_to_metres(equilateral_stations) -> None:
    reference = equilateral_stations[0]
    ranges = to_range_differences_m(
        {"S0-S1": 1e-7, "S0-S2": -2e-7},
        equilateral_stations,
        reference,
        kind=MeasurementKind.TIME_S,
    )

    assert np.allclose(ranges, [1e-7 * LIGHT_SPEED_MPS, -2e-7 * LIGHT_SPEED_MPS])


def test_range_values_pass_through(equilateral_stations) -> None:
    ranges = to_range_differences_m([3.0, -4.0], equilateral_stations, equilateral_stations[0], kind="range")

    assert np.allclose(ranges, [3.0, -4.0])


def test_non_reference_pairs_are_ignored(equilateral_stations) -> None:
    ranges = to_range_differences_m(
        {"S0-S1": 1.0, "S0-S2": 2.0, "S1-S2": 99.0},
        equilateral_stations,
        equilateral_stations[0],
        kind="range",
    )

    assert np.allclose(ranges, [1.0, 2.0])


def test_missing_pair_policies(equilateral_stations) -> None:
    reference = equilateral_stations[0]
    with pytest.raises(MissingMeasurementError):
        to_range_differences_m({"S0-S1": 1.0}, equilateral_stations, reference, kind="range")
    with pytest.warns(RuntimeWarning):
        ranges = to_range_differences_m(
            {"S0-S1": 1.0},
            equilateral_stations,
            reference,
            kind="range",
            missing_policy="zero",
        )
    assert np.allclose(ranges, [1.0, 0.0])
