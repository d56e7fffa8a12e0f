"""Adapter from keyed or ordered measurement sets to range-difference vectors."""

from __future__ import annotations

import logging
import warnings
from typing import Mapping, Sequence, Union

import numpy as np

from tdoa_twin.errors import MissingMeasurementError
from tdoa_twin.meas.pairs import (
    PairKey,
    check_keys,
    lookup_pair,
    non_reference_stations,
    pair_key,
)
from tdoa_twin.meas.range_diff import range_difference_from_time_m
from tdoa_twin.models import MeasurementKind, Station

MeasurementSet = Union[Mapping[PairKey, float], Sequence[float]]

logger = logging.getLogger(__name__)


def to_range_differences_m(
    measurements: MeasurementSet,
    stations: Sequence[Station],
    reference: Station,
    *,
    kind: MeasurementKind | str = MeasurementKind.TIME_S,
    missing_policy: str = "raise",
) -> np.ndarray:
    """Return measured range differences aligned with the non-reference stations.

    A mapping is looked up by pair key (``"<ref>-<other>"`` or a tuple); an
    ordered sequence must hold one value per non-reference station, in
    station order. Values are converted to metres when ``kind`` is time.
    """

    kind = MeasurementKind(kind)
    others = non_reference_stations(stations, reference)
    if isinstance(measurements, Mapping):
        raw = _from_mapping(measurements, stations, reference, others, missing_policy)
    else:
        values = [float(value) for value in measurements]
        if len(values) != len(others):
            raise ValueError(
                f"Expected {len(others)} ordered measurements (one per non-reference station), got {len(values)}."
            )
        raw = np.array(values, dtype=float)
    if not np.all(np.isfinite(raw)):
        raise ValueError("Measurements must be finite.")
    if kind is MeasurementKind.TIME_S:
        return np.array([range_difference_from_time_m(value) for value in raw], dtype=float)
    return raw


def _from_mapping(
    measurements: Mapping[PairKey, float],
    stations: Sequence[Station],
    reference: Station,
    others: list[Station],
    missing_policy: str,
) -> np.ndarray:
    check_keys(measurements, stations)
    values: list[float] = []
    found = 0
    for station in others:
        value = lookup_pair(measurements, reference.station_id, station.station_id)
        if value is None:
            key = pair_key(reference.station_id, station.station_id)
            if missing_policy != "zero":
                raise MissingMeasurementError(key)
            warnings.warn(
                f"No measurement for '{key}'; assuming a zero difference.",
                RuntimeWarning,
                stacklevel=3,
            )
            value = 0.0
        else:
            found += 1
        values.append(value)
    if len(measurements) > found:
        logger.debug("Ignoring %d measurement(s) not relative to reference %s", len(measurements) - found, reference.station_id)
    return np.array(values, dtype=float)
