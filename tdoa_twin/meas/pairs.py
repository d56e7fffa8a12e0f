"""Station pair keys and reference-station handling."""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple, Union

from tdoa_twin.errors import UnknownStationError
from tdoa_twin.models import Station

PairKey = Union[str, Tuple[str, str]]

PAIR_SEPARATOR = "-"


def pair_key(reference_id: str, other_id: str) -> str:
    """Format the measurement key for ``other`` relative to ``reference``."""

    return f"{reference_id}{PAIR_SEPARATOR}{other_id}"


def validate_stations(stations: Sequence[Station]) -> None:
    seen: set[str] = set()
    for station in stations:
        if station.station_id in seen:
            raise ValueError(f"Duplicate station id '{station.station_id}'.")
        seen.add(station.station_id)


def resolve_reference(stations: Sequence[Station], reference_id: str | None = None) -> Station:
    """Return the reference station (``stations[0]`` unless named)."""

    if not stations:
        raise ValueError("No stations supplied.")
    if reference_id is None:
        return stations[0]
    for station in stations:
        if station.station_id == reference_id:
            return station
    raise UnknownStationError(reference_id)


def non_reference_stations(stations: Sequence[Station], reference: Station) -> list[Station]:
    return [station for station in stations if station.station_id != reference.station_id]


def check_keys(measurements: Mapping[PairKey, float], stations: Sequence[Station]) -> None:
    """Raise ``UnknownStationError`` for keys naming stations not in ``stations``."""

    station_ids = {station.station_id for station in stations}
    valid_keys = {pair_key(a, b) for a in station_ids for b in station_ids if a != b}
    for key in measurements:
        if isinstance(key, tuple):
            for station_id in key:
                if station_id not in station_ids:
                    raise UnknownStationError(str(station_id))
            continue
        if key in valid_keys:
            continue
        for part in str(key).split(PAIR_SEPARATOR):
            if part not in station_ids:
                raise UnknownStationError(part)
        raise UnknownStationError(str(key))


def lookup_pair(
    measurements: Mapping[PairKey, float],
    reference_id: str,
    other_id: str,
) -> float | None:
    """Find the ``other - reference`` value, negating a reversed key.

    Returns ``None`` when the pair is absent in both orientations.
    """

    for key in (pair_key(reference_id, other_id), (reference_id, other_id)):
        if key in measurements:
            return float(measurements[key])
    for key in (pair_key(other_id, reference_id), (other_id, reference_id)):
        if key in measurements:
            return -float(measurements[key])
    return None


def differences_from_arrival_times(
    arrival_times_s: Mapping[str, float],
    reference_id: str,
) -> dict[str, float]:
    """Difference each arrival time against the reference arrival time."""

    if reference_id not in arrival_times_s:
        raise UnknownStationError(reference_id)
    t_ref = float(arrival_times_s[reference_id])
    return {
        pair_key(reference_id, station_id): float(t_s) - t_ref
        for station_id, t_s in arrival_times_s.items()
        if station_id != reference_id
    }
