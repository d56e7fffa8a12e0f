"""Exception types raised by the TDOA twin."""

from __future__ import annotations


class TdoaError(Exception):
    """Base class for TDOA twin errors."""


class InsufficientStationsError(TdoaError, ValueError):
    """Raised when fewer stations are supplied than a 2-D fix needs."""

    def __init__(self, count: int, required: int = 3) -> None:
        super().__init__(f"At least {required} stations are required for a solution, got {count}.")
        self.count = count
        self.required = required


class SingularSystemError(TdoaError, ArithmeticError):
    """Raised when a 2x2 normal-equation system cannot be inverted."""

    def __init__(self, determinant: float) -> None:
        super().__init__(f"Linear system is singular (determinant={determinant:.3e}).")
        self.determinant = float(determinant)


class MissingMeasurementError(TdoaError, KeyError):
    """Raised when no measurement exists for a reference/station pair."""

    def __init__(self, pair_key: str) -> None:
        super().__init__(pair_key)
        self.pair_key = pair_key

    def __str__(self) -> str:
        return f"No measurement for station pair '{self.pair_key}'."


class UnknownStationError(TdoaError, KeyError):
    """Raised when a measurement key names a station that was not configured."""

    def __init__(self, station_id: str) -> None:
        super().__init__(station_id)
        self.station_id = station_id

    def __str__(self) -> str:
        return f"Unknown station '{self.station_id}'."
