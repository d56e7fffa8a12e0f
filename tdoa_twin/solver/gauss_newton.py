"""Iterative Gauss-Newton TDOA position solver."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np

from tdoa_twin.config import SolverConfig
from tdoa_twin.errors import InsufficientStationsError, SingularSystemError
from tdoa_twin.meas.measurement_set import MeasurementSet, to_range_differences_m
from tdoa_twin.meas.pairs import non_reference_stations, resolve_reference, validate_stations
from tdoa_twin.meas.range_diff import distance_m, range_difference_m
from tdoa_twin.models import MeasurementKind, Position, SolveMethod, Station, TdoaSolution
from tdoa_twin.solver.fallback import linear_fallback
from tdoa_twin.solver.linalg import solve_linear_system

MIN_STATIONS = 3

logger = logging.getLogger(__name__)


def solve(
    measurements: MeasurementSet,
    stations: Sequence[Station],
    initial_guess: Position | None = None,
    *,
    kind: MeasurementKind | str = MeasurementKind.TIME_S,
    reference_id: str | None = None,
    config: SolverConfig | None = None,
) -> TdoaSolution:
    """Estimate the emitter position from TDOA measurements.

    ``measurements`` holds the difference of each station against the
    reference station (``stations[0]`` unless ``reference_id`` is given),
    either keyed by ``"<ref>-<other>"`` or as an ordered sequence. The
    estimate starts at ``initial_guess`` (station centroid by default).
    """

    config = config or SolverConfig()
    stations = list(stations)
    if len(stations) < MIN_STATIONS:
        raise InsufficientStationsError(len(stations), MIN_STATIONS)
    validate_stations(stations)
    reference = resolve_reference(stations, reference_id)
    others = non_reference_stations(stations, reference)
    measured_m = to_range_differences_m(
        measurements,
        stations,
        reference,
        kind=kind,
        missing_policy=config.missing_policy,
    )
    position = initial_guess.copy() if initial_guess is not None else Position.centroid(stations)
    if not np.all(np.isfinite(position.as_array())):
        raise ValueError("Initial guess must be finite.")
    return _gauss_newton(position, measured_m, reference, others, config)


def solve_batch(
    measurement_sets: Iterable[MeasurementSet],
    stations: Sequence[Station],
    initial_guess: Position | None = None,
    **kwargs,
) -> list[TdoaSolution]:
    """Solve independent measurement sets against the same station network."""

    return [solve(measurements, stations, initial_guess, **kwargs) for measurements in measurement_sets]


def _build_matrices(
    pos: np.ndarray,
    measured_m: np.ndarray,
    reference: Station,
    others: Sequence[Station],
) -> tuple[np.ndarray, np.ndarray]:
    h_rows: list[np.ndarray] = []
    residuals: list[float] = []
    ref_pos = reference.pos_m
    r0 = distance_m(pos, ref_pos)
    for station, delta_m in zip(others, measured_m):
        ri = distance_m(pos, station.pos_m)
        if r0 <= 0.0 or ri <= 0.0:
            continue
        h_rows.append((pos - station.pos_m) / ri - (pos - ref_pos) / r0)
        residuals.append(float(delta_m) - (ri - r0))
    return np.array(h_rows, dtype=float).reshape(-1, 2), np.array(residuals, dtype=float)


def _gauss_newton(
    position: Position,
    measured_m: np.ndarray,
    reference: Station,
    others: Sequence[Station],
    config: SolverConfig,
) -> TdoaSolution:
    norms: list[float] = []
    converged = False
    for iteration in range(1, config.max_iter + 1):
        h_matrix, residuals = _build_matrices(position.as_array(), measured_m, reference, others)
        try:
            delta = solve_linear_system(h_matrix, residuals, det_eps=config.singular_det_eps)
        except SingularSystemError as exc:
            logger.info("Iteration %d: %s Switching to linear fallback.", iteration, exc)
            return _fallback_solution(position, measured_m, reference, others, config, norms)
        position.x_m += float(delta[0])
        position.y_m += float(delta[1])
        step_m = float(np.hypot(delta[0], delta[1]))
        norms.append(step_m)
        logger.debug("Iteration %d: correction %.3e m -> (%.6f, %.6f)", iteration, step_m, position.x_m, position.y_m)
        if step_m < config.tol_m:
            converged = True
            break
    if not converged:
        logger.warning(
            "No convergence after %d iterations (last correction %.3e m).",
            config.max_iter,
            norms[-1],
        )
    return TdoaSolution(
        position=position,
        converged=converged,
        iterations=len(norms),
        method=SolveMethod.GAUSS_NEWTON,
        reference_id=reference.station_id,
        correction_norms_m=tuple(norms),
        residuals_m=_residuals_by_station(position, measured_m, reference, others),
    )


def _fallback_solution(
    position: Position,
    measured_m: np.ndarray,
    reference: Station,
    others: Sequence[Station],
    config: SolverConfig,
    norms: list[float],
) -> TdoaSolution:
    try:
        estimate = linear_fallback(measured_m, reference, others, det_eps=config.singular_det_eps)
        method = SolveMethod.LINEAR_FALLBACK
    except SingularSystemError as exc:
        logger.warning("Linear fallback failed (%s); keeping last estimate.", exc)
        estimate = position
        method = SolveMethod.DEGENERATE
    return TdoaSolution(
        position=estimate,
        converged=False,
        iterations=len(norms),
        method=method,
        reference_id=reference.station_id,
        correction_norms_m=tuple(norms),
        residuals_m=_residuals_by_station(estimate, measured_m, reference, others),
    )


def _residuals_by_station(
    position: Position,
    measured_m: np.ndarray,
    reference: Station,
    others: Sequence[Station],
) -> dict[str, float]:
    pos = position.as_array()
    return {
        station.station_id: float(delta_m) - range_difference_m(pos, station, reference)
        for station, delta_m in zip(others, measured_m)
    }
