"""Single-shot linearized TDOA solve for degenerate iterations."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from tdoa_twin.models import Position, Station
from tdoa_twin.solver.linalg import DEFAULT_DET_EPS, solve_linear_system


def linear_fallback(
    range_diffs_m: np.ndarray,
    reference: Station,
    others: Sequence[Station],
    det_eps: float = DEFAULT_DET_EPS,
) -> Position:
    """Solve the midpoint-linearized range-difference equations once.

    For station i with baseline ``a = s_i - s_ref``, midpoint ``m`` and
    baseline length ``L``, the identity ``d_i² - d_ref² = -2 a·(p - m)``
    becomes linear once ``d_i + d_ref`` is replaced by ``L``. Dividing by
    ``L`` leaves one unit-baseline row per station::

        (a / L) · p = (a / L) · m - Δ_i / 2

    The approximation is exact when the target sits on the reference
    station and degrades with distance from it.
    """

    ref_pos = reference.pos_m
    rows: list[np.ndarray] = []
    rhs: list[float] = []
    for station, delta_m in zip(others, range_diffs_m):
        baseline = station.pos_m - ref_pos
        length = float(np.linalg.norm(baseline))
        if length <= 0.0:
            continue
        unit = baseline / length
        midpoint = 0.5 * (station.pos_m + ref_pos)
        rows.append(unit)
        rhs.append(float(unit @ midpoint) - 0.5 * float(delta_m))
    solution = solve_linear_system(
        np.array(rows, dtype=float).reshape(-1, 2),
        np.array(rhs, dtype=float),
        det_eps=det_eps,
    )
    return Position(x_m=float(solution[0]), y_m=float(solution[1]))
