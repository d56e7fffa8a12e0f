"""Least-squares reduction to a 2x2 system and its direct solution."""

from __future__ import annotations

import numpy as np

from tdoa_twin.errors import SingularSystemError

DEFAULT_DET_EPS = 1e-12


def solve_2x2(matrix: np.ndarray, rhs: np.ndarray, det_eps: float = DEFAULT_DET_EPS) -> np.ndarray:
    """Solve ``matrix @ x = rhs`` by Cramer's rule.

    Raises ``SingularSystemError`` when ``|det| <= det_eps``.
    """

    a = np.asarray(matrix, dtype=float)
    b = np.asarray(rhs, dtype=float)
    if a.shape != (2, 2) or b.shape != (2,):
        raise ValueError(f"Expected a 2x2 matrix and length-2 rhs, got {a.shape} and {b.shape}.")
    det = float(a[0, 0] * a[1, 1] - a[0, 1] * a[1, 0])
    if not np.isfinite(det) or abs(det) <= det_eps:
        raise SingularSystemError(det)
    x = (a[1, 1] * b[0] - a[0, 1] * b[1]) / det
    y = (a[0, 0] * b[1] - a[1, 0] * b[0]) / det
    solution = np.array([x, y], dtype=float)
    if not np.all(np.isfinite(solution)):
        raise SingularSystemError(det)
    return solution


def solve_linear_system(
    rows: np.ndarray,
    rhs: np.ndarray,
    det_eps: float = DEFAULT_DET_EPS,
) -> np.ndarray:
    """Least-squares solution of an overdetermined ``rows @ [x, y] = rhs``.

    The system is reduced to the 2x2 normal equations ``AᵀA x = Aᵀb``.
    Fewer than two rows cannot fix two unknowns and is reported as singular.
    """

    a = np.asarray(rows, dtype=float).reshape(-1, 2)
    b = np.asarray(rhs, dtype=float).reshape(-1)
    if a.shape[0] != b.shape[0]:
        raise ValueError(f"Row count {a.shape[0]} does not match rhs length {b.shape[0]}.")
    if a.shape[0] < 2:
        raise SingularSystemError(0.0)
    return solve_2x2(a.T @ a, a.T @ b, det_eps=det_eps)
