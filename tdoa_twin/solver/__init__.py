"""Position solvers."""

from tdoa_twin.solver.fallback import linear_fallback
from tdoa_twin.solver.gauss_newton import MIN_STATIONS, solve, solve_batch
from tdoa_twin.solver.linalg import solve_2x2, solve_linear_system

__all__ = [
    "MIN_STATIONS",
    "linear_fallback",
    "solve",
    "solve_2x2",
    "solve_batch",
    "solve_linear_system",
]
