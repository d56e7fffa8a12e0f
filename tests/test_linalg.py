import numpy as np
import pytest

from tdoa_twin.errors import SingularSystemError
from tdoa_twin.solver.linalg import solve_2x2, solve_linear_system


def test_solve_2x2_matches_numpy() -> None:
    matrix = np.array([[4.0, 1.0], [2.0, 3.0]])
    rhs = np.array([1.0, 2.0])

    assert np.allclose(solve_2x2(matrix, rhs), np.linalg.solve(matrix, rhs))


def test_solve_2x2_singular_raises_with_determinant() -> None:
    with pytest.raises(SingularSystemError) as excinfo:
        solve_2x2(np.array([[1.0, 2.0], [2.0, 4.0]]), np.array([1.0, 1.0]))
    assert excinfo.value.determinant == 0.0


def test_solve_2x2_respects_epsilon() -> None:
    matrix = np.array([[1e-7, 0.0], [0.0, 1e-7]])
    with pytest.raises(SingularSystemError):
        solve_2x2(matrix, np.array([1.0, 1.0]), det_eps=1e-12)
    assert np.allclose(solve_2x2(matrix, np.array([1e-7, 2e-7]), det_eps=0.0), [1.0, 2.0])


def test_solve_linear_system_least_squares() -> None:
    rows = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    rhs = np.array([2.0, -1.0, 1.0])

    assert np.allclose(solve_linear_system(rows, rhs), [2.0, -1.0])


def test_solve_linear_system_needs_two_rows() -> None:
    with pytest.raises(SingularSystemError):
        solve_linear_system(np.array([[1.0, 1.0]]), np.array([1.0]))


def test_solve_linear_system_shape_mismatch() -> None:
    with pytest.raises(ValueError):
        solve_linear_system(np.eye(2), np.array([1.0, 2.0, 3.0]))
