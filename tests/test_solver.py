import math

import numpy as np
import pytest

from tdoa_twin.config import SolverConfig
from tdoa_twin.errors import InsufficientStationsError, MissingMeasurementError, UnknownStationError
from tdoa_twin.meas.pairs import differences_from_arrival_times
from tdoa_twin.meas.range_diff import ideal_range_differences, ideal_time_differences
from tdoa_twin.meas.simulate import simulate_measurements
from tdoa_twin.models import ErrorModel, MeasurementKind, Position, SolveMethod, Station
from tdoa_twin.solver import solve, solve_batch


def _error_m(position: Position, truth: Position) -> float:
    return position.distance_to(truth)


def test_equilateral_scenario_recovers_target(equilateral_stations) -> None:
    truth = Position(50.0, 30.0)
    measurements = ideal_range_differences(truth, equilateral_stations)

    solution = solve(measurements, equilateral_stations, kind=MeasurementKind.RANGE_M)

    assert solution.converged
    assert solution.method is SolveMethod.GAUSS_NEWTON
    assert solution.iterations < 100
    assert _error_m(solution.position, truth) < 1e-3
    assert solution.reference_id == "S0"


def test_time_difference_input_recovers_target(equilateral_stations) -> None:
    truth = Position(50.0, 30.0)
    measurements = ideal_time_differences(truth, equilateral_stations)

    solution = solve(measurements, equilateral_stations)

    assert solution.converged
    assert _error_m(solution.position, truth) < 1e-3


@pytest.mark.parametrize("truth", [Position(700.0, 200.0), Position(300.0, 800.0), Position(500.0, 500.0)])
def test_exact_recovery_with_ideal_measurements(square_stations, truth: Position) -> None:
    measurements = ideal_range_differences(truth, square_stations)

    solution = solve(measurements, square_stations, kind="range")

    assert solution.converged
    assert solution.iterations < SolverConfig().max_iter
    assert _error_m(solution.position, truth) < 1e-6
    assert max(abs(r) for r in solution.residuals_m.values()) < 1e-6


def test_reference_choice_does_not_change_estimate(square_stations) -> None:
    truth = Position(650.0, 320.0)

    default_ref = solve(ideal_range_differences(truth, square_stations), square_stations, kind="range")
    named_ref = solve(
        ideal_range_differences(truth, square_stations, reference_id="C"),
        square_stations,
        kind="range",
        reference_id="C",
    )
    permuted = [square_stations[2], square_stations[0], square_stations[3], square_stations[1]]
    permuted_ref = solve(ideal_range_differences(truth, permuted), permuted, kind="range")

    assert named_ref.reference_id == "C"
    assert permuted_ref.reference_id == "C"
    assert _error_m(default_ref.position, named_ref.position) < 1e-6
    assert _error_m(default_ref.position, permuted_ref.position) < 1e-6


def test_reference_choice_with_noisy_arrivals(equilateral_stations) -> None:
    rng = np.random.default_rng(5)
    simulated = simulate_measurements(
        Position(50.0, 30.0),
        equilateral_stations,
        ErrorModel(clock_error_s=1e-9, position_error_m=0.1),
        rng,
    )

    by_s0 = solve(simulated.time_differences_s, equilateral_stations)
    by_s1 = solve(
        differences_from_arrival_times(simulated.noisy_times_s, "S1"),
        equilateral_stations,
        reference_id="S1",
    )

    assert by_s0.converged and by_s1.converged
    assert _error_m(by_s0.position, by_s1.position) < 1e-4


def test_correction_norms_shrink_after_first_iterations(square_stations) -> None:
    truth = Position(700.0, 200.0)

    solution = solve(ideal_range_differences(truth, square_stations), square_stations, kind="range")

    norms = solution.correction_norms_m
    assert len(norms) == solution.iterations
    assert len(norms) >= 3
    for previous, current in zip(norms[2:], norms[3:]):
        assert current <= previous
    assert norms[-1] < 1e-6


def test_iteration_cap_reports_non_convergence(square_stations) -> None:
    truth = Position(700.0, 200.0)

    solution = solve(
        ideal_range_differences(truth, square_stations),
        square_stations,
        kind="range",
        config=SolverConfig(max_iter=1),
    )

    assert not solution.converged
    assert solution.iterations == 1
    assert solution.method is SolveMethod.GAUSS_NEWTON
    assert np.isfinite(solution.position.as_array()).all()


def test_initial_guess_is_not_mutated(equilateral_stations) -> None:
    guess = Position(10.0, 10.0)

    solve(ideal_range_differences(Position(50.0, 30.0), equilateral_stations), equilateral_stations, guess, kind="range")

    assert (guess.x_m, guess.y_m) == (10.0, 10.0)


def test_fewer_than_three_stations_is_fatal(equilateral_stations) -> None:
    with pytest.raises(InsufficientStationsError) as excinfo:
        solve({"S0-S1": 0.0}, equilateral_stations[:2])
    assert excinfo.value.count == 2


def test_duplicate_station_ids_rejected() -> None:
    stations = [Station("A", 0.0, 0.0), Station("A", 10.0, 0.0), Station("B", 0.0, 10.0)]
    with pytest.raises(ValueError):
        solve([0.0, 0.0], stations)


def test_missing_measurement_raises_by_default(equilateral_stations) -> None:
    with pytest.raises(MissingMeasurementError) as excinfo:
        solve({"S0-S1": 0.0}, equilateral_stations, kind="range")
    assert excinfo.value.pair_key == "S0-S2"


def test_missing_measurement_zero_policy_warns(equilateral_stations) -> None:
    with pytest.warns(RuntimeWarning, match="S0-S2"):
        solution = solve(
            {"S0-S1": 0.0},
            equilateral_stations,
            kind="range",
            config=SolverConfig(missing_policy="zero"),
        )
    assert np.isfinite(solution.position.as_array()).all()


def test_unknown_station_in_key(equilateral_stations) -> None:
    with pytest.raises(UnknownStationError) as excinfo:
        solve({"S0-S1": 0.0, "S0-S9": 1.0}, equilateral_stations, kind="range")
    assert excinfo.value.station_id == "S9"


def test_reversed_and_tuple_keys_match_string_keys(equilateral_stations) -> None:
    truth = Position(40.0, 20.0)
    ranges = ideal_range_differences(truth, equilateral_stations)
    reversed_keys = {"S1-S0": -ranges["S0-S1"], ("S0", "S2"): ranges["S0-S2"]}

    expected = solve(ranges, equilateral_stations, kind="range")
    actual = solve(reversed_keys, equilateral_stations, kind="range")

    assert _error_m(expected.position, actual.position) < 1e-9


def test_ordered_sequence_input(equilateral_stations) -> None:
    truth = Position(40.0, 20.0)
    ranges = ideal_range_differences(truth, equilateral_stations)

    solution = solve([ranges["S0-S1"], ranges["S0-S2"]], equilateral_stations, kind="range")

    assert _error_m(solution.position, truth) < 1e-6
    with pytest.raises(ValueError):
        solve([ranges["S0-S1"]], equilateral_stations, kind="range")


def test_non_finite_measurement_rejected(equilateral_stations) -> None:
    with pytest.raises(ValueError):
        solve({"S0-S1": math.nan, "S0-S2": 0.0}, equilateral_stations)


def test_collinear_stations_from_centroid_do_not_crash() -> None:
    stations = [Station("W", 0.0, 0.0), Station("M", 100.0, 0.0), Station("E", 200.0, 0.0)]
    measurements = ideal_range_differences(Position(50.0, 30.0), stations)

    solution = solve(measurements, stations, kind="range")

    assert solution.method in (SolveMethod.LINEAR_FALLBACK, SolveMethod.DEGENERATE)
    assert not solution.converged
    assert np.isfinite(solution.position.as_array()).all()
    assert all(math.isfinite(r) for r in solution.residuals_m.values())


def test_collinear_stations_from_off_axis_guess_find_mirror_pair() -> None:
    stations = [Station("W", 0.0, 0.0), Station("M", 100.0, 0.0), Station("E", 200.0, 0.0)]
    measurements = ideal_range_differences(Position(50.0, 30.0), stations)

    solution = solve(measurements, stations, Position(60.0, 20.0), kind="range")

    assert solution.converged
    assert abs(solution.position.x_m - 50.0) < 1e-4
    assert abs(abs(solution.position.y_m) - 30.0) < 1e-4


def test_guess_on_reference_station_uses_linear_fallback(equilateral_stations) -> None:
    truth = Position(2.0, 1.0)
    measurements = ideal_range_differences(truth, equilateral_stations)

    solution = solve(measurements, equilateral_stations, Position(0.0, 0.0), kind="range")

    assert solution.method is SolveMethod.LINEAR_FALLBACK
    assert not solution.converged
    assert solution.iterations == 0
    assert _error_m(solution.position, truth) < 1.0


def test_singular_threshold_is_configurable(equilateral_stations) -> None:
    measurements = ideal_range_differences(Position(50.0, 30.0), equilateral_stations)

    solution = solve(
        measurements,
        equilateral_stations,
        kind="range",
        config=SolverConfig(singular_det_eps=1e9),
    )

    assert solution.method is SolveMethod.DEGENERATE
    assert not solution.converged
    assert np.isfinite(solution.position.as_array()).all()


def test_solve_batch_solves_each_set_independently(square_stations) -> None:
    truths = [Position(700.0, 200.0), Position(250.0, 600.0)]
    sets = [ideal_range_differences(truth, square_stations) for truth in truths]

    solutions = solve_batch(sets, square_stations, kind="range")

    assert len(solutions) == 2
    for solution, truth in zip(solutions, truths):
        assert _error_m(solution.position, truth) < 1e-6
