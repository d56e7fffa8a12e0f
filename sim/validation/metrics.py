"""Shared metric extraction helpers for validation runs.

These helpers operate on the trial dicts stored in ``trial_logs.npz``
because it contains both solution and truth, allowing truth-based error
metrics.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import numpy as np

from tdoa_twin.logger import load_trials_npz


def metrics_from_trial_npz(npz_path: Path) -> dict[str, float]:
    """Compute standard run metrics from a trial_logs.npz file."""
    trials = load_trials_npz(npz_path)
    return metrics_from_trial_dicts(trials)


def sanitize_json(obj: Any) -> Any:
    """Convert NaN/Inf to None so json.dumps(..., allow_nan=False) succeeds."""
    if isinstance(obj, float):
        return None if (math.isnan(obj) or math.isinf(obj)) else obj
    if isinstance(obj, dict):
        return {k: sanitize_json(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [sanitize_json(v) for v in obj]
    return obj


def metrics_from_trial_dicts(trials: list[dict[str, Any]]) -> dict[str, float]:
    pos_err = np.array([_pos_error_m(t) for t in trials], dtype=float)
    residual = np.array([_residual_rms_m(t) for t in trials], dtype=float)
    iterations = np.array([_iterations(t) for t in trials], dtype=float)
    converged = np.array([_flag(t, "converged") for t in trials], dtype=float)
    fallback = np.array([_method_is(t, "linear_fallback") for t in trials], dtype=float)
    degenerate = np.array([_method_is(t, "degenerate") for t in trials], dtype=float)

    return {
        "pos_err_rms_m": _rms(pos_err),
        "pos_err_p50_m": _pctl(pos_err, 50),
        "pos_err_p95_m": _pctl(pos_err, 95),
        "pos_err_max_m": _max(pos_err),
        "residual_rms_mean_m": _mean(residual),
        "iterations_mean": _mean(iterations),
        "iterations_max": _max(iterations),
        "converged_rate": _mean(converged),
        "fallback_rate": _mean(fallback),
        "degenerate_rate": _mean(degenerate),
    }


def _xy(obj: Any) -> np.ndarray | None:
    if not isinstance(obj, dict):
        return None
    try:
        xy = np.array([obj["x_m"], obj["y_m"]], dtype=float)
    except (KeyError, TypeError, ValueError):
        return None
    return xy if np.isfinite(xy).all() else None


def _pos_error_m(trial: dict[str, Any]) -> float:
    sol = trial.get("solution")
    if not isinstance(sol, dict):
        return float("nan")
    est = _xy(sol.get("position"))
    truth = _xy(trial.get("truth"))
    if est is None or truth is None:
        return float("nan")
    return float(np.linalg.norm(est - truth))


def _residual_rms_m(trial: dict[str, Any]) -> float:
    sol = trial.get("solution")
    if not isinstance(sol, dict) or not isinstance(sol.get("residuals_m"), dict):
        return float("nan")
    values = np.array(list(sol["residuals_m"].values()), dtype=float)
    if values.size == 0:
        return float("nan")
    return float(np.sqrt(np.mean(values**2)))


def _iterations(trial: dict[str, Any]) -> float:
    sol = trial.get("solution")
    if not isinstance(sol, dict):
        return float("nan")
    try:
        return float(sol.get("iterations"))
    except (TypeError, ValueError):
        return float("nan")


def _flag(trial: dict[str, Any], key: str) -> float:
    sol = trial.get("solution")
    if not isinstance(sol, dict) or sol.get(key) is None:
        return float("nan")
    return 1.0 if bool(sol[key]) else 0.0


def _method_is(trial: dict[str, Any], name: str) -> float:
    sol = trial.get("solution")
    if not isinstance(sol, dict) or sol.get("method") is None:
        return float("nan")
    method = sol["method"]
    return 1.0 if str(getattr(method, "value", method)) == name else 0.0


def _finite_stat(values: np.ndarray, reduce) -> float:
    finite = values[np.isfinite(values)]
    return float(reduce(finite)) if finite.size else float("nan")


def _rms(values: np.ndarray) -> float:
    return _finite_stat(values, lambda v: np.sqrt(np.mean(v**2)))


def _pctl(values: np.ndarray, q: float) -> float:
    return _finite_stat(values, lambda v: np.percentile(v, q))


def _mean(values: np.ndarray) -> float:
    return _finite_stat(values, np.mean)


def _max(values: np.ndarray) -> float:
    return _finite_stat(values, np.max)
