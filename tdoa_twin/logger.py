"""Simple logging utilities for TDOA twin trial outputs."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

import numpy as np

from tdoa_twin.models import TrialLog

TRIAL_CSV_COLUMNS = [
    "trial",
    "seed",
    "truth_x_m",
    "truth_y_m",
    "est_x_m",
    "est_y_m",
    "error_m",
    "converged",
    "iterations",
    "method",
    "reference_id",
    "residual_rms_m",
    "last_correction_m",
]
_CSV_HEADER = ",".join(TRIAL_CSV_COLUMNS) + "\n"


def append_trial_csv(path: str | Path, trial: TrialLog) -> None:
    """Append a single trial summary to a CSV file."""

    target = Path(path)
    line = _trial_to_csv_line(trial)
    if not target.exists():
        target.write_text(_CSV_HEADER)
    with target.open("a", encoding="utf-8") as handle:
        handle.write(line)


def save_trials_csv(path: str | Path, trials: list[TrialLog]) -> None:
    """Save all trial summaries to a CSV file."""

    target = Path(path)
    target.write_text(_CSV_HEADER)
    with target.open("a", encoding="utf-8") as handle:
        for trial in trials:
            handle.write(_trial_to_csv_line(trial))


def save_trials_npz(path: str | Path, trials: list[TrialLog]) -> None:
    """Save trial logs to a compressed NPZ file."""

    payload = [asdict(trial) for trial in trials]
    np.savez_compressed(path, trials=np.array(payload, dtype=object))


def load_trials_npz(path: str | Path) -> list[dict]:
    """Load trial logs from a compressed NPZ file."""

    data = np.load(path, allow_pickle=True)
    trials = data["trials"].tolist()
    return list(trials)


def _trial_to_csv_line(trial: TrialLog) -> str:
    solution = trial.solution
    norms = solution.correction_norms_m
    row = [
        trial.trial,
        trial.seed,
        _format_value(trial.truth.x_m),
        _format_value(trial.truth.y_m),
        _format_value(solution.position.x_m),
        _format_value(solution.position.y_m),
        _format_value(trial.error_m),
        _format_value(solution.converged),
        solution.iterations,
        solution.method.value,
        solution.reference_id,
        _format_value(solution.residual_rms_m),
        _format_value(norms[-1] if norms else None),
    ]
    return ",".join(str(value) for value in row) + "\n"


def _format_value(value: float | int | bool | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return repr(float(value)) if isinstance(value, float) else str(value)
