"""Many-seed Monte Carlo sweeps of a TDOA scenario.

Each seed re-simulates the scenario's trials with a fresh noise stream. The
sweep reports per-seed metrics, their spread across seeds, and the pooled
position-error distribution of every trial in the sweep.

Usage:
  python -m sim.validation.monte_carlo --scenario sim/scenarios/equilateral.json --n 50
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np

from sim.run_demo import run_trials
from sim.scenario_runner import build_sim_config, load_scenario, slugify
from sim.validation.metrics import metrics_from_trial_dicts, sanitize_json
from tdoa_twin.logger import save_trials_csv, save_trials_npz
from tdoa_twin.models import TrialLog

SEED_MODES = ("offset", "absolute")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedPlan:
    """Seed sequence for a sweep: ``start + i * step``, optionally offset by the scenario seed."""

    base_seed: int
    mode: str = "offset"
    start: int = 0
    step: int = 1

    def __post_init__(self) -> None:
        if self.mode not in SEED_MODES:
            raise ValueError(f"seed_mode must be one of {SEED_MODES}, got {self.mode!r}")
        if self.step <= 0:
            raise ValueError("seed_step must be > 0")

    def seeds(self, n: int) -> list[int]:
        if n <= 0:
            raise ValueError("n must be > 0")
        first = self.start + (self.base_seed if self.mode == "offset" else 0)
        return [int(first + i * self.step) for i in range(n)]


def run_monte_carlo(
    scenario_path: Path,
    *,
    n: int,
    seed_mode: str = "offset",
    seed_start: int = 0,
    seed_step: int = 1,
    seeds: list[int] | None = None,
    run_root: Path = Path("runs"),
    per_run_logs: bool = False,
    aggregate_plots: bool = True,
) -> dict[str, Any]:
    """Sweep ``scenario_path`` over ``n`` seeds and write the aggregate report."""

    scenario = load_scenario(scenario_path)
    scenario_name = str(scenario["name"])
    if seeds is None:
        seeds = SeedPlan(int(scenario["rng_seed"]), seed_mode.lower().strip(), seed_start, seed_step).seeds(n)
    if not seeds:
        raise ValueError("No seeds to run")
    cfg_template = build_sim_config(scenario)

    mc_dir = run_root / f"{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_mc_{slugify(scenario_name)}"
    mc_dir.mkdir(parents=True, exist_ok=True)
    mc_config = {
        "created_utc": datetime.now(timezone.utc).isoformat(),
        "scenario_path": str(scenario_path),
        "scenario": scenario,
        "seeds": [int(seed) for seed in seeds],
        "per_run_logs": per_run_logs,
        "aggregate_plots": aggregate_plots,
    }
    (mc_dir / "mc_config.json").write_text(json.dumps(mc_config, indent=2), encoding="utf-8")

    rows: list[dict[str, Any]] = []
    pooled: list[TrialLog] = []
    for seed in seeds:
        trials = run_trials(replace(cfg_template, rng_seed=int(seed)))
        if per_run_logs:
            seed_dir = mc_dir / f"seed_{int(seed):06d}"
            seed_dir.mkdir(parents=True, exist_ok=True)
            save_trials_npz(seed_dir / "trial_logs.npz", trials)
            save_trials_csv(seed_dir / "trial_logs.csv", trials)
        row = {"seed": int(seed), **metrics_from_trial_dicts([asdict(trial) for trial in trials])}
        logger.info("Seed %d: rms error %.4f m, converged %.0f%%", seed, row["pos_err_rms_m"], 100 * row["converged_rate"])
        rows.append(row)
        pooled.extend(trials)
    _write_runs_csv(mc_dir / "mc_runs.csv", rows)

    errors_m = np.array([trial.error_m for trial in pooled], dtype=float)
    report = {
        "scenario": scenario_name,
        "scenario_path": str(scenario_path),
        "mc_dir": str(mc_dir),
        "n": len(rows),
        "seeds": [row["seed"] for row in rows],
        "aggregate": {key: _spread(np.array([row[key] for row in rows], dtype=float)) for key in rows[0] if key != "seed"},
        "pooled_pos_err_m": _spread(errors_m),
    }
    (mc_dir / "mc_aggregate.json").write_text(
        json.dumps(sanitize_json(report), indent=2, allow_nan=False),
        encoding="utf-8",
    )

    if aggregate_plots:
        from tdoa_twin.utils.plotting import save_monte_carlo_plots

        save_monte_carlo_plots(pooled, errors_m, mc_dir / "mc_plots")
    return report


def _spread(values: np.ndarray) -> dict[str, float]:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return dict.fromkeys(("mean", "std", "min", "p50", "p95", "max"), float("nan"))
    p50, p95 = np.percentile(finite, [50, 95])
    return {
        "mean": float(finite.mean()),
        "std": float(finite.std(ddof=1)) if finite.size > 1 else 0.0,
        "min": float(finite.min()),
        "p50": float(p50),
        "p95": float(p95),
        "max": float(finite.max()),
    }


def _write_runs_csv(path: Path, rows: list[dict[str, Any]]) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a Monte Carlo sweep for a TDOA scenario.")
    parser.add_argument("--scenario", type=str, required=True)
    parser.add_argument("--n", type=int, default=50)
    parser.add_argument("--seed-mode", choices=SEED_MODES, default="offset")
    parser.add_argument("--seed-start", type=int, default=0)
    parser.add_argument("--seed-step", type=int, default=1)
    parser.add_argument("--run-root", type=str, default="runs")
    parser.add_argument("--per-run-logs", action="store_true", help="Keep trial logs for every seed.")
    parser.add_argument("--no-aggregate-plots", action="store_true")
    args = parser.parse_args(argv)
    report = run_monte_carlo(
        Path(args.scenario),
        n=args.n,
        seed_mode=args.seed_mode,
        seed_start=args.seed_start,
        seed_step=args.seed_step,
        run_root=Path(args.run_root),
        per_run_logs=args.per_run_logs,
        aggregate_plots=not args.no_aggregate_plots,
    )
    print(f"Saved Monte Carlo outputs to {report['mc_dir']}")


if __name__ == "__main__":
    main()
