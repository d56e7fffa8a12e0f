"""Headless runs of JSON scenario files.

A scenario file names a station layout and any ``SimConfig`` overrides::

    {"name": "square", "rng_seed": 7, "stations": [["A", 0, 0], ...],
     "target_x_m": 700.0, "solver": {"max_iter": 50}}
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sim.run_demo import run_demo
from sim.validation.metrics import metrics_from_trial_npz, sanitize_json
from tdoa_twin.config import SimConfig, SolverConfig

REQUIRED_KEYS = ("name", "rng_seed", "stations")

logger = logging.getLogger(__name__)


def run_scenarios(
    scenario_paths: list[Path],
    *,
    run_root: Path = Path("runs"),
    save_figs: bool = True,
) -> list[dict[str, Any]]:
    """Run each scenario into its own directory under ``run_root``.

    Every run gets a ``summary.json``; ``run_root/summary.csv`` collects one
    row per scenario.
    """

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    run_root.mkdir(parents=True, exist_ok=True)
    summaries: list[dict[str, Any]] = []
    for path in scenario_paths:
        scenario = load_scenario(path)
        cfg = build_sim_config(scenario)
        run_dir = run_root / f"{timestamp}_{slugify(scenario['name'])}"
        logger.info("Running scenario '%s' (%d trials, %d stations)", scenario["name"], cfg.n_trials, len(cfg.stations))
        trial_csv = run_demo(cfg, run_dir, save_figs=save_figs)
        summary = {
            "scenario": str(scenario["name"]),
            "run_dir": str(run_dir),
            "n_trials": cfg.n_trials,
            **metrics_from_trial_npz(trial_csv.with_suffix(".npz")),
        }
        (run_dir / "summary.json").write_text(json.dumps(sanitize_json(summary), indent=2, allow_nan=False))
        summaries.append(summary)

    if summaries:
        csv_path = run_root / "summary.csv"
        write_header = not csv_path.exists()
        with csv_path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=list(summaries[0]))
            if write_header:
                writer.writeheader()
            writer.writerows(summaries)
    return summaries


def load_scenario(path: Path) -> dict[str, Any]:
    scenario = json.loads(Path(path).read_text())
    missing = [key for key in REQUIRED_KEYS if key not in scenario]
    if missing:
        raise ValueError(f"Scenario {path} missing required keys: {missing}")
    return scenario


def build_sim_config(scenario: dict[str, Any]) -> SimConfig:
    """Map scenario keys onto ``SimConfig``; a ``solver`` block maps onto ``SolverConfig``."""

    name = scenario.get("name", "<unnamed>")
    overrides = {key: value for key, value in scenario.items() if key not in ("name", "solver")}
    _reject_unknown(overrides, SimConfig, name)
    solver_overrides = dict(scenario.get("solver") or {})
    _reject_unknown(solver_overrides, SolverConfig, name)
    overrides["stations"] = tuple(tuple(entry) for entry in overrides["stations"])
    return SimConfig(solver=SolverConfig(**solver_overrides), **overrides)


def _reject_unknown(overrides: dict[str, Any], cls: type, scenario_name: str) -> None:
    unknown = sorted(set(overrides) - {field.name for field in fields(cls)})
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} override(s) {unknown} in scenario '{scenario_name}'")


def slugify(name: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in str(name).strip().lower())
