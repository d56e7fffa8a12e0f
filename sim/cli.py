"""Unified CLI entrypoint.

Run modes:
  1) solve       one measurement set from JSON files, result printed as JSON
  2) demo        simulated run with logs and plots
  3) scenario    one or more JSON scenarios (headless)
  4) monte-carlo many-seed sweep of one scenario
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from tdoa_twin.config import SimConfig, SolverConfig
from tdoa_twin.errors import TdoaError
from tdoa_twin.models import MeasurementKind, Position, Station
from tdoa_twin.utils import get_logger


def _cmd_solve(args: argparse.Namespace) -> None:
    from tdoa_twin.solver import solve

    stations = _load_stations(Path(args.stations))
    measurements = json.loads(Path(args.measurements).read_text(encoding="utf-8"))
    if not isinstance(measurements, (dict, list)):
        raise SystemExit("Measurements file must hold a JSON object (pair key -> value) or list.")
    initial = Position(x_m=args.initial[0], y_m=args.initial[1]) if args.initial else None
    config = SolverConfig(max_iter=args.max_iter, tol_m=args.tol_m, missing_policy=args.missing)
    try:
        solution = solve(
            measurements,
            stations,
            initial,
            kind=MeasurementKind(args.kind),
            reference_id=args.reference,
            config=config,
        )
    except (TdoaError, ValueError) as exc:
        raise SystemExit(f"Solve failed: {exc}") from exc
    payload = {
        "x_m": solution.position.x_m,
        "y_m": solution.position.y_m,
        "converged": solution.converged,
        "iterations": solution.iterations,
        "method": solution.method.value,
        "reference_id": solution.reference_id,
        "residuals_m": dict(solution.residuals_m),
    }
    print(json.dumps(payload, indent=2))


def _cmd_demo(args: argparse.Namespace) -> None:
    from sim.run_demo import run_demo

    overrides: dict[str, Any] = {"n_trials": args.trials}
    if args.rng_seed is not None:
        overrides["rng_seed"] = args.rng_seed
    cfg = SimConfig(**overrides)
    run_name = args.run_name or datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_path = run_demo(cfg, Path(args.out_dir) / run_name, save_figs=not args.no_plots)
    print(f"Saved outputs to {log_path.parent}")


def _cmd_scenario(args: argparse.Namespace) -> None:
    from sim.scenario_runner import run_scenarios

    scenarios = [Path(p) for p in (args.scenario or [])]
    if not scenarios:
        raise SystemExit("No scenarios provided. Use --scenario path.json (repeatable).")

    run_scenarios(
        scenarios,
        run_root=Path(args.run_root),
        save_figs=not args.no_plots,
    )


def _cmd_monte_carlo(args: argparse.Namespace) -> None:
    from sim.validation.monte_carlo import run_monte_carlo

    report = run_monte_carlo(
        Path(args.scenario),
        n=args.n,
        run_root=Path(args.run_root),
        aggregate_plots=not args.no_plots,
    )
    print(f"Saved Monte Carlo outputs to {report['mc_dir']}")


def _load_stations(path: Path) -> list[Station]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise SystemExit("Stations file must hold a JSON list.")
    stations: list[Station] = []
    for entry in raw:
        if isinstance(entry, dict):
            try:
                stations.append(Station(station_id=str(entry["id"]), x_m=float(entry["x"]), y_m=float(entry["y"])))
            except KeyError as exc:
                raise SystemExit(f"Station entry {entry!r} is missing {exc}.") from exc
        elif isinstance(entry, list) and len(entry) == 3:
            stations.append(Station(station_id=str(entry[0]), x_m=float(entry[1]), y_m=float(entry[2])))
        else:
            raise SystemExit(f"Unrecognised station entry {entry!r}; use {{id, x, y}} or [id, x, y].")
    return stations


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tdoa-twin", description="TDOA twin unified runner")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level for the tdoa_twin logger",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    solve = sub.add_parser("solve", help="Solve one measurement set")
    solve.add_argument("--stations", required=True, help="JSON list of stations ({id, x, y} or [id, x, y])")
    solve.add_argument("--measurements", required=True, help="JSON object of pair key -> value, or ordered list")
    solve.add_argument("--kind", choices=[kind.value for kind in MeasurementKind], default=MeasurementKind.TIME_S.value)
    solve.add_argument("--reference", type=str, default=None, help="Reference station id (default: first station)")
    solve.add_argument("--initial", type=float, nargs=2, metavar=("X_M", "Y_M"), default=None)
    solve.add_argument("--max-iter", type=int, default=SolverConfig.max_iter)
    solve.add_argument("--tol-m", type=float, default=SolverConfig.tol_m)
    solve.add_argument("--missing", choices=["raise", "zero"], default="raise", help="Policy for absent pairs")
    solve.set_defaults(func=_cmd_solve)

    demo = sub.add_parser("demo", help="Run a simulated demo with default configuration")
    demo.add_argument("--out-dir", type=str, default="out")
    demo.add_argument("--run-name", type=str, default=None)
    demo.add_argument("--rng-seed", type=int, default=None)
    demo.add_argument("--trials", type=int, default=1)
    demo.add_argument("--no-plots", action="store_true", help="Skip saving plot PNGs")
    demo.set_defaults(func=_cmd_demo)

    scen = sub.add_parser("scenario", help="Run one or more JSON scenarios (headless)")
    scen.add_argument("--scenario", action="append", help="Path to a scenario JSON file (repeatable)")
    scen.add_argument("--run-root", type=str, default="runs", help="Root folder for scenario outputs")
    scen.add_argument("--no-plots", action="store_true", help="Skip saving plot PNGs")
    scen.set_defaults(func=_cmd_scenario)

    mc = sub.add_parser("monte-carlo", help="Run a many-seed sweep of one scenario")
    mc.add_argument("--scenario", type=str, required=True)
    mc.add_argument("--n", type=int, default=50)
    mc.add_argument("--run-root", type=str, default="runs")
    mc.add_argument("--no-plots", action="store_true", help="Skip aggregate histograms")
    mc.set_defaults(func=_cmd_monte_carlo)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    get_logger(level=args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
