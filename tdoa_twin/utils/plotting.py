"""Plotting utilities for TDOA twin run outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib
import numpy as np

from tdoa_twin.models import Station, TrialLog

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt  # noqa: E402


def save_run_plots(trials: list[TrialLog], stations: Sequence[Station], out_dir: str | Path) -> Path:
    """Save geometry, convergence and error plots for a run."""

    output_dir = Path(out_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    _plot_geometry(trials, stations, output_dir / "geometry.png")
    if trials:
        _plot_convergence(trials[0].solution.correction_norms_m, output_dir / "convergence.png")
    if len(trials) > 1:
        errors = np.array([trial.error_m for trial in trials], dtype=float)
        _plot_error_histogram(errors, output_dir / "error_histogram.png")
    return output_dir


def _plot_geometry(trials: list[TrialLog], stations: Sequence[Station], path: Path) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    coords = np.array([station.pos_m for station in stations], dtype=float)
    ax.scatter(coords[:, 0], coords[:, 1], marker="^", s=80, color="tab:blue", label="Stations")
    for station in stations:
        ax.annotate(station.station_id, (station.x_m, station.y_m), textcoords="offset points", xytext=(5, 5))
    if trials:
        truth = trials[0].truth
        estimates = np.array([trial.solution.position.as_array() for trial in trials], dtype=float)
        ax.scatter(estimates[:, 0], estimates[:, 1], marker=".", s=12, color="tab:orange", label="Estimates")
        ax.scatter([truth.x_m], [truth.y_m], marker="*", s=150, color="tab:red", label="Truth")
    ax.set_title("Station Geometry")
    ax.set_xlabel("x (m)")
    ax.set_ylabel("y (m)")
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def _plot_convergence(norms_m: Sequence[float], path: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    if norms_m:
        iterations = np.arange(1, len(norms_m) + 1)
        ax.semilogy(iterations, np.maximum(np.array(norms_m, dtype=float), 1e-16), marker="o", markersize=3)
    ax.set_title("Gauss-Newton Correction Norm")
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Correction (m)")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def _plot_error_histogram(errors_m: np.ndarray, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    finite = errors_m[np.isfinite(errors_m)]
    ax.hist(finite, bins=30, color="tab:green", alpha=0.8)
    ax.set_title("Position Error Distribution")
    ax.set_xlabel("Position error (m)")
    ax.set_ylabel("Trials")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def save_monte_carlo_plots(trials: list[TrialLog], errors_m: np.ndarray, out_dir: str | Path) -> Path:
    """Save the pooled error histogram and the estimate scatter about truth."""

    output_dir = Path(out_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    _plot_error_histogram(np.asarray(errors_m, dtype=float), output_dir / "hist_pos_err_m.png")
    offsets = np.array(
        [trial.solution.position.as_array() - trial.truth.as_array() for trial in trials],
        dtype=float,
    ).reshape(-1, 2)
    offsets = offsets[np.isfinite(offsets).all(axis=1)]
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(offsets[:, 0], offsets[:, 1], marker=".", s=8, alpha=0.5, color="tab:orange")
    ax.axhline(0.0, color="k", linewidth=0.5)
    ax.axvline(0.0, color="k", linewidth=0.5)
    ax.set_title("Estimate Offset From Truth")
    ax.set_xlabel("dx (m)")
    ax.set_ylabel("dy (m)")
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_dir / "scatter_offset_m.png", dpi=150)
    plt.close(fig)
    return output_dir
