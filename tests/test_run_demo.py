from pathlib import Path

from tdoa_twin.config import SimConfig
from tdoa_twin.models import SolveMethod
from sim.run_demo import main, run_demo, run_trials


def test_run_trials_locates_target_with_default_noise() -> None:
    trials = run_trials(SimConfig(n_trials=20))

    assert len(trials) == 20
    for trial in trials:
        assert trial.solution.method is SolveMethod.GAUSS_NEWTON
        assert trial.solution.converged
        assert trial.error_m < 5.0


def test_run_demo_is_deterministic_per_seed(tmp_path: Path) -> None:
    cfg = SimConfig(n_trials=5, rng_seed=123)

    first = run_demo(cfg, tmp_path / "a", save_figs=False)
    second = run_demo(cfg, tmp_path / "b", save_figs=False)

    assert first.read_bytes() == second.read_bytes()
    assert (tmp_path / "a" / "trial_logs.npz").exists()


def test_run_demo_saves_plots(tmp_path: Path) -> None:
    run_demo(SimConfig(n_trials=4), tmp_path, save_figs=True)

    assert (tmp_path / "geometry.png").exists()
    assert (tmp_path / "convergence.png").exists()
    assert (tmp_path / "error_histogram.png").exists()


def test_run_demo_main_cli(tmp_path: Path, capsys) -> None:
    main(["--out-dir", str(tmp_path), "--run-name", "demo", "--rng-seed", "7", "--trials", "2", "--no-plots"])

    assert (tmp_path / "demo" / "trial_logs.csv").exists()
    assert "Saved outputs" in capsys.readouterr().out
