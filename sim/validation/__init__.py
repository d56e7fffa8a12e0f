"""Validation helpers for repeated simulation runs.

``sim.validation.monte_carlo`` is imported on demand; it depends on the
scenario runner, which itself uses these metrics.
"""

from sim.validation.metrics import metrics_from_trial_dicts, metrics_from_trial_npz, sanitize_json

__all__ = [
    "metrics_from_trial_dicts",
    "metrics_from_trial_npz",
    "sanitize_json",
]
