"""Post-fit residual consistency test."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.stats import chi2

from tdoa_twin.models import TdoaSolution

NUM_STATES = 2


@dataclass(frozen=True)
class ResidualCheck:
    """Chi-square consistency of the post-fit range-difference residuals."""

    t_stat: float
    dof: int
    threshold: float
    passed: bool


def chi2_threshold(dof: int, p: float) -> float:
    """Return chi-square threshold for the given probability and dof."""

    if dof <= 0:
        return float("inf")
    return float(chi2.ppf(p, dof))


def check_residuals(solution: TdoaSolution, sigma_m: float, alpha: float = 0.01) -> ResidualCheck:
    """Test the residuals against their expected spread ``sigma_m``.

    With three stations the fit is exactly determined (``dof == 0``) and the
    check can never pass.
    """

    sigma = max(float(sigma_m), 1e-3)
    terms = [(float(residual) / sigma) ** 2 for residual in solution.residuals_m.values()]
    t_stat = float(np.sum(terms)) if terms else float("nan")
    dof = len(terms) - NUM_STATES
    threshold = chi2_threshold(dof, 1.0 - alpha)
    passed = bool(dof > 0 and np.isfinite(t_stat) and t_stat <= threshold)
    return ResidualCheck(t_stat=t_stat, dof=dof, threshold=threshold, passed=passed)
