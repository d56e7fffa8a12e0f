"""Integrity checks."""

from tdoa_twin.integrity.residuals import ResidualCheck, check_residuals, chi2_threshold

__all__ = ["ResidualCheck", "check_residuals", "chi2_threshold"]
