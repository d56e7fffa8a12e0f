"""Utilities for TDOA twin tools.

NOTE: Keep this package lightweight.
Avoid importing matplotlib at import time; plotting helpers live in
``tdoa_twin.utils.plotting`` and are imported on demand.
"""

from tdoa_twin.utils.logging import get_logger

__all__ = ["get_logger"]
