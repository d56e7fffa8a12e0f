"""Runnable simulation and validation tools for the TDOA twin."""
