"""
Configuration validation helpers.

Each check raises ValueError with the offending value.
"""

import logging
from typing import Optional


VALID_STRATEGIES = ['waypoint', 'obstacle_vertex']
VALID_UNITS = ['meters']


def validate_strategy(strategy: str) -> str:
    """Validate graph strategy parameter"""
    if strategy not in VALID_STRATEGIES:
        raise ValueError(f"strategy must be one of {VALID_STRATEGIES}, got {strategy}")
    return strategy


def validate_buffer_radius(buffer_radius: float) -> float:
    """Validate obstacle clearance"""
    if isinstance(buffer_radius, bool) or not isinstance(buffer_radius, (int, float)):
        raise ValueError(f"buffer_radius must be a number, got {buffer_radius!r}")
    if buffer_radius < 0:
        raise ValueError(f"buffer_radius must be non-negative, got {buffer_radius}")
    return float(buffer_radius)


def validate_n_jobs(n_jobs: int) -> int:
    if not isinstance(n_jobs, int) or n_jobs == 0 or n_jobs < -1:
        raise ValueError(f"n_jobs must be a positive integer or -1, got {n_jobs}")
    return n_jobs


def validate_units(units: str) -> str:
    if units not in VALID_UNITS:
        raise ValueError(f"units must be one of {VALID_UNITS}, got {units}")
    return units


def validate_log_level(level: str) -> str:
    if not isinstance(logging.getLevelName(str(level).upper()), int):
        raise ValueError(f"Unknown log level: {level}")
    return str(level).upper()


def validate_log_file(log_file: Optional[str]) -> Optional[str]:
    if log_file is not None and (not isinstance(log_file, str) or not log_file):
        raise ValueError("log_file must be a non-empty string or null")
    return log_file
