"""
Utility modules.

This module provides:
- io_utils: Floor-plan record loading, JSON helpers and route export
"""

from .io_utils import (
    load_json,
    load_floor_plan_records,
    save_json,
    route_to_dataframe,
    save_route_to_csv,
    ensure_serializable
)

__all__ = [
    'load_json',
    'load_floor_plan_records',
    'save_json',
    'route_to_dataframe',
    'save_route_to_csv',
    'ensure_serializable'
]
