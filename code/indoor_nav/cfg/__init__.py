"""
Configuration module for navigation settings.

Provides:
- NavigationConfig: Dataclass-based configuration with YAML loading
- GraphConfig: Obstacle graph construction settings
- CoordinateConfig: Coordinate handling for floor-plan input
- LoggingConfig: Log level and optional log file
"""

from .config import (
    NavigationConfig,
    GraphConfig,
    CoordinateConfig,
    LoggingConfig
)

__all__ = [
    'NavigationConfig',
    'GraphConfig',
    'CoordinateConfig',
    'LoggingConfig'
]
