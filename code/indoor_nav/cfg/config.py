"""
Main configuration classes for the navigation engine.

Provides dataclass-based configuration with validation.
Default values live in default.yaml, not in Python code.
"""

import os
import yaml
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .schema import (
    validate_strategy,
    validate_buffer_radius,
    validate_n_jobs,
    validate_units,
    validate_log_level,
    validate_log_file
)


DEFAULTS_PATH = os.path.join(os.path.dirname(__file__), 'default.yaml')


@dataclass
class GraphConfig:
    """Obstacle graph construction settings"""
    strategy: str
    buffer_radius: float
    n_jobs: int = 1

    def __post_init__(self):
        self.strategy = validate_strategy(self.strategy)
        self.buffer_radius = validate_buffer_radius(self.buffer_radius)
        self.n_jobs = validate_n_jobs(self.n_jobs)


@dataclass
class CoordinateConfig:
    """Coordinate handling for floor-plan input"""
    units: str
    project_geographic: bool = False

    def __post_init__(self):
        self.units = validate_units(self.units)
        self.project_geographic = bool(self.project_geographic)


@dataclass
class LoggingConfig:
    level: str
    log_file: Optional[str] = None

    def __post_init__(self):
        self.level = validate_log_level(self.level)
        self.log_file = validate_log_file(self.log_file)


@dataclass
class NavigationConfig:
    """Top-level navigation configuration"""
    graph: GraphConfig
    coordinates: CoordinateConfig
    logging: LoggingConfig

    @classmethod
    def from_params(cls, base_config_path: Optional[str] = None, **params) -> 'NavigationConfig':
        """
        Create configuration from YAML and parameter overrides.

        Args:
            base_config_path: Optional YAML file merged over default.yaml
            **params: Parameters to override using dot notation keys

        Example:
            config = NavigationConfig.from_params(
                'venue.yaml',
                **{
                    'graph.strategy': 'waypoint',
                    'graph.buffer_radius': 1.0,
                }
            )
        """
        with open(DEFAULTS_PATH, 'r') as f:
            defaults = yaml.safe_load(f)

        if base_config_path:
            if not os.path.exists(base_config_path):
                raise FileNotFoundError(f"Config file not found: {base_config_path}")
            with open(base_config_path, 'r') as f:
                custom = yaml.safe_load(f) or {}
                defaults = cls._deep_update(defaults, custom)

        # Apply parameter overrides using dot notation
        if params:
            nested_overrides = cls._params_to_nested_dict(params)
            defaults = cls._deep_update(defaults, nested_overrides)

        return cls(
            graph=GraphConfig(**defaults['graph']),
            coordinates=CoordinateConfig(**defaults['coordinates']),
            logging=LoggingConfig(**defaults['logging'])
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def _params_to_nested_dict(params: Dict[str, Any]) -> Dict[str, Any]:
        """Convert dot notation parameters to nested dictionary"""
        result = {}
        for key, value in params.items():
            keys = key.split('.')
            current = result
            for k in keys[:-1]:
                if k not in current:
                    current[k] = {}
                current = current[k]
            current[keys[-1]] = value
        return result

    @staticmethod
    def _deep_update(base_dict: Dict, update_dict: Dict) -> Dict:
        """Deep update dictionary, handling nested structures"""
        result = base_dict.copy()
        for key, value in update_dict.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = NavigationConfig._deep_update(result[key], value)
            else:
                result[key] = value
        return result
