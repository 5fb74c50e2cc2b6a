"""
I/O utilities: loading floor-plan records from JSON and exporting routes with pandas.
"""

import os
import json
import logging
from typing import Dict, List

import numpy as np
import pandas as pd

from ..core.errors import MalformedFloorPlanError
from ..core.floor_plan import FloorPlanRecord
from ..core.geometry import distance
from ..core.planning import RoutePath

logger = logging.getLogger(__name__)


def load_json(file_path: str):
    """Load JSON data from a file."""
    with open(file_path, 'r') as f:
        return json.load(f)


def load_floor_plan_records(file_path: str) -> List[FloorPlanRecord]:
    """
    Load (kind, geometry) records from a JSON file.

    The file holds either a list of records or an object with a "records" list.
    """
    try:
        data = load_json(file_path)
    except json.JSONDecodeError as e:
        raise MalformedFloorPlanError(f"Error decoding JSON from file {file_path}: {e}")

    if isinstance(data, dict):
        data = data.get('records')
    if not isinstance(data, list):
        raise MalformedFloorPlanError(f"Expected a list of records in {file_path}")

    records = [FloorPlanRecord.from_dict(item) for item in data]
    logger.info(f"Loaded {len(records)} floor plan records from {file_path}")
    return records


def save_json(data: Dict, file_path: str, indent: int = 4):
    """Save data to a JSON file."""
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(file_path, 'w') as f:
        json.dump(ensure_serializable(data), f, indent=indent)


def route_to_dataframe(route: RoutePath) -> pd.DataFrame:
    """One row per route point with per-segment and cumulative distances."""
    columns = ['step', 'x', 'y', 'name', 'segment_length', 'cumulative_length']
    if not route.found:
        return pd.DataFrame(columns=columns)

    segment_lengths = [0.0] + [distance(a, b) for a, b in zip(route.points, route.points[1:])]
    df = pd.DataFrame({
        'step': np.arange(len(route.points)),
        'x': [p.x for p in route.points],
        'y': [p.y for p in route.points],
        'name': [node.name if node is not None else None for node in route.nodes],
        'segment_length': segment_lengths,
    })
    df['cumulative_length'] = df['segment_length'].cumsum()
    return df[columns]


def save_route_to_csv(route: RoutePath, file_path: str) -> None:
    """Save a route to CSV; a not-found route writes only the header."""
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df = route_to_dataframe(route)
    df.to_csv(file_path, index=False)
    if route.found:
        logger.info(f"Saved route with {len(df)} points to {file_path}")
    else:
        logger.warning(f"No route to save; wrote empty {file_path}")


def ensure_serializable(obj):
    """Ensure object is JSON serializable."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {k: ensure_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [ensure_serializable(i) for i in obj]
    elif isinstance(obj, tuple):
        return tuple(ensure_serializable(i) for i in obj)
    return obj
