"""
Command Line Interface for the navigation engine.
Loads a floor plan, builds its obstacle graph and answers route queries.
"""

import argparse
import logging
import sys
from typing import Any, Dict, Optional

from ..cfg import NavigationConfig
from ..core import FloorPlan, LocalProjection, NavigationError, ObstacleGraph, PathPlanner
from ..core.floor_plan import exterior_ring
from ..utils.io_utils import load_floor_plan_records, save_json, save_route_to_csv


def create_parser():
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        description="Indoor navigation engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        %(prog)s route venue.json --from "Main Entrance" --to "Pantry" --override graph.buffer_radius=1.0
        %(prog)s graph venue.json --override graph.strategy=waypoint
        %(prog)s search venue.json lab
        """
    )
    subparsers = parser.add_subparsers(dest='command', help='Command')

    route_parser = subparsers.add_parser('route', help='Find a route between two named nodes')
    route_parser.add_argument('plan', help='JSON file with floor plan records')
    route_parser.add_argument('--from', dest='start', required=True, help='Start node name')
    route_parser.add_argument('--to', dest='end', required=True, help='Destination node name')
    route_parser.add_argument('--output', help='Write the route to this CSV file')
    _add_config_arguments(route_parser)

    graph_parser = subparsers.add_parser('graph', help='Build the obstacle graph and report its size')
    graph_parser.add_argument('plan', help='JSON file with floor plan records')
    graph_parser.add_argument('--output', help='Write the graph summary to this JSON file')
    _add_config_arguments(graph_parser)

    search_parser = subparsers.add_parser('search', help='List nodes whose name contains a query')
    search_parser.add_argument('plan', help='JSON file with floor plan records')
    search_parser.add_argument('query', help='Case-insensitive name fragment')
    _add_config_arguments(search_parser)

    return parser


def _add_config_arguments(parser):
    parser.add_argument('--config', help='YAML file merged over the default configuration')
    parser.add_argument('--override', action='append',
                        help='Override config parameter using dot notation (e.g., graph.buffer_radius=1.0)')


def parse_overrides(override_args) -> Dict[str, Any]:
    """Parse CLI override arguments into parameter dictionary"""
    overrides = {}

    if not override_args:
        return overrides

    for override in override_args:
        if '=' not in override:
            continue

        key, value = override.split('=', 1)

        try:
            if value.lower() in ('true', 'false'):
                value = value.lower() == 'true'
            elif value.lower() in ('null', 'none'):
                value = None
            elif '.' in value:
                value = float(value)
            else:
                value = int(value)
        except ValueError:
            pass  # Keep as string

        overrides[key] = value

    return overrides


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None):
    """Setup root logging handlers."""
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def load_floor_plan(path: str, config: NavigationConfig) -> FloorPlan:
    """Load records and build the floor plan, projecting geographic input if configured"""
    records = load_floor_plan_records(path)
    projection = None
    if config.coordinates.project_geographic:
        coordinates = []
        for record in records:
            geometry_type = record.geometry.get('type')
            coords = record.geometry.get('coordinates')
            try:
                if geometry_type == 'Point':
                    coordinates.append((float(coords[0]), float(coords[1])))
                elif geometry_type == 'Polygon':
                    coordinates.extend((float(c[0]), float(c[1])) for c in exterior_ring(coords))
            except (TypeError, IndexError, KeyError, ValueError):
                # Left for FloorPlan.from_records to report with the record index
                continue
        if coordinates:
            projection = LocalProjection.from_coordinates(coordinates)
    return FloorPlan.from_records(records, projection=projection)


def run_route(args, config: NavigationConfig) -> int:
    floor_plan = load_floor_plan(args.plan, config)
    start = floor_plan.node_named(args.start)
    end = floor_plan.node_named(args.end)
    for label, wanted, node in (('start', args.start, start), ('destination', args.end, end)):
        if node is None:
            print(f"Error: no {label} node matching {wanted!r}")
            return 1

    graph = ObstacleGraph.from_config(floor_plan, config.graph)
    route = PathPlanner().route(graph, start, end)

    if not route.found:
        print(f"No route available from {start.name} to {end.name}")
    else:
        print(f"Route from {start.name} to {end.name}: {len(route)} points, length {route.length:.2f}")
        for point, node in zip(route.points, route.nodes):
            label = node.name if node is not None else '(corner)'
            print(f"  {point.x:10.3f} {point.y:10.3f}  {label}")

    if args.output:
        save_route_to_csv(route, args.output)
    return 0


def run_graph(args, config: NavigationConfig) -> int:
    floor_plan = load_floor_plan(args.plan, config)
    graph = ObstacleGraph.from_config(floor_plan, config.graph)
    summary = {
        'strategy': graph.strategy.value,
        'buffer_radius': graph.buffer_radius,
        'nodes': len(floor_plan.nodes()),
        'obstacles': len(floor_plan.obstacle_polygons()),
        'vertices': graph.vertex_count,
        'edges': graph.edge_count,
    }
    for key, value in summary.items():
        print(f"{key}: {value}")
    if args.output:
        save_json(summary, args.output)
    return 0


def run_search(args, config: NavigationConfig) -> int:
    floor_plan = load_floor_plan(args.plan, config)
    matches = floor_plan.search(args.query)
    if not matches:
        print(f"No nodes matching {args.query!r}")
    for node in matches:
        location = f" ({node.location})" if node.location else ''
        print(f"{node.name}{location}: {node.position.x:.3f}, {node.position.y:.3f}")
    return 0


def main(argv=None):
    """Main CLI entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        overrides = parse_overrides(getattr(args, 'override', None))
        config = NavigationConfig.from_params(args.config, **overrides)
        setup_logging(config.logging.level, config.logging.log_file)

        if args.command == 'route':
            return run_route(args, config)
        elif args.command == 'graph':
            return run_graph(args, config)
        elif args.command == 'search':
            return run_search(args, config)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1
    except (NavigationError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
