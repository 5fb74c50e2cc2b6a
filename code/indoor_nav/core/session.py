import logging
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from .floor_plan import FloorPlan, NamedNode
from .graph import ObstacleGraph
from .location import LocationFeed
from .planning import PathPlanner, RoutePath


class SessionState(str, Enum):
    IDLE = 'idle'
    PLANNING = 'planning'
    READY = 'ready'
    UNREACHABLE = 'unreachable'


class WatchedValue:
    """A value that notifies watchers whenever it is replaced."""
    def __init__(self, value: Any = None):
        self._value = value
        self._watchers: List[Callable[[Any], None]] = []

    @property
    def value(self) -> Any:
        return self._value

    def watch(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        self._watchers.append(callback)

        def unwatch():
            if callback in self._watchers:
                self._watchers.remove(callback)
        return unwatch

    def set(self, value: Any) -> None:
        if value is self._value:
            return
        self._value = value
        for callback in list(self._watchers):
            callback(value)


class NavigationSession:
    """
    This class ties the selected start/end nodes, the obstacle graph and the planner together.

    Every selection change replans from scratch. Each plan carries a generation
    number and only the newest generation is ever published, so a slow plan
    finishing after a newer one is dropped.
    """
    def __init__(self,
                 floor_plan: FloorPlan,
                 graph: ObstacleGraph,
                 planner: Optional[PathPlanner] = None,
                 executor: Optional[Executor] = None):
        self.floor_plan = floor_plan
        self.graph = graph
        self.planner = planner or PathPlanner()
        self.executor = executor
        self.logger = logging.getLogger(self.__class__.__name__)

        self._lock = threading.RLock()
        self._generation = 0
        self._start: Optional[NamedNode] = None
        self._end: Optional[NamedNode] = None
        self._current_location = None
        self.state = SessionState.IDLE
        self.last_error: Optional[BaseException] = None
        self.path_changed = WatchedValue(None)

    # Selection
    @property
    def selected_start(self) -> Optional[NamedNode]:
        return self._start

    @property
    def selected_end(self) -> Optional[NamedNode]:
        return self._end

    @property
    def current_location(self):
        return self._current_location

    def select_start(self, node: Optional[NamedNode]) -> None:
        with self._lock:
            self._start = node
            self._selection_changed()

    def select_end(self, node: Optional[NamedNode]) -> None:
        with self._lock:
            self._end = node
            self._selection_changed()

    def select(self, start: Optional[NamedNode], end: Optional[NamedNode]) -> None:
        """Set both endpoints with a single replan"""
        with self._lock:
            self._start = start
            self._end = end
            self._selection_changed()

    def clear_start(self) -> None:
        self.select_start(None)

    def clear_end(self) -> None:
        self.select_end(None)

    def clear(self) -> None:
        self.select(None, None)

    def update_current_location(self, position: Tuple[float, float]) -> None:
        """Record the user's position; pre-selects the nearest node as start if none is chosen."""
        with self._lock:
            self._current_location = position
            if self._start is None:
                nearest = self.floor_plan.nearest_node(position)
                self.logger.debug(f"Pre-selecting nearest node {nearest.name!r} as start")
                self.select_start(nearest)

    def follow(self, feed: LocationFeed) -> Callable[[], None]:
        """Receive positions from a location feed; returns the unsubscribe function."""
        return feed.subscribe(self.update_current_location)

    # Results
    def current_path(self) -> Optional[RoutePath]:
        """The latest route, RoutePath.none() when unreachable, None while idle or planning"""
        with self._lock:
            if self.state in (SessionState.READY, SessionState.UNREACHABLE):
                return self.path_changed.value
            return None

    # Planning
    def _selection_changed(self) -> None:
        self._generation += 1
        generation = self._generation

        if self._start is None or self._end is None:
            self.state = SessionState.IDLE
            self.path_changed.set(None)
            return

        self.state = SessionState.PLANNING
        start, end = self._start, self._end
        self.logger.info(f"Planning route {start.name!r} -> {end.name!r} (generation {generation})")

        if self.executor is None:
            self._deliver(generation, self.planner.route(self.graph, start, end))
            return

        future = self.executor.submit(self.planner.route, self.graph, start, end)
        future.add_done_callback(lambda f: self._on_plan_done(generation, f))

    def _on_plan_done(self, generation: int, future: Future) -> None:
        try:
            path = future.result()
        except Exception as e:
            with self._lock:
                if generation != self._generation:
                    return
                self.logger.error(f"Planning failed for generation {generation}: {e}")
                self.last_error = e
                self.state = SessionState.IDLE
                self.path_changed.set(None)
            return
        self._deliver(generation, path)

    def _deliver(self, generation: int, path: RoutePath) -> None:
        with self._lock:
            if generation != self._generation:
                self.logger.debug(f"Discarding superseded plan (generation {generation}, "
                                  f"current {self._generation})")
                return
            self.last_error = None
            self.state = SessionState.READY if path.found else SessionState.UNREACHABLE
            if not path.found:
                self.logger.info("No route available")
            self.path_changed.set(path)
