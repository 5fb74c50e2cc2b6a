"""
Process-wide user location feed.

The platform location service pushes fixes in with publish(); sessions receive
them through subscribe() instead of reaching out to a global themselves.
"""

import logging
import threading
from typing import Callable, List, Optional, Tuple

from .geometry import Point


LocationCallback = Callable[[Point], None]


class LocationFeed:
    """Latest known user position with an explicit start/stop lifecycle."""
    def __init__(self):
        self._lock = threading.Lock()
        self._running = False
        self._latest: Optional[Point] = None
        self._subscribers: List[LocationCallback] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def latest(self) -> Optional[Point]:
        return self._latest

    def start(self) -> None:
        with self._lock:
            self._running = True
        self.logger.info("Location updates started")

    def stop(self) -> None:
        with self._lock:
            self._running = False
            self._latest = None
        self.logger.info("Location updates stopped")

    def subscribe(self, callback: LocationCallback) -> Callable[[], None]:
        """Register a callback for new fixes; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)
        return unsubscribe

    def publish(self, position: Tuple[float, float]) -> None:
        """Record a new fix and forward it to subscribers. Ignored while stopped."""
        with self._lock:
            if not self._running:
                self.logger.debug("Ignoring location fix while stopped")
                return
            self._latest = Point(float(position[0]), float(position[1]))
            subscribers = list(self._subscribers)
            latest = self._latest
        for callback in subscribers:
            callback(latest)


_feed: Optional[LocationFeed] = None
_feed_lock = threading.Lock()


def get_location_feed() -> LocationFeed:
    """The shared feed for this process"""
    global _feed
    with _feed_lock:
        if _feed is None:
            _feed = LocationFeed()
        return _feed
