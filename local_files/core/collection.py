"""Append-only collection filled by background scans."""

import logging
import threading
from typing import Callable, Iterator, List, Optional


class ResultCollection:
    """
    Thread-safe, append-only list of discovered uris.

    The scanner that created the collection is its only writer (append/close).
    Everyone else reads: snapshot(), iteration, len(), subscribe() and wait().
    Iteration always goes over a snapshot, so it is safe while a scan is running.
    """

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self._items: List[str] = []
        self._seen = set()
        self._subscribers: List[Callable[[str], None]] = []
        self._lock = threading.Lock()
        self._complete = threading.Event()

    def append(self, uri: str) -> bool:
        """
        Add a uri unless it's already present.

        Returns:
            True if the uri was added
        """
        with self._lock:
            if uri in self._seen:
                return False
            self._seen.add(uri)
            self._items.append(uri)
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(uri)
            except Exception as e:
                self.logger.error(f"Subscriber failed for {uri}: {e}")
        return True

    def close(self) -> None:
        """Mark the collection complete, no more uris will be added."""
        self._complete.set()

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """
        Call callback for every uri, existing ones first, then each new one.

        Args:
            callback: Called with each uri

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            existing = list(self._items)
            self._subscribers.append(callback)

        for uri in existing:
            callback(uri)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def snapshot(self) -> List[str]:
        """Copy of the uris found so far."""
        with self._lock:
            return list(self._items)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the collection is complete.

        Returns:
            True if complete, False if timeout passed first
        """
        return self._complete.wait(timeout)

    @property
    def is_complete(self) -> bool:
        return self._complete.is_set()

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, uri: str) -> bool:
        with self._lock:
            return uri in self._seen

    def __repr__(self) -> str:
        state = 'complete' if self.is_complete else 'scanning'
        return f"<ResultCollection {len(self)} uris, {state}>"
