"""Short-lived cache of raw probe output."""

import logging
import threading
from typing import Any, Dict, Optional


class ProbeCache:
    """
    Path -> raw probe output, cleared as a whole.

    The first insert after the cache was last cleared starts a timer, and
    when it fires every entry goes, regardless of when it was added. The
    cache only coalesces near-simultaneous duplicate queries.
    """

    def __init__(self, window: float = 60.0, logger=None):
        """
        Args:
            window: Seconds between the first insert of a batch and the clear
            logger: Logger instance
        """
        self.window = window
        self.logger = logger or logging.getLogger(__name__)
        self._entries: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def get(self, path: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(path)

    def put(self, path: str, value: Any) -> None:
        with self._lock:
            self._entries[path] = value
            if self._timer is None:
                self._timer = threading.Timer(self.window, self.clear)
                self._timer.daemon = True
                self._timer.start()

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            if self._timer is not None:
                # no-op when called from the timer thread itself
                self._timer.cancel()
                self._timer = None
        if count:
            self.logger.debug(f"Cleared {count} cached probe results")

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
