# In-process cache of image id -> resolved upstream URL.
# Shared by every in-flight request; lives as long as the app instance.

import math
import threading
from typing import Optional

from cachetools import Cache


class ResolverCache:
    """Thread-safe id -> URL mapping with no eviction.

    The lock is held for a single read or write only. Callers must do any
    network I/O between ``lookup`` and ``insert``, never inside them.
    """

    def __init__(self) -> None:
        self._cache: Cache = Cache(maxsize=math.inf)
        self._lock = threading.Lock()

    def lookup(self, image_id: int) -> Optional[str]:
        """Return the cached URL for *image_id*, or None on miss."""
        with self._lock:
            return self._cache.get(image_id)

    def insert(self, image_id: int, url: str) -> None:
        """Record *url* for *image_id*; last write wins."""
        with self._lock:
            self._cache[image_id] = url

    def __contains__(self, image_id: object) -> bool:
        with self._lock:
            return image_id in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
