import threading


class VisitedTracker:
    """
    Tracks which URLs have been visited during a crawl.

    Membership only grows for the lifetime of a crawl; eviction would let a
    URL be fetched twice. All methods are safe to call from worker threads,
    and `mark_if_new` is the single atomic check-and-insert used before a
    fetch is dispatched.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._visited = set()

    def mark_if_new(self, url: str) -> bool:
        """Mark `url` and return True, or return False if it was already visited."""
        with self._lock:
            if url in self._visited:
                return False
            self._visited.add(url)
            return True

    def is_visited(self, url: str) -> bool:
        """Check if a URL has been visited."""
        with self._lock:
            return url in self._visited

    def __len__(self) -> int:
        with self._lock:
            return len(self._visited)
