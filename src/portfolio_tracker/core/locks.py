"""Per-key write locks."""

import threading
from collections import defaultdict


class KeyedLocks:
    """
    One re-entrant lock per key (e.g. per portfolio id).

    Writers to the same portfolio are serialized; different portfolios
    proceed independently.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = defaultdict(threading.RLock)

    def lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            return self._locks[key]
