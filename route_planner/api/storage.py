# route_planner/api/storage.py
"""Keyed storage for users, routes and reviews."""

import copy
import threading
import time
from typing import Any, Callable, Dict, Iterator, Optional, Tuple


class KeyValueStore:
    """Minimal storage interface the services depend on."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Replace the value at ``key`` with ``fn(current or default)``."""
        raise NotImplementedError

    def insert_new(self, value_fn: Callable[[str], Any]) -> Tuple[str, Any]:
        """Claim an unused timestamp key and store ``value_fn(key)`` under it.

        Returns the claimed key and the stored value. If ``value_fn`` raises,
        nothing is stored.
        """
        raise NotImplementedError

    def items(self) -> Iterator[Tuple[str, Any]]:
        raise NotImplementedError

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class InMemoryStore(KeyValueStore):
    """Process-local store; contents are lost on restart.

    Values are deep-copied on the way in and out so callers never share
    mutable state through the store.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}
        # Re-entrant so update/insert_new callbacks may read the store.
        self.lock = threading.RLock()

    def get(self, key):
        with self.lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key, value):
        with self.lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key):
        with self.lock:
            return self._data.pop(key, None) is not None

    def update(self, key, fn, default=None):
        with self.lock:
            current = self._data.get(key)
            if current is None:
                current = copy.deepcopy(default)
            value = fn(current)
            self._data[key] = copy.deepcopy(value)
            return copy.deepcopy(value)

    def insert_new(self, value_fn):
        with self.lock:
            candidate = int(time.time() * 1000)
            while str(candidate) in self._data:
                candidate += 1
            key = str(candidate)
            value = value_fn(key)
            self._data[key] = copy.deepcopy(value)
            return key, copy.deepcopy(value)

    def items(self):
        with self.lock:
            snapshot = list(self._data.items())
        for key, value in snapshot:
            yield key, copy.deepcopy(value)

    def __len__(self):
        with self.lock:
            return len(self._data)

