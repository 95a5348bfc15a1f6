# baro/storage/cache_store.py

"""Key-value substrate the price cache is persisted in."""

import logging
import threading
from typing import Protocol

logger = logging.getLogger("baro.cache")


class CacheStore(Protocol):
    """Byte-valued key-value store with prefix enumeration.

    Each call is atomic with respect to a single key.
    """

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def remove(self, key: str) -> None: ...

    def list_keys(self, prefix: str) -> list[str]: ...


class InMemoryCacheStore:
    """Process-local store, used in tests and for offline CLI runs."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list_keys(self, prefix: str) -> list[str]:
        with self._lock:
            return [k for k in self._data if k.startswith(prefix)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
