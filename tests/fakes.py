# tests/fakes.py

"""Test doubles for the lookup engine's collaborators."""

import asyncio
import copy
from typing import Any

from baro.models.product import ScanKind
from baro.storage.cache_store import InMemoryCacheStore

START_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z


def sample_body() -> dict[str, Any]:
    """A remote API body with quotes deliberately out of price order."""
    return {
        "product": {
            "name": "제주 삼다수 2L",
            "brand": "광동제약",
            "category": "생수",
            "barcode": "8801062633357",
        },
        "prices": [
            {
                "store": "롯데마트",
                "price": 1300,
                "currency": "KRW",
                "availability": "in_stock",
                "distance": 1.2,
                "lastUpdated": START_MS,
            },
            {
                "store": "이마트",
                "price": 1100,
                "currency": "KRW",
                "availability": "limited",
                "distance": 0.5,
                "lastUpdated": START_MS,
            },
            {
                "store": "GS25",
                "price": 1600,
                "currency": "KRW",
                "availability": "out_of_stock",
                "lastUpdated": START_MS,
            },
        ],
    }


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = START_MS) -> None:
        self.current = start

    def now(self) -> int:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += ms


class FakePriceSource:
    """Scripted remote source that records calls and cancellations."""

    def __init__(
        self,
        body: dict[str, Any] | None = None,
        *,
        clock: FakeClock | None = None,
        advance_ms: int = 0,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.body = body if body is not None else sample_body()
        self.clock = clock
        self.advance_ms = advance_ms
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, ScanKind]] = []
        self.cancelled = 0

    async def fetch(self, identifier: str, kind: ScanKind) -> dict[str, Any]:
        self.calls.append((identifier, kind))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        if self.clock is not None and self.advance_ms:
            self.clock.advance(self.advance_ms)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.body)


class FlakyStore(InMemoryCacheStore):
    """In-memory store whose reads or writes can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_get = False
        self.fail_set = False

    def get(self, key: str) -> bytes | None:
        if self.fail_get:
            raise OSError("disk I/O error")
        return super().get(key)

    def set(self, key: str, value: bytes) -> None:
        if self.fail_set:
            raise OSError("database is locked")
        super().set(key, value)


def overflowing_entry(stored_at: int) -> bytes:
    """A cached value whose price literal overflows to infinity."""
    return (
        '{"timestamp": %d, "data": {"product": {"name": "삼다수"}, '
        '"prices": [{"store": "이마트", "price": 1e400}]}}' % stored_at
    ).encode("utf-8")
