# baro/models/cache_entry.py

"""Cached price payload and its JSON wire format."""

import json
from dataclasses import dataclass, field

from baro.models.product import (
    PriceComparisonResult,
    PriceQuote,
    ProductInfo,
    finite_number,
    parse_payload,
)


@dataclass(frozen=True)
class CacheEntry:
    """A whole cached ``{product, prices}`` payload for one identifier.

    Entries are never updated in place; a newer fetch replaces the
    entry, an expired one is deleted.
    """

    key: str
    stored_at: int                    # epoch ms
    product: ProductInfo
    prices: tuple[PriceQuote, ...] = field(default=())

    def age(self, now: int) -> int:
        """Milliseconds since the entry was stored."""
        return now - self.stored_at

    def is_expired(self, now: int, ttl_ms: int) -> bool:
        """An entry is stale once it is strictly older than the TTL."""
        return self.age(now) > ttl_ms

    def to_result(self, response_time: int) -> PriceComparisonResult:
        """Materialise a fresh result object for a cache hit."""
        return PriceComparisonResult(
            product=self.product,
            prices=list(self.prices),
            response_time=response_time,
            from_cache=True,
        )

    def encode(self) -> bytes:
        """Encode as ``{"timestamp", "data": {product, prices}}`` UTF-8 JSON."""
        document = {
            "timestamp": self.stored_at,
            "data": {
                "product": self.product.to_dict(),
                "prices": [q.to_dict() for q in self.prices],
            },
        }
        return json.dumps(document, ensure_ascii=False).encode("utf-8")

    @classmethod
    def decode(cls, key: str, raw: bytes) -> "CacheEntry":
        """Parse a stored value.  Raises ``ValueError`` when it is corrupt."""
        try:
            document = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise ValueError(f"cache value is not UTF-8: {exc}") from exc
        if not isinstance(document, dict):
            raise ValueError("cache value must be a JSON object")
        timestamp = finite_number(document.get("timestamp"), "timestamp")
        product, prices = parse_payload(document.get("data"))
        return cls(
            key=key,
            stored_at=int(timestamp),
            product=product,
            prices=tuple(prices),
        )


@dataclass(frozen=True)
class CacheStats:
    """Diagnostic aggregate over the namespaced cache entries."""

    count: int = 0
    total_bytes: int = 0
    oldest_entry_age: int = 0         # ms
