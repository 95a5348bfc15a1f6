# baro/storage/price_cache.py

"""TTL-checked price cache layered over a key-value store.

Entries live under ``Settings.CACHE_KEY_PREFIX`` so sweeps and stats only
ever touch price data.  Every mutation replaces or deletes a whole entry;
nothing is patched in place, so a concurrent reader sees either the old
value, the new value, or nothing.
"""

import logging

from baro.config.settings import Settings
from baro.errors import CacheReadError, CacheWriteError
from baro.models.cache_entry import CacheEntry, CacheStats
from baro.models.product import PriceQuote, ProductInfo
from baro.storage.cache_store import CacheStore

logger = logging.getLogger("baro.cache")


class PriceCache:
    """Namespaced, expiring view of a :class:`CacheStore`."""

    def __init__(
        self,
        store: CacheStore,
        ttl_ms: int = Settings.CACHE_TTL_MS,
        prefix: str = Settings.CACHE_KEY_PREFIX,
    ) -> None:
        self._store = store
        self._ttl_ms = ttl_ms
        self._prefix = prefix

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def key_for(self, identifier: str) -> str:
        """Store key for a product identifier."""
        return f"{self._prefix}{identifier}"

    # ── Reads ────────────────────────────────────────────

    def _load(self, key: str) -> CacheEntry | None:
        """Fetch and decode one entry.

        Raises :class:`CacheReadError` when the store fails or the
        stored value is corrupt.
        """
        try:
            raw = self._store.get(key)
        except Exception as exc:
            raise CacheReadError(f"store read failed for {key}: {exc}") from exc
        if raw is None:
            return None
        try:
            return CacheEntry.decode(key, raw)
        except (ValueError, TypeError) as exc:
            raise CacheReadError(
                f"corrupt entry {key}: {exc}", corrupt=True
            ) from exc

    def _discard(self, key: str) -> bool:
        try:
            self._store.remove(key)
        except Exception as exc:
            logger.warning("Cache remove failed for %s: %s", key, exc)
            return False
        return True

    def read(self, identifier: str, now: int) -> CacheEntry | None:
        """Return the live entry for *identifier*, or ``None`` on a miss.

        Expired and corrupt entries are deleted on the way out.
        """
        key = self.key_for(identifier)
        try:
            entry = self._load(key)
        except CacheReadError as exc:
            logger.warning("Cache read error: %s", exc)
            # A failing store keeps its entry for a later attempt
            if exc.corrupt:
                self._discard(key)
            return None

        if entry is None:
            return None
        if entry.is_expired(now, self._ttl_ms):
            logger.debug(
                "Cache entry for '%s' expired (age=%dms)",
                identifier,
                entry.age(now),
            )
            self._discard(key)
            return None

        logger.info(
            "Cache hit for '%s' (age=%dms)", identifier, entry.age(now)
        )
        return entry

    # ── Writes ───────────────────────────────────────────

    def write(
        self,
        identifier: str,
        product: ProductInfo,
        prices: list[PriceQuote],
        now: int,
    ) -> CacheEntry:
        """Store (or overwrite) the entry for *identifier* stamped *now*.

        Raises :class:`CacheWriteError` when the store rejects the value.
        """
        entry = CacheEntry(
            key=self.key_for(identifier),
            stored_at=now,
            product=product,
            prices=tuple(prices),
        )
        try:
            self._store.set(entry.key, entry.encode())
        except Exception as exc:
            raise CacheWriteError(
                f"store write failed for {entry.key}: {exc}"
            ) from exc
        logger.info(
            "Cached %d prices for '%s'", len(prices), identifier
        )
        return entry

    def remove(self, identifier: str) -> None:
        """Delete the entry for *identifier* if present."""
        self._discard(self.key_for(identifier))

    # ── Maintenance ──────────────────────────────────────

    def _keys(self) -> list[str]:
        try:
            return list(self._store.list_keys(self._prefix))
        except Exception as exc:
            logger.error("Cache key listing failed: %s", exc, exc_info=True)
            return []

    def sweep(self, now: int) -> int:
        """Delete every expired or corrupt entry.

        Returns the number of entries removed.  Entries that cannot be
        read are skipped and left for the next sweep.
        """
        removed = 0
        for key in self._keys():
            try:
                entry = self._load(key)
            except CacheReadError as exc:
                if exc.corrupt:
                    logger.warning("Sweeping %s", exc)
                    removed += int(self._discard(key))
                else:
                    logger.warning("Sweep skipped unreadable entry: %s", exc)
                continue
            if entry is None:
                continue
            if entry.is_expired(now, self._ttl_ms):
                removed += int(self._discard(key))

        if removed:
            logger.info("Swept %d expired cache entries", removed)
        return removed

    def stats(self, now: int) -> CacheStats:
        """Count, total encoded size, and oldest age of current entries."""
        count = 0
        total_bytes = 0
        oldest_age = 0
        for key in self._keys():
            try:
                raw = self._store.get(key)
            except Exception as exc:
                logger.warning("Stats skipped unreadable entry %s: %s", key, exc)
                continue
            if raw is None:
                continue
            count += 1
            total_bytes += len(raw)
            try:
                entry = CacheEntry.decode(key, raw)
            except (ValueError, TypeError) as exc:
                logger.debug("Stats found corrupt entry %s: %s", key, exc)
                continue
            oldest_age = max(oldest_age, entry.age(now))

        return CacheStats(
            count=count,
            total_bytes=total_bytes,
            oldest_entry_age=oldest_age,
        )

    def clear(self) -> int:
        """Purge all price entries.

        Returns the number of entries that were removed.
        """
        count = sum(int(self._discard(key)) for key in self._keys())
        logger.info("Cache manually purged (%d entries removed)", count)
        return count
