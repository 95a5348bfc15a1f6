# baro/services/price_lookup.py

"""Price lookup orchestration: cache, connectivity, bounded fetch, fallback.

``PriceLookupEngine.lookup`` is total.  Every failure on the live path
(offline device, timeout, transport error, bad status or body) is logged
and answered with deterministic fallback data, which is never cached.
"""

import asyncio
import logging
from collections.abc import Iterable

from baro.config.settings import Settings
from baro.errors import (
    CacheWriteError,
    ConnectivityUnavailable,
    PriceLookupError,
    RemotePayloadError,
    RemoteTimeout,
)
from baro.models.cache_entry import CacheStats
from baro.models.product import (
    PriceComparisonResult,
    PriceQuote,
    ProductInfo,
    ScanKind,
    parse_payload,
)
from baro.services.clock import Clock, SystemClock
from baro.services.connectivity import ConnectivityOracle
from baro.services.fallback import synthesize_fallback
from baro.services.price_source import RemotePriceSource
from baro.storage.cache_store import CacheStore
from baro.storage.price_cache import PriceCache

logger = logging.getLogger("baro.lookup")


class PriceLookupEngine:
    """Fetches price comparisons under a fixed latency budget.

    Collaborators are injected so tests can swap the store, the
    connectivity oracle, the remote source and the clock.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        connectivity: ConnectivityOracle,
        price_source: RemotePriceSource,
        clock: Clock | None = None,
        *,
        ttl_ms: int = Settings.CACHE_TTL_MS,
        fetch_timeout: float = Settings.API_TIMEOUT,
        coalesce_inflight: bool = False,
    ) -> None:
        self._clock = clock or SystemClock()
        self._cache = PriceCache(cache_store, ttl_ms=ttl_ms)
        self._connectivity = connectivity
        self._source = price_source
        self._fetch_timeout = fetch_timeout
        self._coalesce = coalesce_inflight
        self._inflight: dict[
            tuple[str, ScanKind],
            asyncio.Future[tuple[ProductInfo, list[PriceQuote]]],
        ] = {}
        # Strong references only; preload tasks are never awaited
        self._background: set[asyncio.Task[None]] = set()

    @property
    def cache(self) -> PriceCache:
        return self._cache

    def _elapsed(self, start: int) -> int:
        return max(0, self._clock.now() - start)

    # ── Lookup ───────────────────────────────────────────

    async def lookup(
        self,
        identifier: str,
        kind: ScanKind | str = ScanKind.BARCODE,
    ) -> PriceComparisonResult:
        """Return price data for *identifier*; lookup failures never raise.

        Order: cache probe, connectivity check, one fetch bounded by
        ``fetch_timeout``, then fallback synthesis on any failure.  Store
        I/O and the connectivity check run in worker threads.
        """
        start = self._clock.now()
        kind = ScanKind(kind)

        entry = await asyncio.to_thread(self._cache.read, identifier, start)
        if entry is not None:
            return entry.to_result(self._elapsed(start))

        try:
            product, prices = await self._fetch_live(identifier, kind)
        except PriceLookupError as exc:
            logger.warning(
                "Price fetch for '%s' failed (%s: %s), serving fallback",
                identifier,
                type(exc).__name__,
                exc,
            )
            return self._fallback(identifier, kind, start)
        except Exception:
            logger.error(
                "Unexpected error fetching '%s', serving fallback",
                identifier,
                exc_info=True,
            )
            return self._fallback(identifier, kind, start)

        result = PriceComparisonResult(
            product=product,
            prices=prices,
            response_time=self._elapsed(start),
        )
        logger.info(
            "Fetched %d prices for '%s' in %dms",
            len(prices),
            identifier,
            result.response_time,
        )
        return result

    def _fallback(
        self, identifier: str, kind: ScanKind, start: int,
    ) -> PriceComparisonResult:
        result = synthesize_fallback(identifier, kind)
        result.response_time = self._elapsed(start)
        return result

    async def _fetch_live(
        self, identifier: str, kind: ScanKind,
    ) -> tuple[ProductInfo, list[PriceQuote]]:
        connected = await asyncio.to_thread(
            self._connectivity.is_connected
        )
        if not connected:
            raise ConnectivityUnavailable("네트워크 연결이 필요합니다.")
        if self._coalesce:
            return await self._shared_fetch(identifier, kind)
        return await self._fetch_and_store(identifier, kind)

    async def _fetch_and_store(
        self, identifier: str, kind: ScanKind,
    ) -> tuple[ProductInfo, list[PriceQuote]]:
        """One remote call, no retry; cache the parsed result."""
        try:
            body = await asyncio.wait_for(
                self._source.fetch(identifier, kind),
                timeout=self._fetch_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise RemoteTimeout(
                f"no response within {self._fetch_timeout:.3f}s"
            ) from exc

        try:
            product, prices = parse_payload(body)
        except (ValueError, TypeError) as exc:
            raise RemotePayloadError(str(exc)) from exc

        try:
            await asyncio.to_thread(
                self._cache.write, identifier, product, prices, self._clock.now()
            )
        except CacheWriteError as exc:
            logger.warning("Cache write error: %s", exc)
        return product, prices

    async def _shared_fetch(
        self, identifier: str, kind: ScanKind,
    ) -> tuple[ProductInfo, list[PriceQuote]]:
        """Join an in-flight fetch for the same key or start one."""
        key = (identifier, kind)
        shared = self._inflight.get(key)
        if shared is None:
            shared = asyncio.ensure_future(
                self._fetch_and_store(identifier, kind)
            )
            self._inflight[key] = shared
            shared.add_done_callback(
                lambda fut, k=key: self._finish_shared(k, fut)
            )
        else:
            logger.debug("Joining in-flight fetch for '%s'", identifier)
        # One waiter giving up must not cancel the fetch for the others
        return await asyncio.shield(shared)

    def _finish_shared(
        self,
        key: tuple[str, ScanKind],
        fut: asyncio.Future[tuple[ProductInfo, list[PriceQuote]]],
    ) -> None:
        if self._inflight.get(key) is fut:
            del self._inflight[key]
        if not fut.cancelled():
            # Mark the exception retrieved even if every waiter left
            fut.exception()

    # ── Background maintenance ───────────────────────────

    def preload_popular(
        self, identifiers: Iterable[str] | None = None,
    ) -> None:
        """Warm the cache for *identifiers* without blocking the caller.

        One detached task per identifier is scheduled on the running
        event loop; outcomes are discarded.  Defaults to
        ``Settings.POPULAR_BARCODES``.
        """
        source = (
            Settings.POPULAR_BARCODES if identifiers is None else identifiers
        )
        targets = list(dict.fromkeys(source))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error(
                "Preload needs a running event loop; skipped %d products",
                len(targets),
            )
            return

        for identifier in targets:
            task = loop.create_task(self._preload_one(identifier))
            self._background.add(task)
            task.add_done_callback(self._background.discard)
        logger.info("Preloading %d popular products", len(targets))

    async def _preload_one(self, identifier: str) -> None:
        try:
            await self.lookup(identifier, ScanKind.BARCODE)
        except Exception as exc:
            logger.debug("Background preload of '%s' failed: %s", identifier, exc)

    def close(self) -> None:
        """Release the store and connectivity probe, where they hold resources."""
        for resource in (self._cache.store, self._connectivity):
            close = getattr(resource, "close", None)
            if close is not None:
                close()

    def sweep_expired(self) -> int:
        """Delete entries older than the TTL; returns how many went."""
        try:
            return self._cache.sweep(self._clock.now())
        except Exception:
            logger.error("Cache cleanup error", exc_info=True)
            return 0

    def cache_stats(self) -> CacheStats:
        """Count, byte size and oldest age of the cached entries."""
        try:
            return self._cache.stats(self._clock.now())
        except Exception:
            logger.error("Cache stats error", exc_info=True)
            return CacheStats()
