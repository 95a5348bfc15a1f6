# baro/services/connectivity.py

"""Network connectivity oracles queried before every remote fetch."""

import logging
import threading
import time
from typing import Protocol

from curl_cffi import requests as curl_requests

from baro.config.settings import Settings

logger = logging.getLogger("baro.connectivity")


class ConnectivityOracle(Protocol):
    """Answers whether a network call is worth attempting right now."""

    def is_connected(self) -> bool: ...


class StaticConnectivity:
    """Fixed answer, flipped by hand (tests, ``--offline`` CLI runs)."""

    def __init__(self, connected: bool = True) -> None:
        self.connected = connected

    def is_connected(self) -> bool:
        return self.connected


class HttpConnectivityProbe:
    """Probe a lightweight endpoint and remember the answer briefly.

    The result is reused for ``recheck_seconds`` so a burst of lookups
    costs at most one probe.
    """

    def __init__(
        self,
        probe_url: str = Settings.CONNECTIVITY_PROBE_URL,
        timeout: float = Settings.CONNECTIVITY_TIMEOUT,
        recheck_seconds: float = Settings.CONNECTIVITY_RECHECK_SECONDS,
    ) -> None:
        self.probe_url = probe_url
        self.timeout = timeout
        self.recheck_seconds = recheck_seconds
        self.session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self._lock = threading.Lock()
        self._last_result: bool | None = None
        self._checked_at: float = 0.0

    def _probe(self) -> bool:
        start = time.monotonic()
        try:
            resp = self.session.get(self.probe_url, timeout=self.timeout)
        except Exception as exc:
            logger.info("Connectivity probe failed: %s", exc)
            return False
        elapsed_ms = (time.monotonic() - start) * 1000
        connected = resp.status_code < 500
        logger.debug(
            "Connectivity probe HTTP %d in %.0fms",
            resp.status_code,
            elapsed_ms,
        )
        return connected

    def close(self) -> None:
        """Close the probe's HTTP session."""
        self.session.close()

    def is_connected(self) -> bool:
        with self._lock:
            now = time.monotonic()
            if (
                self._last_result is not None
                and now - self._checked_at < self.recheck_seconds
            ):
                return self._last_result
            result = self._probe()
            if result != self._last_result:
                logger.info(
                    "Connectivity is now %s",
                    "online" if result else "offline",
                )
            self._last_result = result
            self._checked_at = now
            return result
