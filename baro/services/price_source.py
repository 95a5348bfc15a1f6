# baro/services/price_source.py

"""Remote price-comparison API client."""

import logging
from typing import Any, Protocol
from urllib.parse import quote

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession

from baro.config.settings import Settings
from baro.errors import (
    RemotePayloadError,
    RemoteStatusError,
    RemoteTransportError,
)
from baro.models.product import ScanKind

logger = logging.getLogger("baro.source")


class RemotePriceSource(Protocol):
    """One cancellable request per identifier, returning ``{product, prices}``.

    Cancelling the awaiting task must abort the request.
    """

    async def fetch(
        self, identifier: str, kind: ScanKind,
    ) -> dict[str, Any]: ...


class HttpPriceSource:
    """``POST {base_url}/prices/{identifier}`` over curl_cffi.

    A session is opened per request so a cancelled or timed-out call
    releases its connection as soon as the awaiting task unwinds.
    """

    def __init__(
        self,
        base_url: str = Settings.PRICE_API_BASE_URL,
        timeout: float = Settings.API_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers: dict[str, str] = dict(Settings.DEFAULT_HEADERS)

    def url_for(self, identifier: str) -> str:
        return f"{self.base_url}/prices/{quote(identifier, safe='')}"

    async def fetch(
        self, identifier: str, kind: ScanKind,
    ) -> dict[str, Any]:
        """Request prices for *identifier*.

        Raises:
            RemoteTransportError: the request never produced a response.
            RemoteStatusError: the API answered with a non-2xx status.
            RemotePayloadError: the body is not a JSON object.
        """
        url = self.url_for(identifier)
        payload = {"productId": identifier, "type": ScanKind(kind).value}
        try:
            async with AsyncSession(
                impersonate=Settings.IMPERSONATE_BROWSER
            ) as session:
                resp = await session.post(
                    url,
                    headers=self.headers,
                    json=payload,
                    timeout=self.timeout,
                )
        except CurlError as exc:
            raise RemoteTransportError(str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            logger.warning(
                "Price API HTTP %d for '%s'", resp.status_code, identifier
            )
            raise RemoteStatusError(resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise RemotePayloadError(f"invalid JSON body: {exc}") from exc
        if not isinstance(body, dict):
            raise RemotePayloadError("response body must be a JSON object")
        return body
