# baro/errors.py

"""Exception taxonomy for the price lookup path.

None of the lookup-family errors escape ``PriceLookupEngine.lookup``; they
are raised internally and collapse into fallback data there.
"""


class BaroError(Exception):
    """Base class for all baro errors."""


class CacheError(BaroError):
    """Base class for cache store failures."""


class CacheReadError(CacheError):
    """A cache entry is corrupt or the store could not be read.

    ``corrupt`` is true when the value was read but could not be decoded;
    such entries are safe to delete.
    """

    def __init__(self, message: str, corrupt: bool = False) -> None:
        super().__init__(message)
        self.corrupt = corrupt


class CacheWriteError(CacheError):
    """A cache entry could not be written."""


class PriceLookupError(BaroError):
    """A live price lookup could not be completed."""


class ConnectivityUnavailable(PriceLookupError):
    """The device reports no network connectivity."""


class RemoteError(PriceLookupError):
    """Base class for remote price source failures."""


class RemoteTimeout(RemoteError):
    """The remote call did not complete before its deadline."""


class RemoteTransportError(RemoteError):
    """The request failed below the HTTP layer (DNS, TLS, reset...)."""


class RemoteStatusError(RemoteError):
    """The remote source answered with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"API Error: {status_code}")
        self.status_code = status_code


class RemotePayloadError(RemoteError):
    """A 2xx response body is not a valid ``{product, prices}`` object."""


class EmptyScanError(BaroError, ValueError):
    """A scan event carries nothing usable as a product identifier."""
