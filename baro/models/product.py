# baro/models/product.py

"""Product and price quote models shared by the cache, API and fallback."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ScanKind(str, Enum):
    """How the product identifier was obtained."""

    BARCODE = "barcode"
    TEXT = "text"
    IMAGE = "image"


class Availability(str, Enum):
    """Stock state reported by a store."""

    IN_STOCK = "in_stock"
    LIMITED = "limited"
    OUT_OF_STOCK = "out_of_stock"


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def finite_number(value: Any, name: str) -> int | float:
    """Return *value* if it is a finite JSON number, else raise ``ValueError``.

    ``json.loads`` accepts ``NaN``, ``Infinity`` and overflowing literals
    such as ``1e400``; none of them is a usable price, distance or time.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return value


@dataclass
class ProductInfo:
    """Descriptive product data; only ``name`` is required."""

    name: str
    brand: str | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    barcode: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("ProductInfo.name must not be empty")

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire shape, omitting unset fields."""
        data: dict[str, Any] = {"name": self.name}
        for key in ("brand", "category", "description", "image", "barcode"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductInfo":
        """Build from a wire dict.  Raises ``ValueError`` on bad input."""
        if not isinstance(data, dict):
            raise ValueError("product must be an object")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError("product.name is required")
        return cls(
            name=name,
            brand=_optional_str(data, "brand"),
            category=_optional_str(data, "category"),
            description=_optional_str(data, "description"),
            image=_optional_str(data, "image"),
            barcode=_optional_str(data, "barcode"),
        )


@dataclass
class PriceQuote:
    """One store's offer; ``price`` is in the currency's minor unit."""

    store: str
    price: int
    currency: str = "KRW"
    availability: Availability = Availability.IN_STOCK
    distance: float | None = None     # km
    last_updated: int = 0             # epoch ms

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"negative price for {self.store}: {self.price}")
        if self.distance is not None and self.distance < 0:
            raise ValueError(
                f"negative distance for {self.store}: {self.distance}"
            )
        self.availability = Availability(self.availability)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase wire shape."""
        data: dict[str, Any] = {
            "store": self.store,
            "price": self.price,
            "currency": self.currency,
            "availability": self.availability.value,
            "lastUpdated": self.last_updated,
        }
        if self.distance is not None:
            data["distance"] = self.distance
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceQuote":
        """Build from a wire dict.  Raises ``ValueError`` on bad input."""
        if not isinstance(data, dict):
            raise ValueError("price entry must be an object")
        store = data.get("store")
        if not isinstance(store, str) or not store:
            raise ValueError("price.store is required")
        price = finite_number(data.get("price"), "price.price")
        distance = data.get("distance")
        if distance is not None:
            distance = finite_number(distance, "price.distance")
        last_updated = finite_number(
            data.get("lastUpdated", 0), "price.lastUpdated"
        )
        return cls(
            store=store,
            price=int(round(price)),
            currency=str(data.get("currency") or "KRW"),
            availability=Availability(
                data.get("availability", Availability.IN_STOCK.value)
            ),
            distance=float(distance) if distance is not None else None,
            last_updated=int(last_updated),
        )


def sort_quotes(prices: list[PriceQuote]) -> list[PriceQuote]:
    """Return quotes ordered cheapest first (stable for equal prices)."""
    return sorted(prices, key=lambda q: q.price)


@dataclass
class PriceComparisonResult:
    """Lookup outcome handed to the result and history screens."""

    product: ProductInfo
    prices: list[PriceQuote] = field(
        default_factory=lambda: list[PriceQuote]()
    )
    response_time: int = 0            # ms, measured by the engine
    from_cache: bool = False
    is_fallback: bool = False

    @property
    def best_quote(self) -> PriceQuote | None:
        """The cheapest quote, or ``None`` when there are no prices."""
        return self.prices[0] if self.prices else None

    @property
    def price_spread(self) -> int:
        """Difference between the most and least expensive quote."""
        if len(self.prices) < 2:
            return 0
        return self.prices[-1].price - self.prices[0].price

    def payload(self) -> dict[str, Any]:
        """The ``{product, prices}`` body as stored in the cache."""
        return {
            "product": self.product.to_dict(),
            "prices": [q.to_dict() for q in self.prices],
        }


def parse_payload(
    data: Any,
) -> tuple[ProductInfo, list[PriceQuote]]:
    """Parse a ``{product, prices}`` dict into sorted model objects.

    Raises ``ValueError`` when the shape is wrong.
    """
    if not isinstance(data, dict):
        raise ValueError("payload must be an object")
    product = ProductInfo.from_dict(data.get("product"))  # type: ignore[arg-type]
    raw_prices = data.get("prices", [])
    if not isinstance(raw_prices, list):
        raise ValueError("payload.prices must be a list")
    prices = sort_quotes([PriceQuote.from_dict(p) for p in raw_prices])
    return product, prices
