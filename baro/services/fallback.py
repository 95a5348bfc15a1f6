# baro/services/fallback.py

"""Deterministic placeholder prices served when live data is unavailable."""

from baro.config.settings import Settings
from baro.models.product import (
    Availability,
    PriceComparisonResult,
    PriceQuote,
    ProductInfo,
    ScanKind,
    sort_quotes,
)

# (store, offset from base price, availability, distance km)
_FALLBACK_STORES: tuple[tuple[str, int, Availability, float], ...] = (
    ("이마트", 0, Availability.IN_STOCK, 0.5),
    ("롯데마트", 300, Availability.IN_STOCK, 1.2),
    ("홈플러스", -200, Availability.LIMITED, 0.8),
    ("GS25", 700, Availability.IN_STOCK, 0.2),
)

_NAME_BY_KIND: dict[ScanKind, str] = {
    ScanKind.TEXT: "텍스트로 인식된 상품",
    ScanKind.IMAGE: "이미지로 인식된 상품",
}


def fallback_base_price(identifier: str) -> int:
    """Base price grows with the identifier length, floored at 1000."""
    return 1000 + len(identifier) * 100


def synthesize_fallback(
    identifier: str, kind: ScanKind | str = ScanKind.BARCODE,
) -> PriceComparisonResult:
    """Build synthetic comparison data for *identifier*.

    A pure function of its arguments: quotes carry ``last_updated=0``
    because they were never observed at any store.
    """
    kind = ScanKind(kind)
    base = fallback_base_price(identifier)

    if kind is ScanKind.BARCODE:
        name = f"상품 ({identifier[-6:]})" if identifier else "상품"
    else:
        name = _NAME_BY_KIND[kind]

    product = ProductInfo(
        name=name,
        brand="테스트 브랜드",
        category="식품",
        description="스캔된 상품입니다.",
        barcode=identifier if kind is ScanKind.BARCODE and identifier else None,
    )
    prices = sort_quotes([
        PriceQuote(
            store=store,
            price=base + offset,
            currency=Settings.DEFAULT_CURRENCY,
            availability=availability,
            distance=distance,
            last_updated=0,
        )
        for store, offset, availability, distance in _FALLBACK_STORES
    ])
    return PriceComparisonResult(
        product=product,
        prices=prices,
        is_fallback=True,
    )
