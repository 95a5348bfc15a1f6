# baro/services/scan_pipeline.py

"""Turns camera scan events into price lookups."""

import logging
from dataclasses import dataclass

from baro.errors import EmptyScanError
from baro.models.product import PriceComparisonResult, ScanKind
from baro.models.scan_event import ScanEvent
from baro.parsers.text_extractor import ProductTextExtractor, ProductTextInfo
from baro.services.price_lookup import PriceLookupEngine

logger = logging.getLogger("baro.scan")


@dataclass
class ScanOutcome:
    """What a scan resolved to and the prices found for it."""

    identifier: str
    kind: ScanKind
    result: PriceComparisonResult
    text_info: ProductTextInfo | None = None


class ScanPipeline:
    """Resolve a :class:`ScanEvent` to an identifier and look it up."""

    def __init__(self, engine: PriceLookupEngine) -> None:
        self.engine = engine

    @staticmethod
    def resolve_identifier(
        event: ScanEvent,
    ) -> tuple[str, ProductTextInfo | None]:
        """Identifier for *event*, plus extracted text info for OCR scans.

        Raises :class:`EmptyScanError` when a barcode or text scan has
        nothing usable in it.
        """
        kind = ScanKind(event.kind)

        if kind is ScanKind.BARCODE:
            identifier = event.payload.strip()
            if not identifier:
                raise EmptyScanError("barcode scan carried no data")
            return identifier, None

        if kind is ScanKind.TEXT:
            lines = event.payload.splitlines()
            info = ProductTextExtractor.extract(event.payload, lines)
            keywords = ProductTextExtractor.extract_search_keywords(info)
            if keywords:
                return keywords[0], info
            first_line = next(
                (line.strip() for line in lines if line.strip()), ""
            )
            if not first_line:
                raise EmptyScanError("no text recognised in scan")
            return first_line, info

        # Image recognition is not wired up; scans are keyed by capture time
        identifier = event.payload.strip() or f"IMG_{event.captured_at}"
        return identifier, None

    async def handle(self, event: ScanEvent) -> ScanOutcome:
        """Resolve *event* and fetch its price comparison."""
        identifier, text_info = self.resolve_identifier(event)
        kind = ScanKind(event.kind)
        result = await self.engine.lookup(identifier, kind)
        logger.info(
            "%s scan resolved to '%s': %d prices in %dms%s",
            kind.value,
            identifier,
            len(result.prices),
            result.response_time,
            " (fallback)" if result.is_fallback else "",
        )
        return ScanOutcome(
            identifier=identifier,
            kind=kind,
            result=result,
            text_info=text_info,
        )
