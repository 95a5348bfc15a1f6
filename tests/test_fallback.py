# tests/test_fallback.py

"""Tests for deterministic fallback price synthesis."""

import unittest

from baro.models.product import ScanKind
from baro.services.fallback import fallback_base_price, synthesize_fallback


class TestSynthesizeFallback(unittest.TestCase):
    """synthesize_fallback is pure and well-formed."""

    def test_deterministic_for_same_input(self) -> None:
        """Two calls with the same arguments give identical prices."""
        first = synthesize_fallback("8801062633357", ScanKind.BARCODE)
        second = synthesize_fallback("8801062633357", ScanKind.BARCODE)
        self.assertEqual(first.prices, second.prices)
        self.assertEqual(first.product, second.product)

    def test_prices_sorted_ascending(self) -> None:
        """Quotes are cheapest first and the head is the minimum."""
        result = synthesize_fallback("8801062633357")
        prices = [q.price for q in result.prices]
        self.assertEqual(prices, sorted(prices))
        self.assertEqual(result.best_quote.price, min(prices))  # type: ignore[union-attr]

    def test_base_price_scales_with_identifier_length(self) -> None:
        """13-digit barcode → base 2300, cheapest store 200 below."""
        self.assertEqual(fallback_base_price("8801062633357"), 2300)
        result = synthesize_fallback("8801062633357")
        self.assertEqual(result.prices[0].price, 2100)
        self.assertEqual(result.prices[0].store, "홈플러스")

    def test_barcode_product_naming(self) -> None:
        """Barcode fallbacks name the product by its last six digits."""
        result = synthesize_fallback("8801062633357", "barcode")
        self.assertEqual(result.product.name, "상품 (633357)")
        self.assertEqual(result.product.barcode, "8801062633357")

    def test_text_and_image_naming(self) -> None:
        """Text and image fallbacks use generic names and no barcode."""
        text = synthesize_fallback("신라면", ScanKind.TEXT)
        image = synthesize_fallback("IMG_1", ScanKind.IMAGE)
        self.assertEqual(text.product.name, "텍스트로 인식된 상품")
        self.assertEqual(image.product.name, "이미지로 인식된 상품")
        self.assertIsNone(text.product.barcode)
        self.assertIsNone(image.product.barcode)

    def test_marked_as_fallback(self) -> None:
        result = synthesize_fallback("x")
        self.assertTrue(result.is_fallback)
        self.assertFalse(result.from_cache)

    def test_empty_identifier(self) -> None:
        """Even an empty identifier produces non-negative prices."""
        result = synthesize_fallback("")
        self.assertGreaterEqual(len(result.prices), 1)
        self.assertTrue(all(q.price >= 0 for q in result.prices))


if __name__ == "__main__":
    unittest.main()
