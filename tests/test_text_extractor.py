# tests/test_text_extractor.py

"""Tests for OCR line classification and search keyword extraction."""

import unittest

from baro.parsers.text_extractor import (
    ProductTextExtractor,
    ProductTextInfo,
    TextBlock,
    is_date_text,
    is_measurement_only,
    is_price_text,
    is_weight_text,
    match_brand,
)


def _extract(*lines: str) -> ProductTextInfo:
    return ProductTextExtractor.extract("\n".join(lines), list(lines))


class TestPredicates(unittest.TestCase):
    """Single-line category predicates."""

    def test_price_lines(self) -> None:
        for line in ("1,200원", "₩ 3500", "$3.99", "가격: 1200", "1500 KRW", "990 krw"):
            with self.subTest(line=line):
                self.assertTrue(is_price_text(line))

    def test_non_price_lines(self) -> None:
        for line in ("삼다수 2L", "2025-01-01", "원재료명"):
            with self.subTest(line=line):
                self.assertFalse(is_price_text(line))

    def test_weight_lines(self) -> None:
        for line in ("500g", "1.5 L", "355ml", "16 oz", "2 lbs", "200그램", "내용량: 500"):
            with self.subTest(line=line):
                self.assertTrue(is_weight_text(line))

    def test_unit_must_end_the_token(self) -> None:
        """'12 leaves' is not twelve litres."""
        self.assertFalse(is_weight_text("12 leaves"))

    def test_measurement_only(self) -> None:
        self.assertTrue(is_measurement_only("500g"))
        self.assertTrue(is_measurement_only("2L x 6"))
        self.assertTrue(is_measurement_only("중량: 120"))
        self.assertFalse(is_measurement_only("삼다수 2L"))

    def test_date_lines(self) -> None:
        for line in (
            "2025-01-01",
            "2025.1.31",
            "31-12-2025",
            "2025년 3월 1일",
            "유통기한: 2025",
            "제조일자 20240101",
            "까지 2026",
        ):
            with self.subTest(line=line):
                self.assertTrue(is_date_text(line))

    def test_brand_capture(self) -> None:
        self.assertEqual(match_brand("브랜드: 농심"), "농심")
        self.assertEqual(match_brand("제조사 CJ Foods"), "CJ Foods")
        self.assertIsNone(match_brand("브랜드: 123"))
        self.assertIsNone(match_brand("신라면"))


class TestExtract(unittest.TestCase):
    """Field extraction from whole labels."""

    def test_samdasoo_label(self) -> None:
        """Name, price and expiry from a three-line water label."""
        info = _extract("삼다수 2L", "가격: 1,200원", "유통기한: 2025-01-01")
        self.assertEqual(info.product_name, "삼다수 2L")
        self.assertEqual(info.price, "가격: 1,200원")
        self.assertEqual(info.expiry_date, "유통기한: 2025-01-01")
        self.assertEqual(info.weight, "삼다수 2L")
        self.assertIsNone(info.brand)
        self.assertIsNone(info.ingredients)

    def test_all_text_kept_verbatim(self) -> None:
        info = ProductTextExtractor.extract("RAW  TEXT", ["신라면 블랙"])
        self.assertEqual(info.all_text, "RAW  TEXT")

    def test_lines_trimmed_and_blanks_dropped(self) -> None:
        info = _extract("   ", "  신라면 블랙  ", "")
        self.assertEqual(info.product_name, "신라면 블랙")

    def test_name_is_first_match_not_best(self) -> None:
        info = _extract("농심", "신라면 블랙", "진짜 맛있는 라면")
        self.assertEqual(info.product_name, "신라면 블랙")

    def test_name_length_bounds_are_exclusive(self) -> None:
        """Lines of 3 or 50 characters are never names."""
        info = _extract("abc", "x" * 50, "abcd")
        self.assertEqual(info.product_name, "abcd")

    def test_name_skips_category_lines(self) -> None:
        info = _extract(
            "브랜드: 농심", "500g", "2,500원", "2025.12.31", "신라면 블랙"
        )
        self.assertEqual(info.product_name, "신라면 블랙")
        self.assertEqual(info.brand, "농심")
        self.assertEqual(info.weight, "500g")
        self.assertEqual(info.price, "2,500원")
        self.assertEqual(info.expiry_date, "2025.12.31")

    def test_first_line_wins_per_category(self) -> None:
        info = _extract("가격: 1000", "가격: 2000")
        self.assertEqual(info.price, "가격: 1000")

    def test_ingredient_block(self) -> None:
        """Collect lines after the heading up to the next section."""
        info = _extract(
            "맛있는 라면",
            "원재료명",
            "소맥분(밀:미국산), 팜유(말레이시아산)",
            "감자전분(독일산), 변성전분, 정제염",
            "영양정보 1회 제공량 120g",
            "나트륨 1790mg 포함되어 있음",
        )
        self.assertEqual(
            info.ingredients,
            (
                "소맥분(밀:미국산), 팜유(말레이시아산)",
                "감자전분(독일산), 변성전분, 정제염",
            ),
        )

    def test_ingredient_block_stops_at_short_line(self) -> None:
        info = _extract(
            "Ingredients:",
            "water, sugar, citric acid",
            "end",
            "natural flavours and colour",
        )
        self.assertEqual(info.ingredients, ("water, sugar, citric acid",))

    def test_short_lines_before_first_ingredient_are_skipped(self) -> None:
        info = _extract("성분", "정제수", "L-아스코르빈산나트륨, 구연산")
        self.assertEqual(info.ingredients, ("L-아스코르빈산나트륨, 구연산",))

    def test_empty_input(self) -> None:
        info = _extract()
        self.assertEqual(info, ProductTextInfo(all_text=""))

    def test_extract_from_blocks(self) -> None:
        blocks = [
            TextBlock(text="삼다수 2L", lines=("삼다수 2L",)),
            TextBlock(text="가격: 1,200원", lines=("가격: 1,200원",)),
        ]
        info = ProductTextExtractor.extract_from_blocks("all", blocks)
        self.assertEqual(info.product_name, "삼다수 2L")
        self.assertEqual(info.price, "가격: 1,200원")


class TestSearchKeywords(unittest.TestCase):
    """extract_search_keywords output rules."""

    def test_name_only(self) -> None:
        info = ProductTextInfo(all_text="", product_name="삼다수 2L")
        self.assertEqual(
            ProductTextExtractor.extract_search_keywords(info), ["삼다수 2L"]
        )

    def test_brand_and_name(self) -> None:
        info = ProductTextInfo(
            all_text="", product_name="신라면 블랙", brand="농심"
        )
        self.assertEqual(
            ProductTextExtractor.extract_search_keywords(info),
            ["신라면 블랙", "농심 신라면 블랙"],
        )

    def test_brand_without_name_yields_nothing(self) -> None:
        info = ProductTextInfo(all_text="", brand="농심")
        self.assertEqual(ProductTextExtractor.extract_search_keywords(info), [])

    def test_boilerplate_removed_and_short_dropped(self) -> None:
        """'상품 AB' loses its boilerplate word and is then too short."""
        info = ProductTextInfo(all_text="", product_name="상품 AB")
        self.assertEqual(ProductTextExtractor.extract_search_keywords(info), [])

    def test_duplicates_removed(self) -> None:
        info = ProductTextInfo(
            all_text="", product_name="회사 초코파이", brand="회사"
        )
        self.assertEqual(
            ProductTextExtractor.extract_search_keywords(info), ["초코파이"]
        )

    def test_boilerplate_only_whole_words(self) -> None:
        """Boilerplate inside a longer word is kept."""
        info = ProductTextInfo(all_text="", product_name="상품권 세트")
        self.assertEqual(
            ProductTextExtractor.extract_search_keywords(info), ["상품권 세트"]
        )

    def test_never_short_or_duplicate(self) -> None:
        for name, brand in (("ab", "cd"), ("abc", None), ("제품 x", "주식회사")):
            with self.subTest(name=name, brand=brand):
                info = ProductTextInfo(all_text="", product_name=name, brand=brand)
                keywords = ProductTextExtractor.extract_search_keywords(info)
                self.assertTrue(all(len(k) >= 3 for k in keywords))
                self.assertEqual(len(keywords), len(set(keywords)))


class TestFormatProductInfo(unittest.TestCase):
    """Display formatting."""

    def test_labels_in_order(self) -> None:
        info = _extract("삼다수 2L", "가격: 1,200원")
        self.assertEqual(
            ProductTextExtractor.format_product_info(info),
            "상품명: 삼다수 2L\n가격: 가격: 1,200원\n용량: 삼다수 2L",
        )

    def test_empty_info(self) -> None:
        self.assertEqual(
            ProductTextExtractor.format_product_info(ProductTextInfo(all_text="")),
            "",
        )


if __name__ == "__main__":
    unittest.main()
