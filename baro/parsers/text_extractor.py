# baro/parsers/text_extractor.py

"""Structured product info from OCR text lines.

Each field is filled by an ordered rule list: for a field, the first
line accepted by its rule wins.  Field rules are independent, so one
line may populate several fields (``삼다수 2L`` is both the product
name and the volume).

Rule order (price, weight/volume, date, brand) matters only for the
product-name pass, which skips any line claimed by a category.
"""

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace

logger = logging.getLogger("baro.extractor")


# ── Patterns ─────────────────────────────────────────────

_PRICE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d+[,.]?\d*\s*원"),
    re.compile(r"₩\s*\d+[,.]?\d*"),
    re.compile(r"\$\s*\d+[.]?\d*"),
    re.compile(r"가격[:\s]*\d+"),
    re.compile(r"\d+[,.]?\d*\s*KRW", re.IGNORECASE),
)

_UNIT = r"(?:kg|ml|oz|lbs?|g|l)(?![a-z])"
_LOCAL_UNIT = r"(?:그램|킬로|리터|밀리리터)"

_WEIGHT_LABEL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"중량[:\s]*\d+"),
    re.compile(r"용량[:\s]*\d+"),
    re.compile(r"내용량[:\s]*\d+"),
)

_WEIGHT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d+[.]?\d*\s*" + _UNIT, re.IGNORECASE),
    re.compile(r"\d+[.]?\d*\s*" + _LOCAL_UNIT),
    *_WEIGHT_LABEL_PATTERNS,
)

# A line that is nothing but quantities, e.g. "500g" or "2L x 6"
_QUANTITY_ONLY = re.compile(
    r"^(?:[\s,x×*+/]*\d+[.]?\d*\s*(?:" + _UNIT + "|" + _LOCAL_UNIT + r"))+"
    r"[\s,x×*+/\d]*$",
    re.IGNORECASE,
)

_DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d{4}[.-]\d{1,2}[.-]\d{1,2}"),
    re.compile(r"\d{1,2}[.-]\d{1,2}[.-]\d{4}"),
    re.compile(r"\d{4}년\s*\d{1,2}월\s*\d{1,2}일"),
    re.compile(r"(?:유통기한|제조일자|소비기한)[:\s]*\d"),
    re.compile(r"까지\s*\d{4}"),
)

_BRAND_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"브랜드[:\s]*([가-힣a-zA-Z\s]+)", re.IGNORECASE),
    re.compile(r"제조사[:\s]*([가-힣a-zA-Z\s]+)", re.IGNORECASE),
    re.compile(r"회사[:\s]*([가-힣a-zA-Z\s]+)", re.IGNORECASE),
)

INGREDIENT_KEYWORDS: tuple[str, ...] = ("원료", "성분", "재료", "ingredients")

SECTION_KEYWORDS: tuple[str, ...] = (
    "영양정보", "보관방법", "주의사항", "알레르기", "제조사",
    "nutrition", "storage", "warning", "allergen", "manufacturer",
)

_BOILERPLATE_TOKENS = re.compile(r"\b(?:주식회사|회사|브랜드|제품|상품)\b")

_NAME_MIN_EXCLUSIVE = 3
_NAME_MAX_EXCLUSIVE = 50
_INGREDIENT_MIN_EXCLUSIVE = 10
_KEYWORD_MIN_LENGTH = 3


# ── Predicates ───────────────────────────────────────────


def _any_match(patterns: Iterable[re.Pattern[str]], text: str) -> bool:
    return any(p.search(text) for p in patterns)


def is_price_text(text: str) -> bool:
    """Currency amounts: ``1,200원``, ``₩1200``, ``$3.99``, ``가격: 1200``."""
    return _any_match(_PRICE_PATTERNS, text)


def is_weight_text(text: str) -> bool:
    """Quantities with a unit, or a labelled weight/volume."""
    return _any_match(_WEIGHT_PATTERNS, text)


def is_measurement_only(text: str) -> bool:
    """True for a weight label line or a line holding only quantities."""
    return bool(
        _any_match(_WEIGHT_LABEL_PATTERNS, text)
        or _QUANTITY_ONLY.match(text.strip())
    )


def is_date_text(text: str) -> bool:
    """ISO-like or day-first dates, Korean dates, labelled expiry lines."""
    return _any_match(_DATE_PATTERNS, text)


def match_brand(text: str) -> str | None:
    """Text following a brand/manufacturer label, if any."""
    for pattern in _BRAND_PATTERNS:
        match = pattern.search(text)
        if match:
            brand = match.group(1).strip()
            if brand:
                return brand
    return None


def is_other_section(text: str) -> bool:
    """Heading of a label section that ends an ingredient list."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in SECTION_KEYWORDS)


def _whole_line(predicate: Callable[[str], bool]) -> Callable[[str], str | None]:
    return lambda line: line if predicate(line) else None


@dataclass(frozen=True)
class FieldRule:
    """Fills one :class:`ProductTextInfo` field from the first accepted line."""

    field: str
    extract: Callable[[str], str | None]


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule("price", _whole_line(is_price_text)),
    FieldRule("weight", _whole_line(is_weight_text)),
    FieldRule("expiry_date", _whole_line(is_date_text)),
    FieldRule("brand", match_brand),
)


# ── Result model ─────────────────────────────────────────


@dataclass(frozen=True)
class ProductTextInfo:
    """Fields recognised on a product label."""

    all_text: str
    product_name: str | None = None
    brand: str | None = None
    price: str | None = None
    weight: str | None = None
    expiry_date: str | None = None
    ingredients: tuple[str, ...] | None = None


@dataclass(frozen=True)
class TextBlock:
    """One OCR block and the lines recognised inside it."""

    text: str
    lines: tuple[str, ...] = ()


# ── Extractor ────────────────────────────────────────────


class ProductTextExtractor:
    """Turn recognised text lines into a :class:`ProductTextInfo`."""

    @staticmethod
    def _clean_lines(lines: Iterable[str]) -> list[str]:
        stripped = (line.strip() for line in lines)
        return [line for line in stripped if line]

    @staticmethod
    def _is_name_candidate(line: str) -> bool:
        if not _NAME_MIN_EXCLUSIVE < len(line) < _NAME_MAX_EXCLUSIVE:
            return False
        return not (
            is_price_text(line)
            or is_date_text(line)
            or match_brand(line) is not None
            or is_measurement_only(line)
        )

    @staticmethod
    def _collect_ingredients(lines: Sequence[str]) -> list[str]:
        """Lines following an ingredients heading, up to the next section."""
        found_heading = False
        ingredients: list[str] = []
        for line in lines:
            lowered = line.lower()
            if any(keyword in lowered for keyword in INGREDIENT_KEYWORDS):
                found_heading = True
                continue
            if not found_heading:
                continue
            if (
                len(lowered) > _INGREDIENT_MIN_EXCLUSIVE
                and not is_other_section(lowered)
            ):
                ingredients.append(line)
            elif ingredients:
                break
        return ingredients

    @classmethod
    def extract(
        cls, raw_text: str, lines: Iterable[str],
    ) -> ProductTextInfo:
        """Classify *lines* into product fields.

        Args:
            raw_text: Full recognised text, kept verbatim as ``all_text``.
            lines: Recognised lines in reading order.
        """
        cleaned = cls._clean_lines(lines)
        info = ProductTextInfo(all_text=raw_text)

        name = next(
            (line for line in cleaned if cls._is_name_candidate(line)),
            None,
        )
        if name is not None:
            info = replace(info, product_name=name)

        for rule in FIELD_RULES:
            for line in cleaned:
                value = rule.extract(line)
                if value is not None:
                    info = replace(info, **{rule.field: value})
                    break

        ingredients = cls._collect_ingredients(cleaned)
        if ingredients:
            info = replace(info, ingredients=tuple(ingredients))

        logger.debug(
            "Extracted name=%r brand=%r price=%r from %d lines",
            info.product_name,
            info.brand,
            info.price,
            len(cleaned),
        )
        return info

    @classmethod
    def extract_from_blocks(
        cls, raw_text: str, blocks: Iterable[TextBlock],
    ) -> ProductTextInfo:
        """Flatten OCR blocks into lines and extract."""
        lines = [line for block in blocks for line in block.lines]
        return cls.extract(raw_text, lines)

    @staticmethod
    def extract_search_keywords(info: ProductTextInfo) -> list[str]:
        """Search keys for a price lookup, most specific last.

        Returns the product name and ``"brand name"``, with corporate
        boilerplate words removed, entries shorter than three characters
        dropped, and duplicates removed.
        """
        keywords: list[str] = []
        if info.product_name:
            keywords.append(info.product_name)
        if info.brand and info.product_name:
            keywords.append(f"{info.brand} {info.product_name}")

        cleaned = (
            " ".join(_BOILERPLATE_TOKENS.sub("", k).split())
            for k in keywords
        )
        filtered = [k for k in cleaned if len(k) >= _KEYWORD_MIN_LENGTH]
        return list(dict.fromkeys(filtered))

    @staticmethod
    def format_product_info(info: ProductTextInfo) -> str:
        """Labelled multi-line summary for display."""
        labelled = (
            ("상품명", info.product_name),
            ("브랜드", info.brand),
            ("가격", info.price),
            ("용량", info.weight),
            ("유통기한", info.expiry_date),
        )
        return "\n".join(
            f"{label}: {value}" for label, value in labelled if value
        )
