"""
Area and yen unit conversion.

Area: square meters (㎡) <-> square feet <-> tsubo (坪).
Price: 万円 / 億円 strings -> integer yen.

Every function here is pure and total: unparseable input yields None or the
caller-supplied default, never an exception.
"""

import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from propmap.utils.japanese_address import normalize_digits

SQM_PER_TSUBO = 3.306
SQFT_PER_SQM = 10.7639

T = TypeVar("T")

_OKU_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*億(?:\s*(\d+)\s*万)?")
_NUMBER_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?")
_AREA_WITH_UNIT_PATTERN = re.compile(
    r"(\d[\d,]*(?:\.\d+)?)\s*(?:㎡|m²|m2|平米|平方メートル|平方m)"
)
_TSUBO_PATTERN = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*坪")
# A bare number that is not a tsubo figure
_UNTAGGED_AREA_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?(?!\d|[.,]\d|\s*坪)")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """A parsed value plus whether it is the caller's default rather than data."""

    value: T
    was_defaulted: bool = False


def meters_to_tsubo(m: float) -> float:
    """Convert square meters to tsubo (坪). 1 tsubo ≈ 3.306 sqm."""
    return m / SQM_PER_TSUBO


def tsubo_to_meters(t: float) -> float:
    """Convert tsubo to square meters."""
    return t * SQM_PER_TSUBO


def meters_to_sqft(m: float) -> float:
    """Convert square meters to square feet."""
    return m * SQFT_PER_SQM


def sqft_to_meters(s: float) -> float:
    """Convert square feet to square meters."""
    return s / SQFT_PER_SQM


def _to_number(raw: str) -> float | None:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def parse_man_yen_price_result(text: str | None, default: int) -> Parsed[int]:
    """
    Parse a Japanese price string into integer yen, flagging defaults.

    Supports:
    - 3,780万円 / 3,780万 / ３，７８０万円 (man-en, with or without 円)
    - 1億2000万円 / 2億円 (oku + man)
    - 37800000円 / 37800000 (plain yen)

    Anything without a usable number returns ``default`` with
    ``was_defaulted=True``.
    """
    if not text:
        return Parsed(default, was_defaulted=True)

    normalized = normalize_digits(text)

    oku_match = _OKU_PATTERN.search(normalized.replace(",", ""))
    if oku_match:
        total = float(oku_match.group(1)) * 100_000_000
        if oku_match.group(2):
            total += int(oku_match.group(2)) * 10_000
        return Parsed(int(round(total)))

    number_match = _NUMBER_PATTERN.search(normalized)
    if not number_match:
        return Parsed(default, was_defaulted=True)

    amount = _to_number(number_match.group(0))
    if amount is None:
        return Parsed(default, was_defaulted=True)

    if "万" in normalized:
        amount *= 10_000
    return Parsed(int(round(amount)))


def parse_man_yen_price(text: str | None, default: int = 0) -> int:
    """Parse a 万円 price string into integer yen, or return ``default``."""
    return parse_man_yen_price_result(text, default).value


def parse_area_string(text: str | None) -> float | None:
    """
    Parse an area string like '30.31㎡', '30.31m²', '59.58平米' into square meters.

    The number directly preceding a unit marker wins; failing that the first
    number not marked as tsubo is used. Returns None when there is no such
    number, so a tsubo-only string like '約9.16坪' is left to the caller.
    """
    if not text:
        return None

    normalized = normalize_digits(text)

    match = _AREA_WITH_UNIT_PATTERN.search(normalized)
    if match:
        return _to_number(match.group(1))

    match = _UNTAGGED_AREA_PATTERN.search(normalized)
    if match:
        return _to_number(match.group(0))
    return None


def parse_tsubo_string(text: str | None) -> float | None:
    """Parse the tsubo figure out of strings like '30.31㎡ (約9.16坪)'."""
    if not text:
        return None
    match = _TSUBO_PATTERN.search(normalize_digits(text))
    return _to_number(match.group(1)) if match else None


def format_yen(amount: int | float) -> str:
    """Format amount in yen with comma separators. e.g. 1500000 -> '¥1,500,000'"""
    return f"¥{int(amount):,}"


def format_man_yen(amount: int | float) -> str:
    """Format amount in 万円 (10,000 yen units). e.g. 37800000 -> '3,780万円'"""
    man = amount / 10_000
    if man == int(man):
        return f"{int(man):,}万円"
    return f"{man:,.1f}万円"


def format_area(area_sqm: float, area_tsubo: float | None = None) -> str:
    """Format area the way listings print it. e.g. '30.31㎡ (約9.16坪)'"""
    if area_tsubo is None:
        return f"{area_sqm:.2f}㎡"
    return f"{area_sqm:.2f}㎡ (約{area_tsubo:.2f}坪)"
