"""
Turn a PropertySegment into a NormalizedProperty.

Missing price and area are replaced by display defaults (37,800,000 yen and
40 ㎡) so every listing can be rendered. The substitution is reported through
AssembledProperty so callers and tests can tell real values from defaults.
Coordinates are never set here; geocoding fills them in later.
"""

import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from propmap.config import Settings, settings as default_settings
from propmap.extraction.segmenter import PropertySegment
from propmap.models.property import NormalizedProperty
from propmap.utils.date_helpers import parse_construction_year
from propmap.utils.japanese_address import normalize_digits
from propmap.utils.units import (
    Parsed,
    meters_to_sqft,
    meters_to_tsubo,
    parse_area_string,
    parse_man_yen_price_result,
    parse_tsubo_string,
    tsubo_to_meters,
)

logger = structlog.get_logger()

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


def new_property_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class AssembledProperty:
    property: NormalizedProperty
    price_defaulted: bool
    area_defaulted: bool


def canonical_layout(layout: str | None) -> str | None:
    """'2ldk ' -> '2LDK'. Full-width digits are folded to ASCII."""
    if not layout:
        return None
    compact = re.sub(r"\s+", "", normalize_digits(layout)).upper()
    return compact or None


def estimate_bedrooms(layout: str | None, area_meters: float | None, default: int = 2) -> int:
    """
    Bedroom count from the layout's leading digits, else by area band.

    <30㎡ -> 1, <60㎡ -> 2, otherwise 3. ``default`` when neither is known.
    """
    if layout:
        match = _LEADING_DIGITS.match(normalize_digits(layout))
        if match:
            return int(match.group(1))

    if area_meters is not None:
        if area_meters < 30:
            return 1
        if area_meters < 60:
            return 2
        return 3

    return default


def _parse_area(size: str | None, default: float) -> Parsed[float]:
    area = parse_area_string(size)
    if area is None:
        tsubo = parse_tsubo_string(size)
        if tsubo:
            area = round(tsubo_to_meters(tsubo), 2)
    if area is None or area <= 0:
        return Parsed(default, was_defaulted=True)
    return Parsed(area)


def assemble_with_report(
    segment: PropertySegment,
    id_factory: Callable[[], str] = new_property_id,
    config: Settings | None = None,
) -> AssembledProperty:
    """Build a NormalizedProperty and report which values were defaulted."""
    config = config or default_settings

    price = parse_man_yen_price_result(segment.price, default=config.default_price_yen)
    area = _parse_area(segment.size, default=config.default_area_sqm)

    tsubo = parse_tsubo_string(segment.size) if not area.was_defaulted else None
    if tsubo is None:
        tsubo = round(meters_to_tsubo(area.value), 2)

    layout = canonical_layout(segment.layout)
    # A defaulted area carries no information about the unit size
    bedrooms = estimate_bedrooms(
        layout,
        None if area.was_defaulted else area.value,
        default=config.default_bedrooms,
    )

    prop = NormalizedProperty(
        id=id_factory(),
        address=segment.address.strip(),
        price=price.value,
        bedrooms=bedrooms,
        bathrooms=config.default_bathrooms,
        sqft=round(meters_to_sqft(area.value)),
        property_name=segment.name,
        floor=segment.floor,
        area_meters=area.value,
        area_tsubo=tsubo,
        layout=layout,
        station=segment.station,
        building_type=segment.building_type,
        year_built=segment.year,
        construction_year=parse_construction_year(segment.year),
        is_japanese=segment.is_japanese,
    )

    if price.was_defaulted or area.was_defaulted:
        logger.debug(
            "Applied display defaults",
            address=prop.address[:50],
            price_defaulted=price.was_defaulted,
            area_defaulted=area.was_defaulted,
        )

    return AssembledProperty(
        property=prop,
        price_defaulted=price.was_defaulted,
        area_defaulted=area.was_defaulted,
    )


def assemble(
    segment: PropertySegment,
    id_factory: Callable[[], str] = new_property_id,
    config: Settings | None = None,
) -> NormalizedProperty:
    return assemble_with_report(segment, id_factory=id_factory, config=config).property
