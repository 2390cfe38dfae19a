"""Listing service - turns raw listing text into NormalizedProperty records."""

import re
from collections.abc import Callable

import structlog

from propmap.config import Settings, settings as default_settings
from propmap.extraction.assembler import AssembledProperty, assemble_with_report, new_property_id
from propmap.extraction.fields import AddressSignal, extract_fields
from propmap.extraction.segmenter import (
    ADDRESS_LABEL,
    ListingSegmenter,
    PropertySegment,
    SegmentStrategy,
)
from propmap.models.property import NormalizedProperty
from propmap.utils.japanese_address import (
    TOKYO_CITIES,
    TOKYO_WARDS,
    has_cjk,
    normalize_address,
)

logger = structlog.get_logger()

LABELLED_ADDRESS_PATTERN = re.compile(ADDRESS_LABEL + r"[ \t　]*[:：][ \t　]*([^\n]+)")
_TOKYO_LOCATIONS = "|".join(TOKYO_WARDS + TOKYO_CITIES)
TOKYO_LINE_PATTERN = re.compile(rf"(東京都[^\n]*(?:{_TOKYO_LOCATIONS})[^\n]*)")
US_ADDRESS_PATTERN = re.compile(
    r"(\d+[ \t]+[\w \t]+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr"
    r"|Court|Ct|Place|Pl|Terrace|Ter|Way),[ \t]+[\w \t]+,[ \t]+[A-Z]{2}[ \t]+\d{5})",
    re.IGNORECASE,
)


def _single_listing_segment(text: str) -> tuple[PropertySegment, AddressSignal] | None:
    """Treat the whole text as one listing, as for a single scanned page."""
    fields = extract_fields(text)
    if not fields.address:
        return None
    return PropertySegment(
        address=fields.address,
        name=fields.property_name,
        floor=fields.floor,
        size=fields.size_with_tsubo,
        price=fields.price,
        layout=fields.layout,
        station=fields.station,
        building_type=fields.building_type,
        year=fields.year,
        strategy=SegmentStrategy.WHOLE_TEXT,
        is_japanese=fields.is_japanese,
        source_text=text,
    ), fields.address_signal


class ListingService:
    """Segment, assemble and report on listing text."""

    def __init__(
        self,
        config: Settings | None = None,
        id_factory: Callable[[], str] = new_property_id,
    ):
        self.config = config or default_settings
        self.id_factory = id_factory
        self.segmenter = ListingSegmenter()

    def parse_with_report(self, text: str | None, keep_ambiguous: bool = False) -> list[AssembledProperty]:
        """
        Parse raw text into assembled properties with default-substitution flags.

        When no strategy yields a segment the whole text is tried as a single
        listing. A single listing whose address is only the prefecture
        sentinel is dropped unless ``keep_ambiguous`` is set.
        """
        if not text or not text.strip():
            return []

        segments = self.segmenter.segment(text)

        if not segments:
            single = _single_listing_segment(text)
            if single is not None:
                segment, signal = single
                if signal is AddressSignal.AMBIGUOUS and not keep_ambiguous:
                    logger.info("Dropped listing with unresolved address", sentinel=segment.address)
                else:
                    segments = [segment]

        results = [
            assemble_with_report(segment, id_factory=self.id_factory, config=self.config)
            for segment in segments
        ]

        logger.info(
            "Parsed listing text",
            properties=len(results),
            strategy=segments[0].strategy.value if segments else None,
            price_defaulted=sum(r.price_defaulted for r in results),
            area_defaulted=sum(r.area_defaulted for r in results),
        )
        return results

    def parse(self, text: str | None, keep_ambiguous: bool = False) -> list[NormalizedProperty]:
        return [r.property for r in self.parse_with_report(text, keep_ambiguous=keep_ambiguous)]


def parse_listings(text: str | None, keep_ambiguous: bool = False) -> list[NormalizedProperty]:
    return ListingService().parse(text, keep_ambiguous=keep_ambiguous)


def harvest_addresses(text: str | None) -> list[str]:
    """
    Collect every address mentioned in a text file.

    Japanese text: labelled 住所/所在地/物件住所/住居表示 lines (inside 物件名
    blocks or not), then 東京都 lines naming a ward or Tama city. Text
    without CJK characters falls back to US street addresses. Duplicates (after
    address normalisation) are removed, first occurrence wins.
    """
    if not text:
        return []

    found: list[str] = []

    if has_cjk(text):
        found.extend(m.group(1) for m in LABELLED_ADDRESS_PATTERN.finditer(text))
        found.extend(m.group(1) for m in TOKYO_LINE_PATTERN.finditer(text))
    else:
        found.extend(m.group(1) for m in US_ADDRESS_PATTERN.finditer(text))

    addresses: list[str] = []
    seen: set[str] = set()
    for raw in found:
        address = raw.strip()
        if not address:
            continue
        key = normalize_address(address)
        if key in seen:
            continue
        seen.add(key)
        addresses.append(address)

    logger.info("Harvested addresses", count=len(addresses))
    return addresses
