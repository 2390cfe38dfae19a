"""
Split raw listing text that may describe several properties into segments.

Strategies, tried in order; the first one that yields at least one segment
wins so a listing is never counted twice:

1. LABELLED_BLOCKS   split on "物件名:" and read 住所/階数/面積/価格 lines
2. KEY_VALUE_LINES   walk key:value lines, starting a new segment at each
                     name key (物件名, マンション名, 建物名)
3. SEPARATED_BLOCKS  split on blank lines, numbered headers (物件1, No.1)
                     and rule lines (━━━, ===, ---); keep blocks that show
                     both a price and an area marker, then run the field
                     extractors on each block

A segment is kept only when it has a non-empty address.
"""

import re
from dataclasses import dataclass
from enum import Enum

import structlog

from propmap.extraction.fields import AddressSignal, extract_fields

logger = structlog.get_logger()


class SegmentStrategy(str, Enum):
    LABELLED_BLOCKS = "labelled_blocks"
    KEY_VALUE_LINES = "key_value_lines"
    SEPARATED_BLOCKS = "separated_blocks"
    WHOLE_TEXT = "whole_text"  # no split; the whole text is one listing


@dataclass(frozen=True)
class PropertySegment:
    """Raw, unprocessed label values for one listing."""

    address: str
    name: str | None = None
    floor: str | None = None
    size: str | None = None
    price: str | None = None
    layout: str | None = None
    station: str | None = None
    building_type: str | None = None
    year: str | None = None
    strategy: SegmentStrategy = SegmentStrategy.LABELLED_BLOCKS
    is_japanese: bool = True
    source_text: str = ""


NAME_LABEL_SPLIT = re.compile(r"物件名[:：]")

# Address labels shared with the listing service
ADDRESS_LABEL = r"(?:物件住所|住所(?:表示)?|所在地|住[居宅]表示)"

# Per-field sub-patterns for strategy 1. Horizontal whitespace only after the
# colon, so an empty value never swallows the next line.
_BLOCK_FIELD_PATTERNS: dict[str, re.Pattern] = {
    "address": re.compile(ADDRESS_LABEL + r"[ \t　]*[:：][ \t　]*([^\n]+)"),
    "floor": re.compile(r"階数[ \t　]*[:：][ \t　]*([^\n]+)"),
    "size": re.compile(r"面積[ \t　]*[:：][ \t　]*([^\n]+)"),
    "price": re.compile(r"価格[ \t　]*[:：][ \t　]*([^\n]+)"),
    "layout": re.compile(r"間取り?[ \t　]*[:：][ \t　]*([^\n]+)"),
    "station": re.compile(r"(?:最寄り?駅|交通)[ \t　]*[:：][ \t　]*([^\n]+)"),
    "building_type": re.compile(r"構造[ \t　]*[:：][ \t　]*([^\n]+)"),
    "year": re.compile(r"(?:築年月|竣工年月?|建築年月?)[ \t　]*[:：][ \t　]*([^\n]+)"),
}

# Keys recognised by strategy 2
NAME_KEYS = frozenset({"物件名", "マンション名", "建物名"})
_KEY_TO_FIELD: dict[str, str] = {
    "住所": "address",
    "所在地": "address",
    "物件住所": "address",
    "住所表示": "address",
    "住居表示": "address",
    "住宅表示": "address",
    "階数": "floor",
    "所在階": "floor",
    "面積": "size",
    "専有面積": "size",
    "価格": "price",
    "販売価格": "price",
    "間取り": "layout",
    "間取": "layout",
    "最寄駅": "station",
    "最寄り駅": "station",
    "交通": "station",
    "構造": "building_type",
    "建物構造": "building_type",
    "築年月": "year",
}

KEY_VALUE_SPLIT = re.compile(r"[:：]")

# Strategy 3 separators
_HEADER_LINE = re.compile(
    r"^\s*(?:【?物件(?:情報)?\s*[0-9０-９]+】?|No\.\s*[0-9０-９]+|[0-9０-９]+[.．)）]\s*$)"
)
_RULE_LINE = re.compile(r"^\s*(?:[━─＝=]{3,}|-{3,}|_{3,})\s*$")
_PRICE_MARKER = re.compile(r"万円|万|億|価格")
_AREA_MARKER = re.compile(r"㎡|m²|m2|平米|面積|坪")


def _first(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


# ---------------------------------------------------------------------------
# Strategy 1
# ---------------------------------------------------------------------------

def split_labelled_blocks(text: str) -> list[PropertySegment]:
    """Strategy 1: one segment per "物件名:" label; the preamble is skipped."""
    segments: list[PropertySegment] = []
    chunks = NAME_LABEL_SPLIT.split(text)

    for index, chunk in enumerate(chunks[1:], start=1):
        # The name is whatever shares the label's line, possibly nothing
        name = chunk.split("\n", 1)[0].strip()
        block = chunk.strip()
        fields = {key: _first(pattern, block) for key, pattern in _BLOCK_FIELD_PATTERNS.items()}

        address = fields.pop("address")
        if not address:
            logger.debug("Rejected labelled block without address", block_index=index)
            continue

        segments.append(
            PropertySegment(
                address=address,
                name=name or f"Property {index}",
                strategy=SegmentStrategy.LABELLED_BLOCKS,
                is_japanese=True,
                source_text=block,
                **fields,
            )
        )

    return segments


# ---------------------------------------------------------------------------
# Strategy 2
# ---------------------------------------------------------------------------

def _flush(current: dict[str, str], segments: list[PropertySegment], source_lines: list[str]) -> None:
    if not current.get("address"):
        return
    segments.append(
        PropertySegment(
            address=current["address"],
            name=current.get("name") or "Unknown Property",
            floor=current.get("floor"),
            size=current.get("size"),
            price=current.get("price"),
            layout=current.get("layout"),
            station=current.get("station"),
            building_type=current.get("building_type"),
            year=current.get("year"),
            strategy=SegmentStrategy.KEY_VALUE_LINES,
            is_japanese=True,
            source_text="\n".join(source_lines),
        )
    )


def scan_key_value_lines(text: str) -> list[PropertySegment]:
    """Strategy 2: accumulate key:value lines, flushing at each name key."""
    segments: list[PropertySegment] = []
    current: dict[str, str] = {}
    source_lines: list[str] = []

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line or not KEY_VALUE_SPLIT.search(line):
            continue

        key, value = (part.strip() for part in KEY_VALUE_SPLIT.split(line, maxsplit=1))
        if not key or not value:
            continue

        if key in NAME_KEYS:
            _flush(current, segments, source_lines)
            current = {"name": value}
            source_lines = [line]
            continue

        field = _KEY_TO_FIELD.get(key)
        if field is not None:
            current[field] = value
            source_lines.append(line)

    _flush(current, segments, source_lines)
    return segments


# ---------------------------------------------------------------------------
# Strategy 3
# ---------------------------------------------------------------------------

def split_separated_blocks(text: str) -> list[str]:
    """Split on blank lines, numbered headers and rule lines."""
    blocks: list[str] = []
    current: list[str] = []

    def close() -> None:
        if any(line.strip() for line in current):
            blocks.append("\n".join(current).strip())
        current.clear()

    for line in text.split("\n"):
        if not line.strip() or _RULE_LINE.match(line):
            close()
        elif _HEADER_LINE.match(line):
            close()
            current.append(line)
        else:
            current.append(line)
    close()

    return blocks


def extract_separated_blocks(text: str) -> list[PropertySegment]:
    """Strategy 3: blocks with both price and area evidence, fields extracted per block."""
    segments: list[PropertySegment] = []

    for index, block in enumerate(split_separated_blocks(text)):
        if not (_PRICE_MARKER.search(block) and _AREA_MARKER.search(block)):
            logger.debug("Rejected block without price and area markers", block_index=index)
            continue

        fields = extract_fields(block)
        if fields.address_signal is not AddressSignal.FOUND or not fields.address:
            logger.debug("Rejected block without resolvable address", block_index=index)
            continue

        segments.append(
            PropertySegment(
                address=fields.address,
                name=fields.property_name,
                floor=fields.floor,
                size=fields.size_with_tsubo,
                price=fields.price,
                layout=fields.layout,
                station=fields.station,
                building_type=fields.building_type,
                year=fields.year,
                strategy=SegmentStrategy.SEPARATED_BLOCKS,
                is_japanese=fields.is_japanese,
                source_text=block,
            )
        )

    return segments


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

class ListingSegmenter:
    """Runs the three strategies in order and keeps the first non-empty result."""

    strategies = (
        (SegmentStrategy.LABELLED_BLOCKS, split_labelled_blocks),
        (SegmentStrategy.KEY_VALUE_LINES, scan_key_value_lines),
        (SegmentStrategy.SEPARATED_BLOCKS, extract_separated_blocks),
    )

    def segment(self, text: str | None) -> list[PropertySegment]:
        if not text or not text.strip():
            return []

        normalized = text.replace("\r\n", "\n").replace("\r", "\n")

        for strategy, run in self.strategies:
            segments = run(normalized)
            if segments:
                logger.debug("Segmented listing text", strategy=strategy.value, segments=len(segments))
                return segments

        logger.debug("No listing segments found", length=len(normalized))
        return []


def segment_listings(text: str | None) -> list[PropertySegment]:
    return ListingSegmenter().segment(text)
