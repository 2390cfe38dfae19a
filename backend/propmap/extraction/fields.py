"""
Field extractors for Japanese property listing text.

Each field (address, price, size, layout, station, building type, year,
floor, property name) has its own FieldExtractor with an ordered rule
table. Extractors return None on failure; defaults are applied later by the
assembler, never here.

Address extraction has three distinct outcomes:
- FOUND: a known building or a structural rule produced an address
- AMBIGUOUS: the text is Japanese but nothing resolved; a bare prefecture
  sentinel is returned
- NO_SIGNAL: no CJK characters at all; the caller should try the US
  extractor instead
"""

import re
from dataclasses import dataclass
from enum import Enum

import structlog

from propmap.extraction.patterns import CaptureKind, FieldExtractor, FieldMatch, rule
from propmap.utils.japanese_address import (
    TOKYO_WARDS,
    find_prefecture,
    has_cjk,
    normalize_digits,
)

logger = structlog.get_logger()

DEFAULT_PREFECTURE = "東京都"

# Shared fragments
_DIGIT = "0-9０-９"
_NUM = rf"[{_DIGIT}][{_DIGIT},，]*(?:[.．][{_DIGIT}]+)?"
_PREFECTURE = r"(?:東京都|大阪府|京都府|北海道|[^\s]{2,3}県)"
_WARDS = "|".join(TOKYO_WARDS)
_PRICE_VALUE = rf"(?:{_NUM}\s*億\s*(?:{_NUM}\s*)?万?円|{_NUM}\s*万円)"
_AREA_UNIT = r"(?:m²|㎡|m2|平米|平方メートル)"
_LAYOUT = rf"[{_DIGIT}]{{1,2}}\s*(?:S?LDK|S?DK|S?K|R)"
_KNOWN_LINES = r"(?:銀座線|都営浅草線|常磐線|京成本線)"
_WALK = rf"(?:\s*徒歩\s*[{_DIGIT}]+\s*分)?"
_US_STREET = (
    r"(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr"
    r"|Court|Ct|Place|Pl|Terrace|Ter|Way)\b"
)


class AddressSignal(str, Enum):
    FOUND = "found"
    AMBIGUOUS = "ambiguous"
    NO_SIGNAL = "no_signal"


@dataclass(frozen=True)
class AddressResult:
    signal: AddressSignal
    value: str | None = None
    source: str | None = None  # rule name, "known_building" or "sentinel"


@dataclass(frozen=True)
class KnownBuilding:
    """
    A building whose canonical address is known ahead of time.

    Matches when the full name appears, or when every keyword group in any
    one of ``keyword_sets`` has at least one member in the text.
    OCR mangles building names often enough that the partial keyword
    route catches most real-world scans.
    """

    name: str
    address: str
    aliases: tuple[str, ...] = ()
    keyword_sets: tuple[tuple[tuple[str, ...], ...], ...] = ()

    def matches(self, text: str) -> bool:
        if any(alias in text for alias in (self.name, *self.aliases)):
            return True
        return any(
            all(any(keyword in text for keyword in group) for group in keyword_set)
            for keyword_set in self.keyword_sets
        )


KNOWN_BUILDINGS: tuple[KnownBuilding, ...] = (
    KnownBuilding(
        name="AXAS駒込Luxease",
        address="東京都豊島区駒込1-16-8",
        aliases=("AXAS駒込", "駒込Luxease"),
        keyword_sets=(
            (("AXAS", "アクサス"), ("駒込",)),
            (("駒込",), ("Luxease", "ラグジース")),
        ),
    ),
    KnownBuilding(
        name="ジェイパレス浅草今戸",
        address="東京都台東区今戸1-15-6号",
        keyword_sets=((("ジェイパレス",), ("浅草",)),),
    ),
    KnownBuilding(
        name="セザール京成小岩",
        address="東京都江戸川区北小岩6丁目14-7",
        keyword_sets=((("セザール",), ("小岩",)),),
    ),
)


def find_known_building(text: str | None) -> KnownBuilding | None:
    if not text:
        return None
    for building in KNOWN_BUILDINGS:
        if building.matches(text):
            return building
    return None


def _compact_digits(value: str) -> str:
    """Half-width digits with whitespace removed: '３，７８０ 万円' -> '3,780万円'."""
    return re.sub(r"\s+", "", normalize_digits(value))


def _canonical_layout(value: str) -> str:
    return _compact_digits(value).upper()


# ---------------------------------------------------------------------------
# Rule tables (priority order)
# ---------------------------------------------------------------------------

ADDRESS_EXTRACTOR = FieldExtractor(
    field="address",
    rules=(
        rule("shozaichi_labelled", r"所在地[^\n：:]{0,12}[：:]\s*([^\n]+)"),
        rule("overview_jusho_hyoji", r"物件概要[\s\S]*?住所表示[：:]\s*([^\n]+)"),
        rule("jukyo_hyoji_labelled", r"住[居宅]表示[^\n：:]{0,12}[：:]\s*([^\n]+)"),
        rule("jusho_labelled", r"(?:物件)?住所[ \t　]*[：:]\s*([^\n]+)"),
        rule(
            "shozaichi_tokyo",
            r"所在地\s*[^：:]*?東京都([^\n\r]+)",
            CaptureKind.PREFIXED,
            prefix="東京都",
        ),
        rule(
            "tokyo_ward",
            rf"(?:^|(?<=[\s:：、,(（「【])|(?<=東京都))({_WARDS})([^\s,、。:：]+)",
            CaptureKind.JOINED,
            prefix="東京都",
        ),
        rule(
            "prefecture_city_block",
            rf"{_PREFECTURE}[^\s]{{2,3}}(?:市|区|町|村)(?:[^\s]{{1,3}}区)?[^\s]{{2,4}}"
            rf"(?:\d+-\d+-\d+|\d+-\d+|\d+|[０-９]+[-－][０-９]+|[０-９]+)",
            CaptureKind.WHOLE,
        ),
        rule(
            "transit_line_prefixed",
            rf"(?:JR山手線|東京メトロ)[\s\S]*?({_PREFECTURE}[^\s]{{2,3}}(?:市|区|町|村)[^\s]{{2,4}})",
        ),
        rule("tokyo_any", r"東京都[^\s]{3,20}", CaptureKind.WHOLE),
        rule(
            "bare_ward",
            r"(?<![市町村])([^\s市町村県都府道]{2,3}区)",
            CaptureKind.PREFIXED,
            prefix="東京都",
        ),
    ),
)

US_ADDRESS_EXTRACTOR = FieldExtractor(
    field="us_address",
    rules=(
        rule(
            "street_city_state_zip",
            rf"(\d+[ \t]+[\w \t]+{_US_STREET},[ \t]+[\w \t]+,[ \t]+[A-Z]{{2}}[ \t]+\d{{5}})",
            flags=re.IGNORECASE,
            japanese=False,
        ),
        rule(
            "street_city_state",
            rf"(\d+[ \t]+[\w \t]+{_US_STREET},[ \t]+[\w \t]+,[ \t]+[A-Z]{{2}})",
            flags=re.IGNORECASE,
            japanese=False,
        ),
        rule(
            "street_only",
            rf"(\d+[ \t]+[\w \t]+{_US_STREET})",
            flags=re.IGNORECASE,
            japanese=False,
        ),
    ),
)

PRICE_EXTRACTOR = FieldExtractor(
    field="price",
    rules=(
        rule("price_labelled", rf"(?:価格|販売価格|価額|金額)[\s\S]*?({_PRICE_VALUE})"),
        rule("man_yen", rf"({_PRICE_VALUE})"),
        rule("price_labelled_bare", rf"(?:価格|販売価格|価額)[^{_DIGIT}]*({_NUM})", suffix="万円"),
        rule("man_only", rf"({_NUM})\s*万(?!円)", suffix="万円"),
    ),
    normalize=_compact_digits,
)

SIZE_EXTRACTOR = FieldExtractor(
    field="size",
    rules=(
        rule("area_labelled", rf"(?:専有面積|面積)[\s\S]*?({_NUM}\s*{_AREA_UNIT})"),
        rule("area_with_unit", rf"({_NUM}\s*{_AREA_UNIT})"),
        rule("area_labelled_bare", rf"専有面積[^{_DIGIT}]*({_NUM})", suffix="m²"),
    ),
    normalize=_compact_digits,
)

TSUBO_EXTRACTOR = FieldExtractor(
    field="tsubo",
    rules=(
        rule("tsubo_approx", rf"約\s*({_NUM})\s*坪"),
        rule("tsubo", rf"({_NUM})\s*坪"),
    ),
    normalize=_compact_digits,
)

FLOOR_EXTRACTOR = FieldExtractor(
    field="floor",
    rules=(
        rule("floor_labelled", rf"階数[\s\S]{{0,30}}?([{_DIGIT}]+)\s*[階FＦ]", suffix="階"),
        rule("floor_portion", rf"([{_DIGIT}]+)\s*階部分", suffix="階"),
        rule(
            "floor_kanji",
            rf"(?<![{_DIGIT}])(?<!地上)(?<!地下)([{_DIGIT}]{{1,2}})\s*階(?!建)",
            suffix="階",
        ),
        rule(
            "floor_f",
            rf"(?<![{_DIGIT}A-Za-z])([{_DIGIT}]{{1,2}})\s*[FＦ](?![A-Za-z])",
            suffix="階",
            japanese=False,
        ),
    ),
    normalize=_compact_digits,
)

LAYOUT_EXTRACTOR = FieldExtractor(
    field="layout",
    rules=(
        rule(
            "layout_labelled",
            rf"(?:間取り|間取)[\s\S]*?({_LAYOUT})(?![A-Za-z])",
            flags=re.IGNORECASE,
        ),
        rule(
            "layout",
            rf"(?<![{_DIGIT}A-Za-z])({_LAYOUT})(?![A-Za-z])",
            flags=re.IGNORECASE,
            japanese=False,
        ),
    ),
    normalize=_canonical_layout,
)

STATION_EXTRACTOR = FieldExtractor(
    field="station",
    rules=(
        rule("station_labelled", r"(?:最寄駅|最寄り駅|交通)[ \t　]*[：:]\s*([^\n]+)"),
        rule("known_line", rf"({_KNOWN_LINES}[^\n]*?[^\s]+駅{_WALK})"),
        rule("any_line", rf"([^\s]+線[^\n]*?[^\s]+駅{_WALK})"),
        rule("station_walk", rf"([^\s]+駅[^\n]*?徒歩\s*[{_DIGIT}]+\s*分)"),
    ),
)

BUILDING_TYPE_EXTRACTOR = FieldExtractor(
    field="building_type",
    rules=(
        rule(
            "structure_labelled",
            rf"(?:構造|建物構造)[\s\S]*?((?:鉄骨鉄筋コンクリート|鉄筋コンクリート|SRC|RC)造?"
            rf"(?:地上)?(?:[{_DIGIT}]+階建て?)?)",
        ),
        rule("rc_above_ground", rf"((?:SRC|RC)造地上[{_DIGIT}]+階建て?)"),
        rule("concrete_storeys", rf"((?:鉄骨鉄筋コンクリート|鉄筋コンクリート)造?[{_DIGIT}]+階建て?)"),
        rule("structure_any", r"((?:鉄骨鉄筋コンクリート|鉄筋コンクリート|SRC|RC|鉄骨|木)造)"),
    ),
    normalize=normalize_digits,
)

_YEAR_VALUE = (
    rf"[{_DIGIT}]{{4}}年[{_DIGIT}]{{1,2}}月|[{_DIGIT}]{{4}}年"
    rf"|(?:令和|平成|昭和)(?:[{_DIGIT}]{{1,2}}|元)年(?:[{_DIGIT}]{{1,2}}月)?"
)

YEAR_EXTRACTOR = FieldExtractor(
    field="year",
    rules=(
        rule("year_labelled", rf"(?:築年月|竣工年月?|建築年月?|完成年月?)[\s\S]*?({_YEAR_VALUE})"),
        rule("western_year", rf"([{_DIGIT}]{{4}}年[{_DIGIT}]{{1,2}}月|[{_DIGIT}]{{4}}年)"),
        rule("era_year", rf"((?:令和|平成|昭和)(?:[{_DIGIT}]{{1,2}}|元)年(?:[{_DIGIT}]{{1,2}}月)?)"),
    ),
    normalize=normalize_digits,
)

PROPERTY_NAME_EXTRACTOR = FieldExtractor(
    field="property_name",
    rules=(
        rule("name_labelled", r"(?:物件名|マンション名|建物名)[ \t　]*[：:][ \t　]*([^\n]+)"),
    ),
)


# ---------------------------------------------------------------------------
# Public extraction functions
# ---------------------------------------------------------------------------

def resolve_address(text: str | None) -> AddressResult:
    """
    Resolve a Japanese address from raw listing text.

    Order: known building shortcut, then structural rules, then a bare
    prefecture sentinel when the text is Japanese but unresolved.
    """
    if not text or not has_cjk(text):
        return AddressResult(AddressSignal.NO_SIGNAL)

    building = find_known_building(text)
    if building is not None:
        return AddressResult(AddressSignal.FOUND, building.address, "known_building")

    found = ADDRESS_EXTRACTOR.match(text)
    if found is not None:
        return AddressResult(AddressSignal.FOUND, found.value, found.rule.name)

    sentinel = find_prefecture(text) or DEFAULT_PREFECTURE
    logger.debug("Japanese text without a resolvable address", sentinel=sentinel)
    return AddressResult(AddressSignal.AMBIGUOUS, sentinel, "sentinel")


def extract_address(text: str | None) -> str | None:
    """Japanese address, the prefecture sentinel, or None for non-Japanese text."""
    return resolve_address(text).value


def extract_us_address(text: str | None) -> str | None:
    return US_ADDRESS_EXTRACTOR.extract(text)


def extract_any_address(text: str | None) -> str | None:
    """Japanese address first; US street address when the text has no CJK."""
    result = resolve_address(text)
    if result.signal is AddressSignal.NO_SIGNAL:
        return extract_us_address(text)
    return result.value


def extract_price(text: str | None) -> str | None:
    return PRICE_EXTRACTOR.extract(text)


def extract_size(text: str | None) -> str | None:
    return SIZE_EXTRACTOR.extract(text)


def extract_tsubo(text: str | None) -> str | None:
    return TSUBO_EXTRACTOR.extract(text)


def extract_floor(text: str | None) -> str | None:
    return FLOOR_EXTRACTOR.extract(text)


def extract_layout(text: str | None) -> str | None:
    return LAYOUT_EXTRACTOR.extract(text)


def extract_station(text: str | None) -> str | None:
    return STATION_EXTRACTOR.extract(text)


def extract_building_type(text: str | None) -> str | None:
    return BUILDING_TYPE_EXTRACTOR.extract(text)


def extract_year(text: str | None) -> str | None:
    return YEAR_EXTRACTOR.extract(text)


def extract_property_name(text: str | None) -> str | None:
    """Labelled 物件名/マンション名 first, then the known-building list."""
    name = PROPERTY_NAME_EXTRACTOR.extract(text)
    if name:
        return name
    building = find_known_building(text)
    return building.name if building else None


@dataclass(frozen=True)
class ExtractedFields:
    """Every field extracted from one block of text, unprocessed."""

    address: str | None
    address_signal: AddressSignal
    property_name: str | None = None
    floor: str | None = None
    size: str | None = None
    tsubo: str | None = None
    price: str | None = None
    layout: str | None = None
    station: str | None = None
    building_type: str | None = None
    year: str | None = None
    is_japanese: bool = False

    @property
    def size_with_tsubo(self) -> str | None:
        """Size in the listing form '30.31㎡ (約9.16坪)' when both are known."""
        if self.size and self.tsubo and "坪" not in self.size:
            return f"{self.size} (約{self.tsubo}坪)"
        return self.size


def extract_fields(text: str | None) -> ExtractedFields:
    """Run every field extractor over one block of text."""
    address = resolve_address(text)
    if address.signal is AddressSignal.NO_SIGNAL:
        us_address = extract_us_address(text)
        if us_address:
            address = AddressResult(AddressSignal.FOUND, us_address, "us_address")

    matches: dict[str, FieldMatch | None] = {
        "floor": FLOOR_EXTRACTOR.match(text),
        "size": SIZE_EXTRACTOR.match(text),
        "tsubo": TSUBO_EXTRACTOR.match(text),
        "price": PRICE_EXTRACTOR.match(text),
        "layout": LAYOUT_EXTRACTOR.match(text),
        "station": STATION_EXTRACTOR.match(text),
        "building_type": BUILDING_TYPE_EXTRACTOR.match(text),
        "year": YEAR_EXTRACTOR.match(text),
    }

    is_japanese = (
        address.signal is AddressSignal.AMBIGUOUS
        or address.source not in (None, "us_address")
        or any(m is not None and m.japanese for m in matches.values())
    )

    return ExtractedFields(
        address=address.value,
        address_signal=address.signal,
        property_name=extract_property_name(text),
        is_japanese=is_japanese,
        **{key: (m.value if m else None) for key, m in matches.items()},
    )
