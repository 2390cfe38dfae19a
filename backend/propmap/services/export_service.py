"""Export and import of NormalizedProperty lists (JSON, CSV and listing text)."""

import csv
import io
import json

import structlog
from pydantic import TypeAdapter, ValidationError

from propmap.models.property import ImportedPropertyRecord, NormalizedProperty
from propmap.utils.units import format_area, format_man_yen

logger = structlog.get_logger()

_IMPORT_ADAPTER = TypeAdapter(list[ImportedPropertyRecord])

CSV_COLUMNS = [
    "id", "address", "property_name", "price", "bedrooms", "bathrooms",
    "sqft", "area_meters", "area_tsubo", "floor", "layout", "station",
    "building_type", "year_built", "construction_year", "lat", "lng",
    "is_japanese",
]


class PropertyImportError(ValueError):
    """An import batch was rejected. No record from the batch is kept."""


def export_properties(properties: list[NormalizedProperty], indent: int | None = 2) -> str:
    """Serialize properties to a JSON array with camelCase keys."""
    payload = [p.to_record().model_dump(mode="json", by_alias=True) for p in properties]
    logger.info("Exported properties", count=len(payload))
    return json.dumps(payload, ensure_ascii=False, indent=indent)


def import_properties(text: str) -> list[NormalizedProperty]:
    """
    Parse an exported JSON array back into properties.

    Every record must have a string ``id``, a non-empty ``address`` and
    numeric ``lat``/``lng``. One bad record rejects the whole batch.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise PropertyImportError(f"Import file is not valid JSON: {e.msg}") from e

    if not isinstance(raw, list):
        raise PropertyImportError("Import file must contain a JSON array of properties")

    try:
        records = _IMPORT_ADAPTER.validate_python(raw)
    except ValidationError as e:
        logger.warning("Rejected property import", records=len(raw), errors=e.error_count())
        raise PropertyImportError(
            f"Invalid property data: {e.error_count()} error(s), first at "
            f"{'.'.join(str(part) for part in e.errors()[0]['loc'])}"
        ) from e

    logger.info("Imported properties", count=len(records))
    return [record.to_property() for record in records]


def export_properties_csv(properties: list[NormalizedProperty]) -> str:
    """Export properties as CSV, one row per property."""
    output = io.StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow(CSV_COLUMNS)

    for p in properties:
        writer.writerow([
            p.id, p.address, p.property_name or "", p.price, p.bedrooms, p.bathrooms,
            p.sqft if p.sqft is not None else "",
            p.area_meters if p.area_meters is not None else "",
            p.area_tsubo if p.area_tsubo is not None else "",
            p.floor or "", p.layout or "", p.station or "",
            p.building_type or "", p.year_built or "", p.construction_year or "",
            p.lat if p.lat is not None else "",
            p.lng if p.lng is not None else "",
            "true" if p.is_japanese else "false",
        ])

    return output.getvalue()


def format_listing_block(prop: NormalizedProperty) -> str:
    """
    Render a property in the labelled text layout the extractor reads.

    物件名: AXAS駒込Luxease
    住所: 東京都豊島区駒込1-16-8
    階数: 6階
    面積: 30.31㎡ (約9.16坪)
    価格: 3,780万円
    """
    area = format_area(prop.area_meters, prop.area_tsubo) if prop.area_meters else ""
    lines = [
        f"物件名: {prop.property_name or ''}",
        f"住所: {prop.address}",
        f"階数: {prop.floor or ''}",
        f"面積: {area}",
        f"価格: {format_man_yen(prop.price)}",
    ]
    return "\n".join(lines)
