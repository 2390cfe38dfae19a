"""Tests for property export and import."""

import json

import pytest
from pydantic import ValidationError

from propmap.extraction.segmenter import segment_listings
from propmap.models.property import NormalizedProperty
from propmap.services.export_service import (
    PropertyImportError,
    export_properties,
    export_properties_csv,
    format_listing_block,
    import_properties,
)


@pytest.fixture
def geocoded():
    return [
        NormalizedProperty(
            id="p1",
            address="東京都豊島区駒込1-16-8",
            price=37_800_000,
            bedrooms=2,
            sqft=326,
            lat=35.7365,
            lng=139.747,
            property_name="AXAS駒込Luxease",
            floor="6階",
            area_meters=30.31,
            area_tsubo=9.16,
            is_japanese=True,
        ),
        NormalizedProperty(
            id="p2",
            address="東京都台東区今戸1-15-6号",
            price=24_800_000,
            bedrooms=1,
            sqft=274,
            lat=35.7188,
            lng=139.8052,
        ),
    ]


def _record(**overrides):
    record = {"id": "p1", "address": "東京都豊島区駒込1-16-8", "lat": 35.7, "lng": 139.7}
    record.update(overrides)
    return record


class TestExport:
    def test_camel_case_keys(self, geocoded):
        data = json.loads(export_properties(geocoded))
        assert data[0]["propertyName"] == "AXAS駒込Luxease"
        assert data[0]["areaTsubo"] == 9.16
        assert data[0]["isJapanese"] is True
        assert data[1]["propertyName"] is None

    def test_keeps_japanese_text(self, geocoded):
        assert "駒込" in export_properties(geocoded)

    def test_round_trip(self, geocoded):
        assert import_properties(export_properties(geocoded)) == geocoded

    def test_csv(self, geocoded):
        lines = export_properties_csv(geocoded).splitlines()
        assert lines[0].startswith("id,address,property_name,price")
        assert len(lines) == 3
        assert "東京都豊島区駒込1-16-8" in lines[1]


class TestImport:
    def test_minimal_record(self):
        (prop,) = import_properties(json.dumps([_record()]))
        assert prop.address == "東京都豊島区駒込1-16-8"
        assert prop.lat == 35.7
        assert prop.needs_geocoding is False

    def test_integer_coordinates_accepted(self):
        (prop,) = import_properties(json.dumps([_record(lat=35, lng=139)]))
        assert prop.lat == 35.0

    def test_one_bad_record_rejects_batch(self):
        batch = [_record(), _record(id="p2", lat=None)]
        with pytest.raises(PropertyImportError) as exc_info:
            import_properties(json.dumps(batch))
        assert isinstance(exc_info.value.__cause__, ValidationError)

    @pytest.mark.parametrize(
        "bad",
        [
            {"id": ""},
            {"id": 123},
            {"address": ""},
            {"address": "   "},
            {"lat": "35.7"},
            {"lng": None},
        ],
    )
    def test_invalid_fields(self, bad):
        with pytest.raises(PropertyImportError):
            import_properties(json.dumps([_record(**bad)]))

    def test_missing_coordinates(self):
        record = _record()
        del record["lng"]
        with pytest.raises(PropertyImportError):
            import_properties(json.dumps([record]))

    def test_missing_id(self):
        record = _record()
        del record["id"]
        with pytest.raises(PropertyImportError):
            import_properties(json.dumps([record]))

    def test_not_json(self):
        with pytest.raises(PropertyImportError) as exc_info:
            import_properties("{not json")
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_not_a_list(self):
        with pytest.raises(PropertyImportError):
            import_properties(json.dumps(_record()))

    def test_is_value_error(self):
        assert issubclass(PropertyImportError, ValueError)


class TestFormatListingBlock:
    def test_layout(self, geocoded):
        assert format_listing_block(geocoded[0]) == (
            "物件名: AXAS駒込Luxease\n"
            "住所: 東京都豊島区駒込1-16-8\n"
            "階数: 6階\n"
            "面積: 30.31㎡ (約9.16坪)\n"
            "価格: 3,780万円"
        )

    def test_blocks_read_back_by_segmenter(self, geocoded):
        text = "\n\n".join(format_listing_block(p) for p in geocoded)
        segments = segment_listings(text)
        assert [s.address for s in segments] == [p.address for p in geocoded]
        assert segments[0].size == "30.31㎡ (約9.16坪)"
        assert segments[1].floor is None

    def test_unnamed_block_read_back_without_borrowing_address(self, geocoded):
        (segment,) = segment_listings(format_listing_block(geocoded[1]))
        assert segment.name == "Property 1"
        assert segment.address == geocoded[1].address
