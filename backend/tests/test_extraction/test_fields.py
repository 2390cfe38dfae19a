"""Tests for listing field extraction."""

import pytest

from propmap.extraction.fields import (
    AddressSignal,
    extract_address,
    extract_any_address,
    extract_building_type,
    extract_fields,
    extract_floor,
    extract_layout,
    extract_price,
    extract_property_name,
    extract_size,
    extract_station,
    extract_year,
    find_known_building,
    resolve_address,
)


class TestAddressExtraction:
    def test_known_building_keywords(self):
        text = "AXAS 駒込 ルクシース\n6階 30.31㎡"
        assert extract_address(text) == "東京都豊島区駒込1-16-8"

    def test_known_building_beats_structural_rules(self):
        text = "AXAS駒込 最上階\n東京都文京区本駒込2-1-1 付近"
        result = resolve_address(text)
        assert result.value == "東京都豊島区駒込1-16-8"
        assert result.source == "known_building"

    def test_no_cjk_returns_none(self):
        text = "123 Main St, Springfield, IL 62701 price $500,000"
        assert extract_address(text) is None
        assert resolve_address(text).signal is AddressSignal.NO_SIGNAL

    def test_empty_is_no_signal(self):
        assert resolve_address("").signal is AddressSignal.NO_SIGNAL
        assert resolve_address(None).value is None

    def test_labelled_shozaichi(self):
        text = "所在地：東京都台東区今戸1-15-6\n価格：2,480万円"
        result = resolve_address(text)
        assert result.signal is AddressSignal.FOUND
        assert result.value == "東京都台東区今戸1-15-6"
        assert result.source == "shozaichi_labelled"

    def test_ward_gets_tokyo_prefix(self):
        assert extract_address("豊島区駒込1-16-8 6階") == "東京都豊島区駒込1-16-8"

    def test_other_city_ward_not_taken_for_tokyo(self):
        assert extract_address("大阪府大阪市北区梅田1-2-3 駅近") == "大阪府大阪市北区梅田1-2-3"

    def test_ward_name_inside_longer_ward_not_taken_for_tokyo(self):
        result = resolve_address("神奈川県横浜市港北区日吉2-1-1 駅近")
        assert result.signal is AddressSignal.FOUND
        assert result.value == "神奈川県横浜市港北区日吉2-1-1"

    def test_city_ward_without_prefecture_not_taken_for_tokyo(self):
        address = extract_address("横浜市港北区日吉2-1-1")
        assert not address.startswith("東京都港北区")
        assert not address.startswith("東京都北区")

    def test_ward_after_label(self):
        assert extract_address("エリア：豊島区駒込1-16-8") == "東京都豊島区駒込1-16-8"

    def test_ambiguous_returns_sentinel(self):
        result = resolve_address("価格 3,000万円の物件です")
        assert result.signal is AddressSignal.AMBIGUOUS
        assert result.value == "東京都"

    def test_ambiguous_sentinel_uses_prefecture_in_text(self):
        result = resolve_address("大阪府の物件")
        assert result.signal is AddressSignal.AMBIGUOUS
        assert result.value == "大阪府"

    def test_any_address_falls_back_to_us(self):
        text = "123 Main St, Springfield, IL 62701"
        assert extract_any_address(text) == "123 Main St, Springfield, IL 62701"


class TestKnownBuildings:
    def test_full_name(self):
        assert find_known_building("セザール京成小岩 5階").address == "東京都江戸川区北小岩6丁目14-7"

    def test_partial_keywords(self):
        assert find_known_building("駒込 Luxease 6F").name == "AXAS駒込Luxease"

    def test_unrelated(self):
        assert find_known_building("駒込駅 徒歩5分") is None


class TestFieldExtractors:
    def test_price_labelled_fullwidth(self):
        assert extract_price("販売価格 ３，７８０万円（税込）") == "3,780万円"

    def test_price_man_only(self):
        assert extract_price("3,780万") == "3,780万円"

    def test_price_oku(self):
        assert extract_price("価格：1億2000万円") == "1億2000万円"

    def test_price_missing(self):
        assert extract_price("価格応相談") is None

    def test_size_labelled(self):
        assert extract_size("専有面積：59.58平米") == "59.58平米"

    def test_size_missing(self):
        assert extract_size("面積不明") is None

    def test_floor_portion(self):
        assert extract_floor("RC造地上10階建 6階部分") == "6階"

    def test_building_height_is_not_a_floor(self):
        assert extract_floor("RC造地上10階建") is None

    def test_floor_f(self):
        assert extract_floor("6F 南向き") == "6階"

    def test_layout_canonical_upper(self):
        assert extract_layout("間取り: 2ldk") == "2LDK"

    def test_station_known_line(self):
        assert extract_station("銀座線 浅草駅 徒歩12分") == "銀座線 浅草駅 徒歩12分"

    def test_station_labelled(self):
        assert extract_station("最寄駅：JR山手線「駒込」駅 徒歩4分") == "JR山手線「駒込」駅 徒歩4分"

    def test_building_type(self):
        assert extract_building_type("構造：RC造地上10階建") == "RC造地上10階建"

    def test_year_era(self):
        assert extract_year("築年月：平成21年6月") == "平成21年6月"

    def test_year_western(self):
        assert extract_year("2008年2月築") == "2008年2月"

    def test_property_name_labelled(self):
        assert extract_property_name("物件名：パークハウス新宿\n住所：…") == "パークハウス新宿"

    def test_property_name_from_known_building(self):
        assert extract_property_name("ジェイパレス 浅草 3階") == "ジェイパレス浅草今戸"


class TestIdempotence:
    """Running an extractor on its own output gives the same value."""

    @pytest.mark.parametrize(
        "extract, text",
        [
            (extract_price, "価格：3,780万円（税込）"),
            (extract_size, "専有面積：30.31㎡（約9.16坪）"),
            (extract_layout, "間取り：2ldk"),
            (extract_floor, "6階部分"),
            (extract_station, "交通 銀座線 浅草駅 徒歩12分"),
            (extract_building_type, "構造：RC造地上10階建"),
            (extract_year, "築年月：2008年2月"),
            (extract_address, "住所：東京都台東区今戸1-15-6号"),
            (extract_address, "所在地：東京都豊島区駒込1-16-8"),
        ],
    )
    def test_extract_twice(self, extract, text):
        once = extract(text)
        assert once is not None
        assert extract(once) == once


class TestExtractFields:
    def test_full_block(self, ocr_single_listing):
        fields = extract_fields(ocr_single_listing)
        assert fields.address == "東京都豊島区駒込1-16-8"
        assert fields.address_signal is AddressSignal.FOUND
        assert fields.property_name == "AXAS駒込Luxease"
        assert fields.floor == "6階"
        assert fields.layout == "1K"
        assert fields.station == "JR山手線 駒込駅 徒歩4分"
        assert fields.price is None
        assert fields.is_japanese is True

    def test_size_with_tsubo(self, ocr_single_listing):
        assert extract_fields(ocr_single_listing).size_with_tsubo == "30.31㎡ (約9.16坪)"

    def test_us_listing(self):
        fields = extract_fields("123 Main St, Springfield, IL 62701\n3 bedrooms")
        assert fields.address == "123 Main St, Springfield, IL 62701"
        assert fields.address_signal is AddressSignal.FOUND
        assert fields.is_japanese is False

    def test_nothing_found(self):
        fields = extract_fields("hello world")
        assert fields.address is None
        assert fields.address_signal is AddressSignal.NO_SIGNAL
        assert fields.is_japanese is False
