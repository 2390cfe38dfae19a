"""Tests for area and yen unit conversion."""

import pytest

from propmap.utils.units import (
    format_area,
    format_man_yen,
    format_yen,
    meters_to_sqft,
    meters_to_tsubo,
    parse_area_string,
    parse_man_yen_price,
    parse_man_yen_price_result,
    parse_tsubo_string,
    sqft_to_meters,
    tsubo_to_meters,
)


class TestConversions:
    @pytest.mark.parametrize("x", [0.5, 30.31, 100.0, 12345.678])
    def test_sqft_round_trip(self, x):
        assert meters_to_sqft(sqft_to_meters(x)) == pytest.approx(x, abs=1e-3)

    def test_one_tsubo(self):
        assert meters_to_tsubo(3.306) == pytest.approx(1.0)
        assert tsubo_to_meters(1) == pytest.approx(3.306)

    def test_sqft_constant(self):
        assert meters_to_sqft(1) == pytest.approx(10.7639)
        assert round(meters_to_sqft(30.31)) == 326


class TestParseManYenPrice:
    def test_man_yen(self):
        assert parse_man_yen_price("3,780万円") == 37_800_000

    def test_man_without_en(self):
        assert parse_man_yen_price("3,780万") == 37_800_000

    def test_garbage_returns_default(self):
        assert parse_man_yen_price("garbage", default=37_800_000) == 37_800_000

    def test_empty_returns_default(self):
        assert parse_man_yen_price("", default=5) == 5
        assert parse_man_yen_price(None, default=5) == 5

    def test_plain_yen(self):
        assert parse_man_yen_price("37800000円") == 37_800_000

    def test_fullwidth_digits(self):
        assert parse_man_yen_price("３，７８０万円") == 37_800_000

    def test_decimal_man(self):
        assert parse_man_yen_price("3,780.5万円") == 37_805_000

    def test_oku_and_man(self):
        assert parse_man_yen_price("1億2000万円") == 120_000_000
        assert parse_man_yen_price("１億２，０００万円") == 120_000_000

    def test_oku_only(self):
        assert parse_man_yen_price("2億円") == 200_000_000


class TestParseManYenPriceResult:
    def test_real_value_not_flagged(self):
        result = parse_man_yen_price_result("3,780万円", default=37_800_000)
        assert result.value == 37_800_000
        assert result.was_defaulted is False

    def test_default_is_flagged(self):
        result = parse_man_yen_price_result("価格応相談", default=37_800_000)
        assert result.value == 37_800_000
        assert result.was_defaulted is True


class TestParseAreaString:
    def test_square_meter_glyph(self):
        assert parse_area_string("30.31㎡") == 30.31

    def test_m_squared(self):
        assert parse_area_string("30.31m²") == 30.31

    def test_heibei(self):
        assert parse_area_string("59.58平米") == 59.58

    def test_with_tsubo_suffix(self):
        assert parse_area_string("30.31㎡ (約9.16坪)") == 30.31

    def test_fullwidth(self):
        assert parse_area_string("３０．３１㎡") == 30.31

    def test_no_unit_uses_first_number(self):
        assert parse_area_string("約 40") == 40.0

    def test_tsubo_only_not_read_as_meters(self):
        assert parse_area_string("約9.16坪") is None
        assert parse_area_string("面積：約9.16坪") is None

    def test_skips_tsubo_figure_before_bare_number(self):
        assert parse_area_string("約9.16坪 専有 30.31") == 30.31

    def test_no_numbers(self):
        assert parse_area_string("no numbers") is None
        assert parse_area_string(None) is None


class TestParseTsuboString:
    def test_approx_tsubo(self):
        assert parse_tsubo_string("30.31㎡ (約9.16坪)") == 9.16

    def test_missing(self):
        assert parse_tsubo_string("30.31㎡") is None


class TestFormatting:
    def test_format_yen(self):
        assert format_yen(1_500_000) == "¥1,500,000"

    def test_format_man_yen(self):
        assert format_man_yen(37_800_000) == "3,780万円"
        assert format_man_yen(37_805_000) == "3,780.5万円"

    def test_format_area(self):
        assert format_area(30.31, 9.16) == "30.31㎡ (約9.16坪)"
        assert format_area(40) == "40.00㎡"
