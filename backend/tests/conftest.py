"""Test configuration and fixtures."""

import pytest

THREE_LISTINGS = """AXAS駒込Luxease 他2件 物件一覧

物件名: AXAS駒込Luxease
住所: 東京都豊島区駒込1-16-8
階数: 6階
面積: 30.31㎡ (約9.16坪)
価格: 3,780万円

物件名: ジェイパレス浅草今戸
住所: 東京都台東区今戸1-15-6号
階数: 3階
面積: 25.5㎡
価格: 2,480万円

物件名: セザール京成小岩
住所: 東京都江戸川区北小岩6丁目14-7
階数: 5階
面積: 55.2㎡
価格: 1億2000万円
"""

KEY_VALUE_LISTING = """マンション名：ジェイパレス浅草今戸
所在地：東京都台東区今戸1-15-6
専有面積：25.5㎡
販売価格：2,480万円
間取り：1K
"""

NUMBERED_BLOCKS = """【物件1】
グランドメゾン目黒 2LDK 65.3㎡ 8,980万円
東京都目黒区中目黒3-5-2
東急東横線 中目黒駅 徒歩5分

【物件2】
パークハウス新宿 1LDK 40.1㎡ 6,200万円
東京都新宿区西新宿7-1-1

【物件3】
お問い合わせは当社まで
"""

OCR_SINGLE_LISTING = """AXAS駒込Luxease
JR山手線 駒込駅 徒歩4分
専有面積 30.31㎡（約9.16坪）
6階部分 1K
"""


@pytest.fixture
def three_listings():
    return THREE_LISTINGS


@pytest.fixture
def key_value_listing():
    return KEY_VALUE_LISTING


@pytest.fixture
def numbered_blocks():
    return NUMBERED_BLOCKS


@pytest.fixture
def ocr_single_listing():
    return OCR_SINGLE_LISTING


@pytest.fixture
def fixed_id():
    counter = iter(range(1, 1000))
    return lambda: f"prop-{next(counter)}"


@pytest.fixture
def test_settings():
    from propmap.config import Settings
    return Settings(
        geocode_delay_seconds=0,
        geocode_max_retries=3,
        geocode_ward_fallback=False,
    )
