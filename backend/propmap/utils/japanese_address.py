"""
Japanese address and script utilities.

Handles:
- Full-width / half-width character conversion
- CJK script detection
- Kanji numeral to Arabic conversion
- Chome/ban/go normalization
- Prefecture and Tokyo ward lookup
"""

import re
import unicodedata


# Kanji numeral mapping
KANJI_NUMS = {
    "〇": "0", "一": "1", "二": "2", "三": "3", "四": "4",
    "五": "5", "六": "6", "七": "7", "八": "8", "九": "9",
    "十": "10", "百": "100", "千": "1000",
}

# Tokyo's 23 special wards
TOKYO_WARDS = (
    "千代田区", "中央区", "港区", "新宿区", "文京区", "台東区", "墨田区",
    "江東区", "品川区", "目黒区", "大田区", "世田谷区", "渋谷区", "中野区",
    "杉並区", "豊島区", "北区", "荒川区", "板橋区", "練馬区", "足立区",
    "葛飾区", "江戸川区",
)

# Tama-area cities that show up in Tokyo listings
TOKYO_CITIES = (
    "八王子市", "立川市", "武蔵野市", "三鷹市", "府中市", "調布市",
    "町田市", "小金井市", "国分寺市", "国立市",
)

PREFECTURES = (
    "北海道", "青森県", "岩手県", "宮城県", "秋田県", "山形県", "福島県",
    "茨城県", "栃木県", "群馬県", "埼玉県", "千葉県", "東京都", "神奈川県",
    "新潟県", "富山県", "石川県", "福井県", "山梨県", "長野県", "岐阜県",
    "静岡県", "愛知県", "三重県", "滋賀県", "京都府", "大阪府", "兵庫県",
    "奈良県", "和歌山県", "鳥取県", "島根県", "岡山県", "広島県", "山口県",
    "徳島県", "香川県", "愛媛県", "高知県", "福岡県", "佐賀県", "長崎県",
    "熊本県", "大分県", "宮崎県", "鹿児島県", "沖縄県",
)

PREFECTURE_PATTERN = re.compile("(" + "|".join(PREFECTURES) + ")")

# Kana, CJK punctuation, half/full-width forms and the unified ideograph block
CJK_PATTERN = re.compile(r"[\u3000-\u303f\u3040-\u309f\u30a0-\u30ff\uff00-\uff9f\u4e00-\u9faf]")

# Full-width digits and the punctuation that travels with them in prices/areas
_DIGIT_TRANSLATION = str.maketrans(
    "０１２３４５６７８９，．－",
    "0123456789,.-",
)


def normalize_width(text: str) -> str:
    """Convert full-width characters to half-width."""
    return unicodedata.normalize("NFKC", text)


def normalize_digits(text: str) -> str:
    """
    Convert full-width digits, commas, dots and dashes to ASCII.

    Unlike normalize_width this leaves unit glyphs such as ㎡ and ：
    untouched, so it is safe to apply before unit-aware parsing.
    """
    return text.translate(_DIGIT_TRANSLATION)


def has_cjk(text: str) -> bool:
    """True when the text contains any Japanese/CJK code point."""
    return bool(text) and CJK_PATTERN.search(text) is not None


def kanji_to_arabic(text: str) -> str:
    """Convert simple kanji numerals to Arabic. Handles 一~九, 十, 百, 千."""
    result = text

    # Handle compound numbers like 二十三 -> 23
    def replace_compound(match: re.Match) -> str:
        s = match.group(0)
        total = 0
        current = 0

        for char in s:
            val = KANJI_NUMS[char]
            if val in ("10", "100", "1000"):
                if current == 0:
                    current = 1
                total += current * int(val)
                current = 0
            else:
                current = int(val)

        total += current
        return str(total) if total > 0 else s

    kanji_num_pattern = re.compile(r"[〇一二三四五六七八九十百千]+")
    result = kanji_num_pattern.sub(replace_compound, result)

    return result


def normalize_address(address: str) -> str:
    """
    Normalize a Japanese address so the same place compares equal.

    Steps:
    1. Full-width to half-width
    2. Strip whitespace
    3. Kanji numerals before 丁目/番/号 to Arabic
    4. Normalize chome/ban/go to the 1-2-3 form
    5. Drop a trailing 号 left after the block number
    """
    if not address:
        return ""

    text = normalize_width(address)
    text = re.sub(r"\s+", "", text)
    text = re.sub(
        r"[〇一二三四五六七八九十百千]+(?=丁目|番|号)",
        lambda m: kanji_to_arabic(m.group(0)),
        text,
    )

    # "1丁目2番3号" -> "1-2-3"
    text = re.sub(r"(\d+)丁目(\d+)番地?(\d+)号?", r"\1-\2-\3", text)
    text = re.sub(r"(\d+)丁目(\d+)番地?", r"\1-\2", text)
    text = re.sub(r"(\d+)丁目(\d+)(?=-)", r"\1-\2", text)

    # Dash variants
    text = text.replace("ー", "-").replace("‐", "-").replace("−", "-").replace("―", "-")

    text = re.sub(r"(\d)号$", r"\1", text)

    return text.strip()


def find_prefecture(text: str) -> str | None:
    """Return the first prefecture name appearing anywhere in text."""
    if not text:
        return None
    match = PREFECTURE_PATTERN.search(text)
    return match.group(1) if match else None


def find_tokyo_ward(text: str) -> str | None:
    """Return the first Tokyo special ward named in text."""
    if not text:
        return None
    match = re.search("(" + "|".join(TOKYO_WARDS) + ")", text)
    return match.group(1) if match else None
