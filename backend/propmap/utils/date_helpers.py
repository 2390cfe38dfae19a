"""Japanese era (和暦) to Western year conversion utilities."""

import re

from propmap.utils.japanese_address import normalize_digits

# Era start years
ERAS = {
    "令和": 2018,  # Reiwa: 2019 = Reiwa 1
    "平成": 1988,  # Heisei: 1989 = Heisei 1
    "昭和": 1925,  # Showa: 1926 = Showa 1
    "大正": 1911,  # Taisho: 1912 = Taisho 1
    "明治": 1867,  # Meiji: 1868 = Meiji 1
}

ERA_PATTERN = re.compile(r"(令和|平成|昭和|大正|明治)\s*(\d+|元)\s*年?")
WESTERN_YEAR_PATTERN = re.compile(r"(\d{4})\s*年")


def japanese_era_to_western(era_str: str) -> int | None:
    """
    Convert Japanese era year to Western year.

    Examples:
        "令和6年" -> 2024
        "平成30年" -> 2018
        "昭和50年" -> 1975
        "令和元年" -> 2019
    """
    match = ERA_PATTERN.search(normalize_digits(era_str))
    if not match:
        return None

    era_name = match.group(1)
    era_year = 1 if match.group(2) == "元" else int(match.group(2))

    base = ERAS.get(era_name)
    if base is None:
        return None

    return base + era_year


def parse_construction_year(text: str | None) -> int | None:
    """
    Parse a construction year from a 築年月 value.

    Examples:
        "2008年2月" -> 2008
        "平成21年6月" -> 2009
        "築15年" -> None (relative age, not an absolute year)
    """
    if not text:
        return None

    western = WESTERN_YEAR_PATTERN.search(normalize_digits(text))
    if western:
        year = int(western.group(1))
        if 1868 <= year <= 2100:
            return year

    return japanese_era_to_western(text)
