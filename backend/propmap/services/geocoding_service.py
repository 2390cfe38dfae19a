"""Geocoding service for converting listing addresses to coordinates."""

import asyncio
import re

import structlog
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from propmap.config import Settings, settings as default_settings
from propmap.models.property import NormalizedProperty
from propmap.utils.japanese_address import find_prefecture, find_tokyo_ward, has_cjk

logger = structlog.get_logger()

# Japan lies roughly within these ranges
JAPAN_LAT_RANGE = (30.0, 46.0)
JAPAN_LNG_RANGE = (129.0, 146.0)

# Approximate centroids of Tokyo's special wards
WARD_CENTROIDS: dict[str, tuple[float, float]] = {
    "台東区": (35.7120, 139.8107),
    "江戸川区": (35.7060, 139.8680),
    "豊島区": (35.7283, 139.7190),
    "渋谷区": (35.6580, 139.7016),
    "新宿区": (35.6938, 139.7034),
    "千代田区": (35.6938, 139.7534),
    "中央区": (35.6698, 139.7727),
    "港区": (35.6586, 139.7511),
    "文京区": (35.7080, 139.7520),
    "墨田区": (35.7083, 139.8022),
    "目黒区": (35.6414, 139.6981),
    "大田区": (35.5616, 139.7168),
    "世田谷区": (35.6465, 139.6533),
    "中野区": (35.7073, 139.6638),
    "杉並区": (35.6991, 139.6362),
    "荒川区": (35.7363, 139.7829),
    "北区": (35.7552, 139.7354),
    "板橋区": (35.7618, 139.7091),
    "練馬区": (35.7357, 139.6512),
    "足立区": (35.7750, 139.8049),
    "葛飾区": (35.7448, 139.8469),
    "江東区": (35.6693, 139.8129),
    "品川区": (35.6092, 139.7302),
}


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def correct_swapped_coordinates(lat: float, lng: float) -> tuple[float, float]:
    """
    Swap lat/lng when they only make sense for Japan the other way round.

    (139.71, 35.72) -> (35.72, 139.71). Coordinates outside Japan in both
    orders are returned unchanged.
    """
    in_order = _in_range(lat, JAPAN_LAT_RANGE) or _in_range(lng, JAPAN_LNG_RANGE)
    swapped = _in_range(lng, JAPAN_LAT_RANGE) and _in_range(lat, JAPAN_LNG_RANGE)
    if not in_order and swapped:
        logger.info("Corrected swapped coordinates", lat=lng, lng=lat)
        return lng, lat
    return lat, lng


def ward_centroid(address: str) -> tuple[float, float] | None:
    if find_prefecture(address) not in (None, "東京都"):
        return None
    ward = find_tokyo_ward(address)
    return WARD_CENTROIDS.get(ward) if ward else None


class GeocodingService:
    """Geocode listing addresses using Nominatim (OpenStreetMap)."""

    def __init__(
        self,
        geocoder=None,
        config: Settings | None = None,
        delay_seconds: float | None = None,
        retry_wait: float = 1.0,
    ):
        self.config = config or default_settings
        self.geocoder = geocoder or Nominatim(
            user_agent=self.config.geocoder_user_agent,
            timeout=self.config.geocoder_timeout,
        )
        self.delay_seconds = (
            self.config.geocode_delay_seconds if delay_seconds is None else delay_seconds
        )
        self.retry_wait = retry_wait
        self._cache: dict[str, tuple[float, float] | None] = {}

    async def _lookup(self, query: str):
        """One geocoder call, retried on timeouts."""
        kwargs = {"language": "ja", "country_codes": "jp"} if has_cjk(query) else {}
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(GeocoderTimedOut),
            stop=stop_after_attempt(self.config.geocode_max_retries),
            wait=wait_exponential(multiplier=self.retry_wait, max=30),
            reraise=True,
        ):
            with attempt:
                # Run sync geocoder in thread pool
                return await asyncio.to_thread(self.geocoder.geocode, query, **kwargs)
        return None

    async def geocode_address(self, address: str) -> tuple[float, float] | None:
        """
        Geocode a single address.

        Returns (latitude, longitude) or None if geocoding failed. Tokyo
        addresses the geocoder cannot place fall back to their ward centroid
        when ``geocode_ward_fallback`` is enabled.
        """
        if not address:
            return None

        if address in self._cache:
            return self._cache[address]

        result: tuple[float, float] | None = None
        failed = False
        try:
            location = await self._lookup(address)
            if not location:
                # Try with simplified address (remove building names, etc.)
                simplified = self._simplify_address(address)
                if simplified != address:
                    location = await self._lookup(simplified)

            if location:
                result = correct_swapped_coordinates(location.latitude, location.longitude)
                logger.info("Geocoded address", address=address[:50], lat=result[0], lng=result[1])
            else:
                logger.warning("Geocoding returned no results", address=address[:50])

        except (GeocoderTimedOut, GeocoderServiceError) as e:
            logger.warning("Geocoding error", address=address[:50], error=str(e))
            failed = True

        if result is None and self.config.geocode_ward_fallback:
            result = ward_centroid(address)
            if result is not None:
                logger.info("Using ward centroid", address=address[:50], lat=result[0], lng=result[1])

        # Only definitive answers are cached
        if not failed:
            self._cache[address] = result
        return result

    async def geocode_properties(
        self, properties: list[NormalizedProperty]
    ) -> tuple[list[NormalizedProperty], dict[str, int]]:
        """
        Resolve coordinates for properties that don't have them yet.

        Returns the updated records (input order preserved) and a stats dict
        with counts of success/failure/skipped.
        """
        stats = {"total": len(properties), "success": 0, "failed": 0, "skipped": 0}
        resolved: list[NormalizedProperty] = []

        for index, prop in enumerate(properties):
            if not prop.needs_geocoding:
                stats["skipped"] += 1
                resolved.append(prop)
                continue

            cached = prop.address in self._cache
            coords = await self.geocode_address(prop.address)

            if coords:
                resolved.append(prop.with_coordinates(*coords))
                stats["success"] += 1
            else:
                resolved.append(prop)
                stats["failed"] += 1

            # Rate limiting
            if not cached and self.delay_seconds > 0 and index < len(properties) - 1:
                await asyncio.sleep(self.delay_seconds)

        logger.info("Batch geocoding complete", **stats)
        return resolved, stats

    @staticmethod
    def _simplify_address(address: str) -> str:
        """
        Simplify a Japanese address for better geocoding results.

        Removes building names, room numbers, and other noise that
        can confuse geocoders.
        """
        # Remove parenthesised notes
        address = re.sub(r"[（(].*?[）)]", "", address)
        # Remove room numbers and floors
        address = re.sub(r"\s*\d+号室.*$", "", address)
        address = re.sub(r"\s*\d+[FＦ階].*$", "", address)
        # Drop a trailing 号 and anything after the chome-ban-go block
        address = re.sub(r"(\d+-\d+-\d+)号?\s*.*$", r"\1", address)

        return address.strip()


# Singleton instance
_geocoding_service: GeocodingService | None = None


def get_geocoding_service() -> GeocodingService:
    """Get or create the singleton geocoding service."""
    global _geocoding_service
    if _geocoding_service is None:
        _geocoding_service = GeocodingService()
    return _geocoding_service
