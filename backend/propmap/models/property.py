import math
from dataclasses import asdict, dataclass, replace

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class CoordinatesAlreadyResolved(ValueError):
    """Raised when coordinates are written to a record that already has them."""


@dataclass(frozen=True)
class NormalizedProperty:
    """
    One listing after extraction and unit normalisation.

    Created once per accepted segment. ``lat``/``lng`` stay None until a
    geocoder resolves them; ``with_coordinates`` writes them back exactly once.
    """

    id: str
    address: str
    price: int
    bedrooms: int
    bathrooms: int = 1
    sqft: int | None = None
    lat: float | None = None
    lng: float | None = None
    property_name: str | None = None
    floor: str | None = None
    area_meters: float | None = None
    area_tsubo: float | None = None
    layout: str | None = None
    station: str | None = None
    building_type: str | None = None
    year_built: str | None = None
    construction_year: int | None = None
    is_japanese: bool = False

    @property
    def needs_geocoding(self) -> bool:
        return self.lat is None or self.lng is None

    def with_coordinates(self, lat: float, lng: float) -> "NormalizedProperty":
        if not self.needs_geocoding:
            raise CoordinatesAlreadyResolved(
                f"Property {self.id} already has coordinates ({self.lat}, {self.lng})"
            )
        return replace(self, lat=lat, lng=lng)

    def to_record(self) -> "PropertyRecord":
        return PropertyRecord(**asdict(self))


class PropertyRecord(BaseModel):
    """Exported JSON shape of a NormalizedProperty (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    address: str
    price: int
    bedrooms: int
    bathrooms: int = 1
    sqft: int | None = None
    lat: float | None = None
    lng: float | None = None
    property_name: str | None = None
    floor: str | None = None
    area_meters: float | None = None
    area_tsubo: float | None = None
    layout: str | None = None
    station: str | None = None
    building_type: str | None = None
    year_built: str | None = None
    construction_year: int | None = None
    is_japanese: bool = False

    def to_property(self) -> NormalizedProperty:
        return NormalizedProperty(**self.model_dump())


class ImportedPropertyRecord(PropertyRecord):
    """
    A record read back from an export file.

    Stricter than PropertyRecord: ``id`` must be a string, ``address`` must be
    non-empty and ``lat``/``lng`` must be finite numbers.
    """

    id: str = Field(min_length=1, strict=True)
    address: str = Field(min_length=1)
    price: int = 0
    bedrooms: int = 2
    lat: StrictFloat | StrictInt
    lng: StrictFloat | StrictInt

    @field_validator("address")
    @classmethod
    def address_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("address must not be blank")
        return v

    @field_validator("lat", "lng")
    @classmethod
    def coordinate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinate must be a finite number")
        return float(v)
