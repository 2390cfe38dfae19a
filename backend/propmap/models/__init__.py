from propmap.models.property import (
    CoordinatesAlreadyResolved,
    ImportedPropertyRecord,
    NormalizedProperty,
    PropertyRecord,
)

__all__ = [
    "CoordinatesAlreadyResolved",
    "ImportedPropertyRecord",
    "NormalizedProperty",
    "PropertyRecord",
]
