"""Crop entity."""

from dataclasses import dataclass
from enum import Enum


class CropType(str, Enum):
    """Crop categories driving the expected-yield lookup."""

    CEREAL = "cereal"
    HORTICULTURAL = "horticultural"
    FRUIT = "fruit"
    VINE = "vine"
    OLIVE = "olive"
    TUBER = "tuber"
    OILSEED = "oilseed"
    OTHER = "other"


@dataclass(frozen=True)
class Crop:
    """Represents a crop grown on one or more parcels."""

    id: str
    name: str
    crop_type: str = CropType.OTHER.value

    def __post_init__(self):
        object.__setattr__(self, "crop_type", getattr(self.crop_type, "value", self.crop_type))

    def __str__(self) -> str:
        return self.name
