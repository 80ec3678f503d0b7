"""Parcel entity."""

from dataclasses import dataclass
from typing import Optional

from .crop import Crop


@dataclass(frozen=True)
class Parcel:
    """Represents a land unit with an owning crop."""

    id: str
    name: str
    area: float  # in hectares
    soil_type: Optional[str] = None
    crop_id: Optional[str] = None
    crop: Optional[Crop] = None  # set when the crop reference is expanded

    def __str__(self) -> str:
        return self.name
