"""Product entity."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Product:
    """Represents a consumable input (seed, fertilizer, pesticide...)."""

    id: str
    name: str
    type: Optional[str] = None
    price_per_unit: Optional[float] = None  # €/unit, None when not priced

    def __str__(self) -> str:
        return self.name
