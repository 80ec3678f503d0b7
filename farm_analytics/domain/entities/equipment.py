"""Equipment entity."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Equipment:
    """Represents a machine billed by the hour."""

    id: str
    name: str
    type: Optional[str] = None
    hourly_cost: Optional[float] = None  # €/h, None when not priced

    def __str__(self) -> str:
        return self.name
