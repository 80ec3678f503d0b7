"""Activity entity and its resource consumption lines."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .equipment import Equipment
from .parcel import Parcel
from .person import Person
from .product import Product


class ActivityKind(str, Enum):
    """Enumeration of farm activity kinds."""

    PREPARATION = "preparation"
    PLANTING = "planting"
    TREATMENT = "treatment"
    HARVEST = "harvest"
    MAINTENANCE = "maintenance"


class ActivityState(str, Enum):
    """Activity lifecycle: pending -> in_progress -> completed | cancelled."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def plain(value):
    """Enum members are stored by value so table lookups stay string-keyed."""
    return getattr(value, "value", value)


@dataclass(frozen=True)
class EquipmentUsage:
    """Time an equipment was used during an activity."""

    equipment_id: Optional[str]
    time_used: float
    time_unit: str = "hour"
    equipment: Optional[Equipment] = None  # set when the reference is expanded


@dataclass(frozen=True)
class ProductUsage:
    """Quantity of a product consumed during an activity."""

    product_id: Optional[str]
    quantity: float
    unit: Optional[str] = None
    product: Optional[Product] = None  # set when the reference is expanded


@dataclass(frozen=True)
class Activity:
    """Represents a unit of farm work on a parcel."""

    id: str
    kind: str
    state: str
    start: datetime
    parcel_id: str
    responsible_id: Optional[str] = None
    end: Optional[datetime] = None  # None while the activity is open
    equipment: List[EquipmentUsage] = field(default_factory=list)
    products: List[ProductUsage] = field(default_factory=list)
    quantity_harvested: Optional[float] = None  # harvest activities only
    harvest_unit: Optional[str] = None
    parcel: Optional[Parcel] = None
    responsible: Optional[Person] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", plain(self.kind))
        object.__setattr__(self, "state", plain(self.state))
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Activity {self.id} ends before it starts")

    @property
    def is_harvest(self) -> bool:
        return self.kind == ActivityKind.HARVEST.value

    @property
    def elapsed_hours(self) -> Optional[float]:
        """Wall-clock duration in hours, None while open."""
        if self.end is None:
            return None
        return (self.end - self.start).total_seconds() / 3600

    @property
    def responsible_name(self) -> Optional[str]:
        return self.responsible.name if self.responsible else None

    def __str__(self) -> str:
        return f"{self.kind}_{self.id}"
