"""Cost entities: per-activity cost results and the consolidated aggregate."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .equipment import Equipment
from .product import Product


class RateSource(str, Enum):
    """Where a rate or price came from."""

    ENTITY = "entity"
    DEFAULT = "default"


@dataclass(frozen=True)
class ResolvedRate:
    """Hourly rate or unit price together with the entity it was read from."""

    value: float
    source: RateSource
    entity: Optional[Union[Equipment, Product]] = None


@dataclass
class EquipmentCostLine:
    """Cost of one equipment line of an activity."""

    equipment_id: Optional[str]
    name: str
    hours: float
    hourly_rate: float
    rate_source: RateSource
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "equipment_id": self.equipment_id,
            "name": self.name,
            "hours": self.hours,
            "hourly_rate": self.hourly_rate,
            "rate_source": self.rate_source.value,
            "cost": self.cost,
        }


@dataclass
class ProductCostLine:
    """Cost of one product line of an activity."""

    product_id: Optional[str]
    name: str
    product_type: str
    quantity: float
    unit_price: float
    price_source: RateSource
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "product_type": self.product_type,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "price_source": self.price_source.value,
            "cost": self.cost,
        }


@dataclass
class ActivityCost:
    """Cost of a single activity split into equipment, product and labor."""

    activity_id: str
    kind: str
    state: str
    start: datetime
    end: Optional[datetime]
    parcel_id: Optional[str]
    responsible_id: Optional[str]
    responsible_name: Optional[str]
    equipment_cost: float
    product_cost: float
    labor_cost: float
    labor_hours: float
    efficiency: float
    equipment_lines: List[EquipmentCostLine] = field(default_factory=list)
    product_lines: List[ProductCostLine] = field(default_factory=list)
    resolution_failures: List[str] = field(default_factory=list)  # ids priced with defaults
    quantity_harvested: Optional[float] = None
    harvest_unit: Optional[str] = None

    @property
    def total(self) -> float:
        return self.equipment_cost + self.product_cost + self.labor_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_id": self.activity_id,
            "kind": self.kind,
            "state": self.state,
            "start": self.start,
            "end": self.end,
            "parcel_id": self.parcel_id,
            "responsible": {"id": self.responsible_id, "name": self.responsible_name},
            "total_cost": self.total,
            "breakdown": {
                "equipment": self.equipment_cost,
                "product": self.product_cost,
                "labor": self.labor_cost,
            },
            "labor_hours": self.labor_hours,
            "efficiency": self.efficiency,
            "equipment_lines": self.equipment_lines,
            "product_lines": self.product_lines,
            "resolution_failures": self.resolution_failures,
            "quantity_harvested": self.quantity_harvested,
            "harvest_unit": self.harvest_unit,
        }


@dataclass
class CostBucket:
    """Running totals for one entity of a consolidation dimension."""

    name: Optional[str]
    total: float = 0.0
    equipment: float = 0.0
    product: float = 0.0
    labor: float = 0.0
    area: Optional[float] = None
    activities: List[ActivityCost] = field(default_factory=list)

    def add(self, cost: ActivityCost) -> None:
        self.total += cost.total
        self.equipment += cost.equipment_cost
        self.product += cost.product_cost
        self.labor += cost.labor_cost
        self.activities.append(cost)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "total": self.total,
            "equipment": self.equipment,
            "product": self.product,
            "labor": self.labor,
            "activities": [a.activity_id for a in self.activities],
        }
        if self.area is not None:
            data["area"] = self.area
        return data


@dataclass
class CropCostBucket(CostBucket):
    """Crop totals with a per-parcel cost sub-map."""

    parcels: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["parcels"] = dict(self.parcels)
        return data


@dataclass
class LineCostBucket:
    """Totals for an equipment or product type, summed over activity lines."""

    name: str
    total: float = 0.0
    activities: List[ActivityCost] = field(default_factory=list)

    def add(self, amount: float, cost: ActivityCost) -> None:
        self.total += amount
        if not self.activities or self.activities[-1] is not cost:
            self.activities.append(cost)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total": self.total,
            "activities": [a.activity_id for a in self.activities],
        }


@dataclass
class CostMetrics:
    """Derived figures computed once consolidation is complete."""

    cost_per_hour: float = 0.0
    cost_per_area: float = 0.0
    average_efficiency: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cost_per_hour": self.cost_per_hour,
            "cost_per_area": self.cost_per_area,
            "average_efficiency": self.average_efficiency,
        }


@dataclass
class CostAggregate:
    """
    Costs folded across every consolidation dimension.

    All dimension maps are projections of `activities`; dictionaries keep
    insertion order so iteration is deterministic.
    """

    scope: Dict[str, Any] = field(default_factory=dict)
    total: float = 0.0
    equipment: float = 0.0
    product: float = 0.0
    labor: float = 0.0
    by_parcel: Dict[str, CostBucket] = field(default_factory=dict)
    by_crop: Dict[str, CropCostBucket] = field(default_factory=dict)
    by_activity_kind: Dict[str, float] = field(default_factory=dict)
    by_responsible: Dict[str, CostBucket] = field(default_factory=dict)
    by_equipment: Dict[str, LineCostBucket] = field(default_factory=dict)
    by_product_type: Dict[str, LineCostBucket] = field(default_factory=dict)
    activities: List[ActivityCost] = field(default_factory=list)
    metrics: CostMetrics = field(default_factory=CostMetrics)

    @property
    def activity_count(self) -> int:
        return len(self.activities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "total": self.total,
            "equipment": self.equipment,
            "product": self.product,
            "labor": self.labor,
            "activity_count": self.activity_count,
            "by_parcel": self.by_parcel,
            "by_crop": self.by_crop,
            "by_activity_kind": self.by_activity_kind,
            "by_responsible": self.by_responsible,
            "by_equipment": self.by_equipment,
            "by_product_type": self.by_product_type,
            "activities": self.activities,
            "metrics": self.metrics,
        }


@dataclass
class CostComparisonItem:
    """One compared harvest, parcel or crop."""

    id: str
    name: Optional[str]
    total_cost: float
    activity_count: int = 0
    area: Optional[float] = None
    cost_per_area: Optional[float] = None
    quantity_harvested: Optional[float] = None
    harvest_unit: Optional[str] = None
    cost_per_unit: Optional[float] = None
    date: Optional[datetime] = None
    parcel_name: Optional[str] = None
    crop_id: Optional[str] = None
    crop_type: Optional[str] = None
    parcel_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "total_cost": self.total_cost,
            "activity_count": self.activity_count,
        }
        optional = {
            "area": self.area,
            "cost_per_area": self.cost_per_area,
            "quantity_harvested": self.quantity_harvested,
            "harvest_unit": self.harvest_unit,
            "cost_per_unit": self.cost_per_unit,
            "date": self.date,
            "parcel_name": self.parcel_name,
            "crop_id": self.crop_id,
            "crop_type": self.crop_type,
            "parcel_count": self.parcel_count,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass
class CostComparison:
    """
    Compared items in caller order.

    `variation_pct` is the change from the first to the last item as
    supplied, not from the cheapest to the most expensive.
    """

    comparison_type: str
    metric: str
    items: List[CostComparisonItem]
    lowest: CostComparisonItem
    highest: CostComparisonItem
    mean: float
    variation_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.comparison_type,
            "metric": self.metric,
            "items": self.items,
            "metrics": {
                "lowest": self.lowest.id,
                "highest": self.highest.id,
                "mean": self.mean,
                "variation_pct": self.variation_pct,
            },
        }
