"""Use case for folding activity costs into a multi-dimension aggregate."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from ..calculations.comparison import mean
from ..entities.cost import ActivityCost, CostAggregate, CostBucket, CropCostBucket, LineCostBucket


@dataclass(frozen=True)
class ConsolidationContext:
    """Parcel and crop an activity cost is attributed to."""

    parcel_id: Optional[str] = None
    parcel_name: Optional[str] = None
    parcel_area: Optional[float] = None
    crop_id: Optional[str] = None
    crop_name: Optional[str] = None


class ConsolidateCostsUseCase:
    """
    Fold activity costs into a fresh CostAggregate.

    Every activity updates the running totals and the parcel, crop,
    activity-kind, responsible, equipment and product-type indices in one
    step, so the indices always describe the same activity list.
    """

    def __init__(self, hours_per_activity: float = 8.0):
        self.hours_per_activity = hours_per_activity

    def add(self, aggregate: CostAggregate, cost: ActivityCost, context: ConsolidationContext) -> None:
        """Consolidate one activity cost into the aggregate."""
        aggregate.total += cost.total
        aggregate.equipment += cost.equipment_cost
        aggregate.product += cost.product_cost
        aggregate.labor += cost.labor_cost
        aggregate.activities.append(cost)

        if context.parcel_id:
            bucket = aggregate.by_parcel.get(context.parcel_id)
            if bucket is None:
                bucket = CostBucket(
                    name=context.parcel_name or f"Parcel {context.parcel_id}",
                    area=context.parcel_area,
                )
                aggregate.by_parcel[context.parcel_id] = bucket
            bucket.add(cost)

        if context.crop_id:
            crop_bucket = aggregate.by_crop.get(context.crop_id)
            if crop_bucket is None:
                crop_bucket = CropCostBucket(name=context.crop_name or f"Crop {context.crop_id}")
                aggregate.by_crop[context.crop_id] = crop_bucket
            crop_bucket.add(cost)
            if context.parcel_id:
                crop_bucket.parcels[context.parcel_id] = (
                    crop_bucket.parcels.get(context.parcel_id, 0.0) + cost.total
                )

        if cost.kind:
            aggregate.by_activity_kind[cost.kind] = (
                aggregate.by_activity_kind.get(cost.kind, 0.0) + cost.total
            )

        if cost.responsible_id:
            person_bucket = aggregate.by_responsible.get(cost.responsible_id)
            if person_bucket is None:
                person_bucket = CostBucket(name=cost.responsible_name)
                aggregate.by_responsible[cost.responsible_id] = person_bucket
            person_bucket.add(cost)

        for line in cost.equipment_lines:
            key = line.equipment_id or "unknown"
            equipment_bucket = aggregate.by_equipment.get(key)
            if equipment_bucket is None:
                equipment_bucket = LineCostBucket(name=line.name)
                aggregate.by_equipment[key] = equipment_bucket
            equipment_bucket.add(line.cost, cost)

        for line in cost.product_lines:
            type_bucket = aggregate.by_product_type.get(line.product_type)
            if type_bucket is None:
                type_bucket = LineCostBucket(name=line.product_type)
                aggregate.by_product_type[line.product_type] = type_bucket
            type_bucket.add(line.cost, cost)

    def finalize(self, aggregate: CostAggregate) -> CostAggregate:
        """Compute derived metrics once every activity has been added."""
        worked_hours = len(aggregate.activities) * self.hours_per_activity
        covered_area = sum(bucket.area for bucket in aggregate.by_parcel.values() if bucket.area)

        metrics = aggregate.metrics
        metrics.cost_per_hour = aggregate.total / worked_hours if worked_hours > 0 else 0.0
        metrics.cost_per_area = aggregate.total / covered_area if covered_area > 0 else 0.0
        metrics.average_efficiency = mean([cost.efficiency for cost in aggregate.activities])
        return aggregate

    def execute(
        self,
        costs: Iterable[Tuple[ActivityCost, ConsolidationContext]],
        scope: Optional[Dict[str, Any]] = None,
    ) -> CostAggregate:
        """
        Execute the use case.

        Args:
            costs: Activity costs paired with their attribution context
            scope: Description of the query the aggregate answers

        Returns:
            A newly built CostAggregate
        """
        aggregate = CostAggregate(scope=dict(scope or {}))
        for cost, context in costs:
            self.add(aggregate, cost, context)
        return self.finalize(aggregate)
