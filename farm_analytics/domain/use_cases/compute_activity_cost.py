"""Use case for pricing a single activity."""

import asyncio
from typing import Optional

from ..calculations.units import estimated_labor_hours, hours_from_duration
from ..entities.activity import Activity, EquipmentUsage, ProductUsage
from ..entities.benchmarks import CostBenchmarks
from ..entities.cost import (
    ActivityCost,
    EquipmentCostLine,
    ProductCostLine,
    RateSource,
    ResolvedRate,
)
from ..repositories.reference_repository import ReferenceRepository


class ComputeActivityCostUseCase:
    """Price an activity as equipment + product + estimated labor."""

    def __init__(
        self,
        reference_repository: ReferenceRepository,
        benchmarks: Optional[CostBenchmarks] = None,
    ):
        """
        Initialize use case.

        Args:
            reference_repository: Lookup for equipment and products not yet expanded
            benchmarks: Rates, defaults and efficiency weights
        """
        self.reference_repository = reference_repository
        self.benchmarks = benchmarks or CostBenchmarks()

    async def resolve_hourly_rate_or_default(self, line: EquipmentUsage) -> ResolvedRate:
        """
        Hourly rate of an equipment line.

        Uses the expanded equipment when present, looks the id up otherwise,
        and injects the configured default when the equipment is missing or
        carries no rate.
        """
        equipment = line.equipment
        if equipment is None and line.equipment_id:
            equipment = await self.reference_repository.get_equipment(line.equipment_id)
        if equipment is None or equipment.hourly_cost is None:
            return ResolvedRate(
                self.benchmarks.default_equipment_hourly_cost, RateSource.DEFAULT, equipment
            )
        return ResolvedRate(float(equipment.hourly_cost), RateSource.ENTITY, equipment)

    async def resolve_unit_price_or_default(self, line: ProductUsage) -> ResolvedRate:
        """Unit price of a product line, with the same default injection as equipment."""
        product = line.product
        if product is None and line.product_id:
            product = await self.reference_repository.get_product(line.product_id)
        if product is None or product.price_per_unit is None:
            return ResolvedRate(
                self.benchmarks.default_product_unit_price, RateSource.DEFAULT, product
            )
        return ResolvedRate(float(product.price_per_unit), RateSource.ENTITY, product)

    async def _price_equipment(self, line: EquipmentUsage) -> EquipmentCostLine:
        rate = await self.resolve_hourly_rate_or_default(line)
        hours = hours_from_duration(line.time_used, line.time_unit)
        return EquipmentCostLine(
            equipment_id=line.equipment_id,
            name=rate.entity.name if rate.entity else "Unknown equipment",
            hours=hours,
            hourly_rate=rate.value,
            rate_source=rate.source,
            cost=hours * rate.value,
        )

    async def _price_product(self, line: ProductUsage) -> ProductCostLine:
        price = await self.resolve_unit_price_or_default(line)
        quantity = line.quantity or 0.0
        product = price.entity
        return ProductCostLine(
            product_id=line.product_id,
            name=product.name if product else "Unknown product",
            product_type=(product.type if product and product.type else "unknown"),
            quantity=quantity,
            unit_price=price.value,
            price_source=price.source,
            cost=quantity * price.value,
        )

    def activity_efficiency(self, activity: Activity, total_cost: float) -> float:
        """
        Efficiency score blending time and cost.

        Time efficiency is estimated over elapsed hours (in percent), or the
        configured default while the activity is open. Cost efficiency
        compares the total with the benchmark cost of the estimated hours.
        """
        b = self.benchmarks
        estimated = estimated_labor_hours(activity.kind, b.labor_hours)
        elapsed = activity.elapsed_hours
        if elapsed:
            time_efficiency = estimated / elapsed * 100
        else:
            time_efficiency = b.default_time_efficiency
        cost_efficiency = (1 - total_cost / (estimated * b.efficiency_benchmark_cost_per_hour)) * 100
        return time_efficiency * b.efficiency_time_weight + cost_efficiency * b.efficiency_cost_weight

    async def execute(self, activity: Activity) -> ActivityCost:
        """
        Execute the use case.

        Args:
            activity: Activity, expanded or not

        Returns:
            ActivityCost with breakdown, priced lines and efficiency
        """
        equipment_lines, product_lines = await asyncio.gather(
            asyncio.gather(*(self._price_equipment(line) for line in activity.equipment)),
            asyncio.gather(*(self._price_product(line) for line in activity.products)),
        )

        labor_hours = estimated_labor_hours(activity.kind, self.benchmarks.labor_hours)
        cost = ActivityCost(
            activity_id=activity.id,
            kind=activity.kind,
            state=activity.state,
            start=activity.start,
            end=activity.end,
            parcel_id=activity.parcel_id,
            responsible_id=activity.responsible_id,
            responsible_name=activity.responsible_name,
            equipment_cost=sum(line.cost for line in equipment_lines),
            product_cost=sum(line.cost for line in product_lines),
            labor_cost=labor_hours * self.benchmarks.labor_hourly_rate,
            labor_hours=labor_hours,
            efficiency=0.0,
            equipment_lines=list(equipment_lines),
            product_lines=list(product_lines),
            resolution_failures=[
                line.equipment_id or "unknown"
                for line in equipment_lines
                if line.rate_source == RateSource.DEFAULT
            ]
            + [
                line.product_id or "unknown"
                for line in product_lines
                if line.price_source == RateSource.DEFAULT
            ],
            quantity_harvested=activity.quantity_harvested,
            harvest_unit=activity.harvest_unit,
        )
        cost.efficiency = self.activity_efficiency(activity, cost.total)
        return cost
