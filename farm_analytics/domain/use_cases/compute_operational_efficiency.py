"""Use case for the operational efficiency of an activity."""

from typing import Optional

from ..calculations.units import estimated_labor_hours, yield_per_area
from ..entities.activity import Activity
from ..entities.benchmarks import EfficiencyBenchmarks
from ..repositories.reference_repository import ReferenceRepository


class ComputeOperationalEfficiencyUseCase:
    """Weighted blend of time, cost and yield efficiency (0-100 scale per part)."""

    def __init__(
        self,
        reference_repository: ReferenceRepository,
        benchmarks: Optional[EfficiencyBenchmarks] = None,
    ):
        self.reference_repository = reference_repository
        self.benchmarks = benchmarks or EfficiencyBenchmarks()

    def time_efficiency(self, activity: Activity) -> float:
        elapsed = activity.elapsed_hours
        if not elapsed:
            return self.benchmarks.default_time_efficiency
        estimated = estimated_labor_hours(activity.kind, self.benchmarks.labor_hours)
        return estimated / elapsed * 100

    def cost_efficiency(self, activity: Activity, cost_total: float) -> float:
        estimated = estimated_labor_hours(activity.kind, self.benchmarks.labor_hours)
        expected_cost = estimated * self.benchmarks.benchmark_cost_per_hour
        return (1 - cost_total / expected_cost) * 100

    async def yield_efficiency(self, activity: Activity) -> float:
        """Actual vs expected productivity for harvests with a known crop type, 100 otherwise."""
        if not activity.is_harvest or not activity.quantity_harvested:
            return 100.0

        parcel = activity.parcel
        if parcel is None:
            parcel = await self.reference_repository.get_parcel(activity.parcel_id)
        if parcel is None or not parcel.area or parcel.area <= 0:
            return 100.0

        crop = parcel.crop
        if crop is None and parcel.crop_id:
            crop = await self.reference_repository.get_crop(parcel.crop_id)
        if crop is None or not crop.crop_type:
            return 100.0

        expected = self.benchmarks.expected_yield(crop.crop_type)
        actual = yield_per_area(activity.quantity_harvested, activity.harvest_unit, parcel.area)
        return actual / expected * 100

    async def execute(self, activity: Activity, cost_total: float) -> float:
        """
        Execute the use case.

        Args:
            activity: Activity to score
            cost_total: Total cost of the activity

        Returns:
            Weighted efficiency score
        """
        b = self.benchmarks
        return (
            self.time_efficiency(activity) * b.time_weight
            + self.cost_efficiency(activity, cost_total) * b.cost_weight
            + await self.yield_efficiency(activity) * b.yield_weight
        )
