"""Productivity aggregation service."""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ...domain.calculations.comparison import mean, percent_change, population_std, rank_by_descending
from ...domain.calculations.units import yield_per_area
from ...domain.entities.activity import Activity, ActivityKind, ActivityState
from ...domain.entities.activity_query import ActivityQuery
from ...domain.entities.benchmarks import AlertThresholds, CostBenchmarks, EfficiencyBenchmarks
from ...domain.entities.date_range import DateRange
from ...domain.entities.productivity import (
    ActivityEfficiency,
    CropProductivity,
    EfficiencyAnalysis,
    HarvestRecord,
    ParcelProductivity,
    ParcelShare,
    PerformanceComparison,
    PerformanceEntry,
    ProductivityTrend,
)
from ...domain.exceptions import InsufficientDataError, InvalidInputError, NotFoundError
from ...domain.repositories.activity_repository import ActivityRepository
from ...domain.repositories.reference_repository import ReferenceRepository
from ...domain.use_cases.alert_registry import AlertRegistry
from ...domain.use_cases.analyze_productivity_trend import AnalyzeProductivityTrendUseCase
from ...domain.use_cases.assess_productivity import AssessProductivityUseCase
from ...domain.use_cases.compute_activity_cost import ComputeActivityCostUseCase
from ...domain.use_cases.compute_operational_efficiency import ComputeOperationalEfficiencyUseCase
from ..cache import AggregateCache, CacheKey, filter_signature, range_signature
from .result_boundary import public_operation

logger = logging.getLogger(__name__)

PERFORMANCE_TYPES = ("parcels", "crops", "periods")


class ProductivityAggregatorService:
    """
    Harvest productivity per parcel and crop, trends, operational efficiency
    and performance comparisons.

    Only completed harvests feed productivity. Results are cached per query
    and returned through OperationResult like the cost service.
    """

    def __init__(
        self,
        activity_repo: ActivityRepository,
        reference_repo: ReferenceRepository,
        cost_benchmarks: Optional[CostBenchmarks] = None,
        efficiency_benchmarks: Optional[EfficiencyBenchmarks] = None,
        thresholds: Optional[AlertThresholds] = None,
    ):
        self.activity_repo = activity_repo
        self.reference_repo = reference_repo
        self.benchmarks = efficiency_benchmarks or EfficiencyBenchmarks()

        self.cache = AggregateCache()
        self.alert_registry = AlertRegistry()

        # Use cases
        self.compute_cost_uc = ComputeActivityCostUseCase(reference_repo, cost_benchmarks)
        self.efficiency_uc = ComputeOperationalEfficiencyUseCase(reference_repo, self.benchmarks)
        self.trend_uc = AnalyzeProductivityTrendUseCase(self.benchmarks)
        self.assess_uc = AssessProductivityUseCase(self.alert_registry, thresholds)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @public_operation("analyze-parcel-productivity")
    async def productivity_for_parcel(
        self,
        parcel_id: str,
        ended_within: Optional[DateRange] = None,
        force_update: bool = False,
    ) -> ParcelProductivity:
        return await self._parcel_productivity(parcel_id, ended_within, force_update)

    @public_operation("analyze-crop-productivity")
    async def productivity_for_crop(
        self,
        crop_id: str,
        ended_within: Optional[DateRange] = None,
        force_update: bool = False,
    ) -> CropProductivity:
        return await self._crop_productivity(crop_id, ended_within, force_update)

    @public_operation("operational-efficiency")
    async def operational_efficiency(
        self,
        activity_or_id: Union[Activity, str],
        cost_total: Optional[float] = None,
    ) -> ActivityEfficiency:
        """Efficiency of one activity, pricing it first when no cost is given."""
        activity = await self._load_activity(activity_or_id)
        if cost_total is None:
            cost_total = (await self.compute_cost_uc.execute(activity)).total
        efficiency = await self.efficiency_uc.execute(activity, cost_total)
        return self._activity_efficiency(activity, efficiency, cost_total)

    @public_operation("analyze-operational-efficiency")
    async def analyze_operational_efficiency(
        self,
        kind: Optional[str] = None,
        period: Optional[DateRange] = None,
        responsible_id: Optional[str] = None,
        force_update: bool = False,
    ) -> EfficiencyAnalysis:
        """
        Efficiency of every completed activity matching the filters.

        Args:
            kind: Activity kind, all kinds when None
            period: Activities that ended within this range, any time when None
            responsible_id: Responsible party, everyone when None
            force_update: Recompute even when cached

        Returns:
            EfficiencyAnalysis with per-activity scores and their spread
        """
        kind = getattr(kind, "value", kind)
        key = CacheKey(
            "efficiency", kind, range_signature(period), filter_signature(responsible=responsible_id)
        )
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        activities = await self.activity_repo.find_activities(
            ActivityQuery(
                kind=kind,
                responsible_id=responsible_id,
                states=(ActivityState.COMPLETED,),
                ended_within=period,
            )
        )

        entries = []
        completion_hours = []
        for activity in activities:
            try:
                cost = await self.compute_cost_uc.execute(activity)
                efficiency = await self.efficiency_uc.execute(activity, cost.total)
            except Exception as e:
                logger.warning(f"Skipping activity {activity.id} in efficiency analysis: {e}")
                continue
            entries.append(self._activity_efficiency(activity, efficiency, cost.total))
            if activity.elapsed_hours is not None:
                completion_hours.append(activity.elapsed_hours)

        scores = [entry.efficiency for entry in entries]
        analysis = EfficiencyAnalysis(
            kind=kind,
            period=period,
            responsible_id=responsible_id,
            activities=entries,
            mean_efficiency=mean(scores),
            efficiency_std=population_std(scores),
            mean_completion_hours=mean(completion_hours),
            completed_count=len(entries),
        )
        return self.cache.put(key, analysis)

    @public_operation("analyze-trends")
    async def trend_analysis(self, parcel_id: str, force_update: bool = False) -> ProductivityTrend:
        """Linear productivity trend of a parcel's whole harvest history."""
        key = CacheKey("trend", parcel_id, None, "")
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        history = await self._parcel_productivity(parcel_id, None, force_update)
        return self.cache.put(key, self.trend_uc.execute(history))

    @public_operation("compare-performance")
    async def compare_performance(
        self,
        comparison_type: str,
        params: Mapping[str, Any],
        force_update: bool = False,
    ) -> PerformanceComparison:
        """
        Rank parcels, crops or periods of one parcel by average productivity.

        params holds `parcel_ids`, `crop_ids`, or `parcel_id` with `periods`
        (DateRange values) depending on the comparison type.
        """
        if comparison_type not in PERFORMANCE_TYPES:
            raise InvalidInputError(f"Invalid comparison type: {comparison_type}")

        if comparison_type == "parcels":
            ids = list(self._required(params, "parcel_ids"))
            signature = filter_signature(ids=ids)
        elif comparison_type == "crops":
            ids = list(self._required(params, "crop_ids"))
            signature = filter_signature(ids=ids)
        else:
            parcel_id = self._required(params, "parcel_id")
            ids = list(self._required(params, "periods"))
            signature = filter_signature(parcel=parcel_id, periods=[range_signature(p) for p in ids])
        if not ids:
            raise InsufficientDataError(f"No {comparison_type} to compare")

        key = CacheKey("compare-performance", comparison_type, None, signature)
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        if comparison_type == "parcels":
            entries = await self._parcel_entries(ids, force_update)
        elif comparison_type == "crops":
            entries = await self._crop_entries(ids, force_update)
        else:
            entries = await self._period_entries(parcel_id, ids, force_update)

        if not entries:
            raise InsufficientDataError(f"None of the {comparison_type} had productivity data")

        summary = rank_by_descending(entries, key=lambda entry: entry.average_productivity)
        comparison = PerformanceComparison(
            comparison_type=comparison_type,
            entries=summary.ranked,
            best=summary.best.key,
            worst=summary.worst.key,
            mean_productivity=summary.mean,
            mean_variation_pct=summary.mean_variation_pct,
        )
        return self.cache.put(key, comparison)

    @public_operation("generate-alerts")
    def check_alerts(self, result: Any):
        return self.assess_uc.alerts(result)

    @public_operation("generate-insights")
    def generate_insights(self, result: Any):
        return self.assess_uc.insights(result)

    @public_operation("configure-alert-rule")
    def configure_alert_rule(self, configuration: Mapping[str, Any]):
        return self.alert_registry.configure(configuration)

    @public_operation("clear-cache")
    def clear_cache(self) -> Dict[str, Any]:
        return {"cleared": self.cache.clear()}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _required(params: Mapping[str, Any], name: str) -> Any:
        value = params.get(name) if params else None
        if value is None:
            raise InvalidInputError(f"Missing parameter: {name}")
        return value

    @staticmethod
    def _activity_efficiency(activity: Activity, efficiency: float, cost_total: float) -> ActivityEfficiency:
        return ActivityEfficiency(
            activity_id=activity.id,
            kind=activity.kind,
            start=activity.start,
            end=activity.end,
            parcel_id=activity.parcel_id,
            responsible_id=activity.responsible_id,
            efficiency=efficiency,
            total_cost=cost_total,
        )

    async def _load_activity(self, activity_or_id: Union[Activity, str]) -> Activity:
        if isinstance(activity_or_id, Activity):
            return activity_or_id
        if not activity_or_id:
            raise InvalidInputError("An activity id is required")
        activity = await self.activity_repo.get_activity(activity_or_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_or_id} not found")
        return activity

    async def _parcel_productivity(
        self,
        parcel_id: str,
        ended_within: Optional[DateRange],
        force_update: bool,
    ) -> ParcelProductivity:
        if not parcel_id:
            raise InvalidInputError("A parcel id is required")
        key = CacheKey("parcel-productivity", parcel_id, range_signature(ended_within), "")
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        query = ActivityQuery(
            parcel_id=parcel_id,
            kind=ActivityKind.HARVEST,
            states=(ActivityState.COMPLETED,),
            ended_within=ended_within,
            order_by_end=True,
        )
        parcel, harvests = await asyncio.gather(
            self.reference_repo.get_parcel(parcel_id),
            self.activity_repo.find_activities(query),
        )
        if parcel is None:
            raise NotFoundError(f"Parcel {parcel_id} not found")
        if not parcel.area or parcel.area <= 0:
            raise InvalidInputError(f"Parcel {parcel_id} has no positive area")

        crop = parcel.crop
        if crop is None and parcel.crop_id:
            crop = await self.reference_repo.get_crop(parcel.crop_id)

        records = [
            HarvestRecord(
                activity_id=h.id,
                date=h.end,
                quantity=h.quantity_harvested,
                unit=h.harvest_unit,
                productivity=yield_per_area(h.quantity_harvested, h.harvest_unit, parcel.area),
            )
            for h in harvests
            if h.end is not None and h.quantity_harvested and h.quantity_harvested > 0
        ]
        if not records:
            raise InsufficientDataError(f"Parcel {parcel_id} has no completed harvests")

        values = [r.productivity for r in records]
        average = mean(values)
        crop_type = crop.crop_type if crop else None
        expected = self.benchmarks.expected_yield(crop_type) if crop_type else None

        productivity = ParcelProductivity(
            parcel_id=parcel.id,
            parcel_name=parcel.name,
            area=parcel.area,
            soil_type=parcel.soil_type,
            crop_id=parcel.crop_id,
            crop_name=crop.name if crop else None,
            crop_type=crop_type,
            harvests=records,
            average_productivity=average,
            variation_pct=percent_change(values[0], values[-1]) if len(values) > 1 else None,
            expected_yield=expected,
            expected_ratio_pct=average / expected * 100 if expected else None,
            ended_within=ended_within,
        )
        return self.cache.put(key, productivity)

    async def _crop_productivity(
        self,
        crop_id: str,
        ended_within: Optional[DateRange],
        force_update: bool,
    ) -> CropProductivity:
        """Area-weighted productivity; parcels without usable harvests are left out."""
        if not crop_id:
            raise InvalidInputError("A crop id is required")
        key = CacheKey("crop-productivity", crop_id, range_signature(ended_within), "")
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        crop, parcels = await asyncio.gather(
            self.reference_repo.get_crop(crop_id),
            self.reference_repo.find_parcels(crop_id),
        )
        if crop is None:
            raise NotFoundError(f"Crop {crop_id} not found")

        shares: List[ParcelShare] = []
        for parcel in parcels:
            try:
                result = await self._parcel_productivity(parcel.id, ended_within, force_update)
            except InsufficientDataError:
                logger.debug(f"Parcel {parcel.id} has no harvests, left out of crop {crop_id}")
                continue
            except Exception as e:
                logger.warning(f"Skipping parcel {parcel.id} of crop {crop_id}: {e}")
                continue
            shares.append(
                ParcelShare(
                    parcel_id=result.parcel_id,
                    parcel_name=result.parcel_name,
                    area=result.area,
                    average_productivity=result.average_productivity,
                    expected_ratio_pct=result.expected_ratio_pct,
                )
            )

        total_area = sum(share.area for share in shares)
        average = (
            sum(share.average_productivity * share.area for share in shares) / total_area
            if total_area > 0
            else 0.0
        )
        expected = self.benchmarks.expected_yield(crop.crop_type) if crop.crop_type else None

        productivity = CropProductivity(
            crop_id=crop.id,
            crop_name=crop.name,
            crop_type=crop.crop_type,
            parcels=shares,
            total_area=total_area,
            average_productivity=average,
            expected_ratio_pct=average / expected * 100 if expected and shares else None,
        )
        return self.cache.put(key, productivity)

    async def _parcel_entries(self, ids: Sequence[str], force_update: bool) -> List[PerformanceEntry]:
        entries = []
        for parcel_id in ids:
            try:
                result = await self._parcel_productivity(parcel_id, None, force_update)
            except Exception as e:
                logger.warning(f"Skipping parcel {parcel_id} in performance comparison: {e}")
                continue
            entries.append(
                PerformanceEntry(
                    key=parcel_id,
                    label=result.parcel_name,
                    average_productivity=result.average_productivity,
                    detail={"area": result.area, "crop_name": result.crop_name},
                )
            )
        return entries

    async def _crop_entries(self, ids: Sequence[str], force_update: bool) -> List[PerformanceEntry]:
        entries = []
        for crop_id in ids:
            try:
                result = await self._crop_productivity(crop_id, None, force_update)
            except Exception as e:
                logger.warning(f"Skipping crop {crop_id} in performance comparison: {e}")
                continue
            if not result.parcels:
                logger.warning(f"Skipping crop {crop_id} in performance comparison: no productive parcels")
                continue
            entries.append(
                PerformanceEntry(
                    key=crop_id,
                    label=result.crop_name,
                    average_productivity=result.average_productivity,
                    detail={"total_area": result.total_area, "parcel_count": len(result.parcels)},
                )
            )
        return entries

    async def _period_entries(
        self,
        parcel_id: str,
        periods: Sequence[DateRange],
        force_update: bool,
    ) -> List[PerformanceEntry]:
        entries = []
        for period in periods:
            try:
                result = await self._parcel_productivity(parcel_id, period, force_update)
            except Exception as e:
                logger.warning(f"Skipping period {period} of parcel {parcel_id}: {e}")
                continue
            entries.append(
                PerformanceEntry(
                    key=period.label,
                    label=period.label,
                    average_productivity=result.average_productivity,
                    detail={"harvest_count": len(result.harvests)},
                )
            )
        return entries
