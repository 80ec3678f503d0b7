"""Cost aggregation service."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ...domain.calculations.comparison import summarize_in_input_order
from ...domain.entities.activity import Activity, ActivityKind
from ...domain.entities.activity_query import ActivityQuery
from ...domain.entities.benchmarks import AlertThresholds, CostBenchmarks
from ...domain.entities.cost import ActivityCost, CostAggregate, CostComparison, CostComparisonItem
from ...domain.entities.date_range import DateRange
from ...domain.exceptions import InsufficientDataError, InvalidInputError, NotFoundError
from ...domain.repositories.activity_repository import ActivityRepository
from ...domain.repositories.reference_repository import ReferenceRepository
from ...domain.use_cases.alert_registry import AlertRegistry
from ...domain.use_cases.assess_costs import AssessCostsUseCase
from ...domain.use_cases.compute_activity_cost import ComputeActivityCostUseCase
from ...domain.use_cases.consolidate_costs import ConsolidateCostsUseCase, ConsolidationContext
from ..cache import AggregateCache, CacheKey, filter_signature, range_signature
from .result_boundary import public_operation

logger = logging.getLogger(__name__)

COMPARISON_TYPES = ("harvests", "parcels", "crops")
COMPARISON_METRICS = ("total_cost", "cost_per_area", "cost_per_unit")
PERIOD_FILTERS = ("parcel_id", "crop_id", "kind", "responsible_id")


class CostAggregatorService:
    """
    Computes activity costs and rolls them up by parcel, crop, period,
    activity kind and responsible party.

    Every public method returns an OperationResult. Aggregates are cached
    per query until `clear_cache` or a forced update; a cached aggregate is
    returned as the same object on every hit.
    """

    def __init__(
        self,
        activity_repo: ActivityRepository,
        reference_repo: ReferenceRepository,
        benchmarks: Optional[CostBenchmarks] = None,
        thresholds: Optional[AlertThresholds] = None,
    ):
        self.activity_repo = activity_repo
        self.reference_repo = reference_repo
        self.benchmarks = benchmarks or CostBenchmarks()

        self.cache = AggregateCache()
        self.alert_registry = AlertRegistry()

        # Use cases
        self.compute_cost_uc = ComputeActivityCostUseCase(reference_repo, self.benchmarks)
        self.consolidate_uc = ConsolidateCostsUseCase(self.benchmarks.hours_per_activity)
        self.assess_uc = AssessCostsUseCase(self.alert_registry, thresholds)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @public_operation("compute-activity-cost")
    async def cost_of_activity(self, activity_or_id: Union[Activity, str]) -> ActivityCost:
        """Cost of one activity, fetching and expanding it when given an id."""
        activity = await self._load_activity(activity_or_id)
        return await self.compute_cost_uc.execute(activity)

    @public_operation("compute-parcel-costs")
    async def costs_for_parcel(
        self,
        parcel_id: str,
        states: Optional[Sequence[str]] = None,
        force_update: bool = False,
    ) -> CostAggregate:
        return await self._parcel_aggregate(parcel_id, states, force_update)

    @public_operation("compute-crop-costs")
    async def costs_for_crop(
        self,
        crop_id: str,
        states: Optional[Sequence[str]] = None,
        force_update: bool = False,
    ) -> CostAggregate:
        return await self._crop_aggregate(crop_id, states, force_update)

    @public_operation("compute-period-costs")
    async def costs_for_period(
        self,
        start: Optional[datetime],
        end: Optional[datetime] = None,
        states: Optional[Sequence[str]] = None,
        filters: Optional[Mapping[str, Any]] = None,
        force_update: bool = False,
    ) -> CostAggregate:
        """
        Costs of activities whose window overlaps [start, end].

        Open activities count when they start on or before `end`, which
        defaults to now. `filters` may narrow by parcel, crop, kind or
        responsible.
        """
        if start is None:
            raise InvalidInputError("A period start is required")
        period = self._period(start, end or datetime.now())
        filters = dict(filters or {})
        unknown = set(filters) - set(PERIOD_FILTERS)
        if unknown:
            raise InvalidInputError(f"Unsupported period filters: {sorted(unknown)}")

        states = self._states(states)
        key = CacheKey(
            "period", None, range_signature(period), filter_signature(states=states, **filters)
        )
        query = ActivityQuery(states=states, period=period, **filters)
        scope = {"period": period.to_dict(), "states": list(states), "filters": filters}
        return await self._aggregate(key, query, scope, force_update)

    @public_operation("compute-costs-by-kind")
    async def costs_by_activity_kind(
        self,
        kind: str,
        states: Optional[Sequence[str]] = None,
        period: Optional[DateRange] = None,
        force_update: bool = False,
    ) -> CostAggregate:
        if not kind:
            raise InvalidInputError("An activity kind is required")
        kind = getattr(kind, "value", kind)
        states = self._states(states)
        key = CacheKey("kind", kind, range_signature(period), filter_signature(states=states))
        query = ActivityQuery(kind=kind, states=states, period=period)
        scope = {"kind": kind, "states": list(states), "period": period}
        return await self._aggregate(key, query, scope, force_update)

    @public_operation("compute-costs-by-responsible")
    async def costs_by_responsible(
        self,
        person_id: str,
        states: Optional[Sequence[str]] = None,
        period: Optional[DateRange] = None,
        force_update: bool = False,
    ) -> CostAggregate:
        if not person_id:
            raise InvalidInputError("A responsible id is required")
        states = self._states(states)
        key = CacheKey("responsible", person_id, range_signature(period), filter_signature(states=states))
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        query = ActivityQuery(responsible_id=person_id, states=states, period=period)
        person, activities = await asyncio.gather(
            self.reference_repo.get_person(person_id),
            self.activity_repo.find_activities(query),
        )
        name = person.name if person else next(
            (a.responsible_name for a in activities if a.responsible_name), None
        )
        scope = {
            "responsible": {"id": person_id, "name": name},
            "states": list(states),
            "period": period,
        }
        costs = await self._price_activities(activities)
        aggregate = self.consolidate_uc.execute(
            ((cost, self._context_for(activity)) for activity, cost in costs), scope
        )
        return self.cache.put(key, aggregate)

    @public_operation("compare-costs")
    async def compare_costs(
        self,
        comparison_type: str,
        ids: Sequence[str],
        force_update: bool = False,
        metric: str = "total_cost",
    ) -> CostComparison:
        """
        Compare harvests, parcels or crops by cost.

        Items stay in the order of `ids`; the reported variation is the
        change from the first to the last item as given.
        """
        if comparison_type not in COMPARISON_TYPES:
            raise InvalidInputError(f"Invalid comparison type: {comparison_type}")
        if metric not in COMPARISON_METRICS:
            raise InvalidInputError(f"Invalid comparison metric: {metric}")
        if not ids:
            raise InsufficientDataError("No ids to compare")

        ids = list(ids)
        key = CacheKey("compare-costs", comparison_type, None, filter_signature(ids=ids, metric=metric))
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        if comparison_type == "harvests":
            items = await self._harvest_items(ids)
        elif comparison_type == "parcels":
            items = await self._parcel_items(ids, force_update)
        else:
            items = await self._crop_items(ids, force_update)

        if not items:
            raise InsufficientDataError(f"None of the {comparison_type} could be compared")

        summary = summarize_in_input_order(items, key=lambda item: getattr(item, metric) or 0.0)
        comparison = CostComparison(
            comparison_type=comparison_type,
            metric=metric,
            items=items,
            lowest=summary.lowest,
            highest=summary.highest,
            mean=summary.mean,
            variation_pct=summary.variation_pct,
        )
        return self.cache.put(key, comparison)

    @public_operation("generate-alerts")
    def check_alerts(self, aggregate: Any):
        return self.assess_uc.alerts(aggregate)

    @public_operation("generate-insights")
    def generate_insights(self, aggregate: Any):
        return self.assess_uc.insights(aggregate)

    @public_operation("configure-alert-rule")
    def configure_alert_rule(self, configuration: Mapping[str, Any]):
        return self.alert_registry.configure(configuration)

    @public_operation("clear-cache")
    def clear_cache(self) -> Dict[str, Any]:
        return {"cleared": self.cache.clear()}

    # ------------------------------------------------------------------
    # Aggregation pipeline
    # ------------------------------------------------------------------

    def _states(self, states: Optional[Iterable[str]]) -> Tuple[str, ...]:
        if not states:
            return tuple(self.benchmarks.default_states)
        return tuple(getattr(s, "value", s) for s in states)

    @staticmethod
    def _period(start: datetime, end: datetime) -> DateRange:
        try:
            return DateRange(start, end)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

    async def _load_activity(self, activity_or_id: Union[Activity, str]) -> Activity:
        if isinstance(activity_or_id, Activity):
            return activity_or_id
        if not activity_or_id:
            raise InvalidInputError("An activity id is required")
        activity = await self.activity_repo.get_activity(activity_or_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_or_id} not found")
        return activity

    @staticmethod
    def _context_for(activity: Activity) -> ConsolidationContext:
        """Attribution read from the activity's expanded parcel."""
        parcel = activity.parcel
        if parcel is None:
            return ConsolidationContext(parcel_id=activity.parcel_id)
        return ConsolidationContext(
            parcel_id=parcel.id,
            parcel_name=parcel.name,
            parcel_area=parcel.area,
            crop_id=parcel.crop_id,
            crop_name=parcel.crop.name if parcel.crop else None,
        )

    async def _price_activities(self, activities: Iterable[Activity]) -> List[Tuple[Activity, ActivityCost]]:
        """Price each activity, skipping the ones that fail."""
        priced = []
        for activity in activities:
            try:
                cost = await self.compute_cost_uc.execute(activity)
            except Exception as e:
                logger.warning(f"Skipping activity {activity.id}: {e}")
                continue
            priced.append((activity, cost))
        return priced

    async def _aggregate(
        self,
        key: CacheKey,
        query: ActivityQuery,
        scope: Dict[str, Any],
        force_update: bool,
    ) -> CostAggregate:
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        activities = await self.activity_repo.find_activities(query)
        costs = await self._price_activities(activities)
        aggregate = self.consolidate_uc.execute(
            ((cost, self._context_for(activity)) for activity, cost in costs), scope
        )
        return self.cache.put(key, aggregate)

    async def _parcel_aggregate(
        self,
        parcel_id: str,
        states: Optional[Sequence[str]],
        force_update: bool,
    ) -> CostAggregate:
        if not parcel_id:
            raise InvalidInputError("A parcel id is required")
        states = self._states(states)
        key = CacheKey("parcel", parcel_id, None, filter_signature(states=states))
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        parcel, activities = await asyncio.gather(
            self.reference_repo.get_parcel(parcel_id),
            self.activity_repo.find_activities(ActivityQuery(parcel_id=parcel_id, states=states)),
        )
        if parcel is None:
            raise NotFoundError(f"Parcel {parcel_id} not found")

        crop_name = parcel.crop.name if parcel.crop else None
        context = ConsolidationContext(
            parcel_id=parcel.id,
            parcel_name=parcel.name,
            parcel_area=parcel.area,
            crop_id=parcel.crop_id,
            crop_name=crop_name,
        )
        scope = {
            "parcel_id": parcel.id,
            "parcel_name": parcel.name,
            "area": parcel.area,
            "crop_id": parcel.crop_id,
            "crop_name": crop_name,
            "states": list(states),
        }
        costs = await self._price_activities(activities)
        aggregate = self.consolidate_uc.execute(((cost, context) for _, cost in costs), scope)
        return self.cache.put(key, aggregate)

    async def _crop_aggregate(
        self,
        crop_id: str,
        states: Optional[Sequence[str]],
        force_update: bool,
    ) -> CostAggregate:
        """
        Fold the activity costs of every parcel of a crop into a new aggregate.

        Parcels that fail are skipped; the aggregate covers the rest.
        """
        if not crop_id:
            raise InvalidInputError("A crop id is required")
        states = self._states(states)
        key = CacheKey("crop", crop_id, None, filter_signature(states=states))
        cached = self.cache.get(key)
        if cached is not None and not force_update:
            return cached

        crop, parcels = await asyncio.gather(
            self.reference_repo.get_crop(crop_id),
            self.reference_repo.find_parcels(crop_id),
        )
        if not parcels:
            raise NotFoundError(f"No parcels found for crop {crop_id}")

        crop_name = crop.name if crop else f"Crop {crop_id}"
        pairs = []
        covered = []
        for parcel in parcels:
            try:
                parcel_aggregate = await self._parcel_aggregate(parcel.id, states, force_update)
            except Exception as e:
                logger.warning(f"Skipping parcel {parcel.id} of crop {crop_id}: {e}")
                continue
            covered.append(parcel)
            context = ConsolidationContext(
                parcel_id=parcel.id,
                parcel_name=parcel.name,
                parcel_area=parcel.area,
                crop_id=crop_id,
                crop_name=crop_name,
            )
            pairs.extend((cost, context) for cost in parcel_aggregate.activities)

        scope = {
            "crop_id": crop_id,
            "crop_name": crop_name,
            "crop_type": crop.crop_type if crop else None,
            "parcel_count": len(covered),
            "area": sum(p.area or 0.0 for p in covered),
            "states": list(states),
        }
        aggregate = self.consolidate_uc.execute(pairs, scope)
        return self.cache.put(key, aggregate)

    # ------------------------------------------------------------------
    # Comparison items
    # ------------------------------------------------------------------

    async def _harvest_items(self, ids: List[str]) -> List[CostComparisonItem]:
        activities = await self.activity_repo.find_activities(
            ActivityQuery(activity_ids=tuple(ids), kind=ActivityKind.HARVEST)
        )
        if not activities:
            raise NotFoundError("No harvest activities found")

        by_id = {activity.id: activity for activity in activities}
        items = []
        for activity_id in ids:
            activity = by_id.get(activity_id)
            if activity is None:
                logger.warning(f"Skipping harvest {activity_id}: not found")
                continue
            priced = await self._price_activities([activity])
            if not priced:
                continue
            cost = priced[0][1]
            parcel = activity.parcel
            quantity = activity.quantity_harvested
            items.append(
                CostComparisonItem(
                    id=activity.id,
                    name=parcel.name if parcel else None,
                    total_cost=cost.total,
                    activity_count=1,
                    area=parcel.area if parcel else None,
                    cost_per_area=cost.total / parcel.area if parcel and parcel.area else None,
                    quantity_harvested=quantity,
                    harvest_unit=activity.harvest_unit,
                    cost_per_unit=cost.total / quantity if quantity else 0.0,
                    date=activity.end,
                    parcel_name=parcel.name if parcel else None,
                    crop_id=parcel.crop_id if parcel else None,
                )
            )
        return items

    async def _parcel_items(self, ids: List[str], force_update: bool) -> List[CostComparisonItem]:
        items = []
        for parcel_id in ids:
            try:
                aggregate = await self._parcel_aggregate(parcel_id, None, force_update)
            except Exception as e:
                logger.warning(f"Skipping parcel {parcel_id} in comparison: {e}")
                continue
            scope = aggregate.scope
            area = scope.get("area")
            items.append(
                CostComparisonItem(
                    id=parcel_id,
                    name=scope.get("parcel_name"),
                    total_cost=aggregate.total,
                    activity_count=aggregate.activity_count,
                    area=area,
                    cost_per_area=aggregate.total / area if area else 0.0,
                    crop_id=scope.get("crop_id"),
                )
            )
        return items

    async def _crop_items(self, ids: List[str], force_update: bool) -> List[CostComparisonItem]:
        items = []
        for crop_id in ids:
            try:
                aggregate = await self._crop_aggregate(crop_id, None, force_update)
            except Exception as e:
                logger.warning(f"Skipping crop {crop_id} in comparison: {e}")
                continue
            scope = aggregate.scope
            area = scope.get("area")
            items.append(
                CostComparisonItem(
                    id=crop_id,
                    name=scope.get("crop_name"),
                    total_cost=aggregate.total,
                    activity_count=aggregate.activity_count,
                    area=area,
                    cost_per_area=aggregate.total / area if area else 0.0,
                    crop_type=scope.get("crop_type"),
                    parcel_count=scope.get("parcel_count"),
                )
            )
        return items
