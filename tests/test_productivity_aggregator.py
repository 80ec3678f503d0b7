"""Tests for ProductivityAggregatorService."""

import asyncio
from datetime import datetime, timedelta

import pytest

from farm_analytics.application.services.productivity_aggregator_service import (
    ProductivityAggregatorService,
)
from farm_analytics.domain.entities.activity import Activity
from farm_analytics.domain.entities.benchmarks import EfficiencyBenchmarks
from farm_analytics.domain.entities.crop import Crop
from farm_analytics.domain.entities.date_range import DateRange
from farm_analytics.domain.entities.parcel import Parcel
from farm_analytics.domain.entities.results import ErrorKind
from farm_analytics.infrastructure.repositories.in_memory_farm_repository import (
    InMemoryFarmRepository,
)


def run(coroutine):
    return asyncio.run(coroutine)


def harvest(activity_id, year, kilograms, parcel_id="t"):
    return Activity(
        id=activity_id,
        kind="harvest",
        state="completed",
        start=datetime(year, 7, 1, 8),
        end=datetime(year, 7, 1, 18),
        parcel_id=parcel_id,
        quantity_harvested=kilograms,
        harvest_unit="kg",
    )


def history_repository(harvests) -> InMemoryFarmRepository:
    """One 2 ha wheat parcel with the given harvests."""
    return InMemoryFarmRepository(
        activities=harvests,
        parcels=[Parcel(id="t", name="Trial plot", area=2.0, crop_id="c1")],
        crops=[Crop(id="c1", name="Wheat", crop_type="cereal")],
    )


@pytest.fixture
def trend_service():
    # Inserted out of order: productivity must follow end dates
    repo = history_repository(
        [harvest("y2023", 2023, 6000), harvest("y2021", 2021, 2000), harvest("y2022", 2022, 4000)]
    )
    return ProductivityAggregatorService(repo, repo)


# ----------------------------------------------------------------------
# Parcel and crop productivity
# ----------------------------------------------------------------------


def test_productivity_for_parcel(productivity_service):
    """Test kg/ha against the crop-type benchmark."""
    result = run(productivity_service.productivity_for_parcel("p1"))

    assert result.ok
    productivity = result.value
    assert [h.activity_id for h in productivity.harvests] == ["h1"]
    assert productivity.average_productivity == pytest.approx(5000.0)
    assert productivity.expected_yield == 5000.0
    assert productivity.expected_ratio_pct == pytest.approx(100.0)
    assert productivity.variation_pct is None
    assert productivity.crop_type == "cereal"


def test_productivity_for_parcel_unknown_crop_type_uses_other_benchmark():
    """Test crop types without a benchmark are compared with the `other` yield."""
    repo = InMemoryFarmRepository(
        activities=[harvest("q1", 2024, 5000)],
        parcels=[Parcel(id="t", name="Trial plot", area=2.0, crop_id="c9")],
        crops=[Crop(id="c9", name="Quinoa", crop_type="pseudocereal")],
    )
    service = ProductivityAggregatorService(repo, repo)
    productivity = run(service.productivity_for_parcel("t")).value

    assert productivity.expected_yield == 10000.0
    assert productivity.expected_ratio_pct == pytest.approx(25.0)


def test_productivity_for_parcel_normalizes_units(productivity_service):
    """Test harvests recorded in tons."""
    productivity = run(productivity_service.productivity_for_parcel("p2")).value
    assert productivity.average_productivity == pytest.approx(3000.0)
    assert productivity.expected_ratio_pct == pytest.approx(60.0)


def test_productivity_for_parcel_variation(trend_service):
    """Test first-vs-last variation ordered by harvest date."""
    productivity = run(trend_service.productivity_for_parcel("t")).value

    assert [h.activity_id for h in productivity.harvests] == ["y2021", "y2022", "y2023"]
    assert productivity.average_productivity == pytest.approx(2000.0)
    assert productivity.variation_pct == pytest.approx(200.0)


def test_productivity_for_parcel_period(trend_service):
    """Test restricting harvests to an end-date window."""
    window = DateRange(datetime(2022, 1, 1), datetime(2023, 12, 31))
    productivity = run(trend_service.productivity_for_parcel("t", ended_within=window)).value
    assert [h.activity_id for h in productivity.harvests] == ["y2022", "y2023"]


def test_productivity_for_parcel_errors(productivity_service, farm):
    """Test missing parcel, no harvests and non-positive area."""
    assert run(productivity_service.productivity_for_parcel("zz")).error_kind == ErrorKind.NOT_FOUND
    assert run(productivity_service.productivity_for_parcel("p3")).error_kind == ErrorKind.INSUFFICIENT_DATA
    assert run(productivity_service.productivity_for_parcel("")).error_kind == ErrorKind.INVALID_INPUT

    farm.add_parcel(Parcel(id="p0", name="Bare", area=0.0, crop_id="c1"))
    assert run(productivity_service.productivity_for_parcel("p0")).error_kind == ErrorKind.INVALID_INPUT


def test_productivity_for_crop_is_area_weighted(productivity_service):
    """Test 5 ha at 25,000 kg and 10 ha at 30,000 kg give 3666.67 kg/ha."""
    crop = run(productivity_service.productivity_for_crop("c1")).value

    assert crop.total_area == pytest.approx(15.0)
    assert crop.average_productivity == pytest.approx(55000 / 15)
    assert crop.expected_ratio_pct == pytest.approx(55000 / 15 / 5000 * 100)
    assert {share.parcel_id for share in crop.parcels} == {"p1", "p2"}


def test_productivity_for_crop_without_harvests(productivity_service):
    """Test a crop whose parcels have no harvests succeeds with zeros."""
    crop = run(productivity_service.productivity_for_crop("c2")).value
    assert crop.parcels == []
    assert crop.average_productivity == 0.0
    assert crop.expected_ratio_pct is None

    assert run(productivity_service.productivity_for_crop("c9")).error_kind == ErrorKind.NOT_FOUND


# ----------------------------------------------------------------------
# Trends
# ----------------------------------------------------------------------


def test_trend_analysis_linear_history(trend_service):
    """Test slope, R², direction, strength and forecasts on a perfect line."""
    trend = run(trend_service.trend_analysis("t")).value

    assert trend.slope == pytest.approx(1000.0)
    assert trend.r_squared == pytest.approx(1.0)
    assert trend.direction == "ascending"
    assert trend.strength == pytest.approx(0.5)
    assert [p.period for p in trend.points] == [1, 2, 3]

    assert [f.period for f in trend.forecasts] == [4, 5, 6]
    assert [f.productivity for f in trend.forecasts] == pytest.approx([4000.0, 5000.0, 6000.0])
    assert trend.forecasts[0].date == datetime(2023, 7, 1, 18) + timedelta(days=365)


def test_trend_analysis_needs_three_points():
    """Test two harvests are not enough for a trend."""
    repo = history_repository([harvest("a", 2021, 2000), harvest("b", 2022, 4000)])
    service = ProductivityAggregatorService(repo, repo)

    result = run(service.trend_analysis("t"))
    assert not result.ok
    assert result.error_kind == ErrorKind.INSUFFICIENT_DATA


def test_trend_analysis_stable_and_descending():
    """Test the direction follows the slope sign."""
    flat = history_repository([harvest(str(y), y, 3000) for y in (2020, 2021, 2022)])
    assert run(ProductivityAggregatorService(flat, flat).trend_analysis("t")).value.direction == "stable"

    falling = history_repository(
        [harvest("a", 2020, 6000), harvest("b", 2021, 4000), harvest("c", 2022, 3000)]
    )
    assert run(ProductivityAggregatorService(falling, falling).trend_analysis("t")).value.direction == "descending"


def test_trend_analysis_configurable_minimum():
    """Test the minimum number of points is a tunable."""
    repo = history_repository([harvest("a", 2021, 2000), harvest("b", 2022, 4000)])
    service = ProductivityAggregatorService(
        repo, repo, efficiency_benchmarks=EfficiencyBenchmarks(trend_min_points=2)
    )
    assert run(service.trend_analysis("t")).ok


# ----------------------------------------------------------------------
# Operational efficiency
# ----------------------------------------------------------------------


def test_operational_efficiency_blend(productivity_service):
    """Test 40% time, 40% cost and 20% yield for a harvest."""
    result = run(productivity_service.operational_efficiency("h1", 362.5))

    # time 100, cost (1 - 362.5/750) * 100, yield 5000/5000 * 100
    assert result.ok
    assert result.value.efficiency == pytest.approx(40 + 0.4 * (1 - 362.5 / 750) * 100 + 20)


def test_operational_efficiency_prices_activity_when_cost_missing(productivity_service):
    """Test the cost is computed when not given."""
    given = run(productivity_service.operational_efficiency("h1", 362.5)).value
    computed = run(productivity_service.operational_efficiency("h1")).value
    assert computed.total_cost == pytest.approx(362.5)
    assert computed.efficiency == pytest.approx(given.efficiency)


def test_operational_efficiency_non_harvest(productivity_service):
    """Test yield efficiency counts as 100 outside harvests."""
    efficiency = run(productivity_service.operational_efficiency("g1", 480.0)).value.efficiency
    # preparation: 12h estimated over 8h elapsed
    expected = 0.4 * 150 + 0.4 * (1 - 480 / (12 * 75)) * 100 + 0.2 * 100
    assert efficiency == pytest.approx(expected)


def test_analyze_operational_efficiency(productivity_service):
    """Test efficiency spread over completed harvests."""
    analysis = run(productivity_service.analyze_operational_efficiency(kind="harvest")).value

    h1 = 40 + 0.4 * (1 - 362.5 / 750) * 100 + 20
    h2 = 40 + 0.4 * (1 - 160 / 750) * 100 + 0.2 * 60
    assert analysis.completed_count == 2
    assert analysis.mean_efficiency == pytest.approx((h1 + h2) / 2)
    assert analysis.efficiency_std == pytest.approx(abs(h1 - h2) / 2)
    assert analysis.mean_completion_hours == pytest.approx(10.0)


def test_analyze_operational_efficiency_filters(productivity_service):
    """Test responsible and period filters."""
    mine = run(productivity_service.analyze_operational_efficiency(responsible_id="u2")).value
    assert {a.activity_id for a in mine.activities} == {"h2", "g1"}

    february = DateRange(datetime(2024, 2, 1), datetime(2024, 2, 28))
    winter = run(productivity_service.analyze_operational_efficiency(period=february)).value
    assert [a.activity_id for a in winter.activities] == ["g1"]


def test_analyze_operational_efficiency_uses_end_date(farm, productivity_service):
    """Test activities that end after the period are left out."""
    farm.add_activity(
        Activity(
            id="x1",
            kind="treatment",
            state="completed",
            start=datetime(2024, 2, 20, 8),
            end=datetime(2024, 3, 5, 8),
            parcel_id="p3",
        )
    )
    february = DateRange(datetime(2024, 2, 1), datetime(2024, 2, 28))
    analysis = run(productivity_service.analyze_operational_efficiency(period=february)).value

    assert [a.activity_id for a in analysis.activities] == ["g1"]
    assert analysis.mean_completion_hours == pytest.approx(8.0)

    march = DateRange(datetime(2024, 3, 1), datetime(2024, 3, 31))
    analysis = run(productivity_service.analyze_operational_efficiency(period=march)).value
    assert [a.activity_id for a in analysis.activities] == ["x1"]


def test_analyze_operational_efficiency_completion_skips_failures(productivity_service):
    """Test mean completion time only covers activities that were scored."""
    execute = productivity_service.compute_cost_uc.execute

    async def failing_for_g1(activity):
        if activity.id == "g1":
            raise RuntimeError("pricing unavailable")
        return await execute(activity)

    productivity_service.compute_cost_uc.execute = failing_for_g1
    analysis = run(productivity_service.analyze_operational_efficiency(responsible_id="u2")).value

    assert [a.activity_id for a in analysis.activities] == ["h2"]
    assert analysis.mean_completion_hours == pytest.approx(10.0)


# ----------------------------------------------------------------------
# Performance comparison
# ----------------------------------------------------------------------


def test_compare_performance_parcels(productivity_service):
    """Test ranking by productivity with mean adjacent variation."""
    comparison = run(
        productivity_service.compare_performance("parcels", {"parcel_ids": ["p2", "p1"]})
    ).value

    assert [entry.key for entry in comparison.entries] == ["p1", "p2"]
    assert comparison.best == "p1"
    assert comparison.worst == "p2"
    assert comparison.mean_productivity == pytest.approx(4000.0)
    assert comparison.mean_variation_pct == pytest.approx(-40.0)


def test_compare_performance_crops_skips_unproductive(productivity_service):
    """Test crops without harvests are left out."""
    comparison = run(
        productivity_service.compare_performance("crops", {"crop_ids": ["c2", "c1"]})
    ).value
    assert [entry.key for entry in comparison.entries] == ["c1"]
    assert comparison.mean_variation_pct == 0.0


def test_compare_performance_periods(trend_service):
    """Test comparing end-date windows of one parcel."""
    periods = [
        DateRange(datetime(2021, 1, 1), datetime(2021, 12, 31)),
        DateRange(datetime(2023, 1, 1), datetime(2023, 12, 31)),
    ]
    comparison = run(
        trend_service.compare_performance("periods", {"parcel_id": "t", "periods": periods})
    ).value

    assert comparison.best == periods[1].label
    assert comparison.mean_variation_pct == pytest.approx((1000 - 3000) / 3000 * 100)


def test_compare_performance_errors(productivity_service):
    """Test invalid types, missing parameters and empty lists."""
    service = productivity_service
    assert run(service.compare_performance("fields", {})).error_kind == ErrorKind.INVALID_INPUT
    assert run(service.compare_performance("parcels", {})).error_kind == ErrorKind.INVALID_INPUT
    assert run(service.compare_performance("parcels", {"parcel_ids": []})).error_kind == ErrorKind.INSUFFICIENT_DATA
    assert run(service.compare_performance("parcels", {"parcel_ids": ["p3"]})).error_kind == ErrorKind.INSUFFICIENT_DATA
