"""Tests for the command dispatch façade."""

import asyncio
import json
from datetime import datetime

import pytest

from farm_analytics.application.services.command_dispatcher import (
    Command,
    CostCommand,
    ProductivityCommand,
    build_cost_dispatcher,
    build_productivity_dispatcher,
    parse_condition,
    parse_datetime,
)


def run(coroutine):
    return asyncio.run(coroutine)


@pytest.fixture
def costs(cost_service):
    return build_cost_dispatcher(cost_service)


@pytest.fixture
def productivity(productivity_service):
    return build_productivity_dispatcher(productivity_service)


def test_every_command_kind_has_a_handler(costs, productivity):
    """Test the dispatchers cover their command enums."""
    assert set(costs.kinds) == {c.value for c in CostCommand}
    assert set(productivity.kinds) == {c.value for c in ProductivityCommand}


def test_parcel_costs_result_is_json_serializable(costs):
    """Test a successful dispatch returns plain data."""
    result = run(costs.dispatch({"kind": "compute-parcel-costs", "payload": {"parcel_id": "p1"}}))

    assert result["ok"] is True
    value = result["value"]
    assert value["total"] == pytest.approx(422.5)
    assert value["by_parcel"]["p1"]["activities"] == ["h1", "t1"]
    assert value["activities"][0]["breakdown"]["equipment"] == pytest.approx(200.0)
    json.dumps(result)


def test_dispatch_accepts_command_objects(costs):
    """Test Command instances dispatch like mappings."""
    result = run(costs.dispatch(Command(kind="compute-activity-cost", payload={"activity_id": "h1"})))
    assert result["value"]["total_cost"] == pytest.approx(362.5)


def test_failure_shape(costs):
    """Test failures carry the error kind and a detail."""
    result = run(costs.dispatch({"kind": "compute-parcel-costs", "payload": {"parcel_id": "zz"}}))
    assert result == {"ok": False, "error_kind": "NotFound", "detail": "Parcel zz not found"}


def test_unknown_and_malformed_commands(costs):
    """Test unknown kinds and bad payloads become InvalidInput."""
    unknown = run(costs.dispatch({"kind": "analyze-trends", "payload": {}}))
    assert unknown["error_kind"] == "InvalidInput"

    no_kind = run(costs.dispatch({"payload": {}}))
    assert no_kind["error_kind"] == "InvalidInput"

    bad_payload = run(costs.dispatch({"kind": "compute-parcel-costs", "payload": [1, 2]}))
    assert bad_payload["error_kind"] == "InvalidInput"

    bad_date = run(costs.dispatch({"kind": "compute-period-costs", "payload": {"start": "yesterday"}}))
    assert bad_date["error_kind"] == "InvalidInput"


def test_period_and_kind_commands(costs):
    """Test ISO dates and period mappings in payloads."""
    period = run(
        costs.dispatch(
            {
                "kind": "compute-period-costs",
                "payload": {"start": "2024-07-01", "end": "2024-07-31T23:59:59"},
            }
        )
    )
    assert period["value"]["total"] == pytest.approx(582.5)
    assert period["value"]["scope"]["period"]["start"] == "2024-07-01T00:00:00"

    by_kind = run(
        costs.dispatch(
            {
                "kind": "compute-costs-by-kind",
                "payload": {
                    "kind": "harvest",
                    "period": {"start": "2024-07-02", "end": "2024-07-03"},
                },
            }
        )
    )
    assert by_kind["value"]["total"] == pytest.approx(160.0)


def test_period_with_utc_offsets(costs):
    """Test timestamps carrying an offset are compared as UTC."""
    period = run(
        costs.dispatch(
            {
                "kind": "compute-period-costs",
                "payload": {
                    "start": "2024-07-01T00:00:00+00:00",
                    "end": "2024-07-31T23:59:59+00:00",
                },
            }
        )
    )
    assert period["ok"] is True
    assert period["value"]["total"] == pytest.approx(582.5)

    assert parse_datetime("2024-07-01T10:00:00+02:00") == datetime(2024, 7, 1, 8)
    assert parse_datetime("2024-07-01") == datetime(2024, 7, 1)


def test_compare_costs_command(costs):
    """Test compare-costs with caller ordering."""
    result = run(
        costs.dispatch({"kind": "compare-costs", "payload": {"type": "parcels", "ids": ["p2", "p1"]}})
    )
    metrics = result["value"]["metrics"]
    assert metrics["lowest"] == "p2"
    assert metrics["highest"] == "p1"
    assert metrics["variation_pct"] == pytest.approx((422.5 - 160.0) / 160.0 * 100)

    empty = run(costs.dispatch({"kind": "compare-costs", "payload": {"type": "parcels"}}))
    assert empty["error_kind"] == "InsufficientData"


def test_declarative_alert_rule(costs):
    """Test JSON callers configure rules with a field/operator/value condition."""
    configured = run(
        costs.dispatch(
            {
                "kind": "configure-alert-rule",
                "payload": {
                    "name": "COSTLY_PER_HECTARE",
                    "message": "Cost per hectare above 50",
                    "condition": {"field": "metrics.cost_per_area", "operator": ">", "value": 50},
                },
            }
        )
    )
    assert configured["ok"]
    assert "condition" not in configured["value"]

    aggregate = run(costs.dispatch({"kind": "compute-parcel-costs", "payload": {"parcel_id": "p1"}}))
    alerts = run(costs.dispatch({"kind": "generate-alerts", "payload": {"data": aggregate["value"]}}))
    assert [a["type"] for a in alerts["value"]] == ["COSTLY_PER_HECTARE"]


def test_parse_condition():
    """Test declarative conditions and pass-through of callables."""
    condition = parse_condition({"field": "metrics.total", "operator": "<=", "value": 10})
    assert condition({"metrics": {"total": 10}})
    assert not condition({"metrics": {"total": 11}})
    assert not condition({"metrics": {}})

    check = lambda data: True  # noqa: E731
    assert parse_condition(check) is check


def test_clear_cache_command(costs):
    """Test clear-cache reports how many entries were dropped."""
    run(costs.dispatch({"kind": "compute-parcel-costs", "payload": {"parcel_id": "p1"}}))
    result = run(costs.dispatch({"kind": "clear-cache"}))
    assert result == {"ok": True, "value": {"cleared": 1}}


def test_productivity_commands(productivity):
    """Test the productivity dispatcher end to end."""
    parcel = run(
        productivity.dispatch({"kind": "analyze-parcel-productivity", "payload": {"parcel_id": "p1"}})
    )
    assert parcel["value"]["metrics"]["average_productivity"] == pytest.approx(5000.0)

    crop = run(productivity.dispatch({"kind": "analyze-crop-productivity", "payload": {"crop_id": "c1"}}))
    assert crop["value"]["metrics"]["average_productivity"] == pytest.approx(3666.6667)

    trends = run(productivity.dispatch({"kind": "analyze-trends", "payload": {"parcel_id": "p1"}}))
    assert trends["error_kind"] == "InsufficientData"

    efficiency = run(
        productivity.dispatch(
            {"kind": "analyze-operational-efficiency", "payload": {"activity_id": "h1", "cost_total": 362.5}}
        )
    )
    assert efficiency["value"]["efficiency"] == pytest.approx(80.6667, abs=1e-3)

    analysis = run(
        productivity.dispatch({"kind": "analyze-operational-efficiency", "payload": {"kind": "harvest"}})
    )
    assert analysis["value"]["metrics"]["completed_count"] == 2
    assert analysis["value"]["responsible_id"] == "all"


def test_compare_performance_command(productivity):
    """Test period payloads are parsed into date ranges."""
    result = run(
        productivity.dispatch(
            {
                "kind": "compare-performance",
                "payload": {"type": "parcels", "params": {"parcel_ids": ["p1", "p2"]}},
            }
        )
    )
    assert result["value"]["metrics"]["mean_variation_pct"] == pytest.approx(-40.0)

    periods = run(
        productivity.dispatch(
            {
                "kind": "compare-performance",
                "payload": {
                    "type": "periods",
                    "params": {
                        "parcel_id": "p1",
                        "periods": [{"start": "2024-01-01", "end": "2024-12-31"}],
                    },
                },
            }
        )
    )
    assert periods["value"]["metrics"]["best"] == "2024-01-01T00:00:00/2024-12-31T00:00:00"
