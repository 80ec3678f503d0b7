"""Message-passing façade over the two aggregators.

A command is `{"kind": ..., "payload": {...}}`. Dispatching always returns
the plain `{"ok": ...}` dictionary of an OperationResult, so callers never
see an exception.
"""

import inspect
import logging
import operator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Type

from ...domain.entities.date_range import DateRange
from ...domain.entities.results import ErrorKind, OperationResult
from .cost_aggregator_service import CostAggregatorService
from .productivity_aggregator_service import ProductivityAggregatorService

logger = logging.getLogger(__name__)


class CostCommand(str, Enum):
    COMPUTE_ACTIVITY_COST = "compute-activity-cost"
    COMPUTE_PARCEL_COSTS = "compute-parcel-costs"
    COMPUTE_CROP_COSTS = "compute-crop-costs"
    COMPUTE_PERIOD_COSTS = "compute-period-costs"
    COMPUTE_COSTS_BY_KIND = "compute-costs-by-kind"
    COMPUTE_COSTS_BY_RESPONSIBLE = "compute-costs-by-responsible"
    GENERATE_ALERTS = "generate-alerts"
    GENERATE_INSIGHTS = "generate-insights"
    CONFIGURE_ALERT_RULE = "configure-alert-rule"
    CLEAR_CACHE = "clear-cache"
    COMPARE_COSTS = "compare-costs"


class ProductivityCommand(str, Enum):
    ANALYZE_PARCEL_PRODUCTIVITY = "analyze-parcel-productivity"
    ANALYZE_CROP_PRODUCTIVITY = "analyze-crop-productivity"
    ANALYZE_OPERATIONAL_EFFICIENCY = "analyze-operational-efficiency"
    ANALYZE_TRENDS = "analyze-trends"
    COMPARE_PERFORMANCE = "compare-performance"
    GENERATE_ALERTS = "generate-alerts"
    GENERATE_INSIGHTS = "generate-insights"
    CONFIGURE_ALERT_RULE = "configure-alert-rule"
    CLEAR_CACHE = "clear-cache"


@dataclass(frozen=True)
class Command:
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, message: Mapping[str, Any]) -> "Command":
        """Create a command from a `{kind, payload}` message."""
        payload = message.get("payload") or {}
        if not isinstance(payload, Mapping):
            raise TypeError("Command payload must be an object")
        return cls(kind=message["kind"], payload=dict(payload))


# ----------------------------------------------------------------------
# Payload parsing
# ----------------------------------------------------------------------

COMPARISON_OPERATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}


def parse_datetime(value: Any) -> Optional[datetime]:
    """ISO timestamp as a naive datetime; values with an offset are converted to UTC."""
    if value is None:
        return None
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def parse_range(value: Any) -> Optional[DateRange]:
    """DateRange from `{"start", "end"}`; a missing end means now."""
    if value is None or isinstance(value, DateRange):
        return value
    start = parse_datetime(value["start"])
    end = parse_datetime(value.get("end")) or datetime.now()
    return DateRange(start, end)


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def parse_condition(condition: Any) -> Any:
    """
    Accept a callable, or `{"field", "operator", "value"}` for JSON callers.

    `field` is a dotted path into the serialized aggregate, for example
    `metrics.cost_per_area`.
    """
    if callable(condition) or not isinstance(condition, Mapping):
        return condition
    path = condition["field"]
    compare = COMPARISON_OPERATORS[condition.get("operator", ">")]
    threshold = condition["value"]

    def evaluate(data: Mapping[str, Any]) -> bool:
        actual = _lookup(data, path)
        return actual is not None and compare(actual, threshold)

    return evaluate


def _rule_configuration(payload: Mapping[str, Any]) -> Dict[str, Any]:
    configuration = dict(payload)
    configuration["condition"] = parse_condition(payload.get("condition"))
    return configuration


# ----------------------------------------------------------------------
# Cost handlers
# ----------------------------------------------------------------------


def _compute_activity_cost(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.cost_of_activity(payload.get("activity_id"))


def _compute_parcel_costs(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.costs_for_parcel(
        payload.get("parcel_id"),
        states=payload.get("states"),
        force_update=bool(payload.get("force_update")),
    )


def _compute_crop_costs(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.costs_for_crop(
        payload.get("crop_id"),
        states=payload.get("states"),
        force_update=bool(payload.get("force_update")),
    )


def _compute_period_costs(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.costs_for_period(
        parse_datetime(payload.get("start")),
        parse_datetime(payload.get("end")),
        states=payload.get("states"),
        filters=payload.get("filters"),
        force_update=bool(payload.get("force_update")),
    )


def _compute_costs_by_kind(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.costs_by_activity_kind(
        payload.get("kind"),
        states=payload.get("states"),
        period=parse_range(payload.get("period")),
        force_update=bool(payload.get("force_update")),
    )


def _compute_costs_by_responsible(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.costs_by_responsible(
        payload.get("responsible_id"),
        states=payload.get("states"),
        period=parse_range(payload.get("period")),
        force_update=bool(payload.get("force_update")),
    )


def _compare_costs(service: CostAggregatorService, payload: Dict[str, Any]):
    return service.compare_costs(
        payload.get("type"),
        payload.get("ids") or [],
        force_update=bool(payload.get("force_update")),
        metric=payload.get("metric") or "total_cost",
    )


# ----------------------------------------------------------------------
# Productivity handlers
# ----------------------------------------------------------------------


def _analyze_parcel_productivity(service: ProductivityAggregatorService, payload: Dict[str, Any]):
    return service.productivity_for_parcel(
        payload.get("parcel_id"),
        ended_within=parse_range(payload.get("period")),
        force_update=bool(payload.get("force_update")),
    )


def _analyze_crop_productivity(service: ProductivityAggregatorService, payload: Dict[str, Any]):
    return service.productivity_for_crop(
        payload.get("crop_id"),
        ended_within=parse_range(payload.get("period")),
        force_update=bool(payload.get("force_update")),
    )


def _analyze_operational_efficiency(service: ProductivityAggregatorService, payload: Dict[str, Any]):
    if payload.get("activity_id"):
        return service.operational_efficiency(payload["activity_id"], payload.get("cost_total"))
    return service.analyze_operational_efficiency(
        kind=payload.get("kind"),
        period=parse_range(payload.get("period")),
        responsible_id=payload.get("responsible_id"),
        force_update=bool(payload.get("force_update")),
    )


def _analyze_trends(service: ProductivityAggregatorService, payload: Dict[str, Any]):
    return service.trend_analysis(
        payload.get("parcel_id"), force_update=bool(payload.get("force_update"))
    )


def _compare_performance(service: ProductivityAggregatorService, payload: Dict[str, Any]):
    params = dict(payload.get("params") or {})
    if "periods" in params:
        params["periods"] = [parse_range(period) for period in params["periods"]]
    return service.compare_performance(
        payload.get("type"), params, force_update=bool(payload.get("force_update"))
    )


# Handlers shared by both aggregators


def _generate_alerts(service, payload: Dict[str, Any]):
    return service.check_alerts(payload.get("data"))


def _generate_insights(service, payload: Dict[str, Any]):
    return service.generate_insights(payload.get("data"))


def _configure_alert_rule(service, payload: Dict[str, Any]):
    return service.configure_alert_rule(_rule_configuration(payload))


def _clear_cache(service, payload: Dict[str, Any]):
    return service.clear_cache()


COST_HANDLERS = {
    CostCommand.COMPUTE_ACTIVITY_COST: _compute_activity_cost,
    CostCommand.COMPUTE_PARCEL_COSTS: _compute_parcel_costs,
    CostCommand.COMPUTE_CROP_COSTS: _compute_crop_costs,
    CostCommand.COMPUTE_PERIOD_COSTS: _compute_period_costs,
    CostCommand.COMPUTE_COSTS_BY_KIND: _compute_costs_by_kind,
    CostCommand.COMPUTE_COSTS_BY_RESPONSIBLE: _compute_costs_by_responsible,
    CostCommand.GENERATE_ALERTS: _generate_alerts,
    CostCommand.GENERATE_INSIGHTS: _generate_insights,
    CostCommand.CONFIGURE_ALERT_RULE: _configure_alert_rule,
    CostCommand.CLEAR_CACHE: _clear_cache,
    CostCommand.COMPARE_COSTS: _compare_costs,
}

PRODUCTIVITY_HANDLERS = {
    ProductivityCommand.ANALYZE_PARCEL_PRODUCTIVITY: _analyze_parcel_productivity,
    ProductivityCommand.ANALYZE_CROP_PRODUCTIVITY: _analyze_crop_productivity,
    ProductivityCommand.ANALYZE_OPERATIONAL_EFFICIENCY: _analyze_operational_efficiency,
    ProductivityCommand.ANALYZE_TRENDS: _analyze_trends,
    ProductivityCommand.COMPARE_PERFORMANCE: _compare_performance,
    ProductivityCommand.GENERATE_ALERTS: _generate_alerts,
    ProductivityCommand.GENERATE_INSIGHTS: _generate_insights,
    ProductivityCommand.CONFIGURE_ALERT_RULE: _configure_alert_rule,
    ProductivityCommand.CLEAR_CACHE: _clear_cache,
}


class CommandDispatcher:
    """Routes commands of one kind enum to the handlers of one aggregator."""

    def __init__(
        self,
        service: Any,
        command_type: Type[Enum],
        handlers: Mapping[Enum, Callable[[Any, Dict[str, Any]], Any]],
    ):
        self.service = service
        self.command_type = command_type
        self.handlers = dict(handlers)

    @property
    def kinds(self):
        return [kind.value for kind in self.handlers]

    async def dispatch(self, message: Any) -> Dict[str, Any]:
        """
        Run a command and return its serialized result.

        Args:
            message: Command or `{kind, payload}` mapping

        Returns:
            `{"ok": True, "value": ...}` or `{"ok": False, "error_kind", "detail"}`
        """
        try:
            command = message if isinstance(message, Command) else Command.from_dict(message)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Malformed command: {e}")
            return OperationResult.failure(ErrorKind.INVALID_INPUT, f"Malformed command: {e}").to_dict()

        try:
            kind = self.command_type(command.kind)
        except ValueError:
            logger.warning(f"Unknown command kind: {command.kind}")
            return OperationResult.failure(
                ErrorKind.INVALID_INPUT, f"Unknown command kind: {command.kind}"
            ).to_dict()

        logger.debug(f"Dispatching {kind.value}")
        try:
            result = self.handlers[kind](self.service, command.payload)
            if inspect.isawaitable(result):
                result = await result
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Invalid payload for {kind.value}: {e}")
            result = OperationResult.failure(ErrorKind.INVALID_INPUT, f"Invalid payload: {e}")
        return result.to_dict()


def build_cost_dispatcher(service: CostAggregatorService) -> CommandDispatcher:
    return CommandDispatcher(service, CostCommand, COST_HANDLERS)


def build_productivity_dispatcher(service: ProductivityAggregatorService) -> CommandDispatcher:
    return CommandDispatcher(service, ProductivityCommand, PRODUCTIVITY_HANDLERS)
