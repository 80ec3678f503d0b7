"""Registry of user-configured alert rules."""

import uuid
from typing import Any, Dict, List, Mapping

from ..entities.alerts import Alert, AlertRule
from ..entities.results import to_jsonable
from ..exceptions import InvalidInputError


class AlertRegistry:
    """Holds configured rules and evaluates them against serialized data."""

    def __init__(self):
        self.rules: List[AlertRule] = []

    def configure(self, configuration: Mapping[str, Any]) -> AlertRule:
        """
        Register a rule.

        Args:
            configuration: Mapping with `name`, `message`, a callable
                `condition` and optional `level` and `suggestion`

        Returns:
            The registered AlertRule

        Raises:
            InvalidInputError: If a required field is missing
        """
        if not configuration or not configuration.get("name") or not configuration.get("message"):
            raise InvalidInputError("Alert rule needs a name and a message")
        if not callable(configuration.get("condition")):
            raise InvalidInputError("Alert rule needs a callable condition")

        rule = AlertRule(
            id=uuid.uuid4().hex,
            name=configuration["name"],
            message=configuration["message"],
            condition=configuration["condition"],
            level=configuration.get("level") or "medium",
            suggestion=configuration.get("suggestion"),
        )
        self.rules.append(rule)
        return rule

    def evaluate(self, data: Mapping[str, Any]) -> List[Alert]:
        """Alerts of every rule whose condition holds for `data`."""
        return [rule.to_alert() for rule in self.rules if rule.condition(data)]

    def clear(self) -> None:
        self.rules.clear()


def as_mapping(data: Any) -> Dict[str, Any]:
    """Plain serialized form of an aggregate, accepting entities or mappings."""
    if hasattr(data, "to_dict") or isinstance(data, Mapping):
        return to_jsonable(data)
    raise InvalidInputError(f"Cannot evaluate alerts on {type(data).__name__}")
