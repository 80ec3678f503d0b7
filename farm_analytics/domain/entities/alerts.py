"""Alert rules, alerts and insights."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

Condition = Callable[[Mapping[str, Any]], bool]


@dataclass(frozen=True)
class Alert:
    type: str
    message: str
    level: str  # low, medium, high
    suggestion: Optional[str] = None
    rule_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "message": self.message, "level": self.level}
        if self.suggestion:
            data["suggestion"] = self.suggestion
        if self.rule_id:
            data["rule_id"] = self.rule_id
        return data


@dataclass(frozen=True)
class Insight:
    type: str
    message: str
    impact: str
    action: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "message": self.message, "impact": self.impact}
        if self.action:
            data["action"] = self.action
        return data


@dataclass(frozen=True)
class AlertRule:
    """User-configured rule evaluated against serialized aggregates."""

    id: str
    name: str
    message: str
    condition: Condition
    level: str = "medium"
    suggestion: Optional[str] = None
    configured_at: datetime = field(default_factory=datetime.now)

    def to_alert(self) -> Alert:
        return Alert(
            type=self.name,
            message=self.message,
            level=self.level,
            suggestion=self.suggestion,
            rule_id=self.id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "message": self.message,
            "level": self.level,
            "suggestion": self.suggestion,
            "configured_at": self.configured_at,
        }
