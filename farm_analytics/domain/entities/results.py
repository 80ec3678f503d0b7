"""Operation result returned across the public service boundary."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import ErrorKind


def to_jsonable(value: Any) -> Any:
    """Convert entities, dates, enums and containers to JSON-compatible values."""
    if hasattr(value, "to_dict"):
        return to_jsonable(value.to_dict())
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if callable(value):
        return None
    return value


@dataclass
class OperationResult:
    """Tagged outcome: `value` when ok, `error_kind` and `detail` otherwise."""

    ok: bool
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error_kind: ErrorKind, detail: str) -> "OperationResult":
        return cls(ok=False, error_kind=error_kind, detail=detail)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "value": to_jsonable(self.value)}
        return {"ok": False, "error_kind": self.error_kind.value, "detail": self.detail}
