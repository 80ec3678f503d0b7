"""Date range value object."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DateRange:
    """Closed interval [start, end]."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Date range ends before it starts: {self.start} > {self.end}")

    def overlaps(self, start: datetime, end: Optional[datetime]) -> bool:
        """Whether a window overlaps the range. An open window (no end) extends forever."""
        if start > self.end:
            return False
        return end is None or end >= self.start

    def contains(self, moment: Optional[datetime]) -> bool:
        return moment is not None and self.start <= moment <= self.end

    @property
    def label(self) -> str:
        return f"{self.start.isoformat()}/{self.end.isoformat()}"

    def to_dict(self):
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    def __str__(self) -> str:
        return self.label
