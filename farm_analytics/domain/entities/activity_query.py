"""Activity query value object."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .activity import Activity, plain
from .date_range import DateRange


@dataclass(frozen=True)
class ActivityQuery:
    """Filter accepted by activity repositories. Unset fields do not filter."""

    activity_ids: Optional[Tuple[str, ...]] = None
    parcel_id: Optional[str] = None
    crop_id: Optional[str] = None
    kind: Optional[str] = None
    responsible_id: Optional[str] = None
    states: Optional[Tuple[str, ...]] = None
    period: Optional[DateRange] = None  # activity window overlaps the range
    ended_within: Optional[DateRange] = None  # end date falls inside the range
    order_by_end: bool = False

    def __post_init__(self):
        object.__setattr__(self, "kind", plain(self.kind))
        if self.states is not None:
            object.__setattr__(self, "states", tuple(plain(s) for s in self.states))
        if self.activity_ids is not None:
            object.__setattr__(self, "activity_ids", tuple(self.activity_ids))

    def matches(self, activity: Activity) -> bool:
        """
        Check an activity against every set filter.

        The crop filter reads the crop through the expanded parcel, so
        activities must be expanded before matching.
        """
        if self.activity_ids is not None and activity.id not in self.activity_ids:
            return False
        if self.parcel_id is not None and activity.parcel_id != self.parcel_id:
            return False
        if self.crop_id is not None:
            if activity.parcel is None or activity.parcel.crop_id != self.crop_id:
                return False
        if self.kind is not None and activity.kind != self.kind:
            return False
        if self.responsible_id is not None and activity.responsible_id != self.responsible_id:
            return False
        if self.states is not None and activity.state not in self.states:
            return False
        if self.period is not None and not self.period.overlaps(activity.start, activity.end):
            return False
        if self.ended_within is not None and not self.ended_within.contains(activity.end):
            return False
        return True
