"""Activity repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional
from ..entities.activity import Activity
from ..entities.activity_query import ActivityQuery


class ActivityRepository(ABC):
    """Abstract repository for activity queries."""

    @abstractmethod
    async def get_activity(self, activity_id: str) -> Optional[Activity]:
        """
        Retrieve one activity with its references expanded.

        Args:
            activity_id: Activity identifier

        Returns:
            The activity, or None if it does not exist
        """
        pass

    @abstractmethod
    async def find_activities(self, query: ActivityQuery) -> List[Activity]:
        """
        Retrieve activities matching a query.

        Equipment, product, parcel (with its crop) and responsible
        references are expanded on every returned activity.

        Args:
            query: Filters and ordering

        Returns:
            List of Activity entities
        """
        pass
