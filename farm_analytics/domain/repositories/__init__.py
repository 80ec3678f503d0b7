"""Repository interfaces."""

from .activity_repository import ActivityRepository
from .reference_repository import ReferenceRepository

__all__ = [
    "ActivityRepository",
    "ReferenceRepository",
]
