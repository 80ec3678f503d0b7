"""Person entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Person:
    """Represents the party responsible for an activity."""

    id: str
    name: str

    def __str__(self) -> str:
        return self.name
