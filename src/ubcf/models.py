from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class Item:
    """
    A rateable entity (e.g. a movie).

    Attributes:
        id: Catalog identifier. Identity of the item.
        name: Display name. Metadata only, never used for scoring.
    """
    id: int
    name: str = field(default="", compare=False)


@dataclass(frozen=True)
class User:
    """
    A rater and their sparse rating vector.

    Attributes:
        id: User identifier.
        ratings: Read-only mapping item_id -> score. A missing key means
            "not rated", not "rated zero".
    """
    id: int
    ratings: Mapping[int, float] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ratings", MappingProxyType(dict(self.ratings)))

    def has_rated(self, item_id: int) -> bool:
        return item_id in self.ratings

    def rating_for(self, item_id: int) -> Optional[float]:
        return self.ratings.get(item_id)

    def average_rating(self) -> float:
        """
        Mean of all the user's scores, or 0.0 when the user has rated nothing.
        """
        if not self.ratings:
            return 0.0
        return sum(self.ratings.values()) / len(self.ratings)


@dataclass(frozen=True)
class ScoredNeighbor:
    """
    A candidate neighbor and its similarity to the target user.

    Only lives for the duration of one prediction call.
    """
    user: User
    similarity: float
