from __future__ import annotations

import logging
import math
from typing import Sequence

from .models import Item, User
from .neighbors import select_neighbors

logger = logging.getLogger(__name__)

# Returned when no neighbors were requested at all.
NO_NEIGHBORS_REQUESTED_SCORE = 0.01


def _item_id(item: Item | int) -> int:
    return item.id if isinstance(item, Item) else int(item)


def population_average(user: User, item_id: int, population: Sequence[User]) -> float:
    """
    Average rating of item_id over every other user who rated it, 0.0 if none did.
    """
    scores = [
        other.ratings[item_id]
        for other in population
        if other.id != user.id and item_id in other.ratings
    ]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def predict(
    user: User,
    item: Item | int,
    population: Sequence[User],
    k: int,
    min_similarity: float,
) -> float:
    """
    Predict the score user would give item.

    Checks run in order, each one returning early:
        - k == 0: 0.01
        - user already rated the item: that rating
        - user has no ratings: population average for the item
        - empty population: the user's own average
        - no other rater of the item: the user's own average
        - otherwise: similarity-weighted average of the neighbors' ratings,
          falling back to the user's own average if the similarity sum is zero.

    Args:
        user: Target user.
        item: Target item, or its id.
        population: All users, in load order. Never mutated.
        k: Neighbor budget.
        min_similarity: Similarity a neighbor needs to count towards the early stop.

    Returns:
        A finite predicted score.
    """
    item_id = _item_id(item)

    if k == 0:
        return NO_NEIGHBORS_REQUESTED_SCORE

    own_rating = user.rating_for(item_id)
    if own_rating is not None:
        return own_rating

    if not user.ratings:
        return population_average(user, item_id, population)

    if not population:
        return user.average_rating()

    neighbors = select_neighbors(user, item_id, population, k, min_similarity)
    if not neighbors:
        return user.average_rating()

    similarity_sum = 0.0
    rating_sum = 0.0
    for neighbor in neighbors:
        similarity_sum += neighbor.similarity
        rating_sum += neighbor.user.ratings[item_id] * neighbor.similarity

    if similarity_sum == 0.0:
        return user.average_rating()

    prediction = rating_sum / similarity_sum
    if not math.isfinite(prediction):
        logger.debug("Non-finite prediction for user %s item %s", user.id, item_id)
        return user.average_rating()

    return prediction
