from __future__ import annotations

import logging
import math

from .models import User

logger = logging.getLogger(__name__)

IDENTICAL_SIMILARITY = 1.0
# No information about either user: assume moderate similarity.
NO_RATINGS_SIMILARITY = 0.5
# No co-rated items, or a degenerate vector. Kept above zero so it can
# still be summed as a weight.
NO_OVERLAP_SIMILARITY = 0.01


def shared_items(u: User, v: User) -> set[int]:
    """
    Item ids rated by both users.
    """
    # Iterate the smaller mapping, membership test on the larger one.
    small, large = (u.ratings, v.ratings) if len(u.ratings) <= len(v.ratings) else (v.ratings, u.ratings)
    return {item_id for item_id in small if item_id in large}


def similarity(u: User, v: User) -> float:
    """
    Cosine similarity between two users, restricted to the items both rated.

    Both the dot product and the magnitudes are summed over shared items only,
    so rating many unrelated items does not lower the score.

    Returns:
        1.0 for the same user, 0.5 if either user has no ratings, 0.01 when the
        users share no items or the result is not finite, the cosine otherwise.
    """
    if u.id == v.id:
        return IDENTICAL_SIMILARITY

    if not u.ratings or not v.ratings:
        return NO_RATINGS_SIMILARITY

    shared = shared_items(u, v)
    if not shared:
        return NO_OVERLAP_SIMILARITY

    dot_product = 0.0
    sum_squares_u = 0.0
    sum_squares_v = 0.0
    for item_id in sorted(shared):
        score_u = u.ratings[item_id]
        score_v = v.ratings[item_id]
        dot_product += score_u * score_v
        sum_squares_u += score_u * score_u
        sum_squares_v += score_v * score_v

    magnitude = math.sqrt(sum_squares_u) * math.sqrt(sum_squares_v)
    if magnitude == 0.0:
        logger.debug("Zero magnitude over shared items for users %s and %s", u.id, v.id)
        return NO_OVERLAP_SIMILARITY

    result = dot_product / magnitude
    if not math.isfinite(result):
        logger.debug("Non-finite similarity for users %s and %s", u.id, v.id)
        return NO_OVERLAP_SIMILARITY

    return result
