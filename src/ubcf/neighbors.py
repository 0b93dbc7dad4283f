from __future__ import annotations

import logging
from typing import Iterable, List

from .models import ScoredNeighbor, User
from .similarity import similarity

logger = logging.getLogger(__name__)


def candidate_raters(user: User, item_id: int, population: Iterable[User]) -> List[User]:
    """
    Other users in the population who have rated the item, in population order.
    """
    return [other for other in population if other.id != user.id and other.has_rated(item_id)]


def select_neighbors(
    user: User,
    item_id: int,
    population: Iterable[User],
    k: int,
    min_similarity: float,
) -> List[ScoredNeighbor]:
    """
    Pick up to k raters of item_id most similar to user.

    Candidates are scanned in population order. Scanning stops as soon as k
    candidates with similarity >= min_similarity have been seen, so the
    ranking only covers the candidates scanned so far.

    Returns:
        Neighbors sorted by similarity descending (ties keep population order),
        truncated to k. Empty when nobody else rated the item.
    """
    if k <= 0:
        return []

    scored: List[ScoredNeighbor] = []
    qualifying = 0

    for other in candidate_raters(user, item_id, population):
        sim = similarity(user, other)
        scored.append(ScoredNeighbor(user=other, similarity=sim))

        if sim >= min_similarity:
            qualifying += 1
            if qualifying >= k:
                break

    # list.sort is stable, so equal similarities keep scan order.
    scored.sort(key=lambda neighbor: neighbor.similarity, reverse=True)

    logger.debug(
        "Selected neighbors for user %s item %s: scanned=%d qualifying=%d",
        user.id,
        item_id,
        len(scored),
        qualifying,
    )
    return scored[:k]
