from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Sequence

import pandas as pd

from .models import Item, User
from .predictor import predict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recommendation:
    item: Item
    score: float


def recommend(
    user: User,
    catalog: Mapping[int, Item],
    population: Sequence[User],
    k: int,
    min_similarity: float,
    min_score: float,
    max_recommendations: int,
    *,
    exclude_rated: bool = False,
) -> List[Recommendation]:
    """
    Walk the catalog in its iteration order and collect items predicted at or
    above min_score, stopping once max_recommendations have been found.

    This is an early stop, not a top-N by score: which items are returned
    depends on catalog order. See rank_recommendations for a ranked variant.
    """
    results: List[Recommendation] = []
    if max_recommendations <= 0:
        return results

    for item in catalog.values():
        if exclude_rated and user.has_rated(item.id):
            continue

        score = predict(user, item, population, k, min_similarity)
        if score >= min_score:
            results.append(Recommendation(item=item, score=score))
            if len(results) >= max_recommendations:
                break

    logger.debug("Recommended %d items for user %s", len(results), user.id)
    return results


def rank_recommendations(
    user: User,
    catalog: Mapping[int, Item],
    population: Sequence[User],
    k: int,
    min_similarity: float,
    min_score: float,
    top_n: int,
) -> List[Recommendation]:
    """
    Score every catalog item the user has not rated and return the best top_n.

    Ordering: score desc, item id asc (stable for equal scores).
    """
    if top_n <= 0:
        return []

    rows = []
    for item in catalog.values():
        if user.has_rated(item.id):
            continue
        score = predict(user, item, population, k, min_similarity)
        if score >= min_score:
            rows.append({"movieId": item.id, "score": score})

    if not rows:
        return []

    scored_df = pd.DataFrame(rows)
    ranked = (
        scored_df.sort_values(["score", "movieId"], ascending=[False, True], kind="mergesort")
        .head(top_n)
        .reset_index(drop=True)
    )

    return [
        Recommendation(item=catalog[int(movie_id)], score=float(score))
        for movie_id, score in zip(ranked["movieId"], ranked["score"])
    ]
