"""
Turns raw item and rating frames into the engine's entities.

Both the CSV and the MongoDB sources produce the same two DataFrames; this
module is where malformed records are dropped:
    - items whose id is not an integer
    - ratings whose user id or item id is not an integer, or whose score is
      not a finite number
    - ratings for items missing from the catalog
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .logging_utils import configure_logger
from .models import Item, User
from .validators import validate_items_schema, validate_ratings_schema


def _integer_ids(series: pd.Series) -> pd.Series:
    """
    Parse a column into integer ids. Unparseable or fractional values become NaN.
    """
    numeric = pd.to_numeric(series, errors="coerce")
    return numeric.where(np.isfinite(numeric) & (numeric == np.floor(numeric)))


def build_catalog(
    items_df: pd.DataFrame,
    logger: Optional[logging.Logger] = None,
) -> Dict[int, Item]:
    """
    Build the item catalog keyed by item id, in file order.

    When an id appears more than once the last row's title wins; the item keeps
    the position of its first row.
    """
    _logger = logger or configure_logger()
    validate_items_schema(items_df, logger=_logger)

    ids = _integer_ids(items_df["movieId"])
    titles = items_df["title"].fillna("").astype(str)

    catalog: Dict[int, Item] = {}
    skipped = 0
    for raw_id, title in zip(ids, titles):
        if pd.isna(raw_id):
            skipped += 1
            continue
        item_id = int(raw_id)
        catalog[item_id] = Item(id=item_id, name=title)

    _logger.info(
        "Item catalog built",
        extra={"event": "build_catalog_success", "count": len(catalog), "skipped": skipped},
    )
    return catalog


def build_population(
    ratings_df: pd.DataFrame,
    catalog: Dict[int, Item],
    max_users: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> List[User]:
    """
    Build the rating population, ordered by each user's first appearance.

    Args:
        ratings_df: Frame with userId, movieId and rating columns, sorted by userId.
        catalog: Items that ratings may refer to.
        max_users: Stop reading at the first row of a new user once this many
            users have been collected. None reads everything.

    Returns:
        Users in load order. A repeated (user, item) pair keeps the last score.
    """
    _logger = logger or configure_logger()
    validate_ratings_schema(ratings_df, logger=_logger)

    user_ids = _integer_ids(ratings_df["userId"])
    item_ids = _integer_ids(ratings_df["movieId"])
    scores = pd.to_numeric(ratings_df["rating"], errors="coerce")

    ratings_by_user: Dict[int, Dict[int, float]] = {}
    skipped = 0
    unknown_items = 0

    for raw_user, raw_item, score in zip(user_ids, item_ids, scores):
        if pd.isna(raw_user) or pd.isna(raw_item) or not np.isfinite(score):
            skipped += 1
            continue

        item_id = int(raw_item)
        if item_id not in catalog:
            unknown_items += 1
            continue

        user_id = int(raw_user)
        user_ratings = ratings_by_user.get(user_id)
        if user_ratings is None:
            if max_users is not None and len(ratings_by_user) >= max_users:
                # Rows are sorted by user, so nothing after this belongs to a loaded user.
                break
            user_ratings = ratings_by_user[user_id] = {}

        user_ratings[item_id] = float(score)

    population = [User(id=user_id, ratings=ratings) for user_id, ratings in ratings_by_user.items()]

    _logger.info(
        "Rating population built",
        extra={
            "event": "build_population_success",
            "count": len(population),
            "skipped": skipped + unknown_items,
        },
    )
    return population
