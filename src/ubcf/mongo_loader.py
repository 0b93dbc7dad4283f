from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .config import MongoConfig
from .logging_utils import configure_logger
from .models import Item, User
from .rating_store import build_catalog, build_population


@contextmanager
def mongo_client(config: MongoConfig, logger: Optional[logging.Logger] = None) -> Iterator[MongoClient]:
    """
    Context manager that opens a MongoClient, pings it and always closes it.
    """
    _logger = logger or configure_logger()
    _logger.info("Opening MongoDB connection", extra={"event": "mongo_connect"})

    client = MongoClient(config.uri, serverSelectionTimeoutMS=10_000)

    try:
        client.admin.command("ping")
        _logger.info("MongoDB connection established", extra={"event": "mongo_connect_success"})
        yield client
    except PyMongoError as exc:
        _logger.error(
            "MongoDB operation failed",
            extra={"event": "mongo_failure", "exception_type": type(exc).__name__},
            exc_info=True,
        )
        raise
    finally:
        client.close()
        _logger.info("MongoDB connection closed", extra={"event": "mongo_disconnect"})


def get_collections(db: Database, config: MongoConfig) -> Tuple[Collection, Collection]:
    """
    Retrieve items and ratings collections from the database.
    """
    return db[config.movies_collection], db[config.ratings_collection]


def collection_to_dataframe(collection: Collection, source: str, logger: logging.Logger) -> pd.DataFrame:
    """
    Read a whole collection (without _id) into a DataFrame, keeping cursor order.
    """
    logger.info(f"Loading {source} from MongoDB", extra={"event": f"load_{source}"})
    df = pd.DataFrame(list(collection.find({}, {"_id": 0})))
    logger.info(
        f"{source.capitalize()} loaded",
        extra={"event": f"load_{source}_success", "shape": df.shape},
    )
    return df


def load_items_and_ratings(
    config: MongoConfig,
    db: Optional[Database] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load items and ratings from MongoDB into pandas DataFrames.

    Ratings are sorted by userId (stable) so the population comes out in the
    same order a sorted ratings file would give.
    """
    _logger = logger or configure_logger()

    def _read(database: Database) -> Tuple[pd.DataFrame, pd.DataFrame]:
        items_collection, ratings_collection = get_collections(database, config)
        items_df = collection_to_dataframe(items_collection, "items", _logger)
        ratings_df = collection_to_dataframe(ratings_collection, "ratings", _logger)
        if "userId" in ratings_df.columns:
            # Malformed ids sort last and are dropped by build_population.
            ratings_df = ratings_df.sort_values(
                "userId",
                kind="mergesort",
                key=lambda ids: pd.to_numeric(ids, errors="coerce"),
                na_position="last",
            ).reset_index(drop=True)
        return items_df, ratings_df

    if db is not None:
        return _read(db)

    with mongo_client(config=config, logger=_logger) as client:
        return _read(client[config.db_name])


def load_rating_store_from_mongo(
    config: MongoConfig,
    max_users: Optional[int] = None,
    db: Optional[Database] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[Dict[int, Item], List[User]]:
    """
    Load the item catalog and rating population from MongoDB.
    """
    _logger = logger or configure_logger()
    items_df, ratings_df = load_items_and_ratings(config, db=db, logger=_logger)
    catalog = build_catalog(items_df, logger=_logger)
    population = build_population(ratings_df, catalog, max_users=max_users, logger=_logger)
    return catalog, population
