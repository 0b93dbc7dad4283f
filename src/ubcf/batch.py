from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pymongo.errors import PyMongoError

from .config import AppConfig, ConfigError, load_app_config, load_mongo_config_from_env
from .csv_loader import DataLoadError, load_rating_store
from .logging_utils import configure_logger
from .models import Item, User
from .mongo_loader import load_rating_store_from_mongo
from .recommend import Recommendation, rank_recommendations, recommend
from .validators import ValidationError
from .writers import save_recommendations_to_csv


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Batch user-based collaborative filtering recommendations")
    p.add_argument("--source", choices=("csv", "mongo"), default="csv", help="Where to load ratings from")
    p.add_argument("--user-id", type=int, action="append", dest="user_ids", help="Only score this user (repeatable)")
    p.add_argument("--max-users", type=int, default=None, help="Load at most this many users")
    p.add_argument("--neighbor-budget", type=int, default=None, help="Neighbors per prediction (k)")
    p.add_argument("--min-similarity", type=float, default=None, help="Similarity counted towards the early stop")
    p.add_argument("--min-score", type=float, default=None, help="Lowest predicted score to recommend")
    p.add_argument("--max-recommendations", type=int, default=None, help="Recommendations per user")
    p.add_argument("--ranked", action="store_true", help="Score the full catalog and keep the best items")
    p.add_argument("--output", type=Path, default=None, help="CSV file to write recommendations to")
    return p


def apply_overrides(app_config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """
    Apply command line values on top of the environment configuration.
    """
    engine = app_config.engine
    engine_overrides = {
        "neighbor_budget": args.neighbor_budget,
        "min_similarity": args.min_similarity,
        "min_score": args.min_score,
        "max_recommendations": args.max_recommendations,
    }
    engine = replace(engine, **{k: v for k, v in engine_overrides.items() if v is not None})
    if engine.neighbor_budget < 0 or engine.max_recommendations < 0:
        raise ConfigError("--neighbor-budget and --max-recommendations must be >= 0.")

    data = app_config.data
    if args.max_users is not None:
        if args.max_users < 1:
            raise ConfigError("--max-users must be >= 1.")
        data = replace(data, max_users=args.max_users)
    if args.output is not None:
        data = replace(data, output_csv_path=args.output)

    return AppConfig(engine=engine, data=data)


def recommend_for_users(
    users: Sequence[User],
    catalog: Dict[int, Item],
    population: Sequence[User],
    app_config: AppConfig,
    ranked: bool = False,
    logger: Optional[logging.Logger] = None,
) -> Dict[int, List[Recommendation]]:
    """
    Run the recommender for every user in users. Each call is independent.
    """
    _logger = logger or configure_logger()
    engine = app_config.engine
    results: Dict[int, List[Recommendation]] = {}

    for user in users:
        if ranked:
            recs = rank_recommendations(
                user,
                catalog,
                population,
                engine.neighbor_budget,
                engine.min_similarity,
                engine.min_score,
                engine.max_recommendations,
            )
        else:
            recs = recommend(
                user,
                catalog,
                population,
                engine.neighbor_budget,
                engine.min_similarity,
                engine.min_score,
                engine.max_recommendations,
            )
        results[user.id] = recs
        _logger.info(
            "Recommendations generated",
            extra={"event": "recommend_user_success", "user_id": user.id, "count": len(recs)},
        )

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for a batch recommendation run.

    Steps:
        1. Load configuration (environment + command line).
        2. Load the item catalog and rating population.
        3. Recommend items for the selected users.
        4. Save the recommendations to CSV.
    """
    args = build_arg_parser().parse_args(argv)
    logger = configure_logger(name="ubcf.batch", level=logging.INFO)

    logger.info("Starting batch recommendation run", extra={"event": "pipeline_start", "source": args.source})

    try:
        app_config = apply_overrides(load_app_config(), args)
        if args.source == "mongo":
            catalog, population = load_rating_store_from_mongo(
                load_mongo_config_from_env(),
                max_users=app_config.data.max_users,
                logger=logger,
            )
        else:
            catalog, population = load_rating_store(app_config.data, logger=logger)
    except (ConfigError, DataLoadError, ValidationError, PyMongoError) as exc:
        logger.error(
            "Batch run aborted",
            extra={"event": "pipeline_failure", "exception_type": type(exc).__name__},
            exc_info=True,
        )
        return 1

    users = population
    if args.user_ids:
        wanted = set(args.user_ids)
        users = [user for user in population if user.id in wanted]
        missing = wanted - {user.id for user in users}
        for user_id in sorted(missing):
            logger.warning("Unknown user id", extra={"event": "unknown_user", "user_id": user_id})

    results = recommend_for_users(users, catalog, population, app_config, ranked=args.ranked, logger=logger)

    save_recommendations_to_csv(results, app_config.data.output_csv_path, logger=logger)

    logger.info("Batch recommendation run finished successfully", extra={"event": "pipeline_end"})
    total = sum(len(recs) for recs in results.values())
    print(f"Scored {len(results)} users, {total} recommendations saved to {app_config.data.output_csv_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
