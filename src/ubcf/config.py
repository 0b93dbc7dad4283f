from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class EngineConfig:
    """
    Parameters of the prediction engine.

    Attributes:
        neighbor_budget: Maximum number of neighbors per prediction (k).
        min_similarity: Similarity a neighbor needs to count towards the early stop.
        min_score: Lowest predicted score that is still recommended.
        max_recommendations: Maximum recommendations collected per user.
    """
    neighbor_budget: int = 3
    min_similarity: float = 0.5
    min_score: float = 4.0
    max_recommendations: int = 10


@dataclass(frozen=True)
class DataConfig:
    """
    Location of the rating store files and batch output.

    Attributes:
        movies_csv_path: Delimited item file (movieId, title, ...).
        ratings_csv_path: Delimited rating file (userId, movieId, rating, ...),
            sorted by userId.
        max_users: Stop loading after this many distinct users. None loads all.
        output_csv_path: Where the batch run writes recommendations.
    """
    movies_csv_path: Path = Path("data/movies.csv")
    ratings_csv_path: Path = Path("data/ratings.csv")
    max_users: Optional[int] = 10_000
    output_csv_path: Path = Path("data/recommendations.csv")


@dataclass(frozen=True)
class MongoConfig:
    """
    Configuration for reading the rating store from MongoDB.

    Attributes:
        uri: Full MongoDB connection string (from environment).
        db_name: Name of the database.
        movies_collection: Collection name for items.
        ratings_collection: Collection name for ratings.
    """
    uri: str
    db_name: str = "movie_recommender_db"
    movies_collection: str = "movies"
    ratings_collection: str = "ratings"


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level configuration object for a batch run.
    """
    engine: EngineConfig
    data: DataConfig


def _env_int(name: str, default: Optional[int], minimum: int = 0) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name!r} must be an integer, got {raw!r}.") from exc
    if value < minimum:
        raise ConfigError(f"Environment variable {name!r} must be >= {minimum}, got {value}.")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name!r} must be a number, got {raw!r}.") from exc


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw) if raw else default


def load_engine_config_from_env() -> EngineConfig:
    """
    Load engine parameters from UBCF_* environment variables, with defaults.

    Raises:
        ConfigError: If a value cannot be parsed or is negative.
    """
    load_dotenv()
    defaults = EngineConfig()
    return EngineConfig(
        neighbor_budget=_env_int("UBCF_NEIGHBOR_BUDGET", defaults.neighbor_budget),
        min_similarity=_env_float("UBCF_MIN_SIMILARITY", defaults.min_similarity),
        min_score=_env_float("UBCF_MIN_SCORE", defaults.min_score),
        max_recommendations=_env_int("UBCF_MAX_RECOMMENDATIONS", defaults.max_recommendations),
    )


def load_data_config_from_env() -> DataConfig:
    load_dotenv()
    defaults = DataConfig()
    max_users = _env_int("UBCF_MAX_USERS", defaults.max_users, minimum=1)
    return DataConfig(
        movies_csv_path=_env_path("UBCF_MOVIES_CSV", defaults.movies_csv_path),
        ratings_csv_path=_env_path("UBCF_RATINGS_CSV", defaults.ratings_csv_path),
        max_users=max_users,
        output_csv_path=_env_path("UBCF_OUTPUT_CSV", defaults.output_csv_path),
    )


def load_mongo_config_from_env(env_var_name: str = "MONGO_URI_DEV") -> MongoConfig:
    """
    Load MongoDB configuration from environment variables.

    Args:
        env_var_name: Name of the environment variable that stores the Mongo URI.

    Raises:
        ConfigError: If the environment variable is missing or empty.
    """
    load_dotenv()
    uri = os.getenv(env_var_name)

    if not uri:
        raise ConfigError(f"Environment variable {env_var_name!r} is not set or empty.")

    defaults = MongoConfig(uri=uri)
    return MongoConfig(
        uri=uri,
        db_name=os.getenv("MONGO_DB_NAME", defaults.db_name),
        movies_collection=os.getenv("MONGO_MOVIES_COLLECTION", defaults.movies_collection),
        ratings_collection=os.getenv("MONGO_RATINGS_COLLECTION", defaults.ratings_collection),
    )


def load_app_config() -> AppConfig:
    """
    Construct and return the full batch run configuration.

    Returns:
        AppConfig
    """
    return AppConfig(engine=load_engine_config_from_env(), data=load_data_config_from_env())
