from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .config import DataConfig
from .logging_utils import configure_logger
from .models import Item, User
from .rating_store import build_catalog, build_population


class DataLoadError(RuntimeError):
    """Raised when a rating store source cannot be opened or read at all."""


def _read_delimited(path: Path, source: str, logger: logging.Logger) -> pd.DataFrame:
    """
    Read a delimited file as strings. Rows with the wrong number of fields are skipped.
    """
    logger.info(f"Loading {source} from CSV", extra={"event": f"load_{source}", "path": str(path)})

    try:
        df = pd.read_csv(path, dtype=str, on_bad_lines="skip", skipinitialspace=True)
    except (OSError, pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        logger.error(
            f"Unable to read {source} file",
            extra={
                "event": f"load_{source}_failure",
                "path": str(path),
                "exception_type": type(exc).__name__,
            },
        )
        raise DataLoadError(f"Unable to read {source} file {str(path)!r}: {exc}") from exc

    df.columns = [str(column).strip() for column in df.columns]

    logger.info(
        f"{source.capitalize()} loaded",
        extra={"event": f"load_{source}_success", "shape": df.shape},
    )
    return df


def load_items_csv(path: Path, logger: Optional[logging.Logger] = None) -> pd.DataFrame:
    return _read_delimited(Path(path), "items", logger or configure_logger())


def load_ratings_csv(path: Path, logger: Optional[logging.Logger] = None) -> pd.DataFrame:
    return _read_delimited(Path(path), "ratings", logger or configure_logger())


def load_rating_store(
    data_config: DataConfig,
    logger: Optional[logging.Logger] = None,
) -> Tuple[Dict[int, Item], List[User]]:
    """
    Load the item catalog and the rating population from CSV files.

    Raises:
        DataLoadError: If either file cannot be opened.
    """
    _logger = logger or configure_logger()

    items_df = load_items_csv(data_config.movies_csv_path, logger=_logger)
    catalog = build_catalog(items_df, logger=_logger)

    ratings_df = load_ratings_csv(data_config.ratings_csv_path, logger=_logger)
    population = build_population(
        ratings_df,
        catalog,
        max_users=data_config.max_users,
        logger=_logger,
    )
    return catalog, population
