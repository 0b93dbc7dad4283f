from __future__ import annotations

import logging
from typing import Iterable, Optional

import pandas as pd


class ValidationError(Exception):
    """Raised when input data fails validation."""


REQUIRED_RATING_COLUMNS = {"userId", "movieId", "rating"}
REQUIRED_ITEM_COLUMNS = {"movieId", "title"}


def validate_required_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    """
    Validate that DataFrame contains all required columns.
    """
    missing = set(required) - set(df.columns)
    if missing:
        raise ValidationError(f"Missing required columns: {sorted(missing)}")


def validate_ratings_schema(
    df: pd.DataFrame,
    logger: Optional[logging.Logger] = None,
    step_name: str = "ratings_schema_validation",
) -> None:
    """
    Validate the columns of a ratings DataFrame.

    Only the columns are checked here. Individual rows with unparseable
    values are skipped later when users are built.
    """
    if logger:
        logger.info(
            "Validating ratings schema",
            extra={"event": f"validate_schema_{step_name}"},
        )

    validate_required_columns(df, REQUIRED_RATING_COLUMNS)

    if logger:
        logger.info(
            "Ratings schema validated successfully",
            extra={"event": f"validate_schema_{step_name}_success"},
        )


def validate_items_schema(
    df: pd.DataFrame,
    logger: Optional[logging.Logger] = None,
    step_name: str = "items_schema_validation",
) -> None:
    """
    Validate the columns of an items DataFrame.
    """
    if logger:
        logger.info(
            "Validating items schema",
            extra={"event": f"validate_schema_{step_name}"},
        )

    validate_required_columns(df, REQUIRED_ITEM_COLUMNS)

    if logger:
        logger.info(
            "Items schema validated successfully",
            extra={"event": f"validate_schema_{step_name}_success"},
        )
