from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .logging_utils import configure_logger
from .recommend import Recommendation

RECOMMENDATION_COLUMNS = ["userId", "rank", "movieId", "title", "score"]


def recommendations_to_frame(recommendations_by_user: Dict[int, Sequence[Recommendation]]) -> pd.DataFrame:
    """
    Flatten per-user recommendations into one row per (user, item), ranked from 1.
    """
    rows: List[dict] = []
    for user_id, recommendations in recommendations_by_user.items():
        for rank, rec in enumerate(recommendations, start=1):
            rows.append(
                {
                    "userId": user_id,
                    "rank": rank,
                    "movieId": rec.item.id,
                    "title": rec.item.name,
                    "score": rec.score,
                }
            )
    return pd.DataFrame(rows, columns=RECOMMENDATION_COLUMNS)


def save_recommendations_to_csv(
    recommendations_by_user: Dict[int, Sequence[Recommendation]],
    output_path: Path,
    logger: Optional[logging.Logger] = None,
) -> pd.DataFrame:
    """
    Save recommendations to a CSV file, creating the output folder if needed.
    """
    _logger = logger or configure_logger()
    output_path = Path(output_path)
    df = recommendations_to_frame(recommendations_by_user)

    _logger.info(
        "Saving recommendations to CSV",
        extra={
            "event": "save_recommendations_csv",
            "shape": df.shape,
            "output_path": str(output_path),
        },
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False, encoding="utf-8-sig")

    _logger.info(
        "Recommendations saved",
        extra={"event": "save_recommendations_csv_success", "output_path": str(output_path)},
    )
    return df
