from __future__ import annotations

import math
from typing import List, Sequence, Set

from sklearn.metrics import mean_absolute_error, mean_squared_error


def precision_at_k(recommended: List[int], relevant: Set[int], k: int) -> float:
    if k == 0:
        return 0.0
    hits = sum(1 for item_id in recommended[:k] if item_id in relevant)
    return hits / k


def recall_at_k(recommended: List[int], relevant: Set[int], k: int) -> float:
    if not relevant:
        return 0.0
    hits = sum(1 for item_id in recommended[:k] if item_id in relevant)
    return hits / len(relevant)


def rating_errors(actual: Sequence[float], predicted: Sequence[float]) -> tuple[float, float]:
    """
    Return (MAE, RMSE) between actual and predicted ratings, (0.0, 0.0) when empty.
    """
    if not actual:
        return 0.0, 0.0
    mae = float(mean_absolute_error(actual, predicted))
    rmse = math.sqrt(float(mean_squared_error(actual, predicted)))
    return mae, rmse
