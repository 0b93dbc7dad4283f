from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple

from ..models import Item, User
from ..predictor import predict
from ..recommend import rank_recommendations
from .protocol import precision_at_k, rating_errors, recall_at_k


def build_holdout(population: Sequence[User]) -> Tuple[List[User], Dict[int, Tuple[int, float]]]:
    """
    Leave-one-out per user:
    - test: the last rated item of each user (mapping order, i.e. file order)
    - train: every other rating
    Users with <2 ratings keep all their ratings and are not evaluated.
    """
    train: List[User] = []
    held_out: Dict[int, Tuple[int, float]] = {}

    for user in population:
        if len(user.ratings) < 2:
            train.append(user)
            continue

        item_id, score = list(user.ratings.items())[-1]
        held_out[user.id] = (item_id, score)
        remaining = {i: s for i, s in user.ratings.items() if i != item_id}
        train.append(User(id=user.id, ratings=remaining))

    return train, held_out


def evaluate_predictions(
    population: Sequence[User],
    k: int,
    min_similarity: float,
) -> Dict:
    """
    Predict each held-out rating from the training population and report MAE/RMSE.
    """
    train, held_out = build_holdout(population)

    actual: List[float] = []
    predicted: List[float] = []
    for user in train:
        if user.id not in held_out:
            continue
        item_id, score = held_out[user.id]
        actual.append(score)
        predicted.append(predict(user, item_id, train, k, min_similarity))

    mae, rmse = rating_errors(actual, predicted)
    return {
        "mae": mae,
        "rmse": rmse,
        "meta": {"users_evaluated": len(actual), "neighbor_budget": k, "min_similarity": min_similarity},
    }


def evaluate_recommendations(
    population: Sequence[User],
    catalog: Mapping[int, Item],
    k: int,
    min_similarity: float,
    top_k: int = 10,
    min_score: float = 0.0,
) -> Dict:
    """
    Rank the catalog for each evaluated user and check whether the held-out
    item is among the top_k.
    """
    train, held_out = build_holdout(population)

    precisions: List[float] = []
    recalls: List[float] = []
    for user in train:
        if user.id not in held_out:
            continue
        relevant = {held_out[user.id][0]}
        ranked = rank_recommendations(user, catalog, train, k, min_similarity, min_score, top_k)
        recommended = [rec.item.id for rec in ranked]
        precisions.append(precision_at_k(recommended, relevant, top_k))
        recalls.append(recall_at_k(recommended, relevant, top_k))

    results = {
        "precision@k": 0.0,
        "recall@k": 0.0,
        "meta": {"users_evaluated": len(precisions), "k": top_k},
    }
    if precisions:
        results["precision@k"] = sum(precisions) / len(precisions)
        results["recall@k"] = sum(recalls) / len(recalls)
    return results


def run_and_save(
    population: Sequence[User],
    catalog: Mapping[int, Item],
    k: int,
    min_similarity: float,
    output_path: str = "metrics.json",
    top_k: int = 10,
) -> Dict:
    metrics = {
        "prediction": evaluate_predictions(population, k, min_similarity),
        "ranking": evaluate_recommendations(population, catalog, k, min_similarity, top_k=top_k),
    }

    path = Path(output_path)
    path.write_text(json.dumps(metrics, indent=2))
    return metrics
