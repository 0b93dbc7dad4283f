import json
from pathlib import Path


def main() -> None:
    data = json.loads(Path("metrics.json").read_text())

    prediction = data["prediction"]
    ranking = data["ranking"]

    users = prediction.get("meta", {}).get("users_evaluated", "unknown")
    neighbors = prediction.get("meta", {}).get("neighbor_budget", "unknown")
    k = ranking.get("meta", {}).get("k", "unknown")

    md = f"""# Evaluation Results

- Users evaluated: **{users}**
- Neighbor budget: **{neighbors}**
- K: **{k}**

## Rating prediction

| MAE | RMSE |
|---:|---:|
| {prediction['mae']:.6f} | {prediction['rmse']:.6f} |

## Ranking

| Precision@K | Recall@K |
|---:|---:|
| {ranking['precision@k']:.6f} | {ranking['recall@k']:.6f} |

## Notes
- Split: per-user holdout (leave-one-out, last rating in file order)
- Candidates: full catalog, excluding items the user rated in train
"""

    Path("metrics.md").write_text(md)
    print("Wrote metrics.md")


if __name__ == "__main__":
    main()
