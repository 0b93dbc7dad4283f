import logging

from ubcf.config import load_app_config
from ubcf.csv_loader import load_rating_store
from ubcf.evaluation.runner import run_and_save
from ubcf.logging_utils import configure_logger


def main() -> None:
    logger = configure_logger(name="ubcf.evaluation", level=logging.INFO)
    app_config = load_app_config()

    catalog, population = load_rating_store(app_config.data, logger=logger)

    metrics = run_and_save(
        population=population,
        catalog=catalog,
        k=app_config.engine.neighbor_budget,
        min_similarity=app_config.engine.min_similarity,
        output_path="metrics.json",
        top_k=app_config.engine.max_recommendations,
    )

    print("Wrote metrics.json")
    print(metrics)


if __name__ == "__main__":
    main()
