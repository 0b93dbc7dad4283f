import logging

import pytest

from ubcf.config import DataConfig
from ubcf.csv_loader import DataLoadError, load_items_csv, load_rating_store, load_ratings_csv

MOVIES_CSV = """movieId,title,genres
1,Toy Story (1995),Adventure|Animation
2,Jumanji (1995),Adventure|Children
three,Broken row,Drama
3,Heat (1995),Action
"""

RATINGS_CSV = """userId,movieId,rating,timestamp
1,1,4.0,964982703
1,3,4.0,964981247
1,99,5.0,964982224
2,1,bad,964983815
2,2,3.5,964982931
2,3,1.0,964982400,extra,fields
3,1,5.0,964981208
"""


@pytest.fixture
def logger():
    return logging.getLogger("test_csv_loader")


@pytest.fixture
def data_config(tmp_path):
    movies = tmp_path / "movies.csv"
    ratings = tmp_path / "ratings.csv"
    movies.write_text(MOVIES_CSV, encoding="utf-8")
    ratings.write_text(RATINGS_CSV, encoding="utf-8")
    return DataConfig(
        movies_csv_path=movies,
        ratings_csv_path=ratings,
        max_users=None,
        output_csv_path=tmp_path / "out" / "recommendations.csv",
    )


def test_load_items_csv_reads_strings(data_config, logger):
    df = load_items_csv(data_config.movies_csv_path, logger=logger)

    assert list(df.columns) == ["movieId", "title", "genres"]
    assert df["movieId"].tolist() == ["1", "2", "three", "3"]


def test_load_ratings_csv_skips_rows_with_too_many_fields(data_config, logger):
    df = load_ratings_csv(data_config.ratings_csv_path, logger=logger)

    assert len(df) == 6
    assert "extra" not in df.values


def test_load_rating_store_builds_entities(data_config, logger):
    catalog, population = load_rating_store(data_config, logger=logger)

    assert sorted(catalog) == [1, 2, 3]
    assert catalog[3].name == "Heat (1995)"
    assert [u.id for u in population] == [1, 2, 3]
    assert dict(population[0].ratings) == {1: 4.0, 3: 4.0}
    assert dict(population[1].ratings) == {2: 3.5}


def test_load_rating_store_respects_max_users(data_config, logger):
    config = DataConfig(
        movies_csv_path=data_config.movies_csv_path,
        ratings_csv_path=data_config.ratings_csv_path,
        max_users=1,
    )

    _, population = load_rating_store(config, logger=logger)

    assert [u.id for u in population] == [1]


def test_missing_file_raises_data_load_error(tmp_path, logger, caplog):
    with caplog.at_level(logging.ERROR, logger="test_csv_loader"), pytest.raises(DataLoadError):
        load_ratings_csv(tmp_path / "nope.csv", logger=logger)

    assert any(getattr(r, "event", None) == "load_ratings_failure" for r in caplog.records)


def test_empty_file_raises_data_load_error(tmp_path, logger):
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")

    with pytest.raises(DataLoadError):
        load_items_csv(empty, logger=logger)
