import pytest

from ubcf.models import User
from ubcf.neighbors import candidate_raters, select_neighbors

ITEM = 9


@pytest.fixture
def target():
    return User(id=1, ratings={1: 5.0, 2: 1.0})


@pytest.fixture
def population(target):
    # Similarities to target: low (~0.38), high (~0.999), identical direction (1.0)
    return [
        target,
        User(id=10, ratings={1: 1.0, 2: 5.0, ITEM: 2.0}),
        User(id=20, ratings={1: 4.0, 2: 1.0, ITEM: 3.0}),
        User(id=30, ratings={1: 5.0, 2: 1.0, ITEM: 5.0}),
        User(id=40, ratings={1: 5.0, 2: 1.0}),
    ]


def _ids(neighbors):
    return [n.user.id for n in neighbors]


def test_candidates_exclude_target_and_non_raters(target, population):
    assert [u.id for u in candidate_raters(target, ITEM, population)] == [10, 20, 30]


def test_target_is_excluded_even_if_it_rated_the_item():
    target = User(id=1, ratings={ITEM: 4.0})
    other = User(id=2, ratings={ITEM: 2.0})

    neighbors = select_neighbors(target, ITEM, [target, other], k=5, min_similarity=0.0)

    assert _ids(neighbors) == [2]


def test_no_raters_gives_empty_selection(target):
    population = [target, User(id=2, ratings={1: 3.0})]
    assert select_neighbors(target, ITEM, population, k=3, min_similarity=0.0) == []


def test_selection_is_sorted_by_similarity_descending(target, population):
    neighbors = select_neighbors(target, ITEM, population, k=3, min_similarity=2.0)

    assert _ids(neighbors) == [30, 20, 10]
    sims = [n.similarity for n in neighbors]
    assert sims == sorted(sims, reverse=True)


def test_truncates_to_k(target, population):
    neighbors = select_neighbors(target, ITEM, population, k=2, min_similarity=2.0)
    assert _ids(neighbors) == [30, 20]


@pytest.mark.parametrize("k", [1, 2, 3, 4, 10])
def test_never_more_than_min_of_k_and_candidates(target, population, k):
    neighbors = select_neighbors(target, ITEM, population, k=k, min_similarity=0.0)
    assert len(neighbors) <= min(k, 3)


def test_early_stop_skips_candidates_after_k_qualifying(target, population):
    # User 20 is the first to reach 0.9, so user 30 is never scanned.
    neighbors = select_neighbors(target, ITEM, population, k=1, min_similarity=0.9)

    assert _ids(neighbors) == [20]


def test_early_stop_ranks_only_scanned_candidates(target, population):
    # User 10 already reaches the bar, so the more similar 20 and 30 are never seen.
    neighbors = select_neighbors(target, ITEM, population, k=1, min_similarity=0.3)

    assert _ids(neighbors) == [10]


def test_early_stop_needs_k_qualifying_candidates(target, population):
    neighbors = select_neighbors(target, ITEM, population, k=2, min_similarity=0.9)

    assert _ids(neighbors) == [30, 20]


def test_ties_keep_population_order(target):
    population = [
        User(id=5, ratings={1: 5.0, 2: 1.0, ITEM: 1.0}),
        User(id=3, ratings={1: 5.0, 2: 1.0, ITEM: 2.0}),
        User(id=4, ratings={1: 5.0, 2: 1.0, ITEM: 3.0}),
    ]

    neighbors = select_neighbors(target, ITEM, population, k=3, min_similarity=2.0)

    assert _ids(neighbors) == [5, 3, 4]


def test_zero_budget_selects_nobody(target, population):
    assert select_neighbors(target, ITEM, population, k=0, min_similarity=0.0) == []
