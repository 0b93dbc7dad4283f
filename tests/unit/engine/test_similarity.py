import math

import pytest

from ubcf.models import User
from ubcf.similarity import (
    NO_OVERLAP_SIMILARITY,
    NO_RATINGS_SIMILARITY,
    shared_items,
    similarity,
)


# ---------------------------------------------------------------------------
# Short-circuits
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "ratings",
    [
        {},
        {1: 5.0},
        {1: 5.0, 2: 1.0, 3: 4.0},
        {7: 0.0},
    ],
)
def test_user_is_identical_to_itself(ratings):
    user = User(id=1, ratings=ratings)
    assert similarity(user, user) == 1.0


def test_same_id_short_circuits_even_with_different_vectors():
    a = User(id=3, ratings={1: 5.0})
    b = User(id=3, ratings={2: 1.0})
    assert similarity(a, b) == 1.0


def test_empty_ratings_give_neutral_similarity():
    empty = User(id=1, ratings={})
    other = User(id=2, ratings={1: 3.0})

    assert similarity(empty, other) == NO_RATINGS_SIMILARITY == 0.5
    assert similarity(other, empty) == 0.5


def test_disjoint_users_are_almost_dissimilar():
    a = User(id=1, ratings={1: 5.0, 2: 4.0})
    b = User(id=2, ratings={3: 5.0, 4: 4.0})

    assert shared_items(a, b) == set()
    assert similarity(a, b) == NO_OVERLAP_SIMILARITY == 0.01


# ---------------------------------------------------------------------------
# Cosine over shared items
# ---------------------------------------------------------------------------

def test_cosine_is_restricted_to_shared_items():
    a = User(id=1, ratings={1: 5.0, 2: 1.0, 3: 4.0})
    b = User(id=2, ratings={1: 4.0, 2: 1.0, 3: 5.0})
    c = User(id=3, ratings={1: 4.0, 2: 1.0, 99: 5.0, 100: 2.0})

    expected = (5 * 4 + 1 * 1) / (math.sqrt(25 + 1) * math.sqrt(16 + 1))

    # c's extra items do not change the score
    assert similarity(a, c) == pytest.approx(expected)
    full = (5 * 4 + 1 * 1 + 4 * 5) / (math.sqrt(25 + 1 + 16) * math.sqrt(16 + 1 + 25))
    assert similarity(a, b) == pytest.approx(full)


def test_proportional_vectors_have_similarity_one():
    a = User(id=1, ratings={1: 1.0, 2: 2.0})
    b = User(id=2, ratings={1: 2.0, 2: 4.0, 3: 1.0})
    assert similarity(a, b) == pytest.approx(1.0)


def test_orthogonal_shared_vectors_have_similarity_zero():
    a = User(id=1, ratings={1: 1.0, 2: -1.0})
    b = User(id=2, ratings={1: 1.0, 2: 1.0})
    assert similarity(a, b) == 0.0


@pytest.mark.parametrize(
    "ratings_a,ratings_b",
    [
        ({1: 5.0, 2: 1.0, 3: 4.0}, {1: 4.0, 2: 1.0, 3: 5.0}),
        ({1: 0.5, 2: 3.5, 4: 2.0, 8: 1.0}, {8: 5.0, 4: 1.5, 2: 2.0}),
        ({10: 3.0}, {10: 4.5, 11: 1.0}),
        ({1: 4.9, 2: 0.1, 3: 2.3, 4: 3.3, 5: 1.7}, {5: 4.4, 3: 2.2, 1: 1.1, 4: 3.9}),
    ],
)
def test_similarity_is_symmetric(ratings_a, ratings_b):
    a = User(id=1, ratings=ratings_a)
    b = User(id=2, ratings=ratings_b)
    assert similarity(a, b) == similarity(b, a)


# ---------------------------------------------------------------------------
# Degenerate magnitudes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value", [0.0, 1e-200, 1e200])
def test_degenerate_vectors_never_produce_non_finite_values(value):
    a = User(id=1, ratings={1: value, 2: value})
    b = User(id=2, ratings={1: value, 2: value})

    result = similarity(a, b)

    assert math.isfinite(result)


def test_zero_magnitude_falls_back_to_low_similarity():
    a = User(id=1, ratings={1: 0.0})
    b = User(id=2, ratings={1: 4.0})
    assert similarity(a, b) == 0.01
