import numpy as np
import pytest

from smrec.errors import ArgumentError
from smrec.surgery import keep_tag_types, remove_tag_types
from smrec.weighting import (
    apply_tag_type_weights,
    current_tag_type_significance_factors,
)


@pytest.fixture
def weighted_movies(movie_smr):
    return apply_tag_type_weights(movie_smr, [2.0, 3.0])


def test_removing_nothing_reapplies_current_factors(weighted_movies):
    factors = current_tag_type_significance_factors(weighted_movies)
    expected = apply_tag_type_weights(weighted_movies, factors)

    result = remove_tag_types(weighted_movies, [])

    np.testing.assert_allclose(result.M.toarray(), expected.M.toarray())
    np.testing.assert_array_equal(result.M01.toarray(), weighted_movies.M01.toarray())
    assert result.tag_type_ranges == weighted_movies.tag_type_ranges
    assert result.tag_index == weighted_movies.tag_index
    assert result.item_index == weighted_movies.item_index


def test_removing_a_tag_type_rebuilds_ranges_and_tag_index(weighted_movies):
    result = remove_tag_types(weighted_movies, ["Genre"])

    assert result.tag_types == ("Director",)
    assert result.tag_type_ranges == {"Director": (0, 2)}
    assert result.tag_index == {"cameron": 0, "mann": 1, "scott": 2}
    assert result.tags == ["cameron", "mann", "scott"]
    np.testing.assert_array_equal(
        result.M01.toarray(),
        weighted_movies.sub_matrix("Director", raw=True).toarray(),
    )


def test_remaining_tag_types_keep_their_weight(weighted_movies):
    result = remove_tag_types(weighted_movies, ["Director"])

    np.testing.assert_allclose(result.M.toarray(), 2.0 * result.M01.toarray())
    assert current_tag_type_significance_factors(result) == pytest.approx({"Genre": 2.0})


def test_input_recommender_is_not_mutated(weighted_movies):
    before = weighted_movies.M.toarray().copy()

    remove_tag_types(weighted_movies, ["Genre"])

    assert weighted_movies.tag_types == ("Genre", "Director")
    assert weighted_movies.n_tags == 8
    np.testing.assert_array_equal(weighted_movies.M.toarray(), before)


def test_unknown_tag_types_are_ignored(movie_smr):
    result = remove_tag_types(movie_smr, ["Writer"])

    assert result.tag_types == movie_smr.tag_types
    np.testing.assert_array_equal(result.M.toarray(), movie_smr.M.toarray())


def test_removing_every_tag_type_is_rejected(movie_smr):
    with pytest.raises(ArgumentError):
        remove_tag_types(movie_smr, ["Genre", "Director"])


def test_keep_tag_types_is_the_complement(weighted_movies):
    kept = keep_tag_types(weighted_movies, ["Director"])
    removed = remove_tag_types(weighted_movies, ["Genre"])

    assert kept.tag_types == removed.tag_types
    np.testing.assert_allclose(kept.M.toarray(), removed.M.toarray())
