import pytest

from smrec.errors import ArgumentError
from smrec.introspection import item_data, reorder_recommendations, tag_type, tag_types_of
from smrec.results import ItemTagEntry
from smrec.scoring import recommendations
from smrec.weighting import apply_tag_type_weights


@pytest.fixture
def heat_recs(movie_smr):
    # collateral, gladiator, alien, aliens
    return recommendations(movie_smr, ["heat"], [1.0], n=4)


def test_reorder_moves_overlapping_items_up_and_keeps_ties_stable(movie_smr, heat_recs):
    reordered = reorder_recommendations(movie_smr, heat_recs, ["scifi"])

    assert reordered.labels == ["alien", "aliens", "collateral", "gladiator"]
    # Scores travel with their rows
    assert reordered[0].score == heat_recs[2].score


def test_reorder_accepts_column_positions(movie_smr, heat_recs):
    by_name = reorder_recommendations(movie_smr, heat_recs, ["action", "scott"])
    by_column = reorder_recommendations(movie_smr, heat_recs, [0, 7])

    assert by_column.labels == by_name.labels == ["gladiator", "alien", "aliens", "collateral"]


def test_reorder_uses_weighted_matrix(movie_smr):
    weighted = apply_tag_type_weights(movie_smr, [1.0, 10.0])
    recs = recommendations(weighted, ["heat"], [1.0], n=4)

    reordered = reorder_recommendations(weighted, recs, ["action", "cameron"])

    assert reordered.labels[0] == "aliens"


def test_reorder_without_overlap_returns_input(movie_smr, heat_recs):
    top_two = heat_recs.head(2)

    assert reorder_recommendations(movie_smr, top_two, ["scifi"]) is top_two
    assert reorder_recommendations(movie_smr, heat_recs, ["no-such-tag"]) is heat_recs


def test_reorder_rejects_malformed_tag_ids(movie_smr, heat_recs):
    with pytest.raises(ArgumentError):
        reorder_recommendations(movie_smr, heat_recs, [])

    with pytest.raises(ArgumentError):
        reorder_recommendations(movie_smr, heat_recs, ["scifi", 3])

    with pytest.raises(ArgumentError):
        reorder_recommendations(movie_smr, heat_recs, [42])


def test_tag_type_resolves_tags_columns_and_items(movie_smr):
    assert tag_type(movie_smr, "crime") == "Genre"
    assert tag_type(movie_smr, 6) == "Director"
    assert tag_type(movie_smr, "heat") == "Movie"


def test_tag_type_of_unknown_identifier_is_none_sentinel(movie_smr):
    assert tag_type(movie_smr, "western") == "None"
    assert tag_type(movie_smr, 99) == "None"
    assert tag_type(movie_smr, 2.5) == "None"


def test_tag_types_of_many(movie_smr):
    assert tag_types_of(movie_smr, [0, "mann", "alien", "?"]) == ["Genre", "Director", "Movie", "None"]


def test_item_data_lists_metadata_of_recommended_items(movie_smr, heat_recs):
    entries = item_data(movie_smr, heat_recs.head(1))

    assert entries == [
        ItemTagEntry("collateral", "crime", 1.0),
        ItemTagEntry("collateral", "mann", 1.0),
    ]


def test_item_data_restricted_to_tag_types(movie_smr, heat_recs):
    entries = item_data(movie_smr, heat_recs, tag_types=["Director"])

    assert [(e.item, e.tag, e.weight) for e in entries] == [
        ("collateral", "mann", 1.0),
        ("gladiator", "scott", 2.0),
        ("alien", "scott", 2.0),
        ("aliens", "cameron", 2.0),
    ]

    with pytest.raises(LookupError):
        item_data(movie_smr, heat_recs, tag_types=["Writer"])
