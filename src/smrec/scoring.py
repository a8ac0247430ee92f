"""
Recommendation scoring over the item x tag matrix.

Item history ``h`` (1 x items) is projected into tag space, ``p = h @ M``,
and back into item space, ``s = M @ p.T``. Items sharing many (heavily
weighted) tags with the history score highest. A profile can also be
given directly in tag space, skipping the first projection.

All ranking is high-to-low with ties kept in row order.
"""

from __future__ import annotations

import logging
import numbers
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
from scipy import sparse

from . import config
from .errors import ArgumentError
from .model import SparseMatrixRecommender
from .results import ScoredRow, ScoredTable
from .utils import adjust_length, as_real_array, is_real_number, stable_descending_order

logger = logging.getLogger(__name__)


def _is_position(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_))


def _resolve(value: Any, index: Mapping[str, int], size: int, what: str) -> int:
    if _is_position(value):
        position = int(value)
        if 0 <= position < size:
            return position
        raise LookupError(f"{what.capitalize()} position {position} is outside 0..{size - 1}")
    if isinstance(value, str) and value in index:
        return index[value]
    raise LookupError(f"Unknown {what} {value!r}")


def resolve_items(smr: SparseMatrixRecommender, items: Iterable[Any]) -> list[int]:
    """Row positions of item identifiers or row positions."""
    if isinstance(items, str):
        items = [items]
    return [_resolve(item, smr.item_index, smr.n_items, "item") for item in items]


def resolve_tags(smr: SparseMatrixRecommender, tags: Iterable[Any]) -> list[int]:
    """Column positions of tag identifiers or column positions."""
    if isinstance(tags, str):
        tags = [tags]
    return [_resolve(tag, smr.tag_index, smr.n_tags, "tag") for tag in tags]


def _ratings_for(ratings: Any, n: int, what: str) -> np.ndarray:
    if isinstance(ratings, (str, bytes)):
        raise TypeError(f"Real numbers are expected for {what}, got {ratings!r}")
    if is_real_number(ratings):
        ratings = [ratings]
    values = as_real_array(ratings, what=what)
    return np.asarray(adjust_length(list(values), n), dtype=config.MATRIX_DTYPE)


def _check_count(n: int | None) -> int:
    if n is None:
        return config.DEFAULT_NRECS
    if not _is_position(n) or n < 0:
        raise ArgumentError(f"The number of recommendations must be a non-negative integer, got {n!r}")
    return int(n)


def _row_vector(positions: list[int], values: np.ndarray, size: int) -> sparse.csr_matrix:
    # Duplicate positions are summed
    return sparse.csr_matrix(
        (values, ([0] * len(positions), positions)),
        shape=(1, size),
        dtype=config.MATRIX_DTYPE,
    )


def _as_tag_vector(smr: SparseMatrixRecommender, vec: Any) -> np.ndarray:
    """Flatten a row, column or 1-D profile vector over the tags."""
    if sparse.issparse(vec):
        shape = vec.shape
        flat = vec.toarray().ravel()
    else:
        arr = np.asarray(vec, dtype=config.MATRIX_DTYPE)
        shape = arr.shape
        flat = arr.ravel()

    if len(shape) == 1 or (len(shape) == 2 and 1 in shape):
        if flat.shape[0] == smr.n_tags:
            return flat.astype(config.MATRIX_DTYPE)
    raise ArgumentError(f"Profile vector of shape {shape} does not match {smr.n_tags} tags")


def _ranked_table(
    scores: np.ndarray,
    labels: list[str],
    n: int,
    label_column: str,
    exclude: set[int] | None = None,
    positive_only: bool = False,
) -> ScoredTable:
    rows = []
    for position in stable_descending_order(scores):
        if len(rows) >= n:
            break
        position = int(position)
        if exclude and position in exclude:
            continue
        if positive_only and not scores[position] > 0:
            continue
        rows.append(ScoredRow(float(scores[position]), position, labels[position]))
    return ScoredTable(tuple(rows), label_column)


def _item_scores(smr: SparseMatrixRecommender, history_rows: list[int], ratings: np.ndarray) -> np.ndarray:
    h = _row_vector(history_rows, ratings, smr.n_items)
    p = h @ smr.M
    return (smr.M @ p.T).toarray().ravel()


def recommendations(
    smr: SparseMatrixRecommender,
    history_items: Sequence[Any],
    history_ratings: Sequence[float] | float,
    n: int | None = None,
    remove_history: bool = True,
    label_column: str = config.DEFAULT_ITEM_LABEL,
) -> ScoredTable:
    """
    Recommend items from a consumption history.

    Args:
        smr: Sparse matrix recommender
        history_items: Item identifiers or row positions the user consumed
        history_ratings: Ratings of the history items, recycled or truncated
            to the number of history items
        n: Number of recommendations (``config.DEFAULT_NRECS`` when omitted);
            fewer are returned when there are not enough items
        remove_history: Drop the history items from the result
        label_column: Name of the identifier column of the result

    Raises:
        LookupError: if a history item is unknown
        TypeError: if a rating is not a real number
    """
    n = _check_count(n)
    history_rows = resolve_items(smr, history_items)
    ratings = _ratings_for(history_ratings, len(history_rows), "history ratings")

    scores = _item_scores(smr, history_rows, ratings)
    exclude = set(history_rows) if remove_history else None
    recs = _ranked_table(scores, smr.items, n, label_column, exclude=exclude)
    logger.debug(f"Scored {smr.n_items} items from {len(history_rows)} history items, returning {len(recs)}")
    return recs


def recommendations_from_history(
    smr: SparseMatrixRecommender,
    history: Iterable[Mapping[str, Any]],
    n: int | None = None,
    remove_history: bool = True,
    rating_field: str = config.DEFAULT_RATING_FIELD,
    item_field: str | None = None,
) -> ScoredTable:
    """
    Recommend items from history rows such as ``{"Rating": 5, "Movie": "heat"}``.

    The identifier column of the result is named after ``item_field``, which
    defaults to the item column name of the recommender.
    """
    item_field = item_field or smr.item_column_name
    items, ratings = [], []
    for row in history:
        try:
            items.append(row[item_field])
            ratings.append(row[rating_field])
        except KeyError as exc:
            raise ArgumentError(
                f"History rows need '{rating_field}' and '{item_field}' fields, missing {exc}"
            ) from exc
    return recommendations(smr, items, ratings, n, remove_history=remove_history, label_column=item_field)


def _split_history(item_history: Mapping[Any, float] | Iterable[tuple[Any, float]]) -> tuple[list, list]:
    pairs = item_history.items() if isinstance(item_history, Mapping) else item_history
    items, ratings = [], []
    for pair in pairs:
        try:
            item, rating = pair
        except (TypeError, ValueError) as exc:
            raise ArgumentError(f"Expected (item, rating) pairs, got {pair!r}") from exc
        items.append(item)
        ratings.append(rating)
    return items, ratings


def profile_vector(
    smr: SparseMatrixRecommender,
    item_history: Mapping[Any, float] | Iterable[tuple[Any, float]],
) -> sparse.csr_matrix:
    """
    Project an item history into tag space.

    Args:
        smr: Sparse matrix recommender
        item_history: Mapping of item to rating, or (item, rating) pairs

    Returns:
        Sparse column vector (tags x 1) equal to ``(h @ M).T``
    """
    items, ratings = _split_history(item_history)
    rows = resolve_items(smr, items)
    h = _row_vector(rows, _ratings_for(ratings, len(rows), "history ratings"), smr.n_items)
    return sparse.csr_matrix((h @ smr.M).T)


def profile_table_from_vector(smr: SparseMatrixRecommender, profile_vec: Any) -> ScoredTable:
    """Positive entries of a tag-space vector as a (Score, Index, Tag) table, highest first."""
    scores = _as_tag_vector(smr, profile_vec)
    return _ranked_table(scores, smr.tags, smr.n_tags, config.TAG_LABEL, positive_only=True)


def profile_table(
    smr: SparseMatrixRecommender,
    item_history: Mapping[Any, float] | Iterable[tuple[Any, float]],
) -> ScoredTable:
    """Tags of an item history's profile as a (Score, Index, Tag) table."""
    return profile_table_from_vector(smr, profile_vector(smr, item_history))


def recommendations_by_profile_vector(
    smr: SparseMatrixRecommender,
    profile_vec: Any,
    n: int | None = None,
    label_column: str = config.DEFAULT_ITEM_LABEL,
) -> ScoredTable:
    """
    Recommend items for a tag-space profile vector.

    ``profile_vec`` may be a 1-D array or a row or column vector, sparse or
    dense, with one entry per tag.
    """
    n = _check_count(n)
    scores = np.asarray(smr.M @ _as_tag_vector(smr, profile_vec)).ravel()
    return _ranked_table(scores, smr.items, n, label_column)


def recommendations_by_profile(
    smr: SparseMatrixRecommender,
    profile_tags: Sequence[Any],
    profile_ratings: Sequence[float] | float,
    n: int | None = None,
    label_column: str = config.DEFAULT_ITEM_LABEL,
) -> ScoredTable:
    """
    Recommend items for a profile given as tags and their ratings.

    Args:
        smr: Sparse matrix recommender
        profile_tags: Tag identifiers or column positions
        profile_ratings: Ratings of the tags, recycled or truncated to the
            number of tags
        n: Number of recommendations

    Raises:
        LookupError: if a tag is unknown
        TypeError: if a rating is not a real number
    """
    columns = resolve_tags(smr, profile_tags)
    ratings = _ratings_for(profile_ratings, len(columns), "profile ratings")
    pvec = _row_vector(columns, ratings, smr.n_tags)
    return recommendations_by_profile_vector(smr, pvec, n, label_column=label_column)
