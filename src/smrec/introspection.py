"""
Reordering and interpretation of recommendations.
"""

from __future__ import annotations

import logging
import numbers
from typing import Any, Iterable, Sequence

import numpy as np
from scipy import sparse

from . import config
from .errors import ArgumentError
from .model import SparseMatrixRecommender
from .results import ItemTagEntry, ScoredTable
from .utils import stable_descending_order

logger = logging.getLogger(__name__)


def _tag_columns(smr: SparseMatrixRecommender, tag_ids: Sequence[Any]) -> list[int]:
    tag_ids = list(tag_ids) if not isinstance(tag_ids, (str, bytes)) else [tag_ids]
    if not tag_ids:
        raise ArgumentError("tag_ids is expected to be a non-empty list of tag identifiers or column positions")

    if all(isinstance(t, str) for t in tag_ids):
        wanted = set(tag_ids)
        # Unknown identifiers simply do not contribute
        return [j for tag, j in smr.tag_index.items() if tag in wanted]

    if all(isinstance(t, numbers.Integral) and not isinstance(t, (bool, np.bool_)) for t in tag_ids):
        columns = [int(t) for t in tag_ids]
        bad = [c for c in columns if not 0 <= c < smr.n_tags]
        if bad:
            raise ArgumentError(f"Column positions {bad[:5]} are outside 0..{smr.n_tags - 1}")
        return columns

    raise ArgumentError("tag_ids must be all tag identifiers or all column positions")


def reorder_recommendations(
    smr: SparseMatrixRecommender,
    recs: ScoredTable,
    tag_ids: Sequence[str] | Sequence[int],
) -> ScoredTable:
    """
    Re-rank recommendations by how much of their weight falls on some tags.

    Each recommended item is scored by the sum of its ``M`` entries over the
    given tags. When at least one item overlaps, the recommendations are
    sorted by that score (ties keep their current order); otherwise ``recs``
    is returned as is.

    Args:
        smr: Sparse matrix recommender
        recs: Recommendations whose indices are rows of ``smr.M``
        tag_ids: Tag identifiers or column positions

    Raises:
        ArgumentError: if ``tag_ids`` is empty, mixed or out of range
    """
    columns = _tag_columns(smr, tag_ids)
    if not len(recs):
        return recs

    columns = sorted(set(columns))
    indicator = sparse.csr_matrix(
        (np.ones(len(columns)), (columns, [0] * len(columns))),
        shape=(smr.n_tags, 1),
    )
    overlap = (smr.M[recs.indices, :] @ indicator).toarray().ravel()

    if overlap.sum() > 0:
        return recs.reordered(stable_descending_order(overlap))

    logger.debug("No recommendation overlaps the given tags; keeping the original order")
    return recs


def tag_type(smr: SparseMatrixRecommender, tag_or_index: Any) -> str:
    """
    Tag type owning a tag identifier or column position.

    A known item identifier gives the item column name; anything else gives
    ``config.NO_TAG_TYPE`` ("None").
    """
    if isinstance(tag_or_index, numbers.Integral) and not isinstance(tag_or_index, (bool, np.bool_)):
        column = int(tag_or_index)
    elif isinstance(tag_or_index, str) and tag_or_index in smr.tag_index:
        column = smr.tag_index[tag_or_index]
    elif isinstance(tag_or_index, str) and tag_or_index in smr.item_index:
        return smr.item_column_name
    else:
        return config.NO_TAG_TYPE

    for name in smr.tag_types:
        begin, end = smr.tag_type_ranges[name]
        if begin <= column <= end:
            return name
    return config.NO_TAG_TYPE


def tag_types_of(smr: SparseMatrixRecommender, tags: Iterable[Any]) -> list[str]:
    return [tag_type(smr, t) for t in tags]


def item_data(
    smr: SparseMatrixRecommender,
    recs: ScoredTable,
    tag_types: Sequence[str] | None = None,
) -> list[ItemTagEntry]:
    """
    Metadata behind a list of recommendations.

    Returns the non-zero (item, tag, weight) cells of the recommended rows of
    ``M``, in recommendation order and then column order. ``tag_types``
    restricts the tags to some tag types.
    """
    if tag_types is None:
        columns = list(range(smr.n_tags))
    else:
        columns = []
        for tt in tag_types:
            if tt not in smr.tag_type_ranges:
                raise LookupError(f"Unknown tag type '{tt}'")
            columns.extend(range(smr.tag_type_ranges[tt].begin, smr.tag_type_ranges[tt].end + 1))

    items, tags = smr.items, smr.tags
    entries: list[ItemTagEntry] = []
    seen_rows: set[int] = set()
    sub = smr.M[:, columns].tocsr() if columns else None
    for row in recs.indices:
        if row in seen_rows or sub is None:
            continue
        seen_rows.add(row)
        start, end = sub.indptr[row], sub.indptr[row + 1]
        for k in np.argsort(sub.indices[start:end], kind="stable"):
            j = sub.indices[start + k]
            weight = float(sub.data[start + k])
            if weight != 0:
                entries.append(ItemTagEntry(items[row], tags[columns[j]], weight))
    return entries
