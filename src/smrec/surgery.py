"""Removal of whole tag types from a sparse matrix recommender."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from .errors import ArgumentError
from .model import SparseMatrixRecommender, ranges_from_widths
from .utils import hstack_columns
from .weighting import apply_tag_type_weights, current_tag_type_significance_factors

logger = logging.getLogger(__name__)


def remove_tag_types(smr: SparseMatrixRecommender, to_remove: Iterable[str]) -> SparseMatrixRecommender:
    """
    Create a recommender without the given tag types.

    The remaining tag types keep their significance factors: the weights
    they carried in ``smr`` are reapplied on the reduced raw matrix.

    Raises:
        ArgumentError: if every tag type would be removed
    """
    to_remove = {to_remove} if isinstance(to_remove, str) else set(to_remove)
    unknown = to_remove - set(smr.tag_types)
    if unknown:
        logger.warning(f"Ignoring unknown tag types: {sorted(unknown)}")

    retained = [tt for tt in smr.tag_types if tt not in to_remove]
    if not retained:
        raise ArgumentError("Cannot remove every tag type from the recommender")

    factors = current_tag_type_significance_factors(smr)
    retained_factors = [factors[tt] for tt in retained]

    blocks = [smr.sub_matrix(tt, raw=True) for tt in retained]
    m01 = hstack_columns(blocks, smr.n_items)

    tags = smr.tags
    kept_tags = [
        tags[j]
        for tt in retained
        for j in range(smr.tag_type_ranges[tt].begin, smr.tag_type_ranges[tt].end + 1)
    ]

    reduced = replace(
        smr,
        M=m01,
        M01=m01,
        tag_types=tuple(retained),
        tag_type_ranges=ranges_from_widths(retained, [smr.tag_type_ranges[tt].width for tt in retained]),
        tag_index={tag: j for j, tag in enumerate(kept_tags)},
    )
    logger.info(f"Removed tag types {sorted(to_remove & set(smr.tag_types))}; {reduced.n_tags} tags remain")
    return apply_tag_type_weights(reduced, retained_factors)


def keep_tag_types(smr: SparseMatrixRecommender, to_keep: Iterable[str]) -> SparseMatrixRecommender:
    """Create a recommender with only the given tag types."""
    to_keep = {to_keep} if isinstance(to_keep, str) else set(to_keep)
    return remove_tag_types(smr, [tt for tt in smr.tag_types if tt not in to_keep])
