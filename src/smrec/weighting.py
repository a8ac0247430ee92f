"""
Tag and tag-type weights for a sparse matrix recommender.

Weights always rescale the raw matrix ``M01``, so applying new weights
replaces the previous ones instead of compounding them.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import numpy as np
from scipy import sparse

from .model import SparseMatrixRecommender
from .utils import adjust_length, as_real_array

logger = logging.getLogger(__name__)


def apply_tag_weights(smr: SparseMatrixRecommender, weights: Sequence[float]) -> SparseMatrixRecommender:
    """
    Weight every tag (column) of the raw matrix.

    ``weights`` is recycled or truncated to the number of columns, see
    ``adjust_length``. Returns a recommender with ``M = M01 @ diag(weights)``.
    """
    w = as_real_array(adjust_length(list(weights), smr.n_tags), what="tag weights")
    if not smr.n_tags:
        return smr.with_matrix(smr.M01)
    W = sparse.diags(w, format="csr")
    logger.debug(f"Applying {len(w)} tag weights")
    return smr.with_matrix(smr.M01 @ W)


def apply_tag_type_weights(
    smr: SparseMatrixRecommender,
    weights: Sequence[float] | Mapping[str, float],
) -> SparseMatrixRecommender:
    """
    Weight every tag type (column block) of the raw matrix.

    Args:
        smr: Recommender to reweight
        weights: One weight per tag type, recycled or truncated to the number
            of tag types; or a mapping of tag type to weight where missing
            tag types keep weight 1.0
    """
    if isinstance(weights, Mapping):
        unknown = set(weights) - set(smr.tag_types)
        if unknown:
            logger.warning(f"Ignoring weights for unknown tag types: {sorted(unknown)}")
        per_type = [weights.get(tt, 1.0) for tt in smr.tag_types]
    else:
        per_type = adjust_length(list(weights), len(smr.tag_types))

    per_type = as_real_array(per_type, what="tag type weights")
    widths = [smr.tag_type_ranges[tt].width for tt in smr.tag_types]
    return apply_tag_weights(smr, np.repeat(per_type, widths))


def current_tag_type_significance_factors(smr: SparseMatrixRecommender) -> dict[str, float]:
    """
    Ratio of weighted to raw mass for every tag type.

    A factor of 1.0 means the tag type is unweighted. Tag types without raw
    mass have factor 1.0.
    """
    factors: dict[str, float] = {}
    for tag_type in smr.tag_types:
        raw_total = float(smr.sub_matrix(tag_type, raw=True).sum())
        if raw_total == 0:
            factors[tag_type] = 1.0
            continue
        factors[tag_type] = float(smr.sub_matrix(tag_type).sum()) / raw_total
    return factors


def normalize_sub_matrices_by_max_entry(smr: SparseMatrixRecommender) -> SparseMatrixRecommender:
    """Scale every tag type block so its largest current entry becomes 1."""
    maxima = []
    for tag_type in smr.tag_types:
        block = smr.sub_matrix(tag_type)
        block_max = float(block.max()) if block.shape[0] and block.shape[1] else 0.0
        maxima.append(block_max if block_max != 0 else 1.0)
    return apply_tag_type_weights(smr, [1.0 / m for m in maxima])
