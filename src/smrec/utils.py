"""Utility functions shared by the smrec modules."""

import logging
import numbers
from itertools import cycle, islice
from typing import Any, Iterable, Sequence

import numpy as np
from scipy import sparse

from .config import MATRIX_DTYPE
from .errors import ArgumentError

logger = logging.getLogger(__name__)


def adjust_length(seq: Sequence[Any], target_len: int) -> list[Any]:
    """
    Fit a sequence to ``target_len`` by recycling or truncating it.

    Shorter sequences are repeated cyclically, longer ones are cut. This
    mirrors vector recycling and is deliberately lenient: a weight vector of
    the wrong length is never rejected, so callers should double check the
    length of what they pass in.

    Example:
        adjust_length([1, 2], 5) -> [1, 2, 1, 2, 1]
        adjust_length([1, 2, 3], 2) -> [1, 2]
    """
    values = list(seq)
    if target_len < 0:
        raise ArgumentError(f"Target length must be non-negative, got {target_len}")
    if len(values) == target_len:
        return values
    if not values:
        if target_len == 0:
            return []
        raise ArgumentError(f"Cannot recycle an empty sequence to length {target_len}")

    logger.debug(f"Adjusting sequence of length {len(values)} to length {target_len}")
    return list(islice(cycle(values), target_len))


def is_real_number(value: Any) -> bool:
    """True for ints, floats and numpy scalars; False for bools and strings."""
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def as_real_array(values: Iterable[Any], what: str = "values") -> np.ndarray:
    """Convert numbers to a float array, raising TypeError on anything non-numeric."""
    values = list(values)
    bad = [v for v in values if not is_real_number(v)]
    if bad:
        raise TypeError(f"Real numbers are expected for {what}, got {bad[:3]!r}")
    return np.asarray(values, dtype=MATRIX_DTYPE)


def stable_descending_order(scores: np.ndarray) -> np.ndarray:
    """Positions sorting ``scores`` high to low; ties keep their original order."""
    return np.argsort(-np.asarray(scores, dtype=MATRIX_DTYPE), kind="stable")


def hstack_columns(blocks: Sequence[sparse.spmatrix], n_rows: int) -> sparse.csr_matrix:
    """Place sparse blocks side by side; blocks without columns are skipped."""
    non_empty = [b for b in blocks if b.shape[1] > 0]
    if not non_empty:
        return sparse.csr_matrix((n_rows, 0), dtype=MATRIX_DTYPE)
    return sparse.hstack(non_empty, format="csr", dtype=MATRIX_DTYPE)
