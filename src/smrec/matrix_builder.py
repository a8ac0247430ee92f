"""
Build a sparse matrix recommender from transactions or per-tag-type matrices.

A transaction is one row of a table, e.g. one viewing of a movie:

    {"Movie": "heat", "Genre": "crime", "Director": "mann"}

For every tag type (``Genre``, ``Director``) the rows are counted into an
item x tag contingency matrix; the matrices are then placed side by side.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
from scipy import sparse
from tqdm import tqdm

from . import config
from .errors import ArgumentError
from .model import SparseMatrixRecommender, ranges_from_widths
from .utils import hstack_columns

logger = logging.getLogger(__name__)


@dataclass
class LabeledMatrix:
    """A sparse matrix with named rows and columns."""

    matrix: sparse.csr_matrix
    row_labels: list[str]
    column_labels: list[str]

    def __post_init__(self) -> None:
        self.matrix = sparse.csr_matrix(self.matrix, dtype=config.MATRIX_DTYPE)
        self.row_labels = [str(label) for label in self.row_labels]
        self.column_labels = [str(label) for label in self.column_labels]
        if self.matrix.shape != (len(self.row_labels), len(self.column_labels)):
            raise ArgumentError(
                f"Matrix shape {self.matrix.shape} does not match "
                f"{len(self.row_labels)} row labels and {len(self.column_labels)} column labels"
            )
        if len(set(self.row_labels)) != len(self.row_labels):
            raise ArgumentError("Row labels must be unique")
        if len(set(self.column_labels)) != len(self.column_labels):
            raise ArgumentError("Column labels must be unique")

    @property
    def shape(self) -> tuple[int, int]:
        return self.matrix.shape


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, float) and np.isnan(value))


def build_item_tag_matrix(
    rows: Iterable[Mapping[str, Any]],
    item_field: str,
    tag_field: str,
    items: Sequence[str] | None = None,
) -> LabeledMatrix:
    """
    Count (item, tag) co-occurrences into a contingency matrix.

    Args:
        rows: Transactions, each a mapping of field name to value
        item_field: Field whose values become the matrix rows
        tag_field: Field whose values become the matrix columns
        items: Row universe to use instead of the items seen in ``rows``;
            items outside it are dropped

    Returns:
        LabeledMatrix with rows and columns sorted by label (unless ``items``
        fixes the row order) and entries equal to pair counts
    """
    counts: Counter[tuple[str, str]] = Counter()
    for row in rows:
        item, tag = row.get(item_field), row.get(tag_field)
        if _present(item) and _present(tag):
            counts[(str(item), str(tag))] += 1

    if items is None:
        row_labels = sorted({item for item, _ in counts})
    else:
        row_labels = [str(item) for item in items]
    column_labels = sorted({tag for _, tag in counts})

    row_pos = {label: i for i, label in enumerate(row_labels)}
    col_pos = {label: j for j, label in enumerate(column_labels)}

    # Build COO data
    data_rows, data_cols, data = [], [], []
    for (item, tag), count in counts.items():
        if item not in row_pos:
            continue
        data_rows.append(row_pos[item])
        data_cols.append(col_pos[tag])
        data.append(count)

    matrix = sparse.csr_matrix(
        (data, (data_rows, data_cols)),
        shape=(len(row_labels), len(column_labels)),
        dtype=config.MATRIX_DTYPE,
    )
    logger.debug(f"Built {tag_field} matrix with {matrix.nnz} entries over {matrix.shape}")
    return LabeledMatrix(matrix, row_labels, column_labels)


def align_rows(matrices: Sequence[LabeledMatrix], items: Sequence[str] | None = None) -> list[LabeledMatrix]:
    """
    Outer-join matrices on their row labels.

    Every returned matrix has the same rows: ``items`` if given, otherwise the
    sorted union of all row labels. Missing entries are zero.
    """
    if items is None:
        universe = sorted(set().union(*(m.row_labels for m in matrices))) if matrices else []
    else:
        universe = [str(item) for item in items]
    position = {label: i for i, label in enumerate(universe)}

    aligned = []
    for m in matrices:
        if m.row_labels == universe:
            aligned.append(m)
            continue
        keep = [i for i, label in enumerate(m.row_labels) if label in position]
        target = [position[m.row_labels[i]] for i in keep]
        # Selector moving row keep[k] of m to row target[k] of the result
        selector = sparse.csr_matrix(
            (np.ones(len(keep)), (target, keep)),
            shape=(len(universe), len(m.row_labels)),
            dtype=config.MATRIX_DTYPE,
        )
        aligned.append(LabeledMatrix(selector @ m.matrix, universe, m.column_labels))
    return aligned


def build_from_matrices(
    matrices: Sequence[LabeledMatrix],
    tag_types: Sequence[str],
    item_field: str,
) -> SparseMatrixRecommender:
    """
    Create a recommender by splicing per-tag-type matrices column-wise.

    Args:
        matrices: One matrix per tag type, all with the same row labels
        tag_types: Tag type names, in the same order as ``matrices``
        item_field: Name of the item identity field

    Raises:
        ArgumentError: on a length mismatch, misaligned rows or a tag that
            appears under two tag types
    """
    tag_types = [str(tt) for tt in tag_types]
    if len(matrices) != len(tag_types):
        raise ArgumentError(
            f"The same number of matrices and tag types is required, "
            f"got {len(matrices)} matrices and {len(tag_types)} tag types"
        )
    if not matrices:
        raise ArgumentError("At least one tag type matrix is required")

    row_labels = matrices[0].row_labels
    for tag_type, m in zip(tag_types, matrices):
        if m.row_labels != row_labels:
            raise ArgumentError(
                f"Rows of the '{tag_type}' matrix do not match the rows of the "
                f"'{tag_types[0]}' matrix; align them first (see align_rows)"
            )

    column_labels = [label for m in matrices for label in m.column_labels]
    if len(set(column_labels)) != len(column_labels):
        duplicates = sorted({label for label, n in Counter(column_labels).items() if n > 1})
        raise ArgumentError(f"Tags must be unique across tag types, duplicated: {duplicates[:5]}")

    m = hstack_columns([lm.matrix for lm in matrices], len(row_labels))
    ranges = ranges_from_widths(tag_types, [lm.shape[1] for lm in matrices])

    smr = SparseMatrixRecommender(
        M=m,
        M01=m,
        tag_types=tuple(tag_types),
        tag_type_ranges=ranges,
        item_column_name=item_field,
        item_index={label: i for i, label in enumerate(row_labels)},
        tag_index={label: j for j, label in enumerate(column_labels)},
    )
    logger.info(
        f"Created recommender with {smr.n_items} items x {smr.n_tags} tags "
        f"over {len(tag_types)} tag types"
    )
    return smr


def build_from_transactions(
    rows: Iterable[Mapping[str, Any]],
    tag_types: Sequence[str],
    item_field: str,
    show_progress: bool | None = None,
) -> SparseMatrixRecommender:
    """
    Create a recommender from a transactions table and a list of tag types.

    Args:
        rows: Transactions, each a mapping of field name to value
        tag_types: Fields of ``rows`` holding the categorical tags
        item_field: Field of ``rows`` identifying the item
        show_progress: Show a progress bar over tag types
            (defaults to ``config.SHOW_PROGRESS``)
    """
    tag_types = list(tag_types)
    if not tag_types:
        raise ArgumentError("At least one tag type is required")
    if item_field in tag_types:
        raise ArgumentError(f"The item field '{item_field}' cannot also be a tag type")
    if show_progress is None:
        show_progress = config.SHOW_PROGRESS

    rows = list(rows)
    items = sorted({str(row[item_field]) for row in rows if _present(row.get(item_field))})

    matrices = [
        build_item_tag_matrix(rows, item_field, tag_type, items=items)
        for tag_type in tqdm(tag_types, desc="Tag types", disable=not show_progress)
    ]
    return build_from_matrices(matrices, tag_types, item_field)
