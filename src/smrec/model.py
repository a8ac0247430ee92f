"""
The sparse matrix recommender record.

Items are rows and tags are columns of a single sparse matrix. Tags are
grouped by tag type (genre, actor, keyword, ...) into contiguous column
blocks, in ``tag_types`` order. Two matrices are kept:

- ``M01`` holds the raw counts and never changes after construction
- ``M`` is ``M01`` with the current tag weights applied

The record is frozen, including its index mappings; weighting and tag-type
removal build a new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, NamedTuple

from scipy import sparse

from .errors import ArgumentError

logger = logging.getLogger(__name__)


class TagTypeRange(NamedTuple):
    """Column block of one tag type; ``end`` is inclusive."""

    begin: int
    end: int

    @property
    def width(self) -> int:
        return self.end - self.begin + 1

    @property
    def columns(self) -> slice:
        return slice(self.begin, self.end + 1)


def ranges_from_widths(tag_types: list[str] | tuple[str, ...], widths: list[int]) -> dict[str, TagTypeRange]:
    """Cumulative-sum ranges for consecutive blocks of the given widths."""
    ranges: dict[str, TagTypeRange] = {}
    end = -1
    for tag_type, width in zip(tag_types, widths):
        begin = end + 1
        end = begin + width - 1
        ranges[tag_type] = TagTypeRange(begin, end)
    return ranges


def index_labels(index: Mapping[str, int]) -> list[str]:
    """Labels of a name -> position mapping, in position order."""
    labels = [""] * len(index)
    for label, position in index.items():
        labels[position] = label
    return labels


@dataclass(frozen=True, eq=False)
class SparseMatrixRecommender:
    """Metadata matrix plus the bookkeeping needed to slice and label it."""

    M: sparse.csr_matrix
    M01: sparse.csr_matrix
    tag_types: tuple[str, ...]
    tag_type_ranges: Mapping[str, TagTypeRange]
    item_column_name: str
    item_index: Mapping[str, int] = field(repr=False)
    tag_index: Mapping[str, int] = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag_types", tuple(self.tag_types))
        # Private read-only copies, never shared with the caller or a derived record
        ranges = {tt: TagTypeRange(*r) for tt, r in self.tag_type_ranges.items()}
        object.__setattr__(self, "tag_type_ranges", MappingProxyType(ranges))
        object.__setattr__(self, "item_index", MappingProxyType(dict(self.item_index)))
        object.__setattr__(self, "tag_index", MappingProxyType(dict(self.tag_index)))
        self._check_invariants()

    def _check_invariants(self) -> None:
        if self.M.shape != self.M01.shape:
            raise ArgumentError(
                f"Weighted matrix shape {self.M.shape} differs from raw matrix shape {self.M01.shape}"
            )

        n_items, n_tags = self.M01.shape
        if len(set(self.tag_types)) != len(self.tag_types):
            raise ArgumentError(f"Tag types must be unique, got {list(self.tag_types)}")
        if set(self.tag_type_ranges) != set(self.tag_types):
            raise ArgumentError("Every tag type needs exactly one column range")

        expected_begin = 0
        for tag_type in self.tag_types:
            begin, end = self.tag_type_ranges[tag_type]
            if begin != expected_begin or end < begin - 1:
                raise ArgumentError(
                    f"Column range ({begin}, {end}) of tag type '{tag_type}' is not contiguous"
                )
            expected_begin = end + 1
        if expected_begin != n_tags:
            raise ArgumentError(f"Tag type ranges cover {expected_begin} columns, matrix has {n_tags}")

        if sorted(self.tag_index.values()) != list(range(n_tags)):
            raise ArgumentError("Tag index must map one tag to each matrix column")
        if sorted(self.item_index.values()) != list(range(n_items)):
            raise ArgumentError("Item index must map one item to each matrix row")

    @property
    def shape(self) -> tuple[int, int]:
        return self.M01.shape

    @property
    def n_items(self) -> int:
        return self.M01.shape[0]

    @property
    def n_tags(self) -> int:
        return self.M01.shape[1]

    @property
    def items(self) -> list[str]:
        """Item identifiers in row order."""
        return index_labels(self.item_index)

    @property
    def tags(self) -> list[str]:
        """Tag identifiers in column order."""
        return index_labels(self.tag_index)

    def sub_matrix(self, tag_type: str, raw: bool = False) -> sparse.csr_matrix:
        """
        Columns of one tag type.

        Args:
            tag_type: Name of the tag type
            raw: Slice the unweighted ``M01`` instead of ``M``

        Raises:
            LookupError: if the tag type is unknown
        """
        if tag_type not in self.tag_type_ranges:
            raise LookupError(f"Unknown tag type '{tag_type}'; known tag types: {list(self.tag_types)}")
        matrix = self.M01 if raw else self.M
        return matrix[:, self.tag_type_ranges[tag_type].columns]

    def with_matrix(self, M: sparse.spmatrix) -> "SparseMatrixRecommender":
        """Copy of this recommender with a new weighted matrix."""
        return replace(self, M=sparse.csr_matrix(M))
