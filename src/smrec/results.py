"""
Result records returned by scoring and introspection.

Scored tables keep their rows in ranking order and convert to plain
records keyed by ``Score``, ``Index`` and the label column.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from .config import DEFAULT_ITEM_LABEL, INDEX_COLUMN, SCORE_COLUMN


@dataclass(frozen=True)
class ScoredRow:
    """One scored item or tag."""

    score: float
    index: int
    label: str


@dataclass(frozen=True)
class ScoredTable:
    """
    Ordered (Score, Index, label) rows returned by the scoring functions.

    ``label_column`` names the identifier column, e.g. "Item", "Tag" or the
    item field of the recommender.
    """

    rows: tuple[ScoredRow, ...] = field(default_factory=tuple)
    label_column: str = DEFAULT_ITEM_LABEL

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[ScoredRow]:
        return iter(self.rows)

    def __getitem__(self, position: int) -> ScoredRow:
        return self.rows[position]

    @property
    def scores(self) -> np.ndarray:
        return np.array([r.score for r in self.rows], dtype=float)

    @property
    def indices(self) -> list[int]:
        return [r.index for r in self.rows]

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self.rows]

    def head(self, n: int) -> "ScoredTable":
        return ScoredTable(self.rows[: max(n, 0)], self.label_column)

    def reordered(self, order) -> "ScoredTable":
        """Table with rows taken at the given positions."""
        return ScoredTable(tuple(self.rows[int(i)] for i in order), self.label_column)

    def to_records(self) -> list[dict]:
        return [
            {SCORE_COLUMN: r.score, INDEX_COLUMN: r.index, self.label_column: r.label}
            for r in self.rows
        ]


@dataclass(frozen=True)
class ItemTagEntry:
    """A non-zero cell of the metadata matrix: item, tag and weight."""

    item: str
    tag: str
    weight: float
