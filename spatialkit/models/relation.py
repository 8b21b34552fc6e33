"""Sparse spatial relations and dense distance matrices.

Indices are 0-based positions in the source (A) and related (B) collections.
An empty set for a row means "no relation", never an error.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from spatialkit.models.measurement import Quantity, Unit, conversion_factor


@dataclass(frozen=True)
class SpatialRelation:
    """For each row i of A, the set of B indices for which a predicate holds.

    Attributes:
        predicate: Predicate name (``intersects`` or ``within``)
        shape: (rows in A, rows in B)
        pairs: Row index to related indices; rows with no relation are absent
    """

    predicate: str
    shape: tuple[int, int]
    pairs: Mapping[int, frozenset[int]] = field(default_factory=dict)

    def __post_init__(self):
        m, n = self.shape
        cleaned: dict[int, frozenset[int]] = {}
        for i, related in self.pairs.items():
            if not 0 <= i < m:
                msg = f"Row index {i} outside 0..{m - 1}"
                raise IndexError(msg)
            related = frozenset(int(j) for j in related)
            for j in related:
                if not 0 <= j < n:
                    msg = f"Related index {j} outside 0..{n - 1}"
                    raise IndexError(msg)
            if related:
                cleaned[int(i)] = related
        object.__setattr__(self, "pairs", cleaned)

    @classmethod
    def from_rows(cls, predicate: str, shape: tuple[int, int], rows) -> "SpatialRelation":
        """Build from an iterable of (row index, iterable of related indices)."""
        return cls(predicate, shape, {i: frozenset(js) for i, js in rows})

    def related(self, i: int) -> frozenset[int]:
        """Indices in B related to row ``i`` of A (empty when none)."""
        if not 0 <= i < self.shape[0]:
            msg = f"Row index {i} outside 0..{self.shape[0] - 1}"
            raise IndexError(msg)
        return self.pairs.get(i, frozenset())

    def __getitem__(self, i: int) -> frozenset[int]:
        return self.related(i)

    def __contains__(self, pair: tuple[int, int]) -> bool:
        i, j = pair
        return j in self.pairs.get(i, frozenset())

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for i in sorted(self.pairs):
            for j in sorted(self.pairs[i]):
                yield i, j

    def __len__(self) -> int:
        return self.count()

    def count(self) -> int:
        """Total number of related (i, j) pairs."""
        return sum(len(js) for js in self.pairs.values())

    def counts(self) -> list[int]:
        """Number of related B features for each row of A."""
        return [len(self.pairs.get(i, ())) for i in range(self.shape[0])]

    def transpose(self) -> "SpatialRelation":
        """Relation viewed from B's side (predicate name is kept)."""
        flipped: dict[int, set[int]] = {}
        for i, j in self:
            flipped.setdefault(j, set()).add(i)
        return SpatialRelation(
            self.predicate,
            (self.shape[1], self.shape[0]),
            {j: frozenset(i) for j, i in flipped.items()},
        )

    def to_dense(self) -> np.ndarray:
        """Boolean (m, n) matrix."""
        dense = np.zeros(self.shape, dtype=bool)
        for i, j in self:
            dense[i, j] = True
        return dense

    def to_pairs(self) -> pd.DataFrame:
        """One row per related pair: ``source_index``, ``related_index``."""
        return pd.DataFrame(list(self), columns=["source_index", "related_index"], dtype="int64")

    def to_frame(self) -> pd.DataFrame:
        """Dense matrix as a DataFrame of 0/1 values indexed by source index."""
        df = pd.DataFrame(self.to_dense().astype(int))
        df.index.name = "source_index"
        return df


@dataclass(frozen=True)
class DistanceMatrix:
    """Pairwise distances between two collections, with their unit.

    Attributes:
        values: (m, n) array of distances
        unit: Length unit of ``values``
    """

    values: np.ndarray
    unit: Unit = Unit.METRE

    def __post_init__(self):
        values = np.array(self.values, dtype=float)
        if values.ndim != 2:
            msg = f"Distance matrix must be 2-dimensional, got {values.ndim}"
            raise ValueError(msg)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "unit", Unit(self.unit))
        # Raises for area units
        conversion_factor(self.unit, Unit.METRE)

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    def __getitem__(self, index: tuple[int, int]) -> Quantity:
        return Quantity(value=float(self.values[index]), unit=self.unit)

    def to(self, unit: Unit | str) -> "DistanceMatrix":
        target = Unit(unit)
        return DistanceMatrix(self.values * conversion_factor(self.unit, target), target)

    def nearest(self) -> list[tuple[int | None, Quantity | None]]:
        """Closest B index and its distance for every row of A."""
        m, n = self.shape
        if n == 0:
            return [(None, None) for _ in range(m)]
        idx = np.argmin(self.values, axis=1)
        return [
            (int(j), Quantity(value=float(self.values[i, j]), unit=self.unit))
            for i, j in enumerate(idx)
        ]

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.values)
        df.index.name = "source_index"
        return df
