"""Unit tests for SpatialRelation and DistanceMatrix."""

import numpy as np
import pytest

from spatialkit.errors import IncompatibleUnitError
from spatialkit.models import DistanceMatrix, SpatialRelation, Unit


@pytest.fixture
def relation():
    """Relation between 3 source rows and 2 related rows."""
    return SpatialRelation.from_rows("intersects", (3, 2), [(0, [1]), (1, []), (2, [0, 1])])


def test_relation_rows(relation):
    """Test related indices per row, with empty rows allowed."""
    assert relation[0] == frozenset({1})
    assert relation[1] == frozenset()
    assert relation.related(2) == frozenset({0, 1})
    assert relation.counts() == [1, 0, 2]
    assert relation.count() == 3
    assert (2, 0) in relation
    assert (1, 0) not in relation


def test_relation_iterates_sorted_pairs(relation):
    assert list(relation) == [(0, 1), (2, 0), (2, 1)]


def test_relation_rejects_out_of_range_indices():
    """Test indices are validated against the shape."""
    with pytest.raises(IndexError):
        SpatialRelation("within", (1, 1), {0: frozenset({3})})

    relation = SpatialRelation("within", (1, 1))
    with pytest.raises(IndexError):
        relation.related(5)


def test_relation_transpose(relation):
    transposed = relation.transpose()

    assert transposed.shape == (2, 3)
    assert transposed[1] == frozenset({0, 2})
    assert transposed[0] == frozenset({2})


def test_relation_exports(relation):
    """Test dense and pairs exports."""
    dense = relation.to_dense()
    assert dense.dtype == bool
    assert dense.tolist() == [[False, True], [False, False], [True, True]]

    pairs = relation.to_pairs()
    assert list(pairs.columns) == ["source_index", "related_index"]
    assert pairs.values.tolist() == [[0, 1], [2, 0], [2, 1]]


def test_distance_matrix_nearest_and_units():
    """Test nearest lookup and unit conversion."""
    matrix = DistanceMatrix(np.array([[1609.344, 10.0], [0.0, 5.0]]), Unit.METRE)

    nearest = matrix.nearest()
    assert nearest[0][0] == 1
    assert nearest[0][1].value == 10.0
    assert nearest[1][0] == 0

    in_miles = matrix.to(Unit.MILE)
    assert in_miles.unit == Unit.MILE
    assert in_miles[0, 0].value == pytest.approx(1.0)


def test_distance_matrix_is_read_only():
    matrix = DistanceMatrix(np.zeros((2, 2)))

    with pytest.raises(ValueError):
        matrix.values[0, 0] = 1.0


def test_distance_matrix_rejects_area_unit():
    with pytest.raises(IncompatibleUnitError):
        DistanceMatrix(np.zeros((1, 1)), Unit.ACRE)


def test_distance_matrix_nearest_with_no_columns():
    """Test rows have no nearest feature when the related side is empty."""
    matrix = DistanceMatrix(np.zeros((2, 0)))

    assert matrix.nearest() == [(None, None), (None, None)]
