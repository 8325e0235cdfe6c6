import numpy as np
import pytest

from roifc.fc.connectivity import (
    ConnectivityMatrix,
    CorrelationEngine,
    compute_pearson_connectivity,
    pearson_matrix,
)


def test_matrix_is_exactly_symmetric_with_unit_diagonal():
    rng = np.random.RandomState(3)
    ts = rng.randn(60, 7)
    mat = pearson_matrix(ts)
    assert np.array_equal(mat, mat.T)
    assert np.all(np.diag(mat) == 1.0)
    assert np.allclose(mat, np.corrcoef(ts.T))


def test_scale_and_shift_invariance():
    rng = np.random.RandomState(4)
    ts = rng.randn(30, 3)
    assert np.allclose(pearson_matrix(ts), pearson_matrix(ts * 4.0 + 2.0))


def test_undefined_correlations_are_nan():
    ts = np.column_stack([np.arange(5.0), np.zeros(5), np.arange(5.0) ** 2])
    mat = pearson_matrix(ts)
    assert np.isnan(mat[0, 1]) and np.isnan(mat[1, 0])
    assert np.isnan(mat[1, 2])
    assert mat[1, 1] == 1.0
    assert np.isfinite(mat[0, 2])


def test_too_few_timepoints_gives_nan():
    mat = pearson_matrix(np.array([[1.0, 2.0, 3.0]]))
    assert mat.shape == (3, 3)
    assert np.all(np.isnan(mat[~np.eye(3, dtype=bool)]))
    assert np.all(np.diag(mat) == 1.0)


def test_pairwise_complete_observations_with_nan():
    x = np.array([1.0, 2.0, 3.0, 4.0, np.nan])
    y = np.array([2.0, 4.0, 6.0, 8.0, 1.0])
    z = np.array([np.nan, np.nan, np.nan, np.nan, 1.0])
    mat = pearson_matrix(np.column_stack([x, y, z]))
    assert mat[0, 1] == pytest.approx(1.0)
    assert np.isnan(mat[0, 2])
    assert np.array_equal(mat, mat.T, equal_nan=True)


def test_connectivity_matrix_metadata():
    rng = np.random.RandomState(5)
    cm = CorrelationEngine().compute(rng.randn(20, 2), [4, 9])
    assert isinstance(cm, ConnectivityMatrix)
    assert cm.roi_ids == [4, 9]
    assert cm.labels == ['ROI-4', 'ROI-9']
    df = cm.to_dataframe()
    assert list(df.index) == [4, 9]
    copy = cm.copy()
    assert copy.matrix is not cm.matrix
    assert np.array_equal(copy.matrix, cm.matrix)


def test_label_count_must_match():
    with pytest.raises(ValueError):
        compute_pearson_connectivity(np.zeros((5, 2)), [1, 2, 3])
    with pytest.raises(ValueError):
        compute_pearson_connectivity(np.zeros((5, 2)), [1, 2], labels=['a'])
