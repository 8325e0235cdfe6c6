"""Tests for connectivity output helpers."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from roifc.fc.io import (
    load_fc_matrix,
    load_roi_ids,
    load_timeseries,
    normalise_prefix,
    save_fc_matrix,
    save_roi_ids,
    save_timeseries,
)


def test_prefix_gets_trailing_underscore() -> None:
    assert normalise_prefix('') == ''
    assert normalise_prefix('sub01') == 'sub01_'
    assert normalise_prefix('sub01_') == 'sub01_'


def test_fc_matrix_npy_then_csv(tmp_path: Path) -> None:
    mat = np.array([[1.0, 0.25], [0.25, 1.0]])
    csv = save_fc_matrix(mat, tmp_path / 'out', prefix='run1')
    assert csv.name == 'run1_fc_matrix.csv'
    assert np.array_equal(load_fc_matrix(tmp_path / 'out', prefix='run1'), mat)

    (tmp_path / 'out' / 'run1_fc_matrix.npy').unlink()
    assert np.allclose(load_fc_matrix(tmp_path / 'out', prefix='run1'), mat)


def test_timeseries_columns_are_atlas_ids(tmp_path: Path) -> None:
    ts = np.arange(6.0).reshape(3, 2)
    path = save_timeseries(ts, [3, 12], tmp_path)
    df = load_timeseries(path)
    assert list(df.columns) == [3, 12]
    assert np.array_equal(df.values, ts)


def test_roi_ids(tmp_path: Path) -> None:
    save_roi_ids([5], tmp_path)
    assert load_roi_ids(tmp_path).tolist() == [5]
