"""Utility helpers for saving connectivity outputs.

This module provides functions to persist ROI time series, the FC
matrix and the high-FC pair table to disk.  The matrix is written in
both CSV and NumPy formats for easy inspection and efficient
reloading.  All file names may carry a common prefix; a trailing
underscore is added to the prefix when missing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd


def _ensure_dir(path: Path) -> None:
    """Create directory if it does not already exist."""
    path.mkdir(parents=True, exist_ok=True)


def normalise_prefix(prefix: str) -> str:
    prefix = str(prefix or '')
    if prefix and not prefix.endswith('_'):
        prefix = prefix + '_'
    return prefix


def output_path(output_dir: str | Path, filename: str, prefix: str = '') -> Path:
    """Return ``output_dir/<prefix>filename``, creating ``output_dir``."""
    out = Path(output_dir)
    _ensure_dir(out)
    return out / f"{normalise_prefix(prefix)}{filename}"


def save_timeseries(
    timeseries: np.ndarray,
    roi_ids: Sequence[int],
    output_dir: str | Path,
    prefix: str = '',
    filename: str = 'roi_timeseries.csv',
) -> Path:
    """Save a (T, R) time series matrix with atlas ids as column headers."""
    path = output_path(output_dir, filename, prefix)
    df = pd.DataFrame(np.asarray(timeseries), columns=[int(i) for i in roi_ids])
    df.index.name = 'timepoint'
    df.to_csv(path)
    return path


def load_timeseries(path: str | Path) -> pd.DataFrame:
    """Load a time series CSV written by :func:`save_timeseries`."""
    df = pd.read_csv(path, index_col=0)
    df.columns = [int(c) for c in df.columns]
    return df


def save_roi_ids(roi_ids: Sequence[int], output_dir: str | Path, prefix: str = '') -> Path:
    path = output_path(output_dir, 'roi_ids.csv', prefix)
    np.savetxt(path, np.asarray(roi_ids, dtype=int), fmt="%d", delimiter=",")
    return path


def load_roi_ids(input_dir: str | Path, prefix: str = '') -> np.ndarray:
    path = Path(input_dir) / f"{normalise_prefix(prefix)}roi_ids.csv"
    return np.atleast_1d(np.loadtxt(path, delimiter=",", dtype=int))


def save_fc_matrix(matrix: np.ndarray, output_dir: str | Path, prefix: str = '') -> Path:
    """Persist the FC matrix as ``fc_matrix.csv`` and ``fc_matrix.npy``.

    Returns
    -------
    Path
        Path of the CSV file.
    """
    csv = output_path(output_dir, 'fc_matrix.csv', prefix)
    arr = np.asarray(matrix, dtype=float)
    np.save(csv.with_suffix('.npy'), arr)
    np.savetxt(csv, arr, delimiter=",")
    return csv


def load_fc_matrix(input_dir: str | Path, prefix: str = '') -> np.ndarray:
    """Load an FC matrix from ``input_dir``.

    The binary ``.npy`` file is preferred; the CSV file is used as a
    fallback.
    """
    inp = Path(input_dir)
    stem = f"{normalise_prefix(prefix)}fc_matrix"
    npy = inp / f"{stem}.npy"
    csv = inp / f"{stem}.csv"
    if npy.exists():
        return np.load(npy)
    if csv.exists():
        return np.atleast_2d(np.loadtxt(csv, delimiter=","))
    raise FileNotFoundError("No FC matrix file found in" f" {input_dir}.")


def load_pair_table(path: str | Path) -> pd.DataFrame:
    """Load a high-FC pair table written by :func:`roifc.fc.pairs.save_pair_table`."""
    return pd.read_csv(path, keep_default_na=False, dtype={'Label_1': str, 'Label_2': str})


__all__ = [
    'normalise_prefix',
    'output_path',
    'save_timeseries',
    'load_timeseries',
    'save_roi_ids',
    'load_roi_ids',
    'save_fc_matrix',
    'load_fc_matrix',
    'load_pair_table',
]
