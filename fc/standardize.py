"""
roifc.fc.standardize
====================

Per-ROI z-scoring of time series across time.

Each column is shifted to mean 0 and scaled to unit standard deviation
independently of the others.  The sample standard deviation
(``ddof=1``) is used by default; the same convention applies to every
column of a matrix.  Pearson correlation is invariant to this
transform, so standardization only puts the signals on a common scale
for inspection and numerical stability.

Degenerate columns are normalised rather than propagated:

* a constant column (zero variance) becomes all zeros, and so does a
  finite column whose spread is too small to standardize in floating
  point;
* a column with too few finite values to estimate a standard deviation
  (a single timepoint with ``ddof=1``) also becomes zeros;
* NaN entries stay NaN, and an all-NaN column stays NaN.
"""

from __future__ import annotations

import warnings

import numpy as np
from scipy.stats import zscore


def zscore_timeseries(timeseries: np.ndarray, ddof: int = 1) -> np.ndarray:
    """Standardize each column of a (T, R) array.

    Parameters
    ----------
    timeseries : np.ndarray
        Raw ROI time series, one column per ROI.  A 1D array is treated
        as a single ROI.
    ddof : int, optional
        Delta degrees of freedom for the standard deviation.

    Returns
    -------
    np.ndarray
        Array of the same shape as the input.
    """
    ts = np.array(timeseries, dtype=float)
    squeeze = ts.ndim == 1
    if squeeze:
        ts = ts[:, np.newaxis]
    if ts.ndim != 2:
        raise ValueError("timeseries must be a 2D array of shape (T, N_ROI)")
    if ts.size == 0:
        return ts[:, 0] if squeeze else ts

    finite = ~np.isnan(ts)
    counts = finite.sum(axis=0)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        z = zscore(ts, axis=0, ddof=ddof, nan_policy='omit')
        spread = np.nanmax(ts, axis=0) - np.nanmin(ts, axis=0)
    z = np.asarray(z, dtype=float)

    # near-constant columns can lose all precision inside zscore
    lost = ~np.any(np.isfinite(z) & finite, axis=0)
    degenerate = (counts > 0) & ((counts <= ddof) | (spread == 0) | lost)
    if np.any(degenerate):
        z[:, degenerate] = np.where(finite[:, degenerate], 0.0, np.nan)
    return z[:, 0] if squeeze else z


class Standardizer:
    """Z-score ROI time series column by column.

    Parameters
    ----------
    ddof : int, optional
        ``1`` for the sample standard deviation (default), ``0`` for the
        population standard deviation.
    """

    def __init__(self, ddof: int = 1) -> None:
        self.ddof = ddof

    def transform(self, timeseries: np.ndarray) -> np.ndarray:
        return zscore_timeseries(timeseries, ddof=self.ddof)


__all__ = ['Standardizer', 'zscore_timeseries']
