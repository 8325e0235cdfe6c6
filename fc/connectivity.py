"""
roifc.fc.connectivity
=====================

This module defines the :class:`ConnectivityMatrix` data structure and
the Pearson correlation engine that fills it from ROI time series.

Each unordered pair of ROIs is correlated once and the value is
mirrored, so the matrix is exactly symmetric.  The diagonal holds 1.0.
A pair whose correlation is undefined (fewer than two shared finite
timepoints, or a constant series) is stored as NaN instead of raising;
later stages treat NaN as "below any threshold".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd


@dataclass
class ConnectivityMatrix:
    """Encapsulate a functional connectivity matrix and its ROIs.

    Parameters
    ----------
    matrix : np.ndarray
        2D array of shape (R, R), symmetric with ones on the diagonal.
    roi_ids : Sequence[int]
        Atlas ids of the rows/columns in ascending order.
    labels : Sequence[str]
        Display names of the rows/columns.  Defaults to ``ROI-<id>``.
    method : str, optional
        Name of the method used to compute the matrix.
    """

    matrix: np.ndarray
    roi_ids: Sequence[int] = field(default_factory=list)
    labels: Sequence[str] = field(default_factory=list)
    method: str = 'pearson'

    @property
    def n_rois(self) -> int:
        return int(self.matrix.shape[0])

    def copy(self) -> 'ConnectivityMatrix':
        """Return a deep copy of the matrix, ids and labels."""
        return ConnectivityMatrix(
            self.matrix.copy(), list(self.roi_ids), list(self.labels), self.method
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Return the matrix indexed by atlas id on both axes."""
        ids = [int(i) for i in self.roi_ids] or list(range(1, self.n_rois + 1))
        return pd.DataFrame(self.matrix, index=ids, columns=ids)


def _pearson(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson r over timepoints where both series are finite."""
    ok = ~(np.isnan(x) | np.isnan(y))
    if ok.sum() < 2:
        return np.nan
    xc = x[ok] - x[ok].mean()
    yc = y[ok] - y[ok].mean()
    denom = np.sqrt(np.dot(xc, xc) * np.dot(yc, yc))
    if denom == 0 or not np.isfinite(denom):
        return np.nan
    return float(np.dot(xc, yc) / denom)


def pearson_matrix(timeseries: np.ndarray) -> np.ndarray:
    """Compute an exactly symmetric Pearson correlation matrix.

    Parameters
    ----------
    timeseries : np.ndarray
        Array of shape (T, R).

    Returns
    -------
    np.ndarray
        Array of shape (R, R) with 1.0 on the diagonal and NaN where the
        correlation is undefined.
    """
    ts = np.asarray(timeseries, dtype=float)
    if ts.ndim != 2:
        raise ValueError("timeseries must be a 2D array of shape (T, N_ROI)")
    n = ts.shape[1]
    if np.isnan(ts).any():
        corr = np.full((n, n), np.nan)
        for i in range(n):
            for j in range(i + 1, n):
                corr[i, j] = _pearson(ts[:, i], ts[:, j])
    elif ts.shape[0] < 2:
        corr = np.full((n, n), np.nan)
    else:
        xc = ts - ts.mean(axis=0)
        norms = np.sqrt(np.einsum('ij,ij->j', xc, xc))
        denom = np.outer(norms, norms)
        with np.errstate(divide='ignore', invalid='ignore'):
            corr = (xc.T @ xc) / denom
        corr[denom == 0] = np.nan
    corr = np.clip(corr, -1.0, 1.0)
    iu = np.triu_indices(n, k=1)
    corr[(iu[1], iu[0])] = corr[iu]
    np.fill_diagonal(corr, 1.0)
    return corr


def compute_pearson_connectivity(
    roi_timeseries: np.ndarray,
    roi_ids: Sequence[int],
    labels: Optional[Sequence[str]] = None,
) -> ConnectivityMatrix:
    """Compute a Pearson correlation connectivity matrix for ROI signals.

    Parameters
    ----------
    roi_timeseries : np.ndarray
        Array of shape (T, R), typically the standardized series.
    roi_ids : Sequence[int]
        Atlas ids of the columns.  Length must equal ``R``.
    labels : Sequence[str], optional
        Names for each ROI.  Defaults to ``ROI-<id>``.

    Returns
    -------
    ConnectivityMatrix
        Dataclass containing the correlation matrix and ROI metadata.
    """
    ts = np.asarray(roi_timeseries, dtype=float)
    if ts.ndim != 2:
        raise ValueError("roi_timeseries must be a 2D array of shape (T, N_ROI)")
    ids: List[int] = [int(i) for i in roi_ids]
    if len(ids) != ts.shape[1]:
        raise ValueError("Number of ROI ids must match number of columns in roi_timeseries")
    if labels is None:
        labels = [f'ROI-{i}' for i in ids]
    elif len(labels) != len(ids):
        raise ValueError("Number of labels must match number of columns in roi_timeseries")
    return ConnectivityMatrix(
        matrix=pearson_matrix(ts), roi_ids=ids, labels=list(labels), method='pearson'
    )


class CorrelationEngine:
    """Pairwise Pearson correlation between ROI time series."""

    def compute(
        self,
        roi_timeseries: np.ndarray,
        roi_ids: Sequence[int],
        labels: Optional[Sequence[str]] = None,
    ) -> ConnectivityMatrix:
        return compute_pearson_connectivity(roi_timeseries, roi_ids, labels)


__all__ = [
    'ConnectivityMatrix',
    'CorrelationEngine',
    'compute_pearson_connectivity',
    'pearson_matrix',
]
