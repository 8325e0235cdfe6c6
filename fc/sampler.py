"""
roifc.fc.sampler
================

Reduction of a 4D functional volume to one mean time series per atlas
region.  The set of regions is the sorted list of distinct non-zero,
non-NaN values found in the label volume; this ordering defines the ROI
index used by every later stage.

Each ROI signal is the NaN-ignoring mean over the ROI's voxels at each
timepoint.  A timepoint where every voxel is NaN, or an ROI with no
voxel inside the sampled grid, yields NaN rather than an error.
"""

from __future__ import annotations

import logging
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from ..errors import (
    AnalysisWarning,
    EmptyAtlasError,
    ErrorKind,
    InputVolumeError,
    WarningKind,
    emit_warning,
)


logger = logging.getLogger(__name__)


@dataclass
class SamplingResult:
    """Raw ROI time series and the atlas ids they belong to.

    Attributes
    ----------
    timeseries : np.ndarray
        Array of shape (T, R); column ``r`` is the ROI with the
        ``r``-th smallest atlas id.
    roi_ids : np.ndarray
        Ascending integer atlas ids, length R.
    warnings : list of AnalysisWarning
        Recoverable problems met while sampling.
    """

    timeseries: np.ndarray
    roi_ids: np.ndarray
    warnings: List[AnalysisWarning] = field(default_factory=list)


def find_roi_ids(labels: np.ndarray) -> np.ndarray:
    """Return sorted distinct non-zero, non-NaN values of ``labels``."""
    values = np.unique(labels)
    values = values[~np.isnan(values)] if np.issubdtype(values.dtype, np.floating) else values
    values = values[values != 0]
    return values


def _as_4d(functional: np.ndarray) -> np.ndarray:
    if functional.ndim == 3:
        return functional[..., np.newaxis]
    if functional.ndim != 4:
        raise InputVolumeError(
            f"functional volume must be 3D or 4D, got shape {functional.shape}",
            kind=ErrorKind.MALFORMED_INPUT,
        )
    if functional.shape[-1] == 0:
        raise InputVolumeError(
            "functional volume has no timepoints", kind=ErrorKind.MALFORMED_INPUT
        )
    return functional


def _roi_mean(functional: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """NaN-ignoring mean over masked voxels, one value per timepoint."""
    voxels = functional[mask]  # (V, T)
    if voxels.shape[0] == 0:
        return np.full(functional.shape[-1], np.nan)
    with warnings.catch_warnings():
        # all-NaN timepoints legitimately produce NaN
        warnings.simplefilter('ignore', category=RuntimeWarning)
        return np.nanmean(voxels, axis=0)


def _common_grid(
    functional: np.ndarray, labels: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, List[AnalysisWarning]]:
    func_shape = functional.shape[:3]
    if func_shape == labels.shape:
        return functional, labels, []
    w = emit_warning(
        logger, WarningKind.GRID_MISMATCH,
        'Atlas/functional grid mismatch: functional %s vs atlas %s; '
        'sampling the overlapping region only. Ensure the atlas was resliced '
        'onto the functional grid.',
        func_shape, labels.shape,
    )
    nx, ny, nz = (min(a, b) for a, b in zip(func_shape, labels.shape))
    return functional[:nx, :ny, :nz, :], labels[:nx, :ny, :nz], [w]


def sample_roi_timeseries(
    functional: np.ndarray,
    labels: np.ndarray,
    n_jobs: int = 1,
) -> SamplingResult:
    """Compute the mean time course of every atlas region.

    Parameters
    ----------
    functional : np.ndarray
        Functional data of shape (X, Y, Z, T).  A 3D array is treated as
        a single timepoint.
    labels : np.ndarray
        Label volume of shape (X, Y, Z); 0 and NaN are background.  A
        trailing singleton axis, (X, Y, Z, 1), is dropped.
    n_jobs : int, optional
        Number of threads used to process ROIs.  Output order does not
        depend on this value.

    Returns
    -------
    SamplingResult
        Raw series of shape (T, R) with ascending atlas ids.

    Raises
    ------
    InputVolumeError
        If the volumes have unusable dimensions.
    EmptyAtlasError
        If the label volume contains no region.
    """
    functional = _as_4d(np.asanyarray(functional))
    labels = np.asanyarray(labels)
    if labels.ndim == 4 and labels.shape[3] == 1:
        # resliced atlases are often written as (X, Y, Z, 1)
        labels = labels.reshape(labels.shape[:3])
    if labels.ndim != 3:
        raise InputVolumeError(
            f"label volume must be 3D, got shape {labels.shape}",
            kind=ErrorKind.MALFORMED_INPUT,
        )
    logger.info('Functional data size: %s', functional.shape)
    logger.info('Atlas data size: %s', labels.shape)

    values = find_roi_ids(labels)
    if values.size == 0:
        raise EmptyAtlasError("label volume contains no non-background region")
    roi_ids = np.rint(values).astype(int)

    func_grid, label_grid, warns = _common_grid(functional, labels)

    def _extract(value: float) -> np.ndarray:
        return _roi_mean(func_grid, label_grid == value)

    if n_jobs > 1 and values.size > 1:
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            columns = list(executor.map(_extract, values))
    else:
        columns = [_extract(v) for v in values]

    timeseries = np.column_stack(columns).astype(float)
    logger.info('Extracted %d ROI time series over %d timepoints', roi_ids.size, timeseries.shape[0])
    return SamplingResult(timeseries=timeseries, roi_ids=roi_ids, warnings=warns)


class VolumeSampler:
    """Extract ROI mean time series from a functional volume.

    Parameters
    ----------
    n_jobs : int, optional
        Number of worker threads.  Defaults to 1.
    """

    def __init__(self, n_jobs: int = 1) -> None:
        self.n_jobs = n_jobs

    def sample(self, functional: np.ndarray, labels: np.ndarray) -> SamplingResult:
        return sample_roi_timeseries(functional, labels, n_jobs=self.n_jobs)


__all__ = [
    'SamplingResult',
    'VolumeSampler',
    'find_roi_ids',
    'sample_roi_timeseries',
]
