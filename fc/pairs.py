"""
roifc.fc.pairs
==============

Selection and labelling of highly correlated ROI pairs.

A pair ``(i, j)`` is reported when its correlation reaches

    threshold = mean(r_offdiag) + k * std(r_offdiag)

where the statistics are taken over the non-NaN off-diagonal cells of
the FC matrix and ``std`` is the sample standard deviation.

Compatibility notes
-------------------
By default the statistics use **every** off-diagonal cell of the full
matrix, so each unordered pair contributes twice, and the selection
enumerates the full matrix in row-major order, so a symmetric pair is
reported both as ``(i, j)`` and ``(j, i)``.  Both behaviours are kept
for compatibility with existing reports.  ``upper_triangle_statistics``
and ``unique_pairs`` switch to triangle-only semantics.

ROI indices in the report are 1-based ranks in ascending atlas-id
order.  They are translated to atlas ids through the ROI id list; an
index beyond the end of that list is clamped to its last entry and a
size-mismatch warning is emitted instead of failing.
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import AnalysisWarning, WarningKind, emit_warning
from ..labels import LabelDictionary
from .connectivity import ConnectivityMatrix
from .io import output_path


logger = logging.getLogger(__name__)

PAIR_COLUMNS = ['ROI_1', 'Label_1', 'ROI_2', 'Label_2', 'Correlation']


@dataclass(frozen=True)
class PairRecord:
    """One supra-threshold ROI pair.

    ``roi_index_1`` and ``roi_index_2`` are 1-based matrix indices.
    """

    roi_index_1: int
    label_1: str
    roi_index_2: int
    label_2: str
    correlation: float

    def as_row(self) -> Tuple[int, str, int, str, float]:
        return (self.roi_index_1, self.label_1, self.roi_index_2, self.label_2, self.correlation)


@dataclass
class ThresholdStats:
    """Mean, standard deviation and resulting threshold of the FC values."""

    mean: float
    std: float
    k: float
    threshold: float
    n_values: int


@dataclass
class PairReport:
    """Result of pair selection.

    Attributes
    ----------
    records : list of PairRecord
        Supra-threshold pairs in row-major order.
    stats : ThresholdStats
        Statistics the threshold was derived from.
    warnings : list of AnalysisWarning
        Recoverable problems met while building the report.
    """

    records: List[PairRecord]
    stats: ThresholdStats
    warnings: List[AnalysisWarning] = field(default_factory=list)

    @property
    def threshold(self) -> float:
        return self.stats.threshold

    def __len__(self) -> int:
        return len(self.records)

    def pairs(self) -> List[Tuple[int, int]]:
        """Return the (index_1, index_2) tuples of all records."""
        return [(r.roi_index_1, r.roi_index_2) for r in self.records]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([r.as_row() for r in self.records], columns=PAIR_COLUMNS)


# ---------------------------------------------------------------------------

def offdiagonal_values(matrix: np.ndarray, upper_triangle: bool = False) -> np.ndarray:
    """Return the finite off-diagonal values of ``matrix``.

    With ``upper_triangle=False`` both (i, j) and (j, i) are included.
    """
    masked = np.array(matrix, dtype=float)
    np.fill_diagonal(masked, np.nan)
    if upper_triangle:
        masked = masked[np.triu_indices(masked.shape[0], k=1)]
    values = masked[~np.isnan(masked)]
    return values.ravel()


def compute_threshold(
    matrix: np.ndarray,
    k: float,
    upper_triangle: bool = False,
) -> ThresholdStats:
    """Compute ``mean + k * std`` over the off-diagonal correlations.

    Fewer than two usable values leave the standard deviation, and
    hence the threshold, undefined (NaN).
    """
    values = offdiagonal_values(matrix, upper_triangle=upper_triangle)
    if values.size == 0:
        mean = np.nan
    else:
        mean = float(np.mean(values))
    if values.size < 2:
        std = np.nan
    else:
        std = float(np.std(values, ddof=1))
    return ThresholdStats(
        mean=mean, std=std, k=float(k), threshold=mean + float(k) * std, n_values=int(values.size)
    )


def select_pairs(
    matrix: np.ndarray,
    threshold: float,
    unique_pairs: bool = False,
) -> List[Tuple[int, int]]:
    """Return 0-based (i, j) cells with value >= threshold, row-major.

    The diagonal and NaN cells never qualify.
    """
    masked = np.array(matrix, dtype=float)
    np.fill_diagonal(masked, np.nan)
    if np.isnan(threshold):
        return []
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        hits = masked >= threshold
    if unique_pairs:
        hits = np.triu(hits, k=1)
    return [(int(i), int(j)) for i, j in np.argwhere(hits)]


def resolve_roi_id(index: int, roi_ids: Sequence[int]) -> int:
    """Map a 0-based matrix index to an atlas id.

    Indices beyond the id list are clamped to its last entry.  With an
    empty list the 1-based index itself is used as id.
    """
    if len(roi_ids) == 0:
        return index + 1
    return int(roi_ids[min(max(index, 0), len(roi_ids) - 1)])


def report_high_fc_pairs(
    fc_matrix: Union[ConnectivityMatrix, np.ndarray],
    k: float,
    roi_ids: Optional[Sequence[int]] = None,
    label_dict: Optional[LabelDictionary] = None,
    unique_pairs: bool = False,
    upper_triangle_statistics: bool = False,
) -> PairReport:
    """Select highly correlated ROI pairs and attach anatomical labels.

    Parameters
    ----------
    fc_matrix : ConnectivityMatrix or np.ndarray
        Square correlation matrix including its diagonal.
    k : float
        Number of standard deviations above the mean; may be negative.
    roi_ids : Sequence[int], optional
        Ascending atlas ids defining the ROI order.  Defaults to the ids
        stored in ``fc_matrix`` when it is a :class:`ConnectivityMatrix`.
    label_dict : LabelDictionary, optional
        Atlas id to name lookup.  Unknown ids are named ``ROI-<id>``.
    unique_pairs : bool, optional
        Report only i < j.
    upper_triangle_statistics : bool, optional
        Derive the threshold from the upper triangle only.

    Returns
    -------
    PairReport
        Records, threshold statistics and warnings.
    """
    if isinstance(fc_matrix, ConnectivityMatrix):
        if roi_ids is None:
            roi_ids = list(fc_matrix.roi_ids)
        matrix = np.asarray(fc_matrix.matrix, dtype=float)
    else:
        matrix = np.asarray(fc_matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"FC matrix must be square, got shape {matrix.shape}")
    roi_ids = [int(i) for i in (roi_ids if roi_ids is not None else [])]
    label_dict = label_dict if label_dict is not None else LabelDictionary()

    warns: List[AnalysisWarning] = []
    n = matrix.shape[0]
    if n != len(roi_ids):
        warns.append(emit_warning(
            logger, WarningKind.SIZE_MISMATCH,
            'FC is %dx%d but atlas has %d ROIs; label mapping may be wrong.',
            n, n, len(roi_ids),
        ))

    stats = compute_threshold(matrix, k, upper_triangle=upper_triangle_statistics)
    logger.info(
        'FC threshold %.4f (mean %.4f + %.2f * std %.4f over %d values)',
        stats.threshold, stats.mean, stats.k, stats.std, stats.n_values,
    )

    records = []
    for i, j in select_pairs(matrix, stats.threshold, unique_pairs=unique_pairs):
        id1 = resolve_roi_id(i, roi_ids)
        id2 = resolve_roi_id(j, roi_ids)
        records.append(PairRecord(
            roi_index_1=i + 1,
            label_1=label_dict.name_for(id1),
            roi_index_2=j + 1,
            label_2=label_dict.name_for(id2),
            correlation=float(matrix[i, j]),
        ))
    logger.info('%d ROI pairs at or above threshold', len(records))
    return PairReport(records=records, stats=stats, warnings=warns)


def save_pair_table(
    report: PairReport,
    output_dir: str,
    prefix: str = '',
    filename: str = 'high_fc_pairs.csv',
) -> Optional[AnalysisWarning]:
    """Write the pair table as CSV.

    Write failures are logged and returned as a ``WRITE_FAILED``
    warning; they are never raised.  The warning is also appended to
    ``report.warnings``.

    Returns
    -------
    AnalysisWarning | None
        ``None`` on success.
    """
    try:
        path = output_path(output_dir, filename, prefix)
        report.to_dataframe().to_csv(path, index=False)
    except OSError as e:
        w = emit_warning(logger, WarningKind.WRITE_FAILED, 'Could not save high-FC CSV: %s', e)
        report.warnings.append(w)
        return w
    logger.info('High-FC pairs saved in: %s', os.fspath(path))
    return None


class PairReporter:
    """Threshold an FC matrix and label the surviving ROI pairs.

    Parameters
    ----------
    k : float, optional
        Standard deviations above the mean.  Defaults to 1.0.
    unique_pairs : bool, optional
        Report each unordered pair once (i < j).
    upper_triangle_statistics : bool, optional
        Threshold statistics from the upper triangle only.
    """

    def __init__(
        self,
        k: float = 1.0,
        unique_pairs: bool = False,
        upper_triangle_statistics: bool = False,
    ) -> None:
        self.k = k
        self.unique_pairs = unique_pairs
        self.upper_triangle_statistics = upper_triangle_statistics

    def report(
        self,
        fc_matrix: Union[ConnectivityMatrix, np.ndarray],
        roi_ids: Optional[Sequence[int]] = None,
        label_dict: Optional[LabelDictionary] = None,
    ) -> PairReport:
        return report_high_fc_pairs(
            fc_matrix,
            self.k,
            roi_ids=roi_ids,
            label_dict=label_dict,
            unique_pairs=self.unique_pairs,
            upper_triangle_statistics=self.upper_triangle_statistics,
        )


__all__ = [
    'PAIR_COLUMNS',
    'PairRecord',
    'PairReport',
    'PairReporter',
    'ThresholdStats',
    'compute_threshold',
    'offdiagonal_values',
    'report_high_fc_pairs',
    'resolve_roi_id',
    'save_pair_table',
    'select_pairs',
]
