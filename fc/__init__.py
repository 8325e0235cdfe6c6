"""
roifc.fc
========

This subpackage contains the components that turn a functional volume
and an atlas into ROI time series, a functional connectivity matrix and
a report of highly correlated ROI pairs.  Each stage lives in its own
module and only consumes the output of the previous one.

Modules
-------

sampler
    Defines :class:`VolumeSampler` and :func:`sample_roi_timeseries`
    for averaging voxel signals within each atlas region.

standardize
    Defines :class:`Standardizer` for per-ROI z-scoring across time.

connectivity
    Defines the :class:`ConnectivityMatrix` dataclass and the Pearson
    :class:`CorrelationEngine`.

pairs
    Defines :class:`PairReporter` which thresholds the matrix at
    ``mean + k * std`` and labels the surviving pairs.

io
    Helpers to save and reload series, matrices and pair tables.

analyzer
    Provides :class:`FCAnalyzer`, a convenience class running all
    stages in one call.
"""

from .sampler import SamplingResult, VolumeSampler, find_roi_ids, sample_roi_timeseries
from .standardize import Standardizer, zscore_timeseries
from .connectivity import ConnectivityMatrix, CorrelationEngine, compute_pearson_connectivity
from .pairs import (
    PairRecord,
    PairReport,
    PairReporter,
    ThresholdStats,
    compute_threshold,
    report_high_fc_pairs,
    save_pair_table,
)
from .analyzer import FCAnalyzer, FCResult

__all__ = [
    'SamplingResult',
    'VolumeSampler',
    'find_roi_ids',
    'sample_roi_timeseries',
    'Standardizer',
    'zscore_timeseries',
    'ConnectivityMatrix',
    'CorrelationEngine',
    'compute_pearson_connectivity',
    'PairRecord',
    'PairReport',
    'PairReporter',
    'ThresholdStats',
    'compute_threshold',
    'report_high_fc_pairs',
    'save_pair_table',
    'FCAnalyzer',
    'FCResult',
]
