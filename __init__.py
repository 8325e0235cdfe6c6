"""
roifc
=====

This package extracts region-of-interest (ROI) time series from an
atlas-aligned functional MRI run and summarises them as a functional
connectivity (FC) matrix and a list of highly correlated ROI pairs
annotated with anatomical labels.

Everything upstream of the two input volumes (slice timing, motion
correction, registration, reslicing the atlas onto the functional
grid) is expected to have been done by an external toolbox.  The
package starts from:

* a 4D functional image (X, Y, Z, T),
* a 3D integer label image on the same grid (0 = background),
* an optional label file mapping atlas ids to region names.

The key modules include:

* ``volumes`` – loading the input images with nibabel.
* ``labels`` – building the atlas id to region name lookup.
* ``fc`` – ROI sampling, z-scoring, Pearson FC and pair reporting.
* ``config`` – the :class:`AnalysisConfig` options dataclass.
* ``errors`` – fatal error classes and recoverable warning kinds.

See ``roifc.main`` for the command line interface.
"""

from .config import AnalysisConfig
from .errors import (
    AnalysisWarning,
    ConfigurationError,
    EmptyAtlasError,
    ErrorKind,
    InputVolumeError,
    RoiFCError,
    RunStatus,
    WarningKind,
)
from .labels import LabelDictionary, find_label_file, load_label_dictionary
from .volumes import load_inputs, load_volume
from .fc import (
    ConnectivityMatrix,
    CorrelationEngine,
    FCAnalyzer,
    FCResult,
    PairRecord,
    PairReport,
    PairReporter,
    SamplingResult,
    Standardizer,
    VolumeSampler,
    compute_pearson_connectivity,
    report_high_fc_pairs,
    sample_roi_timeseries,
    zscore_timeseries,
)

__version__ = '0.1.0'

__all__ = [
    'AnalysisConfig',
    'AnalysisWarning',
    'ConfigurationError',
    'EmptyAtlasError',
    'ErrorKind',
    'InputVolumeError',
    'RoiFCError',
    'RunStatus',
    'WarningKind',
    'LabelDictionary',
    'find_label_file',
    'load_label_dictionary',
    'load_inputs',
    'load_volume',
    'ConnectivityMatrix',
    'CorrelationEngine',
    'FCAnalyzer',
    'FCResult',
    'PairRecord',
    'PairReport',
    'PairReporter',
    'SamplingResult',
    'Standardizer',
    'VolumeSampler',
    'compute_pearson_connectivity',
    'report_high_fc_pairs',
    'sample_roi_timeseries',
    'zscore_timeseries',
]
