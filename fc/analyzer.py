"""
roifc.fc.analyzer
=================

This module provides a high level interface for the complete ROI
connectivity analysis.  The :class:`FCAnalyzer` class ties together the
lower level stages defined in :mod:`roifc.fc.sampler`,
:mod:`roifc.fc.standardize`, :mod:`roifc.fc.connectivity` and
:mod:`roifc.fc.pairs`, and optionally writes the outputs with the
helpers in :mod:`roifc.fc.io`.

Recoverable problems from every stage are collected into
:attr:`FCResult.warnings`; fatal input problems propagate as
:class:`~roifc.errors.RoiFCError` subclasses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..config import AnalysisConfig
from ..errors import AnalysisWarning, RunStatus, WarningKind, emit_warning, status_for
from ..labels import LabelDictionary, find_label_file, load_label_dictionary
from ..volumes import load_inputs
from . import io
from .connectivity import ConnectivityMatrix, CorrelationEngine
from .pairs import PairReport, PairReporter, save_pair_table
from .sampler import VolumeSampler
from .standardize import Standardizer


logger = logging.getLogger(__name__)


@dataclass
class FCResult:
    """All outputs of one analysis run.

    Attributes
    ----------
    raw : np.ndarray
        Raw ROI time series, shape (T, R).
    standardized : np.ndarray
        Z-scored ROI time series, shape (T, R).
    fc : ConnectivityMatrix
        ROI x ROI Pearson correlation matrix.
    roi_ids : np.ndarray
        Ascending atlas ids of the R regions.
    report : PairReport
        Supra-threshold ROI pairs.
    warnings : list of AnalysisWarning
        Recoverable problems from every stage, in order of occurrence.
    outputs : dict
        Paths of files written, keyed by output name.
    """

    raw: np.ndarray
    standardized: np.ndarray
    fc: ConnectivityMatrix
    roi_ids: np.ndarray
    report: PairReport
    warnings: List[AnalysisWarning] = field(default_factory=list)
    outputs: Dict[str, str] = field(default_factory=dict)

    @property
    def status(self) -> RunStatus:
        return status_for(self.warnings)

    def warnings_of(self, kind: WarningKind) -> List[AnalysisWarning]:
        return [w for w in self.warnings if w.kind == kind]


class FCAnalyzer:
    """Run ROI extraction, standardization, FC and pair reporting.

    Parameters
    ----------
    config : AnalysisConfig, optional
        Analysis options.  Defaults to :class:`AnalysisConfig()`.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or AnalysisConfig()
        self.config.validate()
        self.sampler = VolumeSampler(n_jobs=self.config.n_jobs)
        self.standardizer = Standardizer(ddof=self.config.ddof)
        self.engine = CorrelationEngine()
        self.reporter = PairReporter(
            k=self.config.k_std,
            unique_pairs=self.config.unique_pairs,
            upper_triangle_statistics=self.config.upper_triangle_statistics,
        )

    # -- in-memory analysis -----------------------------------------
    def run(
        self,
        functional: np.ndarray,
        labels: np.ndarray,
        label_dict: Optional[LabelDictionary] = None,
    ) -> FCResult:
        """Analyse volumes already held in memory.

        Parameters
        ----------
        functional : np.ndarray
            Functional data of shape (X, Y, Z, T).
        labels : np.ndarray
            Atlas label volume of shape (X, Y, Z).
        label_dict : LabelDictionary, optional
            Region names.  An empty dictionary yields ``ROI-<id>`` names.

        Returns
        -------
        FCResult
            Series, matrix, pair report and warnings.
        """
        label_dict = label_dict if label_dict is not None else LabelDictionary()
        sampled = self.sampler.sample(functional, labels)
        warns = list(sampled.warnings)

        standardized = self.standardizer.transform(sampled.timeseries)
        fc = self.engine.compute(
            standardized, sampled.roi_ids, label_dict.names_for(sampled.roi_ids)
        )
        report = self.reporter.report(fc, sampled.roi_ids, label_dict)
        warns.extend(report.warnings)

        result = FCResult(
            raw=sampled.timeseries,
            standardized=standardized,
            fc=fc,
            roi_ids=sampled.roi_ids,
            report=report,
            warnings=warns,
        )
        if self.config.save_dir:
            self._save(result)
        return result

    # -- file based analysis ----------------------------------------
    def run_files(self, functional_path: str, atlas_path: str) -> FCResult:
        """Load the volumes and label dictionary from disk and analyse them.

        The label source is ``config.label_path`` when set, otherwise
        the default Harvard-Oxford file is searched for under
        ``config.base_path`` and next to the atlas.
        """
        functional, labels = load_inputs(functional_path, atlas_path)
        label_path = self.config.label_path or find_label_file(
            self.config.base_path, atlas_path, self.config.label_filename
        )
        label_dict, label_warnings = load_label_dictionary(label_path)
        result = self.run(functional, labels, label_dict)
        result.warnings[:0] = label_warnings
        return result

    # -- persistence ------------------------------------------------
    def _save(self, result: FCResult) -> None:
        cfg = self.config
        if cfg.save_matrices:
            try:
                result.outputs['roi_timeseries'] = str(io.save_timeseries(
                    result.raw, result.roi_ids, cfg.save_dir, cfg.prefix))
                result.outputs['roi_timeseries_z'] = str(io.save_timeseries(
                    result.standardized, result.roi_ids, cfg.save_dir, cfg.prefix,
                    filename='roi_timeseries_z.csv'))
                result.outputs['roi_ids'] = str(io.save_roi_ids(
                    result.roi_ids, cfg.save_dir, cfg.prefix))
                result.outputs['fc_matrix'] = str(io.save_fc_matrix(
                    result.fc.matrix, cfg.save_dir, cfg.prefix))
            except OSError as e:
                result.warnings.append(emit_warning(
                    logger, WarningKind.WRITE_FAILED, 'Could not save FC outputs: %s', e))
        if cfg.save_table:
            failure = save_pair_table(result.report, cfg.save_dir, cfg.prefix)
            if failure is not None:
                result.warnings.append(failure)
            else:
                result.outputs['high_fc_pairs'] = str(
                    io.output_path(cfg.save_dir, 'high_fc_pairs.csv', cfg.prefix))


__all__ = ['FCAnalyzer', 'FCResult']
