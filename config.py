"""
roifc.config
============

Configuration data classes for a connectivity run.  The primary class
:class:`AnalysisConfig` collects the parameters of every stage (ROI
sampling, standardization, pair thresholding and output writing) and
offers basic validation so that inconsistent options are rejected
before any volume is read.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError


DEFAULT_LABEL_FILENAME = 'HarvardOxford-Cortical.xml'


@dataclass
class AnalysisConfig:
    """Configuration options for ROI time series and FC reporting.

    Attributes
    ----------
    k_std : float, optional
        Number of standard deviations above the mean off-diagonal
        correlation a pair must reach to be reported.  May be negative.
        Defaults to 1.0.
    ddof : int, optional
        Delta degrees of freedom of the standard deviation used for
        z-scoring.  ``1`` (sample standard deviation, the default) or
        ``0`` (population).
    n_jobs : int, optional
        Number of worker threads used to average ROI signals.  ``1``
        runs sequentially.
    unique_pairs : bool, optional
        If True only the upper triangle (i < j) of the thresholded
        matrix is reported.  By default both (i, j) and (j, i) appear.
    upper_triangle_statistics : bool, optional
        If True the threshold mean/std are computed over the upper
        triangle only.  By default every off-diagonal cell of the full
        matrix contributes, so each pair is counted twice.
    label_path : str | None, optional
        Label dictionary source (FSL XML, TSV/CSV or text lookup table).
    base_path : str | None, optional
        Project root searched for the default Harvard-Oxford label file
        when ``label_path`` is not given.
    label_filename : str, optional
        File name looked up by the default label search.
    save_dir : str | None, optional
        Directory receiving the CSV/NPY outputs.  Nothing is written
        when ``None``.
    prefix : str, optional
        Prefix prepended to every output file name.
    save_table : bool, optional
        Write the high-FC pair table.  Defaults to True.
    save_matrices : bool, optional
        Write time series, ROI ids and the FC matrix.  Defaults to True.
    """

    k_std: float = 1.0
    ddof: int = 1
    n_jobs: int = 1
    unique_pairs: bool = False
    upper_triangle_statistics: bool = False
    label_path: Optional[str] = None
    base_path: Optional[str] = None
    label_filename: str = DEFAULT_LABEL_FILENAME
    save_dir: Optional[str] = None
    prefix: str = ''
    save_table: bool = True
    save_matrices: bool = True

    def validate(self) -> None:
        """Check option consistency.

        Raises
        ------
        ConfigurationError
            If ``ddof`` or ``n_jobs`` are out of range or ``k_std`` is
            not a finite number.
        """
        if self.ddof not in (0, 1):
            raise ConfigurationError("ddof must be 0 (population) or 1 (sample)")
        if self.n_jobs < 1:
            raise ConfigurationError("n_jobs must be a positive integer")
        try:
            k = float(self.k_std)
        except (TypeError, ValueError):
            raise ConfigurationError(f"k_std must be a number, got {self.k_std!r}") from None
        if not math.isfinite(k):
            raise ConfigurationError("k_std must be finite")
