"""
roifc.errors
============

Error and warning vocabulary shared by every stage of the analysis.

Two kinds of problems can occur while turning volumes into a
connectivity report:

* **Fatal** problems make any result misleading (a missing functional
  image, an atlas without a single labelled voxel).  They are raised as
  subclasses of :class:`RoiFCError`, each tagged with an
  :class:`ErrorKind`.
* **Recoverable** problems still allow a best-effort result (grids of
  different size, a label file that cannot be read).  They are never
  raised; instead an :class:`AnalysisWarning` is logged and attached to
  the returned result so callers can tell "finished cleanly" apart from
  "finished with warnings".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Categories of fatal errors."""

    INPUT_MISSING = 'input_missing'
    INPUT_UNREADABLE = 'input_unreadable'
    MALFORMED_INPUT = 'malformed_input'
    EMPTY_ATLAS = 'empty_atlas'
    INVALID_CONFIG = 'invalid_config'


class WarningKind(str, Enum):
    """Categories of recoverable problems."""

    GRID_MISMATCH = 'grid_mismatch'
    SIZE_MISMATCH = 'size_mismatch'
    LABELS_UNAVAILABLE = 'labels_unavailable'
    WRITE_FAILED = 'write_failed'


class RunStatus(str, Enum):
    """Outcome of a run that did not raise."""

    OK = 'ok'
    WARNINGS = 'warnings'


class RoiFCError(Exception):
    """Base class for fatal analysis errors."""

    kind: ErrorKind = ErrorKind.MALFORMED_INPUT

    def __init__(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class InputVolumeError(RoiFCError):
    """A required volume is missing, unreadable or has unusable dimensions."""


class EmptyAtlasError(RoiFCError):
    """The label volume contains no non-background region."""

    kind = ErrorKind.EMPTY_ATLAS


class ConfigurationError(RoiFCError, ValueError):
    """Invalid analysis configuration."""

    kind = ErrorKind.INVALID_CONFIG


@dataclass(frozen=True)
class AnalysisWarning:
    """A recoverable problem encountered during a run.

    Attributes
    ----------
    kind : WarningKind
        Category of the problem.
    message : str
        Human readable description.
    """

    kind: WarningKind
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


def emit_warning(
    logger: logging.Logger,
    kind: WarningKind,
    message: str,
    *args: object,
) -> AnalysisWarning:
    """Log ``message`` at WARNING level and return it as an :class:`AnalysisWarning`.

    ``message`` uses %-style placeholders like the logging module.
    """
    text = message % args if args else message
    logger.warning(text)
    return AnalysisWarning(kind=kind, message=text)


def status_for(warnings: List[AnalysisWarning]) -> RunStatus:
    return RunStatus.WARNINGS if warnings else RunStatus.OK


__all__ = [
    'ErrorKind',
    'WarningKind',
    'RunStatus',
    'RoiFCError',
    'InputVolumeError',
    'EmptyAtlasError',
    'ConfigurationError',
    'AnalysisWarning',
    'emit_warning',
    'status_for',
]
