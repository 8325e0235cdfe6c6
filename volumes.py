"""
volumes
=======

Loading of the two imaging inputs of a connectivity run: a 4D
functional image and a 3D label (atlas) image resliced onto the same
voxel grid.  Both are read with :func:`nibabel.load` into floating
point arrays.  Any failure to locate or decode an image is fatal and
raised as :class:`~roifc.errors.InputVolumeError`.
"""

from __future__ import annotations

import logging
import os
from typing import Tuple

import nibabel as nib
import numpy as np

from .errors import ErrorKind, InputVolumeError


logger = logging.getLogger(__name__)


def load_volume(path: str) -> np.ndarray:
    """Read a NIfTI (or any nibabel supported) image into an array.

    Parameters
    ----------
    path : str
        Path to the image file.

    Returns
    -------
    np.ndarray
        Image data as returned by ``get_fdata()``.

    Raises
    ------
    InputVolumeError
        If the file does not exist or nibabel cannot read it.
    """
    if not path or not os.path.isfile(path):
        raise InputVolumeError(f"Volume not found: {path}", kind=ErrorKind.INPUT_MISSING)
    try:
        img = nib.load(path)
        data = np.asanyarray(img.get_fdata())
    except Exception as e:
        raise InputVolumeError(
            f"Could not read volume {path}: {e}", kind=ErrorKind.INPUT_UNREADABLE
        ) from e
    logger.debug('Loaded %s with shape %s', path, data.shape)
    return data


def load_inputs(functional_path: str, atlas_path: str) -> Tuple[np.ndarray, np.ndarray]:
    """Load the functional image and the resliced atlas.

    Returns
    -------
    tuple of np.ndarray
        ``(functional, labels)`` arrays of shape (X, Y, Z, T) and
        (X, Y, Z).
    """
    functional = load_volume(functional_path)
    labels = load_volume(atlas_path)
    return functional, labels


__all__ = ['load_volume', 'load_inputs']
