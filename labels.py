"""
labels
======

Human readable names for atlas regions.

A :class:`LabelDictionary` maps integer atlas ids (the voxel values of
the label volume) to display names.  It is built once per run from an
external label source and may legitimately be empty, in which case
every region is named ``ROI-<id>``.

Supported sources
-----------------

* FSL atlas XML files such as ``HarvardOxford-Cortical.xml``.  FSL
  numbers labels from 0 while the image stores ``index + 1``, so the
  dictionary id is ``index + 1``.  Labels without an ``index``
  attribute are numbered by their 1-based position in the file.
* TSV/CSV tables with an id column (``index``, ``id`` or
  ``label_id``) and a name column (``name``, ``label`` or ``region``).
* Plain text lookup tables, one ``<id> <name>`` entry per line
  (FreeSurfer LUT style); lines starting with ``#`` are ignored.

Missing or unparseable sources never abort a run: the loader returns an
empty dictionary together with a ``LABELS_UNAVAILABLE`` warning.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from .config import DEFAULT_LABEL_FILENAME
from .errors import AnalysisWarning, WarningKind, emit_warning


logger = logging.getLogger(__name__)

_ID_COLUMNS = ('index', 'id', 'label_id')
_NAME_COLUMNS = ('name', 'label', 'region')
HO_ATLAS_DIRNAME = 'Harvard Oxford Atlas'


def fallback_name(roi_id: int) -> str:
    """Synthetic name used when no label is known for ``roi_id``."""
    return f'ROI-{int(roi_id)}'


class LabelDictionary(Mapping):
    """Read-only mapping from atlas id to region name, ordered by id."""

    def __init__(self, entries: Optional[Iterable[Tuple[int, str]]] = None) -> None:
        items = dict(entries or ())
        self._names: Dict[int, str] = {
            int(k): str(items[k]) for k in sorted(items)
        }

    def __getitem__(self, roi_id: int) -> str:
        return self._names[int(roi_id)]

    def __iter__(self) -> Iterator[int]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f'LabelDictionary({len(self)} labels)'

    def name_for(self, roi_id: int) -> str:
        """Return the region name, or ``ROI-<id>`` if unknown or blank."""
        name = self._names.get(int(roi_id), '')
        name = name.strip()
        return name if name else fallback_name(roi_id)

    def names_for(self, roi_ids: Iterable[int]) -> List[str]:
        return [self.name_for(i) for i in roi_ids]


# ---------------------------------------------------------------------------
# parsers

def parse_fsl_xml(path: str) -> LabelDictionary:
    """Parse an FSL atlas XML file."""
    root = ET.parse(path).getroot()
    entries = []
    for pos, node in enumerate(root.iter('label'), start=1):
        text = (node.text or '').strip()
        index = node.get('index')
        roi_id = int(index) + 1 if index is not None else pos
        entries.append((roi_id, text))
    return LabelDictionary(entries)


def parse_label_table(path: str) -> LabelDictionary:
    """Parse a TSV/CSV label table with pandas."""
    df = pd.read_csv(path, sep=None, engine='python')
    columns = {c.lower().strip(): c for c in df.columns}
    id_col = next((columns[c] for c in _ID_COLUMNS if c in columns), None)
    name_col = next((columns[c] for c in _NAME_COLUMNS if c in columns), None)
    if id_col is None or name_col is None:
        raise ValueError(
            f"label table needs an id column {_ID_COLUMNS} and a name column {_NAME_COLUMNS}"
        )
    df = df[[id_col, name_col]].dropna()
    return LabelDictionary(
        (int(i), str(n)) for i, n in zip(df[id_col], df[name_col])
    )


def parse_lookup_table(path: str) -> LabelDictionary:
    """Parse a whitespace separated ``<id> <name>`` lookup table."""
    entries = []
    with open(path, encoding='utf-8') as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            parts = line.split(None, 1)
            if len(parts) < 2:
                raise ValueError(f"malformed lookup table line: {line!r}")
            # FreeSurfer LUTs append RGBA columns after the name
            name = parts[1].split()[0] if _has_rgba_tail(parts[1]) else parts[1]
            entries.append((int(parts[0]), name))
    return LabelDictionary(entries)


def _has_rgba_tail(rest: str) -> bool:
    tokens = rest.split()
    return len(tokens) == 5 and all(t.isdigit() for t in tokens[1:])


def load_label_dictionary(path: Optional[str]) -> Tuple[LabelDictionary, List[AnalysisWarning]]:
    """Build a :class:`LabelDictionary` from ``path``.

    Parameters
    ----------
    path : str | None
        Label source.  The parser is chosen from the file extension.

    Returns
    -------
    tuple
        ``(labels, warnings)``.  ``labels`` is empty and ``warnings``
        holds one ``LABELS_UNAVAILABLE`` entry when the source is
        missing or cannot be parsed.
    """
    if not path or not os.path.isfile(path):
        w = emit_warning(
            logger, WarningKind.LABELS_UNAVAILABLE,
            'Label file not found (%s). Using generic labels.', path,
        )
        return LabelDictionary(), [w]
    ext = os.path.splitext(path)[1].lower()
    try:
        if ext == '.xml':
            labels = parse_fsl_xml(path)
        elif ext in ('.tsv', '.csv'):
            labels = parse_label_table(path)
        else:
            labels = parse_lookup_table(path)
    except (ET.ParseError, ValueError, OSError, pd.errors.ParserError) as e:
        w = emit_warning(
            logger, WarningKind.LABELS_UNAVAILABLE,
            'Could not parse label file %s; using generic labels. %s', path, e,
        )
        return LabelDictionary(), [w]
    logger.info('Loaded %d labels from %s', len(labels), path)
    return labels, []


def find_label_file(
    base_path: Optional[str],
    atlas_path: Optional[str],
    filename: str = DEFAULT_LABEL_FILENAME,
) -> Optional[str]:
    """Locate the default atlas label file.

    The project layout ``<base_path>/Harvard Oxford Atlas/<filename>`` is
    tried first, then the directory containing the resliced atlas.  When
    neither exists the first candidate is returned so the missing path
    shows up in the resulting warning.
    """
    candidates = []
    if base_path:
        candidates.append(os.path.join(base_path, HO_ATLAS_DIRNAME, filename))
    if atlas_path:
        candidates.append(os.path.join(os.path.dirname(os.path.abspath(atlas_path)), filename))
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return candidates[0] if candidates else None


__all__ = [
    'LabelDictionary',
    'fallback_name',
    'parse_fsl_xml',
    'parse_label_table',
    'parse_lookup_table',
    'load_label_dictionary',
    'find_label_file',
]
