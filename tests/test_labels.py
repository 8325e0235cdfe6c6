from pathlib import Path

from roifc.errors import WarningKind
from roifc.labels import (
    LabelDictionary,
    find_label_file,
    load_label_dictionary,
)


HO_XML = """<?xml version="1.0" encoding="ISO-8859-1"?>
<atlas version="1.0">
  <header>
    <name>Harvard-Oxford Cortical Structural Atlas</name>
    <type>Probabilistic</type>
  </header>
  <data>
    <label index="0" x="48" y="94" z="35">Frontal Pole</label>
    <label index="1" x="25" y="70" z="32">Insular Cortex</label>
    <label index="2" x="33" y="84" z="62">Superior Frontal Gyrus</label>
  </data>
</atlas>
"""


def test_dictionary_is_ordered_and_falls_back():
    labels = LabelDictionary([(12, 'C'), (3, 'A'), (7, 'B')])
    assert list(labels) == [3, 7, 12]
    assert labels[7] == 'B'
    assert labels.name_for(7) == 'B'
    assert labels.name_for(99) == 'ROI-99'
    assert LabelDictionary().names_for([1, 2]) == ['ROI-1', 'ROI-2']


def test_fsl_xml_index_is_shifted_by_one(tmp_path: Path):
    path = tmp_path / 'HarvardOxford-Cortical.xml'
    path.write_text(HO_XML, encoding='ISO-8859-1')
    labels, warnings = load_label_dictionary(str(path))
    assert warnings == []
    assert dict(labels) == {
        1: 'Frontal Pole',
        2: 'Insular Cortex',
        3: 'Superior Frontal Gyrus',
    }


def test_xml_without_index_uses_position(tmp_path: Path):
    path = tmp_path / 'atlas.xml'
    path.write_text('<atlas><data><label>Left</label><label>Right</label></data></atlas>')
    labels, _ = load_label_dictionary(str(path))
    assert dict(labels) == {1: 'Left', 2: 'Right'}


def test_tsv_table(tmp_path: Path):
    path = tmp_path / 'labels.tsv'
    path.write_text('index\tname\n3\tThalamus\n7\tHippocampus\n')
    labels, warnings = load_label_dictionary(str(path))
    assert warnings == []
    assert dict(labels) == {3: 'Thalamus', 7: 'Hippocampus'}


def test_freesurfer_style_lookup_table(tmp_path: Path):
    path = tmp_path / 'lut.txt'
    path.write_text(
        '# id name r g b a\n'
        '17  Left-Hippocampus   220 216 20  0\n'
        '53  Right-Hippocampus  220 216 20  0\n'
        '100 Superior temporal gyrus\n'
    )
    labels, _ = load_label_dictionary(str(path))
    assert labels[17] == 'Left-Hippocampus'
    assert labels[53] == 'Right-Hippocampus'
    assert labels[100] == 'Superior temporal gyrus'


def test_missing_file_gives_empty_dictionary_and_warning(tmp_path: Path):
    labels, warnings = load_label_dictionary(str(tmp_path / 'nope.xml'))
    assert len(labels) == 0
    assert [w.kind for w in warnings] == [WarningKind.LABELS_UNAVAILABLE]


def test_unparseable_file_gives_warning(tmp_path: Path):
    path = tmp_path / 'broken.xml'
    path.write_text('<atlas><label>unclosed')
    labels, warnings = load_label_dictionary(str(path))
    assert len(labels) == 0
    assert [w.kind for w in warnings] == [WarningKind.LABELS_UNAVAILABLE]

    table = tmp_path / 'bad.csv'
    table.write_text('foo,bar\n1,2\n')
    labels, warnings = load_label_dictionary(str(table))
    assert len(labels) == 0
    assert warnings[0].kind == WarningKind.LABELS_UNAVAILABLE


def test_find_label_file_search_order(tmp_path: Path):
    base = tmp_path / 'project'
    atlas_dir = tmp_path / 'atlas'
    (base / 'Harvard Oxford Atlas').mkdir(parents=True)
    atlas_dir.mkdir()
    atlas = atlas_dir / 'HO_resliced.nii'
    beside = atlas_dir / 'HarvardOxford-Cortical.xml'
    beside.write_text(HO_XML)
    assert find_label_file(str(base), str(atlas)) == str(beside)

    preferred = base / 'Harvard Oxford Atlas' / 'HarvardOxford-Cortical.xml'
    preferred.write_text(HO_XML)
    assert find_label_file(str(base), str(atlas)) == str(preferred)

    assert find_label_file(None, None) is None
