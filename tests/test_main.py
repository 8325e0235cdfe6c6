import numpy as np
import pytest

from roifc.main import config_from_args, main, parse_args


def test_parse_args_defaults():
    args = parse_args(['func.nii', 'atlas.nii'])
    cfg = config_from_args(args)
    assert cfg.k_std == 1.0
    assert cfg.ddof == 1
    assert cfg.save_dir is None
    assert not cfg.unique_pairs


def test_no_save_overrides_output():
    args = parse_args(['f.nii', 'a.nii', '--output', 'out', '--no-save', '--k-std', '-0.5'])
    cfg = config_from_args(args)
    assert cfg.save_dir is None
    assert cfg.k_std == -0.5


def test_cli_end_to_end(tmp_path, capsys):
    nib = pytest.importorskip('nibabel')
    rng = np.random.RandomState(7)
    labels = np.zeros((2, 2, 2), dtype=np.int16)
    labels[0] = 1
    labels[1, 0] = 2
    labels[1, 1] = 3
    shared = rng.randn(30)
    func = np.zeros((2, 2, 2, 30))
    func[labels == 1] = shared
    func[labels == 2] = shared * 3.0
    func[labels == 3] = rng.randn(30)
    nib.save(nib.Nifti1Image(func, np.eye(4)), str(tmp_path / 'func.nii.gz'))
    nib.save(nib.Nifti1Image(labels, np.eye(4)), str(tmp_path / 'atlas.nii.gz'))

    out = tmp_path / 'out'
    code = main([
        str(tmp_path / 'func.nii.gz'), str(tmp_path / 'atlas.nii.gz'),
        '--output', str(out), '--unique-pairs', '--log-level', 'ERROR',
    ])
    assert code == 0
    printed = capsys.readouterr().out
    assert 'High-FC pairs: 1' in printed
    assert 'labels_unavailable' in printed
    assert (out / 'high_fc_pairs.csv').exists()
    assert (out / 'fc_matrix.npy').exists()


def test_cli_reports_fatal_errors(tmp_path, capsys):
    code = main([str(tmp_path / 'missing.nii'), str(tmp_path / 'atlas.nii'), '--log-level', 'ERROR'])
    assert code == 1
    assert 'Volume not found' in capsys.readouterr().err
