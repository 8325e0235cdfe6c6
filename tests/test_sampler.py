import numpy as np
import pytest

from roifc.errors import EmptyAtlasError, InputVolumeError, WarningKind
from roifc.fc.sampler import VolumeSampler, find_roi_ids, sample_roi_timeseries


def _toy_volumes():
    labels = np.zeros((3, 2, 1))
    labels[0, :, 0] = 7
    labels[1, 0, 0] = 3
    labels[2, 1, 0] = np.nan
    func = np.zeros((3, 2, 1, 4))
    func[0, 0, 0] = [1, 2, 3, 4]
    func[0, 1, 0] = [3, 4, 5, 6]
    func[1, 0, 0] = [10, 20, 30, 40]
    return func, labels


def test_roi_ids_sorted_without_background_or_nan():
    _, labels = _toy_volumes()
    assert find_roi_ids(labels).tolist() == [3.0, 7.0]


def test_roi_means_in_ascending_id_order():
    func, labels = _toy_volumes()
    res = sample_roi_timeseries(func, labels)
    assert res.roi_ids.tolist() == [3, 7]
    assert res.timeseries.shape == (4, 2)
    assert np.allclose(res.timeseries[:, 0], [10, 20, 30, 40])
    assert np.allclose(res.timeseries[:, 1], [2, 3, 4, 5])
    assert res.warnings == []


def test_nan_voxels_are_ignored_and_all_nan_gives_nan():
    func, labels = _toy_volumes()
    func[0, 1, 0, 0] = np.nan
    func[1, 0, 0, 2] = np.nan
    res = sample_roi_timeseries(func, labels)
    assert res.timeseries[0, 1] == pytest.approx(1.0)
    assert np.isnan(res.timeseries[2, 0])
    assert not np.isnan(res.timeseries[3, 0])


def test_inputs_not_mutated():
    func, labels = _toy_volumes()
    func_copy, labels_copy = func.copy(), labels.copy()
    sample_roi_timeseries(func, labels)
    assert np.array_equal(func, func_copy)
    assert np.array_equal(labels, labels_copy, equal_nan=True)


def test_threaded_sampling_matches_sequential():
    rng = np.random.RandomState(0)
    labels = rng.randint(0, 6, size=(5, 5, 4)).astype(float)
    func = rng.randn(5, 5, 4, 12)
    seq = VolumeSampler(n_jobs=1).sample(func, labels)
    par = VolumeSampler(n_jobs=4).sample(func, labels)
    assert np.array_equal(seq.roi_ids, par.roi_ids)
    assert np.array_equal(seq.timeseries, par.timeseries)


def test_grid_mismatch_warns_and_samples_overlap():
    func, labels = _toy_volumes()
    bigger = np.zeros((4, 2, 1))
    bigger[:3] = labels
    bigger[3, 0, 0] = 9
    res = sample_roi_timeseries(func, bigger)
    assert [w.kind for w in res.warnings] == [WarningKind.GRID_MISMATCH]
    assert res.roi_ids.tolist() == [3, 7, 9]
    assert np.allclose(res.timeseries[:, 1], [2, 3, 4, 5])
    assert np.all(np.isnan(res.timeseries[:, 2]))


def test_three_dimensional_functional_is_single_timepoint():
    func, labels = _toy_volumes()
    res = sample_roi_timeseries(func[..., 0], labels)
    assert res.timeseries.shape == (1, 2)


def test_empty_atlas_is_fatal():
    func, _ = _toy_volumes()
    with pytest.raises(EmptyAtlasError):
        sample_roi_timeseries(func, np.zeros((3, 2, 1)))


def test_malformed_volumes_are_fatal():
    func, labels = _toy_volumes()
    with pytest.raises(InputVolumeError):
        sample_roi_timeseries(func, labels[..., 0])
    with pytest.raises(InputVolumeError):
        sample_roi_timeseries(func[0, 0], labels)


def test_singleton_fourth_axis_atlas_is_accepted():
    func, labels = _toy_volumes()
    res = sample_roi_timeseries(func, labels[..., np.newaxis])
    assert res.roi_ids.tolist() == [3, 7]
    assert np.allclose(res.timeseries, sample_roi_timeseries(func, labels).timeseries)
    assert res.warnings == []
    with pytest.raises(InputVolumeError):
        sample_roi_timeseries(func, np.stack([labels, labels], axis=-1))
