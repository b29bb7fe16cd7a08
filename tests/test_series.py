import numpy as np
import pytest

from minibatch_mle.exceptions import ShapeMismatchError
from minibatch_mle.ranges import get_ranges
from minibatch_mle.series import concatenate_series, regroup_predictions


def _series(n_rows, n_cols, start=0.0):
    data = np.arange(n_rows * n_cols, dtype=float).reshape(n_rows, n_cols) + start
    return data, np.linspace(0.0, 1.0, n_cols)


class TestConcatenateSeries:

    def test_second_series_offset_by_first_length(self):
        d1, t1 = _series(2, 5)
        d2, t2 = _series(2, 7, start=100.0)
        cat = concatenate_series([d1, d2], [t1, t2], group_size=3)

        assert cat.ranges[:2] == get_ranges(3, 5)
        assert cat.ranges[2:] == [range(5, 8), range(7, 10), range(9, 12)]
        for shifted, own in zip(cat.ranges[2:], get_ranges(3, 7)):
            assert shifted.start - own.start == 5

    def test_concatenated_data_and_time(self):
        d1, t1 = _series(2, 5)
        d2, t2 = _series(2, 7, start=100.0)
        cat = concatenate_series([d1, d2], [t1, t2], group_size=3)

        assert cat.data.shape == (2, 12)
        np.testing.assert_array_equal(cat.data[:, 5:], d2)
        np.testing.assert_array_equal(cat.tsteps, np.concatenate([t1, t2]))
        assert cat.counts == [2, 3]

    def test_ranges_per_series_are_unshifted(self):
        d1, t1 = _series(1, 5)
        d2, t2 = _series(1, 7)
        cat = concatenate_series([d1, d2], [t1, t2], group_size=3)
        assert cat.ranges_per_series == [get_ranges(3, 5), get_ranges(3, 7)]

    def test_shifted_ranges_index_the_right_data(self):
        d1, t1 = _series(1, 5)
        d2, t2 = _series(1, 7, start=100.0)
        cat = concatenate_series([d1, d2], [t1, t2], group_size=3)
        for shifted, own in zip(cat.ranges[2:], cat.ranges_per_series[1]):
            np.testing.assert_array_equal(
                cat.data[:, shifted.start:shifted.stop], d2[:, own.start:own.stop]
            )

    def test_count_mismatch_raises(self):
        d1, t1 = _series(1, 5)
        with pytest.raises(ShapeMismatchError, match="one time vector each"):
            concatenate_series([d1, d1], [t1], group_size=3)

    def test_row_mismatch_raises(self):
        d1, t1 = _series(1, 5)
        d2, t2 = _series(2, 5)
        with pytest.raises(ShapeMismatchError, match="rows"):
            concatenate_series([d1, d2], [t1, t2], group_size=3)

    def test_time_length_mismatch_raises(self):
        d1, _ = _series(1, 5)
        with pytest.raises(ShapeMismatchError, match="time points"):
            concatenate_series([d1], [np.linspace(0, 1, 4)], group_size=3)

    def test_shape_mismatch_is_value_error(self):
        assert issubclass(ShapeMismatchError, ValueError)


class TestRegroupPredictions:

    def test_split_by_counts(self):
        pred = [np.full((1, 3), i) for i in range(5)]
        grouped = regroup_predictions(pred, [2, 3])
        assert len(grouped) == 2
        assert [g[0, 0] for g in grouped[0]] == [0, 1]
        assert [g[0, 0] for g in grouped[1]] == [2, 3, 4]

    def test_wrong_total_raises(self):
        with pytest.raises(ShapeMismatchError):
            regroup_predictions([1, 2, 3], [1, 1])
