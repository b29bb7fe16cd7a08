"""Stitching independent time series into one virtual series and back."""
from dataclasses import dataclass
from itertools import accumulate
from typing import List, Sequence

import numpy as np

from .exceptions import ShapeMismatchError
from .ranges import get_ranges, shift_ranges


@dataclass
class ConcatenatedSeries:
    data: np.ndarray
    ranges: List[range]
    tsteps: np.ndarray
    ranges_per_series: List[List[range]]

    @property
    def counts(self) -> List[int]:
        """Number of segments contributed by each series."""
        return [len(r) for r in self.ranges_per_series]


def concatenate_series(
    data_sets: Sequence[np.ndarray],
    tsteps: Sequence[np.ndarray],
    group_size: int,
) -> ConcatenatedSeries:
    """Concatenate independent series along the time axis.

    The ranges of series ``i`` are shifted by the total length of the
    series before it, so they index into the concatenated data. The
    unshifted ranges are kept in ``ranges_per_series``.
    """
    if len(data_sets) != len(tsteps):
        raise ShapeMismatchError(
            f"Independent time series must come with one time vector each: "
            f"got {len(data_sets)} data sets and {len(tsteps)} time vectors."
        )
    if not data_sets:
        raise ShapeMismatchError("At least one time series is required.")

    data_sets = [np.atleast_2d(np.asarray(d, dtype=float)) for d in data_sets]
    tsteps = [np.asarray(t, dtype=float).ravel() for t in tsteps]

    n_rows = data_sets[0].shape[0]
    for i, (d, t) in enumerate(zip(data_sets, tsteps)):
        if d.shape[0] != n_rows:
            raise ShapeMismatchError(
                f"Series {i} has {d.shape[0]} rows, series 0 has {n_rows}."
            )
        if d.shape[1] != t.size:
            raise ShapeMismatchError(
                f"Series {i} has {d.shape[1]} time points but {t.size} time steps."
            )

    sizes = [d.shape[1] for d in data_sets]
    ranges_per_series = [get_ranges(group_size, n) for n in sizes]
    offsets = [0, *accumulate(sizes)][:-1]

    ranges = []
    for rngs, offset in zip(ranges_per_series, offsets):
        ranges.extend(shift_ranges(rngs, offset))

    return ConcatenatedSeries(
        data=np.concatenate(data_sets, axis=1),
        ranges=ranges,
        tsteps=np.concatenate(tsteps),
        ranges_per_series=ranges_per_series,
    )


def regroup_predictions(pred: Sequence[np.ndarray], counts: Sequence[int]) -> List[list]:
    """Split a flat list of segment predictions into one list per series.

    >>> regroup_predictions(["a", "b", "c"], [2, 1])
    [['a', 'b'], ['c']]
    """
    if sum(counts) != len(pred):
        raise ShapeMismatchError(
            f"{len(pred)} segment predictions cannot be split into {list(counts)}."
        )
    bounds = [0, *accumulate(counts)]
    return [list(pred[lo:hi]) for lo, hi in zip(bounds[:-1], bounds[1:])]
