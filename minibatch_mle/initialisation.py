"""
Initial conditions of the shooting segments.

Cold start reads them off the data, warm start reads them off the
predictions of a previous training round.
"""
from typing import Sequence

import numpy as np

from .exceptions import DimensionMismatchError


def init_from_data(data_set: np.ndarray, ranges: Sequence[range], n_x: int) -> np.ndarray:
    """Data columns at the first index of every range, shape *(n_x, n_seg)*."""
    data_set = np.atleast_2d(np.asarray(data_set, dtype=float))
    if data_set.shape[0] != n_x:
        raise DimensionMismatchError(
            f"The training data has {data_set.shape[0]} rows but the model has "
            f"{n_x} state variables. The data probably holds observables rather "
            "than the states themselves; pass `u0s_init` explicitly in that case."
        )
    return data_set[:, [r[0] for r in ranges]].copy()


def init_from_previous(
    pred: Sequence[np.ndarray],
    ranges_pred: Sequence[range],
    ranges_new: Sequence[range],
) -> np.ndarray:
    """Warm start from the predictions of a previous round.

    For every new range, the previous segment containing its first index is
    looked up. Previous ranges are traversed from last to first: an index on
    a shared boundary is the *start* of the later segment, whose whole
    prediction depends on it, so that estimate is preferred.
    """
    n_x = np.atleast_2d(pred[0]).shape[0]
    u0s = np.zeros((n_x, len(ranges_new)))
    for i, rng in enumerate(ranges_new):
        idx = rng[0]
        for rng_pred, p in zip(reversed(ranges_pred), reversed(pred)):
            if idx in rng_pred:
                u0s[:, i] = np.atleast_2d(p)[:, rng_pred.index(idx)]
                break
        else:
            raise ValueError(f"Index {idx} is not covered by the previous ranges.")
    return u0s


def clamp_positive(u0s: np.ndarray, floor: float = 1e-3) -> np.ndarray:
    """Replace negative initial conditions by *floor*."""
    u0s = np.array(u0s, dtype=float)
    u0s[u0s < 0.0] = floor
    return u0s


def flatten_u0s(u0s: np.ndarray) -> np.ndarray:
    """*(n_x, n_seg)* -> segment-major flat vector (the head of theta)."""
    return np.asarray(u0s, dtype=float).reshape(-1, order="F")


def unflatten_u0s(theta_u0: np.ndarray, n_x: int) -> np.ndarray:
    return np.asarray(theta_u0, dtype=float).reshape(n_x, -1, order="F")
