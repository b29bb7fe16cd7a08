"""
Minibatch (multiple-shooting) loss over the flat parameter vector.

Layout of *theta*: one block of *n_x* initial conditions per segment,
followed by the *n_p* shared parameters.
"""
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import casadi as cs
import numpy as np

from .initialisation import unflatten_u0s
from .simulator import ODESimulator


LossFn = Callable[[cs.DM, cs.MX, float], cs.MX]


def default_loss(data, pred, ic_term: float):
    """Mean squared error, plus *ic_term* times the MSE on the first time point.

    Must be written with CasADi operations: it is differentiated
    symbolically through the integrator.
    """
    loss = cs.sumsqr(data - pred) / data.numel()
    loss += ic_term * cs.sumsqr(data[:, 0] - pred[:, 0]) / data.size1()
    return loss


class LossPath(Enum):
    SEGMENTED = "segmented"
    SINGLE = "single"

    @classmethod
    def for_ranges(cls, ranges: Sequence[range]) -> "LossPath":
        return cls.SEGMENTED if len(ranges) > 1 else cls.SINGLE


class MinibatchLoss:
    """Sum of per-segment data fits plus a continuity penalty.

    Parameters
    ----------
    simulator
        Provides the (differentiable) trajectory of each segment.
    data_set, tsteps
        Data *(n_obs, N)* and their *N* time stamps.
    ranges
        Segment ranges; consecutive segments share their boundary index.
    loss_fn
        *loss_fn(data, pred, ic_term)*, a CasADi expression of *pred*.
    ic_term, continuity_term
        Weight of the initial-condition emphasis inside *loss_fn*, weight
        of ``||pred_i[:, -1] - u0_{i+1}||^2``.

    A segment whose simulation fails (``RuntimeError`` from CasADi, or a
    non-finite loss) makes the total loss ``inf`` with a zero gradient and
    an empty prediction for that segment. The failure is never raised, so
    the optimizer can move away from that region.
    """

    path = LossPath.SEGMENTED
    abs_ic = False

    def __init__(
        self,
        simulator: ODESimulator,
        data_set: np.ndarray,
        tsteps: Sequence[float],
        ranges: Sequence[range],
        loss_fn: LossFn,
        ic_term: float = 1.0,
        continuity_term: float = 1.0,
    ) -> None:
        self.simulator = simulator
        self.data_set = np.atleast_2d(np.asarray(data_set, dtype=float))
        self.tsteps = np.asarray(tsteps, dtype=float).ravel()
        if self.data_set.shape[1] != self.tsteps.size:
            raise ValueError(
                f"data_set has {self.data_set.shape[1]} time points but "
                f"tsteps has {self.tsteps.size}."
            )
        self.ranges = list(ranges)
        self.loss_fn = loss_fn
        self.ic_term = float(ic_term)
        self.continuity_term = float(continuity_term)
        self.n_x = simulator.n_x
        self.n_p = simulator.n_p
        self.n_seg = len(self.ranges)

        self._segments = [
            self._segment_function(i, rng) for i, rng in enumerate(self.ranges)
        ]
        # Last evaluation: (theta, loss, grad, preds)
        self._cache: Optional[Tuple[np.ndarray, float, np.ndarray, list]] = None

    @property
    def size(self) -> int:
        """Length of *theta*."""
        return self.n_x * self.n_seg + self.n_p

    def _segment_function(self, i: int, rng: range) -> cs.Function:
        x0 = cs.MX.sym("x0", self.n_x)
        p = cs.MX.sym("p", self.n_p)
        x_next = cs.MX.sym("x_next", self.n_x)

        start = cs.fabs(x0) if self.abs_ic else x0
        pred = self.simulator.trajectory(
            start, p, self.tsteps[rng.start:rng.stop], name=f"F_{i}"
        )
        data = cs.DM(self.data_set[:, rng.start:rng.stop])
        loss = self.loss_fn(data, pred, self.ic_term)
        if i < self.n_seg - 1 and self.continuity_term != 0.0:
            loss += self.continuity_term * cs.sumsqr(pred[:, -1] - x_next)

        return cs.Function(
            f"segment_{i}",
            [x0, p, x_next],
            [
                loss,
                cs.gradient(loss, x0),
                cs.gradient(loss, p),
                cs.gradient(loss, x_next),
                pred,
            ],
            ["x0", "p", "x_next"],
            ["loss", "grad_x0", "grad_p", "grad_x_next", "pred"],
        )

    def split(self, theta: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """*theta* -> (initial conditions *(n_x, n_seg)*, shared parameters)."""
        theta = np.asarray(theta, dtype=float).ravel()
        if theta.size != self.size:
            raise ValueError(f"Expected theta of length {self.size}, got {theta.size}")
        n_ic = self.n_x * self.n_seg
        return unflatten_u0s(theta[:n_ic], self.n_x), theta[n_ic:]

    def value_and_grad(self, theta: np.ndarray) -> Tuple[float, np.ndarray, List[np.ndarray]]:
        theta = np.asarray(theta, dtype=float).ravel()
        if self._cache is not None and np.array_equal(theta, self._cache[0]):
            _, loss, grad, preds = self._cache
            return loss, grad.copy(), list(preds)

        u0s, p = self.split(theta)
        n_ic = self.n_x * self.n_seg
        grad = np.zeros(self.size)
        grad_u0s = np.zeros((self.n_x, self.n_seg))
        preds: List[np.ndarray] = []
        total = 0.0
        failed = False

        for i, segment in enumerate(self._segments):
            x_next = u0s[:, i + 1] if i < self.n_seg - 1 else np.zeros(self.n_x)
            try:
                loss, g_x0, g_p, g_next, pred = segment(u0s[:, i], p, x_next)
                loss = float(loss)
            except RuntimeError:
                loss = np.inf
            if not np.isfinite(loss):
                failed = True
                preds.append(np.empty((self.n_x, 0)))
                continue

            total += loss
            grad_u0s[:, i] += np.array(g_x0).ravel()
            grad[n_ic:] += np.array(g_p).ravel()
            if i < self.n_seg - 1:
                grad_u0s[:, i + 1] += np.array(g_next).ravel()
            preds.append(np.array(pred))

        if failed:
            total, grad = np.inf, np.zeros(self.size)
        else:
            grad[:n_ic] = grad_u0s.reshape(-1, order="F")

        self._cache = (theta.copy(), total, grad.copy(), list(preds))
        return total, grad, preds

    def __call__(self, theta: np.ndarray) -> Tuple[float, List[np.ndarray]]:
        loss, _, preds = self.value_and_grad(theta)
        return loss, preds


class SingleShootingLoss(MinibatchLoss):
    """The whole series as one segment; no continuity penalty.

    With *positive_states* the initial condition enters as ``|u0|``.
    """

    path = LossPath.SINGLE

    def __init__(self, *args, positive_states: bool = True, **kwargs) -> None:
        self.abs_ic = positive_states
        super().__init__(*args, **kwargs)
        if self.n_seg != 1:
            raise ValueError(f"SingleShootingLoss needs exactly one range, got {self.n_seg}.")


def build_loss(
    path: LossPath,
    simulator: ODESimulator,
    data_set: np.ndarray,
    tsteps: Sequence[float],
    ranges: Sequence[range],
    loss_fn: LossFn = default_loss,
    ic_term: float = 1.0,
    continuity_term: float = 1.0,
    positive_states: bool = True,
) -> MinibatchLoss:
    _dispatch = {
        LossPath.SEGMENTED: lambda: MinibatchLoss(
            simulator, data_set, tsteps, ranges, loss_fn,
            ic_term=ic_term, continuity_term=continuity_term,
        ),
        LossPath.SINGLE: lambda: SingleShootingLoss(
            simulator, data_set, tsteps, ranges, loss_fn,
            ic_term=ic_term, continuity_term=0.0, positive_states=positive_states,
        ),
    }
    try:
        builder = _dispatch[path]
    except KeyError as exc:
        raise ValueError(f"Unknown loss path '{path}'.") from exc
    return builder()
