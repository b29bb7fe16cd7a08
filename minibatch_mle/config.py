from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence

import numpy as np

from .loss import LossFn, default_loss
from .optimizers import Adam, BFGS


def _default_optimizers() -> list:
    return [Adam(0.01), BFGS(initial_stepnorm=0.01)]


@dataclass
class TrainingConfig:
    """Options of one minibatch training call.

    Parameters
    ----------
    loss_fn
        *loss_fn(data, pred, ic_term)*; maps predicted states to the
        observables when the data are not the states themselves.
    optimizers, maxiters
        Training schedule: ``optimizers[i]`` runs for at most ``maxiters[i]``
        iterations, starting where ``optimizers[i - 1]`` stopped.
    continuity_term
        Weight of the segment boundary mismatch. Always 0 for independent
        time series, see :meth:`without_continuity`.
    ic_term
        Weight on the initial conditions inside *loss_fn*.
    verbose, plotting, info_per_its
        Print progress / plot convergence every *info_per_its* iterations.
    cb
        Called every *info_per_its* iterations as
        ``cb(param_errors, p_trained, losses, pred, ranges)``.
    p_true, p_labs
        Ground-truth parameters and their labels, for error tracking.
    threshold
        Training stops as soon as the loss goes below it.
    positive_states, ic_floor
        Negative initial conditions are replaced by *ic_floor* before
        training (and the single-shooting initial state enters as ``|u0|``).
        Disable for models whose states may legitimately be negative.
    """

    loss_fn: LossFn = default_loss
    optimizers: list = field(default_factory=_default_optimizers)
    maxiters: List[int] = field(default_factory=lambda: [1000, 200])
    continuity_term: float = 1.0
    ic_term: float = 1.0
    verbose: bool = True
    plotting: bool = False
    info_per_its: int = 50
    cb: Optional[Callable] = None
    p_true: Optional[Sequence[float]] = None
    p_labs: Optional[Sequence[str]] = None
    threshold: float = 1e-16
    positive_states: bool = True
    ic_floor: float = 1e-3

    def __post_init__(self) -> None:
        self.optimizers = list(self.optimizers)
        self.maxiters = [int(m) for m in self.maxiters]
        if len(self.optimizers) != len(self.maxiters):
            raise ValueError(
                f"Got {len(self.optimizers)} optimizers but {len(self.maxiters)} maxiters."
            )
        if self.info_per_its < 1:
            raise ValueError(f"info_per_its must be positive, got {self.info_per_its}.")
        if self.continuity_term < 0 or self.ic_term < 0:
            raise ValueError("continuity_term and ic_term must be non-negative.")
        if self.p_true is not None:
            self.p_true = np.asarray(self.p_true, dtype=float).ravel()
            if self.p_labs is not None and len(self.p_labs) != self.p_true.size:
                raise ValueError(
                    f"Got {len(self.p_labs)} labels for {self.p_true.size} true parameters."
                )

    @property
    def schedule(self) -> list:
        """``[(optimizer, maxiter), ...]`` in training order."""
        return list(zip(self.optimizers, self.maxiters))

    def replace(self, **changes) -> "TrainingConfig":
        return replace(self, **changes)

    def without_continuity(self) -> "TrainingConfig":
        """Copy with the continuity penalty switched off.

        Independent time series are never penalised for the jump at the
        point where they were stitched together.
        """
        return replace(self, continuity_term=0.0)
