"""
Staged minibatch training (multiple shooting).

Example:
>>> trainer = MinibatchTrainer(sim, data_set, tsteps, get_ranges(10, 100), p_init)
>>> res = trainer.train()
"""
from enum import Enum
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .config import TrainingConfig
from .initialisation import clamp_positive, flatten_u0s, init_from_data, unflatten_u0s
from .loss import LossPath, MinibatchLoss, build_loss
from .plotting import plot_convergence
from .result import ResultMLE
from .simulator import ODESimulator
from .utils import printgreen


class TrainingState(Enum):
    NOT_STARTED = "not started"
    RUNNING = "running"
    COMPLETED = "completed"
    EARLY_STOPPED = "early stopped"


class MinibatchTrainer:
    """Runs the optimizer schedule of a :class:`TrainingConfig` over theta.

    Parameters
    ----------
    simulator
        ODE model and integrator.
    data_set, tsteps
        Data *(n_obs, N)* and time stamps *(N,)*.
    ranges
        Segment ranges; a single range means plain (single-shooting) MLE
        with the initial state estimated.
    p_init
        Initial guess for the shared parameters.
    config
        Training options; defaults to ``TrainingConfig()``.
    u0s_init
        Initial conditions *(n_x, n_seg)* or flattened. Read off the data
        when omitted, which requires the data to be the states.

    The loss and parameter-error histories belong to the trainer and are
    only appended to.
    """

    def __init__(
        self,
        simulator: ODESimulator,
        data_set: np.ndarray,
        tsteps: Sequence[float],
        ranges: Sequence[range],
        p_init: Sequence[float],
        config: Optional[TrainingConfig] = None,
        u0s_init: Optional[np.ndarray] = None,
    ) -> None:
        self.simulator = simulator
        self.config = config or TrainingConfig()
        self.data_set = np.atleast_2d(np.asarray(data_set, dtype=float))
        self.tsteps = np.asarray(tsteps, dtype=float).ravel()
        self.ranges = list(ranges)
        self.n_x = simulator.n_x
        self.n_seg = len(self.ranges)

        self.p_init = np.asarray(p_init, dtype=float).ravel()
        if self.p_init.size != simulator.n_p:
            raise ValueError(
                f"p_init has {self.p_init.size} entries, the model has {simulator.n_p} parameters."
            )

        if u0s_init is None:
            u0s = init_from_data(self.data_set, self.ranges, self.n_x)
        else:
            u0s = np.asarray(u0s_init, dtype=float)
            if u0s.size != self.n_x * self.n_seg:
                raise ValueError(
                    f"u0s_init has {u0s.size} entries, expected "
                    f"{self.n_x} states x {self.n_seg} segments."
                )
            u0s = unflatten_u0s(u0s, self.n_x)
        if self.config.positive_states:
            u0s = clamp_positive(u0s, self.config.ic_floor)
        self.theta0 = np.concatenate([flatten_u0s(u0s), self.p_init])

        self.path = LossPath.for_ranges(self.ranges)
        self.loss: MinibatchLoss = build_loss(
            self.path,
            simulator,
            self.data_set,
            self.tsteps,
            self.ranges,
            loss_fn=self.config.loss_fn,
            ic_term=self.config.ic_term,
            continuity_term=self.config.continuity_term,
            positive_states=self.config.positive_states,
        )

        self.state = TrainingState.NOT_STARTED
        self.stage: Optional[int] = None
        self.losses: List[float] = []
        self.param_errors: List[float] = []

    @property
    def n_ic(self) -> int:
        """Number of initial-condition entries at the head of theta."""
        return self.n_x * self.n_seg

    def _log(self, msg: str) -> None:
        if self.config.verbose:
            print(msg)

    def _callback(self, theta: np.ndarray, loss: float, pred: List[np.ndarray]) -> bool:
        cfg = self.config
        self.losses.append(float(loss))
        p_trained = theta[self.n_ic:]
        if cfg.p_true is not None:
            self.param_errors.append(float(np.sum((p_trained - cfg.p_true) ** 2)))

        if len(self.losses) % cfg.info_per_its == 0:
            self._log(f"Current loss after {len(self.losses)} iterations: {loss}")
            if cfg.cb is not None:
                cfg.cb(self.param_errors, p_trained, self.losses, pred, self.ranges)
            if cfg.plotting:
                plot_convergence(
                    self.losses,
                    pred,
                    self.data_set,
                    self.ranges,
                    self.tsteps,
                    p_true=cfg.p_true,
                    p_labs=cfg.p_labs,
                    param_errors=self.param_errors,
                    p_trained=p_trained,
                )
                plt.show(block=False)

        if loss < cfg.threshold:
            if cfg.verbose:
                printgreen("Threshold met")
            self.state = TrainingState.EARLY_STOPPED
            return True
        return False

    def train(self) -> ResultMLE:
        if self.state is not TrainingState.NOT_STARTED:
            raise RuntimeError(f"Training already {self.state.value}; create a new trainer.")

        self._log(
            f"minibatch_mle with {self.tsteps.size} points and {self.n_seg} groups "
            f"({self.path.value} loss)."
        )
        self._log("***************\nTraining started\n***************")
        self.state = TrainingState.RUNNING

        theta = self.theta0.copy()
        for i, (opt, maxiter) in enumerate(self.config.schedule):
            if self.state is TrainingState.EARLY_STOPPED:
                break
            self.stage = i
            self._log(f"Running optimizer {getattr(opt, 'name', type(opt).__name__)}")
            theta = opt.minimize(self.loss, theta, self._callback, maxiter)

        if self.state is TrainingState.RUNNING:
            self.state = TrainingState.COMPLETED

        minloss, pred = self.loss(theta)
        self._log(f"Minimum loss: {minloss}")
        return ResultMLE(
            minloss=minloss,
            p_trained=np.asarray(theta[self.n_ic:], dtype=float),
            p_true=self.config.p_true,
            p_labs=self.config.p_labs,
            pred=pred,
            ranges=self.ranges,
            losses=self.losses,
            param_errors=self.param_errors,
        )
