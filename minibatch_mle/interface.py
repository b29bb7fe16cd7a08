from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import casadi as cs
import numpy as np

from .config import TrainingConfig
from .estimator import iterative_minibatch_mle
from .optimizers import Adam, BFGS
from .result import ResultMLE
from .simulator import ODESimulator
from .utils import timed


@dataclass
class ModelConfig:
    name: str
    build_ode: Callable[[], cs.Function]
    true_p: List[float]
    x0: np.ndarray
    p_init: List[float]
    state_labels: List[str]


# Example systems
def lv_problem() -> cs.Function:
    x1, x2 = cs.MX.sym("x1"), cs.MX.sym("x2")
    alpha, beta = cs.MX.sym("alpha"), cs.MX.sym("beta")
    rhs = cs.vertcat(alpha * x1 - beta * x1 * x2, 0.4 * x1 * x2 - 0.6 * x2)
    states = cs.vertcat(x1, x2)
    params = cs.vertcat(alpha, beta)
    return cs.Function("ode", [states, params], [rhs])


def lorenz_problem() -> cs.Function:
    x = cs.MX.sym("x")
    y = cs.MX.sym("y")
    z = cs.MX.sym("z")
    states = cs.vertcat(x, y, z)

    sigma = cs.MX.sym("sigma")
    rho = cs.MX.sym("rho")
    beta = cs.MX.sym("beta")
    params = cs.vertcat(sigma, rho, beta)

    rhs = cs.vertcat(
        sigma * (y - x),
        x * (rho - z) - y,
        x * y - beta * z
    )
    return cs.Function("ode_lorenz", [states, params], [rhs])


def pyridine_problem() -> cs.Function:
    A, B, C, D, E, F, G = [cs.MX.sym(n) for n in "ABCDEFG"]
    p = cs.MX.sym("p", 11)
    rhs = cs.vertcat(
        -p[0] * A + p[8] * B,
        p[0] * A - p[1] * B - p[2] * B * C + p[6] * D - p[8] * B
        + p[9] * D * F,
        p[1] * B - p[2] * B * C - 2 * p[3] * C * C - p[5] * C
        + p[7] * E + p[9] * D * F + 2 * p[10] * E * F,
        p[2] * B * C - p[4] * D - p[6] * D - p[9] * D * F,
        p[3] * C * C + p[4] * D - p[7] * E - p[10] * E * F,
        p[2] * B * C + p[3] * C * C + p[5] * C - p[9] * D * F
        - p[10] * E * F,
        p[5] * C + p[6] * D + p[7] * E,
    )
    states = cs.vertcat(A, B, C, D, E, F, G)
    return cs.Function("ode", [states, p], [rhs])


LV = ModelConfig(
    name="Lotka-Volterra",
    build_ode=lv_problem,
    true_p=[0.8, 0.3],
    x0=np.array([10.0, 5.0]),
    p_init=[0.5, 0.5],
    state_labels=["x1", "x2"],
)


def generate_data(
    simulator: ODESimulator,
    t_grid: np.ndarray,
    x0: np.ndarray,
    true_p: Sequence[float],
    noise_std: float = 0.01,
    seed: int = 42,
) -> Tuple[np.ndarray, np.ndarray]:
    """Clean and noisy trajectories, both of shape *(n_x, len(t_grid))*."""
    data = simulator.simulate(x0, true_p, t_grid)
    rng = np.random.default_rng(seed)
    meas = data + noise_std * rng.standard_normal(data.shape)
    return data, meas


@timed
def estimate(
    simulator: ODESimulator,
    t_grid: np.ndarray,
    meas: np.ndarray,
    p_init: Sequence[float],
    group_sizes: Sequence[int],
    p_true: Optional[Sequence[float]] = None,
    maxiters: Sequence[int] = (300, 100),
    verbose: bool = False,
) -> List[ResultMLE]:
    """Iterative minibatch MLE with an Adam then BFGS schedule per group size."""
    config = TrainingConfig(maxiters=list(maxiters), p_true=p_true, verbose=verbose)
    optimizers_array = [
        [Adam(0.01), BFGS(initial_stepnorm=0.01)] for _ in group_sizes
    ]
    return iterative_minibatch_mle(
        simulator,
        meas,
        t_grid,
        p_init,
        group_sizes,
        optimizers_array,
        config=config,
    )
