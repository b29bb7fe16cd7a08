import matplotlib

matplotlib.use("Agg")

import casadi as cs
import numpy as np
import pytest

from minibatch_mle import ODESimulator

K_TRUE = 0.5


def decay_ode() -> cs.Function:
    x = cs.MX.sym("x")
    k = cs.MX.sym("k")
    return cs.Function("ode", [x, k], [-k * x])


@pytest.fixture
def decay_sim():
    return ODESimulator(decay_ode(), options={"abstol": 1e-10, "reltol": 1e-10})


@pytest.fixture
def decay_data():
    """Exact samples of x' = -k x, x(0) = 1, on 20 points."""
    tsteps = np.linspace(0.0, 4.0, 20)
    return np.exp(-K_TRUE * tsteps)[None, :], tsteps
