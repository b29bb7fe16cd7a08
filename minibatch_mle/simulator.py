"""
ODE simulation through CasADi integrators.

Example:
>>> x, p = cs.MX.sym("x", 2), cs.MX.sym("p", 2)
>>> ode = cs.Function("ode", [x, p], [rhs])
>>> sim = ODESimulator(ode)
>>> X = sim.simulate([10.0, 5.0], [0.8, 0.3], np.linspace(0, 10, 101))
"""
from typing import Any, Dict, Optional, Sequence

import casadi as cs
import numpy as np


class ODESimulator:
    """Wraps a right-hand side *f(x, p) -> xdot* into trajectories on a grid.

    Parameters
    ----------
    ode
        CasADi function with inputs *(x, p)* and a single output *xdot*.
    plugin
        CasADi integrator plugin, e.g. *"cvodes"*, *"idas"*, *"rk"* or
        *"collocation"*.
    options
        Options forwarded to ``casadi.integrator``.

    Sensitivities of the trajectory with respect to the initial state and
    the parameters are provided by CasADi through the integrator, which makes
    :meth:`trajectory` usable inside differentiable expressions.
    """

    def __init__(
        self,
        ode: cs.Function,
        plugin: str = "cvodes",
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        if ode.n_in() != 2:
            raise ValueError(
                f"ode must take (x, p) as inputs, got {ode.n_in()} inputs."
            )
        self.ode = ode
        self.plugin = plugin
        self.options = options or {}
        self.n_x = int(ode.size1_in(0))
        self.n_p = int(ode.size1_in(1))

        x = cs.MX.sym("x", self.n_x)
        p = cs.MX.sym("p", self.n_p)
        self._dae = {"x": x, "p": p, "ode": ode(x, p)}

    def integrator(self, grid: Sequence[float], name: str = "F") -> cs.Function:
        """Integrator from ``grid[0]`` with outputs at ``grid[1:]``."""
        grid = np.asarray(grid, dtype=float).ravel()
        return cs.integrator(
            name, self.plugin, self._dae, float(grid[0]), grid[1:].tolist(), self.options
        )

    def trajectory(self, x0, p, grid: Sequence[float], name: str = "F"):
        """Trajectory *(n_x, len(grid))* whose first column is *x0*.

        *x0* and *p* may be symbolic, in which case so is the result.
        """
        grid = np.asarray(grid, dtype=float).ravel()
        if grid.size < 2:
            return cs.reshape(x0, self.n_x, 1)
        xf = self.integrator(grid, name)(x0=x0, p=p)["xf"]
        return cs.horzcat(x0, xf)

    def simulate(self, x0, p, grid: Sequence[float]) -> np.ndarray:
        """Numerical trajectory; solver failures raise ``RuntimeError``."""
        X = self.trajectory(cs.DM(np.asarray(x0, dtype=float)), cs.DM(np.asarray(p, dtype=float)), grid)
        return np.asarray(cs.DM(X).full())
