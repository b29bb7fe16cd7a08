"""
Gradient-based optimizers driven by a minibatch loss.

Every optimizer exposes

    minimize(objective, x0, callback, maxiters) -> x

where *objective* provides ``value_and_grad(x) -> (loss, grad, preds)`` and
``objective(x) -> (loss, preds)``, and ``callback(x, loss, preds)`` is called
once per iteration; returning ``True`` stops the optimizer.
"""
from typing import Callable, List

import numpy as np
import scipy.optimize as sci_opt

Callback = Callable[[np.ndarray, float, List[np.ndarray]], bool]


class Adam:
    """Adam with bias-corrected moment estimates."""

    name = "Adam"

    def __init__(
        self,
        lr: float = 0.01,
        beta1: float = 0.9,
        beta2: float = 0.999,
        eps: float = 1e-8,
    ) -> None:
        if lr <= 0:
            raise ValueError(f"Learning rate must be positive, got {lr}.")
        self.lr = lr
        self.beta1, self.beta2 = beta1, beta2
        self.eps = eps

    def __repr__(self) -> str:
        return f"Adam(lr={self.lr})"

    def minimize(self, objective, x0: np.ndarray, callback: Callback, maxiters: int) -> np.ndarray:
        x = np.array(x0, dtype=float)
        m = np.zeros_like(x)
        v = np.zeros_like(x)

        for it in range(1, int(maxiters) + 1):
            loss, grad, preds = objective.value_and_grad(x)
            if callback(x, loss, preds):
                break

            m = self.beta1 * m + (1 - self.beta1) * grad
            v = self.beta2 * v + (1 - self.beta2) * grad**2
            m_hat = m / (1 - self.beta1**it)
            v_hat = v / (1 - self.beta2**it)
            x = x - self.lr * m_hat / (np.sqrt(v_hat) + self.eps)

        return x


class BFGS:
    """SciPy BFGS.

    The initial inverse Hessian is the identity scaled so that the first
    step has norm *initial_stepnorm* (relative to ``||g0||_inf``).
    """

    name = "BFGS"

    def __init__(self, initial_stepnorm: float = 0.01, gtol: float = 1e-8) -> None:
        self.initial_stepnorm = initial_stepnorm
        self.gtol = gtol

    def __repr__(self) -> str:
        return f"BFGS(initial_stepnorm={self.initial_stepnorm})"

    def minimize(self, objective, x0: np.ndarray, callback: Callback, maxiters: int) -> np.ndarray:
        x0 = np.array(x0, dtype=float)
        options = {"maxiter": int(maxiters), "gtol": self.gtol}

        if self.initial_stepnorm is not None:
            _, g0, _ = objective.value_and_grad(x0)
            g_norm = np.linalg.norm(g0, np.inf)
            if np.isfinite(g_norm) and g_norm > 0:
                options["hess_inv0"] = np.eye(x0.size) * (self.initial_stepnorm / g_norm)

        def fun(x: np.ndarray):
            loss, grad, _ = objective.value_and_grad(x)
            return loss, grad

        def _callback(intermediate_result: sci_opt.OptimizeResult) -> None:
            x = np.asarray(intermediate_result.x, dtype=float)
            loss, preds = objective(x)
            if callback(x, loss, preds):
                raise StopIteration

        res = sci_opt.minimize(
            fun,
            x0=x0,
            jac=True,
            method="BFGS",
            callback=_callback,
            options=options,
        )
        return np.asarray(res.x, dtype=float)


def get_optimizer(name: str, **kwargs):
    """Optimizer by name: *"adam"* or *"bfgs"*."""
    _dispatch = {
        "adam": Adam,
        "bfgs": BFGS,
    }
    try:
        return _dispatch[name.lower()](**kwargs)
    except KeyError as exc:
        raise ValueError(f"Unknown optimizer '{name}'.") from exc
