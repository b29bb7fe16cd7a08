from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np


def plot_convergence(
    losses: Sequence[float],
    pred: Sequence[np.ndarray],
    data_set: np.ndarray,
    ranges: Sequence[range],
    tsteps: np.ndarray,
    p_true: Optional[np.ndarray] = None,
    p_labs: Optional[List[str]] = None,
    param_errors: Optional[Sequence[float]] = None,
    p_trained: Optional[np.ndarray] = None,
):
    """Data vs segment predictions, loss history and, if known, parameter errors."""
    with_truth = p_true is not None and p_trained is not None
    fig, axes = plt.subplots(1, 3 if with_truth else 2, figsize=(12 if with_truth else 9, 4))
    ax_fit, ax_loss = axes[0], axes[1]

    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    data_set = np.atleast_2d(data_set)
    for i in range(data_set.shape[0]):
        ax_fit.scatter(tsteps, data_set[i], s=8, alpha=0.4, c=colors[i % len(colors)])
    for rng, p in zip(ranges, pred):
        p = np.atleast_2d(p)
        if p.shape[1] != len(rng):
            # failed segment
            continue
        for i in range(min(p.shape[0], data_set.shape[0])):
            ax_fit.plot(tsteps[rng.start:rng.stop], p[i], c=colors[i % len(colors)])
    ax_fit.set(xlabel="time", ylabel="states", title="Data vs segment predictions")

    ax_loss.semilogy(np.arange(1, len(losses) + 1), losses, label="loss")
    if param_errors:
        ax_loss.semilogy(np.arange(1, len(param_errors) + 1), param_errors, label="parameter error")
    ax_loss.set(xlabel="iteration", title="Convergence")
    ax_loss.legend(fontsize="small")

    if with_truth:
        ax_p = axes[2]
        idx = np.arange(len(p_true))
        ax_p.bar(idx - 0.2, p_true, width=0.4, label="true")
        ax_p.bar(idx + 0.2, p_trained, width=0.4, label="trained")
        ax_p.set_xticks(idx)
        ax_p.set_xticklabels(p_labs if p_labs is not None else [f"p{i}" for i in idx])
        ax_p.set(title="Parameters")
        ax_p.legend(fontsize="small")

    plt.tight_layout()
    return fig
