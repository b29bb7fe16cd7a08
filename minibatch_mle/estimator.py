"""
Maximum-likelihood parameter estimation with minibatching.

Example:
>>> sim = ODESimulator(ode)
>>> res = minibatch_mle(sim, data_set, tsteps, p_init, group_size=10)
>>> res.p_trained
"""
from typing import List, Optional, Sequence

import numpy as np

from .config import TrainingConfig
from .initialisation import flatten_u0s, init_from_previous
from .ranges import get_ranges
from .result import ResultMLE
from .series import concatenate_series, regroup_predictions
from .simulator import ODESimulator
from .trainer import MinibatchTrainer
from .utils import printyellow


def minibatch_mle(
    simulator: ODESimulator,
    data_set: np.ndarray,
    tsteps: Sequence[float],
    p_init: Sequence[float],
    group_size: int,
    config: Optional[TrainingConfig] = None,
    u0s_init: Optional[np.ndarray] = None,
) -> ResultMLE:
    """Fit *p_init* and the segment initial conditions to *data_set*.

    The series is split into overlapping segments of *group_size* points.
    With ``group_size - 1 >= len(tsteps)`` this is plain MLE with the
    initial state estimated.
    """
    config = config or TrainingConfig()
    data_set = np.atleast_2d(np.asarray(data_set, dtype=float))
    datasize = data_set.shape[1]
    if group_size - 1 >= datasize and config.verbose:
        printyellow(
            f"WARNING: group_size={group_size} exceeds #points={datasize}; "
            "fitting the whole series at once."
        )
    ranges = get_ranges(group_size, datasize)
    trainer = MinibatchTrainer(
        simulator, data_set, tsteps, ranges, p_init, config, u0s_init=u0s_init
    )
    return trainer.train()


def minibatch_ml_indep_ts(
    simulator: ODESimulator,
    data_sets: Sequence[np.ndarray],
    tsteps: Sequence[Sequence[float]],
    p_init: Sequence[float],
    group_size: int,
    config: Optional[TrainingConfig] = None,
) -> ResultMLE:
    """Same as :func:`minibatch_mle` for independent time series.

    ``data_sets[i]`` is observed at ``tsteps[i]``. The series share the
    parameters but are never tied by a continuity penalty, whatever
    ``config.continuity_term`` says. In the result, ``pred[i]`` and
    ``ranges[i]`` are the segment predictions and ranges of series ``i``.
    """
    config = (config or TrainingConfig()).without_continuity()
    cat = concatenate_series(data_sets, tsteps, group_size)

    trainer = MinibatchTrainer(simulator, cat.data, cat.tsteps, cat.ranges, p_init, config)
    res = trainer.train()

    return ResultMLE(
        minloss=res.minloss,
        p_trained=res.p_trained,
        p_true=res.p_true,
        p_labs=res.p_labs,
        pred=regroup_predictions(res.pred, cat.counts),
        ranges=cat.ranges_per_series,
        losses=res.losses,
        param_errors=res.param_errors,
    )


def iterative_minibatch_mle(
    simulator: ODESimulator,
    data_set: np.ndarray,
    tsteps: Sequence[float],
    p_init: Sequence[float],
    group_sizes: Sequence[int],
    optimizers_array: Sequence[list],
    maxiters_array: Optional[Sequence[List[int]]] = None,
    config: Optional[TrainingConfig] = None,
) -> List[ResultMLE]:
    """Minibatch MLE over successive *group_sizes*.

    Round ``i`` trains with ``optimizers_array[i]`` (and
    ``maxiters_array[i]``, defaulting to ``config.maxiters``), its initial
    conditions taken from the predictions of the last accepted round. A round
    is accepted when its loss improves on the last accepted one, or is below
    ``config.threshold``; the first rejected round ends the iteration.

    Returns every accepted result, in order. Independent time series are not
    supported.
    """
    config = config or TrainingConfig()
    if len(group_sizes) != len(optimizers_array):
        raise ValueError(
            f"Got {len(group_sizes)} group sizes but {len(optimizers_array)} optimizer lists."
        )
    if maxiters_array is None:
        maxiters_array = [config.maxiters] * len(group_sizes)
    elif len(maxiters_array) != len(group_sizes):
        raise ValueError(
            f"Got {len(group_sizes)} group sizes but {len(maxiters_array)} maxiters lists."
        )

    data_set = np.atleast_2d(np.asarray(data_set, dtype=float))
    datasize = data_set.shape[1]

    # Round zero: the data themselves, as one segment
    res = ResultMLE(
        minloss=np.inf, p_trained=np.asarray(p_init, dtype=float),
        pred=[data_set], ranges=[range(0, datasize)],
    )
    results: List[ResultMLE] = []
    for group_size, optimizers, maxiters in zip(group_sizes, optimizers_array, maxiters_array):
        if config.verbose:
            print(f"***************\nIterative training with group size {group_size}\n***************")
        ranges = get_ranges(group_size, datasize)
        u0s_init = init_from_previous(res.pred, res.ranges, ranges)
        round_config = config.replace(optimizers=optimizers, maxiters=maxiters)
        trainer = MinibatchTrainer(
            simulator, data_set, tsteps, ranges, p_init, round_config,
            u0s_init=flatten_u0s(u0s_init),
        )
        tempres = trainer.train()
        if tempres.minloss < res.minloss or tempres.minloss < config.threshold:
            results.append(tempres)
            res = tempres
        else:
            if config.verbose:
                printyellow(
                    f"Loss {tempres.minloss:.4g} with group size {group_size} does not "
                    f"improve on {res.minloss:.4g}; stopping."
                )
            break
    return results
