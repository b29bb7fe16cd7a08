from minibatch_mle.estimator import (
    minibatch_mle,
    minibatch_ml_indep_ts,
    iterative_minibatch_mle,
)
from minibatch_mle.trainer import MinibatchTrainer, TrainingState
from minibatch_mle.config import TrainingConfig
from minibatch_mle.result import ResultMLE
from minibatch_mle.simulator import ODESimulator
from minibatch_mle.loss import LossPath, MinibatchLoss, SingleShootingLoss, default_loss
from minibatch_mle.optimizers import Adam, BFGS, get_optimizer
from minibatch_mle.ranges import get_ranges, group_ranges
from minibatch_mle.series import concatenate_series, regroup_predictions
from minibatch_mle.initialisation import init_from_data, init_from_previous
from minibatch_mle.exceptions import ShapeMismatchError, DimensionMismatchError
from minibatch_mle.interface import (
    ModelConfig,
    LV,
    lv_problem,
    lorenz_problem,
    pyridine_problem,
    generate_data,
    estimate,
)
from minibatch_mle.plotting import plot_convergence

__module_name__ = __name__
