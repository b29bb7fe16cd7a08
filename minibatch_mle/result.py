from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np


@dataclass
class ResultMLE:
    """Outcome of one minibatch training call.

    For independent time series, ``pred`` and ``ranges`` hold one list per
    series and the ranges index into that series alone.
    """

    minloss: float
    p_trained: np.ndarray
    p_true: Optional[np.ndarray] = None
    p_labs: Optional[Sequence[str]] = None
    pred: list = field(default_factory=list)
    ranges: list = field(default_factory=list)
    losses: List[float] = field(default_factory=list)
    param_errors: List[float] = field(default_factory=list)

    @property
    def n_segments(self) -> int:
        return len(self.ranges)

    def __repr__(self) -> str:
        return (
            f"ResultMLE(minloss={self.minloss:.4g}, "
            f"p_trained={np.round(np.asarray(self.p_trained, dtype=float), 4)}, "
            f"segments={self.n_segments}, iterations={len(self.losses)})"
        )
