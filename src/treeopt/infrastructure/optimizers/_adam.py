"""
Adam optimizer implementation.

This module provides Adam over parameter trees. The optimizer maintains a
first-moment tree, a second-moment tree and a scalar step counter.

Design notes
------------
- The step counter advances by exactly one per `update` call, independent
  of how many leaves the tree has.
- Bias correction is folded into the step size:
  ``step_size = lr * sqrt(1 - beta2^t) / (1 - beta1^t)``.
- The default (compatibility) second-moment recurrence reads the freshly
  updated *first* moment, ``v <- beta2 * m + (1 - beta2) * g^2``, instead of
  the previous second moment. Because `m` can be negative, `v` can become
  negative and the square root then yields NaN (NumPy emits a RuntimeWarning).
  ``canonical=True`` selects the textbook recurrence
  ``v <- beta2 * v + (1 - beta2) * g^2``.
- `beta1` and `beta2` are the only mutable hyperparameters. Assignments are
  range-checked; they must not be changed while a step is running.
- `decay` is validated and stored but never applied.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional, Tuple

from ..._log import get_logger
from ...domain._vector_space import IVectorSpace
from ._base import (
    TreeOptimizer,
    check_non_negative,
    check_unit_interval,
    warn_decay_not_applied,
)
from ._registry import register_optimizer
from ._state import AdamState

logger = get_logger(__name__)


@register_optimizer()
class Adam(TreeOptimizer):
    """
    Adam optimizer.

    Update rule
    -----------
    Let ``g`` be the gradient and ``t`` the step counter:

        m <- beta1 * m + (1 - beta1) * g
        v <- beta2 * m + (1 - beta2) * (g * g)        (compatibility)
        v <- beta2 * v + (1 - beta2) * (g * g)        (canonical=True)
        t <- t + 1

        step_size = lr * sqrt(1 - beta2^t) / (1 - beta1^t)
        params <- params - step_size * m / (sqrt(v) + eps)

    Parameters
    ----------
    learning_rate : float, optional
        Must be >= 0. Defaults to 1e-3.
    beta1, beta2 : float, optional
        Moment decay rates, each in [0, 1]. Defaults to 0.9 and 0.999.
    epsilon : float, optional
        Added to the denominator for numerical stability. Not range-checked.
        Defaults to 1e-8.
    decay : float, optional
        Weight decay. Must be >= 0. Accepted but not applied. Defaults to 0.
    canonical : bool, optional
        Use the textbook second-moment recurrence. Defaults to False.

    Raises
    ------
    InvalidHyperparameterError
        If any hyperparameter is outside its valid range.

    Notes
    -----
    With ``beta1 == 1`` the first bias correction is zero and `update` raises
    `ZeroDivisionError`.
    """

    _state_cls = AdamState

    def __init__(
        self,
        learning_rate: float = 1e-3,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
        decay: float = 0.0,
        *,
        canonical: bool = False,
    ) -> None:
        self._learning_rate = check_non_negative("learning_rate", learning_rate)
        self._beta1 = check_unit_interval("beta1", beta1)
        self._beta2 = check_unit_interval("beta2", beta2)
        self._epsilon = float(epsilon)
        self._decay = check_non_negative("decay", decay)
        self._canonical = bool(canonical)
        warn_decay_not_applied(type(self).__name__, self._decay)
        super().__init__()
        logger.debug("constructed %r", self)

    @property
    def beta1(self) -> float:
        return self._beta1

    @beta1.setter
    def beta1(self, value: float) -> None:
        self._beta1 = check_unit_interval("beta1", value)

    @property
    def beta2(self) -> float:
        return self._beta2

    @beta2.setter
    def beta2(self, value: float) -> None:
        self._beta2 = check_unit_interval("beta2", value)

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def decay(self) -> float:
        return self._decay

    @property
    def canonical(self) -> bool:
        return self._canonical

    def bias_corrections(self, step: Optional[int] = None) -> Tuple[float, float]:
        """
        Return ``(1 - beta1^t, 1 - beta2^t)``.

        Parameters
        ----------
        step : int, optional
            Step count ``t``. Defaults to the number of completed steps.
        """
        t = self._state.step if step is None else int(step)
        return 1.0 - self._beta1**t, 1.0 - self._beta2**t

    def update(
        self, params: IVectorSpace, gradient: IVectorSpace, state: AdamState
    ) -> Tuple[IVectorSpace, AdamState]:
        """
        Compute the next parameters and state. Arguments are not mutated.

        Raises
        ------
        ShapeMismatchError
            If `gradient` or the moment trees disagree with `params`.
        ZeroDivisionError
            If ``beta1 == 1``.
        """
        b1, b2 = self._beta1, self._beta2

        m, v = state.m, state.v
        if m is None or v is None:
            m = params.zeros_like() if m is None else m
            v = params.zeros_like() if v is None else v
            logger.debug("initialized Adam moments")

        m = b1 * m + (1.0 - b1) * gradient
        if self._canonical:
            v = b2 * v + (1.0 - b2) * (gradient * gradient)
        else:
            v = b2 * m + (1.0 - b2) * (gradient * gradient)

        t = state.step + 1
        bc1 = 1.0 - b1**t
        bc2 = 1.0 - b2**t
        step_size = self._learning_rate * math.sqrt(bc2) / bc1

        new_params = params - step_size * m / (v.sqrt() + self._epsilon)
        return new_params, AdamState(m=m, v=v, step=t)

    def get_config(self) -> Dict[str, Any]:
        return {
            "learning_rate": self._learning_rate,
            "beta1": self._beta1,
            "beta2": self._beta2,
            "epsilon": self._epsilon,
            "decay": self._decay,
            "canonical": self._canonical,
        }
