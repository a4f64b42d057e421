"""
Stochastic Gradient Descent (SGD) optimizer with momentum and Nesterov.

This module provides SGD over parameter trees. The optimizer keeps a single
velocity tree, shaped like the model's parameters on first use.

Design notes
------------
- The update works on whole trees through the vector-space algebra; there is
  no per-leaf bookkeeping.
- `decay` is validated and stored but the update rule never reads it.
  Constructing with a non-zero decay emits a `UserWarning`.
- The default (compatibility) non-Nesterov branch adds
  ``momentum * velocity - lr * g`` to the parameters even though `velocity`
  already contains ``-lr * g``. The learning-rate term is therefore applied
  twice compared with textbook heavy-ball momentum. ``canonical=True`` selects
  the textbook update ``params += velocity``.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from ..._log import get_logger
from ...domain._vector_space import IVectorSpace
from ._base import (
    TreeOptimizer,
    check_non_negative,
    warn_decay_not_applied,
)
from ._registry import register_optimizer
from ._state import SGDState

logger = get_logger(__name__)


@register_optimizer()
class SGD(TreeOptimizer):
    """
    Momentum / Nesterov SGD.

    Update rule
    -----------
    Given gradient ``g``, learning rate ``lr`` and momentum ``mu``:

        velocity <- mu * velocity - lr * g

        nesterov or canonical:  params <- params + velocity
        otherwise:              params <- params + mu * velocity - lr * g

    Parameters
    ----------
    learning_rate : float, optional
        Step size. Must be >= 0. Defaults to 0.01.
    momentum : float, optional
        Velocity decay coefficient. Must be >= 0. Defaults to 0.
    decay : float, optional
        Weight decay. Must be >= 0. Accepted but not applied. Defaults to 0.
    nesterov : bool, optional
        Use the look-ahead update ``params += velocity``. Defaults to False.
    canonical : bool, optional
        Use the textbook heavy-ball update for the non-Nesterov branch.
        Defaults to False (compatibility arithmetic).

    Raises
    ------
    InvalidHyperparameterError
        If `learning_rate`, `momentum` or `decay` is negative or NaN.
    """

    _state_cls = SGDState

    def __init__(
        self,
        learning_rate: float = 0.01,
        momentum: float = 0.0,
        decay: float = 0.0,
        nesterov: bool = False,
        *,
        canonical: bool = False,
    ) -> None:
        self._learning_rate = check_non_negative("learning_rate", learning_rate)
        self._momentum = check_non_negative("momentum", momentum)
        self._decay = check_non_negative("decay", decay)
        self._nesterov = bool(nesterov)
        self._canonical = bool(canonical)
        warn_decay_not_applied(type(self).__name__, self._decay)
        super().__init__()
        logger.debug("constructed %r", self)

    @property
    def momentum(self) -> float:
        return self._momentum

    @property
    def decay(self) -> float:
        return self._decay

    @property
    def nesterov(self) -> bool:
        return self._nesterov

    @property
    def canonical(self) -> bool:
        return self._canonical

    def update(
        self, params: IVectorSpace, gradient: IVectorSpace, state: SGDState
    ) -> Tuple[IVectorSpace, SGDState]:
        """
        Compute the next parameters and state. Arguments are not mutated.

        Raises
        ------
        ShapeMismatchError
            If `gradient` or `state.velocity` disagrees with `params`.
        """
        velocity = state.velocity
        if velocity is None:
            velocity = params.zeros_like()
            logger.debug("initialized SGD velocity")

        lr, mu = self._learning_rate, self._momentum
        velocity = mu * velocity - lr * gradient

        if self._nesterov or self._canonical:
            new_params = params + velocity
        else:
            new_params = params + mu * velocity - lr * gradient

        return new_params, SGDState(velocity=velocity)

    def get_config(self) -> Dict[str, Any]:
        return {
            "learning_rate": self._learning_rate,
            "momentum": self._momentum,
            "decay": self._decay,
            "nesterov": self._nesterov,
            "canonical": self._canonical,
        }
