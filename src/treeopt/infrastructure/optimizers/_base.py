"""
Shared optimizer plumbing.

`TreeOptimizer` implements everything the concrete optimizers have in
common: hyperparameter validation helpers, the in-place `step` built on top
of a pure `update`, state checkpointing and configuration round-tripping.
Subclasses provide `update()`, `get_config()` and, if they carry state,
`_state_cls`.
"""

from __future__ import annotations

import warnings
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from typing_extensions import Self

from ..._log import get_logger
from ...domain._errors import InvalidHyperparameterError
from ...domain._model import IModel
from ...domain._vector_space import IVectorSpace
from ..tree._parameter_tree import as_vector_space

logger = get_logger(__name__)

STATE_FORMAT = "treeopt.state.v1"


def check_non_negative(name: str, value: float) -> float:
    """
    Return `value` as float if it is >= 0.

    Raises
    ------
    InvalidHyperparameterError
        If `value` is negative or NaN.
    """
    value = float(value)
    if not value >= 0.0:
        raise InvalidHyperparameterError(name, value, ">= 0")
    return value


def check_unit_interval(name: str, value: float) -> float:
    """
    Return `value` as float if it lies in the closed interval [0, 1].

    Raises
    ------
    InvalidHyperparameterError
        If `value` is outside [0, 1] or NaN.
    """
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise InvalidHyperparameterError(name, value, "in [0, 1]")
    return value


def warn_decay_not_applied(owner: str, decay: float) -> None:
    if decay != 0.0:
        warnings.warn(
            f"{owner}: decay={decay} is accepted but not applied by the update rule.",
            UserWarning,
            stacklevel=3,
        )


class TreeOptimizer:
    """
    Base class for parameter-tree optimizers.

    Notes
    -----
    - `step()` is synchronous and not reentrant; concurrent calls on the same
      optimizer/model pair are a caller error.
    - The model's parameter leaves are written in place only after the whole
      update has been computed, so a failing update leaves both the model and
      the optimizer state untouched.
    - `update(params, gradient, state)` is the rule for Euclidean optimizers.
      `RiemannSGD` overrides it as `update(model, gradient, state=None)`
      because its tangent space and retraction depend on the model, and
      overrides `step` to match.
    - Parameters and gradients may be any `IVectorSpace`. Raw nested
      containers are wrapped in a `ParameterTree`.
    """

    _state_cls: ClassVar[Optional[Type[Any]]] = None

    def __init__(self) -> None:
        self._state: Any = self._state_cls() if self._state_cls is not None else None

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @property
    def state(self) -> Any:
        """Current state record (None for stateless optimizers)."""
        return self._state

    def update(
        self, params: IVectorSpace, gradient: IVectorSpace, state: Any
    ) -> Tuple[IVectorSpace, Any]:
        raise NotImplementedError

    def step(self, model: IModel, gradient: Any) -> None:
        """
        Apply one update to `model.parameters` along `gradient`.

        Parameters
        ----------
        model : IModel
            Model whose parameter leaves are updated in place.
        gradient : IVectorSpace or nested container
            Gradient with the same structure as the parameters. Never mutated.

        Raises
        ------
        ShapeMismatchError
            If the gradient or the stored state disagrees with the parameters.
        """
        params = as_vector_space(model.parameters)
        new_params, new_state = self.update(
            params, as_vector_space(gradient), self._state
        )
        params.copy_from_(new_params)
        self._state = new_state

    # ------------------------------------------------------------------
    # Checkpointing
    # ------------------------------------------------------------------
    def state_dict(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable snapshot of the optimizer state.

        Format
        ------
        {
          "format": "treeopt.state.v1",
          "type": "Adam",
          "state": {...} | null
        }

        Raises
        ------
        TypeError
            If the state trees are custom `IVectorSpace` types rather than
            `ParameterTree`.
        """
        return {
            "format": STATE_FORMAT,
            "type": type(self).__name__,
            "state": None if self._state is None else self._state.to_payload(),
        }

    def load_state_dict(self, payload: Dict[str, Any]) -> None:
        """
        Restore state produced by `state_dict()`.

        Raises
        ------
        ValueError
            If the payload format or optimizer type does not match.
        """
        fmt = payload.get("format")
        if fmt != STATE_FORMAT:
            raise ValueError(f"Unsupported optimizer state format: {fmt!r}")

        kind = payload.get("type")
        if kind != type(self).__name__:
            raise ValueError(
                f"State was saved by {kind!r}, cannot load into {type(self).__name__}."
            )

        body = payload.get("state")
        if self._state_cls is None:
            self._state = None
        else:
            self._state = self._state_cls.from_payload(body or {})
        logger.info("restored %s state", type(self).__name__)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        """
        Reconstruct an optimizer from `get_config()` output.

        Hyperparameters are validated exactly as in the constructor.
        """
        return cls(**cfg)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.get_config().items())
        return f"{type(self).__name__}({args})"
