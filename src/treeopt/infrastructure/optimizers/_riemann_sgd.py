"""
Riemannian SGD for manifold-valued parameters.

For parameters constrained to a curved space (spheres, orthogonal matrices,
Lie groups) plain vector addition leaves the manifold. This optimizer instead
asks the model for the tangent vector matching the negated gradient and moves
along it with the model's own retraction:

    params <- model.moved(model.tangent_vector(zero - gradient))

The learning rate is advisory in the default rule: the model's tangent
conversion and retraction own the step scale, and `update` never reads
`learning_rate`. ``scaled=True`` is the opt-in variant that multiplies the
tangent vector by `learning_rate` before retracting.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from ..._log import get_logger
from ...domain._model import IManifoldModel
from ...domain._vector_space import IVectorSpace
from ..tree._parameter_tree import as_vector_space
from ._base import TreeOptimizer
from ._registry import register_optimizer

logger = get_logger(__name__)


@register_optimizer()
class RiemannSGD(TreeOptimizer):
    """
    Riemannian SGD.

    Parameters
    ----------
    learning_rate : float
        Step scale. Not validated. Only read when ``scaled=True``.
    scaled : bool, optional
        Scale the tangent vector by `learning_rate`. Defaults to False.

    Notes
    -----
    The optimizer carries no state; `state` is always None.
    """

    def __init__(self, learning_rate: float, *, scaled: bool = False) -> None:
        self._learning_rate = float(learning_rate)
        self._scaled = bool(scaled)
        super().__init__()
        logger.debug("constructed %r", self)

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float) -> None:
        self._learning_rate = float(value)

    @property
    def scaled(self) -> bool:
        return self._scaled

    def update(
        self, model: IManifoldModel, gradient: IVectorSpace, state: Any = None
    ) -> Tuple[IVectorSpace, None]:
        """
        Return the parameters of the retracted point. Nothing is mutated.

        Unlike the Euclidean optimizers, the rule needs the model itself
        (not just its parameters) because the tangent space and retraction
        depend on the current point.

        Raises
        ------
        TypeError
            If `model` does not provide `tangent_vector` and `moved`.
        ShapeMismatchError
            If `gradient` disagrees with the parameters.
        """
        if not isinstance(model, IManifoldModel):
            raise TypeError(
                f"RiemannSGD requires a manifold model with tangent_vector() and "
                f"moved(); got {type(model).__name__}."
            )

        tangent = model.tangent_vector(gradient.zeros_like() - gradient)
        direction = as_vector_space(tangent)
        if self._scaled:
            direction = self._learning_rate * direction
        return as_vector_space(model.moved(direction)), None

    def step(self, model: IManifoldModel, gradient: Any) -> None:
        params = as_vector_space(model.parameters)
        new_params, _ = self.update(model, as_vector_space(gradient))
        params.copy_from_(new_params)

    def get_config(self) -> Dict[str, Any]:
        return {"learning_rate": self._learning_rate, "scaled": self._scaled}
