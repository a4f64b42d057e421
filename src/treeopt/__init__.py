"""
treeopt: gradient-based update rules over nested parameter trees.

Typical use::

    from treeopt import Adam, EuclideanModel

    model = EuclideanModel({"w": np.zeros((3, 2)), "b": np.zeros(2)})
    opt = Adam(learning_rate=1e-3, canonical=True)
    for grads in gradient_stream:
        opt.step(model, grads)
"""

from ._log import configure_logging
from .domain import (
    IManifoldModel,
    IModel,
    InvalidHyperparameterError,
    IOptimizer,
    IVectorSpace,
    ShapeMismatchError,
)
from .infrastructure.manifolds import EuclideanModel, SphereModel
from .infrastructure.optimizers import (
    SGD,
    Adam,
    AdamState,
    RiemannSGD,
    SGDState,
    TreeOptimizer,
    optimizer_from_config,
    optimizer_to_config,
    register_optimizer,
)
from .infrastructure.tree import ParameterTree, as_tree, as_vector_space

__all__ = [
    "IVectorSpace",
    "IModel",
    "IManifoldModel",
    "IOptimizer",
    "InvalidHyperparameterError",
    "ShapeMismatchError",
    "ParameterTree",
    "as_tree",
    "as_vector_space",
    "TreeOptimizer",
    "SGD",
    "Adam",
    "RiemannSGD",
    "SGDState",
    "AdamState",
    "register_optimizer",
    "optimizer_to_config",
    "optimizer_from_config",
    "EuclideanModel",
    "configure_logging",
    "SphereModel",
]
