from ._errors import InvalidHyperparameterError, ShapeMismatchError
from ._model import IManifoldModel, IModel
from ._optimizers import IOptimizer
from ._vector_space import IVectorSpace

__all__ = [
    IVectorSpace.__name__,
    IModel.__name__,
    IManifoldModel.__name__,
    IOptimizer.__name__,
    InvalidHyperparameterError.__name__,
    ShapeMismatchError.__name__,
]
