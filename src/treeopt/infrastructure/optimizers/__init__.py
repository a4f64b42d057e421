from ._adam import Adam
from ._base import TreeOptimizer
from ._registry import optimizer_from_config, optimizer_to_config, register_optimizer
from ._riemann_sgd import RiemannSGD
from ._sgd import SGD
from ._state import AdamState, SGDState

__all__ = [
    TreeOptimizer.__name__,
    SGD.__name__,
    Adam.__name__,
    RiemannSGD.__name__,
    SGDState.__name__,
    AdamState.__name__,
    register_optimizer.__name__,
    optimizer_to_config.__name__,
    optimizer_from_config.__name__,
]
