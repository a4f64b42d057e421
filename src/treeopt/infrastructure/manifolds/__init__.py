from ._euclidean import EuclideanModel
from ._sphere import SphereModel, exponential_map, project_to_tangent_space

__all__ = [
    EuclideanModel.__name__,
    SphereModel.__name__,
    exponential_map.__name__,
    project_to_tangent_space.__name__,
]
