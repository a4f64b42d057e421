"""
Flat-space model.

`EuclideanModel` is the trivial manifold: tangent vectors equal cotangent
vectors and moving along a direction is vector addition. With it,
`RiemannSGD` reduces to unit-step gradient descent, which makes it a useful
baseline and a plain parameter holder for the Euclidean optimizers.
"""

from __future__ import annotations

from typing import Any

from ...domain._vector_space import IVectorSpace
from ..tree._parameter_tree import as_vector_space


class EuclideanModel:
    """
    Parameter holder on flat space.

    Parameters
    ----------
    parameters : IVectorSpace or nested container
        Initial parameters. Floating-point array leaves are shared, so
        optimizer steps are visible through the caller's arrays. Integer,
        bool and scalar leaves are converted to new float64 arrays; the
        caller's originals are never updated and must be read back through
        `parameters`.
    """

    def __init__(self, parameters: Any) -> None:
        self._parameters = as_vector_space(parameters)

    @property
    def parameters(self) -> IVectorSpace:
        return self._parameters

    def tangent_vector(self, cotangent: Any) -> IVectorSpace:
        return as_vector_space(cotangent)

    def moved(self, along: Any) -> IVectorSpace:
        return self._parameters + as_vector_space(along)
