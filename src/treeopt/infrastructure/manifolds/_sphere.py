"""
Unit-sphere model.

Every leaf of a `SphereModel` is an independent point on the unit sphere of
its own ambient space (the leaf is flattened for inner products). Tangent
vectors are obtained by projecting out the radial component and points move
along great circles through the exponential map.

References:
    - Absil et al. "Optimization Algorithms on Matrix Manifolds" (2008)
    - Boumal "An Introduction to Optimization on Smooth Manifolds" (2023)
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ..tree._parameter_tree import ParameterTree, as_tree


def _norm(x: np.ndarray) -> float:
    return float(np.sqrt(np.sum(x * x)))


def _normalized(x: np.ndarray) -> np.ndarray:
    n = _norm(x)
    if n == 0.0:
        raise ValueError("Cannot place a zero vector on the unit sphere.")
    return x / n


def project_to_tangent_space(point: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """
    Project `vector` onto the tangent space of the sphere at `point`:
    ``v - <v, x> x``.
    """
    return vector - np.vdot(point, vector) * point


def exponential_map(point: np.ndarray, tangent: np.ndarray) -> np.ndarray:
    """
    Move from `point` along the great circle with initial velocity `tangent`:
    ``cos(|v|) x + sin(|v|) v / |v|``.
    """
    n = _norm(tangent)
    if n == 0.0:
        return np.array(point, copy=True)
    return np.cos(n) * point + np.sin(n) * (tangent / n)


class SphereModel:
    """
    Parameter holder whose leaves are constrained to unit spheres.

    Parameters
    ----------
    parameters : ParameterTree or nested container
        Initial points. Each leaf is scaled to unit norm on construction.

    Raises
    ------
    ValueError
        If a leaf is the zero vector.
    """

    def __init__(self, parameters: Any) -> None:
        self._parameters = as_tree(parameters).map(_normalized)

    @property
    def parameters(self) -> ParameterTree:
        return self._parameters

    def tangent_vector(self, cotangent: Any) -> ParameterTree:
        return self._parameters.zip_map(project_to_tangent_space, as_tree(cotangent))

    def moved(self, along: Any) -> ParameterTree:
        return self._parameters.zip_map(exponential_map, as_tree(along))
