"""
Model-facing contracts for treeopt.

Optimizers never see a model's forward computation or internal layout; they
only observe and mutate its parameter tree. Manifold-aware optimizers
additionally need the model to convert a gradient into a tangent vector and
to retract along such a vector.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._vector_space import IVectorSpace


@runtime_checkable
class IModel(Protocol):
    """
    Minimal model contract.

    The returned tree is the model's live parameter storage: writing into its
    leaves (e.g., through `copy_from_`) updates the model. Leaves must
    therefore be writable floating-point arrays; other leaf types would be
    converted to fresh arrays and updates to them would be lost.
    """

    @property
    def parameters(self) -> IVectorSpace:
        """Return the model's differentiable parameters."""
        ...


@runtime_checkable
class IManifoldModel(IModel, Protocol):
    """
    Model whose parameters live on a curved manifold.

    Naive vector addition would leave the manifold, so updates go through the
    model's own notion of moving along a tangent direction.
    """

    def tangent_vector(self, cotangent: IVectorSpace) -> IVectorSpace:
        """
        Map a cotangent (gradient-shaped) vector to a tangent vector at the
        current point.
        """
        ...

    def moved(self, along: IVectorSpace) -> IVectorSpace:
        """
        Return the parameters of the point reached by retracting from the
        current point along `along`. Must not mutate the model.
        """
        ...
