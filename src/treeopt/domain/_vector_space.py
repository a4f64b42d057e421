"""
Vector-space interface definitions.

This module defines `IVectorSpace`, the domain-level contract for the full set
of a model's differentiable parameters viewed as a single algebraic vector.
Gradients (cotangent vectors) and optimizer accumulators live in the same
space and therefore satisfy the same contract.

Notes
-----
- The protocol is structural (duck-typed) and backend-agnostic; it does not
  import NumPy. The infrastructure `ParameterTree` is the NumPy-backed
  implementation used throughout the package.
- Shape agreement between two operands is a precondition. Implementations
  must reject disagreeing operands instead of broadcasting them.
- Containers compose recursively: a container whose children satisfy the
  contract satisfies it too.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterator, Protocol, Tuple, Union, runtime_checkable

Scalar = Union[int, float]
KeyPath = Tuple[Any, ...]


@runtime_checkable
class IVectorSpace(Protocol):
    """
    Vector-space element contract.

    Required operations
    -------------------
    - `zeros_like()` returns the zero element of identical structure.
    - `a + b`, `a - b` elementwise; `b` may also be a scalar.
    - `s * a` scalar multiplication and `a * b` elementwise product.
    - `a / b` elementwise division (needed by adaptive optimizers).
    - `sqrt()` elementwise square root.
    - `paths()` walks leaf positions in a canonical order, so two trees of
      identical structure can be visited in lockstep.
    - `copy_from_(other)` writes every leaf of `other` into `self` in place.
    """

    def zeros_like(self) -> "IVectorSpace":
        """Return the zero element with the same structure as `self`."""
        ...

    def __add__(self, other: Union["IVectorSpace", Scalar]) -> "IVectorSpace": ...

    def __sub__(self, other: Union["IVectorSpace", Scalar]) -> "IVectorSpace": ...

    def __mul__(self, other: Union["IVectorSpace", Scalar]) -> "IVectorSpace": ...

    def __rmul__(self, other: Scalar) -> "IVectorSpace": ...

    def __truediv__(self, other: Union["IVectorSpace", Scalar]) -> "IVectorSpace": ...

    def __neg__(self) -> "IVectorSpace": ...

    def sqrt(self) -> "IVectorSpace":
        """Return the elementwise square root."""
        ...

    def map(self, fn: Callable[[Any], Any]) -> "IVectorSpace":
        """Apply `fn` to every leaf and return the resulting tree."""
        ...

    def paths(self) -> Iterator[Tuple[KeyPath, Any]]:
        """Yield `(key_path, leaf)` pairs in canonical order."""
        ...

    def structure(self) -> Hashable:
        """Return a hashable description of containers and leaf shapes."""
        ...

    def copy_from_(self, other: "IVectorSpace") -> None:
        """Overwrite every leaf of `self` with the matching leaf of `other`."""
        ...
