"""
NumPy-backed parameter trees.

This module defines `ParameterTree`, the infrastructure implementation of the
domain contract `IVectorSpace`. A tree wraps an arbitrarily nested structure
of `dict` / `list` / `tuple` containers whose leaves are NumPy arrays, and
exposes the algebra optimizers need: zero element, elementwise addition and
subtraction, scalar and elementwise multiplication, division and square root.

Design notes
------------
- Floating-point array leaves are kept *by reference*. A model can therefore
  hand out a tree over its live storage and observe in-place updates made via
  `copy_from_`.
- Python and NumPy scalars become 0-d arrays; integer and boolean leaves are
  converted to float64. Complex, object and string leaves are rejected.
- Every operator returns a new tree with freshly allocated leaves and never
  mutates its operands. Only methods with a trailing underscore mutate.
- Combining two trees requires identical structure (container kinds, keys,
  lengths and leaf shapes). There is no broadcasting between leaves.
"""

from __future__ import annotations

import numbers
from typing import Any, Callable, Dict, Hashable, Iterator, List, Tuple, Union

import numpy as np

from ...domain._vector_space import IVectorSpace
from ..encoding._b64 import ndarray_to_payload, payload_to_ndarray
from ._paths import KeyPath, iter_paths, map_leaves, treedef, zip_leaves

Scalar = Union[int, float]


def _as_leaf(x: Any) -> np.ndarray:
    if isinstance(x, np.ndarray) and x.dtype.kind == "f":
        return x
    arr = np.asarray(x)
    if arr.dtype.kind == "f":
        return arr
    if arr.dtype.kind in "biu":
        return arr.astype(np.float64)
    raise TypeError(
        f"Unsupported parameter leaf of type {type(x).__name__} "
        f"(dtype={arr.dtype}); expected real numeric data."
    )


def _normalize(node: Any) -> Any:
    if isinstance(node, dict):
        for k in node:
            if not isinstance(k, str):
                raise TypeError(f"Parameter tree keys must be str, got {k!r}")
        return {k: _normalize(node[k]) for k in sorted(node)}
    if isinstance(node, tuple):
        return tuple(_normalize(c) for c in node)
    if isinstance(node, list):
        return [_normalize(c) for c in node]
    return _as_leaf(node)


def _is_scalar(x: Any) -> bool:
    return isinstance(x, numbers.Real)


class ParameterTree:
    """
    A nested collection of array leaves treated as one vector.

    Parameters
    ----------
    data : Any
        Nested `dict` (str keys) / `list` / `tuple` structure of array-like
        leaves, or another `ParameterTree` (whose leaves are shared).

    Examples
    --------
    >>> params = ParameterTree({"w": np.ones((2, 2)), "b": np.zeros(2)})
    >>> grads = params.zeros_like() + 1.0
    >>> params.copy_from_(params - 0.1 * grads)
    """

    __slots__ = ("_data",)

    def __init__(self, data: Any) -> None:
        if isinstance(data, ParameterTree):
            data = data._data
        self._data = _normalize(data)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def _from_normalized(cls, data: Any) -> "ParameterTree":
        tree = cls.__new__(cls)
        tree._data = data
        return tree

    def zeros_like(self) -> "ParameterTree":
        """Return the zero element with identical structure and dtypes."""
        return self.map(np.zeros_like)

    def copy(self) -> "ParameterTree":
        """Return a deep copy with independently owned leaves."""
        return self.map(np.array)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def data(self) -> Any:
        """The underlying nested container (live leaves, not copies)."""
        return self._data

    def paths(self) -> Iterator[Tuple[KeyPath, np.ndarray]]:
        """Yield ``(key_path, leaf)`` pairs; dictionary keys are sorted."""
        return iter_paths(self._data)

    def leaves(self) -> List[np.ndarray]:
        return [leaf for _, leaf in self.paths()]

    def structure(self) -> Hashable:
        """Hashable description of containers, leaf shapes and dtypes."""
        return treedef(self._data)

    @property
    def size(self) -> int:
        """Total number of scalar entries across all leaves."""
        return sum(int(leaf.size) for leaf in self.leaves())

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __repr__(self) -> str:
        return f"ParameterTree(leaves={len(self.leaves())}, size={self.size})"

    # ------------------------------------------------------------------
    # Leafwise transforms
    # ------------------------------------------------------------------
    def map(self, fn: Callable[[np.ndarray], Any]) -> "ParameterTree":
        return ParameterTree._from_normalized(
            map_leaves(lambda leaf: _as_leaf(fn(leaf)), self._data)
        )

    def zip_map(
        self, fn: Callable[[np.ndarray, np.ndarray], Any], other: "ParameterTree"
    ) -> "ParameterTree":
        """
        Combine two trees leaf by leaf.

        Raises
        ------
        ShapeMismatchError
            If `other` differs in structure.
        """
        return ParameterTree._from_normalized(
            zip_leaves(lambda a, b: _as_leaf(fn(a, b)), self._data, other._data)
        )

    def _binary(self, other: Any, op: Callable[[Any, Any], Any]) -> Any:
        if isinstance(other, ParameterTree):
            return self.zip_map(op, other)
        if _is_scalar(other):
            return self.map(lambda leaf: op(leaf, other))
        return NotImplemented

    # ------------------------------------------------------------------
    # Vector-space algebra
    # ------------------------------------------------------------------
    def __add__(self, other: Union["ParameterTree", Scalar]) -> "ParameterTree":
        return self._binary(other, np.add)

    def __radd__(self, other: Scalar) -> "ParameterTree":
        if not _is_scalar(other):
            return NotImplemented
        return self.map(lambda leaf: other + leaf)

    def __sub__(self, other: Union["ParameterTree", Scalar]) -> "ParameterTree":
        return self._binary(other, np.subtract)

    def __rsub__(self, other: Scalar) -> "ParameterTree":
        if not _is_scalar(other):
            return NotImplemented
        return self.map(lambda leaf: other - leaf)

    def __mul__(self, other: Union["ParameterTree", Scalar]) -> "ParameterTree":
        # tree * tree is the elementwise (Hadamard) product
        return self._binary(other, np.multiply)

    def __rmul__(self, other: Scalar) -> "ParameterTree":
        if not _is_scalar(other):
            return NotImplemented
        return self.map(lambda leaf: other * leaf)

    def __truediv__(self, other: Union["ParameterTree", Scalar]) -> "ParameterTree":
        return self._binary(other, np.true_divide)

    def __neg__(self) -> "ParameterTree":
        return self.map(np.negative)

    def sqrt(self) -> "ParameterTree":
        return self.map(np.sqrt)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def copy_from_(self, other: "ParameterTree") -> None:
        """
        Overwrite every leaf with the matching leaf of `other`, in place.

        The structure of `other` is verified before anything is written, so a
        mismatch leaves `self` untouched.

        Raises
        ------
        ShapeMismatchError
            If `other` differs in structure.
        """
        pairs: List[Tuple[np.ndarray, np.ndarray]] = []
        zip_leaves(lambda dst, src: pairs.append((dst, src)), self._data, other._data)
        for dst, src in pairs:
            dst[...] = src

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_payload(self) -> Dict[str, Any]:
        """
        Encode the tree into a JSON-safe, bit-exact payload.

        Node format
        -----------
        {"kind": "dict", "items": {"w": <node>, ...}}
        {"kind": "list" | "tuple", "items": [<node>, ...]}
        {"kind": "leaf", "b64": "...", "dtype": "<f8", "shape": [...]}
        """
        return _encode(self._data)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ParameterTree":
        """Decode a payload produced by `to_payload`."""
        return cls._from_normalized(_decode(payload))


def _encode(node: Any) -> Dict[str, Any]:
    if isinstance(node, dict):
        return {"kind": "dict", "items": {k: _encode(node[k]) for k in sorted(node)}}
    if isinstance(node, tuple):
        return {"kind": "tuple", "items": [_encode(c) for c in node]}
    if isinstance(node, list):
        return {"kind": "list", "items": [_encode(c) for c in node]}
    return {"kind": "leaf", **ndarray_to_payload(node)}


def _decode(payload: Dict[str, Any]) -> Any:
    kind = payload.get("kind")
    if kind == "dict":
        items = payload["items"]
        return {str(k): _decode(items[k]) for k in sorted(items)}
    if kind == "tuple":
        return tuple(_decode(c) for c in payload["items"])
    if kind == "list":
        return [_decode(c) for c in payload["items"]]
    if kind == "leaf":
        return _as_leaf(payload_to_ndarray(payload))
    raise ValueError(f"Unknown tree node kind: {kind!r}")


def as_tree(x: Any) -> ParameterTree:
    """Return `x` if it is already a `ParameterTree`, otherwise wrap it."""
    return x if isinstance(x, ParameterTree) else ParameterTree(x)


def as_vector_space(x: Any) -> IVectorSpace:
    """
    Return `x` unchanged if it already implements `IVectorSpace`, otherwise
    wrap the raw container in a `ParameterTree`.
    """
    return x if isinstance(x, IVectorSpace) else ParameterTree(x)
