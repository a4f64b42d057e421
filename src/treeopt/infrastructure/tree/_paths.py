"""
Key-path utilities for nested parameter containers.

A parameter container is built from `dict` (string keys), `list` and `tuple`
nodes with NumPy array leaves. This module provides the structural walks used
by `ParameterTree`:

- `iter_paths` visits every leaf with its key path in canonical order
  (dictionary keys sorted), so two containers of identical structure are
  visited in lockstep.
- `zip_leaves` combines two containers leaf by leaf, verifying structure on
  the way and raising `ShapeMismatchError` at the first disagreement.
- `treedef` produces a hashable description of a container.

Leaves are assumed to be normalized to `np.ndarray` already; normalization is
the responsibility of `ParameterTree`.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterator, Tuple

import numpy as np

from ...domain._errors import ShapeMismatchError

KeyPath = Tuple[Any, ...]


def format_path(path: KeyPath) -> str:
    """
    Render a key path as an indexing expression, e.g. ``['layer'][0]``.
    """
    if not path:
        return "<root>"
    return "".join(f"[{k!r}]" for k in path)


def _kind(node: Any) -> str:
    if isinstance(node, dict):
        return "dict"
    if isinstance(node, tuple):
        return "tuple"
    if isinstance(node, list):
        return "list"
    return "leaf"


def map_leaves(fn: Callable[[np.ndarray], Any], node: Any) -> Any:
    """
    Rebuild `node` with `fn` applied to every leaf.
    """
    if isinstance(node, dict):
        return {k: map_leaves(fn, node[k]) for k in sorted(node)}
    if isinstance(node, tuple):
        return tuple(map_leaves(fn, child) for child in node)
    if isinstance(node, list):
        return [map_leaves(fn, child) for child in node]
    return fn(node)


def zip_leaves(
    fn: Callable[[np.ndarray, np.ndarray], Any],
    a: Any,
    b: Any,
    path: KeyPath = (),
) -> Any:
    """
    Rebuild `a` with ``fn(leaf_a, leaf_b)`` at every matching leaf position.

    Raises
    ------
    ShapeMismatchError
        If the containers differ in kind, keys, length, or leaf shape.
    """
    ka, kb = _kind(a), _kind(b)
    if ka != kb:
        raise ShapeMismatchError(format_path(path), f"{ka} vs {kb}")

    if ka == "dict":
        if set(a) != set(b):
            missing = sorted(set(a) ^ set(b))
            raise ShapeMismatchError(format_path(path), f"keys differ: {missing}")
        return {k: zip_leaves(fn, a[k], b[k], path + (k,)) for k in sorted(a)}

    if ka in ("list", "tuple"):
        if len(a) != len(b):
            raise ShapeMismatchError(
                format_path(path), f"length {len(a)} vs {len(b)}"
            )
        children = [
            zip_leaves(fn, ca, cb, path + (i,)) for i, (ca, cb) in enumerate(zip(a, b))
        ]
        return tuple(children) if ka == "tuple" else children

    if a.shape != b.shape:
        raise ShapeMismatchError(format_path(path), f"shape {a.shape} vs {b.shape}")
    return fn(a, b)


def iter_paths(node: Any, prefix: KeyPath = ()) -> Iterator[Tuple[KeyPath, np.ndarray]]:
    """
    Yield ``(key_path, leaf)`` pairs in canonical order.
    """
    if isinstance(node, dict):
        for k in sorted(node):
            yield from iter_paths(node[k], prefix + (k,))
    elif isinstance(node, (list, tuple)):
        for i, child in enumerate(node):
            yield from iter_paths(child, prefix + (i,))
    else:
        yield prefix, node


def treedef(node: Any) -> Hashable:
    """
    Return a hashable description of `node`.

    Leaves are described by ``("leaf", shape, dtype_str)``.
    """
    if isinstance(node, dict):
        keys = tuple(sorted(node))
        return ("dict", keys, tuple(treedef(node[k]) for k in keys))
    if isinstance(node, (list, tuple)):
        return (_kind(node), len(node), tuple(treedef(c) for c in node))
    return ("leaf", tuple(node.shape), node.dtype.str)
