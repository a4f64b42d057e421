"""
Optimizer state records.

State is held in explicit records rather than loose attributes on the
optimizer, so that the update rule can take and return it and external
checkpointing can serialize it.

Trees start as ``None`` (conceptually the zero element) and are shaped
lazily from the first parameter tree an optimizer is applied to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..tree._parameter_tree import ParameterTree


def _tree_to_payload(tree: Optional[ParameterTree]) -> Optional[Dict[str, Any]]:
    if tree is None:
        return None
    if not hasattr(tree, "to_payload"):
        raise TypeError(
            f"Cannot checkpoint state held in {type(tree).__name__}; "
            "only ParameterTree state is serializable."
        )
    return tree.to_payload()


def _tree_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[ParameterTree]:
    return None if payload is None else ParameterTree.from_payload(payload)


@dataclass(frozen=True)
class SGDState:
    """
    Momentum SGD state.

    Attributes
    ----------
    velocity : Optional[ParameterTree]
        Exponentially weighted running update direction, or None before the
        first step.
    """

    velocity: Optional[ParameterTree] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"velocity": _tree_to_payload(self.velocity)}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SGDState":
        return cls(velocity=_tree_from_payload(payload.get("velocity")))


@dataclass(frozen=True)
class AdamState:
    """
    Adam state.

    Attributes
    ----------
    m : Optional[ParameterTree]
        First-moment estimate.
    v : Optional[ParameterTree]
        Second-moment estimate.
    step : int
        Number of completed update steps.
    """

    m: Optional[ParameterTree] = None
    v: Optional[ParameterTree] = None
    step: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "m": _tree_to_payload(self.m),
            "v": _tree_to_payload(self.v),
            "step": int(self.step),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AdamState":
        return cls(
            m=_tree_from_payload(payload.get("m")),
            v=_tree_from_payload(payload.get("v")),
            step=int(payload.get("step", 0)),
        )
