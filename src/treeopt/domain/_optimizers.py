"""
Domain-level optimizer contracts for treeopt.

This module defines the `IOptimizer` protocol, which specifies the minimal
interface required for optimizer implementations (e.g., SGD, Adam,
RiemannSGD).

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- Optimizers receive the gradient explicitly on every call. How it was
  computed (autograd engine) is outside the scope of this protocol.
- `step` is not reentrant. Callers must not invoke it concurrently on the
  same optimizer/model pair.
- Concrete optimizers also expose a pure `update` rule. Its first argument
  differs by family (a parameter tree for Euclidean optimizers, the model
  for manifold optimizers), so it is not part of this protocol.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable

from ._model import IModel


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required members
    ----------------
    - `learning_rate` exposes the configured step scale.
    - `state` exposes the optimizer's state record.
    - `step()` applies one update to a model in place and advances `state`.
    - `state_dict()` / `load_state_dict()` expose the full optimizer state
      for external checkpointing.
    """

    @property
    def learning_rate(self) -> float:
        """Return the learning rate."""
        ...

    @property
    def state(self) -> Any:
        """Return the current optimizer state record (may be None)."""
        ...

    def step(self, model: IModel, gradient: Any) -> None:
        """
        Apply one optimization step to `model` along `gradient`.
        """
        ...

    def state_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable snapshot of the optimizer state."""
        ...

    def load_state_dict(self, payload: Dict[str, Any]) -> None:
        """Restore the optimizer state from `state_dict()` output."""
        ...
