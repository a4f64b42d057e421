from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

_OPTIMIZER_REGISTRY: Dict[str, Type[Any]] = {}


def register_optimizer(name: Optional[str] = None) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register an optimizer class for config deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _OPTIMIZER_REGISTRY[key] = cls
        return cls

    return deco


def optimizer_to_config(opt: Any) -> Dict[str, Any]:
    """
    Convert an optimizer into a JSON-serializable configuration node.

    Node format
    -----------
    {
      "type": "Adam",
      "config": {...}
    }
    """
    return {"type": type(opt).__name__, "config": opt.get_config()}


def optimizer_from_config(node: Dict[str, Any]) -> Any:
    """
    Rebuild an optimizer from a configuration node.

    Raises
    ------
    ValueError
        If the type name is not registered.
    InvalidHyperparameterError
        If the stored hyperparameters fail validation.
    """
    type_name = str(node["type"])
    if type_name not in _OPTIMIZER_REGISTRY:
        raise ValueError(
            f"Unknown optimizer type '{type_name}'. Register it via @register_optimizer."
        )

    cls = _OPTIMIZER_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}
    return cls.from_config(cfg)
