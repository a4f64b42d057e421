"""
Optimizer- and parameter-tree-related exceptions for treeopt.

This module defines the two error categories the optimizers can raise:

- `InvalidHyperparameterError` is raised at construction time when a
  hyperparameter lies outside its documented range. Construction fails and
  no optimizer instance is produced, so calling code may retry with corrected
  values.
- `ShapeMismatchError` is raised when two trees that are combined pointwise
  (parameters, gradients, optimizer state) disagree in structure. This is a
  programming error rather than a recoverable runtime condition.

Both derive from `ValueError` so that callers catching the generic built-in
continue to work.
"""

from __future__ import annotations

from typing import Any


class InvalidHyperparameterError(ValueError):
    """
    Raised when an optimizer hyperparameter is outside its valid range.

    Attributes
    ----------
    name : str
        Name of the offending hyperparameter (e.g., "learning_rate").
    value : Any
        The rejected value.
    """

    def __init__(self, name: str, value: Any, requirement: str) -> None:
        """
        Initialize the InvalidHyperparameterError.

        Parameters
        ----------
        name : str
            Hyperparameter name.
        value : Any
            The rejected value.
        requirement : str
            Human-readable constraint, e.g. ">= 0" or "in [0, 1]".
        """
        super().__init__(f"{name} must be {requirement}, got {value!r}")
        self.name = name
        self.value = value


class ShapeMismatchError(ValueError):
    """
    Raised when two parameter trees are combined but differ in structure.

    Structure covers container kinds, dictionary keys, sequence lengths and
    the shape of every leaf array.
    """

    def __init__(self, path: str, detail: str) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        path : str
            Key path at which the two trees first disagree ("<root>" for the
            top level).
        detail : str
            Description of the disagreement.
        """
        super().__init__(f"Tree structure mismatch at {path}: {detail}")
        self.path = path
        self.detail = detail
