"""Computation registry and base classes."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..sheets import SheetSet


class BaseComputation(ABC):
    """Base class for all metric computations.

    A computation reads the sheets plus whatever earlier computations
    produced, and returns the new values it contributes.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def compute(self, sheets: SheetSet, results: Dict[str, Any]) -> Dict[str, Any]:
        """Compute and return this computation's values."""
        pass


class ComputationRegistry:
    """Ordered registry of computations."""

    def __init__(self):
        self._computations: List[BaseComputation] = []

    def register(self, computation: BaseComputation):
        """Register a computation."""
        self._computations.append(computation)

    def get_computations(self) -> List[BaseComputation]:
        """Get all registered computations."""
        return self._computations.copy()
