"""Metrics computation engine."""

import logging
from typing import Any, Dict

from ..sheets import SheetSet
from .computations import BaseComputation, ComputationRegistry

logger = logging.getLogger(__name__)


class MetricsEngine:
    """Runs registered computations, in order, over one set of sheets."""

    def __init__(self):
        self.registry = ComputationRegistry()

    def add_computation(self, computation: BaseComputation):
        """Add a computation to the engine."""
        self.registry.register(computation)

    def compute(self, sheets: SheetSet) -> Dict[str, Any]:
        """Return the merged results of every computation.

        Later computations see the values produced by earlier ones.
        """
        results: Dict[str, Any] = {}
        for computation in self.registry.get_computations():
            values = computation.compute(sheets, results)
            logger.debug(f"Computation {computation.name} produced {sorted(values)}")
            results.update(values)
        return results
