"""Base classes for numerical solvers."""

from __future__ import annotations
from abc import ABC, abstractmethod
import numpy as np
from typing import Any, Callable, Dict, Tuple

RhsFunction = Callable[[float, np.ndarray], np.ndarray]


class ODESolverBase(ABC):
    """Pluggable integrator used by the integration driver.

    Implementations only advance a state over one continuous interval;
    event handling and discontinuities are the driver's job.
    """

    def __init__(self, name: str):
        self.name = name
        self.convergence_info: Dict[str, Any] = {}

    def integrate(
        self,
        func: RhsFunction,
        y0: np.ndarray,
        t_span: Tuple[float, float]
    ) -> np.ndarray:
        """Advance ``y0`` from ``t_span[0]`` to ``t_span[1]``.

        Args:
            func: Right-hand side ``dy/dt = func(t, y)``
            y0: State at the start of the interval
            t_span: (t_start, t_end) integration interval

        Returns:
            State at ``t_end``

        Raises:
            SolverError: If the integration fails
        """
        t_start, t_end = t_span
        if t_end <= t_start:
            return np.array(y0, dtype=float, copy=True)
        return self._integrate(func, np.asarray(y0, dtype=float), (float(t_start), float(t_end)))

    @abstractmethod
    def _integrate(
        self,
        func: RhsFunction,
        y0: np.ndarray,
        t_span: Tuple[float, float]
    ) -> np.ndarray:
        """Solver-specific integration over a non-empty interval."""
        pass

    def get_convergence_info(self) -> Dict[str, Any]:
        """Get information about the last solve."""
        return self.convergence_info.copy()
