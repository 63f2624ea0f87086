"""ODE solver implementations."""

from __future__ import annotations
import math
import numpy as np
from typing import Optional, Tuple
from scipy.integrate import solve_ivp

from ..contracts.errors import SolverError
from .base import ODESolverBase, RhsFunction
from .solver_config import SolverSettings


class ScipyODESolver(ODESolverBase):
    """Adaptive solver backed by :func:`scipy.integrate.solve_ivp`."""

    def __init__(self, settings: Optional[SolverSettings] = None, **overrides):
        super().__init__("scipy_ode_solver")
        settings = settings or SolverSettings()
        if overrides:
            settings = settings.model_copy(update=overrides)
            settings = SolverSettings.model_validate(settings.model_dump())
        self.settings = settings

    def _integrate(
        self,
        func: RhsFunction,
        y0: np.ndarray,
        t_span: Tuple[float, float]
    ) -> np.ndarray:
        options = self.settings.get_scipy_options()
        method = options.pop('method')

        # scipy rejects a first step longer than the interval
        if 'first_step' in options:
            options['first_step'] = min(options['first_step'], t_span[1] - t_span[0])

        # A nan derivative never passes the step-size controller, so fail fast
        def checked(t: float, y: np.ndarray) -> np.ndarray:
            dy = np.asarray(func(t, y), dtype=float)
            if not np.all(np.isfinite(dy)):
                raise SolverError(
                    f"Non-finite derivative at t={t}",
                    {"t": float(t), "t_span": t_span, "method": method}
                )
            return dy

        try:
            solution = solve_ivp(checked, t_span, y0, method=method, **options)
        except ArithmeticError as e:
            self.convergence_info = {
                'success': False,
                'message': f"ODE solver failed: {e}",
                'method': method
            }
            raise SolverError(
                f"Arithmetic error while integrating over {t_span}: {e}",
                {"t_span": t_span, "method": method}
            ) from e

        self.convergence_info = {
            'success': solution.success,
            'message': solution.message,
            'nfev': solution.nfev,
            'njev': getattr(solution, 'njev', None),
            'nlu': getattr(solution, 'nlu', None),
            'method': method
        }

        if not solution.success:
            raise SolverError(
                f"ODE solver failed over {t_span}: {solution.message}",
                {"t_span": t_span, "method": method, "t_reached": float(solution.t[-1])}
            )

        return np.array(solution.y[:, -1], dtype=float)


class FixedStepRK4Solver(ODESolverBase):
    """Classic fourth-order Runge-Kutta with a bounded step.

    Each interval is divided into the smallest number of equal steps not
    longer than ``max_step``.
    """

    def __init__(self, max_step: float = 0.01):
        super().__init__("rk4_fixed_step")
        if not max_step > 0:
            raise ValueError(f"max_step must be > 0 (got {max_step})")
        self.max_step = float(max_step)

    def _integrate(
        self,
        func: RhsFunction,
        y0: np.ndarray,
        t_span: Tuple[float, float]
    ) -> np.ndarray:
        t_start, t_end = t_span
        n_steps = max(1, math.ceil((t_end - t_start) / self.max_step))
        h = (t_end - t_start) / n_steps

        y = np.array(y0, dtype=float, copy=True)
        t = t_start
        try:
            for _ in range(n_steps):
                k1 = np.asarray(func(t, y), dtype=float)
                k2 = np.asarray(func(t + h / 2, y + h / 2 * k1), dtype=float)
                k3 = np.asarray(func(t + h / 2, y + h / 2 * k2), dtype=float)
                k4 = np.asarray(func(t + h, y + h * k3), dtype=float)
                y = y + h / 6 * (k1 + 2 * k2 + 2 * k3 + k4)
                t += h
        except ArithmeticError as e:
            raise SolverError(
                f"Arithmetic error while integrating over {t_span}: {e}",
                {"t_span": t_span, "t_reached": t}
            ) from e

        self.convergence_info = {
            'success': True,
            'message': "Fixed-step integration completed",
            'nfev': 4 * n_steps,
            'n_steps': n_steps,
        }
        return y


def create_solver(settings: Optional[SolverSettings] = None) -> ODESolverBase:
    """Default solver for the given settings."""
    return ScipyODESolver(settings)
