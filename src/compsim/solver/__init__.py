"""Numerical solvers."""

from .base import ODESolverBase
from .ode_solver import ScipyODESolver, FixedStepRK4Solver, create_solver
from .solver_config import SolverSettings

__all__ = [
    "ODESolverBase",
    "ScipyODESolver",
    "FixedStepRK4Solver",
    "SolverSettings",
    "create_solver",
]
