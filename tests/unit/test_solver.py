"""Tests for the pluggable ODE solvers."""

import numpy as np
import pytest

from compsim.contracts.errors import SolverError
from compsim.solver import FixedStepRK4Solver, ScipyODESolver, SolverSettings, create_solver
from compsim.solver.solver_config import HIGH_PRECISION_SETTINGS


def decay(t, y):
    return -0.5 * y


class TestSolverSettings:
    """Test solver settings."""

    def test_defaults(self):
        settings = SolverSettings()
        assert settings.get_scipy_options() == {"rtol": 1e-6, "atol": 1e-9, "method": "RK45"}

    def test_optional_steps(self):
        options = SolverSettings(max_step=0.1, first_step=0.01).get_scipy_options()
        assert options["max_step"] == 0.1
        assert options["first_step"] == 0.01

    def test_invalid_method(self):
        with pytest.raises(ValueError, match="method must be one of"):
            SolverSettings(method="EULER")

    def test_invalid_tolerance(self):
        with pytest.raises(ValueError):
            SolverSettings(rtol=0.0)


@pytest.mark.parametrize("solver", [
    ScipyODESolver(),
    ScipyODESolver(HIGH_PRECISION_SETTINGS),
    ScipyODESolver(method="BDF"),
    FixedStepRK4Solver(max_step=0.01),
])
def test_exponential_decay(solver):
    y = solver.integrate(decay, np.array([10.0, 2.0]), (0.0, 4.0))
    np.testing.assert_allclose(y, np.array([10.0, 2.0]) * np.exp(-2.0), rtol=1e-5)


def test_zero_length_interval_returns_copy():
    y0 = np.array([1.0, 2.0])
    calls = []

    def rhs(t, y):
        calls.append(t)
        return y

    y = create_solver().integrate(rhs, y0, (3.0, 3.0))

    np.testing.assert_array_equal(y, y0)
    assert y is not y0
    assert calls == []


def test_first_step_clipped_to_interval():
    solver = ScipyODESolver(SolverSettings(first_step=5.0))
    y = solver.integrate(decay, np.array([1.0]), (0.0, 0.1))
    np.testing.assert_allclose(y, np.exp(-0.05), rtol=1e-6)


def test_convergence_info():
    solver = ScipyODESolver()
    solver.integrate(decay, np.array([1.0]), (0.0, 1.0))

    info = solver.get_convergence_info()
    assert info["success"]
    assert info["method"] == "RK45"
    assert info["nfev"] > 0


def test_arithmetic_error_becomes_solver_error():
    def singular(t, y):
        raise ZeroDivisionError("division by zero concentration")

    with pytest.raises(SolverError, match="Arithmetic error"):
        ScipyODESolver().integrate(singular, np.array([1.0]), (0.0, 1.0))
    with pytest.raises(SolverError, match="Arithmetic error"):
        FixedStepRK4Solver().integrate(singular, np.array([1.0]), (0.0, 1.0))


def test_non_finite_derivative_raises():
    def blow_up(t, y):
        return np.array([np.nan])

    with pytest.raises(SolverError, match="Non-finite derivative"):
        ScipyODESolver().integrate(blow_up, np.array([1.0]), (0.0, 1.0))


def test_rk4_invalid_step():
    with pytest.raises(ValueError):
        FixedStepRK4Solver(max_step=0.0)
