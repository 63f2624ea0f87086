"""Equation definition: the five model functions and their contracts."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING
import math
import numpy as np

from ..contracts.errors import ConfigError
from ..contracts.types import SubjectPredictions
from ..domain.covariates import Covariates
from ..domain.subject import Subject
from .parameters import ParameterInput, Parameters, bind_parameters

if TYPE_CHECKING:
    from ..engine.context import RunContext
    from ..simulation.driver import SimulationResult
    from ..solver.base import ODESolverBase

DerivativeFn = Callable[[np.ndarray, Parameters, float, np.ndarray, Covariates], Sequence[float]]
LagFn = Callable[[Parameters], Mapping[int, float]]
FaFn = Callable[[Parameters], Mapping[int, float]]
InitFn = Callable[[Parameters, float, Covariates], Sequence[float]]
OutputFn = Callable[[np.ndarray, Parameters, float, Covariates], Sequence[float]]


def no_lag(p: Parameters) -> Dict[int, float]:
    return {}


def full_bioavailability(p: Parameters) -> Dict[int, float]:
    return {}


@dataclass(frozen=True)
class Equation:
    """ODE model described by five pure functions.

    Attributes:
        derivative: ``(x, p, t, rateiv, cov) -> dx/dt``
        lag: ``p -> {input: delay}``; inputs not listed have no lag
        fa: ``p -> {input: fraction}``; inputs not listed are fully absorbed
        init: ``(p, t, cov) -> x0``
        output: ``(x, p, t, cov) -> y``
        neqs: ``(n_states, n_outputs)``
        parameters: Parameter names, in parameter-vector order
        name: Model identifier used in logs

    All functions must be side-effect free so one equation can be shared by
    concurrent runs.
    """

    derivative: DerivativeFn
    lag: LagFn = no_lag
    fa: FaFn = full_bioavailability
    init: Optional[InitFn] = None
    output: Optional[OutputFn] = None
    neqs: Tuple[int, int] = (1, 1)
    parameters: Tuple[str, ...] = ()
    name: str = "ode"
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        n_states, n_outputs = self.neqs
        if not (isinstance(n_states, int) and n_states > 0):
            raise ConfigError(f"n_states must be a positive integer (got {n_states})")
        if not (isinstance(n_outputs, int) and n_outputs > 0):
            raise ConfigError(f"n_outputs must be a positive integer (got {n_outputs})")
        if self.output is None:
            raise ConfigError(f"Equation '{self.name}' requires an output function")

        names = tuple(self.parameters)
        if len(set(names)) != len(names):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise ConfigError(f"Duplicate parameter names: {duplicates}")
        object.__setattr__(self, "parameters", names)

    @property
    def n_states(self) -> int:
        return self.neqs[0]

    @property
    def n_outputs(self) -> int:
        return self.neqs[1]

    def bind(self, params: ParameterInput) -> Parameters:
        """Bind a parameter vector (or name mapping) to this model's names."""
        return bind_parameters(self.parameters, params)

    # ------------------------------------------------------------------
    # Checked evaluation of the model functions
    # ------------------------------------------------------------------

    def eval_derivative(
        self,
        x: np.ndarray,
        p: Parameters,
        t: float,
        rateiv: np.ndarray,
        cov: Covariates
    ) -> np.ndarray:
        dx = self.derivative(x, p, t, rateiv, cov)
        return self._checked(dx, self.n_states, "derivative")

    def eval_init(self, p: Parameters, t: float, cov: Covariates) -> np.ndarray:
        if self.init is None:
            return np.zeros(self.n_states)
        x0 = self.init(p, t, cov)
        return self._checked(x0, self.n_states, "init")

    def eval_output(self, x: np.ndarray, p: Parameters, t: float, cov: Covariates) -> np.ndarray:
        y = self.output(x, p, t, cov)
        return self._checked(y, self.n_outputs, "output")

    def eval_lag(self, p: Parameters) -> Dict[int, float]:
        """Per-input lag times; every value must be finite and non-negative."""
        lags = self._input_map(self.lag(p), "lag")
        for input, delay in lags.items():
            if not (math.isfinite(delay) and delay >= 0):
                raise ConfigError(
                    f"lag for input {input} must be finite and >= 0 (got {delay})",
                    {"input": input, "parameters": p.to_dict()}
                )
        return lags

    def eval_fa(self, p: Parameters) -> Dict[int, float]:
        """Per-input bioavailable fractions; every value must lie in [0, 1]."""
        fractions = self._input_map(self.fa(p), "fa")
        for input, fraction in fractions.items():
            if not 0.0 <= fraction <= 1.0:
                raise ConfigError(
                    f"bioavailability for input {input} must be in [0, 1] (got {fraction})",
                    {"input": input, "parameters": p.to_dict()}
                )
        return fractions

    # ------------------------------------------------------------------
    # Simulation entry points
    # ------------------------------------------------------------------

    def simulate(
        self,
        subject: Subject,
        params: ParameterInput,
        solver: Optional["ODESolverBase"] = None,
        context: Optional["RunContext"] = None
    ) -> "SimulationResult":
        """Run the integration driver for one subject."""
        from ..simulation.driver import IntegrationDriver

        return IntegrationDriver(self, solver=solver, context=context).run(subject, params)

    def estimate_predictions(
        self,
        subject: Subject,
        params: ParameterInput,
        solver: Optional["ODESolverBase"] = None,
        context: Optional["RunContext"] = None
    ) -> SubjectPredictions:
        """Simulate ``subject`` and return one prediction per observation."""
        from ..simulation.predictions import extract_predictions

        result = self.simulate(subject, params, solver=solver, context=context)
        return extract_predictions(self, result)

    # ------------------------------------------------------------------

    def _checked(self, values: Sequence[float], expected: int, what: str) -> np.ndarray:
        array = np.asarray(values, dtype=float).reshape(-1)
        if array.size != expected:
            raise ConfigError(
                f"Equation '{self.name}' {what} returned {array.size} values, expected {expected}",
                {"function": what, "expected": expected, "got": int(array.size)}
            )
        return array

    def _input_map(self, mapping: Mapping[int, float], what: str) -> Dict[int, float]:
        result: Dict[int, float] = {}
        for input, value in (mapping or {}).items():
            if not 0 <= int(input) < self.n_states:
                raise ConfigError(
                    f"Equation '{self.name}' {what} references compartment {input} "
                    f"but the model has {self.n_states} compartments"
                )
            result[int(input)] = float(value)
        return result
