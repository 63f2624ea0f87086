"""Integration driver.

Advances a subject's state through its event schedule. The timeline is split
into maximal continuous sub-intervals bounded by observations, bolus
applications (shifted by the input's lag) and infusion starts and stops. Each
sub-interval is integrated by the pluggable solver; discrete updates happen
only at sub-interval boundaries, in this order:

1. bolus jumps (``amount * fa[input]``)
2. infusion stops, then starts
3. observation snapshots
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING
import numpy as np

from ..contracts.errors import NumericalError, SolverError
from ..domain.covariates import Covariates
from ..domain.events import Bolus, Infusion, Observation
from ..domain.subject import Subject
from ..engine.context import RunContext
from ..models.parameters import ParameterInput, Parameters
from ..solver.base import ODESolverBase
from ..solver.ode_solver import create_solver

if TYPE_CHECKING:
    from ..models.equation import Equation


class DriverState(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    FINISHED = "finished"


class ActionKind(Enum):
    BOLUS = 0
    INFUSION_STOP = 1
    INFUSION_START = 2
    OBSERVATION = 3


@dataclass(frozen=True)
class Action:
    """Discrete update applied at a sub-interval boundary."""

    time: float
    kind: ActionKind
    order: int
    event: Any
    amount: float = 0.0

    @property
    def sort_key(self) -> Tuple[float, int, int]:
        return (self.time, self.kind.value, self.order)


@dataclass(frozen=True)
class ObservationState:
    """State snapshot taken at an observation event."""

    observation: Observation
    state: np.ndarray


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one driver run, consumed by the prediction extractor."""

    subject: Subject
    parameters: Parameters
    observation_states: Tuple[ObservationState, ...]
    final_time: float
    final_state: np.ndarray
    metadata: Mapping[str, Any] = field(default_factory=dict)


def build_timeline(subject: Subject, lags: Dict[int, float], fractions: Dict[int, float]) -> List[Action]:
    """Expand a subject's events into time-ordered driver actions.

    Args:
        subject: Time-sorted schedule
        lags: Per-input lag times; boluses are applied at ``time + lag``
        fractions: Per-input bioavailable fractions applied to bolus amounts

    Returns:
        Actions sorted by time, kind and schedule order
    """
    actions: List[Action] = []
    for order, event in enumerate(subject.events):
        if isinstance(event, Bolus):
            actions.append(Action(
                time=event.time + lags.get(event.input, 0.0),
                kind=ActionKind.BOLUS,
                order=order,
                event=event,
                amount=event.amount * fractions.get(event.input, 1.0),
            ))
        elif isinstance(event, Infusion):
            actions.append(Action(event.time, ActionKind.INFUSION_START, order, event, event.rate))
            actions.append(Action(event.end_time, ActionKind.INFUSION_STOP, order, event, event.rate))
        else:
            actions.append(Action(event.time, ActionKind.OBSERVATION, order, event))

    actions.sort(key=lambda a: a.sort_key)
    return actions


class IntegrationDriver:
    """Single-threaded state machine simulating one subject at a time.

    A driver instance owns its solver; use one driver per concurrent run.
    """

    def __init__(
        self,
        equation: "Equation",
        solver: Optional[ODESolverBase] = None,
        context: Optional[RunContext] = None
    ):
        self.equation = equation
        self.solver = solver or create_solver()
        self.context = context
        self.state = DriverState.UNINITIALIZED

    def run(self, subject: Subject, params: ParameterInput) -> SimulationResult:
        """Simulate ``subject`` with parameter vector ``params``.

        Raises:
            ConfigError: If parameters or event indices do not match the model
            SolverError: If the solver fails on an interval
            NumericalError: If the state becomes non-finite
        """
        equation = self.equation
        n_states, n_outputs = equation.neqs

        # Configuration errors surface before any integration
        subject.validate(n_states, n_outputs)
        p = equation.bind(params)
        lags = equation.eval_lag(p)
        fractions = equation.eval_fa(p)
        timeline = build_timeline(subject, lags, fractions)

        context = (self.context or RunContext()).bind(subject=subject.id, model=equation.name)
        context.start_run()

        self.state = DriverState.UNINITIALIZED
        cov = subject.covariates
        t = subject.start_time
        x = np.zeros(n_states)
        active: Dict[int, Infusion] = {}
        rates = self._rates(active, n_states)
        snapshots: List[ObservationState] = []
        n_intervals = 0

        for action in timeline:
            if self.state is DriverState.UNINITIALIZED:
                x = equation.eval_init(p, t, cov)
                self._check_finite(x, t, p, context)
                self.state = DriverState.RUNNING

            if action.time > t:
                x = self._advance(x, p, rates, cov, t, action.time, context)
                t = action.time
                n_intervals += 1

            if action.kind is ActionKind.BOLUS:
                x = x.copy()
                x[action.event.input] += action.amount
                self._check_finite(x, t, p, context)
            elif action.kind is ActionKind.INFUSION_START:
                active[action.order] = action.event
                rates = self._rates(active, n_states)
            elif action.kind is ActionKind.INFUSION_STOP:
                active.pop(action.order, None)
                rates = self._rates(active, n_states)
            else:
                snapshots.append(ObservationState(observation=action.event, state=x.copy()))

        if self.state is DriverState.UNINITIALIZED:
            x = equation.eval_init(p, t, cov)
        self.state = DriverState.FINISHED

        runtime = context.end_run(n_intervals=n_intervals, n_observations=len(snapshots))
        return SimulationResult(
            subject=subject,
            parameters=p,
            observation_states=tuple(snapshots),
            final_time=t,
            final_state=x,
            metadata={
                "model": equation.name,
                "solver": self.solver.name,
                "n_intervals": n_intervals,
                "runtime_s": runtime,
                "run_id": context.run_id,
            },
        )

    def _advance(
        self,
        x: np.ndarray,
        p: Parameters,
        rates: np.ndarray,
        cov: Covariates,
        t_start: float,
        t_end: float,
        context: RunContext
    ) -> np.ndarray:
        equation = self.equation

        def rhs(t: float, y: np.ndarray) -> np.ndarray:
            dy = equation.eval_derivative(y, p, t, rates, cov)
            bad = np.flatnonzero(~np.isfinite(dy))
            if bad.size:
                raise NumericalError(
                    f"Non-finite derivative in compartment {int(bad[0])} at t={t}",
                    time=float(t),
                    compartment=int(bad[0]),
                    parameters=p.to_dict(),
                )
            return dy

        try:
            x_end = self.solver.integrate(rhs, x, (t_start, t_end))
        except SolverError as e:
            e.details.setdefault("parameters", p.to_dict())
            context.logger.error(
                "Solver failure", t_start=t_start, t_end=t_end, error=e.message
            )
            raise

        self._check_finite(x_end, t_end, p, context)
        return x_end

    @staticmethod
    def _rates(active: Dict[int, Infusion], n_states: int) -> np.ndarray:
        rates = np.zeros(n_states)
        for infusion in active.values():
            rates[infusion.input] += infusion.rate
        rates.setflags(write=False)
        return rates

    @staticmethod
    def _check_finite(x: np.ndarray, t: float, p: Parameters, context: RunContext) -> None:
        bad = np.flatnonzero(~np.isfinite(x))
        if bad.size:
            compartment = int(bad[0])
            context.logger.error(
                "Non-finite state", time=t, compartment=compartment, value=float(x[compartment])
            )
            raise NumericalError(
                f"Non-finite state in compartment {compartment} at t={t}",
                time=t,
                compartment=compartment,
                parameters=p.to_dict(),
            )
