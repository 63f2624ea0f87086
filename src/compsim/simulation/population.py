"""Simulation of many independent subjects."""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import List, Mapping, Optional, Sequence, TYPE_CHECKING
import numpy as np
import structlog

from ..contracts.errors import ConfigError
from ..contracts.types import SubjectPredictions
from ..domain.subject import Subject
from ..engine.context import RunContext
from ..models.parameters import ParameterInput
from ..solver.ode_solver import create_solver
from ..solver.solver_config import SolverSettings

if TYPE_CHECKING:
    from ..models.equation import Equation

logger = structlog.get_logger(__name__)


def simulate_population(
    equation: "Equation",
    subjects: Sequence[Subject],
    params: ParameterInput | Sequence[ParameterInput],
    settings: Optional[SolverSettings] = None,
    threads: int = 1,
    context: Optional[RunContext] = None
) -> List[SubjectPredictions]:
    """Predict every subject, optionally on a thread pool.

    Each subject gets its own driver and solver, so runs share nothing
    mutable. Results keep the order of ``subjects``.

    Args:
        equation: Model shared by all runs
        subjects: Subjects to simulate
        params: One parameter vector for everybody, or one per subject
        settings: Solver settings for every run
        threads: Number of worker threads
        context: Optional parent run context

    Raises:
        ConfigError: If per-subject parameters do not match the subject count
    """
    if threads < 1:
        raise ConfigError(f"threads must be positive (got {threads})")

    per_subject = _expand_params(params, len(subjects))
    context = context or RunContext()

    def run_one(index: int) -> SubjectPredictions:
        return equation.estimate_predictions(
            subjects[index],
            per_subject[index],
            solver=create_solver(settings),
            context=context,
        )

    context.logger.info(
        "Population simulation started", n_subjects=len(subjects), threads=threads, model=equation.name
    )
    if threads == 1 or len(subjects) <= 1:
        results = [run_one(i) for i in range(len(subjects))]
    else:
        with ThreadPoolExecutor(max_workers=threads) as executor:
            results = list(executor.map(run_one, range(len(subjects))))

    context.logger.info("Population simulation completed", n_subjects=len(results))
    return results


def _expand_params(params, n_subjects: int) -> list:
    if _is_per_subject(params):
        if len(params) != n_subjects:
            raise ConfigError(
                f"Got {len(params)} parameter vectors for {n_subjects} subjects",
                {"n_params": len(params), "n_subjects": n_subjects}
            )
        return list(params)
    return [params] * n_subjects


def _is_per_subject(params) -> bool:
    if isinstance(params, Mapping):
        return False
    if isinstance(params, np.ndarray):
        return params.ndim == 2
    if isinstance(params, (list, tuple)) and params:
        return isinstance(params[0], (Mapping, list, tuple, np.ndarray))
    return False
