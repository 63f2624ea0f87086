"""compsim - event-driven compartmental simulation."""

__version__ = "0.1.0"

from .contracts import (
    CompSimError,
    ConfigError,
    ValidationError,
    ModelError,
    SolverError,
    NumericalError,
    Prediction,
    SubjectPredictions,
)
from .domain import Subject, SubjectBuilder, Bolus, Infusion, Observation, Covariates, read_pmetrics
from .models import Equation, Parameters, get_model, list_models
from .simulation import IntegrationDriver, SimulationResult, extract_predictions, simulate_population
from .solver import ODESolverBase, ScipyODESolver, FixedStepRK4Solver, SolverSettings

__all__ = [
    "__version__",
    "CompSimError",
    "ConfigError",
    "ValidationError",
    "ModelError",
    "SolverError",
    "NumericalError",
    "Prediction",
    "SubjectPredictions",
    "Subject",
    "SubjectBuilder",
    "Bolus",
    "Infusion",
    "Observation",
    "Covariates",
    "read_pmetrics",
    "Equation",
    "Parameters",
    "get_model",
    "list_models",
    "IntegrationDriver",
    "SimulationResult",
    "extract_predictions",
    "simulate_population",
    "ODESolverBase",
    "ScipyODESolver",
    "FixedStepRK4Solver",
    "SolverSettings",
]
