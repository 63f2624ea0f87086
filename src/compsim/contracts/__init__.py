"""Core contracts and interfaces."""

from .errors import (
    CompSimError,
    ConfigError,
    ValidationError,
    ModelError,
    SolverError,
    NumericalError,
)
from .types import Prediction, SubjectPredictions

__all__ = [
    "CompSimError",
    "ConfigError",
    "ValidationError",
    "ModelError",
    "SolverError",
    "NumericalError",
    "Prediction",
    "SubjectPredictions",
]
