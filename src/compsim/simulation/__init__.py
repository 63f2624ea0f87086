"""Integration driver, prediction extraction and population runs."""

from .driver import IntegrationDriver, SimulationResult, ObservationState, build_timeline
from .predictions import extract_predictions
from .population import simulate_population

__all__ = [
    "IntegrationDriver",
    "SimulationResult",
    "ObservationState",
    "build_timeline",
    "extract_predictions",
    "simulate_population",
]
