"""Error definitions for the compsim package."""

from __future__ import annotations
from typing import Any, Dict, Optional


class CompSimError(Exception):
    """Base exception for all compsim errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(CompSimError):
    """Configuration errors detected before any integration begins."""
    pass


class ValidationError(ConfigError):
    """Input validation errors (schedules, indices, parameter binding)."""
    pass


class ModelError(CompSimError):
    """Model evaluation errors."""
    pass


class SolverError(ModelError):
    """ODE solver errors."""
    pass


class NumericalError(SolverError):
    """Non-finite state produced during integration.

    ``details`` carries the ``time``, ``compartment`` and ``parameters``
    needed to reproduce the failure.
    """

    def __init__(
        self,
        message: str,
        time: float,
        compartment: int,
        parameters: Optional[Dict[str, float]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        merged: Dict[str, Any] = dict(details or {})
        merged.update({
            "time": time,
            "compartment": compartment,
            "parameters": dict(parameters or {}),
        })
        super().__init__(message, merged)
        self.time = time
        self.compartment = compartment
        self.parameters = merged["parameters"]
