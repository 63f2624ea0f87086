"""Configurable numerical solver settings."""

from __future__ import annotations
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

SCIPY_METHODS = {"RK45", "RK23", "DOP853", "Radau", "BDF", "LSODA"}


class SolverSettings(BaseModel):
    """Numerical solver settings for :func:`scipy.integrate.solve_ivp`."""

    rtol: float = Field(1e-6, gt=0.0, description="Relative tolerance")
    atol: float = Field(1e-9, gt=0.0, description="Absolute tolerance")
    method: str = Field("RK45", description="Integration method (RK45, BDF, LSODA, etc.)")
    max_step: Optional[float] = Field(None, gt=0.0, description="Maximum step size")
    first_step: Optional[float] = Field(None, gt=0.0, description="Initial step size")

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        if v not in SCIPY_METHODS:
            raise ValueError(f"method must be one of {sorted(SCIPY_METHODS)}")
        return v

    def get_scipy_options(self) -> Dict[str, Any]:
        """Get options formatted for scipy.integrate.solve_ivp.

        Returns:
            Dictionary with scipy-compatible solver options
        """
        options: Dict[str, Any] = {
            'rtol': self.rtol,
            'atol': self.atol,
            'method': self.method
        }

        if self.max_step is not None:
            options['max_step'] = self.max_step

        if self.first_step is not None:
            options['first_step'] = self.first_step

        return options


# Presets
DEFAULT_SETTINGS = SolverSettings()
HIGH_PRECISION_SETTINGS = SolverSettings(rtol=1e-10, atol=1e-12, method="DOP853")
STIFF_SETTINGS = SolverSettings(rtol=1e-6, atol=1e-9, method="BDF")
