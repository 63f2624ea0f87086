"""Configuration data models."""

from __future__ import annotations
from typing import Optional, Union
from pathlib import Path
from pydantic import BaseModel, Field, field_validator

from ..solver.solver_config import SCIPY_METHODS, SolverSettings


class SolverConfig(BaseModel):
    """ODE solver configuration."""

    method: str = "RK45"
    rtol: float = Field(1e-6, gt=0.0)
    atol: float = Field(1e-9, gt=0.0)
    max_step: Optional[float] = Field(None, gt=0.0)
    first_step: Optional[float] = Field(None, gt=0.0)

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        if v not in SCIPY_METHODS:
            raise ValueError(f"method must be one of {sorted(SCIPY_METHODS)}")
        return v

    def to_settings(self) -> SolverSettings:
        return SolverSettings(**self.model_dump())


class RunConfig(BaseModel):
    """Run execution configuration."""

    run_id: Optional[str] = None
    threads: int = 1

    @field_validator("threads")
    @classmethod
    def validate_threads(cls, v: int) -> int:
        if v < 1:
            raise ValueError("threads must be positive")
        return v


class LoggingConfig(BaseModel):
    """Structured logging configuration."""

    level: str = "INFO"
    json_output: bool = Field(False, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class AppConfig(BaseModel):
    """Complete application configuration."""

    run: RunConfig = Field(default_factory=RunConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_toml_file(cls, path: Union[Path, str]) -> "AppConfig":
        """Load configuration from TOML file."""
        import tomllib

        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)
