"""Time-varying covariates."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple
import numpy as np

from ..contracts.errors import ValidationError


@dataclass(frozen=True)
class Covariate:
    """A covariate sampled at discrete times.

    Values are linearly interpolated between samples and held constant
    before the first and after the last sample.
    """

    name: str
    times: Tuple[float, ...]
    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.times) != len(self.values):
            raise ValidationError(f"covariate '{self.name}' has mismatched times and values")
        if not self.times:
            raise ValidationError(f"covariate '{self.name}' has no samples")
        if any(b < a for a, b in zip(self.times, self.times[1:])):
            raise ValidationError(f"covariate '{self.name}' times must be non-decreasing")

    def interpolate(self, time: float) -> float:
        return float(np.interp(time, self.times, self.values))


@dataclass(frozen=True)
class Covariates(Mapping[str, Covariate]):
    """Read-only collection of covariates for one subject."""

    covariates: Mapping[str, Covariate] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Covariate:
        return self.covariates[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.covariates)

    def __len__(self) -> int:
        return len(self.covariates)

    def value(self, name: str, time: float, default: Optional[float] = None) -> float:
        """Covariate ``name`` at ``time``.

        Raises:
            KeyError: If the covariate is unknown and no default is given
        """
        if name not in self.covariates:
            if default is None:
                raise KeyError(f"Unknown covariate: {name}")
            return default
        return self.covariates[name].interpolate(time)

    def at(self, time: float) -> Dict[str, float]:
        """All covariates evaluated at ``time``."""
        return {name: cov.interpolate(time) for name, cov in self.covariates.items()}

    @classmethod
    def from_samples(cls, samples: Mapping[str, List[Tuple[float, float]]]) -> "Covariates":
        covariates = {}
        for name, points in samples.items():
            ordered = sorted(points, key=lambda p: p[0])
            covariates[name] = Covariate(
                name=name,
                times=tuple(float(t) for t, _ in ordered),
                values=tuple(float(v) for _, v in ordered),
            )
        return cls(covariates)
