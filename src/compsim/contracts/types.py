"""Result types produced by a simulation run."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
import numpy as np
import pandas as pd


@dataclass(frozen=True)
class Prediction:
    """Model prediction for a single observation event."""

    time: float
    """Observation time"""

    outeq: int
    """Index of the output dimension this prediction belongs to"""

    prediction: float
    """Model-predicted output value"""

    observation: Optional[float] = None
    """Observed value, ``None`` when missing"""

    outputs: Tuple[float, ...] = ()
    """Full output vector at ``time``"""


@dataclass(frozen=True)
class SubjectPredictions:
    """Predictions for one subject, in schedule order."""

    subject_id: str
    predictions: Tuple[Prediction, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.predictions)

    def __iter__(self):
        return iter(self.predictions)

    def flat_predictions(self) -> np.ndarray:
        """Predicted values, one per observation."""
        return np.array([p.prediction for p in self.predictions], dtype=float)

    def flat_observations(self) -> np.ndarray:
        """Observed values with ``nan`` for missing observations."""
        return np.array(
            [np.nan if p.observation is None else p.observation for p in self.predictions],
            dtype=float
        )

    def flat_times(self) -> np.ndarray:
        return np.array([p.time for p in self.predictions], dtype=float)

    def flat_outeqs(self) -> np.ndarray:
        return np.array([p.outeq for p in self.predictions], dtype=int)

    def by_time(self) -> Dict[float, np.ndarray]:
        """Group predictions by observation time.

        Returns:
            Mapping from time to the predicted values observed at that time,
            ordered by ``outeq``
        """
        grouped: Dict[float, List[Prediction]] = {}
        for p in self.predictions:
            grouped.setdefault(p.time, []).append(p)
        return {
            t: np.array([p.prediction for p in sorted(ps, key=lambda p: p.outeq)], dtype=float)
            for t, ps in grouped.items()
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view with one row per observation."""
        return pd.DataFrame({
            "id": [self.subject_id] * len(self.predictions),
            "time": self.flat_times(),
            "outeq": self.flat_outeqs(),
            "obs": self.flat_observations(),
            "pred": self.flat_predictions(),
        })
