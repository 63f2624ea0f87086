"""Prediction extraction at observation events."""

from __future__ import annotations
from typing import List, TYPE_CHECKING

from ..contracts.types import Prediction, SubjectPredictions
from .driver import SimulationResult

if TYPE_CHECKING:
    from ..models.equation import Equation


def extract_predictions(equation: "Equation", result: SimulationResult) -> SubjectPredictions:
    """Evaluate the output mapping at every recorded observation.

    Args:
        equation: Model whose output function is evaluated
        result: Driver result holding one state snapshot per observation

    Returns:
        One prediction per observation, in schedule order
    """
    p = result.parameters
    cov = result.subject.covariates
    predictions: List[Prediction] = []

    for snapshot in result.observation_states:
        obs = snapshot.observation
        y = equation.eval_output(snapshot.state, p, obs.time, cov)
        predictions.append(Prediction(
            time=obs.time,
            outeq=obs.outeq,
            prediction=float(y[obs.outeq]),
            observation=obs.value,
            outputs=tuple(float(v) for v in y),
        ))

    return SubjectPredictions(
        subject_id=result.subject.id,
        predictions=tuple(predictions),
        metadata=dict(result.metadata),
    )
