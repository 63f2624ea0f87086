"""Subjects, events and covariates."""

from .events import Bolus, Infusion, Observation, Event, dose
from .covariates import Covariate, Covariates
from .subject import Subject, SubjectBuilder
from .data import read_pmetrics, subjects_from_dataframe

__all__ = [
    "Bolus",
    "Infusion",
    "Observation",
    "Event",
    "dose",
    "Covariate",
    "Covariates",
    "Subject",
    "SubjectBuilder",
    "read_pmetrics",
    "subjects_from_dataframe",
]
