"""One-compartment model with first-order absorption and elimination."""

from __future__ import annotations
from typing import Dict
import numpy as np

from ..domain.covariates import Covariates
from .equation import Equation
from .parameters import Parameters

PARAMETERS = ("ka", "ke", "tlag", "f", "v")

DEPOT = 0
CENTRAL = 1


def derivative(x: np.ndarray, p: Parameters, t: float, rateiv: np.ndarray, cov: Covariates) -> np.ndarray:
    """
    Two states:
      x[0] = amount in absorption depot
      x[1] = amount in central compartment
    """
    absorption = p.ka * x[DEPOT]
    return np.array([
        -absorption + rateiv[DEPOT],
        absorption - p.ke * x[CENTRAL] + rateiv[CENTRAL],
    ])


def lag(p: Parameters) -> Dict[int, float]:
    return {DEPOT: p.tlag}


def fa(p: Parameters) -> Dict[int, float]:
    return {DEPOT: p.f}


def output(x: np.ndarray, p: Parameters, t: float, cov: Covariates) -> np.ndarray:
    return np.array([x[CENTRAL] / p.v])


def create_model() -> Equation:
    """Oral one-compartment model; lag and bioavailability act on the depot."""
    return Equation(
        derivative=derivative,
        lag=lag,
        fa=fa,
        output=output,
        neqs=(2, 1),
        parameters=PARAMETERS,
        name="one_compartment",
        metadata={"states": ("depot", "central"), "outputs": ("conc_central",)},
    )
