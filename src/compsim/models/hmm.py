"""
Two-pool saturable transport model

Pools A and B exchange substance through Michaelis-Menten type fluxes and
B drains to the outside. A third state tracks the total pool:

    fab = VAB / (1 + KAB / cA)      A -> B
    fba = VBA / (1 + KBA / cB)      B -> A
    fbo = VBO / (1 + KBO / cB)      B -> output

    dQA/dt = FOA + fba - fab
    dQB/dt = fab - fba - fbo
    dQT/dt = FOA - fbo

with concentrations cA = QA / SA and cB = QB / SB.
"""

from __future__ import annotations
import numpy as np

from ..domain.covariates import Covariates
from .equation import Equation
from .parameters import Parameters

PARAMETERS = ("SA", "SB", "QA0", "QB0", "QT0", "FOA", "VAB", "VBA", "VBO", "KAB", "KBA", "KBO")

# (n_states, n_outputs)
NEQS = (3, 3)


def saturable_flux(vmax: float, km: float, concentration: float) -> float:
    """Saturable flux ``vmax / (1 + km / c)``.

    An empty pool carries no flux. At ``c == -km`` the state values are numpy
    floats, so the division yields ``inf`` (with a RuntimeWarning) and the
    driver reports the non-finite derivative as a ``NumericalError``.
    """
    if concentration == 0.0:
        return 0.0
    return vmax / (1.0 + km / concentration)


def derivative(x: np.ndarray, p: Parameters, t: float, rateiv: np.ndarray, cov: Covariates) -> np.ndarray:
    con_a = x[0] / p.SA
    con_b = x[1] / p.SB

    fab = saturable_flux(p.VAB, p.KAB, con_a)
    fba = saturable_flux(p.VBA, p.KBA, con_b)
    fbo = saturable_flux(p.VBO, p.KBO, con_b)

    return np.array([
        p.FOA + fba - fab + rateiv[0],
        fab - fba - fbo + rateiv[1],
        p.FOA - fbo + rateiv[2],
    ])


def init(p: Parameters, t: float, cov: Covariates) -> np.ndarray:
    return np.array([p.QA0, p.QB0, p.QT0])


def output(x: np.ndarray, p: Parameters, t: float, cov: Covariates) -> np.ndarray:
    return np.array([
        x[0] / p.SA,
        x[1] / p.SB,
        x[2] / (p.SA + p.SB),
    ])


def create_model() -> Equation:
    """Two-pool saturable transport model (no lag, full bioavailability)."""
    return Equation(
        derivative=derivative,
        init=init,
        output=output,
        neqs=NEQS,
        parameters=PARAMETERS,
        name="hmm",
        metadata={
            "states": ("QA", "QB", "QT"),
            "outputs": ("conc_a", "conc_b", "conc_total"),
        },
    )


EXAMPLE_PARAMETERS = {
    "SA": 20.0,    # size of pool A
    "SB": 25.0,    # size of pool B
    "QA0": 6.0,    # initial quantity in pool A
    "QB0": 9.0,    # initial quantity in pool B
    "QT0": 15.0,   # initial total quantity
    "FOA": 7.0,    # external input flux to pool A
    "VAB": 18.0,
    "VBA": 13.0,
    "VBO": 8.0,
    "KAB": 0.32,
    "KBA": 0.36,
    "KBO": 0.31,
}
