"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import Dict

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import numpy as np
import pytest

from compsim.models import Equation, get_model
from compsim.models.hmm import EXAMPLE_PARAMETERS


@pytest.fixture
def hmm_model() -> Equation:
    """Two-pool saturable transport model."""
    return get_model("hmm")


@pytest.fixture
def oral_model() -> Equation:
    """One-compartment oral absorption model."""
    return get_model("one_compartment")


@pytest.fixture
def hmm_params() -> Dict[str, float]:
    """Parameters of the two-pool example."""
    return dict(EXAMPLE_PARAMETERS)


@pytest.fixture
def static_hmm_params(hmm_params) -> Dict[str, float]:
    """Two-pool parameters with every flux switched off."""
    params = dict(hmm_params)
    params.update({"FOA": 0.0, "VAB": 0.0, "VBA": 0.0, "VBO": 0.0})
    return params


@pytest.fixture
def oral_params() -> Dict[str, float]:
    return {"ka": 1.2, "ke": 0.3, "tlag": 0.0, "f": 1.0, "v": 50.0}


@pytest.fixture
def decay_model() -> Equation:
    """Single compartment with first-order elimination, ``dx/dt = -k x + rate``."""
    return Equation(
        derivative=lambda x, p, t, rateiv, cov: np.array([-p.k * x[0] + rateiv[0]]),
        init=lambda p, t, cov: np.array([p.x0]),
        output=lambda x, p, t, cov: np.array([x[0]]),
        neqs=(1, 1),
        parameters=("k", "x0"),
        name="decay",
    )
