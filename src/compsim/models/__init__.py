"""Equation definitions and built-in models."""

from typing import Callable, Dict, List

from .equation import Equation, no_lag, full_bioavailability
from .parameters import Parameters, bind_parameters
from . import hmm, one_compartment

_BUILTIN_MODELS: Dict[str, Callable[[], Equation]] = {
    "hmm": hmm.create_model,
    "one_compartment": one_compartment.create_model,
}


def get_model(name: str) -> Equation:
    """Create a built-in model by name.

    Raises:
        KeyError: If the model is not known
    """
    if name not in _BUILTIN_MODELS:
        raise KeyError(f"Model not found: {name}")
    return _BUILTIN_MODELS[name]()


def list_models() -> List[str]:
    return sorted(_BUILTIN_MODELS)


__all__ = [
    "Equation",
    "Parameters",
    "bind_parameters",
    "no_lag",
    "full_bioavailability",
    "get_model",
    "list_models",
]
