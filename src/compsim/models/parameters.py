"""Named binding of flat parameter vectors."""

from __future__ import annotations
from typing import Dict, Iterator, Mapping, Sequence, Tuple, Union
import numpy as np

from ..contracts.errors import ConfigError

ParameterInput = Union[Sequence[float], np.ndarray, Mapping[str, float]]


class Parameters(Mapping[str, float]):
    """Read-only parameter vector with access by name.

    Values are available as ``p["KAB"]``, ``p.KAB`` or positionally through
    :attr:`values`.
    """

    __slots__ = ("_names", "_values", "_index")

    def __init__(self, names: Sequence[str], values: Sequence[float]):
        names = tuple(names)
        array = np.array(values, dtype=float).reshape(-1)
        if array.size != len(names):
            raise ConfigError(
                f"Parameter vector has {array.size} values but the model declares "
                f"{len(names)} parameters {list(names)}",
                {"expected": list(names), "n_values": int(array.size)}
            )
        array.setflags(write=False)
        object.__setattr__(self, "_names", names)
        object.__setattr__(self, "_values", array)
        object.__setattr__(self, "_index", {name: i for i, name in enumerate(names)})

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def values(self) -> np.ndarray:
        return self._values

    def __getitem__(self, name: str) -> float:
        try:
            return float(self._values[self._index[name]])
        except KeyError:
            raise KeyError(f"Unknown parameter: {name}") from None

    def __getattr__(self, name: str) -> float:
        if name.startswith("_"):
            raise AttributeError(name)
        index = self._index
        if name in index:
            return float(self._values[index[name]])
        raise AttributeError(f"{type(self).__name__} has no parameter '{name}'")

    def __setattr__(self, name: str, value) -> None:
        raise AttributeError("Parameters are read-only")

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        items = ", ".join(f"{n}={v:g}" for n, v in zip(self._names, self._values))
        return f"Parameters({items})"

    def to_dict(self) -> Dict[str, float]:
        return {name: float(v) for name, v in zip(self._names, self._values)}


def bind_parameters(names: Sequence[str], params: ParameterInput) -> Parameters:
    """Bind a flat vector or a name mapping to ``names``.

    Raises:
        ConfigError: On length mismatch, unknown or missing names, or
            non-finite values
    """
    if isinstance(params, Parameters) and params.names == tuple(names):
        return params

    if isinstance(params, Mapping):
        unknown = sorted(set(params) - set(names))
        missing = [n for n in names if n not in params]
        if unknown or missing:
            raise ConfigError(
                f"Parameter mapping does not match the model: unknown={unknown}, missing={missing}",
                {"unknown": unknown, "missing": missing}
            )
        values = [params[n] for n in names]
    else:
        values = list(params)

    try:
        bound = Parameters(names, values)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Parameter values must be numeric: {e}")

    if not np.all(np.isfinite(bound.values)):
        raise ConfigError("Parameter values must be finite", {"parameters": bound.to_dict()})
    return bound
