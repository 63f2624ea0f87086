"""Dosing and observation events."""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Union

from ..contracts.errors import ValidationError


@dataclass(frozen=True)
class Bolus:
    """Instantaneous dose added to compartment ``input`` at ``time``."""

    time: float
    amount: float
    input: int

    def shifted(self, delta: float) -> "Bolus":
        return replace(self, time=self.time + delta)


@dataclass(frozen=True)
class Infusion:
    """Constant-rate dose delivered over ``[time, time + duration)``."""

    time: float
    amount: float
    input: int
    duration: float

    @property
    def rate(self) -> float:
        return self.amount / self.duration

    @property
    def end_time(self) -> float:
        return self.time + self.duration

    def shifted(self, delta: float) -> "Infusion":
        return replace(self, time=self.time + delta)


@dataclass(frozen=True)
class Observation:
    """Schedule point at which output ``outeq`` is predicted."""

    time: float
    value: Optional[float]
    outeq: int

    @property
    def missing(self) -> bool:
        return self.value is None

    def shifted(self, delta: float) -> "Observation":
        return replace(self, time=self.time + delta)


Event = Union[Bolus, Infusion, Observation]

# Tie-break for events at the same time: doses act before the state is read.
_KIND_RANK = {Bolus: 0, Infusion: 1, Observation: 2}


def event_sort_key(event: Event) -> tuple:
    return (event.time, _KIND_RANK[type(event)])


def dose(time: float, amount: float, input: int, duration: float = 0.0) -> Union[Bolus, Infusion]:
    """Create a dose event; ``duration == 0`` gives a bolus, otherwise an infusion."""
    if duration < 0:
        raise ValidationError(f"duration must be >= 0 (got {duration}).")
    if duration == 0:
        return Bolus(time=float(time), amount=float(amount), input=int(input))
    return Infusion(time=float(time), amount=float(amount), input=int(input), duration=float(duration))


def validate_event(event: Event) -> None:
    """Check the self-contained invariants of a single event.

    Raises:
        ValidationError: If a time, amount, duration or index is invalid
    """
    if not event.time >= 0:
        raise ValidationError(f"event time must be >= 0 (got {event.time}).", {"event": event})

    if isinstance(event, Observation):
        if event.outeq < 0:
            raise ValidationError(f"outeq must be >= 0 (got {event.outeq}).", {"event": event})
        return

    if event.input < 0:
        raise ValidationError(f"input must be >= 0 (got {event.input}).", {"event": event})
    if not event.amount >= 0:
        raise ValidationError(f"dose amount must be >= 0 (got {event.amount}).", {"event": event})
    if isinstance(event, Infusion) and not event.duration > 0:
        raise ValidationError(
            f"infusion duration must be > 0 (got {event.duration}).", {"event": event}
        )
