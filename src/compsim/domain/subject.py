"""Subject event schedules and their fluent builder."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING
import structlog

from ..contracts.errors import ValidationError
from .covariates import Covariates
from .events import Bolus, Event, Infusion, Observation, dose, event_sort_key, validate_event

if TYPE_CHECKING:
    from ..models.equation import Equation

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Subject:
    """Immutable, time-sorted schedule of dosing and observation events."""

    id: str
    events: Tuple[Event, ...] = ()
    covariates: Covariates = field(default_factory=Covariates)

    def __post_init__(self) -> None:
        for event in self.events:
            validate_event(event)
        for prev, curr in zip(self.events, self.events[1:]):
            if curr.time < prev.time:
                raise ValidationError(
                    f"Subject '{self.id}' events are not time-ordered: "
                    f"{curr.time} follows {prev.time}",
                    {"subject": self.id}
                )

    @staticmethod
    def builder(id: str) -> "SubjectBuilder":
        return SubjectBuilder(id)

    @property
    def observations(self) -> Tuple[Observation, ...]:
        return tuple(e for e in self.events if isinstance(e, Observation))

    @property
    def doses(self) -> Tuple[Event, ...]:
        return tuple(e for e in self.events if not isinstance(e, Observation))

    @property
    def start_time(self) -> float:
        return self.events[0].time if self.events else 0.0

    def validate(self, n_states: int, n_outputs: int) -> None:
        """Check every event index against a model's dimensions.

        Args:
            n_states: Number of compartments of the model
            n_outputs: Number of model outputs

        Raises:
            ValidationError: If any dose input or observation outeq is out of range
        """
        errors: List[str] = []
        for event in self.events:
            if isinstance(event, Observation):
                if not 0 <= event.outeq < n_outputs:
                    errors.append(
                        f"observation at t={event.time} references outeq {event.outeq} "
                        f"but the model has {n_outputs} outputs"
                    )
            elif not 0 <= event.input < n_states:
                errors.append(
                    f"dose at t={event.time} targets compartment {event.input} "
                    f"but the model has {n_states} compartments"
                )

        if errors:
            raise ValidationError(
                f"Subject '{self.id}' is incompatible with the model: {'; '.join(errors)}",
                {"subject": self.id, "n_states": n_states, "n_outputs": n_outputs}
            )


class SubjectBuilder:
    """Fluent builder for :class:`Subject`.

    Example:
        >>> subject = (
        ...     Subject.builder("s1")
        ...     .bolus(0.0, 100.0, 0)
        ...     .repeat(2, 24.0)
        ...     .observation(1.0, 3.2, 0)
        ...     .build()
        ... )
    """

    def __init__(self, id: str):
        self.id = id
        self._events: List[Event] = []
        self._covariates: Dict[str, List[Tuple[float, float]]] = {}

    def bolus(self, time: float, amount: float, input: int) -> "SubjectBuilder":
        return self._add(Bolus(time=float(time), amount=float(amount), input=int(input)))

    def infusion(self, time: float, amount: float, input: int, duration: float) -> "SubjectBuilder":
        return self._add(Infusion(
            time=float(time), amount=float(amount), input=int(input), duration=float(duration)
        ))

    def dose(self, time: float, amount: float, input: int, duration: float = 0.0) -> "SubjectBuilder":
        return self._add(dose(time, amount, input, duration))

    def observation(self, time: float, value: Optional[float], outeq: int) -> "SubjectBuilder":
        value = None if value is None else float(value)
        return self._add(Observation(time=float(time), value=value, outeq=int(outeq)))

    def missing_observation(self, time: float, outeq: int) -> "SubjectBuilder":
        return self.observation(time, None, outeq)

    def repeat(self, n: int, interval: float) -> "SubjectBuilder":
        """Re-emit the most recently added event ``n`` more times.

        Copies are placed at ``t + k * interval`` for ``k = 1..n``, where ``t``
        is the time of the repeated event.

        Raises:
            ValidationError: If there is no event to repeat or the arguments are invalid
        """
        if not self._events:
            raise ValidationError(f"Subject '{self.id}': repeat() called before any event")
        if not (isinstance(n, int) and n >= 0):
            raise ValidationError(f"repeat count must be a non-negative integer (got {n}).")
        if not interval > 0:
            raise ValidationError(f"repeat interval must be > 0 (got {interval}).")

        last = self._events[-1]
        for k in range(1, n + 1):
            self._events.append(last.shifted(k * float(interval)))
        return self

    def covariate(self, name: str, time: float, value: float) -> "SubjectBuilder":
        self._covariates.setdefault(name, []).append((float(time), float(value)))
        return self

    def build(self, equation: Optional["Equation"] = None) -> Subject:
        """Finalize the schedule.

        Args:
            equation: Optional model to validate event indices against

        Returns:
            Immutable subject with time-sorted events
        """
        # Stable sort keeps insertion order among same-kind events at equal times
        events = tuple(sorted(self._events, key=event_sort_key))
        subject = Subject(
            id=self.id,
            events=events,
            covariates=Covariates.from_samples(self._covariates),
        )

        if equation is not None:
            subject.validate(*equation.neqs)

        logger.debug(
            "Subject built",
            subject=self.id,
            n_events=len(events),
            n_observations=len(subject.observations)
        )
        return subject

    def _add(self, event: Event) -> "SubjectBuilder":
        self._events.append(event)
        return self
