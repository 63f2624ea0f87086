"""Tests for subjects, events and the schedule builder."""

import pytest

from compsim.contracts.errors import ValidationError
from compsim.domain import Bolus, Infusion, Observation, Subject, dose
from compsim.domain.covariates import Covariate, Covariates


class TestEvents:
    """Test event variants."""

    def test_dose_factory(self):
        assert isinstance(dose(0.0, 100.0, 0), Bolus)

        infusion = dose(1.0, 100.0, 0, duration=4.0)
        assert isinstance(infusion, Infusion)
        assert infusion.rate == 25.0
        assert infusion.end_time == 5.0

    def test_dose_rejects_negative_duration(self):
        with pytest.raises(ValidationError):
            dose(0.0, 100.0, 0, duration=-1.0)

    def test_missing_observation(self):
        assert Observation(time=1.0, value=None, outeq=0).missing
        assert not Observation(time=1.0, value=2.0, outeq=0).missing


class TestSubjectBuilder:
    """Test the fluent builder."""

    def test_events_are_time_sorted(self):
        subject = (
            Subject.builder("s1")
            .observation(5.0, 1.0, 0)
            .bolus(0.0, 100.0, 0)
            .observation(2.0, 3.0, 0)
            .build()
        )

        assert [e.time for e in subject.events] == [0.0, 2.0, 5.0]
        assert len(subject.observations) == 2
        assert len(subject.doses) == 1

    def test_doses_precede_observations_at_equal_time(self):
        subject = (
            Subject.builder("s1")
            .observation(1.0, None, 0)
            .infusion(1.0, 10.0, 0, 2.0)
            .bolus(1.0, 5.0, 0)
            .build()
        )

        assert [type(e) for e in subject.events] == [Bolus, Infusion, Observation]

    def test_repeat_bolus(self):
        subject = Subject.builder("s1").bolus(2.0, 12.0, 0).repeat(2, 1.0).build()

        assert [e.time for e in subject.events] == [2.0, 3.0, 4.0]
        assert all(isinstance(e, Bolus) and e.amount == 12.0 for e in subject.events)

    def test_repeat_observation(self):
        subject = (
            Subject.builder("jamaas")
            .observation(0.0, 0.0, 0)
            .repeat(12, 1.0)
            .observation(0.0, 0.0, 1)
            .repeat(12, 1.0)
            .build()
        )

        assert len(subject.observations) == 26
        assert [o.time for o in subject.observations if o.outeq == 1] == [float(t) for t in range(13)]

    def test_repeat_zero_times_is_noop(self):
        subject = Subject.builder("s1").bolus(0.0, 1.0, 0).repeat(0, 1.0).build()
        assert len(subject.events) == 1

    def test_repeat_without_event(self):
        with pytest.raises(ValidationError, match="repeat"):
            Subject.builder("s1").repeat(3, 1.0)

    @pytest.mark.parametrize("n, interval", [(-1, 1.0), (2, 0.0), (2.5, 1.0)])
    def test_repeat_invalid_arguments(self, n, interval):
        with pytest.raises(ValidationError):
            Subject.builder("s1").bolus(0.0, 1.0, 0).repeat(n, interval)

    def test_invalid_events_fail_at_build(self):
        with pytest.raises(ValidationError, match="time"):
            Subject.builder("s1").bolus(-1.0, 1.0, 0).build()
        with pytest.raises(ValidationError, match="amount"):
            Subject.builder("s1").bolus(0.0, -1.0, 0).build()
        with pytest.raises(ValidationError, match="duration"):
            Subject.builder("s1").infusion(0.0, 1.0, 0, 0.0).build()

    def test_build_validates_against_equation(self, hmm_model):
        builder = Subject.builder("s1").bolus(0.0, 1.0, 3)
        with pytest.raises(ValidationError, match="compartment 3"):
            builder.build(hmm_model)

        builder = Subject.builder("s1").observation(1.0, None, 5)
        with pytest.raises(ValidationError, match="outeq 5"):
            builder.build(hmm_model)

    def test_subject_rejects_unsorted_events(self):
        with pytest.raises(ValidationError, match="not time-ordered"):
            Subject(id="s1", events=(Bolus(2.0, 1.0, 0), Bolus(1.0, 1.0, 0)))

    @pytest.mark.parametrize("event, message", [
        (Infusion(1.0, 6.0, 0, -1.0), "infusion duration"),
        (Infusion(1.0, 6.0, 0, 0.0), "infusion duration"),
        (Bolus(1.0, -6.0, 0), "dose amount"),
        (Observation(-1.0, None, 0), "event time"),
    ])
    def test_subject_validates_events_directly(self, event, message):
        with pytest.raises(ValidationError, match=message):
            Subject(id="s1", events=(event, Observation(5.0, None, 0)))

    def test_covariates(self):
        subject = (
            Subject.builder("s1")
            .bolus(0.0, 1.0, 0)
            .covariate("wt", 10.0, 80.0)
            .covariate("wt", 0.0, 70.0)
            .build()
        )

        assert subject.covariates.value("wt", 5.0) == pytest.approx(75.0)
        assert subject.covariates.value("wt", 20.0) == pytest.approx(80.0)
        assert subject.covariates.value("age", 0.0, default=40.0) == 40.0


class TestCovariates:
    """Test covariate interpolation."""

    def test_interpolation_holds_outside_range(self):
        cov = Covariate(name="crcl", times=(1.0, 3.0), values=(100.0, 60.0))

        assert cov.interpolate(0.0) == 100.0
        assert cov.interpolate(2.0) == pytest.approx(80.0)
        assert cov.interpolate(9.0) == 60.0

    def test_unknown_covariate(self):
        with pytest.raises(KeyError):
            Covariates().value("wt", 0.0)

    def test_invalid_covariate(self):
        with pytest.raises(ValidationError):
            Covariate(name="wt", times=(1.0,), values=(1.0, 2.0))
        with pytest.raises(ValidationError):
            Covariate(name="wt", times=(), values=())

    def test_at(self):
        covs = Covariates.from_samples({"wt": [(0.0, 70.0)], "age": [(0.0, 30.0), (10.0, 40.0)]})
        assert covs.at(5.0) == {"wt": 70.0, "age": pytest.approx(35.0)}
