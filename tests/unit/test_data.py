"""Tests for Pmetrics-style data import."""

import pandas as pd
import pytest

from compsim.contracts.errors import ValidationError
from compsim.domain import Bolus, Infusion, Observation, read_pmetrics, subjects_from_dataframe


CSV = """\
ID,EVID,TIME,DUR,DOSE,ADDL,II,INPUT,OUT,OUTEQ,WT
1,1,0,0,100,2,12,1,.,.,70
1,0,1,.,.,.,.,.,2.5,1,.
1,0,2,.,.,.,.,.,-99,1,72
2,1,0,2,50,.,.,2,.,.,.
2,0,4,.,.,.,.,.,1.1,2,.
"""


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text(CSV)
    return path


def test_read_subjects(data_file):
    subjects = read_pmetrics(data_file)

    assert [s.id for s in subjects] == ["1", "2"]

    first = subjects[0]
    assert [e.time for e in first.doses] == [0.0, 12.0, 24.0]
    assert all(isinstance(e, Bolus) and e.input == 0 for e in first.doses)
    assert first.observations == (
        Observation(time=1.0, value=2.5, outeq=0),
        Observation(time=2.0, value=None, outeq=0),
    )

    second = subjects[1]
    infusion = second.doses[0]
    assert isinstance(infusion, Infusion)
    assert infusion.input == 1
    assert infusion.rate == 25.0
    assert second.observations[0].outeq == 1


def test_covariates(data_file):
    first, second = read_pmetrics(data_file)

    assert list(first.covariates) == ["wt"]
    assert first.covariates.value("wt", 0.0) == 70.0
    assert first.covariates.value("wt", 1.0) == pytest.approx(71.0)
    assert len(second.covariates) == 0


def test_column_names_are_case_insensitive():
    df = pd.DataFrame({
        "id": [7], "evid": [0], "time": [1.0], "dur": [None], "dose": [None],
        "addl": [None], "ii": [None], "input": [None], "out": [3.0], "outeq": [1],
    })
    (subject,) = subjects_from_dataframe(df)

    assert subject.id == "7"
    assert subject.observations[0].value == 3.0


def test_missing_columns():
    with pytest.raises(ValidationError, match="Missing required columns"):
        subjects_from_dataframe(pd.DataFrame({"ID": [1], "TIME": [0.0]}))


def test_unsupported_evid(tmp_path):
    path = tmp_path / "reset.csv"
    path.write_text(CSV.replace("2,0,4,", "2,4,4,"))
    with pytest.raises(ValidationError, match="unsupported EVID 4"):
        read_pmetrics(path)


def test_addl_requires_interval(tmp_path):
    path = tmp_path / "addl.csv"
    path.write_text(CSV.replace("100,2,12,", "100,2,.,"))
    with pytest.raises(ValidationError, match="ADDL given without II"):
        read_pmetrics(path)


def test_zero_input_index(tmp_path):
    path = tmp_path / "input.csv"
    path.write_text(CSV.replace("2,50,.,.,2,", "2,50,.,.,0,"))
    with pytest.raises(ValidationError, match="1-based"):
        read_pmetrics(path)


def test_missing_file(tmp_path):
    with pytest.raises(ValidationError, match="not found"):
        read_pmetrics(tmp_path / "absent.csv")
