"""Import of subject schedules from Pmetrics-style tables.

Expected columns (case-insensitive): ``ID, EVID, TIME, DUR, DOSE, ADDL, II,
INPUT, OUT, OUTEQ``. ``INPUT`` and ``OUTEQ`` are 1-based in the file and
0-based in the resulting subjects. ``OUT == -99`` marks a missing observation.
Any other column is read as a covariate, sampled on rows where it is set.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Union
import numpy as np
import pandas as pd
import structlog

from ..contracts.errors import ValidationError
from .subject import Subject, SubjectBuilder

logger = structlog.get_logger(__name__)

REQUIRED_COLUMNS = ["ID", "EVID", "TIME", "DUR", "DOSE", "ADDL", "II", "INPUT", "OUT", "OUTEQ"]
MISSING_OUT = -99.0


def read_pmetrics(path: Union[str, Path]) -> List[Subject]:
    """Read subjects from a Pmetrics-style CSV file.

    Raises:
        ValidationError: If the file cannot be parsed or has invalid rows
    """
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"Data file not found: {path}")
    try:
        df = pd.read_csv(path, na_values=["."], comment="#")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValidationError(f"Failed to read data from {path}: {e}")
    return subjects_from_dataframe(df)


def subjects_from_dataframe(df: pd.DataFrame) -> List[Subject]:
    """Convert a Pmetrics-style table into subjects, preserving ID order."""
    df = df.rename(columns={c: c.strip().upper() for c in df.columns})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError(f"Missing required columns: {missing}")

    covariate_columns = [c for c in df.columns if c not in REQUIRED_COLUMNS]
    subjects: List[Subject] = []

    for subject_id, rows in df.groupby("ID", sort=False):
        builder = Subject.builder(str(subject_id))
        for row in rows.to_dict("records"):
            _add_row(builder, row)
            for name in covariate_columns:
                value = row[name]
                if pd.notna(value):
                    builder.covariate(name.lower(), float(row["TIME"]), float(value))
        subjects.append(builder.build())

    logger.info("Subjects imported", n_subjects=len(subjects), covariates=covariate_columns)
    return subjects


def _add_row(builder: SubjectBuilder, row: dict) -> None:
    evid = int(row["EVID"])
    time = float(row["TIME"])

    if evid == 0:
        outeq = _one_based(row["OUTEQ"], "OUTEQ", builder.id)
        out = row["OUT"]
        if pd.isna(out) or np.isclose(float(out), MISSING_OUT):
            builder.missing_observation(time, outeq)
        else:
            builder.observation(time, float(out), outeq)
    elif evid == 1:
        duration = 0.0 if pd.isna(row["DUR"]) else float(row["DUR"])
        builder.dose(time, float(row["DOSE"]), _one_based(row["INPUT"], "INPUT", builder.id), duration)
        addl = 0 if pd.isna(row["ADDL"]) else int(row["ADDL"])
        if addl > 0:
            if pd.isna(row["II"]):
                raise ValidationError(f"Subject '{builder.id}': ADDL given without II at t={time}")
            builder.repeat(addl, float(row["II"]))
    else:
        raise ValidationError(f"Subject '{builder.id}': unsupported EVID {evid} at t={time}")


def _one_based(value, column: str, subject_id: str) -> int:
    if pd.isna(value) or int(value) < 1:
        raise ValidationError(f"Subject '{subject_id}': {column} must be a 1-based index (got {value})")
    return int(value) - 1
