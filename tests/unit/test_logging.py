"""Tests for logging setup and run contexts."""

import json

import pytest
import structlog

from compsim.config import LoggingConfig
from compsim.engine.context import RunContext
from compsim.log import configure_from_config, configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_output(capsys):
    configure_logging("DEBUG", json_output=True)
    context = RunContext(run_id="abc", subject="s1")

    context.start_run()
    runtime = context.end_run(n_intervals=3)

    lines = [json.loads(line) for line in capsys.readouterr().err.splitlines()]
    assert [line["event"] for line in lines] == ["Simulation started", "Simulation completed"]
    assert lines[1]["run_id"] == "abc"
    assert lines[1]["subject"] == "s1"
    assert lines[1]["n_intervals"] == 3
    assert lines[1]["level"] == "debug"
    assert runtime >= 0.0


def test_level_filtering(capsys):
    configure_from_config(LoggingConfig(level="WARNING", json=True))
    context = RunContext()

    context.logger.info("hidden")
    context.logger.warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert json.loads(err)["event"] == "shown"


def test_child_context_shares_run_id():
    parent = RunContext(run_id="run-1")
    child = parent.bind(subject="s2")

    assert child.run_id == "run-1"
    assert child.get_runtime_metadata() == {"run_id": "run-1", "subject": "s2", "runtime_s": 0.0}
    assert child.end_run() == 0.0


def test_generated_run_id():
    assert len(RunContext().run_id) == 12
