"""Main CLI application."""

from pathlib import Path
from typing import Optional
import json

import pandas as pd
import typer
from rich.console import Console
from rich.table import Table

from ..config import load_config
from ..contracts.errors import CompSimError
from ..contracts.types import SubjectPredictions
from ..domain import Subject, read_pmetrics
from ..engine.context import RunContext
from ..log import configure_from_config
from ..models import get_model, list_models
from ..models.hmm import EXAMPLE_PARAMETERS
from ..simulation import simulate_population
from ..solver import create_solver

app = typer.Typer(
    name="compsim",
    help="Event-driven compartmental simulation",
    no_args_is_help=True
)
console = Console()


def example_subject(n_doses: int = 3, amount: float = 12.0, interval: float = 1.0,
                    horizon: float = 3.0) -> Subject:
    """Two-pool example: repeated boluses into pool A, all three outputs observed hourly."""
    builder = Subject.builder("jamaas").bolus(0.0, amount, 0)
    if n_doses > 1:
        builder.repeat(n_doses - 1, interval)
    n_obs = int(horizon)
    for outeq in range(3):
        builder.missing_observation(1.0, outeq)
        if n_obs > 1:
            builder.repeat(n_obs - 1, 1.0)
    return builder.build()


@app.command()
def example(
    doses: int = typer.Option(3, "--doses", help="Number of boluses"),
    amount: float = typer.Option(12.0, "--amount", help="Bolus amount"),
    interval: float = typer.Option(1.0, "--interval", help="Time between boluses"),
    horizon: float = typer.Option(3.0, "--horizon", help="Last observation time"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
):
    """Simulate the two-pool saturable transport example."""
    try:
        cfg = load_config(config)
        configure_from_config(cfg.logging)

        model = get_model("hmm")
        subject = example_subject(doses, amount, interval, horizon)
        context = RunContext(run_id=cfg.run.run_id)
        predictions = model.estimate_predictions(
            subject, EXAMPLE_PARAMETERS, solver=create_solver(cfg.solver.to_settings()), context=context
        )
        _print_predictions(predictions)
    except CompSimError as e:
        console.print(f"❌ {e.message}", style="red")
        raise typer.Exit(1)


@app.command()
def simulate(
    data: Path = typer.Argument(..., help="Pmetrics-style CSV file"),
    model: str = typer.Option("hmm", "--model", "-m", help="Built-in model name"),
    params: str = typer.Option(..., "--params", "-p", help="Parameters as a JSON object or list"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write predictions to CSV"),
):
    """Simulate every subject in a data file."""
    try:
        cfg = load_config(config)
        configure_from_config(cfg.logging)

        try:
            parameters = json.loads(params)
        except json.JSONDecodeError as e:
            console.print(f"❌ Invalid JSON in --params: {e}", style="red")
            raise typer.Exit(1)

        equation = get_model(model)
        subjects = read_pmetrics(data)
        results = simulate_population(
            equation,
            subjects,
            parameters,
            settings=cfg.solver.to_settings(),
            threads=cfg.run.threads,
            context=RunContext(run_id=cfg.run.run_id),
        )

        if output:
            pd.concat([r.to_dataframe() for r in results]).to_csv(output, index=False)
            console.print(f"✓ Predictions written to {output}")
        else:
            for result in results:
                _print_predictions(result)
    except KeyError as e:
        console.print(f"❌ {e.args[0]}", style="red")
        raise typer.Exit(1)
    except CompSimError as e:
        console.print(f"❌ {e.message}", style="red")
        raise typer.Exit(1)


@app.command()
def models():
    """List built-in models."""
    table = Table(title="Built-in models")
    table.add_column("Name")
    table.add_column("States", justify="right")
    table.add_column("Outputs", justify="right")
    table.add_column("Parameters")
    for name in list_models():
        eq = get_model(name)
        table.add_row(name, str(eq.n_states), str(eq.n_outputs), ", ".join(eq.parameters))
    console.print(table)


def _print_predictions(predictions: SubjectPredictions) -> None:
    table = Table(title=f"Subject {predictions.subject_id}")
    table.add_column("Time", justify="right")
    table.add_column("Outeq", justify="right")
    table.add_column("Observed", justify="right")
    table.add_column("Predicted", justify="right")
    for p in predictions:
        observed = "." if p.observation is None else f"{p.observation:.4g}"
        table.add_row(f"{p.time:g}", str(p.outeq), observed, f"{p.prediction:.6g}")
    console.print(table)


if __name__ == "__main__":
    app()
