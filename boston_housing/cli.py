"""
Command Line Interface for the Boston Housing regression demo.

Usage:
    # Show the registered models
    boston-housing list

    # Estimate the baseline loss
    boston-housing baseline

    # Train one model (or both)
    boston-housing train linear
    boston-housing train linear mlp -o training.epochs=50

    # Run experiments from YAML files or folders
    boston-housing run configs/

    # Summarize an exported loss history
    boston-housing view outputs/linear_20260101_120000/history.json
"""

import json
import sys
from pathlib import Path

import click
import numpy as np
from loguru import logger

from . import __version__
from .app import BostonHousingApp
from .core.data import BostonHousingDataset
from .core.exceptions import BostonHousingError
from .core.registry import registry
from .experiment import HousingExperiment, run_from_file
from .utils import apply_overrides, find_configs, get_default_config, load_config


def _configure_logging(verbose: bool):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _print_results(results):
    click.echo(f"\n{'='*60}")
    click.echo("Training Complete!")
    click.echo(f"{'='*60}")
    click.echo(f"Output: {results['output_dir']}")
    click.echo(f"Baseline loss (meanSquaredError): {results['baseline_loss']:.2f}")
    for name, r in results["models"].items():
        click.echo(
            f"  {name}: train={r['final_train_loss']:.4f} "
            f"test={r['test_loss']:.4f} ({r['parameters']} params)"
        )
    if results.get("history_path"):
        click.echo(f"History: {results['history_path']}")


@click.group()
@click.version_option(version=__version__, prog_name="boston_housing")
@click.option("--verbose", "-v", is_flag=True, help="Log per-epoch details")
def cli(verbose):
    """Boston Housing - train linear and MLP price regressors."""
    _configure_logging(verbose)


@cli.command("list")
def list_models():
    """List registered models and losses."""
    summary = registry.summary()
    click.echo("Models:")
    for name in summary["models"]:
        click.echo(f"  - {name}")
    click.echo("Losses:")
    for name in summary["losses"]:
        click.echo(f"  - {name}")


@cli.command()
@click.option("--data-dir", default="./data", show_default=True, help="Dataset cache directory")
def baseline(data_dir):
    """Load the data and print the baseline loss."""
    try:
        app = BostonHousingApp(BostonHousingDataset(data_dir=data_dir))
        app.setup()
    except BostonHousingError as e:
        logger.exception("Failed to load dataset")
        raise click.ClickException(str(e))
    click.echo(f"Baseline loss (meanSquaredError) is {app.baseline:.2f}")


@cli.command()
@click.argument("models", nargs=-1, required=True)
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="YAML config file")
@click.option(
    "--override",
    "-o",
    multiple=True,
    help="Config overrides (e.g., training.epochs=100)",
)
@click.option("--output-dir", "-d", help="Output directory override")
@click.option("--verbose", "-v", is_flag=True, help="Log per-epoch details")
def train(models, config_path, override, output_dir, verbose):
    """Train MODELS (linear, mlp) on the Boston Housing data."""
    if verbose:
        _configure_logging(verbose)

    unknown = [m for m in models if m not in registry.list_models()]
    if unknown:
        raise click.ClickException(
            f"Unknown model(s): {unknown}. Available: {registry.list_models()}"
        )

    if config_path:
        config = load_config(config_path)
    else:
        config = get_default_config()
        config["experiment"]["name"] = "_".join(models)
    if override:
        config = apply_overrides(config, list(override))

    try:
        results = HousingExperiment(config, output_dir=output_dir, models=list(models)).run()
    except Exception as e:
        logger.exception("Training failed")
        raise click.ClickException(str(e))

    _print_results(results)


@cli.command("run")
@click.argument("files", nargs=-1, type=click.Path(exists=True))
@click.option("--override", "-o", multiple=True, help="Config overrides (applied to all)")
@click.option("--output-dir", "-d", help="Output directory override")
@click.option("--verbose", "-v", is_flag=True, help="Log per-epoch details")
def run_cmd(files, override, output_dir, verbose):
    """Run experiment(s) from YAML config file(s) or folder(s)."""
    if verbose:
        _configure_logging(verbose)
    if not files:
        raise click.ClickException("Please provide at least one YAML config file or folder.")

    config_files = []
    for f in files:
        p = Path(f)
        config_files.extend(find_configs(p) if p.is_dir() else [p])

    if not config_files:
        raise click.ClickException("No YAML config files found.")

    results = []
    for i, config_path in enumerate(config_files, 1):
        click.echo(f"\n[{i}/{len(config_files)}] Running: {config_path.name}")
        click.echo("-" * 40)

        try:
            config_output_dir = str(Path(output_dir) / config_path.stem) if output_dir else None
            result = run_from_file(
                config_path,
                overrides=list(override) if override else None,
                output_dir=config_output_dir,
            )
            results.append({"file": config_path.name, "status": "success"})
            _print_results(result)
        except Exception as e:
            logger.exception(f"Failed to run {config_path}")
            results.append({"file": config_path.name, "status": "failed", "error": str(e)})
            click.echo(f"✗ {config_path.name} failed: {e}")

    if len(results) > 1:
        success = sum(1 for r in results if r["status"] == "success")
        click.echo(f"\n{'='*60}")
        click.echo("Batch Summary")
        click.echo(f"{'='*60}")
        click.echo(f"Total: {len(results)}, Success: {success}, Failed: {len(results) - success}")
        for r in results:
            status = "✓" if r["status"] == "success" else "✗"
            click.echo(f"  {status} {r['file']}")

    if any(r["status"] == "failed" for r in results):
        raise click.ClickException("One or more experiments failed")


@cli.command()
@click.argument("input", type=click.Path(exists=True))
def view(input: str):
    """Summarize an exported loss history JSON.

    INPUT: history.json written by a training run
    """
    try:
        with open(input, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON: {e}")
        raise click.ClickException(f"Invalid JSON file: {e}")

    click.echo(f"File: {input}")
    baseline_loss = data.get("baseline_loss")
    if baseline_loss is not None:
        click.echo(f"Baseline loss: {baseline_loss:.4f}")

    models = data.get("models", {})
    if not models:
        click.echo("No loss history recorded.")
        return

    for name, series in models.items():
        # NaN points are exported as null; keep them in place so indices stay epochs
        train_loss = _as_float_array(series.get("train_loss", []))
        val_loss = _as_float_array(series.get("val_loss", []))
        click.echo(f"[{name}] epochs: {len(series.get('epochs', []))}")
        if np.isfinite(train_loss).any():
            finite = train_loss[np.isfinite(train_loss)]
            click.echo(
                f"[{name}] train loss: first={finite[0]:.4f} "
                f"final={finite[-1]:.4f} min={np.nanmin(train_loss):.4f}"
            )
        if np.isfinite(val_loss).any():
            best = int(np.nanargmin(val_loss))
            click.echo(
                f"[{name}] val loss: final={val_loss[np.isfinite(val_loss)][-1]:.4f} "
                f"min={val_loss[best]:.4f} (epoch {best + 1})"
            )


def _as_float_array(values):
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
