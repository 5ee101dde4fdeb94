"""
Command-line interface for the Training Form package.

This module provides commands for computing training stress balance, analyzing
current form, and projecting form forward (predictions, tapers, recovery and
what-if scenarios) from an activity export.
"""

import logging
from datetime import datetime
from pathlib import Path

import click
from pydantic import BaseModel, TypeAdapter

from .data import ActivityDataLoader
from .exceptions import TrainingFormError
from .models import ActivityRecord, FormZone, LoadSeed, ScenarioDay, TaperStrategy
from .services import FormAnalysisService, TrainingStressService
from .settings import Settings, load_settings


# Configure basic logging
def configure_logging(verbose: bool = False) -> None:
    """Configure logging with appropriate level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def common_options(func):
    """Attach the options shared by every command."""
    func = click.option(
        "--seed",
        "seed_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Prior snapshot file with carry-in CTL/ATL (overrides config)",
    )(func)
    func = click.option(
        "--activities",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to activities CSV or JSON file (overrides config)",
    )(func)
    func = click.option(
        "--verbose/--quiet",
        default=False,
        help="Enable verbose output",
    )(func)
    func = click.option(
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to configuration file",
    )(func)
    return func


def parse_tss_plan(ctx, param, value: str | None) -> float | list[float] | None:
    """Parse a single daily TSS or a comma-separated per-day plan."""
    if value is None:
        return None
    try:
        parts = [float(part) for part in value.split(",") if part.strip()]
    except ValueError as e:
        raise click.BadParameter(f"expected a number or comma-separated numbers: {value}") from e
    if not parts:
        raise click.BadParameter("no TSS values given")
    return parts[0] if len(parts) == 1 else parts


def _as_date(value: datetime | None):
    return value.date() if value is not None else None


def _load_inputs(
    config: Path | None, activities: Path | None, seed_file: Path | None
) -> tuple[Settings, list[ActivityRecord], LoadSeed | None]:
    """Load settings, activity records and the optional carry-in seed."""
    settings = load_settings(config)
    if activities is not None:
        settings.activities_file = activities
    if seed_file is not None:
        settings.prior_snapshot_file = seed_file

    loader = ActivityDataLoader(settings)
    return settings, loader.load_activities(), loader.load_seed()


def _echo_json(result: BaseModel | list) -> None:
    if isinstance(result, BaseModel):
        click.echo(result.model_dump_json(indent=2))
    else:
        click.echo(TypeAdapter(list[ScenarioDay]).dump_json(result, indent=2).decode())


@click.group()
def main():
    """
    Model training load and form from activity data.

    This tool scores activities, computes fitness (CTL), fatigue (ATL) and
    form (TSB), classifies form zones, and projects form into the future.
    """


@main.command()
@common_options
@click.option("--date", "target_date", type=click.DateTime(["%Y-%m-%d"]), help="Target date (YYYY-MM-DD)")
@click.option("--days", type=int, default=None, help="History window in days (7-365)")
@click.option("--series/--no-series", default=False, help="Include the daily load series")
def stress(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    target_date: datetime | None,
    days: int | None,
    series: bool,
) -> None:
    """
    Compute CTL, ATL and TSB for a date.

    Prints the training stress balance, form status and recommendation as JSON.
    """
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        result = TrainingStressService(settings).calculate(
            records,
            target_date=_as_date(target_date),
            days=days,
            include_time_series=series,
            seed=seed,
        )
        _echo_json(result)
    except TrainingFormError as e:
        logger.error(f"Training stress calculation failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@common_options
@click.option("--date", "analysis_date", type=click.DateTime(["%Y-%m-%d"]), help="Analysis date (YYYY-MM-DD)")
@click.option("--days", type=int, default=None, help="History window in days (7-365)")
@click.option("--predictions/--no-predictions", default=True, help="Include 7 and 14 day predictions")
@click.option("--series/--no-series", default=False, help="Include the snapshot series")
@click.option(
    "--performance",
    "performance_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Personal records (date, category, improvement) to correlate with form",
)
def form(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    analysis_date: datetime | None,
    days: int | None,
    predictions: bool,
    series: bool,
    performance_file: Path | None,
) -> None:
    """
    Analyze current form.

    Prints the current zone, multi-period trends, predictions,
    recommendations and warnings as JSON.
    """
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        performance_records = []
        if performance_file is not None:
            performance_records = ActivityDataLoader(settings).load_performance_records(performance_file)
        analysis = FormAnalysisService(settings).analyze_current_form(
            records,
            analysis_date=_as_date(analysis_date),
            days=days,
            include_predictions=predictions,
            include_time_series=series,
            seed=seed,
            include_performance_correlation=performance_file is not None,
            performance_records=performance_records,
        )
        _echo_json(analysis)
    except TrainingFormError as e:
        logger.error(f"Form analysis failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@common_options
@click.option("--end-date", type=click.DateTime(["%Y-%m-%d"]), help="Last day of history (YYYY-MM-DD)")
@click.option("--days", type=int, default=None, help="History window in days (7-365)")
def history(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    end_date: datetime | None,
    days: int | None,
) -> None:
    """Print the form snapshot history and its summary as JSON."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        result = FormAnalysisService(settings).get_form_history(
            records, end_date=_as_date(end_date), days=days, seed=seed
        )
        _echo_json(result)
    except TrainingFormError as e:
        logger.error(f"Form history failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@common_options
@click.argument("target_date")
@click.option("--tss", "planned_tss", callback=parse_tss_plan, required=True, help="Daily TSS or comma-separated plan")
@click.option("--recovery-day", "recovery_days", type=int, multiple=True, help="Zero-based day index forced to zero TSS")
@click.option("--as-of", type=click.DateTime(["%Y-%m-%d"]), help="Date of the current state (YYYY-MM-DD)")
def predict(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    target_date: str,
    planned_tss: float | list[float],
    recovery_days: tuple[int, ...],
    as_of: datetime | None,
) -> None:
    """Predict form on TARGET_DATE (YYYY-MM-DD) under a planned load."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        result = FormAnalysisService(settings).predict_future_form(
            records,
            target_date,
            planned_tss,
            recovery_days=recovery_days,
            as_of=_as_date(as_of),
            seed=seed,
        )
        _echo_json(result)
    except TrainingFormError as e:
        logger.error(f"Prediction failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@common_options
@click.argument("race_date")
@click.option("--duration", type=int, default=None, help="Taper length in days (1-42)")
@click.option("--target-tsb", type=float, default=None, help="TSB to reach on race day")
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in TaperStrategy]),
    default=None,
    help="Load reduction curve",
)
@click.option("--volume-reduction", type=float, default=None, help="Final volume reduction in percent")
@click.option("--maintain-intensity/--no-maintain-intensity", default=None, help="Keep short intense efforts")
@click.option("--as-of", type=click.DateTime(["%Y-%m-%d"]), help="Date of the current state (YYYY-MM-DD)")
def taper(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    race_date: str,
    duration: int | None,
    target_tsb: float | None,
    strategy: str | None,
    volume_reduction: float | None,
    maintain_intensity: bool | None,
    as_of: datetime | None,
) -> None:
    """Generate a taper plan ending on RACE_DATE (YYYY-MM-DD)."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        result = FormAnalysisService(settings).generate_taper_plan(
            records,
            race_date,
            taper_duration=duration,
            target_tsb=target_tsb,
            strategy=TaperStrategy(strategy) if strategy else None,
            volume_reduction=volume_reduction,
            maintain_intensity=maintain_intensity,
            as_of=_as_date(as_of),
            seed=seed,
        )
        _echo_json(result)
    except TrainingFormError as e:
        logger.error(f"Taper planning failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@common_options
@click.option(
    "--target-zone",
    type=click.Choice([z.value for z in FormZone]),
    default=FormZone.OPTIMAL_RACE.value,
    help="Zone to recover into",
)
@click.option("--rest/--active", default=True, help="Complete rest or active recovery")
@click.option("--as-of", type=click.DateTime(["%Y-%m-%d"]), help="Date of the current state (YYYY-MM-DD)")
def recovery(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    target_zone: str,
    rest: bool,
    as_of: datetime | None,
) -> None:
    """Estimate days needed to reach a target form zone."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        result = FormAnalysisService(settings).estimate_recovery_time(
            records, FormZone(target_zone), rest=rest, as_of=_as_date(as_of), seed=seed
        )
        _echo_json(result)
    except TrainingFormError as e:
        logger.error(f"Recovery estimate failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@common_options
@click.option("--days", type=int, default=None, help="Days to simulate (defaults to plan length)")
@click.option("--tss", "daily_tss", callback=parse_tss_plan, required=True, help="Daily TSS or comma-separated plan")
@click.option("--as-of", type=click.DateTime(["%Y-%m-%d"]), help="Date of the current state (YYYY-MM-DD)")
def simulate(
    config: Path | None,
    verbose: bool,
    activities: Path | None,
    seed_file: Path | None,
    days: int | None,
    daily_tss: float | list[float],
    as_of: datetime | None,
) -> None:
    """Simulate a what-if load plan day by day."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings, records, seed = _load_inputs(config, activities, seed_file)
        result = FormAnalysisService(settings).simulate_scenario(
            records, days, daily_tss, as_of=_as_date(as_of), seed=seed
        )
        _echo_json(result)
    except TrainingFormError as e:
        logger.error(f"Scenario simulation failed: {str(e)}")
        raise click.Abort() from e


if __name__ == "__main__":
    main()
