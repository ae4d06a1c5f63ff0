from pathlib import Path
from typing import Annotated

import httpx
import typer

from cycle_stats.cli._logging import configure_logging
from cycle_stats.cli._output import print_error, print_rebuild, print_run_summary, print_verification
from cycle_stats.cli.factory import build_pipeline_context, build_store
from cycle_stats.config import PipelineSettings, create_config, load_settings
from cycle_stats.domain.result import Err, Ok
from cycle_stats.pipeline.verification import verify_season

app = typer.Typer(name="cycle-stats", help="Box-score ingestion and season valuation for MLB seasons.")

_SeasonOpt = Annotated[int, typer.Option("--season", help="Season year")]
_ConfigOpt = Annotated[str, typer.Option("--config", help="Path to a YAML config file")]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    log_file: Annotated[Path | None, typer.Option("--log-file", help="Also write logs to this file")] = None,
) -> None:
    """Box-score ingestion and season valuation."""
    configure_logging(verbose=verbose, log_file=log_file)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


def _settings(config_path: str) -> PipelineSettings:
    match load_settings(create_config(yaml_path=config_path)):
        case Ok(settings):
            return settings
        case Err(e):
            print_error(e.message)
            raise typer.Exit(code=1)


@app.command()
def run(
    season: _SeasonOpt,
    start: Annotated[str | None, typer.Option("--start", help="First date (YYYY-MM-DD)")] = None,
    end: Annotated[str | None, typer.Option("--end", help="Last date (YYYY-MM-DD)")] = None,
    config: _ConfigOpt = "cycle.yaml",
) -> None:
    """Ingest every final regular-season game in a date range."""
    settings = _settings(config)
    start_date = start or f"{season}-03-01"
    end_date = end or f"{season}-11-30"
    with build_pipeline_context(settings) as ctx:
        try:
            summary = ctx.runner.run(season, start_date, end_date)
        except httpx.HTTPError as e:
            print_error(f"could not fetch schedule: {e}")
            raise typer.Exit(code=1) from e
    print_run_summary(summary)
    if summary.failed_games:
        raise typer.Exit(code=2)


@app.command()
def verify(
    season: _SeasonOpt,
    games: Annotated[int, typer.Option("--games", help="Number of games expected in the store")],
    config: _ConfigOpt = "cycle.yaml",
) -> None:
    """Count stored records for a season against the expected number of games."""
    settings = _settings(config)
    with build_store(settings) as store:
        report = verify_season(store, season, games)
    print_verification(report)
    if not report.complete:
        raise typer.Exit(code=1)


@app.command()
def rebuild(season: _SeasonOpt, config: _ConfigOpt = "cycle.yaml") -> None:
    """Recompute every season total from the stored per-game records."""
    settings = _settings(config)
    with build_pipeline_context(settings) as ctx:
        report = ctx.runner.rebuild_season(season)
    print_rebuild(report)
    if not report.succeeded:
        raise typer.Exit(code=2)
