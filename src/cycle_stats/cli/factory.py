from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import httpx

from cycle_stats.config import PipelineSettings
from cycle_stats.ingest._retry import default_http_retry
from cycle_stats.ingest.mlb_stats_source import MlbStatsApiSource
from cycle_stats.ingest.salary_source import CsvSalarySource, SalaryIndex
from cycle_stats.pipeline.runner import SeasonRunner
from cycle_stats.storage.season_repo import SeasonTotalsRepo
from cycle_stats.storage.sqlite_store import SqliteKeyValueStore
from cycle_stats.storage.writer import ReliableGameWriter
from cycle_stats.valuation.baselines import BaselineStore
from cycle_stats.valuation.value_metrics import ValueMetricsEngine


@dataclass(frozen=True)
class PipelineContext:
    store: SqliteKeyValueStore
    runner: SeasonRunner
    baselines: BaselineStore


@contextmanager
def build_store(settings: PipelineSettings) -> Iterator[SqliteKeyValueStore]:
    store = SqliteKeyValueStore(settings.db_path, settings.max_connections, settings.busy_timeout_ms)
    try:
        yield store
    finally:
        store.close()


@contextmanager
def build_pipeline_context(settings: PipelineSettings) -> Iterator[PipelineContext]:
    """Composition root for a season run."""
    client = httpx.Client(timeout=httpx.Timeout(settings.timeout, connect=settings.connect_timeout))
    with build_store(settings) as store, client:
        repo = SeasonTotalsRepo(store)
        baselines = BaselineStore(
            repo.players_for_season,
            refresh_every_games=settings.refresh_every_games,
            max_age_seconds=settings.max_age_seconds,
        )
        salaries = SalaryIndex(CsvSalarySource(settings.salary_csv) if settings.salary_csv else None)
        engine = ValueMetricsEngine(baselines, salaries, settings.default_team_payroll)
        writer = ReliableGameWriter(
            store,
            batch_attempts=settings.batch_attempts,
            record_attempts=settings.record_attempts,
            initial_delay=settings.initial_delay,
            max_delay=settings.max_delay,
        )
        runner = SeasonRunner(
            MlbStatsApiSource(
                client,
                base_url=settings.base_url,
                retry=default_http_retry("MLB Stats API request", attempts=settings.http_attempts),
            ),
            store,
            writer,
            baselines,
            engine,
            salaries,
            batch_size=settings.batch_size,
            batch_pause_seconds=settings.batch_pause_seconds,
            max_workers=settings.max_workers,
        )
        yield PipelineContext(store=store, runner=runner, baselines=baselines)
