"""Season run: fetch, extract, store and aggregate games in bounded batches."""

from __future__ import annotations

import logging
import math
import os
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack, contextmanager
from typing import TYPE_CHECKING

from cycle_stats.aggregation.season_aggregator import (
    apply_team_value,
    fold_player,
    fold_team,
    has_folded,
    merge_player,
    merge_team,
)
from cycle_stats.domain.errors import CycleError, ExtractionError, SourceError
from cycle_stats.domain.game_record import EntityKind
from cycle_stats.domain.result import Err, Ok, Result, partition
from cycle_stats.domain.run_report import FailedGame, GameOutcome, RebuildReport, RunSummary
from cycle_stats.domain.season_totals import PlayerSeasonTotals
from cycle_stats.ingest.extractor import ExtractedGame, extract_game
from cycle_stats.storage import keys
from cycle_stats.storage.season_repo import SeasonTotalsRepo
from cycle_stats.storage.serialization import to_json
from cycle_stats.storage.writer import PendingWrite

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from cycle_stats.domain.game_record import GameStatRecord
    from cycle_stats.domain.run_report import WriteOutcome
    from cycle_stats.domain.season_totals import TeamSeasonTotals
    from cycle_stats.ingest.protocols import GameSource, ScheduledGame
    from cycle_stats.ingest.salary_source import SalaryIndex
    from cycle_stats.storage.protocol import KeyValueStore
    from cycle_stats.storage.writer import ReliableGameWriter
    from cycle_stats.valuation.baselines import BaselineStore
    from cycle_stats.valuation.value_metrics import ValueMetricsEngine

logger = logging.getLogger(__name__)


def worker_count(batch_size: int, cpu_count: int | None = None) -> int:
    """Threads per batch: 1.5x the cores, at least 8, never more than the batch."""
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return max(1, min(batch_size, max(8, math.floor(cpus * 1.5))))


def count_double_headers(games: list[ScheduledGame]) -> int:
    """Number of double-headers: the same two teams meeting more than once on a date."""
    meetings: Counter[tuple[str, str, str]] = Counter()
    for game in games:
        first, second = sorted((game.away_team, game.home_team))
        meetings[(game.date, first, second)] += 1
    repeated = sorted(meeting for meeting, n in meetings.items() if n > 1)
    for date, first, second in repeated:
        logger.info("Double-header: %s vs %s on %s", first, second, date)
    return len(repeated)


class EntityLocks:
    """One lock per season key; several are taken in sorted order."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def holding(self, keys_: list[str]) -> Iterator[None]:
        with ExitStack() as stack:
            for key in sorted(set(keys_)):
                stack.enter_context(self._lock_for(key))
            yield


class SeasonRunner:
    def __init__(
        self,
        source: GameSource,
        store: KeyValueStore,
        writer: ReliableGameWriter,
        baselines: BaselineStore,
        engine: ValueMetricsEngine,
        salaries: SalaryIndex | None = None,
        *,
        batch_size: int = 10,
        batch_pause_seconds: float = 0.2,
        max_workers: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._writer = writer
        self._repo = SeasonTotalsRepo(store)
        self._baselines = baselines
        self._engine = engine
        self._salaries = salaries
        self._batch_size = max(1, batch_size)
        self._batch_pause = batch_pause_seconds
        self._workers = max_workers or worker_count(self._batch_size)
        self._sleep = sleep
        self._clock = clock
        self._locks = EntityLocks()
        self._counter_lock = threading.Lock()
        self._games_processed = 0
        self._baseline_refreshes = 0

    @property
    def games_processed(self) -> int:
        return self._games_processed

    def run(self, season: int, start_date: str, end_date: str) -> RunSummary:
        t0 = self._clock()
        summary = RunSummary(season=season)
        games = self._source.fetch_schedule(season, start_date, end_date)
        summary.games_scheduled = len(games)
        summary.double_headers = count_double_headers(games)
        logger.info(
            "Processing %d games for %d in batches of %d (%d workers)",
            len(games),
            season,
            self._batch_size,
            self._workers,
        )

        self._refresh_baseline(season)
        batches = [games[i : i + self._batch_size] for i in range(0, len(games), self._batch_size)]
        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            for index, batch in enumerate(batches, start=1):
                extracted = list(pool.map(lambda g: self._fetch_and_extract(g, season), batch))
                _, early_failures = partition(extracted)
                if early_failures:
                    logger.debug("Batch %d: %d games failed before storage", index, len(early_failures))
                outcomes = list(pool.map(self._store_game, batch, extracted))
                for outcome in outcomes:
                    summary.record(outcome)
                logger.info(
                    "Batch %d/%d done: %d/%d games processed so far",
                    index,
                    len(batches),
                    summary.games_processed,
                    summary.games_scheduled,
                )
                if index < len(batches) and self._batch_pause > 0:
                    self._sleep(self._batch_pause)

        summary.baseline_refreshes = self._baseline_refreshes
        summary.elapsed_seconds = round(self._clock() - t0, 2)
        for failed in summary.failed_games:
            logger.warning("Failed game %d (%s) at %s: %s", failed.game_id, failed.date, failed.stage, failed.reason)
        logger.info(
            "Season %d run complete: %d processed, %d failed, %d records written in %.1fs",
            season,
            summary.games_processed,
            summary.games_failed,
            summary.records_written,
            summary.elapsed_seconds,
        )
        return summary

    def _refresh_baseline(self, season: int, games_processed: int = 0) -> None:
        if self._baselines.refresh_if_needed(season, games_processed):
            with self._counter_lock:
                self._baseline_refreshes += 1

    def _fetch_and_extract(self, game: ScheduledGame, season: int) -> Result[ExtractedGame, CycleError]:
        try:
            payload = self._source.fetch_boxscore(game.game_id)
        except Exception as exc:
            logger.error("Fetch failed for game %d: %s", game.game_id, exc)
            return Err(SourceError(message=str(exc) or type(exc).__name__, url=f"game/{game.game_id}/boxscore"))
        try:
            return Ok(extract_game(payload, game, season))
        except Exception as exc:
            logger.error("Extraction failed for game %d: %s", game.game_id, exc)
            return Err(ExtractionError(message=f"{type(exc).__name__}: {exc}", game_id=game.game_id))

    def _store_game(self, game: ScheduledGame, extracted: Result[ExtractedGame, CycleError]) -> GameOutcome:
        try:
            return self._store_extracted(game, extracted)
        except Exception as exc:
            logger.exception("Storing game %d failed", game.game_id)
            reason = f"{type(exc).__name__}: {exc}"
            failure = FailedGame(game.game_id, game.date, "store", reason)
            return GameOutcome(game_id=game.game_id, date=game.date, failure=failure)

    def _store_extracted(self, game: ScheduledGame, extracted: Result[ExtractedGame, CycleError]) -> GameOutcome:
        if isinstance(extracted, Err):
            stage = "fetch" if isinstance(extracted.error, SourceError) else "extract"
            return GameOutcome(
                game_id=game.game_id,
                date=game.date,
                failure=FailedGame(game.game_id, game.date, stage, extracted.error.message),
            )

        data = extracted.value
        result = self._writer.write_game(data.game_id, data.date, data.records)
        failure: FailedGame | None = None
        if not result.outcome.succeeded:
            failure = FailedGame(data.game_id, data.date, "store", result.outcome.error or "storage write failed")

        records_written = result.outcome.records_written
        foldable = [*result.to_fold, *result.refreshed]
        if foldable:
            season_outcome = self._merge_season(data, foldable)
            records_written += season_outcome.records_written
            if not season_outcome.succeeded and failure is None:
                logger.error(
                    "Game %d per-game records stored but season totals not updated; a rerun of the game will fold them",
                    data.game_id,
                )
                failure = FailedGame(
                    data.game_id, data.date, "season", season_outcome.error or "season write failed"
                )

        if failure is None:
            with self._counter_lock:
                self._games_processed += 1
                processed = self._games_processed
            self._refresh_baseline(data.season, processed)

        return GameOutcome(
            game_id=data.game_id,
            date=data.date,
            records_written=records_written,
            collisions=len(result.collisions),
            refreshes=result.refreshes,
            failure=failure,
        )

    def _season_player(self, record: GameStatRecord) -> PlayerSeasonTotals | None:
        """Player totals with ``record`` folded in, or None when there is nothing to write."""
        assert record.name is not None
        try:
            current = self._repo.get_player(record.team, record.name, record.season)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Unreadable season record %s (%s); rebuilding it", keys.season_key(record), e)
            current = None
        if current is None:
            games = self._repo.player_game_records(record.team, record.name, record.season)
            if len(games) > 1:
                logger.info("Rebuilding %s season totals from %d games", record.label, len(games))
            return fold_player(games, self._engine.score_player)
        if has_folded(current, record.game_id):
            return None
        return merge_player(current, record, self._engine.score_player)

    def _season_team(self, record: GameStatRecord) -> TeamSeasonTotals | None:
        try:
            current = self._repo.get_team(record.team, record.season)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Unreadable season record %s (%s); rebuilding it", keys.season_key(record), e)
            current = None
        if current is None:
            games = self._repo.team_game_records(record.team, record.season)
            if len(games) > 1:
                logger.info("Rebuilding %s season totals from %d games", record.label, len(games))
            return fold_team(games)
        if has_folded(current, record.game_id):
            return None
        return merge_team(current, record)

    def _valued_team(self, totals: TeamSeasonTotals, merged_players: list[PlayerSeasonTotals]) -> TeamSeasonTotals:
        roster = {p.name: p for p in self._repo.players_for_season(totals.season, totals.team)}
        roster.update({p.name: p for p in merged_players})
        payroll = self._salaries.payroll_for(totals.team, totals.season) if self._salaries else None
        return apply_team_value(totals, list(roster.values()), self._engine.score_team, payroll)

    def _merge_season(self, data: ExtractedGame, records: list[GameStatRecord]) -> WriteOutcome:
        players = [r for r in records if r.kind is EntityKind.PLAYER]
        teams = [r for r in records if r.kind is EntityKind.TEAM]
        lock_keys = [keys.season_key(r) for r in records]

        with self._locks.holding(lock_keys):
            writes: list[PendingWrite] = []
            merged_players: dict[str, list[PlayerSeasonTotals]] = {}
            for record in players:
                merged = self._season_player(record)
                if merged is None:
                    continue
                merged_players.setdefault(record.team, []).append(merged)
                writes.append(_season_write(merged, keys.season_key(record)))

            for record in teams:
                team_totals = self._season_team(record)
                if team_totals is None:
                    continue
                team_totals = self._valued_team(team_totals, merged_players.get(record.team, []))
                writes.append(_season_write(team_totals, keys.season_key(record)))

            return self._writer.write_season(data.game_id, data.date, writes)

    def rebuild_season(self, season: int) -> RebuildReport:
        """Recompute every season total of ``season`` from the stored per-game records.

        Existing season documents are replaced. Not meant to run alongside a
        season run on the same store.
        """
        self._baselines.refresh_if_needed(season, self._games_processed, force=True)
        by_player: dict[tuple[str, str], list[GameStatRecord]] = {}
        for record in self._repo.game_records(keys.player_game_pattern(season)):
            if record.name is not None:
                by_player.setdefault((record.team, record.name), []).append(record)
        by_team: dict[str, list[GameStatRecord]] = {}
        for record in self._repo.game_records(keys.team_game_pattern(season)):
            by_team.setdefault(record.team, []).append(record)

        report = RebuildReport(season=season)
        writes: list[PendingWrite] = []
        rosters: dict[str, list[PlayerSeasonTotals]] = {}
        for (team, name), games in sorted(by_player.items()):
            totals = fold_player(games, self._engine.score_player)
            if totals is None:
                report.players_skipped += 1
                continue
            rosters.setdefault(team, []).append(totals)
            writes.append(_season_write(totals, keys.player_season_key(team, name, season)))
            report.players_rebuilt += 1

        for team, games in sorted(by_team.items()):
            team_totals = fold_team(games)
            if team_totals is None:
                continue
            payroll = self._salaries.payroll_for(team, season) if self._salaries else None
            team_totals = apply_team_value(team_totals, rosters.get(team, []), self._engine.score_team, payroll)
            writes.append(_season_write(team_totals, keys.team_season_key(team, season)))
            report.teams_rebuilt += 1

        # game id 0: the batch is not tied to one game
        report.outcome = self._writer.write_season(0, f"{season} rebuild", writes)
        logger.info(
            "Rebuilt season %d: %d players, %d teams, %s",
            season,
            report.players_rebuilt,
            report.teams_rebuilt,
            report.outcome.state,
        )
        return report


def _season_write(totals: PlayerSeasonTotals | TeamSeasonTotals, key: str) -> PendingWrite:
    if isinstance(totals, PlayerSeasonTotals):
        return PendingWrite(key=key, value=to_json(totals), entity="player", team=totals.team, player=totals.name)
    return PendingWrite(key=key, value=to_json(totals), entity="team", team=totals.team)
