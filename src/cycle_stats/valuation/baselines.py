"""League percentile baselines and the holder that keeps them fresh."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

import numpy as np

from cycle_stats.domain.baseline import (
    BATTING_METRICS,
    DEFAULT_BATTING,
    DEFAULT_PITCHING,
    PITCHING_METRICS,
    Baseline,
    MetricDistribution,
    default_baseline,
)
from cycle_stats.domain.errors import BaselineError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from cycle_stats.domain.season_totals import PlayerSeasonTotals

logger = logging.getLogger(__name__)

MIN_AT_BATS = 100
MIN_PLATE_APPEARANCES = 150
MIN_INNINGS_OUTS = 60

_PERCENTILES = [10, 25, 50, 75, 90]


def distribution(values: list[float]) -> MetricDistribution:
    arr = np.asarray(values, dtype=float)
    p10, p25, p50, p75, p90 = (round(float(v), 3) for v in np.percentile(arr, _PERCENTILES))
    return MetricDistribution(p10=p10, p25=p25, p50=p50, p75=p75, p90=p90, mean=round(float(arr.mean()), 3))


def _qualified_batter(player: PlayerSeasonTotals) -> bool:
    counts = player.batting
    if counts is None or player.batting_rates is None:
        return False
    return counts.at_bats >= MIN_AT_BATS or player.batting_rates.plate_appearances >= MIN_PLATE_APPEARANCES


def _qualified_pitcher(player: PlayerSeasonTotals) -> bool:
    if player.pitching is None or player.pitching_rates is None:
        return False
    return player.pitching.outs >= MIN_INNINGS_OUTS


def _batting_metrics(player: PlayerSeasonTotals) -> dict[str, float]:
    assert player.batting is not None and player.batting_rates is not None
    games = player.batting.games_played
    rates = player.batting_rates
    return {
        "ops": rates.ops,
        "obp": rates.obp,
        "slg": rates.slg,
        "avg": rates.avg,
        "home_run_rate": player.batting.home_runs / games if games else 0.0,
        "stolen_base_rate": player.batting.stolen_bases / games if games else 0.0,
    }


def _pitching_metrics(player: PlayerSeasonTotals) -> dict[str, float]:
    assert player.pitching_rates is not None
    rates = player.pitching_rates
    return {
        "era": rates.era,
        "fip": rates.fip,
        "whip": rates.whip,
        "strikeouts_per_9": rates.strikeouts_per_9,
        "walks_per_9": rates.walks_per_9,
    }


class BaselineCalculator:
    """Computes percentile cut-points over qualified season totals."""

    def compute(
        self,
        season: int,
        players: Iterable[PlayerSeasonTotals],
        *,
        computed_at: float,
        games_processed: int = 0,
    ) -> Baseline:
        batting_rows: list[dict[str, float]] = []
        pitching_rows: list[dict[str, float]] = []
        for player in players:
            if player.season != season:
                continue
            if _qualified_batter(player):
                batting_rows.append(_batting_metrics(player))
            if _qualified_pitcher(player):
                pitching_rows.append(_pitching_metrics(player))

        if batting_rows:
            batting = {m: distribution([row[m] for row in batting_rows]) for m in BATTING_METRICS}
        else:
            logger.info("No qualified batters for %d; using default batting baseline", season)
            batting = dict(DEFAULT_BATTING)
        if pitching_rows:
            pitching = {m: distribution([row[m] for row in pitching_rows]) for m in PITCHING_METRICS}
        else:
            logger.info("No qualified pitchers for %d; using default pitching baseline", season)
            pitching = dict(DEFAULT_PITCHING)

        return Baseline(
            season=season,
            batting=batting,
            pitching=pitching,
            computed_at=computed_at,
            games_processed=games_processed,
            qualified_batters=len(batting_rows),
            qualified_pitchers=len(pitching_rows),
            is_default=not batting_rows and not pitching_rows,
        )


class BaselineStore:
    """Holds the last computed baseline per season.

    Readers call ``current`` and always get a snapshot without waiting.
    ``refresh_if_needed`` recomputes synchronously in the calling thread;
    if another thread is already refreshing, the call returns immediately.
    A game-count refresh skipped that way happens on the next call in the
    same block of ``refresh_every_games`` games.
    """

    def __init__(
        self,
        loader: Callable[[int], Iterable[PlayerSeasonTotals]],
        calculator: BaselineCalculator | None = None,
        *,
        refresh_every_games: int = 50,
        max_age_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._loader = loader
        self._calculator = calculator or BaselineCalculator()
        self._refresh_every = refresh_every_games
        self._max_age = max_age_seconds
        self._clock = clock
        self._baselines: dict[int, Baseline] = {}
        self._active_season: int | None = None
        self._last_refresh_bucket: int | None = None
        self._refreshed_once = False
        self._refresh_lock = threading.Lock()
        self._last_error: BaselineError | None = None

    @property
    def last_error(self) -> BaselineError | None:
        """Why the most recent refresh fell back, or None if it succeeded."""
        return self._last_error

    def current(self, season: int) -> Baseline:
        baseline = self._baselines.get(season)
        if baseline is None:
            return default_baseline(season)
        return baseline

    def needs_refresh(self, season: int, games_processed: int, *, force: bool = False) -> bool:
        if force or not self._refreshed_once:
            return True
        if self._active_season != season or season not in self._baselines:
            return True
        if self._clock() - self._baselines[season].computed_at > self._max_age:
            return True
        return (
            self._refresh_every > 0
            and games_processed > 0
            and games_processed // self._refresh_every != self._last_refresh_bucket
        )

    def refresh_if_needed(self, season: int, games_processed: int, *, force: bool = False) -> bool:
        """Recompute when due. Returns True if this call recomputed."""
        if not self.needs_refresh(season, games_processed, force=force):
            return False
        if not self._refresh_lock.acquire(blocking=False):
            logger.debug("Baseline refresh for %d already running; using cached snapshot", season)
            return False
        try:
            if not self.needs_refresh(season, games_processed, force=force):
                return False
            self._refresh(season, games_processed)
            return True
        finally:
            self._refresh_lock.release()

    def _refresh(self, season: int, games_processed: int) -> None:
        started = self._clock()
        self._refreshed_once = True
        self._active_season = season
        self._last_refresh_bucket = games_processed // self._refresh_every if self._refresh_every > 0 else None
        try:
            baseline = self._calculator.compute(
                season,
                list(self._loader(season)),
                computed_at=started,
                games_processed=games_processed,
            )
        except Exception as e:
            logger.exception("Baseline computation failed for %d; keeping last good baseline", season)
            self._last_error = BaselineError(message=f"{type(e).__name__}: {e}", season=season)
            if season not in self._baselines:
                self._baselines[season] = default_baseline(
                    season, computed_at=started, games_processed=games_processed
                )
            return
        self._baselines[season] = baseline
        self._last_error = None
        logger.info(
            "Baseline refreshed for %d after %d games: %d batters, %d pitchers qualified",
            season,
            games_processed,
            baseline.qualified_batters,
            baseline.qualified_pitchers,
        )
