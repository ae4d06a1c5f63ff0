"""Folds per-game records into season-to-date totals.

Each merge recomputes every rate from the summed counts. Totals remember
which game ids they hold, so callers can skip a game already folded. The
caller serializes merges on the same entity.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime

from cycle_stats.domain.counts import BattingCounts, PitchingCounts, merge_optional
from cycle_stats.domain.game_record import EntityKind, GameStatRecord
from cycle_stats.domain.season_totals import Performance, PlayerSeasonTotals, PlayerType, TeamSeasonTotals, TeamValue
from cycle_stats.stats.rate_calculator import batting_rates, fielding_rates, pitching_rates

logger = logging.getLogger(__name__)

type PlayerScorer = Callable[[PlayerSeasonTotals], Performance | None]
type TeamScorer = Callable[[TeamSeasonTotals, list[PlayerSeasonTotals], int | None], TeamValue]


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


def classify(batting: BattingCounts | None, pitching: PitchingCounts | None) -> PlayerType | None:
    is_batter = batting is not None and batting.at_bats >= 1
    is_pitcher = pitching is not None and pitching.outs >= 1
    if is_batter and is_pitcher:
        return PlayerType.TWO_WAY
    if is_batter:
        return PlayerType.BATTER
    if is_pitcher:
        return PlayerType.PITCHER
    return None


def merge_player(
    current: PlayerSeasonTotals | None,
    record: GameStatRecord,
    scorer: PlayerScorer | None = None,
    *,
    now: str | None = None,
) -> PlayerSeasonTotals | None:
    """Fold one game into a player's season totals.

    Returns ``None`` when the merged totals do not classify as batter,
    pitcher or two-way; such totals carry no meaningful stats and are not
    persisted.
    """
    if record.kind is not EntityKind.PLAYER or record.name is None:
        raise ValueError(f"expected a player record, got {record.kind} for {record.team}")

    base = current or PlayerSeasonTotals(
        team=record.team, name=record.name, season=record.season, player_id=record.player_id
    )
    batting = merge_optional(base.batting, record.batting)
    pitching = merge_optional(base.pitching, record.pitching)
    fielding = merge_optional(base.fielding, record.fielding)

    player_type = classify(batting, pitching)
    if player_type is None:
        logger.debug("No qualifying batting or pitching for %s after game %d", record.label, record.game_id)
        return None

    merged = replace(
        base,
        player_id=base.player_id or record.player_id,
        games_played=base.games_played + 1,
        batting_games=base.batting_games + (1 if record.batting is not None else 0),
        pitching_games=base.pitching_games + (1 if record.pitching is not None else 0),
        batting=batting,
        pitching=pitching,
        fielding=fielding,
        batting_rates=batting_rates(batting) if batting is not None else None,
        pitching_rates=pitching_rates(pitching) if pitching is not None else None,
        fielding_rates=fielding_rates(fielding) if fielding is not None else None,
        player_type=player_type,
        last_game_id=record.game_id,
        game_ids=(*base.game_ids, record.game_id),
        last_updated=now or _now(),
    )
    if scorer is not None:
        merged = replace(merged, performance=scorer(merged))
    return merged


def merge_team(current: TeamSeasonTotals | None, record: GameStatRecord, *, now: str | None = None) -> TeamSeasonTotals:
    if record.kind is not EntityKind.TEAM:
        raise ValueError(f"expected a team record, got {record.kind} for {record.team}")

    base = current or TeamSeasonTotals(team=record.team, season=record.season)
    ctx = record.context
    won = ctx.result == "W"
    lost = ctx.result == "L"
    home = ctx.home_away == "home"

    wins = base.wins + (1 if won else 0)
    losses = base.losses + (1 if lost else 0)
    runs_scored = base.runs_scored + ctx.runs_scored
    runs_allowed = base.runs_allowed + ctx.runs_allowed
    batting = merge_optional(base.batting, record.batting)
    pitching = merge_optional(base.pitching, record.pitching)
    fielding = merge_optional(base.fielding, record.fielding)

    return replace(
        base,
        games_played=base.games_played + 1,
        wins=wins,
        losses=losses,
        ties=base.ties + (1 if not won and not lost else 0),
        home_games=base.home_games + (1 if home else 0),
        home_wins=base.home_wins + (1 if home and won else 0),
        away_games=base.away_games + (0 if home else 1),
        away_wins=base.away_wins + (1 if not home and won else 0),
        runs_scored=runs_scored,
        runs_allowed=runs_allowed,
        run_differential=runs_scored - runs_allowed,
        win_pct=round(wins / (wins + losses), 3) if wins + losses > 0 else 0.0,
        batting=batting,
        pitching=pitching,
        fielding=fielding,
        batting_rates=batting_rates(batting) if batting is not None else None,
        pitching_rates=pitching_rates(pitching) if pitching is not None else None,
        fielding_rates=fielding_rates(fielding) if fielding is not None else None,
        last_game_id=record.game_id,
        game_ids=(*base.game_ids, record.game_id),
        last_updated=now or _now(),
    )


def apply_team_value(
    totals: TeamSeasonTotals,
    players: list[PlayerSeasonTotals],
    scorer: TeamScorer,
    payroll: int | None = None,
) -> TeamSeasonTotals:
    """Attach team WAR, grade, projected wins and CVR built from the roster's season totals."""
    return replace(totals, value=scorer(totals, players, payroll))


def has_folded(totals: PlayerSeasonTotals | TeamSeasonTotals | None, game_id: int) -> bool:
    return totals is not None and game_id in totals.game_ids


def _game_order(record: GameStatRecord) -> tuple[str, int]:
    return record.date, record.game_id


def fold_player(
    records: Iterable[GameStatRecord], scorer: PlayerScorer | None = None, *, now: str | None = None
) -> PlayerSeasonTotals | None:
    """Build a player's season totals from scratch out of per-game records.

    Records are applied in (date, game id) order and a game id seen twice is
    applied once. Only the final totals are scored.
    """
    totals: PlayerSeasonTotals | None = None
    for record in sorted(records, key=_game_order):
        if not has_folded(totals, record.game_id):
            totals = merge_player(totals, record, now=now)
    if totals is not None and scorer is not None:
        totals = replace(totals, performance=scorer(totals))
    return totals


def fold_team(records: Iterable[GameStatRecord], *, now: str | None = None) -> TeamSeasonTotals | None:
    totals: TeamSeasonTotals | None = None
    for record in sorted(records, key=_game_order):
        if not has_folded(totals, record.game_id):
            totals = merge_team(totals, record, now=now)
    return totals
