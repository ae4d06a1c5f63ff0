from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from cycle_stats.domain.season_totals import Performance, PlayerType, TeamValue

if TYPE_CHECKING:
    from cycle_stats.domain.baseline import Baseline, MetricDistribution
    from cycle_stats.domain.counts import BattingCounts, PitchingCounts
    from cycle_stats.domain.rates import BattingRates, PitchingRates
    from cycle_stats.domain.season_totals import PlayerSeasonTotals, TeamSeasonTotals
    from cycle_stats.ingest.salary_source import SalaryIndex
    from cycle_stats.valuation.baselines import BaselineStore

logger = logging.getLogger(__name__)

WAR_FLOOR = -2.0
WAR_CEILING = 5.0
SECONDARY_ROLE_WEIGHT = 0.3
DEFAULT_TEAM_PAYROLL = 150_000_000
LEAGUE_MINIMUM_SALARY = 740_000

# (threshold, points) pairs, checked in order
_PLAYING_TIME_BONUS = ((140, 0.3), (120, 0.2), (100, 0.1), (80, 0.0))
_DURABILITY_BONUS = ((200, 0.4), (180, 0.3), (160, 0.2), (140, 0.1), (50, 0.0))

_ESTIMATED_SALARY = (
    (6.0, 35_000_000),
    (4.0, 25_000_000),
    (2.5, 15_000_000),
    (1.5, 8_000_000),
    (0.5, 4_500_000),
    (0.0, 2_000_000),
)
_WAR_MULTIPLIER = ((6.0, 1.4), (4.0, 1.3), (2.0, 1.2), (1.0, 1.1), (0.5, 1.0), (0.0, 0.9), (-1.5, 0.75))
_SALARY_TIER = (
    (35_000_000, 1.4),
    (25_000_000, 1.3),
    (15_000_000, 1.2),
    (8_000_000, 1.1),
    (3_000_000, 1.0),
    (1_000_000, 0.95),
)
_WAR_GRADES = (
    (6.0, "Elite"),
    (4.0, "Star"),
    (2.5, "Very Good"),
    (1.5, "Above Average"),
    (0.5, "Average"),
    (0.0, "Below Average"),
)
_CVR_GRADES = (
    (1.8, "Elite Value"),
    (1.5, "Excellent Value"),
    (1.2, "Good Value"),
    (0.8, "Fair Value"),
    (0.5, "Below Average Value"),
)

_TEAM_WIN_PCT = ((0.650, 30), (0.600, 25), (0.550, 20), (0.500, 10), (0.450, 0), (0.400, -10))
_TEAM_RUN_DIFF = ((2.0, 20), (1.0, 15), (0.5, 10), (0.0, 5), (-0.5, 0), (-1.0, -5))
_TEAM_WAR_MULTIPLIER = ((30.0, 1.3), (20.0, 1.2), (10.0, 1.1), (0.0, 1.0))
_TEAM_PAYROLL_TIER = (
    (250_000_000, 1.4),
    (200_000_000, 1.3),
    (150_000_000, 1.2),
    (100_000_000, 1.0),
    (80_000_000, 0.9),
)
_TEAM_WAR_GRADES = ((30.0, "Elite"), (20.0, "Very Good"), (10.0, "Above Average"), (0.0, "Average"))


def _at_least[V](value: float, table: tuple[tuple[float, V], ...], default: V) -> V:
    for threshold, result in table:
        if value >= threshold:
            return result
    return default


def _at_most[V](value: float, table: tuple[tuple[float, V], ...], default: V) -> V:
    for threshold, result in table:
        if value <= threshold:
            return result
    return default


def percentile_contribution(
    value: float, dist: MetricDistribution, scale: float, *, higher_is_better: bool = True
) -> float:
    """Tiered credit for where ``value`` falls in the league distribution."""
    if higher_is_better:
        if value >= dist.p90:
            tier = 1.5
        elif value >= dist.p75:
            tier = 1.0
        elif value >= dist.p50:
            tier = 0.5
        elif value >= dist.p25:
            tier = 0.0
        elif value >= dist.p10:
            tier = -0.3
        else:
            tier = -0.6
    else:
        if value <= dist.p10:
            tier = 1.5
        elif value <= dist.p25:
            tier = 1.0
        elif value <= dist.p50:
            tier = 0.5
        elif value <= dist.p75:
            tier = 0.0
        elif value <= dist.p90:
            tier = -0.3
        else:
            tier = -0.6
    return tier * scale


def _clamp_war(value: float) -> float:
    return round(max(WAR_FLOOR, min(WAR_CEILING, value)), 1)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def hitter_war(counts: BattingCounts, rates: BattingRates, baseline: Baseline) -> float:
    dists = baseline.batting
    games = counts.games_played
    war = percentile_contribution(rates.ops, dists["ops"], 0.5)
    war += percentile_contribution(rates.obp, dists["obp"], 0.4)
    war += percentile_contribution(rates.slg, dists["slg"], 0.3)
    war += percentile_contribution(rates.avg, dists["avg"], 0.2)
    if games > 0:
        war += percentile_contribution(counts.home_runs / games, dists["home_run_rate"], 0.2)
        war += percentile_contribution(counts.stolen_bases / games, dists["stolen_base_rate"], 0.1)
    war += _at_least(games, _PLAYING_TIME_BONUS, -0.1)
    return _clamp_war(war)


def pitcher_war(counts: PitchingCounts, rates: PitchingRates, baseline: Baseline) -> float:
    dists = baseline.pitching
    innings = counts.innings_pitched.as_float()
    war = percentile_contribution(min(rates.era, rates.fip), dists["era"], 0.6, higher_is_better=False)
    war += percentile_contribution(rates.whip, dists["whip"], 0.4, higher_is_better=False)
    war += percentile_contribution(rates.strikeouts_per_9, dists["strikeouts_per_9"], 0.3)
    war += percentile_contribution(rates.walks_per_9, dists["walks_per_9"], 0.2, higher_is_better=False)
    war += _at_least(innings, _DURABILITY_BONUS, -0.1)
    if counts.saves >= 20:
        war += 0.1
    elif counts.saves >= 10 or counts.holds >= 15:
        war += 0.05
    return _clamp_war(war)


def player_war(totals: PlayerSeasonTotals, baseline: Baseline) -> float:
    batting = 0.0
    pitching = 0.0
    if totals.batting is not None and totals.batting_rates is not None:
        batting = hitter_war(totals.batting, totals.batting_rates, baseline)
    if totals.pitching is not None and totals.pitching_rates is not None:
        pitching = pitcher_war(totals.pitching, totals.pitching_rates, baseline)
    match totals.player_type:
        case PlayerType.BATTER:
            return batting
        case PlayerType.PITCHER:
            return pitching
        case PlayerType.TWO_WAY:
            return _clamp_war(max(batting, pitching) + SECONDARY_ROLE_WEIGHT * min(batting, pitching))
        case _:
            return 0.0


def pitcher_traditional_score(counts: PitchingCounts, rates: PitchingRates) -> float:
    innings = counts.innings_pitched.as_float()
    if innings < 2:
        return 0.0
    score = 10.0
    score += _at_most(rates.era, ((2.00, 25), (2.50, 20), (3.00, 16), (3.50, 12), (4.00, 8), (4.50, 4)), 0)
    score += _at_most(rates.whip, ((0.90, 20), (1.00, 17), (1.15, 14), (1.30, 10), (1.45, 6), (1.60, 3)), 0)
    score += _at_least(rates.strikeouts_per_9, ((11.0, 20), (10.0, 17), (8.5, 14), (7.5, 10), (6.5, 6), (5.5, 3)), 0)
    score += min(12.0, innings / 15)
    win_rate = counts.wins / (innings / 6)
    score += min(13.0, win_rate * 6)
    return round(min(100.0, score), 1)


def batter_traditional_score(counts: BattingCounts, rates: BattingRates) -> float:
    if counts.at_bats < 50:
        return 0.0
    score = 15.0
    score += _at_least(rates.avg, ((0.320, 30), (0.300, 26), (0.280, 22), (0.260, 18), (0.240, 14), (0.220, 8)), 0)
    score += _at_least(rates.obp, ((0.420, 30), (0.400, 26), (0.370, 22), (0.340, 18), (0.320, 14), (0.300, 8)), 0)
    score += _at_least(rates.slg, ((0.600, 25), (0.550, 22), (0.480, 18), (0.420, 14), (0.380, 10), (0.350, 6)), 0)
    games = counts.games_played
    if games > 0:
        production = (counts.home_runs + 0.8 * counts.rbi + 0.6 * counts.runs) / games
        score += _at_least(production, ((2.5, 25), (2.0, 21), (1.5, 17), (1.0, 13), (0.7, 9), (0.4, 5)), 0)
    return round(min(100.0, score), 1)


def traditional_score(totals: PlayerSeasonTotals) -> float:
    """Rule-based 0-100 score from conventional stats."""
    batting = 0.0
    pitching = 0.0
    if totals.batting is not None and totals.batting_rates is not None:
        batting = batter_traditional_score(totals.batting, totals.batting_rates)
    if totals.pitching is not None and totals.pitching_rates is not None:
        pitching = pitcher_traditional_score(totals.pitching, totals.pitching_rates)
    match totals.player_type:
        case PlayerType.BATTER:
            return batting
        case PlayerType.PITCHER:
            return pitching
        case PlayerType.TWO_WAY:
            return max(batting, pitching)
        case _:
            return 0.0


def estimated_salary(war: float) -> int:
    return _at_least(war, _ESTIMATED_SALARY, LEAGUE_MINIMUM_SALARY)


def war_multiplier(war: float) -> float:
    return _at_least(war, _WAR_MULTIPLIER, 0.5)


def salary_tier(salary: float) -> float:
    return _at_least(salary, _SALARY_TIER, 0.9)


def war_grade(war: float) -> str:
    return _at_least(war, _WAR_GRADES, "Poor")


def cvr_grade(cvr: float) -> str:
    return _at_least(cvr, _CVR_GRADES, "Poor Value")


def cost_value_ratio(base_score: float, war: float, salary: float) -> float:
    """Performance per dollar, normalized so 1.0 is league-average efficiency."""
    if base_score <= 0:
        return 0.0
    value_score = _round_half_up(base_score * war_multiplier(war))
    return round((value_score / 50) / salary_tier(salary), 2)


def team_war_grade(war: float) -> str:
    return _at_least(war, _TEAM_WAR_GRADES, "Poor")


def projected_wins(war: float) -> int:
    return _round_half_up(81 + (war - 18) * 2)


def team_cost_value_ratio(team: TeamSeasonTotals, war: float, payroll: float) -> float | None:
    decided = team.wins + team.losses
    if decided == 0:
        return None
    score = 50.0
    score += _at_least(team.wins / decided, _TEAM_WIN_PCT, -20)
    if team.games_played > 0:
        score += _at_least(team.run_differential / team.games_played, _TEAM_RUN_DIFF, -10)
    score *= _at_least(war, _TEAM_WAR_MULTIPLIER, 0.9)
    return round((score / 50) / _at_least(payroll, _TEAM_PAYROLL_TIER, 0.8), 2)


def team_war_split(players: list[PlayerSeasonTotals]) -> tuple[float, float]:
    """Sum player WAR into (batting, pitching) shares for one team.

    Two-way players are apportioned by batting games vs pitching games,
    or 60/40 when neither is known.
    """
    batting = 0.0
    pitching = 0.0
    for player in players:
        if player.performance is None:
            continue
        war = player.performance.war
        match player.player_type:
            case PlayerType.BATTER:
                batting += war
            case PlayerType.PITCHER:
                pitching += war
            case PlayerType.TWO_WAY:
                total_games = player.batting_games + player.pitching_games
                share = player.batting_games / total_games if total_games > 0 else 0.6
                batting += war * share
                pitching += war * (1 - share)
    return round(batting, 1), round(pitching, 1)


class ValueMetricsEngine:
    """Scores season totals against the current league baseline."""

    def __init__(
        self,
        baselines: BaselineStore,
        salaries: SalaryIndex | None = None,
        default_team_payroll: int = DEFAULT_TEAM_PAYROLL,
    ) -> None:
        self._baselines = baselines
        self._salaries = salaries
        self._default_team_payroll = default_team_payroll

    def score_player(self, totals: PlayerSeasonTotals) -> Performance | None:
        if totals.player_type is None:
            return None
        baseline = self._baselines.current(totals.season)
        war = player_war(totals, baseline)
        base = traditional_score(totals)

        observed = None
        if self._salaries is not None:
            observed = self._salaries.salary_for(totals.team, totals.season, totals.name)
        salary_is_estimated = observed is None or observed <= 0
        salary = estimated_salary(war) if salary_is_estimated else int(observed or 0)

        cvr = cost_value_ratio(base, war, salary)
        return Performance(
            war=war,
            war_grade=war_grade(war),
            traditional_score=base,
            cvr=cvr,
            cvr_grade=cvr_grade(cvr),
            salary=salary,
            salary_estimated=salary_is_estimated,
        )

    def score_team(
        self, team: TeamSeasonTotals, players: list[PlayerSeasonTotals], payroll: int | None = None
    ) -> TeamValue:
        batting, pitching = team_war_split(players)
        war = round(batting + pitching, 1)
        payroll = payroll if payroll and payroll > 0 else self._default_team_payroll
        return TeamValue(
            war=war,
            batting_war=batting,
            pitching_war=pitching,
            war_grade=team_war_grade(war),
            projected_wins=projected_wins(war),
            cvr=team_cost_value_ratio(team, war, payroll),
            payroll=payroll,
        )
