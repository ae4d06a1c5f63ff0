from dataclasses import dataclass
from enum import StrEnum

from cycle_stats.domain.counts import BattingCounts, FieldingCounts, PitchingCounts
from cycle_stats.domain.rates import BattingRates, FieldingRates, PitchingRates


class PlayerType(StrEnum):
    BATTER = "batter"
    PITCHER = "pitcher"
    TWO_WAY = "two_way"


@dataclass(frozen=True)
class Performance:
    war: float
    war_grade: str
    traditional_score: float
    cvr: float
    cvr_grade: str
    salary: int
    salary_estimated: bool


@dataclass(frozen=True)
class PlayerSeasonTotals:
    team: str
    name: str
    season: int
    player_id: int | None = None
    games_played: int = 0
    batting_games: int = 0
    pitching_games: int = 0
    batting: BattingCounts | None = None
    pitching: PitchingCounts | None = None
    fielding: FieldingCounts | None = None
    batting_rates: BattingRates | None = None
    pitching_rates: PitchingRates | None = None
    fielding_rates: FieldingRates | None = None
    player_type: PlayerType | None = None
    performance: Performance | None = None
    last_game_id: int | None = None
    game_ids: tuple[int, ...] = ()
    last_updated: str | None = None


@dataclass(frozen=True)
class TeamValue:
    war: float
    batting_war: float
    pitching_war: float
    war_grade: str
    projected_wins: int
    cvr: float | None
    payroll: int


@dataclass(frozen=True)
class TeamSeasonTotals:
    team: str
    season: int
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    home_games: int = 0
    home_wins: int = 0
    away_games: int = 0
    away_wins: int = 0
    runs_scored: int = 0
    runs_allowed: int = 0
    run_differential: int = 0
    win_pct: float = 0.0
    batting: BattingCounts | None = None
    pitching: PitchingCounts | None = None
    fielding: FieldingCounts | None = None
    batting_rates: BattingRates | None = None
    pitching_rates: PitchingRates | None = None
    fielding_rates: FieldingRates | None = None
    value: TeamValue | None = None
    last_game_id: int | None = None
    game_ids: tuple[int, ...] = ()
    last_updated: str | None = None
