from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Self

from cycle_stats.domain.innings import InningsPitched


class _Summable:
    """Field-wise addition for counting-stat bundles."""

    def merge(self, other: Self) -> Self:
        names = [f.name for f in fields(self)]  # type: ignore[arg-type]
        return type(self)(**{name: getattr(self, name) + getattr(other, name) for name in names})


@dataclass(frozen=True)
class BattingCounts(_Summable):
    games_played: int = 0
    at_bats: int = 0
    plate_appearances: int = 0
    runs: int = 0
    hits: int = 0
    doubles: int = 0
    triples: int = 0
    home_runs: int = 0
    rbi: int = 0
    walks: int = 0
    intentional_walks: int = 0
    strikeouts: int = 0
    hit_by_pitch: int = 0
    sac_flies: int = 0
    sac_bunts: int = 0
    stolen_bases: int = 0
    caught_stealing: int = 0
    ground_outs: int = 0
    air_outs: int = 0
    fly_outs: int = 0
    ground_into_double_play: int = 0
    left_on_base: int = 0
    total_bases: int = 0

    def qualifies(self) -> bool:
        return self.at_bats > 0 or self.plate_appearances > 0

    @property
    def singles(self) -> int:
        return max(self.hits - self.doubles - self.triples - self.home_runs, 0)


@dataclass(frozen=True)
class PitchingCounts(_Summable):
    games_played: int = 0
    games_started: int = 0
    outs: int = 0
    hits: int = 0
    runs: int = 0
    earned_runs: int = 0
    walks: int = 0
    intentional_walks: int = 0
    strikeouts: int = 0
    home_runs: int = 0
    hit_by_pitch: int = 0
    batters_faced: int = 0
    pitches_thrown: int = 0
    strikes: int = 0
    balls: int = 0
    wins: int = 0
    losses: int = 0
    saves: int = 0
    save_opportunities: int = 0
    holds: int = 0
    blown_saves: int = 0
    complete_games: int = 0
    shutouts: int = 0
    wild_pitches: int = 0
    balks: int = 0
    ground_outs: int = 0
    air_outs: int = 0
    fly_outs: int = 0
    inherited_runners: int = 0
    inherited_runners_scored: int = 0
    quality_starts: int = 0

    def qualifies(self) -> bool:
        return self.outs > 0 or self.batters_faced > 0

    @property
    def innings_pitched(self) -> InningsPitched:
        return InningsPitched(self.outs)


@dataclass(frozen=True)
class FieldingCounts(_Summable):
    games_played: int = 0
    put_outs: int = 0
    assists: int = 0
    errors: int = 0
    chances: int = 0
    double_plays: int = 0
    triple_plays: int = 0
    passed_balls: int = 0
    caught_stealing: int = 0
    stolen_bases: int = 0

    def qualifies(self) -> bool:
        return self.chances > 0 or self.put_outs > 0 or self.assists > 0


def merge_optional[C: _Summable](current: C | None, incoming: C | None) -> C | None:
    if incoming is None:
        return current
    if current is None:
        return incoming
    return current.merge(incoming)
