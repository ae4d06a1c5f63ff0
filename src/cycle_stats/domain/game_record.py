from dataclasses import dataclass
from enum import StrEnum

from cycle_stats.domain.counts import BattingCounts, FieldingCounts, PitchingCounts
from cycle_stats.domain.rates import BattingRates, FieldingRates, PitchingRates


class EntityKind(StrEnum):
    PLAYER = "player"
    TEAM = "team"


@dataclass(frozen=True)
class GameContext:
    game_id: int
    date: str
    opponent: str
    home_away: str
    result: str
    runs_scored: int
    runs_allowed: int
    batting_order: str | None = None
    position: str | None = None


@dataclass(frozen=True)
class GameStatRecord:
    """One entity's box-score line for a single game."""

    kind: EntityKind
    team: str
    season: int
    context: GameContext
    name: str | None = None
    player_id: int | None = None
    batting: BattingCounts | None = None
    pitching: PitchingCounts | None = None
    fielding: FieldingCounts | None = None
    batting_rates: BattingRates | None = None
    pitching_rates: PitchingRates | None = None
    fielding_rates: FieldingRates | None = None

    @property
    def game_id(self) -> int:
        return self.context.game_id

    @property
    def date(self) -> str:
        return self.context.date

    @property
    def label(self) -> str:
        if self.kind is EntityKind.TEAM:
            return self.team
        return f"{self.team}-{self.name}"

    def disciplines(self) -> tuple[str, ...]:
        present = []
        if self.batting is not None:
            present.append("batting")
        if self.pitching is not None:
            present.append("pitching")
        if self.fielding is not None:
            present.append("fielding")
        return tuple(present)
