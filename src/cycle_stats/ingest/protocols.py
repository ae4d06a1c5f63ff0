from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ScheduledGame:
    game_id: int
    date: str
    home_team: str
    away_team: str
    status: str
    game_type: str = "R"
    double_header: str = "N"
    game_number: int = 1


@dataclass(frozen=True)
class SalaryEntry:
    player_name: str
    team: str
    season: int
    salary: int


@runtime_checkable
class GameSource(Protocol):
    @property
    def source_type(self) -> str: ...

    def fetch_schedule(self, season: int, start_date: str, end_date: str) -> list[ScheduledGame]: ...

    def fetch_boxscore(self, game_id: int) -> dict[str, Any]: ...


@runtime_checkable
class SalaryLookup(Protocol):
    def salaries(self, team: str, season: int) -> list[SalaryEntry]: ...
