from dataclasses import dataclass, field
from enum import StrEnum


class WriteState(StrEnum):
    ATTEMPTED = "attempted"
    SUCCEEDED = "succeeded"
    RETRY_EXHAUSTED = "retry_exhausted"
    FALLBACK_ATTEMPTED = "fallback_attempted"
    PERMANENTLY_FAILED = "permanently_failed"


@dataclass(frozen=True)
class FailedRecord:
    game_id: int
    date: str
    key: str
    entity: str
    team: str
    player: str | None
    discipline: str
    error: str


@dataclass(frozen=True)
class WriteOutcome:
    """Terminal state of one game's batched write."""

    game_id: int
    state: WriteState
    records_written: int = 0
    written_keys: tuple[str, ...] = ()
    failed_records: tuple[FailedRecord, ...] = ()
    error: str | None = None
    used_fallback: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state is WriteState.SUCCEEDED


@dataclass(frozen=True)
class FailedGame:
    game_id: int
    date: str
    stage: str
    reason: str


@dataclass(frozen=True)
class GameOutcome:
    game_id: int
    date: str
    records_written: int = 0
    collisions: int = 0
    refreshes: int = 0
    failure: FailedGame | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass
class RunSummary:
    season: int
    games_scheduled: int = 0
    games_processed: int = 0
    records_written: int = 0
    collisions: int = 0
    refreshes: int = 0
    double_headers: int = 0
    baseline_refreshes: int = 0
    elapsed_seconds: float = 0.0
    failed_games: list[FailedGame] = field(default_factory=list)

    @property
    def games_failed(self) -> int:
        return len(self.failed_games)

    def record(self, outcome: GameOutcome) -> None:
        self.records_written += outcome.records_written
        self.collisions += outcome.collisions
        self.refreshes += outcome.refreshes
        if outcome.failure is not None:
            self.failed_games.append(outcome.failure)
        else:
            self.games_processed += 1


@dataclass
class RebuildReport:
    season: int
    players_rebuilt: int = 0
    players_skipped: int = 0
    teams_rebuilt: int = 0
    outcome: WriteOutcome | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is None or self.outcome.succeeded
