from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cycle_stats.storage import keys

if TYPE_CHECKING:
    from cycle_stats.storage.protocol import KeyValueStore

logger = logging.getLogger(__name__)

TEAM_RECORDS_PER_GAME = 2


@dataclass(frozen=True)
class VerificationReport:
    season: int
    expected_games: int
    player_game_records: int
    team_game_records: int
    player_season_records: int
    team_season_records: int
    games_with_team_records: int

    @property
    def expected_team_game_records(self) -> int:
        return self.expected_games * TEAM_RECORDS_PER_GAME

    @property
    def missing_team_game_records(self) -> int:
        return max(self.expected_team_game_records - self.team_game_records, 0)

    @property
    def complete(self) -> bool:
        return self.missing_team_game_records == 0


def verify_season(store: KeyValueStore, season: int, expected_games: int) -> VerificationReport:
    """Count stored records for a season against the number of games run."""
    team_game_keys = store.scan(keys.team_game_pattern(season))
    game_ids = {key.rsplit("-", 1)[-1] for key in team_game_keys}
    report = VerificationReport(
        season=season,
        expected_games=expected_games,
        player_game_records=len(store.scan(keys.player_game_pattern(season))),
        team_game_records=len(team_game_keys),
        player_season_records=len(store.scan(keys.player_season_pattern(season))),
        team_season_records=len(store.scan(keys.team_season_pattern(season))),
        games_with_team_records=len(game_ids),
    )
    if report.complete:
        logger.info(
            "Season %d verified: %d team game records for %d games", season, report.team_game_records, expected_games
        )
    else:
        logger.warning(
            "Season %d incomplete: %d of %d team game records present",
            season,
            report.team_game_records,
            report.expected_team_game_records,
        )
    return report
