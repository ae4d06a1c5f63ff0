from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cycle_stats.storage import keys
from cycle_stats.storage.serialization import decode_game_record, decode_player_totals, decode_team_totals

if TYPE_CHECKING:
    from cycle_stats.domain.game_record import GameStatRecord
    from cycle_stats.domain.season_totals import PlayerSeasonTotals, TeamSeasonTotals
    from cycle_stats.storage.protocol import KeyValueStore

logger = logging.getLogger(__name__)


class SeasonTotalsRepo:
    """Reads season-total documents out of the key-value store.

    ``get_player`` and ``get_team`` raise ``ValueError`` on an unreadable
    document; bulk reads skip and log them instead.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_player(self, team: str, name: str, season: int) -> PlayerSeasonTotals | None:
        raw = self._store.get(keys.player_season_key(team, name, season))
        return None if raw is None else decode_player_totals(raw)

    def get_team(self, team: str, season: int) -> TeamSeasonTotals | None:
        raw = self._store.get(keys.team_season_key(team, season))
        return None if raw is None else decode_team_totals(raw)

    def players_for_season(self, season: int, team: str | None = None) -> list[PlayerSeasonTotals]:
        players: list[PlayerSeasonTotals] = []
        for key in self._store.scan(keys.player_season_pattern(season, team)):
            raw = self._store.get(key)
            if raw is None:
                continue
            try:
                players.append(decode_player_totals(raw))
            except (ValueError, TypeError, KeyError) as e:
                logger.warning("Skipping unreadable season record %s: %s", key, e)
        return players

    def teams_for_season(self, season: int) -> list[str]:
        return [key.split(":")[1] for key in self._store.scan(keys.team_season_pattern(season))]

    def game_records(self, pattern: str) -> list[GameStatRecord]:
        """Per-game records under ``pattern``; unreadable ones are logged and skipped."""
        records: list[GameStatRecord] = []
        for key in self._store.scan(pattern):
            raw = self._store.get(key)
            if raw is None:
                continue
            try:
                records.append(decode_game_record(raw))
            except (ValueError, TypeError, KeyError) as e:
                logger.warning("Skipping unreadable game record %s: %s", key, e)
        return records

    def player_game_records(self, team: str, name: str, season: int) -> list[GameStatRecord]:
        return self.game_records(keys.player_games_pattern(team, name, season))

    def team_game_records(self, team: str, season: int) -> list[GameStatRecord]:
        return self.game_records(keys.team_games_pattern(team, season))
