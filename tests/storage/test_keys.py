from fnmatch import fnmatchcase

import pytest

from cycle_stats.storage import keys
from tests.helpers import player_record, team_record


class TestKeys:
    def test_player_keys(self) -> None:
        record = player_record("Aaron_Judge", "NYY", 2024, game_id=745001, date="2024-05-01")
        assert keys.game_key(record) == "player:NYY-Aaron_Judge-2024:2024-05-01-745001"
        assert keys.season_key(record) == "player:NYY-Aaron_Judge-2024:season"

    def test_team_keys(self) -> None:
        record = team_record("BOS", 2024, game_id=745001, date="2024-05-01")
        assert keys.game_key(record) == "team:BOS:2024:2024-05-01-745001"
        assert keys.season_key(record) == "team:BOS:2024:season"

    def test_double_header_games_get_distinct_keys(self) -> None:
        first = team_record(game_id=1, date="2024-07-04")
        second = team_record(game_id=2, date="2024-07-04")
        assert keys.game_key(first) != keys.game_key(second)

    def test_player_record_needs_a_name(self) -> None:
        record = player_record()
        nameless = type(record)(kind=record.kind, team=record.team, season=record.season, context=record.context)
        with pytest.raises(ValueError):
            keys.game_key(nameless)


class TestPatterns:
    def test_game_patterns_exclude_season_keys(self) -> None:
        pattern = keys.team_game_pattern(2024)
        assert fnmatchcase("team:NYY:2024:2024-05-01-745001", pattern)
        assert not fnmatchcase("team:NYY:2024:season", pattern)
        assert not fnmatchcase("team:NYY:2023:2023-05-01-1", pattern)

    def test_player_season_pattern_by_team(self) -> None:
        assert fnmatchcase("player:NYY-Aaron_Judge-2024:season", keys.player_season_pattern(2024, "NYY"))
        assert not fnmatchcase("player:BOS-Rafael_Devers-2024:season", keys.player_season_pattern(2024, "NYY"))
        assert fnmatchcase("player:BOS-Rafael_Devers-2024:season", keys.player_season_pattern(2024))

    def test_player_game_pattern(self) -> None:
        pattern = keys.player_game_pattern(2024)
        assert fnmatchcase("player:NYY-Aaron_Judge-2024:2024-05-01-745001", pattern)
        assert not fnmatchcase("player:NYY-Aaron_Judge-2024:season", pattern)

    def test_single_entity_game_patterns(self) -> None:
        judge = keys.player_games_pattern("NYY", "Aaron_Judge", 2024)
        assert fnmatchcase("player:NYY-Aaron_Judge-2024:2024-05-01-745001", judge)
        assert not fnmatchcase("player:NYY-Aaron_Judge-2024:season", judge)
        assert not fnmatchcase("player:NYY-Gerrit_Cole-2024:2024-05-01-745001", judge)

        team = keys.team_games_pattern("BOS", 2024)
        assert fnmatchcase("team:BOS:2024:2024-05-01-745001", team)
        assert not fnmatchcase("team:NYY:2024:2024-05-01-745001", team)

    def test_glob_characters_in_names_are_literal(self) -> None:
        pattern = keys.player_games_pattern("NYY", "J*", 2024)
        assert fnmatchcase("player:NYY-J*-2024:2024-05-01-1", pattern)
        assert not fnmatchcase("player:NYY-Jeter-2024:2024-05-01-1", pattern)
