import logging

import pytest

from cycle_stats.aggregation.season_aggregator import merge_player, merge_team
from cycle_stats.storage import keys
from cycle_stats.storage.season_repo import SeasonTotalsRepo
from cycle_stats.storage.serialization import to_json
from tests.fakes.store import FakeKeyValueStore
from tests.helpers import player_record, team_record


def _seed(store: FakeKeyValueStore) -> None:
    for team, name in [("NYY", "Aaron_Judge"), ("NYY", "Juan_Soto"), ("BOS", "Rafael_Devers")]:
        totals = merge_player(None, player_record(name, team))
        assert totals is not None
        store.data[keys.player_season_key(team, name, 2024)] = to_json(totals)
    for team in ("NYY", "BOS"):
        store.data[keys.team_season_key(team, 2024)] = to_json(merge_team(None, team_record(team)))


class TestSeasonTotalsRepo:
    def test_get_player(self, fake_store: FakeKeyValueStore) -> None:
        _seed(fake_store)
        player = SeasonTotalsRepo(fake_store).get_player("NYY", "Aaron_Judge", 2024)
        assert player is not None
        assert player.games_played == 1

    def test_missing_is_none(self, fake_store: FakeKeyValueStore) -> None:
        repo = SeasonTotalsRepo(fake_store)
        assert repo.get_player("NYY", "Nobody", 2024) is None
        assert repo.get_team("NYY", 2024) is None

    def test_unreadable_single_record_raises(self, fake_store: FakeKeyValueStore) -> None:
        fake_store.data[keys.team_season_key("NYY", 2024)] = "{broken"
        with pytest.raises(ValueError):
            SeasonTotalsRepo(fake_store).get_team("NYY", 2024)

    def test_players_for_season_by_team(self, fake_store: FakeKeyValueStore) -> None:
        _seed(fake_store)
        repo = SeasonTotalsRepo(fake_store)
        assert sorted(p.name for p in repo.players_for_season(2024, "NYY")) == ["Aaron_Judge", "Juan_Soto"]
        assert len(repo.players_for_season(2024)) == 3
        assert repo.players_for_season(2023) == []

    def test_bulk_read_skips_unreadable(
        self, fake_store: FakeKeyValueStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        _seed(fake_store)
        fake_store.data[keys.player_season_key("NYY", "Broken", 2024)] = "{broken"

        with caplog.at_level(logging.WARNING):
            players = SeasonTotalsRepo(fake_store).players_for_season(2024, "NYY")

        assert len(players) == 2
        assert "Skipping unreadable season record" in caplog.text

    def test_teams_for_season(self, fake_store: FakeKeyValueStore) -> None:
        _seed(fake_store)
        assert SeasonTotalsRepo(fake_store).teams_for_season(2024) == ["BOS", "NYY"]

    def test_game_records_for_one_entity(
        self, fake_store: FakeKeyValueStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        for game_id, date in [(1, "2024-05-01"), (2, "2024-05-02")]:
            record = player_record(game_id=game_id, date=date)
            fake_store.data[keys.game_key(record)] = to_json(record)
        other = player_record("Juan_Soto", game_id=1, date="2024-05-01")
        fake_store.data[keys.game_key(other)] = to_json(other)
        fake_store.data[keys.player_game_key("NYY", "Aaron_Judge", 2024, "2024-05-03", 3)] = "{broken"

        with caplog.at_level(logging.WARNING):
            records = SeasonTotalsRepo(fake_store).player_game_records("NYY", "Aaron_Judge", 2024)

        assert sorted(r.game_id for r in records) == [1, 2]
        assert "Skipping unreadable game record" in caplog.text

    def test_team_game_records(self, fake_store: FakeKeyValueStore) -> None:
        record = team_record("BOS", game_id=7, date="2024-05-07")
        fake_store.data[keys.game_key(record)] = to_json(record)
        fake_store.data[keys.team_season_key("BOS", 2024)] = to_json(merge_team(None, record))

        records = SeasonTotalsRepo(fake_store).team_game_records("BOS", 2024)

        assert [r.game_id for r in records] == [7]
