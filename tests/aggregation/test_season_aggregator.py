import pytest

from cycle_stats.aggregation.season_aggregator import (
    apply_team_value,
    classify,
    fold_player,
    fold_team,
    has_folded,
    merge_player,
    merge_team,
)
from cycle_stats.domain.counts import BattingCounts, PitchingCounts
from cycle_stats.domain.season_totals import Performance, PlayerSeasonTotals, PlayerType, TeamSeasonTotals, TeamValue
from tests.helpers import player_record, team_record

_NOW = "2024-05-01T23:00:00+00:00"


class TestClassify:
    def test_batter(self) -> None:
        assert classify(BattingCounts(at_bats=1), None) is PlayerType.BATTER

    def test_pitcher(self) -> None:
        assert classify(None, PitchingCounts(outs=1)) is PlayerType.PITCHER

    def test_two_way(self) -> None:
        assert classify(BattingCounts(at_bats=3), PitchingCounts(outs=15)) is PlayerType.TWO_WAY

    def test_walk_only_batter_and_zero_out_pitcher_are_unclassified(self) -> None:
        assert classify(BattingCounts(plate_appearances=1, walks=1), PitchingCounts(batters_faced=2)) is None
        assert classify(None, None) is None


class TestMergePlayer:
    def test_first_game_creates_totals(self) -> None:
        totals = merge_player(None, player_record(), now=_NOW)

        assert totals is not None
        assert totals.games_played == 1
        assert totals.batting_games == 1
        assert totals.pitching_games == 0
        assert totals.player_type is PlayerType.BATTER
        assert totals.player_id == 592450
        assert totals.last_game_id == 745001
        assert totals.last_updated == _NOW
        assert totals.batting_rates is not None
        assert totals.batting_rates.avg == 0.5

    def test_double_header_counts_two_games(self) -> None:
        first = player_record(game_id=1, date="2024-05-01")
        second = player_record(game_id=2, date="2024-05-01")

        totals = merge_player(merge_player(None, first), second)

        assert totals is not None
        assert totals.games_played == 2
        assert totals.batting is not None
        assert totals.batting.at_bats == 8
        assert totals.batting.hits == 4
        assert totals.last_game_id == 2

    def test_rates_recomputed_from_sums(self) -> None:
        hot = player_record(game_id=1, batting=BattingCounts(games_played=1, at_bats=4, hits=4))
        cold = player_record(game_id=2, batting=BattingCounts(games_played=1, at_bats=6, hits=0))

        totals = merge_player(merge_player(None, hot), cold)

        assert totals is not None
        assert totals.batting_rates is not None
        assert totals.batting_rates.avg == 0.4

    def test_absent_discipline_leaves_totals_untouched(self) -> None:
        batting_game = player_record(game_id=1)
        pitching_game = player_record(
            game_id=2, batting=None, pitching=PitchingCounts(games_played=1, outs=6, batters_faced=7)
        )

        totals = merge_player(merge_player(None, batting_game), pitching_game)

        assert totals is not None
        assert totals.player_type is PlayerType.TWO_WAY
        assert totals.batting is not None
        assert totals.batting.games_played == 1
        assert totals.batting_games == 1
        assert totals.pitching_games == 1

    def test_unclassified_player_is_not_produced(self) -> None:
        record = player_record(batting=BattingCounts(games_played=1, plate_appearances=1, walks=1))
        assert merge_player(None, record) is None

    def test_scorer_attaches_performance(self) -> None:
        performance = Performance(
            war=1.0,
            war_grade="Average",
            traditional_score=40.0,
            cvr=0.9,
            cvr_grade="Fair Value",
            salary=2_000_000,
            salary_estimated=True,
        )
        seen: list[PlayerSeasonTotals] = []

        def scorer(totals: PlayerSeasonTotals) -> Performance:
            seen.append(totals)
            return performance

        totals = merge_player(None, player_record(), scorer)

        assert totals is not None
        assert totals.performance == performance
        assert seen[0].games_played == 1

    def test_rejects_team_record(self) -> None:
        with pytest.raises(ValueError):
            merge_player(None, team_record())


class TestMergeTeam:
    def test_wins_losses_and_splits(self) -> None:
        totals = merge_team(None, team_record(game_id=1, result="W", runs_scored=5, runs_allowed=3))
        totals = merge_team(
            totals, team_record(game_id=2, home_away="away", result="L", runs_scored=1, runs_allowed=4)
        )

        assert totals.games_played == 2
        assert (totals.wins, totals.losses, totals.ties) == (1, 1, 0)
        assert (totals.home_games, totals.home_wins) == (1, 1)
        assert (totals.away_games, totals.away_wins) == (1, 0)
        assert totals.runs_scored == 6
        assert totals.runs_allowed == 7
        assert totals.run_differential == -1
        assert totals.win_pct == 0.5
        assert totals.batting is not None
        assert totals.batting.at_bats == 68
        assert totals.last_game_id == 2

    def test_tie_is_neither_win_nor_loss(self) -> None:
        totals = merge_team(None, team_record(result="T", runs_scored=2, runs_allowed=2))
        assert (totals.wins, totals.losses, totals.ties) == (0, 0, 1)
        assert totals.win_pct == 0.0

    def test_rejects_player_record(self) -> None:
        with pytest.raises(ValueError):
            merge_team(None, player_record())


class TestApplyTeamValue:
    def test_scorer_sees_roster_and_payroll(self) -> None:
        team = merge_team(None, team_record())
        roster = [merge_player(None, player_record())]
        calls: list[tuple[int, int | None]] = []

        def scorer(totals: TeamSeasonTotals, players: list[PlayerSeasonTotals], payroll: int | None) -> TeamValue:
            calls.append((len(players), payroll))
            return TeamValue(
                war=1.0,
                batting_war=1.0,
                pitching_war=0.0,
                war_grade="Average",
                projected_wins=47,
                cvr=1.0,
                payroll=payroll or 0,
            )

        valued = apply_team_value(team, [p for p in roster if p is not None], scorer, 180_000_000)

        assert calls == [(1, 180_000_000)]
        assert valued.value is not None
        assert valued.value.payroll == 180_000_000
        assert valued.games_played == team.games_played


class TestFold:
    def test_merge_remembers_game_ids(self) -> None:
        totals = merge_player(merge_player(None, player_record(game_id=1)), player_record(game_id=2))
        assert totals is not None
        assert totals.game_ids == (1, 2)
        assert has_folded(totals, 2)
        assert not has_folded(totals, 3)
        assert not has_folded(None, 1)

    def test_fold_player_orders_and_dedupes(self) -> None:
        records = [
            player_record(game_id=3, date="2024-05-03"),
            player_record(game_id=1, date="2024-05-01"),
            player_record(game_id=3, date="2024-05-03"),
        ]

        totals = fold_player(records)

        assert totals is not None
        assert totals.games_played == 2
        assert totals.game_ids == (1, 3)
        assert totals.last_game_id == 3

    def test_fold_player_scores_once(self) -> None:
        calls: list[int] = []

        def scorer(totals: PlayerSeasonTotals) -> Performance | None:
            calls.append(totals.games_played)
            return None

        fold_player([player_record(game_id=1), player_record(game_id=2, date="2024-05-02")], scorer)

        assert calls == [2]

    def test_fold_nothing(self) -> None:
        assert fold_player([]) is None
        assert fold_team([]) is None

    def test_fold_team(self) -> None:
        records = [
            team_record(game_id=2, date="2024-05-02", result="L", runs_scored=1, runs_allowed=2),
            team_record(game_id=1, date="2024-05-01"),
        ]

        totals = fold_team(records)

        assert totals is not None
        assert (totals.wins, totals.losses) == (1, 1)
        assert totals.game_ids == (1, 2)
