from typing import Any

from cycle_stats.domain.counts import BattingCounts, PitchingCounts
from cycle_stats.domain.game_record import EntityKind, GameContext, GameStatRecord
from cycle_stats.ingest.protocols import ScheduledGame
from cycle_stats.stats.rate_calculator import batting_rates, pitching_rates


def scheduled_game(
    game_id: int = 745001,
    date: str = "2024-05-01",
    home: str = "New York Yankees",
    away: str = "Boston Red Sox",
    game_number: int = 1,
) -> ScheduledGame:
    return ScheduledGame(
        game_id=game_id,
        date=date,
        home_team=home,
        away_team=away,
        status="Final",
        double_header="N" if game_number == 1 else "Y",
        game_number=game_number,
    )


def batter_entry(
    player_id: int,
    full_name: str,
    *,
    at_bats: int = 4,
    hits: int = 1,
    home_runs: int = 0,
    walks: int = 0,
    strikeouts: int = 1,
    position: str = "RF",
    batting_order: str | None = "100",
) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "person": {"id": player_id, "fullName": full_name},
        "position": {"abbreviation": position},
        "stats": {
            "batting": {
                "atBats": at_bats,
                "plateAppearances": at_bats + walks,
                "hits": hits,
                "homeRuns": home_runs,
                "baseOnBalls": walks,
                "strikeOuts": strikeouts,
                "runs": home_runs,
                "rbi": home_runs,
            },
            "pitching": {},
            "fielding": {"putOuts": 2, "assists": 0, "errors": 0, "chances": 2},
        },
    }
    if batting_order is not None:
        entry["battingOrder"] = batting_order
    return entry


def pitcher_entry(
    player_id: int,
    full_name: str,
    *,
    innings: str = "6.0",
    earned_runs: int = 2,
    hits: int = 5,
    walks: int = 2,
    strikeouts: int = 7,
    batters_faced: int = 25,
) -> dict[str, Any]:
    return {
        "person": {"id": player_id, "fullName": full_name},
        "position": {"abbreviation": "P"},
        "stats": {
            "batting": {},
            "pitching": {
                "inningsPitched": innings,
                "earnedRuns": earned_runs,
                "runs": earned_runs,
                "hits": hits,
                "baseOnBalls": walks,
                "strikeOuts": strikeouts,
                "battersFaced": batters_faced,
                "numberOfPitches": 95,
                "strikes": 60,
            },
            "fielding": {},
        },
    }


def team_side(
    abbreviation: str,
    runs: int,
    players: dict[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "team": {"abbreviation": abbreviation, "name": abbreviation},
        "teamStats": {
            "batting": {"atBats": 34, "plateAppearances": 38, "runs": runs, "hits": 9, "baseOnBalls": 3},
            "pitching": {"inningsPitched": "9.0", "earnedRuns": 3, "hits": 7, "battersFaced": 36},
            "fielding": {"putOuts": 27, "assists": 10, "errors": 1, "chances": 38},
        },
        "players": players or {},
    }


def boxscore(
    home: str = "NYY",
    away: str = "BOS",
    home_runs: int = 5,
    away_runs: int = 3,
    home_players: dict[str, dict[str, Any]] | None = None,
    away_players: dict[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    if home_players is None:
        home_players = {
            "ID1": batter_entry(1, "Aaron Judge", hits=2, home_runs=1),
            "ID2": pitcher_entry(2, "Gerrit Cole"),
        }
    if away_players is None:
        away_players = {"ID3": batter_entry(3, "Rafael Devers")}
    return {
        "teams": {
            "home": team_side(home, home_runs, home_players),
            "away": team_side(away, away_runs, away_players),
        }
    }


def game_context(
    game_id: int = 745001,
    date: str = "2024-05-01",
    *,
    opponent: str = "BOS",
    home_away: str = "home",
    result: str = "W",
    runs_scored: int = 5,
    runs_allowed: int = 3,
) -> GameContext:
    return GameContext(
        game_id=game_id,
        date=date,
        opponent=opponent,
        home_away=home_away,
        result=result,
        runs_scored=runs_scored,
        runs_allowed=runs_allowed,
    )


def player_record(
    name: str = "Aaron_Judge",
    team: str = "NYY",
    season: int = 2024,
    *,
    game_id: int = 745001,
    date: str = "2024-05-01",
    batting: BattingCounts | None = None,
    pitching: PitchingCounts | None = None,
) -> GameStatRecord:
    if batting is None and pitching is None:
        batting = BattingCounts(games_played=1, at_bats=4, plate_appearances=4, hits=2, home_runs=1)
    return GameStatRecord(
        kind=EntityKind.PLAYER,
        team=team,
        season=season,
        context=game_context(game_id, date),
        name=name,
        player_id=592450,
        batting=batting,
        pitching=pitching,
        batting_rates=batting_rates(batting) if batting else None,
        pitching_rates=pitching_rates(pitching) if pitching else None,
    )


def team_record(
    team: str = "NYY",
    season: int = 2024,
    *,
    game_id: int = 745001,
    date: str = "2024-05-01",
    home_away: str = "home",
    result: str = "W",
    runs_scored: int = 5,
    runs_allowed: int = 3,
) -> GameStatRecord:
    batting = BattingCounts(games_played=1, at_bats=34, plate_appearances=38, hits=9, runs=runs_scored)
    return GameStatRecord(
        kind=EntityKind.TEAM,
        team=team,
        season=season,
        context=game_context(
            game_id,
            date,
            home_away=home_away,
            result=result,
            runs_scored=runs_scored,
            runs_allowed=runs_allowed,
        ),
        batting=batting,
        batting_rates=batting_rates(batting),
    )
