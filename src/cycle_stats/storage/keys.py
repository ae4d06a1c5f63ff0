"""Key layout for stored records.

Per-game keys carry the date and the game id so that both games of a
double-header land on distinct keys. Season keys end in ``:season``.
"""

from cycle_stats.domain.game_record import EntityKind, GameStatRecord

SEASON_SUFFIX = "season"

_DATE_GLOB = "[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]"


def player_game_key(team: str, name: str, season: int, date: str, game_id: int) -> str:
    return f"player:{team}-{name}-{season}:{date}-{game_id}"


def player_season_key(team: str, name: str, season: int) -> str:
    return f"player:{team}-{name}-{season}:{SEASON_SUFFIX}"


def team_game_key(team: str, season: int, date: str, game_id: int) -> str:
    return f"team:{team}:{season}:{date}-{game_id}"


def team_season_key(team: str, season: int) -> str:
    return f"team:{team}:{season}:{SEASON_SUFFIX}"


def game_key(record: GameStatRecord) -> str:
    if record.kind is EntityKind.TEAM:
        return team_game_key(record.team, record.season, record.date, record.game_id)
    if record.name is None:
        raise ValueError(f"player record for game {record.game_id} has no name")
    return player_game_key(record.team, record.name, record.season, record.date, record.game_id)


def season_key(record: GameStatRecord) -> str:
    if record.kind is EntityKind.TEAM:
        return team_season_key(record.team, record.season)
    if record.name is None:
        raise ValueError(f"player record for game {record.game_id} has no name")
    return player_season_key(record.team, record.name, record.season)


def player_season_pattern(season: int, team: str | None = None) -> str:
    if team is None:
        return f"player:*-{season}:{SEASON_SUFFIX}"
    return f"player:{team}-*-{season}:{SEASON_SUFFIX}"


def team_season_pattern(season: int) -> str:
    return f"team:*:{season}:{SEASON_SUFFIX}"


def player_game_pattern(season: int) -> str:
    return f"player:*-{season}:{_DATE_GLOB}-*"


def team_game_pattern(season: int) -> str:
    return f"team:*:{season}:{_DATE_GLOB}-*"


def _glob_literal(text: str) -> str:
    return "".join(f"[{c}]" if c in "*?[" else c for c in text)


def player_games_pattern(team: str, name: str, season: int) -> str:
    """Every per-game key for one player in one season."""
    return f"player:{_glob_literal(team)}-{_glob_literal(name)}-{season}:{_DATE_GLOB}-*"


def team_games_pattern(team: str, season: int) -> str:
    return f"team:{_glob_literal(team)}:{season}:{_DATE_GLOB}-*"
