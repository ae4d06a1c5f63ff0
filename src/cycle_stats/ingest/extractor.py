"""Box-score payload → typed per-game stat records."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from cycle_stats.domain.counts import BattingCounts, FieldingCounts, PitchingCounts
from cycle_stats.domain.game_record import EntityKind, GameContext, GameStatRecord
from cycle_stats.domain.innings import InningsPitched
from cycle_stats.stats.rate_calculator import batting_rates, fielding_rates, is_quality_start, pitching_rates

if TYPE_CHECKING:
    from cycle_stats.ingest.protocols import ScheduledGame

logger = logging.getLogger(__name__)

_SIDES = ("home", "away")

_BATTING_FIELDS: dict[str, str] = {
    "at_bats": "atBats",
    "plate_appearances": "plateAppearances",
    "runs": "runs",
    "hits": "hits",
    "doubles": "doubles",
    "triples": "triples",
    "home_runs": "homeRuns",
    "rbi": "rbi",
    "walks": "baseOnBalls",
    "intentional_walks": "intentionalWalks",
    "strikeouts": "strikeOuts",
    "hit_by_pitch": "hitByPitch",
    "sac_flies": "sacFlies",
    "sac_bunts": "sacBunts",
    "stolen_bases": "stolenBases",
    "caught_stealing": "caughtStealing",
    "ground_outs": "groundOuts",
    "air_outs": "airOuts",
    "fly_outs": "flyOuts",
    "ground_into_double_play": "groundIntoDoublePlay",
    "left_on_base": "leftOnBase",
    "total_bases": "totalBases",
}

_PITCHING_FIELDS: dict[str, str] = {
    "games_started": "gamesStarted",
    "hits": "hits",
    "runs": "runs",
    "earned_runs": "earnedRuns",
    "walks": "baseOnBalls",
    "intentional_walks": "intentionalWalks",
    "strikeouts": "strikeOuts",
    "home_runs": "homeRuns",
    "hit_by_pitch": "hitByPitch",
    "batters_faced": "battersFaced",
    "pitches_thrown": "numberOfPitches",
    "strikes": "strikes",
    "balls": "balls",
    "wins": "wins",
    "losses": "losses",
    "saves": "saves",
    "save_opportunities": "saveOpportunities",
    "holds": "holds",
    "blown_saves": "blownSaves",
    "complete_games": "completeGames",
    "shutouts": "shutouts",
    "wild_pitches": "wildPitches",
    "balks": "balks",
    "ground_outs": "groundOuts",
    "air_outs": "airOuts",
    "fly_outs": "flyOuts",
    "inherited_runners": "inheritedRunners",
    "inherited_runners_scored": "inheritedRunnersScored",
}

_FIELDING_FIELDS: dict[str, str] = {
    "put_outs": "putOuts",
    "assists": "assists",
    "errors": "errors",
    "chances": "chances",
    "double_plays": "doublePlays",
    "triple_plays": "triplePlays",
    "passed_balls": "passedBall",
    "caught_stealing": "caughtStealing",
    "stolen_bases": "stolenBases",
}


def safe_number(value: Any) -> int:
    """Coerce a box-score field to an int; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return 0 if math.isnan(value) or math.isinf(value) else int(value)
    text = str(value).strip()
    if not text or ".---" in text:
        return 0
    try:
        number = float(text)
    except ValueError:
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def _fields(raw: dict[str, Any], mapping: dict[str, str]) -> dict[str, int]:
    return {name: safe_number(raw.get(key)) for name, key in mapping.items()}


def parse_batting(raw: dict[str, Any] | None) -> BattingCounts | None:
    if not raw:
        return None
    counts = BattingCounts(games_played=1, **_fields(raw, _BATTING_FIELDS))
    return counts if counts.qualifies() else None


def parse_pitching(raw: dict[str, Any] | None) -> PitchingCounts | None:
    if not raw:
        return None
    outs = safe_number(raw.get("outs"))
    if outs <= 0:
        outs = InningsPitched.parse(raw.get("inningsPitched")).outs
    values = _fields(raw, _PITCHING_FIELDS)
    if values["pitches_thrown"] == 0:
        values["pitches_thrown"] = safe_number(raw.get("pitchesThrown"))
    counts = PitchingCounts(games_played=1, outs=outs, **values)
    if is_quality_start(counts):
        counts = replace(counts, quality_starts=1)
    return counts if counts.qualifies() else None


def parse_fielding(raw: dict[str, Any] | None) -> FieldingCounts | None:
    if not raw:
        return None
    counts = FieldingCounts(games_played=1, **_fields(raw, _FIELDING_FIELDS))
    return counts if counts.qualifies() else None


def player_key_name(full_name: str) -> str:
    return "_".join(full_name.split())


@dataclass(frozen=True)
class ExtractedGame:
    game_id: int
    date: str
    season: int
    players: list[GameStatRecord] = field(default_factory=list)
    teams: list[GameStatRecord] = field(default_factory=list)
    skipped_players: int = 0

    @property
    def records(self) -> list[GameStatRecord]:
        return [*self.teams, *self.players]


def _team_abbreviation(side: dict[str, Any]) -> str:
    team = side.get("team", {})
    abbreviation = team.get("abbreviation") or team.get("teamCode") or team.get("name", "")
    return str(abbreviation).upper()


def _team_runs(side: dict[str, Any]) -> int:
    return safe_number(side.get("teamStats", {}).get("batting", {}).get("runs"))


def _result(scored: int, allowed: int) -> str:
    if scored > allowed:
        return "W"
    if scored < allowed:
        return "L"
    return "T"


def _with_rates(record: GameStatRecord) -> GameStatRecord:
    return replace(
        record,
        batting_rates=batting_rates(record.batting) if record.batting else None,
        pitching_rates=pitching_rates(record.pitching) if record.pitching else None,
        fielding_rates=fielding_rates(record.fielding) if record.fielding else None,
    )


def _extract_player(
    entry: dict[str, Any], team: str, season: int, base: GameContext
) -> GameStatRecord | None:
    person = entry["person"]
    stats = entry.get("stats") or {}
    batting = parse_batting(stats.get("batting"))
    pitching = parse_pitching(stats.get("pitching"))
    fielding = parse_fielding(stats.get("fielding"))
    if batting is None and pitching is None and fielding is None:
        return None

    batting_order = entry.get("battingOrder")
    position = (entry.get("position") or {}).get("abbreviation")
    context = replace(
        base,
        batting_order=str(batting_order) if batting_order is not None else None,
        position=position,
    )
    return _with_rates(
        GameStatRecord(
            kind=EntityKind.PLAYER,
            team=team,
            season=season,
            context=context,
            name=player_key_name(person["fullName"]),
            player_id=int(person["id"]) if person.get("id") is not None else None,
            batting=batting,
            pitching=pitching,
            fielding=fielding,
        )
    )


def extract_game(payload: dict[str, Any], game: ScheduledGame, season: int) -> ExtractedGame:
    """Turn one box-score document into per-player and per-team records.

    Discipline blocks that did not qualify for this game are left as ``None``.
    A player whose block cannot be read is skipped and logged; the rest of the
    game is still extracted. Raises ``KeyError`` only when the payload has no
    ``teams`` section at all.
    """
    teams = payload["teams"]
    abbreviations = {side: _team_abbreviation(teams[side]) for side in _SIDES}
    runs = {side: _team_runs(teams[side]) for side in _SIDES}

    player_records: list[GameStatRecord] = []
    team_records: list[GameStatRecord] = []
    skipped = 0

    for side in _SIDES:
        other = "away" if side == "home" else "home"
        team = abbreviations[side]
        base = GameContext(
            game_id=game.game_id,
            date=game.date,
            opponent=abbreviations[other],
            home_away=side,
            result=_result(runs[side], runs[other]),
            runs_scored=runs[side],
            runs_allowed=runs[other],
        )

        team_stats = teams[side].get("teamStats", {})
        team_records.append(
            _with_rates(
                GameStatRecord(
                    kind=EntityKind.TEAM,
                    team=team,
                    season=season,
                    context=base,
                    batting=parse_batting(team_stats.get("batting")),
                    pitching=parse_pitching(team_stats.get("pitching")),
                    fielding=parse_fielding(team_stats.get("fielding")),
                )
            )
        )

        for player_key, entry in (teams[side].get("players") or {}).items():
            try:
                record = _extract_player(entry, team, season, base)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                skipped += 1
                logger.warning("Skipping malformed player block %s in game %d: %s", player_key, game.game_id, e)
                continue
            if record is not None:
                player_records.append(record)

    logger.debug(
        "Extracted game %d: %d players, %d teams, %d skipped",
        game.game_id,
        len(player_records),
        len(team_records),
        skipped,
    )
    return ExtractedGame(
        game_id=game.game_id,
        date=game.date,
        season=season,
        players=player_records,
        teams=team_records,
        skipped_players=skipped,
    )
