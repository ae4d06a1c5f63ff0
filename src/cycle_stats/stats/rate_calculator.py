"""Derived rate stats computed from counting-stat sums.

Every function here is pure: the same counts always produce the same rates.
Rates are recomputed from the summed counts after each merge and never summed
themselves. Division by zero yields 0, except the ratio stats that report
``RATIO_SENTINEL`` when the numerator is positive and the denominator is 0.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cycle_stats.domain.rates import BattingRates, FieldingRates, PitchingRates

if TYPE_CHECKING:
    from cycle_stats.domain.counts import BattingCounts, FieldingCounts, PitchingCounts

RATIO_SENTINEL = 999.0
FIP_CONSTANT = 3.20
# League-average home runs per fly ball used by xFIP
LEAGUE_HR_PER_FLY_BALL = 0.11
QUALITY_START_OUTS = 18
QUALITY_START_MAX_EARNED_RUNS = 3
GAME_SCORE_MIN_OUTS = 12

# Linear weights for wOBA
WOBA_WEIGHTS = {
    "walk": 0.69,
    "hit_by_pitch": 0.72,
    "single": 0.89,
    "double": 1.27,
    "triple": 1.62,
    "home_run": 2.10,
}


def _div(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _ratio(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return RATIO_SENTINEL if numerator > 0 else 0.0
    return numerator / denominator


def plate_appearances(counts: BattingCounts) -> int:
    if counts.plate_appearances > 0:
        return counts.plate_appearances
    return counts.at_bats + counts.walks + counts.hit_by_pitch + counts.sac_flies


def total_bases(counts: BattingCounts) -> int:
    if counts.total_bases > 0:
        return counts.total_bases
    return counts.hits + counts.doubles + 2 * counts.triples + 3 * counts.home_runs


def batting_rates(counts: BattingCounts) -> BattingRates:
    pa = plate_appearances(counts)
    tb = total_bases(counts)
    ab = counts.at_bats

    avg = _div(counts.hits, ab)
    obp = _div(
        counts.hits + counts.walks + counts.hit_by_pitch,
        ab + counts.walks + counts.hit_by_pitch + counts.sac_flies,
    )
    slg = _div(tb, ab)
    babip = _div(
        counts.hits - counts.home_runs,
        ab - counts.strikeouts - counts.home_runs + counts.sac_flies,
    )
    woba = _div(
        WOBA_WEIGHTS["walk"] * counts.walks
        + WOBA_WEIGHTS["hit_by_pitch"] * counts.hit_by_pitch
        + WOBA_WEIGHTS["single"] * counts.singles
        + WOBA_WEIGHTS["double"] * counts.doubles
        + WOBA_WEIGHTS["triple"] * counts.triples
        + WOBA_WEIGHTS["home_run"] * counts.home_runs,
        pa,
    )
    extra_base_hits = counts.doubles + counts.triples + counts.home_runs
    hr_plus_sb = counts.home_runs + counts.stolen_bases

    return BattingRates(
        plate_appearances=pa,
        avg=round(avg, 3),
        obp=round(obp, 3),
        slg=round(slg, 3),
        ops=round(obp + slg, 3),
        iso=round(slg - avg, 3),
        babip=round(babip, 3),
        woba=round(woba, 3),
        strikeout_rate=round(_div(counts.strikeouts, pa), 3),
        walk_rate=round(_div(counts.walks, pa), 3),
        contact_rate=round(_div(pa - counts.strikeouts, pa), 3),
        walk_to_strikeout=round(_ratio(counts.walks, counts.strikeouts), 2),
        stolen_base_pct=round(_div(counts.stolen_bases, counts.stolen_bases + counts.caught_stealing), 3),
        at_bats_per_home_run=round(ab / counts.home_runs, 1) if counts.home_runs > 0 else None,
        ground_to_air=round(_div(counts.ground_outs, counts.air_outs), 2),
        power_speed=round(_div(2 * counts.home_runs * counts.stolen_bases, hr_plus_sb), 1),
        extra_base_hits=extra_base_hits,
        extra_base_hit_rate=round(_div(extra_base_hits, counts.hits), 3),
        total_bases=tb,
    )


def _fielding_independent(home_runs: float, counts: PitchingCounts, ip: float) -> float:
    if ip <= 0:
        return 0.0
    return (13 * home_runs + 3 * (counts.walks + counts.hit_by_pitch) - 2 * counts.strikeouts) / ip + FIP_CONSTANT


def is_quality_start(counts: PitchingCounts) -> bool:
    """Six or more innings with at most three earned runs."""
    return counts.outs >= QUALITY_START_OUTS and counts.earned_runs <= QUALITY_START_MAX_EARNED_RUNS


def game_score(counts: PitchingCounts) -> int:
    """Bill James game score for a single pitching line; 0 under four innings."""
    if counts.outs < GAME_SCORE_MIN_OUTS:
        return 0
    return (
        50
        + counts.outs
        + 2 * counts.strikeouts
        - 2 * counts.hits
        - 4 * counts.earned_runs
        - (2 * counts.runs - counts.earned_runs)
        - counts.walks
    )


def pitching_rates(counts: PitchingCounts) -> PitchingRates:
    ip = counts.innings_pitched.as_float()
    baserunners = counts.hits + counts.walks + counts.hit_by_pitch
    balls_in_play = (
        counts.batters_faced - counts.strikeouts - counts.walks - counts.hit_by_pitch - counts.home_runs
    )
    fip = _fielding_independent(counts.home_runs, counts, ip)
    xfip = _fielding_independent(LEAGUE_HR_PER_FLY_BALL * counts.fly_outs, counts, ip)
    # game score and quality start describe one appearance, not a season
    single_game = counts.games_played <= 1
    return PitchingRates(
        innings_pitched=counts.innings_pitched.format(),
        era=round(_div(9 * counts.earned_runs, ip), 2),
        whip=round(_div(counts.walks + counts.hits, ip), 2),
        fip=round(fip, 2),
        strikeouts_per_9=round(_div(9 * counts.strikeouts, ip), 1),
        walks_per_9=round(_div(9 * counts.walks, ip), 1),
        hits_per_9=round(_div(9 * counts.hits, ip), 1),
        home_runs_per_9=round(_div(9 * counts.home_runs, ip), 1),
        runs_per_9=round(_div(9 * counts.runs, ip), 2),
        strikeout_to_walk=round(_ratio(counts.strikeouts, counts.walks), 2),
        babip=round(_div(counts.hits - counts.home_runs, balls_in_play), 3),
        strike_pct=round(_div(counts.strikes, counts.pitches_thrown), 3),
        pitches_per_inning=round(_div(counts.pitches_thrown, ip), 1),
        pitches_per_batter=round(_div(counts.pitches_thrown, counts.batters_faced), 1),
        left_on_base_pct=round(_div(baserunners - counts.runs, baserunners) * 100, 1),
        win_pct=round(_div(counts.wins, counts.wins + counts.losses), 3),
        save_pct=round(_div(counts.saves, counts.saves + counts.blown_saves), 3),
        ground_to_air=round(_div(counts.ground_outs, counts.air_outs), 2),
        xfip=round(xfip, 2),
        game_score=game_score(counts) if single_game else 0,
        quality_start=single_game and is_quality_start(counts),
    )


def fielding_rates(counts: FieldingCounts) -> FieldingRates:
    handled = counts.put_outs + counts.assists
    chances = counts.chances if counts.chances > 0 else handled + counts.errors
    return FieldingRates(
        fielding_pct=round(_div(handled, chances), 3),
        caught_stealing_pct=round(_div(counts.caught_stealing, counts.caught_stealing + counts.stolen_bases), 3),
    )
