from dataclasses import dataclass


@dataclass(frozen=True)
class BattingRates:
    plate_appearances: int = 0
    avg: float = 0.0
    obp: float = 0.0
    slg: float = 0.0
    ops: float = 0.0
    iso: float = 0.0
    babip: float = 0.0
    woba: float = 0.0
    strikeout_rate: float = 0.0
    walk_rate: float = 0.0
    contact_rate: float = 0.0
    walk_to_strikeout: float = 0.0
    stolen_base_pct: float = 0.0
    at_bats_per_home_run: float | None = None
    ground_to_air: float = 0.0
    power_speed: float = 0.0
    extra_base_hits: int = 0
    extra_base_hit_rate: float = 0.0
    total_bases: int = 0


@dataclass(frozen=True)
class PitchingRates:
    innings_pitched: str = "0.0"
    era: float = 0.0
    whip: float = 0.0
    fip: float = 0.0
    strikeouts_per_9: float = 0.0
    walks_per_9: float = 0.0
    hits_per_9: float = 0.0
    home_runs_per_9: float = 0.0
    runs_per_9: float = 0.0
    strikeout_to_walk: float = 0.0
    babip: float = 0.0
    strike_pct: float = 0.0
    pitches_per_inning: float = 0.0
    pitches_per_batter: float = 0.0
    left_on_base_pct: float = 0.0
    win_pct: float = 0.0
    save_pct: float = 0.0
    ground_to_air: float = 0.0
    xfip: float = 0.0
    game_score: int = 0
    quality_start: bool = False


@dataclass(frozen=True)
class FieldingRates:
    fielding_pct: float = 0.0
    caught_stealing_pct: float = 0.0
