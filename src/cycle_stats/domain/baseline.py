from dataclasses import dataclass, field

BATTING_METRICS = ("ops", "obp", "slg", "avg", "home_run_rate", "stolen_base_rate")
PITCHING_METRICS = ("era", "fip", "whip", "strikeouts_per_9", "walks_per_9")


@dataclass(frozen=True)
class MetricDistribution:
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    mean: float

    def is_monotonic(self) -> bool:
        return self.p10 <= self.p25 <= self.p50 <= self.p75 <= self.p90


DEFAULT_BATTING: dict[str, MetricDistribution] = {
    "ops": MetricDistribution(0.580, 0.650, 0.720, 0.800, 0.900, 0.720),
    "obp": MetricDistribution(0.280, 0.310, 0.340, 0.370, 0.420, 0.340),
    "slg": MetricDistribution(0.300, 0.360, 0.420, 0.480, 0.550, 0.420),
    "avg": MetricDistribution(0.200, 0.240, 0.270, 0.300, 0.330, 0.270),
    "home_run_rate": MetricDistribution(0.02, 0.06, 0.12, 0.20, 0.30, 0.14),
    "stolen_base_rate": MetricDistribution(0.0, 0.02, 0.08, 0.15, 0.25, 0.10),
}

DEFAULT_PITCHING: dict[str, MetricDistribution] = {
    "era": MetricDistribution(2.50, 3.20, 4.00, 4.80, 5.80, 4.00),
    "fip": MetricDistribution(2.80, 3.40, 4.10, 4.70, 5.50, 4.10),
    "whip": MetricDistribution(1.00, 1.15, 1.30, 1.45, 1.65, 1.30),
    "strikeouts_per_9": MetricDistribution(5.0, 7.0, 8.5, 10.0, 12.0, 8.5),
    "walks_per_9": MetricDistribution(1.5, 2.2, 3.0, 3.8, 5.0, 3.0),
}


@dataclass(frozen=True)
class Baseline:
    """League percentile cut-points for one season."""

    season: int
    batting: dict[str, MetricDistribution] = field(default_factory=lambda: dict(DEFAULT_BATTING))
    pitching: dict[str, MetricDistribution] = field(default_factory=lambda: dict(DEFAULT_PITCHING))
    computed_at: float = 0.0
    games_processed: int = 0
    qualified_batters: int = 0
    qualified_pitchers: int = 0
    is_default: bool = True


def default_baseline(season: int, computed_at: float = 0.0, games_processed: int = 0) -> Baseline:
    return Baseline(season=season, computed_at=computed_at, games_processed=games_processed)
