from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from cycle_stats.domain.errors import ConfigError
from cycle_stats.domain.result import Err, Ok, Result

_DEFAULTS: dict[str, object] = {
    "store": {
        "db_path": "~/.local/share/cycle-stats/stats.db",
        "max_connections": 5,
        "busy_timeout_ms": 5000,
    },
    "source": {
        "base_url": "https://statsapi.mlb.com/api/v1",
        "timeout": 10.0,
        "connect_timeout": 5.0,
        "attempts": 3,
    },
    "runner": {
        "batch_size": 10,
        "batch_pause_seconds": 0.2,
        "max_workers": 0,
    },
    "storage": {
        "batch_attempts": 3,
        "record_attempts": 5,
        "initial_delay": 1.0,
        "max_delay": 5.0,
    },
    "baseline": {
        "refresh_every_games": 50,
        "max_age_hours": 24,
    },
    "salary": {
        "csv_path": "",
    },
    "valuation": {
        "default_team_payroll": 150_000_000,
    },
}


def create_config(
    yaml_path: str = "cycle.yaml",
    env_prefix: str = "CYCLE",
    defaults: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file.
        env_prefix: Prefix for environment variables, e.g. ``CYCLE__RUNNER__BATCH_SIZE``.
        defaults: Default configuration values.
    """
    if defaults is None:
        defaults = _DEFAULTS

    return ConfigurationSet(
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    )


@dataclass(frozen=True)
class PipelineSettings:
    db_path: Path
    max_connections: int
    busy_timeout_ms: int
    base_url: str
    timeout: float
    connect_timeout: float
    http_attempts: int
    batch_size: int
    batch_pause_seconds: float
    max_workers: int | None
    batch_attempts: int
    record_attempts: int
    initial_delay: float
    max_delay: float
    refresh_every_games: int
    max_age_seconds: float
    salary_csv: Path | None
    default_team_payroll: int


def _int(cfg: ConfigurationSet, key: str) -> int:
    # Env vars arrive as strings
    return int(float(str(cfg[key])))


def _float(cfg: ConfigurationSet, key: str) -> float:
    return float(str(cfg[key]))


def load_settings(cfg: ConfigurationSet | None = None) -> Result[PipelineSettings, ConfigError]:
    if cfg is None:
        cfg = create_config()
    try:
        max_workers = _int(cfg, "runner.max_workers")
        salary_csv = str(cfg["salary.csv_path"] or "")
        settings = PipelineSettings(
            db_path=Path(str(cfg["store.db_path"])).expanduser(),
            max_connections=_int(cfg, "store.max_connections"),
            busy_timeout_ms=_int(cfg, "store.busy_timeout_ms"),
            base_url=str(cfg["source.base_url"]),
            timeout=_float(cfg, "source.timeout"),
            connect_timeout=_float(cfg, "source.connect_timeout"),
            http_attempts=_int(cfg, "source.attempts"),
            batch_size=_int(cfg, "runner.batch_size"),
            batch_pause_seconds=_float(cfg, "runner.batch_pause_seconds"),
            max_workers=max_workers if max_workers > 0 else None,
            batch_attempts=_int(cfg, "storage.batch_attempts"),
            record_attempts=_int(cfg, "storage.record_attempts"),
            initial_delay=_float(cfg, "storage.initial_delay"),
            max_delay=_float(cfg, "storage.max_delay"),
            refresh_every_games=_int(cfg, "baseline.refresh_every_games"),
            max_age_seconds=_float(cfg, "baseline.max_age_hours") * 3600,
            salary_csv=Path(salary_csv).expanduser() if salary_csv else None,
            default_team_payroll=_int(cfg, "valuation.default_team_payroll"),
        )
    except KeyError as e:
        key = str(e.args[0]) if e.args else ""
        return Err(ConfigError(message=f"missing configuration key {key}", key=key))
    except (ValueError, TypeError) as e:
        return Err(ConfigError(message=f"invalid configuration value: {e}"))
    if settings.batch_size < 1:
        message = f"runner.batch_size must be at least 1, got {settings.batch_size}"
        return Err(ConfigError(message=message, key="runner.batch_size"))
    return Ok(settings)
