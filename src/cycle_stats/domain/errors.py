from dataclasses import dataclass


@dataclass(frozen=True)
class CycleError:
    message: str


@dataclass(frozen=True)
class SourceError(CycleError):
    url: str


@dataclass(frozen=True)
class ExtractionError(CycleError):
    game_id: int


@dataclass(frozen=True)
class StorageError(CycleError):
    key: str


@dataclass(frozen=True)
class CollisionError(StorageError):
    existing_game_id: int | None
    incoming_game_id: int


@dataclass(frozen=True)
class BaselineError(CycleError):
    season: int


@dataclass(frozen=True)
class ConfigError(CycleError):
    key: str = ""
