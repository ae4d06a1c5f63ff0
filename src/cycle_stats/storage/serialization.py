"""JSON encoding for the frozen dataclasses kept in the key-value store.

Nested dataclasses, enums, optional fields and tuple fields round-trip.
Unknown keys in stored documents are ignored so older records still load.
"""

from __future__ import annotations

import functools
import json
import types
from dataclasses import asdict, fields, is_dataclass
from enum import Enum
from typing import Any, Union, get_args, get_origin, get_type_hints

from cycle_stats.domain.game_record import GameStatRecord
from cycle_stats.domain.season_totals import PlayerSeasonTotals, TeamSeasonTotals


@functools.cache
def _hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls)


def _decode(tp: Any, value: Any) -> Any:
    if value is None:
        return None
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(tp) if a is not type(None)]
        if len(members) == 1:
            return _decode(members[0], value)
        return value
    if origin is tuple:
        args = get_args(tp)
        inner = args[0] if args else Any
        return tuple(_decode(inner, v) for v in value)
    if origin is list:
        args = get_args(tp)
        inner = args[0] if args else Any
        return [_decode(inner, v) for v in value]
    if origin is dict:
        _, value_type = get_args(tp) or (Any, Any)
        return {k: _decode(value_type, v) for k, v in value.items()}
    if isinstance(tp, type) and is_dataclass(tp):
        return from_dict(tp, value)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)
    if tp is float and isinstance(value, int):
        return float(value)
    return value


def from_dict[T](cls: type[T], data: dict[str, Any]) -> T:
    hints = _hints(cls)
    names = [f.name for f in fields(cls) if f.name in data]  # type: ignore[arg-type]
    kwargs = {name: _decode(hints[name], data[name]) for name in names}
    return cls(**kwargs)


def to_json(value: Any) -> str:
    if not is_dataclass(value) or isinstance(value, type):
        raise TypeError(f"{value!r} is not a dataclass instance")
    return json.dumps(asdict(value))


def from_json[T](cls: type[T], data: str) -> T:
    return from_dict(cls, json.loads(data))


def decode_game_record(data: str) -> GameStatRecord:
    return from_json(GameStatRecord, data)


def decode_player_totals(data: str) -> PlayerSeasonTotals:
    return from_json(PlayerSeasonTotals, data)


def decode_team_totals(data: str) -> TeamSeasonTotals:
    return from_json(TeamSeasonTotals, data)


def stored_game_id(data: str) -> int | None:
    """Game id held by a stored per-game document.

    Raises ``ValueError`` when the document is not readable JSON or has an
    unusable game id.
    """
    raw = json.loads(data)
    if not isinstance(raw, dict):
        raise ValueError("stored record is not an object")
    context = raw.get("context")
    if not isinstance(context, dict):
        return None
    game_id = context.get("game_id")
    return None if game_id is None else int(game_id)
