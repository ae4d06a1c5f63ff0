"""Collision-checked, retried writes of per-game and season records.

Each batch moves through ``WriteState``: ATTEMPTED, then SUCCEEDED, or
RETRY_EXHAUSTED followed by FALLBACK_ATTEMPTED (one write per record) ending
in SUCCEEDED or PERMANENTLY_FAILED.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from cycle_stats.domain.errors import CollisionError
from cycle_stats.domain.game_record import EntityKind
from cycle_stats.domain.run_report import FailedRecord, WriteOutcome, WriteState
from cycle_stats.storage import keys
from cycle_stats.storage._retry import storage_retry
from cycle_stats.storage.protocol import StoreUnavailableError
from cycle_stats.storage.serialization import stored_game_id, to_json

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from cycle_stats.domain.game_record import GameStatRecord
    from cycle_stats.storage.protocol import KeyValueStore

logger = logging.getLogger(__name__)


class KeyAction(StrEnum):
    CREATE = "create"
    REFRESH = "refresh"
    COLLISION = "collision"
    REPAIR = "repair"


@dataclass(frozen=True)
class KeyCheck:
    key: str
    action: KeyAction
    existing_game_id: int | None = None
    existing_value: str | None = None


@dataclass(frozen=True)
class PendingWrite:
    key: str
    value: str
    entity: str
    team: str
    player: str | None = None
    discipline: str = "season"


@dataclass(frozen=True)
class GameWriteResult:
    """Outcome of writing one game's per-game records.

    ``to_fold`` holds the records whose key was newly created (or repaired)
    and written. ``refreshed`` holds re-sent records that were rewritten;
    they are folded only when the season totals do not hold their game yet.
    """

    outcome: WriteOutcome
    to_fold: list[GameStatRecord] = field(default_factory=list)
    refreshed: list[GameStatRecord] = field(default_factory=list)
    collisions: list[CollisionError] = field(default_factory=list)
    refreshes: int = 0


def _pending(record: GameStatRecord, key: str) -> PendingWrite:
    return PendingWrite(
        key=key,
        value=to_json(record),
        entity=record.kind.value,
        team=record.team,
        player=record.name if record.kind is EntityKind.PLAYER else None,
        discipline=",".join(record.disciplines()) or "none",
    )


class ReliableGameWriter:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        batch_attempts: int = 3,
        record_attempts: int = 5,
        initial_delay: float = 1.0,
        max_delay: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        retry_args = {"initial_delay": initial_delay, "max_delay": max_delay, "sleep": sleep}
        self._get = storage_retry("store read", attempts=batch_attempts, **retry_args)(store.get)
        self._batch = storage_retry("batch write", attempts=batch_attempts, **retry_args)(store.batch_write)
        self._set = storage_retry("record write", attempts=record_attempts, **retry_args)(store.set)

    def check_key(self, key: str, game_id: int) -> KeyCheck:
        """Decide what writing ``game_id`` to ``key`` would do.

        Raises ``StoreUnavailableError`` if the existing value cannot be read
        after retries.
        """
        existing = self._get(key)
        if existing is None or not existing.strip():
            return KeyCheck(key, KeyAction.CREATE)
        try:
            existing_id = stored_game_id(existing)
        except (ValueError, TypeError):
            logger.warning("Unreadable record at %s, overwriting with game %d", key, game_id)
            return KeyCheck(key, KeyAction.REPAIR, existing_value=existing)
        if existing_id is None:
            logger.warning("Record at %s has no game id, overwriting with game %d", key, game_id)
            return KeyCheck(key, KeyAction.REPAIR, existing_value=existing)
        if existing_id == game_id:
            return KeyCheck(key, KeyAction.REFRESH, existing_game_id=existing_id, existing_value=existing)
        return KeyCheck(key, KeyAction.COLLISION, existing_game_id=existing_id, existing_value=existing)

    def write_game(self, game_id: int, date: str, records: Sequence[GameStatRecord]) -> GameWriteResult:
        writes: list[PendingWrite] = []
        foldable: dict[str, GameStatRecord] = {}
        refreshed: dict[str, GameStatRecord] = {}
        collisions: list[CollisionError] = []
        refreshes = 0

        for record in records:
            key = keys.game_key(record)
            try:
                check = self.check_key(key, game_id)
            except StoreUnavailableError as e:
                logger.error("Collision check failed for %s in game %d: %s", key, game_id, e)
                return GameWriteResult(
                    outcome=WriteOutcome(
                        game_id=game_id,
                        state=WriteState.PERMANENTLY_FAILED,
                        error=f"collision check failed for {key}: {e}",
                    )
                )

            if check.action is KeyAction.COLLISION:
                logger.warning(
                    "Key collision at %s: holds game %s, refusing to overwrite with game %d (%s)",
                    key,
                    check.existing_game_id,
                    game_id,
                    date,
                )
                collisions.append(
                    CollisionError(
                        message=f"{key} already holds game {check.existing_game_id}",
                        key=key,
                        existing_game_id=check.existing_game_id,
                        incoming_game_id=game_id,
                    )
                )
                continue

            pending = _pending(record, key)
            if check.action is KeyAction.REFRESH:
                refreshes += 1
                refreshed[key] = record
                if check.existing_value != pending.value:
                    logger.info("Game %d re-sent with changed content for %s; refreshing record", game_id, key)
                else:
                    logger.debug("Refreshing %s for game %d", key, game_id)
            else:
                foldable[key] = record
            writes.append(pending)

        outcome = self.write_batch(game_id, date, writes)
        written = set(outcome.written_keys)
        return GameWriteResult(
            outcome=outcome,
            to_fold=[record for key, record in foldable.items() if key in written],
            refreshed=[record for key, record in refreshed.items() if key in written],
            collisions=collisions,
            refreshes=refreshes,
        )

    def write_season(self, game_id: int, date: str, writes: Sequence[PendingWrite]) -> WriteOutcome:
        """Write the season documents updated by one game.

        Season keys are overwritten on purpose, so there is no collision check.
        """
        logger.debug("Game %d: writing %d season records", game_id, len(writes))
        return self.write_batch(game_id, date, writes)

    def write_batch(self, game_id: int, date: str, writes: Sequence[PendingWrite]) -> WriteOutcome:
        if not writes:
            return WriteOutcome(game_id=game_id, state=WriteState.SUCCEEDED)

        state = WriteState.ATTEMPTED
        items = [(w.key, w.value) for w in writes]
        batch_error: str | None = None
        try:
            unwritten = set(self._batch(items))
        except StoreUnavailableError as e:
            state = WriteState.RETRY_EXHAUSTED
            batch_error = str(e)
            unwritten = {w.key for w in writes}
            logger.warning("Batch write for game %d failed after retries: %s", game_id, e)

        if not unwritten:
            logger.debug("Game %d: batch of %d records written", game_id, len(writes))
            return WriteOutcome(
                game_id=game_id,
                state=WriteState.SUCCEEDED,
                records_written=len(writes),
                written_keys=tuple(w.key for w in writes),
            )

        if state is WriteState.ATTEMPTED:
            logger.warning(
                "Batch write for game %d left %d of %d records unwritten", game_id, len(unwritten), len(writes)
            )
        state = WriteState.FALLBACK_ATTEMPTED
        logger.debug("Game %d write state: %s for %d records", game_id, state, len(unwritten))
        failed: list[FailedRecord] = []
        recovered = 0
        for w in writes:
            if w.key not in unwritten:
                continue
            try:
                self._set(w.key, w.value)
            except StoreUnavailableError as e:
                failed.append(
                    FailedRecord(
                        game_id=game_id,
                        date=date,
                        key=w.key,
                        entity=w.entity,
                        team=w.team,
                        player=w.player,
                        discipline=w.discipline,
                        error=str(e),
                    )
                )
                logger.error(
                    "Permanent write failure game=%d date=%s key=%s entity=%s team=%s player=%s discipline=%s: %s",
                    game_id,
                    date,
                    w.key,
                    w.entity,
                    w.team,
                    w.player,
                    w.discipline,
                    e,
                )
            else:
                recovered += 1

        failed_keys = {f.key for f in failed}
        written_keys = tuple(w.key for w in writes if w.key not in failed_keys)
        if failed:
            reason = f"{len(failed)} of {len(writes)} records failed: " + "; ".join(
                f"{f.key} ({f.error})" for f in failed
            )
            return WriteOutcome(
                game_id=game_id,
                state=WriteState.PERMANENTLY_FAILED,
                records_written=len(written_keys),
                written_keys=written_keys,
                failed_records=tuple(failed),
                error=reason if batch_error is None else f"{reason}; batch: {batch_error}",
                used_fallback=True,
            )
        logger.info("Game %d: fallback wrote %d records individually", game_id, recovered)
        return WriteOutcome(
            game_id=game_id,
            state=WriteState.SUCCEEDED,
            records_written=len(written_keys),
            written_keys=written_keys,
            used_fallback=True,
        )

