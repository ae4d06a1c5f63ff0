from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence


class StoreUnavailableError(Exception):
    """Raised by a store when an operation could not be completed."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def batch_write(self, items: Sequence[tuple[str, str]]) -> list[str]:
        """Write all items; return the keys that were not written.

        Raises ``StoreUnavailableError`` when the whole batch failed.
        """
        ...

    def scan(self, pattern: str) -> list[str]:
        """Keys matching a glob-style pattern (``*``, ``?``, ``[...]``)."""
        ...
