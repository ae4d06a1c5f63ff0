from cycle_stats.storage.protocol import KeyValueStore, StoreUnavailableError
from cycle_stats.storage.sqlite_store import SqliteKeyValueStore

__all__ = ["KeyValueStore", "SqliteKeyValueStore", "StoreUnavailableError"]
