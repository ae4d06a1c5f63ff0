import pytest

from cycle_stats.storage._retry import storage_retry
from cycle_stats.storage.protocol import StoreUnavailableError


class TestStorageRetry:
    def test_backoff_doubles_up_to_cap(self, caplog: pytest.LogCaptureFixture) -> None:
        delays: list[float] = []

        @storage_retry("batch write", attempts=5, initial_delay=1.0, max_delay=3.0, sleep=delays.append)
        def always_down() -> None:
            raise StoreUnavailableError("down")

        with pytest.raises(StoreUnavailableError):
            always_down()

        assert delays == [1.0, 2.0, 3.0, 3.0]
        assert "Retrying batch write (attempt 1): down" in caplog.text

    def test_succeeds_after_transient_failure(self) -> None:
        calls = 0

        @storage_retry("record write", attempts=3, initial_delay=0.0, max_delay=0.0, sleep=lambda s: None)
        def flaky() -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise StoreUnavailableError("busy")
            return "ok"

        assert flaky() == "ok"
        assert calls == 2

    def test_other_errors_propagate_immediately(self) -> None:
        calls = 0

        @storage_retry("store read", attempts=3, initial_delay=0.0, max_delay=0.0, sleep=lambda s: None)
        def broken() -> None:
            nonlocal calls
            calls += 1
            raise KeyError("k")

        with pytest.raises(KeyError):
            broken()
        assert calls == 1
