import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from cycle_stats.cli._logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_levels(self) -> None:
        configure_logging(verbose=False)
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.NOTSET

    def test_log_file_receives_records(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "run.log"

        configure_logging(log_file=log_file)
        logging.getLogger("cycle_stats.pipeline.runner").info("Batch %d/%d done", 1, 3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "INFO" in text
        assert "cycle_stats.pipeline.runner: Batch 1/3 done" in text
