import logging
import sys
from pathlib import Path

_THIRD_PARTY_LOGGERS = ("httpx", "httpcore")
_FORMAT = "%(asctime)s %(levelname)-8s %(threadName)s %(name)s: %(message)s"


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Route log records to stderr, and to *log_file* when given.

    DEBUG with *verbose*, INFO otherwise. Worker thread names are included
    because games in a batch are processed concurrently.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.WARNING)
