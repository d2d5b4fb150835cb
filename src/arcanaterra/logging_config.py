import logging
import os
import sys


def configure_logging(default_level: int = logging.INFO) -> None:
    """Configure the root logger with a sane default format.

    Respects the ARCANA_LOG_LEVEL env var if present. The library itself never
    calls this; it is meant for turn drivers, tools and interactive sessions.
    """
    level_name = os.getenv("ARCANA_LOG_LEVEL")
    level = default_level
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplicates on repeated calls
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
